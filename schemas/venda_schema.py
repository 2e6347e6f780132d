# schemas/venda_schema.py
from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime, date, time
from decimal import Decimal


class VendaCreate(BaseModel):
    data_venda: date
    hora_venda: Optional[time] = None
    valor_total: Decimal = Field(..., gt=0)
    desconto: Decimal = Field(Decimal("0"), ge=0)
    forma_pagamento: str = "dinheiro"
    parcelas: int = Field(1, ge=1, le=48)
    cliente_id: Optional[int] = None
    plano_conta_id: Optional[int] = None
    banco_id: Optional[int] = None
    tipo_venda: Optional[str] = None
    vendedor: Optional[str] = None
    comissao_percentual: Optional[Decimal] = Field(None, ge=0, le=100)
    observacoes: Optional[str] = None


class VendaUpdate(BaseModel):
    data_venda: Optional[date] = None
    hora_venda: Optional[time] = None
    valor_total: Optional[Decimal] = Field(None, gt=0)
    desconto: Optional[Decimal] = Field(None, ge=0)
    forma_pagamento: Optional[str] = None
    parcelas: Optional[int] = Field(None, ge=1, le=48)
    cliente_id: Optional[int] = None
    plano_conta_id: Optional[int] = None
    banco_id: Optional[int] = None
    tipo_venda: Optional[str] = None
    vendedor: Optional[str] = None
    comissao_percentual: Optional[Decimal] = Field(None, ge=0, le=100)
    observacoes: Optional[str] = None


class VendaResponse(BaseModel):
    id: int
    data_venda: date
    hora_venda: Optional[time] = None
    valor_total: float
    desconto: float
    valor_final: float
    forma_pagamento: str
    parcelas: int
    cliente_id: Optional[int] = None
    plano_conta_id: Optional[int] = None
    banco_id: Optional[int] = None
    tipo_venda: Optional[str] = None
    vendedor: Optional[str] = None
    comissao_percentual: Optional[float] = None
    comissao_valor: Optional[float] = None
    status: str
    observacoes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ResumoVendas(BaseModel):
    quantidade: int
    total_vendido: float
    ticket_medio: float
    total_comissoes: float
    por_forma_pagamento: Dict[str, float]
