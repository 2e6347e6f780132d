# schemas/conta_schema.py
"""
Schemas de contas a pagar e contas a receber.

A validação de negócio (valor, vencimento, descrição) é feita no service
com tools.validacoes, que devolve todas as mensagens de uma vez.
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Dict
from datetime import datetime, date
from decimal import Decimal

StatusContaPagar = Literal["pendente", "pago", "vencido", "cancelado"]
StatusContaReceber = Literal["pendente", "recebido", "vencido", "cancelado"]


# ============================================================
# CONTAS A PAGAR
# ============================================================

class ContaPagarCreate(BaseModel):
    descricao: str
    valor_original: Decimal
    data_vencimento: date
    data_emissao: Optional[date] = None
    desconto: Decimal = Decimal("0")
    acrescimo: Decimal = Decimal("0")
    fornecedor_id: Optional[int] = None
    plano_conta_id: Optional[int] = None
    banco_id: Optional[int] = None
    documento_referencia: Optional[str] = None
    forma_pagamento: Optional[str] = None
    observacoes: Optional[str] = None


class ContaPagarUpdate(BaseModel):
    descricao: Optional[str] = None
    valor_original: Optional[Decimal] = None
    data_vencimento: Optional[date] = None
    data_emissao: Optional[date] = None
    desconto: Optional[Decimal] = None
    acrescimo: Optional[Decimal] = None
    fornecedor_id: Optional[int] = None
    plano_conta_id: Optional[int] = None
    banco_id: Optional[int] = None
    documento_referencia: Optional[str] = None
    forma_pagamento: Optional[str] = None
    observacoes: Optional[str] = None


class ContaPagarResponse(BaseModel):
    id: int
    descricao: str
    documento_referencia: Optional[str] = None
    fornecedor_id: Optional[int] = None
    plano_conta_id: Optional[int] = None
    banco_id: Optional[int] = None
    data_emissao: Optional[date] = None
    data_vencimento: date
    data_pagamento: Optional[date] = None
    valor_original: float
    desconto: float
    acrescimo: float
    valor_final: float
    valor_pago: Optional[float] = None
    status: str
    forma_pagamento: Optional[str] = None
    parcela_atual: int
    total_parcelas: int
    lote_id: Optional[str] = None
    observacoes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BaixaContaPagar(BaseModel):
    data_pagamento: Optional[date] = None
    valor_pago: Optional[Decimal] = Field(None, gt=0)
    banco_id: Optional[int] = None
    observacoes: Optional[str] = None


# ============================================================
# CONTAS A RECEBER
# ============================================================

class ContaReceberCreate(BaseModel):
    descricao: str
    valor_original: Decimal
    data_vencimento: date
    data_emissao: Optional[date] = None
    desconto: Decimal = Decimal("0")
    acrescimo: Decimal = Decimal("0")
    cliente_id: Optional[int] = None
    pagador_id: Optional[int] = None
    plano_conta_id: Optional[int] = None
    banco_id: Optional[int] = None
    documento_referencia: Optional[str] = None
    forma_recebimento: Optional[str] = None
    observacoes: Optional[str] = None


class ContaReceberUpdate(BaseModel):
    descricao: Optional[str] = None
    valor_original: Optional[Decimal] = None
    data_vencimento: Optional[date] = None
    data_emissao: Optional[date] = None
    desconto: Optional[Decimal] = None
    acrescimo: Optional[Decimal] = None
    cliente_id: Optional[int] = None
    pagador_id: Optional[int] = None
    plano_conta_id: Optional[int] = None
    banco_id: Optional[int] = None
    documento_referencia: Optional[str] = None
    forma_recebimento: Optional[str] = None
    observacoes: Optional[str] = None


class ContaReceberResponse(BaseModel):
    id: int
    descricao: str
    documento_referencia: Optional[str] = None
    cliente_id: Optional[int] = None
    pagador_id: Optional[int] = None
    plano_conta_id: Optional[int] = None
    banco_id: Optional[int] = None
    data_emissao: Optional[date] = None
    data_vencimento: date
    data_recebimento: Optional[date] = None
    valor_original: float
    desconto: float
    acrescimo: float
    valor_final: float
    valor_recebido: Optional[float] = None
    status: str
    forma_recebimento: Optional[str] = None
    parcela_atual: int
    total_parcelas: int
    lote_id: Optional[str] = None
    observacoes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BaixaContaReceber(BaseModel):
    data_recebimento: Optional[date] = None
    valor_recebido: Optional[Decimal] = Field(None, gt=0)
    banco_id: Optional[int] = None
    observacoes: Optional[str] = None


# ============================================================
# COMUNS
# ============================================================

class CancelamentoConta(BaseModel):
    motivo: Optional[str] = None


class ResumoContas(BaseModel):
    total_pendente: float
    total_vencido: float
    total_quitado: float
    total_cancelado: float
    quantidade_por_status: Dict[str, int]
    a_vencer_7_dias: float


class MarcarVencidasResponse(BaseModel):
    atualizadas: int
