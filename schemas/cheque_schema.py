# schemas/cheque_schema.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal, Dict, Any
from datetime import datetime, date
from decimal import Decimal

from schemas.validators import normalizar_documento

StatusCheque = Literal["pendente", "compensado", "cancelado", "devolvido"]


class ChequeCreate(BaseModel):
    banco_id: int
    numero_cheque: str = Field(..., min_length=1, max_length=10)
    valor: Decimal = Field(..., gt=0)
    data_emissao: date
    data_vencimento: Optional[date] = None
    beneficiario_nome: Optional[str] = Field(None, max_length=255)
    beneficiario_documento: Optional[str] = None
    tipo_beneficiario: Optional[str] = None
    fornecedor_id: Optional[int] = None
    conta_pagar_id: Optional[int] = None
    finalidade: Optional[str] = None
    status: Optional[str] = None  # aceita "emitido" (mapeado para pendente)
    observacoes: Optional[str] = None

    @field_validator("beneficiario_documento")
    @classmethod
    def validar_documento(cls, v):
        return normalizar_documento(v)


class ChequeUpdate(BaseModel):
    valor: Optional[Decimal] = Field(None, gt=0)
    data_emissao: Optional[date] = None
    data_vencimento: Optional[date] = None
    beneficiario_nome: Optional[str] = None
    beneficiario_documento: Optional[str] = None
    tipo_beneficiario: Optional[str] = None
    fornecedor_id: Optional[int] = None
    conta_pagar_id: Optional[int] = None
    finalidade: Optional[str] = None
    observacoes: Optional[str] = None

    @field_validator("beneficiario_documento")
    @classmethod
    def validar_documento(cls, v):
        return normalizar_documento(v)


class ChequeResponse(BaseModel):
    id: int
    banco_id: int
    numero_cheque: str
    valor: float
    data_emissao: date
    data_vencimento: Optional[date] = None
    data_compensacao: Optional[date] = None
    beneficiario_nome: Optional[str] = None
    beneficiario_documento: Optional[str] = None
    tipo_beneficiario: Optional[str] = None
    fornecedor_id: Optional[int] = None
    conta_pagar_id: Optional[int] = None
    finalidade: Optional[str] = None
    status: str
    motivo_cancelamento: Optional[str] = None
    motivo_devolucao: Optional[str] = None
    observacoes: Optional[str] = None
    historico: List[Dict[str, Any]] = []
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CompensarChequeRequest(BaseModel):
    data_compensacao: date
    observacoes: Optional[str] = None


class MotivoChequeRequest(BaseModel):
    motivo: str = Field(..., min_length=3)


class ValidarNumerosRequest(BaseModel):
    banco_id: int
    numeros: List[str]


class ValidarSequenciaRequest(BaseModel):
    banco_id: int
    numero_inicial: str
    quantidade: int = Field(..., ge=1, le=500)


class ValidacaoNumeroCheque(BaseModel):
    numero: str
    status: Literal["valid", "invalid", "empty", "duplicate_system", "duplicate_batch"]
    mensagem: str


class ChequeEstatisticas(BaseModel):
    total: int
    valor_total: float
    por_status: Dict[str, Dict[str, float]]
