# schemas/banco_schema.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from datetime import datetime
from decimal import Decimal

from schemas.validators import normalizar_telefone, normalizar_email

TipoConta = Literal["corrente", "poupanca", "investimento"]


class BancoBase(BaseModel):
    nome: str = Field(..., min_length=2, max_length=255)
    codigo_banco: Optional[str] = Field(None, max_length=10)
    agencia: Optional[str] = Field(None, max_length=10)
    conta: Optional[str] = Field(None, max_length=20)
    digito_verificador: Optional[str] = Field(None, max_length=2)
    tipo_conta: TipoConta = "corrente"
    limite_conta: Optional[Decimal] = Field(None, ge=0)
    gerente: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    observacoes: Optional[str] = None
    suporta_ofx: bool = False
    ativo: bool = True

    @field_validator("telefone")
    @classmethod
    def validar_telefone(cls, v):
        return normalizar_telefone(v)

    @field_validator("email")
    @classmethod
    def validar_email(cls, v):
        return normalizar_email(v)


class BancoCreate(BancoBase):
    saldo_inicial: Decimal = Decimal("0")


class BancoUpdate(BaseModel):
    nome: Optional[str] = Field(None, min_length=2, max_length=255)
    codigo_banco: Optional[str] = None
    agencia: Optional[str] = None
    conta: Optional[str] = None
    digito_verificador: Optional[str] = None
    tipo_conta: Optional[TipoConta] = None
    limite_conta: Optional[Decimal] = Field(None, ge=0)
    gerente: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    observacoes: Optional[str] = None
    suporta_ofx: Optional[bool] = None
    ativo: Optional[bool] = None

    @field_validator("telefone")
    @classmethod
    def validar_telefone(cls, v):
        return normalizar_telefone(v)

    @field_validator("email")
    @classmethod
    def validar_email(cls, v):
        return normalizar_email(v)


class BancoResponse(BaseModel):
    id: int
    nome: str
    codigo_banco: Optional[str] = None
    agencia: Optional[str] = None
    conta: Optional[str] = None
    digito_verificador: Optional[str] = None
    tipo_conta: str
    saldo_inicial: float
    saldo_atual: float
    limite_conta: Optional[float] = None
    gerente: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    observacoes: Optional[str] = None
    suporta_ofx: bool
    ativo: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BancoEstatisticas(BaseModel):
    total_bancos: int
    bancos_ativos: int
    saldo_total: float
    movimentacoes_mes: int
    maior_saldo: float
    menor_saldo: float
