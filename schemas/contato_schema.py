# schemas/contato_schema.py
"""
Schemas dos contatos: fornecedores, clientes e pagadores.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from datetime import datetime, date

from schemas.validators import (
    normalizar_documento,
    normalizar_telefone,
    normalizar_cep,
    normalizar_email,
)

TipoPessoa = Literal["pessoa_fisica", "pessoa_juridica"]


# ============================================================
# BASE COMUM
# ============================================================

class ContatoCampos(BaseModel):
    """Campos de contato e endereço, todos opcionais."""
    documento: Optional[str] = None
    email: Optional[str] = None
    telefone: Optional[str] = None
    cep: Optional[str] = None
    logradouro: Optional[str] = Field(None, max_length=255)
    numero: Optional[str] = Field(None, max_length=20)
    complemento: Optional[str] = Field(None, max_length=100)
    bairro: Optional[str] = Field(None, max_length=100)
    cidade: Optional[str] = Field(None, max_length=100)
    estado: Optional[str] = Field(None, min_length=2, max_length=2)
    observacoes: Optional[str] = None

    @field_validator("documento")
    @classmethod
    def validar_documento(cls, v):
        return normalizar_documento(v)

    @field_validator("email")
    @classmethod
    def validar_email(cls, v):
        return normalizar_email(v)

    @field_validator("telefone")
    @classmethod
    def validar_telefone(cls, v):
        return normalizar_telefone(v)

    @field_validator("cep")
    @classmethod
    def validar_cep(cls, v):
        return normalizar_cep(v)

    @field_validator("estado")
    @classmethod
    def estado_maiusculo(cls, v):
        return v.upper() if v else v


class ContatoResponseBase(BaseModel):
    id: int
    nome: str
    documento: Optional[str] = None
    tipo: str
    email: Optional[str] = None
    telefone: Optional[str] = None
    cep: Optional[str] = None
    logradouro: Optional[str] = None
    numero: Optional[str] = None
    complemento: Optional[str] = None
    bairro: Optional[str] = None
    cidade: Optional[str] = None
    estado: Optional[str] = None
    observacoes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ============================================================
# FORNECEDOR
# ============================================================

class FornecedorCreate(ContatoCampos):
    nome: str = Field(..., min_length=2, max_length=255)
    nome_fantasia: Optional[str] = Field(None, max_length=255)
    tipo: TipoPessoa = "pessoa_juridica"
    tipo_fornecedor: Optional[str] = Field(None, max_length=50)
    inscricao_estadual: Optional[str] = Field(None, max_length=20)
    categoria_padrao_id: Optional[int] = None
    ativo: bool = True


class FornecedorUpdate(ContatoCampos):
    nome: Optional[str] = Field(None, min_length=2, max_length=255)
    nome_fantasia: Optional[str] = None
    tipo: Optional[TipoPessoa] = None
    tipo_fornecedor: Optional[str] = None
    inscricao_estadual: Optional[str] = None
    categoria_padrao_id: Optional[int] = None
    ativo: Optional[bool] = None


class FornecedorResponse(ContatoResponseBase):
    nome_fantasia: Optional[str] = None
    tipo_fornecedor: Optional[str] = None
    inscricao_estadual: Optional[str] = None
    categoria_padrao_id: Optional[int] = None
    ativo: bool
    total_compras: int = 0
    valor_total: float = 0
    ultima_compra: Optional[date] = None


class FornecedorEstatisticas(BaseModel):
    total: int
    ativos: int
    inativos: int
    pessoa_fisica: int
    pessoa_juridica: int


# ============================================================
# CLIENTE
# ============================================================

StatusCliente = Literal["ativo", "inativo", "bloqueado"]


class ClienteCreate(ContatoCampos):
    nome: str = Field(..., min_length=2, max_length=255)
    tipo: TipoPessoa = "pessoa_fisica"
    status: StatusCliente = "ativo"


class ClienteUpdate(ContatoCampos):
    nome: Optional[str] = Field(None, min_length=2, max_length=255)
    tipo: Optional[TipoPessoa] = None
    status: Optional[StatusCliente] = None


class ClienteResponse(ContatoResponseBase):
    status: str
    total_compras: int = 0
    valor_total: float = 0
    ultima_compra: Optional[date] = None


# ============================================================
# PAGADOR
# ============================================================

class PagadorCreate(ContatoCampos):
    nome: str = Field(..., min_length=2, max_length=255)
    tipo: TipoPessoa = "pessoa_fisica"
    ativo: bool = True


class PagadorUpdate(ContatoCampos):
    nome: Optional[str] = Field(None, min_length=2, max_length=255)
    tipo: Optional[TipoPessoa] = None
    ativo: Optional[bool] = None


class PagadorResponse(ContatoResponseBase):
    ativo: bool
    total_recebimentos: int = 0
    valor_total: float = 0
    ultimo_recebimento: Optional[date] = None


class PagadorEstatisticas(BaseModel):
    total: int
    ativos: int
    inativos: int
    total_recebimentos: int
    valor_total: float
