# schemas/lancamento_lote_schema.py
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Literal
from datetime import date
from decimal import Decimal

Intervalo = Literal["mensal", "quinzenal", "semanal", "bimestral", "trimestral"]


class ParcelaLote(BaseModel):
    numero: int
    data_vencimento: date
    valor: Decimal
    status: str = "calculada"


class GerarParcelasRequest(BaseModel):
    """Total OU valor de cada parcela; um dos dois é obrigatório."""
    valor_total: Optional[Decimal] = None
    valor_parcela: Optional[Decimal] = None
    numero_parcelas: int = Field(..., ge=1)
    data_primeiro_vencimento: date
    intervalo: Intervalo = "mensal"

    @model_validator(mode="after")
    def exigir_valor(self):
        if self.valor_total is None and self.valor_parcela is None:
            raise ValueError("Informe o valor total ou o valor da parcela")
        return self


class ParcelaResponse(BaseModel):
    numero: int
    data_vencimento: date
    valor: float
    status: str


class GerarParcelasResponse(BaseModel):
    parcelas: List[ParcelaResponse]
    valor_total: float
    numero_parcelas: int


class LancamentoLoteRequest(BaseModel):
    """
    Lançamento em lote de contas a pagar.

    Quando `parcelas` vem vazio, as parcelas são geradas a partir de
    valor_total/valor_parcela, numero_parcelas e data_primeiro_vencimento.
    """
    fornecedor_id: Optional[int] = None
    plano_conta_id: Optional[int] = None
    banco_id: Optional[int] = None
    descricao: str = ""
    documento_referencia: Optional[str] = None
    forma_pagamento: Optional[str] = None
    tipo_cartao: Optional[str] = None
    data_emissao: Optional[date] = None
    observacoes: Optional[str] = None

    valor_total: Optional[Decimal] = None
    valor_parcela: Optional[Decimal] = None
    numero_parcelas: Optional[int] = None
    data_primeiro_vencimento: Optional[date] = None
    intervalo: Intervalo = "mensal"

    parcelas: List[ParcelaLote] = []


class ResultadoLancamentoResponse(BaseModel):
    sucesso: bool
    lote_id: Optional[str] = None
    total_parcelas: int
    contas_criadas: List[int] = []
    erros: List[str] = []


class CancelarLoteResponse(BaseModel):
    lote_id: str
    canceladas: int
