# schemas/relatorio_schema.py
"""
Schemas de relatórios: DRE e agrupamentos por categoria / período.
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from decimal import Decimal


class LinhaDREOut(BaseModel):
    codigo: str
    descricao: str
    valor: float
    nivel: int
    tipo: str  # receita, deducao, custo, despesa, subtotal, total
    categoria_id: Optional[int] = None
    valor_comparacao: Optional[float] = None
    variacao_percentual: Optional[float] = None


class MetricasDREOut(BaseModel):
    receita_bruta: float
    deducoes: float
    receita_liquida: float
    custos: float
    lucro_bruto: float
    despesas_operacionais: float
    resultado_liquido: float
    margem_bruta: float
    margem_liquida: float


class DREResponse(BaseModel):
    mes_inicio: str
    mes_fim: str
    linhas: List[LinhaDREOut]
    metricas: MetricasDREOut
    metricas_comparacao: Optional[MetricasDREOut] = None


class GrupoOut(BaseModel):
    chave: str
    rotulo: str
    total: float
    quantidade: int
    percentual: float


class AgrupamentoResponse(BaseModel):
    tipo: str
    agrupamento: str
    total_geral: float
    grupos: List[GrupoOut]


class DadosEssenciaisIn(BaseModel):
    mes_referencia: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    cmv_valor: Optional[Decimal] = Field(None, ge=0)
    deducoes_receita: Optional[Decimal] = Field(None, ge=0)
    percentual_impostos: Optional[Decimal] = Field(None, ge=0, le=100)
    percentual_devolucoes: Optional[Decimal] = Field(None, ge=0, le=100)
    estoque_inicial: Optional[Decimal] = Field(None, ge=0)
    estoque_final: Optional[Decimal] = Field(None, ge=0)
    compras_periodo: Optional[Decimal] = Field(None, ge=0)


class DadosEssenciaisOut(BaseModel):
    id: int
    mes_referencia: str
    cmv_valor: Optional[float] = None
    deducoes_receita: Optional[float] = None
    percentual_impostos: Optional[float] = None
    percentual_devolucoes: Optional[float] = None
    estoque_inicial: Optional[float] = None
    estoque_final: Optional[float] = None
    compras_periodo: Optional[float] = None

    model_config = {"from_attributes": True}
