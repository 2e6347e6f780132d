# schemas/maquininha_schema.py
from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Dict, Any
from datetime import datetime, date
from decimal import Decimal

Operadora = Literal["rede", "sipag"]
TipoTransacao = Literal["debito", "credito_vista", "credito_parcelado"]


# ============================================================
# MAQUININHA / TAXAS
# ============================================================

class TaxaMaquininhaIn(BaseModel):
    bandeira: str = Field(..., min_length=2, max_length=30)
    tipo_transacao: TipoTransacao
    parcelas_max: int = Field(1, ge=1, le=24)
    taxa_percentual: Decimal = Field(..., ge=0, le=100)
    taxa_fixa: Decimal = Field(Decimal("0"), ge=0)
    ativo: bool = True


class TaxaMaquininhaOut(BaseModel):
    id: int
    bandeira: str
    tipo_transacao: str
    parcelas_max: int
    taxa_percentual: float
    taxa_fixa: float
    ativo: bool

    model_config = {"from_attributes": True}


class MaquininhaCreate(BaseModel):
    nome: str = Field(..., min_length=2, max_length=255)
    operadora: Operadora
    codigo_estabelecimento: str = Field(..., min_length=1, max_length=50)
    banco_id: int
    ativo: bool = True
    taxas: List[TaxaMaquininhaIn] = []


class MaquininhaUpdate(BaseModel):
    nome: Optional[str] = Field(None, min_length=2, max_length=255)
    operadora: Optional[Operadora] = None
    codigo_estabelecimento: Optional[str] = None
    banco_id: Optional[int] = None
    ativo: Optional[bool] = None
    taxas: Optional[List[TaxaMaquininhaIn]] = None  # substitui a lista inteira


class MaquininhaResponse(BaseModel):
    id: int
    nome: str
    operadora: str
    codigo_estabelecimento: str
    banco_id: int
    ativo: bool
    taxas: List[TaxaMaquininhaOut] = []
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CalcularTaxaRequest(BaseModel):
    bandeira: str
    tipo_transacao: TipoTransacao
    parcelas: int = Field(1, ge=1)
    valor_bruto: Decimal = Field(..., gt=0)


class CalculoTaxaResponse(BaseModel):
    valor_bruto: float
    taxa_percentual: float
    taxa_fixa: float
    valor_taxa: float
    valor_liquido: float


# ============================================================
# IMPORTAÇÃO DE VENDAS E RECEBIMENTOS
# ============================================================

class VendaMaquininhaIn(BaseModel):
    nsu: Optional[str] = None
    data_venda: date
    data_recebimento: Optional[date] = None
    bandeira: str
    tipo_transacao: TipoTransacao
    parcelas: int = Field(1, ge=1)
    valor_bruto: Decimal = Field(..., gt=0)
    valor_taxa: Optional[Decimal] = Field(None, ge=0)


class VendaMaquininhaOut(BaseModel):
    id: int
    nsu: Optional[str] = None
    data_venda: date
    data_recebimento: date
    bandeira: str
    tipo_transacao: str
    parcelas: int
    valor_bruto: float
    valor_taxa: float
    valor_liquido: float
    taxa_percentual_cobrada: Optional[float] = None
    periodo_processamento: str
    status: str

    model_config = {"from_attributes": True}


class RecebimentoBancarioIn(BaseModel):
    data_recebimento: date
    valor: Decimal = Field(..., gt=0)
    descricao: Optional[str] = None
    documento: Optional[str] = None
    tipo_operacao: Optional[str] = None


class RecebimentoBancarioOut(BaseModel):
    id: int
    banco_id: int
    data_recebimento: date
    valor: float
    descricao: Optional[str] = None
    documento: Optional[str] = None
    tipo_operacao: Optional[str] = None
    periodo_processamento: str
    status: str

    model_config = {"from_attributes": True}


class ImportarVendasRequest(BaseModel):
    vendas: List[VendaMaquininhaIn] = Field(..., min_length=1)


class ImportarRecebimentosRequest(BaseModel):
    banco_id: int
    recebimentos: List[RecebimentoBancarioIn] = Field(..., min_length=1)


# ============================================================
# CONCILIAÇÃO
# ============================================================

class ConciliarRequest(BaseModel):
    periodo: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    tolerancia_valor: Optional[Decimal] = Field(None, ge=0)
    tolerancia_dias: Optional[int] = Field(None, ge=0, le=10)


class ConciliacaoResponse(BaseModel):
    id: int
    maquininha_id: int
    periodo: str
    data_conciliacao: Optional[datetime] = None
    total_vendas: float
    total_recebimentos: float
    total_taxas: float
    diferenca: float
    status: str
    observacoes: Optional[str] = None
    detalhes: Optional[Dict[str, Any]] = None

    model_config = {"from_attributes": True}


class DashboardMaquininhas(BaseModel):
    maquininhas_ativas: int
    taxa_conciliacao: float
    recebido_mes: float
    taxas_pagas: float
    ultimas_conciliacoes: List[ConciliacaoResponse]


class RelatorioTaxasOperadora(BaseModel):
    operadora: str
    quantidade_vendas: int
    valor_bruto: float
    valor_taxas: float
    taxa_media: float


class HistoricoConciliacaoIn(BaseModel):
    tolerancia_valor: Decimal
    tolerancia_dias: int
    taxa_sucesso: float = Field(..., ge=0, le=1)


class SugerirToleranciaRequest(BaseModel):
    historico: List[HistoricoConciliacaoIn] = []


class ToleranciaSugerida(BaseModel):
    valor: float
    dias: int


class AnaliseOperadoraResponse(BaseModel):
    padroes: Dict[str, Any]
    anomalias: List[str]
    recomendacoes: List[str]
