"""
Schemas para o Dashboard e o Fluxo de Caixa.
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import date


class MovimentacaoFluxo(BaseModel):
    """Movimentação unificada (venda, conta a pagar ou conta a receber)."""
    data: date
    tipo: str  # entrada, saida
    valor: float
    descricao: str
    categoria: Optional[str] = None
    origem: str  # venda, conta_pagar, conta_receber
    origem_id: int
    status: str  # realizado, previsto, em_atraso


class IndicadoresFluxo(BaseModel):
    saldo_atual: float
    entradas_mes: float
    saidas_mes: float
    resultado_mes: float
    saldo_projetado_30d: float
    status_liquidez: str  # saudavel, atencao, critico
    dias_caixa: Optional[float] = None
    tendencia: str  # alta, baixa, estavel


class ProjecaoDia(BaseModel):
    data: date
    entradas: float
    saidas: float
    saldo: float


class AlertaPendencia(BaseModel):
    """Alerta de pendencia."""
    tipo: str  # "warning", "info", "error"
    mensagem: str
    acao_url: Optional[str] = None


class FluxoCaixaResponse(BaseModel):
    data_inicio: date
    data_fim: date
    indicadores: IndicadoresFluxo
    movimentacoes: List[MovimentacaoFluxo]
    alertas: List[AlertaPendencia]


class DashboardStats(BaseModel):
    """Estatisticas gerais do dashboard."""
    saldo_bancos: float
    a_pagar_mes: float
    a_receber_mes: float
    vendas_mes: float
    contas_vencidas: int
    cheques_pendentes: int


class GraficoMensal(BaseModel):
    """Dados para grafico de entradas e saidas por mes."""
    mes: str  # "Jan", "Fev", etc.
    ano: int
    entradas: float
    saidas: float


class DashboardResponse(BaseModel):
    """Response completo do dashboard."""
    saudacao: str
    data_atual: str
    usuario_nome: str
    stats: DashboardStats
    indicadores: IndicadoresFluxo
    grafico_mensal: List[GraficoMensal]
    alertas: List[AlertaPendencia]
