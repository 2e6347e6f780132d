"""
Service para o Dashboard.
"""
import logging
from datetime import date, datetime
from typing import List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from models import Cheque, ContaPagar, ContaReceber, Venda
from schemas.dashboard_schema import (
    AlertaPendencia,
    DashboardResponse,
    DashboardStats,
    GraficoMensal,
    IndicadoresFluxo,
)
from services import fluxo_caixa_service
from tools.formatacao import MESES_ABREV_PT, formatar_data_extenso

logger = logging.getLogger(__name__)


class DashboardService:
    """Service para montar os dados do dashboard financeiro."""

    def _get_saudacao(self, agora: datetime) -> str:
        """Retorna saudacao baseada na hora atual."""
        if agora.hour < 12:
            return "Bom dia"
        elif agora.hour < 18:
            return "Boa tarde"
        else:
            return "Boa noite"

    def _soma_aberta_no_mes(self, db: Session, model, usuario_id: int, hoje: date) -> float:
        inicio = hoje.replace(day=1)
        fim = inicio + relativedelta(months=1, days=-1)
        total = db.query(func.coalesce(func.sum(model.valor_final), 0)).filter(
            model.usuario_id == usuario_id,
            model.deleted_at.is_(None),
            model.status.in_(fluxo_caixa_service.ABERTOS),
            model.data_vencimento.between(inicio, fim),
        ).scalar()
        return float(total)

    def _contar_vencidas(self, db: Session, model, usuario_id: int, hoje: date) -> int:
        return db.query(model).filter(
            model.usuario_id == usuario_id,
            model.deleted_at.is_(None),
            or_(model.status == "vencido", and_(model.status == "pendente", model.data_vencimento < hoje)),
        ).count()

    def _get_stats(self, db: Session, usuario_id: int, hoje: date) -> DashboardStats:
        """Calcula os cards do dashboard."""
        inicio_mes = hoje.replace(day=1)
        vendas_mes = db.query(func.coalesce(func.sum(Venda.valor_final), 0)).filter(
            Venda.usuario_id == usuario_id,
            Venda.status == "ativa",
            Venda.data_venda.between(inicio_mes, hoje),
        ).scalar()

        cheques_pendentes = db.query(Cheque).filter(
            Cheque.usuario_id == usuario_id,
            Cheque.status == "pendente",
        ).count()

        return DashboardStats(
            saldo_bancos=float(fluxo_caixa_service.saldo_bancos(db, usuario_id)),
            a_pagar_mes=self._soma_aberta_no_mes(db, ContaPagar, usuario_id, hoje),
            a_receber_mes=self._soma_aberta_no_mes(db, ContaReceber, usuario_id, hoje),
            vendas_mes=float(vendas_mes),
            contas_vencidas=(
                self._contar_vencidas(db, ContaPagar, usuario_id, hoje)
                + self._contar_vencidas(db, ContaReceber, usuario_id, hoje)
            ),
            cheques_pendentes=cheques_pendentes,
        )

    def _get_grafico_mensal(
        self, db: Session, usuario_id: int, hoje: date, meses: int = 6
    ) -> List[GraficoMensal]:
        """Entradas e saídas realizadas dos últimos meses, do mais antigo ao atual."""
        resultado = []
        for i in range(meses - 1, -1, -1):
            referencia = hoje - relativedelta(months=i)
            inicio = referencia.replace(day=1)
            fim = inicio + relativedelta(months=1, days=-1)
            movs = fluxo_caixa_service.gerar_movimentacoes(db, usuario_id, inicio, fim, hoje)

            resultado.append(GraficoMensal(
                mes=MESES_ABREV_PT[referencia.month - 1],
                ano=referencia.year,
                entradas=round(sum(m["valor"] for m in movs if m["tipo"] == "entrada" and m["status"] == "realizado"), 2),
                saidas=round(sum(m["valor"] for m in movs if m["tipo"] == "saida" and m["status"] == "realizado"), 2),
            ))
        return resultado

    def get_dashboard(
        self, db: Session, usuario_id: int, user_nome: str, agora: Optional[datetime] = None
    ) -> DashboardResponse:
        """Retorna todos os dados do dashboard."""
        agora = agora or datetime.now()
        hoje = agora.date()

        indicadores = fluxo_caixa_service.calcular_indicadores(db, usuario_id, hoje)
        alertas = fluxo_caixa_service.gerar_alertas(db, usuario_id, hoje)
        if not alertas:
            alertas.append({"tipo": "success", "mensagem": "Nenhuma pendência financeira!", "acao_url": None})

        return DashboardResponse(
            saudacao=f"{self._get_saudacao(agora)}, {user_nome}!",
            data_atual=formatar_data_extenso(hoje),
            usuario_nome=user_nome,
            stats=self._get_stats(db, usuario_id, hoje),
            indicadores=IndicadoresFluxo(**indicadores),
            grafico_mensal=self._get_grafico_mensal(db, usuario_id, hoje),
            alertas=[AlertaPendencia(**a) for a in alertas],
        )


dashboard_service = DashboardService()
