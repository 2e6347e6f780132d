"""
Router para endpoints do Dashboard e do Fluxo de Caixa.
"""
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from db import get_db
from middleware.auth import get_current_user, CurrentUser
from schemas.dashboard_schema import DashboardResponse, FluxoCaixaResponse, ProjecaoDia
from services.dashboard_service import dashboard_service
from services.fluxo_caixa_service import fluxo_caixa, projetar_saldo

router = APIRouter(tags=["Dashboard"])
logger = logging.getLogger(__name__)


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Saudação, cards, indicadores de liquidez, gráfico dos últimos 6 meses e alertas."""
    return dashboard_service.get_dashboard(
        db=db,
        usuario_id=current_user.user_id,
        user_nome=current_user.nome
    )


@router.get("/fluxo-caixa", response_model=FluxoCaixaResponse)
def get_fluxo_caixa(
    data_inicio: Optional[date] = Query(None, description="Padrão: primeiro dia do mês atual"),
    data_fim: Optional[date] = Query(None, description="Padrão: último dia do mês atual"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return fluxo_caixa(db, current_user.user_id, data_inicio, data_fim)


@router.get("/fluxo-caixa/projecao", response_model=List[ProjecaoDia])
def get_projecao(
    dias: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return projetar_saldo(db, current_user.user_id, dias)
