from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from db import get_db
from middleware.auth import get_current_user, CurrentUser
from schemas.relatorio_schema import (
    DREResponse,
    AgrupamentoResponse,
    DadosEssenciaisIn,
    DadosEssenciaisOut,
)
from services import relatorio_service

router = APIRouter(prefix="/relatorios", tags=["Relatórios"])


@router.get("/dre", response_model=DREResponse)
def dre(
    mes_inicio: str = Query(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM"),
    mes_fim: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    comparar_com_anterior: bool = False,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return relatorio_service.gerar_dre(db, current_user.user_id, mes_inicio, mes_fim, comparar_com_anterior)


@router.get("/agrupamento", response_model=AgrupamentoResponse)
def agrupamento(
    data_inicio: date,
    data_fim: date,
    tipo: Literal["receitas", "despesas"] = "despesas",
    agrupamento: Literal["categoria", "dia", "semana", "mes", "ano"] = "categoria",
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return relatorio_service.relatorio_agrupamento(
        db, current_user.user_id, tipo, data_inicio, data_fim, agrupamento
    )


# ============================================================
# DADOS ESSENCIAIS DA DRE
# ============================================================

@router.get("/dados-essenciais", response_model=List[DadosEssenciaisOut])
def listar_dados_essenciais(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return relatorio_service.listar_dados_essenciais(db, current_user.user_id)


@router.get("/dados-essenciais/{mes_referencia}", response_model=DadosEssenciaisOut)
def obter_dados_essenciais(
    mes_referencia: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return relatorio_service.buscar_dados_essenciais(db, current_user.user_id, mes_referencia)


@router.put("/dados-essenciais", response_model=DadosEssenciaisOut)
def salvar_dados_essenciais(
    dados: DadosEssenciaisIn,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return relatorio_service.salvar_dados_essenciais(db, current_user.user_id, dados.model_dump())


@router.delete("/dados-essenciais/{mes_referencia}", status_code=204)
def excluir_dados_essenciais(
    mes_referencia: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    relatorio_service.deletar_dados_essenciais(db, current_user.user_id, mes_referencia)
    return None
