"""
Router de maquininhas: cadastro com taxas, importação de vendas e
recebimentos, conciliação e análises por operadora.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from db import get_db
from middleware.auth import get_current_user, CurrentUser
from schemas.maquininha_schema import (
    MaquininhaCreate,
    MaquininhaUpdate,
    MaquininhaResponse,
    CalcularTaxaRequest,
    CalculoTaxaResponse,
    ImportarVendasRequest,
    ImportarRecebimentosRequest,
    VendaMaquininhaOut,
    RecebimentoBancarioOut,
    ConciliarRequest,
    ConciliacaoResponse,
    DashboardMaquininhas,
    RelatorioTaxasOperadora,
    SugerirToleranciaRequest,
    ToleranciaSugerida,
    AnaliseOperadoraResponse,
)
from services.maquininha_service import maquininha_service as service, calcular_taxa

router = APIRouter(prefix="/maquininhas", tags=["Maquininhas"])
logger = logging.getLogger(__name__)


# ============================================================
# VISÃO GERAL
# ============================================================

@router.get("/dashboard", response_model=DashboardMaquininhas)
def dashboard(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.dashboard(db, current_user.user_id)


@router.get("/relatorio-taxas", response_model=List[RelatorioTaxasOperadora])
def relatorio_taxas(
    periodo: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.relatorio_taxas(db, current_user.user_id, periodo)


@router.get("/conciliacoes", response_model=List[ConciliacaoResponse])
def listar_conciliacoes(
    maquininha_id: Optional[int] = None,
    limit: int = Query(20, ge=1, le=200),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.listar_conciliacoes(db, current_user.user_id, maquininha_id, limit)


@router.post("/recebimentos/importar", response_model=List[RecebimentoBancarioOut], status_code=201)
def importar_recebimentos(
    payload: ImportarRecebimentosRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.importar_recebimentos(
        db, current_user.user_id, payload.banco_id, [r.model_dump() for r in payload.recebimentos]
    )


# ============================================================
# CADASTRO
# ============================================================

@router.get("/", response_model=List[MaquininhaResponse])
def listar(
    ativo: Optional[bool] = None,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.listar(db, current_user.user_id, ativo)


@router.get("/{maquininha_id}", response_model=MaquininhaResponse)
def obter(
    maquininha_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.buscar(db, current_user.user_id, maquininha_id)


@router.post("/", response_model=MaquininhaResponse, status_code=201)
def criar(
    maquininha: MaquininhaCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.criar(db, current_user.user_id, maquininha.model_dump())


@router.put("/{maquininha_id}", response_model=MaquininhaResponse)
def atualizar(
    maquininha_id: int,
    maquininha: MaquininhaUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.atualizar(db, current_user.user_id, maquininha_id, maquininha.model_dump(exclude_unset=True))


@router.patch("/{maquininha_id}/toggle-status", response_model=MaquininhaResponse)
def alternar_status(
    maquininha_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.alternar_status(db, current_user.user_id, maquininha_id)


@router.delete("/{maquininha_id}", status_code=204)
def excluir(
    maquininha_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service.deletar(db, current_user.user_id, maquininha_id)
    return None


# ============================================================
# TAXAS, IMPORTAÇÃO E CONCILIAÇÃO
# ============================================================

@router.post("/{maquininha_id}/calcular-taxa", response_model=CalculoTaxaResponse)
def calcular(
    maquininha_id: int,
    payload: CalcularTaxaRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    maquininha = service.buscar(db, current_user.user_id, maquininha_id)
    return calcular_taxa(maquininha, payload.bandeira, payload.tipo_transacao, payload.parcelas, payload.valor_bruto)


@router.post("/{maquininha_id}/vendas/importar", response_model=List[VendaMaquininhaOut], status_code=201)
def importar_vendas(
    maquininha_id: int,
    payload: ImportarVendasRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.importar_vendas(db, current_user.user_id, maquininha_id, [v.model_dump() for v in payload.vendas])


@router.post("/{maquininha_id}/conciliar", response_model=ConciliacaoResponse)
def conciliar(
    maquininha_id: int,
    payload: ConciliarRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.conciliar(
        db, current_user.user_id, maquininha_id, payload.periodo, payload.tolerancia_valor, payload.tolerancia_dias
    )


@router.get("/{maquininha_id}/analise", response_model=AnaliseOperadoraResponse)
def analisar(
    maquininha_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.analisar_operadora(db, current_user.user_id, maquininha_id)


@router.post("/{maquininha_id}/sugerir-tolerancia", response_model=ToleranciaSugerida)
def sugerir_tolerancia(
    maquininha_id: int,
    payload: SugerirToleranciaRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    historico = [h.model_dump() for h in payload.historico]
    return service.sugerir_tolerancia(db, current_user.user_id, maquininha_id, historico)
