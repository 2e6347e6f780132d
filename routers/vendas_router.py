from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from middleware.auth import get_current_user, CurrentUser
from schemas.conta_schema import CancelamentoConta
from schemas.venda_schema import VendaCreate, VendaUpdate, VendaResponse, ResumoVendas
from services import venda_service

router = APIRouter(prefix="/vendas", tags=["Vendas"])


@router.get("/", response_model=List[VendaResponse])
def listar(
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    forma_pagamento: Optional[str] = None,
    cliente_id: Optional[int] = None,
    status: Optional[str] = None,
    busca: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return venda_service.listar_vendas(
        db, current_user.user_id, data_inicio, data_fim, forma_pagamento, cliente_id, status, busca, skip, limit
    )


@router.get("/resumo", response_model=ResumoVendas)
def resumo(
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return venda_service.resumo_vendas(db, current_user.user_id, data_inicio, data_fim)


@router.get("/{venda_id}", response_model=VendaResponse)
def obter(
    venda_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return venda_service.buscar_venda(db, current_user.user_id, venda_id)


@router.post("/", response_model=VendaResponse, status_code=201)
def criar(
    venda: VendaCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return venda_service.criar_venda(db, current_user.user_id, venda.model_dump())


@router.put("/{venda_id}", response_model=VendaResponse)
def atualizar(
    venda_id: int,
    venda: VendaUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return venda_service.atualizar_venda(db, current_user.user_id, venda_id, venda.model_dump(exclude_unset=True))


@router.post("/{venda_id}/cancelar", response_model=VendaResponse)
def cancelar(
    venda_id: int,
    dados: CancelamentoConta,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return venda_service.cancelar_venda(db, current_user.user_id, venda_id, dados.motivo)


@router.delete("/{venda_id}", status_code=204)
def excluir(
    venda_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    venda_service.deletar_venda(db, current_user.user_id, venda_id)
    return None
