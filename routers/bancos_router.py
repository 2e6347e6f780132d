from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from middleware.auth import get_current_user, CurrentUser
from schemas.banco_schema import BancoCreate, BancoUpdate, BancoResponse, BancoEstatisticas
from services.banco_service import (
    listar_bancos,
    buscar_banco,
    criar_banco,
    atualizar_banco,
    deletar_banco,
    alternar_status_banco,
    estatisticas_bancos,
)

router = APIRouter(prefix="/bancos", tags=["Bancos"])


@router.get("/", response_model=List[BancoResponse])
def listar(
    busca: Optional[str] = None,
    ativo: Optional[bool] = None,
    tipo_conta: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return listar_bancos(db, current_user.user_id, busca, ativo, tipo_conta, skip, limit)


@router.get("/estatisticas", response_model=BancoEstatisticas)
def estatisticas(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return estatisticas_bancos(db, current_user.user_id)


@router.get("/{banco_id}", response_model=BancoResponse)
def obter(
    banco_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return buscar_banco(db, current_user.user_id, banco_id)


@router.post("/", response_model=BancoResponse, status_code=201)
def criar(
    banco: BancoCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return criar_banco(db, current_user.user_id, banco.model_dump())


@router.put("/{banco_id}", response_model=BancoResponse)
def atualizar(
    banco_id: int,
    banco: BancoUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return atualizar_banco(db, current_user.user_id, banco_id, banco.model_dump(exclude_unset=True))


@router.patch("/{banco_id}/toggle-status", response_model=BancoResponse)
def alternar_status(
    banco_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return alternar_status_banco(db, current_user.user_id, banco_id)


@router.delete("/{banco_id}", status_code=204)
def excluir(
    banco_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    deletar_banco(db, current_user.user_id, banco_id)
    return None
