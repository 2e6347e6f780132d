from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from db import get_db
from middleware.auth import get_current_user, CurrentUser
from schemas.conta_schema import (
    ContaPagarCreate,
    ContaPagarUpdate,
    ContaPagarResponse,
    BaixaContaPagar,
    CancelamentoConta,
    ResumoContas,
    MarcarVencidasResponse,
)
from services.contas_service import contas_pagar_service as service

router = APIRouter(prefix="/contas-pagar", tags=["Contas a Pagar"])


@router.get("/", response_model=List[ContaPagarResponse])
def listar(
    status: Optional[str] = Query(None, description="pendente, pago, vencido ou cancelado"),
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    fornecedor_id: Optional[int] = None,
    plano_conta_id: Optional[int] = None,
    banco_id: Optional[int] = None,
    busca: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.listar(
        db, current_user.user_id,
        status=status, data_inicio=data_inicio, data_fim=data_fim, busca=busca,
        limit=limit, offset=offset,
        fornecedor_id=fornecedor_id, plano_conta_id=plano_conta_id, banco_id=banco_id,
    )


@router.get("/resumo", response_model=ResumoContas)
def resumo(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.resumo(db, current_user.user_id)


@router.post("/marcar-vencidas", response_model=MarcarVencidasResponse)
def marcar_vencidas(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"atualizadas": service.marcar_vencidas(db, current_user.user_id)}


@router.get("/{conta_id}", response_model=ContaPagarResponse)
def obter(
    conta_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.buscar(db, current_user.user_id, conta_id)


@router.post("/", response_model=ContaPagarResponse, status_code=201)
def criar(
    conta: ContaPagarCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.criar(db, current_user.user_id, conta.model_dump())


@router.put("/{conta_id}", response_model=ContaPagarResponse)
def atualizar(
    conta_id: int,
    conta: ContaPagarUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.atualizar(db, current_user.user_id, conta_id, conta.model_dump(exclude_unset=True))


@router.post("/{conta_id}/baixar", response_model=ContaPagarResponse)
def baixar(
    conta_id: int,
    baixa: BaixaContaPagar,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.baixar(
        db, current_user.user_id, conta_id,
        data_baixa=baixa.data_pagamento,
        valor=baixa.valor_pago,
        banco_id=baixa.banco_id,
        observacoes=baixa.observacoes,
    )


@router.post("/{conta_id}/cancelar", response_model=ContaPagarResponse)
def cancelar(
    conta_id: int,
    dados: CancelamentoConta,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.cancelar(db, current_user.user_id, conta_id, dados.motivo)


@router.post("/{conta_id}/estornar", response_model=ContaPagarResponse)
def estornar(
    conta_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return service.estornar(db, current_user.user_id, conta_id)


@router.delete("/{conta_id}", status_code=204)
def excluir(
    conta_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service.deletar(db, current_user.user_id, conta_id)
    return None
