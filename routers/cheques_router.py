from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from middleware.auth import get_current_user, CurrentUser
from schemas.cheque_schema import (
    ChequeCreate,
    ChequeUpdate,
    ChequeResponse,
    CompensarChequeRequest,
    MotivoChequeRequest,
    ValidarNumerosRequest,
    ValidarSequenciaRequest,
    ValidacaoNumeroCheque,
    ChequeEstatisticas,
)
from services import cheque_service

router = APIRouter(prefix="/cheques", tags=["Cheques"])


@router.get("/", response_model=List[ChequeResponse])
def listar(
    busca: Optional[str] = None,
    status: Optional[str] = None,
    banco_id: Optional[int] = None,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return cheque_service.listar_cheques(
        db, current_user.user_id, busca, status, banco_id, data_inicio, data_fim, skip, limit
    )


@router.get("/estatisticas", response_model=ChequeEstatisticas)
def estatisticas(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return cheque_service.estatisticas_cheques(db, current_user.user_id)


@router.post("/validar-numeros", response_model=List[ValidacaoNumeroCheque])
def validar_numeros(
    payload: ValidarNumerosRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return cheque_service.validar_numeros(db, current_user.user_id, payload.banco_id, payload.numeros)


@router.post("/validar-sequencia", response_model=List[ValidacaoNumeroCheque])
def validar_sequencia(
    payload: ValidarSequenciaRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return cheque_service.validar_sequencia(
        db, current_user.user_id, payload.banco_id, payload.numero_inicial, payload.quantidade
    )


@router.get("/{cheque_id}", response_model=ChequeResponse)
def obter(
    cheque_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return cheque_service.buscar_cheque(db, current_user.user_id, cheque_id)


@router.post("/", response_model=ChequeResponse, status_code=201)
def criar(
    cheque: ChequeCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return cheque_service.criar_cheque(db, current_user.user_id, cheque.model_dump())


@router.put("/{cheque_id}", response_model=ChequeResponse)
def atualizar(
    cheque_id: int,
    cheque: ChequeUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return cheque_service.atualizar_cheque(db, current_user.user_id, cheque_id, cheque.model_dump(exclude_unset=True))


@router.post("/{cheque_id}/compensar", response_model=ChequeResponse)
def compensar(
    cheque_id: int,
    payload: CompensarChequeRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return cheque_service.compensar_cheque(
        db, current_user.user_id, cheque_id, payload.data_compensacao, payload.observacoes
    )


@router.post("/{cheque_id}/cancelar", response_model=ChequeResponse)
def cancelar(
    cheque_id: int,
    payload: MotivoChequeRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return cheque_service.cancelar_cheque(db, current_user.user_id, cheque_id, payload.motivo)


@router.post("/{cheque_id}/devolver", response_model=ChequeResponse)
def devolver(
    cheque_id: int,
    payload: MotivoChequeRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return cheque_service.devolver_cheque(db, current_user.user_id, cheque_id, payload.motivo)


@router.delete("/{cheque_id}", status_code=204)
def excluir(
    cheque_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    cheque_service.deletar_cheque(db, current_user.user_id, cheque_id)
    return None
