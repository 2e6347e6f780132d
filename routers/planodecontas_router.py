# routers/planodecontas_router.py
from fastapi import APIRouter, UploadFile, File, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from db import get_db
import logging
import pandas as pd
import io

from core.errors import AppError
from middleware.auth import get_current_user, CurrentUser
from services.planodecontas_services import (
    listar_planos_de_contas,
    buscar_conta,
    criar_conta,
    atualizar_conta,
    deletar_conta,
    alternar_status,
    montar_arvore,
    preparar_dados_importacao,
    importar_plano_contas
)
from schemas.planodecontas_schema import (
    PlanoContasResponse,
    PlanoContasCreate,
    PlanoContasUpdate,
    PlanoContasArvore,
    ImportacaoPlanoContasResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/plano-contas", tags=["Plano de Contas"])


@router.get("/", response_model=List[PlanoContasResponse])
def route_listar_planos(
    tipo_dre: Optional[str] = None,
    apenas_ativos: bool = False,
    skip: int = 0,
    limit: int = 1000,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return listar_planos_de_contas(db, current_user.user_id, tipo_dre, apenas_ativos, skip, limit)


@router.get("/arvore", response_model=List[PlanoContasArvore])
def route_arvore(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return montar_arvore(listar_planos_de_contas(db, current_user.user_id, limit=100000))


@router.get("/{id}", response_model=PlanoContasResponse)
def route_buscar_conta(
    id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return buscar_conta(db, current_user.user_id, id)


@router.post("/", response_model=PlanoContasResponse, status_code=201)
def route_criar_conta(
    conta: PlanoContasCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return criar_conta(db, current_user.user_id, conta.model_dump())


@router.put("/{id}", response_model=PlanoContasResponse)
def route_atualizar_conta(
    id: int,
    conta: PlanoContasUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return atualizar_conta(db, current_user.user_id, id, conta.model_dump(exclude_unset=True))


@router.patch("/{id}/toggle-status", response_model=PlanoContasResponse)
def route_alternar_status(
    id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return alternar_status(db, current_user.user_id, id)


@router.delete("/{id}", status_code=204)
def route_deletar_conta(
    id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    deletar_conta(db, current_user.user_id, id)
    return None


@router.post("/importar", response_model=ImportacaoPlanoContasResponse)
def route_importar_plano(
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        contents = file.file.read()
        if (file.filename or "").lower().endswith(".csv"):
            df = pd.read_csv(io.BytesIO(contents), dtype=str, sep=None, engine="python")
        else:
            df = pd.read_excel(io.BytesIO(contents), dtype=str)
        df = preparar_dados_importacao(df)
        return importar_plano_contas(df, current_user.user_id, db)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Falha na importação do plano de contas: {str(e)}", exc_info=True)
        raise HTTPException(status_code=400, detail=f"Erro ao importar plano de contas: {str(e)}")
    finally:
        file.file.close()
