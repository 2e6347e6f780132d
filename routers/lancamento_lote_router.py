import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from db import get_db
from middleware.auth import get_current_user, CurrentUser
from schemas.conta_schema import ContaPagarResponse
from schemas.lancamento_lote_schema import (
    GerarParcelasRequest,
    GerarParcelasResponse,
    LancamentoLoteRequest,
    ResultadoLancamentoResponse,
    CancelarLoteResponse,
)
from services.lancamento_lote_service import (
    gerar_parcelas,
    parcelas_para_resposta,
    processar_lote,
    listar_lote,
    cancelar_lote,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lancamentos-lote", tags=["Lançamento em Lote"])


@router.post("/preview", response_model=GerarParcelasResponse)
def preview(
    payload: GerarParcelasRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    """Gera as parcelas sem gravar nada."""
    parcelas = gerar_parcelas(
        numero_parcelas=payload.numero_parcelas,
        data_primeiro_vencimento=payload.data_primeiro_vencimento,
        valor_total=payload.valor_total,
        valor_parcela=payload.valor_parcela,
        intervalo=payload.intervalo,
    )
    return {
        "parcelas": parcelas_para_resposta(parcelas),
        "valor_total": float(sum(p.valor for p in parcelas)),
        "numero_parcelas": len(parcelas),
    }


@router.post("", response_model=ResultadoLancamentoResponse, status_code=201)
def submeter(
    payload: LancamentoLoteRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Grava todas as parcelas em uma única transação; com erros de validação nada é gravado."""
    resultado = processar_lote(db, current_user.user_id, payload.model_dump())
    if not resultado["sucesso"]:
        return JSONResponse(status_code=400, content=resultado)
    return resultado


@router.get("/{lote_id}", response_model=List[ContaPagarResponse])
def obter_lote(
    lote_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    contas = listar_lote(db, current_user.user_id, lote_id)
    if not contas:
        raise HTTPException(status_code=404, detail="Lote não encontrado")
    return contas


@router.post("/{lote_id}/cancelar", response_model=CancelarLoteResponse)
def cancelar(
    lote_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not listar_lote(db, current_user.user_id, lote_id):
        raise HTTPException(status_code=404, detail="Lote não encontrado")
    return {"lote_id": lote_id, "canceladas": cancelar_lote(db, current_user.user_id, lote_id)}
