from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from db import get_db
from middleware.auth import get_current_user, CurrentUser
from schemas.configuracao_schema import (
    ConfiguracaoUpdate,
    ConfiguracaoResponse,
    ValidacaoCampoRequest,
    ValidacaoCampoResponse,
)
from services.configuracao_service import obter_configuracao, atualizar_configuracao
from tools.validacoes import VALIDADORES_CAMPO, validar_campo, validate_payable, validate_receivable

router = APIRouter(prefix="/configuracoes", tags=["Configurações"])
validacoes_router = APIRouter(prefix="/validacoes", tags=["Validações"])

FORMULARIOS = {
    "conta-pagar": validate_payable,
    "conta-receber": validate_receivable,
}


@router.get("", response_model=ConfiguracaoResponse)
def obter(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return obter_configuracao(db, current_user.user_id)


@router.put("", response_model=ConfiguracaoResponse)
def atualizar(
    dados: ConfiguracaoUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return atualizar_configuracao(db, current_user.user_id, dados.model_dump(exclude_unset=True))


# ============================================================
# VALIDAÇÃO EM TEMPO REAL
# ============================================================

@validacoes_router.post("/formulario/{tipo}", response_model=ValidacaoCampoResponse)
def validar_formulario(
    tipo: str,
    dados: Dict[str, Any],
    current_user: CurrentUser = Depends(get_current_user),
):
    """Valida o formulário inteiro de uma conta e devolve todos os erros de uma vez."""
    validador = FORMULARIOS.get(tipo)
    if validador is None:
        raise HTTPException(status_code=404, detail=f"Formulário desconhecido: {tipo}")
    return validador(dados, is_new=True).to_dict()


@validacoes_router.post("/{tipo}", response_model=ValidacaoCampoResponse)
def validar(
    tipo: str,
    payload: ValidacaoCampoRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    if tipo not in VALIDADORES_CAMPO:
        raise HTTPException(status_code=404, detail=f"Tipo de validação desconhecido: {tipo}")
    return validar_campo(tipo, payload.valor).to_dict()
