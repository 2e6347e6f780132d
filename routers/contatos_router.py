"""
Routers de fornecedores, clientes e pagadores.

Os três cadastros compartilham as mesmas rotas de CRUD; cada um ganha
um APIRouter próprio montado por `_montar_router`.
"""
from typing import List, Optional, Type

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from db import get_db
from middleware.auth import get_current_user, CurrentUser
from schemas.contato_schema import (
    FornecedorCreate,
    FornecedorUpdate,
    FornecedorResponse,
    FornecedorEstatisticas,
    ClienteCreate,
    ClienteUpdate,
    ClienteResponse,
    PagadorCreate,
    PagadorUpdate,
    PagadorResponse,
    PagadorEstatisticas,
)
from services.contato_service import (
    CadastroContatoService,
    fornecedor_service,
    cliente_service,
    pagador_service,
    estatisticas_fornecedores,
    estatisticas_pagadores,
)


def _montar_router(
    prefix: str,
    tag: str,
    service: CadastroContatoService,
    schema_create: Type[BaseModel],
    schema_update: Type[BaseModel],
    schema_response: Type[BaseModel],
    estatisticas=None,
    schema_estatisticas: Optional[Type[BaseModel]] = None,
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("/", response_model=List[schema_response])
    def listar(
        busca: Optional[str] = None,
        ativo: Optional[bool] = None,
        tipo: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
    ):
        return service.listar(db, current_user.user_id, busca, ativo, tipo, skip, limit)

    # Registrada antes de /{registro_id} para não ser capturada por ela
    if estatisticas is not None:
        @router.get("/estatisticas", response_model=schema_estatisticas)
        def obter_estatisticas(
            current_user: CurrentUser = Depends(get_current_user),
            db: Session = Depends(get_db),
        ):
            return estatisticas(db, current_user.user_id)

    @router.get("/{registro_id}", response_model=schema_response)
    def obter(
        registro_id: int,
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
    ):
        return service.buscar(db, current_user.user_id, registro_id)

    @router.post("/", response_model=schema_response, status_code=201)
    def criar(
        dados: schema_create,
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
    ):
        return service.criar(db, current_user.user_id, dados.model_dump())

    @router.put("/{registro_id}", response_model=schema_response)
    def atualizar(
        registro_id: int,
        dados: schema_update,
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
    ):
        return service.atualizar(db, current_user.user_id, registro_id, dados.model_dump(exclude_unset=True))

    @router.patch("/{registro_id}/toggle-status", response_model=schema_response)
    def alternar_status(
        registro_id: int,
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
    ):
        return service.alternar_status(db, current_user.user_id, registro_id)

    @router.delete("/{registro_id}", status_code=204)
    def excluir(
        registro_id: int,
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
    ):
        service.deletar(db, current_user.user_id, registro_id)
        return None

    return router


fornecedores_router = _montar_router(
    "/fornecedores", "Fornecedores", fornecedor_service,
    FornecedorCreate, FornecedorUpdate, FornecedorResponse,
    estatisticas_fornecedores, FornecedorEstatisticas,
)

clientes_router = _montar_router(
    "/clientes", "Clientes", cliente_service,
    ClienteCreate, ClienteUpdate, ClienteResponse,
)

pagadores_router = _montar_router(
    "/pagadores", "Pagadores", pagador_service,
    PagadorCreate, PagadorUpdate, PagadorResponse,
    estatisticas_pagadores, PagadorEstatisticas,
)
