# middleware/auth.py
"""
Middleware de autenticação - Validação de JWT e usuário.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from db import get_db
from core.security import decode_token
from models import Usuario

# Security scheme para Swagger
security = HTTPBearer(auto_error=False)


class CurrentUser:
    """Contexto do usuário atual."""

    def __init__(
        self,
        user_id: int,
        email: str,
        nome: str,
        is_admin: bool,
    ):
        self.user_id = user_id
        self.email = email
        self.nome = nome
        self.is_admin = is_admin

    def __repr__(self):
        return f"<CurrentUser(id={self.user_id}, email='{self.email}')>"


def _nao_autorizado(detalhe: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detalhe,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """
    Dependency que valida o token JWT e retorna o usuário atual.

    Raises:
        HTTPException 401: Se token inválido ou usuário não encontrado
    """
    if credentials is None:
        raise _nao_autorizado("Token de autenticação não fornecido")

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise _nao_autorizado("Token inválido ou expirado")

    # Refresh token não serve para acessar a API
    if payload.get("type") != "access":
        raise _nao_autorizado("Tipo de token inválido")

    user_id = payload.get("sub")
    if user_id is None:
        raise _nao_autorizado("Token inválido")

    user = db.query(Usuario).filter(Usuario.id == int(user_id)).first()
    if user is None:
        raise _nao_autorizado("Usuário não encontrado")

    if not user.is_active:
        raise _nao_autorizado("Usuário desativado")

    return CurrentUser(
        user_id=user.id,
        email=user.email,
        nome=user.nome,
        is_admin=user.is_admin or payload.get("is_admin", False),
    )
