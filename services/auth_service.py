from typing import Dict, Any

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import DuplicateError
from core.security import (
    verify_password,
    hash_password,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from models import Usuario, ConfiguracaoUsuario, AuditAction
from services.common import _now_utc, _log_audit


def _user_info(user: Usuario) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "nome": user.nome,
        "is_admin": bool(user.is_admin),
    }


def _tokens(user: Usuario) -> Dict[str, Any]:
    return {
        "access_token": create_access_token(user_id=user.id, is_admin=user.is_admin),
        "refresh_token": create_refresh_token(user_id=user.id),
        "token_type": "bearer",
        "expires_in": settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "user": _user_info(user),
    }


def register(db: Session, email: str, nome: str, password: str) -> Dict[str, Any]:
    email = email.lower()
    if db.query(Usuario).filter(Usuario.email == email).first():
        raise DuplicateError("Email já cadastrado")

    user = Usuario(email=email, nome=nome, senha_hash=hash_password(password))
    db.add(user)
    db.flush()

    db.add(ConfiguracaoUsuario(
        usuario_id=user.id,
        dias_alerta_vencimento=settings.DIAS_ALERTA_VENCIMENTO,
    ))
    _log_audit(db, user.id, AuditAction.REGISTER, "usuario", user.id)
    user.last_login = _now_utc()
    db.commit()
    db.refresh(user)

    return _tokens(user)


def login(
    db: Session,
    email: str,
    password: str,
) -> Dict[str, Any]:
    user = db.query(Usuario).filter(Usuario.email == email.lower()).first()
    if not user or not user.is_active:
        _log_audit(db, None, AuditAction.LOGIN_FAILED, "usuario", None)
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciais inválidas",
        )

    if not verify_password(password, user.senha_hash):
        _log_audit(db, user.id, AuditAction.LOGIN_FAILED, "usuario", user.id)
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciais inválidas",
        )

    user.last_login = _now_utc()
    _log_audit(db, user.id, AuditAction.LOGIN, "usuario", user.id)
    db.commit()

    return _tokens(user)


def refresh_access_token(db: Session, refresh_token: str) -> Dict[str, Any]:
    payload = decode_token(refresh_token)
    if payload is None or payload.get("type") != "refresh":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token inválido")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token inválido")

    user = db.query(Usuario).filter(Usuario.id == int(user_id)).first()
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Usuário inválido")

    return {
        "access_token": create_access_token(user_id=user.id, is_admin=user.is_admin),
        "token_type": "bearer",
        "expires_in": settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }
