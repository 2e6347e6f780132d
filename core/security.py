# core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from .config import settings

# Contexto de hash para senhas (bcrypt)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

SPECIAL_CHARS = "!@#$%^&*()_+-=[]{}|;:,.<>?/"


def hash_password(password: str) -> str:
    """Gera hash da senha usando bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica se a senha corresponde ao hash."""
    return pwd_context.verify(plain_password, hashed_password)


def validate_password_strength(password: str) -> tuple[bool, str]:
    """
    Valida a força da senha conforme política definida.
    Retorna (válido, mensagem_erro).
    """
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        return False, f"Senha deve ter no mínimo {settings.PASSWORD_MIN_LENGTH} caracteres"

    if settings.PASSWORD_REQUIRE_UPPERCASE and not any(c.isupper() for c in password):
        return False, "Senha deve conter pelo menos uma letra maiúscula"

    if settings.PASSWORD_REQUIRE_LOWERCASE and not any(c.islower() for c in password):
        return False, "Senha deve conter pelo menos uma letra minúscula"

    if settings.PASSWORD_REQUIRE_DIGIT and not any(c.isdigit() for c in password):
        return False, "Senha deve conter pelo menos um número"

    if settings.PASSWORD_REQUIRE_SPECIAL and not any(c in SPECIAL_CHARS for c in password):
        return False, "Senha deve conter pelo menos um caractere especial"

    return True, ""


def _encode(payload: dict) -> str:
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(
    user_id: int,
    is_admin: bool = False,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Cria token JWT de acesso.

    Args:
        user_id: ID do usuário dono dos lançamentos
        is_admin: Se o usuário é administrador
        expires_delta: Tempo de expiração customizado
    """
    agora = datetime.now(timezone.utc)
    expire = agora + (
        expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return _encode({
        "sub": str(user_id),
        "is_admin": is_admin,
        "exp": expire,
        "iat": agora,
        "type": "access",
    })


def create_refresh_token(user_id: int) -> str:
    """Cria refresh token JWT (validade maior)."""
    agora = datetime.now(timezone.utc)
    return _encode({
        "sub": str(user_id),
        "exp": agora + timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS),
        "iat": agora,
        "type": "refresh",
    })


def decode_token(token: str) -> Optional[dict]:
    """Decodifica e valida um token JWT. Retorna None se inválido ou expirado."""
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        return None
