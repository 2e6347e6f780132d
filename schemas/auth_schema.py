# schemas/auth_schema.py
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from core.security import validate_password_strength


# ============================================================
# CADASTRO
# ============================================================

class RegisterRequest(BaseModel):
    """Schema para cadastro de novo usuário."""
    email: EmailStr
    nome: str = Field(..., min_length=2, max_length=255)
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        valido, mensagem = validate_password_strength(v)
        if not valido:
            raise ValueError(mensagem)
        return v


# ============================================================
# LOGIN
# ============================================================

class LoginRequest(BaseModel):
    """Schema para requisição de login."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserInfo(BaseModel):
    """Informações básicas do usuário."""
    id: int
    email: str
    nome: str
    is_admin: bool


class LoginResponse(BaseModel):
    """Schema para resposta de login."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # segundos
    user: UserInfo


# ============================================================
# TOKEN
# ============================================================

class RefreshTokenRequest(BaseModel):
    """Schema para renovação de token."""
    refresh_token: str


class TokenResponse(BaseModel):
    """Schema para resposta de token."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int


# ============================================================
# ME
# ============================================================

class UserMe(UserInfo):
    """Dados do usuário autenticado."""
    is_active: bool
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    model_config = {"from_attributes": True}
