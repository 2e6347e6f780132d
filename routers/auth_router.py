from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from db import get_db
from middleware.auth import get_current_user, CurrentUser
from schemas.auth_schema import (
    RegisterRequest,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    TokenResponse,
    UserMe,
)
from services.auth_service import (
    register,
    login,
    refresh_access_token,
)
from models import Usuario


router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=LoginResponse, status_code=201)
def auth_register(payload: RegisterRequest, db: Session = Depends(get_db)):
    return register(db, payload.email, payload.nome, payload.password)


@router.post("/login", response_model=LoginResponse)
def auth_login(payload: LoginRequest, db: Session = Depends(get_db)):
    return login(db, payload.email, payload.password)


@router.post("/refresh", response_model=TokenResponse)
def auth_refresh(payload: RefreshTokenRequest, db: Session = Depends(get_db)):
    return refresh_access_token(db, payload.refresh_token)


@router.get("/me", response_model=UserMe)
def auth_me(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = db.query(Usuario).filter(Usuario.id == current_user.user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="Usuário não encontrado")
    return user
