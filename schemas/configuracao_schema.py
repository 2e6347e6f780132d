# schemas/configuracao_schema.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any, Literal

from schemas.validators import normalizar_documento


class ConfiguracaoUpdate(BaseModel):
    empresa_nome: Optional[str] = Field(None, max_length=255)
    empresa_documento: Optional[str] = None
    moeda: Optional[str] = Field(None, min_length=3, max_length=3)
    dias_alerta_vencimento: Optional[int] = Field(None, ge=0, le=90)
    tema: Optional[Literal["claro", "escuro", "sistema"]] = None
    notificacoes: Optional[Dict[str, Any]] = None

    @field_validator("empresa_documento")
    @classmethod
    def validar_documento(cls, v):
        return normalizar_documento(v)


class ConfiguracaoResponse(BaseModel):
    empresa_nome: Optional[str] = None
    empresa_documento: Optional[str] = None
    moeda: str
    dias_alerta_vencimento: int
    tema: str
    notificacoes: Optional[Dict[str, Any]] = None

    model_config = {"from_attributes": True}


class ValidacaoCampoRequest(BaseModel):
    valor: Any = None


class ValidacaoCampoResponse(BaseModel):
    valid: bool
    errors: list[str] = []
