# schemas/validators.py
"""
Funções reutilizadas pelos field_validator dos schemas.
"""
from typing import Optional

from tools.validacoes import (
    somente_digitos,
    validate_documento,
    validate_email,
    validate_phone,
    validate_cep,
)


def normalizar_documento(v: Optional[str]) -> Optional[str]:
    if v is None or not str(v).strip():
        return None
    resultado = validate_documento(v)
    if not resultado.valid:
        raise ValueError(resultado.errors[0])
    return somente_digitos(v)


def normalizar_telefone(v: Optional[str]) -> Optional[str]:
    if v is None or not str(v).strip():
        return None
    resultado = validate_phone(v)
    if not resultado.valid:
        raise ValueError(resultado.errors[0])
    return somente_digitos(v)


def normalizar_cep(v: Optional[str]) -> Optional[str]:
    if v is None or not str(v).strip():
        return None
    resultado = validate_cep(v)
    if not resultado.valid:
        raise ValueError(resultado.errors[0])
    return somente_digitos(v)


def normalizar_email(v: Optional[str]) -> Optional[str]:
    if v is None or not str(v).strip():
        return None
    resultado = validate_email(v.strip())
    if not resultado.valid:
        raise ValueError(resultado.errors[0])
    return v.strip().lower()
