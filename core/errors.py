# core/errors.py
"""
Erros de domínio da aplicação.

Os services levantam AppError com um código padronizado; o handler
registrado em main.py converte para a resposta HTTP correspondente.
"""
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    # Validação (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    REQUIRED_FIELD = "REQUIRED_FIELD"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_DATE = "INVALID_DATE"
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"

    # Autenticação (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    # Autorização (403)
    FORBIDDEN = "FORBIDDEN"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    OPERATION_NOT_ALLOWED = "OPERATION_NOT_ALLOWED"

    # Recursos (404 / 409)
    NOT_FOUND = "NOT_FOUND"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"

    # Limites (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Servidor (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    TRANSACTION_ERROR = "TRANSACTION_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"


STATUS_POR_CODIGO: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.REQUIRED_FIELD: 400,
    ErrorCode.INVALID_AMOUNT: 400,
    ErrorCode.INVALID_DATE: 400,
    ErrorCode.BUSINESS_RULE_VIOLATION: 400,
    ErrorCode.CONSTRAINT_VIOLATION: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.TOKEN_EXPIRED: 401,
    ErrorCode.INVALID_CREDENTIALS: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.INSUFFICIENT_PERMISSIONS: 403,
    ErrorCode.OPERATION_NOT_ALLOWED: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    ErrorCode.ACCOUNT_NOT_FOUND: 404,
    ErrorCode.DUPLICATE_RESOURCE: 409,
    ErrorCode.RATE_LIMIT_EXCEEDED: 429,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.DATABASE_ERROR: 500,
    ErrorCode.CONFIGURATION_ERROR: 500,
    ErrorCode.TRANSACTION_ERROR: 500,
    ErrorCode.EXTERNAL_SERVICE_ERROR: 502,
    ErrorCode.SERVICE_UNAVAILABLE: 503,
    ErrorCode.TIMEOUT_ERROR: 504,
}


class AppError(Exception):
    """Erro de aplicação com código padronizado e status HTTP associado."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details
        self.status_code = STATUS_POR_CODIGO.get(code, 500)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detail": self.message,
            "code": self.code.value,
            "details": self.details,
        }

    def __repr__(self):
        return f"<AppError(code={self.code.value}, status={self.status_code}, message='{self.message}')>"


class ValidationError(AppError):
    def __init__(self, errors: List[str], message: str = "Dados inválidos"):
        super().__init__(ErrorCode.VALIDATION_ERROR, message, {"errors": list(errors)})
        self.errors = list(errors)


class NotFoundError(AppError):
    def __init__(self, entidade: str):
        super().__init__(ErrorCode.NOT_FOUND, f"{entidade} não encontrado(a)")


class BusinessRuleError(AppError):
    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(ErrorCode.BUSINESS_RULE_VIOLATION, message, details)


class DuplicateError(AppError):
    def __init__(self, message: str):
        super().__init__(ErrorCode.DUPLICATE_RESOURCE, message)


def from_exception(exc: BaseException) -> AppError:
    """Converte qualquer exceção em AppError (INTERNAL_ERROR se desconhecida)."""
    if isinstance(exc, AppError):
        return exc
    return AppError(ErrorCode.INTERNAL_ERROR, f"Erro interno do servidor: {exc}")
