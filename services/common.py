"""
Utilitários compartilhados pelos services: auditoria, busca com escopo
de usuário e aplicação de atualizações parciais.
"""
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional, Type

from sqlalchemy.orm import Session

from core.errors import NotFoundError
from models import AuditLog


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _json_safe(valor: Any) -> Any:
    if isinstance(valor, Decimal):
        return float(valor)
    if isinstance(valor, (date, datetime)):
        return valor.isoformat()
    return valor


def snapshot(obj: Any, campos: Optional[list] = None) -> Dict[str, Any]:
    """Valores das colunas de um registro, serializáveis em JSON (para auditoria)."""
    colunas = campos or [c.name for c in obj.__table__.columns]
    return {c: _json_safe(getattr(obj, c, None)) for c in colunas}


def _log_audit(
    db: Session,
    usuario_id: Optional[int],
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    old_values: Optional[Dict[str, Any]] = None,
    new_values: Optional[Dict[str, Any]] = None,
) -> None:
    log = AuditLog(
        usuario_id=usuario_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        old_values=old_values,
        new_values=new_values,
    )
    db.add(log)


def buscar_do_usuario(
    db: Session,
    model: Type[Any],
    registro_id: int,
    usuario_id: int,
    entidade: str,
    incluir_excluidos: bool = False,
):
    """Busca um registro do usuário ou levanta NotFoundError."""
    query = db.query(model).filter(model.id == registro_id, model.usuario_id == usuario_id)
    if not incluir_excluidos and hasattr(model, "deleted_at"):
        query = query.filter(model.deleted_at.is_(None))
    obj = query.first()
    if obj is None:
        raise NotFoundError(entidade)
    return obj


def aplicar_alteracoes(obj: Any, dados: Dict[str, Any]) -> Dict[str, Any]:
    """Aplica os campos informados e devolve os valores antigos dos campos alterados."""
    antigos = {}
    for campo, valor in dados.items():
        atual = getattr(obj, campo)
        if atual != valor:
            antigos[campo] = _json_safe(atual)
            setattr(obj, campo, valor)
    return antigos
