# models/audit_log.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base, SCHEMA, JSONType


class AuditLog(Base):
    """Modelo para log de auditoria de ações do sistema."""

    __tablename__ = "audit_log"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.usuario.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action = Column(String(50), nullable=False, index=True)
    entity_type = Column(String(100), nullable=True)
    entity_id = Column(Integer, nullable=True)
    old_values = Column(JSONType, nullable=True)
    new_values = Column(JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    usuario = relationship("Usuario")

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', entity_type='{self.entity_type}')>"


# Constantes de ações para auditoria
class AuditAction:
    """Constantes para tipos de ação no audit log."""

    # Auth
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"
    REGISTER = "REGISTER"

    # CRUD
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    # Operações financeiras
    BAIXA = "BAIXA"
    ESTORNO = "ESTORNO"
    CANCELAMENTO = "CANCELAMENTO"
    LOTE = "LOTE"
    CONCILIACAO = "CONCILIACAO"
    IMPORTACAO = "IMPORTACAO"
