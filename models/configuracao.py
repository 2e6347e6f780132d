# models/configuracao.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base, SCHEMA, JSONType


class ConfiguracaoUsuario(Base):
    """Preferências do usuário (uma linha por usuário)."""

    __tablename__ = "configuracao_usuario"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.usuario.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    empresa_nome = Column(String(255), nullable=True)
    empresa_documento = Column(String(14), nullable=True)
    moeda = Column(String(3), nullable=False, default="BRL")
    dias_alerta_vencimento = Column(Integer, nullable=False, default=7)
    tema = Column(String(20), nullable=False, default="claro")
    notificacoes = Column(JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    usuario = relationship("Usuario", back_populates="configuracao")

    def __repr__(self):
        return f"<ConfiguracaoUsuario(usuario_id={self.usuario_id})>"
