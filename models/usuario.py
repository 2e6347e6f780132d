# models/usuario.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base, SCHEMA


class Usuario(Base):
    """Modelo de Usuário do sistema. Todos os lançamentos pertencem a um usuário."""

    __tablename__ = "usuario"
    __table_args__ = {"schema": SCHEMA}

    # Colunas principais
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    senha_hash = Column(String(255), nullable=False)
    nome = Column(String(255), nullable=False)

    # Flags
    is_admin = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Relacionamentos
    bancos = relationship("Banco", back_populates="usuario", cascade="all, delete-orphan", lazy="dynamic")
    configuracao = relationship(
        "ConfiguracaoUsuario",
        back_populates="usuario",
        cascade="all, delete-orphan",
        uselist=False,
    )

    def __repr__(self):
        return f"<Usuario(id={self.id}, email='{self.email}', nome='{self.nome}')>"
