# models/pagador.py
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey, DECIMAL, Text, Index
from sqlalchemy.sql import func
from db import Base, SCHEMA


class Pagador(Base):
    """Pagador: origem de recebimentos que não são vendas (aluguéis, repasses, etc.)."""

    __tablename__ = "pagador"
    __table_args__ = (
        Index("ix_pagador_usuario_documento", "usuario_id", "documento"),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey(f"{SCHEMA}.usuario.id", ondelete="CASCADE"), nullable=False, index=True)

    nome = Column(String(255), nullable=False)
    documento = Column(String(14), nullable=True)
    tipo = Column(String(20), nullable=False, default="pessoa_fisica")
    email = Column(String(255), nullable=True)
    telefone = Column(String(20), nullable=True)

    cep = Column(String(8), nullable=True)
    logradouro = Column(String(255), nullable=True)
    numero = Column(String(20), nullable=True)
    complemento = Column(String(100), nullable=True)
    bairro = Column(String(100), nullable=True)
    cidade = Column(String(100), nullable=True)
    estado = Column(String(2), nullable=True)

    observacoes = Column(Text, nullable=True)
    ativo = Column(Boolean, nullable=False, default=True, index=True)

    total_recebimentos = Column(Integer, nullable=False, default=0)
    valor_total = Column(DECIMAL(15, 2), nullable=False, default=0)
    ultimo_recebimento = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Pagador(id={self.id}, nome='{self.nome}')>"
