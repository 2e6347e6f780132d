# models/cliente.py
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, DECIMAL, Text, Index
from sqlalchemy.sql import func
from db import Base, SCHEMA


class Cliente(Base):
    """Cliente das vendas e contas a receber."""

    __tablename__ = "cliente"
    __table_args__ = (
        Index("ix_cliente_usuario_documento", "usuario_id", "documento"),
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

    status = Column(String(20), nullable=False, default="ativo", index=True)  # ativo, inativo, bloqueado
    observacoes = Column(Text, nullable=True)

    total_compras = Column(Integer, nullable=False, default=0)
    valor_total = Column(DECIMAL(15, 2), nullable=False, default=0)
    ultima_compra = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Cliente(id={self.id}, nome='{self.nome}', status='{self.status}')>"
