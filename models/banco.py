# models/banco.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, DECIMAL, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base, SCHEMA


class Banco(Base):
    """Conta bancária do usuário (corrente, poupança ou investimento)."""

    __tablename__ = "banco"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey(f"{SCHEMA}.usuario.id", ondelete="CASCADE"), nullable=False, index=True)

    nome = Column(String(255), nullable=False)
    codigo_banco = Column(String(10), nullable=True)
    agencia = Column(String(10), nullable=True)
    conta = Column(String(20), nullable=True)
    digito_verificador = Column(String(2), nullable=True)
    tipo_conta = Column(String(20), nullable=False, default="corrente")  # corrente, poupanca, investimento

    saldo_inicial = Column(DECIMAL(15, 2), nullable=False, default=0)
    saldo_atual = Column(DECIMAL(15, 2), nullable=False, default=0)
    limite_conta = Column(DECIMAL(15, 2), nullable=True)

    gerente = Column(String(255), nullable=True)
    telefone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    observacoes = Column(Text, nullable=True)
    suporta_ofx = Column(Boolean, nullable=False, default=False)
    ativo = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    usuario = relationship("Usuario", back_populates="bancos")

    def __repr__(self):
        return f"<Banco(id={self.id}, nome='{self.nome}', saldo_atual={self.saldo_atual})>"
