# models/venda.py
from sqlalchemy import Column, Integer, String, Date, Time, DateTime, ForeignKey, DECIMAL, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base, SCHEMA


class Venda(Base):
    """Venda registrada pelo usuário (entra como receita na DRE e no fluxo de caixa)."""

    __tablename__ = "venda"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey(f"{SCHEMA}.usuario.id", ondelete="CASCADE"), nullable=False, index=True)

    cliente_id = Column(Integer, ForeignKey(f"{SCHEMA}.cliente.id", ondelete="SET NULL"), nullable=True, index=True)
    plano_conta_id = Column(Integer, ForeignKey(f"{SCHEMA}.plano_contas.id", ondelete="SET NULL"), nullable=True, index=True)
    banco_id = Column(Integer, ForeignKey(f"{SCHEMA}.banco.id", ondelete="SET NULL"), nullable=True)

    data_venda = Column(Date, nullable=False, index=True)
    hora_venda = Column(Time, nullable=True)

    valor_total = Column(DECIMAL(15, 2), nullable=False)
    desconto = Column(DECIMAL(15, 2), nullable=False, default=0)
    valor_final = Column(DECIMAL(15, 2), nullable=False)

    forma_pagamento = Column(String(30), nullable=False, default="dinheiro")
    parcelas = Column(Integer, nullable=False, default=1)
    tipo_venda = Column(String(30), nullable=True)
    vendedor = Column(String(255), nullable=True)
    comissao_percentual = Column(DECIMAL(7, 4), nullable=True)
    comissao_valor = Column(DECIMAL(15, 2), nullable=True)

    status = Column(String(20), nullable=False, default="ativa", index=True)  # ativa, cancelada
    observacoes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    cliente = relationship("Cliente")
    plano_conta = relationship("PlanoContas")

    def __repr__(self):
        return f"<Venda(id={self.id}, data='{self.data_venda}', valor_final={self.valor_final})>"
