# models/conta_receber.py
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, DECIMAL, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base, SCHEMA


class ContaReceber(Base):
    """Conta a receber de um cliente ou pagador."""

    __tablename__ = "conta_receber"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey(f"{SCHEMA}.usuario.id", ondelete="CASCADE"), nullable=False, index=True)

    cliente_id = Column(Integer, ForeignKey(f"{SCHEMA}.cliente.id", ondelete="RESTRICT"), nullable=True, index=True)
    pagador_id = Column(Integer, ForeignKey(f"{SCHEMA}.pagador.id", ondelete="RESTRICT"), nullable=True, index=True)
    plano_conta_id = Column(Integer, ForeignKey(f"{SCHEMA}.plano_contas.id", ondelete="RESTRICT"), nullable=True, index=True)
    banco_id = Column(Integer, ForeignKey(f"{SCHEMA}.banco.id", ondelete="RESTRICT"), nullable=True, index=True)

    descricao = Column(String(255), nullable=False)
    documento_referencia = Column(String(100), nullable=True)

    data_emissao = Column(Date, nullable=True)
    data_vencimento = Column(Date, nullable=False, index=True)
    data_recebimento = Column(Date, nullable=True)

    valor_original = Column(DECIMAL(15, 2), nullable=False)
    desconto = Column(DECIMAL(15, 2), nullable=False, default=0)
    acrescimo = Column(DECIMAL(15, 2), nullable=False, default=0)
    valor_final = Column(DECIMAL(15, 2), nullable=False)
    valor_recebido = Column(DECIMAL(15, 2), nullable=True)

    status = Column(String(20), nullable=False, default="pendente", index=True)  # pendente, recebido, vencido, cancelado
    forma_recebimento = Column(String(30), nullable=True)

    parcela_atual = Column(Integer, nullable=False, default=1)
    total_parcelas = Column(Integer, nullable=False, default=1)
    lote_id = Column(String(36), nullable=True, index=True)

    observacoes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    cliente = relationship("Cliente")
    pagador = relationship("Pagador")
    plano_conta = relationship("PlanoContas")
    banco = relationship("Banco")

    def __repr__(self):
        return (
            f"<ContaReceber(id={self.id}, descricao='{self.descricao}', "
            f"valor_final={self.valor_final}, status='{self.status}')>"
        )
