# models/cheque.py
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, DECIMAL, Text, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base, SCHEMA, JSONType


class Cheque(Base):
    """Cheque emitido contra uma conta bancária."""

    __tablename__ = "cheque"
    __table_args__ = (
        Index("ix_cheque_banco_numero", "banco_id", "numero_cheque", unique=True),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey(f"{SCHEMA}.usuario.id", ondelete="CASCADE"), nullable=False, index=True)
    banco_id = Column(Integer, ForeignKey(f"{SCHEMA}.banco.id", ondelete="RESTRICT"), nullable=False, index=True)

    numero_cheque = Column(String(6), nullable=False)  # sempre com 6 dígitos
    valor = Column(DECIMAL(15, 2), nullable=False)

    data_emissao = Column(Date, nullable=False, index=True)
    data_vencimento = Column(Date, nullable=True)
    data_compensacao = Column(Date, nullable=True)

    beneficiario_nome = Column(String(255), nullable=True)
    beneficiario_documento = Column(String(14), nullable=True)
    tipo_beneficiario = Column(String(20), nullable=True)  # fornecedor, outro
    fornecedor_id = Column(Integer, ForeignKey(f"{SCHEMA}.fornecedor.id", ondelete="SET NULL"), nullable=True)
    conta_pagar_id = Column(Integer, ForeignKey(f"{SCHEMA}.conta_pagar.id", ondelete="SET NULL"), nullable=True)
    finalidade = Column(String(255), nullable=True)

    status = Column(String(20), nullable=False, default="pendente", index=True)  # pendente, compensado, cancelado, devolvido
    motivo_cancelamento = Column(Text, nullable=True)
    motivo_devolucao = Column(Text, nullable=True)
    observacoes = Column(Text, nullable=True)

    # Lista de operações: [{acao, data, status_anterior, status_novo, observacao}]
    historico = Column(JSONType, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    banco = relationship("Banco")
    fornecedor = relationship("Fornecedor")

    def __repr__(self):
        return f"<Cheque(id={self.id}, numero='{self.numero_cheque}', valor={self.valor}, status='{self.status}')>"
