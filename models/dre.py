# models/dre.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, DECIMAL, Index
from sqlalchemy.sql import func
from db import Base, SCHEMA


class DadosEssenciaisDRE(Base):
    """Dados informados manualmente para a DRE de um mês (CMV, deduções, estoque)."""

    __tablename__ = "dados_essenciais_dre"
    __table_args__ = (
        Index("ix_dados_dre_usuario_mes", "usuario_id", "mes_referencia", unique=True),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey(f"{SCHEMA}.usuario.id", ondelete="CASCADE"), nullable=False, index=True)

    mes_referencia = Column(String(7), nullable=False)  # YYYY-MM
    cmv_valor = Column(DECIMAL(15, 2), nullable=True)
    deducoes_receita = Column(DECIMAL(15, 2), nullable=True)
    percentual_impostos = Column(DECIMAL(7, 4), nullable=True)
    percentual_devolucoes = Column(DECIMAL(7, 4), nullable=True)
    estoque_inicial = Column(DECIMAL(15, 2), nullable=True)
    estoque_final = Column(DECIMAL(15, 2), nullable=True)
    compras_periodo = Column(DECIMAL(15, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<DadosEssenciaisDRE(mes='{self.mes_referencia}', cmv={self.cmv_valor})>"
