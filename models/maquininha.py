# models/maquininha.py
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey, DECIMAL, Text, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base, SCHEMA, JSONType


class Maquininha(Base):
    """Terminal de cartão (Rede ou Sipag) vinculado a um banco de liquidação."""

    __tablename__ = "maquininha"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey(f"{SCHEMA}.usuario.id", ondelete="CASCADE"), nullable=False, index=True)

    nome = Column(String(255), nullable=False)
    operadora = Column(String(20), nullable=False)  # rede, sipag
    codigo_estabelecimento = Column(String(50), nullable=False)
    banco_id = Column(Integer, ForeignKey(f"{SCHEMA}.banco.id", ondelete="RESTRICT"), nullable=False, index=True)
    ativo = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    banco = relationship("Banco")
    taxas = relationship(
        "TaxaMaquininha",
        back_populates="maquininha",
        cascade="all, delete-orphan",
        order_by="TaxaMaquininha.id",
    )

    def __repr__(self):
        return f"<Maquininha(id={self.id}, nome='{self.nome}', operadora='{self.operadora}')>"


class TaxaMaquininha(Base):
    """Taxa cobrada por bandeira / tipo de transação."""

    __tablename__ = "taxa_maquininha"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    maquininha_id = Column(Integer, ForeignKey(f"{SCHEMA}.maquininha.id", ondelete="CASCADE"), nullable=False, index=True)

    bandeira = Column(String(30), nullable=False)  # visa, mastercard, elo, american_express, hipercard
    tipo_transacao = Column(String(30), nullable=False)  # debito, credito_vista, credito_parcelado
    parcelas_max = Column(Integer, nullable=False, default=1)
    taxa_percentual = Column(DECIMAL(7, 4), nullable=False, default=0)
    taxa_fixa = Column(DECIMAL(15, 2), nullable=False, default=0)
    ativo = Column(Boolean, nullable=False, default=True)

    maquininha = relationship("Maquininha", back_populates="taxas")

    def __repr__(self):
        return (
            f"<TaxaMaquininha(bandeira='{self.bandeira}', tipo='{self.tipo_transacao}', "
            f"taxa={self.taxa_percentual})>"
        )


class VendaMaquininha(Base):
    """Venda registrada no extrato da operadora."""

    __tablename__ = "venda_maquininha"
    __table_args__ = (
        Index("ix_venda_maquininha_periodo", "maquininha_id", "periodo_processamento"),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey(f"{SCHEMA}.usuario.id", ondelete="CASCADE"), nullable=False, index=True)
    maquininha_id = Column(Integer, ForeignKey(f"{SCHEMA}.maquininha.id", ondelete="CASCADE"), nullable=False)

    nsu = Column(String(50), nullable=True)
    data_venda = Column(Date, nullable=False)
    data_recebimento = Column(Date, nullable=False)
    bandeira = Column(String(30), nullable=False)
    tipo_transacao = Column(String(30), nullable=False)
    parcelas = Column(Integer, nullable=False, default=1)

    valor_bruto = Column(DECIMAL(15, 2), nullable=False)
    valor_taxa = Column(DECIMAL(15, 2), nullable=False, default=0)
    valor_liquido = Column(DECIMAL(15, 2), nullable=False)
    taxa_percentual_cobrada = Column(DECIMAL(7, 4), nullable=True)

    periodo_processamento = Column(String(7), nullable=False)  # YYYY-MM
    status = Column(String(20), nullable=False, default="pendente", index=True)  # pendente, conciliado, divergente
    recebimento_id = Column(Integer, ForeignKey(f"{SCHEMA}.recebimento_bancario.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    maquininha = relationship("Maquininha")

    def __repr__(self):
        return f"<VendaMaquininha(id={self.id}, nsu='{self.nsu}', bruto={self.valor_bruto}, status='{self.status}')>"


class RecebimentoBancario(Base):
    """Crédito no extrato bancário que deve corresponder a vendas de maquininha."""

    __tablename__ = "recebimento_bancario"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey(f"{SCHEMA}.usuario.id", ondelete="CASCADE"), nullable=False, index=True)
    banco_id = Column(Integer, ForeignKey(f"{SCHEMA}.banco.id", ondelete="CASCADE"), nullable=False, index=True)

    data_recebimento = Column(Date, nullable=False, index=True)
    valor = Column(DECIMAL(15, 2), nullable=False)
    descricao = Column(String(255), nullable=True)
    documento = Column(String(100), nullable=True)
    tipo_operacao = Column(String(30), nullable=True)
    periodo_processamento = Column(String(7), nullable=False)
    status = Column(String(20), nullable=False, default="pendente")  # pendente, conciliado

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<RecebimentoBancario(id={self.id}, data='{self.data_recebimento}', valor={self.valor})>"


class ConciliacaoMaquininha(Base):
    """Resultado de uma conciliação de período de uma maquininha."""

    __tablename__ = "conciliacao_maquininha"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey(f"{SCHEMA}.usuario.id", ondelete="CASCADE"), nullable=False, index=True)
    maquininha_id = Column(Integer, ForeignKey(f"{SCHEMA}.maquininha.id", ondelete="CASCADE"), nullable=False, index=True)

    periodo = Column(String(7), nullable=False)
    data_conciliacao = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    total_vendas = Column(DECIMAL(15, 2), nullable=False, default=0)
    total_recebimentos = Column(DECIMAL(15, 2), nullable=False, default=0)
    total_taxas = Column(DECIMAL(15, 2), nullable=False, default=0)
    diferenca = Column(DECIMAL(15, 2), nullable=False, default=0)

    status = Column(String(20), nullable=False)  # ok, divergencia
    observacoes = Column(Text, nullable=True)
    detalhes = Column(JSONType, nullable=True)

    maquininha = relationship("Maquininha")

    def __repr__(self):
        return f"<ConciliacaoMaquininha(id={self.id}, periodo='{self.periodo}', status='{self.status}')>"
