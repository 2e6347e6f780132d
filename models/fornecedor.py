# models/fornecedor.py
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey, DECIMAL, Text, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base, SCHEMA


class Fornecedor(Base):
    """Fornecedor (pessoa física ou jurídica) das contas a pagar."""

    __tablename__ = "fornecedor"
    __table_args__ = (
        Index("ix_fornecedor_usuario_documento", "usuario_id", "documento"),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    usuario_id = Column(Integer, ForeignKey(f"{SCHEMA}.usuario.id", ondelete="CASCADE"), nullable=False, index=True)

    nome = Column(String(255), nullable=False)
    nome_fantasia = Column(String(255), nullable=True)
    documento = Column(String(14), nullable=True)  # apenas dígitos (CPF ou CNPJ)
    tipo = Column(String(20), nullable=False, default="pessoa_juridica")  # pessoa_fisica, pessoa_juridica
    tipo_fornecedor = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    telefone = Column(String(20), nullable=True)
    inscricao_estadual = Column(String(20), nullable=True)

    # Endereço
    cep = Column(String(8), nullable=True)
    logradouro = Column(String(255), nullable=True)
    numero = Column(String(20), nullable=True)
    complemento = Column(String(100), nullable=True)
    bairro = Column(String(100), nullable=True)
    cidade = Column(String(100), nullable=True)
    estado = Column(String(2), nullable=True)

    categoria_padrao_id = Column(Integer, ForeignKey(f"{SCHEMA}.plano_contas.id", ondelete="SET NULL"), nullable=True)
    observacoes = Column(Text, nullable=True)
    ativo = Column(Boolean, nullable=False, default=True, index=True)

    # Totais atualizados a cada compra
    total_compras = Column(Integer, nullable=False, default=0)
    valor_total = Column(DECIMAL(15, 2), nullable=False, default=0)
    ultima_compra = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    categoria_padrao = relationship("PlanoContas")

    def __repr__(self):
        return f"<Fornecedor(id={self.id}, nome='{self.nome}', documento='{self.documento}')>"
