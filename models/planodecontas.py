from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Index, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base, SCHEMA


class PlanoContas(Base):
    """Categoria do plano de contas (árvore por plano_pai_id, classificada na DRE por tipo_dre)."""
    __tablename__ = "plano_contas"
    __table_args__ = (
        Index(
            "ix_plano_contas_usuario_codigo",
            "usuario_id",
            "codigo",
            unique=True
        ),
        {"schema": SCHEMA}
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    usuario_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.usuario.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    codigo = Column(String(50), nullable=False, index=True)  # Ex: "3", "3.1", "3.1.02"
    nome = Column(String(255), nullable=False)
    descricao = Column(Text, nullable=True)

    # receita, deducao, custo, despesa_operacional, despesa_financeira, receita_financeira, outros
    tipo_dre = Column(String(30), nullable=False, default="despesa_operacional", index=True)

    nivel = Column(Integer, nullable=False, default=1)
    plano_pai_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.plano_contas.id", ondelete="RESTRICT"),
        nullable=True,
        index=True
    )
    aceita_lancamento = Column(Boolean, default=True, nullable=False)
    cor = Column(String(20), nullable=True)
    icone = Column(String(50), nullable=True)
    ativo = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    # ================= RELACIONAMENTOS =================

    pai = relationship("PlanoContas", remote_side=[id], back_populates="filhos")
    filhos = relationship("PlanoContas", back_populates="pai", lazy="select")

    def __repr__(self):
        return (
            f"<PlanoContas(id={self.id}, codigo='{self.codigo}', "
            f"tipo_dre='{self.tipo_dre}')>"
        )
