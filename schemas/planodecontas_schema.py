from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime

TipoDRE = Literal[
    "receita",
    "deducao",
    "custo",
    "despesa_operacional",
    "despesa_financeira",
    "receita_financeira",
    "outros",
]


class PlanoContasBase(BaseModel):
    codigo: str = Field(..., min_length=1, max_length=50)
    nome: str = Field(..., min_length=2, max_length=255)
    descricao: Optional[str] = None
    tipo_dre: TipoDRE = "despesa_operacional"
    plano_pai_id: Optional[int] = None
    aceita_lancamento: bool = True
    cor: Optional[str] = None
    icone: Optional[str] = None
    ativo: bool = True


class PlanoContasCreate(PlanoContasBase):
    pass


class PlanoContasUpdate(BaseModel):
    codigo: Optional[str] = Field(None, min_length=1, max_length=50)
    nome: Optional[str] = Field(None, min_length=2, max_length=255)
    descricao: Optional[str] = None
    tipo_dre: Optional[TipoDRE] = None
    plano_pai_id: Optional[int] = None
    aceita_lancamento: Optional[bool] = None
    cor: Optional[str] = None
    icone: Optional[str] = None
    ativo: Optional[bool] = None


class PlanoContasResponse(PlanoContasBase):
    id: int
    nivel: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PlanoContasArvore(PlanoContasResponse):
    filhos: List["PlanoContasArvore"] = []


class ImportacaoPlanoContasResponse(BaseModel):
    status: str
    total_linhas_arquivo: int
    criadas: int
    ignoradas_duplicadas: int
    erros: List[str] = []
