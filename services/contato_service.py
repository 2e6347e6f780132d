"""
Service dos cadastros de contatos: fornecedores, clientes e pagadores.

Os três cadastros têm o mesmo ciclo (listar, buscar, criar, atualizar,
excluir e ativar/desativar) e diferem apenas no modelo, no campo de
status e nas tabelas que impedem a exclusão.
"""
import logging
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from core.errors import BusinessRuleError, DuplicateError
from models import (
    AuditAction,
    Cheque,
    Cliente,
    ContaPagar,
    ContaReceber,
    Fornecedor,
    Pagador,
    Venda,
)
from services.common import aplicar_alteracoes, buscar_do_usuario, snapshot, _log_audit

logger = logging.getLogger(__name__)


class CadastroContatoService:
    """CRUD de um tipo de contato com escopo de usuário."""

    def __init__(
        self,
        model: Type[Any],
        entidade: str,
        entity_type: str,
        dependentes: List[tuple],
    ):
        self.model = model
        self.entidade = entidade
        self.entity_type = entity_type
        # (Modelo, coluna FK) que impedem a exclusão
        self.dependentes = dependentes

    # ------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------

    def listar(
        self,
        db: Session,
        usuario_id: int,
        busca: Optional[str] = None,
        ativo: Optional[bool] = None,
        tipo: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Any]:
        m = self.model
        query = db.query(m).filter(m.usuario_id == usuario_id)

        if busca:
            termo = f"%{busca.strip()}%"
            query = query.filter(or_(
                m.nome.ilike(termo),
                m.documento.ilike(termo),
                m.email.ilike(termo),
            ))
        if ativo is not None:
            query = query.filter(self._filtro_ativo(ativo))
        if tipo:
            query = query.filter(m.tipo == tipo)

        return query.order_by(m.nome).offset(skip).limit(limit).all()

    def buscar(self, db: Session, usuario_id: int, registro_id: int) -> Any:
        return buscar_do_usuario(db, self.model, registro_id, usuario_id, self.entidade)

    def _filtro_ativo(self, ativo: bool):
        if hasattr(self.model, "ativo"):
            return self.model.ativo == ativo
        return (self.model.status == "ativo") if ativo else (self.model.status != "ativo")

    def _documento_duplicado(
        self, db: Session, usuario_id: int, documento: Optional[str], ignorar_id: Optional[int] = None
    ) -> bool:
        if not documento:
            return False
        m = self.model
        query = db.query(m).filter(m.usuario_id == usuario_id, m.documento == documento)
        if ignorar_id:
            query = query.filter(m.id != ignorar_id)
        return query.first() is not None

    # ------------------------------------------------------------
    # Escrita
    # ------------------------------------------------------------

    def criar(self, db: Session, usuario_id: int, dados: Dict[str, Any]) -> Any:
        if self._documento_duplicado(db, usuario_id, dados.get("documento")):
            raise DuplicateError(f"Já existe um {self.entidade.lower()} com este documento")

        obj = self.model(**dados, usuario_id=usuario_id)
        db.add(obj)
        db.flush()
        _log_audit(db, usuario_id, AuditAction.CREATE, self.entity_type, obj.id, new_values=snapshot(obj))
        db.commit()
        db.refresh(obj)
        logger.info(f"{self.entidade} criado: id={obj.id} nome='{obj.nome}'")
        return obj

    def atualizar(self, db: Session, usuario_id: int, registro_id: int, dados: Dict[str, Any]) -> Any:
        obj = self.buscar(db, usuario_id, registro_id)
        if "documento" in dados and self._documento_duplicado(db, usuario_id, dados["documento"], registro_id):
            raise DuplicateError(f"Já existe um {self.entidade.lower()} com este documento")

        antigos = aplicar_alteracoes(obj, dados)
        if antigos:
            _log_audit(db, usuario_id, AuditAction.UPDATE, self.entity_type, obj.id, old_values=antigos)
        db.commit()
        db.refresh(obj)
        return obj

    def deletar(self, db: Session, usuario_id: int, registro_id: int) -> bool:
        obj = self.buscar(db, usuario_id, registro_id)

        vinculados = 0
        for model, coluna in self.dependentes:
            query = db.query(model).filter(getattr(model, coluna) == registro_id)
            if hasattr(model, "deleted_at"):
                query = query.filter(model.deleted_at.is_(None))
            vinculados += query.count()
        if vinculados:
            raise BusinessRuleError(
                f"{self.entidade} possui {vinculados} lançamento(s) vinculado(s). "
                "Desative o cadastro em vez de excluir."
            )

        _log_audit(db, usuario_id, AuditAction.DELETE, self.entity_type, obj.id, old_values=snapshot(obj))
        db.delete(obj)
        db.commit()
        return True

    def alternar_status(self, db: Session, usuario_id: int, registro_id: int) -> Any:
        obj = self.buscar(db, usuario_id, registro_id)
        if hasattr(obj, "ativo"):
            obj.ativo = not obj.ativo
        else:
            obj.status = "inativo" if obj.status == "ativo" else "ativo"
        db.commit()
        db.refresh(obj)
        return obj


fornecedor_service = CadastroContatoService(
    Fornecedor, "Fornecedor", "fornecedor",
    dependentes=[(ContaPagar, "fornecedor_id"), (Cheque, "fornecedor_id")],
)

cliente_service = CadastroContatoService(
    Cliente, "Cliente", "cliente",
    dependentes=[(ContaReceber, "cliente_id"), (Venda, "cliente_id")],
)

pagador_service = CadastroContatoService(
    Pagador, "Pagador", "pagador",
    dependentes=[(ContaReceber, "pagador_id")],
)


# ============================================================
# ESTATÍSTICAS
# ============================================================

def estatisticas_fornecedores(db: Session, usuario_id: int) -> Dict[str, int]:
    base = db.query(Fornecedor).filter(Fornecedor.usuario_id == usuario_id)
    total = base.count()
    ativos = base.filter(Fornecedor.ativo == True).count()
    pessoa_fisica = base.filter(Fornecedor.tipo == "pessoa_fisica").count()
    return {
        "total": total,
        "ativos": ativos,
        "inativos": total - ativos,
        "pessoa_fisica": pessoa_fisica,
        "pessoa_juridica": total - pessoa_fisica,
    }


def estatisticas_pagadores(db: Session, usuario_id: int) -> Dict[str, Any]:
    base = db.query(Pagador).filter(Pagador.usuario_id == usuario_id)
    total = base.count()
    ativos = base.filter(Pagador.ativo == True).count()
    total_recebimentos, valor_total = db.query(
        func.coalesce(func.sum(Pagador.total_recebimentos), 0),
        func.coalesce(func.sum(Pagador.valor_total), 0),
    ).filter(Pagador.usuario_id == usuario_id).one()
    return {
        "total": total,
        "ativos": ativos,
        "inativos": total - ativos,
        "total_recebimentos": int(total_recebimentos or 0),
        "valor_total": float(valor_total or 0),
    }
