import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import or_
from sqlalchemy.orm import Session

from core.errors import BusinessRuleError, ValidationError
from models import AuditAction, Banco, Cheque, ContaPagar, ContaReceber, Maquininha, Venda
from services.common import aplicar_alteracoes, buscar_do_usuario, snapshot, _log_audit
from tools.validacoes import validate_bank_account

logger = logging.getLogger(__name__)


def listar_bancos(
    db: Session,
    usuario_id: int,
    busca: Optional[str] = None,
    ativo: Optional[bool] = None,
    tipo_conta: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Banco]:
    query = db.query(Banco).filter(Banco.usuario_id == usuario_id)
    if busca:
        termo = f"%{busca.strip()}%"
        query = query.filter(or_(Banco.nome.ilike(termo), Banco.codigo_banco.ilike(termo)))
    if ativo is not None:
        query = query.filter(Banco.ativo == ativo)
    if tipo_conta:
        query = query.filter(Banco.tipo_conta == tipo_conta)
    return query.order_by(Banco.nome).offset(skip).limit(limit).all()


def buscar_banco(db: Session, usuario_id: int, banco_id: int) -> Banco:
    return buscar_do_usuario(db, Banco, banco_id, usuario_id, "Banco")


def _validar_dados_bancarios(conta: Optional[str], agencia: Optional[str]) -> None:
    # Agência e conta são opcionais no cadastro (ex.: conta caixa); quando
    # informadas, seguem as regras bancárias.
    if not conta and not agencia:
        return
    resultado = validate_bank_account(conta, agencia)
    if not resultado.valid:
        raise ValidationError(resultado.errors)


def criar_banco(db: Session, usuario_id: int, dados: Dict[str, Any]) -> Banco:
    _validar_dados_bancarios(dados.get("conta"), dados.get("agencia"))

    saldo_inicial = dados.get("saldo_inicial") or Decimal("0")
    banco = Banco(**dados, usuario_id=usuario_id)
    banco.saldo_inicial = saldo_inicial
    banco.saldo_atual = saldo_inicial

    db.add(banco)
    db.flush()
    _log_audit(db, usuario_id, AuditAction.CREATE, "banco", banco.id, new_values=snapshot(banco))
    db.commit()
    db.refresh(banco)
    logger.info(f"Banco criado: id={banco.id} nome='{banco.nome}' saldo={banco.saldo_atual}")
    return banco


def atualizar_banco(db: Session, usuario_id: int, banco_id: int, dados: Dict[str, Any]) -> Banco:
    banco = buscar_banco(db, usuario_id, banco_id)

    conta = dados.get("conta", banco.conta)
    agencia = dados.get("agencia", banco.agencia)
    if "conta" in dados or "agencia" in dados:
        _validar_dados_bancarios(conta, agencia)

    antigos = aplicar_alteracoes(banco, dados)
    if antigos:
        _log_audit(db, usuario_id, AuditAction.UPDATE, "banco", banco.id, old_values=antigos)
    db.commit()
    db.refresh(banco)
    return banco


def deletar_banco(db: Session, usuario_id: int, banco_id: int) -> bool:
    banco = buscar_banco(db, usuario_id, banco_id)

    referencias = {
        "contas a pagar": db.query(ContaPagar).filter(
            ContaPagar.banco_id == banco_id, ContaPagar.deleted_at.is_(None)
        ).count(),
        "contas a receber": db.query(ContaReceber).filter(
            ContaReceber.banco_id == banco_id, ContaReceber.deleted_at.is_(None)
        ).count(),
        "vendas": db.query(Venda).filter(Venda.banco_id == banco_id).count(),
        "cheques": db.query(Cheque).filter(Cheque.banco_id == banco_id).count(),
        "maquininhas": db.query(Maquininha).filter(Maquininha.banco_id == banco_id).count(),
    }
    em_uso = {k: v for k, v in referencias.items() if v}
    if em_uso:
        descricao = ", ".join(f"{v} {k}" for k, v in em_uso.items())
        raise BusinessRuleError(
            f"Banco não pode ser excluído pois possui lançamentos vinculados ({descricao})",
            details=em_uso,
        )

    _log_audit(db, usuario_id, AuditAction.DELETE, "banco", banco.id, old_values=snapshot(banco))
    db.delete(banco)
    db.commit()
    return True


def alternar_status_banco(db: Session, usuario_id: int, banco_id: int) -> Banco:
    banco = buscar_banco(db, usuario_id, banco_id)
    banco.ativo = not banco.ativo
    db.commit()
    db.refresh(banco)
    return banco


def movimentar_saldo(db: Session, usuario_id: int, banco_id: Optional[int], valor: Decimal) -> Optional[Banco]:
    """Soma `valor` (positivo ou negativo) ao saldo atual. Não faz commit."""
    if not banco_id:
        return None
    banco = buscar_banco(db, usuario_id, banco_id)
    banco.saldo_atual = Decimal(banco.saldo_atual or 0) + Decimal(valor)
    return banco


def estatisticas_bancos(db: Session, usuario_id: int, hoje: Optional[date] = None) -> Dict[str, Any]:
    bancos = db.query(Banco).filter(Banco.usuario_id == usuario_id).all()
    saldos = [float(b.saldo_atual or 0) for b in bancos]

    hoje = hoje or date.today()
    inicio_mes = hoje.replace(day=1)
    fim_mes = inicio_mes + relativedelta(months=1, days=-1)

    pagamentos = db.query(ContaPagar).filter(
        ContaPagar.usuario_id == usuario_id,
        ContaPagar.deleted_at.is_(None),
        ContaPagar.banco_id.isnot(None),
        ContaPagar.data_pagamento.between(inicio_mes, fim_mes),
    ).count()
    recebimentos = db.query(ContaReceber).filter(
        ContaReceber.usuario_id == usuario_id,
        ContaReceber.deleted_at.is_(None),
        ContaReceber.banco_id.isnot(None),
        ContaReceber.data_recebimento.between(inicio_mes, fim_mes),
    ).count()

    return {
        "total_bancos": len(bancos),
        "bancos_ativos": sum(1 for b in bancos if b.ativo),
        "saldo_total": round(sum(saldos), 2),
        "movimentacoes_mes": pagamentos + recebimentos,
        "maior_saldo": max(saldos) if saldos else 0.0,
        "menor_saldo": min(saldos) if saldos else 0.0,
    }
