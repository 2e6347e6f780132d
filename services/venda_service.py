import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from core.errors import BusinessRuleError, ValidationError
from models import AuditAction, Cliente, Venda
from services.common import _log_audit, aplicar_alteracoes, buscar_do_usuario, snapshot
from services.contas_service import validar_referencias
from tools.formatacao import arredondar
from tools.validacoes import validate_periodo

logger = logging.getLogger(__name__)


def calcular_valores(valor_total: Any, desconto: Any = 0, comissao_percentual: Any = None) -> Dict[str, Optional[Decimal]]:
    """valor_final = total - desconto; comissão sobre o valor final."""
    valor_final = arredondar(Decimal(str(valor_total)) - Decimal(str(desconto or 0)))
    if valor_final < 0:
        raise ValidationError(["Desconto não pode ser maior que o valor da venda"])
    comissao_valor = None
    if comissao_percentual is not None:
        comissao_valor = arredondar(valor_final * Decimal(str(comissao_percentual)) / 100)
    return {"valor_final": valor_final, "comissao_valor": comissao_valor}


def _movimentar_cliente(db: Session, venda: Venda, sentido: int) -> None:
    if not venda.cliente_id:
        return
    cliente = db.get(Cliente, venda.cliente_id)
    if cliente is None:
        return
    cliente.total_compras = max(0, (cliente.total_compras or 0) + sentido)
    cliente.valor_total = Decimal(cliente.valor_total or 0) + sentido * Decimal(venda.valor_final)
    if sentido > 0:
        if cliente.ultima_compra is None or venda.data_venda > cliente.ultima_compra:
            cliente.ultima_compra = venda.data_venda
    else:
        # Última compra entre as demais vendas ativas do cliente
        cliente.ultima_compra = (
            db.query(func.max(Venda.data_venda))
            .filter(Venda.cliente_id == cliente.id, Venda.status == "ativa", Venda.id != venda.id)
            .scalar()
        )


def listar_vendas(
    db: Session,
    usuario_id: int,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    forma_pagamento: Optional[str] = None,
    cliente_id: Optional[int] = None,
    status: Optional[str] = None,
    busca: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Venda]:
    periodo = validate_periodo(data_inicio, data_fim)
    if not periodo.valid:
        raise ValidationError(periodo.errors, message=periodo.errors[0])

    query = db.query(Venda).filter(Venda.usuario_id == usuario_id)
    if data_inicio:
        query = query.filter(Venda.data_venda >= data_inicio)
    if data_fim:
        query = query.filter(Venda.data_venda <= data_fim)
    if forma_pagamento:
        query = query.filter(Venda.forma_pagamento == forma_pagamento)
    if cliente_id:
        query = query.filter(Venda.cliente_id == cliente_id)
    if status:
        query = query.filter(Venda.status == status)
    if busca:
        termo = f"%{busca.strip()}%"
        query = query.filter(or_(Venda.vendedor.ilike(termo), Venda.observacoes.ilike(termo)))

    return query.order_by(Venda.data_venda.desc(), Venda.id.desc()).offset(skip).limit(limit).all()


def buscar_venda(db: Session, usuario_id: int, venda_id: int) -> Venda:
    return buscar_do_usuario(db, Venda, venda_id, usuario_id, "Venda")


def criar_venda(db: Session, usuario_id: int, dados: Dict[str, Any]) -> Venda:
    validar_referencias(db, usuario_id, dados)

    venda = Venda(**dados, usuario_id=usuario_id)
    valores = calcular_valores(dados["valor_total"], dados.get("desconto"), dados.get("comissao_percentual"))
    venda.valor_final = valores["valor_final"]
    venda.comissao_valor = valores["comissao_valor"]
    venda.status = "ativa"

    db.add(venda)
    db.flush()
    _movimentar_cliente(db, venda, 1)
    _log_audit(db, usuario_id, AuditAction.CREATE, "venda", venda.id, new_values=snapshot(venda))
    db.commit()
    db.refresh(venda)
    logger.info(f"Venda criada: id={venda.id} valor_final={venda.valor_final}")
    return venda


def atualizar_venda(db: Session, usuario_id: int, venda_id: int, dados: Dict[str, Any]) -> Venda:
    venda = buscar_venda(db, usuario_id, venda_id)
    if venda.status == "cancelada":
        raise BusinessRuleError("Venda cancelada não pode ser alterada")
    validar_referencias(db, usuario_id, dados)

    _movimentar_cliente(db, venda, -1)
    antigos = aplicar_alteracoes(venda, dados)
    valores = calcular_valores(venda.valor_total, venda.desconto, venda.comissao_percentual)
    venda.valor_final = valores["valor_final"]
    venda.comissao_valor = valores["comissao_valor"]
    _movimentar_cliente(db, venda, 1)

    if antigos:
        _log_audit(db, usuario_id, AuditAction.UPDATE, "venda", venda.id, old_values=antigos)
    db.commit()
    db.refresh(venda)
    return venda


def cancelar_venda(db: Session, usuario_id: int, venda_id: int, motivo: Optional[str] = None) -> Venda:
    venda = buscar_venda(db, usuario_id, venda_id)
    if venda.status == "cancelada":
        raise BusinessRuleError("Venda já está cancelada")

    venda.status = "cancelada"
    if motivo:
        venda.observacoes = f"{venda.observacoes}\n{motivo}" if venda.observacoes else motivo
    _movimentar_cliente(db, venda, -1)

    _log_audit(
        db, usuario_id, AuditAction.CANCELAMENTO, "venda", venda.id,
        old_values={"status": "ativa"}, new_values={"status": "cancelada", "motivo": motivo},
    )
    db.commit()
    db.refresh(venda)
    return venda


def deletar_venda(db: Session, usuario_id: int, venda_id: int) -> bool:
    venda = buscar_venda(db, usuario_id, venda_id)
    if venda.status == "ativa":
        _movimentar_cliente(db, venda, -1)
    _log_audit(db, usuario_id, AuditAction.DELETE, "venda", venda.id, old_values=snapshot(venda))
    db.delete(venda)
    db.commit()
    return True


def resumo_vendas(
    db: Session,
    usuario_id: int,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
) -> Dict[str, Any]:
    vendas = listar_vendas(db, usuario_id, data_inicio=data_inicio, data_fim=data_fim, status="ativa", limit=None)

    total = sum((Decimal(v.valor_final) for v in vendas), Decimal("0"))
    comissoes = sum((Decimal(v.comissao_valor or 0) for v in vendas), Decimal("0"))
    por_forma: Dict[str, float] = {}
    for v in vendas:
        por_forma[v.forma_pagamento] = round(por_forma.get(v.forma_pagamento, 0.0) + float(v.valor_final), 2)

    quantidade = len(vendas)
    return {
        "quantidade": quantidade,
        "total_vendido": float(total),
        "ticket_medio": float(arredondar(total / quantidade)) if quantidade else 0.0,
        "total_comissoes": float(comissoes),
        "por_forma_pagamento": por_forma,
    }
