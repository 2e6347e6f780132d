"""
Service de contas a pagar e contas a receber.

As duas entidades compartilham o mesmo ciclo de vida:

    pendente ──baixar──> pago/recebido ──estornar──> pendente
        │  └──(vencimento < hoje)──> vencido ──baixar──> pago/recebido
        └──cancelar──> cancelado

A baixa movimenta o saldo do banco (débito para contas a pagar, crédito
para contas a receber) e o estorno desfaz a movimentação.
"""
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Type

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from core.errors import BusinessRuleError, ValidationError
from models import (
    AuditAction,
    Banco,
    Cliente,
    ContaPagar,
    ContaReceber,
    Fornecedor,
    Pagador,
    PlanoContas,
)
from services.banco_service import movimentar_saldo
from services.common import (
    _log_audit,
    _now_utc,
    aplicar_alteracoes,
    buscar_do_usuario,
    snapshot,
)
from tools.formatacao import arredondar
from tools.validacoes import validate_payable, validate_periodo, validate_receivable

logger = logging.getLogger(__name__)

# Campo de FK -> (modelo, nome da entidade) para conferir o dono do registro
REFERENCIAS = {
    "fornecedor_id": (Fornecedor, "Fornecedor"),
    "cliente_id": (Cliente, "Cliente"),
    "pagador_id": (Pagador, "Pagador"),
    "plano_conta_id": (PlanoContas, "Categoria"),
    "banco_id": (Banco, "Banco"),
    "conta_pagar_id": (ContaPagar, "Conta a pagar"),
}


def validar_referencias(db: Session, usuario_id: int, dados: Dict[str, Any]) -> None:
    """Garante que as FKs informadas apontam para registros do próprio usuário."""
    for campo, (model, entidade) in REFERENCIAS.items():
        valor = dados.get(campo)
        if valor:
            buscar_do_usuario(db, model, valor, usuario_id, entidade)


def calcular_valor_final(valor_original: Any, desconto: Any = 0, acrescimo: Any = 0) -> Decimal:
    valor_final = arredondar(
        Decimal(str(valor_original)) - Decimal(str(desconto or 0)) + Decimal(str(acrescimo or 0))
    )
    if valor_final < 0:
        raise ValidationError(["Desconto não pode ser maior que o valor da conta"])
    return valor_final


class ContasService:
    """Regras comuns de contas a pagar / receber, parametrizadas pelo tipo."""

    def __init__(
        self,
        model: Type[Any],
        entidade: str,
        entity_type: str,
        status_quitado: str,
        campo_data: str,
        campo_valor: str,
        sinal_banco: int,
        validador: Callable[..., Any],
        contato: Optional[tuple] = None,
    ):
        self.model = model
        self.entidade = entidade
        self.entity_type = entity_type
        self.status_quitado = status_quitado
        self.campo_data = campo_data
        self.campo_valor = campo_valor
        self.sinal_banco = sinal_banco
        self.validador = validador
        # (relacionamento, campo contador, campo da última data) atualizados na baixa
        self.contato = contato

    # ============================================================
    # CONSULTAS
    # ============================================================

    def listar(
        self,
        db: Session,
        usuario_id: int,
        status: Optional[str] = None,
        data_inicio: Optional[date] = None,
        data_fim: Optional[date] = None,
        busca: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
        hoje: Optional[date] = None,
        **filtros: Any,
    ) -> List[Any]:
        periodo = validate_periodo(data_inicio, data_fim)
        if not periodo.valid:
            raise ValidationError(periodo.errors, message=periodo.errors[0])

        m = self.model
        hoje = hoje or date.today()
        query = db.query(m).filter(m.usuario_id == usuario_id, m.deleted_at.is_(None))

        if status == "vencido":
            query = query.filter(or_(
                m.status == "vencido",
                and_(m.status == "pendente", m.data_vencimento < hoje),
            ))
        elif status:
            query = query.filter(m.status == status)

        if data_inicio:
            query = query.filter(m.data_vencimento >= data_inicio)
        if data_fim:
            query = query.filter(m.data_vencimento <= data_fim)

        for campo, valor in filtros.items():
            if valor is not None and hasattr(m, campo):
                query = query.filter(getattr(m, campo) == valor)

        if busca:
            termo = f"%{busca.strip()}%"
            query = query.filter(or_(m.descricao.ilike(termo), m.documento_referencia.ilike(termo)))

        return (
            query.order_by(m.data_vencimento.asc(), m.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def buscar(self, db: Session, usuario_id: int, conta_id: int) -> Any:
        return buscar_do_usuario(db, self.model, conta_id, usuario_id, self.entidade)

    # ============================================================
    # CRIAÇÃO / ATUALIZAÇÃO
    # ============================================================

    def criar(self, db: Session, usuario_id: int, dados: Dict[str, Any], hoje: Optional[date] = None) -> Any:
        resultado = self.validador(dados, is_new=True, hoje=hoje)
        if not resultado.valid:
            raise ValidationError(resultado.errors)
        validar_referencias(db, usuario_id, dados)

        conta = self.model(**dados, usuario_id=usuario_id)
        conta.valor_final = calcular_valor_final(
            dados["valor_original"], dados.get("desconto"), dados.get("acrescimo")
        )
        conta.status = "pendente"

        db.add(conta)
        db.flush()
        _log_audit(db, usuario_id, AuditAction.CREATE, self.entity_type, conta.id, new_values=snapshot(conta))
        db.commit()
        db.refresh(conta)
        logger.info(f"{self.entidade} criada: id={conta.id} valor_final={conta.valor_final}")
        return conta

    def atualizar(
        self,
        db: Session,
        usuario_id: int,
        conta_id: int,
        dados: Dict[str, Any],
        hoje: Optional[date] = None,
    ) -> Any:
        conta = self.buscar(db, usuario_id, conta_id)
        if conta.status in (self.status_quitado, "cancelado"):
            raise BusinessRuleError(
                f"{self.entidade} com status '{conta.status}' não pode ser alterada"
            )

        atual = {c.name: getattr(conta, c.name) for c in self.model.__table__.columns}
        mesclado = {**atual, **dados}
        resultado = self.validador(mesclado, is_new=False, hoje=hoje)
        if not resultado.valid:
            raise ValidationError(resultado.errors)
        validar_referencias(db, usuario_id, dados)

        antigos = aplicar_alteracoes(conta, dados)
        if {"valor_original", "desconto", "acrescimo"} & dados.keys():
            conta.valor_final = calcular_valor_final(conta.valor_original, conta.desconto, conta.acrescimo)

        if antigos:
            _log_audit(db, usuario_id, AuditAction.UPDATE, self.entity_type, conta.id, old_values=antigos)
        db.commit()
        db.refresh(conta)
        return conta

    # ============================================================
    # BAIXA / CANCELAMENTO / ESTORNO
    # ============================================================

    def _atualizar_totais_contato(self, conta: Any, valor: Decimal, data_mov: Optional[date], sentido: int) -> None:
        if not self.contato:
            return
        relacionamento, campo_contador, campo_data = self.contato
        contato = getattr(conta, relacionamento)
        if contato is None:
            return
        setattr(contato, campo_contador, max(0, (getattr(contato, campo_contador) or 0) + sentido))
        setattr(contato, "valor_total", Decimal(contato.valor_total or 0) + sentido * valor)
        if sentido > 0 and data_mov:
            ultima = getattr(contato, campo_data)
            if ultima is None or data_mov > ultima:
                setattr(contato, campo_data, data_mov)

    def baixar(
        self,
        db: Session,
        usuario_id: int,
        conta_id: int,
        data_baixa: Optional[date] = None,
        valor: Optional[Decimal] = None,
        banco_id: Optional[int] = None,
        observacoes: Optional[str] = None,
        hoje: Optional[date] = None,
    ) -> Any:
        conta = self.buscar(db, usuario_id, conta_id)
        if conta.status == self.status_quitado:
            raise BusinessRuleError(f"{self.entidade} já está quitada")
        if conta.status == "cancelado":
            raise BusinessRuleError(f"{self.entidade} cancelada não pode ser quitada")

        valor_baixa = arredondar(valor if valor is not None else conta.valor_final)
        if valor_baixa <= 0:
            raise ValidationError(["Valor deve ser maior que zero"])
        data_baixa = data_baixa or hoje or date.today()
        banco_id = banco_id or conta.banco_id

        antigos = snapshot(conta, ["status", self.campo_data, self.campo_valor, "banco_id"])

        movimentar_saldo(db, usuario_id, banco_id, self.sinal_banco * valor_baixa)
        conta.status = self.status_quitado
        setattr(conta, self.campo_data, data_baixa)
        setattr(conta, self.campo_valor, valor_baixa)
        conta.banco_id = banco_id
        if observacoes:
            conta.observacoes = observacoes
        self._atualizar_totais_contato(conta, valor_baixa, data_baixa, 1)

        _log_audit(
            db, usuario_id, AuditAction.BAIXA, self.entity_type, conta.id,
            old_values=antigos,
            new_values=snapshot(conta, ["status", self.campo_data, self.campo_valor, "banco_id"]),
        )
        db.commit()
        db.refresh(conta)
        logger.info(f"Baixa de {self.entity_type} id={conta.id}: {valor_baixa} em {data_baixa}")
        return conta

    def cancelar(self, db: Session, usuario_id: int, conta_id: int, motivo: Optional[str] = None) -> Any:
        conta = self.buscar(db, usuario_id, conta_id)
        if conta.status not in ("pendente", "vencido"):
            raise BusinessRuleError(
                f"Apenas contas pendentes ou vencidas podem ser canceladas (status atual: {conta.status})"
            )

        status_anterior = conta.status
        conta.status = "cancelado"
        if motivo:
            conta.observacoes = f"{conta.observacoes}\n{motivo}" if conta.observacoes else motivo

        _log_audit(
            db, usuario_id, AuditAction.CANCELAMENTO, self.entity_type, conta.id,
            old_values={"status": status_anterior},
            new_values={"status": "cancelado", "motivo": motivo},
        )
        db.commit()
        db.refresh(conta)
        return conta

    def estornar(self, db: Session, usuario_id: int, conta_id: int) -> Any:
        conta = self.buscar(db, usuario_id, conta_id)
        if conta.status != self.status_quitado:
            raise BusinessRuleError(f"Apenas contas com status '{self.status_quitado}' podem ser estornadas")

        valor = Decimal(getattr(conta, self.campo_valor) or conta.valor_final)
        antigos = snapshot(conta, ["status", self.campo_data, self.campo_valor])

        movimentar_saldo(db, usuario_id, conta.banco_id, -self.sinal_banco * valor)
        self._atualizar_totais_contato(conta, valor, None, -1)
        conta.status = "pendente"
        setattr(conta, self.campo_data, None)
        setattr(conta, self.campo_valor, None)

        _log_audit(db, usuario_id, AuditAction.ESTORNO, self.entity_type, conta.id, old_values=antigos)
        db.commit()
        db.refresh(conta)
        logger.info(f"Estorno de {self.entity_type} id={conta.id}: {valor}")
        return conta

    def marcar_vencidas(self, db: Session, usuario_id: int, hoje: Optional[date] = None) -> int:
        """Pendentes com vencimento anterior a hoje passam a 'vencido'. Retorna a quantidade."""
        hoje = hoje or date.today()
        m = self.model
        atualizadas = (
            db.query(m)
            .filter(
                m.usuario_id == usuario_id,
                m.deleted_at.is_(None),
                m.status == "pendente",
                m.data_vencimento < hoje,
            )
            .update({m.status: "vencido"}, synchronize_session=False)
        )
        db.commit()
        if atualizadas:
            logger.info(f"{atualizadas} {self.entity_type}(s) marcadas como vencidas (usuario_id={usuario_id})")
        return atualizadas

    def deletar(self, db: Session, usuario_id: int, conta_id: int) -> bool:
        """Exclusão lógica (deleted_at)."""
        conta = self.buscar(db, usuario_id, conta_id)
        if conta.status == self.status_quitado:
            raise BusinessRuleError("Estorne a conta antes de excluí-la")

        conta.deleted_at = _now_utc()
        _log_audit(db, usuario_id, AuditAction.DELETE, self.entity_type, conta.id, old_values=snapshot(conta))
        db.commit()
        return True

    # ============================================================
    # RESUMO
    # ============================================================

    def resumo(self, db: Session, usuario_id: int, hoje: Optional[date] = None) -> Dict[str, Any]:
        hoje = hoje or date.today()
        limite = hoje + timedelta(days=7)
        m = self.model
        contas = db.query(m).filter(m.usuario_id == usuario_id, m.deleted_at.is_(None)).all()

        totais = {"pendente": Decimal("0"), "vencido": Decimal("0"), "quitado": Decimal("0"), "cancelado": Decimal("0")}
        quantidade: Dict[str, int] = {}
        a_vencer = Decimal("0")

        for conta in contas:
            status = conta.status
            if status == "pendente" and conta.data_vencimento < hoje:
                status = "vencido"
            quantidade[status] = quantidade.get(status, 0) + 1

            valor_final = Decimal(conta.valor_final or 0)
            if status == self.status_quitado:
                totais["quitado"] += Decimal(getattr(conta, self.campo_valor) or valor_final)
            elif status in totais:
                totais[status] += valor_final

            if status == "pendente" and conta.data_vencimento <= limite:
                a_vencer += valor_final

        return {
            "total_pendente": float(totais["pendente"]),
            "total_vencido": float(totais["vencido"]),
            "total_quitado": float(totais["quitado"]),
            "total_cancelado": float(totais["cancelado"]),
            "quantidade_por_status": quantidade,
            "a_vencer_7_dias": float(a_vencer),
        }


contas_pagar_service = ContasService(
    model=ContaPagar,
    entidade="Conta a pagar",
    entity_type="conta_pagar",
    status_quitado="pago",
    campo_data="data_pagamento",
    campo_valor="valor_pago",
    sinal_banco=-1,
    validador=validate_payable,
    contato=("fornecedor", "total_compras", "ultima_compra"),
)

contas_receber_service = ContasService(
    model=ContaReceber,
    entidade="Conta a receber",
    entity_type="conta_receber",
    status_quitado="recebido",
    campo_data="data_recebimento",
    campo_valor="valor_recebido",
    sinal_banco=1,
    validador=validate_receivable,
    contato=("pagador", "total_recebimentos", "ultimo_recebimento"),
)
