"""
Lançamento em lote de contas a pagar (parcelamento).

Fluxo:
1. gerar_parcelas: calcula datas e valores (sem tocar no banco)
2. validar_lancamento: regras do formulário, todas as mensagens de uma vez
3. processar_lote: grava todas as parcelas numa única transação
"""
import logging
import uuid
from dataclasses import dataclass, asdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import AppError, ErrorCode, ValidationError
from models import AuditAction, ContaPagar
from services.common import _log_audit
from services.contas_service import validar_referencias
from tools.formatacao import arredondar

logger = logging.getLogger(__name__)

INTERVALOS = {
    "mensal": relativedelta(months=1),
    "quinzenal": timedelta(days=15),
    "semanal": timedelta(days=7),
    "bimestral": relativedelta(months=2),
    "trimestral": relativedelta(months=3),
}


@dataclass
class ParcelaGerada:
    numero: int
    data_vencimento: date
    valor: Decimal
    status: str = "calculada"


# ============================================================
# GERAÇÃO DE PARCELAS
# ============================================================

def _data_parcela(primeiro_vencimento: date, indice: int, intervalo: str) -> date:
    passo = INTERVALOS.get(intervalo)
    if passo is None:
        raise ValidationError([f"Intervalo inválido: {intervalo}"])
    # Sempre a partir do primeiro vencimento: 31/01 -> 28/02 -> 31/03
    if isinstance(passo, relativedelta):
        return primeiro_vencimento + relativedelta(months=passo.months * indice)
    return primeiro_vencimento + passo * indice


def gerar_parcelas(
    numero_parcelas: int,
    data_primeiro_vencimento: date,
    valor_total: Optional[Any] = None,
    valor_parcela: Optional[Any] = None,
    intervalo: str = "mensal",
) -> List[ParcelaGerada]:
    """
    Gera as parcelas de um lançamento.

    Com valor_total, o total é dividido em centavos e a sobra vai para a
    última parcela (a soma bate exatamente com o total). Com valor_parcela,
    todas as parcelas têm o mesmo valor.
    """
    if numero_parcelas < 1:
        return []
    if numero_parcelas > settings.LOTE_MAX_PARCELAS:
        raise ValidationError([f"Máximo de {settings.LOTE_MAX_PARCELAS} parcelas permitidas"])
    if valor_total is None and valor_parcela is None:
        raise ValidationError(["Informe o valor total ou o valor da parcela"])

    if valor_total is not None:
        total_centavos = int(arredondar(valor_total) * 100)
        base = total_centavos // numero_parcelas
        valores = [Decimal(base) / 100] * (numero_parcelas - 1)
        valores.append(Decimal(total_centavos - base * (numero_parcelas - 1)) / 100)
    else:
        valores = [arredondar(valor_parcela)] * numero_parcelas

    return [
        ParcelaGerada(
            numero=i + 1,
            data_vencimento=_data_parcela(data_primeiro_vencimento, i, intervalo),
            valor=arredondar(valor),
        )
        for i, valor in enumerate(valores)
    ]


# ============================================================
# VALIDAÇÃO
# ============================================================

def validar_lancamento(
    dados: Dict[str, Any],
    parcelas: List[ParcelaGerada],
    hoje: Optional[date] = None,
) -> List[str]:
    hoje = hoje or date.today()
    erros: List[str] = []

    if not dados.get("fornecedor_id"):
        erros.append("Fornecedor é obrigatório")
    if not dados.get("plano_conta_id"):
        erros.append("Categoria é obrigatória")
    if len((dados.get("descricao") or "").strip()) < 3:
        erros.append("Descrição deve ter pelo menos 3 caracteres")
    if len(parcelas) < settings.LOTE_MIN_PARCELAS:
        erros.append(f"Deve ter pelo menos {settings.LOTE_MIN_PARCELAS} parcelas")
    if len(parcelas) > settings.LOTE_MAX_PARCELAS:
        erros.append(f"Máximo de {settings.LOTE_MAX_PARCELAS} parcelas permitidas")
    if dados.get("forma_pagamento") == "cartao" and not dados.get("tipo_cartao"):
        erros.append("Tipo de cartão é obrigatório")
    if any(Decimal(str(p.valor)) <= 0 for p in parcelas):
        erros.append("Todas as parcelas devem ter valor maior que zero")
    if any(p.data_vencimento < hoje for p in parcelas):
        erros.append("Datas de vencimento não podem ser no passado")

    return erros


def _parcelas_do_lancamento(dados: Dict[str, Any]) -> List[ParcelaGerada]:
    informadas = dados.get("parcelas") or []
    if informadas:
        return [
            ParcelaGerada(
                numero=p.get("numero", i + 1),
                data_vencimento=p["data_vencimento"],
                valor=arredondar(p["valor"]),
                status=p.get("status", "calculada"),
            )
            for i, p in enumerate(informadas)
        ]
    if not dados.get("numero_parcelas") or not dados.get("data_primeiro_vencimento"):
        return []
    return gerar_parcelas(
        numero_parcelas=dados["numero_parcelas"],
        data_primeiro_vencimento=dados["data_primeiro_vencimento"],
        valor_total=dados.get("valor_total"),
        valor_parcela=dados.get("valor_parcela"),
        intervalo=dados.get("intervalo") or "mensal",
    )


# ============================================================
# PROCESSAMENTO
# ============================================================

def _lote_rejeitado(total_parcelas: int, erros: List[str]) -> Dict[str, Any]:
    return {
        "sucesso": False,
        "lote_id": None,
        "total_parcelas": total_parcelas,
        "contas_criadas": [],
        "erros": erros,
    }


def processar_lote(
    db: Session,
    usuario_id: int,
    dados: Dict[str, Any],
    hoje: Optional[date] = None,
) -> Dict[str, Any]:
    logger.info("=" * 50)
    logger.info(f"LANÇAMENTO EM LOTE - usuario_id={usuario_id}")
    logger.info("=" * 50)

    try:
        parcelas = _parcelas_do_lancamento(dados)
    except ValidationError as e:
        logger.warning(f"Lote rejeitado: {e.errors}")
        return _lote_rejeitado(dados.get("numero_parcelas") or 0, e.errors)
    logger.info(f"[1/3] Parcelas: {len(parcelas)}")

    erros = validar_lancamento(dados, parcelas, hoje=hoje)
    if erros:
        logger.warning(f"Lote rejeitado: {erros}")
        return _lote_rejeitado(len(parcelas), erros)

    logger.info("[2/3] Conferindo fornecedor, categoria e banco...")
    validar_referencias(db, usuario_id, dados)

    lote_id = str(uuid.uuid4())
    total = len(parcelas)
    descricao = dados["descricao"].strip()

    logger.info(f"[3/3] Gravando {total} parcelas (lote_id={lote_id})...")
    try:
        contas = []
        for parcela in parcelas:
            conta = ContaPagar(
                usuario_id=usuario_id,
                fornecedor_id=dados.get("fornecedor_id"),
                plano_conta_id=dados.get("plano_conta_id"),
                banco_id=dados.get("banco_id"),
                descricao=f"{descricao} ({parcela.numero}/{total})",
                documento_referencia=dados.get("documento_referencia"),
                data_emissao=dados.get("data_emissao"),
                data_vencimento=parcela.data_vencimento,
                valor_original=parcela.valor,
                desconto=Decimal("0"),
                acrescimo=Decimal("0"),
                valor_final=parcela.valor,
                status="pendente",
                forma_pagamento=dados.get("forma_pagamento"),
                parcela_atual=parcela.numero,
                total_parcelas=total,
                lote_id=lote_id,
                observacoes=dados.get("observacoes"),
            )
            db.add(conta)
            contas.append(conta)

        db.flush()
        _log_audit(
            db, usuario_id, AuditAction.LOTE, "conta_pagar", None,
            new_values={
                "lote_id": lote_id,
                "total_parcelas": total,
                "valor_total": float(sum(p.valor for p in parcelas)),
            },
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Erro ao gravar lote {lote_id}: {e}", exc_info=True)
        raise AppError(ErrorCode.TRANSACTION_ERROR, "Erro ao gravar o lançamento em lote. Nenhuma parcela foi salva.")

    logger.info(f"Lote {lote_id} gravado com {total} parcelas")
    return {
        "sucesso": True,
        "lote_id": lote_id,
        "total_parcelas": total,
        "contas_criadas": [c.id for c in contas],
        "erros": [],
    }


def listar_lote(db: Session, usuario_id: int, lote_id: str) -> List[ContaPagar]:
    return (
        db.query(ContaPagar)
        .filter(
            ContaPagar.usuario_id == usuario_id,
            ContaPagar.lote_id == lote_id,
            ContaPagar.deleted_at.is_(None),
        )
        .order_by(ContaPagar.parcela_atual)
        .all()
    )


def cancelar_lote(db: Session, usuario_id: int, lote_id: str) -> int:
    """Cancela as parcelas ainda em aberto do lote. Parcelas pagas não são afetadas."""
    parcelas = [p for p in listar_lote(db, usuario_id, lote_id) if p.status in ("pendente", "vencido")]
    for parcela in parcelas:
        parcela.status = "cancelado"

    _log_audit(
        db, usuario_id, AuditAction.CANCELAMENTO, "conta_pagar", None,
        new_values={"lote_id": lote_id, "canceladas": len(parcelas)},
    )
    db.commit()
    logger.info(f"Lote {lote_id}: {len(parcelas)} parcela(s) cancelada(s)")
    return len(parcelas)


def parcelas_para_resposta(parcelas: List[ParcelaGerada]) -> List[Dict[str, Any]]:
    return [asdict(p) for p in parcelas]
