"""
Service de fluxo de caixa.

Unifica vendas, contas a pagar e contas a receber em movimentações de
entrada e saída, calcula os indicadores de liquidez, a projeção diária
de saldo e os alertas de pendências.
"""
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pandas as pd
from dateutil.relativedelta import relativedelta
from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import ValidationError
from models import Banco, ContaPagar, ContaReceber, PlanoContas, Venda
from services.configuracao_service import dias_alerta_vencimento
from tools.formatacao import formatar_moeda
from tools.validacoes import validate_periodo

logger = logging.getLogger(__name__)

ABERTOS = ("pendente", "vencido")


def _inicio_mes(dia: date) -> date:
    return dia.replace(day=1)


def _fim_mes(dia: date) -> date:
    return _inicio_mes(dia) + relativedelta(months=1, days=-1)


def _status_aberto(status: str, vencimento: date, hoje: date) -> str:
    if status == "vencido" or vencimento < hoje:
        return "em_atraso"
    return "previsto"


# ============================================================
# MOVIMENTAÇÕES
# ============================================================

def _contas_no_periodo(db: Session, model, usuario_id: int, status_quitado: str, campo_data: str, inicio: date, fim: date):
    data_baixa = getattr(model, campo_data)
    return db.query(model).filter(
        model.usuario_id == usuario_id,
        model.deleted_at.is_(None),
        or_(
            and_(model.status == status_quitado, data_baixa.between(inicio, fim)),
            and_(model.status.in_(ABERTOS), model.data_vencimento.between(inicio, fim)),
        ),
    ).all()


def gerar_movimentacoes(
    db: Session,
    usuario_id: int,
    data_inicio: date,
    data_fim: date,
    hoje: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Movimentações do período em ordem de data. Contas quitadas usam a data da baixa."""
    hoje = hoje or date.today()
    categorias = {
        p.id: p.nome for p in db.query(PlanoContas).filter(PlanoContas.usuario_id == usuario_id).all()
    }
    movimentacoes = []

    vendas = db.query(Venda).filter(
        Venda.usuario_id == usuario_id,
        Venda.status == "ativa",
        Venda.data_venda.between(data_inicio, data_fim),
    ).all()
    for v in vendas:
        movimentacoes.append({
            "data": v.data_venda,
            "tipo": "entrada",
            "valor": float(v.valor_final),
            "descricao": f"Venda #{v.id}" + (f" - {v.observacoes}" if v.observacoes else ""),
            "categoria": categorias.get(v.plano_conta_id),
            "origem": "venda",
            "origem_id": v.id,
            "status": "realizado",
        })

    for c in _contas_no_periodo(db, ContaReceber, usuario_id, "recebido", "data_recebimento", data_inicio, data_fim):
        recebida = c.status == "recebido"
        movimentacoes.append({
            "data": c.data_recebimento if recebida else c.data_vencimento,
            "tipo": "entrada",
            "valor": float(c.valor_recebido if recebida and c.valor_recebido is not None else c.valor_final),
            "descricao": c.descricao,
            "categoria": categorias.get(c.plano_conta_id),
            "origem": "conta_receber",
            "origem_id": c.id,
            "status": "realizado" if recebida else _status_aberto(c.status, c.data_vencimento, hoje),
        })

    for c in _contas_no_periodo(db, ContaPagar, usuario_id, "pago", "data_pagamento", data_inicio, data_fim):
        paga = c.status == "pago"
        movimentacoes.append({
            "data": c.data_pagamento if paga else c.data_vencimento,
            "tipo": "saida",
            "valor": float(c.valor_pago if paga and c.valor_pago is not None else c.valor_final),
            "descricao": c.descricao,
            "categoria": categorias.get(c.plano_conta_id),
            "origem": "conta_pagar",
            "origem_id": c.id,
            "status": "realizado" if paga else _status_aberto(c.status, c.data_vencimento, hoje),
        })

    movimentacoes.sort(key=lambda m: (m["data"], m["tipo"], m["origem_id"]))
    return movimentacoes


def _realizado(movimentacoes: List[Dict[str, Any]], tipo: str) -> Decimal:
    return sum(
        (Decimal(str(m["valor"])) for m in movimentacoes if m["tipo"] == tipo and m["status"] == "realizado"),
        Decimal("0"),
    )


# ============================================================
# INDICADORES
# ============================================================

def saldo_bancos(db: Session, usuario_id: int) -> Decimal:
    total = db.query(func.coalesce(func.sum(Banco.saldo_atual), 0)).filter(
        Banco.usuario_id == usuario_id, Banco.ativo.is_(True)
    ).scalar()
    return Decimal(str(total))


def _total_aberto(db: Session, model, usuario_id: int, ate: date) -> Decimal:
    total = db.query(func.coalesce(func.sum(model.valor_final), 0)).filter(
        model.usuario_id == usuario_id,
        model.deleted_at.is_(None),
        model.status.in_(ABERTOS),
        model.data_vencimento <= ate,
    ).scalar()
    return Decimal(str(total))


def _resultado_mes(db: Session, usuario_id: int, referencia: date, hoje: date) -> Dict[str, Decimal]:
    movs = gerar_movimentacoes(db, usuario_id, _inicio_mes(referencia), _fim_mes(referencia), hoje)
    entradas, saidas = _realizado(movs, "entrada"), _realizado(movs, "saida")
    return {"entradas": entradas, "saidas": saidas, "resultado": entradas - saidas}


def calcular_tendencia(atual: Decimal, anterior: Decimal) -> str:
    """alta/baixa quando o resultado varia mais de 5% sobre o mês anterior."""
    limite = abs(anterior) * Decimal("0.05")
    if atual > anterior + limite:
        return "alta"
    if atual < anterior - limite:
        return "baixa"
    return "estavel"


def classificar_liquidez(saldo_projetado: Decimal, saidas_mes: Decimal) -> str:
    if saldo_projetado < 0:
        return "critico"
    if saldo_projetado < saidas_mes * Decimal("0.2"):
        return "atencao"
    return "saudavel"


def calcular_indicadores(db: Session, usuario_id: int, hoje: Optional[date] = None) -> Dict[str, Any]:
    hoje = hoje or date.today()
    saldo = saldo_bancos(db, usuario_id)

    mes = _resultado_mes(db, usuario_id, hoje, hoje)
    anterior = _resultado_mes(db, usuario_id, hoje - relativedelta(months=1), hoje)

    limite = hoje + timedelta(days=30)
    projetado = (
        saldo
        + _total_aberto(db, ContaReceber, usuario_id, limite)
        - _total_aberto(db, ContaPagar, usuario_id, limite)
    )

    ultimos_30 = gerar_movimentacoes(db, usuario_id, hoje - timedelta(days=30), hoje, hoje)
    saida_media_diaria = _realizado(ultimos_30, "saida") / 30
    dias_caixa = round(float(saldo / saida_media_diaria), 1) if saida_media_diaria > 0 else None

    return {
        "saldo_atual": float(saldo),
        "entradas_mes": float(mes["entradas"]),
        "saidas_mes": float(mes["saidas"]),
        "resultado_mes": float(mes["resultado"]),
        "saldo_projetado_30d": float(projetado),
        "status_liquidez": classificar_liquidez(projetado, mes["saidas"]),
        "dias_caixa": dias_caixa,
        "tendencia": calcular_tendencia(mes["resultado"], anterior["resultado"]),
    }


# ============================================================
# PROJEÇÃO
# ============================================================

def _abertos_ate(db: Session, model, usuario_id: int, ate: date) -> List[Dict[str, Any]]:
    contas = db.query(model).filter(
        model.usuario_id == usuario_id,
        model.deleted_at.is_(None),
        model.status.in_(ABERTOS),
        model.data_vencimento <= ate,
    ).all()
    return [{"data": c.data_vencimento, "valor": float(c.valor_final)} for c in contas]


def projetar_saldo(db: Session, usuario_id: int, dias: int = 30, hoje: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    Saldo diário acumulado para os próximos `dias` dias.

    Contas em aberto já vencidas entram no primeiro dia da projeção.
    """
    if dias < 1 or dias > 365:
        raise ValidationError(["O número de dias da projeção deve estar entre 1 e 365"])
    hoje = hoje or date.today()
    fim = hoje + timedelta(days=dias - 1)
    dias_projecao = pd.date_range(hoje, fim, freq="D")

    def _por_dia(itens: List[Dict[str, Any]]) -> pd.Series:
        if not itens:
            return pd.Series(0.0, index=dias_projecao)
        df = pd.DataFrame(itens)
        df["data"] = pd.to_datetime(df["data"]).clip(lower=pd.Timestamp(hoje))
        return df.groupby("data")["valor"].sum().reindex(dias_projecao, fill_value=0.0)

    entradas = _por_dia(_abertos_ate(db, ContaReceber, usuario_id, fim))
    saidas = _por_dia(_abertos_ate(db, ContaPagar, usuario_id, fim))
    saldos = float(saldo_bancos(db, usuario_id)) + (entradas - saidas).cumsum()

    return [
        {
            "data": dia.date(),
            "entradas": round(float(entradas[dia]), 2),
            "saidas": round(float(saidas[dia]), 2),
            "saldo": round(float(saldos[dia]), 2),
        }
        for dia in dias_projecao
    ]


# ============================================================
# ALERTAS
# ============================================================

def _vencidas(db: Session, model, usuario_id: int, hoje: date):
    return db.query(
        func.count(model.id), func.coalesce(func.sum(model.valor_final), 0)
    ).filter(
        model.usuario_id == usuario_id,
        model.deleted_at.is_(None),
        or_(model.status == "vencido", and_(model.status == "pendente", model.data_vencimento < hoje)),
    ).one()


def gerar_alertas(
    db: Session,
    usuario_id: int,
    hoje: Optional[date] = None,
    saldo_projetado: Optional[Decimal] = None,
) -> List[Dict[str, Any]]:
    hoje = hoje or date.today()
    alertas = []

    quantidade, total = _vencidas(db, ContaPagar, usuario_id, hoje)
    if quantidade:
        alertas.append({
            "tipo": "error",
            "mensagem": f"{quantidade} conta(s) a pagar vencida(s) totalizando {formatar_moeda(total)}",
            "acao_url": "/contas-pagar?status=vencido",
        })

    quantidade, total = _vencidas(db, ContaReceber, usuario_id, hoje)
    if quantidade:
        alertas.append({
            "tipo": "warning",
            "mensagem": f"{quantidade} conta(s) a receber em atraso totalizando {formatar_moeda(total)}",
            "acao_url": "/contas-receber?status=vencido",
        })

    dias = dias_alerta_vencimento(db, usuario_id)
    quantidade, total = db.query(
        func.count(ContaPagar.id), func.coalesce(func.sum(ContaPagar.valor_final), 0)
    ).filter(
        ContaPagar.usuario_id == usuario_id,
        ContaPagar.deleted_at.is_(None),
        ContaPagar.status == "pendente",
        ContaPagar.data_vencimento.between(hoje, hoje + timedelta(days=dias)),
    ).one()
    if quantidade:
        alertas.append({
            "tipo": "warning",
            "mensagem": f"{quantidade} conta(s) a pagar vencem nos próximos {dias} dias ({formatar_moeda(total)})",
            "acao_url": "/contas-pagar?status=pendente",
        })

    if saldo_projetado is None:
        limite = hoje + timedelta(days=30)
        saldo_projetado = (
            saldo_bancos(db, usuario_id)
            + _total_aberto(db, ContaReceber, usuario_id, limite)
            - _total_aberto(db, ContaPagar, usuario_id, limite)
        )
    if saldo_projetado < 0:
        alertas.append({
            "tipo": "error",
            "mensagem": f"Saldo projetado para 30 dias negativo: {formatar_moeda(saldo_projetado)}",
            "acao_url": "/fluxo-caixa",
        })

    minimo = Decimal(str(settings.SALDO_MINIMO_ALERTA))
    bancos_baixos = db.query(Banco).filter(
        Banco.usuario_id == usuario_id,
        Banco.ativo.is_(True),
        Banco.saldo_atual < minimo,
    ).order_by(Banco.nome).all()
    for banco in bancos_baixos:
        alertas.append({
            "tipo": "info",
            "mensagem": f"Saldo baixo em {banco.nome}: {formatar_moeda(banco.saldo_atual)}",
            "acao_url": f"/bancos/{banco.id}",
        })

    return alertas


# ============================================================
# FLUXO DE CAIXA
# ============================================================

def fluxo_caixa(
    db: Session,
    usuario_id: int,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    hoje: Optional[date] = None,
) -> Dict[str, Any]:
    hoje = hoje or date.today()
    data_inicio = data_inicio or _inicio_mes(hoje)
    data_fim = data_fim or _fim_mes(hoje)
    periodo = validate_periodo(data_inicio, data_fim)
    if not periodo.valid:
        raise ValidationError(periodo.errors, message=periodo.errors[0])

    logger.info(f"Fluxo de caixa usuario_id={usuario_id} {data_inicio}..{data_fim}")
    indicadores = calcular_indicadores(db, usuario_id, hoje)

    return {
        "data_inicio": data_inicio,
        "data_fim": data_fim,
        "indicadores": indicadores,
        "movimentacoes": gerar_movimentacoes(db, usuario_id, data_inicio, data_fim, hoje),
        "alertas": gerar_alertas(db, usuario_id, hoje, Decimal(str(indicadores["saldo_projetado_30d"]))),
    }
