"""
Service de relatórios: DRE, dados essenciais da DRE e agrupamentos.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import NotFoundError, ValidationError
from models import AuditAction, ContaPagar, ContaReceber, DadosEssenciaisDRE, PlanoContas, Venda
from services.common import _log_audit
from tools.relatorios import agrupar_por_categoria, agrupar_por_periodo, calcular_dre
from tools.validacoes import validate_periodo

logger = logging.getLogger(__name__)


def _mes_para_data(mes: str) -> date:
    try:
        ano, numero = (int(p) for p in mes.split("-"))
        return date(ano, numero, 1)
    except ValueError:
        raise ValidationError([f"Mês inválido: {mes}. Use YYYY-MM"])


def _meses_entre(inicio: date, fim: date) -> List[str]:
    meses, atual = [], inicio
    while atual <= fim:
        meses.append(atual.strftime("%Y-%m"))
        atual += relativedelta(months=1)
    return meses


# ============================================================
# DADOS DO PERÍODO
# ============================================================

def _categorias(db: Session, usuario_id: int) -> Dict[int, PlanoContas]:
    return {p.id: p for p in db.query(PlanoContas).filter(PlanoContas.usuario_id == usuario_id).all()}


def carregar_receitas(db: Session, usuario_id: int, inicio: date, fim: date) -> List[Dict[str, Any]]:
    """Vendas ativas e contas recebidas no período, com a categoria de cada uma."""
    categorias = _categorias(db, usuario_id)
    linhas = []

    vendas = db.query(Venda).filter(
        Venda.usuario_id == usuario_id,
        Venda.status == "ativa",
        Venda.data_venda.between(inicio, fim),
    ).all()
    for v in vendas:
        categoria = categorias.get(v.plano_conta_id)
        linhas.append({
            "data": v.data_venda,
            "valor": Decimal(v.valor_final),
            "categoria": categoria.nome if categoria else "Vendas",
            "categoria_id": v.plano_conta_id,
            "tipo_dre": "receita",
        })

    recebidas = db.query(ContaReceber).filter(
        ContaReceber.usuario_id == usuario_id,
        ContaReceber.deleted_at.is_(None),
        ContaReceber.status == "recebido",
        ContaReceber.data_recebimento.between(inicio, fim),
    ).all()
    for c in recebidas:
        categoria = categorias.get(c.plano_conta_id)
        linhas.append({
            "data": c.data_recebimento,
            "valor": Decimal(c.valor_recebido or c.valor_final),
            "categoria": categoria.nome if categoria else "Outras receitas",
            "categoria_id": c.plano_conta_id,
            "tipo_dre": categoria.tipo_dre if categoria else "receita",
        })
    return linhas


def carregar_despesas(db: Session, usuario_id: int, inicio: date, fim: date) -> List[Dict[str, Any]]:
    """Contas pagas no período, classificadas pelo tipo_dre da categoria."""
    categorias = _categorias(db, usuario_id)
    pagas = db.query(ContaPagar).filter(
        ContaPagar.usuario_id == usuario_id,
        ContaPagar.deleted_at.is_(None),
        ContaPagar.status == "pago",
        ContaPagar.data_pagamento.between(inicio, fim),
    ).all()

    linhas = []
    for c in pagas:
        categoria = categorias.get(c.plano_conta_id)
        linhas.append({
            "data": c.data_pagamento,
            "valor": Decimal(c.valor_pago or c.valor_final),
            "categoria": categoria.nome if categoria else "Sem categoria",
            "categoria_id": c.plano_conta_id,
            "tipo_dre": categoria.tipo_dre if categoria else "despesa_operacional",
        })
    return linhas


def _dados_essenciais_periodo(db: Session, usuario_id: int, meses: List[str]) -> Dict[str, Any]:
    """Soma CMV e deduções dos meses; percentuais do mês mais recente que os informa."""
    registros = (
        db.query(DadosEssenciaisDRE)
        .filter(DadosEssenciaisDRE.usuario_id == usuario_id, DadosEssenciaisDRE.mes_referencia.in_(meses))
        .order_by(DadosEssenciaisDRE.mes_referencia)
        .all()
    )
    dados: Dict[str, Any] = {
        "percentual_impostos": Decimal(str(settings.DRE_PERCENTUAL_IMPOSTOS)),
        "percentual_devolucoes": Decimal(str(settings.DRE_PERCENTUAL_DEVOLUCOES)),
    }
    for campo in ("cmv_valor", "deducoes_receita"):
        valores = [Decimal(getattr(r, campo)) for r in registros if getattr(r, campo) is not None]
        if valores:
            dados[campo] = sum(valores, Decimal("0"))
    for campo in ("percentual_impostos", "percentual_devolucoes"):
        for r in registros:
            if getattr(r, campo) is not None:
                dados[campo] = Decimal(getattr(r, campo))
    return dados


# ============================================================
# DRE
# ============================================================

def gerar_dre(
    db: Session,
    usuario_id: int,
    mes_inicio: str,
    mes_fim: Optional[str] = None,
    comparar_com_anterior: bool = False,
) -> Dict[str, Any]:
    mes_fim = mes_fim or mes_inicio
    inicio = _mes_para_data(mes_inicio)
    primeiro_dia_fim = _mes_para_data(mes_fim)
    if inicio > primeiro_dia_fim:
        raise ValidationError(["O mês inicial não pode ser maior que o mês final."])
    fim = primeiro_dia_fim + relativedelta(months=1, days=-1)
    meses = _meses_entre(inicio, primeiro_dia_fim)

    logger.info(f"Gerando DRE usuario_id={usuario_id} {mes_inicio}..{mes_fim}")

    comparacao = None
    if comparar_com_anterior:
        inicio_ant = inicio - relativedelta(months=len(meses))
        fim_ant = inicio - relativedelta(days=1)
        comparacao = calcular_dre(
            carregar_receitas(db, usuario_id, inicio_ant, fim_ant),
            carregar_despesas(db, usuario_id, inicio_ant, fim_ant),
            _dados_essenciais_periodo(db, usuario_id, _meses_entre(inicio_ant, fim_ant.replace(day=1))),
        )

    dre = calcular_dre(
        carregar_receitas(db, usuario_id, inicio, fim),
        carregar_despesas(db, usuario_id, inicio, fim),
        _dados_essenciais_periodo(db, usuario_id, meses),
        comparacao=comparacao,
    )

    return {
        "mes_inicio": mes_inicio,
        "mes_fim": mes_fim,
        "linhas": dre["linhas"],
        "metricas": dre["metricas"],
        "metricas_comparacao": comparacao["metricas"] if comparacao else None,
    }


# ============================================================
# DADOS ESSENCIAIS
# ============================================================

def listar_dados_essenciais(db: Session, usuario_id: int) -> List[DadosEssenciaisDRE]:
    return (
        db.query(DadosEssenciaisDRE)
        .filter(DadosEssenciaisDRE.usuario_id == usuario_id)
        .order_by(DadosEssenciaisDRE.mes_referencia.desc())
        .all()
    )


def buscar_dados_essenciais(db: Session, usuario_id: int, mes_referencia: str) -> DadosEssenciaisDRE:
    registro = db.query(DadosEssenciaisDRE).filter(
        DadosEssenciaisDRE.usuario_id == usuario_id,
        DadosEssenciaisDRE.mes_referencia == mes_referencia,
    ).first()
    if registro is None:
        raise NotFoundError("Dados essenciais da DRE")
    return registro


def salvar_dados_essenciais(db: Session, usuario_id: int, dados: Dict[str, Any]) -> DadosEssenciaisDRE:
    """Cria ou atualiza os dados do mês (um registro por mes_referencia)."""
    _mes_para_data(dados["mes_referencia"])
    registro = db.query(DadosEssenciaisDRE).filter(
        DadosEssenciaisDRE.usuario_id == usuario_id,
        DadosEssenciaisDRE.mes_referencia == dados["mes_referencia"],
    ).first()

    if registro is None:
        registro = DadosEssenciaisDRE(**dados, usuario_id=usuario_id)
        db.add(registro)
        acao = AuditAction.CREATE
    else:
        for campo, valor in dados.items():
            setattr(registro, campo, valor)
        acao = AuditAction.UPDATE

    db.flush()
    _log_audit(db, usuario_id, acao, "dados_essenciais_dre", registro.id, new_values={"mes_referencia": registro.mes_referencia})
    db.commit()
    db.refresh(registro)
    return registro


def deletar_dados_essenciais(db: Session, usuario_id: int, mes_referencia: str) -> bool:
    registro = buscar_dados_essenciais(db, usuario_id, mes_referencia)
    _log_audit(db, usuario_id, AuditAction.DELETE, "dados_essenciais_dre", registro.id, old_values={"mes_referencia": mes_referencia})
    db.delete(registro)
    db.commit()
    return True


# ============================================================
# AGRUPAMENTOS
# ============================================================

def relatorio_agrupamento(
    db: Session,
    usuario_id: int,
    tipo: str,
    data_inicio: date,
    data_fim: date,
    agrupamento: str = "categoria",
) -> Dict[str, Any]:
    """Receitas ou despesas realizadas no período, por categoria ou por período."""
    periodo = validate_periodo(data_inicio, data_fim)
    if not periodo.valid:
        raise ValidationError(periodo.errors, message=periodo.errors[0])

    if tipo == "receitas":
        linhas = carregar_receitas(db, usuario_id, data_inicio, data_fim)
    elif tipo == "despesas":
        linhas = carregar_despesas(db, usuario_id, data_inicio, data_fim)
    else:
        raise ValidationError([f"Tipo de relatório inválido: {tipo}. Use receitas ou despesas"])

    if agrupamento == "categoria":
        grupos = agrupar_por_categoria(linhas)
    else:
        try:
            grupos = agrupar_por_periodo(linhas, agrupamento)
        except ValueError as e:
            raise ValidationError([str(e)])

    return {
        "tipo": tipo,
        "agrupamento": agrupamento,
        "total_geral": round(sum(g["total"] for g in grupos), 2),
        "grupos": grupos,
    }
