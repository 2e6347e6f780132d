"""
Service de maquininhas de cartão.

Cadastro de terminais e taxas, importação das vendas da operadora e dos
créditos bancários, e conciliação mensal entre os dois.
"""
import logging
from collections import OrderedDict
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlalchemy.orm import Session

from core.errors import BusinessRuleError, ValidationError
from models import (
    AuditAction,
    ConciliacaoMaquininha,
    Maquininha,
    RecebimentoBancario,
    TaxaMaquininha,
    VendaMaquininha,
)
from services.banco_service import buscar_banco
from services.common import _log_audit, aplicar_alteracoes, buscar_do_usuario, snapshot
from tools.formatacao import arredondar
from tools.padroes_maquininha import (
    detectar_anomalias,
    gerar_recomendacoes,
    identificar_padroes,
    sugerir_tolerancia_otima,
)

logger = logging.getLogger(__name__)

# Prazo padrão de liquidação quando o extrato não traz a data de recebimento
PRAZO_DEBITO_DIAS = 1
PRAZO_CREDITO_DIAS = 30


def calcular_taxa(
    maquininha: Maquininha,
    bandeira: str,
    tipo_transacao: str,
    parcelas: int,
    valor_bruto: Any,
) -> Dict[str, Decimal]:
    """valor_taxa = bruto * taxa% / 100 + taxa fixa, arredondado para centavos."""
    candidatas = [
        t for t in maquininha.taxas
        if t.ativo
        and t.bandeira.lower() == bandeira.lower()
        and t.tipo_transacao == tipo_transacao
        and parcelas <= t.parcelas_max
    ]
    if not candidatas:
        raise BusinessRuleError(
            f"Taxa não configurada para {bandeira} / {tipo_transacao} em {parcelas}x",
            details={"bandeira": bandeira, "tipo_transacao": tipo_transacao, "parcelas": parcelas},
        )
    taxa = min(candidatas, key=lambda t: t.parcelas_max)

    bruto = arredondar(valor_bruto)
    valor_taxa = arredondar(bruto * Decimal(taxa.taxa_percentual) / 100 + Decimal(taxa.taxa_fixa))
    return {
        "valor_bruto": bruto,
        "taxa_percentual": Decimal(taxa.taxa_percentual),
        "taxa_fixa": Decimal(taxa.taxa_fixa),
        "valor_taxa": valor_taxa,
        "valor_liquido": bruto - valor_taxa,
    }


def data_recebimento_prevista(data_venda: date, tipo_transacao: str) -> date:
    prazo = PRAZO_DEBITO_DIAS if tipo_transacao == "debito" else PRAZO_CREDITO_DIAS
    return data_venda + timedelta(days=prazo)


def casar_recebimentos(
    grupos: Dict[date, Decimal],
    recebimentos: List[Dict[str, Any]],
    tolerancia_valor: Decimal,
    tolerancia_dias: int,
) -> List[Dict[str, Any]]:
    """
    Casa o valor líquido esperado em cada data com um crédito bancário.

    Cada recebimento é usado uma única vez. Entre os candidatos dentro da
    tolerância vence o de data mais próxima e, no empate, o de valor mais
    próximo.
    """
    usados = set()
    resultado = []
    for data_prevista, esperado in sorted(grupos.items()):
        candidatos = [
            r for r in recebimentos
            if r["id"] not in usados
            and abs((r["data_recebimento"] - data_prevista).days) <= tolerancia_dias
            and abs(Decimal(r["valor"]) - esperado) <= tolerancia_valor
        ]
        escolhido = min(
            candidatos,
            key=lambda r: (abs((r["data_recebimento"] - data_prevista).days), abs(Decimal(r["valor"]) - esperado)),
            default=None,
        )
        if escolhido:
            usados.add(escolhido["id"])
        resultado.append({
            "data_prevista": data_prevista,
            "valor_esperado": esperado,
            "recebimento_id": escolhido["id"] if escolhido else None,
            "valor_recebido": Decimal(escolhido["valor"]) if escolhido else None,
            "status": "conciliado" if escolhido else "divergente",
        })
    return resultado


def _intervalo_periodo(periodo: str) -> tuple:
    try:
        ano, mes = (int(p) for p in periodo.split("-"))
        inicio = date(ano, mes, 1)
    except ValueError:
        raise ValidationError(["Período inválido. Use YYYY-MM"])
    return inicio, inicio + relativedelta(months=1, days=-1)


def _venda_dict(v: VendaMaquininha) -> Dict[str, Any]:
    return {
        "data_venda": v.data_venda,
        "data_recebimento": v.data_recebimento,
        "bandeira": v.bandeira,
        "tipo_transacao": v.tipo_transacao,
        "parcelas": v.parcelas,
        "valor_bruto": float(v.valor_bruto),
        "valor_liquido": float(v.valor_liquido),
    }


class MaquininhaService:
    """Service de maquininhas, taxas e conciliação."""

    # ============================================================
    # CADASTRO
    # ============================================================

    def listar(self, db: Session, usuario_id: int, ativo: Optional[bool] = None) -> List[Maquininha]:
        query = db.query(Maquininha).filter(Maquininha.usuario_id == usuario_id)
        if ativo is not None:
            query = query.filter(Maquininha.ativo == ativo)
        return query.order_by(Maquininha.nome).all()

    def buscar(self, db: Session, usuario_id: int, maquininha_id: int) -> Maquininha:
        return buscar_do_usuario(db, Maquininha, maquininha_id, usuario_id, "Maquininha")

    def criar(self, db: Session, usuario_id: int, dados: Dict[str, Any]) -> Maquininha:
        dados = dict(dados)
        taxas = dados.pop("taxas", None) or []
        buscar_banco(db, usuario_id, dados["banco_id"])

        maquininha = Maquininha(**dados, usuario_id=usuario_id)
        maquininha.taxas = [TaxaMaquininha(**t) for t in taxas]
        db.add(maquininha)
        db.flush()
        _log_audit(db, usuario_id, AuditAction.CREATE, "maquininha", maquininha.id, new_values=snapshot(maquininha))
        db.commit()
        db.refresh(maquininha)
        logger.info(f"Maquininha criada: id={maquininha.id} operadora={maquininha.operadora} taxas={len(taxas)}")
        return maquininha

    def atualizar(self, db: Session, usuario_id: int, maquininha_id: int, dados: Dict[str, Any]) -> Maquininha:
        maquininha = self.buscar(db, usuario_id, maquininha_id)
        dados = dict(dados)
        taxas = dados.pop("taxas", None)
        if dados.get("banco_id"):
            buscar_banco(db, usuario_id, dados["banco_id"])

        antigos = aplicar_alteracoes(maquininha, dados)
        if taxas is not None:
            antigos["taxas"] = len(maquininha.taxas)
            maquininha.taxas = [TaxaMaquininha(**t) for t in taxas]

        if antigos:
            _log_audit(db, usuario_id, AuditAction.UPDATE, "maquininha", maquininha.id, old_values=antigos)
        db.commit()
        db.refresh(maquininha)
        return maquininha

    def deletar(self, db: Session, usuario_id: int, maquininha_id: int) -> bool:
        maquininha = self.buscar(db, usuario_id, maquininha_id)
        conciliadas = db.query(VendaMaquininha).filter(
            VendaMaquininha.maquininha_id == maquininha_id,
            VendaMaquininha.status == "conciliado",
        ).count()
        if conciliadas:
            raise BusinessRuleError(
                f"Maquininha possui {conciliadas} venda(s) conciliada(s). Desative em vez de excluir."
            )
        _log_audit(db, usuario_id, AuditAction.DELETE, "maquininha", maquininha.id, old_values=snapshot(maquininha))
        db.delete(maquininha)
        db.commit()
        return True

    def alternar_status(self, db: Session, usuario_id: int, maquininha_id: int) -> Maquininha:
        maquininha = self.buscar(db, usuario_id, maquininha_id)
        maquininha.ativo = not maquininha.ativo
        db.commit()
        db.refresh(maquininha)
        return maquininha

    # ============================================================
    # IMPORTAÇÃO
    # ============================================================

    def importar_vendas(
        self, db: Session, usuario_id: int, maquininha_id: int, vendas: List[Dict[str, Any]]
    ) -> List[VendaMaquininha]:
        maquininha = self.buscar(db, usuario_id, maquininha_id)
        logger.info(f"Importando {len(vendas)} venda(s) da maquininha {maquininha.nome}")

        registros = []
        for item in vendas:
            bruto = arredondar(item["valor_bruto"])
            if item.get("valor_taxa") is not None:
                valor_taxa = arredondar(item["valor_taxa"])
            else:
                valor_taxa = calcular_taxa(
                    maquininha, item["bandeira"], item["tipo_transacao"], item.get("parcelas") or 1, bruto
                )["valor_taxa"]

            data_venda = item["data_venda"]
            registro = VendaMaquininha(
                usuario_id=usuario_id,
                maquininha_id=maquininha.id,
                nsu=item.get("nsu"),
                data_venda=data_venda,
                data_recebimento=item.get("data_recebimento")
                or data_recebimento_prevista(data_venda, item["tipo_transacao"]),
                bandeira=item["bandeira"].lower(),
                tipo_transacao=item["tipo_transacao"],
                parcelas=item.get("parcelas") or 1,
                valor_bruto=bruto,
                valor_taxa=valor_taxa,
                valor_liquido=bruto - valor_taxa,
                taxa_percentual_cobrada=arredondar(valor_taxa / bruto * 100) if bruto else None,
                periodo_processamento=data_venda.strftime("%Y-%m"),
                status="pendente",
            )
            db.add(registro)
            registros.append(registro)

        db.flush()
        _log_audit(
            db, usuario_id, AuditAction.IMPORTACAO, "venda_maquininha", maquininha.id,
            new_values={"quantidade": len(registros)},
        )
        db.commit()
        return registros

    def importar_recebimentos(
        self, db: Session, usuario_id: int, banco_id: int, recebimentos: List[Dict[str, Any]]
    ) -> List[RecebimentoBancario]:
        buscar_banco(db, usuario_id, banco_id)
        registros = []
        for item in recebimentos:
            registro = RecebimentoBancario(
                usuario_id=usuario_id,
                banco_id=banco_id,
                data_recebimento=item["data_recebimento"],
                valor=arredondar(item["valor"]),
                descricao=item.get("descricao"),
                documento=item.get("documento"),
                tipo_operacao=item.get("tipo_operacao"),
                periodo_processamento=item["data_recebimento"].strftime("%Y-%m"),
                status="pendente",
            )
            db.add(registro)
            registros.append(registro)

        db.flush()
        _log_audit(
            db, usuario_id, AuditAction.IMPORTACAO, "recebimento_bancario", banco_id,
            new_values={"quantidade": len(registros)},
        )
        db.commit()
        logger.info(f"{len(registros)} recebimento(s) importado(s) para o banco {banco_id}")
        return registros

    # ============================================================
    # CONCILIAÇÃO
    # ============================================================

    def conciliar(
        self,
        db: Session,
        usuario_id: int,
        maquininha_id: int,
        periodo: str,
        tolerancia_valor: Optional[Decimal] = None,
        tolerancia_dias: Optional[int] = None,
    ) -> ConciliacaoMaquininha:
        """
        Concilia as vendas do período com os créditos do banco da maquininha.

        Fluxo:
        1. Carrega as vendas pendentes/divergentes do período
        2. Agrupa o valor líquido por data prevista de recebimento
        3. Casa cada data com um crédito dentro da tolerância
        4. Atualiza status e grava o resultado
        """
        maquininha = self.buscar(db, usuario_id, maquininha_id)
        _intervalo_periodo(periodo)

        logger.info("=" * 50)
        logger.info(f"CONCILIACAO MAQUININHA - {maquininha.nome} ({maquininha.operadora}) - {periodo}")
        logger.info("=" * 50)

        # ==========================
        # 1. VENDAS
        # ==========================
        vendas = (
            db.query(VendaMaquininha)
            .filter(
                VendaMaquininha.usuario_id == usuario_id,
                VendaMaquininha.maquininha_id == maquininha.id,
                VendaMaquininha.periodo_processamento == periodo,
                VendaMaquininha.status.in_(("pendente", "divergente")),
            )
            .order_by(VendaMaquininha.data_recebimento)
            .all()
        )
        logger.info(f"[1/4] Vendas a conciliar: {len(vendas)}")
        if not vendas:
            raise BusinessRuleError(f"Nenhuma venda pendente para o período {periodo}")

        if tolerancia_valor is None or tolerancia_dias is None:
            padrao = identificar_padroes(maquininha.operadora, [_venda_dict(v) for v in vendas])
            sugerida = padrao["tolerancia_recomendada"]
            if tolerancia_valor is None:
                tolerancia_valor = Decimal(str(sugerida["valor"]))
            if tolerancia_dias is None:
                tolerancia_dias = int(sugerida["dias"])
        tolerancia_valor = Decimal(str(tolerancia_valor))
        logger.info(f"   Tolerância: R$ {tolerancia_valor} / {tolerancia_dias} dia(s)")

        # ==========================
        # 2. AGRUPAR POR DATA PREVISTA
        # ==========================
        grupos: Dict[date, Decimal] = OrderedDict()
        vendas_por_data: Dict[date, List[VendaMaquininha]] = {}
        for v in vendas:
            grupos[v.data_recebimento] = grupos.get(v.data_recebimento, Decimal("0")) + Decimal(v.valor_liquido)
            vendas_por_data.setdefault(v.data_recebimento, []).append(v)
        logger.info(f"[2/4] Datas de recebimento previstas: {len(grupos)}")

        # ==========================
        # 3. CASAR COM RECEBIMENTOS
        # ==========================
        inicio = min(grupos) - timedelta(days=tolerancia_dias)
        fim = max(grupos) + timedelta(days=tolerancia_dias)
        recebimentos = (
            db.query(RecebimentoBancario)
            .filter(
                RecebimentoBancario.usuario_id == usuario_id,
                RecebimentoBancario.banco_id == maquininha.banco_id,
                RecebimentoBancario.status == "pendente",
                RecebimentoBancario.data_recebimento.between(inicio, fim),
            )
            .all()
        )
        por_id = {r.id: r for r in recebimentos}
        casamentos = casar_recebimentos(
            grupos,
            [{"id": r.id, "data_recebimento": r.data_recebimento, "valor": r.valor} for r in recebimentos],
            tolerancia_valor,
            tolerancia_dias,
        )
        logger.info(f"[3/4] Recebimentos candidatos: {len(recebimentos)}")

        # ==========================
        # 4. ATUALIZAR E GRAVAR
        # ==========================
        total_recebido = Decimal("0")
        divergentes = 0
        for casamento in casamentos:
            recebimento = por_id.get(casamento["recebimento_id"])
            for v in vendas_por_data[casamento["data_prevista"]]:
                v.status = casamento["status"]
                v.recebimento_id = recebimento.id if recebimento else None
            if recebimento:
                recebimento.status = "conciliado"
                total_recebido += Decimal(recebimento.valor)
            else:
                divergentes += 1

        total_bruto = sum((Decimal(v.valor_bruto) for v in vendas), Decimal("0"))
        total_taxas = sum((Decimal(v.valor_taxa) for v in vendas), Decimal("0"))
        total_liquido = sum((Decimal(v.valor_liquido) for v in vendas), Decimal("0"))
        taxa_sucesso = (len(casamentos) - divergentes) / len(casamentos)

        anomalias = detectar_anomalias(
            [_venda_dict(v) for v in vendas],
            [{"valor": float(r.valor)} for r in recebimentos],
            maquininha.operadora,
        )

        conciliacao = ConciliacaoMaquininha(
            usuario_id=usuario_id,
            maquininha_id=maquininha.id,
            periodo=periodo,
            total_vendas=total_bruto,
            total_recebimentos=total_recebido,
            total_taxas=total_taxas,
            diferenca=total_liquido - total_recebido,
            status="ok" if divergentes == 0 else "divergencia",
            observacoes=(
                "Todas as datas conciliadas" if divergentes == 0
                else f"{divergentes} data(s) sem recebimento correspondente"
            ),
            detalhes={
                "tolerancia_valor": float(tolerancia_valor),
                "tolerancia_dias": tolerancia_dias,
                "taxa_sucesso": round(taxa_sucesso, 4),
                "grupos": [
                    {
                        "data_prevista": c["data_prevista"].isoformat(),
                        "valor_esperado": float(c["valor_esperado"]),
                        "recebimento_id": c["recebimento_id"],
                        "valor_recebido": float(c["valor_recebido"]) if c["valor_recebido"] is not None else None,
                        "status": c["status"],
                    }
                    for c in casamentos
                ],
                "anomalias": anomalias,
            },
        )
        db.add(conciliacao)
        db.flush()
        _log_audit(
            db, usuario_id, AuditAction.CONCILIACAO, "conciliacao_maquininha", conciliacao.id,
            new_values={"periodo": periodo, "status": conciliacao.status},
        )
        db.commit()
        db.refresh(conciliacao)

        logger.info(f"[4/4] Status: {conciliacao.status} | diferença: {conciliacao.diferenca}")
        logger.info("=" * 50)
        return conciliacao

    def listar_conciliacoes(
        self, db: Session, usuario_id: int, maquininha_id: Optional[int] = None, limit: int = 20
    ) -> List[ConciliacaoMaquininha]:
        query = db.query(ConciliacaoMaquininha).filter(ConciliacaoMaquininha.usuario_id == usuario_id)
        if maquininha_id:
            query = query.filter(ConciliacaoMaquininha.maquininha_id == maquininha_id)
        return query.order_by(ConciliacaoMaquininha.id.desc()).limit(limit).all()

    # ============================================================
    # ANÁLISE / DASHBOARD
    # ============================================================

    def analisar_operadora(
        self, db: Session, usuario_id: int, maquininha_id: int, hoje: Optional[date] = None
    ) -> Dict[str, Any]:
        maquininha = self.buscar(db, usuario_id, maquininha_id)
        hoje = hoje or date.today()

        historicas = (
            db.query(VendaMaquininha)
            .filter(
                VendaMaquininha.maquininha_id == maquininha.id,
                VendaMaquininha.data_venda >= hoje - relativedelta(months=6),
            )
            .all()
        )
        padrao = identificar_padroes(maquininha.operadora, [_venda_dict(v) for v in historicas])

        limite = hoje - relativedelta(months=1)
        recentes = [v for v in historicas if v.data_venda >= limite]
        recebimentos = (
            db.query(RecebimentoBancario)
            .filter(
                RecebimentoBancario.banco_id == maquininha.banco_id,
                RecebimentoBancario.data_recebimento >= limite,
            )
            .all()
        )
        anomalias = detectar_anomalias(
            [_venda_dict(v) for v in recentes],
            [{"valor": float(r.valor)} for r in recebimentos],
            maquininha.operadora,
        )
        return {
            "padroes": padrao,
            "anomalias": anomalias,
            "recomendacoes": gerar_recomendacoes(padrao, anomalias),
        }

    def sugerir_tolerancia(
        self, db: Session, usuario_id: int, maquininha_id: int, historico: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        maquininha = self.buscar(db, usuario_id, maquininha_id)
        if not historico:
            historico = [
                c.detalhes for c in self.listar_conciliacoes(db, usuario_id, maquininha.id)
                if c.detalhes and "taxa_sucesso" in c.detalhes
            ]
        return sugerir_tolerancia_otima(historico, maquininha.operadora)

    def dashboard(self, db: Session, usuario_id: int, hoje: Optional[date] = None) -> Dict[str, Any]:
        hoje = hoje or date.today()
        inicio_mes = hoje.replace(day=1)
        fim_mes = inicio_mes + relativedelta(months=1, days=-1)

        ativas = db.query(Maquininha).filter(
            Maquininha.usuario_id == usuario_id, Maquininha.ativo == True
        ).count()

        base = db.query(VendaMaquininha).filter(VendaMaquininha.usuario_id == usuario_id)
        total_vendas = base.count()
        conciliadas = base.filter(VendaMaquininha.status == "conciliado").count()

        recebido_mes = db.query(func.coalesce(func.sum(VendaMaquininha.valor_liquido), 0)).filter(
            VendaMaquininha.usuario_id == usuario_id,
            VendaMaquininha.status == "conciliado",
            VendaMaquininha.data_recebimento.between(inicio_mes, fim_mes),
        ).scalar()
        taxas_pagas = db.query(func.coalesce(func.sum(VendaMaquininha.valor_taxa), 0)).filter(
            VendaMaquininha.usuario_id == usuario_id,
            VendaMaquininha.data_venda.between(inicio_mes, fim_mes),
        ).scalar()

        return {
            "maquininhas_ativas": ativas,
            "taxa_conciliacao": round(conciliadas / total_vendas * 100, 2) if total_vendas else 0.0,
            "recebido_mes": float(recebido_mes or 0),
            "taxas_pagas": float(taxas_pagas or 0),
            "ultimas_conciliacoes": self.listar_conciliacoes(db, usuario_id, limit=5),
        }

    def relatorio_taxas(self, db: Session, usuario_id: int, periodo: Optional[str] = None) -> List[Dict[str, Any]]:
        query = (
            db.query(
                Maquininha.operadora,
                func.count(VendaMaquininha.id),
                func.coalesce(func.sum(VendaMaquininha.valor_bruto), 0),
                func.coalesce(func.sum(VendaMaquininha.valor_taxa), 0),
            )
            .join(Maquininha, Maquininha.id == VendaMaquininha.maquininha_id)
            .filter(VendaMaquininha.usuario_id == usuario_id)
        )
        if periodo:
            query = query.filter(VendaMaquininha.periodo_processamento == periodo)

        relatorio = []
        for operadora, quantidade, bruto, taxas in query.group_by(Maquininha.operadora).all():
            bruto, taxas = float(bruto or 0), float(taxas or 0)
            relatorio.append({
                "operadora": operadora,
                "quantidade_vendas": quantidade,
                "valor_bruto": round(bruto, 2),
                "valor_taxas": round(taxas, 2),
                "taxa_media": round(taxas / bruto * 100, 2) if bruto else 0.0,
            })
        return relatorio


maquininha_service = MaquininhaService()
