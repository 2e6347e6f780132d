"""
Cálculos de relatório sem acesso a banco: agrupamentos e DRE.

As entradas são listas de dicts já carregadas pelo service.
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pandas as pd

from tools.formatacao import arredondar, formatar_data, rotulo_mes

PERCENTUAL_IMPOSTOS_PADRAO = Decimal("8.5")
PERCENTUAL_DEVOLUCOES_PADRAO = Decimal("1.5")

GRANULARIDADES = ("dia", "semana", "mes", "ano")


# =============================================================================
# AGRUPAMENTOS
# =============================================================================

def _percentuais(df: pd.DataFrame) -> pd.DataFrame:
    total_geral = df["total"].sum()
    df["percentual"] = (df["total"] / total_geral * 100).round(2) if total_geral else 0.0
    df["total"] = df["total"].round(2)
    return df


def agrupar_por_categoria(linhas: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Agrupa linhas {data, valor, categoria} por categoria.

    Retorna [{chave, rotulo, total, quantidade, percentual}] do maior total
    para o menor.
    """
    if not linhas:
        return []

    df = pd.DataFrame(linhas)
    df["categoria"] = df["categoria"].fillna("Sem categoria").astype(str)
    df["valor"] = pd.to_numeric(df["valor"], errors="coerce").fillna(0.0)

    grupos = (
        df.groupby("categoria")
        .agg(total=("valor", "sum"), quantidade=("valor", "size"))
        .reset_index()
    )
    grupos = _percentuais(grupos).sort_values(by=["total", "categoria"], ascending=[False, True])

    return [
        {
            "chave": r.categoria,
            "rotulo": r.categoria,
            "total": float(r.total),
            "quantidade": int(r.quantidade),
            "percentual": float(r.percentual),
        }
        for r in grupos.itertuples(index=False)
    ]


def _chave_periodo(data: date, granularidade: str) -> tuple:
    if granularidade == "dia":
        return data.isoformat(), formatar_data(data)
    if granularidade == "semana":
        ano, semana, _ = data.isocalendar()
        return f"{ano}-W{semana:02d}", f"Semana {semana:02d}/{ano}"
    if granularidade == "mes":
        return f"{data.year}-{data.month:02d}", rotulo_mes(data.year, data.month)
    return str(data.year), str(data.year)


def agrupar_por_periodo(linhas: List[Dict[str, Any]], granularidade: str = "mes") -> List[Dict[str, Any]]:
    """Agrupa linhas {data, valor, ...} por dia, semana ISO, mês ou ano, em ordem cronológica."""
    if granularidade not in GRANULARIDADES:
        raise ValueError(f"Granularidade inválida: {granularidade}. Use: {', '.join(GRANULARIDADES)}")
    if not linhas:
        return []

    df = pd.DataFrame(linhas)
    df["data"] = pd.to_datetime(df["data"], errors="coerce")
    df = df.dropna(subset=["data"])
    if df.empty:
        return []
    df["valor"] = pd.to_numeric(df["valor"], errors="coerce").fillna(0.0)

    chaves = [_chave_periodo(d, granularidade) for d in df["data"].dt.date]
    df["chave"] = [c[0] for c in chaves]
    df["rotulo"] = [c[1] for c in chaves]

    grupos = (
        df.groupby(["chave", "rotulo"])
        .agg(total=("valor", "sum"), quantidade=("valor", "size"))
        .reset_index()
    )
    grupos = _percentuais(grupos).sort_values(by="chave")

    return [
        {
            "chave": r.chave,
            "rotulo": r.rotulo,
            "total": float(r.total),
            "quantidade": int(r.quantidade),
            "percentual": float(r.percentual),
        }
        for r in grupos.itertuples(index=False)
    ]


# =============================================================================
# DRE
# =============================================================================

def _soma(itens: List[Dict[str, Any]]) -> Decimal:
    return sum((Decimal(str(i["valor"])) for i in itens), Decimal("0"))


def _por_categoria(itens: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    totais: Dict[str, Dict[str, Any]] = {}
    for item in itens:
        nome = item.get("categoria") or "Sem categoria"
        grupo = totais.setdefault(nome, {"categoria": nome, "categoria_id": item.get("categoria_id"), "valor": Decimal("0")})
        grupo["valor"] += Decimal(str(item["valor"]))
    return sorted(totais.values(), key=lambda g: (-g["valor"], g["categoria"]))


def _linha(codigo: str, descricao: str, valor: Decimal, nivel: int, tipo: str, categoria_id: Optional[int] = None) -> Dict[str, Any]:
    return {
        "codigo": codigo,
        "descricao": descricao,
        "valor": arredondar(valor),
        "nivel": nivel,
        "tipo": tipo,
        "categoria_id": categoria_id,
        "valor_comparacao": None,
        "variacao_percentual": None,
    }


def _margem(valor: Decimal, receita_liquida: Decimal) -> Decimal:
    if receita_liquida <= 0:
        return Decimal("0")
    return arredondar(valor / receita_liquida * 100)


def calcular_dre(
    receitas: List[Dict[str, Any]],
    despesas: List[Dict[str, Any]],
    dados_essenciais: Optional[Dict[str, Any]] = None,
    comparacao: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Monta a DRE a partir das receitas e despesas do período.

    receitas: [{categoria, categoria_id, valor}]
    despesas: [{categoria, categoria_id, tipo_dre, valor}]
    dados_essenciais: cmv_valor, deducoes_receita, percentual_impostos,
        percentual_devolucoes (todos opcionais)
    comparacao: resultado de outra chamada de calcular_dre (período anterior)

    Deduções, custos e despesas aparecem com valor negativo nas linhas.
    """
    dados = dados_essenciais or {}

    # 1. Receita bruta
    receita_bruta = _soma(receitas)
    linhas = [_linha("1", "RECEITA OPERACIONAL BRUTA", receita_bruta, 1, "total")]
    for i, grupo in enumerate(_por_categoria(receitas), start=1):
        linhas.append(_linha(f"1.{i}", grupo["categoria"], grupo["valor"], 2, "receita", grupo["categoria_id"]))

    # 2. Deduções
    pct_impostos = Decimal(str(dados.get("percentual_impostos") if dados.get("percentual_impostos") is not None else PERCENTUAL_IMPOSTOS_PADRAO))
    pct_devolucoes = Decimal(str(dados.get("percentual_devolucoes") if dados.get("percentual_devolucoes") is not None else PERCENTUAL_DEVOLUCOES_PADRAO))
    pct_total = pct_impostos + pct_devolucoes

    if dados.get("deducoes_receita") is not None:
        deducoes = arredondar(dados["deducoes_receita"])
        impostos = arredondar(deducoes * pct_impostos / pct_total) if pct_total else deducoes
    else:
        deducoes = arredondar(receita_bruta * pct_total / 100)
        impostos = arredondar(receita_bruta * pct_impostos / 100)
    devolucoes = deducoes - impostos

    linhas.append(_linha("2", "(-) DEDUÇÕES DA RECEITA", -deducoes, 1, "total"))
    linhas.append(_linha("2.1", "Impostos sobre Vendas", -impostos, 2, "deducao"))
    linhas.append(_linha("2.2", "Devoluções e Abatimentos", -devolucoes, 2, "deducao"))

    receita_liquida = receita_bruta - deducoes
    linhas.append(_linha("RL", "= RECEITA LÍQUIDA", receita_liquida, 1, "subtotal"))

    # 3. Custos
    custos_lancados = [d for d in despesas if d.get("tipo_dre") == "custo"]
    if dados.get("cmv_valor") is not None:
        custos = arredondar(dados["cmv_valor"])
    else:
        custos = _soma(custos_lancados)
    linhas.append(_linha("3", "(-) CUSTO DOS PRODUTOS VENDIDOS", -custos, 1, "total"))

    lucro_bruto = receita_liquida - custos
    linhas.append(_linha("LB", "= LUCRO BRUTO", lucro_bruto, 1, "subtotal"))

    # 4. Despesas operacionais
    operacionais = [d for d in despesas if d.get("tipo_dre") != "custo"]
    total_despesas = _soma(operacionais)
    linhas.append(_linha("4", "(-) DESPESAS OPERACIONAIS", -total_despesas, 1, "total"))
    for i, grupo in enumerate(_por_categoria(operacionais), start=1):
        linhas.append(_linha(f"4.{i}", grupo["categoria"], -grupo["valor"], 2, "despesa", grupo["categoria_id"]))

    resultado_liquido = lucro_bruto - total_despesas
    linhas.append(_linha("RL_FINAL", "= RESULTADO LÍQUIDO", resultado_liquido, 1, "subtotal"))

    metricas = {
        "receita_bruta": arredondar(receita_bruta),
        "deducoes": deducoes,
        "receita_liquida": arredondar(receita_liquida),
        "custos": arredondar(custos),
        "lucro_bruto": arredondar(lucro_bruto),
        "despesas_operacionais": arredondar(total_despesas),
        "resultado_liquido": arredondar(resultado_liquido),
        "margem_bruta": _margem(lucro_bruto, receita_liquida),
        "margem_liquida": _margem(resultado_liquido, receita_liquida),
    }

    if comparacao:
        aplicar_comparacao(linhas, comparacao["linhas"])

    return {"linhas": linhas, "metricas": metricas}


def aplicar_comparacao(linhas: List[Dict[str, Any]], linhas_anteriores: List[Dict[str, Any]]) -> None:
    """Preenche valor_comparacao e variacao_percentual. Linhas de detalhe casam pela descrição."""
    por_codigo = {l["codigo"]: l for l in linhas_anteriores if "." not in l["codigo"]}
    por_descricao = {(l["codigo"].split(".")[0], l["descricao"]): l for l in linhas_anteriores if "." in l["codigo"]}

    for linha in linhas:
        if "." in linha["codigo"]:
            anterior = por_descricao.get((linha["codigo"].split(".")[0], linha["descricao"]))
        else:
            anterior = por_codigo.get(linha["codigo"])
        valor_anterior = Decimal(str(anterior["valor"])) if anterior else Decimal("0")
        linha["valor_comparacao"] = valor_anterior
        if valor_anterior != 0:
            linha["variacao_percentual"] = arredondar(
                (Decimal(str(linha["valor"])) - valor_anterior) / abs(valor_anterior) * 100
            )
