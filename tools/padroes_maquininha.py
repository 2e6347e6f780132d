import math
from typing import Any, Dict, List, Optional

import pandas as pd

# Padrões de mercado das operadoras, usados quando não há histórico suficiente
PADROES_CONHECIDOS: Dict[str, Dict[str, Any]] = {
    "rede": {
        "operadora": "rede",
        "delay_medio_recebimento": 1.2,
        "variacao_valor_comum": 0.50,
        "bandeiras_mais_comuns": ["visa", "mastercard", "elo"],
        "tipos_transacao_frequentes": ["debito", "credito_vista", "credito_parcelado"],
        "parcelas_medio": 2.1,
        "tolerancia_recomendada": {"valor": 0.75, "dias": 1},
        "padroes_sazonais": [
            {"mes": 12, "multiplicador_volume": 1.8},
            {"mes": 5, "multiplicador_volume": 1.3},
            {"mes": 8, "multiplicador_volume": 1.2},
        ],
    },
    "sipag": {
        "operadora": "sipag",
        "delay_medio_recebimento": 1.8,
        "variacao_valor_comum": 0.80,
        "bandeiras_mais_comuns": ["visa", "mastercard", "elo", "american_express"],
        "tipos_transacao_frequentes": ["debito", "credito_vista", "pix"],
        "parcelas_medio": 1.9,
        "tolerancia_recomendada": {"valor": 1.00, "dias": 2},
        "padroes_sazonais": [
            {"mes": 12, "multiplicador_volume": 1.9},
            {"mes": 6, "multiplicador_volume": 1.4},
            {"mes": 10, "multiplicador_volume": 1.1},
        ],
    },
}

MINIMO_VENDAS_ANALISE = 10
TAXA_SUCESSO_MINIMA = 0.85


def padrao_operadora(operadora: Optional[str]) -> Dict[str, Any]:
    return PADROES_CONHECIDOS.get((operadora or "").lower(), PADROES_CONHECIDOS["rede"])


def _vendas_df(vendas: List[Dict[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame(vendas)
    for coluna in ("data_venda", "data_recebimento"):
        if coluna in df.columns:
            df[coluna] = pd.to_datetime(df[coluna], errors="coerce")
    for coluna in ("valor_bruto", "valor_liquido", "parcelas"):
        if coluna in df.columns:
            df[coluna] = pd.to_numeric(df[coluna], errors="coerce")
    return df


def _delays(df: pd.DataFrame) -> pd.Series:
    if "data_venda" not in df.columns or "data_recebimento" not in df.columns:
        return pd.Series(dtype=float)
    validas = df.dropna(subset=["data_venda", "data_recebimento"])
    return (validas["data_recebimento"] - validas["data_venda"]).dt.days.astype(float)


def identificar_padroes(operadora: str, vendas: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Identifica o padrão de recebimento de uma operadora a partir das vendas.

    Com menos de 10 vendas devolve o padrão conhecido da operadora.
    A tolerância sugerida sai do delay médio e da variação média entre
    valor bruto e líquido.
    """
    conhecido = padrao_operadora(operadora)
    if len(vendas) < MINIMO_VENDAS_ANALISE:
        return dict(conhecido)

    df = _vendas_df(vendas)

    delays = _delays(df).abs()
    delay_medio = float(delays.mean()) if not delays.empty else conhecido["delay_medio_recebimento"]

    variacoes = (df["valor_bruto"] - df["valor_liquido"]).abs()
    variacoes = variacoes[variacoes > 0]
    variacao_media = float(variacoes.mean()) if not variacoes.empty else conhecido["variacao_valor_comum"]

    bandeiras = df["bandeira"].astype(str).str.lower().value_counts().head(5).index.tolist()
    tipos = df["tipo_transacao"].astype(str).str.lower().value_counts().head(4).index.tolist()
    parcelas_medio = float(df["parcelas"].fillna(1).mean()) if "parcelas" in df.columns else 1.5

    tolerancia_valor = max(0.25, min(2.0, variacao_media * 1.2))
    tolerancia_dias = max(0, min(3, math.ceil(delay_medio + 0.5)))

    return {
        "operadora": operadora,
        "delay_medio_recebimento": round(delay_medio, 1),
        "variacao_valor_comum": round(variacao_media, 2),
        "bandeiras_mais_comuns": bandeiras or ["visa", "mastercard"],
        "tipos_transacao_frequentes": tipos or ["debito", "credito"],
        "parcelas_medio": round(parcelas_medio, 1),
        "tolerancia_recomendada": {"valor": round(tolerancia_valor, 2), "dias": tolerancia_dias},
        "padroes_sazonais": conhecido["padroes_sazonais"],
    }


def sugerir_tolerancia_otima(historico: List[Dict[str, Any]], operadora: str) -> Dict[str, Any]:
    """Média das tolerâncias das conciliações com taxa de sucesso acima de 85%."""
    padrao = padrao_operadora(operadora)["tolerancia_recomendada"]
    if not historico:
        return dict(padrao)

    df = pd.DataFrame(historico)
    sucessos = df[df["taxa_sucesso"].astype(float) > TAXA_SUCESSO_MINIMA]
    if sucessos.empty:
        return dict(padrao)

    return {
        "valor": round(float(sucessos["tolerancia_valor"].astype(float).mean()), 2),
        "dias": int(round(float(sucessos["tolerancia_dias"].astype(float).mean()))),
    }


def detectar_anomalias(
    vendas: List[Dict[str, Any]],
    recebimentos: List[Dict[str, Any]],
    operadora: str,
) -> List[str]:
    anomalias: List[str] = []
    if not vendas:
        return anomalias

    padrao = padrao_operadora(operadora)
    df = _vendas_df(vendas)

    # 1. Volume
    volume_esperado, volume_recebido = len(vendas), len(recebimentos)
    diferenca = abs(volume_esperado - volume_recebido) / volume_esperado
    if diferenca > 0.3:
        anomalias.append(
            f"Volume divergente: {volume_esperado} vendas vs {volume_recebido} recebimentos "
            f"({diferenca * 100:.1f}% diferença)"
        )

    # 2. Delay
    delays = _delays(df)
    if not delays.empty:
        delay_medio = float(delays.mean())
        if abs(delay_medio - padrao["delay_medio_recebimento"]) > 1.0:
            anomalias.append(
                f"Delay anômalo: {delay_medio:.1f} dias vs esperado {padrao['delay_medio_recebimento']} dias"
            )

    # 3. Valores
    soma_vendas = float(df["valor_liquido"].fillna(0).sum())
    soma_recebimentos = float(sum(float(r.get("valor") or 0) for r in recebimentos))
    diferenca_valor = abs(soma_vendas - soma_recebimentos)
    if soma_vendas > 0 and diferenca_valor > soma_vendas * 0.05:
        anomalias.append(
            f"Diferença de valor significativa: R$ {diferenca_valor:.2f} "
            f"({diferenca_valor / soma_vendas * 100:.1f}%)"
        )

    # 4. Bandeira predominante
    if "bandeira" in df.columns:
        contagem = df["bandeira"].fillna("unknown").astype(str).str.lower().value_counts()
        principal = contagem.index[0] if not contagem.empty else None
        if principal and principal not in padrao["bandeiras_mais_comuns"]:
            anomalias.append(
                f"Bandeira incomum predominante: {principal} "
                f"(esperado: {', '.join(padrao['bandeiras_mais_comuns'])})"
            )

    return anomalias


def gerar_recomendacoes(padrao: Dict[str, Any], anomalias: List[str]) -> List[str]:
    tolerancia = padrao["tolerancia_recomendada"]
    recomendacoes = [
        f"Use tolerância de R$ {tolerancia['valor']} e {tolerancia['dias']} dias",
        f"Monitore especialmente as bandeiras: {', '.join(padrao['bandeiras_mais_comuns'][:3])}",
        f"Delay esperado: {padrao['delay_medio_recebimento']} dias em média",
    ]
    if anomalias:
        recomendacoes.append("Anomalias detectadas - revisar manualmente")
    if tolerancia["valor"] > 1.5:
        recomendacoes.append("Considere negociar taxas menores com a operadora")
    return recomendacoes
