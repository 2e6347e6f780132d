"""
Formatação no padrão brasileiro: moeda, datas, números e máscaras de documento.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional, Union

from tools.validacoes import somente_digitos

CENTAVOS = Decimal("0.01")

MESES_PT = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]

MESES_ABREV_PT = ["Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez"]

DIAS_SEMANA_PT = [
    "segunda-feira", "terça-feira", "quarta-feira", "quinta-feira",
    "sexta-feira", "sábado", "domingo",
]


def arredondar(valor: Any) -> Decimal:
    """Arredonda para centavos (meio para cima)."""
    return Decimal(str(valor)).quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def _para_decimal(valor: Any) -> Optional[Decimal]:
    if valor is None or isinstance(valor, bool):
        return None
    try:
        numero = Decimal(str(valor).strip())
    except (InvalidOperation, ValueError):
        return None
    return numero if numero.is_finite() else None


def _agrupar_milhar(numero: Decimal, casas: int) -> str:
    texto = f"{abs(numero):,.{casas}f}"
    return texto.replace(",", "X").replace(".", ",").replace("X", ".")


# =============================================================================
# MOEDA
# =============================================================================

def formatar_moeda(valor: Union[int, float, str, Decimal, None]) -> str:
    """Formata valor como moeda brasileira: R$ 1.234,56 / -R$ 1.234,56."""
    numero = _para_decimal(valor)
    if numero is None:
        return "R$ 0,00"
    numero = arredondar(numero)
    sinal = "-" if numero < 0 else ""
    return f"{sinal}R$ {_agrupar_milhar(numero, 2)}"


def aplicar_mascara_moeda(valor: Optional[str]) -> str:
    """Máscara de digitação: os dígitos informados são centavos."""
    digitos = somente_digitos(valor)
    if not digitos:
        return ""
    return formatar_moeda(Decimal(int(digitos)) / 100)


def converter_moeda_para_numero(valor_formatado: Optional[str]) -> Decimal:
    """Converte 'R$ 1.234,56' em Decimal('1234.56'). Entrada inválida vira zero."""
    if not valor_formatado:
        return Decimal("0")
    texto = str(valor_formatado).strip()
    negativo = texto.startswith("-")
    limpo = re.sub(r"[R$\s\-]", "", texto).replace(".", "").replace(",", ".")
    numero = _para_decimal(limpo)
    if numero is None:
        return Decimal("0")
    return -numero if negativo else numero


# =============================================================================
# NÚMEROS
# =============================================================================

def formatar_numero(valor: Any, casas: int = 2) -> str:
    numero = _para_decimal(valor)
    if numero is None:
        numero = Decimal("0")
    sinal = "-" if numero < 0 else ""
    return f"{sinal}{_agrupar_milhar(numero, casas)}"


def formatar_porcentagem(valor: Any, casas: int = 2) -> str:
    return f"{formatar_numero(valor, casas)}%"


# =============================================================================
# DATAS
# =============================================================================

def _para_datetime(valor: Union[str, date, datetime, None]) -> Optional[datetime]:
    if valor is None or valor == "":
        return None
    if isinstance(valor, datetime):
        return valor
    if isinstance(valor, date):
        return datetime(valor.year, valor.month, valor.day)
    texto = str(valor).strip()
    try:
        return datetime.fromisoformat(texto.replace("Z", "+00:00"))
    except ValueError:
        pass
    try:
        return datetime.strptime(texto, "%d/%m/%Y")
    except ValueError:
        return None


def formatar_data(valor: Union[str, date, datetime, None]) -> str:
    """DD/MM/YYYY; string vazia quando a data é inválida."""
    dt = _para_datetime(valor)
    return dt.strftime("%d/%m/%Y") if dt else ""


def formatar_data_hora(valor: Union[str, date, datetime, None]) -> str:
    """DD/MM/YYYY HH:MM; string vazia quando a data é inválida."""
    dt = _para_datetime(valor)
    return dt.strftime("%d/%m/%Y %H:%M") if dt else ""


def formatar_data_extenso(valor: date) -> str:
    """Ex.: segunda-feira, 6 de janeiro de 2025."""
    return f"{DIAS_SEMANA_PT[valor.weekday()]}, {valor.day} de {MESES_PT[valor.month - 1]} de {valor.year}"


def rotulo_mes(ano: int, mes: int) -> str:
    """Ex.: Jan/2025."""
    return f"{MESES_ABREV_PT[mes - 1]}/{ano}"


# =============================================================================
# MÁSCARAS (aplicadas progressivamente durante a digitação)
# =============================================================================

def mascara_cpf(valor: Optional[str]) -> str:
    d = somente_digitos(valor)[:11]
    if len(d) <= 3:
        return d
    if len(d) <= 6:
        return f"{d[:3]}.{d[3:]}"
    if len(d) <= 9:
        return f"{d[:3]}.{d[3:6]}.{d[6:]}"
    return f"{d[:3]}.{d[3:6]}.{d[6:9]}-{d[9:]}"


def mascara_cnpj(valor: Optional[str]) -> str:
    d = somente_digitos(valor)[:14]
    if len(d) <= 2:
        return d
    if len(d) <= 5:
        return f"{d[:2]}.{d[2:]}"
    if len(d) <= 8:
        return f"{d[:2]}.{d[2:5]}.{d[5:]}"
    if len(d) <= 12:
        return f"{d[:2]}.{d[2:5]}.{d[5:8]}/{d[8:]}"
    return f"{d[:2]}.{d[2:5]}.{d[5:8]}/{d[8:12]}-{d[12:]}"


def mascara_documento(valor: Optional[str]) -> str:
    d = somente_digitos(valor)
    return mascara_cpf(d) if len(d) <= 11 else mascara_cnpj(d)


def mascara_telefone(valor: Optional[str]) -> str:
    d = somente_digitos(valor)[:11]
    if not d:
        return ""
    if len(d) <= 2:
        return f"({d}"
    if len(d) <= 6:
        return f"({d[:2]}) {d[2:]}"
    if len(d) <= 10:
        return f"({d[:2]}) {d[2:6]}-{d[6:]}"
    return f"({d[:2]}) {d[2:7]}-{d[7:]}"


def mascara_cep(valor: Optional[str]) -> str:
    d = somente_digitos(valor)[:8]
    if len(d) <= 5:
        return d
    return f"{d[:5]}-{d[5:]}"
