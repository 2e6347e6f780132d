"""
Validações de formulário para documentos, valores e datas brasileiros.

Cada validador devolve um ValidationResult com todas as mensagens de erro
encontradas, para que o formulário possa exibir os problemas de uma vez.
Os validadores de checksum (validar_cpf / validar_cnpj) devolvem apenas bool.
"""

import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union

from dateutil.relativedelta import relativedelta


# =============================================================================
# TIPOS
# =============================================================================

@dataclass
class ValidationResult:
    """Resultado de uma validação de campo."""
    valid: bool = True
    errors: List[str] = field(default_factory=list)

    def add(self, mensagem: str) -> "ValidationResult":
        self.valid = False
        self.errors.append(mensagem)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}


def _ok() -> ValidationResult:
    return ValidationResult()


def _erro(*mensagens: str) -> ValidationResult:
    return ValidationResult(valid=False, errors=list(mensagens))


def combine_results(*results: ValidationResult) -> ValidationResult:
    """Junta vários resultados em um só, preservando a ordem das mensagens."""
    combinado = ValidationResult()
    for r in results:
        for e in r.errors:
            combinado.add(e)
    return combinado


# =============================================================================
# CONSTANTES
# =============================================================================

DDDS_VALIDOS = {
    "11", "12", "13", "14", "15", "16", "17", "18", "19",  # SP
    "21", "22", "24",  # RJ
    "27", "28",  # ES
    "31", "32", "33", "34", "35", "37", "38",  # MG
    "41", "42", "43", "44", "45", "46",  # PR
    "47", "48", "49",  # SC
    "51", "53", "54", "55",  # RS
    "61",  # DF
    "62", "64",  # GO
    "63",  # TO
    "65", "66",  # MT
    "67",  # MS
    "68",  # AC
    "69",  # RO
    "71", "73", "74", "75", "77",  # BA
    "79",  # SE
    "81", "87",  # PE
    "82",  # AL
    "83",  # PB
    "84",  # RN
    "85", "88",  # CE
    "86", "89",  # PI
    "91", "93", "94",  # PA
    "92", "97",  # AM
    "95",  # RR
    "96",  # AP
    "98", "99",  # MA
}

PESOS_CNPJ_1 = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
PESOS_CNPJ_2 = [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]

VALOR_MAXIMO = Decimal("999999999.99")
VALOR_MINIMO = Decimal("0.01")

DATA_MINIMA = date(1900, 1, 1)
DATA_MAXIMA = date(2100, 12, 31)

EMAIL_REGEX = re.compile(r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$")
REFERENCIA_REGEX = re.compile(r"^[A-Za-z0-9\-_./\s]*$")
CONTA_REGEX = re.compile(r"^[0-9-]+$")


def somente_digitos(valor: Any) -> str:
    if valor is None:
        return ""
    return re.sub(r"\D", "", str(valor))


# =============================================================================
# CPF / CNPJ
# =============================================================================

def validar_cpf(cpf: Any) -> bool:
    """Valida CPF pelo cálculo dos dois dígitos verificadores."""
    numeros = somente_digitos(cpf)
    if len(numeros) != 11 or numeros == numeros[0] * 11:
        return False

    for posicao in (9, 10):
        soma = sum(int(numeros[i]) * (posicao + 1 - i) for i in range(posicao))
        digito = (soma * 10) % 11
        if digito == 10:
            digito = 0
        if digito != int(numeros[posicao]):
            return False
    return True


def validar_cnpj(cnpj: Any) -> bool:
    """Valida CNPJ pelo cálculo dos dois dígitos verificadores."""
    numeros = somente_digitos(cnpj)
    if len(numeros) != 14 or numeros == numeros[0] * 14:
        return False

    for pesos, posicao in ((PESOS_CNPJ_1, 12), (PESOS_CNPJ_2, 13)):
        soma = sum(int(numeros[i]) * pesos[i] for i in range(posicao))
        resto = soma % 11
        digito = 0 if resto < 2 else 11 - resto
        if digito != int(numeros[posicao]):
            return False
    return True


def validate_cpf(cpf: Optional[str]) -> ValidationResult:
    if not cpf or not str(cpf).strip():
        return _erro("CPF é obrigatório")
    numeros = somente_digitos(cpf)
    if len(numeros) != 11:
        return _erro("CPF deve ter 11 dígitos")
    if numeros == numeros[0] * 11:
        return _erro("CPF não pode ter todos os dígitos iguais")
    if not validar_cpf(numeros):
        return _erro("CPF inválido")
    return _ok()


def validate_cnpj(cnpj: Optional[str]) -> ValidationResult:
    if not cnpj or not str(cnpj).strip():
        return _erro("CNPJ é obrigatório")
    numeros = somente_digitos(cnpj)
    if len(numeros) != 14:
        return _erro("CNPJ deve ter 14 dígitos")
    if numeros == numeros[0] * 14:
        return _erro("CNPJ não pode ter todos os dígitos iguais")
    if not validar_cnpj(numeros):
        return _erro("CNPJ inválido")
    return _ok()


def validate_documento(documento: Optional[str]) -> ValidationResult:
    """Valida CPF ou CNPJ conforme a quantidade de dígitos."""
    numeros = somente_digitos(documento)
    if not numeros:
        return _erro("Documento é obrigatório")
    if len(numeros) <= 11:
        return validate_cpf(numeros)
    return validate_cnpj(numeros)


# =============================================================================
# CONTATO
# =============================================================================

def validate_email(email: Optional[str]) -> ValidationResult:
    if not email:
        return _erro("Email é obrigatório")
    if not isinstance(email, str):
        return _erro("Formato de email inválido")
    resultado = ValidationResult()
    if not EMAIL_REGEX.match(email):
        resultado.add("Formato de email inválido")
    if len(email) > 254:
        resultado.add("Email muito longo")
    return resultado


def _telefone_limpo(telefone: str) -> str:
    numeros = somente_digitos(telefone)
    if numeros.startswith("55") and len(numeros) == 13:
        return numeros[2:]
    return numeros


def validate_phone(telefone: Optional[str]) -> ValidationResult:
    if not telefone:
        return _erro("Telefone é obrigatório")
    numeros = _telefone_limpo(telefone)
    if len(numeros) not in (10, 11):
        return _erro("Telefone deve ter 10 ou 11 dígitos")

    resultado = ValidationResult()
    if numeros[:2] not in DDDS_VALIDOS:
        resultado.add("DDD inválido")
    # Celular: 11 dígitos com 9 na terceira posição; fixo: 10 dígitos sem o 9
    celular = len(numeros) == 11
    if celular != (numeros[2] == "9"):
        resultado.add("Formato de telefone inválido")
    return resultado


def validate_cep(cep: Optional[str]) -> ValidationResult:
    if not cep:
        return _erro("CEP é obrigatório")
    numeros = somente_digitos(cep)
    if len(numeros) != 8:
        return _erro("CEP deve ter 8 dígitos")
    if numeros == "0" * 8:
        return _erro("CEP inválido")
    return _ok()


# =============================================================================
# DATAS
# =============================================================================

def parse_data(valor: Union[str, date, datetime, None]) -> Optional[date]:
    """Converte YYYY-MM-DD, DD/MM/YYYY, date ou datetime em date. None se inválido."""
    if valor is None:
        return None
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor
    texto = str(valor).strip()
    for formato in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(texto, formato).date()
        except ValueError:
            continue
    return None


def validate_date(valor: Union[str, date, None]) -> ValidationResult:
    if valor is None or (isinstance(valor, str) and not valor.strip()):
        return _erro("Data é obrigatória")
    if isinstance(valor, str) and not re.match(r"^(\d{4}-\d{2}-\d{2}|\d{2}/\d{2}/\d{4})$", valor.strip()):
        return _erro("Formato de data inválido. Use YYYY-MM-DD ou DD/MM/YYYY")
    data = parse_data(valor)
    if data is None:
        return _erro("Data inválida")
    if data < DATA_MINIMA or data > DATA_MAXIMA:
        return _erro("Data deve estar entre 01/01/1900 e 31/12/2100")
    return _ok()


def validate_due_date(
    vencimento: Union[str, date, None],
    is_new: bool = True,
    hoje: Optional[date] = None,
) -> ValidationResult:
    """Vencimento não pode ser passado para contas novas, nem passar de 10 anos."""
    base = validate_date(vencimento)
    if not base.valid:
        return base
    data = parse_data(vencimento)
    hoje = hoje or date.today()
    resultado = ValidationResult()
    if is_new and data < hoje:
        resultado.add("Data de vencimento não pode ser anterior à data atual para novas contas")
    if data > hoje + relativedelta(years=10):
        resultado.add("Data de vencimento muito distante (máximo 10 anos)")
    return resultado


def validate_date_range(
    valor: Union[str, date],
    inicio: Union[str, date],
    fim: Union[str, date],
) -> ValidationResult:
    """Valida se a data está dentro do período [inicio, fim]."""
    base = validate_date(valor)
    if not base.valid:
        return base
    data, d_inicio, d_fim = parse_data(valor), parse_data(inicio), parse_data(fim)
    if d_inicio is None or d_fim is None:
        return _erro("Período inválido")
    if data < d_inicio or data > d_fim:
        return _erro(
            f"Data deve estar entre {d_inicio.strftime('%d/%m/%Y')} e {d_fim.strftime('%d/%m/%Y')}"
        )
    return _ok()


def validate_periodo(inicio: Optional[date], fim: Optional[date]) -> ValidationResult:
    """Filtro de período: a data inicial não pode ser maior que a final."""
    if inicio and fim and inicio > fim:
        return _erro("A data inicial não pode ser maior que a data final.")
    return _ok()


# =============================================================================
# TEXTO
# =============================================================================

def validate_required(valor: Optional[str], nome_campo: str = "Campo") -> ValidationResult:
    if valor is None or valor == "":
        return _erro(f"{nome_campo} é obrigatório")
    if not str(valor).strip():
        return _erro(f"{nome_campo} não pode estar vazio")
    return _ok()


def validate_length(
    valor: Optional[str],
    minimo: int,
    maximo: int,
    nome_campo: str = "Campo",
) -> ValidationResult:
    texto = valor or ""
    if not isinstance(texto, str):
        return _erro(f"{nome_campo} deve ser um texto")
    resultado = ValidationResult()
    if len(texto) < minimo:
        resultado.add(f"{nome_campo} deve ter pelo menos {minimo} caracteres")
    if len(texto) > maximo:
        resultado.add(f"{nome_campo} deve ter no máximo {maximo} caracteres")
    return resultado


def validate_reference(referencia: Optional[str]) -> ValidationResult:
    if not referencia:
        return _ok()
    if not isinstance(referencia, str):
        return _erro("Código de referência contém caracteres inválidos")
    resultado = ValidationResult()
    if len(referencia) > 100:
        resultado.add("Código de referência deve ter no máximo 100 caracteres")
    if not REFERENCIA_REGEX.match(referencia):
        resultado.add("Código de referência contém caracteres inválidos")
    return resultado


# =============================================================================
# VALORES
# =============================================================================

def _to_decimal(valor: Any) -> Optional[Decimal]:
    if valor is None or isinstance(valor, bool):
        return None
    try:
        numero = Decimal(str(valor))
    except (InvalidOperation, ValueError):
        return None
    if not numero.is_finite():
        return None
    return numero


def _casas_decimais(numero: Decimal) -> int:
    expoente = numero.normalize().as_tuple().exponent
    return -expoente if expoente < 0 else 0


def validate_amount(valor: Any) -> ValidationResult:
    numero = _to_decimal(valor)
    if numero is None:
        return _erro("Valor numérico inválido")
    resultado = ValidationResult()
    if numero <= 0:
        resultado.add("Valor deve ser maior que zero")
    elif numero < VALOR_MINIMO:
        resultado.add("Valor muito baixo (mínimo: R$ 0,01)")
    if numero > VALOR_MAXIMO:
        resultado.add("Valor muito alto (máximo: R$ 999.999.999,99)")
    if _casas_decimais(numero) > 2:
        resultado.add("Valor deve ter no máximo 2 casas decimais")
    return resultado


def validate_percentage(valor: Any, nome_campo: str = "Percentual") -> ValidationResult:
    numero = _to_decimal(valor)
    if numero is None:
        return _erro(f"{nome_campo} inválido")
    resultado = ValidationResult()
    if numero < 0:
        resultado.add(f"{nome_campo} deve ser maior ou igual a zero")
    if numero > 100:
        resultado.add(f"{nome_campo} deve ser menor ou igual a 100")
    if _casas_decimais(numero) > 4:
        resultado.add(f"{nome_campo} deve ter no máximo 4 casas decimais")
    return resultado


# =============================================================================
# CONTA BANCÁRIA / PIX
# =============================================================================

def validate_pix_key(chave: Optional[str]) -> ValidationResult:
    if not chave:
        return _ok()
    if not isinstance(chave, str):
        return _erro("Formato de chave PIX inválido")
    resultado = ValidationResult()
    if len(chave) > 77:
        resultado.add("Chave PIX deve ter no máximo 77 caracteres")

    numeros = somente_digitos(chave)
    eh_email = bool(EMAIL_REGEX.match(chave))
    eh_telefone = bool(re.match(r"^55\d{10,11}$", numeros))
    eh_cpf = len(numeros) == 11 and validar_cpf(numeros)
    eh_cnpj = len(numeros) == 14 and validar_cnpj(numeros)
    try:
        uuid.UUID(chave)
        eh_aleatoria = True
    except ValueError:
        eh_aleatoria = False

    if not (eh_email or eh_telefone or eh_cpf or eh_cnpj or eh_aleatoria):
        resultado.add("Formato de chave PIX inválido")
    return resultado


def validate_bank_account(
    conta: Optional[str],
    agencia: Optional[str],
    chave_pix: Optional[str] = None,
) -> ValidationResult:
    resultado = ValidationResult()
    conta = str(conta) if conta is not None else None
    agencia = str(agencia) if agencia is not None else None

    if not conta:
        resultado.add("Número da conta é obrigatório")
    else:
        if not CONTA_REGEX.match(conta):
            resultado.add("Número da conta deve conter apenas números e hífen")
        if len(conta) < 4:
            resultado.add("Número da conta deve ter pelo menos 4 caracteres")
        if len(conta) > 20:
            resultado.add("Número da conta deve ter no máximo 20 caracteres")

    if not agencia:
        resultado.add("Agência é obrigatória")
    else:
        if not CONTA_REGEX.match(agencia):
            resultado.add("Agência deve conter apenas números e hífen")
        if len(agencia) < 3:
            resultado.add("Agência deve ter pelo menos 3 caracteres")
        if len(agencia) > 10:
            resultado.add("Agência deve ter no máximo 10 caracteres")

    return combine_results(resultado, validate_pix_key(chave_pix))


# =============================================================================
# CONTAS A PAGAR / RECEBER
# =============================================================================

def _validate_conta_base(dados: Dict[str, Any], is_new: bool, hoje: Optional[date]) -> ValidationResult:
    resultado = ValidationResult()

    descricao = dados.get("descricao") or ""
    if not isinstance(descricao, str):
        resultado.add("Descrição deve ser um texto")
    elif not descricao.strip():
        resultado.add("Descrição é obrigatória")
    else:
        resultado = combine_results(resultado, validate_length(descricao.strip(), 3, 255, "Descrição"))

    valor = dados.get("valor_original", dados.get("valor"))
    resultado = combine_results(resultado, validate_amount(valor))

    vencimento = dados.get("data_vencimento")
    if not vencimento:
        resultado.add("Data de vencimento é obrigatória")
    else:
        resultado = combine_results(resultado, validate_due_date(vencimento, is_new=is_new, hoje=hoje))

    observacoes = dados.get("observacoes") or ""
    if not isinstance(observacoes, str):
        resultado.add("Observações devem ser um texto")
    elif len(observacoes) > 1000:
        resultado.add("Observações devem ter no máximo 1000 caracteres")

    referencia = dados.get("documento_referencia") or ""
    if not isinstance(referencia, str):
        resultado.add("Documento de referência deve ser um texto")
    elif len(referencia) > 100:
        resultado.add("Documento de referência deve ter no máximo 100 caracteres")
    elif referencia and not REFERENCIA_REGEX.match(referencia):
        resultado.add("Código de referência contém caracteres inválidos")

    emissao = parse_data(dados.get("data_emissao"))
    d_vencimento = parse_data(vencimento)
    if emissao and d_vencimento and emissao > d_vencimento:
        resultado.add("Data de emissão não pode ser posterior à data de vencimento")

    return resultado


def validate_payable(
    dados: Dict[str, Any],
    is_new: bool = True,
    hoje: Optional[date] = None,
) -> ValidationResult:
    """Valida os campos de uma conta a pagar."""
    return _validate_conta_base(dados, is_new, hoje)


def validate_receivable(
    dados: Dict[str, Any],
    is_new: bool = True,
    hoje: Optional[date] = None,
) -> ValidationResult:
    """Valida os campos de uma conta a receber; exige cliente ou pagador."""
    resultado = _validate_conta_base(dados, is_new, hoje)
    if not (dados.get("cliente_id") or dados.get("pagador_id")):
        resultado.add("É necessário informar um cliente ou pagador")
    return resultado


VALIDADORES_CAMPO = {
    "cpf": validate_cpf,
    "cnpj": validate_cnpj,
    "documento": validate_documento,
    "email": validate_email,
    "telefone": validate_phone,
    "cep": validate_cep,
    "data": validate_date,
    "valor": validate_amount,
    "percentual": validate_percentage,
    "pix": validate_pix_key,
    "referencia": validate_reference,
}


def validar_campo(tipo: str, valor: Any) -> ValidationResult:
    """Validação pontual de um campo, usada pela validação em tempo real do formulário."""
    validador = VALIDADORES_CAMPO.get(tipo)
    if validador is None:
        return _erro(f"Tipo de validação desconhecido: {tipo}")
    return validador(valor)

