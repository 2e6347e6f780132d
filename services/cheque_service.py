import logging
from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from core.errors import BusinessRuleError, DuplicateError, ValidationError
from models import AuditAction, Cheque
from services.banco_service import buscar_banco, movimentar_saldo
from services.common import _log_audit, _now_utc, aplicar_alteracoes, buscar_do_usuario, snapshot
from services.contas_service import validar_referencias
from tools.validacoes import validate_periodo

logger = logging.getLogger(__name__)

TAMANHO_NUMERO = 6

# acao -> (status de origem permitidos, status de destino)
TRANSICOES = {
    "compensar": (("pendente",), "compensado"),
    "cancelar": (("pendente",), "cancelado"),
    "devolver": (("pendente", "compensado"), "devolvido"),
}


def normalizar_numero(numero: Any) -> Optional[str]:
    """'123' -> '000123'. None quando não é numérico ou passa de 6 dígitos."""
    texto = str(numero or "").strip()
    if not texto.isdigit() or len(texto) > TAMANHO_NUMERO:
        return None
    return texto.zfill(TAMANHO_NUMERO)


def _numeros_existentes(db: Session, usuario_id: int, banco_id: int, numeros: List[str]) -> set:
    if not numeros:
        return set()
    linhas = (
        db.query(Cheque.numero_cheque)
        .filter(
            Cheque.usuario_id == usuario_id,
            Cheque.banco_id == banco_id,
            Cheque.numero_cheque.in_(numeros),
        )
        .all()
    )
    return {n for (n,) in linhas}


# ============================================================
# CONSULTAS
# ============================================================

def listar_cheques(
    db: Session,
    usuario_id: int,
    busca: Optional[str] = None,
    status: Optional[str] = None,
    banco_id: Optional[int] = None,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Cheque]:
    periodo = validate_periodo(data_inicio, data_fim)
    if not periodo.valid:
        raise ValidationError(periodo.errors, message=periodo.errors[0])

    query = db.query(Cheque).filter(Cheque.usuario_id == usuario_id)
    if status:
        query = query.filter(Cheque.status == status)
    if banco_id:
        query = query.filter(Cheque.banco_id == banco_id)
    if data_inicio:
        query = query.filter(Cheque.data_emissao >= data_inicio)
    if data_fim:
        query = query.filter(Cheque.data_emissao <= data_fim)

    if busca:
        termo = busca.strip()
        condicoes = [
            Cheque.numero_cheque.ilike(f"%{termo}%"),
            Cheque.beneficiario_nome.ilike(f"%{termo}%"),
        ]
        try:
            condicoes.append(Cheque.valor == Decimal(termo.replace(".", "").replace(",", ".")))
        except ArithmeticError:
            pass
        query = query.filter(or_(*condicoes))

    return query.order_by(Cheque.data_emissao.desc(), Cheque.numero_cheque.desc()).offset(skip).limit(limit).all()


def buscar_cheque(db: Session, usuario_id: int, cheque_id: int) -> Cheque:
    return buscar_do_usuario(db, Cheque, cheque_id, usuario_id, "Cheque")


# ============================================================
# ESCRITA
# ============================================================

def criar_cheque(db: Session, usuario_id: int, dados: Dict[str, Any]) -> Cheque:
    dados = dict(dados)
    buscar_banco(db, usuario_id, dados["banco_id"])
    validar_referencias(db, usuario_id, {campo: dados.get(campo) for campo in ("fornecedor_id", "conta_pagar_id")})

    numero = normalizar_numero(dados.get("numero_cheque"))
    if numero is None:
        raise ValidationError(["Número do cheque inválido (até 6 dígitos numéricos)"])
    if _numeros_existentes(db, usuario_id, dados["banco_id"], [numero]):
        raise DuplicateError(f"Cheque {numero} já cadastrado para este banco")

    status = dados.pop("status", None) or "pendente"
    if status == "emitido":
        status = "pendente"
    if status != "pendente":
        raise ValidationError([f"Status inicial inválido: {status}"])

    cheque = Cheque(**dados, usuario_id=usuario_id)
    cheque.numero_cheque = numero
    cheque.status = status
    cheque.historico = [{
        "acao": "emissao",
        "data": _now_utc().isoformat(),
        "status_anterior": None,
        "status_novo": status,
        "observacao": dados.get("observacoes"),
    }]

    db.add(cheque)
    db.flush()
    _log_audit(db, usuario_id, AuditAction.CREATE, "cheque", cheque.id, new_values=snapshot(cheque))
    db.commit()
    db.refresh(cheque)
    logger.info(f"Cheque {numero} criado (banco_id={cheque.banco_id}, valor={cheque.valor})")
    return cheque


def atualizar_cheque(db: Session, usuario_id: int, cheque_id: int, dados: Dict[str, Any]) -> Cheque:
    cheque = buscar_cheque(db, usuario_id, cheque_id)
    if cheque.status != "pendente":
        raise BusinessRuleError(f"Cheque com status '{cheque.status}' não pode ser alterado")
    validar_referencias(db, usuario_id, {campo: dados.get(campo) for campo in ("fornecedor_id", "conta_pagar_id")})

    antigos = aplicar_alteracoes(cheque, dados)
    if antigos:
        _log_audit(db, usuario_id, AuditAction.UPDATE, "cheque", cheque.id, old_values=antigos)
    db.commit()
    db.refresh(cheque)
    return cheque


def deletar_cheque(db: Session, usuario_id: int, cheque_id: int) -> bool:
    cheque = buscar_cheque(db, usuario_id, cheque_id)
    if cheque.status == "compensado":
        raise BusinessRuleError("Cheque compensado não pode ser excluído")
    _log_audit(db, usuario_id, AuditAction.DELETE, "cheque", cheque.id, old_values=snapshot(cheque))
    db.delete(cheque)
    db.commit()
    return True


# ============================================================
# TRANSIÇÕES DE STATUS
# ============================================================

def _transicionar(
    db: Session,
    usuario_id: int,
    cheque_id: int,
    acao: str,
    observacao: Optional[str] = None,
) -> Cheque:
    cheque = buscar_cheque(db, usuario_id, cheque_id)
    origens, destino = TRANSICOES[acao]
    if cheque.status not in origens:
        raise BusinessRuleError(
            f"Não é possível {acao} um cheque com status '{cheque.status}'",
            details={"status_atual": cheque.status, "acao": acao},
        )

    status_anterior = cheque.status
    if acao == "compensar":
        movimentar_saldo(db, usuario_id, cheque.banco_id, -Decimal(cheque.valor))
    elif acao == "devolver" and status_anterior == "compensado":
        movimentar_saldo(db, usuario_id, cheque.banco_id, Decimal(cheque.valor))

    cheque.status = destino
    cheque.historico = list(cheque.historico or []) + [{
        "acao": acao,
        "data": _now_utc().isoformat(),
        "status_anterior": status_anterior,
        "status_novo": destino,
        "observacao": observacao,
    }]
    flag_modified(cheque, "historico")

    _log_audit(
        db, usuario_id, AuditAction.UPDATE, "cheque", cheque.id,
        old_values={"status": status_anterior},
        new_values={"status": destino, "acao": acao},
    )
    return cheque


def compensar_cheque(
    db: Session,
    usuario_id: int,
    cheque_id: int,
    data_compensacao: date,
    observacoes: Optional[str] = None,
) -> Cheque:
    cheque = _transicionar(db, usuario_id, cheque_id, "compensar", observacoes)
    cheque.data_compensacao = data_compensacao
    db.commit()
    db.refresh(cheque)
    logger.info(f"Cheque {cheque.numero_cheque} compensado em {data_compensacao}")
    return cheque


def cancelar_cheque(db: Session, usuario_id: int, cheque_id: int, motivo: str) -> Cheque:
    cheque = _transicionar(db, usuario_id, cheque_id, "cancelar", motivo)
    cheque.motivo_cancelamento = motivo
    db.commit()
    db.refresh(cheque)
    return cheque


def devolver_cheque(db: Session, usuario_id: int, cheque_id: int, motivo: str) -> Cheque:
    cheque = _transicionar(db, usuario_id, cheque_id, "devolver", motivo)
    cheque.motivo_devolucao = motivo
    db.commit()
    db.refresh(cheque)
    return cheque


# ============================================================
# VALIDAÇÃO DE NÚMEROS
# ============================================================

def validar_numeros(db: Session, usuario_id: int, banco_id: int, numeros: List[Any]) -> List[Dict[str, str]]:
    """Situação de cada número informado, na ordem recebida."""
    buscar_banco(db, usuario_id, banco_id)

    normalizados = [normalizar_numero(n) for n in numeros]
    existentes = _numeros_existentes(db, usuario_id, banco_id, [n for n in normalizados if n])
    repeticoes = Counter(n for n in normalizados if n)

    resultado = []
    for original, numero in zip(numeros, normalizados):
        texto = str(original or "").strip()
        if not texto:
            status, mensagem = "empty", "Campo obrigatório"
        elif numero is None:
            status, mensagem = "invalid", "Número inválido"
        elif numero in existentes:
            status, mensagem = "duplicate_system", "Cheque já existe"
        elif repeticoes[numero] > 1:
            status, mensagem = "duplicate_batch", "Duplicado no lote"
        else:
            status, mensagem = "valid", "Cheque disponível"
        resultado.append({"numero": numero or texto, "status": status, "mensagem": mensagem})
    return resultado


def validar_sequencia(
    db: Session,
    usuario_id: int,
    banco_id: int,
    numero_inicial: Any,
    quantidade: int,
) -> List[Dict[str, str]]:
    inicial = normalizar_numero(numero_inicial)
    if inicial is None:
        raise ValidationError(["Número inicial inválido"])
    fim = int(inicial) + quantidade - 1
    if fim >= 10 ** TAMANHO_NUMERO:
        raise ValidationError(["Sequência ultrapassa o número máximo de cheque (999999)"])
    numeros = [str(n).zfill(TAMANHO_NUMERO) for n in range(int(inicial), fim + 1)]
    return validar_numeros(db, usuario_id, banco_id, numeros)


def estatisticas_cheques(db: Session, usuario_id: int) -> Dict[str, Any]:
    cheques = db.query(Cheque).filter(Cheque.usuario_id == usuario_id).all()
    por_status: Dict[str, Dict[str, float]] = {}
    for cheque in cheques:
        item = por_status.setdefault(cheque.status, {"quantidade": 0, "valor": 0.0})
        item["quantidade"] += 1
        item["valor"] = round(item["valor"] + float(cheque.valor or 0), 2)
    return {
        "total": len(cheques),
        "valor_total": round(sum(float(c.valor or 0) for c in cheques), 2),
        "por_status": por_status,
    }
