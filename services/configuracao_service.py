import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from core.config import settings
from models import AuditAction, ConfiguracaoUsuario
from services.common import _log_audit, aplicar_alteracoes

logger = logging.getLogger(__name__)


def obter_configuracao(db: Session, usuario_id: int) -> ConfiguracaoUsuario:
    """Retorna as configurações do usuário, criando o registro padrão na primeira leitura."""
    config = db.query(ConfiguracaoUsuario).filter(ConfiguracaoUsuario.usuario_id == usuario_id).first()
    if config is None:
        config = ConfiguracaoUsuario(
            usuario_id=usuario_id,
            moeda="BRL",
            dias_alerta_vencimento=settings.DIAS_ALERTA_VENCIMENTO,
            tema="claro",
            notificacoes={"email": True, "vencimentos": True},
        )
        db.add(config)
        db.commit()
        db.refresh(config)
        logger.info(f"Configuração padrão criada para usuario_id={usuario_id}")
    return config


def atualizar_configuracao(db: Session, usuario_id: int, dados: Dict[str, Any]) -> ConfiguracaoUsuario:
    config = obter_configuracao(db, usuario_id)
    antigos = aplicar_alteracoes(config, dados)
    if antigos:
        _log_audit(
            db, usuario_id, AuditAction.UPDATE, "configuracao", config.id,
            old_values=antigos, new_values={k: dados[k] for k in antigos},
        )
        db.commit()
        db.refresh(config)
    return config


def dias_alerta_vencimento(db: Session, usuario_id: int) -> int:
    """Antecedência dos alertas de vencimento, sem criar configuração."""
    config = db.query(ConfiguracaoUsuario).filter(ConfiguracaoUsuario.usuario_id == usuario_id).first()
    return config.dias_alerta_vencimento if config else settings.DIAS_ALERTA_VENCIMENTO
