# models/__init__.py
"""
Importações dos modelos em ordem correta para evitar problemas de relacionamento.

ORDEM IMPORTANTE:
1. Base (do db.py)
2. Usuário e configurações
3. Cadastros (bancos, plano de contas, contatos)
4. Lançamentos (contas, cheques, vendas)
5. Maquininhas e DRE
"""

# Importa Base do db.py
from db import Base

# 1. Usuário
from .usuario import Usuario
from .configuracao import ConfiguracaoUsuario

# 2. Cadastros
from .banco import Banco
from .planodecontas import PlanoContas
from .fornecedor import Fornecedor
from .cliente import Cliente
from .pagador import Pagador

# 3. Lançamentos
from .conta_pagar import ContaPagar
from .conta_receber import ContaReceber
from .cheque import Cheque
from .venda import Venda

# 4. Maquininhas
from .maquininha import (
    Maquininha,
    TaxaMaquininha,
    VendaMaquininha,
    RecebimentoBancario,
    ConciliacaoMaquininha,
)

# 5. DRE
from .dre import DadosEssenciaisDRE

# 6. Auditoria
from .audit_log import AuditLog, AuditAction

__all__ = [
    "Base",
    # Auth
    "Usuario",
    "ConfiguracaoUsuario",
    "AuditLog",
    "AuditAction",
    # Cadastros
    "Banco",
    "PlanoContas",
    "Fornecedor",
    "Cliente",
    "Pagador",
    # Lançamentos
    "ContaPagar",
    "ContaReceber",
    "Cheque",
    "Venda",
    # Maquininhas
    "Maquininha",
    "TaxaMaquininha",
    "VendaMaquininha",
    "RecebimentoBancario",
    "ConciliacaoMaquininha",
    # DRE
    "DadosEssenciaisDRE",
]
