"""initial financeiro schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCHEMA = 'financeiro'


def _timestamps(com_updated=True):
    colunas = [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    ]
    if com_updated:
        colunas.append(
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False)
        )
    return colunas


def _endereco():
    return [
        sa.Column('cep', sa.String(length=8), nullable=True),
        sa.Column('logradouro', sa.String(length=255), nullable=True),
        sa.Column('numero', sa.String(length=20), nullable=True),
        sa.Column('complemento', sa.String(length=100), nullable=True),
        sa.Column('bairro', sa.String(length=100), nullable=True),
        sa.Column('cidade', sa.String(length=100), nullable=True),
        sa.Column('estado', sa.String(length=2), nullable=True),
    ]


def _fk_usuario(ondelete='CASCADE'):
    return sa.ForeignKeyConstraint(['usuario_id'], [f'{SCHEMA}.usuario.id'], ondelete=ondelete)


def upgrade() -> None:
    """Upgrade schema - Cria todas as tabelas do financeiro."""

    op.execute(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA}")

    # Usuários
    op.create_table(
        'usuario',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('senha_hash', sa.String(length=255), nullable=False),
        sa.Column('nome', sa.String(length=255), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_usuario_email', 'usuario', ['email'], unique=True, schema=SCHEMA)
    op.create_index('ix_usuario_is_active', 'usuario', ['is_active'], unique=False, schema=SCHEMA)

    op.create_table(
        'configuracao_usuario',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('empresa_nome', sa.String(length=255), nullable=True),
        sa.Column('empresa_documento', sa.String(length=14), nullable=True),
        sa.Column('moeda', sa.String(length=3), nullable=False, server_default='BRL'),
        sa.Column('dias_alerta_vencimento', sa.Integer(), nullable=False, server_default='7'),
        sa.Column('tema', sa.String(length=20), nullable=False, server_default='claro'),
        sa.Column('notificacoes', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_timestamps(),
        _fk_usuario(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('usuario_id', name='uq_configuracao_usuario'),
        schema=SCHEMA
    )

    # Auditoria
    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('entity_type', sa.String(length=100), nullable=True),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('old_values', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('new_values', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_timestamps(com_updated=False),
        _fk_usuario('SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_audit_log_usuario_id', 'audit_log', ['usuario_id'], unique=False, schema=SCHEMA)
    op.create_index('ix_audit_log_action', 'audit_log', ['action'], unique=False, schema=SCHEMA)
    op.create_index('ix_audit_log_created_at', 'audit_log', ['created_at'], unique=False, schema=SCHEMA)

    # Bancos
    op.create_table(
        'banco',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('nome', sa.String(length=255), nullable=False),
        sa.Column('codigo_banco', sa.String(length=10), nullable=True),
        sa.Column('agencia', sa.String(length=10), nullable=True),
        sa.Column('conta', sa.String(length=20), nullable=True),
        sa.Column('digito_verificador', sa.String(length=2), nullable=True),
        sa.Column('tipo_conta', sa.String(length=20), nullable=False, server_default='corrente'),
        sa.Column('saldo_inicial', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('saldo_atual', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('limite_conta', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('gerente', sa.String(length=255), nullable=True),
        sa.Column('telefone', sa.String(length=20), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('suporta_ofx', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('ativo', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        _fk_usuario(),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_banco_usuario_id', 'banco', ['usuario_id'], unique=False, schema=SCHEMA)
    op.create_index('ix_banco_ativo', 'banco', ['ativo'], unique=False, schema=SCHEMA)

    # Plano de contas
    op.create_table(
        'plano_contas',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('codigo', sa.String(length=50), nullable=False),
        sa.Column('nome', sa.String(length=255), nullable=False),
        sa.Column('descricao', sa.Text(), nullable=True),
        sa.Column('tipo_dre', sa.String(length=30), nullable=False, server_default='despesa_operacional'),
        sa.Column('nivel', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('plano_pai_id', sa.Integer(), nullable=True),
        sa.Column('aceita_lancamento', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('cor', sa.String(length=20), nullable=True),
        sa.Column('icone', sa.String(length=50), nullable=True),
        sa.Column('ativo', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        _fk_usuario(),
        sa.ForeignKeyConstraint(['plano_pai_id'], [f'{SCHEMA}.plano_contas.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_plano_contas_usuario_codigo', 'plano_contas', ['usuario_id', 'codigo'], unique=True, schema=SCHEMA)
    op.create_index('ix_plano_contas_tipo_dre', 'plano_contas', ['tipo_dre'], unique=False, schema=SCHEMA)
    op.create_index('ix_plano_contas_plano_pai_id', 'plano_contas', ['plano_pai_id'], unique=False, schema=SCHEMA)

    # Contatos
    op.create_table(
        'fornecedor',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('nome', sa.String(length=255), nullable=False),
        sa.Column('nome_fantasia', sa.String(length=255), nullable=True),
        sa.Column('documento', sa.String(length=14), nullable=True),
        sa.Column('tipo', sa.String(length=20), nullable=False, server_default='pessoa_juridica'),
        sa.Column('tipo_fornecedor', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('telefone', sa.String(length=20), nullable=True),
        sa.Column('inscricao_estadual', sa.String(length=20), nullable=True),
        *_endereco(),
        sa.Column('categoria_padrao_id', sa.Integer(), nullable=True),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('ativo', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('total_compras', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('valor_total', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('ultima_compra', sa.Date(), nullable=True),
        *_timestamps(),
        _fk_usuario(),
        sa.ForeignKeyConstraint(['categoria_padrao_id'], [f'{SCHEMA}.plano_contas.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_fornecedor_usuario_documento', 'fornecedor', ['usuario_id', 'documento'], unique=False, schema=SCHEMA)

    op.create_table(
        'cliente',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('nome', sa.String(length=255), nullable=False),
        sa.Column('documento', sa.String(length=14), nullable=True),
        sa.Column('tipo', sa.String(length=20), nullable=False, server_default='pessoa_fisica'),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('telefone', sa.String(length=20), nullable=True),
        *_endereco(),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='ativo'),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('total_compras', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('valor_total', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('ultima_compra', sa.Date(), nullable=True),
        *_timestamps(),
        _fk_usuario(),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_cliente_usuario_documento', 'cliente', ['usuario_id', 'documento'], unique=False, schema=SCHEMA)

    op.create_table(
        'pagador',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('nome', sa.String(length=255), nullable=False),
        sa.Column('documento', sa.String(length=14), nullable=True),
        sa.Column('tipo', sa.String(length=20), nullable=False, server_default='pessoa_fisica'),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('telefone', sa.String(length=20), nullable=True),
        *_endereco(),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('ativo', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('total_recebimentos', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('valor_total', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('ultimo_recebimento', sa.Date(), nullable=True),
        *_timestamps(),
        _fk_usuario(),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_pagador_usuario_documento', 'pagador', ['usuario_id', 'documento'], unique=False, schema=SCHEMA)

    # Contas a pagar / receber
    op.create_table(
        'conta_pagar',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('fornecedor_id', sa.Integer(), nullable=True),
        sa.Column('plano_conta_id', sa.Integer(), nullable=True),
        sa.Column('banco_id', sa.Integer(), nullable=True),
        sa.Column('descricao', sa.String(length=255), nullable=False),
        sa.Column('documento_referencia', sa.String(length=100), nullable=True),
        sa.Column('data_emissao', sa.Date(), nullable=True),
        sa.Column('data_vencimento', sa.Date(), nullable=False),
        sa.Column('data_pagamento', sa.Date(), nullable=True),
        sa.Column('valor_original', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('desconto', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('acrescimo', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('valor_final', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('valor_pago', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pendente'),
        sa.Column('forma_pagamento', sa.String(length=30), nullable=True),
        sa.Column('parcela_atual', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('total_parcelas', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('lote_id', sa.String(length=36), nullable=True),
        sa.Column('grupo_lancamento', sa.String(length=36), nullable=True),
        sa.Column('observacoes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        _fk_usuario(),
        sa.ForeignKeyConstraint(['fornecedor_id'], [f'{SCHEMA}.fornecedor.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['plano_conta_id'], [f'{SCHEMA}.plano_contas.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['banco_id'], [f'{SCHEMA}.banco.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_conta_pagar_usuario_id', 'conta_pagar', ['usuario_id'], unique=False, schema=SCHEMA)
    op.create_index('ix_conta_pagar_data_vencimento', 'conta_pagar', ['data_vencimento'], unique=False, schema=SCHEMA)
    op.create_index('ix_conta_pagar_status', 'conta_pagar', ['status'], unique=False, schema=SCHEMA)
    op.create_index('ix_conta_pagar_lote_id', 'conta_pagar', ['lote_id'], unique=False, schema=SCHEMA)

    op.create_table(
        'conta_receber',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('cliente_id', sa.Integer(), nullable=True),
        sa.Column('pagador_id', sa.Integer(), nullable=True),
        sa.Column('plano_conta_id', sa.Integer(), nullable=True),
        sa.Column('banco_id', sa.Integer(), nullable=True),
        sa.Column('descricao', sa.String(length=255), nullable=False),
        sa.Column('documento_referencia', sa.String(length=100), nullable=True),
        sa.Column('data_emissao', sa.Date(), nullable=True),
        sa.Column('data_vencimento', sa.Date(), nullable=False),
        sa.Column('data_recebimento', sa.Date(), nullable=True),
        sa.Column('valor_original', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('desconto', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('acrescimo', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('valor_final', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('valor_recebido', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pendente'),
        sa.Column('forma_recebimento', sa.String(length=30), nullable=True),
        sa.Column('parcela_atual', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('total_parcelas', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('lote_id', sa.String(length=36), nullable=True),
        sa.Column('observacoes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        _fk_usuario(),
        sa.ForeignKeyConstraint(['cliente_id'], [f'{SCHEMA}.cliente.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['pagador_id'], [f'{SCHEMA}.pagador.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['plano_conta_id'], [f'{SCHEMA}.plano_contas.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['banco_id'], [f'{SCHEMA}.banco.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_conta_receber_usuario_id', 'conta_receber', ['usuario_id'], unique=False, schema=SCHEMA)
    op.create_index('ix_conta_receber_data_vencimento', 'conta_receber', ['data_vencimento'], unique=False, schema=SCHEMA)
    op.create_index('ix_conta_receber_status', 'conta_receber', ['status'], unique=False, schema=SCHEMA)
    op.create_index('ix_conta_receber_lote_id', 'conta_receber', ['lote_id'], unique=False, schema=SCHEMA)

    # Cheques
    op.create_table(
        'cheque',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('banco_id', sa.Integer(), nullable=False),
        sa.Column('numero_cheque', sa.String(length=6), nullable=False),
        sa.Column('valor', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('data_emissao', sa.Date(), nullable=False),
        sa.Column('data_vencimento', sa.Date(), nullable=True),
        sa.Column('data_compensacao', sa.Date(), nullable=True),
        sa.Column('beneficiario_nome', sa.String(length=255), nullable=True),
        sa.Column('beneficiario_documento', sa.String(length=14), nullable=True),
        sa.Column('tipo_beneficiario', sa.String(length=20), nullable=True),
        sa.Column('fornecedor_id', sa.Integer(), nullable=True),
        sa.Column('conta_pagar_id', sa.Integer(), nullable=True),
        sa.Column('finalidade', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pendente'),
        sa.Column('motivo_cancelamento', sa.Text(), nullable=True),
        sa.Column('motivo_devolucao', sa.Text(), nullable=True),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('historico', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        *_timestamps(),
        _fk_usuario(),
        sa.ForeignKeyConstraint(['banco_id'], [f'{SCHEMA}.banco.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['fornecedor_id'], [f'{SCHEMA}.fornecedor.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['conta_pagar_id'], [f'{SCHEMA}.conta_pagar.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_cheque_banco_numero', 'cheque', ['banco_id', 'numero_cheque'], unique=True, schema=SCHEMA)
    op.create_index('ix_cheque_status', 'cheque', ['status'], unique=False, schema=SCHEMA)
    op.create_index('ix_cheque_data_emissao', 'cheque', ['data_emissao'], unique=False, schema=SCHEMA)

    # Vendas
    op.create_table(
        'venda',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('cliente_id', sa.Integer(), nullable=True),
        sa.Column('plano_conta_id', sa.Integer(), nullable=True),
        sa.Column('banco_id', sa.Integer(), nullable=True),
        sa.Column('data_venda', sa.Date(), nullable=False),
        sa.Column('hora_venda', sa.Time(), nullable=True),
        sa.Column('valor_total', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('desconto', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('valor_final', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('forma_pagamento', sa.String(length=30), nullable=False, server_default='dinheiro'),
        sa.Column('parcelas', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('tipo_venda', sa.String(length=30), nullable=True),
        sa.Column('vendedor', sa.String(length=255), nullable=True),
        sa.Column('comissao_percentual', sa.DECIMAL(7, 4), nullable=True),
        sa.Column('comissao_valor', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='ativa'),
        sa.Column('observacoes', sa.Text(), nullable=True),
        *_timestamps(),
        _fk_usuario(),
        sa.ForeignKeyConstraint(['cliente_id'], [f'{SCHEMA}.cliente.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['plano_conta_id'], [f'{SCHEMA}.plano_contas.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['banco_id'], [f'{SCHEMA}.banco.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_venda_data_venda', 'venda', ['data_venda'], unique=False, schema=SCHEMA)
    op.create_index('ix_venda_status', 'venda', ['status'], unique=False, schema=SCHEMA)

    # Maquininhas
    op.create_table(
        'maquininha',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('nome', sa.String(length=255), nullable=False),
        sa.Column('operadora', sa.String(length=20), nullable=False),
        sa.Column('codigo_estabelecimento', sa.String(length=50), nullable=False),
        sa.Column('banco_id', sa.Integer(), nullable=False),
        sa.Column('ativo', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        _fk_usuario(),
        sa.ForeignKeyConstraint(['banco_id'], [f'{SCHEMA}.banco.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )

    op.create_table(
        'taxa_maquininha',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('maquininha_id', sa.Integer(), nullable=False),
        sa.Column('bandeira', sa.String(length=30), nullable=False),
        sa.Column('tipo_transacao', sa.String(length=30), nullable=False),
        sa.Column('parcelas_max', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('taxa_percentual', sa.DECIMAL(7, 4), nullable=False, server_default='0'),
        sa.Column('taxa_fixa', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('ativo', sa.Boolean(), nullable=False, server_default='true'),
        sa.ForeignKeyConstraint(['maquininha_id'], [f'{SCHEMA}.maquininha.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )

    op.create_table(
        'recebimento_bancario',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('banco_id', sa.Integer(), nullable=False),
        sa.Column('data_recebimento', sa.Date(), nullable=False),
        sa.Column('valor', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('descricao', sa.String(length=255), nullable=True),
        sa.Column('documento', sa.String(length=100), nullable=True),
        sa.Column('tipo_operacao', sa.String(length=30), nullable=True),
        sa.Column('periodo_processamento', sa.String(length=7), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pendente'),
        *_timestamps(com_updated=False),
        _fk_usuario(),
        sa.ForeignKeyConstraint(['banco_id'], [f'{SCHEMA}.banco.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_recebimento_bancario_data', 'recebimento_bancario', ['data_recebimento'], unique=False, schema=SCHEMA)

    op.create_table(
        'venda_maquininha',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('maquininha_id', sa.Integer(), nullable=False),
        sa.Column('nsu', sa.String(length=50), nullable=True),
        sa.Column('data_venda', sa.Date(), nullable=False),
        sa.Column('data_recebimento', sa.Date(), nullable=False),
        sa.Column('bandeira', sa.String(length=30), nullable=False),
        sa.Column('tipo_transacao', sa.String(length=30), nullable=False),
        sa.Column('parcelas', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('valor_bruto', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('valor_taxa', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('valor_liquido', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('taxa_percentual_cobrada', sa.DECIMAL(7, 4), nullable=True),
        sa.Column('periodo_processamento', sa.String(length=7), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pendente'),
        sa.Column('recebimento_id', sa.Integer(), nullable=True),
        *_timestamps(com_updated=False),
        _fk_usuario(),
        sa.ForeignKeyConstraint(['maquininha_id'], [f'{SCHEMA}.maquininha.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['recebimento_id'], [f'{SCHEMA}.recebimento_bancario.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_venda_maquininha_periodo', 'venda_maquininha', ['maquininha_id', 'periodo_processamento'], unique=False, schema=SCHEMA)

    op.create_table(
        'conciliacao_maquininha',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('maquininha_id', sa.Integer(), nullable=False),
        sa.Column('periodo', sa.String(length=7), nullable=False),
        sa.Column('data_conciliacao', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('total_vendas', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('total_recebimentos', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('total_taxas', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('diferenca', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('detalhes', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        _fk_usuario(),
        sa.ForeignKeyConstraint(['maquininha_id'], [f'{SCHEMA}.maquininha.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )

    # DRE
    op.create_table(
        'dados_essenciais_dre',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('mes_referencia', sa.String(length=7), nullable=False),
        sa.Column('cmv_valor', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('deducoes_receita', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('percentual_impostos', sa.DECIMAL(7, 4), nullable=True),
        sa.Column('percentual_devolucoes', sa.DECIMAL(7, 4), nullable=True),
        sa.Column('estoque_inicial', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('estoque_final', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('compras_periodo', sa.DECIMAL(15, 2), nullable=True),
        *_timestamps(),
        _fk_usuario(),
        sa.PrimaryKeyConstraint('id'),
        schema=SCHEMA
    )
    op.create_index('ix_dados_dre_usuario_mes', 'dados_essenciais_dre', ['usuario_id', 'mes_referencia'], unique=True, schema=SCHEMA)


def downgrade() -> None:
    """Downgrade schema - Remove todas as tabelas do financeiro."""

    for tabela in (
        'dados_essenciais_dre',
        'conciliacao_maquininha',
        'venda_maquininha',
        'recebimento_bancario',
        'taxa_maquininha',
        'maquininha',
        'venda',
        'cheque',
        'conta_receber',
        'conta_pagar',
        'pagador',
        'cliente',
        'fornecedor',
        'plano_contas',
        'banco',
        'audit_log',
        'configuracao_usuario',
        'usuario',
    ):
        op.drop_table(tabela, schema=SCHEMA)
