# services/planodecontas_services.py
from sqlalchemy.orm import Session
from models import PlanoContas, ContaPagar, ContaReceber, Venda, AuditAction
from core.errors import BusinessRuleError, DuplicateError
from services.common import buscar_do_usuario, aplicar_alteracoes, snapshot, _log_audit
from typing import List, Dict, Tuple, Optional, Any
import logging
import re
import unicodedata

import pandas as pd

logger = logging.getLogger(__name__)

TIPOS_DRE = [
    "receita",
    "deducao",
    "custo",
    "despesa_operacional",
    "despesa_financeira",
    "receita_financeira",
    "outros",
]


# ============================================================
# CRUD
# ============================================================

def listar_planos_de_contas(
    db: Session,
    usuario_id: int,
    tipo_dre: Optional[str] = None,
    apenas_ativos: bool = False,
    skip: int = 0,
    limit: int = 1000,
) -> List[PlanoContas]:
    query = db.query(PlanoContas).filter(PlanoContas.usuario_id == usuario_id)
    if tipo_dre:
        query = query.filter(PlanoContas.tipo_dre == tipo_dre)
    if apenas_ativos:
        query = query.filter(PlanoContas.ativo == True)
    return query.order_by(PlanoContas.codigo).offset(skip).limit(limit).all()


def buscar_conta(db: Session, usuario_id: int, id: int) -> PlanoContas:
    return buscar_do_usuario(db, PlanoContas, id, usuario_id, "Categoria")


def _codigo_em_uso(db: Session, usuario_id: int, codigo: str, ignorar_id: Optional[int] = None) -> bool:
    query = db.query(PlanoContas).filter(
        PlanoContas.usuario_id == usuario_id,
        PlanoContas.codigo == codigo,
    )
    if ignorar_id:
        query = query.filter(PlanoContas.id != ignorar_id)
    return query.first() is not None


def _nivel_pelo_pai(db: Session, usuario_id: int, plano_pai_id: Optional[int]) -> int:
    if not plano_pai_id:
        return 1
    pai = buscar_conta(db, usuario_id, plano_pai_id)
    return pai.nivel + 1


def criar_conta(db: Session, usuario_id: int, dados: dict) -> PlanoContas:
    if _codigo_em_uso(db, usuario_id, dados["codigo"]):
        raise DuplicateError(f"Código {dados['codigo']} já cadastrado no plano de contas")

    db_conta = PlanoContas(**dados, usuario_id=usuario_id)
    db_conta.nivel = _nivel_pelo_pai(db, usuario_id, dados.get("plano_pai_id"))
    db.add(db_conta)
    db.flush()
    _log_audit(db, usuario_id, AuditAction.CREATE, "plano_contas", db_conta.id, new_values=snapshot(db_conta))
    db.commit()
    db.refresh(db_conta)
    return db_conta


def _eh_descendente(db: Session, usuario_id: int, candidato_id: int, raiz_id: int) -> bool:
    atual = buscar_conta(db, usuario_id, candidato_id)
    while atual is not None:
        if atual.id == raiz_id:
            return True
        atual = atual.pai
    return False


def _propagar_nivel(conta: PlanoContas) -> None:
    """Recalcula o nível de toda a subárvore abaixo de `conta`."""
    for filho in conta.filhos:
        filho.nivel = conta.nivel + 1
        _propagar_nivel(filho)


def atualizar_conta(db: Session, usuario_id: int, id: int, dados: dict) -> PlanoContas:
    db_conta = buscar_conta(db, usuario_id, id)

    codigo = dados.get("codigo")
    if codigo and _codigo_em_uso(db, usuario_id, codigo, ignorar_id=id):
        raise DuplicateError(f"Código {codigo} já cadastrado no plano de contas")

    if "plano_pai_id" in dados:
        novo_pai = dados["plano_pai_id"]
        if novo_pai and _eh_descendente(db, usuario_id, novo_pai, id):
            raise BusinessRuleError("Uma categoria não pode ser filha dela mesma ou de suas subcategorias")
        dados["nivel"] = _nivel_pelo_pai(db, usuario_id, novo_pai)

    antigos = aplicar_alteracoes(db_conta, dados)
    if "nivel" in antigos:
        _propagar_nivel(db_conta)
    if antigos:
        _log_audit(db, usuario_id, AuditAction.UPDATE, "plano_contas", id, old_values=antigos)
    db.commit()
    db.refresh(db_conta)
    return db_conta


def deletar_conta(db: Session, usuario_id: int, id: int) -> bool:
    db_conta = buscar_conta(db, usuario_id, id)

    if db.query(PlanoContas).filter(PlanoContas.plano_pai_id == id).count() > 0:
        raise BusinessRuleError("Categoria possui subcategorias e não pode ser excluída")

    em_uso = (
        db.query(ContaPagar).filter(ContaPagar.plano_conta_id == id, ContaPagar.deleted_at.is_(None)).count()
        + db.query(ContaReceber).filter(ContaReceber.plano_conta_id == id, ContaReceber.deleted_at.is_(None)).count()
        + db.query(Venda).filter(Venda.plano_conta_id == id).count()
    )
    if em_uso:
        raise BusinessRuleError(
            f"Categoria possui {em_uso} lançamento(s) vinculado(s). Desative-a em vez de excluir."
        )

    _log_audit(db, usuario_id, AuditAction.DELETE, "plano_contas", id, old_values=snapshot(db_conta))
    db.delete(db_conta)
    db.commit()
    return True


def alternar_status(db: Session, usuario_id: int, id: int) -> PlanoContas:
    db_conta = buscar_conta(db, usuario_id, id)
    db_conta.ativo = not db_conta.ativo
    db.commit()
    db.refresh(db_conta)
    return db_conta


def montar_arvore(contas: List[PlanoContas]) -> List[Dict[str, Any]]:
    """Aninha as categorias sob seus pais, ordenadas por código."""
    nos: Dict[int, Dict[str, Any]] = {}
    for c in sorted(contas, key=lambda x: x.codigo):
        nos[c.id] = {
            "id": c.id,
            "codigo": c.codigo,
            "nome": c.nome,
            "descricao": c.descricao,
            "tipo_dre": c.tipo_dre,
            "nivel": c.nivel,
            "plano_pai_id": c.plano_pai_id,
            "aceita_lancamento": c.aceita_lancamento,
            "cor": c.cor,
            "icone": c.icone,
            "ativo": c.ativo,
            "created_at": c.created_at,
            "updated_at": c.updated_at,
            "filhos": [],
        }

    raizes = []
    for no in nos.values():
        pai = nos.get(no["plano_pai_id"]) if no["plano_pai_id"] else None
        if pai is not None:
            pai["filhos"].append(no)
        else:
            raizes.append(no)
    return raizes


# ============================================================
# IMPORTAÇÃO (EXCEL / CSV)
# ============================================================

def normalizar_colunas(df: pd.DataFrame) -> pd.DataFrame:
    """
    Normaliza os nomes das colunas da planilha para o formato esperado.
    Aceita variações com acentos, maiúsculas, espaços, underscores, etc.
    """
    def limpar_nome(nome: str) -> str:
        nome = str(nome).strip().lower()
        nome = unicodedata.normalize('NFKD', nome).encode('ascii', 'ignore').decode('ascii')
        nome = re.sub(r'[\s\-]+', '_', nome)
        nome = re.sub(r'[^a-z0-9_]', '', nome)
        return nome

    mapeamento = {
        'codigo': ['codigo', 'cod', 'codigo_conta', 'conta', 'cod_conta'],
        'nome': ['nome', 'descricao', 'desc', 'nome_conta', 'categoria'],
        'tipo_dre': ['tipo_dre', 'tipo', 'grupo_dre', 'classificacao'],
        'codigo_pai': ['codigo_pai', 'conta_pai', 'pai', 'conta_superior', 'superior'],
        'aceita_lancamento': ['aceita_lancamento', 'lancamento', 'analitica', 'aceita'],
    }

    colunas_normalizadas = {limpar_nome(col): col for col in df.columns}
    rename_map = {}

    for campo_esperado, variacoes in mapeamento.items():
        for variacao in variacoes:
            if variacao in colunas_normalizadas and colunas_normalizadas[variacao] not in rename_map:
                rename_map[colunas_normalizadas[variacao]] = campo_esperado
                break

    if rename_map:
        df = df.rename(columns=rename_map)
        logger.info(f"Colunas mapeadas: {rename_map}")

    return df


def validar_estrutura_arquivo(df: pd.DataFrame) -> Tuple[bool, List[str]]:
    """Valida se a planilha possui as colunas obrigatórias e registros."""
    erros = []

    colunas_faltantes = {'codigo', 'nome'} - set(df.columns)
    if colunas_faltantes:
        erros.append(f"Colunas faltantes: {', '.join(sorted(colunas_faltantes))}")

    if df.empty:
        erros.append("Arquivo não contém registros")

    return len(erros) == 0, erros


def normalizar_tipo_dre(valor: Any, padrao: str = "despesa_operacional") -> str:
    if valor is None or (isinstance(valor, float) and pd.isna(valor)) or not str(valor).strip():
        return padrao
    texto = unicodedata.normalize('NFKD', str(valor).strip().lower()).encode('ascii', 'ignore').decode('ascii')
    texto = re.sub(r'[\s\-]+', '_', texto)
    if texto in TIPOS_DRE:
        return texto
    if texto.startswith("receita_fin"):
        return "receita_financeira"
    if texto.startswith("despesa_fin"):
        return "despesa_financeira"
    if texto.startswith("receita"):
        return "receita"
    if texto.startswith("deduc"):
        return "deducao"
    if texto.startswith("custo") or texto == "cmv":
        return "custo"
    if texto.startswith("despesa"):
        return "despesa_operacional"
    raise ValueError(f"Tipo DRE inválido: '{valor}'")


def converter_booleano(valor: Any, padrao: bool = True) -> bool:
    if valor is None or (isinstance(valor, float) and pd.isna(valor)):
        return padrao
    if isinstance(valor, bool):
        return valor

    valor_str = str(valor).strip().upper()
    if valor_str in ("1", "SIM", "S", "YES", "Y", "TRUE", "VERDADEIRO"):
        return True
    if valor_str in ("0", "NAO", "NÃO", "N", "NO", "FALSE", "FALSO"):
        return False
    if valor_str == "":
        return padrao

    raise ValueError(
        f"Valor inválido para aceita_lancamento: '{valor}'. "
        "Use: 1/0, Sim/Não, S/N, True/False."
    )


def codigo_pai_implicito(codigo: str) -> Optional[str]:
    """'3.1.02' -> '3.1'; códigos sem ponto não têm pai."""
    if "." not in codigo:
        return None
    return codigo.rsplit(".", 1)[0]


def codigo_pai_da_linha(valor: Any) -> Optional[str]:
    """Código do pai como texto; células vazias (None/NaN) viram None."""
    if isinstance(valor, str) and valor.strip():
        return valor.strip()
    return None


def ordenar_contas_hierarquicamente(df: pd.DataFrame) -> pd.DataFrame:
    """
    Ordena as categorias para que todo pai seja importado antes dos filhos:
    primeiro pela profundidade na planilha, depois pelo próprio código.
    """
    df = df.copy()
    if 'codigo_pai' not in df.columns:
        df['codigo_pai'] = df['codigo'].astype(str).apply(codigo_pai_implicito)

    pais = dict(zip(df['codigo'].astype(str), df['codigo_pai'].map(codigo_pai_da_linha)))

    def profundidade(codigo: str) -> int:
        nivel, visitados = 0, {codigo}
        pai = pais.get(codigo)
        while pai and pai in pais and pai not in visitados:
            visitados.add(pai)
            nivel += 1
            pai = pais.get(pai)
        return nivel

    df['_nivel'] = df['codigo'].astype(str).apply(profundidade)
    df_ordenado = df.sort_values(by=['_nivel', 'codigo'], ascending=[True, True])
    return df_ordenado.drop(columns=['_nivel']).reset_index(drop=True)


def preparar_dados_importacao(df: pd.DataFrame) -> pd.DataFrame:
    """Normaliza colunas, valida, remove duplicatas e ordena a planilha."""
    logger.info("Preparando dados para importação...")
    logger.info(f"Total de registros lidos: {len(df)}")
    logger.info(f"Colunas do arquivo: {list(df.columns)}")

    df = normalizar_colunas(df)

    valido, erros = validar_estrutura_arquivo(df)
    if not valido:
        raise ValueError("Erro na validação do arquivo:\n" + "\n".join(erros))

    df = df[df['codigo'].notna()].copy()
    df['codigo'] = df['codigo'].astype(str).str.strip()
    df['nome'] = df['nome'].astype(str).str.strip()
    df = df[df['codigo'] != '']

    if 'codigo_pai' not in df.columns:
        df['codigo_pai'] = None
    # Pai informado na planilha ou, na falta dele, o implícito pelo código
    df['codigo_pai'] = pd.Series(
        [
            str(pai).strip() if pd.notna(pai) and str(pai).strip() else codigo_pai_implicito(codigo)
            for pai, codigo in zip(df['codigo_pai'], df['codigo'])
        ],
        index=df.index,
        dtype=object,
    )
    df['codigo_pai'] = df['codigo_pai'].where(df['codigo_pai'].notna(), None)

    total_antes = len(df)
    df = df.drop_duplicates(subset=['codigo'], keep='last')
    duplicatas_removidas = total_antes - len(df)
    if duplicatas_removidas > 0:
        logger.warning(f"Removidas {duplicatas_removidas} categorias duplicadas do arquivo")

    return ordenar_contas_hierarquicamente(df)


def importar_plano_contas(df: pd.DataFrame, usuario_id: int, db: Session) -> Dict[str, Any]:
    """
    Importa a planilha já preparada. Códigos já cadastrados são ignorados;
    o pai é resolvido pelo código (cadastrado antes ou na própria planilha).
    Tudo é gravado em uma única transação.
    """
    logger.info("=" * 50)
    logger.info("IMPORTAÇÃO DO PLANO DE CONTAS - INICIO")
    logger.info("=" * 50)

    existentes = {
        c.codigo: c
        for c in db.query(PlanoContas).filter(PlanoContas.usuario_id == usuario_id).all()
    }

    estatisticas = {
        'status': 'sucesso',
        'total_linhas_arquivo': len(df),
        'criadas': 0,
        'ignoradas_duplicadas': 0,
        'erros': [],
    }

    try:
        for _, linha in df.iterrows():
            codigo = linha['codigo']
            if codigo in existentes:
                estatisticas['ignoradas_duplicadas'] += 1
                continue

            codigo_pai = codigo_pai_da_linha(linha['codigo_pai'])
            pai = existentes.get(codigo_pai) if codigo_pai else None
            if codigo_pai and pai is None:
                estatisticas['erros'].append(
                    f"Categoria {codigo}: categoria pai {codigo_pai} não encontrada"
                )
                continue

            try:
                tipo_dre = normalizar_tipo_dre(
                    linha.get('tipo_dre'),
                    padrao=pai.tipo_dre if pai else "despesa_operacional",
                )
                aceita = converter_booleano(linha.get('aceita_lancamento'))
            except ValueError as e:
                estatisticas['erros'].append(f"Categoria {codigo}: {e}")
                continue

            nova = PlanoContas(
                usuario_id=usuario_id,
                codigo=codigo,
                nome=linha['nome'],
                tipo_dre=tipo_dre,
                plano_pai_id=pai.id if pai else None,
                nivel=(pai.nivel + 1) if pai else 1,
                aceita_lancamento=aceita,
            )
            db.add(nova)
            db.flush()
            existentes[codigo] = nova
            estatisticas['criadas'] += 1
            logger.info(f"   Categoria criada: {codigo} - {nova.nome}")

        _log_audit(
            db, usuario_id, AuditAction.IMPORTACAO, "plano_contas", None,
            new_values={k: v for k, v in estatisticas.items() if k != 'erros'},
        )
        db.commit()
    except Exception as e:
        logger.error(f"ERRO FATAL na importação: {str(e)}", exc_info=True)
        db.rollback()
        raise

    if estatisticas['erros']:
        estatisticas['status'] = 'parcial'
        logger.warning(f"Erros encontrados: {len(estatisticas['erros'])}")

    logger.info("=" * 50)
    logger.info(
        f"IMPORTAÇÃO DO PLANO DE CONTAS - {estatisticas['criadas']} criadas, "
        f"{estatisticas['ignoradas_duplicadas']} ignoradas"
    )
    logger.info("=" * 50)

    return estatisticas
