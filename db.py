from sqlalchemy import create_engine, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, sessionmaker
from dotenv import load_dotenv
import logging

load_dotenv()

from core.config import settings

logger = logging.getLogger(__name__)

# ============================================================
# CONFIGURAÇÃO DO SQLAlchemy
# ============================================================

DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    raise ValueError(
        "A variável DATABASE_URL não está definida.\n"
        "O arquivo .env deve conter: DATABASE_URL=postgresql://..."
    )

if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )
else:
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,  # Verifica conexão antes de usar
        pool_size=10,
        max_overflow=20,
        echo=False,          # Mude para True para ver queries SQL
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base para os modelos
Base = declarative_base()

# Schema único de todas as tabelas
SCHEMA = settings.DB_SCHEMA

# JSONB no Postgres, JSON nos demais bancos
JSONType = JSON().with_variant(JSONB, "postgresql")

# ============================================================
# DEPENDENCY INJECTION para FastAPI
# ============================================================

def get_db():
    """
    Cria uma sessão do banco de dados para cada requisição.
    Fecha automaticamente após o uso.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# ============================================================
# FUNÇÃO AUXILIAR PARA TESTAR CONEXÃO
# ============================================================

def test_connection():
    """Testa se a conexão com o banco está funcionando"""
    try:
        with engine.connect():
            logger.info("[OK] Conexao com o banco de dados OK!")
            return True
    except Exception as e:
        logger.error(f"[ERRO] Erro ao conectar no banco: {e}")
        return False


if __name__ == "__main__":
    test_connection()
