import os

# Banco em memória para os testes; precisa estar definido antes de importar db/main
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "chave-secreta-dos-testes")
os.environ.setdefault("LOG_LEVEL", "WARNING")
