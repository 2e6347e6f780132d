from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
from dotenv import load_dotenv
import logging
import os

load_dotenv()
from core.config import settings
from core.errors import AppError, from_exception
from routers.auth_router import router as auth_router
from routers.bancos_router import router as bancos_router
from routers.contatos_router import fornecedores_router, clientes_router, pagadores_router
from routers.planodecontas_router import router as planodecontas_router
from routers.contas_pagar_router import router as contas_pagar_router
from routers.contas_receber_router import router as contas_receber_router
from routers.lancamento_lote_router import router as lancamento_lote_router
from routers.cheques_router import router as cheques_router
from routers.vendas_router import router as vendas_router
from routers.relatorios_router import router as relatorios_router
from routers.dashboard_router import router as dashboard_router
from routers.maquininhas_router import router as maquininhas_router
from routers.configuracoes_router import router as configuracoes_router, validacoes_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="""
API de gestão financeira para pequenos negócios.

Fluxo:
1. Cadastro de bancos, categorias, fornecedores, clientes e pagadores
2. Contas a pagar / receber (avulsas ou em lote)
3. Cheques, vendas e maquininhas
4. DRE, fluxo de caixa e dashboard
""",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

cors_origins = list(settings.ALLOWED_ORIGINS) + [
    value
    for key, value in os.environ.items()
    if key.startswith("CORS_ORIGIN") and value.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_origin_regex=r"http://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code.value}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Captura exceções não tratadas para que a resposta 500
    passe pelo CORSMiddleware e inclua os headers corretos."""
    logger.error(f"Erro não tratado em {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content=from_exception(exc).to_dict())


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok", "app": settings.APP_NAME, "version": settings.APP_VERSION}


app.include_router(auth_router, prefix="/api")
app.include_router(bancos_router, prefix="/api")
app.include_router(fornecedores_router, prefix="/api")
app.include_router(clientes_router, prefix="/api")
app.include_router(pagadores_router, prefix="/api")
app.include_router(planodecontas_router, prefix="/api")
app.include_router(contas_pagar_router, prefix="/api")
app.include_router(contas_receber_router, prefix="/api")
app.include_router(lancamento_lote_router, prefix="/api")
app.include_router(cheques_router, prefix="/api")
app.include_router(vendas_router, prefix="/api")
app.include_router(relatorios_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")
app.include_router(maquininhas_router, prefix="/api")
app.include_router(configuracoes_router, prefix="/api")
app.include_router(validacoes_router, prefix="/api")
