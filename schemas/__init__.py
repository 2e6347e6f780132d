from .auth_schema import (
    RegisterRequest,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    TokenResponse,
    UserInfo,
    UserMe,
)

from .banco_schema import (
    BancoCreate,
    BancoUpdate,
    BancoResponse,
    BancoEstatisticas,
)

from .contato_schema import (
    FornecedorCreate,
    FornecedorUpdate,
    FornecedorResponse,
    ClienteCreate,
    ClienteUpdate,
    ClienteResponse,
    PagadorCreate,
    PagadorUpdate,
    PagadorResponse,
)

from .planodecontas_schema import (
    PlanoContasCreate,
    PlanoContasUpdate,
    PlanoContasResponse,
)

from .conta_schema import (
    ContaPagarCreate,
    ContaPagarUpdate,
    ContaPagarResponse,
    ContaReceberCreate,
    ContaReceberUpdate,
    ContaReceberResponse,
)

from .lancamento_lote_schema import (
    LancamentoLoteRequest,
    ResultadoLancamentoResponse,
)

__all__ = [
    # Auth
    "RegisterRequest",
    "LoginRequest",
    "LoginResponse",
    "RefreshTokenRequest",
    "TokenResponse",
    "UserInfo",
    "UserMe",

    # Cadastros
    "BancoCreate",
    "BancoUpdate",
    "BancoResponse",
    "BancoEstatisticas",
    "FornecedorCreate",
    "FornecedorUpdate",
    "FornecedorResponse",
    "ClienteCreate",
    "ClienteUpdate",
    "ClienteResponse",
    "PagadorCreate",
    "PagadorUpdate",
    "PagadorResponse",
    "PlanoContasCreate",
    "PlanoContasUpdate",
    "PlanoContasResponse",

    # Lançamentos
    "ContaPagarCreate",
    "ContaPagarUpdate",
    "ContaPagarResponse",
    "ContaReceberCreate",
    "ContaReceberUpdate",
    "ContaReceberResponse",
    "LancamentoLoteRequest",
    "ResultadoLancamentoResponse",
]
