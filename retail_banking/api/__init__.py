"""
Retail Banking API Application Factory
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import BankingSystem
from .users import router as users_router
from .login import router as login_router
from .accounts import router as accounts_router
from .transactions import router as transactions_router
from ..config import BankConfig, get_config
from ..errors import BankingError
from ..logging_config import get_logger, log_action, setup_logging


logger = get_logger("retail_banking.api")


def _validation_details(exc: RequestValidationError):
    details = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        message = error.get("msg", "")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({
            "field": ".".join(location),
            "message": message,
            "type": error.get("type", "")
        })
    return details


def create_app(system: Optional[BankingSystem] = None, config: Optional[BankConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    config = config or (system.config if system else get_config())
    system = system or BankingSystem(config)

    app = FastAPI(
        title="Retail Banking API",
        description="Users, bank accounts and deposit / withdrawal transactions",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.banking_system = system

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BankingError)
    async def banking_error_handler(request: Request, exc: BankingError):
        level = "warning" if exc.status_code < 500 else "error"
        log_action(logger, level, exc.message,
                   action=exc.code, resource=request.url.path,
                   extra={"method": request.method, "status_code": exc.status_code})
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = _validation_details(exc)
        log_action(logger, "info", "Validation failed",
                   action="validation_failed", resource=request.url.path,
                   extra={"method": request.method, "details": details})
        return JSONResponse(
            status_code=400,
            content={"message": "Validation failed", "details": details}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"message": message})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        log_action(logger, "error", "Unhandled exception",
                   action="unexpected_error", resource=request.url.path,
                   extra={"method": request.method}, exc_info=exc)
        return JSONResponse(status_code=500, content={"message": "An unexpected error occurred"})

    # Include routers
    app.include_router(users_router, prefix="/v1/users", tags=["Users"])
    app.include_router(login_router, prefix="/v1/auth", tags=["Auth"])
    app.include_router(accounts_router, prefix="/v1/accounts", tags=["Accounts"])
    app.include_router(transactions_router, prefix="/v1/accounts", tags=["Transactions"])

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "retail_banking_api",
            "version": "1.0.0"
        }

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Start the API with uvicorn using the configured logging"""
    import uvicorn

    config = get_config()
    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)
    uvicorn.run(create_app(config=config), host=host or config.api_host, port=port or config.api_port)
