from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from app.connections.database import close_db_pool
from app.logging.utils import initialize_logging, get_app_logger
from app.middlewares.logging_middleware import AuditMiddleware
from app.middlewares.api_token_validation import APITokenValidationMiddleware

# Settings
from app.config.settings import SFAConfigs
configs = SFAConfigs()

# Initialize Sentry (must be done early, before other imports)
from app.config.sentry import init_sentry
init_sentry()

# Initialize structured logging
initialize_logging()
logger = get_app_logger('app.main')

DEBUG = configs.DEBUG

logger.info(f"Running in {'debug' if DEBUG else 'production'} mode")


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info("Starting SFA promotions service")
    yield
    logger.info("Shutting down SFA promotions service")
    close_db_pool()

# Disable docs in production (when DEBUG=false)
docs_url = "/docs" if DEBUG else None
redoc_url = "/redoc" if DEBUG else None

app = FastAPI(
    title="SFA Promotions",
    version=configs.APP_VERSION,
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url
)

if configs.ALLOWED_ORIGINS:
    origins = [origin.strip() for origin in configs.ALLOWED_ORIGINS.split(",")]
else:
    origins = ["*"]

# Middlewares (last added runs first)
app.add_middleware(APITokenValidationMiddleware)

# Request/Audit logging middleware wraps token validation
app.add_middleware(AuditMiddleware)

logger.info(f"Configuring CORS with allowed origins: {origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register custom exception handlers
from app.middlewares.handlers import register_exception_handlers
register_exception_handlers(app)


# Routes
from app.routes.health import router as health_router
from app.routes.api import api_router

app.include_router(api_router, prefix="/api/v1")
app.include_router(health_router, tags=["health"])
