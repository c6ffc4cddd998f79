import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from doclens.config import settings
from doclens.middleware import RequestSizeLimitMiddleware, limiter, register_exception_handlers
from doclens.routes import ai, documents, health, ocr
from doclens.routes.deps import close_clients

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"CORS: {'all origins allowed' if settings.cors_allow_all else settings.cors_origins}"
    )
    yield
    # Shutdown - close SDK clients
    await close_clients()


app = FastAPI(
    title="DocLens API",
    description="Document image extraction, text/image adjacency checks, OCR and AI analysis",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiter state (required by slowapi)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

register_exception_handlers(app)

# Request size limit middleware (rejects oversized uploads before they are read)
app.add_middleware(RequestSizeLimitMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.cors_allow_all else settings.cors_origins,
    allow_credentials=not settings.cors_allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["health"])
app.include_router(documents.router, tags=["documents"])
app.include_router(ocr.router, prefix="/ocr", tags=["ocr"])
app.include_router(ai.openrouter_router, prefix="/ai", tags=["ai"])
app.include_router(ai.openai_router, prefix="/openai", tags=["openai"])
