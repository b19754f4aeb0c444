import logging

from app import config

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from contextlib import asynccontextmanager  # noqa: E402

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from app.api.base import api_router  # noqa: E402
from app.db.session import dispose_engine, init_models  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.DB_CREATE_TABLES:
        await init_models()
    yield
    await dispose_engine()


app = FastAPI(
    title="Task Workflow API",
    description="Task management backend with dependency tracking, priority scoring and audit logging",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all API routes
app.include_router(api_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Answer malformed request input with 400, like validation errors raised by the services"""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body') or 'request'}: {error['msg']}"
        for error in exc.errors()
    )
    logger.warning(f"Rejected {request.method} {request.url.path}: {problems}")
    return JSONResponse(status_code=400, content={"detail": f"Invalid request: {problems}"})


@app.get("/")
def read_root():
    return {
        "message": "Task Workflow API",
        "docs": "/docs",
        "version": "1.0.0"
    }
