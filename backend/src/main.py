from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from drafts.interfaces.routes import router as drafts_router
from drafts.interfaces.ws_handler import router as drafts_ws_router
from notifications.interfaces.routes import router as notifications_router
from shared.config import settings
from shared.exceptions import (
    AppError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidInputError,
    InvalidReferenceError,
    NotFoundError,
)
from shared.infrastructure.database import engine
from shared.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    yield
    await engine.dispose()
    if settings.BROADCAST_BACKEND == "redis":
        from shared.infrastructure.redis import get_redis_pool

        redis = get_redis_pool()
        await redis.aclose()


app = FastAPI(
    title="Draft Collaboration Engine",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(drafts_router)
app.include_router(drafts_ws_router)
app.include_router(notifications_router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(InvalidReferenceError)
async def invalid_reference_handler(request, exc: InvalidReferenceError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ConflictError)
async def conflict_handler(request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request, exc: InvalidInputError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(AuthenticationError)
async def auth_error_handler(request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content={"detail": exc.message})


@app.exception_handler(AuthorizationError)
async def forbidden_handler(request, exc: AuthorizationError):
    return JSONResponse(status_code=403, content={"detail": exc.message})


@app.exception_handler(AppError)
async def app_error_handler(request, exc: AppError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.get("/health")
async def health_check():
    return {"status": "ok"}
