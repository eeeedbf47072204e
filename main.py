"""
FastAPI应用主入口
"""
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import ecom as ecom_routes
from api.routes import paghiper as paghiper_routes
from api.middleware import RequestIDMiddleware, LoggingMiddleware
from core.config import settings
from core.exceptions import register_exception_handlers
from core.response import success_response
from core.logging_config import get_logger, configure_logging
from infrastructure.database import create_tables
from infrastructure.cache import init_redis_cache, shutdown_redis_cache


# 初始化日志：在入口处显式配置
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    if settings.DEBUG:
        await create_tables()
        logger.info("database_initialized", message="Database tables created (development)")

    # Store API and PagHiper clients share one pool; credentials go per request
    app.state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(max(settings.store_api.timeout, settings.paghiper.timeout)),
        follow_redirects=True,
    )

    if settings.redis.url:
        try:
            await init_redis_cache()
            logger.info("redis_cache_initialized", message="Notification receipts enabled")
        except Exception as exc:
            # Receipts are an optimisation; notifications are processed without them
            logger.error("redis_cache_init_failed", error=str(exc))

    yield

    if settings.redis.url:
        await shutdown_redis_cache()
        logger.info("redis_cache_shutdown")
    await app.state.http_client.aclose()
    logger.info("application_shutdown", message="Application shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="PagHiper notifications to E-Com Plus order payment status",
)

# 添加中间件（注意顺序：从下往上执行）
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(paghiper_routes.router)
app.include_router(ecom_routes.router)


@app.get("/", tags=["Root"])
async def root():
    """API根路径"""
    return success_response(
        data={
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": "/docs",
        },
        message="PagHiper notification bridge",
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """健康检查端点"""
    return success_response(data={"status": "healthy"}, message="OK")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
