"""
FastAPI应用主入口
"""
from fastapi import FastAPI
from contextlib import asynccontextmanager

from api.routes import transfer as transfer_routes
from api.middleware import RequestIDMiddleware, LoggingMiddleware
from core.config import settings
from core.exceptions import register_exception_handlers
from core.response import success_response
from core.logging_config import get_logger, configure_logging
from infrastructure.external.storage import (
    init_storage_client,
    shutdown_storage_client,
    get_storage_config,
)


# 初始化日志：在入口处显式配置，避免模块导入时的副作用
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 预热存储客户端；失败时不阻止启动，首个导入请求会再次尝试并返回存储错误
    try:
        storage = await init_storage_client()
        config = get_storage_config()
        logger.info("storage_initialized", provider=config.type)
        if await storage.health_check():
            logger.info("storage_health_check_passed")
        else:
            logger.warning("storage_health_check_failed", provider=config.type)
    except Exception as exc:
        logger.error("storage_init_failed", error=str(exc))

    yield

    await shutdown_storage_client()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="按请求从 FTP 服务器拉取单个文件并流式写入对象存储",
)

# 添加中间件（注意顺序：从下往上执行）
# 1. Request ID中间件（最先执行，为后续中间件提供request_id）
app.add_middleware(RequestIDMiddleware)

# 2. 日志中间件（依赖request_id）
app.add_middleware(LoggingMiddleware)

API_PREFIX = "/api/v1"

# 注册全局异常处理器
register_exception_handlers(app, post_only_paths={API_PREFIX + transfer_routes.IMPORT_PATH})

# 注册路由
app.include_router(transfer_routes.router, prefix=API_PREFIX)


# 根路径
@app.get("/", tags=["Root"])
async def root():
    """API根路径"""
    return success_response(
        data={
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": "/docs",
            "import": "/api/v1/import-ftp",
        }
    )


# 健康检查
@app.get("/health", tags=["Health"])
async def health_check():
    """健康检查端点"""
    return success_response(data={"status": "healthy"})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
