"""FeedFlow 主应用入口."""

import locale
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from feedflow import __version__
from feedflow.api import analytics, articles, feeds, filters, topics
from feedflow.config import get_settings
from feedflow.errors import InvalidInputError, NotFoundError, SummarizationError
from feedflow.models.database import init_db
from feedflow.scheduler import create_scheduler, shutdown_scheduler
from feedflow.services import build_services

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """应用生命周期管理."""
    app_settings = get_settings()

    try:
        locale.setlocale(locale.LC_COLLATE, app_settings.collation_locale)
    except locale.Error:
        logger.warning(f"不支持的 locale: {app_settings.collation_locale!r}，标题按码点排序")

    logger.info("正在初始化数据库...")
    engine, session_factory = await init_db(app_settings.database_url)

    services = build_services(session_factory, app_settings)
    app.state.services = services

    if app_settings.scheduler_enabled:
        logger.info("正在启动定时任务...")
        create_scheduler(app_settings, services)

    logger.info("FeedFlow 启动完成！")
    yield

    # 关闭时清理
    logger.info("正在关闭...")
    await shutdown_scheduler()
    await services.close()
    await engine.dispose()
    logger.info("FeedFlow 已关闭")


app = FastAPI(
    title="FeedFlow",
    description="新闻聚合与内容筛选服务",
    version=__version__,
    lifespan=lifespan,
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def invalid_input_handler(
    request: Request, exc: InvalidInputError
) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def summarization_handler(
    request: Request, exc: SummarizationError
) -> JSONResponse:
    logger.warning(f"摘要失败 {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


app.add_exception_handler(NotFoundError, not_found_handler)
app.add_exception_handler(InvalidInputError, invalid_input_handler)
app.add_exception_handler(SummarizationError, summarization_handler)

# 注册路由
app.include_router(articles.router)
app.include_router(feeds.router)
app.include_router(filters.router)
app.include_router(topics.router)
app.include_router(analytics.router)


@app.get("/")
async def root() -> dict:
    """根路径."""
    return {
        "name": "FeedFlow",
        "version": __version__,
        "description": "新闻聚合与内容筛选服务",
    }


@app.get("/health")
async def health() -> dict:
    """健康检查."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "feedflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
