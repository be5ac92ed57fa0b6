"""定时任务定义."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from feedflow.config import Settings
from feedflow.services import Services

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def refresh_task(services: Services, settings: Settings) -> None:
    """刷新任务：抓取启用的订阅源，随后为新文章生成摘要."""
    logger.info("开始刷新订阅源...")

    try:
        results = await services.feeds.fetch_active_feeds()
    except Exception as e:
        logger.exception(f"刷新任务失败: {e}")
        return

    new_articles = sum(r.new_articles for r in results.values())
    failed = sum(1 for r in results.values() if not r.success)
    logger.info(
        f"刷新完成: Feed 数={len(results)}, 新文章={new_articles}, 失败={failed}"
    )

    if not settings.summarize_enabled or services.summaries is None:
        return

    try:
        summary = await services.summaries.summarize_pending(
            settings.summarize_batch_size
        )
    except Exception as e:
        logger.exception(f"摘要任务失败: {e}")
        return

    logger.info(
        f"摘要完成: 成功={summary['summarized']}, 失败={summary['failed']}"
    )


def create_scheduler(settings: Settings, services: Services) -> AsyncIOScheduler:
    """创建并启动定时任务调度器."""
    global _scheduler

    _scheduler = AsyncIOScheduler()

    _scheduler.add_job(
        refresh_task,
        "interval",
        minutes=settings.fetch_interval_minutes,
        args=[services, settings],
        id="refresh_task",
        name="订阅源刷新",
        replace_existing=True,
    )

    # 启动时立即执行一次
    _scheduler.add_job(
        refresh_task,
        "date",
        args=[services, settings],
        id="refresh_task_initial",
        name="初始刷新",
    )

    _scheduler.start()
    logger.info(
        f"定时任务调度器已启动，刷新间隔: {settings.fetch_interval_minutes} 分钟"
    )

    return _scheduler


async def shutdown_scheduler() -> None:
    """关闭定时任务调度器."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("定时任务调度器已关闭")
        _scheduler = None
