"""定时任务."""

from feedflow.scheduler.tasks import create_scheduler, refresh_task, shutdown_scheduler

__all__ = ["create_scheduler", "refresh_task", "shutdown_scheduler"]
