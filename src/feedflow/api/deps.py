"""API 依赖注入."""

from fastapi import Request

from feedflow.services import Services


def get_services(request: Request) -> Services:
    """获取应用服务（由 lifespan 创建并挂在 app.state 上）."""
    return request.app.state.services
