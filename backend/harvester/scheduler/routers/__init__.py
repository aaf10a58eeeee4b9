"""调度管理路由"""

from harvester.scheduler.routers.tasks import router

__all__ = ["router"]
