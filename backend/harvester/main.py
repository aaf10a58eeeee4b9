"""FastAPI 应用入口"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from harvester.core.config import settings
from harvester.core.database import init_db
from harvester.core.errors import AppError, app_error_handler
from harvester.core.logging import logger
from harvester.scheduler import scheduler_engine, task_registry
from harvester.scheduler.initializer import init_scheduler_configs
from harvester.scheduler.routers import router as scheduler_router
from harvester.scheduler.tasks import HarvestBoardTask


def register_tasks() -> None:
    """注册所有可调度任务（每个 scheduler_id 只注册一次）"""
    if settings.HARVEST_SCHEDULER_ID not in task_registry:
        task_registry.register(HarvestBoardTask(scheduler_engine.store))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理"""
    # 启动时配置日志（确保最先执行）
    logger.configure()
    logger.install_asyncio_handler(asyncio.get_running_loop())

    logger.info("启动应用...", module="app")

    await init_db()
    await init_scheduler_configs(scheduler_engine.store)
    register_tasks()

    if settings.SCHEDULER_ENABLED:
        await scheduler_engine.startup()
        logger.info("任务调度器已启动", module="app", task_count=len(task_registry))
    else:
        logger.info("调度器未启用，仅提供管理接口", module="app")

    logger.info("应用启动完成", module="app", host=settings.API_HOST, port=settings.API_PORT)

    yield

    logger.info("正在关闭应用...", module="app")

    await scheduler_engine.shutdown()
    logger.debug("任务调度器已关闭", module="app")

    try:
        from harvester.core.database import engine

        await engine.dispose()
        logger.debug("数据库引擎已关闭", module="app")
    except Exception as e:
        logger.warning("关闭数据库引擎时出错", module="app", error=str(e))

    logger.info("应用已关闭", module="app")


app = FastAPI(
    title="Board Harvester",
    description="运行期可重配的定时抓取服务",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)

# 注册路由
app.include_router(scheduler_router)


@app.get("/health")
async def health_check():
    """健康检查"""
    return {"status": "ok", "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "harvester.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
    )
