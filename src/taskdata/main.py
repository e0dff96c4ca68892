"""
主程序入口（任务资源查询服务）
"""
from fastapi import FastAPI
from .core.logger import logger
from .core.config import settings
from .modules.tasks import init_task_registry
from .modules.web import register_routers
from . import __version__

# 创建FastAPI应用
app = FastAPI(
    title="任务资源解析服务",
    description="查询解析后的任务定义与所需模板",
    version=__version__,
)

# 注册路由
register_routers(app)


@app.on_event("startup")
async def startup():
    """应用启动事件"""
    logger.info("应用启动中...")
    registry = init_task_registry()
    logger.info(f"任务资源加载完成，共 {len(registry)} 个任务")
    logger.info(f"应用启动完成，监听 {settings.api_host}:{settings.api_port}")
