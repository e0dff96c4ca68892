"""
日志配置模块
"""
import sys
from pathlib import Path
from loguru import logger
from .config import settings

_configured = False


def _console_stream():
    """获取可用的控制台输出流（无控制台的打包环境下可能为 None）"""
    for stream in (sys.stdout, sys.stderr, sys.__stdout__, sys.__stderr__):
        if stream is not None:
            return stream
    return None


def setup_logger(force: bool = False):
    """配置日志系统

    重复调用时不会叠加处理器；``force=True`` 时按当前配置重建全部处理器。
    """
    global _configured
    if _configured and not force:
        return logger

    # 移除默认处理器
    logger.remove()

    # 创建日志目录
    log_dir = Path(settings.log_path)
    log_dir.mkdir(parents=True, exist_ok=True)

    # 控制台输出
    console = _console_stream() if settings.log_console_enabled else None
    if console is not None:
        logger.add(
            console,
            level=settings.log_level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
        )

    # 文件输出 - 全局日志
    logger.add(
        log_dir / "app_{time:YYYY-MM-DD}.log",
        level=settings.log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        rotation="00:00",  # 每天午夜轮转
        retention=f"{settings.log_retention_days} days",
        encoding="utf-8",
    )

    # 错误日志单独记录
    logger.add(
        log_dir / "error_{time:YYYY-MM-DD}.log",
        level="ERROR",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        rotation="00:00",
        retention=f"{settings.log_retention_days * 2} days",
        encoding="utf-8"
    )

    if settings.log_console_enabled and console is None:
        logger.warning("未检测到可用控制台输出流，仅输出到日志文件")

    _configured = True
    return logger


# 初始化日志系统
logger = setup_logger()
