"""
核心配置模块
"""
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """系统配置"""

    # 任务资源（逗号分隔，按顺序叠加加载，后者覆盖前者）
    task_files: str = Field(default="resource/tasks.json", env="TASK_FILES")

    # 严格模式：开启后执行 ROI 越界、未知键、引用与循环依赖检查，任一失败即整体加载失败
    task_strict_mode: bool = Field(default=False, env="TASK_STRICT_MODE")

    # 运行时动态生成（`@` 型）任务的缓存上限，超过后不再缓存，每次重新生成
    max_tasks_size: int = Field(default=65535, env="MAX_TASKS_SIZE")

    # 参考分辨率（ROI 越界检查）
    window_width: int = Field(default=1280, env="WINDOW_WIDTH")
    window_height: int = Field(default=720, env="WINDOW_HEIGHT")

    # 模板匹配默认阈值
    templ_threshold_default: float = Field(default=0.8, env="TEMPL_THRESHOLD_DEFAULT")

    # Web服务
    api_host: str = Field(default="0.0.0.0", env="API_HOST")
    api_port: int = Field(default=9001, env="API_PORT")

    # 日志
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_path: str = Field(default="./logs", env="LOG_PATH")
    log_retention_days: int = Field(default=3, env="LOG_RETENTION_DAYS")
    log_console_enabled: bool = Field(default=True, env="LOG_CONSOLE_ENABLED")

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def task_file_list(self) -> List[str]:
        """获取任务资源文件列表"""
        return [p.strip() for p in self.task_files.split(",") if p.strip()]


# 全局配置实例
settings = Settings()
