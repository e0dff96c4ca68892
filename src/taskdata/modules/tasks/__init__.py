"""
任务资源模块
"""
from .types import Rect, MatchPayload, OcrPayload, HashPayload, TaskInfo
from .errors import (
    TaskDataError,
    TaskLoadError,
    TaskValidationError,
    TaskBuildError,
    TaskCheckError,
    TaskLookupError,
    TaskNotFoundError,
    WrongVariantError,
)
from .builder import TaskInfoBuilder, append_prefix
from .resolver import TaskResolver
from .validator import TaskValidator
from .loader import load_task_document
from .registry import TaskRegistry, task_registry, init_task_registry

__all__ = [
    "Rect",
    "MatchPayload",
    "OcrPayload",
    "HashPayload",
    "TaskInfo",
    "TaskDataError",
    "TaskLoadError",
    "TaskValidationError",
    "TaskBuildError",
    "TaskCheckError",
    "TaskLookupError",
    "TaskNotFoundError",
    "WrongVariantError",
    "TaskInfoBuilder",
    "append_prefix",
    "TaskResolver",
    "TaskValidator",
    "load_task_document",
    "TaskRegistry",
    "task_registry",
    "init_task_registry",
]
