"""
任务数据异常定义

- TaskLoadError: 资源整体加载失败（文档格式错误、严格模式校验未通过）
- TaskBuildError: 单个任务生成失败
- TaskCheckError: 严格模式下的诊断问题（未知键、悬空引用、循环依赖）
- TaskLookupError: 运行时查询失败，返回给调用方
"""
from __future__ import annotations

from typing import List, Optional, Sequence


class TaskDataError(Exception):
    """任务数据异常基类"""

    def __init__(self, message: str, task: Optional[str] = None) -> None:
        super().__init__(message)
        self.task = task


# ---- 加载 ----


class TaskLoadError(TaskDataError):
    """资源文档格式错误，中止整个加载"""


class TaskValidationError(TaskLoadError):
    """严格模式下收集到的全部问题"""

    def __init__(self, errors: Sequence[TaskDataError]) -> None:
        self.errors: List[TaskDataError] = list(errors)
        lines = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"任务资源校验失败，共 {len(self.errors)} 个问题:\n{lines}")


# ---- 生成 ----


class TaskBuildError(TaskDataError):
    """单个任务生成失败"""


class UnresolvedReferenceError(TaskBuildError):
    def __init__(self, task: str, referrer: Optional[str] = None) -> None:
        if referrer:
            message = f"{referrer}: 未知任务 {task}"
        else:
            message = f"未知任务: {task}"
        super().__init__(message, task)
        self.referrer = referrer


class BaseTaskCycleError(TaskBuildError):
    def __init__(self, task: str) -> None:
        super().__init__(f"{task}: baseTask 存在循环继承", task)


class UnknownAlgorithmError(TaskBuildError):
    def __init__(self, task: str, algorithm: str) -> None:
        super().__init__(f"{task}: 未知 algorithm: {algorithm!r}", task)
        self.algorithm = algorithm


class UnknownActionError(TaskBuildError):
    def __init__(self, task: str, action: str) -> None:
        super().__init__(f"{task}: 未知 action: {action!r}", task)
        self.action = action


class RoiOutOfBoundsError(TaskBuildError):
    def __init__(self, task: str, roi) -> None:
        super().__init__(f"{task}: roi {tuple(roi)} 越界", task)
        self.roi = roi


# ---- 诊断 ----


class TaskCheckError(TaskDataError):
    """严格模式诊断问题"""


class UnknownKeyError(TaskCheckError):
    def __init__(self, task: str, key: str) -> None:
        super().__init__(f"{task}: 未知键 {key!r}", task)
        self.key = key


class DanglingReferenceError(TaskCheckError):
    def __init__(self, node: str, reference: str) -> None:
        super().__init__(f"{node}: 引用的任务 {reference} 不存在", node)
        self.reference = reference


class UnknownRelationError(TaskCheckError):
    def __init__(self, node: str, reference: str, relation: str) -> None:
        super().__init__(f"{node}: {reference} 的依赖类型 {relation!r} 未知", node)
        self.reference = reference
        self.relation = relation


class CycleError(TaskCheckError):
    def __init__(self, node: str) -> None:
        super().__init__(f"任务 {node} 存在循环依赖", node)


# ---- 查询 ----


class TaskLookupError(TaskDataError, KeyError):
    """运行时查询失败（非致命）"""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class TaskNotFoundError(TaskLookupError):
    def __init__(self, task: str) -> None:
        super().__init__(f"任务不存在: {task}", task)


class WrongVariantError(TaskLookupError):
    def __init__(self, task: str, expected, actual) -> None:
        super().__init__(
            f"任务 {task} 的算法为 {actual.value}，而非 {expected.value}", task
        )
        self.expected = expected
        self.actual = actual


__all__ = [
    "TaskDataError",
    "TaskLoadError",
    "TaskValidationError",
    "TaskBuildError",
    "UnresolvedReferenceError",
    "BaseTaskCycleError",
    "UnknownAlgorithmError",
    "UnknownActionError",
    "RoiOutOfBoundsError",
    "TaskCheckError",
    "UnknownKeyError",
    "DanglingReferenceError",
    "UnknownRelationError",
    "CycleError",
    "TaskLookupError",
    "TaskNotFoundError",
    "WrongVariantError",
]
