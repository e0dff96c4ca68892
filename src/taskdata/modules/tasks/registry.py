"""
任务注册表

加载资源生成任务记录，运行时按需派生 `Prefix@Base` 型任务。
"""
from __future__ import annotations

import copy
import threading
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from ...core.config import settings
from ...core.constants import PREFIX_SEP, AlgorithmType
from ...core.logger import logger
from .builder import TaskInfoBuilder, append_prefix
from .errors import (
    TaskDataError,
    TaskLoadError,
    TaskLookupError,
    TaskNotFoundError,
    TaskValidationError,
    WrongVariantError,
)
from .loader import load_task_document
from .resolver import TaskResolver
from .types import RELATION_FIELDS, TaskInfo
from .validator import TaskValidator


class TaskRegistry:
    """任务注册表

    加载阶段（单线程）生成资源中声明的全部任务；运行阶段 ``get`` 可被多个线程并发调用，
    按需派生 `Prefix@Base` 型任务并缓存（超过上限后不再缓存，每次重新生成）。
    """

    def __init__(
        self,
        *,
        strict: Optional[bool] = None,
        max_size: Optional[int] = None,
        builder: Optional[TaskInfoBuilder] = None,
    ) -> None:
        self.strict = settings.task_strict_mode if strict is None else strict
        self.max_size = settings.max_tasks_size if max_size is None else max_size
        self._builder = builder or TaskInfoBuilder(strict=self.strict)
        self._tasks: Dict[str, TaskInfo] = {}
        self._lock = threading.Lock()
        self._log = logger.bind(module="TaskRegistry")

    # ---- 加载 ----

    def load(self, document: Mapping[str, Any]) -> None:
        """加载一份资源文档。

        可多次调用（例如先加载通用资源，再加载客户端专属资源）：同名任务被重新生成并覆盖，
        之前加载过的任务可作为本次资源的模板任务。

        Raises:
            TaskLoadError: 文档格式错误
            TaskValidationError: 严格模式下存在任何生成错误或诊断问题
        """
        if not isinstance(document, Mapping):
            raise TaskLoadError(f"任务资源顶层应为字典，实际为 {type(document).__name__}")
        for name, entry in document.items():
            if not isinstance(name, str) or not isinstance(entry, Mapping):
                raise TaskLoadError(f"任务 {name!r} 的定义应为字典", str(name))

        resolver = TaskResolver(
            document,
            self._tasks,
            self._builder,
            lambda name: self.find(name, with_cache=False),
        )
        tasks_snapshot = dict(self._tasks)
        templ_snapshot = set(self._builder.templ_required)
        try:
            issues: List[TaskDataError] = list(resolver.resolve_all())
        except TaskLoadError:
            # 格式错误中止本次加载，回滚已生成的任务
            with self._lock:
                self._tasks.clear()
                self._tasks.update(tasks_snapshot)
            self._builder.templ_required.clear()
            self._builder.templ_required.update(templ_snapshot)
            raise

        if self.strict:
            issues.extend(TaskValidator(self, document, skip=resolver.failed).check())
            if issues:
                for issue in issues:
                    self._log.error(str(issue))
                raise TaskValidationError(issues)
        else:
            for issue in issues:
                self._log.error(str(issue))

        self._log.info(
            f"任务资源加载完成: 本次 {len(document) - len(resolver.failed)}/{len(document)} 个，"
            f"共 {len(self._tasks)} 个任务，{len(self._builder.templ_required)} 个模板"
        )

    def load_file(self, path: Union[str, Path]) -> None:
        self.load(load_task_document(path))

    def load_files(self, paths: Iterable[Union[str, Path]]) -> None:
        for path in paths:
            self.load_file(path)

    # ---- 查询 ----

    def get(
        self,
        name: str,
        with_cache: bool = True,
        algorithm: Optional[AlgorithmType] = None,
    ) -> TaskInfo:
        """获取任务；`Prefix@Base` 型任务不存在时按 Base 派生。

        Args:
            name: 任务名
            with_cache: 派生出的任务是否写入注册表
            algorithm: 期望的算法类型，不符时抛出 WrongVariantError

        Raises:
            TaskNotFoundError: 任务不存在且无法派生
            WrongVariantError: 任务算法与期望不符
        """
        task_info = self._tasks.get(name)
        if task_info is None:
            task_info = self._derive(name, with_cache)
        if algorithm is not None and task_info.algorithm != algorithm:
            raise WrongVariantError(name, algorithm, task_info.algorithm)
        return task_info

    def find(
        self,
        name: str,
        with_cache: bool = True,
        algorithm: Optional[AlgorithmType] = None,
    ) -> Optional[TaskInfo]:
        """同 get，查询失败时返回 None"""
        try:
            return self.get(name, with_cache, algorithm)
        except TaskLookupError:
            return None

    def _derive(self, name: str, with_cache: bool) -> TaskInfo:
        pos = name.find(PREFIX_SEP)
        if pos == -1:
            raise TaskNotFoundError(name)

        prefix, base_name = name[:pos], name[pos + 1:]
        try:
            base = self.get(base_name, with_cache)
        except TaskNotFoundError:
            raise TaskNotFoundError(name) from None

        task_info = copy.deepcopy(base)
        task_info.name = name
        for attr in RELATION_FIELDS.values():
            setattr(task_info, attr, append_prefix(getattr(base, attr), prefix))

        if with_cache:
            with self._lock:
                # 任务个数超过上限时不再缓存，返回临时值
                if len(self._tasks) < self.max_size:
                    self._tasks[name] = task_info
                else:
                    self._log.debug(f"任务数已达上限 {self.max_size}，不缓存: {name}")
        return task_info

    def get_templ_required(self) -> FrozenSet[str]:
        """全部模板匹配任务用到的模板文件名"""
        return frozenset(self._builder.templ_required)

    def items(self) -> List[Tuple[str, TaskInfo]]:
        with self._lock:
            return list(self._tasks.items())

    def names(self) -> List[str]:
        with self._lock:
            return list(self._tasks.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)


# Global default registry
task_registry = TaskRegistry()


def init_task_registry(paths: Optional[Iterable[Union[str, Path]]] = None) -> TaskRegistry:
    """加载配置中的任务资源到全局注册表"""
    task_registry.load_files(paths if paths is not None else settings.task_file_list)
    return task_registry


__all__ = ["TaskRegistry", "task_registry", "init_task_registry"]
