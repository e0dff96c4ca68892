"""
任务继承解析

对资源文档中的每个任务递归生成 TaskInfo，保证模板任务先于依赖它的任务生成：
1. 显式 baseTask：必须先生成 baseTask，以其为模板，不加前缀
2. 任务名含 `@`（`Prefix@Base`）：尝试生成 Base，成功则以其为模板并以 Prefix 改写后续任务列表；
   Base 不存在时退化为默认任务（例如 Roguelike@Abandon 没有定义 Abandon 的情况并不少见）
3. 其余：以默认任务为模板
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, Set

from ...core.constants import PREFIX_SEP
from ...core.logger import logger
from .builder import TaskInfoBuilder
from .errors import (
    BaseTaskCycleError,
    TaskBuildError,
    TaskLoadError,
    UnresolvedReferenceError,
)
from .types import TaskInfo


class _State(str, Enum):
    PENDING = "pending"
    RESOLVING = "resolving"
    DONE = "done"
    FAILED = "failed"


class TaskResolver:
    """单次加载的解析器

    Args:
        document: 资源文档（任务名 -> 任务 json）
        tasks: 注册表存储，生成结果直接写入；其中已有的任务（之前加载的资源）可作为模板
        builder: 字段生成器
        lookup: 按名称取得已生成任务（可运行时派生 `@` 型任务，不缓存），取不到返回 None
    """

    def __init__(
        self,
        document: Mapping[str, Mapping[str, Any]],
        tasks: MutableMapping[str, TaskInfo],
        builder: TaskInfoBuilder,
        lookup: Callable[[str], Optional[TaskInfo]],
    ) -> None:
        self._document = document
        self._tasks = tasks
        self._builder = builder
        self._lookup = lookup
        self._state: Dict[str, _State] = {name: _State.PENDING for name in document}
        self.errors: List[TaskBuildError] = []
        self._log = logger.bind(module="TaskResolver")

    @property
    def failed(self) -> Set[str]:
        return {name for name, state in self._state.items() if state is _State.FAILED}

    def resolve_all(self) -> List[TaskBuildError]:
        """生成文档中的全部任务，返回收集到的生成错误"""
        for name in self._document:
            self.resolve(name, required=True)
        return self.errors

    def resolve(self, name: str, required: bool = False) -> bool:
        """确保任务 name 已生成。

        required 为 True 时，找不到任务视为错误；否则只是某个 `B@A` 的 A 没有定义，静默失败。
        """
        state = self._state.get(name)
        if state is None:
            # 不在本次文档内：之前加载过的资源
            if name in self._tasks:
                return True
            # 例如生成 C@B@A 时没有定义 B@A，而是定义了 A
            pos = name.find(PREFIX_SEP)
            if pos != -1:
                return self.resolve(name[pos + 1:], required)
            if required:
                self._report(UnresolvedReferenceError(name))
            else:
                self._log.debug(f"任务 {name} 未定义，跳过")
            return False

        if state is _State.DONE:
            return True
        if state is _State.FAILED:
            return False
        if state is _State.RESOLVING:
            self._report(BaseTaskCycleError(name))
            return False

        self._state[name] = _State.RESOLVING
        try:
            task_info = self._generate(name, self._document[name])
        except TaskBuildError as e:
            self._report(e)
            task_info = None
        except TaskLoadError:
            self._state[name] = _State.FAILED
            raise

        if task_info is None:
            self._state[name] = _State.FAILED
            return False
        self._tasks[name] = task_info
        self._state[name] = _State.DONE
        return True

    def _generate(self, name: str, entry: Mapping[str, Any]) -> Optional[TaskInfo]:
        base = entry.get("baseTask")
        if base is not None:
            if not isinstance(base, str):
                raise TaskLoadError(f"{name}.baseTask 应为字符串，实际为 {base!r}", name)
            # 显式 baseTask 优先，不加前缀
            if not self.resolve(base, required=True):
                self._log.debug(f"任务 {name} 的 baseTask {base} 生成失败")
                return None
            return self._build(name, entry, base, "")

        pos = name.find(PREFIX_SEP)
        if pos != -1:
            base = name[pos + 1:]
            if self.resolve(base, required=False):
                return self._build(name, entry, base, name[:pos])
        return self._builder.build(name, entry)

    def _build(self, name: str, entry: Mapping[str, Any], base: str, prefix: str) -> Optional[TaskInfo]:
        default = self._lookup(base)
        if default is None:
            self._report(UnresolvedReferenceError(base, referrer=name))
            return None
        return self._builder.build(name, entry, default, prefix)

    def _report(self, error: TaskBuildError) -> None:
        self.errors.append(error)


__all__ = ["TaskResolver"]
