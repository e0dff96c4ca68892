"""
任务资源诊断检查（严格模式）

- 语法检查：任务 json 中不允许出现其算法/动作用不到的键。
  若某个键确实需要保留（例如是代码中使用的参数），加一个 ``xxx_Doc`` 注释即可通过检查。
- 引用检查：next、sub 等列表中引用的任务必须存在；
  `Task#type` 型引用构成有向图，不允许存在环。
"""
from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Protocol, Set, Tuple

from ...core.constants import RELATION_SEP, ActionType, AlgorithmType, RelationKind, parse_relation
from .errors import (
    CycleError,
    DanglingReferenceError,
    TaskCheckError,
    UnknownKeyError,
    UnknownRelationError,
)
from .types import TaskInfo

_COMMON_KEYS = frozenset({
    "algorithm",
    "baseTask",
    "action",
    "sub",
    "subErrorIgnored",
    "next",
    "maxTimes",
    "exceededNext",
    "onErrorNext",
    "preDelay",
    "rearDelay",
    "reduceOtherTimes",
    "roi",
    "cache",
    "rectMove",
})

ALLOWED_KEYS_BY_ALGORITHM: Dict[AlgorithmType, FrozenSet[str]] = {
    AlgorithmType.MATCH_TEMPLATE: _COMMON_KEYS | {"template", "templThreshold", "maskRange"},
    AlgorithmType.OCR_DETECT: _COMMON_KEYS | {"text", "fullMatch", "ocrReplace"},
    AlgorithmType.HASH: _COMMON_KEYS | {"hash", "threshold", "maskRange", "specialThreshold"},
    AlgorithmType.JUST_RETURN: _COMMON_KEYS,
}

ALLOWED_KEYS_BY_ACTION: Dict[ActionType, FrozenSet[str]] = {
    ActionType.CLICK_RECT: frozenset({"specificRect"}),
}

# 依赖图节点：(任务名, 列表类型)
Node = Tuple[str, RelationKind]


class TaskSource(Protocol):
    def find(self, name: str, with_cache: bool = True) -> Optional[TaskInfo]: ...

    def items(self) -> List[Tuple[str, TaskInfo]]: ...


def _node_name(node: Node) -> str:
    return f"{node[0]}{RELATION_SEP}{node[1].value}"


def _is_doc(key: str) -> bool:
    return "doc" in key.lower()


def _has_doc(entry: Mapping[str, Any], key: str) -> bool:
    return f"{key}_Doc" in entry or f"{key}_doc" in entry


def allowed_keys(algorithm: AlgorithmType, action: ActionType) -> FrozenSet[str]:
    return ALLOWED_KEYS_BY_ALGORITHM[algorithm] | ALLOWED_KEYS_BY_ACTION.get(action, frozenset())


class TaskValidator:
    """收集全部问题后统一返回，不在第一个错误处停止"""

    def __init__(
        self,
        tasks: TaskSource,
        document: Mapping[str, Mapping[str, Any]],
        skip: Iterable[str] = (),
    ) -> None:
        self._tasks = tasks
        self._document = document
        # 生成失败的任务已单独报告，不做语法检查
        self._skip: Set[str] = set(skip)

    def check(self) -> List[TaskCheckError]:
        return self.check_syntax() + self.check_references()

    def check_syntax(self) -> List[TaskCheckError]:
        errors: List[TaskCheckError] = []
        for name, entry in self._document.items():
            if name in self._skip:
                continue
            task_info = self._tasks.find(name, with_cache=False)
            if task_info is None:
                continue
            allowed = allowed_keys(task_info.algorithm, task_info.action)
            for key in entry:
                if key not in allowed and not _is_doc(key) and not _has_doc(entry, key):
                    errors.append(UnknownKeyError(name, key))
        return errors

    def check_references(self) -> List[TaskCheckError]:
        errors: List[TaskCheckError] = []
        graph: Dict[Node, List[Node]] = {}

        for name, task_info in self._tasks.items():
            for kind, task_list in task_info.relations().items():
                node = (name, kind)
                for ref in task_list:
                    target, sep, tag = ref.partition(RELATION_SEP)
                    if self._tasks.find(target, with_cache=False) is None:
                        errors.append(DanglingReferenceError(_node_name(node), ref))
                    if not sep:
                        continue
                    relation = parse_relation(tag)
                    if relation is None:
                        errors.append(UnknownRelationError(_node_name(node), ref, tag))
                        continue
                    # 建立一条依赖关系 (有向边)
                    graph.setdefault(node, []).append((target, relation))

        errors.extend(find_cycles(graph))
        return errors


def find_cycles(graph: Mapping[Node, List[Node]]) -> List[CycleError]:
    """三色标记 DFS，报告每个被回边指向的节点"""
    white, gray, black = 0, 1, 2
    color: Dict[Node, int] = {}
    reported: Set[Node] = set()
    errors: List[CycleError] = []

    for root in graph:
        if color.get(root, white) != white:
            continue
        color[root] = gray
        stack = [(root, iter(graph.get(root, ())))]
        while stack:
            node, children = stack[-1]
            for child in children:
                state = color.get(child, white)
                if state == white:
                    color[child] = gray
                    stack.append((child, iter(graph.get(child, ()))))
                    break
                if state == gray and child not in reported:
                    reported.add(child)
                    errors.append(CycleError(_node_name(child)))
            else:
                color[node] = black
                stack.pop()
    return errors


__all__ = [
    "ALLOWED_KEYS_BY_ALGORITHM",
    "ALLOWED_KEYS_BY_ACTION",
    "TaskValidator",
    "allowed_keys",
    "find_cycles",
]
