"""
任务字段生成

根据 (任务 json, 模板任务, 前缀) 生成一条 TaskInfo：
- json 中存在的键：直接解析赋值（不加前缀）
- json 中缺省的键：继承模板任务的值；后续任务列表按前缀改写（见 append_prefix）
- 显式 algorithm 与模板任务不同时，算法参数从该算法的默认值开始，不继承
- template 缺省时为 ``<任务名>.png``，不从模板任务继承
"""
from __future__ import annotations

import copy
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from ...core.config import settings
from ...core.constants import (
    PREFIX_SEP,
    AlgorithmType,
    parse_action,
    parse_algorithm,
)
from ...core.logger import logger
from .errors import (
    RoiOutOfBoundsError,
    TaskLoadError,
    UnknownActionError,
    UnknownAlgorithmError,
)
from .types import HashPayload, MatchPayload, OcrPayload, Payload, Rect, TaskInfo


def append_prefix(names: Sequence[str], prefix: str) -> List[str]:
    """给后续任务名加上 ``prefix@`` 前缀。

    若任务名中 `@` 分隔的前缀段里已经包含 prefix，则保持原样，
    避免 `A@B@A@C` 这类前缀重复叠加。
    """
    if not prefix:
        return list(names)
    result: List[str] = []
    for name in names:
        segments = name.split(PREFIX_SEP)[:-1]
        if prefix in segments:
            result.append(name)
        else:
            result.append(f"{prefix}{PREFIX_SEP}{name}")
    return result


class _EntryReader:
    """带类型检查的任务 json 取值"""

    def __init__(self, name: str, entry: Mapping[str, Any]) -> None:
        self.name = name
        self.entry = entry

    def _fail(self, key: str, expected: str) -> TaskLoadError:
        return TaskLoadError(
            f"{self.name}.{key} 应为 {expected}，实际为 {self.entry[key]!r}", self.name
        )

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        if key not in self.entry:
            return default
        value = self.entry[key]
        if not isinstance(value, str):
            raise self._fail(key, "字符串")
        return value

    def get_bool(self, key: str, default: bool) -> bool:
        if key not in self.entry:
            return default
        value = self.entry[key]
        if not isinstance(value, bool):
            raise self._fail(key, "布尔值")
        return value

    def get_int(self, key: str, default: int) -> int:
        if key not in self.entry:
            return default
        value = self.entry[key]
        if isinstance(value, bool) or not isinstance(value, int):
            raise self._fail(key, "整数")
        return value

    def get_number(self, key: str, default: float) -> float:
        if key not in self.entry:
            return default
        value = self.entry[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise self._fail(key, "数值")
        return value

    def str_list(self, key: str) -> Optional[List[str]]:
        if key not in self.entry:
            return None
        value = self.entry[key]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise self._fail(key, "字符串列表")
        return list(value)

    def ints(self, key: str, count: int) -> Optional[Tuple[int, ...]]:
        if key not in self.entry:
            return None
        value = self.entry[key]
        if (
            not isinstance(value, list)
            or len(value) != count
            or any(isinstance(v, bool) or not isinstance(v, int) for v in value)
        ):
            raise self._fail(key, f"长度为 {count} 的整数列表")
        return tuple(value)

    def rect(self, key: str) -> Optional[Rect]:
        values = self.ints(key, 4)
        return Rect(*values) if values is not None else None

    def pairs(self, key: str) -> Optional[Dict[str, str]]:
        if key not in self.entry:
            return None
        value = self.entry[key]
        if not isinstance(value, list) or not all(
            isinstance(p, list) and len(p) == 2 and all(isinstance(s, str) for s in p)
            for p in value
        ):
            raise self._fail(key, "[原文, 替换] 列表")
        return {src: dst for src, dst in value}


class TaskInfoBuilder:
    """按算法生成 TaskInfo，并收集模板任务所需的模板文件名"""

    def __init__(
        self,
        *,
        strict: bool = False,
        window_width: Optional[int] = None,
        window_height: Optional[int] = None,
        templ_threshold: Optional[float] = None,
    ) -> None:
        self.strict = strict
        self.window_width = window_width or settings.window_width
        self.window_height = window_height or settings.window_height
        threshold = settings.templ_threshold_default if templ_threshold is None else templ_threshold
        self._default_payloads: Dict[AlgorithmType, Payload] = {
            AlgorithmType.MATCH_TEMPLATE: MatchPayload(templ_threshold=threshold),
            AlgorithmType.OCR_DETECT: OcrPayload(),
            AlgorithmType.HASH: HashPayload(),
            AlgorithmType.JUST_RETURN: None,
        }
        # 无模板任务时使用的默认任务
        self.default_task_info = TaskInfo(
            name="",
            payload=self.default_payload(AlgorithmType.MATCH_TEMPLATE),
        )
        self.templ_required: Set[str] = set()
        self._payload_builders: Dict[AlgorithmType, Callable[[_EntryReader, Any], Payload]] = {
            AlgorithmType.MATCH_TEMPLATE: self._build_match,
            AlgorithmType.OCR_DETECT: self._build_ocr,
            AlgorithmType.HASH: self._build_hash,
            AlgorithmType.JUST_RETURN: lambda reader, default: None,
        }
        self._log = logger.bind(module="TaskInfoBuilder")

    def default_payload(self, algorithm: AlgorithmType) -> Payload:
        return copy.deepcopy(self._default_payloads[algorithm])

    def build(
        self,
        name: str,
        entry: Mapping[str, Any],
        default: Optional[TaskInfo] = None,
        prefix: str = "",
    ) -> TaskInfo:
        """生成一条任务记录

        Args:
            name: 任务名
            entry: 任务 json
            default: 模板任务（baseTask 或 `@` 后的任务），None 时使用默认任务
            prefix: 后续任务列表继承时添加的前缀

        Raises:
            UnknownAlgorithmError / UnknownActionError / RoiOutOfBoundsError: 该任务生成失败
            TaskLoadError: json 取值类型错误
        """
        if default is None:
            default = self.default_task_info
            prefix = ""
        reader = _EntryReader(name, entry)

        algorithm = default.algorithm
        payload_default = default.payload
        algorithm_str = reader.get_str("algorithm")
        if algorithm_str is not None:
            parsed = parse_algorithm(algorithm_str)
            if parsed is None:
                raise UnknownAlgorithmError(name, algorithm_str)
            algorithm = parsed
            if algorithm != default.algorithm:
                # 相同 algorithm 时才继承算法参数
                payload_default = self._default_payloads[algorithm]

        payload = self._payload_builders[algorithm](reader, payload_default)
        task_info = TaskInfo(name=name, algorithm=algorithm, payload=payload)
        self._append_base(task_info, reader, default, prefix)

        if isinstance(payload, MatchPayload):
            self.templ_required.add(payload.templ_name)
        return task_info

    def _build_match(self, reader: _EntryReader, default: MatchPayload) -> MatchPayload:
        mask = reader.ints("maskRange", 2)
        return MatchPayload(
            # template 留空时不从模板任务继承
            templ_name=reader.get_str("template", f"{reader.name}.png"),
            templ_threshold=reader.get_number("templThreshold", default.templ_threshold),
            special_threshold=reader.get_number("specialThreshold", default.special_threshold),
            mask_range=mask if mask is not None else default.mask_range,
        )

    def _build_ocr(self, reader: _EntryReader, default: OcrPayload) -> OcrPayload:
        text = reader.str_list("text")
        if text is None:
            if self.strict and not default.text:
                self._log.warning(f"OCR 任务 {reader.name} 的 text 为隐式空列表")
            text = list(default.text)
        replace_map = reader.pairs("ocrReplace")
        return OcrPayload(
            text=text,
            full_match=reader.get_bool("fullMatch", default.full_match),
            replace_map=replace_map if replace_map is not None else dict(default.replace_map),
        )

    def _build_hash(self, reader: _EntryReader, default: HashPayload) -> HashPayload:
        hashes = reader.str_list("hash")
        if hashes is None:
            if self.strict and not default.hashes:
                self._log.warning(f"Hash 任务 {reader.name} 的 hash 为隐式空列表")
            hashes = list(default.hashes)
        mask = reader.ints("maskRange", 2)
        return HashPayload(
            hashes=hashes,
            dist_threshold=reader.get_int("threshold", default.dist_threshold),
            mask_range=mask if mask is not None else default.mask_range,
            bound=reader.get_bool("bound", default.bound),
        )

    def _append_base(
        self,
        task_info: TaskInfo,
        reader: _EntryReader,
        default: TaskInfo,
        prefix: str,
    ) -> None:
        """填充所有算法共有的成员"""
        name = reader.name

        action_str = reader.get_str("action")
        if action_str is None:
            task_info.action = default.action
        else:
            action = parse_action(action_str)
            if action is None:
                raise UnknownActionError(name, action_str)
            task_info.action = action

        task_info.cache = reader.get_bool("cache", default.cache)
        task_info.max_times = reader.get_int("maxTimes", default.max_times)
        task_info.pre_delay = reader.get_int("preDelay", default.pre_delay)
        task_info.rear_delay = reader.get_int("rearDelay", default.rear_delay)
        task_info.sub_error_ignored = reader.get_bool("subErrorIgnored", default.sub_error_ignored)

        for key, attr in (
            ("sub", "sub"),
            ("next", "next"),
            ("exceededNext", "exceeded_next"),
            ("onErrorNext", "on_error_next"),
            ("reduceOtherTimes", "reduce_other_times"),
        ):
            names = reader.str_list(key)
            if names is None:
                names = append_prefix(getattr(default, attr), prefix)
            setattr(task_info, attr, names)

        roi = reader.rect("roi")
        if roi is None:
            task_info.roi = default.roi
        else:
            if self.strict and (
                roi.x + roi.width > self.window_width or roi.y + roi.height > self.window_height
            ):
                raise RoiOutOfBoundsError(name, roi.as_tuple())
            task_info.roi = roi

        rect_move = reader.rect("rectMove")
        task_info.rect_move = rect_move if rect_move is not None else default.rect_move
        specific_rect = reader.rect("specificRect")
        task_info.specific_rect = specific_rect if specific_rect is not None else default.specific_rect


__all__ = ["append_prefix", "TaskInfoBuilder"]
