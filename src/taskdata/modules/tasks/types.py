"""
任务数据结构

TaskInfo 为解析完成的任务记录；算法相关参数以 payload 形式挂在记录上，
由 ``algorithm`` 字段标记具体类型（MatchPayload / OcrPayload / HashPayload，
JustReturn 无 payload）。
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from ...core.constants import (
    INVALID_TEMPLATE,
    MAX_TIMES_UNLIMITED,
    ActionType,
    AlgorithmType,
    RelationKind,
)


@dataclass(frozen=True)
class Rect:
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def empty(self) -> bool:
        return self.width == 0 and self.height == 0

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)


@dataclass
class MatchPayload:
    """模板匹配参数"""
    templ_name: str = INVALID_TEMPLATE
    templ_threshold: float = 0.8
    special_threshold: float = 0
    mask_range: Optional[Tuple[int, int]] = None


@dataclass
class OcrPayload:
    """文字识别参数"""
    text: List[str] = field(default_factory=list)
    full_match: bool = False
    # 识别结果替换表，按声明顺序应用
    replace_map: Dict[str, str] = field(default_factory=dict)


@dataclass
class HashPayload:
    """感知哈希参数"""
    hashes: List[str] = field(default_factory=list)
    dist_threshold: int = 0
    mask_range: Optional[Tuple[int, int]] = None
    bound: bool = True


Payload = Union[MatchPayload, OcrPayload, HashPayload, None]

PAYLOAD_TYPES: Dict[AlgorithmType, Optional[type]] = {
    AlgorithmType.MATCH_TEMPLATE: MatchPayload,
    AlgorithmType.OCR_DETECT: OcrPayload,
    AlgorithmType.HASH: HashPayload,
    AlgorithmType.JUST_RETURN: None,
}


@dataclass
class TaskInfo:
    """解析完成的任务记录

    Attributes:
        name: 任务名（全局唯一）
        algorithm: 识别算法，决定 payload 类型
        action: 识别命中后的动作
        sub / next / exceeded_next / on_error_next / reduce_other_times:
            后续任务名列表，元素可能为 `Name` 或 `Name#relation`
        roi: 识别区域 (x, y, w, h)
        cache: 是否缓存识别位置
        max_times: 最大执行次数
        pre_delay / rear_delay: 动作前后延迟（毫秒）
        rect_move: 识别结果矩形偏移
        specific_rect: ClickRect 动作点击的矩形
        sub_error_ignored: 子任务出错时是否忽略
        payload: 算法相关参数
    """
    name: str
    algorithm: AlgorithmType = AlgorithmType.MATCH_TEMPLATE
    action: ActionType = ActionType.DO_NOTHING
    sub: List[str] = field(default_factory=list)
    next: List[str] = field(default_factory=list)
    exceeded_next: List[str] = field(default_factory=list)
    on_error_next: List[str] = field(default_factory=list)
    reduce_other_times: List[str] = field(default_factory=list)
    roi: Rect = field(default_factory=Rect)
    cache: bool = True
    max_times: int = MAX_TIMES_UNLIMITED
    pre_delay: int = 0
    rear_delay: int = 0
    rect_move: Rect = field(default_factory=Rect)
    specific_rect: Rect = field(default_factory=Rect)
    sub_error_ignored: bool = False
    payload: Payload = None

    def relations(self) -> Dict[RelationKind, List[str]]:
        """按依赖类型返回全部后续任务列表"""
        return {
            RelationKind.SUB: self.sub,
            RelationKind.NEXT: self.next,
            RelationKind.EXCEEDED_NEXT: self.exceeded_next,
            RelationKind.ON_ERROR_NEXT: self.on_error_next,
            RelationKind.REDUCE_OTHER_TIMES: self.reduce_other_times,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["algorithm"] = self.algorithm.value
        data["action"] = self.action.value
        return data


# 各后续列表对应的记录属性名
RELATION_FIELDS: Dict[RelationKind, str] = {
    RelationKind.SUB: "sub",
    RelationKind.NEXT: "next",
    RelationKind.EXCEEDED_NEXT: "exceeded_next",
    RelationKind.ON_ERROR_NEXT: "on_error_next",
    RelationKind.REDUCE_OTHER_TIMES: "reduce_other_times",
}


__all__ = [
    "Rect",
    "MatchPayload",
    "OcrPayload",
    "HashPayload",
    "Payload",
    "PAYLOAD_TYPES",
    "TaskInfo",
    "RELATION_FIELDS",
]
