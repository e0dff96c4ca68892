"""
常量和枚举定义
"""
from enum import Enum
from typing import Dict, Optional

# 任务名前缀分隔符：`Prefix@Base`
PREFIX_SEP = "@"
# 依赖关系标记分隔符：`Task#next`
RELATION_SEP = "#"

# maxTimes 缺省（不限次数）
MAX_TIMES_UNLIMITED = 2 ** 31 - 1

# 未指定模板时默认任务使用的占位模板名
INVALID_TEMPLATE = "__INVALID__"


class AlgorithmType(str, Enum):
    """识别算法"""
    MATCH_TEMPLATE = "MatchTemplate"  # 模板匹配
    OCR_DETECT = "OcrDetect"          # 文字识别
    HASH = "Hash"                     # 感知哈希
    JUST_RETURN = "JustReturn"        # 不识别，直接返回


class ActionType(str, Enum):
    """识别命中后的动作"""
    CLICK_SELF = "ClickSelf"
    CLICK_RAND = "ClickRand"
    DO_NOTHING = "DoNothing"
    STOP = "Stop"
    CLICK_RECT = "ClickRect"
    SWIPE_TO_THE_LEFT = "SwipeToTheLeft"
    SWIPE_TO_THE_RIGHT = "SwipeToTheRight"
    SLOWLY_SWIPE_TO_THE_LEFT = "SlowlySwipeToTheLeft"
    SLOWLY_SWIPE_TO_THE_RIGHT = "SlowlySwipeToTheRight"


class RelationKind(str, Enum):
    """后续任务列表类型（`#` 型依赖的节点类型）"""
    SUB = "sub"
    NEXT = "next"
    EXCEEDED_NEXT = "exceededNext"
    ON_ERROR_NEXT = "onErrorNext"
    REDUCE_OTHER_TIMES = "reduceOtherTimes"


_ALGORITHM_ALIASES: Dict[str, AlgorithmType] = {
    **{a.value.lower(): a for a in AlgorithmType},
    "templatematch": AlgorithmType.MATCH_TEMPLATE,
    "perceptualhash": AlgorithmType.HASH,
    "passthrough": AlgorithmType.JUST_RETURN,
}

_ACTION_ALIASES: Dict[str, ActionType] = {
    **{a.value.lower(): a for a in ActionType},
    "": ActionType.DO_NOTHING,
}

_RELATION_ALIASES: Dict[str, RelationKind] = {
    **{r.value: r for r in RelationKind},
    "exceeded_next": RelationKind.EXCEEDED_NEXT,
    "on_error_next": RelationKind.ON_ERROR_NEXT,
    "reduce_other_times": RelationKind.REDUCE_OTHER_TIMES,
}


def parse_algorithm(text: str) -> Optional[AlgorithmType]:
    """解析算法名（不区分大小写），未知返回 None"""
    return _ALGORITHM_ALIASES.get(text.lower())


def parse_action(text: str) -> Optional[ActionType]:
    """解析动作名（不区分大小写，空串视为 DoNothing），未知返回 None"""
    return _ACTION_ALIASES.get(text.lower())


def parse_relation(text: str) -> Optional[RelationKind]:
    """解析 `#` 后的依赖类型，兼容 snake_case 写法"""
    return _RELATION_ALIASES.get(text)
