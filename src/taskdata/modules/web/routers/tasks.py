"""
任务资源查询API（只读）
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Any, Dict, List, Optional

from ....core.constants import parse_algorithm
from ....core.logger import logger
from ...tasks.errors import TaskNotFoundError, WrongVariantError
from ...tasks.registry import TaskRegistry, task_registry
from ...tasks.types import TaskInfo


router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def get_registry() -> TaskRegistry:
    return task_registry


class TaskInfoOut(BaseModel):
    """任务记录"""
    name: str
    algorithm: str
    action: str
    sub: List[str] = []
    next: List[str] = []
    exceeded_next: List[str] = []
    on_error_next: List[str] = []
    reduce_other_times: List[str] = []
    roi: List[int]
    cache: bool
    max_times: int
    pre_delay: int
    rear_delay: int
    rect_move: List[int]
    specific_rect: List[int]
    sub_error_ignored: bool
    payload: Optional[Dict[str, Any]] = None

    @classmethod
    def from_task(cls, task_info: TaskInfo) -> "TaskInfoOut":
        data = task_info.to_dict()
        data["roi"] = list(task_info.roi.as_tuple())
        data["rect_move"] = list(task_info.rect_move.as_tuple())
        data["specific_rect"] = list(task_info.specific_rect.as_tuple())
        return cls(**data)


class RequiredTemplatesOut(BaseModel):
    total: int
    templates: List[str]


@router.get("/templates/required", response_model=RequiredTemplatesOut)
async def get_required_templates(registry: TaskRegistry = Depends(get_registry)):
    """
    获取模板匹配任务用到的全部模板文件名
    """
    templates = sorted(registry.get_templ_required())
    return RequiredTemplatesOut(total=len(templates), templates=templates)


@router.get("/{name}", response_model=TaskInfoOut)
async def get_task(
    name: str,
    algorithm: Optional[str] = None,
    registry: TaskRegistry = Depends(get_registry),
):
    """
    获取解析后的任务；`Prefix@Base` 型任务按需派生
    """
    expected = None
    if algorithm:
        expected = parse_algorithm(algorithm)
        if expected is None:
            raise HTTPException(status_code=400, detail=f"未知 algorithm: {algorithm}")

    try:
        task_info = registry.get(name, algorithm=expected)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except WrongVariantError as e:
        logger.warning(f"任务查询类型不符: {e}")
        raise HTTPException(status_code=409, detail=str(e))

    return TaskInfoOut.from_task(task_info)
