"""
任务资源文件加载器

按后缀读取 JSON（.json）或 YAML（.yaml / .yml）资源文件，返回 任务名 -> 任务 json 的字典。
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ...core.logger import logger
from .errors import TaskLoadError

_log = logger.bind(module="TaskFileLoader")

YAML_SUFFIXES = (".yaml", ".yml")


def load_task_document(path: Union[str, Path]) -> Dict[str, Any]:
    """读取资源文件。

    Raises:
        TaskLoadError: 文件不存在、解析失败或顶层不是字典
    """
    file_path = Path(path)
    if not file_path.is_file():
        _log.error(f"任务资源文件不存在: {file_path}")
        raise TaskLoadError(f"任务资源文件不存在: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            if file_path.suffix.lower() in YAML_SUFFIXES:
                document = yaml.safe_load(f)
            else:
                document = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError, UnicodeDecodeError) as e:
        _log.error(f"任务资源解析失败: {file_path}: {e}")
        raise TaskLoadError(f"任务资源解析失败: {file_path}: {e}") from e
    except OSError as e:
        _log.error(f"任务资源读取失败: {file_path}: {e}")
        raise TaskLoadError(f"任务资源读取失败: {file_path}: {e}") from e

    if not isinstance(document, dict):
        _log.error(f"任务资源格式错误（非 dict）: {file_path}")
        raise TaskLoadError(f"任务资源格式错误（非 dict）: {file_path}")

    _log.info(f"任务资源已读取: {file_path}（{len(document)} 个任务）")
    return document


__all__ = ["load_task_document", "YAML_SUFFIXES"]
