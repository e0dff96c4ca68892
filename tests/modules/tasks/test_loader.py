import json

import pytest

from taskdata.modules.tasks.errors import TaskLoadError
from taskdata.modules.tasks.loader import load_task_document
from taskdata.modules.tasks.registry import TaskRegistry


def _write_json(path, data):
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return path


def test_load_json_document(tmp_path):
    path = _write_json(tmp_path / "tasks.json", {"开始": {"next": ["结束"]}, "结束": {}})

    document = load_task_document(path)

    assert document == {"开始": {"next": ["结束"]}, "结束": {}}


def test_load_yaml_document(tmp_path):
    path = tmp_path / "tasks.yaml"
    path.write_text(
        "Start:\n"
        "  action: ClickSelf\n"
        "  roi: [0, 0, 100, 100]\n"
        "  next:\n"
        "    - Stop\n"
        "Stop:\n"
        "  algorithm: JustReturn\n",
        encoding="utf-8",
    )

    document = load_task_document(str(path))

    assert document["Start"]["roi"] == [0, 0, 100, 100]
    assert document["Stop"] == {"algorithm": "JustReturn"}


def test_missing_file_raises(tmp_path):
    with pytest.raises(TaskLoadError):
        load_task_document(tmp_path / "missing.json")


def test_invalid_json_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{\"A\": ", encoding="utf-8")

    with pytest.raises(TaskLoadError):
        load_task_document(path)


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "broken.yml"
    path.write_text("A: [1, 2\n", encoding="utf-8")

    with pytest.raises(TaskLoadError):
        load_task_document(path)


def test_non_mapping_top_level_raises(tmp_path):
    path = _write_json(tmp_path / "list.json", ["A", "B"])

    with pytest.raises(TaskLoadError):
        load_task_document(path)


def test_registry_loads_files_in_overlay_order(tmp_path):
    base = _write_json(tmp_path / "base.json", {"Start": {"next": ["Stop"]}, "Stop": {"algorithm": "JustReturn"}})
    overlay = _write_json(tmp_path / "overlay.json", {"Start": {"next": ["Stop"], "preDelay": 500}})

    registry = TaskRegistry(strict=True)
    registry.load_files([base, overlay])

    assert registry.get("Start").pre_delay == 500
    assert registry.get("Stop").payload is None


def test_init_task_registry_loads_into_global_registry(tmp_path):
    from taskdata.modules.tasks.registry import init_task_registry, task_registry

    path = _write_json(tmp_path / "tasks.json", {"InitRegistryProbe": {"algorithm": "JustReturn"}})

    registry = init_task_registry([path])

    assert registry is task_registry
    assert "InitRegistryProbe" in task_registry


def test_non_utf8_file_raises(tmp_path):
    path = tmp_path / "binary.json"
    path.write_bytes(b"\xff{}")

    with pytest.raises(TaskLoadError):
        load_task_document(path)


def test_directory_path_raises(tmp_path):
    with pytest.raises(TaskLoadError):
        load_task_document(tmp_path)
