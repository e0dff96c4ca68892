from taskdata.core.config import Settings
from taskdata.core.constants import (
    ActionType,
    AlgorithmType,
    RelationKind,
    parse_action,
    parse_algorithm,
    parse_relation,
)


def test_defaults():
    cfg = Settings(_env_file=None)

    assert cfg.max_tasks_size == 65535
    assert (cfg.window_width, cfg.window_height) == (1280, 720)
    assert cfg.templ_threshold_default == 0.8


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TASK_STRICT_MODE", "true")
    monkeypatch.setenv("MAX_TASKS_SIZE", "10")
    monkeypatch.setenv("TASK_FILES", "resource/tasks.json, resource/global/tasks.json ,")

    cfg = Settings(_env_file=None)

    assert cfg.task_strict_mode is True
    assert cfg.max_tasks_size == 10
    assert cfg.task_file_list == ["resource/tasks.json", "resource/global/tasks.json"]


def test_enum_parsing_is_case_insensitive():
    assert parse_algorithm("ocrdetect") == AlgorithmType.OCR_DETECT
    assert parse_algorithm("JUSTRETURN") == AlgorithmType.JUST_RETURN
    assert parse_algorithm("") is None
    assert parse_action("clickrect") == ActionType.CLICK_RECT
    assert parse_action("SlowlySwipeToTheLeft") == ActionType.SLOWLY_SWIPE_TO_THE_LEFT
    assert parse_action("") == ActionType.DO_NOTHING
    assert parse_action("jump") is None


def test_relation_parsing_accepts_both_spellings():
    assert parse_relation("next") == RelationKind.NEXT
    assert parse_relation("exceededNext") == RelationKind.EXCEEDED_NEXT
    assert parse_relation("on_error_next") == RelationKind.ON_ERROR_NEXT
    assert parse_relation("reduce_other_times") == RelationKind.REDUCE_OTHER_TIMES
    assert parse_relation("Next") is None
