import pytest

from taskdata.core.constants import RelationKind
from taskdata.modules.tasks.errors import (
    CycleError,
    DanglingReferenceError,
    RoiOutOfBoundsError,
    TaskValidationError,
    UnknownKeyError,
    UnknownRelationError,
)
from taskdata.modules.tasks.registry import TaskRegistry
from taskdata.modules.tasks.validator import find_cycles


def _strict_errors(document):
    registry = TaskRegistry(strict=True)
    with pytest.raises(TaskValidationError) as exc_info:
        registry.load(document)
    return exc_info.value.errors


def test_tagged_reference_cycle_fails_strict_load():
    errors = _strict_errors(
        {
            "A": {"algorithm": "JustReturn", "next": ["B#next"]},
            "B": {"algorithm": "JustReturn", "next": ["A#next"]},
        }
    )

    cycles = [e for e in errors if isinstance(e, CycleError)]
    assert len(cycles) == 1
    assert cycles[0].task in ("A#next", "B#next")


def test_cycle_is_ignored_in_production_mode():
    registry = TaskRegistry(strict=False)
    registry.load(
        {
            "A": {"algorithm": "JustReturn", "next": ["B#next"]},
            "B": {"algorithm": "JustReturn", "next": ["A#next"]},
        }
    )

    assert registry.get("A").next == ["B#next"]


def test_acyclic_tagged_references_pass():
    registry = TaskRegistry(strict=True)
    registry.load(
        {
            "A": {"algorithm": "JustReturn", "next": ["B#next"], "sub": ["B#sub"]},
            "B": {"algorithm": "JustReturn", "next": ["C"], "sub": ["C#next"]},
            "C": {"algorithm": "JustReturn", "next": ["A"]},
        }
    )

    assert len(registry) == 3


def test_cycle_across_relation_kinds_with_snake_case_tags():
    errors = _strict_errors(
        {
            "A": {"algorithm": "JustReturn", "exceededNext": ["B#on_error_next"]},
            "B": {"algorithm": "JustReturn", "onErrorNext": ["A#exceededNext"]},
        }
    )

    assert any(isinstance(e, CycleError) for e in errors)


def test_unknown_relation_tag_is_reported():
    errors = _strict_errors({"A": {"algorithm": "JustReturn", "next": ["A#later"]}})

    assert len(errors) == 1
    assert isinstance(errors[0], UnknownRelationError)
    assert errors[0].relation == "later"


def test_dangling_references_are_all_reported():
    errors = _strict_errors(
        {
            "A": {"algorithm": "JustReturn", "next": ["Nope", "Gone#next"], "sub": ["Missing"]},
        }
    )

    refs = sorted(e.reference for e in errors if isinstance(e, DanglingReferenceError))
    assert refs == ["Gone#next", "Missing", "Nope"]


def test_derivable_reference_counts_as_existing():
    registry = TaskRegistry(strict=True)
    registry.load(
        {
            "Stop": {"algorithm": "JustReturn"},
            "A": {"algorithm": "JustReturn", "next": ["Foo@Stop", "Foo@Stop#next"]},
        }
    )

    # 校验时派生的任务不写入注册表
    assert "Foo@Stop" not in registry


def test_unknown_key_is_reported():
    errors = _strict_errors({"Foo": {"fooBar": 1}})

    assert len(errors) == 1
    assert isinstance(errors[0], UnknownKeyError)
    assert errors[0].key == "fooBar"


def test_doc_sibling_suppresses_unknown_key():
    registry = TaskRegistry(strict=True)
    registry.load(
        {
            "Foo": {"fooBar": 1, "fooBar_Doc": "note"},
            "Bar": {"baz": 2, "baz_doc": "note", "Doc": "任务说明", "someDocs": []},
        }
    )

    assert "Foo" in registry and "Bar" in registry


def test_keys_are_checked_against_algorithm():
    errors = _strict_errors(
        {
            "Ocr": {"algorithm": "OcrDetect", "text": ["a"], "template": "x.png"},
            "Hash": {"algorithm": "Hash", "hash": ["ab"], "specialThreshold": 1, "fullMatch": True},
        }
    )

    keys = sorted((e.task, e.key) for e in errors if isinstance(e, UnknownKeyError))
    assert keys == [("Hash", "fullMatch"), ("Ocr", "template")]


def test_specific_rect_only_allowed_for_click_rect():
    registry = TaskRegistry(strict=True)
    registry.load({"Click": {"action": "ClickRect", "specificRect": [0, 0, 10, 10]}})
    assert registry.get("Click").specific_rect.width == 10

    errors = _strict_errors({"NoClick": {"action": "ClickSelf", "specificRect": [0, 0, 10, 10]}})
    assert [(e.task, e.key) for e in errors] == [("NoClick", "specificRect")]


def test_inherited_algorithm_decides_allowed_keys():
    errors = _strict_errors(
        {
            "Base": {"algorithm": "OcrDetect", "text": ["a"]},
            "Child": {"baseTask": "Base", "fullMatch": True, "templThreshold": 0.5},
        }
    )

    assert [(e.task, e.key) for e in errors] == [("Child", "templThreshold")]


def test_all_violations_are_collected():
    errors = _strict_errors(
        {
            "A": {"roi": [1000, 600, 400, 200]},
            "B": {"unknownOne": 1, "unknownTwo": 2, "next": ["Nope"]},
        }
    )

    kinds = sorted(type(e).__name__ for e in errors)
    assert kinds == [
        "DanglingReferenceError",
        "RoiOutOfBoundsError",
        "UnknownKeyError",
        "UnknownKeyError",
    ]
    assert any(isinstance(e, RoiOutOfBoundsError) and e.task == "A" for e in errors)


def test_successful_records_stay_registered_after_strict_failure():
    registry = TaskRegistry(strict=True)
    with pytest.raises(TaskValidationError):
        registry.load({"Good": {}, "Bad": {"algorithm": "Magic"}})

    assert "Good" in registry
    assert "Bad" not in registry


def test_find_cycles_reports_each_back_edge_target_once():
    a, b, c, d = (
        ("A", RelationKind.NEXT),
        ("B", RelationKind.NEXT),
        ("C", RelationKind.SUB),
        ("D", RelationKind.SUB),
    )
    graph = {a: [b], b: [a, c], c: [d], d: [c, a]}

    errors = find_cycles(graph)

    assert sorted(e.task for e in errors) == ["A#next", "C#sub"]


def test_find_cycles_on_dag():
    a, b, c = (("A", RelationKind.NEXT), ("B", RelationKind.NEXT), ("C", RelationKind.NEXT))

    assert find_cycles({a: [b, c], b: [c], c: []}) == []


def test_self_loop_is_a_cycle():
    a = ("A", RelationKind.NEXT)

    assert [e.task for e in find_cycles({a: [a]})] == ["A#next"]
