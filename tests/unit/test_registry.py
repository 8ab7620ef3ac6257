"""Unit tests for the ordered task registry."""

import pytest

from src.core.models import Task, TaskStatus
from src.services.registry import TaskRegistry


def _ids(registry: TaskRegistry) -> list[str]:
    return [task.id for task in registry.list()]


@pytest.fixture
def registry():
    """Registry seeded with t1 (focused), t2, t3."""
    return TaskRegistry(
        [
            Task(id="t1", status=TaskStatus.processing, progress=50),
            Task(id="t2", status=TaskStatus.processing, progress=20),
            Task(id="t3", status=TaskStatus.queued),
        ]
    )


class TestOrdering:
    def test_insert_prepends_and_focuses(self, registry):
        registry.insert(Task(id="t4"))

        assert _ids(registry) == ["t4", "t1", "t2", "t3"]
        assert registry.focused.id == "t4"

    def test_insert_duplicate_id_raises(self, registry):
        with pytest.raises(ValueError, match="already registered"):
            registry.insert(Task(id="t2"))
        assert len(registry) == 3

    def test_focus_moves_task_to_front_keeping_others(self, registry):
        task = registry.focus(2)

        assert task.id == "t3"
        assert _ids(registry) == ["t3", "t1", "t2"]

    def test_focus_front_is_noop(self, registry):
        registry.focus(0)

        assert _ids(registry) == ["t1", "t2", "t3"]

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_focus_out_of_range(self, registry, index):
        with pytest.raises(IndexError):
            registry.focus(index)
        assert _ids(registry) == ["t1", "t2", "t3"]

    def test_repeated_focus_never_duplicates_or_drops(self, registry):
        for index in [1, 2, 1, 0, 2, 2, 1]:
            registry.focus(index)

        assert sorted(_ids(registry)) == ["t1", "t2", "t3"]
        assert len(registry) == 3

    def test_empty_registry_has_no_focus(self):
        assert TaskRegistry().focused is None


class TestMutation:
    def test_update_merges_into_focused_task(self, registry):
        updated = registry.update("t1", progress=60, status=TaskStatus.processing)

        assert updated.progress == 60
        assert registry.get("t1").progress == 60

    def test_update_ignores_unfocused_id(self, registry):
        """Responses for a task that lost focus must not be applied."""
        assert registry.update("t2", progress=99) is None
        assert registry.get("t2").progress == 20

    def test_update_validates_fields(self, registry):
        with pytest.raises(ValueError):
            registry.update("t1", progress=150)

    def test_replace_id_swaps_provisional_entry(self, registry):
        registry.insert(Task(id="local-abc", provisional=True, status=TaskStatus.uploading))

        task = registry.replace_id(
            "local-abc", "t9", status=TaskStatus.processing, provisional=False
        )

        assert task.id == "t9"
        assert not task.provisional
        assert _ids(registry) == ["t9", "t1", "t2", "t3"]
        assert "local-abc" not in registry

    def test_replace_id_rejects_taken_id(self, registry):
        registry.insert(Task(id="local-abc", provisional=True))

        with pytest.raises(ValueError):
            registry.replace_id("local-abc", "t2")

    def test_replace_unknown_id(self, registry):
        with pytest.raises(KeyError):
            registry.replace_id("nope", "t9")

    def test_remove_returns_task(self, registry):
        removed = registry.remove("t2")

        assert removed.id == "t2"
        assert _ids(registry) == ["t1", "t3"]
        assert registry.remove("t2") is None

    def test_remove_focused_promotes_next(self, registry):
        registry.remove("t1")

        assert registry.focused.id == "t2"

    def test_list_is_a_snapshot(self, registry):
        snapshot = registry.list()
        snapshot[0].progress = 0

        assert isinstance(snapshot, tuple)
        assert registry.get("t1").progress == 50
