"""Tests for the task item kind: deferral, status actions, validation."""

from datetime import date, timedelta

import pytest

from item_store import ProgrammingError, ValidationError
from item_store.actions import Action
from records import Task, TaskStatus


@pytest.fixture
def task(world):
    item = world.registry.make_item("task", ident="t1", world=world)
    item.set_data({"name": "Write report", "context": "work"}, world)
    return item


class TestSetData:
    def test_defaults(self):
        data = Task()
        assert data.status == TaskStatus.TO_DO
        assert data.deferred_until is None

    def test_parses_deferral(self, world, task):
        task.set_data({"name": "n", "deferred_until": "2030-01-02"}, world)
        assert task.data.deferred_until == date(2030, 1, 2)

    def test_blank_deferral_means_none(self, world, task):
        task.set_data({"name": "n", "deferred_until": "  "}, world)
        assert task.data.deferred_until is None

    def test_absent_optional_fields_reset(self, world, task):
        task.set_data({"name": "n", "deferred_until": "2030-01-02"}, world)
        task.set_data({"name": "n"}, world)
        assert task.data.context == ""
        assert task.data.deferred_until is None

    def test_bad_deferral_is_atomic(self, world, task):
        before = task.data.clone_payload()
        with pytest.raises(ValidationError) as exc:
            task.set_data({"name": "renamed", "deferred_until": "soon"}, world)
        assert exc.value.errors[0].tag == "deferred-error"
        assert task.data == before

    def test_missing_name(self, world, task):
        with pytest.raises(ValidationError, match="no name"):
            task.set_data({"context": "home"}, world)
        assert task.data.context == "work"


class TestTryUpdate:
    def test_collects_every_failure(self, world, task):
        ar = task.try_update({"name": " ", "deferred_until": "later"}, world)
        assert ar.success is False
        assert sorted(e.tag for e in ar.errors) == ["deferred-error", "name-error"]

    def test_passes(self, world, task):
        assert task.try_update({"name": "ok", "deferred_until": "2030-01-01"}, world).success


class TestQueries:
    def test_description_includes_context(self, task):
        assert task.description() == "Write report @work"

    def test_description_without_context(self, world, task):
        task.set_data({"name": "Plain"}, world)
        assert task.description() == "Plain"

    def test_future_deferral_is_not_ready(self, task):
        task.data.deferred_until = date.today() + timedelta(days=30)
        assert task.is_open is True
        assert task.is_ready is False

    def test_past_deferral_is_ready(self, task):
        task.data.deferred_until = date.today() - timedelta(days=1)
        assert task.is_ready is True

    def test_done_is_neither_open_nor_ready(self, task):
        task.data.status = TaskStatus.DONE
        assert task.is_open is False
        assert task.is_ready is False


class TestActions:
    def test_done_and_reopen(self, world, task):
        resp = task.do_action(Action.DONE, world)
        assert task.data.status == TaskStatus.DONE
        assert "Done" in resp["content"]
        task.do_action(Action.REOPEN, world)
        assert task.data.status == TaskStatus.TO_DO

    def test_start(self, world, task):
        task.do_action(Action.START, world)
        assert task.data.status == TaskStatus.IN_PROGRESS
        assert task.is_open

    def test_defer_reads_session_input(self, world, task):
        world.set_input({"deferred_until": "2031-05-06"})
        task.do_action(Action.DEFER, world)
        assert task.data.deferred_until == date(2031, 5, 6)

    def test_defer_without_date(self, world, task):
        world.set_input({})
        with pytest.raises(ValidationError):
            task.do_action(Action.DEFER, world)

    def test_unsupported_action(self, world, task):
        with pytest.raises(ProgrammingError):
            task.do_action(Action.DELETE, world)


class TestRendering:
    def test_for_edit(self, world, task):
        resp = task.for_edit(True, world)
        assert 'name="context" value="work"' in resp["content"]
        assert set(resp.cleared_errors) == {"name-error", "deferred-error"}

    def test_for_show(self, world, task):
        content = task.for_show(world)["content"]
        assert "To Do @work" in content
        assert 'data-open="true"' in content
