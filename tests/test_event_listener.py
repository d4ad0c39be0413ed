"""Test cases for JobEventListener rename/delete fan-out."""

import logging
from unittest.mock import patch

import pytest

from sinktrigger.config.global_config_loader import SchedulerConfig
from sinktrigger.config.trigger_store import FileTriggerStore
from sinktrigger.core.models import TriggerConfig
from sinktrigger.scheduler.event_listener import JobEventListener
from sinktrigger.scheduler.trigger_scheduler import TriggerScheduler


@pytest.fixture
def trigger_store(tmp_path):
    store = FileTriggerStore(str(tmp_path / "triggers"))
    store.save("Alpha", TriggerConfig("* * * * *", "Root", "Sink-A", "Job-1, Job-2"))
    store.save("Beta", TriggerConfig("* * * * *", "Root", "Sink-B", "Job-2"))
    store.save("Gamma", TriggerConfig("* * * * *", "Other-Root", "Sink-C", ""))
    return store


class TestJobEventListener:

    def test_rename_reaches_every_affected_trigger(self, trigger_store):
        updated = JobEventListener(trigger_store).on_renamed("Root", "Root-2")
        assert updated == ["Alpha", "Beta"]
        assert trigger_store.load("Alpha").root_project_name == "Root-2"
        assert trigger_store.load("Beta").root_project_name == "Root-2"
        assert trigger_store.load("Gamma").root_project_name == "Other-Root"

    def test_delete_removes_exclusion(self, trigger_store):
        updated = JobEventListener(trigger_store).on_deleted("Job-2")
        assert updated == ["Alpha", "Beta"]
        assert trigger_store.load("Alpha").excluded_project_names == "Job-1"
        assert trigger_store.load("Beta").excluded_project_names == ""

    def test_unaffected_triggers_are_not_rewritten(self, trigger_store):
        with patch.object(trigger_store, 'save', wraps=trigger_store.save) as save:
            assert JobEventListener(trigger_store).on_deleted("Job-9") == []
        save.assert_not_called()

    def test_save_failure_does_not_stop_fan_out(self, trigger_store, caplog):
        original_save = trigger_store.save

        def failing_save(owner, config):
            if owner == "Alpha":
                raise OSError("read-only file system")
            original_save(owner, config)

        with patch.object(trigger_store, 'save', side_effect=failing_save):
            with caplog.at_level(logging.WARNING, logger="sinktrigger.scheduler.event_listener"):
                updated = JobEventListener(trigger_store).on_renamed("Root", "Root-2")

        assert updated == ["Beta"]
        assert "Failed to persist trigger setting of Alpha" in caplog.text
        assert trigger_store.load("Alpha").root_project_name == "Root"
        assert trigger_store.load("Beta").root_project_name == "Root-2"

    def test_live_triggers_are_updated_in_place(self, trigger_store, repository, fingerprint_store):
        scheduler = TriggerScheduler(SchedulerConfig(), repository, trigger_store, fingerprint_store)
        scheduler.load_triggers()
        live = scheduler.triggers["Alpha"]

        JobEventListener(trigger_store, scheduler).on_renamed("Job-1", "Job-1-1")

        assert live.config.excluded_project_names == "Job-1-1,Job-2"
        assert trigger_store.load("Alpha").excluded_project_names == "Job-1-1,Job-2"
