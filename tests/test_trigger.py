"""Test cases for PipelineSinkTrigger decision flow."""

import logging
import threading
from unittest.mock import Mock

import pytest

from sinktrigger.core.enums import BuildResult, TriggerOutcome
from sinktrigger.core.exceptions import FingerprintStoreError
from sinktrigger.core.fingerprint import compute
from sinktrigger.core.models import TriggerConfig
from sinktrigger.core.trigger import PipelineSinkTrigger
from sinktrigger.repository.base import JobRepository
from sinktrigger.store.base import FingerprintStore


class TestEndToEnd:
    """Root -> Lib -> Sink polled across several ticks"""

    def test_prime_then_unchanged_then_changed(self, trigger, repository, fingerprint_store):
        # First tick ever: record baseline only
        decision = trigger.run()
        assert decision.outcome is TriggerOutcome.NO_BASELINE
        assert fingerprint_store.read("Nightly") == decision.fingerprint
        assert repository.scheduled_builds == []

        # Nothing changed upstream
        decision = trigger.run()
        assert decision.outcome is TriggerOutcome.UNCHANGED
        assert repository.scheduled_builds == []

        # Lib produced a new successful build
        repository.set_last_build("Lib", "2", BuildResult.SUCCESS)
        decision = trigger.run()
        assert decision.outcome is TriggerOutcome.TRIGGERED
        assert decision.accepted
        assert decision.build_scheduled
        assert fingerprint_store.read("Nightly") == decision.fingerprint
        assert [name for name, _ in repository.scheduled_builds] == ["Mock-Sink"]

        cause = repository.scheduled_builds[0][1]
        assert cause.owner == "Nightly"
        assert cause.root_project_name == "Mock-Root"
        assert "pipeline sink trigger" in cause.short_description

        # The queued sink is part of the pipeline, which is now active
        decision = trigger.run()
        assert decision.outcome is TriggerOutcome.PIPELINE_ACTIVE
        assert len(repository.scheduled_builds) == 1

    def test_fingerprint_covers_every_pipeline_job(self, trigger):
        decision = trigger.run()
        assert decision.fingerprint == compute(["Mock-Root(1)", "Lib(1)", "Mock-Sink()"])

    def test_quieting_down_skips_tick(self, trigger, repository, fingerprint_store):
        repository.quieting_down = True
        decision = trigger.run()
        assert decision.outcome is TriggerOutcome.QUIETING_DOWN
        assert fingerprint_store.read("Nightly") is None

    def test_evaluate_ignores_quiet_down(self, trigger, repository):
        repository.quieting_down = True
        assert trigger.evaluate().outcome is TriggerOutcome.NO_BASELINE

    def test_tick_is_framed_by_marker_lines(self, trigger, caplog):
        with caplog.at_level(logging.INFO, logger="sinktrigger.core.trigger"):
            trigger.run()
        assert caplog.text.count("=" * 100) == 2


class TestRejections:

    def test_root_missing(self, trigger, repository):
        repository.remove_job("Mock-Root")
        assert trigger.run().outcome is TriggerOutcome.ROOT_MISSING

    def test_root_disabled(self, trigger, repository):
        repository.set_disabled("Mock-Root")
        assert trigger.run().outcome is TriggerOutcome.ROOT_DISABLED

    def test_sink_missing(self, trigger, repository):
        repository.remove_job("Mock-Sink")
        assert trigger.run().outcome is TriggerOutcome.SINK_MISSING

    def test_sink_disabled(self, trigger, repository):
        repository.set_disabled("Mock-Sink")
        assert trigger.run().outcome is TriggerOutcome.SINK_DISABLED

    def test_root_checked_before_sink(self, trigger, repository):
        repository.remove_job("Mock-Root")
        repository.remove_job("Mock-Sink")
        assert trigger.run().outcome is TriggerOutcome.ROOT_MISSING

    def test_unknown_exclusion_fails_closed(self, trigger, fingerprint_store):
        trigger.config.excluded_project_names = "Lib, Ghost"
        decision = trigger.run()
        assert decision.outcome is TriggerOutcome.EXCLUSION_MISSING
        assert "Ghost" in decision.message
        assert fingerprint_store.read("Nightly") is None

    def test_sink_building(self, trigger, repository, fingerprint_store):
        repository.set_building("Mock-Sink")
        assert trigger.run().outcome is TriggerOutcome.SINK_BUILDING
        assert fingerprint_store.read("Nightly") is None

    def test_cycle(self, trigger, repository, fingerprint_store):
        repository.set_downstream("Mock-Sink", ["Mock-Root"])
        decision = trigger.run()
        assert decision.outcome is TriggerOutcome.CYCLE_DETECTED
        assert "Mock-Root --> Lib --> Mock-Sink --> Mock-Root" in decision.message
        assert fingerprint_store.read("Nightly") is None

    def test_building_job_blocks_trigger_regardless_of_fingerprint(self, trigger, repository, fingerprint_store):
        fingerprint_store.write("Nightly", "stale")
        repository.set_building("Lib")
        decision = trigger.run()
        assert decision.outcome is TriggerOutcome.PIPELINE_ACTIVE
        assert repository.scheduled_builds == []
        assert fingerprint_store.read("Nightly") == "stale"

    def test_unstable_pipeline(self, trigger, repository, fingerprint_store):
        fingerprint_store.write("Nightly", "stale")
        repository.set_last_build("Lib", "2", BuildResult.FAILURE)
        decision = trigger.run()
        assert decision.outcome is TriggerOutcome.PIPELINE_UNSTABLE
        assert "Lib" in decision.message
        assert repository.scheduled_builds == []

    def test_ignored_unstable_pipeline_reaches_fingerprint(self, trigger, repository, fingerprint_store):
        trigger.config.ignore_non_successful_upstream_dependency_builds = True
        fingerprint_store.write("Nightly", "stale")
        repository.set_last_build("Lib", "2", BuildResult.FAILURE)
        decision = trigger.run()
        assert decision.outcome is TriggerOutcome.TRIGGERED
        assert decision.override_note == "Ignoring non-successful upstream dependency builds: Lib"

    def test_excluded_failing_job_does_not_block(self, trigger, repository, fingerprint_store):
        repository.add_job("Flaky")
        repository.set_downstream("Mock-Root", ["Lib", "Flaky"])
        repository.set_last_build("Flaky", "9", BuildResult.FAILURE)
        trigger.config.excluded_project_names = "Flaky"
        decision = trigger.run()
        assert decision.outcome is TriggerOutcome.NO_BASELINE
        assert decision.fingerprint == compute(["Mock-Root(1)", "Lib(1)", "Mock-Sink()"])


class TestSchedulingAndFaults:

    def test_sink_already_queued_outside_pipeline(self, repository, fingerprint_store):
        repository.add_job("Standalone-Sink", queued=True)
        config = TriggerConfig("* * * * *", "Mock-Root", "Standalone-Sink")
        trigger = PipelineSinkTrigger("Nightly", config, repository, fingerprint_store)
        fingerprint_store.write("Nightly", "stale")

        decision = trigger.run()
        assert decision.outcome is TriggerOutcome.TRIGGERED
        assert decision.build_scheduled is False
        assert "already in the queue" in decision.message

    def test_repository_fault_is_contained(self, trigger_config, fingerprint_store, caplog):
        repository = Mock(spec=JobRepository)
        repository.is_quieting_down.return_value = False
        repository.find_by_name.side_effect = RuntimeError("repository unavailable")
        trigger = PipelineSinkTrigger("Nightly", trigger_config, repository, fingerprint_store)

        with caplog.at_level(logging.ERROR, logger="sinktrigger.core.trigger"):
            decision = trigger.run()

        assert decision.outcome is TriggerOutcome.ERROR
        assert "repository unavailable" in decision.message
        assert "Encountered an error during trigger execution" in caplog.text
        repository.schedule_build.assert_not_called()

    def test_quiet_down_query_fault_is_contained(self, trigger_config, fingerprint_store):
        repository = Mock(spec=JobRepository)
        repository.is_quieting_down.side_effect = RuntimeError("host unreachable")
        trigger = PipelineSinkTrigger("Nightly", trigger_config, repository, fingerprint_store)

        decision = trigger.run()

        assert decision.outcome is TriggerOutcome.ERROR
        assert "host unreachable" in decision.message
        repository.find_by_name.assert_not_called()

    def test_evaluate_propagates_faults(self, trigger_config, fingerprint_store):
        repository = Mock(spec=JobRepository)
        repository.find_by_name.side_effect = RuntimeError("repository unavailable")
        trigger = PipelineSinkTrigger("Nightly", trigger_config, repository, fingerprint_store)
        with pytest.raises(RuntimeError):
            trigger.evaluate()

    def test_persistence_fault_is_contained(self, trigger_config, repository):
        store = Mock(spec=FingerprintStore)
        store.read.return_value = "stale"
        store.write.side_effect = FingerprintStoreError("Nightly", "disk full")
        trigger = PipelineSinkTrigger("Nightly", trigger_config, repository, store)

        decision = trigger.run()
        assert decision.outcome is TriggerOutcome.ERROR
        assert repository.scheduled_builds == []


class TestLocking:

    def test_rename_waits_for_running_tick(self, trigger):
        renamed = threading.Event()

        def rename():
            trigger.on_job_renamed("Mock-Sink", "Mock-Sink-2")
            renamed.set()

        with trigger.lock:
            worker = threading.Thread(target=rename)
            worker.start()
            assert not renamed.wait(timeout=0.2)
            assert trigger.config.sink_project_name == "Mock-Sink"

        worker.join(timeout=5)
        assert renamed.is_set()
        assert trigger.config.sink_project_name == "Mock-Sink-2"
