import logging
from threading import RLock
from typing import Optional

from .cycle_detector import has_cycle, find_cycle, describe_cycle
from .enums import ChangeOutcome, TriggerOutcome
from .evaluator import PipelineEvaluator
from .fingerprint import compute, has_changed
from .graph_builder import PipelineGraphBuilder
from .identifiers import rename_in_config, delete_from_config
from .models import Job, TriggerConfig, TriggerDecision, PipelineSinkTriggerCause
from ..repository.base import JobRepository
from ..store.base import FingerprintStore

MARKER = "=" * 100


class PipelineSinkTrigger:
    """
    Periodically schedules a build of a sink job if and only if the build
    pipeline graph rooted at the configured root job is:

    - Inactive: no job in the graph is building or waiting in the queue.
    - Stable: the last build of every job in the graph (if any) is no worse
      than UNSTABLE, unless ignore_non_successful_upstream_dependency_builds
      is set.
    - Stale: the fingerprint of the graph's last builds differs from the
      one recorded when the sink was last triggered.

    The first evaluation only records the fingerprint, so creating a
    trigger never fires a build by itself.
    """

    def __init__(
        self,
        owner: str,
        config: TriggerConfig,
        repository: JobRepository,
        fingerprint_store: FingerprintStore
    ):
        self.owner = owner
        self.config = config
        self.repository = repository
        self.fingerprint_store = fingerprint_store
        # Serializes ticks against rename/delete maintenance for this trigger
        self.lock = RLock()
        self.logger = logging.getLogger(__name__)

    def run(self) -> TriggerDecision:
        """Scheduled entry point. Never raises."""
        try:
            quieting_down = self.repository.is_quieting_down()
        except Exception as e:
            return self._fail(e)
        if quieting_down:
            return TriggerDecision(TriggerOutcome.QUIETING_DOWN, "Host is quieting down")

        with self.lock:
            self.logger.info(MARKER)
            self.logger.info(
                f"[{self.owner}] Deciding if a build of '{self.config.sink_project_name}' should be triggered"
            )
            try:
                decision = self.evaluate()
            except Exception as e:
                decision = self._fail(e)
            finally:
                self.logger.info(MARKER)
            return decision

    def _fail(self, error: Exception) -> TriggerDecision:
        self.logger.error(
            f"[{self.owner}] Encountered an error during trigger execution: {error}", exc_info=True
        )
        return TriggerDecision(TriggerOutcome.ERROR, f"Trigger execution failed: {error}")

    def evaluate(self) -> TriggerDecision:
        """
        Run every decision stage in order, stopping at the first reject.

        Unlike run(), this ignores the host quiet-down state and lets
        collaborator faults propagate.
        """
        with self.lock:
            config = self.config
            sink_name = config.sink_project_name

            root = self.repository.find_by_name(config.root_project_name)
            if root is None:
                return self._reject(TriggerOutcome.ROOT_MISSING,
                                    f"Root project '{config.root_project_name}' does not exist")
            if root.disabled:
                return self._reject(TriggerOutcome.ROOT_DISABLED,
                                    f"Root project '{root.name}' is disabled")

            sink = self.repository.find_by_name(sink_name)
            if sink is None:
                return self._reject(TriggerOutcome.SINK_MISSING,
                                    f"Sink project '{sink_name}' does not exist")
            if sink.disabled:
                return self._reject(TriggerOutcome.SINK_DISABLED,
                                    f"Sink project '{sink.name}' is disabled")

            exclusions = []
            for name in config.exclusion_names():
                excluded = self.repository.find_by_name(name)
                if excluded is None:
                    return self._reject(TriggerOutcome.EXCLUSION_MISSING,
                                        f"Excluded project '{name}' does not exist")
                exclusions.append(excluded.name)

            if self.repository.is_building(sink):
                return self._reject(TriggerOutcome.SINK_BUILDING,
                                    f"Skipping trigger since sink project '{sink_name}' is building")

            graph = PipelineGraphBuilder(self.repository, verbose=config.verbose).build(root, exclusions)
            if has_cycle(graph):
                cycle = describe_cycle(find_cycle(graph))
                return self._reject(TriggerOutcome.CYCLE_DETECTED,
                                    f"Pipeline graph of sink '{sink_name}' contains cycles"
                                    + (f": {cycle}" if cycle else ""))

            result = PipelineEvaluator(self.repository).evaluate(
                graph, root, config.ignore_non_successful_upstream_dependency_builds
            )
            if result.active:
                return self._reject(TriggerOutcome.PIPELINE_ACTIVE,
                                    f"Pipeline of sink '{sink_name}' is active ('{result.active_node}' is building or queued)")

            override_note = None
            if result.unstable:
                unhealthy = ", ".join(result.unhealthy_nodes)
                if not result.ignore_unstable:
                    return self._reject(TriggerOutcome.PIPELINE_UNSTABLE,
                                        f"Detected non-successful upstream dependency builds of sink '{sink_name}': {unhealthy}")
                override_note = f"Ignoring non-successful upstream dependency builds: {unhealthy}"
                self.logger.info(f"[{self.owner}] {override_note}")

            return self._compare_and_trigger(sink, compute(result.fingerprint_inputs), override_note)

    def _compare_and_trigger(self, sink: Job, fingerprint: str, override_note: Optional[str]) -> TriggerDecision:
        previous = self.fingerprint_store.read(self.owner)
        change = has_changed(fingerprint, previous)

        if change is ChangeOutcome.NO_BASELINE:
            self.fingerprint_store.write(self.owner, fingerprint)
            return self._reject(TriggerOutcome.NO_BASELINE,
                                f"No previous fingerprint to compare against for sink '{sink.name}'; recorded baseline",
                                fingerprint=fingerprint, override_note=override_note)

        if change is ChangeOutcome.UNCHANGED:
            return self._reject(TriggerOutcome.UNCHANGED,
                                f"No upstream dependency build changes for sink '{sink.name}'",
                                fingerprint=fingerprint, override_note=override_note)

        self.fingerprint_store.write(self.owner, fingerprint)
        self.logger.info(f"[{self.owner}] Detected upstream dependency build changes for sink '{sink.name}'")
        cause = PipelineSinkTriggerCause(
            owner=self.owner,
            root_project_name=self.config.root_project_name,
            fingerprint=fingerprint
        )
        scheduled = self.repository.schedule_build(sink, cause)
        message = f"Triggering a new build of '{sink.name}'" if scheduled \
            else f"'{sink.name}' is already in the queue"
        self.logger.info(f"[{self.owner}] {message}")
        return TriggerDecision(
            TriggerOutcome.TRIGGERED,
            message,
            fingerprint=fingerprint,
            override_note=override_note,
            build_scheduled=scheduled
        )

    def _reject(self, outcome: TriggerOutcome, message: str, **kwargs) -> TriggerDecision:
        self.logger.info(f"[{self.owner}] {message}")
        return TriggerDecision(outcome, message, **kwargs)

    def on_job_renamed(self, old_name: str, new_name: str) -> bool:
        """Returns True if the configuration changed and needs to be saved"""
        with self.lock:
            return rename_in_config(self.config, old_name, new_name)

    def on_job_deleted(self, name: str) -> bool:
        """Returns True if the configuration changed and needs to be saved"""
        with self.lock:
            return delete_from_config(self.config, name)
