from enum import Enum


class BuildResult(str, Enum):
    """Result of a finished build, declared from best to worst"""
    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    ABORTED = "ABORTED"

    @property
    def ordinal(self) -> int:
        return list(BuildResult).index(self)

    def is_worse_than(self, other: 'BuildResult') -> bool:
        return self.ordinal > other.ordinal


class ChangeOutcome(str, Enum):
    NO_BASELINE = "no_baseline"
    UNCHANGED = "unchanged"
    CHANGED = "changed"


class TriggerOutcome(str, Enum):
    """Terminal state of a single trigger tick"""
    QUIETING_DOWN = "quieting_down"
    ROOT_MISSING = "root_missing"
    ROOT_DISABLED = "root_disabled"
    SINK_MISSING = "sink_missing"
    SINK_DISABLED = "sink_disabled"
    EXCLUSION_MISSING = "exclusion_missing"
    SINK_BUILDING = "sink_building"
    CYCLE_DETECTED = "cycle_detected"
    PIPELINE_ACTIVE = "pipeline_active"
    PIPELINE_UNSTABLE = "pipeline_unstable"
    NO_BASELINE = "no_baseline"
    UNCHANGED = "unchanged"
    TRIGGERED = "triggered"
    ERROR = "error"

    @property
    def accepted(self) -> bool:
        return self is TriggerOutcome.TRIGGERED
