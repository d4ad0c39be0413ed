from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Any

from .enums import BuildResult, TriggerOutcome
from .identifiers import split_names


@dataclass(frozen=True)
class Job:
    """Reference to a job in the host repository. Identity is the job name."""
    name: str
    full_name: Optional[str] = field(default=None, compare=False)
    disabled: bool = field(default=False, compare=False)

    @property
    def display_name(self) -> str:
        return self.full_name or self.name


@dataclass(frozen=True)
class BuildRecord:
    """Last completed build of a job"""
    id: str
    result: BuildResult

    def __post_init__(self):
        if not isinstance(self.result, BuildResult):
            object.__setattr__(self, 'result', BuildResult(str(self.result).upper()))


@dataclass
class TriggerConfig:
    """Configuration of a single pipeline sink trigger.

    Only the three project name fields change after construction, and only
    through rename/delete maintenance.
    """
    spec: str
    root_project_name: str
    sink_project_name: str
    excluded_project_names: str = ""
    ignore_non_successful_upstream_dependency_builds: bool = False
    verbose: bool = False

    def exclusion_names(self) -> List[str]:
        return split_names(self.excluded_project_names)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class EvaluationResult:
    """Outcome of walking the pipeline graph"""
    active: bool = False
    active_node: Optional[str] = None
    unhealthy_nodes: List[str] = field(default_factory=list)
    fingerprint_inputs: List[str] = field(default_factory=list)
    ignore_unstable: bool = False

    @property
    def unstable(self) -> bool:
        return bool(self.unhealthy_nodes)

    @property
    def eligible(self) -> bool:
        """Inactive, and either healthy or with unhealthy jobs explicitly ignored"""
        return not self.active and (not self.unstable or self.ignore_unstable)


@dataclass
class TriggerDecision:
    """Terminal state of one trigger tick"""
    outcome: TriggerOutcome
    message: str
    fingerprint: Optional[str] = None
    override_note: Optional[str] = None
    build_scheduled: bool = False

    @property
    def accepted(self) -> bool:
        return self.outcome.accepted


@dataclass(frozen=True)
class PipelineSinkTriggerCause:
    """Cause attached to builds scheduled by the trigger"""
    owner: str
    root_project_name: str
    fingerprint: str

    @property
    def short_description(self) -> str:
        return (f"Started by pipeline sink trigger of '{self.owner}' "
                f"(upstream dependency builds of '{self.root_project_name}' changed)")
