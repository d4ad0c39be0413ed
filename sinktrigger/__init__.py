"""
Pipeline Sink Trigger - schedules a sink build once its upstream pipeline is
inactive, stable and stale

Main modules:
- core: Graph building, cycle detection, evaluation, fingerprints and the trigger itself
- repository: Job repository interface and the in-memory inventory implementation
- store: Fingerprint persistence
- config: Trigger configuration loading, validation and storage
- scheduler: Cron-driven trigger scheduling and rename/delete propagation
"""

from .core.enums import BuildResult, ChangeOutcome, TriggerOutcome
from .core.models import Job, BuildRecord, TriggerConfig, TriggerDecision, PipelineSinkTriggerCause
from .core.trigger import PipelineSinkTrigger
from .repository import JobRepository, InMemoryJobRepository
from .store import FingerprintStore, FileFingerprintStore
from .config import TriggerConfigLoader, FileTriggerStore
from .scheduler import TriggerScheduler, JobEventListener

__version__ = "1.0.0"
__all__ = [
    'BuildResult',
    'ChangeOutcome',
    'TriggerOutcome',
    'Job',
    'BuildRecord',
    'TriggerConfig',
    'TriggerDecision',
    'PipelineSinkTriggerCause',
    'PipelineSinkTrigger',
    'JobRepository',
    'InMemoryJobRepository',
    'FingerprintStore',
    'FileFingerprintStore',
    'TriggerConfigLoader',
    'FileTriggerStore',
    'TriggerScheduler',
    'JobEventListener'
]
