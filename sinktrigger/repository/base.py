from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.models import Job, BuildRecord, PipelineSinkTriggerCause


class JobRepository(ABC):
    """
    Read-mostly view of the host job/queue system.

    The trigger never mutates jobs directly; the only write is
    schedule_build, which asks the host to enqueue a build.

    Thread-safe: ticks of different triggers may query one repository
    concurrently.
    """

    @abstractmethod
    def find_by_name(self, name: str) -> Optional[Job]:
        """Look up a job by its name. Returns None if it does not exist."""
        pass

    @abstractmethod
    def downstream_of(self, job: Job) -> List[Job]:
        """Direct downstream jobs of `job`, in the host's natural order"""
        pass

    @abstractmethod
    def is_building(self, job: Job) -> bool:
        pass

    @abstractmethod
    def is_queued(self, job: Job) -> bool:
        pass

    @abstractmethod
    def last_build(self, job: Job) -> Optional[BuildRecord]:
        pass

    @abstractmethod
    def schedule_build(self, job: Job, cause: PipelineSinkTriggerCause) -> bool:
        """
        Request a build of `job`.

        Returns:
            True if a build was newly scheduled, False if one was already queued
        """
        pass

    def is_quieting_down(self) -> bool:
        """Whether the host is preparing for shutdown and accepts no new builds"""
        return False
