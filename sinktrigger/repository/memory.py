import logging
import yaml
from dataclasses import replace
from threading import Lock
from typing import Any, Dict, List, Optional, Set, Tuple

from .base import JobRepository
from ..core.enums import BuildResult
from ..core.exceptions import JobNotFoundError, SinkTriggerError
from ..core.models import Job, BuildRecord, PipelineSinkTriggerCause


class InMemoryJobRepository(JobRepository):
    """
    Job repository backed by an in-process inventory.

    Used for offline evaluation from a YAML inventory snapshot and in tests.
    Scheduled builds mark the job as queued and are recorded in
    `scheduled_builds`.
    """

    def __init__(self, quieting_down: bool = False):
        self._jobs: Dict[str, Job] = {}
        self._downstream: Dict[str, List[str]] = {}
        self._building: Set[str] = set()
        self._queued: Set[str] = set()
        self._last_builds: Dict[str, BuildRecord] = {}
        self.quieting_down = quieting_down
        self.scheduled_builds: List[Tuple[str, PipelineSinkTriggerCause]] = []
        self.lock = Lock()
        self.logger = logging.getLogger(__name__)

    def add_job(
        self,
        name: str,
        downstream: Optional[List[str]] = None,
        full_name: Optional[str] = None,
        disabled: bool = False,
        building: bool = False,
        queued: bool = False,
        last_build: Optional[BuildRecord] = None
    ) -> Job:
        """Register a job. Downstream names may refer to jobs added later."""
        job = Job(name=name, full_name=full_name or name, disabled=disabled)
        with self.lock:
            self._jobs[name] = job
            self._downstream[name] = list(downstream or [])
            if building:
                self._building.add(name)
            if queued:
                self._queued.add(name)
            if last_build is not None:
                self._last_builds[name] = last_build
        return job

    def remove_job(self, name: str):
        with self.lock:
            self._jobs.pop(name, None)
            self._downstream.pop(name, None)
            self._building.discard(name)
            self._queued.discard(name)
            self._last_builds.pop(name, None)
            for children in self._downstream.values():
                while name in children:
                    children.remove(name)

    def rename_job(self, old_name: str, new_name: str):
        with self.lock:
            job = self._require(old_name)
            self._jobs[new_name] = replace(job, name=new_name, full_name=new_name)
            del self._jobs[old_name]
            self._downstream[new_name] = self._downstream.pop(old_name)
            for state in (self._building, self._queued):
                if old_name in state:
                    state.discard(old_name)
                    state.add(new_name)
            if old_name in self._last_builds:
                self._last_builds[new_name] = self._last_builds.pop(old_name)
            for children in self._downstream.values():
                children[:] = [new_name if child == old_name else child for child in children]

    def set_downstream(self, name: str, downstream: List[str]):
        with self.lock:
            self._require(name)
            self._downstream[name] = list(downstream)

    def set_disabled(self, name: str, disabled: bool = True):
        with self.lock:
            self._jobs[name] = replace(self._require(name), disabled=disabled)

    def set_building(self, name: str, building: bool = True):
        with self.lock:
            self._require(name)
            if building:
                self._building.add(name)
            else:
                self._building.discard(name)

    def set_queued(self, name: str, queued: bool = True):
        with self.lock:
            self._require(name)
            if queued:
                self._queued.add(name)
            else:
                self._queued.discard(name)

    def set_last_build(self, name: str, build_id: str, result: BuildResult = BuildResult.SUCCESS):
        with self.lock:
            self._require(name)
            self._last_builds[name] = BuildRecord(id=build_id, result=result)

    def _require(self, name: str) -> Job:
        job = self._jobs.get(name)
        if job is None:
            raise JobNotFoundError(f"Job '{name}' is not defined")
        return job

    def find_by_name(self, name: str) -> Optional[Job]:
        return self._jobs.get(name)

    def downstream_of(self, job: Job) -> List[Job]:
        with self.lock:
            names = list(self._downstream.get(job.name, []))
            missing = [name for name in names if name not in self._jobs]
            if missing:
                raise JobNotFoundError(
                    f"Job '{job.name}' lists undefined downstream jobs: {', '.join(missing)}"
                )
            return [self._jobs[name] for name in names]

    def is_building(self, job: Job) -> bool:
        return job.name in self._building

    def is_queued(self, job: Job) -> bool:
        return job.name in self._queued

    def last_build(self, job: Job) -> Optional[BuildRecord]:
        return self._last_builds.get(job.name)

    def schedule_build(self, job: Job, cause: PipelineSinkTriggerCause) -> bool:
        with self.lock:
            if job.name in self._queued:
                return False
            self._queued.add(job.name)
            self.scheduled_builds.append((job.name, cause))
        self.logger.info(f"Scheduled build of '{job.name}': {cause.short_description}")
        return True

    def is_quieting_down(self) -> bool:
        return self.quieting_down

    def job_names(self) -> List[str]:
        return list(self._jobs.keys())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InMemoryJobRepository':
        """
        Build a repository from an inventory dictionary.

        Example:
            {
                'quieting_down': False,
                'jobs': [
                    {'name': 'root', 'downstream': ['lib']},
                    {'name': 'lib', 'last_build': {'id': '42', 'result': 'SUCCESS'}},
                ]
            }
        """
        repository = cls(quieting_down=bool(data.get('quieting_down', False)))
        for job_dict in data.get('jobs') or []:
            if 'name' not in job_dict:
                raise SinkTriggerError(f"Job entry without a name: {job_dict}")
            last_build = job_dict.get('last_build')
            repository.add_job(
                name=job_dict['name'],
                downstream=job_dict.get('downstream') or [],
                full_name=job_dict.get('full_name'),
                disabled=bool(job_dict.get('disabled', False)),
                building=bool(job_dict.get('building', False)),
                queued=bool(job_dict.get('queued', False)),
                last_build=BuildRecord(id=str(last_build['id']), result=last_build.get('result', 'SUCCESS'))
                if last_build else None
            )

        for name, children in repository._downstream.items():
            missing = [child for child in children if child not in repository._jobs]
            if missing:
                raise JobNotFoundError(
                    f"Job '{name}' lists undefined downstream jobs: {', '.join(missing)}"
                )
        return repository

    @classmethod
    def from_yaml(cls, file_path: str) -> 'InMemoryJobRepository':
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f)
        if data is None:
            raise SinkTriggerError(f"Empty or invalid inventory file: {file_path}")
        return cls.from_dict(data)
