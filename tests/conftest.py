"""Pytest configuration and fixtures for sinktrigger tests."""

import logging
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sinktrigger.core.enums import BuildResult
from sinktrigger.core.models import TriggerConfig
from sinktrigger.core.trigger import PipelineSinkTrigger
from sinktrigger.repository.memory import InMemoryJobRepository
from sinktrigger.store.file_store import FileFingerprintStore

# Configure logging
logging.basicConfig(level=logging.INFO)

DEFAULT_SPEC = "* * * * *"
DEFAULT_ROOT_PROJECT_NAME = "Mock-Root"
DEFAULT_SINK_PROJECT_NAME = "Mock-Sink"


@pytest.fixture
def repository() -> InMemoryJobRepository:
    """Pipeline Mock-Root -> Lib -> Mock-Sink, all last built successfully."""
    repo = InMemoryJobRepository()
    repo.add_job(DEFAULT_ROOT_PROJECT_NAME, downstream=["Lib"])
    repo.add_job("Lib", downstream=[DEFAULT_SINK_PROJECT_NAME])
    repo.add_job(DEFAULT_SINK_PROJECT_NAME)
    repo.set_last_build(DEFAULT_ROOT_PROJECT_NAME, "1", BuildResult.SUCCESS)
    repo.set_last_build("Lib", "1", BuildResult.SUCCESS)
    return repo


@pytest.fixture
def fingerprint_store(tmp_path) -> FileFingerprintStore:
    return FileFingerprintStore(str(tmp_path / "states"))


@pytest.fixture
def trigger_config() -> TriggerConfig:
    return TriggerConfig(
        spec=DEFAULT_SPEC,
        root_project_name=DEFAULT_ROOT_PROJECT_NAME,
        sink_project_name=DEFAULT_SINK_PROJECT_NAME
    )


@pytest.fixture
def trigger(trigger_config, repository, fingerprint_store) -> PipelineSinkTrigger:
    return PipelineSinkTrigger("Nightly", trigger_config, repository, fingerprint_store)
