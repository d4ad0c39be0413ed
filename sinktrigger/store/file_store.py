import logging
import os
import tempfile
from pathlib import Path
from threading import Lock
from typing import Dict, Optional

from .base import FingerprintStore, CONTEXT_FINGERPRINT_FILE_NM
from ..core.exceptions import FingerprintStoreError


class FileFingerprintStore(FingerprintStore):
    """
    Stores fingerprints as single-line UTF-8 files.

    Storage structure:
    - One directory per owning job: {state_dir}/{owner}/
    - Fingerprint file inside it: pipeline-context.fingerprint

    Writes go to a temporary file that replaces the target, so readers see
    either the old or the new value, never a partial one.
    """

    def __init__(self, state_dir: str = "./data/trigger_states"):
        self.state_dir = Path(state_dir)
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self._locks: Dict[str, Lock] = {}
        self._locks_guard = Lock()
        self.logger = logging.getLogger(__name__)

    def _get_lock(self, owner: str) -> Lock:
        """Get or create a lock for a specific owner"""
        with self._locks_guard:
            if owner not in self._locks:
                self._locks[owner] = Lock()
            return self._locks[owner]

    def _get_fingerprint_file(self, owner: str) -> Path:
        return self.state_dir / owner / CONTEXT_FINGERPRINT_FILE_NM

    def read(self, owner: str) -> Optional[str]:
        fingerprint_file = self._get_fingerprint_file(owner)
        with self._get_lock(owner):
            if not fingerprint_file.exists():
                return None
            try:
                with open(fingerprint_file, 'r', encoding='utf-8') as f:
                    first_line = f.readline()
            except OSError as e:
                raise FingerprintStoreError(owner, f"cannot read {fingerprint_file}: {e}") from e
        value = first_line.strip()
        return value or None

    def write(self, owner: str, value: str):
        fingerprint_file = self._get_fingerprint_file(owner)
        with self._get_lock(owner):
            try:
                fingerprint_file.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(dir=fingerprint_file.parent, prefix=".fingerprint-")
                try:
                    with os.fdopen(fd, 'w', encoding='utf-8') as f:
                        f.write(value)
                    os.replace(tmp_path, fingerprint_file)
                except BaseException:
                    if os.path.exists(tmp_path):
                        os.unlink(tmp_path)
                    raise
            except OSError as e:
                raise FingerprintStoreError(owner, f"cannot write {fingerprint_file}: {e}") from e
        self.logger.debug(f"Persisted fingerprint for {owner}: {value}")
