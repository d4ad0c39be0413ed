from abc import ABC, abstractmethod
from typing import Optional

CONTEXT_FINGERPRINT_FILE_NM = "pipeline-context.fingerprint"


class FingerprintStore(ABC):
    """Persists the last observed pipeline fingerprint per owning job"""

    @abstractmethod
    def read(self, owner: str) -> Optional[str]:
        """Return the stored fingerprint, or None if none was ever written"""
        pass

    @abstractmethod
    def write(self, owner: str, value: str):
        """Overwrite the stored fingerprint"""
        pass
