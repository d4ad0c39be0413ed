from .base import FingerprintStore, CONTEXT_FINGERPRINT_FILE_NM
from .file_store import FileFingerprintStore

__all__ = ['FingerprintStore', 'FileFingerprintStore', 'CONTEXT_FINGERPRINT_FILE_NM']
