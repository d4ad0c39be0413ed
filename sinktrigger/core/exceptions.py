class SinkTriggerError(Exception):
    """Base class for sinktrigger errors"""
    pass


class TriggerConfigError(SinkTriggerError):
    """Raised when a trigger configuration document cannot be loaded"""
    pass


class JobNotFoundError(SinkTriggerError):
    """Raised when a job inventory references a job that is not defined"""
    pass


class FingerprintStoreError(SinkTriggerError):
    """Raised when the persisted fingerprint cannot be read or written"""

    def __init__(self, owner: str, message: str):
        super().__init__(f"Fingerprint store failure for '{owner}': {message}")
        self.owner = owner
