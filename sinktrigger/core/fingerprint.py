"""
Content fingerprint of a pipeline's upstream state.

The fingerprint covers each visited job's full name and last build id, so
two polls that observe the same builds produce the same digest no matter
which order the jobs were discovered in. A renamed job changes its full
name and therefore the fingerprint.
"""

import hashlib
from typing import Iterable, Optional

from .enums import ChangeOutcome
from .models import Job, BuildRecord

SEPARATOR = ';'


def fingerprint_entry(job: Job, last_build: Optional[BuildRecord]) -> str:
    return f"{job.display_name}({last_build.id if last_build else ''})"


def compute(inputs: Iterable[str]) -> str:
    """SHA-1 hex digest of the sorted, separator-joined inputs"""
    canonical = SEPARATOR.join(sorted(inputs))
    return hashlib.sha1(canonical.encode('utf-8')).hexdigest()


def has_changed(current: str, previous: Optional[str]) -> ChangeOutcome:
    if previous is None:
        return ChangeOutcome.NO_BASELINE
    if current == previous:
        return ChangeOutcome.UNCHANGED
    return ChangeOutcome.CHANGED
