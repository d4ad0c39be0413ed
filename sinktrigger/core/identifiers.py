"""
Keeps the project names held by a trigger configuration consistent with
renames and deletions of jobs in the host repository.

Exclusion lists are parsed the same way on both paths: split on commas,
trimmed, empty tokens dropped, duplicates removed keeping first
occurrence. A list is only reserialized when something in it changed, so
an untouched configuration keeps its original text.
"""

import logging
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import TriggerConfig

logger = logging.getLogger(__name__)

SEPARATOR = ','


def split_names(raw: str) -> List[str]:
    """Parse a comma-delimited list of job names"""
    if not raw:
        return []
    tokens = [token.strip() for token in raw.split(SEPARATOR)]
    return list(dict.fromkeys(token for token in tokens if token))


def join_names(names: List[str]) -> str:
    return SEPARATOR.join(names)


def rename_in_config(config: 'TriggerConfig', old_name: str, new_name: str) -> bool:
    """Apply a job rename to root, sink and exclusion names.

    Returns True if any field changed and the configuration needs saving.
    """
    if old_name == new_name:
        return False

    changed = False

    exclusions = split_names(config.excluded_project_names)
    if old_name in exclusions:
        renamed = [new_name if name == old_name else name for name in exclusions]
        config.excluded_project_names = join_names(list(dict.fromkeys(renamed)))
        changed = True

    if config.root_project_name == old_name:
        config.root_project_name = new_name
        changed = True

    if config.sink_project_name == old_name:
        config.sink_project_name = new_name
        changed = True

    if changed:
        logger.debug(f"Renamed '{old_name}' to '{new_name}' in trigger configuration")
    return changed


def delete_from_config(config: 'TriggerConfig', deleted_name: str) -> bool:
    """Drop a deleted job from the exclusion names.

    Root and sink names are left alone; a trigger pointing at a deleted
    job simply stops firing until reconfigured.
    """
    exclusions = split_names(config.excluded_project_names)
    remaining = [name for name in exclusions if name != deleted_name]
    if len(remaining) == len(exclusions):
        return False

    config.excluded_project_names = join_names(remaining)
    logger.debug(f"Removed deleted job '{deleted_name}' from excluded project names")
    return True
