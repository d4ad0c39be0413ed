"""
Propagates job renames and deletions to every stored trigger configuration.
"""

import logging
from typing import Callable, List, Optional, TYPE_CHECKING

from ..config.trigger_store import FileTriggerStore
from ..core.identifiers import rename_in_config, delete_from_config
from ..core.models import TriggerConfig

if TYPE_CHECKING:
    from .trigger_scheduler import TriggerScheduler


class JobEventListener:
    """
    Fans rename/delete notifications out to all triggers.

    When a scheduler is attached, live trigger instances are updated through
    their own lock so a running tick never sees a half-applied change.
    A failure to save one owner's configuration is logged and the
    remaining owners are still processed.
    """

    def __init__(self, trigger_store: FileTriggerStore, scheduler: Optional['TriggerScheduler'] = None):
        self.trigger_store = trigger_store
        self.scheduler = scheduler
        self.logger = logging.getLogger(__name__)

    def on_renamed(self, old_name: str, new_name: str) -> List[str]:
        """Returns the owners whose configuration was changed and saved"""
        return self._fan_out(
            lambda config: rename_in_config(config, old_name, new_name),
            f"rename from {old_name} to {new_name}"
        )

    def on_deleted(self, name: str) -> List[str]:
        """Returns the owners whose configuration was changed and saved"""
        return self._fan_out(
            lambda config: delete_from_config(config, name),
            f"deletion of {name}"
        )

    def _fan_out(self, apply: Callable[[TriggerConfig], bool], description: str) -> List[str]:
        updated = []
        for owner, stored_config in self.trigger_store.list_triggers():
            trigger = self.scheduler.triggers.get(owner) if self.scheduler else None
            try:
                if trigger is not None:
                    with trigger.lock:
                        changed = apply(trigger.config)
                        if changed:
                            self.trigger_store.save(owner, trigger.config)
                else:
                    changed = apply(stored_config)
                    if changed:
                        self.trigger_store.save(owner, stored_config)
            except Exception as e:
                self.logger.warning(f"Failed to persist trigger setting of {owner} during {description}: {e}",
                                    exc_info=True)
                continue

            if changed:
                self.logger.info(f"Updated trigger of {owner} after {description}")
                updated.append(owner)
        return updated
