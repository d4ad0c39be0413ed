import logging
import yaml
from pathlib import Path
from typing import List, Optional, Tuple

from .config_loader import TriggerConfigLoader
from ..core.exceptions import TriggerConfigError
from ..core.models import TriggerConfig


class FileTriggerStore:
    """
    File-based store of trigger configurations.

    Each owning job has one YAML file, {trigger_dir}/{owner}.yaml, holding
    the trigger options under their form names.
    """

    def __init__(self, trigger_dir: str):
        self.trigger_dir = Path(trigger_dir)
        self.trigger_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger(__name__)

    def _get_config_file(self, owner: str) -> Path:
        return self.trigger_dir / f"{owner}.yaml"

    def save(self, owner: str, config: TriggerConfig):
        """Persist a trigger configuration. Raises OSError on failure."""
        config_file = self._get_config_file(owner)
        with open(config_file, 'w') as f:
            yaml.dump(TriggerConfigLoader.config_to_dict(config), f, default_flow_style=False, sort_keys=False)
        self.logger.debug(f"Saved trigger configuration for {owner} to {config_file}")

    def load(self, owner: str) -> Optional[TriggerConfig]:
        config_file = self._get_config_file(owner)
        if not config_file.exists():
            return None
        return TriggerConfigLoader.load_from_yaml(str(config_file))

    def delete(self, owner: str) -> bool:
        config_file = self._get_config_file(owner)
        if config_file.exists():
            config_file.unlink()
            return True
        return False

    def list_triggers(self) -> List[Tuple[str, TriggerConfig]]:
        """All (owner, config) pairs; files that fail to load are logged and skipped"""
        triggers = []
        for config_file in sorted(self.trigger_dir.glob("*.yaml")):
            try:
                triggers.append((config_file.stem, TriggerConfigLoader.load_from_yaml(str(config_file))))
            except (TriggerConfigError, OSError) as e:
                self.logger.error(f"Failed to load trigger config from {config_file}: {e}")
        return triggers
