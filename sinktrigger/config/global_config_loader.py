import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, field


@dataclass
class SchedulerConfig:
    """Scheduler configuration"""
    schedule_interval: int = 60  # Seconds between scheduling checks
    max_concurrent_ticks: int = 4


@dataclass
class StorageConfig:
    """Storage configuration"""
    trigger_dir: str = "./configs/triggers"
    state_dir: str = "./data/trigger_states"
    logs_dir: str = "./data/logs"


@dataclass
class RepositoryConfig:
    """Job repository configuration"""
    type: str = "inventory"
    options: Dict[str, Any] = field(default_factory=lambda: {'path': './configs/inventory.yaml'})


@dataclass
class GlobalConfig:
    """Global configuration for the trigger scheduler and CLI"""
    scheduler: SchedulerConfig
    storage: StorageConfig
    repository: RepositoryConfig

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GlobalConfig':
        """Create GlobalConfig from dictionary"""
        return cls(
            scheduler=SchedulerConfig(**data.get('scheduler', {})),
            storage=StorageConfig(**data.get('storage', {})),
            repository=RepositoryConfig(**data.get('repository', {}))
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'GlobalConfig':
        """Load GlobalConfig from YAML file"""
        path = Path(yaml_path)
        if not path.exists():
            # Return default config if file doesn't exist
            return cls.default()

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def default(cls) -> 'GlobalConfig':
        """Return default configuration"""
        return cls(
            scheduler=SchedulerConfig(),
            storage=StorageConfig(),
            repository=RepositoryConfig()
        )

def load_global_config(config_path: Optional[str] = None) -> GlobalConfig:
    """
    Load global configuration from YAML file.
    If no path provided, looks for global_config.yaml in standard locations.
    """
    if config_path:
        return GlobalConfig.from_yaml(config_path)

    search_paths = [
        Path("./global_config.yaml"),
        Path("./config/global_config.yaml"),
        Path("/etc/sinktrigger/global_config.yaml"),
    ]

    for path in search_paths:
        if path.exists():
            return GlobalConfig.from_yaml(str(path))

    return GlobalConfig.default()
