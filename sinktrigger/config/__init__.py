from .config_loader import TriggerConfigLoader
from .global_config_loader import GlobalConfig, load_global_config
from .trigger_store import FileTriggerStore

__all__ = ['TriggerConfigLoader', 'GlobalConfig', 'load_global_config', 'FileTriggerStore']
