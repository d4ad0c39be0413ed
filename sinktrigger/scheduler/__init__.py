from .trigger_scheduler import TriggerScheduler
from .event_listener import JobEventListener

__all__ = ['TriggerScheduler', 'JobEventListener']
