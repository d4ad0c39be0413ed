import asyncio
import logging
from datetime import datetime
from typing import Dict, Optional, Set

from croniter import croniter

from ..config.global_config_loader import SchedulerConfig
from ..config.trigger_store import FileTriggerStore
from ..core.models import TriggerDecision
from ..core.trigger import PipelineSinkTrigger
from ..repository.base import JobRepository
from ..store.base import FingerprintStore


class TriggerScheduler:
    """Runs pipeline sink triggers on their cron schedules"""

    def __init__(
        self,
        scheduler_config: SchedulerConfig,
        repository: JobRepository,
        trigger_store: FileTriggerStore,
        fingerprint_store: FingerprintStore
    ):
        self.config = scheduler_config
        self.repository = repository
        self.trigger_store = trigger_store
        self.fingerprint_store = fingerprint_store
        self.logger = logging.getLogger(__name__)
        self.running = False
        self.triggers: Dict[str, PipelineSinkTrigger] = {}

        # Track last run times for each trigger owner
        self.last_run_times: Dict[str, datetime] = {}
        self._in_flight: Set[str] = set()
        self._semaphore: Optional[asyncio.Semaphore] = None

    def load_triggers(self) -> Dict[str, PipelineSinkTrigger]:
        """
        Reload trigger configurations from the store.

        Existing trigger instances are kept and have their configuration
        swapped under their lock, so a reload never overlaps a running tick.
        """
        loaded = dict(self.trigger_store.list_triggers())

        for owner in list(self.triggers.keys()):
            if owner not in loaded:
                self.logger.info(f"Removing trigger: {owner}")
                del self.triggers[owner]
                self.last_run_times.pop(owner, None)

        for owner, config in loaded.items():
            trigger = self.triggers.get(owner)
            if trigger is None:
                self.triggers[owner] = PipelineSinkTrigger(
                    owner, config, self.repository, self.fingerprint_store
                )
                self.logger.info(f"Loaded trigger: {owner} (sink: {config.sink_project_name}, spec: {config.spec})")
            else:
                with trigger.lock:
                    trigger.config = config

        return self.triggers

    async def start(self):
        """Start the scheduler"""
        self.running = True
        self.logger.info(f"Starting trigger scheduler, reading triggers from: {self.trigger_store.trigger_dir}")

        while self.running:
            try:
                self.load_triggers()
                await self.tick()
            except Exception as e:
                self.logger.error(f"Error in scheduler loop: {e}", exc_info=True)
            await asyncio.sleep(self.config.schedule_interval)

    async def stop(self):
        """Stop the scheduler"""
        self.running = False
        self.logger.info("Stopping trigger scheduler")

    async def tick(self, current_time: Optional[datetime] = None) -> Dict[str, TriggerDecision]:
        """Run every trigger that is due at `current_time`"""
        current_time = current_time or datetime.now()
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.config.max_concurrent_ticks)

        due = [
            (owner, trigger) for owner, trigger in self.triggers.items()
            if owner not in self._in_flight and self._should_run_trigger(owner, trigger.config.spec, current_time)
        ]
        if not due:
            return {}

        decisions = await asyncio.gather(*(self._run_trigger(owner, trigger, current_time) for owner, trigger in due))
        return {owner: decision for (owner, _), decision in zip(due, decisions)}

    def _should_run_trigger(self, owner: str, spec: str, current_time: datetime) -> bool:
        """Check if a trigger should run based on its cron expression"""
        try:
            cron = croniter(spec, current_time)
            previous_run = cron.get_prev(datetime)
            # get_prev is strictly before current_time; a slot starting exactly now is the latest one
            following = cron.get_next(datetime)
            if following <= current_time:
                previous_run = following

            # Already run since the last scheduled time
            last_run = self.last_run_times.get(owner)
            if last_run and last_run >= previous_run:
                return False

            return (current_time - previous_run).total_seconds() < self.config.schedule_interval

        except Exception as e:
            self.logger.error(f"Invalid cron expression '{spec}' for {owner}: {e}")
            return False

    async def _run_trigger(self, owner: str, trigger: PipelineSinkTrigger, current_time: datetime) -> TriggerDecision:
        self._in_flight.add(owner)
        try:
            async with self._semaphore:
                decision = await asyncio.to_thread(trigger.run)
            self.last_run_times[owner] = current_time
            self.logger.debug(f"Trigger {owner} finished: {decision.outcome.value}")
            return decision
        finally:
            self._in_flight.discard(owner)
