#!/usr/bin/env python3
"""
Sinktrigger CLI

Evaluate pipeline sink triggers, validate their configuration, propagate
job renames/deletions and run the scheduler daemon.
"""

import asyncio
import click
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from ..config.config_loader import TriggerConfigLoader
from ..config.global_config_loader import GlobalConfig, load_global_config
from ..config.trigger_store import FileTriggerStore
from ..core.exceptions import SinkTriggerError
from ..core.trigger import PipelineSinkTrigger
from ..repository import JobRepository, get_job_repository
from ..scheduler.event_listener import JobEventListener
from ..scheduler.trigger_scheduler import TriggerScheduler
from ..store.file_store import FileFingerprintStore


class TriggerCLI:
    """Command-line interface for pipeline sink triggers"""

    def __init__(self, global_config: GlobalConfig):
        self.global_config = global_config
        self.logger = logging.getLogger(__name__)
        self.trigger_store = FileTriggerStore(global_config.storage.trigger_dir)
        self._repository: Optional[JobRepository] = None

    @property
    def repository(self) -> JobRepository:
        if self._repository is None:
            repo_config = self.global_config.repository
            self._repository = get_job_repository(repo_config.type, repo_config.options)
            self.logger.info(f"Initialized {repo_config.type} job repository")
        return self._repository

    def evaluate(self, owner: Optional[str] = None) -> int:
        """Run one tick of each trigger (or of a single owner's trigger)"""
        triggers = self.trigger_store.list_triggers()
        if owner:
            triggers = [(name, config) for name, config in triggers if name == owner]
            if not triggers:
                click.echo(f"No trigger configured for '{owner}'", err=True)
                return 1

        if not triggers:
            click.echo("No triggers found")
            return 0

        fingerprint_store = FileFingerprintStore(self.global_config.storage.state_dir)
        for name, config in triggers:
            trigger = PipelineSinkTrigger(name, config, self.repository, fingerprint_store)
            decision = trigger.run()
            click.echo(f"{name}: {decision.outcome.value} - {decision.message}")
            if decision.override_note:
                click.echo(f"  Note: {decision.override_note}")
            if decision.fingerprint:
                click.echo(f"  Fingerprint: {decision.fingerprint}")
        return 0

    def validate(self) -> int:
        """Validate all trigger configurations"""
        config_dir = self.trigger_store.trigger_dir
        click.echo(f"Validating trigger configurations in: {config_dir}")
        click.echo("-" * 50)

        valid_count = 0
        invalid_count = 0
        for config_file in sorted(config_dir.glob("*.yaml")):
            try:
                config = TriggerConfigLoader.load_from_yaml(str(config_file))
                issues = TriggerConfigLoader.validate_config(config, self.repository)
            except SinkTriggerError as e:
                click.echo(f"❌ {config_file.name}: ERROR - {e}")
                invalid_count += 1
                continue

            if issues:
                click.echo(f"❌ {config_file.name}: INVALID")
                for issue in issues:
                    click.echo(f"   - {issue}")
                invalid_count += 1
            else:
                click.echo(f"✅ {config_file.name}: VALID")
                valid_count += 1

        click.echo(f"\nValidation Summary:")
        click.echo(f"Valid configs: {valid_count}")
        click.echo(f"Invalid configs: {invalid_count}")
        return 1 if invalid_count else 0

    def rename(self, old_name: str, new_name: str) -> int:
        updated = JobEventListener(self.trigger_store).on_renamed(old_name, new_name)
        click.echo(f"Updated {len(updated)} trigger(s)" + (f": {', '.join(updated)}" if updated else ""))
        return 0

    def delete(self, name: str) -> int:
        updated = JobEventListener(self.trigger_store).on_deleted(name)
        click.echo(f"Updated {len(updated)} trigger(s)" + (f": {', '.join(updated)}" if updated else ""))
        return 0

    async def start_scheduler(self):
        """Start the scheduler daemon"""
        storage = self.global_config.storage
        Path(storage.logs_dir).mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(Path(storage.logs_dir) / "scheduler.log")
        file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        logging.getLogger().addHandler(file_handler)

        scheduler = TriggerScheduler(
            self.global_config.scheduler,
            self.repository,
            self.trigger_store,
            FileFingerprintStore(storage.state_dir)
        )

        loop = asyncio.get_running_loop()

        def signal_handler():
            self.logger.info("Received shutdown signal, shutting down...")
            scheduler.running = False
            scheduler_task.cancel()

        scheduler_task = asyncio.create_task(scheduler.start())
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, signal_handler)

        try:
            await scheduler_task
        except asyncio.CancelledError:
            pass
        finally:
            await scheduler.stop()
            self.logger.info("Scheduler stopped")


@click.group()
@click.option('--global-config', default=None, help='Path to global config YAML')
@click.option('--log-level', default='INFO',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
              help='Set the logging level')
@click.pass_context
def cli(ctx, global_config, log_level):
    """Sinktrigger CLI - Pipeline sink trigger management"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    global_cfg = load_global_config(global_config)
    ctx.ensure_object(dict)
    ctx.obj['global_config'] = global_cfg
    ctx.obj['cli'] = TriggerCLI(global_cfg)


@cli.command()
@click.option('--owner', help='Only evaluate the trigger owned by this job')
@click.pass_context
def evaluate(ctx, owner):
    """Run a single decision tick for the configured triggers"""
    ctx.exit(ctx.obj['cli'].evaluate(owner))


@cli.command()
@click.pass_context
def validate(ctx):
    """Validate trigger configurations against the job repository"""
    ctx.exit(ctx.obj['cli'].validate())


@cli.command()
@click.argument('old_name')
@click.argument('new_name')
@click.pass_context
def rename(ctx, old_name, new_name):
    """Propagate a job rename to every trigger"""
    ctx.exit(ctx.obj['cli'].rename(old_name, new_name))


@cli.command()
@click.argument('name')
@click.pass_context
def delete(ctx, name):
    """Propagate a job deletion to every trigger"""
    ctx.exit(ctx.obj['cli'].delete(name))


@cli.command()
@click.pass_context
def start(ctx):
    """Start the trigger scheduler daemon"""
    asyncio.run(ctx.obj['cli'].start_scheduler())


if __name__ == "__main__":
    cli()
