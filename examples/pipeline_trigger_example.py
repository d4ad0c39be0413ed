"""
Example: Driving a pipeline sink trigger by hand

This example demonstrates:
1. Loading the job inventory and trigger configurations
2. Recording the first fingerprint of a pipeline
3. Triggering the sink once an upstream job produces a new build
4. Propagating a job rename to the stored triggers
"""

import logging
import tempfile

from sinktrigger.config.global_config_loader import load_global_config
from sinktrigger.config.trigger_store import FileTriggerStore
from sinktrigger.core.enums import BuildResult
from sinktrigger.core.trigger import PipelineSinkTrigger
from sinktrigger.repository import get_job_repository
from sinktrigger.store.file_store import FileFingerprintStore


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    global_config = load_global_config("./examples/configs/global_config.yaml")
    repository = get_job_repository(global_config.repository.type, global_config.repository.options)
    trigger_store = FileTriggerStore(global_config.storage.trigger_dir)

    config = trigger_store.load("release-train")
    with tempfile.TemporaryDirectory() as state_dir:
        trigger = PipelineSinkTrigger("release-train", config, repository, FileFingerprintStore(state_dir))

        # Example 1: First evaluation only records the fingerprint
        print("\n=== Example 1: Recording the baseline ===")
        decision = trigger.run()
        print(f"{decision.outcome.value}: {decision.message}")

        # Example 2: compile-ui is unstable, which is still good enough
        print("\n=== Example 2: New upstream build ===")
        repository.set_last_build("compile-core", "98", BuildResult.SUCCESS)
        decision = trigger.run()
        print(f"{decision.outcome.value}: {decision.message}")
        for name, cause in repository.scheduled_builds:
            print(f"  scheduled {name}: {cause.short_description}")

    # Example 3: Rename a job without touching the files on disk
    print("\n=== Example 3: Renaming a job ===")
    for owner, stored in trigger_store.list_triggers():
        changed = PipelineSinkTrigger(owner, stored, repository, None).on_job_renamed("checkout", "scm-checkout")
        print(f"  {owner}: {'would change' if changed else 'unaffected'}")

    # To persist renames for every trigger, use the listener instead:
    # JobEventListener(trigger_store).on_renamed("checkout", "scm-checkout")


if __name__ == "__main__":
    main()
