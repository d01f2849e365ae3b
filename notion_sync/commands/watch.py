"""Watch command - keep syncing on an interval until interrupted."""

import logging
from typing import Optional

from ..core.models import SyncConfig
from ..sync.scheduler import SyncScheduler
from .sync import create_engine, print_stats


class WatchCommand:
    """Run an initial pass, then one every ``interval`` minutes."""

    def __init__(self, config: SyncConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)

    def run(self, interval: Optional[int] = None) -> bool:
        engine = create_engine(self.config)
        scheduler = SyncScheduler(engine, interval or self.config.sync_interval_minutes)

        print(f"👀 Syncing every {scheduler.interval_minutes} minute(s). Press Ctrl-C to stop.")
        try:
            results = scheduler.sync_now() or {}
            for mapping_id, stats in results.items():
                print_stats(mapping_id, stats)

            scheduler.start()
            scheduler.wait()
        finally:
            scheduler.stop()
            engine.remote.close()
        return True
