"""Sync command - run a pass over all enabled mappings or a single one."""

from typing import Optional
import logging

from ..core.config import get_notion_token
from ..core.exceptions import AlreadySyncingError
from ..core.models import SyncConfig, SyncStats
from ..notion.client import NotionClient
from ..reminders.tasks import RemindersTaskManager
from ..state.store import JsonSyncStateStore
from ..sync.engine import SyncEngine


def open_store(config: SyncConfig) -> JsonSyncStateStore:
    return JsonSyncStateStore(config.state_path, history_limit=config.history_limit)


def create_notion_client(config: SyncConfig, logger: Optional[logging.Logger] = None) -> NotionClient:
    return NotionClient(
        get_notion_token(config),
        base_url=config.notion_base_url,
        api_version=config.notion_api_version,
        timeout=config.notion_timeout,
        logger=logger,
    )


def create_engine(config: SyncConfig, logger: Optional[logging.Logger] = None) -> SyncEngine:
    """Wire the EventKit provider, Notion client and JSON store into an engine."""
    return SyncEngine(
        local=RemindersTaskManager(logger=logger),
        remote=create_notion_client(config, logger=logger),
        store=open_store(config),
        logger=logger,
    )


def print_stats(label: str, stats: SyncStats) -> None:
    print(f"   {label}: {stats.summary()}")
    for error in stats.errors:
        print(f"     ⚠️  {error}")


class SyncCommand:
    """Command for synchronizing Reminders lists with Notion databases."""

    def __init__(self, config: SyncConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)
        if verbose:
            self.logger.setLevel(logging.DEBUG)

    def run(self, mapping_id: Optional[str] = None) -> bool:
        engine = create_engine(self.config)
        try:
            if mapping_id:
                return self._sync_one(engine, mapping_id)
            return self._sync_all(engine)
        except AlreadySyncingError as e:
            print(f"⏳ {e}")
            return False
        finally:
            engine.remote.close()

    def _sync_one(self, engine: SyncEngine, mapping_id: str) -> bool:
        mapping = engine.store.get_mapping(mapping_id)
        if mapping is None:
            print(f"Unknown mapping: {mapping_id}")
            return False

        print(f"\n🔄 Syncing {mapping.display_name}...")
        stats = engine.sync(mapping)
        print_stats(mapping.display_name, stats)
        return not stats.errors

    def _sync_all(self, engine: SyncEngine) -> bool:
        mappings = {m.id: m for m in engine.store.get_mappings() if m.is_enabled}
        if not mappings:
            print("No enabled mappings. Add one with 'notion-sync add-mapping FILE'.")
            return False

        print(f"\n🔄 Syncing {len(mappings)} mapping(s)...")
        results = engine.sync_all()

        success = True
        for mapping_id, mapping in mappings.items():
            stats = results.get(mapping_id)
            if stats is None:
                print(f"   ❌ {mapping.display_name}: failed (see history)")
                success = False
                continue
            print_stats(mapping.display_name, stats)
            success = success and not stats.errors

        if engine.last_error:
            print(f"\nLast error: {engine.last_error}")
        return success
