"""Status and history commands - inspect mappings and past passes."""

from ..core.models import SyncConfig
from .sync import open_store


class StatusCommand:
    """List configured mappings with their last sync time."""

    def __init__(self, config: SyncConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose

    def run(self) -> bool:
        store = open_store(self.config)
        mappings = store.get_mappings()
        if not mappings:
            print("No mappings configured.")
            return True

        print(f"\n📋 {len(mappings)} mapping(s):")
        for mapping in mappings:
            state = "enabled" if mapping.is_enabled else "disabled"
            last = mapping.last_sync_date.isoformat() if mapping.last_sync_date else "never"
            records = len(store.get_records(mapping.id))
            print(f"  • {mapping.display_name} [{state}]")
            print(f"    id: {mapping.id}")
            print(f"    last sync: {last}, linked items: {records}")

            latest = store.get_history(mapping.id, limit=1)
            if latest and latest[0].has_errors:
                print(f"    ⚠️  last pass had {len(latest[0].errors)} error(s)")
        return True


class HistoryCommand:
    """Show recent history entries for one mapping."""

    def __init__(self, config: SyncConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose

    def run(self, mapping_id: str, limit: int = 10) -> bool:
        store = open_store(self.config)
        if store.get_mapping(mapping_id) is None:
            print(f"Unknown mapping: {mapping_id}")
            return False

        entries = store.get_history(mapping_id, limit=limit)
        if not entries:
            print("No sync history yet.")
            return True

        for entry in entries:
            print(
                f"{entry.timestamp.isoformat()}  {entry.operation.value:<16} "
                f"+{entry.items_created} ~{entry.items_updated} -{entry.items_deleted} "
                f"conflicts={entry.conflicts} errors={len(entry.errors)}"
            )
            if self.verbose:
                for error in entry.errors:
                    print(f"    {error}")
        return True
