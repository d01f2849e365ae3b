"""JSON-file persistence for mappings, sync records and pass history."""

from typing import Any, Dict, Iterator, List, Optional, Tuple
import contextlib
import logging
import os

from ..core.exceptions import StateStoreError
from ..core.models import SyncHistoryEntry, SyncMapping, SyncRecord
from ..utils.io import locked_json, safe_read_json


DEFAULT_HISTORY_LIMIT = 100
STATE_VERSION = 1


def _normalize(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "version": raw.get("version", STATE_VERSION),
        "mappings": list(raw.get("mappings", [])),
        "records": list(raw.get("records", [])),
        "history": list(raw.get("history", [])),
    }


class JsonSyncStateStore:
    """Sync state kept in a single JSON document shared between processes.

    Reads come from a cached copy that is reloaded whenever the file changes
    on disk. Every mutation re-reads the file under an exclusive lock, applies
    the change and writes it back, so a long-running ``watch`` and a one-off
    ``add-mapping`` never overwrite each other. Record uniqueness per
    (mapping, reminder) and per (mapping, page) is enforced on save by
    replacing older conflicting records.
    """

    def __init__(self, path: str, history_limit: int = DEFAULT_HISTORY_LIMIT,
                 logger: Optional[logging.Logger] = None):
        self.path = os.path.expanduser(path)
        self.history_limit = history_limit
        self.logger = logger or logging.getLogger(__name__)
        self._data: Optional[Dict[str, Any]] = None
        self._signature: Optional[Tuple[int, int, int]] = None

    # -- file handling --------------------------------------------------------

    def _stat(self) -> Optional[Tuple[int, int, int]]:
        try:
            st = os.stat(self.path)
        except OSError:
            return None
        return (st.st_ino, st.st_mtime_ns, st.st_size)

    @property
    def data(self) -> Dict[str, Any]:
        if self._data is None or self._stat() != self._signature:
            self.reload()
        return self._data

    def reload(self) -> None:
        self._signature = self._stat()
        self._data = _normalize(safe_read_json(self.path, default={}))

    @contextlib.contextmanager
    def _mutate(self) -> Iterator[Dict[str, Any]]:
        """Yield the freshest document; it is written back when the block exits."""
        try:
            with locked_json(self.path) as raw:
                data = _normalize(raw)
                yield data
                raw.clear()
                raw.update(data)
        except OSError as e:
            raise StateStoreError(f"Failed to write sync state to {self.path}: {e}") from e
        # next read reloads; stat now could race a writer that ran after our unlock
        self._data = None

    # -- mappings -------------------------------------------------------------

    def get_mappings(self) -> List[SyncMapping]:
        return [SyncMapping.from_dict(entry) for entry in self.data["mappings"]]

    def get_mapping(self, mapping_id: str) -> Optional[SyncMapping]:
        for entry in self.data["mappings"]:
            if entry.get("id") == mapping_id:
                return SyncMapping.from_dict(entry)
        return None

    def save_mapping(self, mapping: SyncMapping) -> None:
        with self._mutate() as data:
            mappings = data["mappings"]
            for index, entry in enumerate(mappings):
                if entry.get("id") == mapping.id:
                    mappings[index] = mapping.to_dict()
                    break
            else:
                mappings.append(mapping.to_dict())

    def delete_mapping(self, mapping_id: str) -> None:
        """Delete a mapping together with its records and history."""
        with self._mutate() as data:
            data["mappings"] = [m for m in data["mappings"] if m.get("id") != mapping_id]
            data["records"] = [r for r in data["records"] if r.get("mapping_id") != mapping_id]
            data["history"] = [h for h in data["history"] if h.get("mapping_id") != mapping_id]

    # -- records --------------------------------------------------------------

    def get_records(self, mapping_id: str) -> List[SyncRecord]:
        return [
            SyncRecord.from_dict(entry)
            for entry in self.data["records"]
            if entry.get("mapping_id") == mapping_id
        ]

    def get_record(self, record_id: str) -> Optional[SyncRecord]:
        for entry in self.data["records"]:
            if entry.get("id") == record_id:
                return SyncRecord.from_dict(entry)
        return None

    def get_record_by_apple_id(self, apple_id: str, mapping_id: str) -> Optional[SyncRecord]:
        return self._find_record(mapping_id, "apple_id", apple_id)

    def get_record_by_remote_id(self, remote_id: str, mapping_id: str) -> Optional[SyncRecord]:
        return self._find_record(mapping_id, "remote_id", remote_id)

    def _find_record(self, mapping_id: str, key: str, value: str) -> Optional[SyncRecord]:
        for entry in self.data["records"]:
            if entry.get("mapping_id") == mapping_id and entry.get(key) == value:
                return SyncRecord.from_dict(entry)
        return None

    def save_record(self, record: SyncRecord) -> None:
        with self._mutate() as data:
            data["records"] = self._replace_record(data["records"], record)

    def _replace_record(self, records: List[Dict[str, Any]], record: SyncRecord) -> List[Dict[str, Any]]:
        kept = []
        for entry in records:
            if entry.get("id") == record.id:
                continue
            same_mapping = entry.get("mapping_id") == record.mapping_id
            if same_mapping and (entry.get("apple_id") == record.apple_id
                                 or entry.get("remote_id") == record.remote_id):
                self.logger.warning(
                    f"Replacing sync record {entry.get('id')} linked to the same item "
                    f"(apple={record.apple_id}, notion={record.remote_id})"
                )
                continue
            kept.append(entry)
        kept.append(record.to_dict())
        return kept

    def delete_record(self, record_id: str) -> None:
        with self._mutate() as data:
            data["records"] = [r for r in data["records"] if r.get("id") != record_id]

    def delete_records(self, mapping_id: str) -> None:
        with self._mutate() as data:
            data["records"] = [r for r in data["records"] if r.get("mapping_id") != mapping_id]

    # -- history --------------------------------------------------------------

    def save_history_entry(self, entry: SyncHistoryEntry) -> None:
        """Prepend an entry and keep only the newest ``history_limit`` per mapping."""
        with self._mutate() as data:
            data["history"] = self._trim_history([entry.to_dict()] + data["history"])

    def _trim_history(self, history: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        trimmed = []
        counts: Dict[str, int] = {}
        for item in history:
            mapping_id = item.get("mapping_id")
            counts[mapping_id] = counts.get(mapping_id, 0) + 1
            if counts[mapping_id] <= self.history_limit:
                trimmed.append(item)
        return trimmed

    def get_history(self, mapping_id: str, limit: int = 50) -> List[SyncHistoryEntry]:
        """Most recent history entries for a mapping, newest first."""
        entries = [
            SyncHistoryEntry.from_dict(item)
            for item in self.data["history"]
            if item.get("mapping_id") == mapping_id
        ]
        return entries[:limit]
