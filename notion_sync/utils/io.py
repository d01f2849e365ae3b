"""
JSON state files: advisory locking, atomic replace and corrupt-file quarantine.
"""

from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union
import contextlib
import errno
import json
import logging
import os
import tempfile
import time

try:  # fcntl is only available on POSIX platforms
    import fcntl  # type: ignore
except ImportError:  # pragma: no cover - Windows has no advisory locks
    fcntl = None  # type: ignore


LOCK_TIMEOUT = 8.0  # seconds
LOCK_POLL = 0.05  # seconds
CORRUPT_SUFFIX = ".corrupt"

PathLike = Union[str, Path]

logger = logging.getLogger(__name__)


def _as_path(file_path: PathLike) -> Path:
    return Path(os.path.expanduser(str(file_path)))


@contextlib.contextmanager
def file_lock(target: Path, exclusive: bool, timeout: Optional[float] = LOCK_TIMEOUT) -> Iterator[None]:
    """Hold a flock on ``<target>.lock`` for the duration of the block.

    Readers take a shared lock and writers an exclusive one, so a reader
    never sees a half-replaced file from another notion-sync process. A no-op
    where fcntl is unavailable.

    Raises:
        TimeoutError: the lock was not acquired within ``timeout`` seconds
    """
    if fcntl is None:
        yield
        return

    lock_path = target.with_name(target.name + ".lock")
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    mode = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
    started = time.monotonic()

    with open(lock_path, "a") as handle:
        while True:
            try:
                fcntl.flock(handle.fileno(), mode if timeout is None else mode | fcntl.LOCK_NB)
                break
            except OSError as exc:  # pragma: no cover - depends on timing
                if exc.errno not in (errno.EACCES, errno.EAGAIN):
                    raise
                if time.monotonic() - started >= timeout:
                    raise TimeoutError(f"Timed out waiting for lock on {target}") from exc
                time.sleep(LOCK_POLL)
        try:
            yield
        finally:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


def _quarantine(path: Path) -> None:
    """Move an unreadable file aside so the next write does not erase it."""
    target = path.with_name(f"{path.name}{CORRUPT_SUFFIX}")
    try:
        os.replace(str(path), str(target))
        logger.warning(f"Moved unreadable {path.name} to {target}")
    except OSError as exc:
        logger.warning(f"Could not move unreadable {path} aside: {exc}")


def _load(path: Path, fallback: Dict[str, Any]) -> Dict[str, Any]:
    """Parse ``path`` with no locking; the caller holds the lock."""
    if not path.exists():
        return fallback
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except ValueError as exc:
        logger.warning(f"{path} is not valid JSON: {exc}")
        _quarantine(path)
        return fallback

    if not isinstance(data, dict):
        logger.warning(f"{path} does not hold a JSON object")
        _quarantine(path)
        return fallback
    return data


def _dump(path: Path, data: Dict[str, Any]) -> None:
    """Replace ``path`` with ``data`` via a fsynced temp file in the same directory."""
    fd, tmp_name = tempfile.mkstemp(prefix=".tmp_", suffix=".json", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, ensure_ascii=False, sort_keys=True)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, str(path))
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


def safe_read_json(file_path: PathLike, default: Optional[Dict[str, Any]] = None,
                   *, lock_timeout: Optional[float] = LOCK_TIMEOUT) -> Dict[str, Any]:
    """
    Read a JSON object under a shared lock, falling back to ``default``.

    Missing files return the default silently. Files that exist but are not
    a JSON object are quarantined to ``<name>.corrupt`` before the default is
    returned.
    """
    fallback = {} if default is None else default
    path = _as_path(file_path)
    if not path.exists():
        return fallback

    try:
        with file_lock(path, exclusive=False, timeout=lock_timeout):
            return _load(path, fallback)
    except TimeoutError as exc:
        logger.warning(f"Timed out waiting to read {path}: {exc}")
        return fallback
    except OSError as exc:
        logger.warning(f"Failed to read {path}: {exc}")
        return fallback


@contextlib.contextmanager
def locked_json(file_path: PathLike, default: Optional[Dict[str, Any]] = None,
                *, lock_timeout: Optional[float] = LOCK_TIMEOUT) -> Iterator[Dict[str, Any]]:
    """
    Read-modify-write a JSON object while holding the exclusive lock.

    The current on-disk document (or ``default``) is yielded; when the block
    exits normally the possibly modified document is written back atomically.
    Another process cannot write in between, so its changes are never lost.

    Raises:
        TimeoutError: the lock could not be taken
        OSError: the document could not be written
    """
    fallback = {} if default is None else default
    path = _as_path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with file_lock(path, exclusive=True, timeout=lock_timeout):
        data = _load(path, fallback)
        yield data
        _dump(path, data)
