import logging

from .models import FileRecord
from .session import SFTPSession

logger = logging.getLogger(__name__)


def join_remote(directory: str, name: str) -> str:
    return f"{directory.rstrip('/')}/{name}"


def walk_files(session: SFTPSession, root: str) -> list[FileRecord]:
    """
    Collect every file below root, depth first, in server listing order.

    Directories are descended into but never recorded. Each record's path is
    relative to root and starts with "/". Any listing error propagates
    immediately; nothing collected so far is returned.

    Args:
        session: Open session used for every listing of the walk.
        root: Absolute remote directory to start from.

    Returns:
        List of FileRecord objects.
    """
    records: list[FileRecord] = []
    # Each frame is (remote directory, relative prefix, remaining entries)
    stack = [(root, "", iter(session.list_dir(root)))]

    while stack:
        directory, prefix, entries = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            continue

        if entry.is_dir:
            child = join_remote(directory, entry.name)
            stack.append((child, f"{prefix}/{entry.name}", iter(session.list_dir(child))))
        else:
            records.append(FileRecord.from_entry(prefix, entry))

    logger.debug("Walked %s: %d files", root, len(records))
    return records
