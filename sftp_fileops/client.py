"""
High-level SFTP file and directory operations.

Every public method opens its own session through the SessionFactory,
does its work, and closes the session before returning or raising.
Nothing is shared between calls.
"""

import logging

from .config import ClientConfig, ConnectionConfig, Credentials
from .logger import configure_logging
from .models import FileRecord, RemoteEntry
from .session import SessionFactory, SFTPSession
from .walker import walk_files

logger = logging.getLogger(__name__)


class SFTPFileClient:
    """
    Remote file client bound to one set of credentials.

    Raises ConnectionError when a session cannot be established,
    FileNotFoundError / PermissionError / OSError for remote failures.
    """

    def __init__(
        self,
        credentials: Credentials,
        conn_config: ConnectionConfig | None = None,
        session_factory: SessionFactory | None = None,
    ):
        self.credentials = credentials
        self.conn_config = conn_config or ConnectionConfig()
        self.session_factory = session_factory or SessionFactory(credentials, self.conn_config)

    @classmethod
    def from_config(cls, config: ClientConfig) -> "SFTPFileClient":
        """Build a client from loaded config and apply its [logging] section."""
        configure_logging(config.logging)
        return cls(config.credentials, config.connection)

    def _session(self) -> SFTPSession:
        return self.session_factory.connect()

    def _encode(self, data: str | bytes) -> bytes:
        if isinstance(data, str):
            return data.encode(self.credentials.encoding)
        return bytes(data)

    # File operations

    def append(self, path: str, data: str | bytes) -> None:
        """Append data to a file, creating it if it does not exist."""
        payload = self._encode(data)
        logger.debug("Appending %d bytes to %s", len(payload), path)

        with self._session() as session:
            if session.exists(path):
                session.write_file(path, payload, append=True)
            else:
                logger.debug("%s does not exist, creating it", path)
                session.write_file(path, payload)

    def overwrite(self, path: str, data: str | bytes) -> None:
        """Create or truncate a file and write data to it."""
        payload = self._encode(data)
        logger.debug("Overwriting %s with %d bytes", path, len(payload))

        with self._session() as session:
            session.write_file(path, payload)

    def read(self, path: str) -> bytes:
        """Read the whole file into memory."""
        logger.debug("Reading file: %s", path)

        with self._session() as session:
            return session.read_file(path)

    # Listings

    def list_dir(self, path: str) -> list[RemoteEntry]:
        """List the immediate entries of a directory."""
        logger.debug("Listing directory: %s", path)

        with self._session() as session:
            return session.list_dir(path)

    def list_all(self, path: str) -> list[FileRecord]:
        """
        List every file below a directory.

        One session is used for the whole walk. Paths in the returned
        records are relative to ``path``, e.g. ``/sub/file.txt``.
        """
        logger.debug("Listing all files under: %s", path)

        with self._session() as session:
            return walk_files(session, path)

    # Directories

    def ensure_dir(self, path: str) -> None:
        """Create a directory if it is missing. Parents must already exist."""
        with self._session() as session:
            if session.exists(path):
                logger.debug("Directory already exists: %s", path)
                return
            session.mkdir(path)

    def ensure_dir_path(self, path: str) -> None:
        """
        Create every missing directory along path, parents first.

        Segments that already exist are left alone. Stops at the first
        mkdir failure; segments created before it are kept.
        """
        parts = [part for part in path.split("/") if part]

        with self._session() as session:
            current = ""
            for part in parts:
                current = current + "/" + part
                if session.exists(current):
                    continue
                session.mkdir(current)
