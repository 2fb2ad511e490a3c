"""
SSH/SFTP session management using paramiko.

A SessionFactory turns Credentials into a freshly authenticated SFTPSession.
Each session owns exactly one SSH transport and one SFTP channel and is meant
to be used as a context manager so that both are closed on every exit path.
"""

import logging
import os
from pathlib import Path

import paramiko

from .config import Credentials, ConnectionConfig
from .models import RemoteEntry

logger = logging.getLogger(__name__)

KNOWN_HOSTS_PATH = Path.home() / ".ssh" / "known_hosts"


class TrustOnFirstUsePolicy(paramiko.MissingHostKeyPolicy):
    """
    Trust-on-first-use host key policy (same model as OpenSSH).

    - Unknown host: accept and save key to ~/.ssh/known_hosts
    - Known host, same key: accept
    - Known host, CHANGED key: reject
    """

    def __init__(self, known_hosts_path: Path = KNOWN_HOSTS_PATH):
        self._known_hosts_path = known_hosts_path

    def missing_host_key(self, client, hostname, key):
        host_keys = client.get_host_keys()
        existing = host_keys.lookup(hostname)

        if existing is not None:
            existing_key = existing.get(key.get_name())
            if existing_key is not None and existing_key != key:
                raise paramiko.SSHException(
                    f"Host key for {hostname} has CHANGED. "
                    f"If the server key was legitimately changed, remove the old "
                    f"entry from {self._known_hosts_path} and try again."
                )

        logger.info("Adding host key for %s to known_hosts", hostname)
        host_keys.add(hostname, key.get_name(), key)

        try:
            self._known_hosts_path.parent.mkdir(parents=True, exist_ok=True)
            host_keys.save(str(self._known_hosts_path))
        except OSError as e:
            logger.warning("Could not save known_hosts: %s", e)


class SFTPSession:
    """
    One authenticated SFTP session bound to a single SSH connection.

    Server errors reach the caller exactly as paramiko raises them: an
    IOError whose errno makes it a FileNotFoundError, PermissionError or
    plain OSError, carrying the server message. The session is closed by
    close() or by leaving a ``with`` block.
    """

    def __init__(self, ssh: paramiko.SSHClient, sftp: paramiko.SFTPClient):
        self._ssh = ssh
        self._sftp = sftp

    def __enter__(self) -> "SFTPSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._sftp is None and self._ssh is None

    def close(self) -> None:
        """Close SFTP and SSH without raising."""
        if self._sftp is not None:
            try:
                self._sftp.close()
            except Exception as e:
                logger.debug("Ignoring error while closing SFTP channel: %s", e)
            self._sftp = None
        if self._ssh is not None:
            try:
                self._ssh.close()
            except Exception as e:
                logger.debug("Ignoring error while closing SSH transport: %s", e)
            self._ssh = None
            logger.debug("SSH connection closed")

    def _call(self, path: str, func, *args):
        if self._sftp is None:
            raise OSError(f"Session is closed: {path}")
        try:
            return func(*args)
        except paramiko.SSHException as e:
            # Channel-level failure with no errno; server errors are already OSError
            raise OSError(f"{path}: {e}") from e

    def stat(self, path: str) -> paramiko.SFTPAttributes:
        return self._call(path, lambda: self._sftp.stat(path))

    def exists(self, path: str) -> bool:
        """Probe path. Only a not-found answer counts as absent."""
        try:
            self.stat(path)
        except FileNotFoundError:
            return False
        return True

    def list_dir(self, path: str) -> list[RemoteEntry]:
        """List a single directory level, without '.' and '..'."""

        def _list_dir_internal() -> list[RemoteEntry]:
            return [
                RemoteEntry.from_attributes(attr)
                for attr in self._sftp.listdir_attr(path)
                if attr.filename not in (".", "..")
            ]

        entries = self._call(path, _list_dir_internal)
        logger.debug("Listed %d entries in %s", len(entries), path)
        return entries

    def read_file(self, path: str) -> bytes:
        def _read_file_internal() -> bytes:
            with self._sftp.open(path, "rb") as f:
                return f.read()

        data = self._call(path, _read_file_internal)
        logger.debug("Read %d bytes from %s", len(data), path)
        return data

    def write_file(self, path: str, data: bytes, append: bool = False) -> int:
        """Write data, truncating the file unless append is set."""
        mode = "ab" if append else "wb"

        def _write_file_internal() -> None:
            with self._sftp.open(path, mode) as f:
                f.write(data)

        self._call(path, _write_file_internal)
        logger.debug("Wrote %d bytes to %s (mode=%s)", len(data), path, mode)
        return len(data)

    def mkdir(self, path: str) -> None:
        """Create a single directory level."""
        self._call(path, lambda: self._sftp.mkdir(path))
        logger.debug("Created directory: %s", path)


class SessionFactory:
    """Opens a new SFTPSession per call to connect(). Sessions are never reused."""

    def __init__(self, credentials: Credentials, conn_config: ConnectionConfig | None = None):
        self.credentials = credentials
        self.conn_config = conn_config or ConnectionConfig()

    def _host_key_policy(self) -> paramiko.MissingHostKeyPolicy:
        policy = self.conn_config.host_key_policy
        if policy == "accept":
            return paramiko.AutoAddPolicy()
        if policy == "tofu":
            return TrustOnFirstUsePolicy()
        if policy == "reject":
            return paramiko.RejectPolicy()
        raise ValueError(f"Unknown host key policy: {policy}")

    def _connect_kwargs(self) -> dict:
        creds = self.credentials
        connect_kwargs: dict = {
            "hostname": creds.host,
            "port": creds.port,
            "timeout": self.conn_config.timeout_seconds,
        }
        if creds.username:
            connect_kwargs["username"] = creds.username

        # Auth priority: key file -> password -> agent/default keys
        if creds.key_file:
            connect_kwargs["key_filename"] = os.path.expanduser(creds.key_file)
            if creds.key_passphrase:
                connect_kwargs["passphrase"] = creds.key_passphrase
            if creds.password:
                connect_kwargs["password"] = creds.password
            connect_kwargs["look_for_keys"] = False
            connect_kwargs["allow_agent"] = False
        elif creds.password:
            connect_kwargs["password"] = creds.password
            connect_kwargs["look_for_keys"] = False
            connect_kwargs["allow_agent"] = False
        else:
            connect_kwargs["look_for_keys"] = True
            connect_kwargs["allow_agent"] = True
        return connect_kwargs

    def connect(self) -> SFTPSession:
        """
        Establish an SSH connection and open an SFTP session on it.

        Raises:
            ConnectionError: On any transport or authentication failure.
        """
        creds = self.credentials
        ssh = paramiko.SSHClient()
        try:
            if self.conn_config.host_key_policy != "accept":
                ssh.load_system_host_keys()
                if KNOWN_HOSTS_PATH.exists():
                    ssh.load_host_keys(str(KNOWN_HOSTS_PATH))
            ssh.set_missing_host_key_policy(self._host_key_policy())

            logger.debug("Connecting to SSH %s:%d", creds.host, creds.port)
            ssh.connect(**self._connect_kwargs())
            sftp = ssh.open_sftp()
        except paramiko.AuthenticationException as e:
            ssh.close()
            logger.error("SSH authentication failed for %s@%s: %s", creds.username, creds.host, e)
            raise ConnectionError(f"SSH authentication failed: {e}") from e
        except TimeoutError as e:
            ssh.close()
            logger.error("SSH connection timeout: %s", e)
            raise ConnectionError(f"SSH connection timeout: {e}") from e
        except OSError as e:
            ssh.close()
            logger.error("SSH connection failed: %s", e)
            raise ConnectionError(f"SSH connection failed: {e}") from e
        except paramiko.SSHException as e:
            ssh.close()
            logger.error("SSH error: %s", e)
            raise ConnectionError(f"SSH error: {e}") from e

        logger.info("Connected to SSH server %s:%d", creds.host, creds.port)
        return SFTPSession(ssh, sftp)
