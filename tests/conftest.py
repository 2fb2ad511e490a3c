"""
Shared pytest fixtures for sftp_fileops tests.
"""

import errno
import stat as stat_module
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock, patch

import paramiko
import pytest

from sftp_fileops.client import SFTPFileClient
from sftp_fileops.config import ConnectionConfig, Credentials
from sftp_fileops.session import SFTPSession


class FakeRemoteFile:
    """File handle returned by FakeSFTP.open()."""

    def __init__(self, server: "FakeSFTP", path: str, mode: str):
        self._server = server
        self._path = path
        self._mode = mode

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def read(self) -> bytes:
        return bytes(self._server.files[self._path])

    def write(self, data: bytes) -> None:
        if self._path in self._server.fail_write:
            raise IOError(errno.EIO, "Write failed")
        self._server.files[self._path] += data


class FakeSFTP:
    """
    In-memory stand-in for the subset of paramiko.SFTPClient used by the library.

    Errors mirror paramiko: IOError carrying an errno, or no errno for the
    generic SSH_FX_FAILURE status.
    """

    def __init__(self):
        self.dirs: list[str] = ["/", "."]  # "." is the login directory
        self.files: dict[str, bytearray] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_stat: dict[str, int] = {}
        self.fail_list: set[str] = set()
        self.fail_mkdir: set[str] = set()
        self.fail_write: set[str] = set()
        self.close_count = 0

    # Helpers for building trees

    def add_dir(self, path: str) -> None:
        if path not in self.dirs:
            self.dirs.append(path)

    def add_file(self, path: str, data: bytes = b"") -> None:
        self.files[path] = bytearray(data)

    @staticmethod
    def _parent(path: str) -> str:
        if "/" not in path:
            return "."
        return path.rsplit("/", 1)[0] or "/"

    def _attr(self, path: str) -> paramiko.SFTPAttributes:
        attr = paramiko.SFTPAttributes()
        attr.filename = path.rsplit("/", 1)[-1]
        attr.st_mtime = 1718447400
        if path in self.dirs:
            attr.st_mode = stat_module.S_IFDIR | 0o755
            attr.st_size = 4096
        else:
            attr.st_mode = stat_module.S_IFREG | 0o644
            attr.st_size = len(self.files[path])
        return attr

    # paramiko.SFTPClient surface

    def stat(self, path: str) -> paramiko.SFTPAttributes:
        self.calls.append(("stat", path))
        if path in self.fail_stat:
            raise IOError(self.fail_stat[path], "Injected stat failure")
        if path in self.dirs or path in self.files:
            return self._attr(path)
        raise IOError(errno.ENOENT, "No such file")

    def listdir_attr(self, path: str) -> list[paramiko.SFTPAttributes]:
        self.calls.append(("listdir", path))
        if path in self.fail_list:
            raise IOError(errno.EACCES, "Permission denied")
        if path not in self.dirs:
            raise IOError(errno.ENOENT, "No such file")
        children = [p for p in self.dirs if p not in ("/", ".") and self._parent(p) == path]
        children += [p for p in self.files if self._parent(p) == path]
        return [self._attr(p) for p in children]

    def mkdir(self, path: str, mode: int = 0o777) -> None:
        self.calls.append(("mkdir", path))
        if path in self.fail_mkdir:
            raise IOError(errno.EACCES, "Permission denied")
        if path in self.dirs or path in self.files:
            raise IOError("Failure")
        if self._parent(path) not in self.dirs:
            raise IOError(errno.ENOENT, "No such file")
        self.dirs.append(path)

    def open(self, path: str, mode: str = "r") -> FakeRemoteFile:
        self.calls.append(("open:" + mode, path))
        if "r" in mode:
            if path not in self.files:
                raise IOError(errno.ENOENT, "No such file")
        else:
            if self._parent(path) not in self.dirs:
                raise IOError(errno.ENOENT, "No such file")
            if "w" in mode or path not in self.files:
                self.files[path] = bytearray()
        return FakeRemoteFile(self, path, mode)

    def close(self) -> None:
        self.close_count += 1


@pytest.fixture
def credentials() -> Credentials:
    """Password credentials for a test server."""
    return Credentials(
        host="test.ssh.local",
        port=2222,
        username="testuser",
        password="testpass",
    )


@pytest.fixture
def conn_config() -> ConnectionConfig:
    return ConnectionConfig(timeout_seconds=5, host_key_policy="accept")


@pytest.fixture
def fake_sftp() -> FakeSFTP:
    return FakeSFTP()


@pytest.fixture
def mock_ssh_client(fake_sftp: FakeSFTP) -> MagicMock:
    """A mocked paramiko.SSHClient whose open_sftp() returns the fake server."""
    mock = MagicMock(spec=paramiko.SSHClient)
    mock.open_sftp.return_value = fake_sftp
    return mock


@pytest.fixture
def session(mock_ssh_client: MagicMock, fake_sftp: FakeSFTP) -> Generator[SFTPSession, None, None]:
    """An open SFTPSession over the in-memory server."""
    with SFTPSession(mock_ssh_client, fake_sftp) as sess:
        yield sess


@pytest.fixture
def client(
    credentials: Credentials, conn_config: ConnectionConfig, mock_ssh_client: MagicMock
) -> Generator[SFTPFileClient, None, None]:
    """SFTPFileClient whose sessions all talk to the in-memory server."""
    with patch("sftp_fileops.session.paramiko.SSHClient", return_value=mock_ssh_client):
        yield SFTPFileClient(credentials, conn_config)


@pytest.fixture
def tmp_config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Creates a temporary INI configuration file with every section."""
    config_content = """[sftp]
host = files.example.org
port = 2222
username = deploy
password = s3cret
key_file = ~/.ssh/id_ed25519
key_passphrase = phrase
encoding = latin-1

[connection]
timeout_seconds = 45
host_key_policy = TOFU

[logging]
level = DEBUG
file = test.log
console = false
paramiko_level = INFO
"""
    config_path = tmp_path / "test_config.ini"
    config_path.write_text(config_content, encoding="utf-8")
    yield config_path


@pytest.fixture
def minimal_config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Creates a minimal INI configuration file with only the host."""
    config_path = tmp_path / "minimal_config.ini"
    config_path.write_text("[sftp]\nhost = minimal.example.org\n", encoding="utf-8")
    yield config_path
