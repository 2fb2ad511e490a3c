__version__ = "0.1.0"

import logging

# Public API exports
from .client import SFTPFileClient
from .config import (
    ClientConfig,
    ConnectionConfig,
    Credentials,
    LogConfig,
    load_config,
)
from .logger import configure_logging
from .models import FileRecord, RemoteEntry
from .session import SessionFactory, SFTPSession, TrustOnFirstUsePolicy

# No last-resort stderr output when the application configures no logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    # Configuration
    "ClientConfig",
    "ConnectionConfig",
    "Credentials",
    "LogConfig",
    "load_config",
    "configure_logging",
    # Sessions
    "SessionFactory",
    "SFTPSession",
    "TrustOnFirstUsePolicy",
    # Client
    "SFTPFileClient",
    "FileRecord",
    "RemoteEntry",
]
