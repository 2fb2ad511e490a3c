import configparser
from dataclasses import dataclass, field
from pathlib import Path

HOST_KEY_POLICIES = ("accept", "tofu", "reject")


@dataclass(frozen=True)
class Credentials:
    host: str
    port: int = 22
    username: str | None = None
    password: str | None = None
    key_file: str | None = None  # Path to SSH private key
    key_passphrase: str | None = None  # Passphrase for encrypted keys
    encoding: str = "utf-8"  # Used to encode text payloads

    def __repr__(self) -> str:
        # Keep secrets out of logs and tracebacks
        return (
            f"Credentials(host={self.host!r}, port={self.port!r}, "
            f"username={self.username!r}, key_file={self.key_file!r})"
        )


@dataclass
class ConnectionConfig:
    timeout_seconds: int = 30
    host_key_policy: str = "accept"  # "accept", "tofu", or "reject"


@dataclass
class LogConfig:
    level: str = "INFO"
    file: str = ""
    console: bool = False
    paramiko_level: str = "WARNING"  # paramiko logs every packet at DEBUG


@dataclass
class ClientConfig:
    credentials: Credentials
    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    logging: LogConfig = field(default_factory=LogConfig)


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _parse_int(value: str, name: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(
            f"Invalid {name} value in config: '{value}' - must be an integer"
        ) from None


def load_config(config_path: str | None = None, **overrides) -> ClientConfig:
    """
    Load configuration from an INI file and/or keyword overrides.
    Overrides take precedence over the config file.

    Args:
        config_path: Path to the INI configuration file.
        **overrides: Key-value pairs (host, port, username, password, key_file,
            key_passphrase, encoding, timeout_seconds, host_key_policy, level,
            log_file, console, paramiko_level, debug).

    Returns:
        ClientConfig: The populated configuration object.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If required fields are missing or values are invalid.
    """
    # Initialize with defaults
    sftp_config = {
        "host": None,
        "port": 22,
        "username": None,
        "password": None,
        "key_file": None,
        "key_passphrase": None,
        "encoding": "utf-8",
    }
    connection_config = {
        "timeout_seconds": 30,
        "host_key_policy": "accept",
    }
    log_config = {
        "level": "INFO",
        "file": "",
        "console": False,
        "paramiko_level": "WARNING",
    }

    # Parse INI file if provided
    if config_path is not None:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        parser = configparser.ConfigParser()
        parser.read(config_file, encoding="utf-8")

        # Load [sftp] section
        if parser.has_section("sftp"):
            sftp_section = parser["sftp"]
            if sftp_section.get("host"):
                sftp_config["host"] = sftp_section.get("host")
            if sftp_section.get("port"):
                sftp_config["port"] = _parse_int(sftp_section.get("port"), "port")
            for key in ("username", "password", "key_file", "key_passphrase"):
                if sftp_section.get(key):
                    sftp_config[key] = sftp_section.get(key)
            if sftp_section.get("encoding"):
                sftp_config["encoding"] = sftp_section.get("encoding")

        # Load [connection] section
        if parser.has_section("connection"):
            conn_section = parser["connection"]
            if conn_section.get("timeout_seconds"):
                connection_config["timeout_seconds"] = _parse_int(
                    conn_section.get("timeout_seconds"), "timeout_seconds"
                )
            if conn_section.get("host_key_policy"):
                connection_config["host_key_policy"] = conn_section.get(
                    "host_key_policy"
                ).lower()

        # Load [logging] section
        if parser.has_section("logging"):
            log_section = parser["logging"]
            if log_section.get("level"):
                log_config["level"] = log_section.get("level")
            if log_section.get("file"):
                log_config["file"] = log_section.get("file")
            if log_section.get("console"):
                log_config["console"] = _parse_bool(log_section.get("console"))
            if log_section.get("paramiko_level"):
                log_config["paramiko_level"] = log_section.get("paramiko_level")

    # Override with keyword arguments (overrides take precedence)
    for key in ("host", "username", "password", "key_file", "key_passphrase", "encoding"):
        if overrides.get(key) is not None:
            sftp_config[key] = overrides[key] or None
    if overrides.get("port") is not None:
        sftp_config["port"] = _parse_int(str(overrides["port"]), "port")
    if overrides.get("timeout_seconds") is not None:
        connection_config["timeout_seconds"] = _parse_int(
            str(overrides["timeout_seconds"]), "timeout_seconds"
        )
    if overrides.get("host_key_policy") is not None:
        connection_config["host_key_policy"] = overrides["host_key_policy"].lower()
    if overrides.get("level") is not None:
        log_config["level"] = overrides["level"]
    if overrides.get("log_file") is not None:
        log_config["file"] = overrides["log_file"]
    if overrides.get("console") is not None:
        log_config["console"] = bool(overrides["console"])
    if overrides.get("paramiko_level") is not None:
        log_config["paramiko_level"] = overrides["paramiko_level"]
    if overrides.get("debug"):
        log_config["level"] = "DEBUG"
        log_config["console"] = True

    # Validate
    if not sftp_config["host"]:
        raise ValueError("Missing required configuration fields: host")
    if not 1 <= sftp_config["port"] <= 65535:
        raise ValueError(f"Invalid port: {sftp_config['port']}. Must be between 1 and 65535.")
    if connection_config["host_key_policy"] not in HOST_KEY_POLICIES:
        raise ValueError(
            f"Invalid host_key_policy: {connection_config['host_key_policy']}. "
            f"Must be one of: {', '.join(HOST_KEY_POLICIES)}"
        )

    return ClientConfig(
        credentials=Credentials(
            host=sftp_config["host"],
            port=sftp_config["port"],
            username=sftp_config["username"],
            password=sftp_config["password"],
            key_file=sftp_config["key_file"],
            key_passphrase=sftp_config["key_passphrase"],
            encoding=sftp_config["encoding"] or "utf-8",
        ),
        connection=ConnectionConfig(
            timeout_seconds=connection_config["timeout_seconds"],
            host_key_policy=connection_config["host_key_policy"],
        ),
        logging=LogConfig(
            level=log_config["level"],
            file=log_config["file"],
            console=log_config["console"],
            paramiko_level=log_config["paramiko_level"],
        ),
    )
