"""Configuration management for Pyvider RPC Server.

This module provides the environment-driven configuration for the RPC server
lifecycle controller. It includes:

1. A configuration schema with default values and validation
2. Environment variable reading with appropriate type conversion
3. A process-wide default configuration object, handed explicitly to servers
4. Simplified configuration helpers for common settings

Usage:
    # Read a configuration value
    from pyvider.rpcserver.config import ServerConfig
    address = ServerConfig.instance().bind_address()

    # Use the simplified configuration helper
    from pyvider.rpcserver import configure
    configure(bind_address="127.0.0.1:50051", pool_size=8)

    # Hand the defaults to a server explicitly
    server = RPCServer(config=ServerConfig.instance())
"""

import json
import os
from pathlib import Path
from typing import Any, cast

import grpc

from pyvider.telemetry import logger

from pyvider.rpcserver.exception import ConfigError

# Compression algorithms accepted by RPC_SERVER_COMPRESSION
COMPRESSION_ALGORITHMS: dict[str, grpc.Compression] = {
    "none": grpc.Compression.NoCompression,
    "deflate": grpc.Compression.Deflate,
    "gzip": grpc.Compression.Gzip,
}

# Configuration Schema: Defines environment variables, requirements, defaults, and descriptions
CONFIG_SCHEMA: dict[str, dict[str, Any]] = {
    "RPC_SERVER_BIND_ADDRESS": {
        "required": True,
        "default": "0.0.0.0:9001",
        "description": "host:port the server binds to.",
        "type": "str",
    },
    "RPC_SERVER_POOL_SIZE": {
        "required": True,
        "default": 30,
        "description": "Worker threads used to run synchronous handlers.",
        "type": "int",
    },
    "RPC_SERVER_MAX_WAITING_REQUESTS": {
        "required": True,
        "default": 60,
        "description": "Maximum number of concurrent RPCs before new calls are rejected.",
        "type": "int",
    },
    "RPC_SERVER_GRACE_PERIOD": {
        "required": True,
        "default": 5.0,
        "description": "Seconds in-flight RPCs are given to finish on shutdown.",
        "type": "float",
    },
    "RPC_SERVER_COMPRESSION": {
        "required": True,
        "default": "none",
        "description": "Default compression algorithm for responses.",
        "type": "str",
        "valid_values": list(COMPRESSION_ALGORITHMS),
    },
    "RPC_SERVER_MAX_RECEIVE_MESSAGE_LENGTH": {
        "required": True,
        "default": 4 * 1024 * 1024,
        "description": "Maximum inbound message size in bytes.",
        "type": "int",
    },
    "RPC_SERVER_MAX_SEND_MESSAGE_LENGTH": {
        "required": True,
        "default": 4 * 1024 * 1024,
        "description": "Maximum outbound message size in bytes.",
        "type": "int",
    },
    "RPC_SERVER_USE_SSL": {
        "required": True,
        "default": "false",
        "description": "Serve with TLS credentials built from the SSL cert and key (true/false).",
        "type": "bool",
    },
    "RPC_SERVER_SSL_CERT": {
        "required": False,
        "default": None,
        "description": "Server certificate chain in PEM format or 'file://<path>' to read from a file.",
        "type": "str",
    },
    "RPC_SERVER_SSL_KEY": {
        "required": False,
        "default": None,
        "description": "Server private key in PEM format or 'file://<path>' to read from a file.",
        "type": "str",
    },
}


def fetch_env_variable(key: str, meta: dict[str, Any]) -> Any:
    """
    Fetches and processes an environment variable based on schema metadata.

    This function:
    1. Reads the variable from environment or uses default
    2. Handles file-based values (file://) by reading from the file
    3. Converts to the correct type based on schema information

    Args:
        key: The configuration key to fetch
        meta: Metadata about the configuration value

    Returns:
        The processed configuration value

    Raises:
        ConfigError: If file reading fails or type conversion fails
    """
    value = os.getenv(key, meta["default"])

    if value is None:
        return None

    if isinstance(value, str) and value.startswith("file://"):
        file_path = value[7:]
        try:
            logger.debug(f"⚙️📂🚀 Reading file for {key}: {file_path}")
            with open(file_path, "r", encoding="utf-8") as f:
                value = f.read().strip()
            logger.debug(f"⚙️📂✅ Successfully read file for {key}")
        except OSError as e:
            logger.error(f"⚙️📂❌ Failed to read file for {key}: {file_path}", extra={"error": str(e)})
            raise ConfigError(f"Failed to read file for {key}: {file_path}") from e

    return convert_config_value(key, value, meta)


def convert_config_value(key: str, value: Any, meta: dict[str, Any]) -> Any:
    """
    Converts a raw configuration value to the type declared in its schema entry.

    Raises:
        ConfigError: If the value cannot be converted
    """
    try:
        match meta["type"]:
            case "str":
                return value

            case "int":
                if isinstance(value, int) and not isinstance(value, bool):
                    return value
                return int(value)

            case "float":
                if isinstance(value, float):
                    return value
                return float(value)

            case "bool":
                if isinstance(value, bool):
                    return value
                if isinstance(value, str):
                    return value.lower() in ("true", "yes", "1", "on")
                return bool(value)

            case _:
                logger.warning(f"⚙️⚠️ Unknown type {meta['type']} for {key}, returning raw value")
                return value

    except (ValueError, TypeError) as e:
        logger.error(f"⚙️❌ Type conversion failed for {key}", extra={"error": str(e)})
        raise ConfigError(
            f"Invalid value format for configuration key '{key}'. "
            f"Expected type '{meta['type']}', got: {value!r}"
        ) from e


def validate_config_value(key: str, value: Any, meta: dict[str, Any]) -> bool:
    """
    Validates a configuration value against schema requirements.

    Args:
        key: The configuration key
        value: The value to validate
        meta: Schema metadata for the key

    Returns:
        True if valid

    Raises:
        ConfigError: For validation failures
    """
    if meta.get("required", False) and value is None:
        logger.error(f"⚙️❌ Missing required configuration: {key}")
        raise ConfigError(
            f"Missing required configuration: {key}.", hint=meta["description"]
        )

    if value is None:
        return True

    if "valid_values" in meta and value not in meta["valid_values"]:
        logger.error(
            f"⚙️❌ Invalid value for {key}: {value}",
            extra={"valid_values": meta["valid_values"]},
        )
        raise ConfigError(
            f"Invalid value for {key}: {value}. Valid values: {meta['valid_values']}"
        )

    return True


def get_config() -> dict[str, Any]:
    """
    Retrieves all configuration values from environment, applying defaults and validation.

    Returns:
        Dictionary of configuration key-value pairs

    Raises:
        ConfigError: For invalid configuration
    """
    config = {}
    logger.debug("⚙️🔄 Building configuration from environment and defaults")

    for key, meta in CONFIG_SCHEMA.items():
        try:
            value = fetch_env_variable(key, meta)
            validate_config_value(key, value, meta)
            config[key] = value
        except ConfigError as e:
            logger.error(f"⚙️❌ Configuration error for {key}", extra={"error": str(e)})
            raise

    logger.debug(f"⚙️✅ Configuration complete with {len(config)} values")
    return config


class ServerConfig:
    """
    Configuration for Pyvider RPC servers.

    Each instance loads its values from environment variables and schema
    defaults. `instance()` returns the process-wide default that servers
    receive when no explicit configuration is handed to them.

    Attributes:
        config: Dictionary of configuration values
    """

    _instance: "ServerConfig | None" = None

    def __init__(self) -> None:
        """Initialize the configuration from environment and defaults."""
        self.config: dict[str, Any] = {}
        try:
            self.config = get_config()
            logger.debug("⚙️✅ ServerConfig initialized with environment variables")
        except ConfigError as e:
            logger.error("⚙️❌ Error initializing ServerConfig", extra={"error": str(e)})
            raise

    @classmethod
    def instance(cls) -> "ServerConfig":
        """
        Get or create the process-wide default configuration.

        Returns:
            The shared ServerConfig instance
        """
        if cls._instance is None:
            cls._instance = cls()
            logger.debug("⚙️🔄 Created new process-wide ServerConfig instance")
        return cls._instance

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value.

        Args:
            key: The configuration key
            default: Default value if key doesn't exist

        Returns:
            The configuration value or default
        """
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value dynamically.

        The value is validated against the schema after type conversion.

        Args:
            key: The configuration key
            value: The value to set

        Raises:
            KeyError: If key is not in CONFIG_SCHEMA
            ConfigError: If the value does not satisfy the schema
        """
        meta = CONFIG_SCHEMA.get(key)
        if meta is None:
            logger.warning(f"⚙️⚠️ Setting unknown config key: {key}")
            raise KeyError(f"Unknown configuration key: {key}")

        if value is not None:
            value = convert_config_value(key, value, meta)
        validate_config_value(key, value, meta)
        logger.debug(f"⚙️📝 Updating config {key} -> {value}")
        self.config[key] = value

    def bind_address(self) -> str:
        """Address the server binds to, as host:port."""
        return cast(str, self.get("RPC_SERVER_BIND_ADDRESS"))

    def pool_size(self) -> int:
        return cast(int, self.get("RPC_SERVER_POOL_SIZE"))

    def max_waiting_requests(self) -> int:
        return cast(int, self.get("RPC_SERVER_MAX_WAITING_REQUESTS"))

    def grace_period(self) -> float:
        """Seconds in-flight RPCs are allowed to complete during shutdown."""
        return cast(float, self.get("RPC_SERVER_GRACE_PERIOD"))

    def compression(self) -> grpc.Compression:
        return COMPRESSION_ALGORITHMS[self.get("RPC_SERVER_COMPRESSION")]

    def use_ssl(self) -> bool:
        return bool(self.get("RPC_SERVER_USE_SSL"))

    def server_args(self) -> list[tuple[str, Any]]:
        """
        Channel arguments handed to the gRPC server.

        Returns:
            List of (option name, value) pairs
        """
        return [
            ("grpc.max_receive_message_length", self.get("RPC_SERVER_MAX_RECEIVE_MESSAGE_LENGTH")),
            ("grpc.max_send_message_length", self.get("RPC_SERVER_MAX_SEND_MESSAGE_LENGTH")),
        ]

    def server_credentials(self) -> grpc.ServerCredentials | None:
        """
        Build TLS server credentials from the configured certificate and key.

        Returns:
            gRPC server credentials, or None when SSL is disabled

        Raises:
            ConfigError: If SSL is enabled but the certificate or key is missing
        """
        if not self.use_ssl():
            return None

        cert = self.get("RPC_SERVER_SSL_CERT")
        key = self.get("RPC_SERVER_SSL_KEY")
        if not cert or not key:
            logger.error("⚙️🔐❌ SSL enabled without a certificate and key")
            raise ConfigError(
                "RPC_SERVER_USE_SSL is enabled but no certificate/key is configured.",
                hint="Set RPC_SERVER_SSL_CERT and RPC_SERVER_SSL_KEY (PEM or file://<path>).",
            )
        logger.debug("⚙️🔐✅ Building TLS server credentials")
        return grpc.ssl_server_credentials([(key.encode(), cert.encode())])

    def rpc_server_options(self) -> dict[str, Any]:
        """
        Default boot options for servers built from this configuration.

        Returns:
            Mapping with one value per recognized boot option
        """
        return {
            "pool_size": self.pool_size(),
            "max_waiting_requests": self.max_waiting_requests(),
            "server_args": self.server_args(),
            "compression": self.compression(),
            "credentials": self.server_credentials(),
            "bind_address": self.bind_address(),
            "grace_period": self.grace_period(),
        }


def configure(
    bind_address: str | None = None,
    pool_size: int | None = None,
    max_waiting_requests: int | None = None,
    grace_period: float | None = None,
    compression: str | None = None,
    use_ssl: bool | None = None,
    ssl_cert: str | None = None,
    ssl_key: str | None = None,
    **kwargs: Any,
) -> ServerConfig:
    """
    Configure the process-wide server defaults with simplified options.

    Args:
        bind_address: host:port to bind to
        pool_size: Worker threads for synchronous handlers
        max_waiting_requests: Maximum concurrent RPCs
        grace_period: Shutdown grace period in seconds
        compression: One of "none", "deflate", "gzip"
        use_ssl: Enable/disable TLS credentials
        ssl_cert: Server certificate in PEM format
        ssl_key: Server private key in PEM format
        **kwargs: Any additional schema option, named without the RPC_SERVER_ prefix

    Returns:
        The updated process-wide ServerConfig

    Raises:
        KeyError: For options outside the schema
        ConfigError: For invalid configuration values
    """
    logger.debug("⚙️🔄 Running simplified configuration")
    config = ServerConfig.instance()

    settings = {
        "RPC_SERVER_BIND_ADDRESS": bind_address,
        "RPC_SERVER_POOL_SIZE": pool_size,
        "RPC_SERVER_MAX_WAITING_REQUESTS": max_waiting_requests,
        "RPC_SERVER_GRACE_PERIOD": grace_period,
        "RPC_SERVER_COMPRESSION": compression,
        "RPC_SERVER_USE_SSL": use_ssl,
        "RPC_SERVER_SSL_CERT": ssl_cert,
        "RPC_SERVER_SSL_KEY": ssl_key,
    }
    settings.update({f"RPC_SERVER_{key.upper()}": value for key, value in kwargs.items()})

    for key, value in settings.items():
        if value is not None:
            config.set(key, value)

    logger.debug("⚙️✅ Configuration completed successfully")
    return config


def load_config_from_file(config_file: str | Path) -> ServerConfig:
    """
    Load configuration from a file into the environment and rebuild the defaults.

    The file can be:
    - A .env file with KEY=VALUE pairs
    - A JSON file with configuration in JSON format
    - A YAML file with configuration in YAML format

    Args:
        config_file: Path to the configuration file

    Returns:
        The reloaded process-wide ServerConfig

    Raises:
        ConfigError: If the file format is not supported or loading fails
    """
    path = Path(config_file)

    if not path.exists():
        logger.error(f"⚙️❌ Configuration file not found: {path}")
        raise ConfigError(f"Configuration file not found: {path}")

    logger.debug(f"⚙️📂🚀 Loading configuration from {path}")

    match path.suffix.lower():
        case ".env":
            loader = _load_dotenv_file
        case ".json":
            loader = _load_json_file
        case ".yaml" | ".yml":
            loader = _load_yaml_file
        case _:
            logger.error(f"⚙️❌ Unsupported file format: {path.suffix}")
            raise ConfigError(
                f"Unsupported file format: {path.suffix}. Supported formats: .env, .json, .yaml, .yml"
            )

    try:
        for key, value in loader(path).items():
            os.environ[key] = value
            logger.debug(f"⚙️📂✅ Set environment variable: {key}")
        config = ServerConfig.instance()
        config.config = get_config()
    except ConfigError:
        raise
    except Exception as e:
        logger.error(f"⚙️📂❌ Error loading configuration from {path}", extra={"error": str(e)})
        raise ConfigError(f"Error loading configuration from {path}: {e}") from e

    logger.debug(f"⚙️📂✅ Successfully loaded configuration from {path}")
    return config


def _load_dotenv_file(path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        key, value = line.split("=", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        values[key.strip()] = value
    return values


def _load_json_file(path: Path) -> dict[str, str]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return {key: str(value) for key, value in data.items()}


def _load_yaml_file(path: Path) -> dict[str, str]:
    import yaml

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return {key: str(value) for key, value in data.items()}

# 🐍🏗️🛎️
