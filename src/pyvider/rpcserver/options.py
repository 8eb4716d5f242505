"""Boot options recognized by the RPC server runtime.

`BOOT_OPTION_SCHEMA` is the single source of truth for which keys may be
handed to the runtime when a server boots. Overrides outside the schema are
dropped (and logged) rather than rejected.
"""

from typing import Any

from pyvider.telemetry import logger

from pyvider.rpcserver.types import BootOptionsType

BOOT_OPTION_SCHEMA: dict[str, dict[str, Any]] = {
    "pool_size": {
        "type": "int",
        "description": "Worker threads used to run synchronous handlers.",
    },
    "max_waiting_requests": {
        "type": "int",
        "description": "Maximum concurrent RPCs; calls beyond it are rejected with RESOURCE_EXHAUSTED.",
    },
    "server_args": {
        "type": "list[tuple[str, Any]]",
        "description": "gRPC channel arguments passed to the server.",
    },
    "compression": {
        "type": "grpc.Compression",
        "description": "Default response compression.",
    },
    "credentials": {
        "type": "grpc.ServerCredentials",
        "description": "Opaque server credentials; None binds an insecure port.",
    },
    "bind_address": {
        "type": "str",
        "description": "host:port the server listens on.",
    },
    "grace_period": {
        "type": "float",
        "description": "Seconds in-flight RPCs are given to finish on stop.",
    },
}


def recognized_options(overrides: BootOptionsType | None) -> dict[str, Any]:
    """
    Select the overrides whose keys belong to BOOT_OPTION_SCHEMA.

    Args:
        overrides: Caller supplied boot options

    Returns:
        The recognized subset, in the caller's order
    """
    if not overrides:
        return {}

    dropped = [key for key in overrides if key not in BOOT_OPTION_SCHEMA]
    if dropped:
        logger.warning(
            f"🛎️⚙️⚠️ Ignoring unrecognized boot options: {', '.join(map(str, dropped))}",
            extra={"recognized": sorted(BOOT_OPTION_SCHEMA)},
        )
    return {key: value for key, value in overrides.items() if key in BOOT_OPTION_SCHEMA}


def merge_boot_options(
    defaults: BootOptionsType, overrides: BootOptionsType | None = None
) -> dict[str, Any]:
    """
    Merge the recognized overrides on top of the default boot options.

    Args:
        defaults: Default options, normally `ServerConfig.rpc_server_options()`
        overrides: Caller supplied options; unrecognized keys are dropped

    Returns:
        The effective boot options
    """
    effective = dict(defaults)
    effective.update(recognized_options(overrides))
    logger.debug(f"🛎️⚙️ Effective boot options: {sorted(effective)}")
    return effective

# 🐍🏗️🛎️
