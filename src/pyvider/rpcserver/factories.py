"""Factory Functions for Pyvider RPC Server
=========================================

Convenience entry points that assemble a configured `RPCServer` in one call.
"""

from collections.abc import Iterable
from typing import Any

from pyvider.telemetry import logger

from pyvider.rpcserver.config import ServerConfig
from pyvider.rpcserver.runtime import GrpcRuntime
from pyvider.rpcserver.server import RPCServer
from pyvider.rpcserver.types import RuntimeFactoryType

RegistrationType = type | tuple[type, dict[str, Any]]


def rpc_server(
    services: Iterable[type] = (),
    interceptors: Iterable[RegistrationType] = (),
    hooks: Iterable[RegistrationType] = (),
    config: ServerConfig | None = None,
    runtime_factory: RuntimeFactoryType = GrpcRuntime,
) -> RPCServer:
    """
    Create a server with its services, interceptors and hooks registered.

    Interceptors and hooks are given either as a type or as a
    ``(type, options)`` pair and are registered in the given order.

    Args:
        services: Service types to register
        interceptors: Interceptors, in execution order
        hooks: Lifecycle hooks, in execution order
        config: Default configuration; the process-wide one if omitted
        runtime_factory: Builds the runtime at boot

    Returns:
        A configured RPCServer, ready for serve() or start()

    Example:
        ```python
        server = rpc_server(
            services=[ThingService],
            interceptors=[(RequestLoggingInterceptor, {"log_level": "debug"})],
        )
        server.start({"bind_address": "127.0.0.1:50051"})
        ```
    """
    server = RPCServer(
        config=config if config is not None else ServerConfig.instance(),
        runtime_factory=runtime_factory,
    )

    for service in services:
        server.add_service(service)
    for klass, options in map(_registration, interceptors):
        server.add_interceptor(klass, options)
    for klass, options in map(_registration, hooks):
        server.add_hook(klass, options)

    logger.debug(
        f"🧰🚀✅ Created RPCServer with {len(server.services)} service(s), "
        f"{len(server.list_interceptors())} interceptor(s), {len(server.list_hooks())} hook(s)"
    )
    return server


def _registration(item: RegistrationType) -> tuple[type, dict[str, Any] | None]:
    if isinstance(item, tuple):
        klass, options = item
        return klass, options
    return item, None

# 🐍🏗️🛎️
