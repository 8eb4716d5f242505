"""Type definitions for the Pyvider RPC server.

This module provides the Protocol classes and type aliases describing the
contracts between the server lifecycle controller and its collaborators:
the services it registers and the gRPC runtime it drives.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol as TypeProtocol, TypeGuard, runtime_checkable

import grpc

from pyvider.telemetry import logger


@runtime_checkable
class RPCService(TypeProtocol):
    """
    Protocol for service types registered with a server.

    A service type knows how to attach an instance of itself to a gRPC
    server, typically through a generated ``add_XServicer_to_server``.
    """

    @classmethod
    def add_to_server(cls, server: Any) -> None:
        ...


@runtime_checkable
class RPCServerRuntime(TypeProtocol):
    """
    Protocol for the network runtime driven by the server lifecycle controller.

    The runtime owns socket binding, dispatch and the accept loop.
    """

    def bind(self, address: str, credentials: grpc.ServerCredentials | None = None) -> int:
        """Bind an address and return the bound port."""
        ...

    def register_handler(self, service: type) -> None:
        """Attach a service type to the runtime."""
        ...

    async def run(self) -> None:
        """Serve until stopped; returns only once the runtime has fully stopped."""
        ...

    async def stop(self, grace: float | None = None) -> None:
        """Request a graceful stop of the accept loop."""
        ...

    async def wait_for_ready(self, timeout: float | None = None) -> None:
        """Wait until the runtime accepts connections."""
        ...


BootOptionsType = Mapping[str, Any]
InterceptorChainType = Sequence[grpc.aio.ServerInterceptor]
RuntimeFactoryType = Callable[..., RPCServerRuntime]


def is_valid_service(obj: Any) -> TypeGuard[type[RPCService]]:
    """
    TypeGuard that checks if an object is a service type the server can register.

    Args:
        obj: The object to check

    Returns:
        True if `obj` is a class exposing a callable `add_to_server`
    """
    logger.debug("🧰🔍✅ Checking if object is a registrable service type")
    return isinstance(obj, type) and callable(getattr(obj, "add_to_server", None))


def is_valid_runtime(obj: Any) -> TypeGuard[RPCServerRuntime]:
    """
    TypeGuard that checks if an object implements the RPCServerRuntime protocol.

    Args:
        obj: The object to check

    Returns:
        True if the object implements RPCServerRuntime, False otherwise
    """
    logger.debug("🧰🔍✅ Checking if object implements RPCServerRuntime protocol")
    return isinstance(obj, RPCServerRuntime)

# 🐍🏗️🛎️
