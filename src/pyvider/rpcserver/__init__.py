"""
Pyvider RPC Server Package.

This package exports the main classes and exceptions for the Pyvider RPC
Server, making them available for direct import from `pyvider.rpcserver`.
"""

from pyvider.rpcserver.config import (
    ServerConfig,
    configure,
    load_config_from_file,
)
from pyvider.rpcserver.exception import (
    ConfigError,
    HookNotFoundError,
    InterceptorNotFoundError,
    NotFoundError,
    RPCServerError,
    RuntimeStartError,
    ServerAlreadyStartedError,
)
from pyvider.rpcserver.hooks import Hook, HookRegistry
from pyvider.rpcserver.interceptors import (
    InterceptorRegistry,
    RequestLoggingInterceptor,
    ServerInterceptor,
)
from pyvider.rpcserver.options import BOOT_OPTION_SCHEMA, merge_boot_options
from pyvider.rpcserver.runtime import GrpcRuntime
from pyvider.rpcserver.server import RPCServer, ServerState
from pyvider.rpcserver.services import Service, ServiceSet
from pyvider.rpcserver.shutdown import ShutdownCoordinator
from pyvider.rpcserver.factories import rpc_server

__all__ = [
    "ServerConfig",
    "configure",
    "load_config_from_file",
    "RPCServerError",
    "ConfigError",
    "ServerAlreadyStartedError",
    "NotFoundError",
    "InterceptorNotFoundError",
    "HookNotFoundError",
    "RuntimeStartError",
    "Hook",
    "HookRegistry",
    "ServerInterceptor",
    "InterceptorRegistry",
    "RequestLoggingInterceptor",
    "BOOT_OPTION_SCHEMA",
    "merge_boot_options",
    "GrpcRuntime",
    "RPCServer",
    "ServerState",
    "Service",
    "ServiceSet",
    "ShutdownCoordinator",
    "rpc_server",
]

# 🐍🏗️🛎️
