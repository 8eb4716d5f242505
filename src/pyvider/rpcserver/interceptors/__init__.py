"""
Server interceptors for the Pyvider RPC Server.

This package provides the interceptor registry, the interceptor base class
and the interceptors shipped with the server.
"""

from pyvider.rpcserver.interceptors.base import ServerInterceptor
from pyvider.rpcserver.interceptors.registry import InterceptorRegistry
from pyvider.rpcserver.interceptors.request_logging import RequestLoggingInterceptor

__all__ = [
    "ServerInterceptor",
    "InterceptorRegistry",
    "RequestLoggingInterceptor",
]

# 🐍🏗️🛎️
