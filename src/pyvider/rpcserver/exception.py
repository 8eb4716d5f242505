"""
Custom Exceptions for Pyvider RPC Server.

This module defines the hierarchy of exceptions raised by the server lifecycle
controller, its registries and its configuration layer.
"""


class RPCServerError(Exception):
    """Base class for all RPC server-specific errors."""
    def __init__(self, message: str, code: int | None = None, hint: str | None = None) -> None:
        """
        Initialize RPCServerError.

        Args:
            message: The error message.
            code: An optional error code.
            hint: An optional hint for resolving the error.
        """
        super().__init__(message)
        self.code = code
        self.hint = hint

    def __str__(self) -> str:
        """Return a string representation of the error, including the hint if available."""
        base_message = super().__str__()
        if self.hint:
            return f"{base_message} (Hint: {self.hint})"
        return base_message


class ConfigError(RPCServerError):
    """Configuration-related errors."""


class ServerAlreadyStartedError(RPCServerError):
    """Raised when server configuration is mutated after the server has started."""


class NotFoundError(RPCServerError, LookupError):
    """Raised when a registry lookup targets a type that is not registered."""


class InterceptorNotFoundError(NotFoundError):
    """The targeted interceptor type is not in the interceptor registry."""


class HookNotFoundError(NotFoundError):
    """The targeted hook type is not in the hook registry."""


class RuntimeStartError(RPCServerError):
    """The underlying gRPC runtime could not be bound or started."""

# 🐍🏗️🛎️
