"""
RPC Server Lifecycle Controller.

This module defines `RPCServer`, which collects the services, interceptors and
lifecycle hooks of a gRPC server before boot, starts the runtime with merged
boot options, and blocks until a termination signal (or `stop()`) shuts it
down gracefully.
"""

import asyncio
import enum
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from attrs import define, field

from pyvider.telemetry import logger

from pyvider.rpcserver.config import ServerConfig
from pyvider.rpcserver.exception import ServerAlreadyStartedError
from pyvider.rpcserver.hooks import HookRegistry
from pyvider.rpcserver.interceptors import InterceptorRegistry
from pyvider.rpcserver.options import merge_boot_options
from pyvider.rpcserver.runtime import GrpcRuntime
from pyvider.rpcserver.services import ServiceSet
from pyvider.rpcserver.shutdown import ShutdownCoordinator
from pyvider.rpcserver.types import RPCServerRuntime, RuntimeFactoryType


class ServerState(enum.Enum):
    NOT_STARTED = "not_started"
    STARTED = "started"


@define(slots=False)
class RPCServer:
    """
    Lifecycle controller for a gRPC server.

    The server is configured while NOT_STARTED: services, interceptors and
    hooks can be added, repositioned and removed. `serve()` boots the runtime
    and moves the server to STARTED, after which every configuration mutator
    raises `ServerAlreadyStartedError`. A server instance serves once.

    Attributes:
        config: Default configuration; boot options start from
            `config.rpc_server_options()`
        runtime_factory: Builds the runtime as
            ``runtime_factory(options, interceptors=chain)``
        interceptors: Initial interceptor registry
        hooks: Initial lifecycle hook registry
    """

    config: ServerConfig = field(factory=ServerConfig.instance)
    runtime_factory: RuntimeFactoryType = field(default=GrpcRuntime)
    _interceptors: InterceptorRegistry = field(factory=InterceptorRegistry)
    _hooks: HookRegistry = field(factory=HookRegistry)

    _services: ServiceSet = field(init=False, factory=ServiceSet)
    _state: ServerState = field(init=False, default=ServerState.NOT_STARTED)
    _state_lock: threading.Lock = field(init=False, factory=threading.Lock)
    _runtime: RPCServerRuntime | None = field(init=False, default=None)
    _coordinator: ShutdownCoordinator | None = field(init=False, default=None)
    _options: dict[str, Any] | None = field(init=False, default=None)
    _port: int | None = field(init=False, default=None)
    _booted: asyncio.Event = field(init=False, factory=asyncio.Event)

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def started(self) -> bool:
        return self._state is ServerState.STARTED

    @property
    def services(self) -> list[type]:
        """Registered service types, in registration order."""
        return list(self._services)

    @property
    def options(self) -> dict[str, Any] | None:
        """Effective boot options, once the server has booted."""
        return self._options

    @property
    def port(self) -> int | None:
        """Port the runtime is bound to, once the server has booted."""
        return self._port

    # Services

    def add_service(self, service: type) -> None:
        """
        Register a service type. Adding an already registered type is a no-op.

        Raises:
            ServerAlreadyStartedError: If the server has started
        """
        with self._guard("add_service"):
            self._services.add(service)

    # Interceptors

    def add_interceptor(self, interceptor: type, options: dict[str, Any] | None = None) -> None:
        """
        Append an interceptor to the end of the chain.

        Raises:
            ServerAlreadyStartedError: If the server has started
        """
        with self._guard("add_interceptor"):
            self._interceptors.add(interceptor, options)

    def insert_interceptor_before(
        self, before: type, interceptor: type, options: dict[str, Any] | None = None
    ) -> None:
        """
        Insert an interceptor immediately before another one.

        Raises:
            ServerAlreadyStartedError: If the server has started
            InterceptorNotFoundError: If `before` is not registered
        """
        with self._guard("insert_interceptor_before"):
            self._interceptors.insert_before(before, interceptor, options)

    def insert_interceptor_after(
        self, after: type, interceptor: type, options: dict[str, Any] | None = None
    ) -> None:
        """
        Insert an interceptor immediately after another one.

        Raises:
            ServerAlreadyStartedError: If the server has started
            InterceptorNotFoundError: If `after` is not registered
        """
        with self._guard("insert_interceptor_after"):
            self._interceptors.insert_after(after, interceptor, options)

    def remove_interceptor(self, interceptor: type) -> None:
        """
        Remove an interceptor from the chain.

        Raises:
            ServerAlreadyStartedError: If the server has started
            InterceptorNotFoundError: If `interceptor` is not registered
        """
        with self._guard("remove_interceptor"):
            self._interceptors.remove(interceptor)

    def clear_interceptors(self) -> None:
        with self._guard("clear_interceptors"):
            self._interceptors.clear()

    def list_interceptors(self) -> list[type]:
        """Interceptor types in execution order. Allowed in any state."""
        return self._interceptors.list()

    # Hooks

    def add_hook(self, hook: type, options: dict[str, Any] | None = None) -> None:
        with self._guard("add_hook"):
            self._hooks.add(hook, options)

    def remove_hook(self, hook: type) -> None:
        with self._guard("remove_hook"):
            self._hooks.remove(hook)

    def clear_hooks(self) -> None:
        with self._guard("clear_hooks"):
            self._hooks.clear()

    def list_hooks(self) -> list[type]:
        return self._hooks.list()

    # Lifecycle

    def start(self, overrides: Mapping[str, Any] | None = None) -> None:
        """
        Boot the server and block the calling thread until it has stopped.

        Runs `serve()` on a fresh event loop. Signal handling requires this to
        be called from the main thread; elsewhere the server can only be
        stopped through `stop()`, and SIGINT/SIGTERM keep their default
        behaviour of terminating the process.

        Args:
            overrides: Boot options overriding the configured defaults
        """
        asyncio.run(self.serve(overrides))

    async def serve(self, overrides: Mapping[str, Any] | None = None) -> None:
        """
        Boot the server and serve until a shutdown is requested.

        This method:
        1. Merges the recognized overrides into the configured boot options
        2. Runs the before_server_start hooks
        3. Builds the runtime with the prepared interceptor chain, binds it
           and registers every service
        4. Marks the server STARTED and spawns the shutdown coordinator
        5. Blocks in the runtime's accept loop until it stops
        6. Joins the coordinator and runs the after_server_stop hooks

        Args:
            overrides: Boot options overriding the configured defaults; keys
                outside BOOT_OPTION_SCHEMA are ignored

        Raises:
            ServerAlreadyStartedError: If this server has already been started
            RuntimeStartError: If the runtime cannot be bound
        """
        with self._state_lock:
            self._ensure_not_started("serve")

        options = merge_boot_options(self.config.rpc_server_options(), overrides)
        await self._hooks.execute("before_server_start", server=self)

        with self._guard("serve"):
            runtime = self._boot(options)
            self._runtime = runtime
            self._options = options
            self._state = ServerState.STARTED

        self._coordinator = ShutdownCoordinator(runtime=runtime, grace=options.get("grace_period"))
        self._coordinator.spawn()
        self._booted.set()
        logger.info(
            f"🛎️🚀 Serving {len(self._services)} service(s) on {options['bind_address']}",
            extra={"port": self._port, "interceptors": [i.__name__ for i in self.list_interceptors()]},
        )

        try:
            await runtime.run()
        finally:
            await self._coordinator.join()
            logger.info("🛎️🛑 Server stopped.")
            await self._hooks.execute("after_server_stop", server=self)

    async def stop(self) -> None:
        """
        Request a graceful shutdown and wait for the runtime stop to complete.

        Takes the same path as a termination signal. Does nothing if the
        server has not booted.
        """
        if self._coordinator is None:
            logger.warning("🛎️⚠️ stop() called on a server that is not serving.")
            return
        self._coordinator.request_shutdown()
        await self._coordinator.wait_stopped()

    async def wait_for_server_ready(self, timeout: float = 5.0) -> None:
        """
        Wait until the server has booted and its runtime accepts connections.

        Raises:
            TimeoutError: If the server does not become ready within `timeout`
        """
        try:
            await asyncio.wait_for(self._wait_ready(), timeout)
        except asyncio.TimeoutError:
            logger.error("🛎️❌ Server did not become ready within timeout.", extra={"timeout": timeout})
            raise TimeoutError("Server failed to become ready") from None

    async def _wait_ready(self) -> None:
        await self._booted.wait()
        if self._runtime is not None:
            await self._runtime.wait_for_ready()

    def _boot(self, options: dict[str, Any]) -> RPCServerRuntime:
        chain = self._interceptors.prepare()
        runtime = self.runtime_factory(options, interceptors=chain)
        self._port = runtime.bind(options["bind_address"], options.get("credentials"))
        for service in self._services:
            runtime.register_handler(service)
        logger.debug(f"🛎️✅ Runtime built with {len(chain)} interceptor(s) and {len(self._services)} service(s).")
        return runtime

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        with self._state_lock:
            self._ensure_not_started(operation)
            yield

    def _ensure_not_started(self, operation: str) -> None:
        if self._state is ServerState.STARTED:
            logger.error(f"🛎️❌ {operation}() called after the server started")
            raise ServerAlreadyStartedError(
                f"Cannot {operation}: the server has already been started.",
                hint="Configure services, interceptors and hooks before calling serve().",
            )

# 🐍🏗️🛎️
