"""
gRPC runtime adapter.

`GrpcRuntime` wraps a `grpc.aio` server behind the small contract the server
lifecycle controller drives: bind, register services, run the accept loop and
stop it. Socket handling, message framing and dispatch stay inside gRPC.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import grpc
from attrs import define, field

from pyvider.telemetry import logger

from pyvider.rpcserver.exception import RuntimeStartError
from pyvider.rpcserver.types import InterceptorChainType


@define(slots=False)
class GrpcRuntime:
    """
    Runs a `grpc.aio` server built from effective boot options.

    Must be constructed while an event loop is running.

    Attributes:
        options: Effective boot options (see BOOT_OPTION_SCHEMA)
        interceptors: Prepared interceptor chain, in execution order
    """

    options: dict[str, Any] = field()
    interceptors: InterceptorChainType = field(factory=list)

    _server: grpc.aio.Server = field(init=False)
    _executor: ThreadPoolExecutor | None = field(init=False, default=None)
    _ready: asyncio.Event = field(init=False, factory=asyncio.Event)
    _started: bool = field(init=False, default=False)
    _stop_requested: bool = field(init=False, default=False)
    port: int | None = field(init=False, default=None)

    def __attrs_post_init__(self) -> None:
        pool_size = self.options.get("pool_size")
        if pool_size:
            self._executor = ThreadPoolExecutor(
                max_workers=pool_size, thread_name_prefix="RPCServer-worker"
            )
        logger.debug(
            "🛎️⚙️ Creating grpc.aio server",
            extra={"pool_size": pool_size, "interceptors": len(self.interceptors)},
        )
        self._server = grpc.aio.server(
            migration_thread_pool=self._executor,
            interceptors=list(self.interceptors),
            options=list(self.options.get("server_args") or []),
            maximum_concurrent_rpcs=self.options.get("max_waiting_requests"),
            compression=self.options.get("compression"),
        )

    def bind(self, address: str, credentials: grpc.ServerCredentials | None = None) -> int:
        """
        Bind the server to an address.

        Args:
            address: host:port to listen on; port 0 picks a free port
            credentials: Server credentials, or None for an insecure port

        Returns:
            The bound port

        Raises:
            RuntimeStartError: If gRPC cannot bind the address
        """
        try:
            if credentials is not None:
                port = self._server.add_secure_port(address, credentials)
            else:
                port = self._server.add_insecure_port(address)
        except RuntimeError as e:
            logger.error(f"🛎️❌ Failed to bind {address}", extra={"error": str(e)})
            raise RuntimeStartError(f"Failed to bind gRPC server to {address}: {e}") from e

        if port == 0:
            logger.error(f"🛎️❌ Failed to bind {address}: gRPC returned port 0")
            raise RuntimeStartError(f"Failed to bind gRPC server to {address}")

        self.port = port
        logger.debug(f"🛎️🔌 Bound {address} (port {port}, secure={credentials is not None})")
        return port

    def register_handler(self, service: type) -> None:
        service.add_to_server(self._server)

    async def run(self) -> None:
        """
        Start the server and block until it has fully stopped.

        Returns immediately if a stop was requested before the accept loop began.
        """
        if self._stop_requested:
            logger.debug("🛎️ Stop requested before start; not serving.")
            self._shutdown_executor()
            return

        self._started = True
        try:
            await self._server.start()
            self._ready.set()
            logger.debug("🛎️✅ gRPC server started; waiting for termination.")
            await self._server.wait_for_termination()
        finally:
            self._shutdown_executor()
        logger.debug("🛎️ gRPC server terminated.")

    async def stop(self, grace: float | None = None) -> None:
        """
        Gracefully stop the server. Calls after the first are no-ops.

        Args:
            grace: Seconds in-flight RPCs are given to finish; None aborts them
        """
        if self._stop_requested:
            logger.debug("🛎️ Stop already requested; ignoring.")
            return
        self._stop_requested = True

        if self._started:
            logger.debug(f"🛎️🛑 Stopping gRPC server (grace={grace})")
            await self._server.stop(grace)

    async def wait_for_ready(self, timeout: float | None = None) -> None:
        """
        Wait until the server accepts connections.

        Raises:
            TimeoutError: If the server does not start within `timeout`
        """
        try:
            await asyncio.wait_for(self._ready.wait(), timeout)
        except asyncio.TimeoutError:
            logger.error("🛎️❌ gRPC server did not become ready", extra={"timeout": timeout})
            raise TimeoutError("gRPC server failed to become ready") from None

    def _shutdown_executor(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

# 🐍🏗️🛎️
