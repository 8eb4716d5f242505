"""
Signal-driven shutdown of a running server.

The `ShutdownCoordinator` is a background task living for exactly one server
run. It waits for SIGINT/SIGTERM (or a programmatic request), stops the runtime
once, and is joined by the server before `serve()` returns.
"""

import asyncio
import signal

from attrs import define, field

from pyvider.telemetry import logger

from pyvider.rpcserver.types import RPCServerRuntime

SHUTDOWN_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


@define(slots=False)
class ShutdownCoordinator:
    """
    Stops a runtime when a termination signal arrives.

    Attributes:
        runtime: The runtime to stop
        grace: Grace period handed to the runtime's stop
        signals: Signals that trigger the shutdown
    """

    runtime: RPCServerRuntime = field()
    grace: float | None = field(default=None)
    signals: tuple[signal.Signals, ...] = field(default=SHUTDOWN_SIGNALS)

    _shutdown_event: asyncio.Event = field(init=False, factory=asyncio.Event)
    _stopped_event: asyncio.Event = field(init=False, factory=asyncio.Event)
    _task: asyncio.Task | None = field(init=False, default=None)
    _loop: asyncio.AbstractEventLoop | None = field(init=False, default=None)
    _installed: list[signal.Signals] = field(init=False, factory=list)

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_event.is_set()

    def spawn(self) -> asyncio.Task:
        """
        Install the signal handlers and start the coordinator task.

        Must be called from the event loop the runtime runs on.

        Returns:
            The coordinator task
        """
        self._loop = asyncio.get_running_loop()
        self._register_signal_handlers(self._loop)
        self._task = self._loop.create_task(self._watch(), name="RPCServer-shutdown-coordinator")
        return self._task

    def request_shutdown(self, sig: signal.Signals | None = None) -> None:
        """
        Ask the coordinator to stop the runtime.

        Used as the signal handler callback; requests after the first one are
        absorbed while the stop is in flight.

        Args:
            sig: The signal that triggered the request, if any
        """
        source = sig.name if sig is not None else "stop()"
        if self._shutdown_event.is_set():
            logger.info(f"🛑 Shutdown already in progress; ignoring {source}.")
            return
        logger.info(f"🛑 Shutdown requested by {source}.")
        self._shutdown_event.set()

    async def wait_stopped(self) -> None:
        """Wait until the coordinator has finished."""
        await self._stopped_event.wait()

    async def join(self) -> None:
        """
        Wait for the coordinator task to finish, cancelling it if no shutdown
        was requested.
        """
        if self._task is None:
            return
        if not self._task.done() and not self.shutdown_requested:
            self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        # A task cancelled before its first step never reaches _watch's finally.
        self._remove_signal_handlers()
        self._stopped_event.set()
        logger.debug("🛑 Shutdown coordinator joined.")

    async def _watch(self) -> None:
        try:
            await self._shutdown_event.wait()
            try:
                await self.runtime.stop(self.grace)
                logger.debug("🛑✅ Runtime stop completed.")
            except Exception as e:
                logger.error("🛑❌ Error stopping runtime", extra={"error": str(e)})
        finally:
            self._remove_signal_handlers()
            self._stopped_event.set()

    def _register_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in self.signals:
            try:
                loop.add_signal_handler(sig, self.request_shutdown, sig)
                self._installed.append(sig)
                logger.debug(f"🛑 Signal handler registered for {sig.name}.")
            except (NotImplementedError, RuntimeError, ValueError) as e:
                logger.warning(
                    f"🛑⚠️ Cannot handle {sig.name} here; use stop() to shut down.",
                    extra={"error": str(e)},
                )

    def _remove_signal_handlers(self) -> None:
        if self._loop is None:
            return
        while self._installed:
            sig = self._installed.pop()
            self._loop.remove_signal_handler(sig)
            logger.debug(f"🛑 Signal handler removed for {sig.name}.")

# 🐍🏗️🛎️
