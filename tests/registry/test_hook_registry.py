# tests/registry/test_hook_registry.py

from types import SimpleNamespace

import pytest

from pyvider.rpcserver.exception import HookNotFoundError
from pyvider.rpcserver.hooks import Hook, HookRegistry

from tests.fixtures.mocks import RecordingHook


class StartOnlyHook(Hook):
    def before_server_start(self, server):
        self.options["events"].append(("start-only", server.started))


class FailingHook(Hook):
    def before_server_start(self, server):
        raise RuntimeError("hook failed")


@pytest.mark.asyncio
async def test_execute_runs_hooks_in_order():
    events = []
    registry = HookRegistry()
    registry.add(RecordingHook, {"events": events})
    registry.add(StartOnlyHook, {"events": events})
    server = SimpleNamespace(started=False)

    await registry.execute("before_server_start", server=server)
    await registry.execute("after_server_stop", server=server)

    assert events == [
        ("before_server_start", False),
        ("start-only", False),
        ("after_server_stop", False),
    ]


@pytest.mark.asyncio
async def test_execute_unknown_event():
    with pytest.raises(ValueError, match="Unknown lifecycle event"):
        await HookRegistry().execute("on_request", server=None)


@pytest.mark.asyncio
async def test_execute_propagates_hook_errors_and_stops():
    events = []
    registry = HookRegistry()
    registry.add(FailingHook)
    registry.add(RecordingHook, {"events": events})

    with pytest.raises(RuntimeError, match="hook failed"):
        await registry.execute("before_server_start", server=SimpleNamespace(started=False))

    assert events == []


def test_remove_missing_hook():
    registry = HookRegistry()
    registry.add(RecordingHook, {"events": []})
    with pytest.raises(HookNotFoundError, match="Hook StartOnlyHook not found"):
        registry.remove(StartOnlyHook)
    assert registry.list() == [RecordingHook]


def test_prepare_instantiates_with_options():
    registry = HookRegistry()
    registry.add(StartOnlyHook, {"events": [], "label": "x"})
    (hook,) = registry.prepare()
    assert isinstance(hook, StartOnlyHook)
    assert hook.options["label"] == "x"
