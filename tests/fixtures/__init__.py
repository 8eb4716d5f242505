# tests/fixtures/__init__.py

from tests.fixtures.mocks import (
    AuditInterceptor,
    AuthInterceptor,
    ExplodingService,
    FakeRuntime,
    RecordingHook,
    RecordingInterceptor,
    ThingService,
    TimingInterceptor,
    TracingInterceptor,
    mock_runtime,
    mock_runtime_factory,
)
from tests.fixtures.server import (
    local_overrides,
    server_config,
    mocked_server,
)

__all__ = [
    # mocks
    "AuditInterceptor",
    "AuthInterceptor",
    "ExplodingService",
    "FakeRuntime",
    "RecordingHook",
    "RecordingInterceptor",
    "ThingService",
    "TimingInterceptor",
    "TracingInterceptor",
    "mock_runtime",
    "mock_runtime_factory",
    # server
    "local_overrides",
    "server_config",
    "mocked_server",
]
