# tests/core/test_types.py

from pyvider.rpcserver.runtime import GrpcRuntime
from pyvider.rpcserver.types import is_valid_runtime, is_valid_service

from tests.fixtures.mocks import ExplodingService, FakeRuntime, ThingService


def test_is_valid_service_accepts_service_types():
    assert is_valid_service(ThingService) is True
    assert is_valid_service(ExplodingService) is True


def test_is_valid_service_rejects_instances_and_plain_classes():
    class PlainServicer:
        pass

    assert is_valid_service(ThingService()) is False
    assert is_valid_service(PlainServicer) is False
    assert is_valid_service("ThingService") is False


def test_is_valid_runtime(mocker):
    mock_logger_debug = mocker.patch("pyvider.rpcserver.types.logger.debug")

    assert is_valid_runtime(FakeRuntime({})) is True
    assert is_valid_runtime(object()) is False
    mock_logger_debug.assert_called_with("🧰🔍✅ Checking if object implements RPCServerRuntime protocol")


def test_grpc_runtime_class_implements_runtime_protocol():
    for name in ("bind", "register_handler", "run", "stop", "wait_for_ready"):
        assert callable(getattr(GrpcRuntime, name))
