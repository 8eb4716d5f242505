"""
Service registration for the RPC server.

`Service` is a convenience base for servicers generated by grpcio-tools and
`ServiceSet` is the duplicate-free collection of service types a server
registers with its runtime at boot.
"""

from collections.abc import Callable, Iterator
from typing import Any, ClassVar

from attrs import define, field

from pyvider.telemetry import logger

from pyvider.rpcserver.types import is_valid_service


class Service:
    """
    Base class for servicers registered by type.

    Subclasses set `registrar` to the generated ``add_XServicer_to_server``
    function, or override `add_to_server` for custom registration::

        class ThingService(Service, thing_pb2_grpc.ThingServiceServicer):
            registrar = staticmethod(thing_pb2_grpc.add_ThingServiceServicer_to_server)
    """

    registrar: ClassVar[Callable[[Any, Any], None] | None] = None

    @classmethod
    def add_to_server(cls, server: Any) -> None:
        """
        Instantiate the servicer and attach it to a gRPC server.

        Raises:
            TypeError: If the subclass declares no registrar
        """
        if cls.registrar is None:
            raise TypeError(
                f"{cls.__name__} declares no registrar; set `registrar` or override add_to_server()"
            )
        cls.registrar(cls(), server)
        logger.debug(f"🛎️📡 Registered service {cls.__name__}")


@define(slots=False)
class ServiceSet:
    """Insertion-ordered set of service types, compared by identity."""

    _services: list[type] = field(init=False, factory=list)

    def add(self, service: type) -> bool:
        """
        Add a service type unless it is already present.

        Args:
            service: The service type

        Returns:
            True if the service was added, False if it was already registered

        Raises:
            TypeError: If `service` is not a registrable service type
        """
        if not is_valid_service(service):
            logger.error(f"🛎️❌ {service!r} is not a registrable service type")
            raise TypeError(f"{service!r} is not a service type exposing add_to_server()")
        if service in self:
            logger.debug(f"🛎️ Service {service.__name__} already registered; skipping")
            return False
        self._services.append(service)
        logger.debug(f"🛎️➕ Added service {service.__name__}", extra={"count": len(self._services)})
        return True

    def count(self) -> int:
        return len(self._services)

    def __len__(self) -> int:
        return len(self._services)

    def __iter__(self) -> Iterator[type]:
        return iter(list(self._services))

    def __contains__(self, service: object) -> bool:
        return any(registered is service for registered in self._services)

# 🐍🏗️🛎️
