"""Live schema source using gRPC server reflection.

Lists the services a running endpoint exposes, resolves each one with a
``file_containing_symbol`` request and reads method names from the returned
``FileDescriptorProto``. Reflection's own services are left out, and services
the server cannot resolve are skipped.
"""

from __future__ import annotations

from collections.abc import Callable

import grpc
import structlog
from google.protobuf import descriptor_pb2
from grpc_reflection.v1alpha import reflection_pb2, reflection_pb2_grpc

from protodiff.core.errors import ReflectionError
from protodiff.engines.drift_scanner.models import SchemaDescriptor, ServiceDescriptor
from protodiff.engines.schema_sources.descriptors import qualify

log = structlog.get_logger("protodiff.engine")

REFLECTION_SERVICES = frozenset(
    {
        "grpc.reflection.v1alpha.ServerReflection",
        "grpc.reflection.v1.ServerReflection",
    }
)


class ReflectionClient:
    """Fetch a live :class:`SchemaDescriptor` from ``host:port``."""

    def __init__(
        self,
        timeout: float = 10.0,
        channel_factory: Callable[[str], grpc.aio.Channel] | None = None,
    ) -> None:
        self._timeout = timeout
        self._channel_factory = channel_factory or grpc.aio.insecure_channel

    async def fetch_schema(self, ref: str) -> SchemaDescriptor:
        channel = self._channel_factory(ref)
        try:
            stub = reflection_pb2_grpc.ServerReflectionStub(channel)
            listing = await self._request(
                stub, reflection_pb2.ServerReflectionRequest(list_services="")
            )
            names = [svc.name for svc in listing.list_services_response.service]

            services: list[ServiceDescriptor] = []
            messages: dict[str, None] = {}
            for name in names:
                if name in REFLECTION_SERVICES:
                    continue
                try:
                    protos = await self._file_containing_symbol(stub, name)
                except ReflectionError as exc:
                    log.debug("reflection.service_unresolved", address=ref, service=name, error=str(exc))
                    continue
                found = _find_service(protos, name)
                if found is None:
                    log.debug("reflection.service_missing_in_file", address=ref, service=name)
                    continue
                fd, svc = found
                services.append(
                    ServiceDescriptor(name=name, methods=tuple(m.name for m in svc.method))
                )
                for msg in fd.message_type:
                    messages.setdefault(qualify(fd.package, msg.name), None)
        finally:
            await channel.close()

        return SchemaDescriptor(services=tuple(services), messages=tuple(messages))

    async def _file_containing_symbol(
        self, stub: reflection_pb2_grpc.ServerReflectionStub, symbol: str
    ) -> list[descriptor_pb2.FileDescriptorProto]:
        response = await self._request(
            stub, reflection_pb2.ServerReflectionRequest(file_containing_symbol=symbol)
        )
        return [
            descriptor_pb2.FileDescriptorProto.FromString(raw)
            for raw in response.file_descriptor_response.file_descriptor_proto
        ]

    async def _request(
        self,
        stub: reflection_pb2_grpc.ServerReflectionStub,
        request: reflection_pb2.ServerReflectionRequest,
    ) -> reflection_pb2.ServerReflectionResponse:
        """Send one request on a fresh reflection stream and return the first reply."""
        call = stub.ServerReflectionInfo(iter([request]), timeout=self._timeout)
        try:
            async for response in call:
                if response.HasField("error_response"):
                    err = response.error_response
                    raise ReflectionError(f"{err.error_message} (code {err.error_code})")
                return response
        except grpc.aio.AioRpcError as exc:
            raise ReflectionError(f"{exc.code().name}: {exc.details()}") from exc
        finally:
            call.cancel()
        raise ReflectionError("reflection stream closed without a response")


def _find_service(
    protos: list[descriptor_pb2.FileDescriptorProto], name: str
) -> tuple[descriptor_pb2.FileDescriptorProto, descriptor_pb2.ServiceDescriptorProto] | None:
    for fd in protos:
        for svc in fd.service:
            if qualify(fd.package, svc.name) == name:
                return fd, svc
    return None
