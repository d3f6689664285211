"""Tests for the gRPC reflection live source, using a fake reflection stub."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from google.protobuf import descriptor_pb2
from grpc_reflection.v1alpha import reflection_pb2

from protodiff.core.errors import ReflectionError
from protodiff.engines.schema_sources.reflection import ReflectionClient


class FakeCall:
    def __init__(self, responses):
        self._responses = list(responses)
        self.cancelled = False

    def __aiter__(self):
        return self._gen()

    async def _gen(self):
        for r in self._responses:
            yield r

    def cancel(self):
        self.cancelled = True


class FakeStub:
    """Answers list_services and file_containing_symbol from a table of files."""

    def __init__(self, services: list[str], files: dict[str, descriptor_pb2.FileDescriptorProto]):
        self.services = services
        self.files = files
        self.calls: list[FakeCall] = []
        self.timeouts: list[float] = []

    def __call__(self, channel):
        return self

    def ServerReflectionInfo(self, requests, timeout=None):
        request = next(requests)
        self.timeouts.append(timeout)
        response = reflection_pb2.ServerReflectionResponse()
        if request.HasField("list_services"):
            for name in self.services:
                response.list_services_response.service.add(name=name)
        else:
            fd = self.files.get(request.file_containing_symbol)
            if fd is None:
                response.error_response.error_code = 5
                response.error_response.error_message = "symbol not found"
            else:
                response.file_descriptor_response.file_descriptor_proto.append(
                    fd.SerializeToString()
                )
        call = FakeCall([response])
        self.calls.append(call)
        return call


def _greeter_file() -> descriptor_pb2.FileDescriptorProto:
    fd = descriptor_pb2.FileDescriptorProto(name="greeter.proto", package="greeter")
    svc = fd.service.add(name="Greeter")
    svc.method.add(name="SayHello")
    svc.method.add(name="SayHelloAgain")
    fd.message_type.add(name="HelloRequest")
    fd.message_type.add(name="HelloReply")
    return fd


@pytest.fixture
def channel():
    ch = MagicMock()
    ch.close = AsyncMock()
    return ch


def _client(monkeypatch, stub: FakeStub, channel, timeout: float = 3.0) -> tuple[ReflectionClient, list]:
    monkeypatch.setattr(
        "protodiff.engines.schema_sources.reflection.reflection_pb2_grpc.ServerReflectionStub",
        stub,
    )
    targets: list[str] = []

    def factory(target):
        targets.append(target)
        return channel

    return ReflectionClient(timeout=timeout, channel_factory=factory), targets


@pytest.mark.asyncio
async def test_fetch_schema_lists_and_resolves(monkeypatch, channel):
    stub = FakeStub(
        ["greeter.Greeter", "grpc.reflection.v1alpha.ServerReflection"],
        {"greeter.Greeter": _greeter_file()},
    )
    client, targets = _client(monkeypatch, stub, channel)

    schema = await client.fetch_schema("10.0.0.5:9090")

    assert targets == ["10.0.0.5:9090"]
    assert schema.service_names() == ["greeter.Greeter"]
    assert schema.services[0].methods == ("SayHello", "SayHelloAgain")
    assert schema.messages == ("greeter.HelloRequest", "greeter.HelloReply")
    assert stub.timeouts == [3.0, 3.0]
    assert all(c.cancelled for c in stub.calls)
    channel.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_reflection_services_are_skipped(monkeypatch, channel):
    stub = FakeStub(
        ["grpc.reflection.v1.ServerReflection", "grpc.reflection.v1alpha.ServerReflection"], {}
    )
    client, _ = _client(monkeypatch, stub, channel)

    schema = await client.fetch_schema("h:1")

    assert schema.services == ()
    # only the listing request was sent
    assert len(stub.calls) == 1


@pytest.mark.asyncio
async def test_unresolvable_service_is_skipped(monkeypatch, channel):
    stub = FakeStub(["greeter.Greeter", "ghost.Ghost"], {"greeter.Greeter": _greeter_file()})
    client, _ = _client(monkeypatch, stub, channel)

    schema = await client.fetch_schema("h:1")

    assert schema.service_names() == ["greeter.Greeter"]


@pytest.mark.asyncio
async def test_service_absent_from_returned_file_is_skipped(monkeypatch, channel):
    stub = FakeStub(["other.Other"], {"other.Other": _greeter_file()})
    client, _ = _client(monkeypatch, stub, channel)

    schema = await client.fetch_schema("h:1")

    assert schema.services == ()


@pytest.mark.asyncio
async def test_listing_error_raises_and_closes_channel(monkeypatch, channel):
    class BrokenStub(FakeStub):
        def ServerReflectionInfo(self, requests, timeout=None):
            response = reflection_pb2.ServerReflectionResponse()
            response.error_response.error_code = 12
            response.error_response.error_message = "unimplemented"
            return FakeCall([response])

    client, _ = _client(monkeypatch, BrokenStub([], {}), channel)

    with pytest.raises(ReflectionError, match="unimplemented"):
        await client.fetch_schema("h:1")
    channel.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_empty_stream_raises(monkeypatch, channel):
    class SilentStub(FakeStub):
        def ServerReflectionInfo(self, requests, timeout=None):
            return FakeCall([])

    client, _ = _client(monkeypatch, SilentStub([], {}), channel)

    with pytest.raises(ReflectionError, match="without a response"):
        await client.fetch_schema("h:1")
