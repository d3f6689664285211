"""Conversion from protobuf file descriptors to :class:`SchemaDescriptor`."""

from __future__ import annotations

from collections.abc import Iterable

from google.protobuf import descriptor_pb2

from protodiff.engines.drift_scanner.models import SchemaDescriptor, ServiceDescriptor


def qualify(package: str, name: str) -> str:
    return f"{package}.{name}" if package else name


def file_protos_to_schema(
    files: Iterable[descriptor_pb2.FileDescriptorProto],
    *,
    skip_services: Iterable[str] = (),
) -> SchemaDescriptor:
    """Collect services (with method names) and top-level message names.

    Every registry source funnels through here so their output is identical in
    shape. Duplicate files or services are kept once, in first-seen order.
    """
    skip = set(skip_services)
    seen_files: set[str] = set()
    services: dict[str, ServiceDescriptor] = {}
    messages: dict[str, None] = {}

    for fd in files:
        if fd.name and fd.name in seen_files:
            continue
        seen_files.add(fd.name)
        for svc in fd.service:
            fq_name = qualify(fd.package, svc.name)
            if fq_name in skip or fq_name in services:
                continue
            services[fq_name] = ServiceDescriptor(
                name=fq_name, methods=tuple(method.name for method in svc.method)
            )
        for msg in fd.message_type:
            messages.setdefault(qualify(fd.package, msg.name), None)

    return SchemaDescriptor(services=tuple(services.values()), messages=tuple(messages))


def descriptor_set_to_schema(fds: descriptor_pb2.FileDescriptorSet) -> SchemaDescriptor:
    return file_protos_to_schema(fds.file)
