"""Registry source backed by the ``buf`` CLI.

``buf export`` pulls the module's .proto files (with dependencies) into a
scratch directory, ``buf build`` compiles them into a binary
``FileDescriptorSet`` image, and the image is decoded with ``protobuf``.
Requires the ``buf`` binary on ``PATH`` and a writable temp directory.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path

import structlog
from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError

from protodiff.core.errors import RegistryError
from protodiff.engines.drift_scanner.models import SchemaDescriptor
from protodiff.engines.schema_sources.descriptors import descriptor_set_to_schema

log = structlog.get_logger("protodiff.engine")


class BufCliSource:
    """Fetch canonical schemas with ``buf export`` + ``buf build``."""

    def __init__(
        self,
        token: str | None = None,
        *,
        buf_binary: str = "buf",
        timeout: float = 30.0,
    ) -> None:
        self._token = token or None
        self._buf = buf_binary
        self._timeout = timeout

    async def fetch_schema(self, ref: str) -> SchemaDescriptor:
        with tempfile.TemporaryDirectory(prefix="bsr-export-") as tmpdir:
            export_dir = Path(tmpdir) / "export"
            image_path = Path(tmpdir) / "image.binpb"

            await self._run([self._buf, "export", ref, "-o", str(export_dir)])
            if not any(export_dir.rglob("*.proto")):
                raise RegistryError(f"no proto files found in export of {ref}")

            await self._run([self._buf, "build", str(export_dir), "-o", str(image_path)])
            fds = descriptor_pb2.FileDescriptorSet()
            try:
                fds.ParseFromString(image_path.read_bytes())
            except (OSError, DecodeError) as exc:
                raise RegistryError(f"unreadable buf image for {ref}: {exc}") from exc

        if not fds.file:
            raise RegistryError(f"empty FileDescriptorSet for {ref}")
        log.debug("buf.schema_fetched", module=ref, files=len(fds.file))
        return descriptor_set_to_schema(fds)

    async def _run(self, cmd: list[str]) -> None:
        """Run a buf command, raising RegistryError on failure or timeout."""
        env = None
        if self._token:
            env = {**os.environ, "BUF_TOKEN": self._token}
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except FileNotFoundError as exc:
            raise RegistryError(f"buf CLI not found: {cmd[0]}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise RegistryError(f"buf {cmd[1]} timed out after {self._timeout}s") from None

        if proc.returncode != 0:
            output = (stderr or stdout).decode(errors="replace").strip()
            raise RegistryError(f"buf {cmd[1]} failed (exit {proc.returncode}): {output}")
