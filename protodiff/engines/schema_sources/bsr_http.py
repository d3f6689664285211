"""Registry source calling the BSR reflection API over HTTP (Connect JSON)."""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from google.protobuf import descriptor_pb2, json_format

from protodiff.core.errors import RegistryError
from protodiff.engines.drift_scanner.models import SchemaDescriptor
from protodiff.engines.schema_sources.descriptors import descriptor_set_to_schema

log = structlog.get_logger("protodiff.engine")

DEFAULT_BSR_URL = "https://buf.build"
FILE_DESCRIPTOR_SET_PATH = "/buf.reflect.v1beta1.FileDescriptorSetService/GetFileDescriptorSet"


class BsrHttpSource:
    """Thin async wrapper around ``GetFileDescriptorSet``.

    The API can return descriptor sets with unresolved type references, which
    does not matter here since only service and method names are used.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        resolved_token = token
        headers: dict[str, str] = {
            "Content-Type": "application/json",
            "Connect-Protocol-Version": "1",
        }
        if resolved_token:
            headers["Authorization"] = f"Bearer {resolved_token}"
        self._base_url = (base_url or DEFAULT_BSR_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> BsrHttpSource:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def fetch_schema(self, ref: str) -> SchemaDescriptor:
        try:
            response = await self._client.post(FILE_DESCRIPTOR_SET_PATH, json={"module": ref})
        except httpx.HTTPError as exc:
            raise RegistryError(f"BSR request failed: {exc}") from exc

        if response.status_code != 200:
            raise RegistryError(
                f"BSR API returned status {response.status_code}: {response.text[:500]}"
            )

        try:
            payload: dict[str, Any] = response.json()
        except ValueError as exc:
            raise RegistryError(f"BSR API returned invalid JSON: {exc}") from exc

        fds_json = payload.get("fileDescriptorSet") if isinstance(payload, dict) else None
        if not fds_json or not fds_json.get("file"):
            raise RegistryError(f"no FileDescriptorSet in response for {ref}")

        try:
            fds = json_format.ParseDict(
                fds_json, descriptor_pb2.FileDescriptorSet(), ignore_unknown_fields=True
            )
        except json_format.ParseError as exc:
            raise RegistryError(f"malformed FileDescriptorSet for {ref}: {exc}") from exc

        log.debug("bsr.schema_fetched", module=ref, files=len(fds.file))
        return descriptor_set_to_schema(fds)
