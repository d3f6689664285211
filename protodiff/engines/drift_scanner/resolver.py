"""Registry module resolution for a logical service name."""

from __future__ import annotations

from protodiff.engines.drift_scanner.models import ServiceMappings

SERVICE_PLACEHOLDER = "{service}"


def resolve_module(
    service_name: str,
    mappings: ServiceMappings,
    template: str | None = None,
) -> str | None:
    """Return the registry module for *service_name*, or ``None``.

    An explicit mapping entry always wins, even an empty one, which resolves to
    ``None``. Otherwise a *template* containing ``{service}`` is expanded with
    the service name. A template without the placeholder is ignored.
    """
    if mappings.has(service_name):
        return mappings.get(service_name) or None
    if template and SERVICE_PLACEHOLDER in template:
        return template.replace(SERVICE_PLACEHOLDER, service_name)
    return None
