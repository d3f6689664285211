"""Schema comparison — pure functions, no I/O.

Drift is defined by divergence of *shared* services only. A service that exists
on just one side is reported in the diff (``missing_in_live`` /
``extra_in_live``) but never flips the verdict.
"""

from __future__ import annotations

from protodiff.engines.drift_scanner.models import MethodMismatch, SchemaDescriptor, SchemaDiff


def _method_table(schema: SchemaDescriptor) -> dict[str, tuple[str, ...]]:
    # First declaration wins if a descriptor repeats a service name.
    table: dict[str, tuple[str, ...]] = {}
    for svc in schema.services:
        table.setdefault(svc.name, svc.methods)
    return table


def _ordered_difference(methods: tuple[str, ...], other: set[str]) -> tuple[str, ...]:
    """Names in *methods* but not in *other*, once each, in first-seen order."""
    return tuple(dict.fromkeys(m for m in methods if m not in other))


def compare(
    live: SchemaDescriptor | None,
    canonical: SchemaDescriptor | None,
) -> tuple[bool, SchemaDiff]:
    """Compare a live schema against the canonical one.

    Returns ``(is_match, diff)``. Either side missing is a mismatch with an
    empty diff. Method lists are compared as sets, so ordering never matters.
    With zero services in common the result is a vacuous match.
    """
    if live is None or canonical is None:
        return False, SchemaDiff()

    live_table = _method_table(live)
    registry_table = _method_table(canonical)

    extra_in_live = tuple(name for name in live_table if name not in registry_table)
    missing_in_live = tuple(name for name in registry_table if name not in live_table)

    mismatches: list[MethodMismatch] = []
    for name, live_methods in live_table.items():
        registry_methods = registry_table.get(name)
        if registry_methods is None:
            continue
        live_set = set(live_methods)
        registry_set = set(registry_methods)
        if live_set == registry_set:
            continue
        mismatches.append(
            MethodMismatch(
                service=name,
                live_method_count=len(live_methods),
                registry_method_count=len(registry_methods),
                missing_methods=_ordered_difference(registry_methods, live_set),
                extra_methods=_ordered_difference(live_methods, registry_set),
            )
        )

    diff = SchemaDiff(
        live_services=tuple(live_table),
        registry_services=tuple(registry_table),
        missing_in_live=missing_in_live,
        extra_in_live=extra_in_live,
        method_mismatches=tuple(mismatches),
    )
    return not mismatches, diff


def summarize_match(diff: SchemaDiff) -> str:
    """Operator message for a SYNC verdict."""
    common = len(diff.common_services)
    if common == 0:
        return (
            "no common services to compare "
            f"(live: {len(diff.live_services)}, registry: {len(diff.registry_services)})"
        )
    noun = "service" if common == 1 else "services"
    return f"schemas in sync: {common} common {noun} matched"


def render_diff(diff: SchemaDiff) -> str:
    """Operator message for a MISMATCH verdict, one clause per drifted service."""
    parts = []
    for mm in diff.method_mismatches:
        text = (
            f"{mm.service}: live has {mm.live_method_count} methods, "
            f"registry has {mm.registry_method_count}"
        )
        if mm.missing_methods:
            text += f", missing [{', '.join(mm.missing_methods)}]"
        if mm.extra_methods:
            text += f", extra [{', '.join(mm.extra_methods)}]"
        parts.append(text)
    return "schema drift detected: " + "; ".join(parts)
