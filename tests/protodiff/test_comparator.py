"""Tests for the schema comparator (pure functions)."""

from __future__ import annotations

from protodiff.engines.drift_scanner.comparator import compare, render_diff, summarize_match
from protodiff.engines.drift_scanner.models import SchemaDescriptor, SchemaDiff

# ── TestCompare ─────────────────────────────────────────────────────────────


class TestCompare:
    def test_identical_schemas_match(self):
        live = SchemaDescriptor.build({"greeter.Greeter": ["SayHello", "SayHelloAgain"]})
        registry = SchemaDescriptor.build({"greeter.Greeter": ["SayHello", "SayHelloAgain"]})

        is_match, diff = compare(live, registry)

        assert is_match is True
        assert diff.method_mismatches == ()
        assert diff.live_services == ("greeter.Greeter",)
        assert diff.registry_services == ("greeter.Greeter",)

    def test_method_order_is_ignored(self):
        live = SchemaDescriptor.build({"a.A": ["Z", "Y", "X"], "b.B": ["One"]})
        registry = SchemaDescriptor.build({"b.B": ["One"], "a.A": ["X", "Y", "Z"]})

        is_match, diff = compare(live, registry)

        assert is_match is True
        assert diff.method_mismatches == ()

    def test_missing_method_is_mismatch(self):
        live = SchemaDescriptor.build({"user.UserService": ["GetUser", "CreateUser"]})
        registry = SchemaDescriptor.build(
            {"user.UserService": ["GetUser", "CreateUser", "UpdateUser"]}
        )

        is_match, diff = compare(live, registry)

        assert is_match is False
        assert len(diff.method_mismatches) == 1
        mm = diff.method_mismatches[0]
        assert mm.service == "user.UserService"
        assert mm.live_method_count == 2
        assert mm.registry_method_count == 3
        assert mm.missing_methods == ("UpdateUser",)
        assert mm.extra_methods == ()

    def test_extra_method_is_mismatch(self):
        live = SchemaDescriptor.build({"a.A": ["Get", "Debug"]})
        registry = SchemaDescriptor.build({"a.A": ["Get"]})

        is_match, diff = compare(live, registry)

        assert is_match is False
        assert diff.method_mismatches[0].extra_methods == ("Debug",)
        assert diff.method_mismatches[0].missing_methods == ()

    def test_same_count_different_names_is_mismatch(self):
        live = SchemaDescriptor.build({"a.A": ["Get", "Put"]})
        registry = SchemaDescriptor.build({"a.A": ["Get", "Delete"]})

        is_match, diff = compare(live, registry)

        assert is_match is False
        mm = diff.method_mismatches[0]
        assert mm.missing_methods == ("Delete",)
        assert mm.extra_methods == ("Put",)

    def test_only_differing_shared_services_reported(self):
        live = SchemaDescriptor.build(
            {"a.A": ["X"], "b.B": ["Y", "Z"], "c.C": ["Q"], "live.Only": ["L"]}
        )
        registry = SchemaDescriptor.build(
            {"a.A": ["X"], "b.B": ["Y"], "c.C": ["Q", "R"], "reg.Only": ["R"]}
        )

        is_match, diff = compare(live, registry)

        assert is_match is False
        assert [mm.service for mm in diff.method_mismatches] == ["b.B", "c.C"]

    def test_one_sided_services_are_informational(self):
        live = SchemaDescriptor.build({"a.A": ["X"], "b.B": ["Y"]})
        registry = SchemaDescriptor.build({"a.A": ["X"]})

        is_match, diff = compare(live, registry)

        assert is_match is True
        assert diff.extra_in_live == ("b.B",)
        assert diff.missing_in_live == ()
        assert diff.method_mismatches == ()

    def test_registry_only_service_does_not_flip(self):
        live = SchemaDescriptor.build({"a.A": ["X"]})
        registry = SchemaDescriptor.build({"a.A": ["X"], "new.Service": ["Hello"]})

        is_match, diff = compare(live, registry)

        assert is_match is True
        assert diff.missing_in_live == ("new.Service",)

    def test_no_common_services_is_vacuous_match(self):
        """Nothing shared means nothing can drift: reported as a match."""
        live = SchemaDescriptor.build({"a.A": ["X"]})
        registry = SchemaDescriptor.build({"b.B": ["Y"]})

        is_match, diff = compare(live, registry)

        assert is_match is True
        assert diff.common_services == ()
        assert diff.extra_in_live == ("a.A",)
        assert diff.missing_in_live == ("b.B",)

    def test_empty_live_schema_is_vacuous_match(self):
        is_match, diff = compare(SchemaDescriptor(), SchemaDescriptor.build({"a.A": ["X"]}))

        assert is_match is True
        assert diff.missing_in_live == ("a.A",)

    def test_absent_input_is_mismatch_with_empty_diff(self):
        schema = SchemaDescriptor.build({"a.A": ["X"]})

        assert compare(None, schema) == (False, SchemaDiff())
        assert compare(schema, None) == (False, SchemaDiff())
        assert compare(None, None) == (False, SchemaDiff())

    def test_duplicate_methods_compare_as_sets(self):
        live = SchemaDescriptor.build({"a.A": ["Get", "Get"]})
        registry = SchemaDescriptor.build({"a.A": ["Get", "Put"]})

        is_match, diff = compare(live, registry)

        assert is_match is False
        assert diff.method_mismatches[0].missing_methods == ("Put",)

    def test_duplicate_names_listed_once_in_first_seen_order(self):
        live = SchemaDescriptor.build({"a.A": ["Get", "Debug", "Trace", "Debug"]})
        registry = SchemaDescriptor.build({"a.A": ["Get", "Put", "Put", "Delete", "Put"]})

        _, diff = compare(live, registry)

        mm = diff.method_mismatches[0]
        assert mm.missing_methods == ("Put", "Delete")
        assert mm.extra_methods == ("Debug", "Trace")
        assert mm.live_method_count == 4
        assert mm.registry_method_count == 5

    def test_deterministic(self):
        live = SchemaDescriptor.build({"a.A": ["X", "Y"], "b.B": ["Z"]})
        registry = SchemaDescriptor.build({"a.A": ["X"], "b.B": ["Z", "W"]})

        assert compare(live, registry) == compare(live, registry)


# ── TestMessages ────────────────────────────────────────────────────────────


class TestMessages:
    def test_summarize_match_counts_common_services(self):
        live = SchemaDescriptor.build({"a.A": ["X"], "b.B": ["Y"], "c.C": ["Z"]})
        registry = SchemaDescriptor.build({"a.A": ["X"], "b.B": ["Y"]})
        _, diff = compare(live, registry)

        assert summarize_match(diff) == "schemas in sync: 2 common services matched"

    def test_summarize_match_singular(self):
        schema = SchemaDescriptor.build({"a.A": ["X"]})
        _, diff = compare(schema, schema)

        assert summarize_match(diff) == "schemas in sync: 1 common service matched"

    def test_summarize_match_without_common_services(self):
        _, diff = compare(
            SchemaDescriptor.build({"a.A": ["X"]}), SchemaDescriptor.build({"b.B": ["Y"]})
        )

        message = summarize_match(diff)
        assert message.startswith("no common services to compare")
        assert "live: 1" in message
        assert "registry: 1" in message

    def test_render_diff_single_service(self):
        _, diff = compare(
            SchemaDescriptor.build({"user.UserService": ["GetUser", "CreateUser"]}),
            SchemaDescriptor.build({"user.UserService": ["GetUser", "CreateUser", "UpdateUser"]}),
        )

        assert render_diff(diff) == (
            "schema drift detected: user.UserService: live has 2 methods, "
            "registry has 3, missing [UpdateUser]"
        )

    def test_render_diff_joins_services_with_semicolons(self):
        _, diff = compare(
            SchemaDescriptor.build({"a.A": ["X", "Extra"], "b.B": ["Y"]}),
            SchemaDescriptor.build({"a.A": ["X"], "b.B": ["Y", "Gone1", "Gone2"]}),
        )

        rendered = render_diff(diff)
        assert rendered.count("; ") == 1
        assert "a.A: live has 2 methods, registry has 1, extra [Extra]" in rendered
        assert "b.B: live has 1 methods, registry has 3, missing [Gone1, Gone2]" in rendered
