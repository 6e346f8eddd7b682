"""Tests for Schema construction, lookup, routing and instancing."""

import pytest

from confkit import (
    Behaviour,
    ConstructionError,
    FallbackResolutionError,
    Field,
    KeyType,
    Schema,
    SchemaClass,
    ValidationError,
)


class TestSchemaConstruction:
    """Test entry classification on construction."""

    def test_root_and_nested_fields(self, nested_schema):
        """Fields at the root and in nested schemas are built from specs."""
        version = nested_schema.get("version")
        assert version.name == "version"
        assert version.value == "1.1.0"
        assert version.type == "string"
        assert version.description == "This is the schema version"

        tag = nested_schema.get("tag")
        assert tag.value is None
        assert tag.type == "string"
        assert tag.has_flag(Behaviour.OPTIONAL)

        severity = nested_schema.get("global.severity")
        assert severity.name == "severity"
        assert severity.value == 2
        assert severity.type == "number"
        assert severity.description == "Global severity level"

    def test_key_classification(self):
        """Specs, schemas and raw values are tagged distinctly."""
        schema = Schema(
            {
                "field": ("x", "A field"),
                "nested": Schema({}),
                "raw": {"plain": "data"},
                "desc_only": ("desc only",),
            }
        )
        assert schema.key_type("field") is KeyType.FIELD
        assert schema.key_type("nested") is KeyType.SCHEMA
        assert schema.key_type("raw") is KeyType.NON_FIELD
        assert schema.key_type("desc_only") is KeyType.NON_FIELD
        assert schema["desc_only"] == ("desc only",)
        assert schema.key_type("missing") is None

    def test_invalid_field_spec_is_an_error(self):
        """A spec-shaped literal that fails validation raises, not falls through."""
        with pytest.raises(ValidationError, match="string length must be lower than 3"):
            Schema({"name": ("too long", "Name", {"maxlen": 3})})

    def test_description_option(self):
        """A string option is the schema description."""
        assert Schema({}, "Global settings").description == "Global settings"
        assert Schema({}, {"description": "Root"}).description == "Root"

    def test_bad_options_rejected(self):
        """Options must be a string or mapping."""
        with pytest.raises(ConstructionError):
            Schema({}, 42)  # type: ignore[arg-type]

    def test_bad_entries_rejected(self):
        """Entries must be a mapping."""
        with pytest.raises(ConstructionError):
            Schema(["a", "b"])  # type: ignore[arg-type]

    def test_item_assignment_classifies(self):
        """Assigning after construction goes through the same classification."""
        schema = Schema()
        schema["port"] = (8080, "Listen port")
        schema["hosts"] = ["a", "b"]
        assert isinstance(schema["port"], Field)
        assert schema["hosts"] == ["a", "b"]
        assert schema.keys() == ["hosts", "port"]

    def test_reassignment_replaces_entry(self):
        """Reassigning a key replaces it without duplicating the order."""
        schema = Schema({"a": (1, "A")})
        schema["a"] = (2, "A again")
        assert schema.a.value == 2
        assert schema.keys() == ["a"]

    def test_attribute_assignment_to_entry_rejected(self):
        """Entries cannot be clobbered through attribute assignment."""
        schema = Schema({"port": (8080, "Listen port")})
        with pytest.raises(AttributeError):
            schema.port = 9090
        assert schema.port.value == 8080


class TestSchemaOrdering:
    """Test key ordering."""

    def test_sorted_by_default(self):
        """Keys are kept sorted."""
        schema = Schema({"b": (1, "B"), "a": (2, "A")})
        assert [f.name for f in schema.fields()] == ["a", "b"]
        assert list(schema) == ["a", "b"]

    def test_explicit_order_verbatim(self):
        """An explicit order is used as given."""
        schema = Schema({"a": (1, "A"), "b": (2, "B")}, {"order": ["b", "a"]})
        assert [f.name for f in schema.fields()] == ["b", "a"]

    def test_unlisted_keys_appended(self):
        """Keys missing from an explicit order follow in encounter order."""
        schema = Schema(
            {"c": (1, "C"), "a": (2, "A"), "b": (3, "B")}, {"order": ["b"]}
        )
        assert schema.keys() == ["b", "c", "a"]

    def test_order_with_unknown_key_fails(self):
        """Order entries must name existing keys."""
        with pytest.raises(ConstructionError, match="unknown keys"):
            Schema({"a": (1, "A")}, {"order": ["a", "zzz"]})


class TestSchemaGet:
    """Test dotted-path lookup."""

    def test_get_without_children(self, nested_schema):
        """A plain key returns the field."""
        field = nested_schema.get("version")
        assert isinstance(field, Field)
        assert field.name == "version"

    def test_get_with_children(self, nested_schema):
        """A dotted path descends through nested schemas."""
        field = nested_schema.get("logger.default.severity")
        assert isinstance(field, Field)
        assert field.name == "severity"

    def test_get_missing(self, nested_schema):
        """Missing segments return None."""
        assert nested_schema.get("logger.nope.severity") is None
        assert nested_schema.get("version.child") is None
        assert nested_schema.get("") is None

    def test_get_nested_schema(self, nested_schema):
        """Paths may end at a nested schema."""
        assert isinstance(nested_schema.get("logger.default"), Schema)

    def test_get_through_raw_mapping(self):
        """Raw mappings are traversed too."""
        schema = Schema({"raw": {"inner": {"x": 1}}})
        assert schema.get("raw.inner.x") == 1

    def test_attribute_and_item_access(self, nested_schema):
        """Entries are reachable as attributes and items."""
        assert nested_schema.version is nested_schema["version"]
        assert nested_schema.logger.default.severity.name == "severity"
        assert "version" in nested_schema
        with pytest.raises(AttributeError):
            nested_schema.nope
        with pytest.raises(KeyError):
            nested_schema["nope"]


class TestSchemaUpdate:
    """Test bulk updates."""

    def test_call_updates_multiple_fields(self, simple_schema):
        """Calling the schema updates several fields."""
        simple_schema({"tag": "t1", "enabled": False, "version": "2"})
        assert simple_schema.tag.value == "t1"
        assert simple_schema.enabled.value is False
        assert simple_schema.version.value == "2"

    def test_unknown_keys_ignored(self, simple_schema):
        """Unknown keys are ignored without raising."""
        simple_schema.update({"nope": 1, "tag": "t2"})
        assert simple_schema.tag.value == "t2"
        assert "nope" not in simple_schema

    def test_nested_update(self, nested_schema):
        """Nested mappings update nested schemas."""
        nested_schema.update({"logger": {"default": {"severity": "warn"}}})
        assert nested_schema.get("logger.default.severity").value == 3

    def test_update_validation_error_propagates(self, simple_schema):
        """Invalid values raise and leave the field unchanged."""
        with pytest.raises(ValidationError):
            simple_schema.update({"enabled": "yes"})
        assert simple_schema.enabled.value is True

    def test_update_with_none_resets(self, simple_schema):
        """Updating with None drops the override."""
        simple_schema.update({"tag": "t1"})
        simple_schema.update({"tag": None})
        assert simple_schema.tag.value is None

    def test_update_requires_mapping(self, simple_schema):
        """Non-mapping updates raise TypeError."""
        with pytest.raises(TypeError):
            simple_schema.update(["tag"])  # type: ignore[arg-type]


class TestFallbackRouting:
    """Test fallback wiring between schema paths."""

    def test_fallback_map_routes_fields(self, fallback_schema):
        """The source reads the target's hooked value."""
        source = fallback_schema.get("logger.default.severity")
        target = fallback_schema.get("global.severity")

        assert source.has_flag(Behaviour.FALLBACK)
        assert source.context.target is target
        assert source.value == 2

    def test_fallback_propagates(self, fallback_schema):
        """Target writes are visible through the source."""
        fallback_schema.update({"global": {"severity": "error"}})
        assert fallback_schema.get("logger.default.severity").value == 4

    def test_source_override_wins(self, fallback_schema):
        """Writing the source shadows the fallback."""
        fallback_schema.update({"logger": {"default": {"severity": "debug"}}})
        assert fallback_schema.get("logger.default.severity").value == 1
        assert fallback_schema.get("global.severity").value == 2

    def test_missing_paths_skipped(self):
        """Unresolvable links are skipped in non-strict schemas."""
        schema = Schema(
            {"a": (1, "A")},
            {"fallback": {"a": "missing.path", "nope": "a"}},
        )
        assert not schema.a.has_flag(Behaviour.FALLBACK)

    def test_strict_mode_raises(self):
        """Strict schemas refuse unresolvable links."""
        with pytest.raises(FallbackResolutionError, match="missing.path"):
            Schema(
                {"a": (1, "A")},
                {"fallback": {"a": "missing.path"}, "strict": True},
            )

    def test_strict_is_construction_error(self):
        """Strict routing failures are construction errors."""
        assert issubclass(FallbackResolutionError, ConstructionError)

    def test_declared_fallback(self):
        """A fallback path declared in a field spec is routed by the enclosing schema."""
        schema = Schema(
            {
                "global": Schema({"timeout": (30, "Global timeout")}),
                "http": Schema(
                    {
                        "timeout": (
                            "HTTP timeout",
                            {"type": "number", "fallback": "global.timeout"},
                        )
                    }
                ),
            }
        )
        timeout = schema.get("http.timeout")
        assert timeout.has_flag(Behaviour.FALLBACK)
        assert timeout.value == 30

        schema.update({"global": {"timeout": 60}})
        assert timeout.value == 60

    def test_declared_fallback_within_nested_schema(self):
        """Declared paths resolve against the nearest schema that has them."""
        section = Schema(
            {
                "base": ("x", "Base"),
                "derived": ("Derived", {"type": "string", "fallback": "base"}),
            }
        )
        assert section.derived.value == "x"


class TestSchemaClass:
    """Test class-style instancing."""

    def test_instances_are_isolated(self, nested_schema):
        """Mutating one instance leaves the other untouched."""
        Config = nested_schema.create_class()
        assert isinstance(Config, SchemaClass)

        first = Config.new()
        second = Config.new()
        first.tag.value = "first"
        first.update({"global": {"severity": "off"}})

        assert second.tag.value is None
        assert second.get("global.severity").value == 2
        assert nested_schema.tag.value is None

    def test_instances_do_not_share_fields(self, nested_schema):
        """Every instance owns its own field objects."""
        Config = nested_schema.create_class()
        first, second = Config(), Config()
        assert first.version is not second.version
        assert first.get("logger.default") is not second.get("logger.default")

    def test_new_with_data(self, simple_schema):
        """new() applies initial data."""
        instance = simple_schema.create_class().new({"tag": "t"})
        assert instance.tag.value == "t"
        assert simple_schema.tag.value is None

    def test_template_snapshot(self, simple_schema):
        """Changes to the source after create_class do not reach instances."""
        Config = simple_schema.create_class()
        simple_schema.update({"tag": "late"})
        assert Config.new().tag.value is None

    def test_fallback_relinked_into_copy(self, fallback_schema):
        """Internal fallback links point into each instance."""
        Config = fallback_schema.create_class()
        first, second = Config.new(), Config.new()

        first_source = first.get("logger.default.severity")
        assert first_source.context.target is first.get("global.severity")
        assert first_source.context.target is not fallback_schema.get("global.severity")

        first.update({"global": {"severity": "error"}})
        assert first_source.value == 4
        assert second.get("logger.default.severity").value == 2
        assert fallback_schema.get("logger.default.severity").value == 2

    def test_external_fallback_kept(self):
        """Links to fields outside the tree keep their original target."""
        outside = Field({"name": "outside", "description": "External", "default": 5})
        schema = Schema({"inner": ("Inner", {"type": "number"})})
        schema.inner.set_fallback(outside)

        copy = schema.copy()
        assert copy.inner.context.target is outside
        outside.value = 6
        assert copy.inner.value == 6

    def test_raw_entries_deep_copied(self):
        """Raw data is copied per instance."""
        schema = Schema({"hosts": ["a"]})
        instance = schema.create_class().new()
        instance["hosts"].append("b")
        assert schema["hosts"] == ["a"]

    def test_copy_shares_registry(self, registry):
        """Copies keep using the same type registry."""
        registry.register("anything", "accepts anything", [])
        schema = Schema(
            {"x": ("Anything", {"type": "anything", "value": object()})},
            registry=registry,
        )
        copy = schema.copy()
        assert copy.x._registry is registry


class TestSchemaTraversal:
    """Test fields() and walk()."""

    def test_fields_only_direct_fields(self, nested_schema):
        """fields() skips nested schemas and raw values."""
        names = [field.name for field in nested_schema.fields()]
        assert names == ["enabled", "tag", "version"]

    def test_fields_restartable(self, simple_schema):
        """Each call returns a fresh, complete list."""
        assert simple_schema.fields() == simple_schema.fields()
        assert simple_schema.fields() is not simple_schema.fields()

    def test_fields_custom_order(self, simple_schema):
        """A custom order is honoured and unknown keys skipped."""
        names = [f.name for f in simple_schema.fields(["version", "nope", "tag"])]
        assert names == ["version", "tag"]

    def test_walk_post_order(self, nested_schema):
        """Nested schemas are visited before a node's own fields."""
        visited = []
        nested_schema.walk(lambda path, field: visited.append(str(path)))
        assert visited == [
            "global.severity",
            "logger.default.severity",
            "enabled",
            "tag",
            "version",
        ]

    def test_walk_pre_order(self, nested_schema):
        """pre_order visits a node's own fields first."""
        visited = []
        nested_schema.walk(lambda path, field: visited.append(str(path)), order="pre_order")
        assert visited == [
            "enabled",
            "tag",
            "version",
            "global.severity",
            "logger.default.severity",
        ]

    def test_walk_passes_fields(self, nested_schema):
        """The visitor receives the field at each path."""
        seen = {}
        nested_schema.walk(lambda path, field: seen.__setitem__(str(path), field))
        assert seen["global.severity"] is nested_schema.get("global.severity")

    def test_walk_unknown_order(self, nested_schema):
        """Unknown orders raise ValueError."""
        with pytest.raises(ValueError, match="Unknown walk order"):
            nested_schema.walk(lambda path, field: None, order="sideways")


class TestSchemaExport:
    """Test plain exports."""

    def test_to_dict(self, nested_schema):
        """to_dict returns effective values including raw entries."""
        nested_schema["hosts"] = ["a", "b"]
        assert nested_schema.to_dict() == {
            "enabled": True,
            "global": {"severity": 2},
            "hosts": ["a", "b"],
            "logger": {"default": {"severity": None}},
            "tag": None,
            "version": "1.1.0",
        }

    def test_repr(self, simple_schema):
        """repr lists the keys."""
        assert "version" in repr(simple_schema)
