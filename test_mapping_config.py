"""
Mapping Configuration Tests

Validates normalization of raw mappings:
1. Missing operation kinds default to empty
2. Directive fields are preserved verbatim (no per-kind defaults)
3. The append tri-state: omitted, explicit field, explicit null
4. Loading from JSON files and translation maps
"""

import json

import pytest
from pydantic import ValidationError

from core.mapping.config import (
    AppendField,
    AppendMode,
    Directive,
    MappingConfig,
    OperationKind,
    TranslationMap,
    load_mapping,
)


class TestNormalization:

    def test_none_normalizes_to_empty_kinds(self):
        mapping = MappingConfig.normalize(None)
        for kind in OperationKind:
            assert dict(mapping.directives(kind)) == {}

    def test_partial_mapping(self):
        mapping = MappingConfig.normalize({"get": {"video": {}}})
        assert mapping.directive_for("get", "video") == Directive()
        assert mapping.directive_for(OperationKind.INSERT, "video") is None
        assert mapping.get_stats() == {
            "insert": 0, "update": 0, "delete": 0, "get": 1, "list": 0, "assoc": 0,
        }

    def test_null_kind_is_empty(self):
        mapping = MappingConfig.normalize({"list": None})
        assert mapping.type_names("list") == []

    def test_null_directive_is_unmapped(self):
        mapping = MappingConfig.normalize({"get": {"video": None, "audio": {}}})
        assert mapping.directive_for("get", "video") is None
        assert mapping.type_names("get") == ["audio"]

    def test_normalize_is_idempotent_for_configs(self):
        mapping = MappingConfig.normalize({"get": {"video": {}}})
        assert MappingConfig.normalize(mapping) is mapping

    def test_unknown_kind_rejected(self):
        mapping = MappingConfig.normalize({})
        with pytest.raises(ValueError):
            mapping.directive_for("upsert", "video")

    def test_directive_table_is_read_only(self):
        mapping = MappingConfig.normalize({"get": {"video": {}}})
        with pytest.raises(TypeError):
            mapping.directives("get")["audio"] = Directive()


class TestDirective:

    def test_fields_preserved_verbatim(self):
        directive = Directive.model_validate({
            "method": "HEAD",
            "insert": "text",
            "rewriteUrl": "media/$productId/text",
            "query": ["lang", "page"],
            "data": "authors",
        })
        assert directive.method == "HEAD"
        assert directive.insert == "text"
        assert directive.rewrite_url == "media/$productId/text"
        assert directive.query == ("lang", "page")
        assert directive.data == "authors"

    def test_defaults_are_not_resolved(self):
        directive = Directive()
        assert directive.method is None
        assert directive.append.mode == AppendMode.DEFAULT
        assert directive.rewrite_url is None
        assert directive.query == ()

    def test_append_tri_state(self):
        omitted = Directive.model_validate({})
        explicit = Directive.model_validate({"append": "name"})
        suppressed = Directive.model_validate({"append": None})

        assert omitted.append == AppendField.default()
        assert explicit.append == AppendField.explicit("name")
        assert suppressed.append == AppendField.suppressed()

        assert omitted.append.resolve("id") == "id"
        assert explicit.append.resolve("id") == "name"
        assert suppressed.append.resolve("id") is None

    def test_invalid_append_rejected(self):
        with pytest.raises(ValidationError):
            Directive.model_validate({"append": 12})

    def test_directive_is_frozen(self):
        directive = Directive(method="PUT")
        with pytest.raises(ValidationError):
            directive.method = "POST"


class TestLoading:

    def test_load_mapping_from_json(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps({
            "insert": {"media/audio": {"method": "PUT"}},
            "get": {"media/image": {"append": None}},
        }))

        mapping = load_mapping(path)

        assert mapping.directive_for("insert", "media/audio").method == "PUT"
        assert mapping.directive_for("get", "media/image").append.resolve() is None
        assert mapping.type_names("delete") == []


class TestTranslationMap:

    def test_values_are_stringified(self):
        translations = TranslationMap({"productId": 2})
        assert translations["productId"] == "2"
        assert len(translations) == 1

    def test_every_occurrence_replaced(self):
        translations = TranslationMap({"id": "7"})
        assert translations.apply("a/$id/b/$id") == "a/7/b/7"

    def test_longer_keys_win(self):
        translations = TranslationMap({"product": "p", "productId": "2"})
        assert translations.apply("x/$productId/$product") == "x/2/p"
