"""Tests for the exception hierarchy: codes and structured attributes."""

import pytest

from prospect_kernel import exceptions
from prospect_kernel.exceptions import (
    ConfigError,
    IngestionError,
    InvalidTierError,
    MappingOverrideError,
    ParseError,
    ProspectKernelError,
    ResolutionError,
    StoreError,
    UnknownEntityKindError,
)


def _all_error_classes():
    return [
        obj
        for obj in vars(exceptions).values()
        if isinstance(obj, type) and issubclass(obj, ProspectKernelError)
    ]


class TestExceptionCodes:
    def test_every_class_has_a_unique_code(self):
        classes = _all_error_classes()
        codes = [cls.code for cls in classes]
        assert all(codes)
        assert len(codes) == len(set(codes))

    @pytest.mark.parametrize(
        "error,code,parent",
        [
            (ParseError("no header row"), "PARSE_ERROR", IngestionError),
            (MappingOverrideError("email", 9, "out of range"), "MAPPING_OVERRIDE_INVALID", IngestionError),
            (UnknownEntityKindError("deal", ("company", "contact")), "UNKNOWN_ENTITY_KIND", IngestionError),
            (InvalidTierError("gold"), "INVALID_TIER", IngestionError),
            (ResolutionError("NewCo", "timeout"), "RESOLUTION_FAILED", IngestionError),
            (StoreError("create_batch", "constraint"), "STORE_ERROR", ProspectKernelError),
            (ConfigError("bad", "x.yaml"), "CONFIG_INVALID", ProspectKernelError),
        ],
    )
    def test_codes_and_hierarchy(self, error, code, parent):
        assert error.code == code
        assert isinstance(error, parent)


class TestStructuredAttributes:
    def test_parse_error(self):
        err = ParseError("no header row")
        assert err.reason == "no header row"
        assert "no header row" in str(err)

    def test_unknown_entity_kind_lists_known_kinds(self):
        err = UnknownEntityKindError("deal", ("company", "contact"))
        assert err.entity_kind == "deal"
        assert err.known == ("company", "contact")
        assert "['company', 'contact']" in str(err)

    def test_mapping_override(self):
        err = MappingOverrideError("email", 9, "header has 3 columns")
        assert (err.field_name, err.column_index, err.reason) == ("email", 9, "header has 3 columns")

    def test_resolution_error_message(self):
        err = ResolutionError("NewCo", "timeout")
        assert str(err) == "Could not find or create company 'NewCo': timeout"

    def test_config_error_prefixes_source(self):
        assert str(ConfigError("bad", "x.yaml")) == "x.yaml: bad"
        assert ConfigError("bad").source is None
