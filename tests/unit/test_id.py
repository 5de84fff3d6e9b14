"""Tests for ID generation system."""

import time

from genui.core.id import (
    Prefix,
    extract_prefix,
    extract_timestamp,
    generate_prefixed,
    generate_raw,
    is_valid,
    new_inline_catalog_id,
    new_surface_id,
    new_tool_call_id,
)


class TestGeneration:
    """Test basic ID generation."""

    def test_generate_unique_ids(self):
        """IDs should be unique."""
        id1 = generate_raw()
        id2 = generate_raw()

        assert id1 != id2
        assert len(id1) == 26
        assert is_valid(id1)

    def test_timestamps_increase(self):
        ids = []
        for _ in range(3):
            ids.append(generate_raw())
            time.sleep(0.002)

        timestamps = [extract_timestamp(id_str).timestamp() for id_str in ids]
        assert timestamps == sorted(timestamps)


class TestTypedGeneration:
    """Test typed ID generation."""

    def test_tool_call_id_format(self):
        id_str = new_tool_call_id()
        assert id_str.startswith("call_")
        assert extract_prefix(id_str) == Prefix.TOOL_CALL

    def test_inline_catalog_id_format(self):
        """Prefixes containing underscores are kept whole."""
        id_str = new_inline_catalog_id()
        assert id_str.startswith("inline_catalog_")
        assert extract_prefix(id_str) == Prefix.INLINE_CATALOG

    def test_surface_id_format(self):
        assert extract_prefix(new_surface_id()) == Prefix.SURFACE

    def test_custom_prefix(self):
        assert extract_prefix(generate_prefixed("row")) == "row"


class TestInspection:
    """Test ID inspection."""

    def test_bare_ulid_has_no_prefix(self):
        assert extract_prefix(generate_raw()) is None

    def test_invalid(self):
        assert not is_valid("not-a-ulid")
        assert extract_prefix("call_not-a-ulid") is None

    def test_extract_timestamp_from_prefixed(self):
        before = time.time()
        id_str = new_tool_call_id()
        assert extract_timestamp(id_str).timestamp() >= before - 1
