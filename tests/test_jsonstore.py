"""Tests for JSON config reads and atomic writes."""

import json
from unittest.mock import patch

import pytest

from catalyst_setup.jsonstore import InvalidJSONError, dig, read_json, read_json_lenient, write_json_atomic


class TestWriteJsonAtomic:
    def test_creates_parent_directories(self, tmp_path):
        target = tmp_path / "a" / "b" / "config.json"

        write_json_atomic(target, {"catalyst": {"projectKey": "acme"}})

        assert json.loads(target.read_text()) == {"catalyst": {"projectKey": "acme"}}

    def test_leaves_no_temp_files(self, tmp_path):
        target = tmp_path / "config.json"

        write_json_atomic(target, {"x": 1})
        write_json_atomic(target, {"x": 2})

        assert [p.name for p in tmp_path.iterdir()] == ["config.json"]

    def test_rewrite_of_same_document_is_byte_identical(self, tmp_path):
        target = tmp_path / "config.json"
        doc = {"thoughts": {"thoughtsRepo": "/x/thoughts", "user": "alice"}}

        write_json_atomic(target, doc)
        first = target.read_bytes()
        write_json_atomic(target, json.loads(first))

        assert target.read_bytes() == first
        assert first.endswith(b"\n")

    def test_failed_rename_keeps_previous_content(self, tmp_path):
        target = tmp_path / "config.json"
        write_json_atomic(target, {"version": 1})

        with patch("catalyst_setup.jsonstore.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                write_json_atomic(target, {"version": 2})

        assert json.loads(target.read_text()) == {"version": 1}
        assert [p.name for p in tmp_path.iterdir()] == ["config.json"]


    def test_failed_serialisation_leaves_no_temp_file(self, tmp_path):
        target = tmp_path / "config.json"
        write_json_atomic(target, {"version": 1})

        with pytest.raises(TypeError):
            write_json_atomic(target, {"bad": object()})

        assert json.loads(target.read_text()) == {"version": 1}
        assert [p.name for p in tmp_path.iterdir()] == ["config.json"]


class TestReadJson:
    def test_missing_file_is_none(self, tmp_path):
        assert read_json(tmp_path / "nope.json") is None

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(InvalidJSONError):
            read_json(path)

    def test_non_object_raises(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")

        with pytest.raises(InvalidJSONError):
            read_json(path)

    def test_lenient_read_treats_invalid_as_absent(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{")

        assert read_json_lenient(path) is None


class TestDig:
    def test_nested_lookup(self):
        assert dig({"a": {"b": {"c": 3}}}, "a", "b", "c") == 3

    def test_missing_key_returns_default(self):
        assert dig({"a": {}}, "a", "b", default="x") == "x"

    def test_empty_and_null_values_return_default(self):
        assert dig({"a": ""}, "a") is None
        assert dig({"a": None}, "a", default="d") == "d"

    def test_none_document(self):
        assert dig(None, "a") is None
