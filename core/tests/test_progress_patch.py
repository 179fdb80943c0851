"""Tests for build_patch_values -- pure translation of a partial update."""

import pytest

from core.progress import build_patch_values


class TestBuildPatchValues:
    def test_empty_patch_writes_nothing(self):
        assert build_patch_values({}) == {}

    def test_objectives_replace_whole_mapping(self):
        values = build_patch_values({"completed_objectives": {"c": True}})

        assert values == {"completed_objectives": {"c": True}}

    def test_null_objectives_become_empty_mapping(self):
        assert build_patch_values({"completed_objectives": None}) == {
            "completed_objectives": {}
        }

    def test_explicit_empty_objectives_are_written(self):
        assert build_patch_values({"completed_objectives": {}}) == {
            "completed_objectives": {}
        }

    def test_null_active_syllabus_is_written(self):
        assert build_patch_values({"active_syllabus": None}) == {"active_syllabus": None}

    def test_objectives_are_copied(self):
        objectives = {"a": True}
        values = build_patch_values({"completed_objectives": objectives})
        objectives["b"] = True

        assert values["completed_objectives"] == {"a": True}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="user_id"):
            build_patch_values({"user_id": "someone-else"})
