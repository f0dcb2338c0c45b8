"""Tests for services/globbing.py - include/exclude glob patterns."""

import pytest

from services.globbing import matches_glob, should_include


class TestMatchesGlob:
    """Tests for glob pattern matching."""

    @pytest.mark.parametrize(
        "pattern,path,expected",
        [
            ("*.md", "note.md", True),
            ("*.md", "folder/note.md", False),
            ("**/*.md", "note.md", True),
            ("**/*.md", "a/b/note.md", True),
            ("projects/**", "projects/a/b.md", True),
            ("projects/**", "other/a.md", False),
            ("note?.md", "note1.md", True),
            ("note?.md", "note10.md", False),
            ("note[12].md", "note2.md", True),
            ("note[12].md", "note3.md", False),
            ("note[!12].md", "note3.md", True),
            ("*.{md,txt}", "readme.txt", True),
            ("*.{md,txt}", "image.png", False),
            ("{daily,weekly}/*.md", "weekly/w1.md", True),
            ("a+b (1).md", "a+b (1).md", True),
            ("a.md", "aXmd", False),
        ],
    )
    def test_patterns(self, pattern, path, expected):
        """Should match glob patterns against vault paths."""
        assert matches_glob(path, pattern) is expected

    def test_star_does_not_cross_folders(self):
        """Should keep a single star inside one folder."""
        assert matches_glob("a/b.md", "a*.md") is False


class TestShouldInclude:
    """Tests for combined include/exclude filtering."""

    def test_no_patterns_includes_everything(self):
        """Should include everything when no patterns are given."""
        assert should_include("any/path.md") is True

    def test_include_required(self):
        """Should require a match against some include pattern."""
        assert should_include("projects/a.md", includes=["projects/**"]) is True
        assert should_include("daily/a.md", includes=["projects/**"]) is False

    def test_exclude_wins(self):
        """Should let an exclude pattern override an include."""
        assert should_include(
            "projects/archive/a.md",
            includes=["projects/**"],
            excludes=["**/archive/**"],
        ) is False
