"""Tests for services/queries.py - listing, stat, links and waypoints."""

import pytest

from services.errors import (
    InvalidArgumentError,
    InvalidPathError,
    NotAFileError,
    NotAFolderError,
    NotFoundError,
)
from services.queries import QueryService


def _service(vault) -> QueryService:
    return QueryService(vault.context())


@pytest.fixture
def tree(memory_vault):
    memory_vault.add_file("Zeta.md", "zeta")
    memory_vault.add_file("alpha.md", "---\ntitle: A\ntags: x\n---\nalpha body")
    memory_vault.add_file("a/inner.md", "inner")
    memory_vault.add_file("B/deep/x.md", "x")
    return memory_vault


def _paths(result) -> list[str]:
    return [item.path for item in result.items]


class TestListNotes:
    """Tests for QueryService.list_notes."""

    def test_root_directories_first(self, tree):
        """Should list folders before files, case-insensitively."""
        result = _service(tree).list_notes()
        assert _paths(result) == ["a", "B", "alpha.md", "Zeta.md"]
        assert result.total_count == 4
        assert result.has_more is False
        assert result.next_cursor is None

    def test_item_fields(self, tree):
        """Should describe folders and files with their own fields."""
        items = {item.path: item for item in _service(tree).list_notes().items}
        assert items["a"].kind == "directory"
        assert items["a"].children_count == 1
        assert items["a"].size is None
        assert items["alpha.md"].kind == "file"
        assert items["alpha.md"].extension == "md"
        assert items["alpha.md"].size == len(tree.content("alpha.md"))
        assert items["alpha.md"].frontmatter_summary is None

    def test_recursive_sorted_globally(self, tree):
        """Should sort a recursive listing across every level."""
        result = _service(tree).list_notes(recursive=True)
        assert _paths(result) == [
            "a", "B", "B/deep", "alpha.md", "a/inner.md", "B/deep/x.md", "Zeta.md",
        ]

    def test_subfolder(self, tree):
        """Should list the children of a subfolder."""
        assert _paths(_service(tree).list_notes("B", recursive=True)) == ["B/deep", "B/deep/x.md"]

    def test_pagination_with_cursor(self, tree):
        """Should page through results using the last path as cursor."""
        service = _service(tree)
        first = service.list_notes(recursive=True, limit=3)
        assert _paths(first) == ["a", "B", "B/deep"]
        assert first.has_more is True
        assert first.next_cursor == "B/deep"
        assert first.total_count == 7

        second = service.list_notes(recursive=True, limit=3, cursor=first.next_cursor)
        assert _paths(second) == ["alpha.md", "a/inner.md", "B/deep/x.md"]
        assert second.next_cursor == "B/deep/x.md"

        third = service.list_notes(recursive=True, limit=3, cursor=second.next_cursor)
        assert _paths(third) == ["Zeta.md"]
        assert third.has_more is False
        assert third.next_cursor is None

    def test_unknown_cursor_restarts(self, tree):
        """Should start from the beginning for an unknown cursor."""
        result = _service(tree).list_notes(limit=2, cursor="gone.md")
        assert _paths(result) == ["a", "B"]

    def test_only_files(self, tree):
        """Should list only files when asked."""
        result = _service(tree).list_notes(recursive=True, only="files")
        assert _paths(result) == ["alpha.md", "a/inner.md", "B/deep/x.md", "Zeta.md"]

    def test_only_directories(self, tree):
        """Should list only folders when asked."""
        result = _service(tree).list_notes(recursive=True, only="directories")
        assert _paths(result) == ["a", "B", "B/deep"]

    def test_excludes_prune_recursion(self, tree):
        """Should not descend into excluded folders."""
        result = _service(tree).list_notes(recursive=True, excludes=["B"])
        assert _paths(result) == ["a", "alpha.md", "a/inner.md", "Zeta.md"]

    def test_includes_filter_output_not_recursion(self, tree):
        """Should filter output by includes while still recursing."""
        result = _service(tree).list_notes(recursive=True, includes=["B/**/*.md"])
        assert _paths(result) == ["B/deep/x.md"]

    def test_frontmatter_summary(self, tree):
        """Should summarize frontmatter for notes that have it."""
        items = {
            item.path: item
            for item in _service(tree).list_notes(with_frontmatter_summary=True).items
        }
        assert items["alpha.md"].frontmatter_summary == {"title": "A", "tags": ["x"]}
        assert items["Zeta.md"].frontmatter_summary is None

    def test_invalid_only(self, tree):
        """Should reject an unknown only value."""
        with pytest.raises(InvalidArgumentError):
            _service(tree).list_notes(only="links")

    def test_invalid_limit(self, tree):
        """Should reject a limit below one."""
        with pytest.raises(InvalidArgumentError):
            _service(tree).list_notes(limit=0)

    def test_missing_folder(self, tree):
        """Should raise NotFound for a missing folder."""
        with pytest.raises(NotFoundError):
            _service(tree).list_notes("nope")

    def test_file_is_not_folder(self, tree):
        """Should refuse to list a file."""
        with pytest.raises(NotAFolderError):
            _service(tree).list_notes("alpha.md")

    def test_escape_rejected(self, tree):
        """Should reject paths that escape the vault."""
        with pytest.raises(InvalidPathError):
            _service(tree).list_notes("../outside")


class TestStatAndExists:
    """Tests for QueryService.stat and QueryService.exists."""

    def test_stat_root(self, tree):
        """Should describe the vault root for each root form."""
        for root in (None, "", "."):
            result = _service(tree).stat(root)
            assert result.exists is True
            assert result.kind == "directory"
            assert result.path == ""

    @pytest.mark.parametrize("path", ["/", "   "])
    def test_slash_and_blank_paths_rejected(self, tree, path):
        """Should reject a bare slash or blank path rather than using the root."""
        service = _service(tree)
        with pytest.raises(InvalidPathError):
            service.stat(path)
        with pytest.raises(InvalidPathError):
            service.exists(path)
        with pytest.raises(InvalidPathError):
            service.list_notes(path)

    def test_stat_file(self, tree):
        """Should report file size and modification time."""
        result = _service(tree).stat("alpha.md")
        assert result.kind == "file"
        assert result.metadata.size == len(tree.content("alpha.md"))
        assert result.metadata.modified == tree.files["alpha.md"]["mtime"]

    def test_stat_folder_trailing_slash(self, tree):
        """Should normalize a trailing slash and count children."""
        result = _service(tree).stat("a/")
        assert result.path == "a"
        assert result.kind == "directory"
        assert result.metadata.children_count == 1

    def test_stat_missing(self, tree):
        """Should report a missing path without metadata."""
        result = _service(tree).stat("nope.md")
        assert result.exists is False
        assert result.metadata is None

    def test_exists(self, tree):
        """Should report existence and kind."""
        service = _service(tree)
        assert service.exists("alpha.md").kind == "file"
        assert service.exists("B/deep").kind == "directory"
        assert service.exists(".").exists is True
        assert service.exists("B/nope.md").exists is False


class TestVaultInfo:
    """Tests for QueryService.vault_info."""

    def test_counts(self, tree):
        """Should count files, folders, notes and total size."""
        tree.add_file("img.png", "png")
        info = _service(tree).vault_info()
        assert info.name == "memory"
        assert info.path == "memory://vault"
        assert info.total_folders == 3
        assert info.total_files == 5
        assert info.markdown_files == 4
        assert info.total_size == sum(len(f["content"]) for f in tree.files.values())


WAYPOINT_NOTE = """# Projects

%% Begin Waypoint %%
- [[Alpha]]
- [[Beta]]
%% End Waypoint %%
"""


class TestWaypoints:
    """Tests for folder_waypoint and is_folder_note."""

    @pytest.mark.anyio
    async def test_folder_waypoint(self, memory_vault):
        """Should return the waypoint range, links and raw block."""
        memory_vault.add_file("projects/projects.md", WAYPOINT_NOTE)
        result = await _service(memory_vault).folder_waypoint("projects/projects.md")
        assert result.has_waypoint is True
        assert result.waypoint_range == {"start": 3, "end": 6}
        assert result.links == ["Alpha", "Beta"]
        assert result.raw_content == "- [[Alpha]]\n- [[Beta]]"

    @pytest.mark.anyio
    async def test_no_waypoint(self, memory_vault):
        """Should report a note without a waypoint."""
        memory_vault.add_file("plain.md", "nothing here")
        result = await _service(memory_vault).folder_waypoint("plain.md")
        assert result.has_waypoint is False
        assert result.links is None

    @pytest.mark.anyio
    async def test_folder_waypoint_on_folder(self, memory_vault):
        """Should refuse a folder path."""
        memory_vault.add_folder("projects")
        with pytest.raises(NotAFileError):
            await _service(memory_vault).folder_waypoint("projects")

    @pytest.mark.anyio
    @pytest.mark.parametrize("path,content,reason", [
        ("projects/projects.md", WAYPOINT_NOTE, "both"),
        ("projects/projects.md", "no marker", "basename_match"),
        ("projects/index.md", WAYPOINT_NOTE, "waypoint_marker"),
        ("projects/index.md", "no marker", "none"),
        ("root.md", "no marker", "none"),
    ])
    async def test_is_folder_note(self, memory_vault, path, content, reason):
        """Should classify folder notes by name and waypoint marker."""
        memory_vault.add_file(path, content)
        result = await _service(memory_vault).is_folder_note(path)
        assert result.reason == reason
        assert result.is_folder_note is (reason != "none")
        if result.is_folder_note:
            assert result.folder_path == "projects"
        else:
            assert result.folder_path is None


@pytest.fixture
def linked(memory_vault):
    memory_vault.add_file("target.md", "# Target\n\n## Usage\n")
    memory_vault.add_file("a.md", "See [[target]] and [[target|T]].")
    memory_vault.add_file("b.md", "[[target]] and target again")
    memory_vault.add_file("c.md", "The Target, then target again; targeted no.")
    memory_vault.add_file("d.md", "Nothing relevant.")
    return memory_vault


class TestResolveWikilink:
    """Tests for QueryService.resolve_wikilink."""

    def test_resolves_with_brackets(self, linked):
        """Should strip brackets and resolve the target."""
        result = _service(linked).resolve_wikilink("a.md", "[[target#Usage|alias]]")
        assert result.resolved is True
        assert result.target_path == "target.md"
        assert result.link_text == "target#Usage|alias"
        assert result.suggestions is None

    def test_unresolved_suggestions(self, linked):
        """Should offer suggestions for an unresolved link."""
        result = _service(linked).resolve_wikilink("a.md", "targt")
        assert result.resolved is False
        assert result.target_path is None
        assert result.suggestions[0].path == "target.md"

    def test_heading_only_resolves_to_source(self, linked):
        """Should resolve a heading-only link to the source note."""
        result = _service(linked).resolve_wikilink("a.md", "#Usage")
        assert result.target_path == "a.md"

    def test_empty_link_text(self, linked):
        """Should reject empty link text."""
        with pytest.raises(InvalidArgumentError):
            _service(linked).resolve_wikilink("a.md", "[[ ]]")

    def test_missing_source(self, linked):
        """Should raise NotFound for a missing source note."""
        with pytest.raises(NotFoundError):
            _service(linked).resolve_wikilink("missing.md", "target")


class TestValidateWikilinks:
    """Tests for QueryService.validate_wikilinks."""

    @pytest.mark.anyio
    async def test_report(self, linked):
        """Should split resolved and unresolved links with suggestions."""
        linked.add_file("e.md", "[[target]] and [[targt]]")
        report = await _service(linked).validate_wikilinks("e.md")
        assert report.total_links == 2
        assert [r.target for r in report.resolved_links] == ["target.md"]
        assert [u.text for u in report.unresolved_links] == ["[[targt]]"]
        assert report.unresolved_links[0].suggestions[0].path == "target.md"


class TestBacklinks:
    """Tests for QueryService.backlinks."""

    @pytest.mark.anyio
    async def test_linked_only(self, linked):
        """Should list linked sources with link positions and snippets."""
        report = await _service(linked).backlinks("target.md")
        assert report.total_backlinks == 2
        assert [b.source_path for b in report.backlinks] == ["a.md", "b.md"]
        a = report.backlinks[0]
        assert a.type == "linked"
        assert [(o.line, o.column) for o in a.occurrences] == [(1, 4), (1, 19)]
        assert a.occurrences[0].snippet == "See [[target]] and [[target|T]]."

    @pytest.mark.anyio
    async def test_unlinked_mentions(self, linked):
        """Should add unlinked mentions after linked sources."""
        report = await _service(linked).backlinks("target.md", include_unlinked=True)
        assert [(b.source_path, b.type) for b in report.backlinks] == [
            ("a.md", "linked"),
            ("b.md", "linked"),
            ("c.md", "unlinked"),
        ]
        mentions = report.backlinks[2].occurrences
        assert [(o.line, o.column) for o in mentions] == [(1, 4), (1, 17)]

    @pytest.mark.anyio
    async def test_without_snippets_skips_reads(self, linked):
        """Should not read sources when snippets are off."""
        report = await _service(linked).backlinks("target.md", include_snippets=False)
        assert all(o.snippet is None for b in report.backlinks for o in b.occurrences)
        assert linked.reads == []

    @pytest.mark.anyio
    async def test_no_backlinks(self, linked):
        """Should return an empty report for an orphan note."""
        report = await _service(linked).backlinks("d.md")
        assert report.backlinks == []
        assert report.total_backlinks == 0

    @pytest.mark.anyio
    async def test_mention_scan_skips_unreadable(self, linked):
        """Should skip sources that cannot be read during the mention scan."""
        linked.fail.add("read")
        report = await _service(linked).backlinks(
            "target.md", include_unlinked=True, include_snippets=False
        )
        assert [b.type for b in report.backlinks] == ["linked", "linked"]
