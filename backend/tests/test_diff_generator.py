"""Unit tests for unified patch formatting and hunk grouping."""

import pytest

from models.diff import Granularity
from services.diff_engine import compute_diff
from services.diff_generator import DiffGenerator, build_hunks, format_unified_patch


def numbered(lines):
    return "".join(f"{line}\n" for line in lines)


class TestFormatUnifiedPatch:
    """Tests for format_unified_patch."""

    def test_single_changed_line(self):
        patch = format_unified_patch("a\nb\nc", "a\nX\nc", "Base", "Doc")
        assert patch == (
            "--- Base\n"
            "+++ Doc\n"
            "@@ -1,3 +1,3 @@\n"
            " a\n"
            "-b\n"
            "+X\n"
            " c\n"
            "\\ No newline at end of file\n"
        )

    def test_single_changed_line_counts(self):
        lines = format_unified_patch("a\nb\nc", "a\nX\nc", "Base", "Doc").splitlines()
        body = lines[2:]
        assert sum(1 for line in body if line.startswith("@@")) == 1
        assert [line for line in body if line.startswith("-")] == ["-b"]
        assert [line for line in body if line.startswith("+")] == ["+X"]
        assert [line for line in body if line.startswith(" ")] == [" a", " c"]

    def test_header_metadata_is_tab_separated(self):
        patch = format_unified_patch("a\n", "b\n", "Base", "Doc", "Base Version", "Current Version")
        assert patch.startswith("--- Base\tBase Version\n+++ Doc\tCurrent Version\n")

    def test_empty_base(self):
        patch = format_unified_patch("", "line1\nline2", "Base", "Doc")
        assert patch == (
            "--- Base\n"
            "+++ Doc\n"
            "@@ -0,0 +1,2 @@\n"
            "+line1\n"
            "+line2\n"
            "\\ No newline at end of file\n"
        )
        body = patch.splitlines()[2:]
        assert not any(line.startswith("-") for line in body)

    def test_empty_candidate(self):
        patch = format_unified_patch("a\nb\n", "", "Base", "Doc")
        assert "@@ -1,2 +0,0 @@\n-a\n-b\n" in patch

    def test_both_empty_returns_empty_string(self):
        assert format_unified_patch("", "", "Base", "Doc", "Base Version", "Current Version") == ""

    def test_identical_text_returns_empty_string(self):
        assert format_unified_patch("same text", "same text", "Base", "Doc") == ""

    def test_trailing_newline_change(self):
        patch = format_unified_patch("a\n", "a", "Base", "Doc")
        assert patch.endswith("@@ -1,1 +1,1 @@\n-a\n+a\n\\ No newline at end of file\n")

    def test_negative_context_rejected(self):
        with pytest.raises(ValueError):
            format_unified_patch("a\n", "b\n", context_lines=-1)


class TestBuildHunks:
    """Tests for hunk grouping."""

    base = numbered(str(n) for n in range(1, 11))
    candidate = numbered(["one"] + [str(n) for n in range(2, 10)] + ["ten"])

    def test_distant_changes_split_into_hunks(self):
        hunks = build_hunks(compute_diff(self.base, self.candidate), context_lines=3)
        assert [h.header for h in hunks] == ["@@ -1,4 +1,4 @@", "@@ -7,4 +7,4 @@"]
        assert hunks[0].lines == ["-1", "+one", " 2", " 3", " 4"]
        assert hunks[1].lines == [" 7", " 8", " 9", "-10", "+ten"]

    def test_close_changes_share_a_hunk(self):
        hunks = build_hunks(compute_diff(self.base, self.candidate), context_lines=4)
        assert [h.header for h in hunks] == ["@@ -1,10 +1,10 @@"]

    def test_zero_context(self):
        hunks = build_hunks(compute_diff("a\nb\nc\n", "a\nX\nc\n"), context_lines=0)
        assert [h.header for h in hunks] == ["@@ -2,1 +2,1 @@"]
        assert hunks[0].lines == ["-b", "+X"]

    def test_pure_insertion_names_preceding_line(self):
        hunks = build_hunks(compute_diff("a\nb\n", "a\nnew\nb\n"), context_lines=0)
        assert [h.header for h in hunks] == ["@@ -1,0 +2,1 @@"]

    def test_identical_has_no_hunks(self):
        assert build_hunks(compute_diff("a\n", "a\n")) == []

    def test_word_script_rejected(self):
        with pytest.raises(ValueError):
            build_hunks(compute_diff("a b", "a c", Granularity.WORD))


class TestDiffGenerator:
    """Tests for the DiffGenerator facade."""

    def test_generate_diff_bundle(self):
        result = DiffGenerator().generate_diff("a\nb\nc", "a\nX\nc", name="Doc B")
        assert result.name == "Doc B"
        assert result.unified_diff.startswith("--- Base\tBase Version\n+++ Doc B\tCurrent Version\n@@ -1,3 +1,3 @@\n")
        assert len(result.hunks) == 1
        assert result.stats.additions == 1
        assert result.stats.deletions == 1
        assert result.stats.unchanged == 2

    def test_default_name(self):
        result = DiffGenerator().generate_diff("a\n", "b\n")
        assert result.name == "Current"
        assert "+++ Current\tCurrent Version" in result.unified_diff

    def test_identical_has_empty_patch(self):
        result = DiffGenerator().generate_diff("same", "same")
        assert result.unified_diff == ""
        assert result.hunks == []
        assert result.script.is_identical

    def test_word_granularity_keeps_line_hunks(self):
        result = DiffGenerator().generate_diff("The cat sat", "The dog sat", granularity=Granularity.WORD)
        assert result.script.granularity == Granularity.WORD
        assert result.stats.additions == 1
        assert result.stats.deletions == 1
        assert [h.header for h in result.hunks] == ["@@ -1,1 +1,1 @@"]

    def test_context_lines_override(self):
        base = numbered(str(n) for n in range(1, 11))
        candidate = numbered(["one"] + [str(n) for n in range(2, 10)] + ["ten"])
        assert len(DiffGenerator(context_lines=3).generate_diff(base, candidate).hunks) == 2
        assert len(DiffGenerator(context_lines=3).generate_diff(base, candidate, context_lines=5).hunks) == 1
