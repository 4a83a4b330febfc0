"""Tests for aicommits.git.diff module."""

import pytest

from aicommits.git import (
    DiffSet,
    FileChange,
    FileStatus,
    GitError,
    RepositoryError,
    StagingError,
    calculate_summary,
    determine_file_status,
    extract_file_diff,
    get_staged_diff,
    parse_numstat,
)


class TestParseNumstat:
    """Tests for parse_numstat function."""

    def test_text_and_binary_files(self, sample_numstat):
        """Test counts for a text file and a binary file."""
        files = parse_numstat(sample_numstat, "")

        assert [f.path for f in files] == ["src/a.ts", "assets/logo.png"]
        assert files[0].additions == 3
        assert files[0].deletions == 1
        assert files[1].additions == 0
        assert files[1].deletions == 0
        assert all(f.status == FileStatus.MODIFIED for f in files)

    def test_binary_dash_counts(self):
        """Test that numstat's dash marker for binary files reads as zero."""
        files = parse_numstat("-\t-\timage.png\n", "")

        assert files[0].additions == 0
        assert files[0].deletions == 0

    def test_malformed_counts_read_as_zero(self):
        """Test that unparseable or negative counts read as zero."""
        files = parse_numstat("x\t-4\tweird.txt\n", "")

        assert files[0].additions == 0
        assert files[0].deletions == 0

    def test_skips_short_and_blank_lines(self):
        """Test that lines without three fields are ignored."""
        files = parse_numstat("\n1\t2\n\n4\t5\tok.py\n", "")

        assert [f.path for f in files] == ["ok.py"]

    def test_path_with_spaces(self):
        """Test that paths with spaces survive."""
        diff = (
            "diff --git a/my file.py b/my file.py\n"
            "new file mode 100644\n"
            "--- /dev/null\n"
            "+++ b/my file.py\n"
            "@@ -0,0 +1 @@\n"
            "+x = 1\n"
        )

        files = parse_numstat("1\t0\tmy file.py\n", diff)

        assert files[0].path == "my file.py"
        assert files[0].status == FileStatus.ADDED
        assert "+x = 1" in files[0].diff

    def test_statuses_and_per_file_diff(self, sample_diff_content):
        """Test status detection and diff extraction per file."""
        numstat = (
            "2\t0\tnew_file.py\n"
            "2\t1\texisting_file.py\n"
            "0\t1\told_module.py\n"
            "0\t0\tsrc/{old_name.py => new_name.py}\n"
        )

        files = parse_numstat(numstat, sample_diff_content)
        by_path = {f.path: f for f in files}

        assert by_path["new_file.py"].status == FileStatus.ADDED
        assert by_path["existing_file.py"].status == FileStatus.MODIFIED
        assert by_path["old_module.py"].status == FileStatus.DELETED
        assert by_path["src/new_name.py"].status == FileStatus.RENAMED
        assert by_path["src/new_name.py"].old_path == "src/old_name.py"

        existing = by_path["existing_file.py"].diff
        assert existing.startswith("diff --git a/existing_file.py b/existing_file.py")
        assert '+    print("new")' in existing
        assert "new_file.py" not in existing

    def test_arrow_rename_without_section(self):
        """Test plain arrow notation when the diff has no matching section."""
        files = parse_numstat("0\t0\told.txt => new.txt\n", "")

        assert files[0].path == "new.txt"
        assert files[0].old_path == "old.txt"
        assert files[0].status == FileStatus.RENAMED
        assert files[0].diff == ""

    def test_brace_rename_with_empty_side(self):
        """Test brace rename where one side is empty."""
        files = parse_numstat("1\t1\tsrc/{ => core}/engine.py\n", "")

        assert files[0].path == "src/core/engine.py"
        assert files[0].old_path == "src/engine.py"

    def test_quoted_non_ascii_path(self):
        """Test paths git prints in C-style quotes with octal escapes."""
        diff = (
            'diff --git "a/t\\303\\244st.txt" "b/t\\303\\244st.txt"\n'
            "new file mode 100644\n"
            "index 0000000..9daeafb\n"
            "--- /dev/null\n"
            '+++ "b/t\\303\\244st.txt"\n'
            "@@ -0,0 +1,2 @@\n"
            "+one\n"
            "+two\n"
        )

        files = parse_numstat('2\t0\t"t\\303\\244st.txt"\n', diff)

        assert files[0].path == "täst.txt"
        assert files[0].status == FileStatus.ADDED
        assert files[0].additions == 2
        assert "+two" in files[0].diff

    def test_quoted_rename(self):
        """Test a rename where both sides are quoted."""
        diff = (
            'diff --git "a/caf\\303\\251.md" "b/docs/caf\\303\\251 \\"menu\\".md"\n'
            "similarity index 100%\n"
            'rename from "caf\\303\\251.md"\n'
            'rename to "docs/caf\\303\\251 \\"menu\\".md"\n'
        )

        files = parse_numstat(
            '0\t0\t"caf\\303\\251.md" => "docs/caf\\303\\251 \\"menu\\".md"\n', diff
        )

        assert files[0].path == 'docs/café "menu".md'
        assert files[0].old_path == "café.md"
        assert files[0].status == FileStatus.RENAMED
        assert files[0].diff.startswith("diff --git")

    def test_quoted_destination_only(self):
        """Test a header where only the destination needs quoting."""
        diff = (
            'diff --git a/plain.txt "b/tab\\there.txt"\n'
            "similarity index 100%\n"
            "rename from plain.txt\n"
            'rename to "tab\\there.txt"\n'
        )

        files = parse_numstat('0\t0\tplain.txt => "tab\\there.txt"\n', diff)

        assert files[0].path == "tab\there.txt"
        assert files[0].old_path == "plain.txt"
        assert files[0].status == FileStatus.RENAMED

    def test_preserves_numstat_order(self):
        """Test that file order follows git's output."""
        files = parse_numstat("1\t0\tz.py\n1\t0\ta.py\n1\t0\tm.py\n", "")

        assert [f.path for f in files] == ["z.py", "a.py", "m.py"]


class TestDetermineFileStatus:
    """Tests for determine_file_status function."""

    def test_marker_from_other_file_is_ignored(self):
        """Test that markers only count inside the file's own section."""
        diff = (
            "diff --git a/app.py b/app.py\n"
            "index 1..2 100644\n"
            "--- a/app.py\n"
            "+++ b/app.py\n"
            "@@ -1 +1 @@\n"
            "-a\n"
            "+b\n"
            "diff --git a/src/app.py b/src/app.py\n"
            "new file mode 100644\n"
            "--- /dev/null\n"
            "+++ b/src/app.py\n"
        )

        assert determine_file_status("app.py", diff) == FileStatus.MODIFIED
        assert determine_file_status("src/app.py", diff) == FileStatus.ADDED

    def test_marker_text_in_hunk_is_ignored(self):
        """Test that marker-like content lines do not change the status."""
        diff = (
            "diff --git a/notes.txt b/notes.txt\n"
            "index 1..2 100644\n"
            "--- a/notes.txt\n"
            "+++ b/notes.txt\n"
            "@@ -1 +1,2 @@\n"
            " hello\n"
            "+new file mode 100644\n"
        )

        assert determine_file_status("notes.txt", diff) == FileStatus.MODIFIED

    def test_missing_file_is_modified(self):
        """Test default status when the file has no section."""
        assert determine_file_status("absent.py", "") == FileStatus.MODIFIED

    def test_deleted(self, sample_diff_content):
        """Test deleted file detection."""
        assert determine_file_status("old_module.py", sample_diff_content) == FileStatus.DELETED


class TestExtractFileDiff:
    """Tests for extract_file_diff function."""

    def test_extracts_only_named_file(self, sample_diff_content):
        """Test that one file's section is returned with its header."""
        section = extract_file_diff("new_file.py", sample_diff_content)

        assert section.startswith("diff --git a/new_file.py b/new_file.py")
        assert 'print("Hello, world!")' in section
        assert "existing_file.py" not in section

    def test_absent_file_returns_empty(self, sample_diff_content):
        """Test empty text for a file outside the diff."""
        assert extract_file_diff("nope.py", sample_diff_content) == ""

    def test_regex_characters_in_path(self):
        """Test that paths are compared literally."""
        diff = (
            "diff --git a/lib/a+b.py b/lib/a+b.py\n"
            "@@ -1 +1 @@\n"
            "-1\n"
            "+2\n"
            "diff --git a/lib/aab.py b/lib/aab.py\n"
            "@@ -1 +1 @@\n"
            "-3\n"
            "+4\n"
        )

        section = extract_file_diff("lib/a+b.py", diff)

        assert "+2" in section
        assert "+4" not in section


class TestCalculateSummary:
    """Tests for calculate_summary function."""

    def test_totals(self):
        """Test totals over several files."""
        files = [
            FileChange(path="a", status=FileStatus.MODIFIED, additions=3, deletions=1),
            FileChange(path="b", status=FileStatus.ADDED, additions=10),
            FileChange(path="c", status=FileStatus.MODIFIED),
        ]

        summary = calculate_summary(files)

        assert summary.additions == 13
        assert summary.deletions == 1
        assert summary.files_changed == 3

    def test_empty(self):
        """Test summary of no files."""
        summary = calculate_summary([])

        assert (summary.additions, summary.deletions, summary.files_changed) == (0, 0, 0)


class TestGetStagedDiff:
    """Tests for get_staged_diff function."""

    def test_returns_diff_set(self, staged_repo, sample_numstat):
        """Test the parsed staged diff."""
        staged_repo.set(["diff", "--staged", "--numstat"], stdout=sample_numstat)
        staged_repo.set(
            ["diff", "--staged"],
            stdout=(
                "diff --git a/src/a.ts b/src/a.ts\n"
                "index 1..2 100644\n"
                "--- a/src/a.ts\n"
                "+++ b/src/a.ts\n"
                "@@ -1,2 +1,4 @@\n"
                "-old\n"
                "+new\n"
                "+more\n"
                "+lines\n"
                "diff --git a/assets/logo.png b/assets/logo.png\n"
                "index 3..4 100644\n"
                "Binary files a/assets/logo.png and b/assets/logo.png differ\n"
            ),
        )

        diff = get_staged_diff()

        assert isinstance(diff, DiffSet)
        assert diff.paths == ["src/a.ts", "assets/logo.png"]
        assert diff.summary.additions == 3
        assert diff.summary.deletions == 1
        assert diff.summary.files_changed == 2
        assert "Binary files" in diff.files[1].diff

    def test_empty_numstat_raises_staging_error(self, staged_repo):
        """Test that an empty numstat is reported as nothing staged."""
        staged_repo.set(["diff", "--staged", "--numstat"], stdout="\n")

        with pytest.raises(StagingError):
            get_staged_diff()

    def test_not_a_repository(self, fake_git):
        """Test that the repository check runs first."""
        fake_git.fail(["rev-parse"], "fatal: not a git repository", returncode=128)

        with pytest.raises(RepositoryError):
            get_staged_diff()

        assert fake_git.calls_to("diff", "--staged", "--numstat") == []

    def test_nothing_staged(self, fake_git):
        """Test staging error before any diff query."""
        fake_git.set(["rev-parse", "--git-dir"], stdout=".git\n")
        fake_git.set(["diff", "--staged", "--name-only"], stdout="")
        fake_git.set(["status", "--porcelain"], stdout=" M a.py\n")

        with pytest.raises(StagingError) as exc_info:
            get_staged_diff()

        assert exc_info.value.unstaged_count == 1

    def test_unexpected_error_wrapped(self, staged_repo, mocker):
        """Test that parsing failures become GitError."""
        staged_repo.set(["diff", "--staged", "--numstat"], stdout="1\t0\ta.py\n")
        mocker.patch("aicommits.git.diff.parse_numstat", side_effect=RuntimeError("boom"))

        with pytest.raises(GitError) as exc_info:
            get_staged_diff()

        assert exc_info.value.code == "DIFF_FAILED"
