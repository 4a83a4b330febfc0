"""Tests for aicommits.git.repository module."""

import logging

import pytest

from aicommits.git import (
    RepositoryError,
    StagingError,
    has_commits,
    has_staged_changes,
    is_repository,
    validate_state,
)


NOT_A_REPO = "fatal: not a git repository (or any of the parent directories): .git"


class TestIsRepository:
    """Tests for is_repository function."""

    def test_inside_repository(self, fake_git):
        """Test that a repository is detected."""
        fake_git.set(["rev-parse", "--git-dir"], stdout=".git\n")

        assert is_repository() is True

    def test_outside_repository(self, fake_git):
        """Test that a missing repository is reported as False."""
        fake_git.fail(["rev-parse"], NOT_A_REPO, returncode=128)

        assert is_repository() is False

    def test_other_failure_is_false_and_logged(self, fake_git, caplog):
        """Test that unexpected failures are logged and reported as False."""
        fake_git.fail(["rev-parse"], "fatal: something broke")

        with caplog.at_level(logging.WARNING, logger="aicommits"):
            assert is_repository() is False

        assert "Error checking git repository status" in caplog.text

    def test_git_missing_is_false(self, mocker):
        """Test that a missing git executable is reported as False."""
        mocker.patch("subprocess.run", side_effect=FileNotFoundError())

        assert is_repository() is False


class TestHasStagedChanges:
    """Tests for has_staged_changes function."""

    def test_with_staged_files(self, fake_git):
        """Test True when files are staged."""
        fake_git.set(["diff", "--staged", "--name-only"], stdout="a.py\nb.py\n")

        assert has_staged_changes() is True

    def test_without_staged_files(self, fake_git):
        """Test False when nothing is staged."""
        fake_git.set(["diff", "--staged", "--name-only"], stdout="\n")

        assert has_staged_changes() is False

    def test_repository_error_propagates(self, fake_git):
        """Test that a missing repository is not reported as nothing staged."""
        fake_git.fail(["diff"], NOT_A_REPO, returncode=128)

        with pytest.raises(RepositoryError):
            has_staged_changes()

    def test_other_failure_is_false(self, fake_git):
        """Test that other failures are reported as False."""
        fake_git.fail(["diff"], "fatal: unexpected")

        assert has_staged_changes() is False


class TestValidateState:
    """Tests for validate_state function."""

    def test_passes_with_staged_changes(self, staged_repo):
        """Test that a repository with staged changes passes."""
        validate_state()

    def test_not_a_repository(self, fake_git):
        """Test that a missing repository raises RepositoryError."""
        fake_git.fail(["rev-parse"], NOT_A_REPO, returncode=128)

        with pytest.raises(RepositoryError) as exc_info:
            validate_state()

        assert "Please run this command from within a git repository" in exc_info.value.message

    def test_repository_checked_before_staging(self, fake_git):
        """Test that no staging check runs outside a repository."""
        fake_git.fail(["rev-parse"], NOT_A_REPO, returncode=128)
        fake_git.set(["diff", "--staged", "--name-only"], stdout="")

        with pytest.raises(RepositoryError):
            validate_state()

        assert fake_git.calls_to("diff") == []

    def test_nothing_staged_reports_counts(self, fake_git):
        """Test that the staging error carries unstaged and untracked counts."""
        fake_git.set(["rev-parse", "--git-dir"], stdout=".git\n")
        fake_git.set(["diff", "--staged", "--name-only"], stdout="")
        fake_git.set(
            ["status", "--porcelain"],
            stdout=" M src/a.py\n M src/b.py\n?? notes.txt\n",
        )

        with pytest.raises(StagingError) as exc_info:
            validate_state()

        error = exc_info.value
        assert error.message == "No staged changes found"
        assert error.unstaged_count == 2
        assert error.untracked_count == 1
        assert "Stage 2 unstaged file(s)" in error.recovery_hint

    def test_nothing_staged_status_unreadable(self, fake_git):
        """Test the generic staging error when status cannot be read."""
        fake_git.set(["rev-parse", "--git-dir"], stdout=".git\n")
        fake_git.set(["diff", "--staged", "--name-only"], stdout="")
        fake_git.fail(["status"], "fatal: index file corrupt")

        with pytest.raises(StagingError) as exc_info:
            validate_state()

        assert "Please stage some changes" in exc_info.value.message
        assert exc_info.value.unstaged_count == 0


class TestHasCommits:
    """Tests for has_commits function."""

    def test_with_commits(self, fake_git):
        """Test True when HEAD exists."""
        fake_git.set(["log"], stdout="abc1234 feat: init\n")

        assert has_commits() is True

    def test_fresh_repository(self, fake_git, caplog):
        """Test False without a warning in a repository with no commits."""
        fake_git.fail(
            ["log"],
            "fatal: your current branch 'main' does not have any commits yet",
            returncode=128,
        )

        with caplog.at_level(logging.WARNING, logger="aicommits"):
            assert has_commits() is False

        assert caplog.text == ""

    def test_unexpected_failure_logged(self, fake_git, caplog):
        """Test that other failures are logged and reported as False."""
        fake_git.fail(["log"], "fatal: disk on fire")

        with caplog.at_level(logging.WARNING, logger="aicommits"):
            assert has_commits() is False

        assert "Error checking commit history" in caplog.text
