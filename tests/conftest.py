"""Shared test fixtures and configuration."""

import logging
import subprocess
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest


class FakeGit:
    """Scriptable stand-in for `subprocess.run` calls to git.

    Responses are keyed by an argument prefix; the longest matching prefix
    wins. A list of responses is consumed one per call, the last one repeats.
    Unscripted commands succeed with empty output.
    """

    def __init__(self):
        self.responses = {}
        self.calls = []

    def set(self, args, stdout="", stderr="", returncode=0):
        self.responses[tuple(args)] = [(stdout, stderr, returncode)]

    def set_sequence(self, args, results):
        self.responses[tuple(args)] = list(results)

    def fail(self, args, stderr, returncode=1, stdout=""):
        self.set(args, stdout=stdout, stderr=stderr, returncode=returncode)

    def calls_to(self, *prefix):
        return [c for c in self.calls if c[: len(prefix)] == prefix]

    def __call__(self, cmd, **kwargs):
        args = tuple(cmd[1:])
        self.calls.append(args)

        match = None
        for key in self.responses:
            if args[: len(key)] == key and (match is None or len(key) > len(match)):
                match = key

        stdout, stderr, returncode = "", "", 0
        if match is not None:
            queue = self.responses[match]
            stdout, stderr, returncode = queue.pop(0) if len(queue) > 1 else queue[0]

        if returncode != 0:
            raise subprocess.CalledProcessError(returncode, cmd, output=stdout, stderr=stderr)

        result = MagicMock()
        result.stdout = stdout
        result.stderr = stderr
        result.returncode = 0
        return result


@pytest.fixture
def fake_git(mocker):
    """Mock subprocess.run with a scriptable git."""
    fake = FakeGit()
    mocker.patch("subprocess.run", side_effect=fake)
    return fake


@pytest.fixture
def no_sleep(mocker):
    """Skip the retry backoff."""
    return mocker.patch("aicommits.git.runner.time.sleep")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, mocker):
    """Keep the real environment and .env files out of config loading."""
    monkeypatch.delenv("OLLAMA_HOST", raising=False)
    mocker.patch("aicommits.config.load_dotenv")
    yield
    # The CLI installs its own handler on the package logger
    package_logger = logging.getLogger("aicommits")
    package_logger.handlers = []
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_numstat():
    """numstat output with a text file and a binary file."""
    return "3\t1\tsrc/a.ts\n0\t0\tassets/logo.png\n"


@pytest.fixture
def sample_diff_content():
    """Staged diff with a new, a modified, a deleted and a renamed file."""
    return """diff --git a/new_file.py b/new_file.py
new file mode 100644
index 0000000..e69de29
--- /dev/null
+++ b/new_file.py
@@ -0,0 +1,2 @@
+def hello():
+    print("Hello, world!")
diff --git a/existing_file.py b/existing_file.py
index 1234567..abcdefa 100644
--- a/existing_file.py
+++ b/existing_file.py
@@ -1,2 +1,3 @@
 def main():
-    print("old")
+    print("new")
+    return True
diff --git a/old_module.py b/old_module.py
deleted file mode 100644
index 1234567..0000000
--- a/old_module.py
+++ /dev/null
@@ -1 +0,0 @@
-x = 1
diff --git a/src/old_name.py b/src/new_name.py
similarity index 100%
rename from src/old_name.py
rename to src/new_name.py
"""


@pytest.fixture
def staged_repo(fake_git):
    """A repository with staged changes."""
    fake_git.set(["rev-parse", "--git-dir"], stdout=".git\n")
    fake_git.set(["diff", "--staged", "--name-only"], stdout="src/a.ts\n")
    return fake_git
