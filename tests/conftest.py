"""Shared pytest fixtures for compeek tests."""

import os
import shutil
import subprocess
from pathlib import Path
from typing import AsyncGenerator, Callable

import httpx
import pytest

# Ensure developer environment settings do not affect test results.
for _key in list(os.environ):
    if _key.startswith("COMPEEK_"):
        os.environ.pop(_key)

from compeek.comments import CommentStore
from compeek.diff import parse_diff_output
from compeek.main import create_app
from compeek.models import DiffResponse

SAMPLE_DIFF = """\
diff --git a/docs/readme.md b/docs/readme.md
new file mode 100644
index 0000000..e69de29
--- /dev/null
+++ b/docs/readme.md
@@ -0,0 +1,2 @@
+# Title
+body
diff --git a/src/app.py b/src/app.py
index 83db48f..bf269f4 100644
--- a/src/app.py
+++ b/src/app.py
@@ -1,3 +1,3 @@
 import os
-print("old")
+print("new")
 exit()
"""


@pytest.fixture
def sample_diff_response() -> DiffResponse:
    """A two-file diff: one added file and one modified file."""
    return DiffResponse(files=parse_diff_output(SAMPLE_DIFF), commit="aaaaaaa..bbbbbbb")


@pytest.fixture
def comment_store() -> CommentStore:
    return CommentStore()


@pytest.fixture
def static_dir(tmp_path, monkeypatch) -> Path:
    """Point the SPA fallback at an empty temporary directory."""
    path = tmp_path / "static_ui"
    path.mkdir()
    monkeypatch.setenv("COMPEEK_STATIC_DIR", str(path))
    return path


@pytest.fixture
async def api_client(
    sample_diff_response, comment_store, static_dir
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client bound to an app serving the sample diff."""
    app = create_app(sample_diff_response, comments=comment_store)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Run AnyIO-marked tests under asyncio only (FastAPI/uvicorn are asyncio-native)."""
    return "asyncio"


# --- Real git repositories ---


@pytest.fixture
def run_git() -> Callable[..., str]:
    """Run a git command in a repository and return its stdout."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")

    def _run(repo: Path, *args: str) -> str:
        result = subprocess.run(
            ["git", "-C", str(repo), *args],
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    return _run


@pytest.fixture
def empty_repo(tmp_path, run_git) -> Path:
    """An initialized repository with no commits."""
    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init", "-q")
    run_git(repo, "config", "user.email", "test@example.com")
    run_git(repo, "config", "user.name", "Test User")
    run_git(repo, "config", "commit.gpgsign", "false")
    return repo


@pytest.fixture
def git_repo(empty_repo, run_git) -> Path:
    """A repository with one commit containing ``app.py``."""
    (empty_repo / "app.py").write_text("a = 1\nb = 2\nc = 3\n")
    run_git(empty_repo, "add", "app.py")
    run_git(empty_repo, "commit", "-q", "-m", "initial")
    return empty_repo
