import shutil
import subprocess
from pathlib import Path

import pytest

from hookforge import repo
from hookforge.repo import RepoError

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _git(cwd: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    _git(tmp_path, "init", "-q")
    _git(tmp_path, "config", "user.email", "dev@example.com")
    _git(tmp_path, "config", "user.name", "dev")
    _git(tmp_path, "checkout", "-q", "-b", "work")
    return tmp_path


def test_staged_files_lists_the_index(git_repo: Path):
    (git_repo / "src").mkdir()
    (git_repo / "src" / "app.py").write_text("x = 1\n", encoding="utf-8")
    (git_repo / "notes.md").write_text("draft\n", encoding="utf-8")
    _git(git_repo, "add", "src/app.py")

    assert repo.staged_files(git_repo) == ["src/app.py"]


def test_nothing_staged(git_repo: Path):
    assert repo.staged_files(git_repo) == []


def test_current_branch(git_repo: Path):
    assert repo.current_branch(git_repo) == "work"


def test_detached_head_has_no_branch(git_repo: Path):
    (git_repo / "a.txt").write_text("a\n", encoding="utf-8")
    _git(git_repo, "add", "a.txt")
    _git(git_repo, "commit", "-q", "-m", "init")
    _git(git_repo, "checkout", "-q", "--detach")

    assert repo.current_branch(git_repo) is None


def test_outside_a_repository_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))

    with pytest.raises(RepoError):
        repo.staged_files(tmp_path)
