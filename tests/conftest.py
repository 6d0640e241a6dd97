"""Test configuration and fixtures."""

import time
from pathlib import Path
from typing import Generator, Optional, Sequence, Union

import pytest
from git import Actor, Repo
from rich.console import Console

DAY = 24 * 60 * 60


def git_date(days_ago: float) -> str:
    """Date in git's internal format, ``days_ago`` days before now."""
    return f"{int(time.time() - days_ago * DAY)} +0000"


def commit_on_branch(
    repo: Repo,
    name: str,
    days_ago: float,
    author: Actor,
    start: str = "main",
) -> None:
    """Create branch ``name`` from ``start`` with one commit dated ``days_ago``."""
    branch = repo.create_head(name, start)
    branch.checkout()
    test_file = Path(repo.working_dir) / f"{name.replace('/', '_')}.txt"
    test_file.write_text(f"{name} content")
    repo.index.add([test_file.name])
    date = git_date(days_ago)
    repo.index.commit(f"Add {name}", author=author, committer=author, author_date=date, commit_date=date)
    repo.heads.main.checkout()


@pytest.fixture
def test_env(tmp_path: Path) -> Generator[tuple[Path, Path], None, None]:
    """Create a test environment with local and remote repositories.

    The local repository is on ``main`` and has:
    - ``feature-a``: tracks ``origin/feature-a``, last commit 10 days ago
    - ``feature-b``: no upstream, last commit 2 days ago
    - ``develop``: protected, last commit 30 days ago

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    Repo.init(remote_path, bare=True)
    local_repo = Repo.init(local_path)

    author = Actor("Test User", "test@example.com")
    with local_repo.config_writer() as writer:
        writer.set_value("user", "name", author.name)
        writer.set_value("user", "email", author.email)

    readme = local_path / "README.md"
    readme.write_text("# Test Repository")
    local_repo.index.add(["README.md"])
    date = git_date(60)
    local_repo.index.commit("Initial commit", author=author, committer=author, author_date=date, commit_date=date)

    # Whatever the default branch is called, make it main
    local_repo.git.branch("-M", "main")

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")
    local_repo.heads.main.set_tracking_branch(origin.refs.main)

    commit_on_branch(local_repo, "feature-a", 10, author)
    origin.push("feature-a")
    local_repo.heads["feature-a"].set_tracking_branch(origin.refs["feature-a"])

    commit_on_branch(local_repo, "feature-b", 2, author)
    commit_on_branch(local_repo, "develop", 30, author)

    yield local_path, remote_path

    local_repo.close()


@pytest.fixture
def local_repo(test_env: tuple[Path, Path]) -> Generator[Repo, None, None]:
    local_path, _ = test_env
    repo = Repo(local_path)
    yield repo
    repo.close()


@pytest.fixture
def remote_repo(test_env: tuple[Path, Path]) -> Generator[Repo, None, None]:
    _, remote_path = test_env
    repo = Repo(remote_path)
    yield repo
    repo.close()


Answer = Union[list[int], bool, str, type[BaseException], BaseException]


class ScriptedPrompter:
    """Prompter answering from a script instead of a terminal.

    An exception class or instance in the script is raised instead of
    answering, ``OperationCancelled`` simulates the operator aborting.
    """

    def __init__(self, answers: Sequence[Answer]) -> None:
        self.answers = list(answers)
        self.asked: list[str] = []
        self.options: Optional[list[str]] = None

    def _next(self, message: str) -> Answer:
        self.asked.append(message)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message}")
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException) or (isinstance(answer, type) and issubclass(answer, BaseException)):
            raise answer
        return answer

    def select(self, message: str, options: Sequence[str]) -> list[int]:
        self.options = list(options)
        return self._next(message)

    def confirm(self, message: str, default: bool = False) -> bool:
        return self._next(message)

    def ask(self, message: str, password: bool = False) -> str:
        return self._next(message)


@pytest.fixture
def console() -> Console:
    """Console recording its output instead of writing to a terminal."""
    return Console(record=True, width=200, soft_wrap=True, force_terminal=False, color_system=None)


@pytest.fixture
def make_prompter() -> type[ScriptedPrompter]:
    return ScriptedPrompter
