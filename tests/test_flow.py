"""Tests for the interactive selection flow."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from git import Repo
from rich.console import Console

from git_del_branches.config import Config
from git_del_branches.credentials import CredentialChain, DefaultCredentials
from git_del_branches.flow import FlowController, FlowState, cleanup
from git_del_branches.git import BranchCandidate, GitRepo
from git_del_branches.prompts import OperationCancelled

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def make_candidate(name: str, days_ago: int) -> BranchCandidate:
    return BranchCandidate(name=name, upstream=None, author_name="Test User", last_commit_time=NOW - timedelta(days=days_ago))


CANDIDATES = [make_candidate("old", 10), make_candidate("new", 2)]


def run_cleanup(test_env, prompter, console):
    local_path, _ = test_env
    chain = CredentialChain([DefaultCredentials()])
    return cleanup(GitRepo(local_path), Config(), prompter, chain, console)


def head_names(path: Path) -> set[str]:
    return {head.name for head in Repo(path).heads}


def test_confirmed_selection(make_prompter, console: Console) -> None:
    prompter = make_prompter([[1], True, True])
    controller = FlowController(prompter, console, clock=lambda: NOW)

    selection = controller.run(CANDIDATES)

    assert selection.branches == (CANDIDATES[1],)
    assert selection.delete_upstream is True
    assert selection.confirmed is True
    assert controller.state == FlowState.EXECUTING
    assert prompter.options == ["old - Test User - 1 week ago", "new - Test User - 2 days ago"]
    assert "Remote branch" in console.export_text()


def test_selection_keeps_list_order(make_prompter, console: Console) -> None:
    selection = FlowController(make_prompter([[0, 1], False, True]), console).run(CANDIDATES)
    assert [branch.name for branch in selection.branches] == ["old", "new"]
    assert selection.delete_upstream is False


@pytest.mark.parametrize(
    ("answers", "state_before_cancel"),
    [
        ([OperationCancelled], 1),
        ([[0], OperationCancelled], 2),
        ([[0], True, OperationCancelled], 3),
    ],
)
def test_cancel_at_any_prompt(make_prompter, console: Console, answers, state_before_cancel) -> None:
    prompter = make_prompter(answers)
    controller = FlowController(prompter, console)

    assert controller.run(CANDIDATES) is None
    assert controller.state == FlowState.CANCELLED
    assert len(prompter.asked) == state_before_cancel
    assert "Operation cancelled" in console.export_text()


def test_declining_execution(make_prompter, console: Console) -> None:
    controller = FlowController(make_prompter([[0], True, False]), console)
    assert controller.run(CANDIDATES) is None
    assert controller.state == FlowState.CANCELLED


def test_empty_selection(make_prompter, console: Console) -> None:
    prompter = make_prompter([[]])
    assert FlowController(prompter, console).run(CANDIDATES) is None
    assert len(prompter.asked) == 1
    assert "No branches selected" in console.export_text()


def test_full_scenario(test_env: tuple[Path, Path], make_prompter, console: Console) -> None:
    """Test the oldest-first list, then deleting both branches and one upstream."""
    local_path, remote_path = test_env
    prompter = make_prompter([[0, 1], True, True])

    report = run_cleanup(test_env, prompter, console)

    assert [label.split(" ")[0] for label in prompter.options] == ["feature-a", "feature-b"]
    assert prompter.options[0].startswith("feature-a (origin/feature-a) - Test User - 1 week ago")
    assert [outcome.branch for outcome in report.outcomes] == ["feature-a", "feature-b"]
    assert report.remote_deletions == 1
    assert head_names(local_path) == {"main", "develop"}
    assert head_names(remote_path) == {"main"}
    assert console.export_text().count("Pushing") == 1


@pytest.mark.parametrize(
    "answers",
    [
        [OperationCancelled],
        [[0, 1], OperationCancelled],
        [[0, 1], True, OperationCancelled],
        [[0, 1], True, False],
    ],
)
def test_no_mutation_without_confirmation(test_env: tuple[Path, Path], make_prompter, console: Console, answers) -> None:
    local_path, remote_path = test_env
    before_local, before_remote = head_names(local_path), head_names(remote_path)

    assert run_cleanup(test_env, make_prompter(answers), console) is None

    assert head_names(local_path) == before_local
    assert head_names(remote_path) == before_remote


def test_nothing_eligible(test_env: tuple[Path, Path], local_repo: Repo, make_prompter, console: Console) -> None:
    local_repo.git.branch("-D", "feature-a", "feature-b")
    prompter = make_prompter([])

    assert run_cleanup(test_env, prompter, console) is None

    output = console.export_text()
    assert "No branches eligible for deletion" in output
    assert "stuck" not in output
    assert prompter.asked == []


def test_stuck_on_only_branch(test_env: tuple[Path, Path], local_repo: Repo, make_prompter, console: Console) -> None:
    """Test the note shown when the checked-out branch is the only deletable one."""
    local_repo.heads["feature-b"].checkout()
    local_repo.git.branch("-D", "feature-a")

    assert run_cleanup(test_env, make_prompter([]), console) is None

    output = console.export_text()
    assert "No branches eligible for deletion" in output
    assert "stuck on feature-b" in output


def test_no_stuck_note_when_detached(test_env: tuple[Path, Path], local_repo: Repo, make_prompter, console: Console) -> None:
    local_repo.git.checkout("--detach", "main")
    local_repo.git.branch("-D", "feature-a", "feature-b")

    assert run_cleanup(test_env, make_prompter([]), console) is None
    assert "stuck" not in console.export_text()
