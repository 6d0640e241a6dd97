"""Interactive selection and confirmation of branches to delete."""

from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from git_del_branches.config import Config
from git_del_branches.credentials import CredentialChain
from git_del_branches.deletion import DeletionOrchestrator, DeletionReport, Selection
from git_del_branches.display import candidate_label, selection_table, sort_candidates
from git_del_branches.git import BranchCandidate, GitRepo
from git_del_branches.logging_config import get_logger
from git_del_branches.prompts import OperationCancelled, Prompter

logger = get_logger(__name__)


class FlowState(Enum):
    """Where the interactive flow is."""

    IDLE = "idle"
    SELECTING = "selecting"
    CONFIRMING_UPSTREAM_SCOPE = "confirming-upstream-scope"
    CONFIRMING_EXECUTION = "confirming-execution"
    EXECUTING = "executing"
    CANCELLED = "cancelled"


class FlowController:
    """Walks the operator from picking branches to the final go-ahead.

    Selecting branches never deletes anything by itself: the operator has to
    say which scope to delete in and then confirm explicitly, both prompts
    defaulting to no.
    """

    def __init__(self, prompter: Prompter, console: Console, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.prompter = prompter
        self.console = console
        self.clock = clock
        self.state = FlowState.IDLE

    def run(self, candidates: Sequence[BranchCandidate]) -> Optional[Selection]:
        """Return the confirmed selection, or None when nothing is to be deleted."""
        try:
            return self._run(candidates)
        except OperationCancelled:
            logger.info("Cancelled while %s", self.state.value)
            self.state = FlowState.CANCELLED
            self.console.print("[yellow]Operation cancelled[/yellow] 🛑")
            return None

    def _run(self, candidates: Sequence[BranchCandidate]) -> Optional[Selection]:
        self.state = FlowState.SELECTING
        now = self.clock() if self.clock else None
        labels = [candidate_label(candidate, now) for candidate in candidates]
        chosen = self.prompter.select("Select branches to delete", labels)
        if not chosen:
            self.state = FlowState.CANCELLED
            self.console.print("[yellow]No branches selected[/yellow]")
            return None
        branches = tuple(candidates[index] for index in chosen)

        self.state = FlowState.CONFIRMING_UPSTREAM_SCOPE
        delete_upstream = self.prompter.confirm("Do you want to delete the upstream branches also?", default=False)

        self.console.print()
        self.console.print(selection_table(branches, delete_upstream))
        self.console.print()

        self.state = FlowState.CONFIRMING_EXECUTION
        if not self.prompter.confirm("Proceed with deletion?", default=False):
            self.state = FlowState.CANCELLED
            self.console.print("[yellow]Operation cancelled[/yellow] 🛑")
            return None

        self.state = FlowState.EXECUTING
        return Selection(branches=branches, delete_upstream=delete_upstream, confirmed=True)


def cleanup(
    repo: GitRepo,
    config: Config,
    prompter: Prompter,
    credentials: CredentialChain,
    console: Console,
) -> Optional[DeletionReport]:
    """Offer the repository's branches for deletion and delete the chosen ones.

    Returns the deletion report, or None when the run ended without deleting.

    Raises:
        GitError: If the branches cannot be listed
    """
    candidates = sort_candidates(repo.get_candidates(config.protected_branches))
    if not candidates:
        console.print("[green]No branches eligible for deletion[/green] ✨")
        current = repo.get_current_branch_name()
        if current and current not in config.protected_branches:
            console.print(
                f"[dim]You are stuck on [cyan]{escape(current)}[/cyan]; "
                "check out another branch to be able to delete it.[/dim]"
            )
        return None

    selection = FlowController(prompter, console).run(candidates)
    if selection is None:
        return None

    orchestrator = DeletionOrchestrator(repo, credentials, console, remote_name=config.remote_name)
    return orchestrator.execute(selection)
