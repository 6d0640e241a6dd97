"""Deleting the selected branches."""

from dataclasses import dataclass, field
from typing import Optional

from rich.console import Console
from rich.markup import escape

from git_del_branches.credentials import CredentialChain
from git_del_branches.git import BranchCandidate, GitError, GitRepo
from git_del_branches.logging_config import get_logger
from git_del_branches.remote import delete_remote_branch, upstream_short_name

logger = get_logger(__name__)


@dataclass(frozen=True)
class Selection:
    """Branches the operator picked, and what to do with them."""

    branches: tuple[BranchCandidate, ...]
    delete_upstream: bool = False
    confirmed: bool = False


@dataclass
class DeletionOutcome:
    """What happened to one selected branch."""

    branch: str
    local_deleted: bool = False
    local_error: Optional[str] = None
    remote_attempted: bool = False
    remote_deleted: bool = False
    remote_error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return not self.local_deleted or self.remote_error is not None


@dataclass
class DeletionReport:
    outcomes: list[DeletionOutcome] = field(default_factory=list)

    @property
    def local_failures(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.local_deleted)

    @property
    def remote_failures(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.remote_error is not None)

    @property
    def remote_deletions(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.remote_deleted)


class DeletionOrchestrator:
    """Deletes branches locally and, when asked, on their remote.

    One branch failing never stops the rest of the batch, and a remote
    failure leaves the local deletion in place.
    """

    def __init__(
        self,
        repo: GitRepo,
        credentials: CredentialChain,
        console: Console,
        remote_name: Optional[str] = None,
    ) -> None:
        self.repo = repo
        self.credentials = credentials
        self.console = console
        self.remote_name = remote_name

    def execute(self, selection: Selection) -> DeletionReport:
        report = DeletionReport()
        if not selection.confirmed:
            logger.warning("Selection was not confirmed, nothing deleted")
            return report

        for candidate in selection.branches:
            outcome = DeletionOutcome(branch=candidate.name)
            report.outcomes.append(outcome)
            self._delete_local(candidate, outcome)
            if selection.delete_upstream:
                self._delete_upstream(candidate, outcome)

        self.console.print("\n[bold bright_green]🎉 Done![/bold bright_green]")
        if report.local_failures or report.remote_failures:
            self.console.print(
                f"[yellow]{report.local_failures} local and {report.remote_failures} remote deletion(s) failed[/yellow]"
            )
        return report

    def _delete_local(self, candidate: BranchCandidate, outcome: DeletionOutcome) -> None:
        name = escape(candidate.name)
        try:
            self.repo.delete_local_branch(candidate.name)
        except GitError as err:
            outcome.local_error = str(err)
            logger.info("Could not delete local branch %s: %s", candidate.name, err)
            self.console.print(f"[red]✗[/red] {name}: {escape(str(err))}")
            return
        outcome.local_deleted = True
        self.console.print(f"[green]✓[/green] Deleted branch [cyan]{name}[/cyan]")

    def _resolve_remote(self, candidate: BranchCandidate) -> Optional[str]:
        remote_name = self.remote_name or candidate.upstream.remote_name
        if self.repo.find_remote(remote_name) is None:
            logger.info("Remote %s not found, keeping upstream of %s", remote_name, candidate.name)
            return None
        return remote_name

    def _delete_upstream(self, candidate: BranchCandidate, outcome: DeletionOutcome) -> None:
        if candidate.upstream is None:
            return
        remote_name = self._resolve_remote(candidate)
        if remote_name is None:
            return

        upstream = escape(candidate.upstream.name)
        short_name = upstream_short_name(candidate.upstream.name, candidate.upstream.remote_name)
        if not short_name:
            outcome.remote_error = f"Cannot tell which remote branch {candidate.upstream.name} refers to"
            logger.info("%s: %s", candidate.name, outcome.remote_error)
            self.console.print(f"[red]✗[/red] {escape(candidate.name)}: {escape(outcome.remote_error)}")
            return

        outcome.remote_attempted = True
        try:
            delete_remote_branch(self.repo, remote_name, short_name, self.credentials, self.console)
        except GitError as err:
            outcome.remote_error = str(err)
            logger.info("Could not delete %s on %s: %s", short_name, remote_name, err)
            self.console.print(
                f"[red]✗[/red] Upstream {upstream} of {escape(candidate.name)} was not deleted: {escape(str(err))}"
            )
            return
        outcome.remote_deleted = True
        self.console.print(f"[green]✓[/green] Deleted upstream [magenta]{upstream}[/magenta]")
