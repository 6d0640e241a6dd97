"""Ordering and rendering of deletion candidates."""

from datetime import datetime, timezone
from typing import Iterable, Optional

from rich.markup import escape
from rich.table import Table

from git_del_branches.git import BranchCandidate

UNKNOWN_AUTHOR = "unknown"


def sort_candidates(candidates: Iterable[BranchCandidate]) -> list[BranchCandidate]:
    """Order candidates oldest first so the stalest branches show up on top."""
    return sorted(candidates, key=lambda candidate: candidate.last_commit_time)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count != 1 else ''} ago"


def format_relative_age(then: datetime, now: Optional[datetime] = None) -> str:
    """Format a commit time relative to ``now``, e.g. "3 days ago"."""
    if now is None:
        now = datetime.now(timezone.utc)
    if then.tzinfo is None:
        then = then.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    diff = now - then
    seconds = int(diff.total_seconds())
    if seconds < 60:
        # Clock skew can put a commit slightly in the future
        return "just now"
    if diff.days == 0:
        if seconds < 3600:
            return _plural(seconds // 60, "minute")
        return _plural(seconds // 3600, "hour")
    if diff.days == 1:
        return "yesterday"
    if diff.days < 7:
        return _plural(diff.days, "day")
    if diff.days < 30:
        return _plural(diff.days // 7, "week")
    if diff.days < 365:
        return _plural(diff.days // 30, "month")
    return _plural(diff.days // 365, "year")


def candidate_label(candidate: BranchCandidate, now: Optional[datetime] = None) -> str:
    """Render a candidate as one line of the selection list."""
    label = candidate.name
    if candidate.upstream_name:
        label += f" ({candidate.upstream_name})"
    author = candidate.author_name or UNKNOWN_AUTHOR
    return f"{label} - {author} - {format_relative_age(candidate.last_commit_time, now)}"


def selection_table(branches: Iterable[BranchCandidate], delete_upstream: bool) -> Table:
    """Create the summary table shown before the final confirmation."""
    title = "To delete these branches and their upstream" if delete_upstream else "To delete these branches"
    table = Table(
        title=title,
        show_header=True,
        header_style="bold",
        title_style="bold blue",
        show_edge=True,
    )
    table.add_column("Local branch", style="cyan", no_wrap=True)
    table.add_column("Author", style="yellow", no_wrap=True)
    table.add_column("Remote branch", style="magenta", no_wrap=True)

    for candidate in branches:
        table.add_row(
            escape(candidate.name),
            escape(candidate.author_name or UNKNOWN_AUTHOR),
            escape(candidate.upstream_name or ""),
        )
    return table
