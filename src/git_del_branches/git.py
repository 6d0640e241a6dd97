"""Git repository operations."""

import os
import shlex
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Mapping, Optional

from git import GitCommandError, Head, InvalidGitRepositoryError, NoSuchPathError, Remote, Repo
from git.exc import BadName, BadObject

from git_del_branches.logging_config import get_logger

logger = get_logger(__name__)

PROTECTED_BRANCHES = ("master", "main", "develop", "development")

# Fragments of git's stderr that mean the remote rejected our credentials
AUTH_FAILURE_MARKERS = (
    "authentication failed",
    "permission denied",
    "could not read username",
    "could not read password",
    "terminal prompts disabled",
    "invalid username or password",
    "the requested url returned error: 401",
    "the requested url returned error: 403",
)


class GitError(Exception):
    """Git operation error."""


class AuthenticationError(GitError):
    """The remote rejected the credentials offered for a push."""


@dataclass(frozen=True)
class Upstream:
    """Remote-tracking branch a local branch is configured to follow."""

    name: str
    remote_name: str


@dataclass(frozen=True)
class BranchCandidate:
    """A local branch that may be offered for deletion."""

    name: str
    upstream: Optional[Upstream]
    author_name: Optional[str]
    last_commit_time: datetime

    @property
    def upstream_name(self) -> Optional[str]:
        return self.upstream.name if self.upstream else None


def author_display_name(name: Optional[str], email: Optional[str]) -> Optional[str]:
    """Pick a display name for a commit author.

    Falls back to the local part of the email address when the name is empty.
    """
    if name and name.strip():
        return name.strip()
    if email:
        local_part = email.split("@", 1)[0].strip()
        if local_part:
            return local_part
    return None


class GitRepo:
    """Git repository operations."""

    def __init__(self, path: Path) -> None:
        """Open the repository containing ``path``."""
        try:
            self.repo: Repo = Repo(path, search_parent_directories=True)
            if self.repo.bare:
                raise GitError("Cannot operate on bare repository")
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise GitError(f"Failed to open repository: {err}") from err

    def _current_head(self) -> Optional[Head]:
        """Return the branch HEAD points at, or None for a detached or broken HEAD."""
        try:
            if self.repo.head.is_detached:
                return None
            return self.repo.head.reference
        except (TypeError, ValueError, GitCommandError):
            return None

    def get_current_branch_name(self) -> str:
        """Get current branch name."""
        head = self._current_head()
        # Detached HEAD has no name, nothing gets excluded for it
        return head.name if head is not None else ""

    def _resolve_upstream(self, branch: Head) -> Optional[Upstream]:
        try:
            tracking = branch.tracking_branch()
            if tracking is None or not tracking.is_valid():
                return None
            return Upstream(name=tracking.name, remote_name=tracking.remote_name)
        except (ValueError, GitCommandError) as err:
            logger.debug("Could not resolve upstream of %s: %s", branch.name, err)
            return None

    def _build_candidate(self, branch: Head) -> Optional[BranchCandidate]:
        try:
            commit = branch.commit
            last_commit_time = commit.committed_datetime
        except (ValueError, BadName, BadObject, GitCommandError) as err:
            logger.debug("Skipping %s, tip does not resolve to a commit: %s", branch.name, err)
            return None

        return BranchCandidate(
            name=branch.name,
            upstream=self._resolve_upstream(branch),
            author_name=author_display_name(commit.author.name, commit.author.email),
            last_commit_time=last_commit_time,
        )

    def get_candidates(self, protect: Iterable[str] = PROTECTED_BRANCHES) -> list[BranchCandidate]:
        """List local branches that may be deleted.

        The checked-out branch and protected names are left out, as are
        branches whose tip cannot be read.

        Raises:
            GitError: If the local branches cannot be listed at all
        """
        protected = set(protect)
        current = self._current_head()
        try:
            branches = list(self.repo.heads)
        except (GitCommandError, OSError, ValueError) as err:
            raise GitError(f"Failed to list branches: {err}") from err

        candidates = []
        for branch in branches:
            if current is not None and branch.path == current.path:
                continue
            if branch.name in protected:
                continue
            candidate = self._build_candidate(branch)
            if candidate is not None:
                candidates.append(candidate)
        logger.info("Found %d candidate branch(es) out of %d", len(candidates), len(branches))
        return candidates

    def delete_local_branch(self, branch_name: str) -> None:
        """Delete a local branch, merged or not."""
        try:
            # Always use -D, the operator confirmed the deletion twice
            self.repo.git.branch("-D", branch_name)
        except GitCommandError as err:
            raise GitError(f"Failed to delete branch {branch_name}: {_stderr(err)}") from err

    def find_remote(self, remote_name: str) -> Optional[Remote]:
        """Look up a configured remote by name."""
        try:
            remote = self.repo.remote(remote_name)
        except ValueError:
            return None
        return remote if remote.exists() else None

    def remote_url(self, remote_name: str) -> str:
        try:
            return self.repo.git.remote("get-url", "--push", remote_name).strip()
        except GitCommandError as err:
            raise GitError(f"Failed to get URL of remote {remote_name}: {_stderr(err)}") from err

    def ssh_command(self) -> str:
        """SSH command git would run for this repository.

        Follows git's own order: ``GIT_SSH_COMMAND``, then ``core.sshCommand``,
        then the ``GIT_SSH`` program, then plain ``ssh``.
        """
        command = os.environ.get("GIT_SSH_COMMAND", "").strip()
        if command:
            return command
        try:
            command = self.repo.git.config("--get", "core.sshCommand").strip()
        except GitCommandError:
            # Exit status 1: not configured
            command = ""
        if command:
            return command
        program = os.environ.get("GIT_SSH", "").strip()
        return shlex.quote(program) if program else "ssh"

    def push(self, remote_name: str, refspec: str, env: Optional[Mapping[str, str]] = None) -> None:
        """Push a single refspec to a remote.

        Raises:
            AuthenticationError: If the remote rejected the credentials
            GitError: If the push failed for any other reason
        """
        try:
            with self.repo.git.custom_environment(**dict(env or {})):
                self.repo.git.push(remote_name, refspec)
        except GitCommandError as err:
            message = _stderr(err)
            if is_auth_failure(message):
                raise AuthenticationError(message) from err
            raise GitError(f"Failed to push {refspec} to {remote_name}: {message}") from err


def is_auth_failure(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in AUTH_FAILURE_MARKERS)


def _stderr(err: GitCommandError) -> str:
    stderr = err.stderr.strip() if isinstance(err.stderr, str) else ""
    # GitPython prefixes captured stderr with "stderr: '...'"
    if stderr.startswith("stderr: '") and stderr.endswith("'"):
        stderr = stderr[len("stderr: '") : -1].strip()
    return stderr or str(err)
