"""Deleting branches on a remote by pushing an empty source."""

from typing import Optional

from rich.console import Console
from rich.markup import escape

from git_del_branches.credentials import CredentialChain
from git_del_branches.git import AuthenticationError, GitError, GitRepo
from git_del_branches.logging_config import get_logger

logger = get_logger(__name__)


class RemoteDeleteError(GitError):
    """A branch could not be deleted on the remote."""


def delete_refspec(branch: str) -> str:
    """Refspec that deletes ``branch`` on the remote: nothing pushed onto it."""
    return f":refs/heads/{branch}"


def upstream_short_name(upstream_name: str, remote_name: Optional[str] = None) -> str:
    """Strip the remote-tracking prefix from an upstream name, exactly once.

    ``origin/feature-x`` becomes ``feature-x``. Returns an empty string when
    nothing is left after the prefix.
    """
    name = upstream_name
    if name.startswith("refs/remotes/"):
        name = name[len("refs/remotes/") :]
    if remote_name and name.startswith(f"{remote_name}/"):
        return name[len(remote_name) + 1 :]
    _, sep, rest = name.partition("/")
    return rest if sep else ""


def delete_remote_branch(
    repo: GitRepo,
    remote_name: str,
    branch: str,
    credentials: CredentialChain,
    console: Console,
) -> None:
    """Delete ``branch`` on ``remote_name``, trying credentials until one is accepted.

    Raises:
        RemoteDeleteError: If the push failed or every credential was rejected
    """
    refspec = delete_refspec(branch)
    url = repo.remote_url(remote_name)
    attempts = 0

    for provider, env in credentials.cursor(url, repo.ssh_command()):
        attempts += 1
        console.print(f"  [dim]Pushing {escape(refspec)} to {escape(url)} using {escape(provider.name)}[/dim]")
        try:
            repo.push(remote_name, refspec, env=env)
        except AuthenticationError as err:
            logger.info("%s rejected %s: %s", url, provider.name, err)
            continue
        except GitError as err:
            raise RemoteDeleteError(str(err)) from err
        logger.info("Deleted %s on %s", branch, remote_name)
        return

    if attempts == 0:
        raise RemoteDeleteError(f"No credentials available for {url}")
    raise RemoteDeleteError(f"All {attempts} credential(s) were rejected by {url}")
