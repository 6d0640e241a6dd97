"""Command line interface for git-del-branches."""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich import print
from rich.console import Console

from git_del_branches import __version__
from git_del_branches.config import Config
from git_del_branches.credentials import default_chain
from git_del_branches.flow import cleanup
from git_del_branches.git import GitError, GitRepo
from git_del_branches.logging_config import setup_logging
from git_del_branches.prompts import ConsolePrompter

app = typer.Typer(help="Interactively delete local git branches and their upstream")
console = Console()


def get_repo(path: Path) -> GitRepo:
    """Get git repository instance."""
    try:
        return GitRepo(path)
    except GitError as err:
        print(f"Error: {err}")
        raise typer.Exit(code=1) from err


def version_callback(value: bool) -> None:
    if value:
        print(f"git-del-branches {__version__}")
        raise typer.Exit()


@app.command()
def main(
    path: Annotated[Path, typer.Option(help="Path inside the git repository")] = Path("."),
    remote: Annotated[
        Optional[str], typer.Option("--remote", "-r", help="Remote to delete upstream branches on")
    ] = None,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress details"),
    debug: bool = typer.Option(False, "--debug", help="Show debug output, including git commands"),
    version: bool = typer.Option(
        False, "--version", callback=version_callback, is_eager=True, help="Show the version and exit"
    ),
) -> None:
    """Select local branches to delete, optionally with their upstream."""
    try:
        config = Config(remote_name=remote, verbose=verbose, debug=debug)
    except ValueError as err:
        print(f"Error: {err}")
        raise typer.Exit(code=1) from err
    setup_logging(verbose=config.verbose, debug=config.debug)

    repo = get_repo(path)
    prompter = ConsolePrompter(console)
    try:
        cleanup(repo, config, prompter, default_chain(prompter), console)
    except GitError as err:
        print(f"Error: {err}")
        raise typer.Exit(code=1) from err


if __name__ == "__main__":
    app()
