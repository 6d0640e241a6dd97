"""Credential providers tried in turn when pushing to a remote.

Every provider turns into a set of environment variables for the git
process doing the push. The chain hands out providers one at a time, the
push loop asks for the next one each time the remote rejects a credential.
"""

import os
import re
from typing import Iterable, Iterator, Optional

from git_del_branches.logging_config import get_logger
from git_del_branches.prompts import OperationCancelled, Prompter

logger = get_logger(__name__)

# [user@]host:path, the scp-like syntax git accepts for ssh remotes. A
# single letter followed by a slash is a Windows drive, not a host.
_SCP_LIKE_URL = re.compile(r"^(?:[\w.-]+@)?(?![A-Za-z]:[\\/])[\w.-]+:(?!//)")

# Keeps git from falling back to asking on the terminal
NO_TERMINAL_PROMPT = {"GIT_TERMINAL_PROMPT": "0"}


class CredentialUnavailable(Exception):
    """A provider has nothing to offer for this remote."""


def is_ssh_url(url: str) -> bool:
    return url.startswith(("ssh://", "git+ssh://", "ssh+git://")) or bool(_SCP_LIKE_URL.match(url))


def is_http_url(url: str) -> bool:
    return url.startswith(("http://", "https://"))


class CredentialProvider:
    """Base class for a way of authenticating a push."""

    name = "credentials"

    def applies_to(self, url: str) -> bool:
        return True

    def environment(self, url: str, ssh_command: str = "ssh") -> dict[str, str]:
        """Environment for the git push process.

        ``ssh_command`` is the command git would otherwise run for ssh
        remotes, providers extend it rather than replace it.

        Raises:
            CredentialUnavailable: If no credential can be produced
        """
        raise NotImplementedError


class SshAgentCredentials(CredentialProvider):
    """Identities loaded in the running ssh-agent."""

    name = "ssh-agent"

    def applies_to(self, url: str) -> bool:
        return is_ssh_url(url) and bool(os.environ.get("SSH_AUTH_SOCK"))

    def environment(self, url: str, ssh_command: str = "ssh") -> dict[str, str]:
        return {
            **NO_TERMINAL_PROMPT,
            "GIT_SSH_COMMAND": f"{ssh_command} -o BatchMode=yes -o PasswordAuthentication=no",
        }


class DefaultCredentials(CredentialProvider):
    """Whatever git finds on its own: credential helpers and default keys."""

    name = "default credentials"

    def environment(self, url: str, ssh_command: str = "ssh") -> dict[str, str]:
        env = dict(NO_TERMINAL_PROMPT)
        if is_ssh_url(url):
            env["GIT_SSH_COMMAND"] = f"{ssh_command} -o BatchMode=yes"
        return env


class UserPassCredentials(CredentialProvider):
    """Username and password typed in by the operator, asked for once."""

    name = "username/password"

    # One-shot helper reading the answers from its environment
    HELPER = (
        '!f() { test "$1" = get || return 0; '
        'echo "username=${GIT_DEL_BRANCHES_USERNAME}"; '
        'echo "password=${GIT_DEL_BRANCHES_PASSWORD}"; }; f'
    )

    def __init__(self, prompter: Prompter) -> None:
        self.prompter = prompter
        self._answers: Optional[tuple[str, str]] = None

    def applies_to(self, url: str) -> bool:
        return is_http_url(url)

    def environment(self, url: str, ssh_command: str = "ssh") -> dict[str, str]:
        username, password = self._credentials(url)
        return {
            **NO_TERMINAL_PROMPT,
            # An empty helper resets the configured ones so only ours answers
            "GIT_CONFIG_COUNT": "2",
            "GIT_CONFIG_KEY_0": "credential.helper",
            "GIT_CONFIG_VALUE_0": "",
            "GIT_CONFIG_KEY_1": "credential.helper",
            "GIT_CONFIG_VALUE_1": self.HELPER,
            "GIT_DEL_BRANCHES_USERNAME": username,
            "GIT_DEL_BRANCHES_PASSWORD": password,
        }

    def _credentials(self, url: str) -> tuple[str, str]:
        if self._answers is None:
            try:
                username = self.prompter.ask(f"Username for {url}").strip()
                if not username:
                    raise CredentialUnavailable("no username given")
                password = self.prompter.ask(f"Password for {username}", password=True)
            except OperationCancelled as err:
                raise CredentialUnavailable("credential prompt cancelled") from err
            self._answers = (username, password)
        return self._answers


class CredentialChain:
    """Ordered list of credential providers."""

    def __init__(self, providers: Iterable[CredentialProvider]) -> None:
        self.providers = list(providers)

    def cursor(self, url: str, ssh_command: str = "ssh") -> Iterator[tuple[CredentialProvider, dict[str, str]]]:
        """Yield each applicable provider with its environment, in order.

        Providers that cannot produce a credential are skipped.
        """
        for provider in self.providers:
            if not provider.applies_to(url):
                continue
            try:
                env = provider.environment(url, ssh_command)
            except CredentialUnavailable as err:
                logger.debug("Skipping %s for %s: %s", provider.name, url, err)
                continue
            yield provider, env


def default_chain(prompter: Prompter) -> CredentialChain:
    return CredentialChain([SshAgentCredentials(), DefaultCredentials(), UserPassCredentials(prompter)])
