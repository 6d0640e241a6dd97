"""Configuration handling for git-del-branches"""

from dataclasses import dataclass
from typing import Optional, Tuple

from git_del_branches.git import PROTECTED_BRANCHES


@dataclass(frozen=True)
class Config:
    """Run configuration, read-only once validated."""

    # Branches that are never offered for deletion
    protected_branches: Tuple[str, ...] = PROTECTED_BRANCHES

    # Remote to delete upstream branches on, None means each upstream's own remote
    remote_name: Optional[str] = None

    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_protected_branches()
        self._validate_remote_name()

    def _validate_protected_branches(self):
        """Validate protected_branches holds non-empty names."""
        if isinstance(self.protected_branches, str):
            raise ValueError("protected_branches must be a sequence of names, not a string")
        cleaned = tuple(name.strip() for name in self.protected_branches)
        if any(not name for name in cleaned):
            raise ValueError("protected_branches cannot contain empty names")
        object.__setattr__(self, "protected_branches", cleaned)

    def _validate_remote_name(self):
        """Validate remote_name is not blank when given."""
        if self.remote_name is None:
            return
        if not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        object.__setattr__(self, "remote_name", self.remote_name.strip())
