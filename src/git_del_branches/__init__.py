"""Interactive git branch deletion.

Features:
- Lists local branches, oldest first, with author and last commit age
- Never offers the current branch or main, master, develop and development
- Deletes the picked branches after a double confirmation
- Optionally deletes their upstream on the remote, retrying credentials
"""

__version__ = "0.1.0"
