"""A thin wrapper around the git command line for one working copy."""

import subprocess
from dataclasses import dataclass
from typing import List, Sequence

from rainbow.errors import CommandError


@dataclass
class Git:
    """A repository checkout, the branch to work on and the commit title."""

    repo_dir: str
    branch: str
    title: str

    def _run(self, *args: str) -> str:
        command: Sequence[str] = ["git", *args]
        try:
            proc = subprocess.run(
                list(command),
                cwd=self.repo_dir,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise CommandError(command, str(exc)) from exc
        output = proc.stdout or ""
        if proc.returncode != 0:
            raise CommandError(command, output, proc.returncode)
        return output

    def checkout(self) -> None:
        """Switch to the branch, creating it from origin/master if it is not local."""
        if self.current_branch() == self.branch:
            return
        if self.branch in self.local_branches():
            self._run("checkout", self.branch)
        else:
            self._run("checkout", "remotes/origin/master", "-b", self.branch)

    def push(self) -> None:
        """Stage everything, commit and force-push HEAD to origin."""
        self.add()
        self.commit()
        self._run("push", "origin", "HEAD", "--force")

    def add(self) -> None:
        """Stage all changes in the working copy."""
        self._run("add", ".")

    def commit(self) -> None:
        """Commit staged changes with the configured title."""
        self._run("commit", "-m", self.title)

    def current_branch(self) -> str:
        """Return the name of the checked-out branch."""
        return self._run("branch", "--show-current").strip()

    def local_branches(self) -> List[str]:
        """Return the lines of ``git branch``, stripped, skipping empty ones."""
        return [line.strip() for line in self._run("branch").split("\n") if line]