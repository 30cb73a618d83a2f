"""Log in to and out of container registries through the docker CLI."""

import subprocess
from typing import Optional, Sequence

from rainbow.errors import CommandError


def _run(args: Sequence[str], stdin: Optional[str] = None) -> str:
    try:
        proc = subprocess.run(
            list(args),
            input=stdin,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise CommandError(args, str(exc)) from exc
    output = proc.stdout or ""
    if proc.returncode != 0:
        raise CommandError(args, output, proc.returncode)
    return output


def login_docker(registry: str, username: str, password: str) -> None:
    """Log in to ``registry``, passing the password on standard input."""
    if not registry or not username or not password:
        raise ValueError("missing required environment variables")
    _run(
        ["docker", "login", registry, "-u", username, "--password-stdin"],
        stdin=password,
    )


def logout_docker(registry: str) -> None:
    """Log out of ``registry``."""
    _run(["docker", "logout", registry])