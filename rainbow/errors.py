"""Error types shared by the storage layer and the command helpers."""

from typing import Optional, Sequence

from sqlalchemy.exc import NoResultFound


class RecordNotUpdatedError(RuntimeError):
    """An update matched no row, usually because the resource version is stale."""

    def __init__(self, message: str = "record not updated") -> None:
        super().__init__(message)


class RecordNotFoundError(LookupError):
    """A lookup that expects exactly one row found none."""

    def __init__(self, message: str = "record not found") -> None:
        super().__init__(message)


class CommandError(RuntimeError):
    """An external command failed; carries its combined output."""

    def __init__(
        self,
        command: Sequence[str],
        output: str = "",
        returncode: Optional[int] = None,
    ) -> None:
        self.command = list(command)
        self.output = output
        self.returncode = returncode
        reason = (
            f"exit status {returncode}" if returncode is not None else "command failed"
        )
        super().__init__(f"{reason} {output}")


def _chain(err: Optional[BaseException]):
    seen = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.__cause__


def is_not_updated(err: Optional[BaseException]) -> bool:
    """Return True if ``err`` or an error it was raised from is a failed update."""
    return any(isinstance(e, RecordNotUpdatedError) for e in _chain(err))


def is_not_found(err: Optional[BaseException]) -> bool:
    """Return True if ``err`` or an error it was raised from is a missing record."""
    return any(isinstance(e, (RecordNotFoundError, NoResultFound)) for e in _chain(err))