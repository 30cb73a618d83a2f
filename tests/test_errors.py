import pytest
from sqlalchemy.exc import NoResultFound

from rainbow.errors import (
    CommandError,
    RecordNotFoundError,
    RecordNotUpdatedError,
    is_not_found,
    is_not_updated,
)


def test_record_not_updated_message():
    assert str(RecordNotUpdatedError()) == "record not updated"


def test_record_not_found_message():
    assert str(RecordNotFoundError()) == "record not found"


def test_is_not_updated_direct():
    assert is_not_updated(RecordNotUpdatedError()) is True


def test_is_not_updated_other_error():
    assert is_not_updated(ValueError("boom")) is False


def test_is_not_updated_none():
    assert is_not_updated(None) is False


def test_is_not_updated_follows_cause():
    try:
        try:
            raise RecordNotUpdatedError()
        except RecordNotUpdatedError as inner:
            raise RuntimeError("wrapped") from inner
    except RuntimeError as outer:
        assert is_not_updated(outer) is True


def test_is_not_found_direct_and_sqlalchemy():
    assert is_not_found(RecordNotFoundError()) is True
    assert is_not_found(NoResultFound()) is True


def test_is_not_found_does_not_match_not_updated():
    assert is_not_found(RecordNotUpdatedError()) is False
    assert is_not_updated(RecordNotFoundError()) is False


def test_record_not_found_caught_as_lookup_error():
    with pytest.raises(LookupError) as info:
        raise RecordNotFoundError()
    assert is_not_found(info.value) is True


def test_command_error_carries_details():
    err = CommandError(["git", "status"], "fatal: not a repo", 128)
    assert err.command == ["git", "status"]
    assert err.returncode == 128
    assert err.output == "fatal: not a repo"
    assert str(err).endswith("fatal: not a repo")
    assert "128" in str(err)