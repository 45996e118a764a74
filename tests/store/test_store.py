"""Tests for the DataStore status map."""

import pytest

from dataflow.store import ActionStatus, DataStore, StatusInfo


class Login:
    """Stand-in carrying a kind like an action class does."""

    kind = "Login"


@pytest.fixture
def store() -> DataStore:
    return DataStore()


def test_status_defaults_to_idle(store: DataStore) -> None:
    """Test a kind that never ran is idle."""
    assert store.get_status("Login") == ActionStatus.IDLE
    assert store.get_status_info("Login") is None
    assert store.statuses == {}


def test_set_and_get_status(store: DataStore) -> None:
    """Test committing and reading statuses."""
    store.set_status("Login", ActionStatus.LOADING)
    assert store.get_status("Login") == ActionStatus.LOADING
    store.set_status("Login", ActionStatus.ERROR, error="boom")
    assert store.get_status("Login") == ActionStatus.ERROR
    assert store.get_status_info("Login") == StatusInfo(
        status=ActionStatus.ERROR, error="boom"
    )
    store.set_status("Login", ActionStatus.SUCCESS)
    assert store.get_status_info("Login") == StatusInfo(status=ActionStatus.SUCCESS)


def test_kind_from_class(store: DataStore) -> None:
    """Test a class carrying a kind resolves to the same key as its name."""
    store.set_status(Login, ActionStatus.SUCCESS)
    assert store.get_status("Login") == ActionStatus.SUCCESS
    assert store.get_status(Login()) == ActionStatus.SUCCESS


def test_invalid_kind(store: DataStore) -> None:
    """Test objects without a kind are rejected."""
    with pytest.raises(TypeError, match="Cannot resolve an action kind"):
        store.get_status(42)  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="must not be empty"):
        store.get_status("")


def test_has_failed_actions(store: DataStore) -> None:
    """Test detecting a failed action kind."""
    assert not store.has_failed_actions()
    store.set_status("Login", ActionStatus.SUCCESS)
    store.set_status("Logout", ActionStatus.LOADING)
    assert not store.has_failed_actions()
    store.set_status("Logout", ActionStatus.ERROR, error="offline")
    assert store.has_failed_actions()


def test_statuses_is_a_copy(store: DataStore) -> None:
    """Test the status snapshot does not alias the store."""
    store.set_status("Login", ActionStatus.SUCCESS)
    snapshot = store.statuses
    snapshot["Login"] = ActionStatus.ERROR
    assert store.get_status("Login") == ActionStatus.SUCCESS


def test_status_info_str() -> None:
    """Test the string form of a status."""
    assert str(StatusInfo(status=ActionStatus.SUCCESS)) == "success"
    assert str(StatusInfo(status=ActionStatus.ERROR, error="boom")) == "error: boom"


def test_terminal_statuses() -> None:
    """Test which statuses end a lifecycle."""
    assert not ActionStatus.IDLE.terminal
    assert not ActionStatus.LOADING.terminal
    assert ActionStatus.SUCCESS.terminal
    assert ActionStatus.ERROR.terminal
