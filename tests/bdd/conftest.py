"""
Shared fixtures and step definitions for BDD tests.

- runner, mock_api, store, context: available to all scenario files in this directory
- open_session is patched so every command sees one Session over a MemoryStore
- no_logging: autouse, prevents log file creation during tests
- 'the user is logged in' and 'the output contains' steps: shared across feature files
"""

import json
import pytest
from unittest.mock import MagicMock, patch
from click.testing import CliRunner
from pytest_bdd import given, then, when, parsers

from obani.cli.main import cli
from obani.models import AuthState, User
from obani.session import Session
from obani.storage.local_store import AUTH_KEY, MemoryStore


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_api():
    return MagicMock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def context():
    """Mutable dict shared between Given/When/Then steps within a scenario."""
    return {}


@pytest.fixture(autouse=True)
def cli_session(store, mock_api):
    """Each CLI invocation restores its session from the shared store, like a fresh process."""
    def _open():
        session = Session(store, mock_api)
        session.restore()
        return session

    with patch("obani.cli.main.open_session", side_effect=_open):
        yield


@pytest.fixture(autouse=True)
def no_logging():
    with patch("obani.cli.main.configure_logging"):
        yield


@given("the user is logged in")
def logged_in(store):
    state = AuthState(user=User(id="u1", email="me@obani.io", name="Me"), token="tok")
    store.set(AUTH_KEY, json.dumps(state.to_dict()))


@then(parsers.parse('the output contains "{text}"'))
def output_contains(context, text):
    assert text in context["result"].output, (
        f"Expected {text!r} in output:\n{context['result'].output}"
    )


@then(parsers.parse('the output does not contain "{text}"'))
def output_lacks(context, text):
    assert text not in context["result"].output, (
        f"Did not expect {text!r} in output:\n{context['result'].output}"
    )


@when("the user lists contacts")
def list_contacts(runner, context):
    context["result"] = runner.invoke(cli, ["contacts", "list"])
