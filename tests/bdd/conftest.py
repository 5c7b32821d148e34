"""
Shared fixtures and step definitions for BDD tests.

- runner, context: available to all scenario files in this directory
- mock_crm: CLI talks to a MagicMock instead of the engine
- store: CLI talks to the real engine backed by an in-memory store
- no_logging: autouse, prevents log file creation during tests
- output / exit code steps: shared across all feature files
"""

import pytest
from unittest.mock import patch
from click.testing import CliRunner
from pytest_bdd import then, parsers

from partnerhub.db.store import MemoryStore


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_crm():
    with patch("partnerhub.cli.main.crm") as mock:
        yield mock


@pytest.fixture
def store():
    """Empty MemoryStore wired in behind partnerhub.engine.crm."""
    memory = MemoryStore(key="bdd")
    with patch("partnerhub.engine.crm.get_store", return_value=memory):
        yield memory


@pytest.fixture
def context():
    """Mutable dict shared between Given/When/Then steps within a scenario."""
    return {}


@pytest.fixture(autouse=True)
def no_logging():
    with patch("partnerhub.cli.main.configure_logging"):
        yield


@then(parsers.parse('the output contains "{text}"'))
def output_contains(context, text):
    assert text in context["result"].output, (
        f"Expected {text!r} in output:\n{context['result'].output}"
    )


@then(parsers.parse('the output does not contain "{text}"'))
def output_does_not_contain(context, text):
    assert text not in context["result"].output, (
        f"Did not expect {text!r} in output:\n{context['result'].output}"
    )


@then(parsers.parse("the command exits with code {code:d}"))
def exits_with(context, code):
    assert context["result"].exit_code == code, context["result"].output
