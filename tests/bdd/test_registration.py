from unittest.mock import patch

import pytest
from pytest_bdd import scenarios, given, when, then, parsers

from partnerhub.cli.main import cli
from partnerhub.engine.lookups import LookupResult

scenarios("features/registration.feature")


def _form(name: str, phone_attempts=("11987654321",)) -> str:
    answers = [
        "CPF", "529.982.247-25", name, "contato@casaverde.com.br",
        *phone_attempts,
        "", "01310-100", "Av. Paulista", "1000", "", "Bela Vista", "São Paulo", "SP",
        "", "", "3", "",
    ]
    return "\n".join(answers) + "\n"


@pytest.fixture
def offline_lookups():
    with patch(
        "partnerhub.cli.main._run_lookup",
        return_value=LookupResult("cep", "connection_error", message="Connection error."),
    ) as mock:
        yield mock


@given("the postal code service is unavailable")
def postal_service_down(offline_lookups):
    pass


@when(parsers.parse('a visitor runs "{command}" in registration mode'))
def run_in_registration_mode(runner, context, mock_crm, command):
    context["result"] = runner.invoke(cli, ["--mode", "register", command])


@when(parsers.parse('a visitor registers "{name}" in registration mode'))
def register_partner(runner, context, store, name):
    context["result"] = runner.invoke(cli, ["--mode", "register", "register"], input=_form(name))


@when(parsers.parse('a visitor registers "{name}" typing phone "{bad_phone}" first'))
def register_with_bad_phone(runner, context, store, name, bad_phone):
    context["result"] = runner.invoke(
        cli, ["register"], input=_form(name, phone_attempts=(bad_phone, "11987654321")),
    )


@then(parsers.parse('the registered partner is owned by "{owner}"'))
def registered_owner(store, owner):
    (company,) = store.list()
    assert company.account_owner == owner
    assert company.document == "52998224725"
