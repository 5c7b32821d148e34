"""
Unit tests for partnerhub/engine/lookups.py.

HTTP is mocked at partnerhub.engine.lookups.requests.get. The dispatcher is
exercised with plain functions synchronised through threading.Event.
"""

import threading
from unittest.mock import MagicMock, patch

import pytest
import requests

from partnerhub.engine.lookups import (
    KIND_CEP, KIND_CNPJ, STATUS_CONNECTION_ERROR, STATUS_INVALID, STATUS_NOT_FOUND,
    STATUS_OK, STATUS_SUPERSEDED, LookupDispatcher, LookupResult, geocode,
    lookup_cep, lookup_cnpj,
)


def _response(payload, ok=True, status_code=200):
    resp = MagicMock()
    resp.ok = ok
    resp.status_code = status_code
    resp.json.return_value = payload
    if not ok:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code}")
    return resp


BRASILAPI_PAYLOAD = {
    'razao_social': 'IMOBILIARIA NORTE LTDA',
    'nome_fantasia': 'Norte',
    'cep': '01310100',
    'logradouro': 'AVENIDA PAULISTA',
    'numero': '1000',
    'complemento': '',
    'bairro': 'BELA VISTA',
    'municipio': 'SAO PAULO',
    'uf': 'SP',
}


# ---------------------------------------------------------------------------
# lookup_cnpj
# ---------------------------------------------------------------------------

class TestLookupCnpj:

    def test_found(self):
        with patch('partnerhub.engine.lookups.requests.get', return_value=_response(BRASILAPI_PAYLOAD)) as mock_get:
            result = lookup_cnpj('11.222.333/0001-81')
        assert result.ok
        assert result.data['name'] == 'IMOBILIARIA NORTE LTDA'
        assert result.data['city'] == 'SAO PAULO'
        assert result.data['complement'] is None
        assert mock_get.call_args[0][0].endswith('/cnpj/v1/11222333000181')

    def test_falls_back_to_trade_name(self):
        payload = {**BRASILAPI_PAYLOAD, 'razao_social': ''}
        with patch('partnerhub.engine.lookups.requests.get', return_value=_response(payload)):
            assert lookup_cnpj('11222333000181').data['name'] == 'Norte'

    def test_incomplete_is_not_sent(self):
        with patch('partnerhub.engine.lookups.requests.get') as mock_get:
            result = lookup_cnpj('11222')
        assert result.status == STATUS_INVALID
        mock_get.assert_not_called()

    def test_not_found(self):
        with patch('partnerhub.engine.lookups.requests.get', return_value=_response({}, ok=False, status_code=404)):
            result = lookup_cnpj('11222333000181')
        assert result.status == STATUS_NOT_FOUND
        assert result.message == 'Tax ID not found.'

    def test_connection_error(self):
        with patch('partnerhub.engine.lookups.requests.get',
                   side_effect=requests.exceptions.ConnectionError("down")):
            result = lookup_cnpj('11222333000181')
        assert result.status == STATUS_CONNECTION_ERROR
        assert result.message == 'Connection error.'


# ---------------------------------------------------------------------------
# lookup_cep
# ---------------------------------------------------------------------------

class TestLookupCep:

    def test_found(self):
        payload = {'logradouro': 'Avenida Paulista', 'bairro': 'Bela Vista',
                   'localidade': 'São Paulo', 'uf': 'SP'}
        with patch('partnerhub.engine.lookups.requests.get', return_value=_response(payload)):
            result = lookup_cep('01310-100')
        assert result.ok
        assert result.data == {'street': 'Avenida Paulista', 'neighborhood': 'Bela Vista',
                               'city': 'São Paulo', 'state': 'SP'}

    def test_erro_flag_is_not_found(self):
        with patch('partnerhub.engine.lookups.requests.get', return_value=_response({'erro': True})):
            assert lookup_cep('99999999').status == STATUS_NOT_FOUND

    def test_short_cep_invalid(self):
        assert lookup_cep('0131').status == STATUS_INVALID

    def test_timeout_is_connection_error(self):
        with patch('partnerhub.engine.lookups.requests.get',
                   side_effect=requests.exceptions.Timeout()):
            assert lookup_cep('01310100').status == STATUS_CONNECTION_ERROR


# ---------------------------------------------------------------------------
# geocode
# ---------------------------------------------------------------------------

class TestGeocode:

    def test_best_match(self):
        payload = [{'lat': '-23.5614', 'lon': '-46.6559', 'display_name': 'Avenida Paulista'}]
        with patch('partnerhub.engine.lookups.requests.get', return_value=_response(payload)) as mock_get:
            result = geocode('Av Paulista')
        assert result.ok
        assert result.data['lat'] == pytest.approx(-23.5614)
        assert result.data['lng'] == pytest.approx(-46.6559)
        assert mock_get.call_args[1]['params']['limit'] == 1

    def test_no_results(self):
        with patch('partnerhub.engine.lookups.requests.get', return_value=_response([])):
            result = geocode('nowhere at all')
        assert result.status == STATUS_NOT_FOUND
        assert result.message == 'Location not found.'

    def test_blank_query(self):
        assert geocode('   ').status == STATUS_INVALID

    def test_http_error(self):
        with patch('partnerhub.engine.lookups.requests.get', return_value=_response([], ok=False, status_code=503)):
            assert geocode('Av Paulista').status == STATUS_CONNECTION_ERROR


# ---------------------------------------------------------------------------
# LookupDispatcher
# ---------------------------------------------------------------------------

class TestLookupDispatcher:

    def test_returns_result(self):
        with LookupDispatcher() as dispatcher:
            future = dispatcher.submit(KIND_CEP, lambda v: LookupResult(KIND_CEP, STATUS_OK, {'v': v}), 'x')
            assert future.result(timeout=5).data == {'v': 'x'}

    def test_newer_lookup_supersedes_running_one(self):
        started = threading.Event()
        release = threading.Event()

        def slow(value):
            started.set()
            release.wait(timeout=5)
            return LookupResult(KIND_CNPJ, STATUS_OK, {'value': value})

        with LookupDispatcher(max_workers=2) as dispatcher:
            first = dispatcher.submit(KIND_CNPJ, slow, 'old')
            assert started.wait(timeout=5)
            second = dispatcher.submit(KIND_CNPJ, lambda v: LookupResult(KIND_CNPJ, STATUS_OK, {'value': v}), 'new')
            release.set()

            assert first.result(timeout=5).status == STATUS_SUPERSEDED
            assert second.result(timeout=5).data == {'value': 'new'}

    def test_pending_lookup_is_cancelled(self):
        release = threading.Event()

        def blocker():
            release.wait(timeout=5)
            return LookupResult(KIND_CEP, STATUS_OK)

        with LookupDispatcher(max_workers=1) as dispatcher:
            dispatcher.submit('other', blocker)
            queued = dispatcher.submit(KIND_CEP, lambda: LookupResult(KIND_CEP, STATUS_OK))
            latest = dispatcher.submit(KIND_CEP, lambda: LookupResult(KIND_CEP, STATUS_OK, {'n': 2}))
            release.set()

            assert queued.cancelled()
            assert latest.result(timeout=5).data == {'n': 2}

    def test_kinds_are_independent(self):
        with LookupDispatcher() as dispatcher:
            cep = dispatcher.submit(KIND_CEP, lambda: LookupResult(KIND_CEP, STATUS_OK))
            cnpj = dispatcher.submit(KIND_CNPJ, lambda: LookupResult(KIND_CNPJ, STATUS_OK))
            assert cep.result(timeout=5).ok
            assert cnpj.result(timeout=5).ok
