"""
Lookups - public registry, postal-code and geocoding services.

Every lookup returns a LookupResult instead of raising: 'not_found' is a clean
negative answer, 'connection_error' means the service could not be reached.
Nothing is retried.

LookupDispatcher runs lookups on a small thread pool. Submitting a lookup of
the same kind supersedes the previous one: a pending request is cancelled and
a request that was already running resolves to 'superseded', so an older
response can never overwrite a newer one.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import requests

from partnerhub.bus.events import bus, EVENT_LOOKUP_COMPLETE
from partnerhub.config import config
from partnerhub.engine.validators import only_digits

logger = logging.getLogger(__name__)

STATUS_OK = 'ok'
STATUS_NOT_FOUND = 'not_found'
STATUS_INVALID = 'invalid'
STATUS_CONNECTION_ERROR = 'connection_error'
STATUS_SUPERSEDED = 'superseded'

KIND_CNPJ = 'cnpj'
KIND_CEP = 'cep'
KIND_GEOCODE = 'geocode'


@dataclass
class LookupResult:
    kind: str
    status: str
    data: Dict[str, Any] = field(default_factory=dict)
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


def _headers() -> Dict[str, str]:
    return {'User-Agent': config.HTTP_USER_AGENT, 'Accept': 'application/json'}


# =============================================================================
# TAX-ID REGISTRY (BrasilAPI)
# =============================================================================

def lookup_cnpj(cnpj: str) -> LookupResult:
    """Fetch legal name and address for a 14-digit tax ID."""
    digits = only_digits(cnpj)
    if len(digits) != 14:
        return LookupResult(KIND_CNPJ, STATUS_INVALID, message="Incomplete tax ID.")

    url = f"{config.BRASILAPI_BASE_URL}/cnpj/v1/{digits}"
    try:
        logger.debug(f"lookup_cnpj: GET {url}")
        response = requests.get(url, headers=_headers(), timeout=config.HTTP_TIMEOUT_SECONDS)
    except requests.exceptions.RequestException as e:
        logger.warning(f"lookup_cnpj: connection error for {digits}: {e}")
        return LookupResult(KIND_CNPJ, STATUS_CONNECTION_ERROR, message="Connection error.")

    if not response.ok:
        logger.info(f"lookup_cnpj: {digits} not found (HTTP {response.status_code})")
        return LookupResult(KIND_CNPJ, STATUS_NOT_FOUND, message="Tax ID not found.")

    try:
        payload = response.json()
    except ValueError as e:
        logger.warning(f"lookup_cnpj: unreadable response for {digits}: {e}")
        return LookupResult(KIND_CNPJ, STATUS_CONNECTION_ERROR, message="Connection error.")

    data = {
        'name': payload.get('razao_social') or payload.get('nome_fantasia') or '',
        'postal_code': only_digits(payload.get('cep') or ''),
        'street': payload.get('logradouro') or '',
        'number': payload.get('numero') or '',
        'complement': payload.get('complemento') or None,
        'neighborhood': payload.get('bairro') or '',
        'city': payload.get('municipio') or '',
        'state': payload.get('uf') or '',
    }
    logger.info(f"lookup_cnpj: found {digits} -> {data['name']!r}")
    return LookupResult(KIND_CNPJ, STATUS_OK, data=data)


# =============================================================================
# POSTAL CODE (ViaCEP)
# =============================================================================

def lookup_cep(cep: str) -> LookupResult:
    """Street/neighborhood/city/state for an 8-digit CEP. Callers ignore non-ok results."""
    digits = only_digits(cep)
    if len(digits) != 8:
        return LookupResult(KIND_CEP, STATUS_INVALID, message="Incomplete postal code.")

    url = f"{config.VIACEP_BASE_URL}/{digits}/json/"
    try:
        logger.debug(f"lookup_cep: GET {url}")
        response = requests.get(url, headers=_headers(), timeout=config.HTTP_TIMEOUT_SECONDS)
        payload = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.debug(f"lookup_cep: failed for {digits}: {e}")
        return LookupResult(KIND_CEP, STATUS_CONNECTION_ERROR, message="Connection error.")

    if not response.ok or payload.get('erro'):
        return LookupResult(KIND_CEP, STATUS_NOT_FOUND, message="Postal code not found.")

    data = {
        'street': payload.get('logradouro') or '',
        'neighborhood': payload.get('bairro') or '',
        'city': payload.get('localidade') or '',
        'state': payload.get('uf') or '',
    }
    return LookupResult(KIND_CEP, STATUS_OK, data=data)


# =============================================================================
# GEOCODING (Nominatim)
# =============================================================================

def geocode(query: str) -> LookupResult:
    """Best-match coordinates for a free-text place or address."""
    if not query or not query.strip():
        return LookupResult(KIND_GEOCODE, STATUS_INVALID, message="Enter a location to search.")

    url = f"{config.NOMINATIM_BASE_URL}/search"
    params = {'format': 'json', 'q': query.strip(), 'limit': 1}
    try:
        logger.debug(f"geocode: GET {url} q={query!r}")
        response = requests.get(url, params=params, headers=_headers(), timeout=config.HTTP_TIMEOUT_SECONDS)
        response.raise_for_status()
        results = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning(f"geocode: failed for {query!r}: {e}")
        return LookupResult(KIND_GEOCODE, STATUS_CONNECTION_ERROR, message="Connection error.")

    if not results:
        return LookupResult(KIND_GEOCODE, STATUS_NOT_FOUND, message="Location not found.")

    best = results[0]
    data = {
        'lat': float(best['lat']),
        'lng': float(best['lon']),
        'display_name': best.get('display_name', query),
    }
    return LookupResult(KIND_GEOCODE, STATUS_OK, data=data)


# =============================================================================
# DISPATCHER
# =============================================================================

class LookupDispatcher:
    """
    Runs lookups off the caller's thread, keeping only the latest per kind.

    Usage:
        with LookupDispatcher() as lookups:
            future = lookups.submit(KIND_CEP, lookup_cep, '01310100')
            result = future.result()
    """

    def __init__(self, max_workers: int = 4):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='lookup')
        self._lock = threading.Lock()
        self._generations: Dict[str, int] = {}
        self._pending: Dict[str, Future] = {}

    def submit(self, kind: str, func: Callable[..., LookupResult], *args, **kwargs) -> Future:
        with self._lock:
            generation = self._generations.get(kind, 0) + 1
            self._generations[kind] = generation

            previous = self._pending.get(kind)
            if previous is not None and previous.cancel():
                logger.debug(f"LookupDispatcher: cancelled pending {kind} lookup")

            future = self._executor.submit(self._run, kind, generation, func, args, kwargs)
            self._pending[kind] = future
        return future

    def is_current(self, kind: str, generation: int) -> bool:
        with self._lock:
            return self._generations.get(kind) == generation

    def _run(self, kind, generation, func, args, kwargs) -> LookupResult:
        result = func(*args, **kwargs)
        if not self.is_current(kind, generation):
            logger.debug(f"LookupDispatcher: discarding superseded {kind} result")
            return LookupResult(kind, STATUS_SUPERSEDED, message="Superseded by a newer lookup.")
        bus.emit(EVENT_LOOKUP_COMPLETE, {'kind': kind, 'status': result.status})
        return result

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True, cancel_futures=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False
