"""
API Client - Thin wrapper around the remote Obani API.

Every call resolves to an ApiResult(success, data, error). Transport failures
(connection errors, timeouts, non-JSON bodies, payloads that don't fit the
models) are caught here and turned into failed results; nothing raises past
this module.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from obani.config import config
from obani.models import (
    ApiResult, AuthState, Contact, Interaction, Introduction, Page, User,
)

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


def _page_of(parse_item):
    return lambda data: Page.from_dict(data, parse_item)


def _list_of(parse_item):
    return lambda data: [parse_item(item) for item in data]


_DASHBOARD_SECTIONS = {
    'networkHealth': ('strengthDistribution',),
    'interactionTrends': ('byType', 'monthlyTrend'),
    'introductionMetrics': (),
    'growthMetrics': ('monthlyTrend',),
}
_DASHBOARD_RATIOS = (
    ('networkHealth', 'averageStrength'),
    ('interactionTrends', 'avgPerContact'),
    ('introductionMetrics', 'successRate'),
)


def _object(value, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"{what} is {type(value).__name__}, expected an object")
    return value


def _parse_dashboard(data: Any) -> Dict[str, Any]:
    """
    Check the dashboard's shape so the view can render it without guards.
    Sections stay plain dicts; missing ones become empty. Ratios are floats
    and atRiskContacts become Contact objects.
    """
    dashboard = dict(_object(data, 'dashboard'))
    for key, series in _DASHBOARD_SECTIONS.items():
        section = dict(_object(dashboard.get(key) or {}, key))
        for name in series:
            section[name] = [_object(p, f"{key}.{name} entry") for p in section.get(name) or []]
        dashboard[key] = section
    for key, name in _DASHBOARD_RATIOS:
        dashboard[key][name] = float(dashboard[key].get(name) or 0)
    dashboard['atRiskContacts'] = [Contact.from_dict(c) for c in dashboard.get('atRiskContacts') or []]
    return dashboard


class ApiClient:
    """
    HTTP client for the remote API.

    Args:
        base_url: API origin + prefix; defaults to config.API_URL
        token_provider: callable returning the current bearer token (or None).
            Read on every request so login/logout take effect immediately.
        timeout: (connect, read) seconds; defaults from config
        http: requests.Session to use (injectable for tests)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        timeout: Optional[Tuple[float, float]] = None,
        http: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or config.API_URL).rstrip('/')
        self.token_provider = token_provider
        self.timeout = timeout or (config.API_CONNECT_TIMEOUT, config.API_READ_TIMEOUT)
        self.http = http or requests.Session()

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def _headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers['Authorization'] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        parse: Optional[Callable[[Any], Any]] = None,
    ) -> ApiResult:
        """
        Perform one API call and normalize the outcome.

        Args:
            method: HTTP verb
            endpoint: path below the base URL, e.g. '/contacts/42'
            body: JSON body for POST/PUT
            params: query-string parameters
            parse: converts the envelope's `data` into model objects

        Returns: ApiResult; never raises
        """
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{method} {endpoint} params={params}")

        try:
            response = self.http.request(
                method, url, json=body, params=params,
                headers=self._headers(), timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {endpoint} transport error: {e}")
            return ApiResult(success=False, error=str(e) or 'Network error')

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"{method} {endpoint} returned non-JSON body (HTTP {response.status_code}): {e}")
            return ApiResult(success=False, error=f"Invalid response from server (HTTP {response.status_code})",
                             status=response.status_code)

        if not isinstance(payload, dict):
            logger.error(f"{method} {endpoint} returned {type(payload).__name__}, expected an envelope object")
            return ApiResult(success=False, error='Unexpected response from server')

        success = bool(payload.get('success'))
        data = payload.get('data')
        error = payload.get('error')

        if not success:
            logger.warning(f"{method} {endpoint} failed (HTTP {response.status_code}): {error}")
            return ApiResult(success=False, data=data, error=error, status=response.status_code)

        if parse is not None and data is not None:
            try:
                data = parse(data)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.error(f"{method} {endpoint} payload did not match model: {type(e).__name__}: {e}")
                return ApiResult(success=False, error=f"Malformed response from server: {e}",
                                 status=response.status_code)

        return ApiResult(success=True, data=data, status=response.status_code)

    # =========================================================================
    # AUTH
    # =========================================================================

    def register(self, email: str, password: str, name: str) -> ApiResult:
        return self.request('POST', '/auth/register',
                            body={'email': email, 'password': password, 'name': name},
                            parse=AuthState.from_dict)

    def login(self, email: str, password: str) -> ApiResult:
        return self.request('POST', '/auth/login',
                            body={'email': email, 'password': password},
                            parse=AuthState.from_dict)

    def me(self) -> ApiResult:
        return self.request('GET', '/auth/me', parse=User.from_dict)

    # =========================================================================
    # CONTACTS
    # =========================================================================

    def list_contacts(self, page: int = 1, page_size: int = 50,
                      filters: Optional[Dict[str, str]] = None) -> ApiResult:
        params = {'page': page, 'pageSize': page_size, **(filters or {})}
        return self.request('GET', '/contacts', params=params, parse=_page_of(Contact.from_dict))

    def get_all_contacts(self) -> ApiResult:
        return self.request('GET', '/contacts/all', parse=_list_of(Contact.from_dict))

    def get_contact(self, contact_id: str) -> ApiResult:
        return self.request('GET', f'/contacts/{contact_id}', parse=Contact.from_dict)

    def create_contact(self, contact: Contact) -> ApiResult:
        return self.request('POST', '/contacts', body=contact.to_dict(), parse=Contact.from_dict)

    def update_contact(self, contact_id: str, updates: Dict[str, Any]) -> ApiResult:
        """`updates` uses wire (camelCase) field names."""
        return self.request('PUT', f'/contacts/{contact_id}', body=updates, parse=Contact.from_dict)

    def delete_contact(self, contact_id: str) -> ApiResult:
        return self.request('DELETE', f'/contacts/{contact_id}')

    # =========================================================================
    # INTERACTIONS
    # =========================================================================

    def list_interactions(self, page: int = 1, page_size: int = 50) -> ApiResult:
        return self.request('GET', '/interactions',
                            params={'page': page, 'pageSize': page_size},
                            parse=_page_of(Interaction.from_dict))

    def get_contact_interactions(self, contact_id: str) -> ApiResult:
        return self.request('GET', f'/contacts/{contact_id}/interactions',
                            parse=_page_of(Interaction.from_dict))

    def create_interaction(self, interaction: Interaction) -> ApiResult:
        return self.request('POST', '/interactions', body=interaction.to_dict(),
                            parse=Interaction.from_dict)

    def update_interaction(self, interaction_id: str, updates: Dict[str, Any]) -> ApiResult:
        return self.request('PUT', f'/interactions/{interaction_id}', body=updates,
                            parse=Interaction.from_dict)

    def delete_interaction(self, interaction_id: str) -> ApiResult:
        return self.request('DELETE', f'/interactions/{interaction_id}')

    # =========================================================================
    # INTRODUCTIONS
    # =========================================================================

    def list_introductions(self, status: Optional[str] = None,
                           page: int = 1, page_size: int = 20) -> ApiResult:
        params: Dict[str, Any] = {'page': page, 'pageSize': page_size}
        if status:
            params['status'] = status
        return self.request('GET', '/introductions', params=params,
                            parse=_page_of(Introduction.from_dict))

    def get_suggested_introductions(self, limit: int = 10) -> ApiResult:
        return self.request('GET', '/introductions/suggested', params={'limit': limit},
                            parse=_list_of(Introduction.from_dict))

    def create_introduction(self, introduction: Introduction) -> ApiResult:
        return self.request('POST', '/introductions', body=introduction.to_dict(),
                            parse=Introduction.from_dict)

    def update_introduction(self, introduction_id: str, updates: Dict[str, Any]) -> ApiResult:
        return self.request('PUT', f'/introductions/{introduction_id}', body=updates,
                            parse=Introduction.from_dict)

    # =========================================================================
    # ANALYTICS
    # =========================================================================

    def get_dashboard(self) -> ApiResult:
        """Dashboard sections stay plain dicts; see _parse_dashboard."""
        return self.request('GET', '/analytics', parse=_parse_dashboard)

    def get_at_risk(self, limit: int = 10) -> ApiResult:
        return self.request('GET', '/analytics/at-risk', params={'limit': limit},
                            parse=_list_of(Contact.from_dict))


# =============================================================================
# CONCURRENT FETCH
# =============================================================================

def fetch_concurrently(*calls: Callable[[], ApiResult]) -> List[ApiResult]:
    """
    Run several client calls at once and wait for all of them.

    Each blocking call is dispatched to a worker thread from a single asyncio
    event loop and joined with gather. Results come back in argument order.

    Usage:
        contact_res, history_res = fetch_concurrently(
            lambda: api.get_contact(cid),
            lambda: api.get_contact_interactions(cid),
        )
    """
    async def _gather():
        return await asyncio.gather(*(asyncio.to_thread(call) for call in calls))

    return list(asyncio.run(_gather()))
