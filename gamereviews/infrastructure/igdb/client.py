"""Concrete implementation of the MetadataClient interface using the IGDB v4 API.

Issues one POST per batch of IDs using IGDB's query language, waits on the
shared rate limiter before every request and decodes the JSON array response
into domain records. Requests are never retried here.
"""

import logging
import time
import warnings
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from gamereviews.domain.errors import DecodeError, PartialResultWarning, RemoteAPIError, TransportError
from gamereviews.domain.interfaces.metadata_client import MetadataClient
from gamereviews.domain.models.common import COVERS, GAMES, GAME_SEARCH_FIELDS, FieldSelector, RecordId, ResourceKind
from gamereviews.domain.models.records import Game, Record, record_type_for
from gamereviews.infrastructure.igdb.auth import DEFAULT_TOKEN_URL, resolve_access_token
from gamereviews.infrastructure.igdb.images import normalize_image_url
from gamereviews.infrastructure.resilience.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.igdb.com/v4"
# IGDB's maximum page size
RESULT_LIMIT = 500


def build_id_query(fields: FieldSelector, ids: Sequence[RecordId]) -> str:
    """Builds `limit 500; fields <fields>; where id=(<ids>);`."""
    id_list = ",".join(str(record_id) for record_id in ids)
    return f"limit {RESULT_LIMIT}; fields {fields}; where id=({id_list});"


def build_search_query(title: str, fields: FieldSelector) -> str:
    escaped = title.replace("\\", "\\\\").replace('"', '\\"')
    return f'search "{escaped}"; fields {fields};'


class IgdbClient(MetadataClient):
    """IGDB implementation of the MetadataClient interface.

    Use `IgdbClient.create` to authenticate and build a client; the token is
    kept for the client's lifetime and expiry is not handled.
    """

    def __init__(
        self,
        client_id: str,
        access_token: str,
        rate_limiter: RateLimiter,
        http_client: Optional[httpx.AsyncClient] = None,
        api_base_url: str = DEFAULT_API_BASE_URL,
    ):
        """Initializes an already authenticated client.

        Args:
            client_id: Twitch application client ID, sent as `Client-ID`.
            access_token: Bearer token for the `Authorization` header.
            rate_limiter: The process-wide limiter shared by every caller.
            http_client: Optional HTTP client; one is created (and owned) if None.
            api_base_url: Base URL of the IGDB API.
        """
        self.client_id = client_id
        self.access_token = access_token
        self.rate_limiter = rate_limiter
        self.api_base_url = api_base_url.rstrip("/")
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient()
        logger.info(f"IgdbClient initialized for {self.api_base_url}")

    @classmethod
    async def create(
        cls,
        client_id: Optional[str],
        client_secret: Optional[str],
        rate_limiter: RateLimiter,
        access_token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        api_base_url: str = DEFAULT_API_BASE_URL,
        token_url: str = DEFAULT_TOKEN_URL,
    ) -> "IgdbClient":
        """Authenticates once and returns a ready client.

        Raises:
            ConfigurationError: If credentials are missing.
            AuthenticationError: If the token exchange fails.
            TransportError: If the token endpoint cannot be reached.
        """
        owned = http_client is None
        http = http_client or httpx.AsyncClient()
        try:
            token = await resolve_access_token(http, client_id, client_secret, access_token, token_url)
        except BaseException:
            if owned:
                await http.aclose()
            raise
        client = cls(
            client_id=str(client_id),
            access_token=token,
            rate_limiter=rate_limiter,
            http_client=http,
            api_base_url=api_base_url,
        )
        client._owns_http_client = owned
        return client

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> "IgdbClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _headers(self) -> Dict[str, str]:
        return {
            "Client-ID": self.client_id,
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }

    async def _request(self, kind: ResourceKind, body: str) -> Tuple[List[Dict[str, Any]], str]:
        """Sends one rate-limited query.

        Returns:
            The decoded JSON array and the raw response text.
        """
        endpoint = f"{self.api_base_url}/{kind}"
        await self.rate_limiter.acquire()
        start_time = time.perf_counter()
        try:
            response = await self._http.post(endpoint, content=body, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"Request to {endpoint} failed: {type(e).__name__} - {e}")
            raise TransportError(endpoint, e) from e
        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f"got status code: {response.status_code} from {endpoint} in {latency_ms:.0f}ms")

        if not response.is_success:
            raise RemoteAPIError(endpoint, body, response.text, response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(
                f"Invalid json when fetching {endpoint} with body {body}. "
                f"Got response: {response.text}\n{e!r}"
            )
            raise DecodeError(endpoint, body, response.text, e) from e

        if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
            error = TypeError(f"expected a JSON array of objects, got {type(payload).__name__}")
            logger.error(f"Unexpected response shape from {endpoint} with body {body}: {response.text}")
            raise DecodeError(endpoint, body, response.text, error)
        return payload, response.text

    def _decode_records(self, kind: ResourceKind, items: List[Dict[str, Any]], body: str, text: str) -> List[Record]:
        record_type = record_type_for(kind)
        records: List[Record] = []
        for item in items:
            if kind == COVERS and isinstance(item.get("url"), str):
                item = {**item, "url": normalize_image_url(item["url"])}
            try:
                records.append(record_type.from_payload(item))
            except (KeyError, TypeError, ValueError) as e:
                endpoint = f"{self.api_base_url}/{kind}"
                logger.error(f"Invalid {kind} record from {endpoint} with body {body}: {item}\n{e!r}")
                raise DecodeError(endpoint, body, text, e) from e
        return records

    # --- MetadataClient Interface Implementation ---

    async def fetch(self, kind: ResourceKind, fields: FieldSelector, ids: Sequence[RecordId]) -> List[Record]:
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return []
        body = build_id_query(fields, unique_ids)
        logger.debug(f"Fetching {len(unique_ids)} '{kind}' record(s) from IGDB")
        items, text = await self._request(kind, body)
        records = self._decode_records(kind, items, body, text)

        if len(records) < len(unique_ids):
            returned = {record.id for record in records}
            missing = [record_id for record_id in unique_ids if record_id not in returned]
            message = (
                f"IGDB returned {len(records)} of {len(unique_ids)} requested '{kind}' "
                f"record(s); missing ids: {missing}"
            )
            logger.warning(message)
            warnings.warn(message, PartialResultWarning, stacklevel=2)
        return records

    async def search(self, title: str, fields: FieldSelector = GAME_SEARCH_FIELDS) -> List[Game]:
        body = build_search_query(title, fields)
        logger.debug(f"Searching IGDB games for {title!r}")
        items, text = await self._request(GAMES, body)
        return [record for record in self._decode_records(GAMES, items, body, text) if isinstance(record, Game)]
