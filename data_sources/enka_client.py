"""
Enka.Network API client.

Fetches a player's public character showcase:

    GET https://enka.network/api/uid/{uid}

Failures never raise out of fetch_snapshot(); they come back as
Err(FetchError) carrying the upstream HTTP status when there was one.
Successful responses are cached for the ``ttl`` seconds the payload
advertises, which is also how long Enka.Network itself will serve the same
data.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from core.constants import (
    API_TIMEOUT_DEFAULT,
    API_TIMEOUT_ENKA_READ,
    CACHE_TTL_SNAPSHOT,
    ENKA_API_BASE_URL,
    ENKA_USER_AGENT,
    RATE_LIMIT_ENKA,
)
from core.result import Err, Ok, Result
from core.snapshot import EnkaResponse, parse_snapshot
from data_sources.base_api import APIError, BaseAPIClient, TimeoutType

logger = logging.getLogger(__name__)

# Full-width ASCII letters/digits sit at a fixed offset from their half-width forms
_FULL_WIDTH_ALNUM = re.compile(r"[Ａ-Ｚａ-ｚ０-９]")
_FULL_WIDTH_OFFSET = 0xFEE0
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")

STATUS_MESSAGES: Dict[int, str] = {
    400: "Wrong UID format",
    404: "Player does not exist",
    424: "Game maintenance or Enka.Network is updating",
    429: "Rate limited, try again later",
    500: "Enka.Network server error",
    503: "Enka.Network is temporarily unavailable",
}

UPSTREAM_ERROR_MESSAGE = "Enka.Network server error"


@dataclass(frozen=True)
class FetchError:
    """Why a snapshot could not be obtained.

    status is the HTTP status to report, or None when the request never got
    a response (DNS, timeout, connection reset) or the body was unusable.
    """
    status: Optional[int]
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}

    def __str__(self) -> str:
        return f"{self.status}: {self.message}" if self.status else self.message


def clean_uid(raw: Any) -> str:
    """
    Normalize user input to a UID.

    Full-width letters and digits become half-width; everything that is not
    an ASCII letter or digit is removed.

        >>> clean_uid(" ８００ １２３４５６ ")
        '800123456'
    """
    text = "" if raw is None else str(raw)
    text = _FULL_WIDTH_ALNUM.sub(lambda m: chr(ord(m.group()) - _FULL_WIDTH_OFFSET), text)
    return _NON_ALNUM.sub("", text)


def status_message(status: int) -> str:
    if status in STATUS_MESSAGES:
        return STATUS_MESSAGES[status]
    if status >= 500:
        return UPSTREAM_ERROR_MESSAGE
    return f"Unexpected response ({status})"


class EnkaClient(BaseAPIClient):
    """
    Client for the Enka.Network profile API.

    Example:
        with EnkaClient() as client:
            result = client.fetch_snapshot("800123456")
            if result.is_ok():
                print(result.unwrap().player_info.nickname)
    """

    def __init__(
        self,
        base_url: str = ENKA_API_BASE_URL,
        rate_limit: float = RATE_LIMIT_ENKA,
        cache_ttl: int = CACHE_TTL_SNAPSHOT,
        user_agent: str = ENKA_USER_AGENT,
        timeout: TimeoutType = (API_TIMEOUT_DEFAULT, API_TIMEOUT_ENKA_READ),
        session: Optional[requests.Session] = None,
    ):
        super().__init__(
            base_url=base_url,
            rate_limit=rate_limit,
            cache_ttl=cache_ttl,
            user_agent=user_agent,
            timeout=timeout,
            session=session,
        )

    def _get_cache_key(self, endpoint: str, params: Optional[Dict] = None) -> str:
        return endpoint.strip("/")

    def _response_ttl(self, endpoint: str, json_data: Any) -> Optional[int]:
        if isinstance(json_data, dict):
            ttl = json_data.get("ttl")
            if isinstance(ttl, int) and not isinstance(ttl, bool) and ttl > 0:
                return ttl
        return None

    def fetch_raw(self, uid: Any) -> Result[Dict[str, Any], FetchError]:
        """
        Fetch the undecoded showcase payload for a UID.

        Exactly one HTTP request is made (none on a cache hit); failures
        are not retried.
        """
        cleaned = clean_uid(uid)
        if not cleaned:
            return Err(FetchError(400, "UID is required"))

        logger.info(f"Fetching Enka.Network data for UID {cleaned}")
        try:
            payload = self.get(f"uid/{cleaned}")
        except APIError as e:
            return Err(self._to_fetch_error(cleaned, e))

        if not isinstance(payload, dict):
            logger.error(f"Unexpected payload type for UID {cleaned}: {type(payload).__name__}")
            return Err(FetchError(None, "Failed to fetch data from Enka.Network: unexpected response"))
        return Ok(payload)

    def fetch_snapshot(self, uid: Any) -> Result[EnkaResponse, FetchError]:
        """
        Fetch and validate a player's showcase.

        Returns:
            Ok(EnkaResponse), or Err(FetchError) for an empty UID, an HTTP
            error status, a transport failure or a payload that does not
            match the snapshot schema.
        """
        return self.fetch_raw(uid).and_then(
            lambda payload: parse_snapshot(payload).map_err(lambda msg: FetchError(None, msg))
        )

    @staticmethod
    def _to_fetch_error(uid: str, error: APIError) -> FetchError:
        status = error.status_code if error.status_code and error.status_code >= 400 else None
        if status is None:
            logger.error(f"Enka.Network request for UID {uid} failed: {error}")
            return FetchError(None, f"Failed to fetch data from Enka.Network: {error}")

        reason = status_message(status)
        logger.warning(f"Enka.Network returned {status} for UID {uid}: {reason}")
        return FetchError(status, f"Failed to fetch data from Enka.Network: {reason}")
