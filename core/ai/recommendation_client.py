"""Recommendation API client with connection reuse and exponential-backoff retry."""

import json
import logging
import time
from typing import Any, Dict, Optional, Union

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    RetryCallState,
)

from core.config_loader import AiApiConfig
from core.exam.exceptions import UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "/job-bar/recommend"
ARABIC_ENDPOINT = "/job-bar/recommend/ar"

DEFAULT_ERROR_MESSAGE = "AI API returned error"
HTML_ERROR_MESSAGE = "Server returned HTML error page (likely proxy/gateway issue)"


class _Unavailable:
    """Sentinel returned when the recommendation API is switched off."""

    def __repr__(self) -> str:
        return "RECOMMENDATIONS_UNAVAILABLE"

    def __bool__(self) -> bool:
        return False


RECOMMENDATIONS_UNAVAILABLE = _Unavailable()


class _ErrorResponse(Exception):
    """A non-success HTTP response, raised so tenacity can retry it."""

    def __init__(self, response: requests.Response):
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


def extract_error_message(response: requests.Response) -> str:
    """
    Best-effort human message from an error response.

    Prefers the JSON fields message / error / detail. HTML bodies (usually a
    proxy or gateway page) get a fixed message; anything else is cut to the
    first 200 characters.
    """
    body = response.text or ""

    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if value:
                return value if isinstance(value, str) else json.dumps(value)
        return DEFAULT_ERROR_MESSAGE

    if payload is not None:
        return body[:200] or DEFAULT_ERROR_MESSAGE

    lowered = body.lower()
    if "<!doctype" in lowered or "<html" in lowered:
        return HTML_ERROR_MESSAGE

    return body[:200] or DEFAULT_ERROR_MESSAGE


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception()
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        "AI API request failed (attempt %s), retrying in %.1fs: %s",
        retry_state.attempt_number, wait, exc,
    )


class RecommendationClient:
    """
    Client for the job recommendation API.

    Responsibilities:
    - Own a requests.Session for connection reuse
    - Pick the endpoint for the requested locale
    - Retry transport errors and non-success responses with exponential backoff
    - Classify the final failure as UpstreamError
    """

    def __init__(
        self,
        base_url: str,
        enabled: bool = True,
        timeout_seconds: float = 10.0,
        retry_attempts: int = 3,
        backoff_seconds: float = 1.0,
        session: Optional[requests.Session] = None
    ):
        """
        Args:
            base_url: Base URL of the recommendation API
            enabled: When False, get_recommendations never touches the network
            timeout_seconds: Timeout for each HTTP attempt
            retry_attempts: Retries after the first attempt
            backoff_seconds: First backoff wait; doubles on every retry
            session: Optional preconfigured session
        """
        self.base_url = base_url.rstrip("/")
        self.enabled = enabled
        self.timeout_seconds = timeout_seconds
        self.retry_attempts = max(0, int(retry_attempts))
        self.backoff_seconds = backoff_seconds

        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

        self._post_with_retry = retry(
            retry=retry_if_exception_type((requests.RequestException, _ErrorResponse)),
            wait=wait_exponential(multiplier=self.backoff_seconds, min=0, max=60),
            stop=stop_after_attempt(self.retry_attempts + 1),
            before_sleep=_log_retry,
            reraise=True,
        )(self._post_once)

        logger.info(
            f"RecommendationClient initialized: base_url={self.base_url}, enabled={enabled}, "
            f"timeout={timeout_seconds}s, retries={self.retry_attempts}"
        )

    @classmethod
    def from_config(cls, config: AiApiConfig) -> "RecommendationClient":
        return cls(
            base_url=config.base_url,
            enabled=config.enabled,
            timeout_seconds=config.timeout_seconds,
            retry_attempts=config.retry_attempts,
            backoff_seconds=config.backoff_seconds,
        )

    def endpoint_for(self, locale: str) -> str:
        path = ARABIC_ENDPOINT if locale == "ar" else DEFAULT_ENDPOINT
        return f"{self.base_url}{path}"

    def _post_once(self, url: str, payload: Dict[str, Any]) -> requests.Response:
        response = self.session.post(url, json=payload, timeout=self.timeout_seconds)
        if not response.ok:
            raise _ErrorResponse(response)
        return response

    def get_recommendations(
        self,
        profile: Dict[str, Any],
        locale: str = "en"
    ) -> Union[Dict[str, Any], _Unavailable]:
        """
        Send a scored profile and return the API's JSON object verbatim.

        Returns RECOMMENDATIONS_UNAVAILABLE without a network call when the
        client is disabled.

        Raises:
            UpstreamError: On a non-success final response, exhausted
                transport retries, or a non-object success body.
        """
        if not self.enabled:
            logger.info("AI API is disabled via configuration")
            return RECOMMENDATIONS_UNAVAILABLE

        url = self.endpoint_for(locale)
        logger.info(f"Calling AI API for job recommendations: url={url}, locale={locale}, keys={sorted(profile)}")
        logger.debug(f"AI API request body: {json.dumps(profile, ensure_ascii=False)}")

        start = time.monotonic()
        try:
            response = self._post_with_retry(url, profile)
        except _ErrorResponse as e:
            duration_ms = round((time.monotonic() - start) * 1000, 2)
            status_code = e.response.status_code
            message = extract_error_message(e.response)
            logger.error(
                f"AI API returned error response: url={url}, status={status_code}, "
                f"duration_ms={duration_ms}, error={message}, "
                f"content_type={e.response.headers.get('Content-Type')}"
            )
            raise UpstreamError(f"AI API error (HTTP {status_code}): {message}", upstream_status=status_code) from e
        except requests.RequestException as e:
            duration_ms = round((time.monotonic() - start) * 1000, 2)
            logger.error(f"AI API request failed after retries: url={url}, duration_ms={duration_ms}, error={e}")
            raise UpstreamError(f"AI API request failed: {e}") from e

        duration_ms = round((time.monotonic() - start) * 1000, 2)
        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"AI API returned non-JSON body: url={url}, duration_ms={duration_ms}")
            raise UpstreamError(
                f"AI API error (HTTP {response.status_code}): invalid JSON response",
                upstream_status=response.status_code
            ) from e

        if not isinstance(data, dict):
            logger.error(f"AI API returned non-object JSON: url={url}, duration_ms={duration_ms}")
            raise UpstreamError(
                f"AI API error (HTTP {response.status_code}): unexpected response format",
                upstream_status=response.status_code
            )

        logger.info(
            f"AI API request successful: url={url}, status={response.status_code}, duration_ms={duration_ms}"
        )
        logger.debug(f"AI API response preview: {response.text[:500]}")
        return data

    def is_available(self) -> bool:
        """Quick reachability check of the API root."""
        if not self.enabled:
            return False
        try:
            response = self.session.get(self.base_url, timeout=2)
            return response.ok
        except requests.RequestException:
            return False

    def close(self):
        """Close the session and release resources."""
        self.session.close()
