"""Remote function signature lookup with a process-wide, deduplicating cache."""

from concurrent.futures import Future
from threading import Lock
from typing import Any, Callable, Dict, List, MutableMapping, Optional

import requests
from loguru import logger
from requests.exceptions import RequestException

from multisend.core.errors import SignatureLookupError
from multisend.core.http import create_session
from multisend.core.settings import settings

SIGNATURE_KEYS = ("name", "signature", "text_signature")


def parse_signature_response(body: Any, selector: str) -> List[str]:
    """Extract candidate signatures for ``selector`` from a lookup response.

    The expected shape is ``{"result": {"function": {"0x...": [{"name": ...}]}}}``.
    A missing or null entry for the selector means no candidates were found.

    Raises:
        SignatureLookupError: If the body does not have the expected shape.

    """
    result = body.get("result") if isinstance(body, dict) else None
    functions = result.get("function") if isinstance(result, dict) else None
    if not isinstance(functions, dict):
        raise SignatureLookupError(f"Unexpected signature lookup response: {body}")

    normalized = selector.lower()
    entries = next(
        (value for key, value in functions.items() if key.lower() == normalized),
        None,
    )
    if not isinstance(entries, list):
        return []

    signatures: List[str] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        for key in SIGNATURE_KEYS:
            candidate = entry.get(key)
            if isinstance(candidate, str) and candidate.strip():
                if candidate not in signatures:
                    signatures.append(candidate)
                break
    return signatures


class OpenChainClient:
    """Client for an OpenChain-compatible signature database."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize with the lookup URL and request timeout."""
        self.url = url or settings.signature_lookup_url
        self.timeout = timeout if timeout is not None else settings.lookup_timeout
        self.session = session or create_session()

    def lookup(self, selector: str) -> List[str]:
        """Return candidate signatures for a 4-byte selector.

        Raises:
            SignatureLookupError: On transport errors, non-2xx responses or bad payloads.

        """
        normalized = selector.lower()
        try:
            response = self.session.get(
                self.url,
                params={"function": normalized},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except RequestException as exc:
            raise SignatureLookupError(f"HTTP error querying {self.url}: {exc}") from exc
        except ValueError as exc:
            raise SignatureLookupError(f"Invalid JSON from {self.url}: {exc}") from exc

        return parse_signature_response(body, normalized)


class SignatureCache:
    """Selector -> candidate signatures cache.

    Concurrent requests for the same unresolved selector share a single
    fetch. Resolved entries, including empty "not found" results, are kept
    until ``clear`` is called. Failed fetches are not cached, so a later
    request retries.
    """

    def __init__(
        self,
        fetcher: Callable[[str], List[str]],
        storage: Optional[MutableMapping[str, List[str]]] = None,
    ):
        """Initialize with the function used to resolve cache misses."""
        self.fetcher = fetcher
        self._resolved: MutableMapping[str, List[str]] = storage if storage is not None else {}
        self._in_flight: Dict[str, Future] = {}
        self._lock = Lock()

    def get(self, selector: str) -> List[str]:
        """Return candidate signatures for ``selector``, fetching on a miss.

        Raises:
            SignatureLookupError: If the underlying fetch fails.

        """
        key = selector.lower()
        with self._lock:
            if key in self._resolved:
                logger.debug(f"Signature cache HIT: {key}")
                return list(self._resolved[key])

            pending = self._in_flight.get(key)
            if pending is None:
                future: Future = Future()
                self._in_flight[key] = future

        if pending is not None:
            logger.debug(f"Waiting for in-flight signature lookup: {key}")
            return list(pending.result())

        try:
            signatures = self.fetcher(key)
        except BaseException as exc:
            with self._lock:
                self._in_flight.pop(key, None)
            future.set_exception(exc)
            raise

        with self._lock:
            self._resolved[key] = list(signatures)
            self._in_flight.pop(key, None)
        future.set_result(signatures)
        logger.debug(f"Signature cache SET: {key} ({len(signatures)} candidates)")
        return list(signatures)

    def clear(self) -> None:
        """Drop every resolved entry."""
        with self._lock:
            self._resolved.clear()


def _fetch_from_openchain(selector: str) -> List[str]:
    return OpenChainClient().lookup(selector)


signature_cache = SignatureCache(_fetch_from_openchain)


def fetch_function_signatures(selector: str) -> List[str]:
    """Look up a selector through the process-wide cache."""
    return signature_cache.get(selector)


def clear_signature_cache() -> None:
    """Reset the process-wide cache."""
    signature_cache.clear()
