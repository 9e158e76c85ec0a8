# marginate/storage/source_fetcher.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol, Sequence
from urllib.parse import urljoin, urlparse
from urllib.request import url2pathname

import requests

from marginate.config import get_settings
from marginate.errors import EmptyLocator, EmptyResult, FetchFailed

logger = logging.getLogger(__name__)


class FetchPolicy(str, Enum):
    """
    STRICT:  a non-2xx (or missing) status is a failure.
    LENIENT: the status is only logged; the body is read anyway.
             Needed where there are no HTTP semantics (file delivery).
    An empty body is fatal under both.
    """

    STRICT = "strict"
    LENIENT = "lenient"


@dataclass(frozen=True)
class FetchResponse:
    status: Optional[int]
    body: bytes
    # transport-level failure with no status to carry it (e.g. an unreadable file)
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is not None and 200 <= self.status < 300


class Transport(Protocol):
    default_policy: FetchPolicy

    def handles(self, locator: str) -> bool:
        ...

    def fetch(self, locator: str) -> FetchResponse:
        ...


def _scheme(locator: str) -> str:
    scheme = urlparse(locator).scheme.lower()
    # "C:\foo.pdf" parses with scheme "c"
    return "" if len(scheme) == 1 else scheme


class HttpTransport:
    default_policy = FetchPolicy.STRICT

    def __init__(self, session: requests.Session | None = None, timeout: float = 30.0):
        self.session = session or requests.Session()
        self.timeout = timeout

    def handles(self, locator: str) -> bool:
        return _scheme(locator) in ("http", "https")

    def fetch(self, locator: str) -> FetchResponse:
        try:
            resp = self.session.get(locator, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchFailed(locator, None, reason=f"{type(e).__name__}: {e}") from e
        return FetchResponse(status=resp.status_code, body=resp.content or b"")


class FileTransport:
    """
    file:// URLs and plain paths. There is no status code here, so the
    response always reports status=None. A read error comes back as an
    empty body with `error` set; the fetch policy decides what that means.
    """

    default_policy = FetchPolicy.LENIENT

    def handles(self, locator: str) -> bool:
        return _scheme(locator) in ("", "file")

    def fetch(self, locator: str) -> FetchResponse:
        path = self._to_path(locator)
        try:
            body = path.read_bytes()
        except OSError as e:
            return FetchResponse(status=None, body=b"", error=f"{type(e).__name__}: {e}")
        return FetchResponse(status=None, body=body)

    @staticmethod
    def _to_path(locator: str) -> Path:
        if _scheme(locator) == "file":
            parsed = urlparse(locator)
            return Path(url2pathname(parsed.path))
        return Path(locator)


class SourceFetcher:
    """
    Resolves a PDF source into bytes: caller-supplied bytes win, otherwise a
    single fetch of the locator through the first transport that handles it.
    """

    def __init__(
        self,
        transports: Sequence[Transport] | None = None,
        policy: FetchPolicy | None = None,
        asset_root: str | Path | None = None,
    ):
        self.transports = list(transports) if transports is not None else [HttpTransport(), FileTransport()]
        self.policy = policy
        self.asset_root = str(asset_root) if asset_root is not None else None

    def resolve_source(self, locator: str | None, inline_bytes: bytes | None = None) -> bytes:
        if inline_bytes:
            logger.info("resolve_source: using inline bytes (%d bytes)", len(inline_bytes))
            return inline_bytes

        trimmed = (locator or "").strip()
        if not trimmed:
            raise EmptyLocator()

        target = self.absolute_locator(trimmed)
        transport = self._transport_for(target)
        policy = self.policy or transport.default_policy
        logger.info("resolve_source: fetching %s (policy=%s)", target, policy.value)

        resp = transport.fetch(target)
        if not resp.ok:
            if policy is FetchPolicy.STRICT:
                raise FetchFailed(trimmed, resp.status, reason=resp.error)
            logger.warning(
                "Status was %s for %s; continuing because the policy is lenient "
                "(expected when files are served without HTTP).%s",
                resp.status,
                target,
                f" {resp.error}" if resp.error else "",
            )

        if len(resp.body) == 0:
            raise EmptyResult(trimmed)
        return resp.body

    def absolute_locator(self, locator: str) -> str:
        """Resolve a relative locator against the asset root, if one is configured."""
        if not self.asset_root or _scheme(locator):
            return locator
        if Path(locator).is_absolute():
            return locator

        if _scheme(self.asset_root) in ("http", "https"):
            return urljoin(self.asset_root.rstrip("/") + "/", locator)
        return str(Path(self.asset_root) / locator)

    def _transport_for(self, locator: str) -> Transport:
        for t in self.transports:
            if t.handles(locator):
                return t
        raise FetchFailed(locator, None, reason="no transport for this locator")


def policy_from_setting(value: str | None) -> FetchPolicy | None:
    v = (value or "auto").strip().lower()
    if v == "auto":
        return None
    return FetchPolicy(v)


# convenience functions (same shape as get_storage())
_fetcher_singleton: SourceFetcher | None = None


def get_fetcher() -> SourceFetcher:
    global _fetcher_singleton
    if _fetcher_singleton is None:
        s = get_settings()
        _fetcher_singleton = SourceFetcher(
            transports=[HttpTransport(timeout=s.fetch_timeout), FileTransport()],
            policy=policy_from_setting(s.fetch_policy),
            asset_root=s.asset_root,
        )
    return _fetcher_singleton


def resolve_source(locator: str | None, inline_bytes: bytes | None = None) -> bytes:
    return get_fetcher().resolve_source(locator, inline_bytes)
