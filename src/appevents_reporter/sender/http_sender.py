"""HTTP transport used to talk to the ads open API.

The transport is deliberately thin: it performs one GET or POST and returns
the response body, or ``None`` on any transport-level failure. Interpreting
the body is left to the caller.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional, Protocol
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from loguru import logger


class Transport(Protocol):
    """Blocking HTTP primitive."""

    def do_get(self, url: str, headers: Dict[str, str]) -> Optional[str]: ...

    def do_post(self, url: str, headers: Dict[str, str], body: str) -> Optional[str]: ...


class UrllibTransport:
    """Transport built on urllib."""

    def __init__(self, timeout_seconds: int = 30):
        self.timeout_seconds = timeout_seconds

    def do_get(self, url: str, headers: Dict[str, str]) -> Optional[str]:
        return self._send(Request(url, headers=headers, method="GET"))

    def do_post(self, url: str, headers: Dict[str, str], body: str) -> Optional[str]:
        return self._send(Request(url, data=body.encode("utf-8"), headers=headers, method="POST"))

    def _send(self, req: Request) -> Optional[str]:
        """Send a single request and return the decoded body on 2xx."""
        try:
            with urlopen(req, timeout=self.timeout_seconds) as response:
                if 200 <= response.status < 300:
                    logger.debug(f"{req.get_method()} {req.full_url}: {response.status}")
                    return response.read().decode("utf-8")

                logger.warning(f"{req.get_method()} {req.full_url} failed: HTTP {response.status} {response.reason}")
                return None

        except HTTPError as e:
            logger.warning(f"HTTP error for {req.full_url}: {e.code} {e.reason}")
            return None

        except URLError as e:
            logger.warning(f"Network error for {req.full_url}: {e.reason}")
            return None

        except Exception as e:
            logger.warning(f"Request error for {req.full_url}: {e}")
            return None


class RequestHeaders:
    """Header map shared by every request of one SDK instance.

    The static fields never change; the credential is refreshed right before
    each request because the access token may rotate at runtime.
    """

    CREDENTIAL_HEADER = "access-token"

    def __init__(self, user_agent: str):
        self._headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Connection": "Keep-Alive",
            "User-Agent": user_agent,
        }
        self._lock = threading.Lock()

    def refresh_credential(self, access_token: str) -> None:
        with self._lock:
            self._headers[self.CREDENTIAL_HEADER] = access_token

    def snapshot(self) -> Dict[str, str]:
        """Copy of the current headers for one outgoing request."""
        with self._lock:
            return dict(self._headers)
