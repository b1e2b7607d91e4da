"""
app/providers/base.py

Base provider abstraction and shared HTTP mechanics.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests

from app.domain.audit import ProviderResult

logger = logging.getLogger(__name__)


class ProviderRequestError(RuntimeError):
    """
    Raised inside an adapter when its single outbound call cannot produce JSON.

    Never escapes ``fetch``; adapters convert it to a failure envelope.
    """


class BaseProvider(ABC):
    """
    Provider interface: one outbound call per fetch, normalized into a
    ``ProviderResult``. Implementations must not raise out of ``fetch``.
    """

    kind: str

    def __init__(
        self,
        *,
        kind: str,
        timeout_seconds: float,
        session: requests.Session | None = None,
    ) -> None:
        self.kind = kind
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """
        True when the provider's API key is available.
        """

    @abstractmethod
    def fetch(self, *args: Any, **kwargs: Any) -> ProviderResult:
        """
        Issue one provider call and return a normalized result envelope.
        """

    def _request_json(
        self,
        *,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Execute one GET with the provider timeout and return parsed JSON.
        """

        try:
            response = self._session.request(
                method="GET",
                url=url,
                params=params,
                headers=headers,
                timeout=self._timeout_seconds,
            )
            response.raise_for_status()
        except requests.Timeout as exc:
            raise ProviderRequestError(
                f"{self.kind}: request timed out after {self._timeout_seconds:g}s."
            ) from exc
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            raise ProviderRequestError(f"{self.kind}: HTTP {status_code} from provider.") from exc
        except requests.RequestException as exc:
            raise ProviderRequestError(f"{self.kind}: request failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderRequestError(f"{self.kind}: response was not valid JSON.") from exc

    def _failure(self, message: str) -> ProviderResult:
        logger.warning("Provider fetch failed provider=%s error=%s", self.kind, message)
        return ProviderResult.failure(message)


def as_number(value: Any) -> float | None:
    """
    Return ``value`` as a float when it is a real number, else None.

    Booleans are rejected even though they subclass int.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def dig(payload: Any, *keys: str) -> Any:
    """
    Walk nested dictionaries, returning None as soon as a level is missing.
    """

    current = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current
