"""
HTTP request context for faults raised by the HTTP client.

The dispatcher never inspects httpx types itself; it only checks whether a
fault implements ``HasRequestContext``. ``HttpFault`` is the adapter that
gives httpx errors that capability.
"""

from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, runtime_checkable
from urllib.parse import parse_qs

import httpx

from faultlog.models.fault import Fault, FaultFrame

# Form fields that identify the upstream provider a request was sent to
PROVIDER_FIELDS = ("providers[0]", "providers[]", "providers")

REDACTED_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie", "set-cookie"})


@runtime_checkable
class HasRequestContext(Protocol):
    """Capability of errors that know the HTTP request they failed on."""

    def request_context(self) -> Mapping[str, Any]:
        ...


def flatten_headers(headers: httpx.Headers) -> str:
    """Render headers as ``Name: v1, v2`` pairs, hiding credentials."""
    grouped: Dict[str, list] = {}
    for name, value in headers.multi_items():
        if name.lower() in REDACTED_HEADERS:
            value = "[redacted]"
        grouped.setdefault(name, []).append(value)
    return "; ".join(f"{name}: {', '.join(values)}" for name, values in grouped.items())


def provider_id(request: httpx.Request) -> Optional[int]:
    """Provider id posted as a urlencoded form field, if any."""
    content_type = request.headers.get("content-type", "")
    if "application/x-www-form-urlencoded" not in content_type:
        return None
    try:
        body = request.content
    except httpx.RequestNotRead:
        return None
    fields = parse_qs(body.decode("utf-8", errors="replace"))
    for name in PROVIDER_FIELDS:
        values = fields.get(name)
        if values and values[0]:
            try:
                return int(values[0])
            except ValueError:
                return None
    return None


def _request_of(exc: httpx.HTTPError) -> Optional[httpx.Request]:
    try:
        return exc.request
    except RuntimeError:
        # RequestError raised outside of a client has no request attached
        return None


class HttpFault(Fault):
    """Fault wrapping an httpx error, exposing the failed request."""

    def request_context(self) -> Dict[str, Any]:
        """
        Best-effort description of the failed request.

        Returns:
            Mapping with any of ``http_request``, ``provider_id`` and
            ``response_body``; missing pieces are left out
        """
        context: Dict[str, Any] = {}
        exc = self.cause
        if not isinstance(exc, httpx.HTTPError):
            return context

        request = _request_of(exc)
        if request is not None:
            http_request: Dict[str, Any] = {
                "url": str(request.url),
                "host": request.url.host,
                "method": request.method,
            }
            if request.extensions:
                http_request["config"] = dict(request.extensions)
            if request.headers:
                http_request["headers"] = flatten_headers(request.headers)
            context["http_request"] = http_request

            provider = provider_id(request)
            if provider:
                context["provider_id"] = provider

        response = getattr(exc, "response", None)
        if isinstance(response, httpx.Response):
            try:
                body = response.text
            except httpx.ResponseNotRead:
                body = None
            if body:
                context["response_body"] = body

        return context


def as_fault(exc: BaseException, stack: Optional[Sequence[FaultFrame]] = None) -> Fault:
    """
    Normalize any exception into a fault.

    Args:
        exc: Exception to wrap; faults are returned unchanged
        stack: Fallback stack for exceptions that were never raised

    Returns:
        HttpFault for httpx errors, Fault otherwise
    """
    if isinstance(exc, Fault):
        return exc
    if isinstance(exc, httpx.HTTPError):
        return HttpFault.from_exception(exc, stack=stack)
    return Fault.from_exception(exc, stack=stack)
