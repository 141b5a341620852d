"""Bearer credential extraction for inbound requests."""

from __future__ import annotations

from collections.abc import Mapping

_SCHEMES = ("bearer", "token")


def extract_token(
    authorization: str | None,
    headers: Mapping[str, str] | None = None,
) -> str:
    """Return the caller's credential, or ``""`` if there is none.

    Accepts ``Bearer <token>``, GitHub style ``token <token>`` and a bare
    token. When the ``Authorization`` header is missing the ``x-api-key``
    header is used instead.
    """
    value = (authorization or "").strip()
    if not value and headers is not None:
        value = (headers.get("x-api-key") or "").strip()
    if not value:
        return ""

    scheme, _, rest = value.partition(" ")
    if scheme.lower() in _SCHEMES:
        return rest.strip()
    return value
