"""Request / response types shared by the validator, invoker and relay."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ── Request ──────────────────────────────────────────────────────────────────

class EmbeddingParameters(BaseModel):
    """Validated embedding request. Built once per request, never mutated."""

    model_config = ConfigDict(frozen=True)

    model: str
    inputs: tuple[str, ...] = Field(min_length=1)
    user: str = ""

    def to_upstream_payload(self) -> dict[str, Any]:
        """Outbound JSON body. ``user`` is only sent when non-empty."""
        payload: dict[str, Any] = {
            "model": self.model,
            "input": list(self.inputs),
        }
        if self.user:
            payload["user"] = self.user
        return payload


# ── Upstream ─────────────────────────────────────────────────────────────────

class UpstreamOutcome(BaseModel):
    """Raw status and body of the outbound call."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return self.status_code == 200


# ── Errors ───────────────────────────────────────────────────────────────────

class ErrorEnvelope(BaseModel):
    """Uniform error body: ``{"error": "...", "code": 400}``."""

    error: str
    code: int | None = None

    def to_content(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
