"""Read-only catalog of the model identifiers the gateway knows about.

The catalog is built once (from settings or directly in tests) and handed
to the request validator. Nothing mutates it after construction.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

EMBEDDINGS_CAPABILITY = "embeddings"


class ModelCapabilities(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str


class ModelDescriptor(BaseModel):
    """A single catalog entry: ``{"id": ..., "capabilities": {"type": ...}}``."""

    model_config = ConfigDict(frozen=True)

    id: str
    capabilities: ModelCapabilities

    @classmethod
    def of(cls, model_id: str, capability_type: str) -> ModelDescriptor:
        return cls(id=model_id, capabilities=ModelCapabilities(type=capability_type))

    @property
    def capability_type(self) -> str:
        return self.capabilities.type


DEFAULT_CATALOG: tuple[ModelDescriptor, ...] = (
    ModelDescriptor.of("text-embedding-3-small", EMBEDDINGS_CAPABILITY),
    ModelDescriptor.of("text-embedding-3-small-inference", EMBEDDINGS_CAPABILITY),
    ModelDescriptor.of("text-embedding-ada-002", EMBEDDINGS_CAPABILITY),
    ModelDescriptor.of("gpt-4o", "chat"),
    ModelDescriptor.of("gpt-4o-mini", "chat"),
    ModelDescriptor.of("claude-3.5-sonnet", "chat"),
    ModelDescriptor.of("o1-mini", "chat"),
)


class ModelCatalog:
    """Immutable lookup over a sequence of ``ModelDescriptor``."""

    def __init__(self, models: Iterable[ModelDescriptor] = DEFAULT_CATALOG) -> None:
        self._models: tuple[ModelDescriptor, ...] = tuple(models)

    @property
    def models(self) -> tuple[ModelDescriptor, ...]:
        return self._models

    @property
    def embedding_model_ids(self) -> list[str]:
        return [m.id for m in self._models if m.capability_type == EMBEDDINGS_CAPABILITY]

    def find_embedding_model(self, model_id: str) -> ModelDescriptor | None:
        """Exact-match lookup restricted to embeddings-capable models."""
        for model in self._models:
            if model.id == model_id and model.capability_type == EMBEDDINGS_CAPABILITY:
                return model
        return None

    def __len__(self) -> int:
        return len(self._models)

    def __repr__(self) -> str:
        return f"<ModelCatalog models={len(self._models)}>"
