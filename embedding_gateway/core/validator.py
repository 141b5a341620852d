"""Turns an inbound JSON document into ``EmbeddingParameters``.

Model identifiers are checked against the injected ``ModelCatalog``. An
unknown model, or one that is not typed ``embeddings``, is replaced by the
default model and only logged. The ``input`` field is the only thing that
can make a parsed body invalid.
"""

from __future__ import annotations

from typing import Any

import structlog

from embedding_gateway.config import DEFAULT_EMBEDDING_MODEL
from embedding_gateway.core.catalog import ModelCatalog
from embedding_gateway.core.exceptions import InvalidInputError, UnsupportedModelError
from embedding_gateway.core.schemas import EmbeddingParameters

logger = structlog.get_logger()


class RequestValidator:
    """Parses a JSON object into a typed parameter set."""

    def __init__(
        self,
        catalog: ModelCatalog,
        *,
        default_model: str = DEFAULT_EMBEDDING_MODEL,
        strict_model: bool = False,
    ) -> None:
        self._catalog = catalog
        self._default_model = default_model
        self._strict_model = strict_model

    @property
    def catalog(self) -> ModelCatalog:
        return self._catalog

    def validate(self, document: dict[str, Any]) -> EmbeddingParameters:
        """Validate ``document`` and return the normalized parameters.

        Raises:
            InvalidInputError: ``input`` is absent, wrongly shaped or empty.
            UnsupportedModelError: only when strict model checking is enabled.
        """
        model = self._resolve_model(document.get("model"))
        inputs = self._extract_inputs(document.get("input"))

        user = document.get("user", "")
        if not isinstance(user, str):
            user = ""

        return EmbeddingParameters(model=model, inputs=inputs, user=user)

    def _resolve_model(self, requested: Any) -> str:
        model = requested if isinstance(requested, str) else self._default_model
        if self._catalog.find_embedding_model(model) is not None:
            return model

        if self._strict_model:
            raise UnsupportedModelError(model)

        logger.warning(
            "validator.model_fallback",
            requested=model,
            fallback=self._default_model,
        )
        return self._default_model

    @staticmethod
    def _extract_inputs(raw: Any) -> tuple[str, ...]:
        if isinstance(raw, str):
            inputs: tuple[str, ...] = (raw,)
        elif isinstance(raw, list):
            for index, item in enumerate(raw):
                if not isinstance(item, str):
                    raise InvalidInputError(
                        f"Invalid input element at index {index}: expected string"
                    )
            inputs = tuple(raw)
        else:
            # missing, object, number, boolean or null
            raise InvalidInputError("Invalid input format")

        if not inputs:
            raise InvalidInputError("Input cannot be empty.")
        return inputs
