"""
Model Mapping Table

Static lookup from downstream model identifier to upstream model descriptor.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional

from chat_bridge.config import get_settings
from chat_bridge.domain.model import ModelDescriptor

logger = logging.getLogger(__name__)


DEFAULT_DESCRIPTOR = ModelDescriptor(id="9", name="grok-3-reasoning", provider="GROK")

BUILTIN_MODELS: dict[str, ModelDescriptor] = {
    "gpt-4o": ModelDescriptor(id="7", name="gpt-4o", provider="OPENAI"),
    "grok-3-reasoning": DEFAULT_DESCRIPTOR,
}


class ModelTable:
    """
    Read-only model mapping table

    resolve() is total: identifiers missing from the table map to the default
    descriptor instead of failing.
    """

    def __init__(
        self,
        models: Mapping[str, ModelDescriptor],
        default: ModelDescriptor = DEFAULT_DESCRIPTOR,
    ):
        self._models = dict(models)
        self._default = default

    @property
    def default(self) -> ModelDescriptor:
        return self._default

    def resolve(self, model_id: Optional[str]) -> ModelDescriptor:
        """
        Resolve a downstream model identifier

        Args:
            model_id: Downstream model identifier

        Returns:
            ModelDescriptor: Mapped descriptor, or the default one
        """
        if model_id is None:
            return self._default
        return self._models.get(model_id, self._default)

    def model_ids(self) -> list[str]:
        """Downstream identifiers known to the table, in insertion order."""
        return list(self._models)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ModelTable":
        """
        Build a table from its JSON form

        Format:
            {"default": {"id", "name", "provider"},
             "models": {"<downstream id>": {"id", "name", "provider"}}}

        Raises:
            ValueError: The document does not match the format
        """
        try:
            models = {
                key: ModelDescriptor.model_validate(value)
                for key, value in (raw.get("models") or {}).items()
            }
            default_raw = raw.get("default")
            default = (
                ModelDescriptor.model_validate(default_raw)
                if default_raw is not None
                else DEFAULT_DESCRIPTOR
            )
        except (AttributeError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid model table: {exc}") from exc
        return cls(models, default)

    @classmethod
    def from_file(cls, path: str) -> "ModelTable":
        with open(Path(path), encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid model table in {path}: expected a JSON object")
        return cls.from_dict(raw)


@lru_cache()
def get_model_table() -> ModelTable:
    """
    Get the process-wide model table (Singleton)

    Loads MODEL_TABLE_FILE when configured, otherwise the built-in table.
    """
    settings = get_settings()
    if settings.MODEL_TABLE_FILE:
        table = ModelTable.from_file(settings.MODEL_TABLE_FILE)
        logger.info(
            "Loaded model table from %s: %d models, default=%s",
            settings.MODEL_TABLE_FILE,
            len(table.model_ids()),
            table.default.name,
        )
        return table
    return ModelTable(BUILTIN_MODELS)
