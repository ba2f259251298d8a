"""
Normalization of JSON-ish columns coming back from the store.

Rows written by older clients carry ``responsibilities``/``metadata``/``logs``
as JSON text, bare strings or nulls. These helpers are wired into pydantic
``mode="before"`` validators so everything past the schema layer works with
plain ``list[str]`` and ``dict`` values.
"""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def _maybe_json(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        text = value.strip()
        if text[:1] in ("[", "{"):
            try:
                return json.loads(text)
            except json.JSONDecodeError:
                logger.warning("Payload JSON inválido, se usa como texto: %.60s", text)
    return value


def coerce_str_list(value: Any) -> list[str]:
    """Return ``value`` as a list of non-empty strings."""
    value = _maybe_json(value)
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple, set)):
        return [str(item) for item in value if item is not None and str(item).strip()]
    return [str(value)]


def coerce_json_object(value: Any) -> dict[str, Any]:
    """Return ``value`` as a dict; anything that is not an object becomes ``{}``."""
    value = _maybe_json(value)
    if isinstance(value, dict):
        return value
    if value not in (None, "", [], ()):
        logger.warning("Se descartó metadata no-objeto de tipo %s", type(value).__name__)
    return {}
