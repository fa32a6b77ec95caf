import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from actor_runner.schema import EffectiveSchema

logger = logging.getLogger(__name__)


def _dig(obj: Any, *path: Any) -> Any:
    cur = obj
    for key in path:
        if isinstance(key, int):
            if not isinstance(cur, list) or len(cur) <= key:
                return None
        elif not isinstance(cur, dict):
            return None
        cur = cur[key] if isinstance(key, int) else cur.get(key)
    return cur


def _as_mapping(raw: Any) -> Optional[dict]:
    # versions store the schema as a JSON string, builds as an object
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            return None
    if isinstance(raw, dict) and raw:
        return raw
    return None


SCHEMA_LOCATIONS = (
    ("default build", ("defaultRunOptions", "build", "inputSchema")),
    ("latest version", ("versions", 0, "inputSchema")),
    ("actor record", ("inputSchema",)),
)


def resolve_input_schema(actor: Any) -> EffectiveSchema:
    """
    First non-empty schema wins: default build, then latest version, then the actor record.
    No schema at all yields an empty EffectiveSchema (run with defaults).
    """
    for label, path in SCHEMA_LOCATIONS:
        raw = _as_mapping(_dig(actor, *path))
        if raw is None:
            continue
        try:
            schema = EffectiveSchema.model_validate(
                {
                    "properties": raw.get("properties") or {},
                    "required": raw.get("required") or [],
                }
            )
        except ValidationError as e:
            logger.warning(f"Ignoring malformed input schema from {label}: {e.error_count()} error(s)")
            continue
        if schema.is_empty:
            continue
        logger.info(f"Input schema resolved from {label}: {len(schema.properties)} properties")
        return schema

    return EffectiveSchema()
