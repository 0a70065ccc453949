from __future__ import annotations

import json
import logging
from enum import StrEnum
from typing import Any

from pydantic import AwareDatetime, BaseModel, Field, ValidationError

from kiwidex.api.models import AnimalRecord, AnimalTemplate, GameMode, Region, SessionProgress
from kiwidex.catalog import ANIMALS
from kiwidex.session_state import SessionState, clamp_intimacy

logger = logging.getLogger(__name__)

SAVE_VERSION = 1


class DecodeFailure(StrEnum):
    malformed = "malformed"
    unsupported_version = "unsupported_version"


class DecodeError(ValueError):
    def __init__(self, reason: DecodeFailure, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


class SavedAnimal(BaseModel):
    """Runtime fields of one record. Template fields are written for readability
    but always rebuilt from the catalog on load."""

    id: str
    captured: bool = False
    intimacy: int = 0
    last_interaction_at: AwareDatetime | None = None


class SavedProgress(BaseModel):
    discovered_ids: list[str] = Field(default_factory=list)
    current_region: str | None = None
    current_mode: str = GameMode.map.value
    achievements: list[str] = Field(default_factory=list)


class SavePayload(BaseModel):
    version: int = SAVE_VERSION
    animals: list[dict[str, Any]] = Field(default_factory=list)
    progress: SavedProgress = Field(default_factory=SavedProgress)


def serialize(state: SessionState) -> str:
    progress = state.snapshot()
    payload = SavePayload(
        animals=[a.model_dump(mode="json") for a in state.list_all()],
        progress=SavedProgress(
            discovered_ids=progress.discovered_ids,
            current_region=progress.current_region.value if progress.current_region else None,
            current_mode=progress.current_mode.value,
            achievements=progress.achievements,
        ),
    )
    return payload.model_dump_json()


def _parse_payload(blob: str) -> SavePayload:
    try:
        data = json.loads(blob)
    except (TypeError, RecursionError, json.JSONDecodeError) as e:
        raise DecodeError(DecodeFailure.malformed, f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DecodeError(DecodeFailure.malformed, "expected a JSON object")

    version = data.get("version")
    if not isinstance(version, int) or isinstance(version, bool):
        raise DecodeError(DecodeFailure.malformed, "missing/invalid 'version'")
    if version != SAVE_VERSION:
        raise DecodeError(DecodeFailure.unsupported_version, f"version {version}")

    if not isinstance(data.get("animals", []), list):
        raise DecodeError(DecodeFailure.malformed, "'animals' must be a list")

    # Progress degrades field by field rather than failing the whole load.
    raw_progress = data.get("progress")
    progress = _parse_progress(raw_progress if isinstance(raw_progress, dict) else {})

    return SavePayload(version=version, animals=[a for a in data.get("animals", []) if isinstance(a, dict)], progress=progress)


def _parse_progress(raw: dict[str, Any]) -> SavedProgress:
    def _str_list(v: object) -> list[str]:
        return [s for s in v if isinstance(s, str)] if isinstance(v, list) else []

    region = raw.get("current_region")
    mode = raw.get("current_mode")
    return SavedProgress(
        discovered_ids=_str_list(raw.get("discovered_ids")),
        current_region=region if isinstance(region, str) else None,
        current_mode=mode if isinstance(mode, str) else GameMode.map.value,
        achievements=_str_list(raw.get("achievements")),
    )


def _restore_record(template: AnimalTemplate, raw: dict[str, Any]) -> AnimalRecord | None:
    try:
        saved = SavedAnimal.model_validate(raw)
    except ValidationError as e:
        # Retry once without the timestamp before giving up on the record.
        try:
            saved = SavedAnimal.model_validate({**raw, "last_interaction_at": None})
        except ValidationError:
            logger.warning("dropping unreadable save record %s: %s", template.id, e.errors()[:1])
            return None

    record = AnimalRecord.from_template(template)
    record.captured = saved.captured
    record.intimacy = clamp_intimacy(saved.intimacy) if saved.captured else 0
    record.last_interaction_at = saved.last_interaction_at
    return record


def _parse_enum(enum_type: type[StrEnum], value: str | None, default: Any) -> Any:
    try:
        return enum_type(value)
    except ValueError:
        return default


def deserialize(blob: str, *, templates: tuple[AnimalTemplate, ...] = ANIMALS) -> SessionState:
    """Rebuild a session from a save string.

    Raises DecodeError when the blob can't be read at all. Anything readable
    degrades gracefully:
    - records for ids outside the catalog are dropped
    - catalog animals missing from the payload come back fresh
    - intimacy is clamped, and zeroed on uncaptured records
    - discovered ids are recomputed from the captured flags
    """

    payload = _parse_payload(blob)
    by_id = {t.id: t for t in templates}

    animals = {t.id: AnimalRecord.from_template(t) for t in templates}
    for raw in payload.animals:
        animal_id = raw.get("id")
        template = by_id.get(animal_id) if isinstance(animal_id, str) else None
        if template is None:
            logger.info("dropping unknown animal id from save: %r", animal_id)
            continue
        record = _restore_record(template, raw)
        if record is not None:
            animals[template.id] = record

    captured = [aid for aid, a in animals.items() if a.captured]
    ordered = [aid for aid in dict.fromkeys(payload.progress.discovered_ids) if aid in captured]
    ordered.extend(aid for aid in captured if aid not in ordered)

    region = _parse_enum(Region, payload.progress.current_region, None)
    if region == Region.both:
        region = None

    progress = SessionProgress(
        discovered_ids=ordered,
        current_region=region,
        current_mode=_parse_enum(GameMode, payload.progress.current_mode, GameMode.map),
        achievements=list(dict.fromkeys(payload.progress.achievements)),
        total_animals=len(animals),
    )
    return SessionState.from_parts(animals=animals, progress=progress)


def load_into(state: SessionState, blob: str) -> None:
    """All-or-nothing load: decode fully, then swap. On DecodeError `state` is untouched."""

    decoded = deserialize(blob)
    state.replace_with(decoded)
