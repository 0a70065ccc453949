from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from kiwidex.api.models import AnimalRecord, Region

_NEVER = datetime.min.replace(tzinfo=UTC)


class SortMode(StrEnum):
    name = "name"
    intimacy = "intimacy"
    recent = "recent"


def browse(records: list[AnimalRecord], *, sort: SortMode = SortMode.name, region: Region | None = None) -> list[AnimalRecord]:
    """Filter a roster to one island (`both` animals always match) and sort it.

    - name: alphabetical by display name
    - intimacy: highest first
    - recent: latest interaction first, never-interacted animals last
    """

    out = [r for r in records if region is None or region == Region.both or r.found_in(region)]

    if sort == SortMode.intimacy:
        out.sort(key=lambda r: (-r.intimacy, r.display_name.casefold()))
    elif sort == SortMode.recent:
        out.sort(key=lambda r: r.last_interaction_at or _NEVER, reverse=True)
    else:
        out.sort(key=lambda r: r.display_name.casefold())
    return out
