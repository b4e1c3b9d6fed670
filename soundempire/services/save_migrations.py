"""
Save-document upgrade chain.

A save document is plain JSON. Each historical shape has one pure function
that upgrades it to the next version; `migrate()` runs the chain from the
document's version up to SCHEMA_VERSION.

  v1  profile.name, `events` as a flat array, no `projects`
  v2  camelCase keys: profile.artistName, time, events{scheduled, offers},
      releases (singles and projects as flat chart rows) + projects (track lists)
  v3  current shape: snake_case, CareerState.model_dump(mode="json")

Documents without a version are inferred: a dict-shaped `events` means v2,
anything else v1.
"""
from __future__ import annotations

import logging
from typing import Any, Callable

from soundempire.core.errors import SaveDocumentError
from soundempire.schemas.career import SCHEMA_VERSION, Certification, ProjectType
from soundempire.services import sales

logger = logging.getLogger(__name__)

DEFAULT_YEAR = 2025
_DIFFICULTIES = ("Easy", "Normal", "Hard")
_ALERT_KINDS = ("info", "success", "warning")


def detect_version(doc: dict) -> int:
    version = doc.get("schema_version", doc.get("schemaVersion"))
    if version is None:
        return 2 if isinstance(doc.get("events"), dict) else 1
    try:
        return int(version)
    except (TypeError, ValueError, OverflowError) as exc:
        raise SaveDocumentError("Save document has an unreadable schema version.", version) from exc


# ---------------------------------------------------------------------------
# v1 -> v2
# ---------------------------------------------------------------------------

def v1_to_v2(doc: dict) -> dict:
    out = dict(doc)
    profile = out.get("profile")
    if isinstance(profile, dict) and profile.get("name") and not profile.get("artistName"):
        out["profile"] = {
            "firstName": "",
            "lastName": "",
            "artistName": profile["name"],
            "age": profile.get("age") or "",
            "year": profile.get("year") or str(DEFAULT_YEAR),
            "gender": profile.get("gender") or "",
            "difficulty": profile.get("difficulty") or "Normal",
        }
    if not isinstance(out.get("events"), dict):
        out["events"] = {"scheduled": [], "offers": {"gigs": [], "interviews": []}}
    out.setdefault("projects", [])
    out.pop("schemaVersion", None)
    out["schema_version"] = 2
    return out


# ---------------------------------------------------------------------------
# v2 -> v3
# ---------------------------------------------------------------------------

def _int(value: Any, default: int | None = None) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _profile_v3(profile: Any) -> dict | None:
    if not isinstance(profile, dict):
        return None
    difficulty = profile.get("difficulty")
    return {
        "artist_name": profile.get("artistName") or profile.get("name") or "",
        "first_name": profile.get("firstName") or "",
        "last_name": profile.get("lastName") or "",
        "age": _int(profile.get("age")),
        "start_year": _int(profile.get("year"), DEFAULT_YEAR),
        "gender": profile.get("gender") or "",
        "difficulty": difficulty if difficulty in _DIFFICULTIES else "Normal",
    }


def _engagement_v3(raw: dict, with_id: bool) -> dict:
    out = {
        "category": raw.get("type", "gig"),
        "subtype": raw.get("subType", ""),
        "target_week": _int(raw.get("week"), 1),
        "energy_cost": _int(raw.get("energyCost"), 0),
        "money_reward": _int(raw.get("money"), 0),
        "popularity_delta": _int(raw.get("popDelta"), 0),
        "reputation_delta": _int(raw.get("repDelta"), 0),
        "sold_out": bool(raw.get("soldOut", False)),
    }
    if with_id:
        out["id"] = str(raw.get("id", ""))
    return out


def _split_history(history: list[int], parts: int) -> list[list[int]]:
    """Spread each weekly total over `parts` tracks so the per-week sums still match."""
    tracks: list[list[int]] = [[] for _ in range(parts)]
    for total in history:
        base, extra = divmod(total, parts)
        for i, track in enumerate(tracks):
            track.append(base + (1 if i < extra else 0))
    return tracks


def _sales_fields(kind: str, history: list[int]) -> dict:
    divisor = sales.STREAMS_PER_UNIT_PROJECT if kind == "project" else sales.STREAMS_PER_UNIT_SINGLE
    thresholds = sales.PROJECT_THRESHOLDS if kind == "project" else sales.SINGLE_THRESHOLDS
    units = [max(0, s) // divisor for s in history]
    lifetime = sum(units)
    tier = Certification.none
    for candidate, needed in thresholds:
        if lifetime >= needed:
            tier = candidate
    return {
        "sales_history": units,
        "sales_lifetime": lifetime,
        "first_week_sales": units[0] if units else None,
        "certification": tier.value,
    }


def _release_v3(release: dict, project: dict | None) -> dict:
    history = [_int(s, 0) for s in release.get("streamsHistory") or []]
    out = {
        "id": str(release.get("id", "")),
        "title": release.get("title", ""),
        "quality": _int(release.get("quality"), 55),
        "week_released": _int(release.get("weekReleased"), 1),
        "year_released": _int(release.get("yearReleased"), DEFAULT_YEAR),
        "weeks_on": len(history),
        "peak_pos": release.get("peakPos"),
        "last_week_pos": release.get("lastWeekPos"),
        "streams_history": history,
    }
    if project is None:
        out["kind"] = "single"
        out.update(_sales_fields("single", history))
        return out

    songs = project.get("songs") or []
    split = _split_history(history, len(songs)) if songs else []
    project_type = project.get("type") or release.get("type")
    out.update({
        "kind": "project",
        "title": project.get("title") or out["title"],
        "project_type": project_type if project_type in [t.value for t in ProjectType] else "EP",
        "tracks": [
            {
                "id": str(song.get("id", "")),
                "title": song.get("title", ""),
                "quality": _int(song.get("quality"), 55),
                "streams_history": split[i],
            }
            for i, song in enumerate(songs)
        ],
    })
    out.update(_sales_fields("project", history))
    return out


def v2_to_v3(doc: dict) -> dict:
    time = doc.get("time") or {}
    week = _int(time.get("week"), 1)
    year = _int(time.get("year"), DEFAULT_YEAR)
    events = doc.get("events") or {}
    offers = events.get("offers") or {}

    projects = {str(p.get("id")): p for p in doc.get("projects") or [] if isinstance(p, dict)}
    catalog = []
    seen = set()
    for release in doc.get("releases") or []:
        rid = str(release.get("id", ""))
        seen.add(rid)
        catalog.append(_release_v3(release, projects.get(rid)))
    for pid, project in projects.items():
        if pid not in seen:
            catalog.append(_release_v3(project, project))

    alerts = [
        {
            "id": str(a.get("id", "")),
            "kind": a.get("kind") if a.get("kind") in _ALERT_KINDS else "info",
            "message": a.get("msg") or a.get("message") or "",
            "week": week,
            "year": year,
        }
        for a in doc.get("alerts") or []
        if isinstance(a, dict)
    ]

    return {
        "schema_version": 3,
        "profile": _profile_v3(doc.get("profile")),
        "clock": {"week": week, "year": year},
        "stats": doc.get("stats") or {},
        "drafts": [
            {
                "id": str(d.get("id", "")),
                "title": d.get("title", ""),
                "quality": min(100, max(30, _int(d.get("quality"), 55))),
            }
            for d in doc.get("drafts") or []
        ],
        "catalog": catalog,
        "projects": [],
        "schedule": [_engagement_v3(e, True) for e in events.get("scheduled") or []],
        "offers": {
            "gigs": [_engagement_v3(o, False) for o in offers.get("gigs") or []],
            "interviews": [_engagement_v3(o, False) for o in offers.get("interviews") or []],
        },
        "alerts": alerts,
        "week_summary": [],
        "social": {},
    }


# ---------------------------------------------------------------------------
# Chain
# ---------------------------------------------------------------------------

MIGRATIONS: dict[int, Callable[[dict], dict]] = {
    1: v1_to_v2,
    2: v2_to_v3,
}


def migrate(doc: Any) -> dict:
    """Upgrade `doc` to SCHEMA_VERSION. Raises SaveDocumentError if it cannot."""
    if not isinstance(doc, dict):
        raise SaveDocumentError("Save document is not a JSON object.")

    version = detect_version(doc)
    if version > SCHEMA_VERSION or version < 1:
        raise SaveDocumentError(f"Unsupported save version {version}.", version)

    while version < SCHEMA_VERSION:
        try:
            doc = MIGRATIONS[version](doc)
        except (AttributeError, TypeError, KeyError, ValueError, OverflowError) as exc:
            raise SaveDocumentError(f"Save document v{version} is malformed.", version) from exc
        logger.info("migrated save document v%d -> v%d", version, version + 1)
        version += 1
    return doc
