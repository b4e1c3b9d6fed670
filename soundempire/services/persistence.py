"""
Persistence Adapter: save slots and the per-week history.

Public API
----------
serialize(state)                         -> dict
deserialize(doc, rng)                    -> CareerState   (migrate + repair)
load_state(db, slot, rng)                -> CareerState
save_state(db, slot, state)              -> SaveSlot
delete_save(db, slot)                    -> None
record_snapshot(db, slot, report, state) -> WeekSnapshot
list_snapshots(db, slot, limit, offset)  -> (list[WeekSnapshot], total)

A missing save loads as the initial (profile-less) state. A save that cannot
be read (bad JSON, unknown version, failed validation) is logged and also
falls back to the initial state; the bad row is overwritten on the next save.

Each write commits once at the end.
"""
from __future__ import annotations

import json
import logging
from decimal import Decimal

from pydantic import ValidationError
from sqlalchemy.orm import Session

from soundempire.core.errors import SaveDocumentError
from soundempire.models.save_slot import SaveSlot
from soundempire.models.week_snapshot import WeekSnapshot
from soundempire.schemas.career import SCHEMA_VERSION, CareerState
from soundempire.services import sales
from soundempire.services.advance import WeekReport
from soundempire.services.career import initial_state, rebuild_project_links
from soundempire.services.feed import seed_accounts
from soundempire.services.offers import generate_offers
from soundempire.services.rng import RandomSource
from soundempire.services.save_migrations import migrate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Document <-> state
# ---------------------------------------------------------------------------

def serialize(state: CareerState) -> dict:
    return state.model_dump(mode="json")


def repair(state: CareerState, rng: RandomSource) -> CareerState:
    """Recompute derived fields a stored document may have wrong or lack."""
    for work in state.catalog:
        sales.recompute_certification(work)
    rebuild_project_links(state)
    if state.profile is not None:
        seed_accounts(state.social, state.profile.artist_name)
        if state.offers.is_empty():
            state.offers = generate_offers(
                state.clock.week, state.stats.popularity, state.stats.reputation, rng,
            )
    state.schema_version = SCHEMA_VERSION
    return state


def deserialize(doc: dict, rng: RandomSource) -> CareerState:
    """Raises SaveDocumentError when the document cannot be upgraded or validated."""
    upgraded = migrate(doc)
    try:
        state = CareerState.model_validate(upgraded)
    except ValidationError as exc:
        raise SaveDocumentError(
            f"Save document failed validation ({exc.error_count()} errors).",
            upgraded.get("schema_version"),
        ) from exc
    return repair(state, rng)


# ---------------------------------------------------------------------------
# Save slots
# ---------------------------------------------------------------------------

def _get_slot(db: Session, slot: str) -> SaveSlot | None:
    return db.query(SaveSlot).filter(SaveSlot.slot == slot).first()


def load_state(db: Session, slot: str, rng: RandomSource) -> CareerState:
    row = _get_slot(db, slot)
    if row is None:
        return initial_state()
    try:
        doc = json.loads(row.document)
        return deserialize(doc, rng)
    except json.JSONDecodeError as exc:
        logger.warning("save slot %r is not valid JSON (%s); starting fresh", slot, exc)
    except SaveDocumentError as exc:
        logger.warning("save slot %r unreadable: %s; starting fresh", slot, exc.message)
    return initial_state()


def save_state(db: Session, slot: str, state: CareerState) -> SaveSlot:
    document = json.dumps(serialize(state))
    row = _get_slot(db, slot)
    if row is None:
        row = SaveSlot(slot=slot, schema_version=state.schema_version, document=document)
        db.add(row)
    else:
        row.schema_version = state.schema_version
        row.document = document
    db.commit()
    db.refresh(row)
    return row


def delete_save(db: Session, slot: str) -> None:
    db.query(WeekSnapshot).filter(WeekSnapshot.slot == slot).delete()
    db.query(SaveSlot).filter(SaveSlot.slot == slot).delete()
    db.commit()
    logger.info("save slot %r deleted", slot)


# ---------------------------------------------------------------------------
# Week history
# ---------------------------------------------------------------------------

def record_snapshot(db: Session, slot: str, report: WeekReport, state: CareerState) -> WeekSnapshot:
    """
    Store one row for the processed week. Re-advancing the same calendar week
    (after a reset without a delete) overwrites the earlier row.
    """
    processed = report.processed
    row = (
        db.query(WeekSnapshot)
        .filter(
            WeekSnapshot.slot == slot,
            WeekSnapshot.year == processed.year,
            WeekSnapshot.week == processed.week,
        )
        .first()
    )
    if row is None:
        row = WeekSnapshot(slot=slot, year=processed.year, week=processed.week)
        db.add(row)
    row.total_streams = report.total_streams
    row.units_sold = report.units_sold
    row.money = Decimal(str(round(state.stats.money, 2)))
    row.summary = json.dumps(report.summary)
    db.commit()
    db.refresh(row)
    return row


def list_snapshots(db: Session, slot: str, limit: int = 20,
                   offset: int = 0) -> tuple[list[WeekSnapshot], int]:
    """Newest week first."""
    q = db.query(WeekSnapshot).filter(WeekSnapshot.slot == slot)
    total = q.count()
    rows = (
        q.order_by(WeekSnapshot.year.desc(), WeekSnapshot.week.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return rows, total
