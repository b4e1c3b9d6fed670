"""
Tests for save documents: the version upgrade chain, load-time repair, the
SQLite save slot and the week history.
"""
import json
import logging

import pytest

from soundempire.core.errors import SaveDocumentError
from soundempire.models.save_slot import SaveSlot
from soundempire.models.week_snapshot import WeekSnapshot
from soundempire.schemas.career import (
    SCHEMA_VERSION,
    Certification,
    ProjectType,
    Project,
    Single,
)
from soundempire.services import career, persistence, save_migrations
from soundempire.services.advance import advance_week
from soundempire.services.rng import RandomSource


V1_DOC = {
    "profile": {"name": "Old Timer", "age": 22},
    "time": {"week": 5, "year": 2026},
    "stats": {"popularity": 12, "reputation": 55, "energy": 80, "inspiration": 60, "money": 2500},
    "events": [],
    "drafts": [{"id": "d1", "title": "Demo", "quality": 70}],
    "releases": [{
        "id": "r1", "title": "Hit", "quality": 80, "weekReleased": 1, "yearReleased": 2026,
        "weeksOn": 2, "peakPos": 1, "lastWeekPos": 1, "streamsHistory": [800_000, 700_000],
    }],
    "alerts": [],
}

V2_DOC = {
    "profile": {
        "firstName": "Ana", "lastName": "Lima", "artistName": "Ana L", "age": "",
        "year": "2027", "gender": "", "difficulty": "Hard",
    },
    "time": {"week": 9, "year": 2027},
    "stats": {"popularity": 30, "reputation": 60, "energy": 100, "inspiration": 100, "money": 900},
    "events": {
        "scheduled": [{
            "id": "e1", "type": "gig", "subType": "club", "week": 11,
            "energyCost": 12, "money": 420, "popDelta": 1, "repDelta": 0,
        }],
        "offers": {"gigs": [], "interviews": []},
    },
    "drafts": [],
    "releases": [{
        "id": "p1", "title": "Tape (EP)", "type": "EP", "quality": 70, "weekReleased": 7,
        "yearReleased": 2027, "weeksOn": 1, "peakPos": 1, "lastWeekPos": 1,
        "streamsHistory": [30_001],
    }],
    "projects": [{
        "id": "p1", "title": "Tape", "type": "EP",
        "songs": [
            {"id": "s1", "title": "One", "quality": 70},
            {"id": "s2", "title": "Two", "quality": 70},
            {"id": "s3", "title": "Three", "quality": 70},
        ],
        "weekReleased": 7, "yearReleased": 2027, "streamsHistory": [30_001],
    }],
    "alerts": [{"id": "a1", "kind": "info", "msg": "Welcome, Ana L!", "t": 1700000000}],
}


# ---------------------------------------------------------------------------
# Upgrade chain
# ---------------------------------------------------------------------------

class TestVersionDetection:
    def test_explicit(self):
        assert save_migrations.detect_version({"schema_version": 3}) == 3

    def test_inferred_from_events_shape(self):
        assert save_migrations.detect_version({"events": {}}) == 2
        assert save_migrations.detect_version({"events": []}) == 1
        assert save_migrations.detect_version({}) == 1

    def test_unreadable(self):
        with pytest.raises(SaveDocumentError):
            save_migrations.detect_version({"schema_version": "three"})


class TestMigrations:
    def test_v1_upgrades_to_current(self, rng):
        state = persistence.deserialize(json.loads(json.dumps(V1_DOC)), rng)
        assert state.schema_version == SCHEMA_VERSION
        assert state.profile.artist_name == "Old Timer"
        assert state.profile.age == 22
        assert state.profile.start_year == 2025
        assert (state.clock.week, state.clock.year) == (5, 2026)
        assert state.stats.money == 2500

        hit = state.catalog[0]
        assert isinstance(hit, Single)
        assert hit.weeks_on == 2
        assert hit.sales_history == [5_333, 4_666]
        assert hit.sales_lifetime == 9_999
        assert hit.certification == Certification.gold
        assert state.drafts[0].title == "Demo"
        assert state.projects == []

    def test_v2_splits_projects(self, rng):
        state = persistence.deserialize(json.loads(json.dumps(V2_DOC)), rng)
        tape = state.catalog[0]
        assert isinstance(tape, Project)
        assert tape.title == "Tape"
        assert tape.project_type == ProjectType.ep
        assert [t.streams_history for t in tape.tracks] == [[10_001], [10_000], [10_000]]
        assert tape.streams_history == [30_001]
        assert tape.sales_history == [20]
        assert state.profile.difficulty.value == "Hard"
        assert state.profile.age is None
        assert state.schedule[0].subtype == "club"
        assert state.schedule[0].money_reward == 420
        assert state.alerts[0].message == "Welcome, Ana L!"
        assert (state.alerts[0].week, state.alerts[0].year) == (9, 2027)

    def test_v1_goes_through_v2(self):
        v2 = save_migrations.v1_to_v2(dict(V1_DOC))
        assert v2["profile"]["artistName"] == "Old Timer"
        assert v2["events"] == {"scheduled": [], "offers": {"gigs": [], "interviews": []}}
        assert v2["projects"] == []
        assert save_migrations.detect_version(v2) == 2

    def test_future_version_rejected(self):
        with pytest.raises(SaveDocumentError):
            save_migrations.migrate({"schema_version": SCHEMA_VERSION + 1})

    def test_non_object_rejected(self):
        with pytest.raises(SaveDocumentError):
            save_migrations.migrate(["not", "a", "save"])

    def test_non_finite_legacy_numbers_use_defaults(self, rng):
        doc = json.loads(json.dumps(V2_DOC))
        doc["time"]["week"] = float("inf")
        doc["releases"][0]["quality"] = float("nan")
        state = persistence.deserialize(doc, rng)
        assert state.clock.week == 1
        assert state.catalog[0].quality == 55

    @pytest.mark.parametrize("field, value", [("stats", "corrupt"), ("events", {"offers": "corrupt"})])
    def test_wrong_shapes_rejected(self, rng, field, value):
        doc = json.loads(json.dumps(V2_DOC))
        doc[field] = value
        with pytest.raises(SaveDocumentError):
            persistence.deserialize(doc, rng)

    def test_invalid_stats_rejected(self, rng):
        doc = json.loads(json.dumps(V2_DOC))
        doc["stats"]["popularity"] = 500
        with pytest.raises(SaveDocumentError):
            persistence.deserialize(doc, rng)


class TestRepair:
    def test_rebuilds_derived_fields(self, new_career, rng):
        state = new_career
        for title in ("A", "B"):
            state = career.write_draft(state, title, rng).state
        ids = [d.id for d in state.drafts]
        state = career.create_project(state, "Tape", ProjectType.ep, ids).state

        doc = persistence.serialize(state)
        for d in doc["drafts"]:
            d["project_ids"] = []
        doc["social"] = {}
        doc["offers"] = {"gigs": [], "interviews": []}

        loaded = persistence.deserialize(doc, rng)
        assert all(d.project_ids == [state.projects[0].id] for d in loaded.drafts)
        assert loaded.social.player.handle == "@nova_reyes"
        assert not loaded.offers.is_empty()

    def test_current_document_survives_round_trip(self, new_career, scripted, rng):
        state = career.write_draft(new_career, "Static", rng).state
        state = career.release_draft(state, state.drafts[0].id).state
        state = advance_week(state, scripted()).state
        loaded = persistence.deserialize(persistence.serialize(state), rng)
        assert loaded.catalog[0].kind == "single"
        assert loaded.catalog[0].streams_history == state.catalog[0].streams_history
        assert loaded.clock == state.clock


# ---------------------------------------------------------------------------
# Save slots
# ---------------------------------------------------------------------------

class TestSaveSlots:
    def test_missing_slot_is_initial_state(self, db, slot, rng):
        assert persistence.load_state(db, slot, rng).profile is None

    def test_save_then_load(self, db, slot, new_career, rng):
        persistence.save_state(db, slot, new_career)
        persistence.save_state(db, slot, new_career)
        assert db.query(SaveSlot).filter(SaveSlot.slot == slot).count() == 1
        loaded = persistence.load_state(db, slot, rng)
        assert loaded.profile.artist_name == "Nova Reyes"

    @pytest.mark.parametrize("document", [
        "{not json",
        json.dumps({"schema_version": 99}),
        json.dumps({"schema_version": 3, "stats": {"energy": -40}}),
        json.dumps({"events": {"scheduled": [], "offers": {}}, "stats": "corrupt"}),
        json.dumps({"events": {"scheduled": ["corrupt"]}}),
        '{"schema_version": Infinity}',
        '{"schema_version": 3, "stats": {"money": Infinity}}',
    ])
    def test_malformed_falls_back(self, db, slot, rng, caplog, document):
        db.add(SaveSlot(slot=slot, schema_version=3, document=document))
        db.commit()
        with caplog.at_level(logging.WARNING, logger="soundempire"):
            state = persistence.load_state(db, slot, rng)
        assert state.profile is None
        assert "starting fresh" in caplog.text

    def test_delete_removes_slot_and_history(self, db, slot, new_career, scripted):
        persistence.save_state(db, slot, new_career)
        result = advance_week(new_career, scripted())
        persistence.record_snapshot(db, slot, result.report, result.state)
        persistence.delete_save(db, slot)
        assert db.query(SaveSlot).filter(SaveSlot.slot == slot).count() == 0
        assert db.query(WeekSnapshot).filter(WeekSnapshot.slot == slot).count() == 0


class TestWeekHistory:
    def test_snapshots_newest_first(self, db, slot, new_career, scripted):
        state = new_career
        for _ in range(3):
            result = advance_week(state, scripted())
            persistence.record_snapshot(db, slot, result.report, result.state)
            state = result.state
        rows, total = persistence.list_snapshots(db, slot, limit=2)
        assert total == 3
        assert [r.week for r in rows] == [3, 2]
        assert json.loads(rows[0].summary)[0].startswith("Week 3, 2025")

    def test_same_week_overwrites(self, db, slot, new_career, scripted):
        first = advance_week(new_career, scripted())
        persistence.record_snapshot(db, slot, first.report, first.state)
        again = advance_week(new_career, scripted())
        row = persistence.record_snapshot(db, slot, again.report, again.state)
        rows, total = persistence.list_snapshots(db, slot)
        assert total == 1
        assert rows[0].id == row.id
