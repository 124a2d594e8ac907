"""
tests/test_repositories.py

Repository behaviour against an in-memory SQLite database.

Coverage
--------
- Bulk upsert: insert vs. overwrite, last-write-wins dedupe, notes rule
- Uniqueness checks on stages, sub-categories, weeks, entries, targets
- require_* helpers naming every missing id
- Cascade deletes down the hierarchy
- Month and date-range queries
- Seeding is idempotent
"""

from __future__ import annotations

import uuid
from datetime import date

import pytest
from sqlalchemy import func, select

from db.models.kpi import KPI
from db.models.monthly_kpi_target import MonthlyKpiTarget
from db.models.sub_category import SubCategory
from db.models.weekly_data_entry import WeeklyDataEntry
from db.repositories import (
    DuplicateEntityError,
    EntityNotFoundError,
    HierarchyRepository,
    MonthlyTargetRepository,
    MonthlyTargetUpsert,
    WeeklyDataRepository,
    WeekRepository,
    WeeklyEntryUpsert,
)
from db.seed import CVJ_STAGES, SAMPLE_KPIS, SAMPLE_WEEKS, seed_scorecard


def _count(session, model) -> int:
    return session.scalar(select(func.count()).select_from(model))


# ---------------------------------------------------------------------------
# Weekly data bulk upsert
# ---------------------------------------------------------------------------


class TestWeeklyBulkUpsert:
    def test_inserts_then_overwrites(self, session, seeded) -> None:
        repo = WeeklyDataRepository(session)
        repo.bulk_upsert(
            [WeeklyEntryUpsert(week_id=seeded.may_w19.id, kpi_id=seeded.mentions.id, actual_value=10)]
        )
        repo.bulk_upsert(
            [WeeklyEntryUpsert(week_id=seeded.may_w19.id, kpi_id=seeded.mentions.id, actual_value=25)]
        )
        session.commit()

        entry = repo.find_entry(seeded.may_w19.id, seeded.mentions.id)
        assert entry is not None
        assert entry.actual_value == 25
        assert _count(session, WeeklyDataEntry) == 1

    def test_last_duplicate_in_batch_wins(self, session, seeded) -> None:
        rows = [
            WeeklyEntryUpsert(week_id=seeded.may_w19.id, kpi_id=seeded.mentions.id, actual_value=1),
            WeeklyEntryUpsert(week_id=seeded.may_w20.id, kpi_id=seeded.mentions.id, actual_value=2),
            WeeklyEntryUpsert(week_id=seeded.may_w19.id, kpi_id=seeded.mentions.id, actual_value=3),
        ]
        saved = WeeklyDataRepository(session).bulk_upsert(rows)
        session.commit()

        assert len(saved) == 2
        values = {e.week_id: e.actual_value for e in saved}
        assert values == {seeded.may_w19.id: 3, seeded.may_w20.id: 2}

    def test_notes_kept_when_not_provided(self, session, seeded) -> None:
        repo = WeeklyDataRepository(session)
        key = {"week_id": seeded.may_w19.id, "kpi_id": seeded.mentions.id}
        repo.bulk_upsert([WeeklyEntryUpsert(**key, actual_value=5, notes="launch week")])
        repo.bulk_upsert([WeeklyEntryUpsert(**key, actual_value=None)])
        session.commit()

        entry = repo.find_entry(**key)
        assert entry.actual_value is None
        assert entry.notes == "launch week"

    def test_notes_replaced_when_provided(self, session, seeded) -> None:
        repo = WeeklyDataRepository(session)
        key = {"week_id": seeded.may_w19.id, "kpi_id": seeded.mentions.id}
        repo.bulk_upsert([WeeklyEntryUpsert(**key, actual_value=5, notes="draft")])
        repo.bulk_upsert([WeeklyEntryUpsert(**key, actual_value=6, notes="final")])
        session.commit()

        assert repo.find_entry(**key).notes == "final"

    def test_empty_batch_is_a_no_op(self, session, seeded) -> None:
        assert WeeklyDataRepository(session).bulk_upsert([]) == []
        assert _count(session, WeeklyDataEntry) == 0


class TestWeeklyEntries:
    def test_duplicate_pair_is_rejected(self, session, seeded) -> None:
        repo = WeeklyDataRepository(session)
        repo.create_entry(week_id=seeded.may_w19.id, kpi_id=seeded.likes.id, actual_value=1)
        with pytest.raises(DuplicateEntityError):
            repo.create_entry(week_id=seeded.may_w19.id, kpi_id=seeded.likes.id, actual_value=2)

    def test_update_changes_values_but_not_key(self, session, seeded) -> None:
        repo = WeeklyDataRepository(session)
        entry = repo.create_entry(week_id=seeded.may_w19.id, kpi_id=seeded.likes.id, actual_value=1)
        repo.update_entry(
            entry, {"actual_value": 9, "notes": "revised", "week_id": seeded.may_w20.id}
        )
        session.commit()

        assert entry.week_id == seeded.may_w19.id
        assert (entry.actual_value, entry.notes) == (9, "revised")

    def test_partial_update_keeps_other_fields(self, session, seeded) -> None:
        repo = WeeklyDataRepository(session)
        entry = repo.create_entry(
            week_id=seeded.may_w19.id, kpi_id=seeded.likes.id, actual_value=1, notes="launch"
        )
        repo.update_entry(entry, {"actual_value": 4})
        assert (entry.actual_value, entry.notes) == (4, "launch")

    def test_list_by_month_uses_assigned_month(self, session, seeded) -> None:
        repo = WeeklyDataRepository(session)
        repo.bulk_upsert(
            [
                WeeklyEntryUpsert(week_id=w.id, kpi_id=seeded.likes.id, actual_value=1)
                for w in (seeded.april_w17, seeded.may_w19, seeded.may_w20, seeded.june_w22)
            ]
        )
        session.commit()

        may = repo.list_entries(month_id="2025-05")
        assert [e.week_id for e in may] == [seeded.may_w19.id, seeded.may_w20.id]
        assert [e.week_id for e in repo.list_entries(month_id="2025-06")] == [seeded.june_w22.id]

    def test_list_between_filters_on_week_start(self, session, seeded) -> None:
        repo = WeeklyDataRepository(session)
        repo.bulk_upsert(
            [
                WeeklyEntryUpsert(week_id=seeded.may_w20.id, kpi_id=seeded.likes.id, actual_value=1),
                WeeklyEntryUpsert(week_id=seeded.june_w22.id, kpi_id=seeded.likes.id, actual_value=2),
            ]
        )
        session.commit()

        rows = repo.list_between(date(2025, 5, 1), date(2025, 5, 31))
        assert [week.id for _, week in rows] == [seeded.may_w20.id, seeded.june_w22.id]
        assert repo.list_between(date(2025, 5, 1), date(2025, 5, 31), kpi_ids=[]) == []


# ---------------------------------------------------------------------------
# Monthly targets
# ---------------------------------------------------------------------------


class TestMonthlyTargets:
    def test_bulk_upsert_overwrites_existing_month(self, session, seeded) -> None:
        repo = MonthlyTargetRepository(session)
        repo.bulk_upsert(
            [MonthlyTargetUpsert(kpi_id=seeded.mentions.id, month_id="2025-05", target_value=200)]
        )
        repo.bulk_upsert(
            [
                MonthlyTargetUpsert(kpi_id=seeded.mentions.id, month_id="2025-05", target_value=300),
                MonthlyTargetUpsert(kpi_id=seeded.mentions.id, month_id="2025-06", target_value=400),
            ]
        )
        session.commit()

        targets = repo.list_targets(kpi_id=seeded.mentions.id)
        assert [(t.month_id, t.target_value) for t in targets] == [
            ("2025-06", 400),
            ("2025-05", 300),
        ]

    def test_duplicate_month_is_rejected(self, session, seeded) -> None:
        repo = MonthlyTargetRepository(session)
        repo.create_target(kpi_id=seeded.likes.id, month_id="2025-05", target_value=10)
        with pytest.raises(DuplicateEntityError):
            repo.create_target(kpi_id=seeded.likes.id, month_id="2025-05", target_value=20)

    def test_update_changes_value_but_not_month(self, session, seeded) -> None:
        repo = MonthlyTargetRepository(session)
        target = repo.create_target(kpi_id=seeded.likes.id, month_id="2025-05", target_value=10)
        repo.update_target(target, {"target_value": 25, "month_id": "2025-06"})
        session.commit()

        assert (target.month_id, target.target_value) == ("2025-05", 25)
        assert repo.find_target(seeded.likes.id, "2025-06") is None


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------


class TestHierarchy:
    def test_require_kpis_names_every_missing_id(self, session, seeded) -> None:
        ghost_a, ghost_b = uuid.uuid4(), uuid.uuid4()
        with pytest.raises(EntityNotFoundError) as excinfo:
            HierarchyRepository(session).require_kpis([seeded.mentions.id, ghost_a, ghost_b])
        assert excinfo.value.ids == [str(ghost_a), str(ghost_b)]
        assert str(ghost_a) in str(excinfo.value)

    def test_stage_names_are_unique(self, session, seeded) -> None:
        with pytest.raises(DuplicateEntityError):
            HierarchyRepository(session).create_stage(
                name="Aware", display_order=9, color_code="from-gray-500 to-gray-600"
            )

    def test_sub_category_name_unique_within_stage(self, session, seeded) -> None:
        repo = HierarchyRepository(session)
        with pytest.raises(DuplicateEntityError):
            repo.create_sub_category(
                name="Brand Awareness", display_order=2, cvj_stage_id=seeded.aware.id
            )
        other = repo.create_sub_category(
            name="Brand Awareness", display_order=2, cvj_stage_id=seeded.engage.id
        )
        assert other.cvj_stage_id == seeded.engage.id

    def test_list_kpis_in_journey_order(self, session, seeded) -> None:
        names = [k.name for k in HierarchyRepository(session).list_kpis(active=True)]
        assert names == ["Brand Mentions", "Search Impressions", "Social Likes"]

    def test_list_kpis_by_stage(self, session, seeded) -> None:
        kpis = HierarchyRepository(session).list_kpis(stage_id=seeded.engage.id)
        assert {k.name for k in kpis} == {"Social Likes", "Legacy Reach"}
        assert all(k.cvj_stage.name == "Engage" for k in kpis)

    def test_deleting_stage_cascades(self, session, seeded) -> None:
        WeeklyDataRepository(session).bulk_upsert(
            [WeeklyEntryUpsert(week_id=seeded.may_w19.id, kpi_id=seeded.likes.id, actual_value=7)]
        )
        MonthlyTargetRepository(session).create_target(
            kpi_id=seeded.likes.id, month_id="2025-05", target_value=10
        )
        session.commit()

        repo = HierarchyRepository(session)
        repo.delete_stage(repo.require_stage(seeded.engage.id))
        session.commit()

        assert _count(session, SubCategory) == 1
        assert _count(session, KPI) == 2
        assert _count(session, WeeklyDataEntry) == 0
        assert _count(session, MonthlyKpiTarget) == 0


# ---------------------------------------------------------------------------
# Weeks
# ---------------------------------------------------------------------------


class TestWeeks:
    def test_duplicate_week_number_is_rejected(self, session, seeded) -> None:
        with pytest.raises(DuplicateEntityError):
            WeekRepository(session).create_week(
                id="Week 19 (again)",
                year=2025,
                week_number=19,
                month=5,
                start_date=date(2025, 5, 6),
                end_date=date(2025, 5, 12),
            )

    def test_duplicate_range_is_rejected(self, session, seeded) -> None:
        with pytest.raises(DuplicateEntityError):
            WeekRepository(session).create_week(
                id="Other label",
                year=2025,
                week_number=40,
                month=5,
                start_date=seeded.may_w19.start_date,
                end_date=seeded.may_w19.end_date,
            )

    def test_list_for_months(self, session, seeded) -> None:
        weeks = WeekRepository(session).list_for_months(["2025-04", "2025-06"])
        assert [w.id for w in weeks] == [seeded.april_w17.id, seeded.june_w22.id]

    def test_require_weeks_names_missing(self, session, seeded) -> None:
        with pytest.raises(EntityNotFoundError) as excinfo:
            WeekRepository(session).require_weeks([seeded.may_w19.id, "Week 99 [x]"])
        assert excinfo.value.ids == ["Week 99 [x]"]


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------


class TestSeed:
    def test_seed_is_idempotent(self, session) -> None:
        first = seed_scorecard(session)
        session.commit()
        second = seed_scorecard(session)
        session.commit()

        assert first.stages_created == len(CVJ_STAGES)
        assert first.sub_categories_created == 2 * len(CVJ_STAGES)
        assert first.kpis_created == len(SAMPLE_KPIS)
        assert first.weeks_created == len(SAMPLE_WEEKS)
        assert second.total_created == 0

    def test_seeded_week_22_belongs_to_june(self, session) -> None:
        seed_scorecard(session)
        session.commit()
        week = WeekRepository(session).require_week("Week 22 [05/26-06/01]")
        assert week.month_id == "2025-06"
