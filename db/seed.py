"""
db/seed.py

Idempotent reference data for a fresh scorecard database: the eight
journey stages, two sub-categories per stage, a handful of sample KPIs
and the weeks of May 2025.

Rows are matched by natural key (stage name, sub-category name within a
stage, KPI name within a sub-category, week id); existing rows are left
untouched.  The caller commits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.cvj_stage import CVJStage
from db.models.kpi import KPI
from db.models.sub_category import SubCategory
from db.models.week import Week
from scorecard.types import UnitType

logger = logging.getLogger(__name__)

# (name, display_order, color_code)
CVJ_STAGES: tuple[tuple[str, int, str], ...] = (
    ("Aware", 1, "from-blue-500 to-blue-600"),
    ("Engage", 2, "from-green-500 to-green-600"),
    ("Subscribe", 3, "from-purple-500 to-purple-600"),
    ("Convert", 4, "from-orange-500 to-orange-600"),
    ("Excite", 5, "from-pink-500 to-pink-600"),
    ("Ascend", 6, "from-indigo-500 to-indigo-600"),
    ("Advocate", 7, "from-emerald-500 to-emerald-600"),
    ("Promote", 8, "from-red-500 to-red-600"),
)

SUB_CATEGORIES: dict[str, tuple[str, str]] = {
    "Aware": ("Brand Awareness", "Content Reach"),
    "Engage": ("Social Engagement", "Content Engagement"),
    "Subscribe": ("Email Marketing", "Newsletter Growth"),
    "Convert": ("Sales Conversion", "Lead Generation"),
    "Excite": ("Customer Satisfaction", "Product Experience"),
    "Ascend": ("Upsell Performance", "Account Growth"),
    "Advocate": ("Customer Loyalty", "Retention Metrics"),
    "Promote": ("Referral Program", "Word of Mouth"),
}


@dataclass(frozen=True)
class SampleKpi:
    sub_category: str
    name: str
    description: str
    unit_type: UnitType
    default_monthly_target_value: float


SAMPLE_KPIS: tuple[SampleKpi, ...] = (
    SampleKpi("Brand Awareness", "Brand Mentions",
              "Number of times the brand is mentioned online", UnitType.NUMBER, 500),
    SampleKpi("Brand Awareness", "Search Impressions",
              "Total search result impressions", UnitType.NUMBER, 10_000),
    SampleKpi("Content Reach", "Content Views",
              "Total views across all content", UnitType.NUMBER, 5_000),
    SampleKpi("Content Reach", "Unique Visitors",
              "Number of unique website visitors", UnitType.NUMBER, 2_000),
    SampleKpi("Social Engagement", "Social Likes",
              "Total likes across social platforms", UnitType.NUMBER, 1_000),
    SampleKpi("Social Engagement", "Social Shares",
              "Total shares across social platforms", UnitType.NUMBER, 200),
    SampleKpi("Content Engagement", "Avg Session Duration",
              "Average time spent on site", UnitType.DURATION_SECONDS, 180),
    SampleKpi("Content Engagement", "Bounce Rate",
              "Percentage of single-page visits", UnitType.PERCENTAGE, 40),
)

# Week 22 runs into June and is assigned to June.
SAMPLE_WEEKS: tuple[tuple[str, int, int, int, date, date], ...] = (
    ("Week 18 [04/28-05/04]", 2025, 18, 5, date(2025, 4, 28), date(2025, 5, 4)),
    ("Week 19 [05/05-05/11]", 2025, 19, 5, date(2025, 5, 5), date(2025, 5, 11)),
    ("Week 20 [05/12-05/18]", 2025, 20, 5, date(2025, 5, 12), date(2025, 5, 18)),
    ("Week 21 [05/19-05/25]", 2025, 21, 5, date(2025, 5, 19), date(2025, 5, 25)),
    ("Week 22 [05/26-06/01]", 2025, 22, 6, date(2025, 5, 26), date(2025, 6, 1)),
)


@dataclass(frozen=True)
class SeedSummary:
    stages_created: int
    sub_categories_created: int
    kpis_created: int
    weeks_created: int

    @property
    def total_created(self) -> int:
        return (
            self.stages_created
            + self.sub_categories_created
            + self.kpis_created
            + self.weeks_created
        )


def seed_scorecard(session: Session) -> SeedSummary:
    """Insert any missing reference rows and flush; returns per-table creation counts."""

    stages = {s.name: s for s in session.scalars(select(CVJStage))}
    stages_created = 0
    for name, display_order, color_code in CVJ_STAGES:
        if name in stages:
            continue
        stage = CVJStage(name=name, display_order=display_order, color_code=color_code)
        session.add(stage)
        stages[name] = stage
        stages_created += 1
        logger.info("Created CVJ stage %s", name)
    session.flush()

    sub_categories = {
        (sc.cvj_stage_id, sc.name): sc for sc in session.scalars(select(SubCategory))
    }
    by_name: dict[str, SubCategory] = {}
    sub_categories_created = 0
    for stage_name, names in SUB_CATEGORIES.items():
        stage = stages[stage_name]
        for display_order, name in enumerate(names, start=1):
            sub_category = sub_categories.get((stage.id, name))
            if sub_category is None:
                sub_category = SubCategory(
                    name=name,
                    display_order=display_order,
                    cvj_stage_id=stage.id,
                )
                session.add(sub_category)
                sub_categories_created += 1
                logger.info("Created sub-category %s / %s", stage_name, name)
            by_name[name] = sub_category
    session.flush()

    existing_kpis = {(k.sub_category_id, k.name) for k in session.scalars(select(KPI))}
    kpis_created = 0
    for sample in SAMPLE_KPIS:
        sub_category = by_name[sample.sub_category]
        if (sub_category.id, sample.name) in existing_kpis:
            continue
        session.add(
            KPI(
                name=sample.name,
                description=sample.description,
                unit_type=sample.unit_type,
                default_monthly_target_value=sample.default_monthly_target_value,
                sub_category_id=sub_category.id,
            )
        )
        kpis_created += 1
        logger.info("Created KPI %s", sample.name)

    existing_weeks = set(session.scalars(select(Week.id)))
    weeks_created = 0
    for week_id, year, week_number, month, start, end in SAMPLE_WEEKS:
        if week_id in existing_weeks:
            continue
        session.add(
            Week(
                id=week_id,
                year=year,
                week_number=week_number,
                month=month,
                start_date=start,
                end_date=end,
            )
        )
        weeks_created += 1
        logger.info("Created week %s", week_id)
    session.flush()

    summary = SeedSummary(
        stages_created=stages_created,
        sub_categories_created=sub_categories_created,
        kpis_created=kpis_created,
        weeks_created=weeks_created,
    )
    logger.info("Seeding finished: %d row(s) created", summary.total_created)
    return summary
