"""Tests for record-level labour arithmetic and ratio guards."""

import math
from dataclasses import replace
from datetime import date, datetime

import pytest

from app.models.enums import TimeEntryCategory
from app.models.records import JobRecord, TimeRecord, WorkerRecord
from app.services.labour_calculator import (
    OT_MULTIPLIER,
    blended_hourly_rate,
    delta_pct,
    elapsed_hours,
    estimated_hours,
    impact_cost,
    labour_cost,
    overtime_cost,
    overtime_pct_of_labour,
    revenue_per_labour_hour,
    safe_div,
    variance_pct,
)


def _entry(hours_start, hours_end, break_minutes=0, overtime=False):
    return TimeRecord(
        id="e",
        worker_id="w",
        job_id="j",
        start=datetime(2026, 3, 10, hours_start),
        end=datetime(2026, 3, 10, hours_end),
        break_minutes=break_minutes,
        is_overtime=overtime,
    )


class TestDeltaPct:
    def test_zero_previous_positive_current_is_100(self):
        assert delta_pct(0, 5) == 100

    def test_zero_previous_zero_current_is_0(self):
        assert delta_pct(0, 0) == 0

    def test_regular_change(self):
        assert delta_pct(200, 250) == pytest.approx(25.0)
        assert delta_pct(200, 150) == pytest.approx(-25.0)


class TestGuards:
    def test_safe_div_zero_denominator(self):
        assert safe_div(10, 0) == 0.0
        assert safe_div(10, 0, default=-1) == -1

    @pytest.mark.parametrize("fn,args", [
        (overtime_pct_of_labour, (50, 0)),
        (revenue_per_labour_hour, (1000, 0)),
        (variance_pct, (3, 0)),
    ])
    def test_ratios_never_nan_or_inf(self, fn, args):
        result = fn(*args)
        assert math.isfinite(result)
        assert result == 0

    def test_blended_rate_of_no_workers(self):
        assert blended_hourly_rate([]) == 0


class TestTimeRecords:
    def test_elapsed_hours_deducts_breaks(self):
        assert elapsed_hours(_entry(8, 17, break_minutes=60)) == pytest.approx(8.0)

    def test_elapsed_hours_floored_at_zero(self):
        assert elapsed_hours(_entry(8, 9, break_minutes=120)) == 0.0

    def test_overtime_charged_at_multiplier(self):
        worker = WorkerRecord(id="w", name="W", hourly_rate=20)
        entry = _entry(8, 10, overtime=True)
        assert labour_cost(entry, worker) == pytest.approx(2 * 20 * OT_MULTIPLIER)
        assert overtime_cost(entry, worker) == pytest.approx(60.0)

    def test_regular_time_has_no_overtime_cost(self):
        worker = WorkerRecord(id="w", name="W", hourly_rate=20)
        entry = _entry(8, 10)
        assert labour_cost(entry, worker) == pytest.approx(40.0)
        assert overtime_cost(entry, worker) == 0.0

    @pytest.mark.parametrize("category", list(TimeEntryCategory))
    def test_category_does_not_change_cost(self, category):
        worker = WorkerRecord(id="w", name="W", hourly_rate=20)
        entry = replace(_entry(8, 10), category=category)
        assert elapsed_hours(entry) == pytest.approx(2.0)
        assert labour_cost(entry, worker) == pytest.approx(40.0)


class TestEstimatedHours:
    def test_flat_hours_expected(self):
        assert estimated_hours(JobRecord(id="j", name="J", hours_expected=8)) == 8

    def test_multi_day_span(self):
        job = JobRecord(
            id="j", name="J",
            start_date=date(2026, 3, 9), end_date=date(2026, 3, 11), hours_per_day=4,
        )
        assert estimated_hours(job) == 12

    def test_hours_per_day_without_range(self):
        assert estimated_hours(JobRecord(id="j", name="J", hours_per_day=5)) == 5

    def test_no_estimate(self):
        assert estimated_hours(JobRecord(id="j", name="J")) == 0


def test_impact_cost_scenario():
    # 10 actual vs 8 estimated hours at a $40 blended rate
    assert impact_cost(10 - 8, 40.0) == pytest.approx(80.0)


def test_impact_cost_ignores_underrun():
    assert impact_cost(-3, 40.0) == 0.0
