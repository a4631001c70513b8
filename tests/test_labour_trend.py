"""End-to-end tests for the labour cost trend payload."""

import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from app.models.enums import AnomalyMetric, AnomalySeverity, Granularity
from app.services.labour_trend import (
    LabourTrendConfig,
    build_labour_cost_trend_payload,
    get_labour_cost_trend,
    payload_cache_key,
    validate_trend_request,
)

from conftest import CURRENT_WEEK, TODAY, RecordFactory


@pytest.fixture
def payload(weekly_history):
    return build_labour_cost_trend_payload(weekly_history, LabourTrendConfig(range_days=90), TODAY)


class TestValidation:
    @pytest.mark.parametrize("range_days", [30, 90, 180, 365])
    def test_supported_ranges(self, range_days):
        assert validate_trend_request(range_days).range_days == range_days

    @pytest.mark.parametrize("range_days", [0, 7, 45, 366])
    def test_unsupported_range_rejected(self, range_days):
        with pytest.raises(ValueError, match="rangeDays"):
            validate_trend_request(range_days)

    def test_negative_target_rejected(self):
        with pytest.raises(ValueError, match="targetLabourCostPerJob"):
            validate_trend_request(90, -1.0)

    def test_currency_defaults_to_gbp(self):
        assert validate_trend_request(90, None, "").currency == "GBP"


class TestPayload:
    def test_header(self, payload):
        assert payload.range_days == 90
        assert payload.granularity == Granularity.WEEK
        assert payload.currency == "GBP"
        assert payload.target_labour_cost_per_job is None

    def test_trend_is_chronological(self, payload):
        starts = [p.period_start for p in payload.trend]
        assert len(starts) == 12
        assert starts == sorted(starts)
        assert starts[-1] == CURRENT_WEEK

    def test_kpis(self, payload):
        assert payload.kpis.avg_labour_cost_per_job.value == pytest.approx(580)
        assert payload.kpis.avg_labour_cost_per_job.delta_pct == pytest.approx(81.25)
        assert payload.kpis.avg_labour_cost_per_job.delta_abs == pytest.approx(260)
        assert payload.kpis.jobs_count.delta_pct == 0
        assert payload.kpis.overtime_cost.delta_pct == 100

    def test_anomalies_flag_current_week(self, payload):
        assert [(a.metric, a.period_start) for a in payload.anomalies] == [
            (AnomalyMetric.AVG_LABOUR_COST_PER_JOB, CURRENT_WEEK),
            (AnomalyMetric.OVERTIME_PCT, CURRENT_WEEK),
        ]
        assert all(a.severity == AnomalySeverity.WARN for a in payload.anomalies)

    def test_breakdowns(self, payload):
        [install] = payload.breakdown.by_job_type
        assert install.job_type == "Install"
        assert install.impact_cost == pytest.approx(240)
        assert [t.technician_name for t in payload.breakdown.by_technician] == ["Bob", "Alice"]
        assert len(payload.breakdown.est_vs_actual) == 12

    def test_profit_leakage_against_trend_baseline(self, payload):
        assert payload.profit_leakage.value == pytest.approx(580 - 4100 / 12)
        assert payload.profit_leakage.primary_driver == "Install driving £240 variance vs estimate."
        assert payload.profit_leakage.tech_impact == "Bob (OT: £180)"

    def test_profit_leakage_against_target(self, weekly_history):
        config = validate_trend_request(90, 300.0)
        payload = build_labour_cost_trend_payload(weekly_history, config, TODAY)
        assert payload.target_labour_cost_per_job == 300.0
        assert payload.profit_leakage.value == pytest.approx(280)

    def test_impact_costs_never_negative(self, payload):
        rows = (
            payload.breakdown.by_job_type
            + payload.breakdown.by_technician
            + payload.breakdown.est_vs_actual
        )
        assert all(r.impact_cost >= 0 for r in rows)

    def test_wire_keys_are_camel_case(self, payload):
        data = payload.model_dump(by_alias=True, mode="json")
        assert {"rangeDays", "profitLeakage", "kpis", "trend", "breakdown", "anomalies"} <= set(data)
        assert "avgLabourCostPerJob" in data["trend"][0]
        assert "estVsActual" in data["breakdown"]
        assert data["kpis"]["avgLabourCostPerJob"]["deltaAbs"] == pytest.approx(260)
        assert data["trend"][-1]["periodStart"] == "2026-03-09"

    def test_deterministic(self, weekly_history):
        config = LabourTrendConfig(range_days=90)
        first = build_labour_cost_trend_payload(weekly_history, config, TODAY)
        second = build_labour_cost_trend_payload(weekly_history, config, TODAY)
        assert first.model_dump_json(by_alias=True) == second.model_dump_json(by_alias=True)

    def test_monthly_range(self, weekly_history):
        payload = build_labour_cost_trend_payload(weekly_history, LabourTrendConfig(range_days=365), TODAY)
        assert payload.granularity == Granularity.MONTH
        assert payload.trend[0].period_start == date(2025, 4, 1)
        assert payload.trend[-1].period_start == date(2026, 2, 1)
        assert payload.breakdown.est_vs_actual[-1].period_label == "2026-02"


class TestEmptySnapshot:
    def test_degrades_to_zeros(self):
        payload = build_labour_cost_trend_payload(RecordFactory.snapshot(), LabourTrendConfig(), TODAY)
        assert len(payload.trend) == 12
        assert all(p.jobs_count == 1 and p.total_labour_cost == 0 for p in payload.trend)
        assert payload.kpis.avg_labour_cost_per_job.value == 0
        assert payload.breakdown.by_job_type == []
        assert payload.breakdown.by_technician == []
        assert payload.anomalies == []
        assert payload.profit_leakage.value == 0
        assert payload.profit_leakage.primary_driver == "Labour cost in line with baseline."


class TestPayloadCache:
    def test_cache_hit_returns_same_payload(self, weekly_history):
        config = LabourTrendConfig()
        first = get_labour_cost_trend(weekly_history, config, TODAY, company_id="c1")
        assert get_labour_cost_trend(weekly_history, config, TODAY, company_id="c1") is first

    def test_any_input_change_misses(self, weekly_history):
        config = LabourTrendConfig()
        base = payload_cache_key("c1", weekly_history, config, TODAY)
        assert payload_cache_key("c2", weekly_history, config, TODAY) != base
        assert payload_cache_key("c1", weekly_history, LabourTrendConfig(range_days=30), TODAY) != base
        assert payload_cache_key("c1", weekly_history, LabourTrendConfig(target_labour_cost_per_job=1.0), TODAY) != base
        assert payload_cache_key("c1", weekly_history, config, date(2026, 3, 19)) != base

    def test_new_snapshot_version_rebuilds(self, weekly_history):
        config = LabourTrendConfig()
        first = get_labour_cost_trend(weekly_history, config, TODAY)
        changed = RecordFactory.snapshot(
            weekly_history.workers, weekly_history.jobs, weekly_history.time_records,
            weekly_history.job_types, version="other",
        )
        assert get_labour_cost_trend(changed, config, TODAY) is not first

    def test_expired_entry_rebuilds(self, weekly_history):
        config = LabourTrendConfig()
        first = get_labour_cost_trend(weekly_history, config, TODAY, ttl_seconds=300)
        assert get_labour_cost_trend(weekly_history, config, TODAY, ttl_seconds=-1) is not first

    def test_concurrent_requests_share_cache_safely(self):
        snapshot = RecordFactory.snapshot()
        config = LabourTrendConfig(range_days=30)

        def hammer(n):
            # ttl 0 expires every entry, so each call evicts while others insert
            return [
                get_labour_cost_trend(snapshot, config, TODAY, company_id=f"c{n}", ttl_seconds=0)
                for _ in range(50)
            ]

        interval = sys.getswitchinterval()
        sys.setswitchinterval(1e-6)
        try:
            with ThreadPoolExecutor(max_workers=16) as pool:
                results = list(pool.map(hammer, range(16)))
        finally:
            sys.setswitchinterval(interval)

        assert all(len(r) == 50 for r in results)
        assert all(p.range_days == 30 for r in results for p in r)
