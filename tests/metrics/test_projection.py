"""Tests for PMC projection.

Covers the real-data pass-through, the empty-series fallback, per-day decay
into gaps and beyond the last known point, the before-history anchor
policies, and the projector memo.
"""

from datetime import date, timedelta

import pytest

from trainlog.metrics import projection
from trainlog.metrics.errors import InvalidWindowError, ProjectionHorizonError
from trainlog.metrics.projection import (
    ATL_DAILY_DECAY,
    CTL_DAILY_DECAY,
    ZERO,
    PMCProjector,
    PMCValues,
    decay,
    project,
)
from trainlog.metrics.status import TrainingStatus, classify
from trainlog.metrics.training_load import TrainingLoadPoint, build_training_load_series

D0 = date(2024, 3, 4)


def _point(day: date, ctl: float, atl: float, tss: float = 0.0) -> TrainingLoadPoint:
    return TrainingLoadPoint(date=day, tss=tss, ctl=ctl, atl=atl, tsb=ctl - atl)


def _series() -> list[TrainingLoadPoint]:
    return [
        _point(D0, 40.0, 30.0, tss=60.0),
        _point(D0 + timedelta(days=1), 41.0, 38.0, tss=90.0),
        _point(D0 + timedelta(days=3), 42.0, 35.0, tss=75.0),
    ]


class TestExactMatch:
    """Days with a stored point return it unchanged."""

    def test_every_point_passes_through(self):
        """Each stored point comes back bit-identical."""
        series = _series()
        for point in series:
            values = project(series, point.date)
            assert (values.ctl, values.atl, values.tsb) == (point.ctl, point.atl, point.tsb)
            assert values.projected is False
            assert values.anchor_date == point.date

    def test_stored_tsb_not_recomputed(self):
        """A stored tsb is returned as-is, even if it was rounded upstream."""
        series = [TrainingLoadPoint(date=D0, tss=0.0, ctl=50.0, atl=40.0, tsb=10.01)]
        assert project(series, D0).tsb == 10.01

    def test_last_date_is_zero_gap(self):
        """Projecting onto the final date returns its stored values."""
        series = _series()
        last = series[-1]
        values = project(series, last.date)
        assert values == PMCValues(ctl=last.ctl, atl=last.atl, tsb=last.tsb, projected=False, anchor_date=last.date)

    def test_later_duplicate_wins(self):
        """When two points share a date the later one is used."""
        series = [_point(D0, 10.0, 5.0), _point(D0, 20.0, 15.0)]
        assert project(series, D0).ctl == 20.0


class TestEmptySeries:
    def test_empty_series_returns_zeros(self):
        """No history resolves to (0, 0, 0) for any date."""
        for day in (D0, D0 - timedelta(days=400), D0 + timedelta(days=400)):
            values = project([], day)
            assert (values.ctl, values.atl, values.tsb) == (0.0, 0.0, 0.0)
            assert values is ZERO

    def test_empty_series_zero_policy(self):
        assert project([], D0, before_history="zero") is ZERO


class TestDecay:
    """Per-day decay past the anchor."""

    def test_day_one(self):
        """One rest day: ctl x 41/42, atl x 6/7."""
        series = [_point(D0, 100.0, 50.0)]
        values = project(series, D0 + timedelta(days=1))
        assert values.ctl == pytest.approx(100 * 41 / 42)
        assert values.atl == pytest.approx(50 * 6 / 7)
        assert values.tsb == pytest.approx(54.7619, abs=1e-4)
        assert values.projected is True
        assert values.anchor_date == D0

    def test_one_week_scenario(self):
        """A week without training after a balanced day leaves the athlete very fresh."""
        series = [TrainingLoadPoint(date=D0, tss=80.0, ctl=60.0, atl=55.0, tsb=5.0)]
        values = project(series, D0 + timedelta(days=7))

        assert values.ctl == pytest.approx(60 * (41 / 42) ** 7, rel=1e-9)
        assert values.atl == pytest.approx(55 * (6 / 7) ** 7, rel=1e-9)
        assert values.ctl == pytest.approx(50.687, abs=1e-3)
        assert values.atl == pytest.approx(18.695, abs=1e-3)
        assert values.tsb == pytest.approx(values.ctl - values.atl)
        assert classify(values.tsb) is TrainingStatus.VERY_FRESH

    def test_tsb_is_difference(self):
        """tsb == ctl - atl for every projected day."""
        series = [_point(D0, 75.0, 90.0)]
        for days in range(1, 60):
            values = project(series, D0 + timedelta(days=days))
            assert values.tsb == values.ctl - values.atl

    def test_matches_closed_form(self):
        """The per-day loop agrees with factor**days to well beyond six significant digits."""
        series = [_point(D0, 83.0, 47.0)]
        for days in (1, 10, 100, 1000):
            values = project(series, D0 + timedelta(days=days))
            assert values.ctl == pytest.approx(83.0 * CTL_DAILY_DECAY**days, rel=1e-6)
            assert values.atl == pytest.approx(47.0 * ATL_DAILY_DECAY**days, rel=1e-6)

    def test_loads_decrease_towards_zero(self):
        """ctl and atl fall strictly every day and vanish over long gaps."""
        series = [_point(D0, 60.0, 55.0)]
        previous = project(series, D0)
        for days in range(1, 120):
            current = project(series, D0 + timedelta(days=days))
            assert current.ctl < previous.ctl
            assert current.atl < previous.atl
            previous = current

        far = project(series, D0 + timedelta(days=2000))
        assert far.ctl == pytest.approx(0.0, abs=1e-9)
        assert far.atl == pytest.approx(0.0, abs=1e-9)

    def test_tsb_rises_while_fatigue_clears(self):
        """Form improves through the first week of rest because fatigue decays faster than fitness."""
        series = [_point(D0, 60.0, 55.0)]
        tsb_values = [project(series, D0 + timedelta(days=days)).tsb for days in range(0, 8)]
        assert tsb_values == sorted(tsb_values)
        assert tsb_values[-1] > tsb_values[0]

    def test_gap_inside_history_decays_from_previous_point(self):
        """A missing day between points decays from the latest earlier point."""
        series = _series()
        gap_day = D0 + timedelta(days=2)
        values = project(series, gap_day)
        assert values.anchor_date == D0 + timedelta(days=1)
        assert values.ctl == pytest.approx(41.0 * 41 / 42)
        assert values.atl == pytest.approx(38.0 * 6 / 7)

    def test_unsorted_series_is_ordered_first(self):
        """Input order does not change the anchor."""
        series = list(reversed(_series()))
        values = project(series, D0 + timedelta(days=5))
        assert values.anchor_date == D0 + timedelta(days=3)

    def test_decay_matches_rest_days_in_series_builder(self):
        """Projecting past the end equals extending the built series with rest days."""
        daily_tss = {D0: 120.0, D0 + timedelta(days=1): 80.0, D0 + timedelta(days=2): 95.0}
        short = build_training_load_series(daily_tss)
        extended = build_training_load_series(daily_tss, end_date=D0 + timedelta(days=12))

        values = project(short, D0 + timedelta(days=12))
        assert values.ctl == pytest.approx(extended[-1].ctl, rel=1e-12)
        assert values.atl == pytest.approx(extended[-1].atl, rel=1e-12)


class TestBeforeHistory:
    """Targets earlier than every stored point."""

    def test_last_known_reuses_final_point(self):
        """Default policy reuses the last point's values without backward decay."""
        series = _series()
        last = series[-1]
        values = project(series, D0 - timedelta(days=30))
        assert (values.ctl, values.atl, values.tsb) == (last.ctl, last.atl, last.tsb)
        assert values.anchor_date == last.date
        assert values.projected is True

    def test_zero_policy(self):
        values = project(_series(), D0 - timedelta(days=1), before_history="zero")
        assert values is ZERO

    def test_zero_policy_does_not_affect_known_days(self):
        series = _series()
        assert project(series, D0, before_history="zero").ctl == 40.0


class TestDecayFunction:
    def test_zero_days_is_identity(self):
        assert decay(70.0, 65.0, 0) == (70.0, 65.0, 5.0)

    def test_negative_days_rejected(self):
        with pytest.raises(ValueError):
            decay(70.0, 65.0, -1)


class TestIdempotence:
    def test_repeated_projection_is_identical(self):
        """Same inputs, same object, same output."""
        series = _series()
        target = D0 + timedelta(days=45)
        first = project(series, target)
        second = project(series, target)
        assert first == second
        assert first.ctl == second.ctl and first.atl == second.atl and first.tsb == second.tsb


class TestPMCProjector:
    def test_memo_matches_pure_function(self):
        """Memoised results are identical to fresh projections."""
        series = _series()
        projector = PMCProjector(series)
        target = D0 + timedelta(days=30)
        assert projector.project(target) == project(series, target)
        assert projector.project(target) == project(series, target)

    def test_adjacent_targets_continue_one_walk(self, monkeypatch):
        """Week ends past the last point resume from the previous week end."""
        walked: list[int] = []
        real_decay = projection.decay

        def counting_decay(ctl, atl, days):
            walked.append(days)
            return real_decay(ctl, atl, days)

        monkeypatch.setattr(projection, "decay", counting_decay)
        series = _series()
        projector = PMCProjector(series)
        week_ends = [D0 + timedelta(days=6 + 7 * week) for week in range(8)]
        for target in week_ends:
            projector.project(target)

        # Last point is D0+3: three days to the first Sunday, then one week each
        assert walked == [3] + [7] * 7

        monkeypatch.setattr(projection, "decay", real_decay)
        for target in week_ends:
            assert projector.project(target) == project(series, target)

    def test_out_of_order_targets_match_pure_function(self):
        series = _series()
        projector = PMCProjector(series)
        targets = [D0 + timedelta(days=offset) for offset in (40, 10, 25, 5, 41, 10)]
        for target in targets:
            assert projector.project(target) == project(series, target)

    def test_snapshot_is_isolated_from_caller_list(self):
        """Appending to the caller's list does not change an existing projector."""
        series = _series()
        projector = PMCProjector(series)
        target = D0 + timedelta(days=10)
        before = projector.project(target)

        series.append(_point(target, 99.0, 99.0))
        assert projector.project(target) == before
        assert PMCProjector(series).project(target).ctl == 99.0

    def test_project_range_covers_every_day(self):
        projector = PMCProjector(_series())
        days = projector.project_range(D0, D0 + timedelta(days=6))
        assert [d.date for d in days] == [D0 + timedelta(days=i) for i in range(7)]
        assert [d.values.projected for d in days] == [False, False, True, False, True, True, True]

    def test_project_range_rejects_inverted_window(self):
        with pytest.raises(InvalidWindowError):
            PMCProjector(_series()).project_range(D0, D0 - timedelta(days=1))

    def test_horizon_cap(self):
        """Projections beyond max_days from the anchor raise."""
        projector = PMCProjector([_point(D0, 50.0, 40.0)], max_days=30)
        projector.project(D0 + timedelta(days=30))
        with pytest.raises(ProjectionHorizonError) as exc_info:
            projector.project(D0 + timedelta(days=31))
        assert exc_info.value.days == 31
        assert exc_info.value.limit == 30

    def test_latest(self):
        assert PMCProjector(_series()).latest().date == D0 + timedelta(days=3)
        assert PMCProjector([]).latest() is None
