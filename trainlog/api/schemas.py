"""Request and response models for the PMC API."""

from __future__ import annotations

from datetime import date as Date
from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from trainlog.core.settings import settings
from trainlog.metrics.projection import BeforeHistory, PMCValues
from trainlog.metrics.sport_mode import SportMode
from trainlog.metrics.status import TrainingStatus, TrendDirection, classify, metric_trend
from trainlog.metrics.training_load import ActivityRecord, TrainingLoadPoint


class TrainingLoadPointIn(BaseModel):
    """One day of the PMC series as stored by the persistence layer."""

    date: Date
    tss: float = Field(default=0.0, ge=0, description="Total training stress for the day")
    ctl: float = Field(default=0.0, description="Chronic Training Load")
    atl: float = Field(default=0.0, description="Acute Training Load")
    tsb: float | None = Field(default=None, description="Training Stress Balance; derived as ctl - atl when omitted")

    @field_validator("tss", "ctl", "atl", mode="before")
    @classmethod
    def null_as_zero(cls, value: float | None) -> float:
        return 0.0 if value is None else value

    def to_point(self) -> TrainingLoadPoint:
        tsb = self.tsb if self.tsb is not None else self.ctl - self.atl
        return TrainingLoadPoint(date=self.date, tss=self.tss, ctl=self.ctl, atl=self.atl, tsb=tsb)

    @classmethod
    def from_point(cls, point: TrainingLoadPoint) -> TrainingLoadPointIn:
        return cls(date=point.date, tss=point.tss, ctl=point.ctl, atl=point.atl, tsb=point.tsb)


class ActivityIn(BaseModel):
    """Activity fields used by the roll-ups. Missing numbers count as zero."""

    date: Date | datetime
    tss: float | None = Field(default=None, ge=0)
    duration_seconds: float | None = Field(default=None, ge=0)
    distance_meters: float | None = Field(default=None, ge=0)
    avg_power: float | None = Field(default=None, ge=0)
    elevation_gain_meters: float | None = Field(default=None, ge=0)
    sport: str | None = None

    def to_record(self) -> ActivityRecord:
        return ActivityRecord(
            date=self.date,
            tss=self.tss,
            duration_seconds=self.duration_seconds,
            distance_meters=self.distance_meters,
            avg_power=self.avg_power,
            elevation_gain_meters=self.elevation_gain_meters,
            sport=self.sport,
        )


class StatusOut(BaseModel):
    status: TrainingStatus
    label: str

    @classmethod
    def for_tsb(cls, tsb: float) -> StatusOut:
        status = classify(tsb)
        return cls(status=status, label=status.label)


class TrendOut(BaseModel):
    """Direction of each metric relative to an earlier day (dashboard cards)."""

    compare_date: Date
    ctl: TrendDirection | None
    atl: TrendDirection | None
    tsb: TrendDirection | None

    @classmethod
    def between(cls, current: PMCValues, previous: PMCValues, compare_date: Date) -> TrendOut:
        return cls(
            compare_date=compare_date,
            ctl=metric_trend(current.ctl, previous.ctl),
            atl=metric_trend(current.atl, previous.atl),
            tsb=metric_trend(current.tsb, previous.tsb),
        )


class PMCValuesOut(BaseModel):
    ctl: float
    atl: float
    tsb: float
    projected: bool
    anchor_date: Date | None = None
    status: StatusOut
    trend: TrendOut | None = None

    @classmethod
    def from_values(cls, values: PMCValues, trend: TrendOut | None = None) -> PMCValuesOut:
        return cls(
            ctl=values.ctl,
            atl=values.atl,
            tsb=values.tsb,
            projected=values.projected,
            anchor_date=values.anchor_date,
            status=StatusOut.for_tsb(values.tsb),
            trend=trend,
        )


class _WindowRequest(BaseModel):
    start_date: Date
    end_date: Date

    @model_validator(mode="after")
    def check_window(self) -> _WindowRequest:
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        days = (self.end_date - self.start_date).days + 1
        if days > settings.max_window_days:
            raise ValueError(f"Window of {days} days exceeds the maximum of {settings.max_window_days} days")
        return self


class ProjectRequest(BaseModel):
    series: list[TrainingLoadPointIn] = Field(default_factory=list)
    target_date: Date
    compare_date: Date | None = Field(default=None, description="Earlier day to report ctl / atl / tsb trends against")
    before_history: BeforeHistory | None = Field(default=None, description="Defaults to PMC_BEFORE_HISTORY_POLICY")


class RangeRequest(_WindowRequest):
    series: list[TrainingLoadPointIn] = Field(default_factory=list)
    before_history: BeforeHistory | None = None


class DailyPMCOut(BaseModel):
    date: Date
    values: PMCValuesOut


class RangeResponse(BaseModel):
    days: list[DailyPMCOut]


class WeeksRequest(_WindowRequest):
    activities: list[ActivityIn] = Field(default_factory=list)
    series: list[TrainingLoadPointIn] = Field(default_factory=list)
    before_history: BeforeHistory | None = None


class WeekSummaryOut(BaseModel):
    week_start: Date
    week_end: Date
    total_tss: float
    total_duration_seconds: float
    total_distance_meters: float
    total_distance_km: float
    total_work_kj: float
    total_elevation_meters: float
    activity_count: int
    ctl: float
    atl: float
    tsb: float
    projected: bool
    status: StatusOut


class WeeksResponse(BaseModel):
    weeks: list[WeekSummaryOut]


class SeriesRequest(BaseModel):
    activities: list[ActivityIn] = Field(default_factory=list)
    end_date: Date | None = None
    sport: SportMode | None = Field(default=None, description="Build a single sport group; all sports combined when omitted")


class SeriesResponse(BaseModel):
    sport: SportMode | None
    series: list[TrainingLoadPointIn]
