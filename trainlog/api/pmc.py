"""PMC API endpoints.

The presentation layer fetches the daily series from persistence and posts it
here together with the window it is rendering. Nothing is stored: every
response is recomputed from the request body.
"""

from fastapi import APIRouter, HTTPException, Query, status
from loguru import logger

from trainlog.api.schemas import (
    DailyPMCOut,
    PMCValuesOut,
    ProjectRequest,
    RangeRequest,
    RangeResponse,
    SeriesRequest,
    SeriesResponse,
    StatusOut,
    TrainingLoadPointIn,
    TrendOut,
    WeekSummaryOut,
    WeeksRequest,
    WeeksResponse,
)
from trainlog.core.settings import settings
from trainlog.metrics.errors import ProjectionHorizonError
from trainlog.metrics.projection import BeforeHistory, PMCProjector
from trainlog.metrics.training_load import build_combined_series, build_sport_series
from trainlog.metrics.weekly_aggregation import aggregate_weeks

router = APIRouter(prefix="/pmc", tags=["pmc"])


def _policy(requested: BeforeHistory | None) -> BeforeHistory:
    return requested or settings.before_history_policy


def _horizon_exceeded(e: ProjectionHorizonError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=str(e),
    )


@router.post("/project", response_model=PMCValuesOut)
def project_day(request: ProjectRequest):
    """Get CTL / ATL / TSB and training status for a single day.

    Args:
        request: Daily series, target date and optional compare date

    Returns:
        PMCValuesOut with stored or projected values, plus trends when
        ``compare_date`` is given
    """
    logger.info(f"[API] /pmc/project called: target_date={request.target_date}, points={len(request.series)}")
    projector = PMCProjector(
        [point.to_point() for point in request.series],
        before_history=_policy(request.before_history),
        max_days=settings.max_projection_days,
    )
    try:
        values = projector.project(request.target_date)
        previous = projector.project(request.compare_date) if request.compare_date is not None else None
    except ProjectionHorizonError as e:
        logger.warning(f"[API] /pmc/project rejected: {e}")
        raise _horizon_exceeded(e) from e

    trend = TrendOut.between(values, previous, request.compare_date) if previous is not None else None
    return PMCValuesOut.from_values(values, trend)


@router.post("/range", response_model=RangeResponse)
def project_days(request: RangeRequest):
    """Get CTL / ATL / TSB for every day of a window (calendar cells, charts)."""
    logger.info(
        f"[API] /pmc/range called: {request.start_date} to {request.end_date}, points={len(request.series)}"
    )
    projector = PMCProjector(
        [point.to_point() for point in request.series],
        before_history=_policy(request.before_history),
        max_days=settings.max_projection_days,
    )
    try:
        days = projector.project_range(request.start_date, request.end_date)
    except ProjectionHorizonError as e:
        logger.warning(f"[API] /pmc/range rejected: {e}")
        raise _horizon_exceeded(e) from e

    return RangeResponse(
        days=[DailyPMCOut(date=day.date, values=PMCValuesOut.from_values(day.values)) for day in days],
    )


@router.post("/weeks", response_model=WeeksResponse)
def summarize_weeks(request: WeeksRequest):
    """Get Monday-aligned week summaries with end-of-week PMC values."""
    logger.info(
        f"[API] /pmc/weeks called: {request.start_date} to {request.end_date}, "
        f"activities={len(request.activities)}, points={len(request.series)}"
    )
    try:
        weeks = aggregate_weeks(
            [activity.to_record() for activity in request.activities],
            request.start_date,
            request.end_date,
            [point.to_point() for point in request.series],
            before_history=_policy(request.before_history),
            max_days=settings.max_projection_days,
        )
    except ProjectionHorizonError as e:
        logger.warning(f"[API] /pmc/weeks rejected: {e}")
        raise _horizon_exceeded(e) from e

    return WeeksResponse(
        weeks=[
            WeekSummaryOut(
                week_start=week.week_start,
                week_end=week.week_end,
                total_tss=week.total_tss,
                total_duration_seconds=week.total_duration_seconds,
                total_distance_meters=week.total_distance_meters,
                total_distance_km=week.total_distance_km,
                total_work_kj=week.total_work_kj,
                total_elevation_meters=week.total_elevation_meters,
                activity_count=week.activity_count,
                ctl=week.ctl,
                atl=week.atl,
                tsb=week.tsb,
                projected=week.projected,
                status=StatusOut.for_tsb(week.tsb),
            )
            for week in weeks
        ],
    )


@router.post("/series", response_model=SeriesResponse)
def build_series(request: SeriesRequest):
    """Compute the daily PMC series from activities.

    With ``sport`` set, only activities in that sport group count; otherwise
    all sports are combined into one series.
    """
    logger.info(
        f"[API] /pmc/series called: activities={len(request.activities)}, "
        f"sport={request.sport}, end_date={request.end_date}"
    )
    records = [activity.to_record() for activity in request.activities]

    if request.sport is None:
        series = build_combined_series(records, request.end_date)
    else:
        series = build_sport_series(records, request.end_date).get(request.sport, [])

    return SeriesResponse(
        sport=request.sport,
        series=[TrainingLoadPointIn.from_point(point) for point in series],
    )


@router.get("/status", response_model=StatusOut)
def get_status(tsb: float = Query(description="Training Stress Balance (form)")):
    """Get the training status band for a TSB value."""
    logger.info(f"[API] /pmc/status called: tsb={tsb}")
    return StatusOut.for_tsb(tsb)
