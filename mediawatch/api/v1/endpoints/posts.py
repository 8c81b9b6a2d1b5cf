from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Query

from mediawatch.schemas.data_ingestion import IngestRequest
from mediawatch.schemas.analysis_result import DashboardStats, IngestResponse, TimeSeriesPoint
from mediawatch.services.container import Container, get_container
from mediawatch.services.pipeline import EPOCH
from mediawatch.services.stats_service import dashboard_stats, time_series

router = APIRouter(tags=["posts"])


@router.post("/posts", response_model=IngestResponse)
def ingest_posts(request: IngestRequest, container: Container = Depends(get_container)) -> IngestResponse:
    """
    Classify and store a batch of posts, then evaluate alert rules against them.
    """
    posts, alerts = container.ingestion.ingest(request.posts)
    return IngestResponse(posts=posts, alerts=alerts)


@router.get("/stats", response_model=DashboardStats)
def get_stats(container: Container = Depends(get_container)) -> DashboardStats:
    return dashboard_stats(container.post_store.posts_since(EPOCH))


@router.get("/stats/timeseries", response_model=List[TimeSeriesPoint])
def get_time_series(
    hours: int = Query(24, ge=1, le=24 * 30),
    container: Container = Depends(get_container),
) -> List[TimeSeriesPoint]:
    now = datetime.now(timezone.utc)
    return time_series(container.post_store.posts_since(EPOCH), now=now, hours=hours)
