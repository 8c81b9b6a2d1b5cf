from fastapi import APIRouter, Depends, Query

from mediawatch.schemas.analysis_result import TrendPrediction
from mediawatch.services.container import Container, get_container

router = APIRouter(tags=["trends"])


@router.get("/trends", response_model=TrendPrediction)
def get_trends(
    hours_ahead: int = Query(24, ge=1, le=24 * 7),
    container: Container = Depends(get_container),
) -> TrendPrediction:
    return container.predictor.predict_trends(hours_ahead)
