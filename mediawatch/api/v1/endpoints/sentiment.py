from fastapi import APIRouter, Depends

from mediawatch.schemas.data_ingestion import ClassifyRequest
from mediawatch.schemas.analysis_result import RetrainResponse, SentimentResult
from mediawatch.services.container import Container, get_container

router = APIRouter(tags=["sentiment"])


@router.post("/classify", response_model=SentimentResult)
def classify(request: ClassifyRequest, container: Container = Depends(get_container)) -> SentimentResult:
    return container.classifier.classify(request.text)


@router.post("/sentiment/retrain", response_model=RetrainResponse)
def retrain(container: Container = Depends(get_container)) -> RetrainResponse:
    """
    Retrain the sentiment model on processed posts from the store.
    """
    trained_on = container.ingestion.retrain_from_store()
    return RetrainResponse(trained_on=trained_on)
