import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from mediawatch.schemas.data_ingestion import AlertRule, AlertRuleCreate
from mediawatch.schemas.analysis_result import AlertEvent
from mediawatch.services.container import Container, get_container

router = APIRouter(tags=["alerts"])


@router.post("/alerts/evaluate", response_model=List[AlertEvent])
def evaluate_alerts(container: Container = Depends(get_container)) -> List[AlertEvent]:
    return container.evaluator.evaluate_alerts()


@router.get("/alerts/rules", response_model=List[AlertRule])
def list_rules(container: Container = Depends(get_container)) -> List[AlertRule]:
    return container.rule_store.all()


@router.post("/alerts/rules", response_model=AlertRule, status_code=201)
def create_rule(request: AlertRuleCreate, container: Container = Depends(get_container)) -> AlertRule:
    rule = AlertRule(id=uuid.uuid4().hex, **request.model_dump())
    return container.rule_store.add(rule)


@router.get("/alerts/rules/{rule_id}", response_model=AlertRule)
def get_rule(rule_id: str, container: Container = Depends(get_container)) -> AlertRule:
    rule = container.rule_store.get(rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail=f"Alert rule {rule_id} not found")
    return rule
