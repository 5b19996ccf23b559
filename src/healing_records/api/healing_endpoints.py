"""
Healing record API endpoints.

This module provides REST endpoints for registering selectors, saving healing
attempts, reading ranked candidates and reporting healing feedback.
"""

import logging
from typing import Dict, List, Optional, Any
from fastapi import APIRouter, HTTPException, Depends, Request
from pydantic import BaseModel, Field

from ..core.config import settings
from ..core.config_loader import get_record_config
from ..core.exceptions import InternalConsistencyError, MissingSelectorError
from ..core.models import CandidateResult, HealingQuery, HealingRequest, Locator
from ..data_access import Database
from ..services import HealingService, MetricsGateway

logger = logging.getLogger(__name__)

# Global healing service instance
_healing_service: Optional[HealingService] = None

router = APIRouter(prefix="/healenium", tags=["healing"])

# Pydantic models for API requests/responses
class LocatorDto(BaseModel):
    type: str = "css"
    value: str

    def to_model(self) -> Locator:
        return Locator(value=self.value, type=self.type)

class HealingResultDto(BaseModel):
    locator: LocatorDto
    score: float

    def to_model(self) -> CandidateResult:
        return CandidateResult(locator=self.locator.to_model(), score=self.score)

class SelectorRequest(BaseModel):
    class_name: str
    method_name: str
    locator: LocatorDto
    command: str = "findElement"
    url: Optional[str] = None

class HealingRequestDto(BaseModel):
    locator: LocatorDto
    url: str
    command: str = "findElement"
    page_content: str
    results: List[HealingResultDto] = Field(..., min_length=1)
    used_result: HealingResultDto
    screenshot: Optional[str] = None
    metrics: Optional[str] = None

class ResultsRequest(BaseModel):
    locator: LocatorDto
    url: Optional[str] = None
    command: str = "findElement"

class FeedbackRequest(BaseModel):
    healing_result_id: int
    success_healing: bool

def get_healing_service() -> HealingService:
    """Get or create the global healing service instance."""
    global _healing_service

    if _healing_service is None:
        config = get_record_config()
        database = Database(settings.DATABASE_PATH, timeout=settings.DATABASE_TIMEOUT)
        database.initialize_schema()
        _healing_service = HealingService(
            database,
            config,
            metrics_gateway=MetricsGateway(settings.METRICS_SERVICE_URL, timeout=settings.METRICS_TIMEOUT)
        )
        logger.info(f"🚀 Healing service initialized with database {settings.DATABASE_PATH}")

    return _healing_service

@router.get("/health")
async def health():
    return {"status": "success"}

@router.post("/selector")
def register_selector(dto: SelectorRequest, service: HealingService = Depends(get_healing_service)) -> Dict[str, Any]:
    """Register the selector of a locator used in a test method."""
    selector = service.selector_service.register_selector(
        dto.class_name, dto.method_name, dto.locator.to_model(), dto.command, dto.url,
        service.config.url_for_key
    )
    return {"status": "success", "selector_id": selector.uid}

@router.post("/healing")
def save_healing(
    dto: HealingRequestDto,
    request: Request,
    service: HealingService = Depends(get_healing_service)
) -> Dict[str, Any]:
    """Save a healing attempt and its candidate results."""
    healing_request = HealingRequest(
        locator=dto.locator.to_model(),
        url=dto.url,
        command=dto.command,
        page_content=dto.page_content,
        results=[result.to_model() for result in dto.results],
        used_result=dto.used_result.to_model(),
        screenshot=dto.screenshot,
        metrics=dto.metrics
    )
    try:
        selected = service.save_healing(healing_request, dict(request.headers))
    except MissingSelectorError as e:
        logger.warning(f"[Save Healing] {e}")
        raise HTTPException(status_code=404, detail=str(e))
    except InternalConsistencyError as e:
        logger.error(f"❌ {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {"status": "success", "healing_result": selected.to_dict()}

@router.get("/healing")
def get_healings(
    class_name: Optional[str] = None,
    method_name: Optional[str] = None,
    locator: Optional[str] = None,
    url: Optional[str] = None,
    service: HealingService = Depends(get_healing_service)
) -> List[Dict[str, Any]]:
    """Get the best known candidates per selector."""
    query = HealingQuery(class_name=class_name, method_name=method_name, locator=locator, url=url)
    return [view.to_dict() for view in service.get_healings(query)]

@router.post("/healing/results")
def get_healing_results(dto: ResultsRequest, service: HealingService = Depends(get_healing_service)) -> List[Dict[str, Any]]:
    """Get every recorded candidate for the selector of a lookup."""
    results = service.get_healing_results(dto.locator.to_model(), dto.url, dto.command)
    return [result.to_dict() for result in results]

@router.post("/healing/success")
def save_success_healing(dto: FeedbackRequest, service: HealingService = Depends(get_healing_service)) -> Dict[str, Any]:
    """Record whether a healing result was correct."""
    result = service.apply_feedback(dto.healing_result_id, dto.success_healing)
    return {"status": "success", "updated": result is not None}

@router.get("/report/{session_key}")
def get_report(session_key: str, service: HealingService = Depends(get_healing_service)) -> Dict[str, Any]:
    """Get report records of a test session."""
    records = service.report_service.get_report(session_key)
    return {"session_key": session_key, "records": [record.to_dict() for record in records]}
