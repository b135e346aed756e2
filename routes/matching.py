"""
Matching API routes.
"""

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool
import structlog

from models.matching import SuggestRequest, SuggestionResponse
from services.matching_service import get_matching_service
from routes.common import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/suggest", response_model=list[SuggestionResponse])
async def suggest(data: SuggestRequest):
    """
    Ranked catalog suggestions for one item.

    Returns up to 3 suggestions, or 5 when the catalog has entries from
    the same manufacturer.
    """
    try:
        service = get_matching_service()
        return await run_in_threadpool(
            service.suggest,
            name=data.name,
            manufacturer=data.manufacturer,
            strategy=data.strategy,
            top_k=data.top_k
        )
    except Exception as e:
        return handle_error(e)
