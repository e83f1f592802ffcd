"""
Analysis API Routes

No business logic lives here.
Routes validate input, call services, return responses.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field, HttpUrl
from pydantic.alias_generators import to_camel

from pageaudit.api.dependencies import AnalysisServiceDep
from pageaudit.core.errors import FetchFailure
from pageaudit.reporting.aggregator import AnalysisReport

logger = structlog.get_logger(__name__)
router = APIRouter()

MAX_MARKUP_LENGTH = 5_000_000


# ─────────────────────────────────────────────
# Request Schemas
# ─────────────────────────────────────────────

class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: HttpUrl
    include_narrative: bool = True
    include_grammar: bool = True


class AnalyzeMarkupRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: HttpUrl
    markup: str = Field(max_length=MAX_MARKUP_LENGTH)
    include_narrative: bool = False
    include_grammar: bool = False


# ─────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────

@router.post(
    "",
    response_model=AnalysisReport,
    summary="Analyze a web page",
    description="Fetches the page, scores it and returns the full report.",
)
async def analyze_url(request: AnalyzeRequest, service: AnalysisServiceDep) -> AnalysisReport:
    url = str(request.url)
    try:
        return await service.analyze_url(
            url,
            include_narrative=request.include_narrative,
            include_grammar=request.include_grammar,
        )
    except FetchFailure as exc:
        logger.warning("Analysis aborted, page not retrievable", url=url, reason=exc.reason)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.post(
    "/markup",
    response_model=AnalysisReport,
    summary="Analyze supplied markup",
    description="Scores markup supplied by the caller; url is used to resolve relative links.",
)
async def analyze_markup(request: AnalyzeMarkupRequest, service: AnalysisServiceDep) -> AnalysisReport:
    return await service.analyze_markup(
        request.markup,
        str(request.url),
        include_narrative=request.include_narrative,
        include_grammar=request.include_grammar,
    )
