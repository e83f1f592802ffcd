"""
FastAPI dependencies for request handlers.
"""

from typing import Annotated

from fastapi import Depends, Request

from pageaudit.services.analysis import AnalysisService


def get_analysis_service(request: Request) -> AnalysisService:
    """The service built in the application lifespan."""
    return request.app.state.analysis_service


AnalysisServiceDep = Annotated[AnalysisService, Depends(get_analysis_service)]
