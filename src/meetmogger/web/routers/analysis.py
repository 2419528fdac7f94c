from fastapi import APIRouter
from pydantic import BaseModel, Field

from meetmogger.core.modules.analysis.models import CallAnalysis
from meetmogger.web.deps import AppDep, PrincipalDep
from meetmogger.web.openapi import ErrorResponse

router = APIRouter(tags=["analysis"])


class AnalyzeRequest(BaseModel):
    transcript: str = Field("", description="Call transcript text")


class AnalyzeResponse(BaseModel):
    success: bool = True
    analysis: CallAnalysis


@router.post(
    "/analyze",
    summary="Analyze call transcript",
    description="Send a call transcript to the LLM provider and get theme, sentiment, problems, solutions, "
    "action items and a summary.",
    operation_id="analyzeTranscript",
    responses={
        200: {"description": "Structured analysis"},
        400: {"model": ErrorResponse, "description": "Empty or oversized transcript, or LLM not configured"},
        401: {"model": ErrorResponse, "description": "Missing or expired token"},
        403: {"model": ErrorResponse, "description": "Invalid token"},
        502: {"model": ErrorResponse, "description": "LLM provider failed or returned an unusable answer"},
    },
)
async def analyze(request: AnalyzeRequest, app: AppDep, principal: PrincipalDep) -> AnalyzeResponse:
    return AnalyzeResponse(analysis=await app.analyze_transcript(principal, request.transcript))
