import time
from typing import Any
from uuid import UUID

import litellm
import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from meetmogger.core.core import Service
from meetmogger.core.modules.analysis.models import AnalysisLog, CallAnalysis
from meetmogger.core.modules.analysis.prompts import ANALYSIS_SYSTEM_PROMPT, build_analysis_user_prompt
from meetmogger.core.modules.analysis.utils import parse_analysis_response
from meetmogger.errors import ExternalServiceError, UserError, ValidationError

logger = structlog.get_logger(__name__)


class AnalysisService(Service):
    """Forwards call transcripts to the LLM provider for structured analysis."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("analysis_logs")

    async def on_start(self) -> None:
        """Create indexes for analysis logs."""
        await self._collection.create_index([("user_id", 1)])
        await self._collection.create_index([("created_at", -1)])

    def validate_transcript(self, transcript: str) -> None:
        if not transcript.strip():
            raise ValidationError("Transcript is required")
        max_chars = self.core.config.analysis_max_transcript_chars
        if len(transcript) > max_chars:
            raise ValidationError(f"Transcript is too long (max {max_chars} characters)")

    async def analyze(self, transcript: str, user_id: UUID) -> CallAnalysis:
        """
        Analyze a call transcript.

        Every attempt that reaches the provider stage is recorded in analysis_logs,
        whether it succeeds or not.

        Args:
            transcript: Raw transcript text
            user_id: User ID for logging

        Returns:
            CallAnalysis parsed from the provider's JSON answer

        Raises:
            ValidationError: Empty or oversized transcript, or no API key configured
            ExternalServiceError: Provider failure or unusable answer
        """
        self.validate_transcript(transcript)

        config = self.core.config
        start_time = time.time()
        llm_response_content = None
        usage_tokens = None

        try:
            if not config.llm_api_key:
                raise ValidationError("LLM API key not configured")  # noqa: TRY301

            try:
                response = await litellm.acompletion(
                    model=config.llm_model,
                    messages=[
                        {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
                        {"role": "user", "content": build_analysis_user_prompt(transcript)},
                    ],
                    api_key=config.llm_api_key,
                    response_format={"type": "json_object"},
                    timeout=config.llm_timeout,
                )
            except Exception as e:  # noqa: BLE001
                logger.warning("llm_call_failed", model=config.llm_model, error=str(e))
                raise ExternalServiceError("Failed to get analysis from the LLM provider") from e

            usage = getattr(response, "usage", None)
            if usage:
                usage_tokens = (usage.prompt_tokens, usage.completion_tokens, usage.total_tokens)

            llm_response_content = response.choices[0].message.content
            if not llm_response_content:
                raise ExternalServiceError("LLM returned empty response")  # noqa: TRY301

            analysis = parse_analysis_response(llm_response_content)
        except UserError as e:
            await self._write_log(user_id, transcript, llm_response_content, usage_tokens, start_time, str(e))
            raise

        await self._write_log(user_id, transcript, llm_response_content, usage_tokens, start_time, None)
        logger.info("transcript_analyzed", user_id=str(user_id), transcript_length=len(transcript))
        return analysis

    async def _write_log(
        self,
        user_id: UUID,
        transcript: str,
        llm_response: str | None,
        usage_tokens: tuple[int, int, int] | None,
        start_time: float,
        error_message: str | None,
    ) -> None:
        log = AnalysisLog(
            user_id=user_id,
            transcript_length=len(transcript),
            llm_response=llm_response,
            model=self.core.config.llm_model,
            prompt_tokens=usage_tokens[0] if usage_tokens else None,
            completion_tokens=usage_tokens[1] if usage_tokens else None,
            total_tokens=usage_tokens[2] if usage_tokens else None,
            error_message=error_message,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        try:
            await self._collection.insert_one(log.to_mongo())
        except PyMongoError:
            logger.exception("analysis_log_write_failed", user_id=str(user_id))
