from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from meetmogger.core.db import MongoModel
from meetmogger.utils import now


class Theme(BaseModel):
    """Main topic of the call."""

    classification: str = Field(..., description="Short category, e.g. 'Billing Inquiry'")
    reasoning: str = Field(..., description="Why this classification was chosen")


class SentimentPolarity(str, Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"


class Sentiment(BaseModel):
    polarity: SentimentPolarity = Field(..., description="Dominant sentiment of the call")
    tones: list[str] = Field(..., description="Emotional tones detected, e.g. 'Frustrated'")


class CallAnalysis(BaseModel):
    """Structured analysis of a call transcript."""

    theme: Theme
    sentiment: Sentiment
    problems: list[str] = Field(..., description="Problems raised by the customer")
    solutions: list[str] = Field(..., description="Solutions proposed by the agent")
    action_items: list[str] = Field(..., alias="actionItems", description="Concrete next steps")
    summary: str = Field(..., description="One-paragraph summary of the conversation")

    model_config = ConfigDict(populate_by_name=True)


class AnalysisLog(MongoModel):
    """Log of one transcript analysis attempt."""

    user_id: UUID
    transcript_length: int
    llm_response: str | None
    model: str
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None
    error_message: str | None = None
    duration_ms: int
    created_at: datetime = Field(default_factory=now)
