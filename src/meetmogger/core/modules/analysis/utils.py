import json

from pydantic import ValidationError as PydanticValidationError

from meetmogger.core.modules.analysis.models import CallAnalysis
from meetmogger.errors import ExternalServiceError


def strip_code_fence(content: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```) if present."""
    text = content.strip()
    if not text.startswith("```"):
        return text
    lines = text.splitlines()[1:]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines).strip()


def parse_analysis_response(content: str) -> CallAnalysis:
    """Parse the provider's JSON answer into a CallAnalysis.

    Raises:
        ExternalServiceError: If the content is not JSON or does not match the analysis shape
    """
    try:
        data = json.loads(strip_code_fence(content))
    except json.JSONDecodeError as e:
        raise ExternalServiceError("LLM returned invalid JSON") from e

    if not isinstance(data, dict):
        raise ExternalServiceError("LLM returned JSON that is not an object")

    try:
        return CallAnalysis.model_validate(data)
    except PydanticValidationError as e:
        missing = sorted({str(err["loc"][0]) for err in e.errors() if err["type"] == "missing" and err["loc"]})
        if missing:
            raise ExternalServiceError(f"Analysis missing required fields: {', '.join(missing)}") from e
        raise ExternalServiceError("Analysis does not match the expected structure") from e
