"""Tests for the transcript analysis service."""

import json
from types import SimpleNamespace
from uuid import UUID

import pytest
from pymongo.errors import NetworkTimeout

from meetmogger.core.modules.analysis import service as analysis_module
from meetmogger.errors import ExternalServiceError, ValidationError

USER_ID = UUID("87654321-4321-8765-4321-876543218765")

VALID_ANALYSIS = {
    "theme": {"classification": "Billing Inquiry", "reasoning": "Customer asks about a charge"},
    "sentiment": {"polarity": "Neutral", "tones": ["Calm", "Helpful"]},
    "problems": ["Unexpected charge"],
    "solutions": ["Refund issued"],
    "actionItems": ["Confirm refund in 3 days"],
    "summary": "Customer questioned a charge and received a refund.",
}


def make_response(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=120, completion_tokens=80, total_tokens=200),
    )


@pytest.fixture
def llm_calls(monkeypatch):
    """Replace litellm.acompletion; set .content or .error on the returned namespace."""
    calls = SimpleNamespace(kwargs=[], content=json.dumps(VALID_ANALYSIS), error=None)

    async def fake_acompletion(**kwargs):
        calls.kwargs.append(kwargs)
        if calls.error is not None:
            raise calls.error
        return make_response(calls.content)

    monkeypatch.setattr(analysis_module.litellm, "acompletion", fake_acompletion)
    return calls


@pytest.fixture
def analysis(core):
    return core.services.analysis


class TestAnalyze:
    """Tests for AnalysisService.analyze."""

    async def test_returns_parsed_analysis(self, analysis, llm_calls):
        """Test that a valid provider answer is returned as CallAnalysis."""
        result = await analysis.analyze("Agent: Hello. Customer: My bill is wrong.", USER_ID)

        assert result.theme.classification == "Billing Inquiry"
        assert result.action_items == ["Confirm refund in 3 days"]

    async def test_provider_called_with_json_format(self, analysis, llm_calls, config):
        """Test the request sent to the provider."""
        await analysis.analyze("Customer: My bill is wrong.", USER_ID)

        kwargs = llm_calls.kwargs[0]
        assert kwargs["model"] == config.llm_model
        assert kwargs["api_key"] == config.llm_api_key
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["timeout"] == config.llm_timeout
        assert kwargs["messages"][0]["role"] == "system"
        assert "Customer: My bill is wrong." in kwargs["messages"][1]["content"]

    async def test_success_logged(self, analysis, llm_calls, analysis_logs_collection):
        """Test that a successful attempt is recorded with usage."""
        await analysis.analyze("Customer: My bill is wrong.", USER_ID)

        [log] = analysis_logs_collection.documents
        assert log["user_id"] == USER_ID
        assert log["transcript_length"] == len("Customer: My bill is wrong.")
        assert log["total_tokens"] == 200
        assert log["error_message"] is None
        assert log["llm_response"] == llm_calls.content

    @pytest.mark.parametrize("transcript", ["", "   \n"])
    async def test_empty_transcript_rejected(self, analysis, llm_calls, transcript):
        with pytest.raises(ValidationError, match="Transcript is required"):
            await analysis.analyze(transcript, USER_ID)
        assert llm_calls.kwargs == []

    async def test_oversized_transcript_rejected(self, analysis, llm_calls):
        with pytest.raises(ValidationError, match="too long"):
            await analysis.analyze("x" * 1001, USER_ID)
        assert llm_calls.kwargs == []

    async def test_missing_api_key_rejected(self, analysis, llm_calls, config, analysis_logs_collection):
        """Test that analysis without a configured key fails before calling the provider."""
        config.llm_api_key = ""

        with pytest.raises(ValidationError, match="API key not configured"):
            await analysis.analyze("Customer: hi", USER_ID)
        assert llm_calls.kwargs == []
        assert analysis_logs_collection.documents[0]["error_message"] == "LLM API key not configured"

    async def test_provider_error_wrapped(self, analysis, llm_calls, analysis_logs_collection):
        """Test that provider exceptions surface as ExternalServiceError and are logged."""
        llm_calls.error = RuntimeError("quota exceeded")

        with pytest.raises(ExternalServiceError, match="Failed to get analysis"):
            await analysis.analyze("Customer: hi", USER_ID)
        assert analysis_logs_collection.documents[0]["error_message"] == "Failed to get analysis from the LLM provider"

    async def test_empty_content_rejected(self, analysis, llm_calls, analysis_logs_collection):
        llm_calls.content = ""

        with pytest.raises(ExternalServiceError, match="empty response"):
            await analysis.analyze("Customer: hi", USER_ID)
        assert len(analysis_logs_collection.documents) == 1

    async def test_invalid_content_rejected_and_logged(self, analysis, llm_calls, analysis_logs_collection):
        """Test that a non-JSON answer fails and its raw text is kept in the log."""
        llm_calls.content = "I think the call was about billing."

        with pytest.raises(ExternalServiceError, match="invalid JSON"):
            await analysis.analyze("Customer: hi", USER_ID)
        [log] = analysis_logs_collection.documents
        assert log["llm_response"] == "I think the call was about billing."
        assert log["error_message"] == "LLM returned invalid JSON"

    async def test_log_write_failure_does_not_mask_result(self, analysis, llm_calls, analysis_logs_collection):
        """Test that failing to store the log still returns the analysis."""
        analysis_logs_collection.fail_with = NetworkTimeout("timed out")

        result = await analysis.analyze("Customer: hi", USER_ID)

        assert result.summary == VALID_ANALYSIS["summary"]
