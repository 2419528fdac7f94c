ANALYSIS_SYSTEM_PROMPT = """You analyze transcribed customer support calls.

Based on the conversation, provide the call's theme, sentiment, identified problems,
proposed solutions, action items, and a final summary.

Respond with a single JSON object with exactly this structure:
{
  "theme": {
    "classification": "string - short category of the call, e.g. Internet Connection Issue",
    "reasoning": "string - why this classification was chosen"
  },
  "sentiment": {
    "polarity": "Positive|Negative|Neutral",
    "tones": ["emotional tones detected, e.g. Frustrated, Relieved, Helpful"]
  },
  "problems": ["specific problems or issues mentioned by the customer"],
  "solutions": ["solutions or fixes proposed by the agent"],
  "actionItems": ["concrete next steps for the agent or the customer"],
  "summary": "string - concise one-paragraph summary of the whole conversation"
}

All keys are required. Use empty arrays when nothing applies. Output JSON only."""


def build_analysis_user_prompt(transcript: str) -> str:
    """Wrap the transcript in delimiters so it cannot be confused with instructions."""
    return f"Transcript to analyze:\n---\n{transcript}\n---"
