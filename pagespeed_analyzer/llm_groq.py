from __future__ import annotations

import json
import logging
from typing import Optional

from groq import APIError, AsyncGroq

from pagespeed_analyzer.config import DEFAULT_GROQ_MODEL, GROQ_TIMEOUT_SECONDS
from pagespeed_analyzer.errors import GenerationFailure
from pagespeed_analyzer.summarizer import Summary

logger = logging.getLogger(__name__)

FALLBACK_ANALYSIS = "Could not generate analysis."
TEMPERATURE = 0.4
MAX_TOKENS = 2048

SYSTEM_PROMPT = (
    "You are an expert web performance engineer. Your goal is to provide a clear, concise, "
    "and actionable report based on Lighthouse data. Focus on the most impactful changes a "
    "developer can make. Use markdown for formatting."
)


def build_user_prompt(summary: Summary) -> str:
    return f"""
Please analyze the following Lighthouse audit data.

Provide a report with three sections:
1.  **Overall Performance Summary:** A brief, one-paragraph summary of the site's performance based on the score.
2.  **Top 3 Actionable Recommendations:** List the three most important optimizations. For each, explain *why* it's important and provide a clear, simple code example if applicable (e.g., how to preload a font, etc.).
3.  **Key Metrics Overview:** A simple list of the core web vital metrics and their values.

Here is the data:
{json.dumps(summary.to_dict(), ensure_ascii=False, indent=2)}
""".strip()


def build_groq_client(api_key: Optional[str]) -> Optional[AsyncGroq]:
    if not api_key:
        logger.warning("GROQ_API_KEY is not set; /api/get-analysis will fail until it is configured.")
        return None
    return AsyncGroq(api_key=api_key, timeout=GROQ_TIMEOUT_SECONDS, max_retries=0)


class ReportGenerator:
    def __init__(self, client: Optional[AsyncGroq], model: str = DEFAULT_GROQ_MODEL):
        self.client = client
        self.model = model

    async def generate(self, summary: Summary) -> str:
        if self.client is None:
            logger.error("Groq client is not configured: GROQ_API_KEY is missing.")
            raise GenerationFailure()

        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(summary)},
                ],
                temperature=TEMPERATURE,
                max_tokens=MAX_TOKENS,
            )
        except APIError as exc:
            logger.error("Groq API error: %s", exc)
            raise GenerationFailure() from exc

        choices = completion.choices or []
        content = choices[0].message.content if choices else None
        return (content or "").strip() or FALLBACK_ANALYSIS
