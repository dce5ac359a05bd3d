from typing import Any, Dict

from nora_api.ai.llm_client import LLMClient
from nora_api.ai.prompt_templates.safety import build_safety_messages
from nora_api.ai.response_parser import determine_severity
from nora_api.config import settings


class SafetyService:
    """
    Scam check for pasted text (messages, call notes, emails).
    Not quota-gated.
    """

    MAX_TOKENS = 600

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def analyze(self, content: str) -> Dict[str, Any]:
        analysis = await self.llm.complete(
            messages=build_safety_messages(content),
            model=settings.OPENAI_MODEL,
            temperature=0.3,
            max_tokens=self.MAX_TOKENS,
        )

        return {
            "analysis": analysis,
            "isSafe": "warning" not in analysis.lower(),
            "severity": determine_severity(analysis),
        }
