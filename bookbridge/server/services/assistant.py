"""
Ask-AI study helper.

Answers study doubts with a pydantic-ai agent. The assistant is optional:
without ``BOOKBRIDGE_ASSISTANT_MODEL`` the endpoint reports 503.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_ai import Agent

from bookbridge.core.errors import ServiceUnavailableError
from bookbridge.core.logging_config import get_logger
from bookbridge.server.core.config import settings

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a patient study helper for school and college students. "
    "Explain the answer step by step in simple language, show worked examples "
    "for maths and science questions, and keep the reply focused on the question asked."
)


def build_agent(model) -> Agent:
    return Agent(model, output_type=str, system_prompt=SYSTEM_PROMPT)


@lru_cache(maxsize=1)
def get_assistant_agent() -> Optional[Agent]:
    model = settings.assistant.model
    if not model:
        logger.info("Assistant model not configured; Ask-AI is disabled")
        return None
    return build_agent(model)


class AssistantService:
    """Forwards questions to the configured agent."""

    def __init__(self, agent: Optional[Agent]) -> None:
        self.agent = agent

    async def ask(self, question: str) -> str:
        if self.agent is None:
            raise ServiceUnavailableError("The study assistant is not configured")
        question = question.strip()
        result = await self.agent.run(question)
        logger.debug(f"Assistant answered a question of {len(question)} characters")
        return result.output
