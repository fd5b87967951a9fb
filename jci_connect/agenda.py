"""AI-drafted meeting agendas via Gemini."""

import logging
from typing import Any, Optional

from google import genai

from jci_connect.config import AgentConfig

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a helpful, organized, and professional JCI administrator. "
    "JCI is a network of young active citizens creating positive change. "
    "Maintain a tone that is empowering, professional, and efficient."
)

AGENDA_PROMPT = """You are an expert secretary for the Junior Chamber International (JCI).
Create a structured, professional meeting agenda for a {duration}-minute "{category}" meeting about: "{topic}".

Format the output as a clean Markdown list with time allocations for each item.
Keep it concise and action-oriented.
Do not include a preamble or postscript, just the agenda."""

MISSING_KEY_MESSAGE = "Error: API Key is missing. Please configure the environment."
FAILURE_MESSAGE = "Failed to generate agenda due to an error. Please try again."
EMPTY_MESSAGE = "Could not generate agenda."


class AgendaGenerator:
    def __init__(self, config: Optional[AgentConfig] = None):
        self.config = config or AgentConfig()
        self._client: Any = None
        if self.config.is_configured:
            self._client = genai.Client(api_key=self.config.api_key)

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def generate_agenda(self, topic: str, category: str, duration: int) -> str:
        """Markdown agenda text; failures come back as a message for the user."""
        if not self.is_configured:
            logger.warning("Agenda requested but no Gemini API key is configured")
            return MISSING_KEY_MESSAGE

        from google.genai import types as gt

        prompt = AGENDA_PROMPT.format(duration=duration, category=category, topic=topic)
        try:
            response = await self._client.aio.models.generate_content(
                model=self.config.model,
                contents=[prompt],
                config=gt.GenerateContentConfig(
                    system_instruction=SYSTEM_INSTRUCTION,
                    temperature=self.config.temperature,
                ),
            )
        except Exception:
            logger.exception("Gemini agenda generation failed")
            return FAILURE_MESSAGE

        return response.text or EMPTY_MESSAGE


_generator: Optional[AgendaGenerator] = None


def get_agenda_generator() -> AgendaGenerator:
    global _generator
    if _generator is None:
        _generator = AgendaGenerator()
    return _generator


def init_agenda_generator(config: Optional[AgentConfig]) -> AgendaGenerator:
    global _generator
    _generator = AgendaGenerator(config)
    logger.info(f"Agenda generator initialized: configured={_generator.is_configured}")
    return _generator
