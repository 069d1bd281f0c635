"""Chat-completion client used to generate answers."""

from collections.abc import Sequence
from typing import Any

from openai import OpenAI, OpenAIError

from .config import config
from .errors import RemoteServiceError
from .models import ConversationTurn

logger = config.get_logger(__name__)

OPENAI_ROLES = {"system": "system", "human": "user", "assistant": "assistant"}


def content_to_text(content: Any) -> str:
    """Flatten a message content into text.

    A sequence of parts is joined with single spaces in arrival order; text
    parts given as ``{"type": "text", "text": ...}`` contribute their text.

    Returns:
        The message text, empty for a missing content.
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list | tuple):
        parts = []
        for part in content:
            if isinstance(part, dict):
                parts.append(str(part.get("text", part)))
            else:
                parts.append(str(getattr(part, "text", part)))
        return " ".join(parts)
    return str(content)


class AnswerGenerator:
    """Sends composed prompts to the hosted chat model."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        base_url: str | None = None,
    ) -> None:
        """Initialize the chat client.

        Args:
            api_key: Chat API key. If None, reads GROQ_API_KEY.
            model: Chat model name. If None, uses config.CHAT_MODEL.
            temperature: Sampling temperature. If None, uses
                config.CHAT_TEMPERATURE.
            base_url: OpenAI-compatible endpoint. If None, uses
                config.CHAT_BASE_URL.
        """
        self.client = OpenAI(
            api_key=api_key or config.get_chat_api_key(),
            base_url=base_url or config.CHAT_BASE_URL,
            max_retries=0,
        )
        self.model = model or config.CHAT_MODEL
        self.temperature = (
            config.CHAT_TEMPERATURE if temperature is None else temperature
        )

    def generate(self, prompt: Sequence[ConversationTurn]) -> str:
        """Send the prompt once and return the model's text.

        Returns:
            The assistant message text.

        Raises:
            RemoteServiceError: If the chat API call fails.
        """
        messages = [
            {"role": OPENAI_ROLES[turn.role], "content": turn.content}
            for turn in prompt
        ]
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
            )
        except OpenAIError as exc:
            logger.exception("Chat completion failed")
            msg = f"Chat completion request failed: {exc}"
            raise RemoteServiceError(msg) from exc

        return content_to_text(response.choices[0].message.content)
