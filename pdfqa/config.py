"""Configuration management for the pdfqa application."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"

if env_path.exists():
    load_dotenv(env_path)

OUTPUT_MODES = ("text", "structured")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Application configuration loaded from environment variables."""

    # Embedding service (OpenAI)
    @classmethod
    def get_embedding_api_key(cls) -> str:
        """Get the embedding-service API key from environment variables.

        Returns:
            OpenAI API key from environment or empty string if not set.
        """
        return os.getenv("OPENAI_API_KEY", "")

    OPENAI_BASE_URL: str | None = os.getenv("OPENAI_BASE_URL")
    EMBEDDING_MODEL: str = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")

    # Chat service (Groq, OpenAI-compatible endpoint)
    @classmethod
    def get_chat_api_key(cls) -> str:
        """Get the chat-model API key from environment variables.

        Returns:
            Groq API key from environment or empty string if not set.
        """
        return os.getenv("GROQ_API_KEY", "")

    CHAT_BASE_URL: str = os.getenv("CHAT_BASE_URL", "https://api.groq.com/openai/v1")
    CHAT_MODEL: str = os.getenv("CHAT_MODEL", "llama-3.1-8b-instant")
    CHAT_TEMPERATURE: float = float(os.getenv("CHAT_TEMPERATURE", "0.7"))

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    OPENAI_LOG_LEVEL: str = os.getenv("OPENAI_LOG_LEVEL", "WARNING").upper()

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Ingestion Configuration
    CHUNK_SIZE: int = int(os.getenv("CHUNK_SIZE", "1000"))
    CHUNK_OVERLAP: int = int(os.getenv("CHUNK_OVERLAP", "200"))
    SOURCE_DOCUMENT_PATH: Path = Path(
        os.getenv("SOURCE_DOCUMENT_PATH", "data/s.pdf")
    )
    FAISS_INDEX_PATH: Path = Path(
        os.getenv("FAISS_INDEX_PATH", "data/faiss/faiss.index")
    )

    # Question Answering Configuration
    RETRIEVAL_TOP_K: int = int(os.getenv("RETRIEVAL_TOP_K", "2"))
    OUTPUT_MODE: str = os.getenv("OUTPUT_MODE", "structured").lower()
    USE_MEMORY: bool = _env_flag("USE_MEMORY", "true")
    MAX_HISTORY_MESSAGES: int = int(os.getenv("MAX_HISTORY_MESSAGES", "50"))

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration values.

        Raises:
            ValueError: If an API key is missing or OUTPUT_MODE is unknown.
        """
        missing = []
        if not cls.get_embedding_api_key():
            missing.append("OPENAI_API_KEY")
        if not cls.get_chat_api_key():
            missing.append("GROQ_API_KEY")
        if missing:
            msg = (
                f"{', '.join(missing)} required. "
                "Please set it in .env file or environment."
            )
            raise ValueError(msg)

        if cls.OUTPUT_MODE not in OUTPUT_MODES:
            msg = f"OUTPUT_MODE must be one of {OUTPUT_MODES}, got {cls.OUTPUT_MODE!r}"
            raise ValueError(msg)

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment.

        Returns:
            True if environment is development.
        """
        return cls.ENVIRONMENT.lower() == "development"

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment.

        Returns:
            True if environment is production.
        """
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def setup_logging(cls) -> None:
        """Configure logging once at application startup.

        Console output, one readable format, level taken from LOG_LEVEL.
        The HTTP client libraries log at OPENAI_LOG_LEVEL.
        """
        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )

        client_level = getattr(logging, cls.OPENAI_LOG_LEVEL, logging.WARNING)
        for name in ("openai", "httpx"):
            logging.getLogger(name).setLevel(client_level)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger with the specified name.

        Args:
            name: Logger name (typically __name__)

        Returns:
            Logger instance
        """
        return logging.getLogger(name)


config = Config()
