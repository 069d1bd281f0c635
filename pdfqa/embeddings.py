"""OpenAI embeddings service."""

import numpy as np
from openai import OpenAI, OpenAIError

from .config import config
from .errors import RemoteServiceError

logger = config.get_logger(__name__)


class EmbeddingService:
    """Handles OpenAI embeddings generation."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
    ) -> None:
        """Initialize the EmbeddingService with an API key and model.

        Args:
            api_key: Embedding API key. If None,
                reads from OPENAI_API_KEY environment variable.
            model: Embedding model name. If None, uses config.EMBEDDING_MODEL.
            base_url: Service base URL. If None, uses config.OPENAI_BASE_URL.
        """
        self.client = OpenAI(
            api_key=api_key or config.get_embedding_api_key(),
            base_url=base_url or config.OPENAI_BASE_URL,
            max_retries=0,
        )
        self.model = model or config.EMBEDDING_MODEL

    def get_embedding(self, text: str) -> np.ndarray:
        """Get embedding for a single text.

        Args:
            text: The input text to generate an embedding for.

        Returns:
            np.ndarray: The embedding vector for the input text.

        Raises:
            RemoteServiceError: If the embedding API call fails.
        """
        try:
            response = self.client.embeddings.create(
                model=self.model,
                input=text,
            )
        except OpenAIError as exc:
            logger.exception("Error generating embedding")
            msg = f"Embedding request failed: {exc}"
            raise RemoteServiceError(msg) from exc
        return np.array(response.data[0].embedding)

    def get_embeddings_batch(
        self,
        texts: list[str],
        batch_size: int = 100,
    ) -> list[np.ndarray]:
        """Get embeddings for multiple texts in batches.

        Args:
            texts: List of input texts to generate embeddings for.
            batch_size: Number of texts to process in each batch.

        Returns:
            list[np.ndarray]: One embedding per input text, in input order.

        Raises:
            RemoteServiceError: If any batch request fails.
        """
        embeddings = []

        for i in range(0, len(texts), batch_size):
            batch_texts = texts[i : i + batch_size]
            try:
                response = self.client.embeddings.create(
                    model=self.model,
                    input=batch_texts,
                )
            except OpenAIError as exc:
                logger.exception("Error generating batch embeddings")
                msg = f"Batch embedding request failed: {exc}"
                raise RemoteServiceError(msg) from exc
            embeddings.extend(np.array(data.embedding) for data in response.data)
            logger.info("Generated embeddings for batch %d", i // batch_size + 1)

        return embeddings
