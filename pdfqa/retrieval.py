"""Context retrieval on top of the RAG pipeline."""

from .config import config
from .pipeline import RAGPipeline

logger = config.get_logger(__name__)

CONTEXT_SEPARATOR = "\n\n---\n\n"


class Retriever:
    """Turns the top-K matching chunks into a single context string."""

    def __init__(self, rag_pipeline: RAGPipeline) -> None:
        self.rag_pipeline = rag_pipeline

    def retrieve(self, query: str, k: int = 2) -> str:
        """Return the ``k`` most similar chunk texts joined by the separator.

        An absent index or an empty result yields ``""``, which callers
        treat as "no relevant information".
        """
        results = self.rag_pipeline.query(query, top_k=k)
        if not results:
            logger.info("No relevant context found for query")
            return ""

        for i, (chunk, score) in enumerate(results):
            logger.debug(
                "Context %d: %s (score: %.4f)",
                i + 1,
                chunk.metadata.get("source"),
                score,
            )
        return CONTEXT_SEPARATOR.join(chunk.content for chunk, _ in results)
