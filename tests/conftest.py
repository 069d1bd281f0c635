"""Test configuration and fixtures for pdfqa tests.

This module provides reusable test fixtures organized by functionality:
- Constants and test data
- Mock services and API responses
- EmbeddingService fixtures
- Vector store and pipeline fixtures
- Conversation fixtures
"""

import hashlib
from unittest.mock import Mock, create_autospec, patch

import numpy as np
import pytest
from openai import APIConnectionError

from pdfqa import (
    AnswerGenerator,
    ConversationManager,
    DocumentChunk,
    EmbeddingService,
    FaissVectorStore,
    RAGPipeline,
)


class TestConstants:
    """Centralized test constants shared across test files."""

    TEST_API_KEY = "test-key"
    TEST_OPENAI_MODEL = "text-embedding-3-small"
    MOCK_EMBEDDING_MODEL = "mock-embedding"
    DEFAULT_EMBEDDING_DIMENSION = 64

    SMALL_CHUNK_SIZE = 100
    SMALL_CHUNK_OVERLAP = 20


class MockEmbeddingService:
    """Mock embedding service for testing without API calls.

    Generates deterministic embeddings based on text content hash,
    ensuring consistent test results across runs.
    """

    def __init__(
        self,
        dimension: int = TestConstants.DEFAULT_EMBEDDING_DIMENSION,
        model: str = TestConstants.MOCK_EMBEDDING_MODEL,
    ) -> None:
        self.dimension = dimension
        self.model = model
        self.batch_calls = 0
        self.single_calls = 0

    def get_embedding(self, text: str) -> np.ndarray:
        """Generate deterministic mock embedding based on text hash."""
        self.single_calls += 1
        return self._embed(text)

    def get_embeddings_batch(self, texts: list[str]) -> list[np.ndarray]:
        self.batch_calls += 1
        return [self._embed(text) for text in texts]

    def _embed(self, text: str) -> np.ndarray:
        seed = int.from_bytes(
            hashlib.sha256(text.lower().encode("utf-8")).digest()[:8],
            byteorder="big",
            signed=False,
        )
        rng = np.random.default_rng(seed)
        embedding = rng.normal(0, 1, self.dimension)
        return (embedding / np.linalg.norm(embedding)).astype(np.float32)


def create_mock_openai_response(embeddings: list[list[float]]) -> Mock:
    mock_response = Mock()
    mock_response.data = [Mock(embedding=emb) for emb in embeddings]
    return mock_response


def create_mock_chat_response(content) -> Mock:  # noqa: ANN001
    mock_response = Mock()
    mock_response.choices = [Mock(message=Mock(content=content))]
    return mock_response


def create_api_error(message: str = "Connection error.") -> APIConnectionError:
    return APIConnectionError(message=message, request=Mock())


@pytest.fixture
def openai_embeddings_api_mock():
    """Patch the OpenAI embeddings endpoint; the mock is returned unconfigured."""
    with patch("openai.resources.embeddings.Embeddings.create") as mock_create:
        yield mock_create


@pytest.fixture
def openai_chat_api_mock():
    """Patch the OpenAI chat completions endpoint."""
    with patch("openai.resources.chat.completions.Completions.create") as mock_create:
        yield mock_create


@pytest.fixture
def embedding_service_factory():
    """Factory for creating EmbeddingService instances with different configurations."""

    def _create_service(api_key=None, model=None):  # noqa: ANN202
        return EmbeddingService(
            api_key=api_key or TestConstants.TEST_API_KEY,
            model=model or TestConstants.TEST_OPENAI_MODEL,
        )

    return _create_service


@pytest.fixture
def embedding_service(embedding_service_factory):
    return embedding_service_factory()


@pytest.fixture
def mock_embedding_service():
    return MockEmbeddingService()


@pytest.fixture
def mock_embeddings(mock_embedding_service):
    """Deterministic embedding for a text, without counting as a service call."""
    return mock_embedding_service._embed  # noqa: SLF001


@pytest.fixture
def sample_text_chunks():
    """Create sample document chunks with text and metadata only (no embeddings)."""
    texts = [
        "The Dhaka Stock Exchange lists more than three hundred companies.",
        "Grameenphone is the largest listed telecom company by market cap.",
        "The DSEX index is the broad benchmark index of the exchange.",
        "Share prices are quoted in Bangladeshi taka.",
        "Trading sessions run from Sunday to Thursday.",
    ]
    return [
        DocumentChunk(
            content=text,
            metadata={"source": "market.pdf", "pages": 2, "chunk_id": i, "length": len(text)},
        )
        for i, text in enumerate(texts)
    ]


@pytest.fixture
def sample_embedded_chunks(sample_text_chunks, mock_embeddings):
    for chunk in sample_text_chunks:
        chunk.embedding = mock_embeddings(chunk.content)
    return sample_text_chunks


@pytest.fixture
def temp_faiss_store(tmp_path):
    return FaissVectorStore(tmp_path / "faiss.index", TestConstants.MOCK_EMBEDDING_MODEL)


@pytest.fixture
def sample_document_path(tmp_path):
    """A small TXT document written fresh for each test."""
    doc_path = tmp_path / "market.txt"
    doc_path.write_text(
        "The Dhaka Stock Exchange is the main stock exchange of Bangladesh. "
        "It lists more than three hundred companies across many sectors.\n\n"
        "Grameenphone is the largest listed telecom company. Its share price "
        "is followed closely by investors.\n\n"
        "The DSEX index is the broad benchmark of the exchange.",
        encoding="utf-8",
    )
    return doc_path


@pytest.fixture
def rag_pipeline_factory(tmp_path, mock_embedding_service):
    """Factory for RAGPipeline instances backed by the mock embedding service."""

    def _create_pipeline(
        index_name: str = "faiss.index",
        chunk_size: int = TestConstants.SMALL_CHUNK_SIZE,
        overlap: int = TestConstants.SMALL_CHUNK_OVERLAP,
        embedding_service=None,  # noqa: ANN001
    ) -> RAGPipeline:
        return RAGPipeline(
            chunk_size=chunk_size,
            overlap=overlap,
            index_dir=tmp_path / index_name,
            embedding_service=embedding_service or mock_embedding_service,
        )

    return _create_pipeline


@pytest.fixture
def mock_generator():
    generator = create_autospec(AnswerGenerator, instance=True)
    generator.generate.return_value = "Test response"
    return generator


@pytest.fixture
def mock_rag_pipeline_empty_return():
    mock_pipeline = create_autospec(RAGPipeline, instance=True)
    mock_pipeline.query.return_value = []
    return mock_pipeline


@pytest.fixture
def sample_scored_chunks(sample_text_chunks):
    return [
        (chunk, score)
        for chunk, score in zip(sample_text_chunks[:2], (0.9, 0.7), strict=True)
    ]


@pytest.fixture
def conversation_manager_factory(mock_rag_pipeline_empty_return, mock_generator):
    """Factory for ConversationManager instances with mocked collaborators."""

    def _create_manager(  # noqa: ANN202
        rag_pipeline=None,  # noqa: ANN001
        generator=None,  # noqa: ANN001
        **kwargs,
    ):
        kwargs.setdefault("output_mode", "text")
        kwargs.setdefault("use_memory", True)
        kwargs.setdefault("top_k", 2)
        return ConversationManager(
            rag_pipeline or mock_rag_pipeline_empty_return,
            generator or mock_generator,
            **kwargs,
        )

    return _create_manager
