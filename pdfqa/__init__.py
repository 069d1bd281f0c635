"""pdfqa - question answering over a PDF document."""

from .conversation import ConversationManager
from .document_processing import DocumentLoader, TextChunker
from .embeddings import EmbeddingService
from .errors import (
    EmbeddingModelMismatchError,
    IndexNotFoundError,
    MalformedOutputError,
    PDFQAError,
    RemoteServiceError,
)
from .generation import AnswerGenerator
from .memory import ConversationMemory
from .models import (
    ConversationTurn,
    DocumentChunk,
    SourceDocument,
    StructuredAnswer,
    VisualizationSuggestion,
)
from .output_repair import clean_json_string, repair
from .pipeline import RAGPipeline
from .prompts import compose_prompt
from .retrieval import Retriever
from .vector_store import FaissVectorStore

__all__ = [
    "AnswerGenerator",
    "ConversationManager",
    "ConversationMemory",
    "ConversationTurn",
    "DocumentChunk",
    "DocumentLoader",
    "EmbeddingModelMismatchError",
    "EmbeddingService",
    "FaissVectorStore",
    "IndexNotFoundError",
    "MalformedOutputError",
    "PDFQAError",
    "RAGPipeline",
    "RemoteServiceError",
    "Retriever",
    "SourceDocument",
    "StructuredAnswer",
    "TextChunker",
    "VisualizationSuggestion",
    "clean_json_string",
    "compose_prompt",
    "repair",
]
