"""Main RAG pipeline orchestrating document ingestion, indexing and querying."""

from pathlib import Path

from .config import config
from .document_processing import DocumentLoader, TextChunker
from .embeddings import EmbeddingService
from .errors import IndexNotFoundError
from .models import DocumentChunk
from .vector_store import FaissVectorStore

logger = config.get_logger(__name__)


class RAGPipeline:
    """Main RAG pipeline orchestrating Load -> Split -> Embed -> Store."""

    def __init__(
        self,
        embedding_api_key: str | None = None,
        chunk_size: int | None = None,
        overlap: int | None = None,
        index_dir: Path | None = None,
        embedding_service: EmbeddingService | None = None,
    ) -> None:
        """Initialize RAG pipeline.

        Args:
            embedding_api_key: Embedding service API key.
            chunk_size: Size of text chunks. If None, uses config.CHUNK_SIZE.
            overlap: Overlap between chunks. If None, uses config.CHUNK_OVERLAP.
            index_dir: Vector store directory. If None, uses
                config.FAISS_INDEX_PATH.
            embedding_service: Pre-built embedding service; one is created
                from ``embedding_api_key`` when omitted.
        """
        if chunk_size is None:
            chunk_size = config.CHUNK_SIZE
        if overlap is None:
            overlap = config.CHUNK_OVERLAP
        if index_dir is None:
            index_dir = config.FAISS_INDEX_PATH

        self.chunker = TextChunker(chunk_size=chunk_size, overlap=overlap)
        self.embedding_service = embedding_service or EmbeddingService(
            api_key=embedding_api_key
        )
        self.index_dir = Path(index_dir)
        self.vector_store: FaissVectorStore | None = None

    @property
    def embedding_model(self) -> str:
        return self.embedding_service.model

    def ingest(self, file_path: Path) -> list[DocumentChunk]:
        """Extract a document's text and split it into chunks.

        Returns:
            Chunks carrying the document metadata.
        """
        logger.info("Ingesting document: %s", file_path)
        document = DocumentLoader.load_document(Path(file_path))
        return self.chunker.split_document(document)

    def build_index(self, chunks: list[DocumentChunk]) -> FaissVectorStore:
        """Embed chunks and persist them as a new vector store.

        Returns:
            The freshly built store, also kept as ``self.vector_store``.

        Raises:
            ValueError: If there are no chunks to index.
        """
        if not chunks:
            msg = "No text chunks to index"
            raise ValueError(msg)

        embeddings = self.embedding_service.get_embeddings_batch(
            [chunk.content for chunk in chunks]
        )
        for chunk, embedding in zip(chunks, embeddings, strict=True):
            chunk.embedding = embedding

        store = FaissVectorStore(self.index_dir, self.embedding_model)
        store.add_chunks(chunks)
        store.save()
        self.vector_store = store
        return store

    def load_index(self) -> FaissVectorStore:
        """Load the persisted vector store.

        Returns:
            The loaded store, also kept as ``self.vector_store``.
        """
        self.vector_store = FaissVectorStore.load(self.index_dir, self.embedding_model)
        return self.vector_store

    def prepare_index(
        self, source_path: Path, *, rebuild: bool = False
    ) -> FaissVectorStore:
        """Reuse the persisted index, or build it from the source document.

        An existing store is loaded without touching the source document or
        the embedding service.

        Returns:
            The ready-to-query vector store.
        """
        if not rebuild:
            try:
                store = self.load_index()
            except IndexNotFoundError:
                logger.info(
                    "Vector index not found at %s. Processing %s",
                    self.index_dir,
                    source_path,
                )
            else:
                logger.info("Vector index found at %s", self.index_dir)
                return store

        return self.build_index(self.ingest(source_path))

    def process_document(self, file_path: Path) -> None:
        """Process a document through the complete RAG pipeline."""
        self.build_index(self.ingest(file_path))
        logger.info("Document processing completed successfully")

    def query(self, question: str, top_k: int = 5) -> list[tuple[DocumentChunk, float]]:
        """Query the RAG system.

        Args:
            question: The input question to query.
            top_k: Number of top results to return.

        Returns:
            A list of tuples, each containing a DocumentChunk and its similarity
            score; empty when no index is loaded.
        """
        if self.vector_store is None or len(self.vector_store) == 0:
            logger.warning("No vector index loaded; returning no results")
            return []

        logger.info("Processing query: %s", question)
        query_embedding = self.embedding_service.get_embedding(question)
        return self.vector_store.search(query_embedding, top_k=top_k)
