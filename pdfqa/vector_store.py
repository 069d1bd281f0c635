"""FAISS-backed vector storage with SQLite metadata."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import faiss
import numpy as np

from .config import config
from .errors import EmbeddingModelMismatchError, IndexNotFoundError
from .models import DocumentChunk

logger = config.get_logger(__name__)


class FaissVectorStore:
    """Vector storage using FAISS for embeddings and SQLite for metadata.

    A store is a directory holding ``index.faiss`` and ``metadata.db``. The
    metadata records which embedding model produced the vectors so a store
    is never queried with embeddings from another model.
    """

    INDEX_FILENAME = "index.faiss"
    METADATA_FILENAME = "metadata.db"

    def __init__(self, index_dir: Path, embedding_model: str) -> None:
        """Configure an empty store rooted at ``index_dir``."""
        self.index_dir = Path(index_dir)
        self.embedding_model = embedding_model
        self.index: faiss.IndexIDMap | None = None
        self.chunks: dict[int, DocumentChunk] = {}

    def __len__(self) -> int:
        return 0 if self.index is None else int(self.index.ntotal)

    @property
    def index_path(self) -> Path:
        return self.index_dir / self.INDEX_FILENAME

    @property
    def db_path(self) -> Path:
        return self.index_dir / self.METADATA_FILENAME

    @property
    def dimension(self) -> int | None:
        return None if self.index is None else int(self.index.d)

    @classmethod
    def exists(cls, index_dir: Path) -> bool:
        index_dir = Path(index_dir)
        return (index_dir / cls.INDEX_FILENAME).is_file() and (
            index_dir / cls.METADATA_FILENAME
        ).is_file()

    @staticmethod
    def _normalize_embedding(embedding: np.ndarray) -> np.ndarray:
        """Normalize embedding for cosine similarity using inner product search.

        Returns:
            Normalized float32 embedding vector.
        """
        vector = np.array(embedding, dtype="float32").reshape(1, -1)
        if np.linalg.norm(vector) > 0:
            faiss.normalize_L2(vector)
        return vector[0]

    def add_chunks(self, chunks: list[DocumentChunk]) -> None:
        """Add embedded chunks to the index.

        Raises:
            ValueError: If a chunk has no embedding or its dimension does not
                match the index.
        """
        if not chunks:
            return

        vectors = []
        for chunk in chunks:
            if chunk.embedding is None:
                msg = f"Chunk {chunk.metadata.get('chunk_id')} has no embedding"
                raise ValueError(msg)
            vectors.append(self._normalize_embedding(chunk.embedding))

        expected = self.dimension or vectors[0].shape[0]
        for vector in vectors:
            if vector.shape[0] != expected:
                msg = (
                    f"Embedding dimension {vector.shape[0]} does not match "
                    f"FAISS index dimension {expected}"
                )
                raise ValueError(msg)

        if self.index is None:
            self.index = faiss.IndexIDMap(faiss.IndexFlatIP(vectors[0].shape[0]))
            logger.info("Initialized FAISS index with dimension %d", self.index.d)

        start_id = max(self.chunks, default=-1) + 1
        ids = np.arange(start_id, start_id + len(vectors), dtype="int64")
        self.index.add_with_ids(np.vstack(vectors), ids)  # pyright: ignore[reportCallIssue]
        for vector_id, chunk in zip(ids, chunks, strict=True):
            self.chunks[int(vector_id)] = chunk

        logger.info("Added %d vectors to FAISS index", len(vectors))

    def search(
        self,
        query_embedding: np.ndarray,
        top_k: int = 5,
    ) -> list[tuple[DocumentChunk, float]]:
        """Search similar chunks using the FAISS index.

        Returns:
            Ranked list of (DocumentChunk, score) tuples, best first.

        Raises:
            ValueError: If the query dimension does not match the index.
        """
        if self.index is None or self.index.ntotal == 0 or top_k <= 0:
            return []

        query = self._normalize_embedding(query_embedding)
        if query.shape[0] != self.index.d:
            msg = (
                f"Query embedding dimension {query.shape[0]} does not match "
                f"FAISS index dimension {self.index.d}"
            )
            raise ValueError(msg)

        scores, vector_ids = self.index.search(  # pyright: ignore[reportCallIssue]
            query.reshape(1, -1),
            min(top_k, self.index.ntotal),
        )
        return [
            (self.chunks[int(vector_id)], float(score))
            for score, vector_id in zip(scores[0], vector_ids[0], strict=True)
            if int(vector_id) != -1  # faiss pads missing results with -1
        ]

    def save(self) -> None:
        """Persist the FAISS index and chunk metadata to ``index_dir``.

        Raises:
            ValueError: If the store holds no vectors.
        """
        if self.index is None:
            msg = "Cannot save an empty vector store"
            raise ValueError(msg)

        self.index_dir.mkdir(exist_ok=True, parents=True)
        faiss.write_index(self.index, str(self.index_path))

        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()
            cursor.execute("DROP TABLE IF EXISTS chunks")
            cursor.execute("DROP TABLE IF EXISTS store_info")
            cursor.execute("""
                CREATE TABLE chunks (
                    vector_id INTEGER PRIMARY KEY,
                    content TEXT NOT NULL,
                    metadata TEXT NOT NULL
                )
            """)
            cursor.execute("""
                CREATE TABLE store_info (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            cursor.executemany(
                "INSERT INTO chunks (vector_id, content, metadata) VALUES (?, ?, ?)",
                [
                    (vector_id, chunk.content, json.dumps(chunk.metadata, default=str))
                    for vector_id, chunk in self.chunks.items()
                ],
            )
            cursor.executemany(
                "INSERT INTO store_info (key, value) VALUES (?, ?)",
                [
                    ("embedding_model", self.embedding_model),
                    ("dimension", str(self.index.d)),
                ],
            )
            conn.commit()

        logger.info("Saved %d vectors to %s", len(self), self.index_dir)

    @classmethod
    def load(cls, index_dir: Path, embedding_model: str) -> FaissVectorStore:
        """Load a persisted store built with ``embedding_model``.

        Returns:
            The loaded store.

        Raises:
            IndexNotFoundError: If no store exists at ``index_dir``.
            EmbeddingModelMismatchError: If the store was built with another
                embedding model or its index disagrees with the recorded
                dimension.
        """
        store = cls(index_dir, embedding_model)
        if not cls.exists(store.index_dir):
            msg = f"No vector store found at {store.index_dir}"
            raise IndexNotFoundError(msg)

        with sqlite3.connect(str(store.db_path)) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT key, value FROM store_info")
            info = dict(cursor.fetchall())
            cursor.execute(
                "SELECT vector_id, content, metadata FROM chunks ORDER BY vector_id"
            )
            rows = cursor.fetchall()

        stored_model = info.get("embedding_model")
        if stored_model != embedding_model:
            msg = (
                f"Vector store at {store.index_dir} was built with embedding model "
                f"{stored_model!r}, not {embedding_model!r}; rebuild the index"
            )
            raise EmbeddingModelMismatchError(msg)

        index = faiss.read_index(str(store.index_path))
        if str(index.d) != info.get("dimension"):
            msg = (
                f"FAISS index dimension {index.d} does not match recorded "
                f"dimension {info.get('dimension')}"
            )
            raise EmbeddingModelMismatchError(msg)

        store.index = index
        store.chunks = {
            int(vector_id): DocumentChunk(content=content, metadata=json.loads(metadata))
            for vector_id, content, metadata in rows
        }
        logger.info(
            "Loaded FAISS index from %s with %d vectors", store.index_dir, len(store)
        )
        return store
