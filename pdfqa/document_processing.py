"""Document loading and text chunking functionality."""

from pathlib import Path
from typing import Any

import pypdf
from langchain_text_splitters import RecursiveCharacterTextSplitter

from .config import config
from .models import DocumentChunk, SourceDocument

logger = config.get_logger(__name__)


class DocumentLoader:
    """Handles loading of PDF and TXT documents."""

    @staticmethod
    def load_pdf(file_path: Path) -> SourceDocument:
        """Load text content and document metadata from a PDF file.

        Returns:
            The joined text of every page plus source, page count and any
            title/author the PDF declares.
        """
        try:
            with file_path.open("rb") as file:
                pdf_reader = pypdf.PdfReader(file)
                pages = [page.extract_text() or "" for page in pdf_reader.pages]
                info = pdf_reader.metadata
        except Exception:
            logger.exception("Error loading PDF %s", file_path)
            raise

        metadata: dict[str, Any] = {"source": file_path.name, "pages": len(pages)}
        if info is not None:
            if info.title:
                metadata["title"] = str(info.title)
            if info.author:
                metadata["author"] = str(info.author)

        logger.info("Loaded %d pages from %s", len(pages), file_path)
        return SourceDocument(text="\n".join(pages), metadata=metadata)

    @staticmethod
    def load_txt(file_path: Path) -> SourceDocument:
        """Load text content from a TXT file.

        Returns:
            The file text with the file name as source metadata.
        """
        try:
            with file_path.open(encoding="utf-8") as file:
                text = file.read()
        except Exception:
            logger.exception("Error loading TXT %s", file_path)
            raise

        logger.info("Successfully loaded TXT file %s", file_path)
        return SourceDocument(text=text, metadata={"source": file_path.name})

    @classmethod
    def load_document(cls, file_path: Path) -> SourceDocument:
        """Load document based on file extension.

        Args:
            file_path: Path to the document file.

        Returns:
            The loaded document.

        Raises:
            ValueError: If the file type is not supported.
        """
        file_ext = file_path.suffix.lower()
        if file_ext == ".pdf":
            return cls.load_pdf(file_path)
        if file_ext == ".txt":
            return cls.load_txt(file_path)
        msg = f"Unsupported file type: {file_ext}"
        raise ValueError(msg)


class TextChunker:
    """Splits documents into overlapping chunks with a recursive splitter."""

    def __init__(self, chunk_size: int = 1000, overlap: int = 200) -> None:
        """Initialize the TextChunker with chunk size and overlap.

        Args:
            chunk_size: Maximum number of characters per chunk.
            overlap: Number of characters shared by neighbouring chunks.

        Raises:
            ValueError: If overlap is not smaller than chunk size.
        """
        if overlap >= chunk_size:
            msg = f"Chunk overlap ({overlap}) must be smaller than chunk size ({chunk_size})"
            raise ValueError(msg)
        self.chunk_size = chunk_size
        self.overlap = overlap
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=overlap,
        )

    def split_document(self, document: SourceDocument) -> list[DocumentChunk]:
        """Split a document, attaching its metadata to every chunk.

        Returns:
            Chunks in document order, numbered from zero.
        """
        texts = [text for text in self._splitter.split_text(document.text) if text.strip()]
        chunks = [
            DocumentChunk(
                content=text,
                metadata={**document.metadata, "chunk_id": i, "length": len(text)},
            )
            for i, text in enumerate(texts)
        ]
        logger.info("Text split into %d chunks", len(chunks))
        return chunks

    def chunk_text(self, text: str, source: str = "document") -> list[DocumentChunk]:
        return self.split_document(SourceDocument(text=text, metadata={"source": source}))
