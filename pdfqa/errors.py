"""Exception types raised by the question-answering pipeline."""


class PDFQAError(Exception):
    """Base class for pdfqa errors."""


class IndexNotFoundError(PDFQAError, FileNotFoundError):
    """No persisted vector store exists at the expected path."""


class EmbeddingModelMismatchError(PDFQAError, ValueError):
    """A persisted store was built with a different embedding model."""


class RemoteServiceError(PDFQAError, RuntimeError):
    """The embedding or chat-completion service call failed."""


class MalformedOutputError(PDFQAError, ValueError):
    """Model output could not be coerced into a structured answer."""

    def __init__(
        self,
        message: str,
        *,
        raw_output: str = "",
        cleaned_output: str = "",
    ) -> None:
        super().__init__(message)
        self.raw_output = raw_output
        self.cleaned_output = cleaned_output
