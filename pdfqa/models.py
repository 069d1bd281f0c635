"""Data models for the question-answering pipeline."""

from dataclasses import dataclass
from typing import Any, Literal, get_args

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import config

logger = config.get_logger(__name__)

Role = Literal["system", "human", "assistant"]

VisualizationType = Literal[
    "bar",
    "line",
    "pie",
    "scatter",
    "table",
    "heatmap",
    "histogram",
    "boxplot",
    "area",
    "radar",
    "bubble",
    "candlestick",
    "ohlc",
    "json",
]
VISUALIZATION_TYPES: frozenset[str] = frozenset(get_args(VisualizationType))


@dataclass
class SourceDocument:
    """Raw text extracted from one source file, with document-level metadata."""

    text: str
    metadata: dict[str, Any]


@dataclass
class DocumentChunk:
    """Represents a chunk of text from a document."""

    content: str
    metadata: dict[str, Any]
    embedding: np.ndarray | None = None


@dataclass(frozen=True)
class ConversationTurn:
    """A single role-tagged message in a conversation."""

    role: Role
    content: str

    @classmethod
    def system(cls, content: str) -> "ConversationTurn":
        return cls(role="system", content=content)

    @classmethod
    def human(cls, content: str) -> "ConversationTurn":
        return cls(role="human", content=content)

    @classmethod
    def assistant(cls, content: str) -> "ConversationTurn":
        return cls(role="assistant", content=content)


class VisualizationSuggestion(BaseModel):
    """A chart, table or JSON rendering proposed by the model.

    Attributes:
        type: Rendering kind; names outside the known set fall back to
            ``"json"`` so their data is still shown.
        description: What the rendering shows.
        data: One of ``{"labels": [...], "values": [...]}`` for charts,
            ``{"headers": [...], "rows": [[...]]}`` for tables or
            ``{"data": [{...}, ...]}`` for JSON listings.
    """

    type: VisualizationType = "json"
    description: str = ""
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        kind = value.strip().lower()
        if kind not in VISUALIZATION_TYPES:
            logger.warning("Unknown visualization type %r shown as json", value)
            return "json"
        return kind

    @field_validator("description", mode="before")
    @classmethod
    def empty_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("data", mode="before")
    @classmethod
    def wrap_listing(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, list):
            return {"data": value}
        return value

    def series(self) -> dict[str, float]:
        """Return label/value pairs for chart-shaped data.

        Returns:
            Mapping of label to numeric value; empty for tables and JSON.
        """
        labels = self.data.get("labels") or []
        values = self.data.get("values") or []
        return {
            str(label): float(value)
            for label, value in zip(labels, values, strict=False)
            if isinstance(value, int | float) and not isinstance(value, bool)
        }


class StructuredAnswer(BaseModel):
    """JSON-shaped answer; every field is always present.

    Attributes:
        details: Descriptive text, ``""`` when not applicable.
        numeric_value: The number asked for, or None.
        visualization_suggestions: Renderings asked for, possibly empty.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    details: str = ""
    numeric_value: float | None = None
    visualization_suggestions: list[VisualizationSuggestion] = Field(
        default_factory=list
    )

    @field_validator("details", mode="before")
    @classmethod
    def empty_details(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("numeric_value", mode="before")
    @classmethod
    def parse_number(cls, value: Any) -> Any:
        if isinstance(value, bool):
            msg = "numeric_value must be a number, not a boolean"
            raise ValueError(msg)  # noqa: TRY004
        if isinstance(value, str):
            value = value.replace(",", "").strip()
            return value or None
        return value

    @field_validator("visualization_suggestions", mode="before")
    @classmethod
    def empty_suggestions(cls, value: Any) -> Any:
        return [] if value is None else value
