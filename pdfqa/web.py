"""Web interface using Streamlit."""

import tempfile
import uuid
from pathlib import Path

import streamlit as st

from pdfqa import ConversationManager, RAGPipeline
from pdfqa.config import config
from pdfqa.errors import MalformedOutputError, PDFQAError
from pdfqa.models import StructuredAnswer, VisualizationSuggestion

MAX_HISTORY_PREVIEW_LENGTH = 50

config.setup_logging()
logger = config.get_logger(__name__)


class SessionState:
    """Centralized session state management."""

    @staticmethod
    def initialize() -> None:
        """Initialize all session state variables."""
        defaults = {
            "rag_pipeline": None,
            "conversation_manager": None,
            "session_id": uuid.uuid4().hex,
            "document_processed": False,
            "current_answer": None,
        }

        for key, default_value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = default_value

    @staticmethod
    def is_system_ready() -> bool:
        return (
            st.session_state.get("rag_pipeline") is not None
            and st.session_state.get("conversation_manager") is not None
        )


def validate_configuration() -> bool:
    """Validate application configuration and show user feedback.

    Returns:
        bool: True if configuration is valid, False otherwise.
    """
    try:
        config.validate()
    except ValueError as e:
        st.error(f"Configuration Error: {e}")
        return False
    else:
        return True


def initialize_system() -> bool:
    """Initialize the RAG pipeline and conversation manager.

    An index persisted by an earlier run is reused when present.

    Returns:
        bool: True if initialization succeeds, False otherwise.
    """
    try:
        with st.spinner("Initializing system..."):
            pipeline = RAGPipeline()
            try:
                pipeline.load_index()
                st.session_state.document_processed = True
            except FileNotFoundError:
                logger.info("No persisted index; waiting for an upload")
            st.session_state.rag_pipeline = pipeline
            st.session_state.conversation_manager = ConversationManager(pipeline)
    except (ValueError, RuntimeError) as e:
        logger.exception("Failed to initialize system")
        st.error(f"Failed to initialize system: {e}")
        return False

    logger.info("pdfqa system initialized successfully")
    st.success("System initialized successfully!")
    return True


def process_document(uploaded_file) -> bool:  # noqa: ANN001
    """Index an uploaded file, replacing any previous index.

    Returns:
        bool: True if document processing succeeds, False otherwise.
    """
    suffix = Path(uploaded_file.name).suffix
    try:
        with tempfile.TemporaryDirectory() as tmp_dir:
            tmp_file_path = Path(tmp_dir) / f"upload{suffix}"
            tmp_file_path.write_bytes(uploaded_file.getbuffer())
            with st.spinner(f"Processing '{uploaded_file.name}'..."):
                st.session_state.rag_pipeline.process_document(tmp_file_path)
    except (OSError, ValueError, RuntimeError) as e:
        logger.exception("Document processing failed")
        st.error(f"Failed to process document: {e}")
        return False

    st.session_state.document_processed = True
    st.success(f"Document '{uploaded_file.name}' processed successfully!")
    return True


def render_sidebar() -> None:
    """Render the sidebar with configuration and system status."""
    with st.sidebar:
        st.header("System Configuration")

        if (
            st.button("Initialize System", use_container_width=True)
            and validate_configuration()
            and initialize_system()
        ):
            st.rerun()

        st.divider()
        st.subheader("System Status")
        st.write(f"**Mode:** {config.OUTPUT_MODE}")
        st.write(f"**Chat model:** {config.CHAT_MODEL}")
        st.write(f"**Embedding model:** {config.EMBEDDING_MODEL}")
        st.write(
            f"**Document:** {'Loaded' if st.session_state.document_processed else 'None'}"
        )

        if SessionState.is_system_ready() and st.button(
            "Clear History", use_container_width=True
        ):
            st.session_state.conversation_manager.clear_history(
                st.session_state.session_id
            )
            st.session_state.current_answer = None
            st.rerun()


def render_document_upload() -> None:
    """Render document upload section."""
    st.header("Document Upload")
    uploaded_file = st.file_uploader(
        "Upload a PDF or TXT document",
        type=["pdf", "txt"],
        help="The document replaces the current index",
    )
    if (
        uploaded_file
        and st.button("Process Document", use_container_width=True)
        and process_document(uploaded_file)
    ):
        st.rerun()


def render_suggestion(suggestion: VisualizationSuggestion) -> None:
    """Draw one visualization suggestion with the closest Streamlit element."""
    st.markdown(f"**{suggestion.type.title()}:** {suggestion.description}")
    data = suggestion.data
    points = [
        {"label": label, "value": value}
        for label, value in suggestion.series().items()
    ]
    charts = {
        "line": st.line_chart,
        "area": st.area_chart,
        "scatter": st.scatter_chart,
    }

    if suggestion.type == "table" and "rows" in data:
        headers = data.get("headers") or []
        rows = [
            dict(zip(headers, row, strict=False)) if headers else row
            for row in data["rows"]
        ]
        st.table(rows)
    elif points:
        chart = charts.get(suggestion.type, st.bar_chart)
        chart(points, x="label", y="value")
    else:
        st.json(data)


def render_answer(answer: StructuredAnswer | str) -> None:
    if not isinstance(answer, StructuredAnswer):
        st.write(answer)
        return

    if answer.details:
        st.write(answer.details)
    if answer.numeric_value is not None:
        st.metric("Value", answer.numeric_value)
    for suggestion in answer.visualization_suggestions:
        render_suggestion(suggestion)


def render_chat_interface() -> None:
    """Render the main question box and the latest answer."""
    st.header("Ask Questions About Your Document")
    question = st.text_input(
        "Your Question:",
        placeholder="Ask anything about your document...",
    )

    if st.button("Ask Question", use_container_width=True) and question.strip():
        with st.spinner("Processing..."):
            try:
                st.session_state.current_answer = (
                    st.session_state.conversation_manager.ask_question(
                        st.session_state.session_id, question
                    )
                )
            except MalformedOutputError as e:
                st.error(f"The model answer could not be parsed: {e}")
                with st.expander("Raw model output"):
                    st.code(e.raw_output)
                return
            except (PDFQAError, ValueError, RuntimeError, OSError) as e:
                logger.exception("Question processing failed")
                st.error(f"Failed to process question: {e}")
                return

    if st.session_state.current_answer is not None:
        st.subheader("Answer:")
        render_answer(st.session_state.current_answer)


def render_conversation_history() -> None:
    """Render the session's question/answer turns."""
    manager = st.session_state.conversation_manager
    turns = [
        turn
        for turn in manager.history(st.session_state.session_id)
        if turn.role != "system"
    ]
    if not turns:
        return

    st.markdown("---")
    st.subheader("Conversation History")
    for turn in turns:
        if turn.role == "human":
            st.markdown(f"**You:** {turn.content[:MAX_HISTORY_PREVIEW_LENGTH]}")
        else:
            with st.expander("Assistant", expanded=False):
                st.code(turn.content)


def main() -> None:
    """Main entry point for the Streamlit web application."""
    st.set_page_config(page_title="pdfqa - Document Q&A", layout="wide")

    SessionState.initialize()

    st.title("pdfqa - Document Q&A")
    st.markdown("---")

    render_sidebar()

    if not SessionState.is_system_ready():
        st.info("Please initialize the system using the sidebar to get started.")
        return

    render_document_upload()
    if st.session_state.document_processed:
        render_chat_interface()
        render_conversation_history()


if __name__ == "__main__":
    main()
