"""Command-line entry point for asking questions about a document."""

from __future__ import annotations

import argparse
import json
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from .config import OUTPUT_MODES, config
from .conversation import ConversationManager
from .errors import MalformedOutputError, PDFQAError
from .models import StructuredAnswer
from .pipeline import RAGPipeline

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from logging import Logger

WEB_APP = Path(__file__).resolve().parent / "web.py"
EXIT_COMMANDS = {"exit", "quit"}


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Build the CLI parser and read command-line arguments."""  # noqa: DOC201
    parser = argparse.ArgumentParser(
        description="Ask questions about a PDF document.",
    )
    parser.add_argument(
        "questions",
        nargs="*",
        help="Questions to ask; read one per line from stdin when omitted.",
    )
    parser.add_argument(
        "--source",
        type=Path,
        default=config.SOURCE_DOCUMENT_PATH,
        help=f"Document indexed when no index exists (default: {config.SOURCE_DOCUMENT_PATH}).",
    )
    parser.add_argument(
        "--index-dir",
        type=Path,
        default=config.FAISS_INDEX_PATH,
        help=f"Vector index directory (default: {config.FAISS_INDEX_PATH}).",
    )
    parser.add_argument(
        "--session",
        default="default",
        help="Conversation session id (default: default).",
    )
    parser.add_argument(
        "--mode",
        choices=OUTPUT_MODES,
        default=config.OUTPUT_MODE,
        help=f"Answer format (default: {config.OUTPUT_MODE}).",
    )
    parser.add_argument(
        "--no-memory",
        dest="use_memory",
        action="store_false",
        help="Answer every question without conversation history.",
    )
    parser.add_argument(
        "--top-k",
        type=int,
        default=config.RETRIEVAL_TOP_K,
        help=f"Chunks retrieved per question (default: {config.RETRIEVAL_TOP_K}).",
    )
    parser.add_argument(
        "--rebuild",
        action="store_true",
        help="Re-ingest the source document even if an index exists.",
    )
    parser.add_argument(
        "--ui",
        action="store_true",
        help="Launch the Streamlit web interface instead.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8501,
        help="Port for the Streamlit server (default: 8501).",
    )
    parser.add_argument(
        "--address",
        default="localhost",
        help="Bind address for the Streamlit server (default: localhost).",
    )
    parser.add_argument(
        "--show",
        dest="headless",
        action="store_false",
        help="Open Streamlit in a browser window instead of headless mode.",
    )
    parser.set_defaults(use_memory=config.USE_MEMORY, headless=True)
    return parser.parse_args(argv)


def build_streamlit_command(
    script_path: Path,
    *,
    port: int,
    headless: bool,
    address: str,
) -> list[str]:
    """Construct the streamlit CLI invocation."""  # noqa: DOC201
    return [
        sys.executable,
        "-m",
        "streamlit",
        "run",
        str(script_path),
        "--server.port",
        str(port),
        "--server.address",
        address,
        "--server.headless",
        "true" if headless else "false",
    ]


def run_streamlit(command: Sequence[str], logger: Logger) -> int:
    """Execute the configured streamlit command and return its exit code."""  # noqa: DOC201
    try:
        result = subprocess.run(command, check=False)
    except KeyboardInterrupt:
        logger.info("pdfqa web UI stopped by user")
        return 0
    except OSError:
        logger.exception("Unable to launch Streamlit")
        return 1
    return result.returncode


def format_answer(answer: StructuredAnswer | str) -> str:
    if isinstance(answer, StructuredAnswer):
        return json.dumps(answer.model_dump(), indent=2, ensure_ascii=False)
    return answer


def iter_questions(questions: Sequence[str], stream: TextIO) -> Iterable[str]:
    """Yield the given questions, or stdin lines until EOF or an exit command."""
    if questions:
        yield from questions
        return
    for line in stream:
        question = line.strip()
        if question.lower() in EXIT_COMMANDS:
            return
        if question:
            yield question


def answer_questions(
    manager: ConversationManager,
    session_id: str,
    questions: Iterable[str],
    logger: Logger,
) -> None:
    """Print an answer per question.

    A question whose answer cannot be parsed is reported and skipped;
    any other error propagates.
    """
    for question in questions:
        try:
            answer = manager.ask_question(session_id, question)
        except MalformedOutputError:
            logger.exception("Could not parse the answer to %r", question)
            continue
        print(f"Question: {question}")  # noqa: T201
        print(f"Answer: {format_answer(answer)}\n")  # noqa: T201


def main(argv: Sequence[str] | None = None) -> int:
    """Validate configuration, prepare the index and answer questions."""  # noqa: DOC201
    args = parse_args(argv)

    config.setup_logging()
    logger = config.get_logger(__name__)

    if args.ui:
        logger.info(
            "Starting pdfqa web UI at http://%s:%s (headless=%s)",
            args.address,
            args.port,
            args.headless,
        )
        return run_streamlit(
            build_streamlit_command(
                WEB_APP, port=args.port, headless=args.headless, address=args.address
            ),
            logger,
        )

    try:
        config.validate()
    except ValueError:
        logger.exception("Configuration invalid")
        return 1

    try:
        pipeline = RAGPipeline(index_dir=args.index_dir)
        pipeline.prepare_index(args.source, rebuild=args.rebuild)
        manager = ConversationManager(
            pipeline,
            output_mode=args.mode,
            use_memory=args.use_memory,
            top_k=args.top_k,
        )
        answer_questions(
            manager, args.session, iter_questions(args.questions, sys.stdin), logger
        )
    except (PDFQAError, OSError, ValueError):
        logger.exception("pdfqa run failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
