"""Question answering over the indexed document, with optional memory."""

from .config import OUTPUT_MODES, config
from .generation import AnswerGenerator
from .memory import ConversationMemory
from .models import ConversationTurn, StructuredAnswer
from .output_repair import repair
from .pipeline import RAGPipeline
from .prompts import STRUCTURED_SYSTEM_TEMPLATE, TEXT_SYSTEM_TEMPLATE, compose_prompt
from .retrieval import Retriever

logger = config.get_logger(__name__)


class ConversationManager:
    """Runs Retrieve -> Compose -> Generate -> Repair -> Remember per question."""

    def __init__(  # noqa: PLR0913
        self,
        rag_pipeline: RAGPipeline,
        generator: AnswerGenerator | None = None,
        memory: ConversationMemory | None = None,
        *,
        output_mode: str | None = None,
        use_memory: bool | None = None,
        top_k: int | None = None,
        system_instructions: str | None = None,
    ) -> None:
        """Initialize ConversationManager.

        Args:
            rag_pipeline: RAG pipeline holding the vector index.
            generator: Chat client. If None, one is built from config.
            memory: Conversation memory. If None, one is built with
                config.MAX_HISTORY_MESSAGES.
            output_mode: "text" or "structured". If None, uses
                config.OUTPUT_MODE.
            use_memory: Replay and record session history. If None, uses
                config.USE_MEMORY.
            top_k: Chunks retrieved per question. If None, uses
                config.RETRIEVAL_TOP_K.
            system_instructions: Overrides the instructions implied by
                ``output_mode``.

        Raises:
            ValueError: If ``output_mode`` is unknown.
        """
        output_mode = (output_mode or config.OUTPUT_MODE).lower()
        if output_mode not in OUTPUT_MODES:
            msg = f"Unsupported output mode: {output_mode}"
            raise ValueError(msg)

        self.rag_pipeline = rag_pipeline
        self.retriever = Retriever(rag_pipeline)
        self.generator = generator or AnswerGenerator()
        self.output_mode = output_mode
        self.use_memory = config.USE_MEMORY if use_memory is None else use_memory
        self.top_k = top_k or config.RETRIEVAL_TOP_K
        self.system_instructions = system_instructions or (
            STRUCTURED_SYSTEM_TEMPLATE
            if output_mode == "structured"
            else TEXT_SYSTEM_TEMPLATE
        )
        self.memory = memory or ConversationMemory(
            self.system_instructions, max_messages=config.MAX_HISTORY_MESSAGES
        )

    def ask_question(self, session_id: str, question: str) -> StructuredAnswer | str:
        """Answer one question within a session.

        An empty retrieval still reaches the model with the bare question.
        The human and assistant turns are recorded only after the answer
        was produced, so a failed turn leaves the history untouched.

        Returns:
            A StructuredAnswer in structured mode, the model text otherwise.
        """
        with self.memory.session_lock(session_id):
            logger.info("Session %s question: %s", session_id, question)

            context = self.retriever.retrieve(question, k=self.top_k)
            history = self.memory.history(session_id) if self.use_memory else []
            prompt = compose_prompt(
                self.system_instructions, history, context, question
            )

            raw_answer = self.generator.generate(prompt)
            answer = (
                repair(raw_answer) if self.output_mode == "structured" else raw_answer
            )

            if self.use_memory:
                self.memory.append(session_id, ConversationTurn.human(question))
                self.memory.append(session_id, ConversationTurn.assistant(raw_answer))

            return answer

    def history(self, session_id: str) -> list[ConversationTurn]:
        return self.memory.history(session_id)

    def clear_history(self, session_id: str) -> None:
        """Clear the conversation history of one session."""
        self.memory.clear(session_id)
