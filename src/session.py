import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from threading import Event
from typing import Any, Optional, Sequence, TextIO

from src.exceptions import (
    EmptyCollectionError,
    KnowledgeBaseError,
    UnrecognizedCommandError,
)
from src.fragment_editor import delete_fragment, update_fragment
from src.indexer import ingest_directory
from src.retriever import answer_question

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """
    The handles and settings every command works with.

    It is built once at startup and passed explicitly, so tests can run a
    session against an in-memory store and a fake model.
    """

    vector_store: Any
    llm: Any
    documents_dir: Path
    chunk_size: int = 400
    chunk_overlap: float = 0.25
    extensions: Sequence[str] = ('.txt',)
    top_k: int = 10
    max_context_chars: int = 4000
    prompt_preview_chars: int = 200
    cancel_event: Optional[Event] = None


class SessionState(Enum):
    AWAITING_COMMAND = "awaiting_command"
    LOADING = "loading"
    QUERYING = "querying"
    UPDATING = "updating"
    DELETING = "deleting"
    EXITING = "exiting"


COMMANDS = {
    "load": SessionState.LOADING,
    "query": SessionState.QUERYING,
    "update": SessionState.UPDATING,
    "delete": SessionState.DELETING,
    "exit": SessionState.EXITING,
}

COMMAND_MENU = "[" + "|".join(COMMANDS) + "]"


def parse_command(line: str) -> SessionState:
    """
    Maps a line of input to the state that handles it.

    :param line: Raw input; surrounding whitespace and case are ignored.
    :type line: str
    :raises UnrecognizedCommandError: If the line is not one of the commands.
    :return: The state the session moves to.
    :rtype: SessionState
    """
    command = line.strip().lower()
    try:
        return COMMANDS[command]
    except KeyError:
        raise UnrecognizedCommandError(command) from None


class Session:
    """
    The interactive command loop.

    The session sits in AWAITING_COMMAND, reads one command, moves to the
    matching state, runs it to completion and comes back. EXITING is the only
    way out (end of input counts as `exit`). Errors raised by a command are
    printed and the loop carries on.
    """

    def __init__(
        self,
        context: SessionContext,
        input_stream: Optional[TextIO] = None,
        output: Optional[TextIO] = None
    ):
        self.context = context
        self.input_stream = input_stream if input_stream is not None else sys.stdin
        self.output = output if output is not None else sys.stdout
        self.state = SessionState.AWAITING_COMMAND
        self._handlers = {
            SessionState.LOADING: self._load,
            SessionState.QUERYING: self._query,
            SessionState.UPDATING: self._update,
            SessionState.DELETING: self._delete,
            SessionState.EXITING: self._exit,
        }

    def _print(self, message: str = "") -> None:
        print(message, file=self.output)

    def _ask(self, prompt: str) -> Optional[str]:
        """Prints a prompt and reads one stripped line, or None at end of input."""
        self.output.write(prompt)
        self.output.flush()
        line = self.input_stream.readline()
        if not line:
            return None
        return line.strip()

    def step(self) -> bool:
        """
        Reads and runs a single command.

        :return: False once the session has reached EXITING, True otherwise.
        :rtype: bool
        """
        self._print(f"\n{COMMAND_MENU}")
        line = self._ask("> ")
        if line is None:
            line = "exit"

        try:
            self.state = parse_command(line)
            self._handlers[self.state]()
        except UnrecognizedCommandError as e:
            self._print(f"⚠️  {e}")
        except EmptyCollectionError as e:
            self._print(f"⚠️  {e}")
        except KnowledgeBaseError as e:
            self._print(f"❌ {e}")
        except Exception as e:
            logger.exception("Command %r failed", line)
            self._print(f"❌ Unexpected error: {type(e).__name__}: {e}")

        if self.state is SessionState.EXITING:
            return False
        self.state = SessionState.AWAITING_COMMAND
        return True

    def run(self) -> int:
        """Loops until `exit` and returns the process exit code."""
        while self.step():
            pass
        return 0

    def _load(self) -> None:
        ctx = self.context
        self._print(f"📂 Loading documents from {ctx.documents_dir}...")
        report = ingest_directory(
            ctx.vector_store,
            ctx.documents_dir,
            ctx.chunk_size,
            ctx.chunk_overlap,
            extensions=ctx.extensions,
            cancel_event=ctx.cancel_event
        )
        for source, message in report.errors:
            self._print(f"⚠️  {source}: {message}")
        self._print(
            f"✅ Total fragments indexed: {report.fragments_indexed} "
            f"(from {report.documents_indexed} documents)"
        )

    def _query(self) -> None:
        question = self._ask("❓ Your question: ")
        if not question:
            return

        ctx = self.context
        answer = answer_question(
            ctx.vector_store,
            ctx.llm,
            question,
            top_k=ctx.top_k,
            max_context_chars=ctx.max_context_chars,
            prompt_preview_chars=ctx.prompt_preview_chars,
            cancel_event=ctx.cancel_event
        )
        self._print(f"🔍 Retrieved {len(answer.fragments)} fragments")
        self._print("\n🤖 Answer:")
        self._print(answer.text)

    def _update(self) -> None:
        fragment_id = self._ask("Fragment id: ")
        if not fragment_id:
            self._print("⚠️  A fragment id is required")
            return
        new_text = self._ask("New text: ")
        if new_text is None:
            self._print("⚠️  Update cancelled")
            return

        update_fragment(self.context.vector_store, fragment_id, new_text, self.context.cancel_event)
        self._print(f"✅ Fragment {fragment_id} updated")

    def _delete(self) -> None:
        fragment_id = self._ask("Fragment id: ")
        if not fragment_id:
            self._print("⚠️  A fragment id is required")
            return

        delete_fragment(self.context.vector_store, fragment_id, self.context.cancel_event)
        self._print(f"✅ Fragment {fragment_id} deleted")

    def _exit(self) -> None:
        self._print("👋 Goodbye!")
