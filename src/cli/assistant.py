import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add parent directory to path so we can import our modules.
sys.path.append(str(Path(__file__).parent.parent.parent))

from config.settings import (
    CHUNK_OVERLAP,
    CHUNK_SIZE,
    COLLECTION_NAME,
    DISTANCE_METRIC,
    DOCUMENTS_DIR,
    EMBEDDING_MODEL,
    LLM_MODEL,
    LLM_TEMPERATURE,
    LOG_LEVEL,
    MAX_CONTEXT_CHARS,
    OLLAMA_BASE_URL,
    PROMPT_PREVIEW_CHARS,
    REQUEST_TIMEOUT_SECONDS,
    SUPPORTED_EXTENSIONS,
    TOP_K_RESULTS,
    VECTOR_DB_DIR,
)
from src.embedding_store import get_vector_store_stats, open_vector_store
from src.exceptions import EmptyCollectionError, KnowledgeBaseError, StoreError
from src.llm import create_llm
from src.ollama_client import create_embeddings
from src.retriever import answer_question
from src.session import Session, SessionContext


def print_header():
    """Prints a clear, descriptive header for the CLI application."""
    print("=" * 70)
    print("💬 KNOWLEDGE ASSISTANT - persistent RAG session (Chroma + Ollama)")
    print("=" * 70)
    print()


def print_section(title: str):
    """Prints a standardized, visible section header during the process."""
    print(f"\n{'─' * 70}")
    print(f"🔹 {title}")
    print(f"{'─' * 70}")


def build_context() -> SessionContext:
    """
    Opens the vector store and creates the model clients from the settings.

    :raises StoreError: If the vector store cannot be opened.
    :return: The context shared by every command of the session.
    :rtype: SessionContext
    """
    embeddings = create_embeddings(EMBEDDING_MODEL, OLLAMA_BASE_URL, REQUEST_TIMEOUT_SECONDS)
    vector_store = open_vector_store(embeddings, VECTOR_DB_DIR, COLLECTION_NAME, DISTANCE_METRIC)
    llm = create_llm(LLM_MODEL, OLLAMA_BASE_URL, LLM_TEMPERATURE, REQUEST_TIMEOUT_SECONDS)

    return SessionContext(
        vector_store=vector_store,
        llm=llm,
        documents_dir=DOCUMENTS_DIR,
        chunk_size=CHUNK_SIZE,
        chunk_overlap=CHUNK_OVERLAP,
        extensions=SUPPORTED_EXTENSIONS,
        top_k=TOP_K_RESULTS,
        max_context_chars=MAX_CONTEXT_CHARS,
        prompt_preview_chars=PROMPT_PREVIEW_CHARS
    )


def single_question_mode(context: SessionContext, question: str) -> int:
    """
    Answers one question and returns the exit code.

    This mode is useful for scripting, when the question is given on the
    command line instead of typed into the session.

    :param context: The opened session context.
    :type context: SessionContext
    :param question: The single question string to be answered.
    :type question: str
    :return: 0 if an answer was printed, 1 otherwise.
    :rtype: int
    """
    print(f"Question: {question}\n")
    try:
        answer = answer_question(
            context.vector_store,
            context.llm,
            question,
            top_k=context.top_k,
            max_context_chars=context.max_context_chars,
            prompt_preview_chars=context.prompt_preview_chars
        )
    except EmptyCollectionError as e:
        print(f"⚠️  {e}")
        return 1
    except KnowledgeBaseError as e:
        print(f"❌ {e}")
        return 1

    print(f"🔍 Retrieved {len(answer.fragments)} fragments")
    print("\n🤖 Answer:")
    print(answer.text)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Opens the store, then runs the interactive session or a single question.

    Failing to open the vector store is the only fatal error: the process
    exits with status 1. Everything else is reported inside the session.
    """
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    print_header()
    print_section("Opening Vector Store")
    print(f"Persistence folder: {VECTOR_DB_DIR}")
    print(f"Embedding model: {EMBEDDING_MODEL} | LLM: {LLM_MODEL} | Ollama URL: {OLLAMA_BASE_URL}")

    try:
        context = build_context()
        stats = get_vector_store_stats(context.vector_store)
    except StoreError as e:
        print(f"❌ {e}")
        print("👉 Check that the persistence folder is writable and not used by another process.")
        return 1

    print(f"✅ Collection '{stats['collection_name']}' ready: {stats['total_vectors']} fragments indexed")

    if argv:
        print_section("Single Question Mode")
        return single_question_mode(context, " ".join(argv))

    print_section("Interactive Session")
    print(f"Documents folder for 'load': {DOCUMENTS_DIR}")
    return Session(context).run()


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
