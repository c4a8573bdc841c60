import logging
import sys
from pathlib import Path

# Add parent directory to path so we can import our modules.
sys.path.append(str(Path(__file__).parent.parent.parent))

from config.settings import (
    CHUNK_OVERLAP,
    CHUNK_SIZE,
    COLLECTION_NAME,
    DISTANCE_METRIC,
    DOCUMENTS_DIR,
    EMBEDDING_MODEL,
    LOG_LEVEL,
    OLLAMA_BASE_URL,
    REQUEST_TIMEOUT_SECONDS,
    SUPPORTED_EXTENSIONS,
    VECTOR_DB_DIR,
)
from src.document_loader import get_document_stats, load_documents_from_directory
from src.embedding_store import get_vector_store_stats, open_vector_store
from src.exceptions import KnowledgeBaseError
from src.indexer import ingest_documents
from src.ollama_client import check_embedding_model, create_embeddings
from src.text_processor import get_chunk_stats, preview_chunk, split_documents


def print_header():
    """Prints a clear, descriptive header for the CLI application."""
    print("=" * 70)
    print("📚 DOCUMENT INGESTION PIPELINE")
    print("=" * 70)
    print()


def print_section(title: str):
    """Prints a standardized, visible section header during the process."""
    print(f"\n{'─' * 70}")
    print(f"🔹 {title}")
    print(f"{'─' * 70}")


def main() -> int:
    """
    Indexes the documents folder once, outside the interactive session.

    Runs the same load pass as the session's `load` command, with a preview
    of the documents and fragments first and a connectivity check of the
    embedding model before anything is written.
    """
    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    print_header()

    try:
        # ========================================================================
        # STEP 1: Preview documents and fragments
        # ========================================================================
        print_section("Step 1: Loading Documents")

        documents, load_errors = load_documents_from_directory(DOCUMENTS_DIR, SUPPORTED_EXTENSIONS)
        for source, message in load_errors:
            print(f"⚠️  {source}: {message}")
        if not documents:
            print(f"❌ No {'/'.join(SUPPORTED_EXTENSIONS)} documents could be loaded from {DOCUMENTS_DIR}")
            return 1

        stats = get_document_stats(documents)
        print(f"✅ Loaded {stats['total_documents']} documents")
        print(f"   Total raw character count: {stats['total_characters']:,}")
        for source in stats['sources']:
            print(f"   - {Path(source).name}")

        print(f"\nChunking with parameters: window={CHUNK_SIZE} words, overlap={CHUNK_OVERLAP:.0%}")
        chunks = split_documents(documents, CHUNK_SIZE, CHUNK_OVERLAP)
        chunk_stats = get_chunk_stats(chunks)
        print(f"✅ {chunk_stats['total_chunks']} fragments")
        print(f"   Size range: {chunk_stats['min_chunk_size']}-{chunk_stats['max_chunk_size']} characters")
        if chunks:
            print(f"\n📋 First fragment ({chunks[0].id}):")
            print(f"   {preview_chunk(chunks[0])}")

        # ========================================================================
        # STEP 2: Check the embedding model
        # ========================================================================
        print_section("Step 2: Testing Embedding Model")
        print(f"Model: {EMBEDDING_MODEL}")
        print(f"Ollama URL: {OLLAMA_BASE_URL}")

        embeddings = create_embeddings(EMBEDDING_MODEL, OLLAMA_BASE_URL, REQUEST_TIMEOUT_SECONDS)
        dimension = check_embedding_model(embeddings)
        print(f"✅ Embedding dimension confirmed: {dimension}")

        # ========================================================================
        # STEP 3: Index
        # ========================================================================
        print_section("Step 3: Indexing Fragments in ChromaDB")

        vector_store = open_vector_store(embeddings, VECTOR_DB_DIR, COLLECTION_NAME, DISTANCE_METRIC)
        # Index the documents loaded in step 1 so the preview matches what is stored.
        report = ingest_documents(vector_store, documents, CHUNK_SIZE, CHUNK_OVERLAP)
        for source, message in report.errors:
            print(f"⚠️  {source}: {message}")

        store_stats = get_vector_store_stats(vector_store)
        print(f"✅ Indexed {report.fragments_indexed} fragments from {report.documents_indexed} documents")
        print(f"   Collection '{store_stats['collection_name']}' now holds {store_stats['total_vectors']} fragments")
        print(f"   Saved to persistence folder: {VECTOR_DB_DIR}")

        return 0 if report.fragments_indexed else 1

    except KnowledgeBaseError as e:
        print("\n" + "=" * 70)
        print("❌ INGESTION FAILURE")
        print("=" * 70)
        print(f"{type(e).__name__}: {e}")
        print("Please check that the Ollama service is running and the embedding model is installed.")
        return 1


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
