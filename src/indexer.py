import logging
from dataclasses import dataclass, field
from pathlib import Path
from threading import Event
from typing import List, Optional, Sequence, Tuple

from langchain_core.documents import Document

from src.document_loader import load_documents_from_directory
from src.embedding_store import add_fragments
from src.exceptions import KnowledgeBaseError, raise_if_cancelled
from src.text_processor import split_documents

logger = logging.getLogger(__name__)


@dataclass
class IngestReport:
    """Outcome of one load pass."""

    fragments_indexed: int = 0
    documents_indexed: int = 0
    # (source path, error message) for every document that contributed nothing.
    errors: List[Tuple[str, str]] = field(default_factory=list)


def ingest_documents(
    vector_store,
    documents: List[Document],
    chunk_size: int,
    chunk_overlap: float,
    cancel_event: Optional[Event] = None
) -> IngestReport:
    """
    Splits already loaded documents and writes their fragments to the store.

    Each document is sent as one batch of the fragments produced by
    `split_documents`, with ids of the form `<path>_<index>`. Because the ids
    only depend on the path and the position of the fragment, loading the
    same unchanged files again overwrites the existing fragments rather than
    duplicating them.

    A document whose batch fails is logged and recorded in the report; the
    remaining documents are still processed.

    :param vector_store: The open vector store.
    :param documents: Documents as returned by `load_documents_from_directory`.
    :type documents: List[Document]
    :param chunk_size: Window size in words.
    :type chunk_size: int
    :param chunk_overlap: Overlap fraction between consecutive windows.
    :type chunk_overlap: float
    :param cancel_event: When set, the pass stops before the next store write.
    :type cancel_event: Optional[Event]
    :raises OperationCancelledError: If `cancel_event` is set mid-pass.
    :return: The number of fragments and documents indexed, plus per-document errors.
    :rtype: IngestReport
    """
    report = IngestReport()

    for document in documents:
        source = document.metadata.get('source', 'unknown')
        chunks = split_documents([document], chunk_size, chunk_overlap)
        if not chunks:
            logger.info("Skipping %s: no text", source)
            continue

        raise_if_cancelled(cancel_event, f"indexing {source}")
        try:
            add_fragments(
                vector_store,
                [chunk.id for chunk in chunks],
                [chunk.page_content for chunk in chunks],
                [chunk.metadata for chunk in chunks]
            )
        except KnowledgeBaseError as e:
            logger.warning("Failed to index %s: %s", source, e)
            report.errors.append((source, str(e)))
            continue

        logger.info("Indexed %d fragments from %s", len(chunks), source)
        report.fragments_indexed += len(chunks)
        report.documents_indexed += 1

    return report


def ingest_directory(
    vector_store,
    directory: Path,
    chunk_size: int,
    chunk_overlap: float,
    extensions: Sequence[str] = ('.txt',),
    cancel_event: Optional[Event] = None
) -> IngestReport:
    """
    Loads every document under `directory` and indexes it with `ingest_documents`.

    Files that could not be read are reported in the same error list as
    documents the store rejected.

    :raises DocumentLoadError: If the directory itself cannot be read.
    :raises OperationCancelledError: If `cancel_event` is set mid-pass.
    """
    documents, load_errors = load_documents_from_directory(directory, extensions)
    report = ingest_documents(vector_store, documents, chunk_size, chunk_overlap, cancel_event)
    report.errors[:0] = load_errors
    return report
