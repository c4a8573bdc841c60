import logging
from pathlib import Path
from typing import List, Sequence, Tuple

from langchain_community.document_loaders import TextLoader
from langchain_core.documents import Document

from src.exceptions import DocumentLoadError

logger = logging.getLogger(__name__)


def load_text(file_path: Path) -> Document:
    """
    Loads a single plaintext file into a single LangChain Document.

    The whole file is one document; it is cut into fragments later. The
    loader stores the path under the 'source' metadata key, which is what the
    fragment ids are built from.

    :param file_path: The full Path object pointing to the text file.
    :type file_path: Path
    :raises DocumentLoadError: If the file cannot be read or decoded as UTF-8.
    :return: The Document holding the entire file's content.
    :rtype: Document
    """
    # We explicitly define the encoding to avoid platform-specific issues with text files.
    loader = TextLoader(str(file_path), encoding='utf-8')
    try:
        documents = loader.load()
    except Exception as e:
        # TextLoader wraps decoding and I/O problems in a RuntimeError; we
        # re-raise them under our own type so callers only have one thing to catch.
        raise DocumentLoadError(f"Failed to read {file_path}: {e}") from e
    return documents[0]


def find_documents(directory: Path, extensions: Sequence[str]) -> List[Path]:
    """
    Lists every file under `directory` (recursively) with a supported extension.

    The result is sorted so that ingestion always visits the files in the
    same order.

    :param directory: The directory to scan.
    :type directory: Path
    :param extensions: Lowercase extensions including the dot, e.g. ['.txt'].
    :type extensions: Sequence[str]
    :raises DocumentLoadError: If the directory does not exist or cannot be listed.
    :return: The matching file paths.
    :rtype: List[Path]
    """
    if not directory.is_dir():
        raise DocumentLoadError(f"Directory not found: {directory}")

    try:
        return sorted(
            f for f in directory.rglob("*")
            if f.is_file() and f.suffix.lower() in extensions
        )
    except OSError as e:
        raise DocumentLoadError(f"Failed to scan {directory}: {e}") from e


def load_documents_from_directory(
    directory: Path,
    extensions: Sequence[str] = ('.txt',)
) -> Tuple[List[Document], List[Tuple[str, str]]]:
    """
    Scans a directory and loads every supported document in it.

    A file that fails to load does not stop the scan: its error is collected
    and returned next to the documents that did load.

    :param directory: The directory containing the source files.
    :type directory: Path
    :param extensions: The file extensions treated as documents.
    :type extensions: Sequence[str]
    :raises DocumentLoadError: If the directory itself is missing or unreadable.
    :return: The loaded documents and a list of (path, error message) pairs.
    :rtype: Tuple[List[Document], List[Tuple[str, str]]]
    """
    documents = []
    errors = []
    for file_path in find_documents(directory, extensions):
        try:
            documents.append(load_text(file_path))
        except DocumentLoadError as e:
            logger.warning("Skipping %s: %s", file_path, e)
            errors.append((str(file_path), str(e)))

    return documents, errors


def get_document_stats(documents: List[Document]) -> dict:
    """Counts the documents and their characters, and lists their source paths."""
    return {
        "total_documents": len(documents),
        "total_characters": sum(len(doc.page_content) for doc in documents),
        "sources": sorted(doc.metadata.get('source', 'unknown') for doc in documents)
    }
