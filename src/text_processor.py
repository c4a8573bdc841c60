from typing import List, Optional, Tuple

from langchain_core.documents import Document
from langchain_text_splitters import TextSplitter


def compute_stride(window_size: int, overlap_fraction: float) -> int:
    """
    Returns how many words a window advances before the next one starts.

    The stride is `window_size * (1 - overlap_fraction)` rounded down. When
    that is zero or negative (an overlap of 100% or more) we fall back to
    windows that do not overlap at all, otherwise the loop would never move.

    :param window_size: Number of words per fragment.
    :type window_size: int
    :param overlap_fraction: Share of a window repeated in the next one.
    :type overlap_fraction: float
    :return: The number of words between the starts of two consecutive windows.
    :rtype: int
    """
    stride = int(window_size * (1 - overlap_fraction))
    if stride <= 0:
        stride = window_size
    return stride


def split_text(text: str, window_size: int, overlap_fraction: float) -> List[str]:
    """
    Cuts a text into overlapping windows of whitespace-separated words.

    Each fragment is the words `[i, i + window_size)` joined by single spaces,
    with `i` advancing by the stride. The final window may be shorter; once a
    window reaches the last word we stop, so the tail is never emitted twice.

    Example: "a b c d e f g h" with window 4 and overlap 0.25 (stride 3)
    gives ["a b c d", "d e f g", "g h"].

    :param text: The raw document text.
    :type text: str
    :param window_size: Maximum number of words per fragment. Must be positive.
    :type window_size: int
    :param overlap_fraction: Share of each window repeated in the next one.
    :type overlap_fraction: float
    :raises ValueError: If `window_size` is not positive.
    :return: The fragments in document order. Empty for an empty text.
    :rtype: List[str]
    """
    if window_size <= 0:
        raise ValueError(f"window_size must be positive, got {window_size}")

    words = text.split()
    stride = compute_stride(window_size, overlap_fraction)

    fragments = []
    for start in range(0, len(words), stride):
        end = min(start + window_size, len(words))
        fragments.append(" ".join(words[start:end]))
        if end == len(words):
            break

    return fragments


class WordWindowSplitter(TextSplitter):
    """
    LangChain text splitter that uses `split_text`'s word windows.

    Plugging the windowing into LangChain's `TextSplitter` gives us its
    `create_documents` / `split_documents` helpers, which copy the source
    metadata onto every fragment.
    """

    def __init__(self, window_size: int, overlap_fraction: float, **kwargs):
        if window_size <= 0:
            raise ValueError(f"window_size must be positive, got {window_size}")
        self.window_size = window_size
        self.overlap_fraction = overlap_fraction
        stride = compute_stride(window_size, overlap_fraction)
        super().__init__(
            chunk_size=window_size,
            chunk_overlap=window_size - stride,
            length_function=lambda t: len(t.split()),
            **kwargs
        )

    def split_text(self, text: str) -> List[str]:
        return split_text(text, self.window_size, self.overlap_fraction)


def make_fragment_id(source: str, index: int) -> str:
    """Builds the stable id `<source>_<index>` of a document's fragment."""
    return f"{source}_{index}"


def parse_fragment_id(fragment_id: str) -> Optional[Tuple[str, int]]:
    """
    Splits an id built by `make_fragment_id` back into (source, index).

    :param fragment_id: The fragment id entered by the user or stored in the index.
    :type fragment_id: str
    :return: The source path and fragment index, or None if the id does not
             end in `_<number>`.
    :rtype: Optional[Tuple[str, int]]
    """
    source, sep, index = fragment_id.rpartition("_")
    if not sep or not source or not index.isdigit():
        return None
    return source, int(index)


def split_documents(
    documents: List[Document],
    chunk_size: int,
    chunk_overlap: float
) -> List[Document]:
    """
    Executes the chunking process on a list of loaded documents.

    Every resulting Document carries its fragment id (in `Document.id`) plus
    the 'source' and 'chunk_index' metadata it was derived from.

    :param documents: A list of Document objects (one per file) to be split.
    :type documents: List[Document]
    :param chunk_size: The window size, in words.
    :type chunk_size: int
    :param chunk_overlap: The overlap fraction between consecutive windows.
    :type chunk_overlap: float
    :return: The fragments of all documents, in document order.
    :rtype: List[Document]
    """
    if not documents:
        return []

    splitter = WordWindowSplitter(chunk_size, chunk_overlap)

    chunks = []
    for document in documents:
        source = document.metadata.get('source', 'unknown')
        for index, chunk in enumerate(splitter.split_documents([document])):
            chunk.id = make_fragment_id(source, index)
            chunk.metadata['chunk_index'] = index
            chunks.append(chunk)

    return chunks


def get_chunk_stats(chunks: List[Document]) -> dict:
    """Counts the fragments and their shortest and longest length in characters."""
    sizes = [len(chunk.page_content) for chunk in chunks]
    return {
        "total_chunks": len(sizes),
        "min_chunk_size": min(sizes, default=0),
        "max_chunk_size": max(sizes, default=0)
    }


def preview_chunk(chunk: Document, length: int = 200) -> str:
    """Returns the start of a fragment, with '...' when it was cut."""
    content = chunk.page_content
    if len(content) <= length:
        return content
    return content[:length] + "..."
