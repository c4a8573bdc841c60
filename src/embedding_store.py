from pathlib import Path
from typing import Dict, List, Optional

from langchain_community.vectorstores import Chroma
from langchain_core.embeddings import Embeddings

from src.exceptions import StoreError, TransportError


def open_vector_store(
    embeddings: Embeddings,
    persist_directory: Path,
    collection_name: str,
    distance_metric: str = "cosine"
) -> Chroma:
    """
    Opens the persistent collection, creating the directory and collection if needed.

    This is the one handle the whole session works against. Opening is
    idempotent: an existing store is reused as-is, an absent one is created
    empty.

    :param embeddings: The embedding client used for both fragments and questions.
    :type embeddings: Embeddings
    :param persist_directory: The location where the Chroma database files live.
    :type persist_directory: Path
    :param collection_name: The name of the collection within the database.
    :type collection_name: str
    :param distance_metric: The HNSW space used when the collection is created.
    :type distance_metric: str
    :raises StoreError: If the directory or the collection cannot be opened.
    :return: The opened vector store.
    :rtype: Chroma
    """
    try:
        persist_directory.mkdir(parents=True, exist_ok=True)
        # "hnsw" is the approximate nearest neighbour index Chroma builds; the
        # space is only honoured when the collection is first created.
        return Chroma(
            collection_name=collection_name,
            embedding_function=embeddings,
            persist_directory=str(persist_directory),
            collection_metadata={"hnsw:space": distance_metric}
        )
    except Exception as e:
        raise StoreError(f"Failed to open vector store at {persist_directory}: {e}") from e


def add_fragments(
    vector_store: Chroma,
    ids: List[str],
    texts: List[str],
    metadatas: Optional[List[Dict]] = None
) -> None:
    """
    Adds a batch of fragments in a single call.

    The texts are embedded by the store's embedding client. Chroma upserts, so
    adding an id that already exists replaces its text instead of duplicating it.

    :raises TransportError: If embedding the texts fails.
    :raises StoreError: If the store rejects the batch.
    """
    try:
        vector_store.add_texts(texts=texts, metadatas=metadatas, ids=ids)
    except TransportError:
        raise
    except Exception as e:
        raise StoreError(f"Failed to add {len(ids)} fragments: {e}") from e


def query_fragments(vector_store: Chroma, query: str, k: int) -> List[str]:
    """
    Executes the similarity search for `query`.

    :param vector_store: The vector store instance to search against.
    :type vector_store: Chroma
    :param query: The user's question.
    :type query: str
    :param k: The number of fragments to return. Must not exceed the count.
    :type k: int
    :raises TransportError: If the question cannot be embedded.
    :raises StoreError: If the search itself fails.
    :return: The fragment texts, most similar first.
    :rtype: List[str]
    """
    try:
        documents = vector_store.similarity_search(query, k=k)
    except TransportError:
        raise
    except Exception as e:
        raise StoreError(f"Similarity search failed: {e}") from e
    return [doc.page_content for doc in documents]


def delete_fragments(vector_store: Chroma, ids: List[str]) -> None:
    """
    Deletes fragments by id. Ids that are not in the store are ignored by Chroma.

    :raises StoreError: If the store rejects the deletion.
    """
    try:
        vector_store.delete(ids=ids)
    except Exception as e:
        raise StoreError(f"Failed to delete {', '.join(ids)}: {e}") from e


def count_fragments(vector_store: Chroma) -> int:
    """Returns the number of fragments currently stored."""
    try:
        # The wrapper does not expose count(), so we go through the underlying collection.
        return vector_store._collection.count()
    except Exception as e:
        raise StoreError(f"Failed to count fragments: {e}") from e


def get_vector_store_stats(vector_store: Chroma) -> dict:
    """Name of the collection and how many fragments it holds."""
    return {
        "collection_name": vector_store._collection.name,
        "total_vectors": count_fragments(vector_store)
    }
