from threading import Event
from typing import Optional

from src.embedding_store import add_fragments, delete_fragments
from src.exceptions import raise_if_cancelled
from src.text_processor import parse_fragment_id


def update_fragment(
    vector_store,
    fragment_id: str,
    new_text: str,
    cancel_event: Optional[Event] = None
) -> None:
    """
    Replaces the text of a fragment, keeping its id.

    This is a delete followed by an add, not an atomic swap: if the delete
    goes through and the add fails, the fragment is gone and the error is
    raised to the caller. Nothing tries to restore the old text.

    :param vector_store: The open vector store.
    :param fragment_id: The id of the fragment to replace, e.g. 'notes.txt_3'.
    :type fragment_id: str
    :param new_text: The text stored under that id from now on.
    :type new_text: str
    :param cancel_event: When set, the update stops before the next store call.
    :type cancel_event: Optional[Event]
    :raises StoreError: If either the delete or the add is rejected.
    :raises TransportError: If the new text cannot be embedded.
    """
    raise_if_cancelled(cancel_event, f"deleting {fragment_id}")
    delete_fragments(vector_store, [fragment_id])

    # Keep the source metadata of loaded fragments when the id tells us where it came from.
    parsed = parse_fragment_id(fragment_id)
    metadatas = None
    if parsed is not None:
        metadatas = [{"source": parsed[0], "chunk_index": parsed[1]}]

    raise_if_cancelled(cancel_event, f"re-adding {fragment_id}")
    add_fragments(vector_store, [fragment_id], [new_text], metadatas)


def delete_fragment(
    vector_store,
    fragment_id: str,
    cancel_event: Optional[Event] = None
) -> None:
    """
    Removes a fragment. An unknown id is treated the same as a successful delete.

    :raises StoreError: If the store rejects the deletion.
    """
    raise_if_cancelled(cancel_event, f"deleting {fragment_id}")
    delete_fragments(vector_store, [fragment_id])
