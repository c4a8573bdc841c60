from threading import Event
from typing import Optional


class KnowledgeBaseError(Exception):
    """Base class for every error the assistant reports to the user."""


class DocumentLoadError(KnowledgeBaseError, OSError):
    """A document directory or file could not be read."""


class TransportError(KnowledgeBaseError):
    """An HTTP call to Ollama failed, timed out or returned an unexpected body."""


class StoreError(KnowledgeBaseError):
    """The vector store rejected an open, add, query, delete or count."""


class EmptyCollectionError(KnowledgeBaseError):
    """A question was asked before any fragment was indexed."""


class RetrievalError(KnowledgeBaseError):
    """The similarity query for a question failed."""


class GenerationError(KnowledgeBaseError):
    """The language model could not produce an answer."""


class UnrecognizedCommandError(KnowledgeBaseError):
    """The session received input that is not one of its commands."""

    def __init__(self, command: str):
        super().__init__(f"Unrecognized command: {command!r}")
        self.command = command


class OperationCancelledError(KnowledgeBaseError):
    """The caller asked for the running operation to stop."""


def raise_if_cancelled(cancel_event: Optional[Event], operation: str) -> None:
    """
    Stops an operation before its next external call if cancellation was requested.

    :param cancel_event: The event shared with the caller, or None when the
                         operation cannot be cancelled.
    :type cancel_event: Optional[Event]
    :param operation: Short name of the step about to run, used in the message.
    :type operation: str
    :raises OperationCancelledError: If the event is set.
    """
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError(f"Cancelled before {operation}")
