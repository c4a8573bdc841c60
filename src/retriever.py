import logging
from dataclasses import dataclass
from threading import Event
from typing import List, Optional

from src.embedding_store import count_fragments, query_fragments
from src.exceptions import (
    EmptyCollectionError,
    GenerationError,
    RetrievalError,
    StoreError,
    TransportError,
    raise_if_cancelled,
)
from src.llm import generate_answer
from src.prompt_builder import assemble_context, create_prompt

logger = logging.getLogger(__name__)


@dataclass
class RagAnswer:
    """Everything produced while answering one question."""

    text: str
    fragments: List[str]
    context: str
    prompt: str


def answer_question(
    vector_store,
    llm,
    question: str,
    top_k: int,
    max_context_chars: int,
    prompt_preview_chars: int = 200,
    cancel_event: Optional[Event] = None
) -> RagAnswer:
    """
    Runs retrieval and generation for a single question.

    The number of fragments requested is clamped to what the collection
    holds, the results are packed into the context budget, and the model is
    asked to answer from the context when it is enough and from its own
    knowledge otherwise. The generated text is returned as-is.

    :param vector_store: The open vector store.
    :param llm: The language model used to write the answer.
    :param question: The user's question.
    :type question: str
    :param top_k: The configured number of fragments to retrieve.
    :type top_k: int
    :param max_context_chars: Character budget for the assembled context.
    :type max_context_chars: int
    :param prompt_preview_chars: How much of the prompt to write to the debug log.
    :type prompt_preview_chars: int
    :param cancel_event: When set, the call stops before the next external call.
    :type cancel_event: Optional[Event]
    :raises EmptyCollectionError: If nothing has been indexed yet. The model is not called.
    :raises RetrievalError: If the similarity query fails.
    :raises GenerationError: If the model call fails.
    :return: The answer with the fragments, context and prompt it was built from.
    :rtype: RagAnswer
    """
    try:
        count = count_fragments(vector_store)
    except StoreError as e:
        raise RetrievalError(str(e)) from e
    if count == 0:
        raise EmptyCollectionError("The collection is empty: load some documents first")

    k = min(top_k, count)

    raise_if_cancelled(cancel_event, "the similarity query")
    try:
        fragments = query_fragments(vector_store, question, k)
    except (StoreError, TransportError) as e:
        raise RetrievalError(f"Retrieval failed: {e}") from e

    context = assemble_context(fragments, max_context_chars)
    prompt = create_prompt(question, context)
    logger.info("Prompt (first %d chars): %s...", prompt_preview_chars, prompt[:prompt_preview_chars])

    raise_if_cancelled(cancel_event, "generation")
    try:
        text = generate_answer(llm, prompt)
    except TransportError as e:
        raise GenerationError(f"Generation failed: {e}") from e
    logger.info("Raw answer >>>%s<<<", text)

    return RagAnswer(text=text, fragments=fragments, context=context, prompt=prompt)
