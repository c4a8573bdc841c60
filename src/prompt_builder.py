from typing import List

# Joins accepted fragments; it counts against the character budget.
CONTEXT_SEPARATOR = "\n"

# The model is told to fall back on its own knowledge when the context does
# not cover the question, so a question is always answered.
PROMPT_TEMPLATE = """Use the following context to answer the question.
If the context is not enough, answer with what you know.

Context:
{context}

Question: {question}
Answer:"""


def assemble_context(fragments: List[str], char_budget: int) -> str:
    """
    Packs the highest-ranked fragments into a context of at most `char_budget` characters.

    Fragments are taken in the order given (best match first) for as long as
    the next one, plus its separator, still fits. The first one that does not
    fit ends the context: we never skip it to squeeze in a shorter, lower
    ranked fragment.

    :param fragments: Fragment texts ranked by similarity, best first.
    :type fragments: List[str]
    :param char_budget: Maximum length of the returned string.
    :type char_budget: int
    :return: The accepted fragments joined by newlines, or an empty string if
             even the first one is too long.
    :rtype: str
    """
    accepted = []
    total_chars = 0

    for fragment in fragments:
        needed = len(fragment) + (len(CONTEXT_SEPARATOR) if accepted else 0)
        if total_chars + needed > char_budget:
            break
        accepted.append(fragment)
        total_chars += needed

    return CONTEXT_SEPARATOR.join(accepted)


def create_prompt(question: str, context: str) -> str:
    """
    Builds the generation prompt: instruction, context, question and answer cue.

    :param question: The question asked by the user, inserted verbatim.
    :type question: str
    :param context: The string returned by `assemble_context`.
    :type context: str
    :return: The final prompt string, ready to be sent to the LLM.
    :rtype: str
    """
    return PROMPT_TEMPLATE.format(context=context, question=question)
