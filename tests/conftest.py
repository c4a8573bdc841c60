"""Shared test fixtures for the knowledge assistant."""

import re
import shutil
import tempfile
from pathlib import Path
from typing import Generator, List

import pytest
from langchain_core.documents import Document

WORD_PATTERN = re.compile(r"\w+")


class FakeCollection:
    """Stands in for the raw Chroma collection behind the wrapper."""

    def __init__(self, store: "FakeVectorStore"):
        self._store = store
        self.name = "test_docs"

    def count(self) -> int:
        return len(self._store.fragments)


class FakeVectorStore:
    """
    In-memory store with the slice of the Chroma wrapper interface we use.

    Results are ranked by the number of words shared with the query, ties
    broken by insertion order. `reject_add` and `fail_query` inject failures.
    """

    def __init__(self):
        self.fragments = {}
        self.queries = []
        self.reject_add = lambda ids: False
        self.fail_query = False
        self._collection = FakeCollection(self)

    def add_texts(self, texts, metadatas=None, ids=None):
        if self.reject_add(ids):
            raise RuntimeError("add rejected")
        metadatas = metadatas or [{} for _ in texts]
        for fragment_id, text, metadata in zip(ids, texts, metadatas):
            self.fragments[fragment_id] = (text, metadata)
        return ids

    def similarity_search(self, query, k=4):
        self.queries.append((query, k))
        if self.fail_query:
            raise RuntimeError("index unavailable")
        if k > len(self.fragments):
            raise ValueError(f"k={k} exceeds the {len(self.fragments)} stored fragments")

        query_words = set(WORD_PATTERN.findall(query.lower()))
        ranked = sorted(
            self.fragments.items(),
            key=lambda item: -len(query_words & set(WORD_PATTERN.findall(item[1][0].lower())))
        )
        return [
            Document(id=fragment_id, page_content=text, metadata=metadata)
            for fragment_id, (text, metadata) in ranked[:k]
        ]

    def delete(self, ids=None):
        for fragment_id in ids or []:
            self.fragments.pop(fragment_id, None)

    def text_of(self, fragment_id):
        return self.fragments[fragment_id][0]


class FakeLLM:
    """Records prompts and replies with a fixed answer."""

    def __init__(self, answer: str = "  forty-two\n"):
        self.answer = answer
        self.prompts: List[str] = []
        self.error = None

    def invoke(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def fake_store() -> FakeVectorStore:
    return FakeVectorStore()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def sample_txt_content() -> str:
    """Sample text content for testing."""
    return """Chroma keeps every fragment next to its embedding.

The assistant cuts each document into overlapping windows of words so that a
sentence falling on a boundary is still found whole in one of the fragments.
Questions are embedded with the same model and matched by cosine distance.
"""


@pytest.fixture
def documents_dir(temp_dir: Path, sample_txt_content: str) -> Path:
    """A documents folder with two text files, a nested one and a file to ignore."""
    docs_dir = temp_dir / "documents"
    (docs_dir / "nested").mkdir(parents=True)

    (docs_dir / "alpha.txt").write_text("a b c d e f g h", encoding="utf-8")
    (docs_dir / "notes.txt").write_text(sample_txt_content, encoding="utf-8")
    (docs_dir / "nested" / "deep.txt").write_text("deep nested words here", encoding="utf-8")
    (docs_dir / "image.png").write_bytes(b"\x89PNG\r\n")

    return docs_dir
