"""Tests for document discovery and loading."""

import pytest

from src.document_loader import (
    find_documents,
    get_document_stats,
    load_documents_from_directory,
    load_text,
)
from src.exceptions import DocumentLoadError


def test_find_documents_is_recursive_and_filtered(documents_dir):
    found = find_documents(documents_dir, ['.txt'])

    assert [p.relative_to(documents_dir).as_posix() for p in found] == [
        "alpha.txt",
        "nested/deep.txt",
        "notes.txt",
    ]


def test_extension_match_ignores_case(temp_dir):
    (temp_dir / "UPPER.TXT").write_text("shout", encoding="utf-8")
    assert len(find_documents(temp_dir, ['.txt'])) == 1


def test_missing_directory(temp_dir):
    with pytest.raises(DocumentLoadError, match="Directory not found"):
        load_documents_from_directory(temp_dir / "nope")


def test_document_load_error_is_an_os_error(temp_dir):
    with pytest.raises(OSError):
        find_documents(temp_dir / "nope", ['.txt'])


def test_load_text_sets_source(documents_dir):
    doc = load_text(documents_dir / "alpha.txt")

    assert doc.page_content == "a b c d e f g h"
    assert doc.metadata["source"] == str(documents_dir / "alpha.txt")


def test_unreadable_file_is_reported_and_skipped(documents_dir):
    (documents_dir / "broken.txt").write_bytes(b"\xff\xfe\xfa not utf-8")

    documents, errors = load_documents_from_directory(documents_dir)

    assert len(documents) == 3
    assert [source for source, _ in errors] == [str(documents_dir / "broken.txt")]


def test_document_stats(documents_dir):
    documents, _ = load_documents_from_directory(documents_dir)
    stats = get_document_stats(documents)

    assert stats["total_documents"] == 3
    assert stats["total_characters"] == sum(len(d.page_content) for d in documents)
    assert stats["sources"] == sorted(stats["sources"])


def test_document_stats_empty():
    assert get_document_stats([]) == {"total_documents": 0, "total_characters": 0, "sources": []}
