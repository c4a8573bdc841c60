"""Tests for the ingestion pass."""

from threading import Event

import pytest

from src.exceptions import DocumentLoadError, OperationCancelledError
from src.document_loader import load_documents_from_directory
from src.indexer import ingest_directory, ingest_documents
from src.text_processor import split_documents


def test_indexes_every_document(fake_store, documents_dir):
    report = ingest_directory(fake_store, documents_dir, 4, 0.25)

    alpha = str(documents_dir / "alpha.txt")
    assert report.documents_indexed == 3
    assert report.errors == []
    assert report.fragments_indexed == len(fake_store.fragments)
    assert fake_store.text_of(f"{alpha}_0") == "a b c d"
    assert fake_store.text_of(f"{alpha}_2") == "g h"
    assert fake_store.fragments[f"{alpha}_1"][1] == {"source": alpha, "chunk_index": 1}


def test_reloading_overwrites_instead_of_duplicating(fake_store, documents_dir):
    first = ingest_directory(fake_store, documents_dir, 4, 0.25)
    snapshot = dict(fake_store.fragments)

    second = ingest_directory(fake_store, documents_dir, 4, 0.25)

    assert second.fragments_indexed == first.fragments_indexed
    assert fake_store.fragments == snapshot


def test_failed_document_does_not_stop_the_others(fake_store, documents_dir):
    fake_store.reject_add = lambda ids: any("notes.txt" in i for i in ids)

    report = ingest_directory(fake_store, documents_dir, 4, 0.25)

    assert report.documents_indexed == 2
    assert [source for source, _ in report.errors] == [str(documents_dir / "notes.txt")]
    assert report.fragments_indexed == len(fake_store.fragments)
    assert not any("notes.txt" in i for i in fake_store.fragments)


def test_empty_document_contributes_nothing(fake_store, temp_dir):
    (temp_dir / "blank.txt").write_text("   \n", encoding="utf-8")

    report = ingest_directory(fake_store, temp_dir, 4, 0.25)

    assert report.fragments_indexed == 0
    assert report.documents_indexed == 0
    assert report.errors == []


def test_missing_directory(fake_store, temp_dir):
    with pytest.raises(DocumentLoadError):
        ingest_directory(fake_store, temp_dir / "missing", 4, 0.25)


def test_cancelled_before_first_write(fake_store, documents_dir):
    cancel = Event()
    cancel.set()

    with pytest.raises(OperationCancelledError):
        ingest_directory(fake_store, documents_dir, 4, 0.25, cancel_event=cancel)
    assert fake_store.fragments == {}


def test_stored_fragments_match_split_documents(fake_store, documents_dir):
    """The fragments written are exactly the ones `split_documents` previews."""
    documents, _ = load_documents_from_directory(documents_dir)
    preview = split_documents(documents, 4, 0.25)

    report = ingest_documents(fake_store, documents, 4, 0.25)

    assert report.fragments_indexed == len(preview)
    assert list(fake_store.fragments) == [chunk.id for chunk in preview]
    for chunk in preview:
        assert fake_store.fragments[chunk.id] == (chunk.page_content, chunk.metadata)


def test_load_errors_come_first_in_the_report(fake_store, documents_dir):
    (documents_dir / "broken.txt").write_bytes(b"\xff\xfe\xfa not utf-8")
    fake_store.reject_add = lambda ids: any("notes.txt" in i for i in ids)

    report = ingest_directory(fake_store, documents_dir, 4, 0.25)

    assert [source for source, _ in report.errors] == [
        str(documents_dir / "broken.txt"),
        str(documents_dir / "notes.txt"),
    ]
