"""Tests for updating and deleting single fragments."""

from threading import Event

import pytest

from src.exceptions import OperationCancelledError, StoreError
from src.fragment_editor import delete_fragment, update_fragment


@pytest.fixture
def store_with_doc(fake_store):
    fake_store.add_texts(texts=["old text", "other"], ids=["doc_0", "doc_1"],
                         metadatas=[{"source": "doc", "chunk_index": 0}, {"source": "doc", "chunk_index": 1}])
    return fake_store


def test_update_replaces_text_under_same_id(store_with_doc):
    update_fragment(store_with_doc, "doc_0", "new text")

    assert store_with_doc.text_of("doc_0") == "new text"
    assert list(store_with_doc.fragments).count("doc_0") == 1
    assert store_with_doc._collection.count() == 2
    assert store_with_doc.fragments["doc_0"][1] == {"source": "doc", "chunk_index": 0}


def test_update_of_unknown_id_adds_it(store_with_doc):
    update_fragment(store_with_doc, "free-form", "hello")

    assert store_with_doc.text_of("free-form") == "hello"
    assert store_with_doc.fragments["free-form"][1] == {}


def test_failed_add_leaves_fragment_absent(store_with_doc):
    store_with_doc.reject_add = lambda ids: True

    with pytest.raises(StoreError):
        update_fragment(store_with_doc, "doc_0", "new text")

    assert "doc_0" not in store_with_doc.fragments


def test_delete(store_with_doc):
    delete_fragment(store_with_doc, "doc_1")
    assert list(store_with_doc.fragments) == ["doc_0"]


def test_delete_missing_id_is_a_no_op(store_with_doc):
    delete_fragment(store_with_doc, "missing_9")
    assert store_with_doc._collection.count() == 2


def test_cancelled_update_touches_nothing(store_with_doc):
    cancel = Event()
    cancel.set()

    with pytest.raises(OperationCancelledError):
        update_fragment(store_with_doc, "doc_0", "new text", cancel_event=cancel)

    assert store_with_doc.text_of("doc_0") == "old text"


def test_update_cancelled_after_delete_leaves_fragment_absent(store_with_doc):
    cancel = Event()
    delete = store_with_doc.delete
    added = []
    add_texts = store_with_doc.add_texts

    def delete_then_cancel(ids=None):
        delete(ids=ids)
        cancel.set()

    def record_add(texts, metadatas=None, ids=None):
        added.append(ids)
        return add_texts(texts, metadatas=metadatas, ids=ids)

    store_with_doc.delete = delete_then_cancel
    store_with_doc.add_texts = record_add

    with pytest.raises(OperationCancelledError):
        update_fragment(store_with_doc, "doc_0", "new text", cancel_event=cancel)

    assert "doc_0" not in store_with_doc.fragments
    assert added == []


def test_cancelled_delete_keeps_fragment(store_with_doc):
    cancel = Event()
    cancel.set()

    with pytest.raises(OperationCancelledError):
        delete_fragment(store_with_doc, "doc_1", cancel_event=cancel)

    assert store_with_doc._collection.count() == 2
