"""Unit tests for the linear undo/redo history store."""

from __future__ import annotations

import random

import pytest

from collager.collection import PhotoCollection, PhotoRecord
from collager.controllers import HistoryStore
from collager.transform import PhotoTransform


def _snapshot(name: str) -> PhotoCollection:
    record = PhotoRecord.create("0-0", name, 800, 600, PhotoTransform(0.5, -50, 0))
    return PhotoCollection.EMPTY.with_record(record)


A, B, C, D = (_snapshot(n) for n in "ABCD")


def _state(store: HistoryStore):
    return store.snapshots(), store.cursor


def test_initial_state_is_single_empty_snapshot():
    store = HistoryStore()
    assert len(store) == 1
    assert store.cursor == 0
    assert store.current() == PhotoCollection.EMPTY
    assert not store.can_undo
    assert not store.can_redo


def test_push_after_undo_drops_redo_branch():
    store = HistoryStore(A)
    store.push(B)
    assert store.snapshots() == (A, B) and store.cursor == 1
    store.push(C)
    assert store.snapshots() == (A, B, C) and store.cursor == 2

    assert store.undo() is True
    assert store.cursor == 1
    assert store.current() is B

    store.push(D)
    assert store.snapshots() == (A, B, D)
    assert store.cursor == 2
    assert store.can_redo is False


def test_redo_then_undo_restores_cursor():
    rng = random.Random(7)
    for _ in range(25):
        store = HistoryStore()
        for i in range(rng.randint(2, 8)):
            store.push(_snapshot(f"s{i}"))
        for _ in range(rng.randint(1, len(store) - 2)):
            store.undo()
        if not (store.can_undo and store.can_redo):
            continue
        before = _state(store)
        current = store.current()
        store.redo()
        store.undo()
        assert _state(store) == before
        assert store.current() is current


def test_undo_at_start_is_noop():
    store = HistoryStore(A)
    before = _state(store)
    assert store.undo() is False
    assert _state(store) == before


def test_redo_at_tail_is_noop():
    store = HistoryStore(A)
    store.push(B)
    before = _state(store)
    assert store.redo() is False
    assert _state(store) == before


def test_push_rejects_non_collection():
    store = HistoryStore()
    with pytest.raises(TypeError):
        store.push({"0-0": None})


def test_replace_current_does_not_add_entry():
    store = HistoryStore(A)
    store.push(B)
    store.replace_current(C)
    assert store.snapshots() == (A, C)
    assert store.cursor == 1


def test_reset_starts_fresh_history():
    store = HistoryStore(A)
    store.push(B)
    store.push(C)
    store.reset()
    assert store.snapshots() == (PhotoCollection.EMPTY,)
    assert store.cursor == 0


def test_limit_drops_oldest_entries():
    store = HistoryStore(A, limit=3)
    for snap in (B, C, D):
        store.push(snap)
    assert store.snapshots() == (B, C, D)
    assert store.cursor == 2
    assert store.current() is D


def test_limit_must_be_positive():
    with pytest.raises(ValueError):
        HistoryStore(limit=0)


def test_trim_keeps_recent_undo_entries():
    store = HistoryStore(A)
    for snap in (B, C, D):
        store.push(snap)
    store.undo()
    assert store.trim(1) == 1
    assert store.snapshots() == (B, C, D)
    assert store.current() is C
    assert store.trim(5) == 0


def test_snapshots_are_not_mutated_by_later_edits():
    store = HistoryStore()
    first = store.current().with_record(PhotoRecord.create("0-0", "img", 100, 100, PhotoTransform(1, 0, 0)))
    store.push(first)
    second = store.current().with_transform("0-0", PhotoTransform(2, -10, -10))
    store.push(second)
    store.undo()
    assert store.current()["0-0"].transform == PhotoTransform(1, 0, 0)
