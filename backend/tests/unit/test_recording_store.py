from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError
from app.core.errors import RecordingNotFound, StorageReadError, StorageWriteError
from app.db.models import Recording
from app.db.recordings import RecordingStore


@pytest.fixture
def store(test_db):
    return RecordingStore(test_db)


def test_insert_assigns_id_and_timestamp(store):
    rec = store.insert("recording_1.webm", "/uploads/recording_1.webm", 1000)
    assert rec.id is not None
    assert isinstance(rec.created_at, datetime)
    assert rec.filesize == 1000


def test_list_all_empty(store):
    assert store.list_all() == []


def test_list_all_newest_first(store, test_db):
    base = datetime(2024, 1, 1, 12, 0, 0)
    # inserted out of chronological order on purpose
    for name, offset in (("b", 1), ("a", 0), ("c", 2)):
        test_db.add(
            Recording(
                filename=name,
                filepath=f"/uploads/{name}",
                filesize=1,
                created_at=base + timedelta(minutes=offset),
            )
        )
    test_db.commit()

    assert [r.filename for r in store.list_all()] == ["c", "b", "a"]


def test_list_all_ties_break_on_id(store, test_db):
    stamp = datetime(2024, 1, 1)
    for name in ("first", "second"):
        test_db.add(Recording(filename=name, filepath=name, filesize=1, created_at=stamp))
    test_db.commit()

    assert [r.filename for r in store.list_all()] == ["second", "first"]


def test_get(store):
    rec = store.insert("recording_1.webm", "/uploads/recording_1.webm", 10)
    assert store.get(rec.id).filename == "recording_1.webm"

    with pytest.raises(RecordingNotFound):
        store.get(rec.id + 100)


def test_delete_is_idempotent(store):
    rec = store.insert("recording_1.webm", "/uploads/recording_1.webm", 10)

    assert store.delete(rec.id) == 1
    assert store.list_all() == []
    assert store.delete(rec.id) == 0


def test_ids_are_not_reused(store):
    first = store.insert("a", "/a", 1)
    store.delete(first.id)
    second = store.insert("b", "/b", 1)
    assert second.id > first.id


def test_insert_failure_rolls_back():
    db = MagicMock()
    db.commit.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))

    with pytest.raises(StorageWriteError):
        RecordingStore(db).insert("a", "/a", 1)
    db.rollback.assert_called_once()


def test_read_failure():
    db = MagicMock()
    db.execute.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))
    db.get.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))

    with pytest.raises(StorageReadError):
        RecordingStore(db).list_all()
    with pytest.raises(StorageReadError):
        RecordingStore(db).get(1)
