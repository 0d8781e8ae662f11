import json
from datetime import datetime, timezone

import pytest

from src.core.batches import (
    ArtifactSaveError,
    BatchWriter,
    batch_filename,
    build_batch_document,
    iso_timestamp,
)
from src.core.sim_models import CollectedHash


def _hashes(n: int) -> list[CollectedHash]:
    return [
        CollectedHash(hash=f"0000{i:060x}", timestamp=1_700_000_000_000 + i, nonce=f"n{i}", difficulty=4)
        for i in range(n)
    ]


def test_batch_filename_is_zero_padded():
    assert batch_filename(1) == "mining_hashes_000001.json"
    assert batch_filename(123456) == "mining_hashes_123456.json"


def test_iso_timestamp_uses_z_suffix():
    moment = datetime(2025, 3, 1, 12, 30, 5, 250000, tzinfo=timezone.utc)
    assert iso_timestamp(moment) == "2025-03-01T12:30:05.250Z"


def test_batch_document_round_trip():
    hashes = _hashes(5)
    doc = build_batch_document("session_abc", 7, hashes)
    assert doc["sessionId"] == "session_abc"
    assert doc["fileNumber"] == 7
    assert doc["totalHashes"] == 5
    assert doc["hashes"] == [h.to_dict() for h in hashes]
    assert set(doc["hashes"][0]) == {"hash", "timestamp", "nonce", "difficulty"}
    assert doc["timestamp"].endswith("Z")


def test_writer_saves_json(tmp_path):
    writer = BatchWriter(tmp_path / "out")
    doc = build_batch_document("s", 3, _hashes(2))
    path = writer.write(doc)
    assert path.name == "mining_hashes_000003.json"
    assert json.loads(path.read_text(encoding="utf-8")) == doc
    assert writer.list_batches() == [path]


def test_writer_failure_raises_artifact_error(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")
    writer = BatchWriter(blocker / "nested")
    with pytest.raises(ArtifactSaveError):
        writer.write(build_batch_document("s", 1, _hashes(1)))


class _FailingWriter(BatchWriter):
    def write(self, document):
        raise ArtifactSaveError("disk full")


def test_failed_flush_keeps_hashes_and_counter(make_engine, store, tmp_path):
    engine = make_engine(batch_writer=_FailingWriter(tmp_path))
    engine.current_hashes = _hashes(3)
    counter = store.read_file_counter()

    assert engine.flush_hashes() is None
    assert len(engine.current_hashes) == 3
    assert store.read_file_counter() == counter


def test_flush_with_nothing_collected_writes_nothing(make_engine, store, tmp_path):
    engine = make_engine()
    counter = store.read_file_counter()
    assert engine.flush_hashes() is None
    assert store.read_file_counter() == counter
    assert not (tmp_path / "downloads").exists()


def test_flush_clears_list_and_advances_counter_once(make_engine, store, tmp_path):
    engine = make_engine()
    hashes = _hashes(4)
    engine.current_hashes = list(hashes)
    counter = store.read_file_counter()

    path = engine.flush_hashes()

    assert path is not None
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc["totalHashes"] == 4
    assert doc["hashes"] == [h.to_dict() for h in hashes]
    assert doc["sessionId"] == engine.session_id
    assert engine.current_hashes == []
    assert store.read_file_counter() == counter + 1


def test_counter_failure_keeps_hashes_and_batch_number(make_engine, store, monkeypatch):
    engine = make_engine()
    engine.current_hashes = _hashes(3)
    batch_number = engine.file_counter

    def _read_only_disk() -> int:
        raise OSError("read-only file system")

    with monkeypatch.context() as m:
        m.setattr(store, "next_file_number", _read_only_disk)
        assert engine.flush_hashes() is None
    assert len(engine.current_hashes) == 3
    assert engine.file_counter == batch_number

    # Once the store recovers the same batch is rewritten with everything collected
    engine.current_hashes.extend(_hashes(2))
    path = engine.flush_hashes()
    assert path.name == batch_filename(batch_number)
    assert json.loads(path.read_text(encoding="utf-8"))["totalHashes"] == 5
    assert engine.current_hashes == []
    assert engine.file_counter == batch_number + 1
