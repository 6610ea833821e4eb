"""
Tests for chunked transfer and temp file lifetime.
"""
import os

import pytest

from src.export import CleanupWarning, MissingOutputError, TransferIOError
from src.export import stream_transfer
from src.export.stream_transfer import (
    copy_to_sink,
    ensure_output,
    iter_buffered_body,
    iter_file,
    remove_temp_file,
    temp_resource,
)

from conftest import BrokenSink, RecordingSink


@pytest.fixture
def csv_file(export_dir):
    path = export_dir / "CSVtest.csv"
    path.write_bytes(b'"id","name"\n"1","Ada"\n"2","Grace"\n')
    return path


def test_iter_file_reads_in_bounded_chunks(csv_file):
    chunks = list(iter_file(csv_file, chunk_size=8))

    assert all(len(chunk) <= 8 for chunk in chunks)
    assert b"".join(chunks) == csv_file.read_bytes()


def test_iter_file_missing_path(export_dir):
    with pytest.raises(MissingOutputError):
        list(iter_file(export_dir / "gone.csv"))


def test_ensure_output_returns_size(csv_file, export_dir):
    assert ensure_output(csv_file) == len(csv_file.read_bytes())

    with pytest.raises(MissingOutputError):
        ensure_output(export_dir / "gone.csv")
    with pytest.raises(MissingOutputError):
        ensure_output(None)


def test_buffered_body_deletes_file_when_exhausted(csv_file):
    expected = csv_file.read_bytes()

    body = b"".join(iter_buffered_body(csv_file, chunk_size=4))

    assert body == expected
    assert not csv_file.exists()


def test_buffered_body_deletes_file_when_closed_early(csv_file):
    body = iter_buffered_body(csv_file, chunk_size=4)
    next(body)
    body.close()

    assert not csv_file.exists()


def test_buffered_body_keeps_file_without_unlink(csv_file):
    list(iter_buffered_body(csv_file, unlink=False))

    assert csv_file.exists()


def test_copy_to_sink_counts_bytes(csv_file):
    sink = RecordingSink()

    written = copy_to_sink(iter_buffered_body(csv_file, chunk_size=5), sink)

    assert written == len(sink.body)
    assert sink.body.startswith(b'"id","name"')


def test_sink_failure_raises_and_still_cleans_up(csv_file):
    with pytest.raises(TransferIOError):
        copy_to_sink(iter_buffered_body(csv_file, chunk_size=5), BrokenSink())

    assert not csv_file.exists()


def test_copy_to_sink_accepts_plain_iterators():
    sink = RecordingSink()

    assert copy_to_sink(iter([b"a", b"bc"]), sink) == 3
    assert sink.body == b"abc"


def test_temp_resource_removes_on_error(csv_file):
    with pytest.raises(RuntimeError):
        with temp_resource(csv_file):
            raise RuntimeError("boom")

    assert not csv_file.exists()


def test_remove_tolerates_missing_file(export_dir):
    assert remove_temp_file(export_dir / "never-created.csv") is True
    assert remove_temp_file(None) is True


def test_failed_delete_only_warns(csv_file, monkeypatch):
    def deny(path):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(stream_transfer.os, "unlink", deny)

    with pytest.warns(CleanupWarning):
        assert remove_temp_file(csv_file) is False

    monkeypatch.undo()
    assert os.path.exists(csv_file)
