import asyncio
import io
import re
from datetime import datetime, timezone

from fastapi import UploadFile

from models import utc_isoformat
from uploads import UploadStore, is_attached, public_url


def test_generated_filename_keeps_extension(tmp_path):
    store = UploadStore(tmp_path)
    assert re.fullmatch(r"\d+-\d+\.jpeg", store.generate_filename("photo.final.jpeg"))
    assert re.fullmatch(r"\d+-\d+", store.generate_filename("README"))


def test_save_creates_directory(tmp_path):
    store = UploadStore(tmp_path / "later")
    upload = UploadFile(io.BytesIO(b"hello"), filename="note.txt")

    filename = asyncio.run(store.save(upload))

    assert (tmp_path / "later" / filename).read_bytes() == b"hello"


def test_remove_is_best_effort(tmp_path):
    store = UploadStore(tmp_path)
    (tmp_path / "x.png").write_bytes(b"x")

    assert store.remove("x.png") is True
    assert store.remove("x.png") is False


def test_public_url():
    assert public_url("http://example.com/", "a.png") == "http://example.com/uploads/a.png"
    assert public_url("https://example.com", None) is None


def test_is_attached():
    assert not is_attached(None)
    assert not is_attached(UploadFile(io.BytesIO(b""), filename=""))
    assert is_attached(UploadFile(io.BytesIO(b"x"), filename="x.png"))


def test_utc_isoformat():
    moment = datetime(2026, 10, 19, 8, 30, 5, 123456, tzinfo=timezone.utc)
    assert utc_isoformat(moment) == "2026-10-19T08:30:05.123Z"
