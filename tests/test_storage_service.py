import base64

import pytest

from roomrent.errors import ValidationError
from roomrent.services.storage_service import LocalFileStorage, MAX_FILE_SIZE

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(tmp_path / "uploads", "/uploads")


def test_store_data_url(storage, tmp_path):
    data_url = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()

    url = storage.store(data_url, "qr-codes")

    assert url.startswith("/uploads/qr-codes/")
    assert url.endswith(".png")
    stored = tmp_path / "uploads" / url[len("/uploads/"):]
    assert stored.read_bytes() == PNG_BYTES


def test_store_plain_base64_and_bytes(storage):
    assert storage.store(base64.b64encode(PNG_BYTES).decode()).endswith(".jpg")
    assert storage.store(PNG_BYTES, "rooms").startswith("/uploads/rooms/")


def test_rejects_bad_input(storage):
    with pytest.raises(ValidationError):
        storage.store("data:image/gif;base64," + base64.b64encode(b"GIF89a").decode())
    with pytest.raises(ValidationError):
        storage.store("not base64 at all!")
    with pytest.raises(ValidationError):
        storage.store(b"\x00" * (MAX_FILE_SIZE + 1))


def test_delete_removes_only_own_files(storage, tmp_path):
    url = storage.store(PNG_BYTES)
    path = tmp_path / "uploads" / url[len("/uploads/"):]
    outside = tmp_path / "secret.txt"
    outside.write_text("keep me")

    storage.delete(url)
    assert not path.exists()

    # Already gone and foreign URLs are ignored
    storage.delete(url)
    storage.delete(None)
    storage.delete("https://cdn.example.com/rooms/x.png")
    storage.delete("/uploads/../secret.txt")
    assert outside.read_text() == "keep me"
