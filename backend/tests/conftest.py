import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.main import app, configure_services
from app.services.storage import DiskStorage, PassThroughStorage


def make_image_bytes(width: int = 80, height: int = 60, fmt: str = "PNG", color=(200, 40, 40)) -> bytes:
    mode = "RGBA" if fmt == "PNG" else "RGB"
    fill = color + (255,) if mode == "RGBA" else color
    buffer = io.BytesIO()
    Image.new(mode, (width, height), fill).save(buffer, format=fmt)
    return buffer.getvalue()


def image_size(data: bytes):
    with Image.open(io.BytesIO(data)) as img:
        return img.size


@pytest.fixture
def disk_storage(tmp_path):
    return DiskStorage(str(tmp_path / "uploads"), str(tmp_path / "resized"))


@pytest.fixture
def client(disk_storage):
    original_state = (app.state.storage, app.state.resizer, app.state.janitor)
    configure_services(app, disk_storage)
    try:
        yield TestClient(app)
    finally:
        app.state.storage, app.state.resizer, app.state.janitor = original_state


@pytest.fixture
def memory_client():
    original_state = (app.state.storage, app.state.resizer, app.state.janitor)
    configure_services(app, PassThroughStorage())
    try:
        yield TestClient(app)
    finally:
        app.state.storage, app.state.resizer, app.state.janitor = original_state


def upload(client, data: bytes, name: str = "photo.png", media_type: str = "image/png"):
    return client.post("/api/upload", files={"file": (name, data, media_type)})
