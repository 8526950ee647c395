import io
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from sikap_storage.config import Settings
from sikap_storage.main import create_app


TEST_API_SECRET = "test-api-secret"


def image_bytes(fmt: str = "JPEG", mode: str = "RGB", size=(16, 16)) -> bytes:
    buf = io.BytesIO()
    color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def make_settings(tmp_path: Path):
    def _make(**overrides) -> Settings:
        values = {
            "upload_dir": tmp_path / "uploads",
            "api_secret": TEST_API_SECRET,
            "port": 0,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture()
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture()
def app_ctx(settings: Settings) -> dict:
    app = create_app(settings)
    return {"app": app, "base_dir": settings.upload_dir, "secret": settings.api_secret}


@pytest.fixture()
def client(app_ctx: dict):
    with TestClient(app_ctx["app"]) as c:
        yield c


@pytest.fixture()
def base_dir(app_ctx: dict) -> Path:
    return app_ctx["base_dir"]


@pytest.fixture()
def api_secret(app_ctx: dict) -> str:
    return app_ctx["secret"]


@pytest.fixture()
def auth(api_secret: str) -> dict:
    return {"x-api-key": api_secret}
