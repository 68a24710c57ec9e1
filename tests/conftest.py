import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings

TEA = [{"name": "Tea", "price": 2.5, "quantity": 2}]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}",
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def upload_dir(settings):
    return Path(settings.upload_dir)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture
def place_order(client):
    """POST an order with a receipt attached; keyword args override form fields"""
    def _place(items=None, attach=True, **fields):
        data = {
            "customerName": "Li",
            "phoneNumber": "0123456789",
            "items": items if isinstance(items, str) else json.dumps(TEA if items is None else items),
        }
        data.update(fields)
        files = {"paymentProof": ("receipt.png", b"\x89PNG proof", "image/png")} if attach else None
        return client.post("/api/orders", data=data, files=files)
    return _place
