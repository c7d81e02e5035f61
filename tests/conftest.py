from __future__ import annotations

import random

import pytest

from santa import create_app
from santa.services.registry import Registry
from santa.store import JsonStore

ADMIN_PASSWORD = "north-pole"


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "participants.json"


@pytest.fixture
def store(data_file):
    s = JsonStore(data_file)
    yield s
    s.close()


@pytest.fixture
def registry(store):
    return Registry(store, rng=random.Random(1225))


@pytest.fixture
def app(tmp_path, monkeypatch, data_file):
    monkeypatch.delenv("SANTA_ADMIN_PASSWORD", raising=False)
    monkeypatch.delenv("SANTA_DATA_FILE", raising=False)
    monkeypatch.delenv("SANTA_CONFIG_FILE", raising=False)
    app = create_app(
        {
            "TESTING": True,
            "SANTA_DATA_FILE": str(data_file),
            "SANTA_CONFIG_FILE": str(tmp_path / "config.json"),
            "SANTA_ADMIN_PASSWORD": ADMIN_PASSWORD,
        }
    )
    yield app
    app.extensions["santa"].store.close()


@pytest.fixture
def client(app):
    return app.test_client()
