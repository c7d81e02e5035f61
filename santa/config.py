from __future__ import annotations

import json
import os
from collections.abc import Mapping
from typing import Any

from flask import Flask

from .errors import StartupError

DEFAULTS = {
    "SANTA_DATA_FILE": "participants.json",
    "SANTA_CONFIG_FILE": "config.json",
}


def _read_config_file(path: str) -> dict[str, Any]:
    """Reads the organizer's config.json. A missing file is fine; a broken one is fatal."""
    try:
        with open(path, encoding="utf-8") as fh:
            raw = fh.read()
    except FileNotFoundError:
        return {}
    except OSError as e:
        raise StartupError(f"Unable to read {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StartupError(f"Unable to parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise StartupError(f"{path} must contain a JSON object.")
    return data


def load_settings(app: Flask, overrides: Mapping[str, Any] | None = None) -> None:
    app.config.update(DEFAULTS)
    for key in DEFAULTS:
        if os.environ.get(key):
            app.config[key] = os.environ[key]
    if overrides:
        for key in DEFAULTS:
            if key in overrides:
                app.config[key] = overrides[key]

    file_config = _read_config_file(app.config["SANTA_CONFIG_FILE"])
    if "adminPassword" in file_config:
        app.config["SANTA_ADMIN_PASSWORD"] = file_config["adminPassword"]

    if os.environ.get("SANTA_ADMIN_PASSWORD"):
        app.config["SANTA_ADMIN_PASSWORD"] = os.environ["SANTA_ADMIN_PASSWORD"]

    if overrides:
        app.config.update(overrides)

    admin_password = app.config.get("SANTA_ADMIN_PASSWORD")
    if not isinstance(admin_password, str) or not admin_password.strip():
        raise StartupError(
            "An admin password is required: set adminPassword in "
            f"{app.config['SANTA_CONFIG_FILE']} or SANTA_ADMIN_PASSWORD."
        )
    app.config["SANTA_ADMIN_PASSWORD"] = admin_password.strip()
