from __future__ import annotations

from flask import Flask, current_app

from .errors import StartupError
from .security import AdminGate
from .services.registry import Registry
from .store import JsonStore


class SantaExtension:
    """
    Flask extension holding the registry for one app.

    State lives in app.extensions["santa"], not on this object, so several
    apps (e.g. one per test) can share the module-level instance.
    """

    def init_app(self, app: Flask, registry: Registry | None = None) -> Registry:
        if registry is None:
            store = JsonStore(app.config["SANTA_DATA_FILE"])
            try:
                snapshot = store.load()
            except StartupError:
                store.close()
                raise
            registry = Registry(store, snapshot)
        app.extensions["santa"] = registry
        app.extensions["santa_admin_gate"] = AdminGate(app.config["SANTA_ADMIN_PASSWORD"])
        return registry

    @property
    def registry(self) -> Registry:
        return current_app.extensions["santa"]

    @property
    def admin_gate(self) -> AdminGate:
        return current_app.extensions["santa_admin_gate"]


santa = SantaExtension()
