from __future__ import annotations

from flask import Blueprint, jsonify
from flask.views import MethodView

from ..extensions import santa
from ..models import format_timestamp


public_bp = Blueprint("public", __name__, url_prefix="/api")


def shuffled_at(state) -> str | None:
    return format_timestamp(state.last_shuffled_at) if state.last_shuffled_at else None


class StatusView(MethodView):
    def get(self):
        snap = santa.registry.snapshot()
        state = snap.state
        return jsonify(
            registrationOpen=state.registration_open,
            assignmentsReady=state.assignments_ready,
            participantCount=len(snap.participants),
            shuffledAt=shuffled_at(state),
        )


public_bp.add_url_rule("/status", view_func=StatusView.as_view("status"))
