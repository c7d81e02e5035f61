from __future__ import annotations

from flask import Blueprint, abort, jsonify, request
from flask.views import MethodView

from ..extensions import santa
from ..models import format_timestamp
from ..net import request_ip
from ..policies import AdminRequiredMixin, json_body
from .public import shuffled_at

santa_bp = Blueprint("santa", __name__, url_prefix="/api")


class RegisterView(MethodView):
    def post(self):
        registry = santa.registry
        registry.ensure_registration_open()
        body = json_body()
        name = body.get("name")
        name = "" if name is None else str(name)

        token = registry.register(name, ip_address=request_ip(request))
        participant = registry.get(token)
        return jsonify(
            token=token,
            name=participant.name if participant else name.strip(),
            assignmentsReady=registry.status().assignments_ready,
        ), 201


class MyAssignmentView(MethodView):
    def get(self, token: str):
        snap = santa.registry.snapshot()
        participant = snap.by_token().get(token)
        if participant is None:
            abort(404, description="Participant not found")

        assigned_to = snap.recipient_of(token)
        return jsonify(
            token=token,
            name=participant.name,
            assignmentsReady=snap.state.assignments_ready,
            assignedName=assigned_to.name if assigned_to else None,
            participantCount=len(snap.participants),
            shuffledAt=shuffled_at(snap.state),
        )


class AdminParticipantsView(AdminRequiredMixin):
    def post(self):
        registry = santa.registry
        snap = registry.snapshot()
        entries = [
            {
                "token": p.token,
                "name": p.name,
                "registeredAt": format_timestamp(p.registered_at),
                "hasAssignment": bool(p.assignment_token),
                "ipAddress": p.ip_address,
            }
            for p in sorted(snap.participants, key=lambda p: p.registered_at)
        ]
        return jsonify(
            participants=entries,
            participantCount=len(entries),
            assignmentsReady=snap.state.assignments_ready,
            shuffledAt=shuffled_at(snap.state),
            registrationOpen=snap.state.registration_open,
        )


class AdminShuffleView(AdminRequiredMixin):
    def post(self):
        registry = santa.registry
        state = registry.shuffle()
        return jsonify(
            success=True,
            participantCount=registry.size(),
            shuffledAt=shuffled_at(state),
        )


class AdminReopenView(AdminRequiredMixin):
    def post(self):
        registry = santa.registry
        state = registry.reopen()
        return jsonify(
            success=True,
            participantCount=registry.size(),
            registrationOpen=state.registration_open,
        )


# Register routes
santa_bp.add_url_rule("/register", view_func=RegisterView.as_view("register"), methods=["POST"])
santa_bp.add_url_rule("/participant/<token>", view_func=MyAssignmentView.as_view("my_assignment"))

santa_bp.add_url_rule("/participants", view_func=AdminParticipantsView.as_view("admin_participants"), methods=["POST"])
santa_bp.add_url_rule("/shuffle", view_func=AdminShuffleView.as_view("admin_shuffle"), methods=["POST"])
santa_bp.add_url_rule(
    "/registration/reopen",
    view_func=AdminReopenView.as_view("admin_reopen"),
    methods=["POST"],
)
