from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 64
IP_MAX_LENGTH = 128


def utcnow() -> datetime:
    # millisecond precision, so values survive a round trip through the store unchanged
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def format_timestamp(value: datetime) -> str:
    """2024-12-01T18:30:00.123Z"""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(raw: Any) -> datetime | None:
    if not isinstance(raw, str) or not raw.strip():
        return None
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        value = datetime.fromisoformat(text)
    except ValueError:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Participant:
    token: str
    name: str
    registered_at: datetime
    assignment_token: str | None = None
    ip_address: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "name": self.name,
            "assignmentToken": self.assignment_token,
            "registeredAt": format_timestamp(self.registered_at),
            "ipAddress": self.ip_address,
        }

    @classmethod
    def from_record(cls, record: Any) -> Participant | None:
        """
        Builds a participant from one stored record.
        Returns None when the record has no usable token or name; optional fields are defaulted.
        """
        if not isinstance(record, dict):
            return None

        token = record.get("token")
        name = record.get("name")
        if not isinstance(token, str) or not token or not isinstance(name, str) or not name:
            return None

        assignment_token = record.get("assignmentToken")
        if not isinstance(assignment_token, str) or not assignment_token:
            assignment_token = None

        ip_address = record.get("ipAddress")
        if isinstance(ip_address, str) and ip_address.strip():
            ip_address = ip_address.strip()[:IP_MAX_LENGTH]
        else:
            ip_address = None

        return cls(
            token=token,
            name=name,
            registered_at=parse_timestamp(record.get("registeredAt")) or utcnow(),
            assignment_token=assignment_token,
            ip_address=ip_address,
        )


@dataclass(frozen=True)
class EventState:
    registration_open: bool = True
    assignments_ready: bool = False
    last_shuffled_at: datetime | None = None


@dataclass(frozen=True)
class Snapshot:
    """Full, immutable copy of the participants (in registration order) and the event state."""

    participants: tuple[Participant, ...] = ()
    state: EventState = field(default_factory=EventState)

    def by_token(self) -> dict[str, Participant]:
        return {p.token: p for p in self.participants}

    def recipient_of(self, token: str) -> Participant | None:
        """Who token gives to, or None while assignments are not ready."""
        if not self.state.assignments_ready:
            return None
        people = self.by_token()
        giver = people.get(token)
        if giver is None or giver.assignment_token is None:
            return None
        return people.get(giver.assignment_token)

    def tokens(self) -> list[str]:
        return [p.token for p in self.participants]

    def without_assignments(self) -> tuple[Participant, ...]:
        return tuple(
            p if p.assignment_token is None else replace(p, assignment_token=None)
            for p in self.participants
        )

    def to_dict(self) -> dict[str, Any]:
        last = self.state.last_shuffled_at
        return {
            "participants": [p.to_dict() for p in self.participants],
            "assignmentsReady": self.state.assignments_ready,
            "lastShuffledAt": format_timestamp(last) if last else None,
            "registrationOpen": self.state.registration_open,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Snapshot:
        """
        Rebuilds a snapshot from the stored document.

        Malformed or duplicate participant records are dropped, not fatal.
        The caller is responsible for checking that the document itself is an
        object with a participants list.
        """
        participants: list[Participant] = []
        seen: set[str] = set()
        for record in data.get("participants") or []:
            p = Participant.from_record(record)
            if p is None:
                logger.warning("Dropping malformed participant record from store.")
                continue
            if p.token in seen:
                logger.warning("Dropping participant record with duplicate token.")
                continue
            seen.add(p.token)
            participants.append(p)

        registration_open = data.get("registrationOpen")
        state = EventState(
            registration_open=registration_open if isinstance(registration_open, bool) else True,
            assignments_ready=bool(data.get("assignmentsReady")),
            last_shuffled_at=parse_timestamp(data.get("lastShuffledAt")),
        )
        return cls(participants=tuple(participants), state=state).normalized()

    def normalized(self) -> Snapshot:
        """Returns a snapshot in which the assignment and registration invariants hold."""
        snap = self
        if snap.state.assignments_ready and not is_single_cycle(snap.participants):
            logger.warning("Stored assignments do not form a single gift cycle; clearing them.")
            snap = Snapshot(
                participants=snap.without_assignments(),
                state=replace(snap.state, assignments_ready=False, last_shuffled_at=None),
            )
        elif not snap.state.assignments_ready and any(p.assignment_token for p in snap.participants):
            logger.warning("Clearing stored assignments that were never marked ready.")
            snap = replace(snap, participants=snap.without_assignments())

        if snap.state.assignments_ready and snap.state.registration_open:
            logger.warning("Registration was open while assignments were ready; closing registration.")
            snap = replace(snap, state=replace(snap.state, registration_open=False))
        return snap


def is_single_cycle(participants: tuple[Participant, ...] | list[Participant]) -> bool:
    """True if following assignment tokens from any participant visits all of them exactly once."""
    n = len(participants)
    if n < 2:
        return False
    links = {p.token: p.assignment_token for p in participants}
    if any(giver == receiver for giver, receiver in links.items()):
        return False

    start = participants[0].token
    current = start
    visited = set()
    while current not in visited:
        visited.add(current)
        current = links.get(current)
        if current is None or current not in links:
            return False
    return current == start and len(visited) == n
