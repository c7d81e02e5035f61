from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable
from dataclasses import replace

from ..errors import PersistenceError, StateError, ValidationError
from ..models import NAME_MAX_LENGTH, IP_MAX_LENGTH, EventState, Participant, Snapshot, utcnow
from ..security import generate_token
from ..store import JsonStore
from .assignments import build_gift_cycle

logger = logging.getLogger(__name__)


class Registry:
    """
    Owns the participants and the event flags.

    Readers see the published snapshot, which is only swapped after the
    store confirmed the write. Mutations run under one lock: build the next
    snapshot from the current one, persist it, publish it. If persisting
    fails the candidate is dropped and the registry stays where it was.
    """

    def __init__(
        self,
        store: JsonStore,
        snapshot: Snapshot | None = None,
        token_factory: Callable[[], str] = generate_token,
        rng: random.Random | None = None,
    ):
        self.store = store
        self._snapshot = snapshot or Snapshot()
        self._token_factory = token_factory
        self._rng = rng
        self._lock = threading.Lock()

    # ----------------------------------------------------------------- reads

    def snapshot(self) -> Snapshot:
        return self._snapshot

    def restore(self, snapshot: Snapshot) -> None:
        with self._lock:
            self._snapshot = snapshot

    def status(self) -> EventState:
        return self._snapshot.state

    def get(self, token: str) -> Participant | None:
        for p in self._snapshot.participants:
            if p.token == token:
                return p
        return None

    def list_participants(self) -> list[Participant]:
        # sorted() is stable, so equal timestamps keep registration order
        return sorted(self._snapshot.participants, key=lambda p: p.registered_at)

    def size(self) -> int:
        return len(self._snapshot.participants)

    __len__ = size

    def assignment_for(self, token: str) -> Participant | None:
        return self._snapshot.recipient_of(token)

    # ------------------------------------------------------------- mutations

    def ensure_registration_open(self) -> None:
        if not self._snapshot.state.registration_open:
            raise StateError("Registration is closed. Please contact the organizer.", status_code=403)

    def register(self, name: str, ip_address: str | None = None) -> str:
        self.ensure_registration_open()
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name is required")
        if len(name) > NAME_MAX_LENGTH:
            raise ValidationError(f"Name must be {NAME_MAX_LENGTH} characters or fewer")
        if ip_address:
            ip_address = ip_address.strip()[:IP_MAX_LENGTH] or None

        with self._lock:
            # checked again: a shuffle may have closed registration while we waited
            self.ensure_registration_open()
            current = self._snapshot
            token = self._unique_token(current)
            participant = Participant(
                token=token,
                name=name,
                registered_at=utcnow(),
                ip_address=ip_address or None,
            )
            # Any new participant invalidates existing assignments.
            nxt = Snapshot(
                participants=current.without_assignments() + (participant,),
                state=replace(current.state, assignments_ready=False, last_shuffled_at=None),
            )
            self._commit(current, nxt, "registration")

        logger.info("Registered participant %r (%d total).", name, len(nxt.participants))
        return token

    def shuffle(self) -> EventState:
        with self._lock:
            current = self._snapshot
            mapping = build_gift_cycle(current.tokens(), rng=self._rng)

            nxt = Snapshot(
                participants=tuple(
                    replace(p, assignment_token=mapping[p.token]) for p in current.participants
                ),
                state=EventState(
                    registration_open=False,
                    assignments_ready=True,
                    last_shuffled_at=utcnow(),
                ),
            )
            self._commit(current, nxt, "shuffle")

        logger.info("Shuffled %d participants; registration closed.", len(nxt.participants))
        return nxt.state

    def reopen(self) -> EventState:
        with self._lock:
            current = self._snapshot
            nxt = Snapshot(
                participants=current.without_assignments(),
                state=EventState(registration_open=True, assignments_ready=False, last_shuffled_at=None),
            )
            self._commit(current, nxt, "registration reopen")

        logger.info("Registration reopened; assignments cleared.")
        return nxt.state

    # --------------------------------------------------------------- helpers

    def _unique_token(self, snapshot: Snapshot) -> str:
        taken = set(snapshot.tokens())
        token = self._token_factory()
        while token in taken:
            token = self._token_factory()
        return token

    def _commit(self, previous: Snapshot, nxt: Snapshot, action: str) -> None:
        """Must be called with the lock held."""
        try:
            self.store.persist(nxt)
        except PersistenceError:
            self._snapshot = previous
            logger.exception("Failed to persist %s; state rolled back.", action)
            raise
        self._snapshot = nxt
