#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# rooms.py — In-process room store for two-seat games
#
# A room holds one canonical GameState and two seats (presenter, placer).
# Offers and placements are transactions: each runs under the room lock, is
# validated against the current state, and either commits a new state or
# raises without touching anything. Transport and identity are up to the caller;
# a "uid" here is just an opaque string.

from __future__ import annotations

import random
import string
import threading

from chests import (
    DEFAULT_COINS, PLACER, PRESENTER, WAITING,
    ChestsError, GameState, apply_offer, apply_placement, check_coin_count, new_game, phase, state_record,
)

ROLES = (PRESENTER, PLACER)


class RoomError(ChestsError):
    """A room-level action was refused."""


class RoomNotFound(RoomError):
    pass


class RoomFull(RoomError):
    pass


class NotYourTurn(RoomError):
    """The caller doesn't hold the seat that acts next."""


class Room:
    def __init__(self, room_id: str, coin_count: int = DEFAULT_COINS):
        self.room_id = room_id
        self.presenter: str | None = None
        self.placer: str | None = None
        self.state: GameState = new_game(check_coin_count(coin_count))
        self.started = False
        self._lock = threading.Lock()

    def seat_of(self, uid: str) -> str | None:
        if self.presenter == uid:
            return PRESENTER
        if self.placer == uid:
            return PLACER
        return None

    @property
    def seated(self) -> bool:
        return self.presenter is not None and self.placer is not None

    @property
    def phase(self) -> str:
        if not self.started and self.state.turn == 0 and self.state.offer is None:
            return phase(self.state, seated=False)
        return phase(self.state)

    def join(self, uid: str, role: str | None = None) -> str:
        """Seat uid, preferring role when it's free. Returns the seat taken."""
        if role is not None and role not in ROLES:
            raise ValueError("Unknown role '{}'".format(role))
        with self._lock:
            current = self.seat_of(uid)
            if current is not None:
                return current
            free = [r for r in ROLES if getattr(self, r) is None]
            if not free:
                raise RoomFull("Room {} already has two players".format(self.room_id))
            seat = role if role in free else free[0]
            setattr(self, seat, uid)
            return seat

    def leave(self, uid: str) -> None:
        with self._lock:
            for role in ROLES:
                if getattr(self, role) == uid:
                    setattr(self, role, None)

    def reconcile_phase(self) -> str:
        """Move a waiting room to offering once both seats are filled."""
        with self._lock:
            if not self.started and self.seated:
                self.started = True
        return self.phase

    def _require_seat(self, uid: str, role: str) -> None:
        if getattr(self, role) != uid:
            raise NotYourTurn("Only the {} can do that".format(role))
        if self.phase == WAITING:
            raise NotYourTurn("Waiting for both players to join")

    def offer(self, uid: str, basket: int) -> GameState:
        with self._lock:
            self._require_seat(uid, PRESENTER)
            self.state = apply_offer(self.state, basket)
            return self.state

    def place(self, uid: str, coin: int) -> GameState:
        with self._lock:
            self._require_seat(uid, PLACER)
            if self.state.offer is None:
                raise NotYourTurn("No basket offered yet")
            self.state = apply_placement(self.state, self.state.offer, coin, by=uid)
            return self.state

    def reset(self, coin_count: int | None = None) -> GameState:
        """Start over, keeping the seats; the room's coin count unless a new one is given."""
        n = check_coin_count(coin_count) if coin_count is not None else self.state.coin_count
        with self._lock:
            self.state = new_game(n)
            return self.state

    def record(self) -> dict:
        with self._lock:
            rec = state_record(self.state, self.phase)
            rec["roomId"] = self.room_id
            rec["presenter"] = self.presenter
            rec["placer"] = self.placer
            return rec


class RoomRegistry:
    """All live rooms, keyed by a short digit code."""

    def __init__(self, code_length: int = 4, rng: random.Random | None = None):
        self.code_length = code_length
        self.rng = rng if rng is not None else random.Random()
        self.rooms: dict[str, Room] = {}
        self._lock = threading.Lock()

    def _new_code(self) -> str:
        while True:
            code = "".join(self.rng.choices(string.digits, k=self.code_length))
            if code not in self.rooms:
                return code

    def create(self, uid: str, role: str | None = None, coin_count: int = DEFAULT_COINS) -> Room:
        with self._lock:
            room = Room(self._new_code(), coin_count)
            self.rooms[room.room_id] = room
        room.join(uid, role)
        return room

    def get(self, room_id: str) -> Room:
        try:
            return self.rooms[room_id]
        except KeyError:
            raise RoomNotFound("Room {} not found".format(room_id)) from None

    def join(self, room_id: str, uid: str, role: str | None = None) -> Room:
        room = self.get(room_id)
        room.join(uid, role)
        room.reconcile_phase()
        return room

    def remove(self, room_id: str) -> None:
        with self._lock:
            self.rooms.pop(room_id, None)

    def reconcile_all(self) -> None:
        """Periodic sweep: start every room whose seats have filled."""
        for room in list(self.rooms.values()):
            room.reconcile_phase()
