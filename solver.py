#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# solver.py — Exact forced-win search for the placer, with a transposition cache
# Pure search: no I/O, no randomness. Returns verdicts and coins; callers decide how to act.

from __future__ import annotations

import threading
from collections.abc import Hashable

from chests import BASKETS, GameState, UnreachableState, check_state, placer_wins

# Key: (s0, s1, s2, remaining_bitmask, turn, basket). Basket order is kept as-is:
# future offers name specific baskets, so permuted sums are distinct positions.
Key = tuple[int, int, int, int, int, int]


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

class TranspositionCache:
    """Memo table for one solving session.

    Unbounded: for N coins the key space is at most 3^N placements times three
    offers, so clear() between independent games is enough to bound memory.
    """

    def __init__(self) -> None:
        self._table: dict[Hashable, bool] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable) -> bool | None:
        """Return the cached verdict, or None if the key has not been searched."""
        value = self._table.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def put(self, key: Hashable, value: bool) -> None:
        self._table[key] = value

    def __contains__(self, key: Hashable) -> bool:
        return key in self._table

    def __len__(self) -> int:
        return len(self._table)

    def clear(self) -> None:
        """Drop all entries and reset the counters."""
        self._table.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> dict:
        return {"entries": len(self._table), "hits": self.hits, "misses": self.misses}


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _mask(remaining) -> int:
    """Bit c-1 is set for every coin c still in hand."""
    m = 0
    for c in remaining:
        m |= 1 << (c - 1)
    return m


def _coins(mask: int) -> list[int]:
    """Coins encoded in mask, smallest first."""
    coins = []
    c = 1
    while mask:
        if mask & 1:
            coins.append(c)
        mask >>= 1
        c += 1
    return coins


def _check_search_state(state: GameState, basket: int) -> None:
    if basket not in range(BASKETS):
        raise UnreachableState("There is no basket {}".format(basket))
    if state.is_terminal or not state.remaining:
        raise UnreachableState("No coins left to place: the game is already over")
    if state.offer is not None and state.offer != basket:
        raise UnreachableState("Basket {} is offered, not basket {}".format(state.offer, basket))
    check_state(state)


def _wins(cache: TranspositionCache, sums: tuple[int, int, int], mask: int, turn: int, basket: int) -> bool:
    """True iff some coin placed in basket survives every later offer."""
    key: Key = (sums[0], sums[1], sums[2], mask, turn, basket)
    cached = cache.get(key)
    if cached is not None:
        return cached
    result = any(_coin_wins(cache, sums, mask, turn, basket, coin) for coin in _coins(mask))
    cache.put(key, result)
    return result


def _coin_wins(cache: TranspositionCache, sums: tuple[int, int, int], mask: int, turn: int,
               basket: int, coin: int) -> bool:
    """True iff placing coin in basket leaves the placer a forced win."""
    after = list(sums)
    after[basket] += coin
    after = tuple(after)
    rest = mask & ~(1 << (coin - 1))
    if not rest:
        return placer_wins(after)
    # The presenter may offer any basket next, including the same one or an empty one.
    return all(_wins(cache, after, rest, turn + 1, b) for b in range(BASKETS))


# ---------------------------------------------------------------------------
# Solver
# ---------------------------------------------------------------------------

class Solver:
    """One solving session: a cache plus the lock that serializes access to it."""

    def __init__(self, cache: TranspositionCache | None = None) -> None:
        self.cache = cache if cache is not None else TranspositionCache()
        self._lock = threading.RLock()

    def can_force_win(self, state: GameState, basket: int) -> bool:
        """Can the placer, now offered basket, force a strict top-sum win?

        state must not be terminal; a pending offer, if any, must be on basket.
        """
        _check_search_state(state, basket)
        with self._lock:
            return _wins(self.cache, state.sums, _mask(state.remaining), state.turn, basket)

    def winning_coins(self, state: GameState, basket: int) -> list[int]:
        """Every coin that keeps a forced win when placed in basket, smallest first."""
        _check_search_state(state, basket)
        mask = _mask(state.remaining)
        with self._lock:
            return [c for c in _coins(mask)
                    if _coin_wins(self.cache, state.sums, mask, state.turn, basket, c)]

    def choose_coin(self, state: GameState, basket: int) -> int:
        """Return the smallest forcing coin for basket.

        When no coin forces a win, fall back to the largest remaining coin. That
        fallback is a play-on heuristic, not a search result.
        """
        _check_search_state(state, basket)
        mask = _mask(state.remaining)
        coins = _coins(mask)
        with self._lock:
            for coin in coins:
                if _coin_wins(self.cache, state.sums, mask, state.turn, basket, coin):
                    return coin
        return coins[-1]

    def choose_basket(self, state: GameState) -> int | None:
        """Lowest basket the placer cannot win from, or None if the placer wins whatever is offered."""
        for basket in range(BASKETS):
            if not self.can_force_win(state, basket):
                return basket
        return None

    def clear(self) -> None:
        with self._lock:
            self.cache.clear()

    def stats(self) -> dict:
        with self._lock:
            return self.cache.stats()


def can_force_win(state: GameState, basket: int, cache: TranspositionCache | None = None) -> bool:
    """Module-level can_force_win(); a fresh cache is used unless one is passed in."""
    return Solver(cache).can_force_win(state, basket)


def choose_coin(state: GameState, basket: int, cache: TranspositionCache | None = None) -> int:
    """Module-level choose_coin(); a fresh cache is used unless one is passed in."""
    return Solver(cache).choose_coin(state, basket)
