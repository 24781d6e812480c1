#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# bots.py — Strategy-informed bot subclasses for chests
#
# All classes here subclass Bot (defined in chests.py). Basic Bot stays in
# chests.py because it has no external dependencies; every bot that diverges
# from Bot's random defaults lives here instead. Each bot can sit in either
# seat: chooseBasket() is used when presenting, chooseCoin() when placing.

from __future__ import annotations

from chests import BASKETS, Bot, GameState
from solver import Solver


def _gap(sums) -> int:
    """Lead of the top basket over the runner-up."""
    s1, s2, _ = sorted(sums, reverse=True)
    return s1 - s2


def _with_coin(sums, basket: int, coin: int) -> tuple[int, int, int]:
    after = list(sums)
    after[basket] += coin
    return tuple(after)


def _closest_basket(state: GameState) -> int:
    """Offer the basket where the largest coin would leave the top two closest.

    Ties go to the lowest basket index.
    """
    biggest = max(state.remaining)
    return min(range(BASKETS), key=lambda b: (_gap(_with_coin(state.sums, b, biggest)), b))


def _greedy_coin(state: GameState, basket: int) -> int:
    """Largest coin that doesn't leave a tie for first; largest coin if they all do."""
    coins = sorted(state.remaining, reverse=True)
    for coin in coins:
        if _gap(_with_coin(state.sums, basket, coin)) > 0:
            return coin
    return coins[0]


class GreedyBot(Bot):
    """One-ply heuristics only; never searches ahead.

    As placer it grabs the largest coin unless that ties the top. As presenter it
    offers whichever basket keeps the leaders closest together.
    """

    def chooseBasket(self, state: GameState) -> int:
        return _closest_basket(state)

    def chooseCoin(self, state: GameState, basket: int) -> int:
        return _greedy_coin(state, basket)


class SolverBot(Bot):
    """Plays perfectly from whichever seat it holds.

    As placer it takes Solver.choose_coin (a forcing coin when one exists). As
    presenter it offers a basket the placer cannot win from, and falls back to
    the GreedyBot offer when every basket is lost.
    """

    def __init__(self, name: str = "SolverBot", solver: Solver | None = None) -> None:
        super().__init__(name=name)
        self.solver = solver if solver is not None else Solver()

    def chooseBasket(self, state: GameState) -> int:
        basket = self.solver.choose_basket(state)
        return basket if basket is not None else _closest_basket(state)

    def chooseCoin(self, state: GameState, basket: int) -> int:
        return self.solver.choose_coin(state, basket)

    def newGame(self) -> None:
        self.solver.clear()
