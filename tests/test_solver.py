#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# tests/test_solver.py — Forced-win search, move selection, and the transposition cache

import unittest
from chests import (
    BASKETS, GameState, UnreachableState,
    apply_offer, apply_placement, new_game,
)
from solver import Solver, TranspositionCache, can_force_win, choose_coin


def _brute_force(sums, remaining, basket) -> bool:
    """Uncached game-tree walk: the placer wins iff some coin beats every later offer."""
    for coin in sorted(remaining):
        after = list(sums)
        after[basket] += coin
        rest = remaining - {coin}
        if not rest:
            top = sorted(after, reverse=True)
            if top[0] > top[1]:
                return True
        elif all(_brute_force(after, rest, b) for b in range(BASKETS)):
            return True
    return False


def _reachable(coin_count: int) -> list[GameState]:
    """Every non-terminal, offer-free state reachable through legal moves."""
    seen = {}
    frontier = [new_game(coin_count)]
    while frontier:
        state = frontier.pop()
        key = (state.sums, state.remaining)
        if key in seen or state.is_terminal:
            continue
        seen[key] = state
        for basket in range(BASKETS):
            for coin in state.remaining:
                frontier.append(apply_placement(apply_offer(state, basket), basket, coin))
    return list(seen.values())


def _place(state: GameState, basket: int, coin: int) -> GameState:
    return apply_placement(apply_offer(state, basket), basket, coin)


class TestCanForceWin(unittest.TestCase):
    """can_force_win() against an uncached brute force and hand-checked positions."""

    def testFourCoinOpeningIsWon(self):
        """With four coins the placer wins whichever basket is offered first."""
        root = new_game(4)
        for basket in range(BASKETS):
            with self.subTest(basket=basket):
                self.assertTrue(can_force_win(root, basket))

    def testRootAgreesWithBruteForce(self):
        for n in (4, 5, 6):
            root = new_game(n)
            with self.subTest(coins=n):
                self.assertEqual(can_force_win(root, 0), _brute_force((0, 0, 0), root.remaining, 0))

    def testEveryFourCoinStateAgreesWithBruteForce(self):
        """Full enumeration of N=4: every reachable state and every offer."""
        solver = Solver()
        for state in _reachable(4):
            for basket in range(BASKETS):
                with self.subTest(sums=state.sums, remaining=sorted(state.remaining), basket=basket):
                    self.assertEqual(solver.can_force_win(state, basket),
                                     _brute_force(state.sums, state.remaining, basket))

    def testLastCoinUsesWinRule(self):
        """One coin left: the verdict is just whether it lands strictly on top."""
        state = GameState(sums=(4, 2, 3), remaining=frozenset({1}), turn=3, coin_count=4)
        self.assertTrue(can_force_win(state, 0))    # 5, 2, 3
        self.assertFalse(can_force_win(state, 2))   # 4, 2, 4

    def testLosingPosition(self):
        """From 4/2/0 with {1, 3} left, an offer on the empty basket can't be won."""
        state = GameState(sums=(4, 2, 0), remaining=frozenset({1, 3}), turn=2, coin_count=4)
        self.assertFalse(can_force_win(state, 2))

    def testTenCoinOpeningSolves(self):
        """The largest game a room allows is solved outright, and the chosen coin keeps the win."""
        solver = Solver()
        root = new_game(10)
        verdicts = [solver.can_force_win(root, b) for b in range(BASKETS)]
        self.assertEqual(verdicts, [True, True, True])
        # Bounded by placements times offers
        self.assertLess(len(solver.cache), 3 ** 10 * BASKETS)
        coin = solver.choose_coin(root, 0)
        after = _place(root, 0, coin)
        for basket in range(BASKETS):
            with self.subTest(basket=basket):
                self.assertTrue(solver.can_force_win(after, basket))

    def testPendingOfferOnSameBasketAccepted(self):
        offered = apply_offer(new_game(4), 1)
        self.assertEqual(can_force_win(offered, 1), can_force_win(new_game(4), 1))


class TestSearchPreconditions(unittest.TestCase):
    """The solver refuses states it could never be asked about in a legal game."""

    def testTerminalStateRaises(self):
        state = GameState(sums=(7, 5, 3), remaining=frozenset(), turn=5, coin_count=5)
        with self.assertRaises(UnreachableState):
            can_force_win(state, 0)
        with self.assertRaises(UnreachableState):
            choose_coin(state, 0)

    def testMissingBasketRaises(self):
        with self.assertRaises(UnreachableState):
            can_force_win(new_game(4), 3)

    def testOfferOnOtherBasketRaises(self):
        with self.assertRaises(UnreachableState):
            can_force_win(apply_offer(new_game(4), 0), 2)

    def testInconsistentStateRaises(self):
        state = GameState(sums=(9, 0, 0), remaining=frozenset({1, 2, 3}), turn=1, coin_count=4)
        with self.assertRaises(UnreachableState):
            can_force_win(state, 0)


class TestChooseCoin(unittest.TestCase):
    """choose_coin() picks the smallest forcing coin, else the largest coin."""

    def testOpeningCoinKeepsForcedWin(self):
        """After the chosen opening coin, every next offer is still a forced win."""
        root = new_game(4)
        coin = choose_coin(root, 0)
        after = _place(root, 0, coin)
        for basket in range(BASKETS):
            with self.subTest(basket=basket):
                self.assertTrue(can_force_win(after, basket))

    def testChoiceIsSmallestWinningCoin(self):
        solver = Solver()
        for state in _reachable(5):
            for basket in range(BASKETS):
                winners = solver.winning_coins(state, basket)
                coin = solver.choose_coin(state, basket)
                with self.subTest(sums=state.sums, remaining=sorted(state.remaining), basket=basket):
                    if winners:
                        self.assertEqual(coin, winners[0])
                    else:
                        self.assertEqual(coin, max(state.remaining))
                    self.assertEqual(bool(winners), solver.can_force_win(state, basket))

    def testFallbackIsLargestCoin(self):
        state = GameState(sums=(4, 2, 0), remaining=frozenset({1, 3}), turn=2, coin_count=4)
        self.assertEqual(Solver().winning_coins(state, 2), [])
        self.assertEqual(choose_coin(state, 2), 3)

    def testWinningLastCoin(self):
        state = GameState(sums=(4, 2, 3), remaining=frozenset({1}), turn=3, coin_count=4)
        self.assertEqual(choose_coin(state, 0), 1)


class TestChooseBasket(unittest.TestCase):
    """Solver.choose_basket() finds an offer the placer can't win from."""

    def testNoLosingOfferAtFourCoinStart(self):
        self.assertIsNone(Solver().choose_basket(new_game(4)))

    def testFindsLosingOffer(self):
        state = GameState(sums=(4, 2, 0), remaining=frozenset({1, 3}), turn=2, coin_count=4)
        basket = Solver().choose_basket(state)
        self.assertIsNotNone(basket)
        self.assertFalse(can_force_win(state, basket))


class TestTranspositionCache(unittest.TestCase):
    """The cache is an optimization: it collapses transpositions and never changes a verdict."""

    def testCacheBasics(self):
        cache = TranspositionCache()
        self.assertIsNone(cache.get((0, 0, 0, 15, 0, 0)))
        cache.put((0, 0, 0, 15, 0, 0), False)
        self.assertIs(cache.get((0, 0, 0, 15, 0, 0)), False)
        self.assertIn((0, 0, 0, 15, 0, 0), cache)
        self.assertEqual(cache.stats(), {"entries": 1, "hits": 1, "misses": 1})
        cache.clear()
        self.assertEqual(len(cache), 0)
        self.assertEqual(cache.stats(), {"entries": 0, "hits": 0, "misses": 0})

    def testClearingNeverChangesVerdicts(self):
        solver = Solver()
        states = _reachable(5)
        first = {(s.sums, s.remaining, b): solver.can_force_win(s, b) for s in states for b in range(BASKETS)}
        solver.clear()
        self.assertEqual(len(solver.cache), 0)
        for s in reversed(states):
            for b in reversed(range(BASKETS)):
                self.assertEqual(solver.can_force_win(s, b), first[(s.sums, s.remaining, b)])

    def testWarmCacheMatchesColdCache(self):
        warm = Solver()
        warm.can_force_win(new_game(6), 0)
        state = _place(_place(new_game(6), 0, 6), 1, 2)
        for basket in range(BASKETS):
            self.assertEqual(warm.can_force_win(state, basket), can_force_win(state, basket))

    def testTranspositionsShareOneEntry(self):
        """Reaching the same position by two move orders hits the same cache key."""
        solver = Solver()
        one_then_two = _place(_place(new_game(5), 0, 1), 1, 2)
        two_then_one = _place(_place(new_game(5), 1, 2), 0, 1)
        self.assertNotEqual(one_then_two.moves, two_then_one.moves)
        solver.can_force_win(one_then_two, 2)
        entries = len(solver.cache)
        hits = solver.stats()["hits"]
        solver.can_force_win(two_then_one, 2)
        self.assertEqual(len(solver.cache), entries)
        self.assertEqual(solver.stats()["hits"], hits + 1)

    def testSharedCacheAcrossModuleCalls(self):
        cache = TranspositionCache()
        can_force_win(new_game(4), 0, cache=cache)
        self.assertGreater(len(cache), 0)
        entries = len(cache)
        choose_coin(new_game(4), 0, cache=cache)
        self.assertEqual(len(cache), entries)

    def testPermutedBasketsAreDistinctKeys(self):
        solver = Solver()
        a = GameState(sums=(4, 2, 0), remaining=frozenset({1, 3}), turn=2, coin_count=4)
        b = GameState(sums=(2, 4, 0), remaining=frozenset({1, 3}), turn=2, coin_count=4)
        solver.can_force_win(a, 2)
        entries = len(solver.cache)
        solver.can_force_win(b, 2)
        self.assertGreater(len(solver.cache), entries)


if __name__ == "__main__":
    unittest.main(buffer=True)
