#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# tests/test_tournament.py — Tests for the round-robin tournament harness

import json
import os
import random
import tempfile
import unittest
from unittest.mock import patch

from chests import Bot
from bots import GreedyBot, SolverBot
from tournament import (
    Entrant, PairingResult, default_field, main, make_random_bot, play_pairing, print_standings, run_round_robin,
)


class TestMakeRandomBot(unittest.TestCase):

    def test_factory_builds_named_bots_on_shared_rng(self):
        rng = random.Random(1)
        factory = make_random_bot(rng)
        a, b = factory("A"), factory("B")
        self.assertIsInstance(a, Bot)
        self.assertEqual(a.name, "A")
        self.assertIs(a.rng, b.rng)


class TestPairingResult(unittest.TestCase):

    def test_rate(self):
        self.assertEqual(PairingResult("P", "Q", 4, games=4, placer_wins=3).placer_rate, 0.75)

    def test_rate_with_no_games(self):
        self.assertEqual(PairingResult("P", "Q", 4).placer_rate, 0.0)


class TestPlayPairing(unittest.TestCase):
    """play_pairing() plays repeated games between two bot families."""

    def test_solver_placer_sweeps_four_coins(self):
        """Four coins are a forced win for the placer."""
        result = play_pairing(
            Entrant("Random", make_random_bot(random.Random(3))),
            Entrant("Solver", SolverBot),
            coin_count=4, games=8,
        )
        self.assertEqual(result.games, 8)
        self.assertEqual(result.placer_wins, 8)
        self.assertEqual(len(result.top_sums), 8)

    def test_records_written_as_jsonl(self):
        fd, path = tempfile.mkstemp(suffix=".jsonl")
        os.close(fd)
        try:
            play_pairing(Entrant("Greedy", GreedyBot), Entrant("Solver", SolverBot),
                         coin_count=5, games=3, records_path=path)
            with open(path, encoding="utf-8") as f:
                records = [json.loads(line) for line in f]
        finally:
            os.remove(path)
        self.assertEqual(len(records), 3)
        for record in records:
            self.assertEqual(record["presenter"], "Greedy")
            self.assertEqual(record["placer"], "Solver")
            self.assertEqual(record["phase"], "finished")
            self.assertEqual(record["coinCount"], 5)
            self.assertEqual(len(record["moves"]), 5)
            self.assertEqual(record["remaining"], [])
            self.assertIn(record["winner"], ("placer", "presenter"))
            self.assertGreaterEqual(record["topSum"], record["secondSum"])


class TestRoundRobin(unittest.TestCase):

    def test_every_pairing_at_every_coin_count(self):
        field = default_field(random.Random(0))
        results = run_round_robin(field, [4, 5], games=2)
        self.assertEqual(len(results), len(field) ** 2 * 2)
        self.assertEqual({(r.presenter, r.placer) for r in results},
                         {(p.label, q.label) for p in field for q in field})
        self.assertTrue(all(r.games == 2 for r in results))


class TestPrintStandings(unittest.TestCase):

    def test_one_row_per_pairing(self):
        results = [PairingResult("Random", "Solver", 4, games=2, placer_wins=2),
                   PairingResult("Solver", "Random", 4, games=2, placer_wins=1)]
        with patch("builtins.print") as mock_print:
            print_standings(results)
        lines = [c.args[0] for c in mock_print.call_args_list if c.args]
        self.assertEqual(len(lines), 4)  # header, rule, two rows
        self.assertIn("2/2", lines[2])
        self.assertIn("Random", lines[3])


class TestMain(unittest.TestCase):

    def test_small_tournament(self):
        argv = ["tournament.py", "--coins", "4", "4", "--games", "1", "--seed", "2"]
        with patch("sys.argv", argv), patch("builtins.print") as mock_print:
            main()
        self.assertGreater(mock_print.call_count, 2)

    def test_rejects_bad_range(self):
        with patch("sys.argv", ["tournament.py", "--coins", "3", "5"]), patch("sys.stderr"):
            with self.assertRaises(SystemExit):
                main()


if __name__ == "__main__":
    unittest.main(buffer=True)
