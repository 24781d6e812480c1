#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# tournament.py — Round-robin harness for bot strategy evaluation
#
# Every presenter family plays every placer family at each coin count; the
# table reports how often the placer won. Per-game records can be exported
# to JSONL.
#
# Usage:
#   python tournament.py                        # 4..7 coins, 20 games per pairing
#   python tournament.py --coins 4 10           # every coin count from 4 to 10
#   python tournament.py --records out.jsonl    # also export per-game JSONL records

from __future__ import annotations

import argparse
import json
import random
from dataclasses import dataclass, field
from typing import Callable

from chests import MAX_COINS, MIN_COINS, PLACER, Bot, Game, Player, RecordingDisplay, check_coin_count
from bots import GreedyBot, SolverBot


@dataclass
class Entrant:
    """A bot family: a label plus a factory that builds a fresh bot from a name."""
    label: str
    player_factory: Callable[[str], Player]


@dataclass
class PairingResult:
    """Placer wins for one (presenter, placer, coin count) pairing."""
    presenter: str
    placer: str
    coin_count: int
    games: int = 0
    placer_wins: int = 0
    top_sums: list[int] = field(default_factory=list)

    @property
    def placer_rate(self) -> float:
        return self.placer_wins / self.games if self.games else 0.0


def make_random_bot(rng: random.Random) -> Callable[[str], Bot]:
    """Return a factory whose random bots all draw from one seeded rng."""
    def factory(name: str) -> Bot:
        return Bot(name=name, rng=rng)
    return factory


def _write_game_record(records_path: str, game: Game, presenter: str, placer: str) -> None:
    """Append one compact JSONL line describing a finished game."""
    record = game.get_state()
    record.update({
        "presenter": presenter,
        "placer": placer,
        "winner": game.outcome.winner,
        "topSum": game.outcome.top_sum,
        "secondSum": game.outcome.second_sum,
    })
    with open(records_path, "a", encoding="utf-8") as f:
        f.write(json.dumps(record, separators=(",", ":")) + "\n")


def play_pairing(
    presenter: Entrant,
    placer: Entrant,
    coin_count: int,
    games: int,
    records_path: str | None = None,
) -> PairingResult:
    """Play games between one presenter family and one placer family."""
    result = PairingResult(presenter=presenter.label, placer=placer.label, coin_count=coin_count)
    game = Game(
        coin_count=coin_count,
        presenter=presenter.player_factory(presenter.label),
        placer=placer.player_factory(placer.label),
    )
    for i in range(games):
        if i > 0:
            game.reset()
        game.run(display=RecordingDisplay())
        result.games += 1
        if game.outcome.winner == PLACER:
            result.placer_wins += 1
        result.top_sums.append(game.outcome.top_sum)
        if records_path is not None:
            _write_game_record(records_path, game, presenter.label, placer.label)
    return result


def run_round_robin(
    entrants: list[Entrant],
    coin_counts: list[int],
    games: int = 20,
    records_path: str | None = None,
) -> list[PairingResult]:
    """Play every presenter family against every placer family at each coin count."""
    results = []
    for n in coin_counts:
        for presenter in entrants:
            for placer in entrants:
                results.append(play_pairing(presenter, placer, n, games, records_path))
    return results


def print_standings(results: list[PairingResult]) -> None:
    """Print placer win rates, one row per pairing, grouped by coin count."""
    print(f"  {'Coins':>5}  {'Presenter':<10}  {'Placer':<10}  {'Placer wins':>11}")
    print(f"  {'-----':>5}  {'-' * 10}  {'-' * 10}  {'-' * 11:>11}")
    for r in results:
        wins_str = f"{r.placer_wins}/{r.games} {r.placer_rate:4.0%}"
        print(f"  {r.coin_count:>5}  {r.presenter:<10}  {r.placer:<10}  {wins_str:>11}")
    print()


def default_field(rng: random.Random) -> list[Entrant]:
    return [
        Entrant(label="Random", player_factory=make_random_bot(rng)),
        Entrant(label="Greedy", player_factory=GreedyBot),
        Entrant(label="Solver", player_factory=SolverBot),
    ]


def main() -> None:
    parser = argparse.ArgumentParser(description="Round-robin bot tournament")
    parser.add_argument("--coins", type=int, nargs=2, default=[MIN_COINS, 7], metavar=("LO", "HI"),
                        help=f"coin counts to play, inclusive ({MIN_COINS}..{MAX_COINS}, default: {MIN_COINS} 7)")
    parser.add_argument("--games", type=int, default=20, metavar="N",
                        help="games per pairing and coin count (default: 20)")
    parser.add_argument("--seed", type=int, default=None, help="seed for the random bots")
    parser.add_argument("--records", metavar="FILE", default=None,
                        help="append per-game JSONL records to FILE")
    args = parser.parse_args()

    lo, hi = args.coins
    try:
        coin_counts = [check_coin_count(n) for n in range(lo, hi + 1)]
    except ValueError as e:
        parser.error(str(e))
    results = run_round_robin(default_field(random.Random(args.seed)), coin_counts,
                              games=args.games, records_path=args.records)
    print_standings(results)


if __name__ == "__main__":
    main()
