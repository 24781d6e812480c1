#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# chests.py - Main game file: state model, players, displays, and the game loop
#
# Three baskets, N coins worth 1..N. Each turn the presenter offers a basket and
# the placer drops one remaining coin into it. The placer wins if one basket
# ends strictly on top; any tie for first goes to the presenter.

from __future__ import annotations

import argparse
import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace

BASKETS: int = 3
MIN_COINS: int = 4
MAX_COINS: int = 10
DEFAULT_COINS: int = 4

PLACER = "placer"
PRESENTER = "presenter"

WAITING = "waiting"
OFFERING = "offering"
PLACING = "placing"
FINISHED = "finished"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ChestsError(Exception):
    """Base class for rejected game actions."""


class InvalidOffer(ChestsError):
    """Offer made on a finished game, with an offer already pending, or to a basket that doesn't exist."""


class InvalidPlacement(ChestsError):
    """Coin not available, or no matching offer pending."""


class UnreachableState(ChestsError):
    """A state that no legal sequence of moves can produce, or a terminal state handed to the search."""


# ---------------------------------------------------------------------------
# State model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Move:
    turn: int       # 1-based, like the history list players see
    basket: int
    coin: int
    by: str | None = None   # who placed it, when known


@dataclass(frozen=True)
class Outcome:
    winner: str
    top_sum: int
    second_sum: int


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of a game. Transitions return new values.

    Only sums, remaining and turn matter to the solver; baskets and moves are
    kept for display.
    """
    sums: tuple[int, int, int]
    remaining: frozenset[int]
    turn: int
    coin_count: int
    offer: int | None = None
    baskets: tuple[tuple[int, ...], ...] = ((), (), ())
    moves: tuple[Move, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.turn == self.coin_count

    @property
    def placed(self) -> list[int]:
        return [c for c in range(1, self.coin_count + 1) if c not in self.remaining]


def new_game(coin_count: int = DEFAULT_COINS) -> GameState:
    """Return the empty state: turn 0, every coin in hand, no offer pending."""
    if coin_count < 1:
        raise ValueError("A game needs at least one coin, not {}".format(coin_count))
    return GameState(
        sums=(0, 0, 0),
        remaining=frozenset(range(1, coin_count + 1)),
        turn=0,
        coin_count=coin_count,
    )


def check_coin_count(coin_count: int) -> int:
    """Validate the coin count a driver may start a game with."""
    if not MIN_COINS <= coin_count <= MAX_COINS:
        raise ValueError("Coin count must be between {} and {}, not {}".format(MIN_COINS, MAX_COINS, coin_count))
    return coin_count


def check_state(state: GameState) -> None:
    """Raise UnreachableState unless the state obeys the model's invariants."""
    n = state.coin_count
    if len(state.sums) != BASKETS or any(s < 0 for s in state.sums):
        raise UnreachableState("Sums must be three non-negative integers: {}".format(state.sums))
    if any(c < 1 or c > n for c in state.remaining):
        raise UnreachableState("Remaining coins {} fall outside 1..{}".format(sorted(state.remaining), n))
    if state.turn != n - len(state.remaining):
        raise UnreachableState("Turn {} doesn't match {} coins left of {}".format(state.turn, len(state.remaining), n))
    if sum(state.sums) != sum(state.placed):
        raise UnreachableState("Basket sums {} don't add up to the placed coins {}".format(state.sums, state.placed))
    if any(state.baskets) and tuple(sum(b) for b in state.baskets) != tuple(state.sums):
        raise UnreachableState("Basket contents {} disagree with sums {}".format(state.baskets, state.sums))
    if state.offer is not None and state.offer not in range(BASKETS):
        raise UnreachableState("Pending offer {} is not a basket".format(state.offer))


def placer_wins(sums) -> bool:
    """The win rule: the top basket must be strictly ahead of the runner-up."""
    s1, s2, _ = sorted(sums, reverse=True)
    return s1 > s2


def apply_offer(state: GameState, basket: int) -> GameState:
    """Presenter offers a basket. Returns the state awaiting a placement there."""
    if basket not in range(BASKETS):
        raise InvalidOffer("There is no basket {}".format(basket))
    if state.is_terminal:
        raise InvalidOffer("The game is finished")
    if state.offer is not None:
        raise InvalidOffer("Basket {} is already offered".format(state.offer))
    return replace(state, offer=basket)


def apply_placement(state: GameState, basket: int, coin: int, by: str | None = None) -> GameState:
    """Placer drops a coin into the offered basket. Returns the next state.

    by names whoever placed the coin; it is kept on the Move for history only.
    """
    if state.offer is None:
        raise InvalidPlacement("No basket has been offered")
    if state.offer != basket:
        raise InvalidPlacement("Basket {} is offered, not basket {}".format(state.offer, basket))
    if coin not in state.remaining:
        raise InvalidPlacement("Coin {} is not available".format(coin))
    sums = list(state.sums)
    sums[basket] += coin
    baskets = list(state.baskets)
    baskets[basket] = baskets[basket] + (coin,)
    return replace(
        state,
        sums=tuple(sums),
        remaining=state.remaining - {coin},
        turn=state.turn + 1,
        offer=None,
        baskets=tuple(baskets),
        moves=state.moves + (Move(turn=state.turn + 1, basket=basket, coin=coin, by=by),),
    )


def evaluate_terminal(state: GameState) -> Outcome:
    """Decide the winner of a finished game."""
    if not state.is_terminal:
        raise UnreachableState("Turn {} of {}: the game isn't over".format(state.turn, state.coin_count))
    s1, s2, _ = sorted(state.sums, reverse=True)
    winner = PLACER if s1 > s2 else PRESENTER
    return Outcome(winner=winner, top_sum=s1, second_sum=s2)


def phase(state: GameState, seated: bool = True) -> str:
    """Project (turn, offer) onto the phase a room or UI shows."""
    if state.is_terminal:
        return FINISHED
    if not seated:
        return WAITING
    return PLACING if state.offer is not None else OFFERING


def state_record(state: GameState, phase_name: str | None = None) -> dict:
    """Serializable record in the shape the shared room store keeps."""
    return {
        "sums": list(state.sums),
        "remaining": sorted(state.remaining),
        "turn": state.turn,
        "coinCount": state.coin_count,
        "currentOffer": state.offer,
        "phase": phase_name if phase_name is not None else phase(state),
        "baskets": [list(b) for b in state.baskets],
        "moves": [{"turn": m.turn, "idx": m.basket, "coin": m.coin, "by": m.by} for m in state.moves],
    }


# ---------------------------------------------------------------------------
# Events and displays
# ---------------------------------------------------------------------------

@dataclass
class Event:
    """A single thing that happened, for a Display to render (or ignore)."""
    type: str
    player: str = ""
    basket: int | None = None
    coin: int | None = None
    value: int = 0
    message: str = ""


# Event types: new_game, offer, place, win
def event_to_str(event: Event) -> str | None:
    """Plain-text rendering shared by the terminal and TUI displays."""
    t = event.type
    if t == "new_game":
        return "New game with {} coins.".format(event.value)
    if t == "offer":
        return "{} offers basket {}.".format(event.player, event.basket + 1)
    if t == "place":
        return "Turn {}: basket {} <- {} ({})".format(event.value, event.basket + 1, event.coin, event.player)
    if t == "win":
        return "{} wins: {}".format(event.player, event.message)
    return None


def _basket_str(coins: tuple[int, ...]) -> str:
    return ", ".join(str(c) for c in coins) if coins else "(empty)"


class Display(ABC):
    """Everything the game loop needs from a front end."""

    @abstractmethod
    def show_events(self, events: list[Event]) -> None: ...

    @abstractmethod
    def show_state(self, game: Game) -> None: ...

    @abstractmethod
    def pick_one(self, options: list, prompt: str = "Your selection: ", formatter=str) -> object: ...

    @abstractmethod
    def confirm(self, prompt: str) -> bool: ...

    @abstractmethod
    def show_info(self, content: str) -> None: ...


class NullDisplay(Display):
    """Swallows output; picks the first option. For headless bot games."""

    def show_events(self, events: list[Event]) -> None:
        pass

    def show_state(self, game: Game) -> None:
        pass

    def pick_one(self, options: list, prompt: str = "Your selection: ", formatter=str) -> object:
        return options[0]

    def confirm(self, prompt: str) -> bool:
        return False

    def show_info(self, content: str) -> None:
        pass


class RecordingDisplay(NullDisplay):
    """NullDisplay that keeps every event it was shown."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def show_events(self, events: list[Event]) -> None:
        self.events.extend(events)


class TerminalDisplay(Display):
    """print() and input() front end."""

    def show_events(self, events: list[Event]) -> None:
        for event in events:
            text = event_to_str(event)
            if text is not None:
                print(text)

    def show_state(self, game: Game) -> None:
        state = game.state
        for i in range(BASKETS):
            print("Basket {}: {:<16} Sum: {}".format(i + 1, _basket_str(state.baskets[i]), state.sums[i]))
        print("Coins left: {}".format(" ".join(str(c) for c in sorted(state.remaining)) or "none"))

    def pick_one(self, options: list, prompt: str = "Your selection: ", formatter=str) -> object:
        print(" -=-= Choose One =-=- ")
        for i, option in enumerate(options):
            print("[{}] : {}".format(i + 1, formatter(option)))
        while True:
            raw = input(prompt)
            try:
                j = int(raw)
            except ValueError:
                print("Sorry: '{}' isn't a number.".format(raw))
                continue
            if 1 <= j <= len(options):
                return options[j - 1]
            print("Sorry: pick a number from 1 to {}.".format(len(options)))

    def confirm(self, prompt: str) -> bool:
        while True:
            answer = input("{} [y/n] ".format(prompt)).strip().lower()
            if answer.startswith("y"):
                return True
            if answer.startswith("n"):
                return False
            print("Sorry, I couldn't find a Y or N in your answer.")

    def show_info(self, content: str) -> None:
        print(content)


# ---------------------------------------------------------------------------
# Players
# ---------------------------------------------------------------------------

class Player(object):
    def __init__(self, name: str = "Player"):
        self.name = name
        self.display: Display = NullDisplay()

    def chooseBasket(self, state: GameState) -> int:
        raise NotImplementedError

    def chooseCoin(self, state: GameState, basket: int) -> int:
        raise NotImplementedError

    def newGame(self) -> None:
        """Hook called before each game; bots with per-game caches reset here."""


class Human(Player):
    def chooseBasket(self, state: GameState) -> int:
        return self.display.pick_one(
            list(range(BASKETS)),
            prompt="Offer which basket? ",
            formatter=lambda b: "Basket {} (sum {})".format(b + 1, state.sums[b]),
        )

    def chooseCoin(self, state: GameState, basket: int) -> int:
        return self.display.pick_one(
            sorted(state.remaining),
            prompt="Place which coin in basket {}? ".format(basket + 1),
            formatter=lambda c: "Place {}".format(c),
        )


class Bot(Player):
    """Plays any legal move at random."""

    def __init__(self, name: str = "Bot", rng: random.Random | None = None):
        super().__init__(name)
        self.rng = rng if rng is not None else random.Random()

    def chooseBasket(self, state: GameState) -> int:
        return self.rng.randrange(BASKETS)

    def chooseCoin(self, state: GameState, basket: int) -> int:
        return self.rng.choice(sorted(state.remaining))


# ---------------------------------------------------------------------------
# Game loop
# ---------------------------------------------------------------------------

class Game:
    """One table: a presenter, a placer, and the canonical state between them."""

    def __init__(self, coin_count: int = DEFAULT_COINS, presenter: Player | None = None,
                 placer: Player | None = None, pace: float = 0.0):
        self.presenter = presenter if presenter is not None else Bot(name="Presenter")
        self.placer = placer if placer is not None else Bot(name="Placer")
        self.pace = pace
        self.state = new_game(coin_count)
        self.outcome: Outcome | None = None
        self.winner: Player | None = None

    def reset(self, coin_count: int | None = None) -> list[Event]:
        n = coin_count if coin_count is not None else self.state.coin_count
        self.state = new_game(n)
        self.outcome = None
        self.winner = None
        self.presenter.newGame()
        self.placer.newGame()
        return [Event(type="new_game", value=n)]

    def offer(self, basket: int) -> list[Event]:
        self.state = apply_offer(self.state, basket)
        return [Event(type="offer", player=self.presenter.name, basket=basket)]

    def place(self, coin: int) -> list[Event]:
        basket = self.state.offer
        if basket is None:
            raise InvalidPlacement("No basket has been offered")
        self.state = apply_placement(self.state, basket, coin, by=self.placer.name)
        events = [Event(type="place", player=self.placer.name, basket=basket, coin=coin, value=self.state.turn)]
        if self.state.is_terminal:
            events.extend(self._finish())
        return events

    def _finish(self) -> list[Event]:
        self.outcome = evaluate_terminal(self.state)
        if self.outcome.winner == PLACER:
            self.winner = self.placer
            message = "top {} vs second {}".format(self.outcome.top_sum, self.outcome.second_sum)
        else:
            self.winner = self.presenter
            message = "draw at the top, {} vs {}".format(self.outcome.top_sum, self.outcome.second_sum)
        return [Event(type="win", player=self.winner.name, value=self.outcome.top_sum, message=message)]

    def _pause(self, player: Player) -> None:
        if self.pace > 0 and not isinstance(player, Human):
            time.sleep(self.pace)

    def next_turn(self) -> list[Event]:
        """Ask the presenter for an offer and the placer for a coin; apply both."""
        events: list[Event] = []
        self._pause(self.presenter)
        events.extend(self.offer(self.presenter.chooseBasket(self.state)))
        self._pause(self.placer)
        events.extend(self.place(self.placer.chooseCoin(self.state, self.state.offer)))
        return events

    def run(self, display: Display | None = None) -> Player:
        display = display if display is not None else NullDisplay()
        self.presenter.display = display
        self.placer.display = display
        display.show_state(self)
        while not self.state.is_terminal:
            events = self.next_turn()
            display.show_events(events)
            display.show_state(self)
        return self.winner

    def get_state(self) -> dict:
        return state_record(self.state)


# ==== Command line ====

def make_player(kind: str, name: str, rng: random.Random | None = None) -> Player:
    if kind == "human":
        return Human(name=name)
    if kind == "random":
        return Bot(name=name, rng=rng)
    # bots.py builds on this module, so import it lazily
    from bots import GreedyBot, SolverBot
    if kind == "solver":
        return SolverBot(name=name)
    if kind == "greedy":
        return GreedyBot(name=name)
    raise ValueError("Unknown player kind '{}'".format(kind))


def main():
    kinds = ["human", "random", "solver", "greedy"]
    parser = argparse.ArgumentParser(description='The Game of Chests')
    parser.add_argument('-n', '--coins', type=int, default=DEFAULT_COINS,
                        help='number of coins, {} to {} (default: {})'.format(MIN_COINS, MAX_COINS, DEFAULT_COINS))
    parser.add_argument('--presenter', choices=kinds, default='solver', help='who offers baskets (default: solver)')
    parser.add_argument('--placer', choices=kinds, default='human', help='who places coins (default: human)')
    parser.add_argument('--pace', type=float, default=0.0, help='seconds to wait before each bot move')
    parser.add_argument('--seed', type=int, default=None, help='seed for random bots')
    parser.add_argument('--games', type=int, default=1, help='number of games to play in a row')
    parser.add_argument('--tui', action='store_true', help='play in the full-screen Textual interface')
    args = parser.parse_args()

    try:
        coin_count = check_coin_count(args.coins)
    except ValueError as e:
        parser.error(str(e))
    rng = random.Random(args.seed)
    game = Game(
        coin_count=coin_count,
        presenter=make_player(args.presenter, "Presenter", rng),
        placer=make_player(args.placer, "Placer", rng),
        pace=args.pace,
    )

    if args.tui:
        from color_tui import ChestsApp, ColorTUIDisplay
        ChestsApp(game=game, display=ColorTUIDisplay()).run()
        return

    display = TerminalDisplay()
    wins = {PLACER: 0, PRESENTER: 0}
    human_seated = any(isinstance(p, Human) for p in (game.presenter, game.placer))
    played = 0
    while True:
        game.run(display=display)
        wins[game.outcome.winner] += 1
        played += 1
        # Bot-only sessions stop after --games; a human is asked before each extra game
        if played >= args.games and not (human_seated and display.confirm("Play again?")):
            break
        display.show_events(game.reset())
    if played > 1:
        display.show_info("Placer won {} of {} games.".format(wins[PLACER], played))


if __name__ == "__main__":
    main()
