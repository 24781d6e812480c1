#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# color_tui.py — ColorTUIDisplay: full-screen Textual TUI for the Game of Chests.
#
# Requires: pip install textual

from __future__ import annotations

import asyncio
import threading

from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.events import Key
from textual.widgets import RichLog, Static

from chests import (
    BASKETS, FINISHED, OFFERING, PLACER, PLACING,
    Display, Event, Game, GameState, event_to_str, evaluate_terminal, phase,
)


# ── Widgets ───────────────────────────────────────────────────────────────────

class StatusPanel(Static):
    """Top strip: whose move it is, or the result."""

    DEFAULT_CSS = """
    StatusPanel {
        height: auto;
        border: solid $success-darken-1;
        padding: 0 1;
    }
    """


class BasketPanel(Static):
    """One basket: its coins and running sum."""

    DEFAULT_CSS = """
    BasketPanel {
        width: 1fr;
        border: solid grey;
        padding: 1 1;
    }
    BasketPanel.offered {
        border: solid yellow;
    }
    """


class CoinPanel(Static):
    """The coin row: available coins bright, used coins dimmed."""

    DEFAULT_CSS = """
    CoinPanel {
        height: auto;
        border: solid $secondary-darken-1;
        padding: 0 1;
    }
    """


class EventLog(RichLog):
    """Scrolling move history."""

    DEFAULT_CSS = """
    EventLog {
        height: 8;
        border: solid $primary-darken-1;
        padding: 0 1;
    }
    """


class IOPanel(Static):
    """Current prompt and the digits typed so far."""

    DEFAULT_CSS = """
    IOPanel {
        height: auto;
        border: solid $warning-darken-1;
        padding: 0 1;
    }
    """


# ── Helpers ───────────────────────────────────────────────────────────────────

def _basket_markup(index: int, coins: tuple[int, ...], total: int, offered: bool) -> str:
    marker = "▶" if offered else " "
    contents = ", ".join(str(c) for c in coins) if coins else "[dim](empty)[/dim]"
    return f"{marker} Basket {index + 1}\n  {contents}\n  Sum: [b]{total}[/b]"


def _coins_markup(state: GameState) -> str:
    parts = []
    for coin in range(1, state.coin_count + 1):
        if coin in state.remaining:
            parts.append(f"[b yellow]({coin})[/b yellow]")
        else:
            parts.append(f"[dim]({coin})[/dim]")
    return "Coins: " + " ".join(parts)


def _status_markup(state: GameState) -> str:
    """Mirror of the phase: offering, placing, or the final result."""
    current = phase(state)
    if current == OFFERING:
        return f"Presenter's turn: offer a basket (turn {state.turn + 1}/{state.coin_count})"
    if current == PLACING:
        return f"Basket {state.offer + 1} offered: placer must place a coin"
    if current == FINISHED:
        outcome = evaluate_terminal(state)
        if outcome.winner == PLACER:
            return f"[green]Placer wins[/green]: top {outcome.top_sum} vs second {outcome.second_sum}"
        return f"[red]Presenter wins (draw)[/red]: top {outcome.top_sum} vs second {outcome.second_sum}"
    return "Waiting for both players..."


# ── App ───────────────────────────────────────────────────────────────────────

class ChestsApp(App):
    """Full-screen Game of Chests TUI."""

    TITLE = "Game of Chests"
    BINDINGS = [("q", "quit", "Quit")]
    CSS = """
    #basket-area { height: 1fr; }
    """

    def __init__(self, game: Game | None = None,
                 display: ColorTUIDisplay | None = None) -> None:
        super().__init__()
        self.game = game if game is not None else Game()
        self._game_display = display
        self._bridge_event = threading.Event()
        self._bridge_result: object = None
        self._bridge_mode: str | None = None   # "pick_one" | "confirm" | None
        self._bridge_options: list = []
        self._key_buffer: str = ""
        self._last_prompt: str = ""
        if display is not None:
            display.app = self

    def compose(self) -> ComposeResult:
        yield StatusPanel("", id="status")
        with Horizontal(id="basket-area"):
            for i in range(BASKETS):
                yield BasketPanel("", id=f"basket-{i}")
        yield CoinPanel("", id="coins")
        yield EventLog(id="event-log")
        yield IOPanel("", id="io-panel")

    def on_mount(self) -> None:
        self.update_state(self.game)
        if self._game_display is not None:
            threading.Thread(target=self._game_worker, daemon=True).start()

    def add_events(self, events: list[Event]) -> None:
        """Write renderable events to the EventLog; silent events are dropped."""
        log = self.query_one(EventLog)
        for event in events:
            text = event_to_str(event)
            if text is not None:
                log.write(text)

    def update_state(self, game: Game) -> None:
        """Repopulate all panels from the game's current state."""
        state = game.state
        self.query_one(StatusPanel).update(_status_markup(state))
        for i, panel in enumerate(self.query(BasketPanel)):
            offered = state.offer == i
            panel.update(_basket_markup(i, state.baskets[i], state.sums[i], offered))
            panel.set_class(offered, "offered")
        self.query_one(CoinPanel).update(_coins_markup(state))

    def _game_worker(self) -> None:
        """Run games in a background thread so pick_one() can block; exit when the user is done."""
        display = self._game_display
        while True:
            self.game.run(display=display)  # type: ignore[arg-type]
            if not display.confirm("Play again?"):  # type: ignore[union-attr]
                break
            display.show_events(self.game.reset())  # type: ignore[union-attr]
        self.call_from_thread(self.exit)

    def show_prompt(self, options: list, formatter: callable, prompt: str = "") -> None:
        """Update IOPanel with a numbered choice list and enter pick_one mode."""
        self._bridge_options = list(options)
        self._bridge_mode = "pick_one"
        self._key_buffer = ""
        lines = [prompt] if prompt else []
        lines.extend(f"[{i + 1}] {formatter(opt)}" for i, opt in enumerate(options))
        self._last_prompt = "\n".join(lines)
        self._refresh_io_panel()

    def show_confirm_prompt(self, prompt: str) -> None:
        """Update IOPanel with a yes/no prompt and enter confirm mode."""
        self._bridge_mode = "confirm"
        self.query_one(IOPanel).update(f"{prompt} (y/n)")

    def show_info_text(self, content: str) -> None:
        self.query_one(EventLog).write(content)

    def _refresh_io_panel(self) -> None:
        self.query_one(IOPanel).update(f"{self._last_prompt}\n> {self._key_buffer}_")

    def resolve_bridge(self, value: object) -> None:
        """Resolve the current blocking bridge request and clear the IOPanel."""
        self._bridge_mode = None
        self._bridge_options = []
        self._key_buffer = ""
        self.query_one(IOPanel).update("")
        self._bridge_result = value
        self._bridge_event.set()

    def on_key(self, event: Key) -> None:
        """Route keypresses to the active bridge request."""
        if self._bridge_mode == "confirm":
            if event.character in ("y", "Y"):
                event.stop()
                self.resolve_bridge(True)
            elif event.character in ("n", "N"):
                event.stop()
                self.resolve_bridge(False)
        elif self._bridge_mode == "pick_one":
            if event.key == "backspace":
                self._key_buffer = self._key_buffer[:-1]
                self._refresh_io_panel()
                event.stop()
            elif event.key == "enter":
                try:
                    idx = int(self._key_buffer) - 1
                except ValueError:
                    return
                if 0 <= idx < len(self._bridge_options):
                    event.stop()
                    self.resolve_bridge(self._bridge_options[idx])
            elif event.character is not None and event.character.isdigit():
                # 10 coins need two digits
                max_digits = len(str(len(self._bridge_options)))
                if len(self._key_buffer) < max_digits:
                    self._key_buffer += event.character
                    self._refresh_io_panel()
                event.stop()


# ── ColorTUIDisplay ───────────────────────────────────────────────────────────

class ColorTUIDisplay(Display):
    """Full-screen TUI display powered by Textual.

    Wire up via ChestsApp(game=..., display=...) so the app starts the game
    worker thread. pick_one() and confirm() MUST be called from a background
    thread; calling them from the Textual event loop will deadlock.
    """

    def __init__(self, app: ChestsApp | None = None) -> None:
        self.app = app

    def _require_app(self, method: str) -> ChestsApp:
        if self.app is None:
            raise RuntimeError(
                f"ColorTUIDisplay.{method}() requires an app; "
                "pass app=ChestsApp() to the constructor"
            )
        return self.app

    def _call_on_ui(self, fn: callable, /, *args: object) -> None:
        """Call fn directly on the event loop thread, else via call_from_thread()."""
        try:
            asyncio.get_running_loop()
            fn(*args)
        except RuntimeError:
            self.app.call_from_thread(fn, *args)  # type: ignore[union-attr]

    def show_events(self, events: list[Event]) -> None:
        app = self._require_app("show_events")
        self._call_on_ui(app.add_events, events)

    def show_state(self, game: Game) -> None:
        app = self._require_app("show_state")
        self._call_on_ui(app.update_state, game)

    def pick_one(self, options: list, prompt: str = "Your selection: ",
                 formatter: callable = str) -> object:
        """Present a numbered menu and block until resolve_bridge() is called."""
        app = self._require_app("pick_one")
        app._bridge_event.clear()
        self._call_on_ui(app.show_prompt, options, formatter, prompt)
        app._bridge_event.wait()
        return app._bridge_result

    def confirm(self, prompt: str) -> bool:
        """Ask a yes/no question and block until resolve_bridge() is called."""
        app = self._require_app("confirm")
        app._bridge_event.clear()
        self._call_on_ui(app.show_confirm_prompt, prompt)
        app._bridge_event.wait()
        return bool(app._bridge_result)

    def show_info(self, content: str) -> None:
        app = self._require_app("show_info")
        self._call_on_ui(app.show_info_text, content)


if __name__ == "__main__":
    ChestsApp(game=Game(), display=ColorTUIDisplay()).run()
