#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# color_tui.py — ColorTUIDisplay: full-screen Textual TUI for Bitwise Dice Duel.
#
# Requires: pip install textual

from __future__ import annotations

import asyncio
import threading

from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.events import Key
from textual.widgets import RichLog, Static

from bitduel import (
    COLUMN_OPS, ROW_PAIRS, Display, Event, Game, GameState, board_rows, cell_to_choice, event_text,
)

PLAYER_COLOR = "#fa2d66"
AI_COLOR = "#00f37d"


# ── Widgets ───────────────────────────────────────────────────────────────────

class BoardPanel(Static):
    """The snaking 40-tile track with both tokens."""

    DEFAULT_CSS = """
    BoardPanel {
        width: 3fr;
        border: solid grey;
        padding: 0 1;
    }
    """


class DicePanel(Static):
    """Current dice and the AND/OR/XOR move matrix with choice numbers."""

    DEFAULT_CSS = """
    DicePanel {
        width: 2fr;
        border: solid $success-darken-1;
        padding: 0 1;
    }
    """


class EventLog(RichLog):
    """Scrolling log of game events."""

    DEFAULT_CSS = """
    EventLog {
        height: 8;
        border: solid $primary-darken-1;
        padding: 0 1;
    }
    """


class IOPanel(Static):
    """Prompt for the human's move."""

    DEFAULT_CSS = """
    IOPanel {
        height: auto;
        border: solid $warning-darken-1;
        padding: 0 1;
    }
    """


# ── Helpers ───────────────────────────────────────────────────────────────────

def _cell_markup(cell: str) -> str:
    """Color one board cell: tokens in their side's color, empty tiles dimmed."""
    if cell == "PA":
        return f"[{PLAYER_COLOR}]P[/][{AI_COLOR}]A[/]"
    if cell == "P":
        return f"[bold {PLAYER_COLOR}]P[/]"
    if cell == "A":
        return f"[bold {AI_COLOR}]A[/]"
    if cell == "Start":
        return "[yellow]Start[/yellow]"
    return f"[dim]{cell}[/dim]"


def _board_markup(state: GameState, player_name: str = "Player", ai_name: str = "A.I.") -> str:
    """Board rows top to bottom, each cell padded to 5 columns before markup is applied."""
    lines = []
    for row in board_rows(state):
        lines.append(" ".join(" " * (5 - len(cell)) + _cell_markup(cell) for cell in row))
    lines.append("")
    lines.append(f"[{PLAYER_COLOR}]{player_name}[/]: tile {state.player}    "
                 f"[{AI_COLOR}]{ai_name}[/]: tile {state.ai}")
    return "\n".join(lines)


def _dice_markup(dice: tuple | None, matrix: list | None) -> str:
    """Dice line plus a 3x3 table of '[k] value' cells under AND/OR/XOR headers."""
    if dice is None or matrix is None:
        return "No dice rolled yet."
    lines = ["Dice: " + "  ".join(f"[bold]{d}[/bold]" for d in dice), ""]
    lines.append("        " + "".join(f"{op:>9}" for op in COLUMN_OPS))
    for row in range(3):
        i, j = ROW_PAIRS[row]
        cells = "".join(
            f"{f'[{cell_to_choice(row, col)}] {matrix[row][col]}':>9}" for col in range(3)
        )
        # Escape the literal brackets so Rich doesn't read "[1]" as markup
        lines.append(f"({dice[i]},{dice[j]})   " + cells.replace("[", "\\["))
    return "\n".join(lines)


# ── App ───────────────────────────────────────────────────────────────────────

class BitDuelApp(App):
    """Full-screen Bitwise Dice Duel TUI."""

    TITLE = "Bitwise Dice Duel"
    BINDINGS = [("q", "quit", "Quit")]
    CSS = """
    #table { height: 1fr; }
    """

    def __init__(self, game: Game | None = None,
                 display: ColorTUIDisplay | None = None) -> None:
        super().__init__()
        self.game = game
        self._game_display = display
        self._bridge_event = threading.Event()
        self._bridge_result: object = None
        self._bridge_mode: str | None = None   # "pick_one" | "confirm" | None
        self._bridge_options: list = []
        if display is not None:
            display.app = self

    def compose(self) -> ComposeResult:
        with Horizontal(id="table"):
            yield BoardPanel(_board_markup(GameState()), id="board")
            yield DicePanel(_dice_markup(None, None), id="dice")
        yield EventLog(id="event-log")
        yield IOPanel("", id="io-panel")

    def on_mount(self) -> None:
        if self.game is not None:
            self.update_state(self.game)
            if self._game_display is not None:
                threading.Thread(target=self._game_worker, daemon=True).start()

    def add_events(self, events: list[Event]) -> None:
        """Write renderable events to the EventLog; silent events are dropped."""
        log = self.query_one(EventLog)
        for event in events:
            text = event_text(event)
            if text is not None:
                log.write(text)

    def update_state(self, game: Game) -> None:
        """Repopulate the board and dice panels from the game."""
        self.query_one(BoardPanel).update(_board_markup(game.state, game.player.name, game.ai.name))
        self.query_one(DicePanel).update(_dice_markup(game.dice, game.matrix))

    def _game_worker(self) -> None:
        """Run the game loop in a background thread.

        The app may exit (e.g., test teardown) while a turn is in progress, and
        call_from_thread() then raises; the worker just stops.
        """
        try:
            self.game.run(display=self._game_display)  # type: ignore[union-attr]
        except RuntimeError:
            return

    def show_prompt(self, options: list, formatter: callable) -> None:
        """List the numbered options in the IOPanel and enter pick_one mode."""
        self._bridge_options = list(options)
        self._bridge_mode = "pick_one"
        lines = [f"\\[{i + 1}] {formatter(opt)}" for i, opt in enumerate(options)]
        self.query_one(IOPanel).update("Press a number:\n" + "   ".join(lines))

    def show_confirm_prompt(self, prompt: str) -> None:
        self._bridge_mode = "confirm"
        self.query_one(IOPanel).update(f"{prompt} \\[y/n]")

    def show_info_text(self, content: str) -> None:
        self.query_one(EventLog).write(content)

    def resolve_bridge(self, value: object) -> None:
        """Resolve the pending bridge request and clear the IOPanel."""
        self._bridge_mode = None
        self._bridge_options = []
        self.query_one(IOPanel).update("")
        self._bridge_result = value
        self._bridge_event.set()

    def on_key(self, event: Key) -> None:
        """Route keypresses to the pending bridge request. At most nine options: one keypress each."""
        if self._bridge_mode == "confirm":
            if event.character in ("y", "Y"):
                event.stop()
                self.resolve_bridge(True)
            elif event.character in ("n", "N"):
                event.stop()
                self.resolve_bridge(False)
        elif self._bridge_mode == "pick_one":
            if event.character is not None and event.character.isdigit():
                idx = int(event.character) - 1
                if 0 <= idx < len(self._bridge_options):
                    event.stop()
                    self.resolve_bridge(self._bridge_options[idx])


# ── ColorTUIDisplay ───────────────────────────────────────────────────────────

class ColorTUIDisplay(Display):
    """Full-screen display powered by Textual.

    Wire up via BitDuelApp(game=..., display=...) so the app starts the game worker
    thread. pick_one() and confirm() MUST be called from a background thread;
    calling them from the Textual event loop will deadlock.
    """

    def __init__(self, app: BitDuelApp | None = None) -> None:
        self.app = app

    def _require_app(self, method: str) -> BitDuelApp:
        if self.app is None:
            raise RuntimeError(
                f"ColorTUIDisplay.{method}() requires an app; "
                "pass app=BitDuelApp() to the constructor"
            )
        return self.app

    def _call_on_ui(self, fn: callable, /, *args: object) -> None:
        """Call fn(*args) directly on the Textual loop, else via call_from_thread()."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.app.call_from_thread(fn, *args)  # type: ignore[union-attr]
            return
        fn(*args)

    def show_events(self, events: list[Event]) -> None:
        app = self._require_app("show_events")
        self._call_on_ui(app.add_events, events)

    def show_state(self, game: Game) -> None:
        app = self._require_app("show_state")
        self._call_on_ui(app.update_state, game)

    def pick_one(self, options: list, prompt: str = "Your selection: ",
                 formatter: callable = str) -> object:
        """Show a numbered menu and block until resolve_bridge() is called."""
        app = self._require_app("pick_one")
        app._bridge_event.clear()
        self._call_on_ui(app.show_prompt, options, formatter)
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
    from bots import ExpectiminimaxBot  # noqa: PLC0415
    BitDuelApp(game=Game(ai=ExpectiminimaxBot("A.I.")), display=ColorTUIDisplay()).run()
