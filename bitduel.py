#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# bitduel.py - Main game file: track, dice grid, players, displays, game loop

from __future__ import annotations

import argparse
import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

import utility

GOAL = 40                   # Last tile; tiles run 0 (Start) .. 40
DIE_FACES = 8               # Three eight-sided dice per turn
BOARD_ROWS = 5
BOARD_COLS = 8
AI_REVEAL_DELAY = 5.0       # Seconds between showing the AI's dice and its move

# Row r of the move matrix pairs dice ROW_PAIRS[r]; column c combines them with COLUMN_OPS[c]
ROW_PAIRS = ((0, 1), (0, 2), (1, 2))
COLUMN_OPS = ("AND", "OR", "XOR")


class Side(Enum):
    PLAYER = "player"
    AI = "ai"

    @property
    def opponent(self) -> Side:
        return Side.AI if self is Side.PLAYER else Side.PLAYER


# ==== Grid generator ====

def build_move_matrix(d0: int, d1: int, d2: int) -> list[list[int]]:
    """Return the 3x3 move matrix for one roll.

    Rows pair (d0,d1), (d0,d2), (d1,d2); columns are AND, OR, XOR of the pair.
    """
    dice = (d0, d1, d2)
    matrix = []
    for i, j in ROW_PAIRS:
        a, b = dice[i], dice[j]
        matrix.append([a & b, a | b, a ^ b])
    return matrix


def choice_to_cell(choice: int) -> tuple[int, int]:
    """Map a 1-based choice (1-9) to (row, col). Choices run down each column first."""
    if not isinstance(choice, int) or choice < 1 or choice > 9:
        raise ValueError("Choice must be an integer from 1 to 9, got {!r}".format(choice))
    return (choice - 1) % 3, (choice - 1) // 3


def cell_to_choice(row: int, col: int) -> int:
    return col * 3 + row + 1


def matrix_choices(matrix: list[list[int]]) -> list[int]:
    """The nine matrix entries in choice order: index k-1 holds choice k."""
    return [matrix[row][col] for row, col in (choice_to_cell(k) for k in range(1, 10))]


def cell_label(dice: tuple[int, int, int], row: int, col: int) -> str:
    """Human-readable cell description, e.g. 'OR(3,5)'."""
    i, j = ROW_PAIRS[row]
    return "{}({},{})".format(COLUMN_OPS[col], dice[i], dice[j])


def roll_dice(rng=random) -> tuple[int, int, int]:
    return (rng.randint(1, DIE_FACES), rng.randint(1, DIE_FACES), rng.randint(1, DIE_FACES))


# ==== State transition ====

@dataclass(frozen=True)
class GameState:
    """Both track positions. Immutable: moves produce a new GameState."""
    player: int = 0
    ai: int = 0

    def position(self, side: Side) -> int:
        return self.ai if side is Side.AI else self.player

    def winner(self) -> Side | None:
        # AI checked first; the game loop stops on the mover's own win so both are never set at once
        if self.ai >= GOAL:
            return Side.AI
        if self.player >= GOAL:
            return Side.PLAYER
        return None

    def is_terminal(self) -> bool:
        return self.winner() is not None

    def swapped(self) -> GameState:
        """Same board seen from the other seat (player and AI exchanged)."""
        return GameState(player=self.ai, ai=self.player)


def apply_move(state: GameState, distance: int, side: Side) -> GameState:
    """Move one side by distance, clamp at GOAL, and resolve a landing capture.

    A zero-distance move never captures.
    """
    mover = min(state.position(side) + distance, GOAL)
    other = state.position(side.opponent)
    if distance > 0 and mover == other:
        other = 0
    if side is Side.AI:
        return GameState(player=other, ai=mover)
    return GameState(player=mover, ai=other)


def is_capture(before: GameState, after: GameState, side: Side) -> bool:
    """True when side's move sent the opponent back to Start."""
    return before.position(side.opponent) != 0 and after.position(side.opponent) == 0


def board_layout() -> dict[int, tuple[int, int]]:
    """Map tiles 1..GOAL to (row, col) on the snaking board; row 0 is the bottom row.

    Odd rows run right-to-left. Start (tile 0) sits below row 0 and is not in the map.
    """
    layout = {}
    tile = 1
    for row in range(BOARD_ROWS):
        cols = range(BOARD_COLS) if row % 2 == 0 else reversed(range(BOARD_COLS))
        for col in cols:
            if tile > GOAL:
                break
            layout[tile] = (row, col)
            tile += 1
    return layout


def board_rows(state: GameState) -> list[list[str]]:
    """Board cells as text, top row first, with a final single-cell Start row.

    Occupied tiles show P (player), A (AI) or PA; empty tiles show their number.
    """
    def mark(tile: int, empty: str) -> str:
        here = ""
        if state.player == tile:
            here += "P"
        if state.ai == tile:
            here += "A"
        return here or empty

    grid = [["" for _ in range(BOARD_COLS)] for _ in range(BOARD_ROWS)]
    for tile, (row, col) in board_layout().items():
        grid[row][col] = mark(tile, "{:02d}".format(tile))
    rows = list(reversed(grid))
    rows.append([mark(0, "Start")])
    return rows


# ==== Events and displays ====

@dataclass
class Event:
    """One thing that happened during a turn. Displays decide how to show it."""
    type: str
    player: str = ""
    value: int = 0
    target: str = ""
    message: str = ""
    dice: tuple = ()
    data: dict = field(default_factory=dict)


def event_text(event: Event) -> str | None:
    """Convert an Event to a log line, or None if the event is silent."""
    t = event.type
    if t == "turn_start":
        return "--- {}'s turn ---".format(event.player)
    if t == "roll":
        return "{} rolled {}.".format(event.player, ", ".join(str(d) for d in event.dice))
    if t == "search":
        by_depth = event.data.get("nodes_by_depth", {})
        depths = " ".join("d{}={}".format(d, n) for d, n in sorted(by_depth.items()))
        text = "{} searched {} nodes ({}) with {}".format(
            event.player, event.data.get("nodes", 0), depths or "-", event.message)
        if event.data.get("cache_hits"):
            text += ", {} memo hits".format(event.data["cache_hits"])
        if event.data.get("softened"):
            text += ", softened"
        return text + "."
    if t == "move":
        return "{} moves {} to tile {}.".format(event.player, event.value, event.data.get("position"))
    if t == "stay":
        return "{} has no move and stays on tile {}.".format(event.player, event.data.get("position"))
    if t == "capture":
        return "{} lands on {} and sends them back to Start!".format(event.player, event.target)
    if t == "win":
        return "{} wins!".format(event.player)
    return None


class Display(ABC):
    """Everything the game loop needs from a front end."""

    @abstractmethod
    def show_events(self, events: list[Event]) -> None: ...

    @abstractmethod
    def show_state(self, game: Game) -> None: ...

    @abstractmethod
    def pick_one(self, options: list, prompt: str = "Your selection: ", formatter=str): ...

    @abstractmethod
    def confirm(self, prompt: str) -> bool: ...

    @abstractmethod
    def show_info(self, content: str) -> None: ...


class NullDisplay(Display):
    """Silent display: shows nothing and always takes the first option."""

    def show_events(self, events):
        pass

    def show_state(self, game):
        pass

    def pick_one(self, options, prompt="Your selection: ", formatter=str):
        return options[0]

    def confirm(self, prompt):
        return False

    def show_info(self, content):
        pass


class RecordingDisplay(NullDisplay):
    """NullDisplay that keeps every event it is shown."""

    def __init__(self):
        self.events: list[Event] = []

    def show_events(self, events):
        self.events.extend(events)


class TerminalDisplay(Display):
    """Plain print()/input() front end."""

    def show_events(self, events):
        for event in events:
            text = event_text(event)
            if text is not None:
                print(text)

    def show_state(self, game):
        for row in board_rows(game.state):
            print(" ".join("{:>5}".format(cell) for cell in row))
        print("{}: tile {}   {}: tile {}".format(
            game.player.name, game.state.player, game.ai.name, game.state.ai))
        if game.matrix is not None:
            print("        " + "".join("{:>12}".format(op) for op in COLUMN_OPS))
            for row in range(3):
                i, j = ROW_PAIRS[row]
                cells = "".join(
                    "{:>12}".format("[{}] {}".format(cell_to_choice(row, col), game.matrix[row][col]))
                    for col in range(3))
                print("({},{})   {}".format(game.dice[i], game.dice[j], cells))

    def pick_one(self, options, prompt="Your selection: ", formatter=str):
        return utility.userChoice(options, formatter=formatter, prompt=prompt)

    def confirm(self, prompt):
        while True:
            answer = input("{} [y/n] ".format(prompt)).strip().lower()
            if answer.startswith("y"):
                return True
            if answer.startswith("n"):
                return False

    def show_info(self, content):
        print(content)


# ==== Players ====

class Player(object):
    def __init__(self, name="Player"):
        self.name = name
        self.side = Side.PLAYER
        self.display: Display = NullDisplay()
        self.rng = None
        self.last_search = None    # Bots leave their SearchResult here for telemetry

    def own_view(self, state: GameState) -> GameState:
        """The state as seen from this player's seat, with itself in the AI slot."""
        return state if self.side is Side.AI else state.swapped()

    def chooseMove(self, state: GameState, dice: tuple, matrix: list[list[int]]) -> int:
        raise NotImplementedError


class Human(Player):
    def chooseMove(self, state, dice, matrix):
        def describe(choice):
            row, col = choice_to_cell(choice)
            return "{} = {}".format(cell_label(dice, row, col), matrix[row][col])
        choice = self.display.pick_one(list(range(1, 10)), prompt="Move which cell? ", formatter=describe)
        row, col = choice_to_cell(choice)
        return matrix[row][col]


class Bot(Player):
    """Picks any of the nine cells at random. Searching bots live in bots.py."""

    def __init__(self, name="Bot"):
        super().__init__(name=name)

    def chooseMove(self, state, dice, matrix):
        rng = self.rng if self.rng is not None else random
        return rng.choice(matrix_choices(matrix))


# ==== Game loop ====

class Game(object):
    """One race between a player (moves first) and an AI."""

    def __init__(self, player: Player | None = None, ai: Player | None = None,
                 rng: random.Random | None = None, seed: int | None = None,
                 ai_delay: float = 0.0):
        self.rng = rng if rng is not None else random.Random(seed)
        self.player = player if player is not None else Human("Player")
        self.ai = ai if ai is not None else Bot("A.I.")
        self.player.side = Side.PLAYER
        self.ai.side = Side.AI
        self.players = [self.player, self.ai]
        for person in self.players:
            if person.rng is None:
                person.rng = self.rng
        self.ai_delay = ai_delay
        self.state = GameState()
        self.current = 0
        self.turn_number = 0
        self.dice: tuple | None = None
        self.matrix: list[list[int]] | None = None
        self.winner: Player | None = None
        self.display: Display = NullDisplay()

    def attach(self, display: Display) -> None:
        self.display = display
        for person in self.players:
            person.display = display

    def get_current_player(self) -> Player:
        return self.players[self.current]

    def get_current_side(self) -> Side:
        return self.get_current_player().side

    def _emit(self, events: list[Event], event: Event) -> None:
        events.append(event)
        self.display.show_events([event])

    def next_turn(self) -> list[Event]:
        """Play one side's turn: roll, build the matrix, choose, move. Returns the turn's events."""
        events: list[Event] = []
        if self.winner is not None:
            return events
        mover = self.get_current_player()
        other = self.players[1 - self.current]
        self._emit(events, Event(type="turn_start", player=mover.name))

        self.dice = roll_dice(self.rng)
        self.matrix = build_move_matrix(*self.dice)
        self._emit(events, Event(type="roll", player=mover.name, dice=self.dice))
        if mover.side is Side.AI and isinstance(mover, Bot) and self.ai_delay > 0:
            self.display.show_state(self)
            time.sleep(self.ai_delay)

        mover.last_search = None
        distance = mover.chooseMove(self.state, self.dice, self.matrix)
        result = mover.last_search
        if result is not None:
            self._emit(events, Event(
                type="search", player=mover.name, value=distance, message=result.strategy,
                data={
                    "nodes": result.stats.nodes,
                    "nodes_by_depth": dict(result.stats.nodes_by_depth),
                    "cache_hits": result.stats.cache_hits,
                    "value": result.value,
                    "softened": result.softened,
                }))

        before = self.state
        self.state = apply_move(before, distance, mover.side)
        position = self.state.position(mover.side)
        if distance > 0:
            self._emit(events, Event(type="move", player=mover.name, value=distance,
                                     data={"position": position}))
        else:
            self._emit(events, Event(type="stay", player=mover.name, data={"position": position}))
        if is_capture(before, self.state, mover.side):
            self._emit(events, Event(type="capture", player=mover.name, target=other.name))

        self.turn_number += 1
        if self.state.winner() is mover.side:
            self.winner = mover
            self._emit(events, Event(type="win", player=mover.name))
        else:
            self.current = 1 - self.current
        return events

    def run(self, display: Display | None = None) -> Player:
        """Play turns until someone reaches GOAL; return the winner."""
        self.attach(display if display is not None else NullDisplay())
        self.display.show_state(self)
        while self.winner is None:
            self.next_turn()
            self.display.show_state(self)
        return self.winner


def main():
    from bots import STRATEGIES, make_bot, make_softening_policy  # noqa: PLC0415

    parser = argparse.ArgumentParser(description='Bitwise Dice Duel: race an AI to tile {}'.format(GOAL))
    parser.add_argument('-s', '--strategy', choices=sorted(STRATEGIES), default='expectiminimax',
                        help='AI search strategy (default: expectiminimax)')
    parser.add_argument('-d', '--depth', type=int, default=None,
                        help='search depth (default: 3 for minimax, 1 for expectiminimax)')
    parser.add_argument('--soften', type=float, default=0.0, metavar='P',
                        help='probability the AI plays a random cell instead of its best move')
    parser.add_argument('--allow-zero', action='store_true',
                        help='let the AI consider zero-distance cells')
    parser.add_argument('--seed', type=int, default=None, help='seed for dice and AI randomness')
    parser.add_argument('--delay', type=float, default=AI_REVEAL_DELAY,
                        help='seconds to pause before revealing the AI move (default: %(default)s)')
    parser.add_argument('--bots', action='store_true', help='watch two AIs play each other')
    parser.add_argument('--tui', action='store_true', help='full-screen Textual interface')
    args = parser.parse_args()

    policy = make_softening_policy(args.soften) if args.soften > 0 else None
    ai = make_bot(args.strategy, name="A.I.", depth=args.depth, allow_zero=args.allow_zero, policy=policy)
    if args.bots:
        player = make_bot(args.strategy, name="Player", depth=args.depth, allow_zero=args.allow_zero)
    else:
        player = Human("Player")
    game = Game(player=player, ai=ai, seed=args.seed, ai_delay=args.delay)

    if args.tui:
        from color_tui import BitDuelApp, ColorTUIDisplay  # noqa: PLC0415
        BitDuelApp(game=game, display=ColorTUIDisplay()).run()
    else:
        game.run(display=TerminalDisplay())


if __name__ == "__main__":
    main()
