#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# tournament.py — Round-robin tournament harness for AI strategy evaluation
#
# Every entry plays every other entry a fixed number of games, swapping seats
# each game so both sides get to move first. Ratings use Glicko-1 with one
# rating period per pairing. Per-game records can be exported to JSONL.
#
# Usage:
#   python tournament.py                      # 10 games per pairing, default field
#   python tournament.py --games 40           # 40 games per pairing
#   python tournament.py --records out.jsonl  # also export per-game JSONL records

from __future__ import annotations

import argparse
import itertools
import json
import math
import random
from dataclasses import dataclass, field
from typing import Callable

from bitduel import Bot, Game, Player, RecordingDisplay
from bots import GreedyBot, MinimaxBot, ExpectiminimaxBot, make_softening_policy


_GLICKO_Q: float = math.log(10.0) / 400.0
_GLICKO_RD_INIT: float = 350.0
_GLICKO_RD_MIN: float = 50.0


def _glicko_g(rd: float) -> float:
    """Glicko g-function: discounts an opponent by their rating uncertainty."""
    return 1.0 / math.sqrt(1.0 + 3.0 * _GLICKO_Q**2 * rd**2 / math.pi**2)


def _glicko_e(r: float, r_j: float, rd_j: float) -> float:
    """Expected score for rating r against an opponent rated r_j with deviation rd_j."""
    return 1.0 / (1.0 + 10.0 ** (-_glicko_g(rd_j) * (r - r_j) / 400.0))


def _glicko_update(
    r: float, rd: float, results: list[tuple[float, float, float]]
) -> tuple[float, float]:
    """One Glicko-1 rating period.

    results: (r_j, rd_j, s_j) per game, s_j = 1.0 for a win and 0.0 for a loss.
    Returns (new_rating, new_rd).
    """
    if not results:
        return r, rd
    d_sq_inv = _GLICKO_Q**2 * sum(
        _glicko_g(rd_j)**2 * _glicko_e(r, r_j, rd_j) * (1.0 - _glicko_e(r, r_j, rd_j))
        for r_j, rd_j, _ in results
    )
    d_sq = 1.0 / d_sq_inv if d_sq_inv > 0.0 else float("inf")
    new_rd_sq = 1.0 / (1.0 / rd**2 + 1.0 / d_sq)
    surprise = sum(_glicko_g(rd_j) * (s_j - _glicko_e(r, r_j, rd_j)) for r_j, rd_j, s_j in results)
    return r + _GLICKO_Q * new_rd_sq * surprise, max(_GLICKO_RD_MIN, math.sqrt(new_rd_sq))


@dataclass
class Entrant:
    """One strategy in the tournament, with its running rating and record."""
    label: str
    player_factory: Callable[[str], Player]
    rating: float = field(default=1500.0)
    rd: float = field(default=_GLICKO_RD_INIT)
    wins: int = 0
    losses: int = 0
    nodes: int = 0


@dataclass
class MatchResult:
    """Result of one pairing: all games between two entrants."""
    first: str
    second: str
    wins: dict[str, int]
    turns: list[int]


def play_game(first: Entrant, second: Entrant, seed: int | None = None) -> tuple[Game, RecordingDisplay]:
    """Play one game with first in the player seat (moves first) and second as the AI."""
    game = Game(player=first.player_factory(first.label),
                ai=second.player_factory(second.label),
                rng=random.Random(seed))
    recorder = RecordingDisplay()
    game.run(display=recorder)
    return game, recorder


def _search_nodes(events: list, label: str) -> int:
    return sum(e.data.get("nodes", 0) for e in events if e.type == "search" and e.player == label)


def _write_game_record(records_path: str, game: Game, events: list, seed: int | None) -> None:
    """Append one compact JSONL line describing a finished game."""
    record = {
        "seed": seed,
        "turns": game.turn_number,
        "winner": game.winner.name if game.winner else None,
        "final": {"player": game.state.player, "ai": game.state.ai},
        "captures": sum(1 for e in events if e.type == "capture"),
        "seats": [
            {
                "label": p.name,
                "side": p.side.value,
                "bot_type": type(p).__name__,
                "nodes": _search_nodes(events, p.name),
            }
            for p in game.players
        ],
    }
    with open(records_path, "a", encoding="utf-8") as f:
        f.write(json.dumps(record, separators=(",", ":")) + "\n")


def run_match(
    a: Entrant,
    b: Entrant,
    n_games: int,
    rng: random.Random,
    records_path: str | None = None,
) -> MatchResult:
    """Play n_games between a and b, alternating seats; update ratings and records in place."""
    wins = {a.label: 0, b.label: 0}
    turns = []
    for i in range(n_games):
        first, second = (a, b) if i % 2 == 0 else (b, a)
        seed = rng.randrange(2**31)
        game, recorder = play_game(first, second, seed)
        wins[game.winner.name] += 1
        turns.append(game.turn_number)
        for entrant in (a, b):
            entrant.nodes += _search_nodes(recorder.events, entrant.label)
        if records_path is not None:
            _write_game_record(records_path, game, recorder.events, seed)

    # Both updates use the pre-match ratings
    results_a = [(b.rating, b.rd, 1.0)] * wins[a.label] + [(b.rating, b.rd, 0.0)] * wins[b.label]
    results_b = [(a.rating, a.rd, 1.0)] * wins[b.label] + [(a.rating, a.rd, 0.0)] * wins[a.label]
    a.rating, a.rd = _glicko_update(a.rating, a.rd, results_a)
    b.rating, b.rd = _glicko_update(b.rating, b.rd, results_b)
    a.wins += wins[a.label]
    a.losses += wins[b.label]
    b.wins += wins[b.label]
    b.losses += wins[a.label]
    return MatchResult(first=a.label, second=b.label, wins=wins, turns=turns)


def print_standings(entrants: list[Entrant]) -> None:
    """Print standings sorted by Glicko rating descending."""
    print(f"\n  {'Rank':>4}  {'Entrant':<16}  {'Rating ± RD':>16}  {'W-L':>9}  {'Nodes/game':>10}")
    print(f"  {'----':>4}  {'-' * 16}  {'-' * 16:>16}  {'-' * 9:>9}  {'-' * 10:>10}")
    for rank, e in enumerate(sorted(entrants, key=lambda e: -e.rating), 1):
        played = e.wins + e.losses
        per_game = e.nodes / played if played else 0.0
        rating_str = f"{e.rating:.0f} ± {e.rd:.0f}"
        print(f"  {rank:>4}  {e.label:<16}  {rating_str:>16}  {f'{e.wins}-{e.losses}':>9}  {per_game:>10.0f}")
    print()


def run_round_robin(
    entrants: list[Entrant],
    n_games: int = 10,
    seed: int | None = None,
    verbose: bool = True,
    records_path: str | None = None,
) -> list[Entrant]:
    """Play every pairing once (n_games each); return entrants sorted by final rating."""
    rng = random.Random(seed)
    for a, b in itertools.combinations(entrants, 2):
        result = run_match(a, b, n_games, rng, records_path)
        if verbose:
            mean_turns = sum(result.turns) / len(result.turns) if result.turns else 0.0
            print(f"  {a.label} {result.wins[a.label]} - {result.wins[b.label]} {b.label}"
                  f"   (avg {mean_turns:.1f} turns)")
    if verbose:
        print_standings(entrants)
    return sorted(entrants, key=lambda e: -e.rating)


def make_search_bot(bot_class, **kwargs) -> Callable[[str], Player]:
    """Return a factory that builds bot_class with fixed keyword arguments."""
    def factory(name: str) -> Player:
        return bot_class(name=name, **kwargs)
    factory.__name__ = f"{bot_class.__name__}({', '.join(f'{k}={v}' for k, v in kwargs.items())})"
    return factory


def _default_field() -> list[Entrant]:
    """Six entrants spanning every strategy.

      Random      : basic Bot, any of the nine cells
      Greedy      : longest move
      Minimax     : depth-3 iterative deepening
      Expecti     : depth-1 expectiminimax
      ExpectiZero : depth-1 expectiminimax that also weighs zero moves
      Softened    : depth-1 expectiminimax, random cell half the time
    """
    return [
        Entrant(label="Random",      player_factory=Bot),
        Entrant(label="Greedy",      player_factory=GreedyBot),
        Entrant(label="Minimax",     player_factory=make_search_bot(MinimaxBot, depth=3)),
        Entrant(label="Expecti",     player_factory=make_search_bot(ExpectiminimaxBot, depth=1)),
        Entrant(label="ExpectiZero", player_factory=make_search_bot(ExpectiminimaxBot, allow_zero=True)),
        Entrant(label="Softened",    player_factory=make_search_bot(ExpectiminimaxBot,
                                                                    policy=make_softening_policy(0.5))),
    ]


def main() -> None:
    parser = argparse.ArgumentParser(description="Round-robin AI strategy tournament")
    parser.add_argument("--games", type=int, default=10, metavar="N",
                        help="games per pairing (default: 10)")
    parser.add_argument("--seed", type=int, default=None, help="seed for reproducible runs")
    parser.add_argument("--records", metavar="FILE", default=None,
                        help="append per-game JSONL records to FILE")
    args = parser.parse_args()
    run_round_robin(_default_field(), n_games=args.games, seed=args.seed, records_path=args.records)


if __name__ == "__main__":
    main()
