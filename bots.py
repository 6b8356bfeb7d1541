#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# bots.py — Search-driven bot subclasses and AI move selection for bitduel
#
# All classes here subclass Bot (defined in bitduel.py) and depend on the search
# functions in strategy.py. Basic Bot stays in bitduel.py because it has no
# external dependencies; every subclass that diverges from Bot's random cell
# choice lives here instead.

from __future__ import annotations

import random
from dataclasses import replace
from typing import Callable

from bitduel import Bot, GameState, build_move_matrix, matrix_choices
from strategy import (
    DEFAULT_EXPECTIMINIMAX_DEPTH,
    DEFAULT_MINIMAX_DEPTH,
    SearchResult,
    expectiminimax_decision,
    greedy_decision,
    minimax_decision,
)

# policy(matrix, best_move, rng) -> move actually played
Policy = Callable[[list, int, random.Random], int]


def _run_greedy(state, matrix, depth, allow_zero):
    return greedy_decision(state, matrix, allow_zero=allow_zero)


def _run_minimax(state, matrix, depth, allow_zero):
    return minimax_decision(state, matrix, max_depth=depth or DEFAULT_MINIMAX_DEPTH, allow_zero=allow_zero)


def _run_expectiminimax(state, matrix, depth, allow_zero):
    return expectiminimax_decision(state, matrix, depth=depth or DEFAULT_EXPECTIMINIMAX_DEPTH,
                                   allow_zero=allow_zero)


STRATEGIES: dict[str, Callable[..., SearchResult]] = {
    "greedy": _run_greedy,
    "minimax": _run_minimax,
    "expectiminimax": _run_expectiminimax,
}


# ---------------------------------------------------------------------------
# Selection policies
# ---------------------------------------------------------------------------

def optimal_policy(matrix: list, best_move: int, rng) -> int:
    """Always play the searched move."""
    return best_move


def make_softening_policy(p: float = 0.5) -> Policy:
    """Return a policy that plays a uniformly random cell with probability p.

    The random cell is drawn from all nine entries, zeros included, so a softened
    AI can waste a turn the way a careless human might.
    """
    if not 0.0 <= p <= 1.0:
        raise ValueError("Softening probability must be between 0 and 1, got {}".format(p))

    def policy(matrix: list, best_move: int, rng) -> int:
        if rng.random() < p:
            return rng.choice(matrix_choices(matrix))
        return best_move
    policy.__name__ = f"soften(p={p})"
    return policy


# ---------------------------------------------------------------------------
# AI move selector
# ---------------------------------------------------------------------------

def select_ai_move(
    state: GameState,
    dice: tuple[int, int, int],
    strategy: str = "expectiminimax",
    policy: Policy | None = None,
    allow_zero: bool = False,
    depth: int | None = None,
    rng=None,
) -> SearchResult:
    """Build the matrix for dice, search it with strategy, then apply policy.

    The returned move is always a defined distance >= 0. Zero only comes back when
    the matrix has no positive entry or the policy picked a zero cell.
    """
    if strategy not in STRATEGIES:
        raise ValueError("Unknown strategy {!r}; choose from {}".format(strategy, sorted(STRATEGIES)))
    matrix = build_move_matrix(*dice)
    result = STRATEGIES[strategy](state, matrix, depth, allow_zero)
    if policy is None:
        return result
    chosen = policy(matrix, result.move, rng if rng is not None else random)
    if chosen != result.move:
        result = replace(result, move=chosen, softened=True)
    return result


def choose_ai_move(
    state: GameState,
    dice: tuple[int, int, int],
    strategy: str = "expectiminimax",
    policy: Policy | None = None,
    allow_zero: bool = False,
    depth: int | None = None,
    rng=None,
) -> int:
    """Return just the distance the AI plays. See select_ai_move()."""
    return select_ai_move(state, dice, strategy, policy, allow_zero, depth, rng).move


# ---------------------------------------------------------------------------
# Bots
# ---------------------------------------------------------------------------

class SearchBot(Bot):
    """Bot that chooses its move with one of the STRATEGIES.

    A SearchBot can sit in either seat: it always searches from its own point of
    view, so when playing the player side it sees the state swapped.
    """

    strategy = "expectiminimax"

    def __init__(self, name: str = "A.I.", depth: int | None = None, allow_zero: bool = False,
                 policy: Policy | None = None, rng=None) -> None:
        super().__init__(name=name)
        self.depth = depth
        self.allow_zero = allow_zero
        self.policy = policy
        self.rng = rng

    def chooseMove(self, state: GameState, dice: tuple, matrix: list) -> int:
        self.last_search = select_ai_move(
            self.own_view(state), dice, self.strategy, self.policy,
            self.allow_zero, self.depth, self.rng,
        )
        return self.last_search.move


class GreedyBot(SearchBot):
    """Always takes the longest move on offer."""
    strategy = "greedy"


class MinimaxBot(SearchBot):
    """Iterative-deepening minimax, assuming the current dice repeat every ply."""
    strategy = "minimax"


class ExpectiminimaxBot(SearchBot):
    """Maximises expected score over every roll the opponent could make."""
    strategy = "expectiminimax"


_BOT_CLASSES: dict[str, type[SearchBot]] = {
    "greedy": GreedyBot,
    "minimax": MinimaxBot,
    "expectiminimax": ExpectiminimaxBot,
}


def make_bot(strategy: str, name: str = "A.I.", **kwargs) -> SearchBot:
    """Construct the bot class registered for strategy."""
    if strategy not in _BOT_CLASSES:
        raise ValueError("Unknown strategy {!r}; choose from {}".format(strategy, sorted(_BOT_CLASSES)))
    return _BOT_CLASSES[strategy](name=name, **kwargs)
