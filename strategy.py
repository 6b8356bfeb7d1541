#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# strategy.py — Evaluation and game-tree search for bitduel
# Pure functions only: no side effects, no I/O. Returns scores and moves; callers decide how to act.
#
# All scores are from the AI's point of view: positive favours the AI.

from __future__ import annotations

import functools
import itertools
from collections import Counter
from dataclasses import dataclass, field

from bitduel import DIE_FACES, GOAL, GameState, Side, apply_move, build_move_matrix

# ---------------------------------------------------------------------------
# Scoring constants
# ---------------------------------------------------------------------------

WIN_SCORE: int = 10000
CAPTURE_BONUS: int = 500
ROLL_COUNT: int = DIE_FACES ** 3      # 512 equally likely dice triples

DEFAULT_MINIMAX_DEPTH: int = 3
DEFAULT_EXPECTIMINIMAX_DEPTH: int = 1


@dataclass
class SearchStats:
    """Node-count instrumentation. Never affects which move is chosen."""
    nodes: int = 0
    cache_hits: int = 0
    nodes_by_depth: dict[int, int] = field(default_factory=dict)


@dataclass
class SearchResult:
    """Outcome of one AI decision.

    candidates maps each root move to its backed-up value, in the order searched.
    softened is set when a selection policy replaced the searched move.
    """
    move: int
    value: float
    strategy: str
    stats: SearchStats = field(default_factory=SearchStats)
    candidates: dict[int, float] = field(default_factory=dict)
    softened: bool = False


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def evaluate(state: GameState) -> int:
    """Score a state for the AI.

    AI at GOAL is checked before player at GOAL. Otherwise the score is the AI's lead
    in tiles, plus CAPTURE_BONUS while the player sits on Start and the AI does not.
    """
    if state.ai >= GOAL:
        return WIN_SCORE
    if state.player >= GOAL:
        return -WIN_SCORE
    score = state.ai - state.player
    if state.player == 0 and state.ai != 0:
        score += CAPTURE_BONUS
    return score


# ---------------------------------------------------------------------------
# Move generation and chance tables
# ---------------------------------------------------------------------------

def candidate_moves(matrix: list[list[int]], allow_zero: bool = False) -> list[int]:
    """Return the distinct move distances a matrix offers, largest first.

    With allow_zero=False, zero entries are pruned. If nothing is left the side
    stands still: [0] is returned so the unchanged state still counts as an outcome.
    Duplicate entries lead to identical successors, so each distance appears once.
    """
    values = {v for row in matrix for v in row if allow_zero or v > 0}
    return sorted(values, reverse=True) or [0]


@functools.lru_cache(maxsize=None)
def roll_outcomes(allow_zero: bool = False) -> tuple[tuple[tuple[int, ...], int], ...]:
    """Group all 512 dice triples by the candidate moves they offer.

    Returns ((moves, weight), ...) with weights summing to ROLL_COUNT. A chance node
    only needs each distinct move set once, weighted by how many triples produce it.
    """
    counts: Counter = Counter()
    for dice in itertools.product(range(1, DIE_FACES + 1), repeat=3):
        counts[tuple(candidate_moves(build_move_matrix(*dice), allow_zero))] += 1
    return tuple(sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])))


def _best_move(candidates: dict[int, float]) -> int:
    """Highest-valued move; ties go to the first one searched."""
    return max(candidates, key=candidates.get)


# ---------------------------------------------------------------------------
# Minimax
# ---------------------------------------------------------------------------

def minimax(
    state: GameState,
    matrix: list[list[int]],
    depth: int,
    maximizing: bool,
    allow_zero: bool = False,
    stats: SearchStats | None = None,
) -> float:
    """Deterministic lookahead value of state with depth plies left.

    maximizing=True means the AI moves next. Every ply reuses the same matrix rather
    than re-rolling: the lookahead assumes the current dice repeat.
    """
    if depth <= 0 or state.is_terminal():
        return evaluate(state)
    side = Side.AI if maximizing else Side.PLAYER
    values = []
    for distance in candidate_moves(matrix, allow_zero):
        child = apply_move(state, distance, side)
        if stats is not None:
            stats.nodes += 1
        values.append(minimax(child, matrix, depth - 1, not maximizing, allow_zero, stats))
    return max(values) if maximizing else min(values)


def minimax_decision(
    state: GameState,
    matrix: list[list[int]],
    max_depth: int = DEFAULT_MINIMAX_DEPTH,
    allow_zero: bool = False,
) -> SearchResult:
    """Choose the AI move by iterative-deepening minimax, depths 1..max_depth.

    Shallower passes only feed stats.nodes_by_depth; the deepest pass picks the move.
    """
    if max_depth < 1:
        raise ValueError("max_depth must be at least 1, got {}".format(max_depth))
    stats = SearchStats()
    candidates: dict[int, float] = {}
    for depth in range(1, max_depth + 1):
        before = stats.nodes
        candidates = {}
        for distance in candidate_moves(matrix, allow_zero):
            child = apply_move(state, distance, Side.AI)
            stats.nodes += 1
            candidates[distance] = minimax(child, matrix, depth - 1, False, allow_zero, stats)
        stats.nodes_by_depth[depth] = stats.nodes - before
    move = _best_move(candidates)
    return SearchResult(move=move, value=candidates[move], strategy="minimax",
                        stats=stats, candidates=candidates)


# ---------------------------------------------------------------------------
# Expectiminimax
# ---------------------------------------------------------------------------

def _chance_value(
    state: GameState,
    side: Side,
    depth: int,
    allow_zero: bool,
    stats: SearchStats,
    memo: dict,
) -> float:
    """Expected value when side is about to roll, with depth chance plies left.

    For each dice outcome side picks its best reply (MAX for the AI, MIN for the
    player), then play passes to the opponent's roll. Values are memoised per
    (state, side, depth) for the length of one search.
    """
    if depth <= 0 or state.is_terminal():
        return evaluate(state)
    key = (state, side, depth)
    if key in memo:
        stats.cache_hits += 1
        return memo[key]
    pick = max if side is Side.AI else min
    total = 0.0
    for moves, weight in roll_outcomes(allow_zero):
        values = []
        for distance in moves:
            child = apply_move(state, distance, side)
            stats.nodes += 1
            values.append(_chance_value(child, side.opponent, depth - 1, allow_zero, stats, memo))
        total += weight * pick(values)
    memo[key] = total / ROLL_COUNT
    return memo[key]


def expected_value(
    state: GameState,
    distance: int,
    depth: int = DEFAULT_EXPECTIMINIMAX_DEPTH,
    allow_zero: bool = False,
    stats: SearchStats | None = None,
) -> float:
    """Expected score after the AI moves distance and the player rolls and replies."""
    stats = stats if stats is not None else SearchStats()
    child = apply_move(state, distance, Side.AI)
    return _chance_value(child, Side.PLAYER, depth, allow_zero, stats, {})


def expectiminimax_decision(
    state: GameState,
    matrix: list[list[int]],
    depth: int = DEFAULT_EXPECTIMINIMAX_DEPTH,
    allow_zero: bool = False,
) -> SearchResult:
    """Choose the AI move that maximises expected score over the opponent's dice.

    depth counts chance plies below the root: depth=1 averages the player's best reply
    over all 512 rolls; depth=2 also averages the AI's reply to that, and so on.
    """
    if depth < 1:
        raise ValueError("depth must be at least 1, got {}".format(depth))
    stats = SearchStats()
    memo: dict = {}
    candidates: dict[int, float] = {}
    for distance in candidate_moves(matrix, allow_zero):
        child = apply_move(state, distance, Side.AI)
        stats.nodes += 1
        candidates[distance] = _chance_value(child, Side.PLAYER, depth, allow_zero, stats, memo)
    stats.nodes_by_depth[depth] = stats.nodes
    move = _best_move(candidates)
    return SearchResult(move=move, value=candidates[move], strategy="expectiminimax",
                        stats=stats, candidates=candidates)


# ---------------------------------------------------------------------------
# Greedy
# ---------------------------------------------------------------------------

def greedy_decision(
    state: GameState,
    matrix: list[list[int]],
    allow_zero: bool = False,
) -> SearchResult:
    """Take the longest move on offer, ignoring the opponent entirely.

    Each candidate is still scored with evaluate(), but only for SearchResult.value
    and the search telemetry: the scores never change which move is picked.
    """
    stats = SearchStats()
    candidates: dict[int, float] = {}
    for distance in candidate_moves(matrix, allow_zero):
        stats.nodes += 1
        candidates[distance] = evaluate(apply_move(state, distance, Side.AI))
    stats.nodes_by_depth[1] = stats.nodes
    move = max(candidates)
    return SearchResult(move=move, value=candidates[move], strategy="greedy",
                        stats=stats, candidates=candidates)
