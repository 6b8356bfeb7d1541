#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# tests/test_state.py — GameState and apply_move() transition rules

import unittest

from bitduel import GOAL, BOARD_COLS, GameState, Side, apply_move, board_layout, board_rows, is_capture


class TestApplyMove(unittest.TestCase):
    """apply_move() adds, clamps at GOAL, and resolves captures."""

    def test_opening_move_no_capture(self):
        """AI moves 8 from (0,0): lands on 8, the player on 0 is untouched."""
        self.assertEqual(apply_move(GameState(0, 0), 8, Side.AI), GameState(player=0, ai=8))

    def test_leaving_shared_tile(self):
        """Player moves 3 off a shared tile 5: positions differ afterwards, no capture."""
        self.assertEqual(apply_move(GameState(5, 5), 3, Side.PLAYER), GameState(player=8, ai=5))

    def test_landing_captures(self):
        """AI moves 2 from 10 onto the player at 12: the player goes back to Start."""
        self.assertEqual(apply_move(GameState(12, 10), 2, Side.AI), GameState(player=0, ai=12))

    def test_player_captures_ai(self):
        self.assertEqual(apply_move(GameState(4, 9), 5, Side.PLAYER), GameState(player=9, ai=0))

    def test_overshoot_clamps(self):
        """39 + 5 clamps to GOAL rather than being disallowed."""
        after = apply_move(GameState(39, 0), 5, Side.PLAYER)
        self.assertEqual(after, GameState(player=GOAL, ai=0))
        self.assertEqual(after.winner(), Side.PLAYER)

    def test_zero_move_never_captures(self):
        """Standing still on a shared tile leaves both tokens in place."""
        for side in (Side.PLAYER, Side.AI):
            for tile in (0, 5, 17):
                with self.subTest(side=side, tile=tile):
                    state = GameState(tile, tile)
                    self.assertEqual(apply_move(state, 0, side), state)

    def test_positions_stay_on_track(self):
        for player in range(GOAL + 1):
            for ai in range(GOAL + 1):
                for distance in range(16):
                    for side in (Side.PLAYER, Side.AI):
                        after = apply_move(GameState(player, ai), distance, side)
                        self.assertTrue(0 <= after.player <= GOAL)
                        self.assertTrue(0 <= after.ai <= GOAL)

    def test_state_is_not_mutated(self):
        state = GameState(3, 4)
        apply_move(state, 6, Side.AI)
        self.assertEqual(state, GameState(3, 4))

    def test_is_capture(self):
        before = GameState(12, 10)
        after = apply_move(before, 2, Side.AI)
        self.assertTrue(is_capture(before, after, Side.AI))
        self.assertFalse(is_capture(GameState(0, 0), GameState(0, 8), Side.AI))


class TestGameState(unittest.TestCase):

    def test_defaults_to_start(self):
        self.assertEqual(GameState(), GameState(player=0, ai=0))

    def test_position(self):
        state = GameState(player=7, ai=11)
        self.assertEqual(state.position(Side.PLAYER), 7)
        self.assertEqual(state.position(Side.AI), 11)

    def test_winner_ai_checked_first(self):
        self.assertEqual(GameState(GOAL, GOAL).winner(), Side.AI)
        self.assertEqual(GameState(0, GOAL).winner(), Side.AI)
        self.assertIsNone(GameState(39, 39).winner())

    def test_swapped(self):
        self.assertEqual(GameState(3, 9).swapped(), GameState(9, 3))

    def test_hashable(self):
        self.assertEqual(len({GameState(1, 2), GameState(1, 2), GameState(2, 1)}), 2)

    def test_opponent(self):
        self.assertIs(Side.AI.opponent, Side.PLAYER)
        self.assertIs(Side.PLAYER.opponent, Side.AI)


class TestBoard(unittest.TestCase):
    """The 40 tiles snake up five rows of eight above Start."""

    def test_every_tile_placed_once(self):
        layout = board_layout()
        self.assertEqual(sorted(layout), list(range(1, GOAL + 1)))
        self.assertEqual(len(set(layout.values())), GOAL)

    def test_rows_alternate_direction(self):
        layout = board_layout()
        self.assertEqual(layout[1], (0, 0))
        self.assertEqual(layout[8], (0, BOARD_COLS - 1))
        self.assertEqual(layout[9], (1, BOARD_COLS - 1))
        self.assertEqual(layout[16], (1, 0))
        self.assertEqual(layout[GOAL], (4, BOARD_COLS - 1))

    def test_board_rows_marks_tokens(self):
        rows = board_rows(GameState(player=9, ai=0))
        self.assertEqual(rows[-1], ["A"])
        self.assertEqual(rows[-3][BOARD_COLS - 1], "P")
        self.assertEqual(rows[0][BOARD_COLS - 1], "40")

    def test_shared_tile(self):
        rows = board_rows(GameState(player=0, ai=0))
        self.assertEqual(rows[-1], ["PA"])


if __name__ == "__main__":
    unittest.main()
