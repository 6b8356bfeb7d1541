#!/usr/bin/python3
# -*- coding: UTF-8 -*-
# tests/test_game_flow.py — Game loop integration tests

import unittest
from unittest.mock import patch

from bitduel import GOAL, Bot, Event, Game, GameState, Human, NullDisplay, RecordingDisplay, Side, event_text
from bots import ExpectiminimaxBot, GreedyBot, MinimaxBot


class TestGameSetup(unittest.TestCase):

    def test_defaults(self):
        game = Game(seed=1)
        self.assertIsInstance(game.player, Human)
        self.assertIsInstance(game.ai, Bot)
        self.assertIs(game.player.side, Side.PLAYER)
        self.assertIs(game.ai.side, Side.AI)
        self.assertEqual(game.state, GameState(0, 0))
        self.assertIs(game.get_current_player(), game.player)

    def test_bots_share_game_rng(self):
        game = Game(player=GreedyBot("P"), ai=GreedyBot("A"), seed=3)
        self.assertIs(game.player.rng, game.rng)
        self.assertIs(game.ai.rng, game.rng)

    def test_attach_sets_player_displays(self):
        game = Game(seed=1)
        display = RecordingDisplay()
        game.attach(display)
        self.assertIs(game.display, display)
        self.assertIs(game.player.display, display)


class TestNextTurn(unittest.TestCase):
    """next_turn() plays one side's roll, choice and move."""

    def setUp(self):
        self.game = Game(player=Human("Hugo"), ai=GreedyBot("Greta"), seed=11)

    def test_human_turn_with_null_display_takes_choice_one(self):
        """NullDisplay picks the first option: choice 1 is AND(d0,d1) = 3&5 = 1."""
        with patch.object(self.game.rng, 'randint', side_effect=[3, 5, 6]):
            events = self.game.next_turn()
        self.assertEqual(self.game.state, GameState(player=1, ai=0))
        self.assertEqual([e.type for e in events], ["turn_start", "roll", "move"])
        self.assertEqual(events[1].dice, (3, 5, 6))
        self.assertIs(self.game.get_current_player(), self.game.ai)
        self.assertEqual(self.game.turn_number, 1)

    def test_ai_turn_emits_search_telemetry(self):
        with patch.object(self.game.rng, 'randint', side_effect=[3, 5, 6, 8, 8, 8]):
            self.game.next_turn()
            events = self.game.next_turn()
        search = [e for e in events if e.type == "search"]
        self.assertEqual(len(search), 1)
        self.assertEqual(search[0].message, "greedy")
        self.assertEqual(search[0].value, 8)
        self.assertIn("nodes", search[0].data)
        self.assertEqual(self.game.state, GameState(player=1, ai=8))

    def test_capture_event(self):
        self.game.state = GameState(player=12, ai=10)
        self.game.current = 1
        # 2,2,2 offers only a 2 (AND=2, OR=2, XOR=0)
        with patch.object(self.game.rng, 'randint', side_effect=[2, 2, 2]):
            events = self.game.next_turn()
        self.assertEqual(self.game.state, GameState(player=0, ai=12))
        captures = [e for e in events if e.type == "capture"]
        self.assertEqual(len(captures), 1)
        self.assertEqual(captures[0].target, "Hugo")

    def test_win_ends_game(self):
        self.game.state = GameState(player=0, ai=35)
        self.game.current = 1
        with patch.object(self.game.rng, 'randint', side_effect=[8, 8, 8]):
            events = self.game.next_turn()
        self.assertIs(self.game.winner, self.game.ai)
        self.assertEqual(self.game.state.ai, GOAL)
        self.assertEqual(events[-1].type, "win")
        self.assertEqual(self.game.next_turn(), [], "no turns after the game is won")

    def test_stay_event_for_zero_move(self):
        """The human may pick a zero cell: the turn still passes."""
        with patch.object(self.game.rng, 'randint', side_effect=[8, 8, 8]), \
                patch.object(NullDisplay, 'pick_one', return_value=7):
            events = self.game.next_turn()
        self.assertEqual(self.game.state, GameState(0, 0))
        self.assertEqual(events[-1].type, "stay")
        self.assertIs(self.game.get_current_player(), self.game.ai)

    @patch('bitduel.time.sleep')
    def test_ai_reveal_delay(self, mock_sleep):
        game = Game(player=Human("Hugo"), ai=GreedyBot("Greta"), seed=2, ai_delay=5.0)
        with patch.object(game.rng, 'randint', side_effect=[3, 5, 6, 8, 8, 8]):
            game.next_turn()
            mock_sleep.assert_not_called()
            game.next_turn()
        mock_sleep.assert_called_once_with(5.0)

    @patch('bitduel.time.sleep')
    def test_no_reveal_delay_for_bot_in_player_seat(self, mock_sleep):
        """Bot vs bot: only the AI seat pauses before its move."""
        game = Game(player=GreedyBot("Pip"), ai=GreedyBot("Greta"), seed=2, ai_delay=5.0)
        with patch.object(game.rng, 'randint', side_effect=[3, 5, 6, 1, 1, 1]):
            game.next_turn()
            mock_sleep.assert_not_called()
            game.next_turn()
        mock_sleep.assert_called_once_with(5.0)

    def test_events_stream_to_display(self):
        display = RecordingDisplay()
        self.game.attach(display)
        with patch.object(self.game.rng, 'randint', side_effect=[3, 5, 6]):
            events = self.game.next_turn()
        self.assertEqual(display.events, events)


class TestFullGames(unittest.TestCase):
    """Seeded bot-vs-bot games run to a single winner."""

    def _check_finished(self, game: Game, display: RecordingDisplay) -> None:
        self.assertIsNotNone(game.winner)
        self.assertEqual(game.state.position(game.winner.side), GOAL)
        self.assertLess(game.state.position(game.winner.side.opponent), GOAL)
        wins = [e for e in display.events if e.type == "win"]
        self.assertEqual(len(wins), 1)
        self.assertEqual(wins[0].player, game.winner.name)

    def test_greedy_vs_greedy(self):
        game = Game(player=GreedyBot("P"), ai=GreedyBot("A"), seed=7)
        display = RecordingDisplay()
        winner = game.run(display=display)
        self.assertIs(winner, game.winner)
        self._check_finished(game, display)

    def test_random_vs_expectiminimax(self):
        game = Game(player=Bot("Rando"), ai=ExpectiminimaxBot("Ex"), seed=21)
        display = RecordingDisplay()
        game.run(display=display)
        self._check_finished(game, display)

    def test_minimax_in_player_seat(self):
        game = Game(player=MinimaxBot("Mini"), ai=GreedyBot("Greedy"), seed=5)
        display = RecordingDisplay()
        game.run(display=display)
        self._check_finished(game, display)

    def test_same_seed_same_game(self):
        def play():
            display = RecordingDisplay()
            Game(player=GreedyBot("P"), ai=MinimaxBot("A"), seed=99).run(display=display)
            return [(e.type, e.value, e.dice) for e in display.events]
        self.assertEqual(play(), play())


class TestEventText(unittest.TestCase):

    def test_roll(self):
        self.assertEqual(event_text(Event(type="roll", player="Hugo", dice=(1, 2, 3))), "Hugo rolled 1, 2, 3.")

    def test_search(self):
        text = event_text(Event(type="search", player="A.I.", message="minimax",
                                data={"nodes": 6, "nodes_by_depth": {1: 1, 2: 2, 3: 3}}))
        self.assertIn("6 nodes", text)
        self.assertIn("d3=3", text)

    def test_unknown_is_silent(self):
        self.assertIsNone(event_text(Event(type="mystery")))


if __name__ == "__main__":
    unittest.main()
