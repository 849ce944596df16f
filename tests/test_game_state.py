import unittest
import os
import sys

import numpy as np

# Allow direct imports from the project root
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(current_dir)
sys.path.insert(0, project_root)

from cops_robbers.errors import InvalidMove
from cops_robbers.game_state import GameState, Outcome, Phase, Role
from cops_robbers.graph import Graph


class TestPlacement(unittest.TestCase):

    def setUp(self):
        self.graph = Graph([1, 2, 3], [(1, 2), (2, 3)])
        self.state = GameState(self.graph, num_cops=1, max_turns=10)

    def test_initial_state(self):
        self.assertEqual(self.state.phase, Phase.PLACEMENT)
        self.assertEqual(self.state.turn_owner, Role.COP)
        self.assertEqual(self.state.cop_positions, ())
        self.assertIsNone(self.state.robber_position)
        self.assertEqual(self.state.outcome, Outcome.UNDECIDED)

    def test_cop_places_first(self):
        with self.assertRaises(InvalidMove):
            self.state.place(Role.ROBBER, 1)
        self.state.place(Role.COP, 2)
        self.assertEqual(self.state.cop_positions, (2,))
        self.assertEqual(self.state.turn_owner, Role.ROBBER)

    def test_placement_outside_graph(self):
        with self.assertRaises(InvalidMove):
            self.state.place(Role.COP, 9)
        self.state.place(Role.COP, 2)
        with self.assertRaises(InvalidMove):
            self.state.place(Role.ROBBER, 9)

    def test_robber_may_not_start_on_a_cop(self):
        self.state.place(Role.COP, 2)
        self.assertEqual(self.state.legal_moves(Role.ROBBER), [1, 3])
        with self.assertRaises(InvalidMove):
            self.state.place(Role.ROBBER, 2)

    def test_robber_on_cop_when_allowed_is_a_capture(self):
        state = GameState(self.graph, max_turns=10, allow_robber_on_cop=True)
        state.place(Role.COP, 2)
        self.assertEqual(state.legal_moves(Role.ROBBER), [1, 2, 3])
        state.place(Role.ROBBER, 2)
        self.assertEqual(state.phase, Phase.FINISHED)
        self.assertEqual(state.outcome, Outcome.COP_WIN)
        self.assertEqual(state.turn_count, 0)

    def test_robber_is_forced_onto_a_cop_when_no_vertex_is_free(self):
        state = GameState(Graph([0]), max_turns=10)
        state.place(Role.COP, 0)
        self.assertEqual(state.legal_moves(Role.ROBBER), [0])
        state.place(Role.ROBBER, 0)
        self.assertEqual(state.outcome, Outcome.COP_WIN)

    def test_moves_must_be_vertex_ids(self):
        for bad in ([1], "1", 1.0, None, True):
            with self.assertRaises(InvalidMove):
                self.state.normalize_move(Role.ROBBER, bad)
        with self.assertRaises(InvalidMove):
            self.state.normalize_move(Role.COP, ([1],))
        self.assertEqual(self.state.normalize_move(Role.COP, [np.int64(2)]), (2,))

        self.state.place(Role.COP, 2)
        with self.assertRaises(InvalidMove):
            self.state.place(Role.ROBBER, [1])
        self.assertIsNone(self.state.robber_position)
        self.state.place(Role.ROBBER, np.int64(1))
        with self.assertRaises(InvalidMove):
            self.state.move(Role.COP, {2})

    def test_cannot_place_while_moving(self):
        self.state.place(Role.COP, 2).place(Role.ROBBER, 1)
        self.assertEqual(self.state.phase, Phase.MOVING)
        with self.assertRaises(InvalidMove):
            self.state.place(Role.COP, 1)

    def test_zero_turn_limit_ends_after_placement(self):
        state = GameState(self.graph, max_turns=0)
        state.place(Role.COP, 1).place(Role.ROBBER, 3)
        self.assertEqual(state.outcome, Outcome.ROBBER_WIN)

    def test_cop_placement_moves(self):
        state = GameState(self.graph, num_cops=2, max_turns=10)
        moves = state.legal_moves(Role.COP)
        self.assertEqual(len(moves), 9)
        self.assertIn((1, 3), moves)
        self.assertEqual(state.legal_moves(Role.ROBBER), [])


class TestMoving(unittest.TestCase):

    def setUp(self):
        self.graph = Graph([1, 2, 3], [(1, 2), (2, 3)])

    def test_cop_in_the_middle_captures_in_one_ply(self):
        """Test: path 1-2-3, cop at 2, robber at either end is caught by the next cop move."""
        for robber_start in (1, 3):
            state = GameState(self.graph, max_turns=10)
            state.place(Role.COP, 2).place(Role.ROBBER, robber_start)
            self.assertIn((robber_start,), state.legal_moves(Role.COP))
            state.move(Role.COP, robber_start)
            self.assertEqual(state.phase, Phase.FINISHED)
            self.assertEqual(state.outcome, Outcome.COP_WIN)
            self.assertEqual(state.turn_count, 1)

    def test_non_adjacent_move_is_rejected(self):
        state = GameState(self.graph, max_turns=10)
        state.place(Role.COP, 1).place(Role.ROBBER, 3)
        with self.assertRaises(InvalidMove):
            state.move(Role.COP, 3)
        with self.assertRaises(InvalidMove):
            state.move(Role.COP, 8)

    def test_staying_put_is_a_move(self):
        state = GameState(self.graph, max_turns=10)
        state.place(Role.COP, 1).place(Role.ROBBER, 3)
        state.move(Role.COP, 1)
        self.assertEqual(state.turn_owner, Role.ROBBER)
        self.assertEqual(state.turn_count, 1)
        state.move(Role.ROBBER, 3)
        self.assertEqual(state.turn_owner, Role.COP)
        self.assertEqual(state.turn_count, 2)

    def test_moving_out_of_turn(self):
        state = GameState(self.graph, max_turns=10)
        with self.assertRaises(InvalidMove):
            state.move(Role.COP, 1)
        state.place(Role.COP, 1).place(Role.ROBBER, 3)
        with self.assertRaises(InvalidMove):
            state.move(Role.ROBBER, 2)

    def test_robber_wins_at_the_turn_limit(self):
        state = GameState(self.graph, max_turns=2)
        state.place(Role.COP, 1).place(Role.ROBBER, 3)
        state.move(Role.COP, 1)
        self.assertEqual(state.phase, Phase.MOVING)
        state.move(Role.ROBBER, 3)
        self.assertEqual(state.phase, Phase.FINISHED)
        self.assertEqual(state.outcome, Outcome.ROBBER_WIN)
        self.assertEqual(state.legal_moves(Role.COP), [])

    def test_robber_walking_into_a_cop_is_caught(self):
        state = GameState(self.graph, max_turns=10)
        state.place(Role.COP, 1).place(Role.ROBBER, 3)
        state.move(Role.COP, 2)
        state.move(Role.ROBBER, 2)
        self.assertEqual(state.outcome, Outcome.COP_WIN)

    def test_legal_moves_while_moving(self):
        state = GameState(self.graph, max_turns=10)
        state.place(Role.COP, 2).place(Role.ROBBER, 1)
        self.assertEqual(state.legal_moves(Role.COP), [(1,), (3,), (2,)])
        self.assertEqual(state.legal_moves(Role.ROBBER), [])

    def test_two_cops_move_jointly(self):
        state = GameState(self.graph, num_cops=2, max_turns=10)
        state.place(Role.COP, (1, 3)).place(Role.ROBBER, 2)
        self.assertEqual(len(state.legal_moves(Role.COP)), 4)
        with self.assertRaises(InvalidMove):
            state.move(Role.COP, 2)
        state.move(Role.COP, (1, 2))
        self.assertEqual(state.cop_positions, (1, 2))
        self.assertEqual(state.outcome, Outcome.COP_WIN)

    def test_snapshot(self):
        state = GameState(self.graph, max_turns=10)
        state.place(Role.COP, 2).place(Role.ROBBER, 1)
        self.assertEqual(state.snapshot(), {
            'cops': [2], 'robber': 1, 'phase': 'moving',
            'turn': 'cop', 'turn_count': 0, 'outcome': 'undecided',
        })

    def test_invalid_settings(self):
        with self.assertRaises(ValueError):
            GameState(self.graph, num_cops=0)
        with self.assertRaises(ValueError):
            GameState(self.graph, max_turns=-1)


if __name__ == '__main__':
    unittest.main(verbosity=2)
