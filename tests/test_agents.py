import unittest
import os
import sys

import numpy as np

# Allow direct imports from the project root
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(current_dir)
sys.path.insert(0, project_root)

from cops_robbers.agents import MenaceAgent, RandomAgent, make_agent
from cops_robbers.bags import BagContext, BagStore
from cops_robbers.errors import InvalidMove
from cops_robbers.game_state import GameState, Role
from cops_robbers.graph import template_graphs


class TestRandomAgent(unittest.TestCase):

    def setUp(self):
        self.graph = template_graphs()["Petersen"]
        self.rng = np.random.default_rng(7)
        self.agent = RandomAgent()
        self.store = BagStore()

    def test_moves_stay_adjacent(self):
        """Test: the random agent only ever moves to a neighbour or stays."""
        for trial in range(30):
            state = GameState(self.graph, max_turns=1000)
            state.place(Role.COP, self.agent.select_move(Role.COP, state, self.graph, self.store, self.rng))
            state.place(Role.ROBBER, self.agent.select_move(Role.ROBBER, state, self.graph, self.store, self.rng))
            while not state.is_finished and state.turn_count < 40:
                role = state.turn_owner
                before = state.position_of(role)
                move = self.agent.select_move(role, state, self.graph, self.store, self.rng)
                if role is Role.COP:
                    self.assertIn(move[0], self.graph.closed_neighbourhood(before[0]))
                else:
                    self.assertIn(move, self.graph.closed_neighbourhood(before))
                state.move(role, move)

    def test_placement_covers_the_board(self):
        state = GameState(self.graph, max_turns=10)
        picks = {self.agent.select_move(Role.COP, state, self.graph, self.store, self.rng) for _ in range(500)}
        self.assertEqual(picks, {(v,) for v in self.graph.vertices})

    def test_no_legal_move(self):
        state = GameState(self.graph, max_turns=10)
        with self.assertRaises(InvalidMove):
            self.agent.select_move(Role.ROBBER, state, self.graph, self.store, self.rng)

    def test_does_not_learn(self):
        state = GameState(self.graph, max_turns=10)
        self.assertFalse(self.agent.learns)
        self.assertIsNone(self.agent.bag_key(Role.COP, state))


class TestMenaceAgent(unittest.TestCase):

    def setUp(self):
        self.graph = template_graphs()["Path5"]
        self.rng = np.random.default_rng(3)
        self.store = BagStore(start_tokens=50)
        self.agent = MenaceAgent(context=BagContext.FULL)

    def test_draws_from_its_bag(self):
        state = GameState(self.graph, max_turns=10)
        key = self.agent.bag_key(Role.COP, state)
        bag = self.store.get_or_create(key, self.agent.bag_moves(Role.COP, state))
        for move in bag.moves:
            bag.counts[move] = 0
        bag.counts[(2,)] = 50
        picks = {self.agent.select_move(Role.COP, state, self.graph, self.store, self.rng) for _ in range(100)}
        self.assertEqual(picks, {(2,)})

    def test_selection_does_not_touch_the_store(self):
        state = GameState(self.graph, max_turns=10)
        move = self.agent.select_move(Role.COP, state, self.graph, self.store, self.rng)
        self.assertIn(move, state.legal_moves(Role.COP))
        self.assertEqual(len(self.store), 0)

    def test_vertex_context_respects_placement_rule(self):
        agent = MenaceAgent(context=BagContext.VERTEX)
        state = GameState(self.graph, max_turns=10)
        state.place(Role.COP, 2)
        key = agent.bag_key(Role.ROBBER, state)
        self.store.get_or_create(key, agent.bag_moves(Role.ROBBER, state))
        picks = {agent.select_move(Role.ROBBER, state, self.graph, self.store, self.rng) for _ in range(300)}
        self.assertNotIn(2, picks)
        self.assertEqual(picks, {0, 1, 3, 4})


class TestMakeAgent(unittest.TestCase):

    def test_by_name(self):
        self.assertIsInstance(make_agent("random"), RandomAgent)
        self.assertIsInstance(make_agent("MENACE"), MenaceAgent)
        self.assertEqual(make_agent("menace", context="vertex").context, "vertex")

    def test_unknown_name(self):
        with self.assertRaises(ValueError):
            make_agent("minimax")


if __name__ == '__main__':
    unittest.main(verbosity=2)
