import numpy as np

from .game_state import Outcome, Role


class StatisticsTracker:
    """Cumulative results across episodes. Counters only ever grow until reset()."""

    def __init__(self):
        self.reset()

    def reset(self):
        self.wins = {role: 0 for role in Role}
        self.games = {role: 0 for role in Role}
        self.history = []

    def record(self, role, outcome):
        if outcome is Outcome.UNDECIDED:
            raise ValueError("Cannot record an undecided outcome")
        self.games[role] += 1
        if outcome.favours(role):
            self.wins[role] += 1

    def record_episode(self, outcome):
        """Records a finished episode for both roles and appends it to the history."""
        for role in Role:
            self.record(role, outcome)
        self.history.append(outcome)

    def games_played(self, role=Role.COP):
        return self.games[role]

    def win_fraction(self, role):
        """wins / games for `role`, or None while no game has been recorded."""
        if self.games[role] == 0:
            return None
        return self.wins[role] / self.games[role]

    def outcome_series(self, role):
        """1 for every episode `role` won, 0 otherwise, in play order."""
        return np.array([outcome.favours(role) for outcome in self.history], dtype=np.int32)

    def win_fraction_series(self, role):
        """Running win fraction after each episode of the history."""
        wins = np.cumsum(self.outcome_series(role))
        return wins / np.arange(1, len(wins) + 1)

    def summary(self):
        return {
            role.value: {
                'wins': self.wins[role],
                'games': self.games[role],
                'win_fraction': self.win_fraction(role),
            }
            for role in Role
        }
