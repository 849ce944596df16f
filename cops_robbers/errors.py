class CopsRobbersError(Exception):
    """Base class for every error raised by the simulation core."""


class InvalidGraph(CopsRobbersError):
    """The graph is empty, malformed, or an edge references a missing vertex."""


class InvalidMove(CopsRobbersError):
    """A placement or move broke the rules of the game."""


class EpisodeAborted(CopsRobbersError):
    """An agent returned an illegal move, so the episode cannot be trusted."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause


class EmptyBagInconsistency(CopsRobbersError):
    """A bag was asked to draw while holding zero tokens in total."""
