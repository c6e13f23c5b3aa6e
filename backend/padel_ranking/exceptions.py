"""Domain errors raised by the ranking engine and translated to HTTP errors by the routes."""


class PadelRankingError(Exception):
    """Base exception for ranking engine errors"""

    pass


class InvalidParticipantTokenError(PadelRankingError, ValueError):
    """A participant token cannot be decoded without guessing"""

    pass


class ScoreValidationError(PadelRankingError, ValueError):
    """Score input is missing data required by the chosen scoring rule"""

    pass


class RankingNotFoundError(PadelRankingError):
    """Ranking, division or match lookup failed"""

    pass
