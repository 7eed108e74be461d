import enum
import math


class Difficulty(str, enum.Enum):
    EASY = 'Easy'
    MEDIUM = 'Medium'
    HARD = 'Hard'


BASE_POINTS = {
    Difficulty.EASY: 60,
    Difficulty.MEDIUM: 80,
    Difficulty.HARD: 100,
}


def base_points(difficulty) -> int:
    return BASE_POINTS[Difficulty(difficulty)]


def score_turn(difficulty, time_remaining: float, total_duration: float) -> int:
    """Points for a term found with ``time_remaining`` of ``total_duration`` left.

    Full base points for an instant find, half for a find on the last
    second: ``base * (0.5 + 0.5 * fraction)`` with the remaining fraction
    clamped to [0, 1]. Halves round up.
    """
    if total_duration <= 0:
        raise ValueError('total_duration must be positive')
    base = base_points(difficulty)
    fraction = min(1.0, max(0.0, time_remaining / total_duration))
    return int(math.floor(base * (0.5 + 0.5 * fraction) + 0.5))
