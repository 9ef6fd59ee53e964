"""Sensitivity level to motion-score cutoff."""

MIN_LEVEL = 1
MAX_LEVEL = 40
MAX_CUTOFF = 8.0
MIN_CUTOFF = 0.3


def clamp_level(level: int) -> int:
    return max(MIN_LEVEL, min(MAX_LEVEL, int(level)))


def cutoff(level: int) -> float:
    """Linear interpolation from MAX_CUTOFF at level 1 down to MIN_CUTOFF at level 40."""
    t = (clamp_level(level) - MIN_LEVEL) / (MAX_LEVEL - MIN_LEVEL)
    return MAX_CUTOFF * (1 - t) + MIN_CUTOFF * t


def is_unsafe(motion_score: float, level: int) -> bool:
    return motion_score > cutoff(level)


def danger_level(motion_score, level: int) -> float:
    """How close the last reported score came to the cutoff, in [0, 1]."""
    if motion_score is None:
        return 0.0
    return max(0.0, min(1.0, float(motion_score) / cutoff(level)))
