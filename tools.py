from typing import Iterable, Tuple


class MathTools:
    """Numeric helpers shared by the tracking services."""

    @staticmethod
    def clamp(value: float, lower: float, upper: float) -> float:
        """Limit ``value`` to ``[lower, upper]``."""
        if lower > upper:
            raise ValueError("lower bound exceeds upper bound")
        return min(max(value, lower), upper)

    @staticmethod
    def volume(sets: Iterable[Tuple[float, float]]) -> float:
        """Sum of ``reps * weight`` over ``(reps, weight)`` pairs."""
        return sum((reps * weight for reps, weight in sets), 0.0)

    @staticmethod
    def progress_fraction(current: float, target: float, cap: bool = True) -> float:
        """Return ``current / target``, limited to 1.0 when ``cap`` is set."""
        if target <= 0:
            raise ValueError("target must be positive")
        fraction = current / target
        return min(fraction, 1.0) if cap else fraction
