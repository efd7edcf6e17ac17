"""
Duration substitution for exported activity rows.
"""

import random
from typing import Optional

from .models import ExportParams


class DurationResolver:
    """Pick the duration written for each activity row."""

    def __init__(self, params: ExportParams, rng: Optional[random.Random] = None):
        """
        Initialize the resolver.

        Args:
            params: Export parameters holding the randomization settings
            rng: Random source with a ``randint`` method (defaults to an unseeded Random)

        Raises:
            InvalidDurationRangeError: if randomizing with max_duration < min_duration
        """
        params.validate()
        self.params = params
        self.rng = rng or random.Random()

    def resolve(self, original: int) -> int:
        """Return the original duration, or an independent draw from [min, max] when randomizing."""
        if not self.params.is_randomize_duration:
            return original
        return self.rng.randint(self.params.min_duration, self.params.max_duration)
