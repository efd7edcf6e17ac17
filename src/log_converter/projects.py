"""
Project name listing.
"""

from typing import Iterable, Set


def list_projects(current_period: Iterable[str], previous_period: Iterable[str]) -> Set[str]:
    """Return the de-duplicated project names of both assignment periods."""
    return set(current_period) | set(previous_period)
