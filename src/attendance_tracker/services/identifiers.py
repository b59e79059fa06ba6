"""Allocation of short numeric session identifiers."""

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from attendance_tracker.domain.errors import SessionIdConflictError

SESSION_ID_MIN = 100000
SESSION_ID_MAX = 999999

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class SessionIdAllocator:
    """Pick random six-digit ids until one is free.

    The existence check only avoids obvious collisions; the insert itself is
    the final authority, and a primary-key conflict there resamples as well.
    Store errors are never retried.
    """

    rng: random.Random = field(default_factory=random.SystemRandom)

    def sample(self) -> int:
        """Return a uniformly random candidate id."""
        return self.rng.randint(SESSION_ID_MIN, SESSION_ID_MAX)

    def allocate(
        self,
        exists: Callable[[int], bool],
        create: Callable[[int], T],
    ) -> T:
        """Insert with the first free id and return whatever ``create`` returns."""
        while True:
            candidate = self.sample()
            if exists(candidate):
                continue
            try:
                return create(candidate)
            except SessionIdConflictError:
                logger.info(
                    "Session id taken at insert, resampling",
                    extra={"session_id": candidate},
                )
