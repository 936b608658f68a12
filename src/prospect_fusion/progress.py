from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Stage(Enum):
    """Checkpoints reported to the progress collaborator: (step, percent, message)."""

    IDENTITY_MATCHING = ("IDENTITY_MATCHING", 35, "Matching identities across sources...")
    DATA_FUSION = ("DATA_FUSION", 50, "Merging duplicate profiles...")
    SCORING = ("SCORING", 70, "Calculating lead scores...")
    FINALIZING = ("FINALIZING", 90, "Finalizing results...")

    @property
    def step(self) -> str:
        return self.value[0]

    @property
    def percent(self) -> int:
        return self.value[1]

    @property
    def message(self) -> str:
        return self.value[2]


class LoggingProgressReporter:
    """Progress reporter that only writes to the log."""

    def report(self, run_id: str, step: str, percent: int, message: str) -> None:
        logger.info("[%s] %s %d%% - %s", run_id, step, percent, message)
