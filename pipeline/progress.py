"""
Job progress checkpoints and the UI progress estimate.

The checkpoint percentages are the authoritative progress of a job. While a
job waits on the recommendation API it sits at 25%, so status readers may
show an estimate that creeps from 25% towards 90% over the typical AI call
duration. The estimate is derived on every read and never stored.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

from database.models import JOB_STATUS_PROCESSING


@dataclass(frozen=True)
class Checkpoint:
    progress: int
    message_key: str


STARTING = Checkpoint(0, "step_starting")
VALIDATING_EXAM = Checkpoint(5, "step_validating_exam")
PARSING_ANSWERS = Checkpoint(10, "step_parsing_answers")
LOADING_MAPPING = Checkpoint(15, "step_loading_calculation_data")
SCORING = Checkpoint(20, "step_calculating_compatibility")
AWAITING_AI = Checkpoint(25, "step_getting_ai_recommendations")
AI_RESPONSE_RECEIVED = Checkpoint(90, "step_processing_ai_response")
FINALIZING = Checkpoint(95, "step_finalizing_results")
COMPLETED_PROGRESS = 100

CHECKPOINTS = (
    STARTING,
    VALIDATING_EXAM,
    PARSING_ANSWERS,
    LOADING_MAPPING,
    SCORING,
    AWAITING_AI,
    AI_RESPONSE_RECEIVED,
    FINALIZING,
)

ESTIMATE_FLOOR = AWAITING_AI.progress
ESTIMATE_CAP = AI_RESPONSE_RECEIVED.progress
ESTIMATE_WINDOW_SECONDS = 35  # typical AI call takes 30-40s


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def display_progress(
    status: str,
    progress: int,
    started_at: Optional[datetime],
    now: Optional[datetime] = None
) -> Tuple[int, bool]:
    """
    UI-friendly progress for a job.

    Returns:
        (display_value, is_estimated). is_estimated is True only while the
        job is processing and waiting on the AI call (progress == 25).
    """
    progress = int(progress or 0)

    if status != JOB_STATUS_PROCESSING or progress != ESTIMATE_FLOOR:
        return progress, False

    elapsed = 0.0
    if started_at is not None:
        now = _as_utc(now or datetime.now(timezone.utc))
        elapsed = max(0.0, (now - _as_utc(started_at)).total_seconds())

    ratio = min(1.0, elapsed / ESTIMATE_WINDOW_SECONDS) if ESTIMATE_WINDOW_SECONDS > 0 else 1.0
    value = int(ESTIMATE_FLOOR + (ESTIMATE_CAP - ESTIMATE_FLOOR) * ratio)
    return max(ESTIMATE_FLOOR, min(ESTIMATE_CAP, value)), True
