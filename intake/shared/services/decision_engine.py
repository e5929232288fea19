"""
Decision Engine

Pure rules that turn vision signals into a moderation verdict, and the
builder for the analysis document stored on the target.

Rules:
======
1. adult is LIKELY / VERY_LIKELY       → nsfw_adult
2. violence is LIKELY / VERY_LIKELY    → nsfw_violence
3. frame with no label mentioning
   "frame" (case-insensitive)          → not_a_frame

Status is failed when any error was recorded, ready otherwise. Errors are
reported in rule order. Blur score is recorded but never judged.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

from intake.shared.adapters.vision_adapter import Label, SafeSearchResult, VisionSignalsResult
from intake.shared.models.base import utcnow
from intake.shared.models.enums import ProcessingErrorCode, ProcessingStatus, TargetKind
from intake.shared.services.image_metrics import ImageMetrics

FRAME_KEYWORD = "frame"


@dataclass
class Verdict:
    """Moderation outcome for one target."""

    status: ProcessingStatus
    errors: list[str] = field(default_factory=list)

    @property
    def is_ready(self) -> bool:
        return self.status == ProcessingStatus.READY


def has_frame_label(labels: Optional[Sequence[Label]]) -> bool:
    """True if any label description contains "frame"."""
    return any(FRAME_KEYWORD in (label.description or "").lower() for label in labels or ())


def decide(
    target_kind: TargetKind,
    safe_search: SafeSearchResult,
    labels: Optional[Sequence[Label]] = None,
) -> Verdict:
    """
    Apply the moderation rules.

    Args:
        target_kind: artwork or frame
        safe_search: SafeSearch likelihoods
        labels: Label annotations (frames only; None or empty means none found)

    Returns:
        Verdict with ordered, unique error codes
    """
    errors: list[str] = []

    if safe_search.adult.is_likely:
        errors.append(ProcessingErrorCode.NSFW_ADULT.value)
    if safe_search.violence.is_likely:
        errors.append(ProcessingErrorCode.NSFW_VIOLENCE.value)
    if target_kind == TargetKind.FRAME and not has_frame_label(labels):
        errors.append(ProcessingErrorCode.NOT_A_FRAME.value)

    status = ProcessingStatus.FAILED if errors else ProcessingStatus.READY
    return Verdict(status=status, errors=errors)


def build_analysis(
    target_kind: TargetKind,
    signals: VisionSignalsResult,
    metrics: ImageMetrics,
    checked_at: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Assemble the analysis document written to the target.

    Labels are included for frames only.
    """
    analysis: dict[str, Any] = {
        "safe_search": signals.safe_search.to_dict(),
        "web_entities": [entity.to_dict() for entity in signals.web_entities],
        "format": metrics.format,
        "width": metrics.width,
        "height": metrics.height,
        "blur_score": metrics.blur_score,
        "color_depth": metrics.color_depth,
        "checked_at": (checked_at or utcnow()).isoformat(),
    }
    if target_kind == TargetKind.FRAME:
        analysis["labels"] = [label.to_dict() for label in signals.labels or []]
    return analysis
