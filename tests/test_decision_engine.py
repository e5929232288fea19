from datetime import datetime, timezone

import pytest

from intake.shared.adapters.vision_adapter import (
    Label,
    SafeSearchResult,
    VisionSignalsResult,
    WebEntity,
)
from intake.shared.models.enums import Likelihood, ProcessingStatus, TargetKind
from intake.shared.services.decision_engine import build_analysis, decide
from intake.shared.services.image_metrics import ImageMetrics

BELOW_LIKELY = [Likelihood.UNKNOWN, Likelihood.VERY_UNLIKELY, Likelihood.UNLIKELY, Likelihood.POSSIBLE]


@pytest.mark.parametrize("adult", BELOW_LIKELY)
@pytest.mark.parametrize("violence", BELOW_LIKELY)
def test_sub_likely_artwork_is_ready(adult, violence):
    verdict = decide(TargetKind.ARTWORK, SafeSearchResult(adult=adult, violence=violence))

    assert verdict.status == ProcessingStatus.READY
    assert verdict.errors == []
    assert verdict.is_ready


def test_very_likely_adult_fails():
    verdict = decide(
        TargetKind.ARTWORK,
        SafeSearchResult(adult=Likelihood.VERY_LIKELY, violence=Likelihood.UNKNOWN),
    )

    assert verdict.status == ProcessingStatus.FAILED
    assert verdict.errors == ["nsfw_adult"]


def test_likely_violence_fails():
    verdict = decide(
        TargetKind.ARTWORK,
        SafeSearchResult(adult=Likelihood.UNKNOWN, violence=Likelihood.LIKELY),
    )

    assert verdict.status == ProcessingStatus.FAILED
    assert verdict.errors == ["nsfw_violence"]


def test_errors_keep_rule_order():
    verdict = decide(
        TargetKind.FRAME,
        SafeSearchResult(adult=Likelihood.LIKELY, violence=Likelihood.VERY_LIKELY),
        labels=[Label("Cat", 0.99)],
    )

    assert verdict.errors == ["nsfw_adult", "nsfw_violence", "not_a_frame"]


def test_racy_medical_spoof_are_not_judged():
    verdict = decide(
        TargetKind.ARTWORK,
        SafeSearchResult(
            racy=Likelihood.VERY_LIKELY,
            medical=Likelihood.VERY_LIKELY,
            spoof=Likelihood.VERY_LIKELY,
        ),
    )

    assert verdict.status == ProcessingStatus.READY


@pytest.mark.parametrize("description", ["picture frame", "Picture Frame", "FRAME", "Photo framework"])
def test_frame_label_is_detected(description):
    verdict = decide(TargetKind.FRAME, SafeSearchResult(), labels=[Label("Wood", 0.9), Label(description, 0.8)])

    assert verdict.errors == []
    assert verdict.status == ProcessingStatus.READY


@pytest.mark.parametrize("labels", [None, [], [Label("cat", 0.97)]])
def test_frame_without_frame_label_fails(labels):
    verdict = decide(TargetKind.FRAME, SafeSearchResult(), labels=labels)

    assert verdict.errors == ["not_a_frame"]
    assert verdict.status == ProcessingStatus.FAILED


def test_artwork_ignores_labels():
    verdict = decide(TargetKind.ARTWORK, SafeSearchResult(), labels=[Label("cat", 0.97)])

    assert verdict.errors == []


def _signals(labels=None):
    return VisionSignalsResult(
        safe_search=SafeSearchResult(adult=Likelihood.VERY_UNLIKELY),
        web_entities=[WebEntity("/m/0jbk", 0.61, "Painting")],
        labels=labels,
    )


def _metrics():
    return ImageMetrics(format="png", width=640, height=480, blur_score=3.5, color_depth=8)


def test_artwork_analysis_document():
    checked_at = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    analysis = build_analysis(TargetKind.ARTWORK, _signals(), _metrics(), checked_at)

    assert analysis == {
        "safe_search": {
            "adult": "VERY_UNLIKELY",
            "violence": "UNKNOWN",
            "racy": "UNKNOWN",
            "medical": "UNKNOWN",
            "spoof": "UNKNOWN",
        },
        "web_entities": [{"entity_id": "/m/0jbk", "score": 0.61, "description": "Painting"}],
        "format": "png",
        "width": 640,
        "height": 480,
        "blur_score": 3.5,
        "color_depth": 8,
        "checked_at": "2024-01-15T10:30:00+00:00",
    }


def test_frame_analysis_includes_labels():
    analysis = build_analysis(TargetKind.FRAME, _signals([Label("Picture frame", 0.93)]), _metrics())

    assert analysis["labels"] == [{"description": "Picture frame", "score": 0.93}]
    assert "checked_at" in analysis


def test_frame_analysis_with_failed_labels_has_empty_list():
    analysis = build_analysis(TargetKind.FRAME, _signals(None), _metrics())

    assert analysis["labels"] == []
