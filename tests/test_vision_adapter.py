from types import SimpleNamespace

import pytest
from google.api_core import exceptions as google_exceptions

from intake.shared.adapters.vision_adapter import (
    GoogleVisionAdapter,
    Label,
    SafeSearchResult,
    WebEntity,
    collect_signals,
    to_likelihood,
)
from intake.shared.core.exceptions import VisionServiceError
from intake.shared.models.enums import Likelihood

from fakes import ARTWORK_URL, FakeVision


class StubImageAnnotator:
    """Stands in for vision.ImageAnnotatorClient."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def _call(self, name, **kwargs):
        self.requests.append((name, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def safe_search_detection(self, **kwargs):
        return self._call("safe_search_detection", **kwargs)

    def web_detection(self, **kwargs):
        return self._call("web_detection", **kwargs)

    def label_detection(self, **kwargs):
        return self._call("label_detection", **kwargs)


def _response(error_message="", **fields):
    return SimpleNamespace(error=SimpleNamespace(message=error_message), **fields)


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, Likelihood.UNKNOWN),
        (1, Likelihood.VERY_UNLIKELY),
        (3, Likelihood.POSSIBLE),
        (5, Likelihood.VERY_LIKELY),
        (99, Likelihood.UNKNOWN),
    ],
)
def test_to_likelihood(value, expected):
    assert to_likelihood(value) == expected


async def test_detect_safety_maps_annotation():
    annotation = SimpleNamespace(adult=5, violence=2, racy=4, medical=1, spoof=0)
    client = StubImageAnnotator(response=_response(safe_search_annotation=annotation))
    adapter = GoogleVisionAdapter(timeout_seconds=3, client=client)

    result = await adapter.detect_safety(ARTWORK_URL)

    assert result == SafeSearchResult(
        adult=Likelihood.VERY_LIKELY,
        violence=Likelihood.UNLIKELY,
        racy=Likelihood.LIKELY,
        medical=Likelihood.VERY_UNLIKELY,
        spoof=Likelihood.UNKNOWN,
    )
    name, kwargs = client.requests[0]
    assert name == "safe_search_detection"
    assert kwargs["timeout"] == 3
    assert kwargs["image"].source.image_uri == ARTWORK_URL


async def test_detect_web_entities_keeps_service_order():
    entities = [
        SimpleNamespace(entity_id="/m/05qdh", score=0.8, description="Painting"),
        SimpleNamespace(entity_id="/m/0c9ph5", score=0.4, description="Harbour"),
    ]
    client = StubImageAnnotator(response=_response(web_detection=SimpleNamespace(web_entities=entities)))
    adapter = GoogleVisionAdapter(client=client)

    result = await adapter.detect_web_entities(ARTWORK_URL)

    assert result == [WebEntity("/m/05qdh", 0.8, "Painting"), WebEntity("/m/0c9ph5", 0.4, "Harbour")]


async def test_detect_labels_passes_max_results():
    labels = [SimpleNamespace(description="Picture frame", score=0.93)]
    client = StubImageAnnotator(response=_response(label_annotations=labels))
    adapter = GoogleVisionAdapter(client=client)

    result = await adapter.detect_labels(ARTWORK_URL, max_results=7)

    assert result == [Label("Picture frame", 0.93)]
    assert client.requests[0][1]["max_results"] == 7


async def test_error_payload_raises():
    client = StubImageAnnotator(response=_response(error_message="image could not be retrieved"))
    adapter = GoogleVisionAdapter(client=client)

    with pytest.raises(VisionServiceError) as exc_info:
        await adapter.detect_safety(ARTWORK_URL)

    assert "image could not be retrieved" in exc_info.value.message
    assert exc_info.value.details == {"operation": "safe_search", "service": "vision"}


async def test_api_error_raises():
    client = StubImageAnnotator(error=google_exceptions.ServiceUnavailable("backend down"))
    adapter = GoogleVisionAdapter(client=client)

    with pytest.raises(VisionServiceError):
        await adapter.detect_web_entities(ARTWORK_URL)


async def test_collect_signals_without_labels():
    vision = FakeVision(web_entities=[WebEntity("/m/1", 0.5, "Boat")], labels=[Label("Boat", 0.9)])

    signals = await collect_signals(vision, ARTWORK_URL, include_labels=False)

    assert signals.labels is None
    assert signals.web_entities == [WebEntity("/m/1", 0.5, "Boat")]
    assert ("labels", ARTWORK_URL) not in vision.calls


async def test_collect_signals_with_labels_respects_cap():
    vision = FakeVision(labels=[Label("Frame", 0.9), Label("Wood", 0.8), Label("Oak", 0.7)])

    signals = await collect_signals(vision, ARTWORK_URL, include_labels=True, label_max_results=2)

    assert signals.labels == [Label("Frame", 0.9), Label("Wood", 0.8)]


async def test_collect_signals_tolerates_web_and_label_failures():
    vision = FakeVision(fail_web=True, fail_labels=True)

    signals = await collect_signals(vision, ARTWORK_URL, include_labels=True)

    assert signals.web_entities == []
    assert signals.labels == []


async def test_collect_signals_propagates_safety_failure():
    vision = FakeVision(fail_safety=True)

    with pytest.raises(VisionServiceError):
        await collect_signals(vision, ARTWORK_URL, include_labels=True)
