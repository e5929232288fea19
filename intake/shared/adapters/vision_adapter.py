"""
Vision adapter - Google Cloud Vision client.

Provides:
- SafeSearch likelihoods (adult, violence, racy, medical, spoof)
- Web entities (best-effort)
- Label detection (best-effort, frames only)

The pipeline depends on the VisionSignals protocol, not on the Google
client, so tests substitute an in-memory implementation.

The Google client is synchronous; calls run in a worker thread via
asyncio.to_thread with a per-call timeout.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import vision

from intake.config.settings import settings
from intake.shared.core.exceptions import VisionServiceError
from intake.shared.core.logging import get_logger
from intake.shared.models.enums import Likelihood

logger = get_logger(__name__)


@dataclass
class SafeSearchResult:
    """SafeSearch likelihoods for one image."""

    adult: Likelihood = Likelihood.UNKNOWN
    violence: Likelihood = Likelihood.UNKNOWN
    racy: Likelihood = Likelihood.UNKNOWN
    medical: Likelihood = Likelihood.UNKNOWN
    spoof: Likelihood = Likelihood.UNKNOWN

    def to_dict(self) -> dict[str, str]:
        return {
            "adult": self.adult.value,
            "violence": self.violence.value,
            "racy": self.racy.value,
            "medical": self.medical.value,
            "spoof": self.spoof.value,
        }


@dataclass
class WebEntity:
    """Web entity guessed for an image."""

    entity_id: str
    score: float
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {"entity_id": self.entity_id, "score": self.score, "description": self.description}


@dataclass
class Label:
    """Label annotation."""

    description: str
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {"description": self.description, "score": self.score}


@dataclass
class VisionSignalsResult:
    """Everything the vision service said about one image."""

    safe_search: SafeSearchResult
    web_entities: list[WebEntity] = field(default_factory=list)
    labels: Optional[list[Label]] = None


class VisionSignals(Protocol):
    """Image-understanding operations the pipeline needs."""

    async def detect_safety(self, image_url: str) -> SafeSearchResult: ...

    async def detect_web_entities(self, image_url: str) -> list[WebEntity]: ...

    async def detect_labels(self, image_url: str, max_results: int) -> list[Label]: ...


def to_likelihood(value: Any) -> Likelihood:
    """Map a Cloud Vision likelihood (enum or int) onto Likelihood."""
    try:
        return Likelihood[vision.Likelihood(value).name]
    except (KeyError, ValueError):
        return Likelihood.UNKNOWN


class GoogleVisionAdapter:
    """
    Adapter for Google Cloud Vision image annotation.

    Handles:
    - Lazy client creation (default credentials or a service account file)
    - Per-call timeouts
    - Error payloads and API errors, raised as VisionServiceError
    """

    def __init__(
        self,
        credentials_file: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        client: Optional[vision.ImageAnnotatorClient] = None,
    ):
        """
        Initialize the Vision adapter.

        Args:
            credentials_file: Service account JSON. If not provided, uses settings,
                then application default credentials.
            timeout_seconds: Per-call timeout. If not provided, uses settings.
            client: Pre-built client (optional)
        """
        self.credentials_file = credentials_file or settings.VISION_CREDENTIALS_FILE
        self.timeout_seconds = timeout_seconds or settings.VISION_TIMEOUT_SECONDS
        self._client = client

    @property
    def client(self) -> vision.ImageAnnotatorClient:
        """Lazy-loaded Cloud Vision client."""
        if self._client is None:
            if self.credentials_file:
                self._client = vision.ImageAnnotatorClient.from_service_account_file(
                    self.credentials_file
                )
            else:
                self._client = vision.ImageAnnotatorClient()
        return self._client

    async def _annotate(self, operation: str, method_name: str, image_url: str, **kwargs: Any) -> Any:
        """Run one annotation call off the event loop and check its error payload."""
        image = vision.Image()
        image.source.image_uri = image_url

        def call() -> Any:
            method = getattr(self.client, method_name)
            return method(image=image, timeout=self.timeout_seconds, **kwargs)

        try:
            response = await asyncio.to_thread(call)
        except (google_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as e:
            raise VisionServiceError(operation, str(e)) from e

        if response.error.message:
            raise VisionServiceError(operation, response.error.message)
        return response

    # ═══════════════════════════════════════════════════════════════════════════
    # SIGNALS
    # ═══════════════════════════════════════════════════════════════════════════

    async def detect_safety(self, image_url: str) -> SafeSearchResult:
        """
        SafeSearch detection.

        Raises:
            VisionServiceError: If the call fails
        """
        response = await self._annotate("safe_search", "safe_search_detection", image_url)
        annotation = response.safe_search_annotation
        return SafeSearchResult(
            adult=to_likelihood(annotation.adult),
            violence=to_likelihood(annotation.violence),
            racy=to_likelihood(annotation.racy),
            medical=to_likelihood(annotation.medical),
            spoof=to_likelihood(annotation.spoof),
        )

    async def detect_web_entities(self, image_url: str) -> list[WebEntity]:
        """Web detection; returns entities in service order."""
        response = await self._annotate("web_detection", "web_detection", image_url)
        return [
            WebEntity(
                entity_id=entity.entity_id,
                score=float(entity.score),
                description=entity.description,
            )
            for entity in response.web_detection.web_entities
        ]

    async def detect_labels(self, image_url: str, max_results: int) -> list[Label]:
        """Label detection, up to max_results labels."""
        response = await self._annotate(
            "label_detection", "label_detection", image_url, max_results=max_results
        )
        return [
            Label(description=label.description, score=float(label.score))
            for label in response.label_annotations
        ]


# ═══════════════════════════════════════════════════════════════════════════════
# SIGNAL COLLECTION
# ═══════════════════════════════════════════════════════════════════════════════


async def collect_signals(
    vision_signals: VisionSignals,
    image_url: str,
    include_labels: bool,
    label_max_results: int = settings.VISION_LABEL_MAX_RESULTS,
) -> VisionSignalsResult:
    """
    Gather SafeSearch, web entities and (optionally) labels for an image.

    SafeSearch is required: its failure propagates. Web entity and label
    failures are logged and yield empty lists.

    Args:
        vision_signals: VisionSignals implementation
        image_url: Public image URL
        include_labels: Request labels (frame targets)
        label_max_results: Label cap

    Returns:
        VisionSignalsResult (labels is None when not requested)
    """
    safe_search = await vision_signals.detect_safety(image_url)

    try:
        web_entities = await vision_signals.detect_web_entities(image_url)
    except Exception as e:
        logger.warning("Web detection failed", image_url=image_url, error=str(e))
        web_entities = []

    labels: Optional[list[Label]] = None
    if include_labels:
        try:
            labels = await vision_signals.detect_labels(image_url, label_max_results)
        except Exception as e:
            logger.warning("Label detection failed", image_url=image_url, error=str(e))
            labels = []

    return VisionSignalsResult(safe_search=safe_search, web_entities=web_entities, labels=labels)
