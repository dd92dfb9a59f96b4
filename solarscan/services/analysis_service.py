"""End-to-end analysis: decode, enhance, encode, classify, synthesize, recommend.

Every stage except the classifier is a pure function of its input, so one
``AnalysisService`` can be shared by any number of threads as long as the
injected classifier is itself thread-safe. Timeouts and retries for the
classifier belong to the caller; ``analyze_batch`` is such a caller.
"""
from __future__ import annotations
import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..backends.base_backend import BaseClassifier
from ..config.settings import Config
from ..core.entities import AnalysisOptions, AnalysisResult, BatchAnalysisResult, ClassScore
from ..core.exceptions import ClassifierFailure, InvalidOptions, PipelineError, UnsupportedFormat
from ..core.logging_config import CorrelationContext, log_stage
from ..core.raster import RasterBuffer
from ..utils.image_utils import decode_image, enhance_image, generate_thumbnail, to_rgb
from ..utils.quality import analyze_quality
from .finding_synthesizer import FindingSynthesizer
from .recommendation_service import generate_recommendations, summarize
from .tensor_codec import encode

logger = logging.getLogger(__name__)

Decoder = Callable[..., RasterBuffer]
OptionsLike = Union[AnalysisOptions, Mapping[str, Any], None]

_OPTION_ALIASES = {
    "confidence_threshold": "confidence_threshold",
    "confidenceThreshold": "confidence_threshold",
    "confidence": "confidence_threshold",
    "detail_level": "detail_level",
    "detailLevel": "detail_level",
}


class AnalysisService:
    """Runs the analysis pipeline against an injected classifier.

    The classifier's lifecycle (load, reuse, unload) is owned by the caller,
    typically through the classifier's context manager.
    """

    def __init__(self, classifier: BaseClassifier, config: Optional[Config] = None,
                 decoder: Decoder = decode_image):
        self.classifier = classifier
        self.config = config or Config()
        self.decoder = decoder

    def resolve_options(self, options: OptionsLike = None) -> AnalysisOptions:
        """Merge per-call options over the configured defaults."""
        if options is None:
            return self.config.analysis_options()
        if isinstance(options, AnalysisOptions):
            return options

        overrides: Dict[str, Any] = {}
        for key, value in options.items():
            if key not in _OPTION_ALIASES:
                raise InvalidOptions(f"Unknown analysis option: {key!r}", details={"option": key})
            if value is not None:
                overrides[_OPTION_ALIASES[key]] = value
        return self.config.analysis_options(**overrides)

    def analyze(self, image_bytes: bytes, mime: str, options: OptionsLike = None,
                request_id: Optional[str] = None) -> AnalysisResult:
        """Analyze one uploaded image.

        Args:
            image_bytes: Encoded image file contents
            mime: Declared MIME type (image/jpeg, image/png or image/webp)
            options: ``AnalysisOptions`` or a mapping with confidence_threshold
                and/or detail_level; unset values come from the configuration
            request_id: Correlation ID for log records (generated if omitted)

        Returns:
            Complete result; nothing is returned on failure

        Raises:
            InvalidOptions, UnsupportedFormat, DecodeFailure, ClassifierFailure
        """
        with CorrelationContext(request_id):
            start = time.perf_counter()
            opts = self.resolve_options(options)

            mime = (mime or "").lower().strip()
            if mime not in self.config.supported_mime_types:
                raise UnsupportedFormat(
                    f"Unsupported image type: {mime}",
                    details={"mime": mime, "supported": list(self.config.supported_mime_types)},
                )
            try:
                buf = self.decoder(image_bytes, mime, max_size=self.config.max_file_size)
            except PipelineError as e:
                logger.warning(f"Decoding failed: {e}")
                raise

            return self._run(buf, opts, start)

    def analyze_buffer(self, buf: RasterBuffer, options: OptionsLike = None) -> AnalysisResult:
        """Analyze an already decoded image."""
        start = time.perf_counter()
        return self._run(buf, self.resolve_options(options), start)

    def _run(self, buf: RasterBuffer, opts: AnalysisOptions, start: float) -> AnalysisResult:
        rgb = to_rgb(buf)
        with log_stage(logger, "enhance"):
            prepared = (enhance_image(rgb, self.config.contrast_factor)
                        if self.config.enhance_before_inference else rgb)
        with log_stage(logger, "encode"):
            tensor = encode(prepared, self.config.model_input_width,
                            self.config.model_input_height)
        with log_stage(logger, "classify"):
            scores = self._classify(tensor)

        synthesizer = FindingSynthesizer(confidence_threshold=opts.confidence_threshold)
        try:
            findings = synthesizer.synthesize(scores, buf.width, buf.height)
        except ClassifierFailure as e:
            logger.error(f"Classifier output rejected: {e}")
            raise
        recommendations = generate_recommendations(findings)
        quality = None
        if opts.detail_level == "detailed":
            with log_stage(logger, "quality"):
                quality = analyze_quality(rgb)

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        summary = summarize(findings, elapsed_ms)
        logger.info(
            f"Analysis complete: {buf.width}x{buf.height}, {len(findings)} findings, "
            f"status={summary.overall_status.value}, {elapsed_ms:.1f} ms"
        )
        return AnalysisResult(
            findings=findings,
            summary=summary,
            recommendations=recommendations,
            processing_time_ms=elapsed_ms,
            image_size=buf.size,
            quality=quality,
        )

    def _classify(self, tensor) -> List[ClassScore]:
        try:
            raw = self.classifier.classify(tensor)
        except ClassifierFailure:
            raise
        except Exception as e:
            logger.error(f"Classifier failed: {e}")
            raise ClassifierFailure(f"Classifier failed: {e}", retryable=True,
                                    details={"cause": type(e).__name__}) from e

        try:
            return [(index, confidence) for index, confidence in raw]
        except (TypeError, ValueError) as e:
            raise ClassifierFailure(
                f"Classifier returned malformed output: {e}", retryable=False) from e

    def analyze_batch(self, images: Sequence[Tuple[bytes, str]],
                      options: OptionsLike = None) -> BatchAnalysisResult:
        """Analyze several images concurrently.

        Each image is waited on for at least ``analysis_timeout_seconds``; one
        that takes longer is reported failed (retryable) and abandoned.
        Failures never affect the other images.

        Raises:
            InvalidOptions: empty batch, too many images, or bad options
        """
        if not images:
            raise InvalidOptions("Image list must not be empty")
        if len(images) > self.config.max_batch_size:
            raise InvalidOptions(
                f"Batch analysis supports at most {self.config.max_batch_size} images, "
                f"got {len(images)}",
                details={"count": len(images), "max_batch_size": self.config.max_batch_size},
            )
        opts = self.resolve_options(options)

        batch_id = uuid.uuid4().hex[:8]
        result = BatchAnalysisResult()
        timeout = self.config.analysis_timeout_seconds
        executor = ThreadPoolExecutor(
            max_workers=min(self.config.batch_workers, len(images)),
            thread_name_prefix=f"analysis-{batch_id}",
        )
        try:
            futures = [
                executor.submit(self.analyze, data, mime, opts, f"{batch_id}-{i}")
                for i, (data, mime) in enumerate(images)
            ]
            for i, future in enumerate(futures):
                try:
                    result.successful.append((i, future.result(timeout=timeout)))
                except FutureTimeoutError:
                    future.cancel()
                    logger.warning(f"Batch {batch_id}: image {i} timed out after {timeout}s")
                    result.failed.append((i, ClassifierFailure(
                        f"Analysis timed out after {timeout} seconds",
                        details={"timeout_seconds": timeout},
                    ).to_dict()))
                except PipelineError as e:
                    logger.warning(f"Batch {batch_id}: image {i} failed: {e}")
                    result.failed.append((i, e.to_dict()))
        finally:
            # Timed-out work is abandoned rather than awaited
            executor.shutdown(wait=False, cancel_futures=True)

        logger.info(f"Batch {batch_id}: {result.success_count}/{result.total} images analyzed")
        return result

    def thumbnail(self, buf: RasterBuffer) -> RasterBuffer:
        return generate_thumbnail(buf, self.config.thumbnail_width, self.config.thumbnail_height)


def analyze(image_bytes: bytes, mime: str, classifier: BaseClassifier,
            options: OptionsLike = None, config: Optional[Config] = None) -> AnalysisResult:
    """Analyze one image with a caller-provided classifier."""
    return AnalysisService(classifier, config).analyze(image_bytes, mime, options)
