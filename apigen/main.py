"""
Main orchestrator for apigen.

Coordinates the four-stage pipeline:
Sanitizer → ChangeGate → Extractor → CodeGenerator.

The previous artifact is read once at the start and overwritten once at the
end. Nothing is written when the ChangeGate reports no change.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from .change_gate import ZERO_DIGEST, ChangeGate, encode_digest, read_previous_digest
from .config import Settings
from .extractor import Extractor, parse_document
from .fetcher import fetch_documentation
from .generator import CodeGenerator
from .logger import get_module_logger
from .sanitizer import Sanitizer
from .schemas import AccessRecord, EndpointCatalog, OutcomeStatus, PipelineOutcome

logger = get_module_logger("main")

Fetcher = Callable[[], bytes]


class ApiGenPipeline:
    """
    Regenerates the binding module when the documentation page changed.

    Stages:
    1. Sanitizer: strips per-load artifacts from the page
    2. ChangeGate: compares the page digest with the artifact's footer
    3. Extractor: builds the endpoint catalog
    4. CodeGenerator: renders, validates and writes the module
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fetcher: Optional[Fetcher] = None
    ):
        self.settings = settings or Settings()
        self.fetcher = fetcher or self._default_fetcher

        self.sanitizer = Sanitizer()
        self.change_gate = ChangeGate()
        self.extractor = Extractor()
        self.generator = CodeGenerator(
            documentation_url=self.settings.documentation_url,
            filename=self.settings.output_path.name
        )

        logger.info(f"Pipeline initialized for {self.settings.output_path}")

    def _default_fetcher(self) -> bytes:
        return fetch_documentation(self.settings.documentation_url, self.settings.request_timeout)

    def run(self, raw: Optional[bytes] = None, force: bool = False) -> PipelineOutcome:
        """
        Run the pipeline once.

        Args:
            raw: Page bytes; fetched with the configured fetcher when omitted
            force: Ignore the previous artifact's digest and always regenerate

        Returns:
            PipelineOutcome with status REGENERATED or NO_CHANGE

        Raises:
            FetchError, SanitizationError, StructuralExtractionError, GenerationIOError
        """
        output_path = self.settings.output_path
        previous_digest = ZERO_DIGEST if force else read_previous_digest(output_path)

        if raw is None:
            raw = self.fetcher()

        canonical = self.sanitizer.sanitize(raw)
        digest, proceed = self.change_gate.should_regenerate(canonical, previous_digest)

        if not proceed:
            logger.info("No change to API documentation since previous generation")
            return PipelineOutcome(
                status=OutcomeStatus.NO_CHANGE,
                digest=encode_digest(digest),
                previous_digest=encode_digest(previous_digest),
                output_path=str(output_path),
            )

        logger.info("Parsing documentation page")
        catalog = self.extractor.extract(parse_document(canonical))
        access_record = AccessRecord(timestamp=datetime.now(timezone.utc), digest=digest)

        source = self.generator.generate(catalog, access_record)
        self.generator.write(output_path, source)

        return PipelineOutcome(
            status=OutcomeStatus.REGENERATED,
            digest=access_record.digest_b64,
            previous_digest=encode_digest(previous_digest),
            output_path=str(output_path),
            category_count=len(catalog),
            endpoint_count=catalog.endpoint_count,
        )

    def extract(self, raw: Optional[bytes] = None) -> EndpointCatalog:
        """Sanitize and extract the page without checksumming or generating."""
        if raw is None:
            raw = self.fetcher()
        return self.extractor.extract(parse_document(self.sanitizer.sanitize(raw)))


def run_pipeline(
    settings: Optional[Settings] = None,
    raw: Optional[bytes] = None,
    force: bool = False
) -> PipelineOutcome:
    """Convenience function to run the pipeline once."""
    return ApiGenPipeline(settings=settings).run(raw=raw, force=force)
