"""
apigen

Keeps a generated Alpha Vantage client binding in sync with the provider's
HTML documentation page.
- Sanitizer:     strips per-load artifacts so the page can be checksummed
- ChangeGate:    skips the run when the page digest matches the last artifact
- Extractor:     recovers categories, endpoints and parameters from the page
- CodeGenerator: renders the binding module with a checksum footer

Public API surface:
  Pipeline: ApiGenPipeline, run_pipeline
  Pipeline stage classes: Sanitizer, ChangeGate, Extractor, CodeGenerator
  Data models: AccessRecord, Category, Endpoint, Parameter, EndpointCatalog, PipelineOutcome
  Error types: FetchError, SanitizationError, StructuralExtractionError, GenerationIOError
"""

# --- Pipeline stage classes ---
from .sanitizer import Sanitizer
from .change_gate import ChangeGate, read_previous_digest
from .extractor import Extractor, parse_document
from .generator import CodeGenerator
from .main import ApiGenPipeline, run_pipeline
from .config import Settings

# --- Data models (used to pass data between stages and to callers) ---
from .schemas import (AccessRecord, Category, Endpoint, EndpointCatalog, OutcomeStatus,
                      Parameter, PipelineOutcome)

# --- Exceptions (all fatal; callers should catch ApiGenError) ---
from .exceptions import (ApiGenError, FetchError, GenerationIOError, SanitizationError,
                         StructuralExtractionError)

__version__ = "0.1.0"
__all__ = [
    "Sanitizer",
    "ChangeGate",
    "read_previous_digest",
    "Extractor",
    "parse_document",
    "CodeGenerator",
    "ApiGenPipeline",
    "run_pipeline",
    "Settings",
    "AccessRecord",
    "Category",
    "Endpoint",
    "EndpointCatalog",
    "OutcomeStatus",
    "Parameter",
    "PipelineOutcome",
    "ApiGenError",
    "FetchError",
    "GenerationIOError",
    "SanitizationError",
    "StructuralExtractionError",
]
