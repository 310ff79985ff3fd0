from .ai_extractor import AIExtractor
from .json_salvage import salvage_json, salvage_json_object
from .normalizer import normalize_requirements
from .orchestrator import (
    ExtractionOrchestrator,
    ExtractionRun,
    build_orchestrator,
    merge_and_deduplicate,
    should_skip_ai_extraction,
)
from .policy import ExtractionPolicy
from .quality_merger import QualityMerger
from .regex_extractor import extract_with_regex

__all__ = [
    "AIExtractor",
    "ExtractionOrchestrator",
    "ExtractionPolicy",
    "ExtractionRun",
    "QualityMerger",
    "build_orchestrator",
    "extract_with_regex",
    "merge_and_deduplicate",
    "normalize_requirements",
    "salvage_json",
    "salvage_json_object",
    "should_skip_ai_extraction",
]
