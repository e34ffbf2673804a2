from .llm import OpenAIGenerationClient, extract_json_object, parse_recommendation
from .pipeline import AdvisorPipeline, default_pipeline
from .report import build_report, write_report
from .session import AdvisorSession, SessionState

__all__ = [
    "OpenAIGenerationClient",
    "extract_json_object",
    "parse_recommendation",
    "AdvisorPipeline",
    "default_pipeline",
    "build_report",
    "write_report",
    "AdvisorSession",
    "SessionState",
]
