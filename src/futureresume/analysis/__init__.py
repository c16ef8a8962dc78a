"""Local, deterministic resume analysis heuristics."""

from futureresume.analysis.keywords import (
    STOP_WORDS,
    calculate_matching_score,
    extract_keywords,
    generate_recommendations,
    missing_keywords,
)
from futureresume.analysis.scoring import (
    AtsFactors,
    AtsScore,
    ContentOptimization,
    ResumeAnalysis,
    analyze_formatting,
    analyze_length,
    analyze_resume,
    analyze_sections,
    calculate_ats_score,
    calculate_keyword_match,
    improve_formatting,
    keyword_improvements,
)

__all__ = [
    "AtsFactors",
    "AtsScore",
    "ContentOptimization",
    "ResumeAnalysis",
    "STOP_WORDS",
    "analyze_formatting",
    "analyze_length",
    "analyze_resume",
    "analyze_sections",
    "calculate_ats_score",
    "calculate_keyword_match",
    "calculate_matching_score",
    "extract_keywords",
    "generate_recommendations",
    "improve_formatting",
    "keyword_improvements",
    "missing_keywords",
]
