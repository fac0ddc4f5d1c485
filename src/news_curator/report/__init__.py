"""Daily digest synthesis and grading."""

from news_curator.report.evidence_validator import EvidenceValidator, evidence_score
from news_curator.report.quality_evaluator import QualityEvaluator, final_quality_score
from news_curator.report.synthesizer import ReportSynthesizer

__all__ = [
    "ReportSynthesizer",
    "EvidenceValidator",
    "evidence_score",
    "QualityEvaluator",
    "final_quality_score",
]
