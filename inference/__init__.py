"""
Inference module for the city telemetry simulation.
Provides rule-based predictions and the document-analysis client.
"""

from inference.predictions import derive_predictions, SEVERITY_ORDER
from inference.document_analyzer import DocumentAnalyzer, AnalysisResult, extract_structured_update

__all__ = [
    "derive_predictions",
    "SEVERITY_ORDER",
    "DocumentAnalyzer",
    "AnalysisResult",
    "extract_structured_update",
]
