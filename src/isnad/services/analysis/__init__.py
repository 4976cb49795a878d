"""Chain analysis — match, grade and roll up an extracted isnād."""

from isnad.services.analysis.service import (
    ChainAnalysis,
    ChainAnalysisError,
    ChainAnalysisService,
    compiler_narrator,
)

__all__ = [
    "ChainAnalysis",
    "ChainAnalysisError",
    "ChainAnalysisService",
    "compiler_narrator",
]
