"""Output formatting for evaluation results."""

from spatialeval.output.report import SpatialEvaluationResult

__all__ = ["SpatialEvaluationResult"]
