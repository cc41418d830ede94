"""Check functions and a scorecard for grading Kubernetes object definitions."""

__version__ = "0.1.0"