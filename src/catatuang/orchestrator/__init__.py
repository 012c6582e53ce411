"""Orchestration module."""
from .recorder import TransactionRecorder, RecordResult, FailedCandidate

__all__ = ["TransactionRecorder", "RecordResult", "FailedCandidate"]
