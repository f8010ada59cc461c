"""Dispatch/result bridge: correlation and output normalization."""

from aoflux.bridge.correlator import (
    Failure,
    Outcome,
    OutcomeKind,
    ResultCorrelator,
    Success,
    classify,
    failure_from,
)
from aoflux.bridge.normalize import clean_text, normalize

__all__ = [
    "Failure",
    "Outcome",
    "OutcomeKind",
    "ResultCorrelator",
    "Success",
    "classify",
    "clean_text",
    "failure_from",
    "normalize",
]
