"""Exception hierarchy shared across the inliner."""

from __future__ import annotations


class InlinerError(Exception):
    """Base error for all inliner failures.

    Parameters
    ----------
    message : str
        Human-readable description.
    exit_code : int | None, default=None
        Process exit code used by the CLI. Falls back to the class default.
    """

    exit_code: int = 1

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(InlinerError):
    """Invalid pipeline configuration."""

    exit_code = 2


class DependencyError(InlinerError):
    """A required external tool or library is unavailable."""

    exit_code = 3


class BundleError(InlinerError):
    """The bundler failed to produce a self-contained script."""


class StepContractError(InlinerError):
    """A pipeline step broke the context/read-write contract."""

    exit_code = 4


class StepFailedError(InlinerError):
    """A pipeline step failed without supplying its own error."""


class DocumentWriteError(InlinerError):
    """A rewritten document could not be written back."""


class InliningThresholdError(InlinerError):
    """Too many asset references could not be inlined."""
