"""
Exceptions raised by the prediction pipeline.
"""

from typing import Optional


class FaceAttributeError(Exception):
    """Base class for all prediction pipeline errors."""


class DecodeError(FaceAttributeError):
    """The image source could not be decoded into pixel data."""


class InferenceError(FaceAttributeError):
    """A model invocation failed or produced unusable output."""

    def __init__(self, message: str, task_name: Optional[str] = None):
        super().__init__(message)
        self.task_name = task_name


class ModelLoadError(FaceAttributeError):
    """A model file is missing, unsupported or corrupt."""
