"""
Face Attributes - age group, gender and emotion from a single photo

Runs three pre-trained black-box classifiers (TFLite, ONNX or TorchScript)
on one shared 96x96 normalized tensor and reports a label and latency for each.
"""

__version__ = "1.0.0"

from .config import AGE_GROUPS, EMOTIONS, GENDER_LABELS, Config
from .errors import DecodeError, FaceAttributeError, InferenceError, ModelLoadError
from .inference import (
    FacePredictor,
    PredictionBundle,
    PredictionOutcome,
    PredictionResult,
)
from .models import CallableModel, get_available_backends, load_model
from .preprocessing import center_crop_box, load_image, normalize, preprocess
from .tasks import ClassifierTask, get_available_tasks, get_task

__all__ = [
    "Config",
    "AGE_GROUPS",
    "GENDER_LABELS",
    "EMOTIONS",
    "FaceAttributeError",
    "DecodeError",
    "InferenceError",
    "ModelLoadError",
    "load_image",
    "center_crop_box",
    "normalize",
    "preprocess",
    "CallableModel",
    "load_model",
    "get_available_backends",
    "ClassifierTask",
    "get_task",
    "get_available_tasks",
    "FacePredictor",
    "PredictionResult",
    "PredictionBundle",
    "PredictionOutcome",
]
