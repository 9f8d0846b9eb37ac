"""
Black-box model backends.

Every backend is a callable taking the (1, 96, 96, 3) float32 input tensor and
returning the raw output array of the engine. The architecture and weights
behind a model file are opaque to the rest of the package.
"""

import logging
import os
from typing import Callable, Optional, Protocol

import numpy as np

from .errors import ModelLoadError

logger = logging.getLogger(__name__)

# Model file suffixes per backend
BACKEND_SUFFIXES = {
    "tflite": [".tflite"],
    "onnx": [".onnx"],
    "torchscript": [".pt", ".pth", ".torchscript"],
}


def get_available_backends() -> list[str]:
    """Get list of supported model backends."""
    return list(BACKEND_SUFFIXES)


def get_backend(path: str) -> str:
    """Get the backend name for a model file from its suffix."""
    suffix = os.path.splitext(path)[1].lower()
    for backend, suffixes in BACKEND_SUFFIXES.items():
        if suffix in suffixes:
            return backend
    raise ModelLoadError(
        f"Unsupported model file: {path}. "
        f"Supported suffixes: {[s for sfx in BACKEND_SUFFIXES.values() for s in sfx]}"
    )


class BlackBoxModel(Protocol):
    """A pure function from an input tensor to an output tensor."""

    name: str

    def __call__(self, tensor: np.ndarray) -> np.ndarray: ...


class CallableModel:
    """Wraps a plain numpy-in, numpy-out function as a model."""

    def __init__(self, fn: Callable[[np.ndarray], np.ndarray], name: str = "callable"):
        self.fn = fn
        self.name = name

    def __call__(self, tensor: np.ndarray) -> np.ndarray:
        return np.asarray(self.fn(tensor), dtype=np.float32)


class TFLiteModel:
    """TensorFlow Lite interpreter over a single-input, single-output model."""

    def __init__(self, path: str):
        try:
            import tensorflow as tf
        except ImportError as e:
            raise ModelLoadError(
                "TFLite models need tensorflow: pip install 'face-attributes[tflite]'"
            ) from e

        self.name = os.path.basename(path)
        try:
            self.interpreter = tf.lite.Interpreter(model_path=path)
            self.interpreter.allocate_tensors()
        except (ValueError, RuntimeError) as e:
            raise ModelLoadError(f"Cannot load TFLite model {path}: {e}") from e

        self.input_index = self.interpreter.get_input_details()[0]["index"]
        self.output_index = self.interpreter.get_output_details()[0]["index"]

    def __call__(self, tensor: np.ndarray) -> np.ndarray:
        self.interpreter.set_tensor(self.input_index, tensor)
        self.interpreter.invoke()
        return self.interpreter.get_tensor(self.output_index)


class OnnxModel:
    """ONNX Runtime session on the CPU execution provider."""

    def __init__(self, path: str):
        try:
            import onnxruntime as ort
        except ImportError as e:
            raise ModelLoadError("ONNX models need onnxruntime: pip install onnxruntime") from e

        self.name = os.path.basename(path)
        try:
            self.session = ort.InferenceSession(path, providers=["CPUExecutionProvider"])
        except Exception as e:
            # onnxruntime raises its own pybind exception types
            raise ModelLoadError(f"Cannot load ONNX model {path}: {e}") from e

        self.input_name = self.session.get_inputs()[0].name

    def __call__(self, tensor: np.ndarray) -> np.ndarray:
        return self.session.run(None, {self.input_name: tensor})[0]


class TorchScriptModel:
    """TorchScript module fed with the NHWC tensor as-is."""

    def __init__(self, path: str, device: str = "cpu"):
        import torch

        self.name = os.path.basename(path)
        self.device = torch.device(device)
        try:
            self.model = torch.jit.load(path, map_location=self.device)
        except (RuntimeError, ValueError) as e:
            raise ModelLoadError(f"Cannot load TorchScript model {path}: {e}") from e
        self.model.eval()

    def __call__(self, tensor: np.ndarray) -> np.ndarray:
        import torch

        inputs = torch.from_numpy(tensor).to(self.device)
        with torch.no_grad():
            outputs = self.model(inputs)
        return outputs.cpu().numpy()


def load_model(path: str, device: Optional[str] = "cpu") -> BlackBoxModel:
    """
    Load a model file with the backend matching its suffix.

    Args:
        path: Path to a .tflite, .onnx or TorchScript (.pt/.pth/.torchscript) file
        device: Device for TorchScript models ("cuda", "cpu", "mps")

    Returns:
        Callable model

    Raises:
        ModelLoadError: If the file is missing, unsupported or corrupt
    """
    if not os.path.isfile(path):
        raise ModelLoadError(f"Model file not found: {path}")

    backend = get_backend(path)
    if backend == "tflite":
        model = TFLiteModel(path)
    elif backend == "onnx":
        model = OnnxModel(path)
    else:
        model = TorchScriptModel(path, device=device or "cpu")

    logger.info("Loaded %s model from: %s", backend, path)
    return model
