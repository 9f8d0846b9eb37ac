"""
Inference utilities for age group, gender and emotion prediction.
"""

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Mapping, Optional, Union

import numpy as np

from .config import INPUT_SHAPE, Config
from .errors import DecodeError, InferenceError, ModelLoadError
from .models import BlackBoxModel, get_backend, load_model
from .preprocessing import ImageSource, preprocess
from .tasks import (
    ClassifierTask,
    get_available_tasks,
    make_age_task,
    make_emotion_task,
    make_gender_task,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PredictionResult:
    """Decoded label and latency of a single model call."""

    label: str
    elapsed_ms: int
    probabilities: tuple[float, ...] = field(default=(), compare=False)


@dataclass(frozen=True)
class PredictionBundle:
    """The three independent predictions for one image."""

    age: PredictionResult
    gender: PredictionResult
    emotion: PredictionResult

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PredictionOutcome:
    """Result of one request: either a bundle or an error message."""

    bundle: Optional[PredictionBundle] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FacePredictor:
    """
    High-level interface for face attribute inference.

    Holds one black-box model per task. Models are loaded once and only read
    afterwards, so a predictor can serve any number of sequential requests.
    """

    def __init__(self, models: Mapping[str, BlackBoxModel], config: Optional[Config] = None):
        """
        Initialize the predictor.

        Args:
            models: Model per task name ("age", "gender", "emotion")
            config: Configuration object
        """
        self.config = config or Config()

        missing = [name for name in get_available_tasks() if name not in models]
        if missing:
            raise ModelLoadError(f"No model given for tasks: {missing}")
        self.models = dict(models)

        self.tasks = {
            "age": make_age_task(),
            "gender": make_gender_task(self.config.gender_threshold),
            "emotion": make_emotion_task(),
        }

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "FacePredictor":
        """
        Load all three models from config.model_dir.

        Raises:
            ModelLoadError: If any model file is missing or cannot be loaded
        """
        config = config or Config()
        models = {}
        for name in get_available_tasks():
            path = config.model_path(name)
            device = config.get_device() if get_backend(path) == "torchscript" else None
            models[name] = load_model(path, device=device)
        return cls(models, config)

    def _resolve_task(self, task: Union[str, ClassifierTask]) -> ClassifierTask:
        if isinstance(task, ClassifierTask):
            return task
        if task not in self.tasks:
            raise ValueError(f"Invalid task name: {task}. Available: {list(self.tasks)}")
        return self.tasks[task]

    def _check_tensor(self, tensor: np.ndarray, task_name: str):
        shape = getattr(tensor, "shape", None)
        if shape != INPUT_SHAPE or tensor.dtype != np.float32:
            raise InferenceError(
                f"{task_name} model expects a float32 tensor of shape {INPUT_SHAPE}, "
                f"got {getattr(tensor, 'dtype', type(tensor).__name__)} {shape}",
                task_name,
            )

    def _invoke(self, task: ClassifierTask, model: BlackBoxModel, tensor: np.ndarray):
        try:
            return model(tensor)
        except Exception as e:
            raise InferenceError(f"{task.name} model failed: {e}", task.name) from e

    def predict(self, task: Union[str, ClassifierTask], tensor: np.ndarray) -> PredictionResult:
        """
        Run one task's model on a normalized tensor.

        Args:
            task: Task name or ClassifierTask
            tensor: Normalized (1, 96, 96, 3) float32 tensor

        Returns:
            PredictionResult with the decoded label and the model call latency

        Raises:
            InferenceError: If the tensor is malformed, the model fails, or
                its output does not have the task's length
        """
        task = self._resolve_task(task)
        model = self.models[task.name]
        self._check_tensor(tensor, task.name)

        start = time.perf_counter_ns()
        output = self._invoke(task, model, tensor)
        elapsed_ms = (time.perf_counter_ns() - start) // 1_000_000

        try:
            probs = np.asarray(output, dtype=np.float32).reshape(-1)
        except (TypeError, ValueError) as e:
            raise InferenceError(f"{task.name} model returned invalid output: {e}", task.name) from e
        if probs.size != task.output_size:
            raise InferenceError(
                f"{task.name} model returned {probs.size} values, expected {task.output_size}",
                task.name,
            )

        label = task.decode(probs)
        logger.debug(
            "%s probs: %s | label: %s | time: %d ms",
            task.name,
            ", ".join(f"{p:.4f}" for p in probs),
            label,
            elapsed_ms,
        )

        return PredictionResult(
            label=label,
            elapsed_ms=elapsed_ms,
            probabilities=tuple(float(p) for p in probs),
        )

    def predict_age(self, tensor: np.ndarray) -> PredictionResult:
        return self.predict("age", tensor)

    def predict_gender(self, tensor: np.ndarray) -> PredictionResult:
        return self.predict("gender", tensor)

    def predict_emotion(self, tensor: np.ndarray) -> PredictionResult:
        return self.predict("emotion", tensor)

    def predict_all(self, tensor: np.ndarray) -> PredictionBundle:
        """Run the three tasks in order on the same tensor; the first failure aborts."""
        return PredictionBundle(
            age=self.predict_age(tensor),
            gender=self.predict_gender(tensor),
            emotion=self.predict_emotion(tensor),
        )

    def predict_image(self, image: ImageSource) -> PredictionOutcome:
        """
        Decode, normalize and classify one image.

        The image is normalized once and the tensor is shared by all three
        models. Decode and inference failures are reported in the outcome
        instead of raised; no partial bundle is returned.

        Args:
            image: Image path, bytes, file object, PIL Image or numpy array

        Returns:
            PredictionOutcome holding either the bundle or an error message
        """
        try:
            tensor = preprocess(
                image, image_size=self.config.image_size, resample=self.config.resample
            )
            bundle = self.predict_all(tensor)
        except (DecodeError, InferenceError) as e:
            logger.exception("Prediction failed")
            return PredictionOutcome(error=f"Error: {e}")

        return PredictionOutcome(bundle=bundle)

    def benchmark(
        self,
        task: Union[str, ClassifierTask],
        tensor: np.ndarray,
        num_runs: int = 100,
        warmup_runs: int = 10,
    ) -> dict:
        """
        Benchmark one task's inference latency.

        Args:
            task: Task name or ClassifierTask
            tensor: Normalized input tensor
            num_runs: Number of timed runs
            warmup_runs: Number of warmup runs

        Returns:
            Dictionary with timing statistics

        Raises:
            InferenceError: If the tensor is malformed or the model fails
        """
        task = self._resolve_task(task)
        self._check_tensor(tensor, task.name)
        model = self.models[task.name]

        # Warmup
        for _ in range(warmup_runs):
            self._invoke(task, model, tensor)

        # Timed runs
        times = []
        for _ in range(num_runs):
            start = time.perf_counter()
            self._invoke(task, model, tensor)
            end = time.perf_counter()
            times.append((end - start) * 1000)  # Convert to ms

        times = np.array(times)

        return {
            "mean_ms": float(np.mean(times)),
            "std_ms": float(np.std(times)),
            "min_ms": float(np.min(times)),
            "max_ms": float(np.max(times)),
            "median_ms": float(np.median(times)),
            "p95_ms": float(np.percentile(times, 95)),
            "p99_ms": float(np.percentile(times, 99)),
            "throughput_fps": float(1000 / np.mean(times)) if np.mean(times) > 0 else float("inf"),
        }
