"""
Configuration settings for face attribute prediction.
"""

import os
from dataclasses import dataclass

# Label tables, ordered by model output index
AGE_GROUPS = ["Child", "Teen", "Young Adult", "Adult", "Senior"]
GENDER_LABELS = ("Male", "Female")
EMOTIONS = ["Happy", "Neutral", "Sad"]

# All three models expect a [1, IMAGE_SIZE, IMAGE_SIZE, 3] float32 input
IMAGE_SIZE = 96
NUM_CHANNELS = 3
INPUT_SHAPE = (1, IMAGE_SIZE, IMAGE_SIZE, NUM_CHANNELS)

RESAMPLE_FILTERS = ["nearest", "bilinear", "bicubic", "lanczos"]


@dataclass
class Config:
    """Model and preprocessing configuration."""

    # Paths
    model_dir: str = "./models"
    age_model: str = "age_model.tflite"
    gender_model: str = "gender_model.tflite"
    emotion_model: str = "emotion_model.tflite"

    # Preprocessing
    image_size: int = IMAGE_SIZE
    resample: str = "bilinear"  # "nearest", "bilinear", "bicubic", "lanczos"

    # Decoding
    gender_threshold: float = 0.5

    # Device for TorchScript models
    device: str = "auto"  # "auto", "cuda", "cpu", "mps"

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, **overrides) -> "Config":
        """Build a config from FACE_ATTR_* environment variables."""
        env = {
            "model_dir": os.environ.get("FACE_ATTR_MODEL_DIR"),
            "device": os.environ.get("FACE_ATTR_DEVICE"),
            "log_level": os.environ.get("FACE_ATTR_LOG_LEVEL"),
        }
        values = {key: value for key, value in env.items() if value}
        values.update(overrides)
        return cls(**values)

    def model_path(self, task_name: str) -> str:
        """Get the model file path for a task ("age", "gender", "emotion")."""
        filenames = {
            "age": self.age_model,
            "gender": self.gender_model,
            "emotion": self.emotion_model,
        }
        if task_name not in filenames:
            raise ValueError(f"Unknown task: {task_name}. Available: {list(filenames)}")
        return os.path.join(self.model_dir, filenames[task_name])

    def get_device(self) -> str:
        """Get the appropriate device for TorchScript inference."""
        import torch

        if self.device == "auto":
            if torch.cuda.is_available():
                return "cuda"
            elif hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
                return "mps"
            else:
                return "cpu"
        return self.device
