"""
Classifier task definitions: output size and decode rule per model.
"""

from dataclasses import dataclass
from functools import partial
from typing import Callable, Sequence

import numpy as np

from .config import AGE_GROUPS, EMOTIONS, GENDER_LABELS


def argmax_label(probs: np.ndarray, labels: Sequence[str]) -> str:
    """
    Map the highest scoring index to its label.

    Ties resolve to the lowest index (np.argmax returns the first maximum).
    """
    return labels[int(np.argmax(probs))]


def threshold_label(
    probs: np.ndarray, threshold: float, below: str, at_or_above: str
) -> str:
    """Label a single sigmoid output; a value equal to the threshold is at_or_above."""
    return below if probs[0] < threshold else at_or_above


@dataclass(frozen=True)
class ClassifierTask:
    """One classifier: its name, expected output length and decode rule."""

    name: str
    output_size: int
    decode: Callable[[np.ndarray], str]


def make_age_task() -> ClassifierTask:
    return ClassifierTask(
        name="age",
        output_size=len(AGE_GROUPS),
        decode=partial(argmax_label, labels=AGE_GROUPS),
    )


def make_gender_task(threshold: float = 0.5) -> ClassifierTask:
    male, female = GENDER_LABELS
    return ClassifierTask(
        name="gender",
        output_size=1,
        decode=partial(threshold_label, threshold=threshold, below=male, at_or_above=female),
    )


def make_emotion_task() -> ClassifierTask:
    return ClassifierTask(
        name="emotion",
        output_size=len(EMOTIONS),
        decode=partial(argmax_label, labels=EMOTIONS),
    )


AGE_TASK = make_age_task()
GENDER_TASK = make_gender_task()
EMOTION_TASK = make_emotion_task()

# Prediction order for a full request
TASKS = {task.name: task for task in (AGE_TASK, GENDER_TASK, EMOTION_TASK)}


def get_available_tasks() -> list[str]:
    """Get list of task names in prediction order."""
    return list(TASKS)


def get_task(name: str) -> ClassifierTask:
    """Look up a task by name."""
    if name not in TASKS:
        raise ValueError(f"Invalid task name: {name}. Available: {get_available_tasks()}")
    return TASKS[name]
