#!/usr/bin/env python3
"""
CLI script for predicting age group, gender and emotion from an image.

Usage:
    python scripts/predict.py photo.jpg
    python scripts/predict.py photo.jpg --model-dir ./models --json
"""

import argparse
import json
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.face_attributes import Config, FacePredictor, ModelLoadError


def parse_args():
    parser = argparse.ArgumentParser(
        description="Predict age group, gender and emotion from a face image",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("image", type=str, help="Path to the input image")

    parser.add_argument(
        "--model-dir",
        type=str,
        default=os.environ.get("FACE_ATTR_MODEL_DIR", "./models"),
        help="Directory containing the three model files",
    )
    parser.add_argument("--age-model", type=str, default="age_model.tflite", help="Age model file")
    parser.add_argument(
        "--gender-model", type=str, default="gender_model.tflite", help="Gender model file"
    )
    parser.add_argument(
        "--emotion-model", type=str, default="emotion_model.tflite", help="Emotion model file"
    )

    parser.add_argument(
        "--device",
        type=str,
        default="auto",
        choices=["auto", "cuda", "cpu", "mps"],
        help="Device for TorchScript models",
    )

    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (DEBUG shows raw probabilities)",
    )

    return parser.parse_args()


def main():
    args = parse_args()
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    config = Config(
        model_dir=args.model_dir,
        age_model=args.age_model,
        gender_model=args.gender_model,
        emotion_model=args.emotion_model,
        device=args.device,
        log_level=args.log_level,
    )

    try:
        predictor = FacePredictor.from_config(config)
    except ModelLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    outcome = predictor.predict_image(args.image)
    if not outcome.ok:
        print(outcome.error, file=sys.stderr)
        return 1

    bundle = outcome.bundle
    if args.json:
        print(json.dumps(bundle.to_dict(), indent=2))
        return 0

    print(f"\n{'=' * 60}")
    print(f"PREDICTIONS: {os.path.basename(args.image)}")
    print(f"{'=' * 60}")
    print(f"Age Group: {bundle.age.label} ({bundle.age.elapsed_ms} ms)")
    print(f"Gender:    {bundle.gender.label} ({bundle.gender.elapsed_ms} ms)")
    print(f"Emotion:   {bundle.emotion.label} ({bundle.emotion.elapsed_ms} ms)")
    print(f"{'=' * 60}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
