#!/usr/bin/env python3
"""
Benchmark inference latency of the age, gender and emotion models.

Usage:
    python scripts/benchmark.py photo.jpg
    python scripts/benchmark.py photo.jpg --task gender --num-runs 500
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.face_attributes import (
    Config,
    DecodeError,
    FacePredictor,
    InferenceError,
    ModelLoadError,
    get_available_tasks,
    preprocess,
)


def parse_args():
    parser = argparse.ArgumentParser(
        description="Benchmark model inference latency",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("image", type=str, help="Path to the input image")

    parser.add_argument(
        "--task",
        "-t",
        type=str,
        default="all",
        choices=get_available_tasks() + ["all"],
        help="Task to benchmark",
    )
    parser.add_argument(
        "--model-dir",
        type=str,
        default=os.environ.get("FACE_ATTR_MODEL_DIR", "./models"),
        help="Directory containing the three model files",
    )
    parser.add_argument("--num-runs", type=int, default=100, help="Number of timed runs")
    parser.add_argument("--warmup-runs", type=int, default=10, help="Number of warmup runs")
    parser.add_argument(
        "--device",
        type=str,
        default="auto",
        choices=["auto", "cuda", "cpu", "mps"],
        help="Device for TorchScript models",
    )

    return parser.parse_args()


def main():
    args = parse_args()
    logging.basicConfig(level=logging.INFO)

    config = Config(model_dir=args.model_dir, device=args.device)

    try:
        predictor = FacePredictor.from_config(config)
        tensor = preprocess(args.image, image_size=config.image_size, resample=config.resample)
    except (ModelLoadError, DecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.task == "all":
        tasks = get_available_tasks()
    else:
        tasks = [args.task]

    print(f"\n{'=' * 60}")
    print("INFERENCE BENCHMARK")
    print(f"{'=' * 60}")
    print(f"Tasks: {', '.join(tasks)}")
    print(f"Model directory: {args.model_dir}")
    print(f"Runs: {args.num_runs} (+{args.warmup_runs} warmup)")
    print(f"{'=' * 60}")

    for task in tasks:
        try:
            results = predictor.benchmark(
                task, tensor, num_runs=args.num_runs, warmup_runs=args.warmup_runs
            )
        except InferenceError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        print(f"\n--- {task.upper()} ---")
        print(f"  Mean latency: {results['mean_ms']:.2f} ms")
        print(f"  Std dev: {results['std_ms']:.2f} ms")
        print(f"  Min/Max: {results['min_ms']:.2f} / {results['max_ms']:.2f} ms")
        print(f"  P95 latency: {results['p95_ms']:.2f} ms")
        print(f"  P99 latency: {results['p99_ms']:.2f} ms")
        print(f"  Throughput: {results['throughput_fps']:.1f} FPS")

    return 0


if __name__ == "__main__":
    sys.exit(main())
