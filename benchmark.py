#!/usr/bin/env python3
"""
Automated benchmarking script for the bigram job.
Runs several job configurations on a generated corpus and collects metrics.
"""

import argparse
import csv
import json
import logging
import random
import sys
from datetime import datetime
from pathlib import Path

from bigram_mr.common.config import JobConfig
from bigram_mr.coordinator.runner import LocalJobRunner

# Configuration
RESULTS_DIR = Path("benchmark_results")
VOCABULARY_SIZE = 2000
WORDS_PER_LINE = 12

# Benchmark configurations
BENCHMARKS = [
    # Experiment 1: Combiner on/off (fixed parallelism)
    {"name": "combiner_off", "maps": 4, "reduces": 2, "combiner": False,
     "description": "No map-side pre-aggregation"},
    {"name": "combiner_on", "maps": 4, "reduces": 2, "combiner": True,
     "description": "Map-side pre-aggregation"},

    # Experiment 2: Map Task Scaling
    {"name": "map_scaling_1", "maps": 1, "reduces": 2, "combiner": True, "description": "1 map task"},
    {"name": "map_scaling_2", "maps": 2, "reduces": 2, "combiner": True, "description": "2 map tasks"},
    {"name": "map_scaling_4", "maps": 4, "reduces": 2, "combiner": True, "description": "4 map tasks"},
    {"name": "map_scaling_8", "maps": 8, "reduces": 2, "combiner": True, "description": "8 map tasks"},

    # Experiment 3: Reduce Task Scaling
    {"name": "reduce_scaling_1", "maps": 4, "reduces": 1, "combiner": True, "description": "1 reduce task"},
    {"name": "reduce_scaling_2", "maps": 4, "reduces": 2, "combiner": True, "description": "2 reduce tasks"},
    {"name": "reduce_scaling_4", "maps": 4, "reduces": 4, "combiner": True, "description": "4 reduce tasks"},
    {"name": "reduce_scaling_8", "maps": 4, "reduces": 8, "combiner": True, "description": "8 reduce tasks"},
]


def generate_corpus(path: Path, target_size: int, seed: int = 42) -> int:
    """
    Write a synthetic corpus of roughly `target_size` bytes.

    Word frequencies follow a Zipf-like distribution so that a few first words
    dominate, as in natural text.

    Returns:
        Actual file size in bytes
    """
    rng = random.Random(seed)
    vocabulary = [f"w{i}" for i in range(VOCABULARY_SIZE)]
    weights = [1.0 / (rank + 1) for rank in range(VOCABULARY_SIZE)]

    written = 0
    with open(path, 'w', encoding='utf-8') as f:
        while written < target_size:
            line = ' '.join(rng.choices(vocabulary, weights=weights, k=WORDS_PER_LINE)) + '\n'
            f.write(line)
            written += len(line)
    return path.stat().st_size


def run_benchmark(config, input_path: Path, work_dir: Path, run_number=1):
    """Run a single benchmark configuration and return its result record."""
    print(f"\n{'='*70}")
    print(f"Benchmark: {config['name']} (Run {run_number})")
    print(f"Description: {config['description']}")
    print(f"Config: {config['maps']} maps, {config['reduces']} reduces, "
          f"combiner {'on' if config['combiner'] else 'off'}")
    print(f"{'='*70}")

    job_config = JobConfig(
        input_path=str(input_path),
        output_path=str(work_dir / f"{config['name']}_run{run_number}"),
        num_map_tasks=config['maps'],
        num_reduce_tasks=config['reduces'],
        use_combiner=config['combiner'],
    )

    runner = LocalJobRunner()
    runner.run(job_config)
    metrics = runner.metrics.get_metrics(job_config.job_id)
    duration = metrics.total_time_seconds
    input_mb = metrics.input_size_bytes / 1024 / 1024

    print(f"  ✓ Job completed in {duration:.2f}s")

    result = {
        "benchmark_name": config["name"],
        "description": config["description"],
        "run_number": run_number,
        "timestamp": datetime.now().isoformat(),
        "job_id": job_config.job_id,
        "input_size_bytes": metrics.input_size_bytes,
        "input_size_mb": round(input_mb, 2),
        "num_map_tasks": config["maps"],
        "num_reduce_tasks": config["reduces"],
        "use_combiner": config["combiner"],
        "success": True,
        "total_runtime_seconds": round(duration, 3),
        "throughput_mbps": round(input_mb / duration, 3) if duration > 0 else 0,
    }
    result.update({
        key: value for key, value in metrics.to_dict().items()
        if key in ("records_emitted", "records_shuffled", "output_records",
                   "combiner_reduction_ratio", "intermediate_size_bytes",
                   "peak_memory_bytes", "map_phase_time_seconds",
                   "reduce_phase_time_seconds")
    })
    return result


def save_results(results, results_dir: Path, timestamp):
    """Save results to JSON and CSV files."""
    results_dir.mkdir(parents=True, exist_ok=True)

    json_file = results_dir / f"benchmark_results_{timestamp}.json"
    with open(json_file, 'w') as f:
        json.dump(results, f, indent=2)
    print(f"\n✓ Results saved to: {json_file}")

    csv_file = results_dir / f"benchmark_results_{timestamp}.csv"
    if results:
        fieldnames = list(results[0].keys())
        with open(csv_file, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(results)
        print(f"✓ Results saved to: {csv_file}")

    return json_file, csv_file


def print_summary(results):
    """Print a summary table of results."""
    print(f"\n{'='*70}")
    print("BENCHMARK SUMMARY")
    print(f"{'='*70}")
    print(f"{'Benchmark':<20} {'Maps':>5} {'Reduces':>7} {'Shuffled':>10} {'Runtime':>10}")
    print(f"{'-'*70}")

    for r in results:
        print(f"{r['benchmark_name']:<20} {r['num_map_tasks']:>5} "
              f"{r['num_reduce_tasks']:>7} {r['records_shuffled']:>10} "
              f"{r['total_runtime_seconds']:>9.2f}s")

    print(f"{'='*70}")


def main(argv=None):
    """Main benchmarking workflow."""
    parser = argparse.ArgumentParser(description="Benchmark the bigram job on a generated corpus")
    parser.add_argument('--runs', type=int, default=1, help='Runs per benchmark (default: 1)')
    parser.add_argument('--size-kb', type=int, default=1024, help='Corpus size in KB (default: 1024)')
    parser.add_argument('--results-dir', default=str(RESULTS_DIR), help='Where results are written')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING)

    results_dir = Path(args.results_dir)
    work_dir = results_dir / "work"
    work_dir.mkdir(parents=True, exist_ok=True)

    input_path = work_dir / "corpus.txt"
    size = generate_corpus(input_path, args.size_kb * 1024)
    print(f"✓ Generated corpus: {input_path} ({size / 1024 / 1024:.2f} MB)")

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    all_results = []
    for config in BENCHMARKS:
        for run in range(1, args.runs + 1):
            all_results.append(run_benchmark(config, input_path, work_dir, run_number=run))

    json_file, _ = save_results(all_results, results_dir, timestamp)
    print_summary(all_results)
    print(f"\nGenerate plots: python plot_results.py {json_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
