#!/usr/bin/env python3
"""
Generate plots from benchmark results.
"""

import json
import sys
from pathlib import Path
from collections import defaultdict

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

# Configuration
PLOTS_DIR = Path("benchmark_results/plots")


def load_results(json_file):
    """Load benchmark results from JSON file."""
    with open(json_file, 'r') as f:
        return json.load(f)


def aggregate_runs(results):
    """
    Aggregate multiple runs of the same benchmark.
    Returns dict: benchmark_name -> {avg_runtime, std_runtime, config, ...}
    """
    by_benchmark = defaultdict(list)

    for r in results:
        if r['success']:
            by_benchmark[r['benchmark_name']].append(r)

    aggregated = {}
    for name, runs in by_benchmark.items():
        runtimes = [r['total_runtime_seconds'] for r in runs]
        shuffled = [r['records_shuffled'] for r in runs]

        first = runs[0]

        aggregated[name] = {
            'benchmark_name': name,
            'description': first['description'],
            'num_map_tasks': first['num_map_tasks'],
            'num_reduce_tasks': first['num_reduce_tasks'],
            'use_combiner': first['use_combiner'],
            'avg_runtime': float(np.mean(runtimes)),
            'std_runtime': float(np.std(runtimes)),
            'min_runtime': float(np.min(runtimes)),
            'max_runtime': float(np.max(runtimes)),
            'avg_records_shuffled': float(np.mean(shuffled)),
            'num_runs': len(runs)
        }

    return aggregated


def _scaling_series(aggregated, prefix, field):
    data = sorted((v[field], v['avg_runtime'], v['std_runtime'])
                  for k, v in aggregated.items() if k.startswith(prefix))
    return data


def plot_task_scaling(aggregated, prefix, field, label, output_file):
    """Plot runtime against the number of map or reduce tasks."""
    data = _scaling_series(aggregated, prefix, field)
    if not data:
        print(f"⚠️  No {prefix} data found")
        return False

    tasks, runtimes, stds = zip(*data)

    plt.figure(figsize=(10, 6))
    plt.errorbar(tasks, runtimes, yerr=stds, marker='o', capsize=5,
                 linewidth=2, markersize=8)
    plt.xlabel(label, fontsize=12)
    plt.ylabel('Runtime (seconds)', fontsize=12)
    plt.title(f'Bigram Job: {label}', fontsize=14, fontweight='bold')
    plt.xticks(tasks)
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(output_file, dpi=150, bbox_inches='tight')
    print(f"✓ Saved: {output_file}")
    plt.close()
    return True


def plot_combiner_effect(aggregated, output_file):
    """Bar chart of shuffled records and runtime with and without the combiner."""
    off = aggregated.get('combiner_off')
    on = aggregated.get('combiner_on')
    if not off or not on:
        print("⚠️  No combiner comparison data found")
        return False

    labels = ['Combiner off', 'Combiner on']
    x = np.arange(len(labels))

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))
    ax1.bar(x, [off['avg_records_shuffled'], on['avg_records_shuffled']], color=['gray', 'steelblue'])
    ax1.set_xticks(x)
    ax1.set_xticklabels(labels)
    ax1.set_ylabel('Intermediate records')
    ax1.set_title('Shuffle volume')

    ax2.bar(x, [off['avg_runtime'], on['avg_runtime']],
            yerr=[off['std_runtime'], on['std_runtime']], capsize=5, color=['gray', 'steelblue'])
    ax2.set_xticks(x)
    ax2.set_xticklabels(labels)
    ax2.set_ylabel('Runtime (seconds)')
    ax2.set_title('Runtime')

    fig.tight_layout()
    fig.savefig(output_file, dpi=150, bbox_inches='tight')
    print(f"✓ Saved: {output_file}")
    plt.close(fig)
    return True


def generate_plots(aggregated, plots_dir: Path):
    plots_dir.mkdir(parents=True, exist_ok=True)
    plot_combiner_effect(aggregated, plots_dir / 'combiner_effect.png')
    plot_task_scaling(aggregated, 'map_scaling_', 'num_map_tasks', 'Map Task Parallelism',
                      plots_dir / 'map_scaling.png')
    plot_task_scaling(aggregated, 'reduce_scaling_', 'num_reduce_tasks', 'Reduce Task Parallelism',
                      plots_dir / 'reduce_scaling.png')


def main():
    if len(sys.argv) < 2:
        print("Usage: python plot_results.py <benchmark_results.json>")
        return 1

    results = load_results(sys.argv[1])
    aggregated = aggregate_runs(results)
    if not aggregated:
        print("❌ No successful runs to plot")
        return 1

    generate_plots(aggregated, PLOTS_DIR)
    return 0


if __name__ == "__main__":
    sys.exit(main())
