"""
Bigram Relative Frequency CLI
Provides commands for running a job and inspecting its results
"""

import argparse
import logging
import sys

from bigram_mr.common.config import JobConfig, LOG_LEVEL
from bigram_mr.common.errors import BigramError
from bigram_mr.common.keys import MAX_TOKEN_LENGTH
from bigram_mr.common.records import read_output
from bigram_mr.coordinator.runner import LocalJobRunner

logger = logging.getLogger(__name__)


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or greater, got {value}")
    return number


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def run_job(args):
    """Run a bigram relative-frequency job"""
    config = JobConfig(
        input_path=args.input,
        output_path=args.output,
        num_map_tasks=args.num_map_tasks,
        num_reduce_tasks=args.num_reduce_tasks,
        use_combiner=not args.no_combiner,
        max_token_length=args.max_token_length,
        overwrite_output=not args.no_overwrite,
        max_workers=args.max_workers,
        max_task_attempts=args.max_task_attempts,
        intermediate_dir=args.intermediate_dir,
        keep_intermediate=args.keep_intermediate,
    )
    if args.job_id:
        config.job_id = args.job_id

    runner = LocalJobRunner()
    try:
        job = runner.run(config)
    except BigramError as e:
        print(f"Error: {e}")
        return 1

    metrics = runner.metrics.get_metrics(job.job_id)
    print(f"✓ Job completed successfully!")
    print(f"  Job ID: {job.job_id}")
    print(f"  Output path: {config.output_path}")
    print(f"  Records: {metrics.records_emitted} emitted, {metrics.records_shuffled} shuffled, "
          f"{metrics.output_records} written")
    print(f"  Runtime: {metrics.total_time_seconds:.2f}s")

    if args.metrics_file:
        metrics.save_to_file(args.metrics_file)
        print(f"  Metrics saved to {args.metrics_file}")
    return 0


def show_word(args):
    """Print the conditional distribution P(next | word) from a job's output"""
    try:
        results = read_output(args.output)
    except (OSError, ValueError) as e:
        print(f"Error reading output {args.output}: {e}")
        return 1

    marginal = None
    rows = []
    for key, value in results.items():
        if key.first != args.word:
            continue
        if key.is_marginal:
            marginal = value
        else:
            rows.append((key.second, value))

    if marginal is None:
        print(f"No bigrams start with {args.word!r}")
        return 1

    rows.sort(key=lambda row: (-row[1], row[0]))
    if args.top:
        rows = rows[:args.top]

    print(f"{args.word}\t*\t{marginal:g}")
    for second, value in rows:
        print(f"{args.word}\t{second}\t{value:.6f}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog='bigram-freq',
        description='Bigram relative frequency estimation with MapReduce',
        epilog='Example: %(prog)s run corpus.txt out/ --num-map-tasks 4 --num-reduce-tasks 2'
    )
    parser.add_argument('--log-level', default=LOG_LEVEL,
                        help=f'Logging level (default: {LOG_LEVEL})')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # run command
    run_parser = subparsers.add_parser(
        'run',
        help='Run a job',
        description='Count bigrams in INPUT and write relative frequencies to OUTPUT'
    )
    run_parser.add_argument('input', help='Input text file')
    run_parser.add_argument('output', help='Output directory')
    run_parser.add_argument('--num-map-tasks', type=int, default=4, help='Number of map tasks (default: 4)')
    run_parser.add_argument('--num-reduce-tasks', type=int, default=2, help='Number of reduce tasks (default: 2)')
    run_parser.add_argument('--no-combiner', action='store_true', help='Disable map-side pre-aggregation')
    run_parser.add_argument('--max-token-length', type=int, default=MAX_TOKEN_LENGTH,
                            help=f'Truncate words to this many characters (default: {MAX_TOKEN_LENGTH})')
    run_parser.add_argument('--max-workers', type=int, default=4, help='Thread pool size (default: 4)')
    run_parser.add_argument('--max-task-attempts', type=int, default=3,
                            help='Attempts per task before the job fails (default: 3)')
    run_parser.add_argument('--no-overwrite', action='store_true',
                            help='Fail instead of clearing an existing output directory')
    run_parser.add_argument('--intermediate-dir', help='Directory for intermediate files')
    run_parser.add_argument('--keep-intermediate', action='store_true',
                            help='Do not delete intermediate files after the job')
    run_parser.add_argument('--metrics-file', help='Write job metrics as JSON to this path')
    run_parser.add_argument('--job-id', help='Custom job ID (auto-generated if not provided)')
    run_parser.set_defaults(func=run_job)

    # show command
    show_parser = subparsers.add_parser(
        'show',
        help='Show relative frequencies for a word',
        description='Print P(next word | WORD) from a finished job, highest first'
    )
    show_parser.add_argument('output', help='Output directory of a finished job')
    show_parser.add_argument('word', help='First word of the bigrams to show')
    show_parser.add_argument('--top', type=non_negative_int, default=10, help='Rows to show, 0 for all (default: 10)')
    show_parser.set_defaults(func=show_word)

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    # If no command specified, print help
    if not hasattr(args, 'func'):
        parser.print_help()
        return 1

    configure_logging(args.log_level)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
