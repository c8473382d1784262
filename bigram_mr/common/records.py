"""
On-disk record formats.

Intermediate files hold one JSON object per line:
    {"key": [first, second], "value": weight}

Final output files hold one tab-separated record per line:
    first<TAB>second<TAB>value
Tokens never contain whitespace, so the tab split is unambiguous.
"""

import os
import json
import glob
import logging
from typing import Dict, Iterable, Iterator, List, Tuple

from bigram_mr.common.keys import BigramKey

logger = logging.getLogger(__name__)


def intermediate_filename(intermediate_dir: str, map_task_id: int, partition_id: int) -> str:
    return os.path.join(intermediate_dir, f"map-{map_task_id}-reduce-{partition_id}.txt")


def output_filename(output_dir: str, partition_id: int) -> str:
    return os.path.join(output_dir, f"part-{partition_id}.txt")


def write_intermediate(filename: str, records: Iterable[Tuple[BigramKey, float]]) -> int:
    """
    Write (key, weight) records as JSON lines

    Returns:
        Number of records written
    """
    count = 0
    with open(filename, 'w', encoding='utf-8') as f:
        for key, value in records:
            f.write(json.dumps({'key': key.to_list(), 'value': value}) + '\n')
            count += 1
    return count


def read_intermediate(filename: str, stats: Dict[str, int] = None) -> Iterator[Tuple[BigramKey, float]]:
    """
    Read (key, weight) records from a JSON-lines file, skipping malformed lines

    Args:
        filename: Intermediate file to read
        stats: Optional dict whose 'processed' and 'skipped' counters are updated
    """
    if stats is None:
        stats = {}
    stats.setdefault('processed', 0)
    stats.setdefault('skipped', 0)

    with open(filename, 'r', encoding='utf-8', errors='ignore') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue

            try:
                record = json.loads(line)
                key = BigramKey.from_list(record['key'])
                value = float(record['value'])
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                stats['skipped'] += 1
                logger.warning(f"Skipping malformed record {filename}:{line_num}: {e}")
                continue

            stats['processed'] += 1
            yield key, value


def write_output(filename: str, results: Iterable[Tuple[BigramKey, float]]) -> int:
    """
    Write final results, replacing `filename` only once every record is written

    Returns:
        Number of records written
    """
    tmp_filename = filename + '.tmp'
    count = 0
    try:
        with open(tmp_filename, 'w', encoding='utf-8') as f:
            for key, value in results:
                f.write(f"{key.first}\t{key.second}\t{value!r}\n")
                count += 1
    except BaseException:
        if os.path.exists(tmp_filename):
            os.remove(tmp_filename)
        raise
    os.replace(tmp_filename, filename)
    return count


def parse_output_line(line: str) -> Tuple[BigramKey, float]:
    first, second, value = line.rstrip('\n').split('\t')
    return BigramKey(first, second), float(value)


def read_output(output_dir: str) -> Dict[BigramKey, float]:
    """Load every part file of a finished job into a {key: value} dict"""
    results = {}
    for filename in sorted(glob.glob(os.path.join(output_dir, 'part-*.txt'))):
        with open(filename, 'r', encoding='utf-8') as f:
            for line in f:
                if not line.strip():
                    continue
                key, value = parse_output_line(line)
                results[key] = value
    return results


def file_sizes(paths: List[str]) -> int:
    return sum(os.path.getsize(p) for p in paths if os.path.exists(p))
