import os
import sys

import numpy as np

from candidate import Candidate
from search import TargetedAccountSearch
from shard_service import ShardPrefix, ShardService

amount_of_searches = 200
default_topology = [
    0x2000000000000000,
    0x6000000000000000,
    0xa000000000000000,
    0xe000000000000000,
]


def random_candidate() -> Candidate:
    # the shard only depends on the address, keys are irrelevant here
    return Candidate(mnemonic="", address="0:" + os.urandom(32).hex())


def measure_attempts(topology: list[int], shard: int, searches: int) -> np.ndarray:
    attempts = []
    for _ in range(searches):
        search = TargetedAccountSearch(topology, shard, random_candidate)
        search.run()
        attempts.append(search.attempts)
    return np.array(attempts)


def start_research(topology: list[int], searches: int = amount_of_searches) -> dict[int, dict]:
    report = {}
    for shard in ShardService.usable_shards(topology):
        attempts = measure_attempts(topology, shard, searches)
        report[shard] = {
            "expected": ShardPrefix.from_value(shard).expected_attempts,
            "mean": float(np.mean(attempts)),
            "std": float(np.std(attempts)),
            "max": int(np.max(attempts)),
        }
    return report


def print_report(report: dict[int, dict]) -> None:
    print("📊 Attempts per shard:")
    for shard, row in report.items():
        print(f"  {shard:016x} | expected: {row['expected']:>6} | mean: {row['mean']:8.2f}"
              f" | std: {row['std']:8.2f} | max: {row['max']}")


if __name__ == "__main__":
    topology = default_topology
    if len(sys.argv) > 1:
        topology = [ShardService.parse_shard(s) for s in sys.argv[1].split(",")]
    print_report(start_research(topology))
