from typing import Callable, Optional

from candidate import Candidate
from constants import Constants
from errors import InvalidShard, SearchCancelled, SearchExhausted
from search import TargetedAccountSearch
from shard_service import ShardService
from wallet import generate_candidate, save_wallet


def choose_shard(shards: list[int]) -> int:
    if not shards:
        raise InvalidShard("No shards to choose from")
    print("Choose a shard for the wallet:")
    for i, shard in enumerate(shards, start=1):
        print(f" {i}. {shard:x}")
    while True:
        try:
            choice = input("Choice: ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            raise SearchCancelled(0) from None
        if choice.isdigit() and 1 <= int(choice) <= len(shards):
            return shards[int(choice) - 1]
        print("⚠️ Incorrect input")


def print_miss(target: int) -> Callable[[Candidate, Optional[int]], None]:
    def on_miss(candidate: Candidate, shard: Optional[int]) -> None:
        if shard is None:
            print("Shard is not found")
        else:
            print(f"❌ Shard is not equal to assigned shard, got: {shard:x}, expect: {target:x}")
    return on_miss


def print_found(candidate: Candidate, shard: int, search: TargetedAccountSearch) -> None:
    print()
    print(f"🏠 Wallet address: {candidate.friendly_address}")
    print(f"🏠 Wallet address(HEX): {candidate.address}")
    print(f"✅ Shard is FOUND <:). account_shard: {shard:x}, expected: {search.target_shard:x}")
    print(f"🔐 Account mnemonic: {candidate.mnemonic}")
    print(f"Attempts: {search.attempts}")


def generate_wallet(topology: list[int],
                    shard_text: Optional[str] = None,
                    generator: Callable[[], Candidate] = generate_candidate,
                    workers: int = Constants.SEARCH_WORKERS,
                    max_attempts: int = Constants.MAX_ATTEMPTS,
                    wallet_file: str = Constants.WALLET_FILE) -> Optional[Candidate]:
    shards = ShardService.usable_shards(topology)
    for a, b in ShardService.find_overlaps(shards):
        print(f"⚠️ Network shards overlap: {a:x} and {b:x}")
    if shard_text is None:
        shard = choose_shard(shards)
    else:
        shard = ShardService.parse_shard(shard_text)
    print(f"Assigned Shard (hex): {shard:x}")

    search = TargetedAccountSearch(shards, shard, generator,
                                   on_miss=print_miss(shard),
                                   max_attempts=max_attempts)
    print(f"Expected attempts: ~{ShardService.expected_attempts(shard)}")
    try:
        candidate = search.run(workers)
    except (SearchCancelled, SearchExhausted) as e:
        print(f"⚠️ {e}")
        print(f"Elapsed time: {search.elapsed():.2f}s")
        return None

    print_found(candidate, shard, search)
    print(f"Elapsed time: {search.elapsed():.2f}s")
    if wallet_file:
        save_wallet(wallet_file, candidate, shard)
        print("✅ The wallet is saved in", wallet_file)
    return candidate
