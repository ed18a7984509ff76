import sys

from tonsdk.utils import Address

from errors import ShardMasterError
from generate_wallet import generate_wallet
from network import TonApiTopologyProvider
from shard_service import ShardService

USAGE = """Usage:
  python main.py generate [shard]   generate a new wallet in the given shard (hex)
  python main.py shard <address>    detect the shard of an address"""


def to_raw_address(address: str) -> str:
    try:
        return Address(address).to_string(False)
    except Exception:
        # not something tonsdk can parse, let the shard lookup report it
        return address


def show_shard(topology: list[int], address: str) -> int:
    account_id = to_raw_address(address)
    ShardService.decode_identifier(account_id)

    shard = ShardService.find_shard(topology, account_id)
    if shard is None:
        print("Shard: Not found")
        return 1
    print(f"Shard: {ShardService.format_shard(shard)}")
    return 0


def main(argv: list[str], provider=None) -> int:
    if not argv or argv[0] not in ("generate", "shard") or (argv[0] == "shard" and len(argv) < 2):
        print(USAGE)
        return 2
    command = argv[0]

    print("Welcome TON Shard master tool.")
    print()
    provider = provider or TonApiTopologyProvider()
    try:
        topology = provider.fetch_active_shards()
        print("🟢 Network shards are available (hex):",
              ", ".join(ShardService.format_shard(s) for s in topology))

        if command == "generate":
            candidate = generate_wallet(topology, argv[1] if len(argv) > 1 else None)
            return 0 if candidate else 1
        return show_shard(topology, argv[1])
    except ShardMasterError as e:
        print(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
