import binascii
import re
from typing import Iterable, Optional

from constants import Constants
from errors import InvalidShard, MalformedIdentifier, UnknownShard

_WORKCHAIN_PREFIX = re.compile(r"^-?[0-9]+:")
_HEX_SHARD = re.compile(r"^(0x)?[0-9a-fA-F]{1,16}$")


def _lowest_set_bit(value: int) -> int:
    return (value & -value).bit_length() - 1


class ShardPrefix:
    """Explicit (prefix, length) view over a packed 64-bit shard value.

    The packed form keeps the fixed prefix in the high bits followed by a single
    marker bit; everything below the marker is free. 0xa000000000000000 is the
    two-bit prefix 0b10.
    """

    def __init__(self, value: int) -> None:
        if not 0 < value <= Constants.SHARD_MASK:
            raise InvalidShard(f"Shard value out of range: {value:#x}")
        self._value = value
        self._marker = _lowest_set_bit(value)

    @classmethod
    def from_value(cls, value: int) -> "ShardPrefix":
        return cls(value)

    @classmethod
    def from_prefix(cls, prefix: int, length: int) -> "ShardPrefix":
        if not 0 <= length < Constants.SHARD_BITS:
            raise InvalidShard(f"Prefix length out of range: {length}")
        if prefix < 0 or prefix >> length:
            raise InvalidShard(f"Prefix {prefix:#x} does not fit in {length} bits")
        marker = Constants.SHARD_BITS - 1 - length
        return cls((prefix << (marker + 1)) | (1 << marker))

    @property
    def value(self) -> int:
        return self._value

    @property
    def length(self) -> int:
        return Constants.SHARD_BITS - 1 - self._marker

    @property
    def prefix(self) -> int:
        return self._value >> (self._marker + 1)

    @property
    def mask(self) -> int:
        return (Constants.SHARD_MASK << (self._marker + 1)) & Constants.SHARD_MASK

    @property
    def size(self) -> int:
        return 1 << (Constants.SHARD_BITS - self.length)

    @property
    def expected_attempts(self) -> int:
        return 1 << self.length

    def contains(self, account_prefix: int) -> bool:
        return (self._value ^ account_prefix) & self.mask == 0

    def hex(self) -> str:
        return f"{self._value:x}"

    def __int__(self) -> int:
        return self._value

    def __eq__(self, other) -> bool:
        if isinstance(other, ShardPrefix):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"ShardPrefix({self.hex()}, length={self.length})"


class ShardService:
    @staticmethod
    def decode_identifier(account_id: str) -> int:
        """Return the top 64 bits of a ``[<workchain>:]<64 hex>`` account id."""
        hex_part = _WORKCHAIN_PREFIX.sub("", account_id, count=1)
        try:
            raw = binascii.unhexlify(hex_part)
        except (binascii.Error, ValueError) as exc:
            raise MalformedIdentifier(account_id, "not a hex string") from exc
        if len(raw) != Constants.ACCOUNT_ID_BYTES:
            raise MalformedIdentifier(account_id, f"expected 32 bytes, got {len(raw)}")
        return int.from_bytes(raw[:8], "big")

    @staticmethod
    def shard_contains(shard: int, account_prefix: int) -> bool:
        return ShardPrefix.from_value(shard).contains(account_prefix)

    @staticmethod
    def expected_attempts(shard: int) -> int:
        return ShardPrefix.from_value(shard).expected_attempts

    @staticmethod
    def usable_shards(topology: Iterable[int]) -> list[int]:
        return [s for s in topology if s and s != Constants.MASTERCHAIN_SHARD]

    @staticmethod
    def find_shard(topology: Iterable[int], account_id: str) -> Optional[int]:
        # a malformed id is reported the same way as an id no shard covers
        try:
            top64 = ShardService.decode_identifier(account_id)
        except MalformedIdentifier:
            return None
        for shard in ShardService.usable_shards(topology):
            if ShardService.shard_contains(shard, top64):
                return shard
        return None

    @staticmethod
    def find_overlaps(topology: Iterable[int]) -> list[(int, int)]:
        """Pairs of shards whose ranges intersect; empty for a well-formed topology."""
        prefixes = [ShardPrefix.from_value(s) for s in ShardService.usable_shards(topology)]
        overlaps = []
        for i, a in enumerate(prefixes):
            for b in prefixes[i + 1:]:
                wider, narrower = (a, b) if a.length <= b.length else (b, a)
                if wider.contains(narrower.value):
                    overlaps.append((a.value, b.value))
        return overlaps

    @staticmethod
    def validate_target(topology: Iterable[int], shard: int) -> None:
        shards = ShardService.usable_shards(topology)
        if shard not in shards:
            raise UnknownShard(shard, shards)

    @staticmethod
    def parse_shard(text: str) -> int:
        text = text.strip()
        if not _HEX_SHARD.match(text):
            raise InvalidShard(f"Not a hex shard value: {text!r}")
        return int(text, 16)

    @staticmethod
    def format_shard(shard: Optional[int]) -> str:
        return "none" if shard is None else f"{shard:x}"
