import os
from enum import Enum


class ApiField:
    OK = "ok"
    RESULT = "result"
    ERROR = "error"
    LAST = "last"
    SHARDS = "shards"


class BlockIdField:
    WORKCHAIN = "workchain"
    SHARD = "shard"
    SEQNO = "seqno"


class CandidateField:
    MNEMONIC = "mnemonic"
    ADDRESS = "address"
    FRIENDLY_ADDRESS = "friendly_address"
    PUBLIC_KEY = "public_key"
    SHARD = "shard"


class Constants:
    WORKCHAIN = 0
    MASTERCHAIN_SHARD = 0x8000000000000000
    SHARD_BITS = 64
    SHARD_MASK = (1 << SHARD_BITS) - 1
    ACCOUNT_ID_BYTES = 32

    MNEMONIC_WORDS = 24

    TON_API_URL = os.getenv("TON_API_URL", "https://testnet.toncenter.com/api/v2")
    TON_API_KEY = os.getenv("TON_API_KEY", "")
    TESTNET = os.getenv("TON_TESTNET", "1") == "1"
    REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))

    SEARCH_WORKERS = int(os.getenv("SEARCH_WORKERS", "1"))
    MAX_ATTEMPTS = int(os.getenv("MAX_ATTEMPTS", "0"))
    WALLET_FILE = os.getenv("WALLET_FILE", "")


class SearchStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    FOUND = "found"
    CANCELLED = "cancelled"
    EXHAUSTED = "exhausted"
    FAILED = "failed"
