class ShardMasterError(Exception):
    pass


class MalformedIdentifier(ShardMasterError, ValueError):
    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"Malformed account identifier {identifier!r}: {reason}")
        self.identifier = identifier
        self.reason = reason


class InvalidShard(ShardMasterError, ValueError):
    pass


class UnknownShard(ShardMasterError):
    def __init__(self, shard: int, valid_shards: list[int]) -> None:
        self.shard = shard
        self.valid_shards = list(valid_shards)
        super().__init__(
            "Invalid shard. Choose from: " + ", ".join(f"{s:x}" for s in self.valid_shards)
        )


class TopologyFetchFailed(ShardMasterError):
    pass


class CandidateGenerationFailed(ShardMasterError):
    pass


class SearchCancelled(ShardMasterError):
    def __init__(self, attempts: int) -> None:
        super().__init__(f"Search cancelled after {attempts} attempts")
        self.attempts = attempts


class SearchExhausted(ShardMasterError):
    def __init__(self, attempts: int) -> None:
        super().__init__(f"No matching account after {attempts} attempts")
        self.attempts = attempts
