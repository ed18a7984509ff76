from candidate import Candidate
from constants import ApiField, BlockIdField, CandidateField, Constants


class DeserializeService:
    @staticmethod
    def deserialize_result(data: dict):
        if not isinstance(data, dict) or not data.get(ApiField.OK):
            error = data.get(ApiField.ERROR) if isinstance(data, dict) else None
            raise ValueError(error or "unexpected response")
        return data[ApiField.RESULT]

    @staticmethod
    def deserialize_block_id(data: dict) -> (int, int, int):
        return (int(data[BlockIdField.WORKCHAIN]),
                DeserializeService._to_unsigned(data[BlockIdField.SHARD]),
                int(data[BlockIdField.SEQNO]))

    @staticmethod
    def deserialize_masterchain_seqno(data: dict) -> int:
        result = DeserializeService.deserialize_result(data)
        _, _, seqno = DeserializeService.deserialize_block_id(result[ApiField.LAST])
        return seqno

    @staticmethod
    def deserialize_shards(data: dict) -> list[(int, int)]:
        result = DeserializeService.deserialize_result(data)
        shards = []
        for block in result[ApiField.SHARDS]:
            workchain, shard, _ = DeserializeService.deserialize_block_id(block)
            shards.append((workchain, shard))
        return shards

    @staticmethod
    def deserialize_candidate(data: dict) -> Candidate:
        return Candidate(
            mnemonic=data[CandidateField.MNEMONIC],
            address=data[CandidateField.ADDRESS],
            friendly_address=data.get(CandidateField.FRIENDLY_ADDRESS, ""),
            public_key=bytes.fromhex(data.get(CandidateField.PUBLIC_KEY, ""))
        )

    @staticmethod
    def _to_unsigned(shard) -> int:
        # the API sends shards as signed 64-bit decimal strings
        return int(shard) & Constants.SHARD_MASK
