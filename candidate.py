from typing import Optional

from constants import CandidateField


class Candidate:
    def __init__(self,
                 mnemonic: str,
                 address: str,
                 friendly_address: str = "",
                 public_key: bytes = b"") -> None:
        self.mnemonic = mnemonic
        self.address = address  # raw form, "<workchain>:<hex>"
        self.friendly_address = friendly_address
        self.public_key = public_key

    def to_dict(self, shard: Optional[int] = None) -> dict:
        data = {
            CandidateField.MNEMONIC: self.mnemonic,
            CandidateField.ADDRESS: self.address,
            CandidateField.FRIENDLY_ADDRESS: self.friendly_address,
            CandidateField.PUBLIC_KEY: self.public_key.hex()
        }
        if shard is not None:
            data[CandidateField.SHARD] = f"{shard:x}"
        return data

    def __repr__(self) -> str:
        return f"Candidate({self.address})"
