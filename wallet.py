import json

from tonsdk.contract.wallet import Wallets, WalletVersionEnum
from tonsdk.crypto import mnemonic_is_valid, mnemonic_new, mnemonic_to_wallet_key

from candidate import Candidate
from constants import Constants
from deserialize_service import DeserializeService
from errors import CandidateGenerationFailed


def generate_mnemonic(words: int = Constants.MNEMONIC_WORDS) -> str:
    # mnemonic_new redraws until the phrase passes the TON basic seed check
    return " ".join(mnemonic_new(words))


def generate_keypair(mnemonic: str) -> (bytes, bytes):
    words = mnemonic.split()
    if not mnemonic_is_valid(words):
        raise CandidateGenerationFailed("Mnemonic is not a valid TON seed phrase")
    public_key, private_key = mnemonic_to_wallet_key(words)
    return private_key, public_key


def derive_address(private_key: bytes, public_key: bytes, testnet: bool = Constants.TESTNET) -> (str, str):
    wallet = Wallets.ALL[WalletVersionEnum.v4r2](
        public_key=public_key, private_key=private_key, wc=Constants.WORKCHAIN)
    raw = wallet.address.to_string(False)
    friendly = wallet.address.to_string(True, True, False, testnet)
    return raw, friendly


def candidate_from_mnemonic(mnemonic: str) -> Candidate:
    private_key, public_key = generate_keypair(mnemonic)
    raw, friendly = derive_address(private_key, public_key)
    return Candidate(mnemonic, raw, friendly, public_key)


def generate_candidate() -> Candidate:
    try:
        return candidate_from_mnemonic(generate_mnemonic())
    except CandidateGenerationFailed:
        raise
    except Exception as e:
        raise CandidateGenerationFailed(f"Account generation failed: {e}") from e


def save_wallet(path: str, candidate: Candidate, shard: int) -> None:
    with open(path, "w") as f:
        json.dump(candidate.to_dict(shard), f, indent=2)


def load_wallet(path: str) -> Candidate:
    with open(path) as f:
        return DeserializeService.deserialize_candidate(json.load(f))
