import itertools
import json

import pytest
import requests
from tonsdk.utils import Address

import generate_wallet as flow
import main
from candidate import Candidate
from constants import CandidateField
from errors import SearchCancelled, TopologyFetchFailed, UnknownShard
from network import TonApiTopologyProvider

SHARDS = [
    0x2000000000000000,
    0x6000000000000000,
    0xA000000000000000,
    0xE000000000000000,
]

ADDRESS_IN_6 = "0:684c17d1138bcd4355aa88cc30dacba8cda4d8f3de4392cb5a7f4bec030190af"
ADDRESS_IN_A = "0:af78316b56ee5f7e88f3558ad3b5ebbafd49304249e48dd33c9f27e63b7c8fe7"

MASTERCHAIN_INFO = {
    "ok": True,
    "result": {
        "@type": "blocks.masterchainInfo",
        "last": {"@type": "ton.blockIdExt", "workchain": -1, "shard": "-9223372036854775808", "seqno": 777},
    },
}

BLOCK_SHARDS = {
    "ok": True,
    "result": {
        "@type": "blocks.shards",
        "shards": [
            {"@type": "ton.blockIdExt", "workchain": 0, "shard": "2305843009213693952", "seqno": 10},
            {"@type": "ton.blockIdExt", "workchain": 0, "shard": "6917529027641081856", "seqno": 10},
            {"@type": "ton.blockIdExt", "workchain": 0, "shard": "-6917529027641081856", "seqno": 10},
            {"@type": "ton.blockIdExt", "workchain": 0, "shard": "-2305843009213693952", "seqno": 10},
            {"@type": "ton.blockIdExt", "workchain": -1, "shard": "-9223372036854775808", "seqno": 777},
        ],
    },
}


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload


class FakeSession:
    def __init__(self, responses: dict) -> None:
        self.responses = responses
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append((url, params, headers, timeout))
        response = self.responses[url.rsplit("/", 1)[-1]]
        if isinstance(response, Exception):
            raise response
        return response


class FakeProvider:
    def __init__(self, shards=None, error=None) -> None:
        self.shards = shards
        self.error = error

    def fetch_active_shards(self) -> list[int]:
        if self.error:
            raise self.error
        return list(self.shards)


def cycling_generator(addresses: list[str]):
    it = itertools.cycle(addresses)
    return lambda: Candidate("word " * 24, next(it), "EQfriendly", b"\x02" * 32)


@pytest.fixture
def session():
    return FakeSession({
        "getMasterchainInfo": FakeResponse(MASTERCHAIN_INFO),
        "shards": FakeResponse(BLOCK_SHARDS),
    })


# provider

def test_provider_fetches_basechain_shards_in_order(session):
    provider = TonApiTopologyProvider("https://toncenter.example/api/v2/", api_key="secret",
                                      timeout=5, session=session)
    assert provider.fetch_active_shards() == SHARDS

    (info_url, _, headers, timeout), (shards_url, params, _, _) = session.calls
    assert info_url == "https://toncenter.example/api/v2/getMasterchainInfo"
    assert shards_url == "https://toncenter.example/api/v2/shards"
    assert params == {"seqno": 777}
    assert headers == {"X-API-Key": "secret"}
    assert timeout == 5


def test_provider_without_api_key_sends_no_header(session):
    TonApiTopologyProvider("https://toncenter.example/api/v2", api_key="", session=session).fetch_active_shards()
    assert session.calls[0][2] == {}


def test_provider_drops_unsplit_sentinel():
    session = FakeSession({
        "getMasterchainInfo": FakeResponse(MASTERCHAIN_INFO),
        "shards": FakeResponse({"ok": True, "result": {"shards": [
            {"workchain": 0, "shard": "-9223372036854775808", "seqno": 1}]}}),
    })
    with pytest.raises(TopologyFetchFailed, match="No active shards"):
        TonApiTopologyProvider("https://toncenter.example", session=session).fetch_active_shards()


@pytest.mark.parametrize("response,message", [
    (requests.ConnectionError("connection refused"), "connection refused"),
    (requests.Timeout("read timed out"), "read timed out"),
    (FakeResponse(status_code=502), "HTTP 502$"),
    (FakeResponse({"ok": False, "error": "Ratelimit exceed", "code": 429}, status_code=429), "HTTP 429: Ratelimit exceed"),
    (FakeResponse({"ok": False, "code": 500}, status_code=500), "HTTP 500$"),
    (FakeResponse(None), "Invalid JSON"),
    (FakeResponse({"ok": False, "error": "Ratelimit exceed"}), "Ratelimit exceed"),
    (FakeResponse({"ok": True, "result": {}}), "Unexpected response"),
])
def test_provider_failures(response, message):
    session = FakeSession({"getMasterchainInfo": response, "shards": FakeResponse(BLOCK_SHARDS)})
    provider = TonApiTopologyProvider("https://toncenter.example", session=session)
    with pytest.raises(TopologyFetchFailed, match=message):
        provider.fetch_active_shards()


# generate flow

def test_generate_wallet_with_shard_argument(tmp_path, capsys):
    path = str(tmp_path / "wallet.json")
    candidate = flow.generate_wallet(SHARDS, "a000000000000000",
                                     generator=cycling_generator([ADDRESS_IN_6, ADDRESS_IN_6, ADDRESS_IN_A]),
                                     workers=1, max_attempts=0, wallet_file=path)

    assert candidate.address == ADDRESS_IN_A
    out = capsys.readouterr().out
    assert out.count("got: 6000000000000000, expect: a000000000000000") == 2
    assert "Shard is FOUND" in out
    assert "Attempts: 3" in out

    with open(path) as f:
        saved = json.load(f)
    assert saved[CandidateField.ADDRESS] == ADDRESS_IN_A
    assert saved[CandidateField.SHARD] == "a000000000000000"


def test_generate_wallet_interactive_choice(monkeypatch, capsys):
    answers = iter(["9", "abc", "3"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))

    candidate = flow.generate_wallet(SHARDS, None, generator=cycling_generator([ADDRESS_IN_A]),
                                     workers=1, max_attempts=0, wallet_file="")

    assert candidate.address == ADDRESS_IN_A
    out = capsys.readouterr().out
    assert out.count("Incorrect input") == 2
    assert "Assigned Shard (hex): a000000000000000" in out


@pytest.mark.parametrize("error", [EOFError, KeyboardInterrupt])
def test_generate_wallet_interactive_choice_closed(error, monkeypatch):
    def closed_input(prompt=""):
        raise error

    monkeypatch.setattr("builtins.input", closed_input)
    with pytest.raises(SearchCancelled):
        flow.generate_wallet(SHARDS, None, generator=cycling_generator([ADDRESS_IN_A]),
                             workers=1, max_attempts=0, wallet_file="")


def test_generate_wallet_unknown_shard():
    def generator():
        raise AssertionError("must not be called")

    with pytest.raises(UnknownShard):
        flow.generate_wallet(SHARDS, "1", generator=generator, workers=1, max_attempts=0, wallet_file="")


def test_generate_wallet_gives_up(capsys):
    candidate = flow.generate_wallet(SHARDS, "a000000000000000", generator=cycling_generator([ADDRESS_IN_6]),
                                     workers=1, max_attempts=4, wallet_file="")
    assert candidate is None
    assert "No matching account after 4 attempts" in capsys.readouterr().out


def test_generate_wallet_warns_on_overlaps(capsys):
    flow.generate_wallet(SHARDS + [0x4000000000000000], "a000000000000000",
                         generator=cycling_generator([ADDRESS_IN_A]), workers=1, max_attempts=0, wallet_file="")
    assert "Network shards overlap" in capsys.readouterr().out


# command line

def test_main_shard_command(capsys):
    assert main.main(["shard", ADDRESS_IN_A], provider=FakeProvider(SHARDS)) == 0
    out = capsys.readouterr().out
    assert "2000000000000000, 6000000000000000, a000000000000000, e000000000000000" in out
    assert "Shard: a000000000000000" in out


def test_main_shard_command_friendly_address(capsys):
    friendly = Address(ADDRESS_IN_6).to_string(True, True, True)
    assert main.to_raw_address(friendly) == ADDRESS_IN_6
    assert main.main(["shard", friendly], provider=FakeProvider(SHARDS)) == 0
    assert "Shard: 6000000000000000" in capsys.readouterr().out


def test_main_shard_not_found(capsys):
    assert main.main(["shard", ADDRESS_IN_A], provider=FakeProvider([0x2000000000000000])) == 1
    assert "Shard: Not found" in capsys.readouterr().out


def test_main_shard_malformed_address(capsys):
    assert main.main(["shard", "0:abcd"], provider=FakeProvider(SHARDS)) == 1
    assert "❌ Malformed account identifier" in capsys.readouterr().out


def test_main_generate_unknown_shard(capsys):
    assert main.main(["generate", "1"], provider=FakeProvider(SHARDS)) == 1
    assert "❌ Invalid shard. Choose from: 2000000000000000" in capsys.readouterr().out


def test_main_generate_input_closed(monkeypatch, capsys):
    def closed_input(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", closed_input)
    assert main.main(["generate"], provider=FakeProvider(SHARDS)) == 1
    assert "❌ Search cancelled" in capsys.readouterr().out


def test_main_topology_failure(capsys):
    provider = FakeProvider(error=TopologyFetchFailed("Request failed: HTTP 503"))
    assert main.main(["shard", ADDRESS_IN_A], provider=provider) == 1
    assert "❌ Request failed: HTTP 503" in capsys.readouterr().out


@pytest.mark.parametrize("argv", [[], ["deploy"], ["shard"]])
def test_main_usage(argv, capsys):
    assert main.main(argv, provider=FakeProvider(SHARDS)) == 2
    assert "Usage" in capsys.readouterr().out
