from typing import Optional

import requests

from constants import ApiField, Constants
from deserialize_service import DeserializeService
from errors import TopologyFetchFailed


class TonApiTopologyProvider:
    """Reads the active basechain shards from a toncenter-compatible HTTP API.

    The shard list is taken from the latest masterchain block, so every call
    returns the topology as it is right now. Nothing is cached and nothing is
    retried: any transport or protocol problem raises TopologyFetchFailed.
    """

    def __init__(self,
                 base_url: str = Constants.TON_API_URL,
                 api_key: str = Constants.TON_API_KEY,
                 timeout: float = Constants.REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._session = session or requests.Session()

    def fetch_active_shards(self) -> list[int]:
        try:
            seqno = DeserializeService.deserialize_masterchain_seqno(self._get("getMasterchainInfo"))
            blocks = DeserializeService.deserialize_shards(self._get("shards", seqno=seqno))
        except (KeyError, TypeError, ValueError) as e:
            raise TopologyFetchFailed(f"Unexpected response from {self.base_url}: {e}") from e

        shards = [shard for workchain, shard in blocks
                  if workchain == Constants.WORKCHAIN and shard != Constants.MASTERCHAIN_SHARD]
        if not shards:
            raise TopologyFetchFailed(f"No active shards in workchain {Constants.WORKCHAIN} at block {seqno}")
        return shards

    def _get(self, method: str, **params) -> dict:
        headers = {"X-API-Key": self.api_key} if self.api_key else {}
        url = f"{self.base_url}/{method}"
        try:
            response = self._session.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise TopologyFetchFailed(f"Request to {url} failed: {e}") from e

        if response.status_code >= 400:
            raise TopologyFetchFailed(f"Request to {url} failed: {self._describe_error(response)}")
        try:
            return response.json()
        except ValueError as e:
            raise TopologyFetchFailed(f"Invalid JSON from {url}") from e

    @staticmethod
    def _describe_error(response) -> str:
        # toncenter explains rate limits and bad requests in the error body
        status = f"HTTP {response.status_code}"
        try:
            data = response.json()
        except ValueError:
            return status
        if isinstance(data, dict) and data.get(ApiField.ERROR):
            return f"{status}: {data[ApiField.ERROR]}"
        return status
