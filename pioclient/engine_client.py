"""
pioclient Engine Client
Sends queries to a deployed engine and returns ranked items.
"""

from concurrent.futures import Future
from typing import Any, Dict, Iterable, Mapping, Optional

import httpx

from .base import BaseClient
from .config import DEFAULT_ENGINE_URL, ClientConfig
from .schemas import ItemScores

QUERIES_PATH = "/queries.json"


def build_query(
    user_id: str,
    num: int = 20,
    categories: Optional[Iterable[str]] = None,
    black_list: Optional[Iterable[str]] = None,
    white_list: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """Recommendation query for a user; lists left as None are not sent."""
    query: Dict[str, Any] = {"user": user_id, "num": num}
    if categories is not None:
        query["categories"] = list(categories)
    if black_list is not None:
        query["blackList"] = list(black_list)
    if white_list is not None:
        query["whiteList"] = list(white_list)
    return query


class EngineClient(BaseClient):
    """
    Client for the engine query API.

    Usage:
        with EngineClient("ACCESS_KEY") as client:
            for score in client.recommend("u1", num=10).item_scores:
                print(score.item, score.score)
    """

    def __init__(
        self,
        access_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        config = config or ClientConfig.from_env("PIO_ENGINE", DEFAULT_ENGINE_URL)
        super().__init__(access_key, config.replace(base_url, timeout), transport)

    def send_query_async(self, query: Mapping[str, Any]) -> Future:
        """Post a free-form query; resolves to ItemScores."""
        return self.execute_async(QUERIES_PATH, "POST", dict(query), ItemScores)

    def send_query(self, query: Mapping[str, Any]) -> ItemScores:
        return self._wait(self.send_query_async(query))

    def recommend_async(
        self,
        user_id: str,
        num: int = 20,
        categories: Optional[Iterable[str]] = None,
        black_list: Optional[Iterable[str]] = None,
        white_list: Optional[Iterable[str]] = None,
    ) -> Future:
        return self.send_query_async(build_query(user_id, num, categories, black_list, white_list))

    def recommend(
        self,
        user_id: str,
        num: int = 20,
        categories: Optional[Iterable[str]] = None,
        black_list: Optional[Iterable[str]] = None,
        white_list: Optional[Iterable[str]] = None,
    ) -> ItemScores:
        """Top ``num`` items for ``user_id``, optionally filtered."""
        return self._wait(self.recommend_async(user_id, num, categories, black_list, white_list))
