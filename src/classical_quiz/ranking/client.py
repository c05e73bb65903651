"""Client for the external leaderboard service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

import requests

from ..quiz.models import QuizFormat, QuizResult

logger = logging.getLogger(__name__)

RANKING_PATH = "/api/ranking"
DEFAULT_TIMEOUT = 10.0

FETCH_FAILED_MESSAGE = "Failed to fetch the ranking."
SUBMIT_FAILED_MESSAGE = "Failed to submit the score."


class RankingType(Enum):
    DAILY = "daily"
    ALL_TIME = "all_time"

    @classmethod
    def from_value(cls, value: Union[str, "RankingType"]) -> "RankingType":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        for member in cls:
            if member.value == normalized:
                return member
        expected = ", ".join(member.value for member in cls)
        raise ValueError(
            f"Unknown ranking type '{value}'. Expected one of: {expected}."
        )


class RankingErrorKind(Enum):
    HTTP_STATUS = "http_status"
    TRANSPORT = "transport"
    DECODE = "decode"


@dataclass(frozen=True)
class RankingError:
    kind: RankingErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Rank:
    rank: int
    nickname: str
    score: int
    created_at: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Rank":
        return cls(
            rank=int(record["rank"]),
            nickname=str(record["nickname"]),
            score=int(record["score"]),
            created_at=str(record.get("created_at") or ""),
        )


class RankingClient:
    """Submit scores and read leaderboards.

    Like the catalog, the client never raises for network or server
    problems; callers inspect :attr:`error` after each call.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[Any] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = session or requests
        self.ranking: list[Rank] = []
        self.my_rank: Optional[Rank] = None
        self.loading = False
        self.error: Optional[RankingError] = None
        self.current_category = "all"
        self.current_type = RankingType.DAILY
        self.current_format = QuizFormat.AUDIO_TO_TITLE

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{RANKING_PATH}"

    def fetch_ranking(
        self,
        category: str = "all",
        ranking_type: Union[RankingType, str] = RankingType.DAILY,
        format: Union[QuizFormat, str] = QuizFormat.AUDIO_TO_TITLE,
    ) -> list[Rank]:
        ranking_type = RankingType.from_value(ranking_type)
        quiz_format = QuizFormat.from_value(format)
        self.current_category = category
        self.current_type = ranking_type
        self.current_format = quiz_format
        params = {
            "region": category,
            "type": ranking_type.value,
            "format": quiz_format.value,
        }
        payload = self._request(
            "GET", FETCH_FAILED_MESSAGE, params=params
        )
        if payload is None:
            return self.ranking
        try:
            self.ranking = [
                Rank.from_record(item) for item in payload.get("ranking", [])
            ]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            self._fail(RankingErrorKind.DECODE, f"Malformed ranking: {exc}")
        return self.ranking

    def submit_score(
        self,
        nickname: str,
        score: int,
        category: str = "all",
        format: Union[QuizFormat, str] = QuizFormat.AUDIO_TO_TITLE,
    ) -> Optional[Rank]:
        body = {
            "nickname": nickname,
            "score": score,
            "region": category,
            "format": QuizFormat.from_value(format).value,
        }
        payload = self._request("POST", SUBMIT_FAILED_MESSAGE, json=body)
        if payload is None:
            return None
        data = payload.get("data") if isinstance(payload, Mapping) else None
        try:
            self.my_rank = Rank.from_record(data)  # type: ignore[arg-type]
        except (KeyError, TypeError, ValueError) as exc:
            self._fail(RankingErrorKind.DECODE, f"Malformed rank: {exc}")
            return None
        logger.info(
            "Score submitted",
            extra={"rank": self.my_rank.rank, "score": score, "region": category},
        )
        return self.my_rank

    def submit_result(self, result: QuizResult) -> Optional[Rank]:
        return self.submit_score(
            result.nickname,
            result.final_score,
            category=result.category,
            format=result.format,
        )

    def _request(
        self, method: str, failure_message: str, **kwargs: Any
    ) -> Optional[Mapping[str, Any]]:
        self.loading = True
        self.error = None
        try:
            response = self._http.request(
                method, self.endpoint, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            self._fail(RankingErrorKind.TRANSPORT, str(exc))
            return None
        finally:
            self.loading = False

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not 200 <= response.status_code < 300:
            message = failure_message
            if isinstance(payload, Mapping) and payload.get("error"):
                message = str(payload["error"])
            self._fail(RankingErrorKind.HTTP_STATUS, message)
            return None
        if not isinstance(payload, Mapping):
            self._fail(RankingErrorKind.DECODE, "Ranking response is not an object.")
            return None
        return payload

    def _fail(self, kind: RankingErrorKind, message: str) -> None:
        self.error = RankingError(kind, message)
        logger.error("Ranking request failed", extra={"kind": kind, "detail": message})
