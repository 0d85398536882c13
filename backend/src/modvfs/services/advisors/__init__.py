"""Ranking advisors: external sources of load-order hints."""

from modvfs.services.advisors import http_client, openai_ranker  # noqa: F401
from modvfs.services.advisors.base import (
    CategoryRankingAdvisor,
    RankingAdvisor,
    StaticOrderAdvisor,
    available_advisors,
    build_advisor,
)
from modvfs.services.advisors.http_client import HttpRankingAdvisor
from modvfs.services.advisors.openai_ranker import OpenAIRankingAdvisor

__all__ = [
    "CategoryRankingAdvisor",
    "HttpRankingAdvisor",
    "OpenAIRankingAdvisor",
    "RankingAdvisor",
    "StaticOrderAdvisor",
    "available_advisors",
    "build_advisor",
]
