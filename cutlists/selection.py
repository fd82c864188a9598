from __future__ import annotations

import logging
from contextlib import nullcontext
from typing import Callable, Iterable, Iterator

from cutlists.ingest.cutlist_detail import load_cutlist_detail
from cutlists.ingest.header_index import load_cutlist_headers
from cutlists.ingest.http_fetch import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from cutlists.models import CandidateHeader, RetrievalOutcome
from cutlists.progress import DEFAULT_INTERVAL_SECONDS, ProgressTicker
from cutlists.scoring.ranker import rank_candidates

NO_HEADERS_ERROR = "No cutlist header available"
EXHAUSTED_ERROR = "No cutlist could be retrieved"

logger = logging.getLogger(__name__)


def has_cutlists(
    video_key: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> bool:
    """Check whether the cutlist server lists at least one cutlist for the video."""

    headers = _available_headers(
        video_key,
        base_url=base_url,
        timeout_seconds=timeout_seconds,
        user_agent=user_agent,
    )
    return bool(headers)


def retrieve_cutlist(
    video_key: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
    on_tick: Callable[[], None] | None = None,
    tick_interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
) -> RetrievalOutcome:
    """Retrieve the best-rated cutlist for ``video_key`` that passes validation.

    Candidates are tried once each, in rank order, and the first valid one
    wins. While this runs, ``on_tick`` (if given) is called every
    ``tick_interval_seconds`` from a background thread.
    """

    ticker = ProgressTicker(on_tick, tick_interval_seconds) if on_tick is not None else nullcontext()
    with ticker:
        return _select_cutlist(
            video_key,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            user_agent=user_agent,
        )


def retrieve_cutlists(
    video_keys: Iterable[str],
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> Iterator[RetrievalOutcome]:
    """Retrieve cutlists for several videos one after another, one outcome per key."""

    for video_key in video_keys:
        yield retrieve_cutlist(
            video_key,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            user_agent=user_agent,
        )


def _select_cutlist(
    video_key: str,
    *,
    base_url: str,
    timeout_seconds: int,
    user_agent: str,
) -> RetrievalOutcome:
    headers = _available_headers(
        video_key,
        base_url=base_url,
        timeout_seconds=timeout_seconds,
        user_agent=user_agent,
    )
    if not headers:
        return RetrievalOutcome(video_key=video_key, error=NO_HEADERS_ERROR)

    ranked_ids = rank_candidates(headers)
    logger.debug("Ranked cutlists for %s: %s", video_key, ", ".join(ranked_ids))

    for identifier in ranked_ids:
        result = load_cutlist_detail(
            identifier,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            user_agent=user_agent,
        )
        cutlist = result.cutlist
        if result.ok and cutlist is not None:
            logger.info("Using cutlist ID=%s for %s (%d cuts)", identifier, video_key, len(cutlist.segments))
            return RetrievalOutcome(video_key=video_key, cutlist=cutlist)
        logger.warning("Skipping cutlist ID=%s for %s: %s", identifier, video_key, result.reason)

    logger.warning("None of the %d cutlists for %s could be used", len(ranked_ids), video_key)
    return RetrievalOutcome(video_key=video_key, error=EXHAUSTED_ERROR)


def _available_headers(
    video_key: str,
    *,
    base_url: str,
    timeout_seconds: int,
    user_agent: str,
) -> list[CandidateHeader]:
    headers = load_cutlist_headers(
        video_key,
        base_url=base_url,
        timeout_seconds=timeout_seconds,
        user_agent=user_agent,
    )
    if not headers:
        logger.warning("No cutlist header could be loaded for %s", video_key)
    return headers
