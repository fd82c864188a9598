from __future__ import annotations

import logging
import math
from contextlib import closing
from typing import Iterable
from xml.sax import SAXException, make_parser
from xml.sax.handler import ContentHandler, feature_external_ges

from cutlists.ingest.http_fetch import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    FetchError,
    build_url,
    iter_remote_chunks,
)
from cutlists.models import CandidateHeader

HEADER_INDEX_ENDPOINT = "getxml.php"

TAG_CUTLIST = "CUTLIST"
TAG_ID = "ID"
TAG_RATING = "RATING"
RELEVANT_TAGS = frozenset({TAG_ID, TAG_RATING})

logger = logging.getLogger(__name__)


class _HeaderIndexHandler(ContentHandler):
    """Collects (id, rating) pairs while the index streams through the parser.

    ``_open_field`` is the relevant element currently open, ``_record`` the
    text accumulated for the cutlist element currently open.
    """

    def __init__(self) -> None:
        super().__init__()
        self.headers: list[CandidateHeader] = []
        self._open_field: str | None = None
        self._record: dict[str, list[str]] | None = None

    def startElement(self, name: str, attrs: object) -> None:
        tag = name.upper()
        if tag == TAG_CUTLIST:
            self._record = {}
            self._open_field = None
        elif tag in RELEVANT_TAGS:
            self._open_field = tag

    def endElement(self, name: str) -> None:
        tag = name.upper()
        if tag == self._open_field:
            self._open_field = None
        if tag == TAG_CUTLIST and self._record is not None:
            self._close_record(self._record)
            self._record = None

    def characters(self, content: str) -> None:
        if self._open_field is None or self._record is None:
            return
        self._record.setdefault(self._open_field, []).append(content)

    def _close_record(self, record: dict[str, list[str]]) -> None:
        identifier = "".join(record.get(TAG_ID, [])).strip()
        if not identifier:
            logger.debug("Skipping cutlist record without ID")
            return
        score = _parse_score("".join(record.get(TAG_RATING, [])))
        logger.info("Found cutlist ID=%s (rating %.2f)", identifier, score)
        self.headers.append(CandidateHeader(identifier=identifier, score=score))


def parse_header_index(chunks: Iterable[bytes]) -> list[CandidateHeader]:
    """Stream-parse a header index document into candidate headers.

    The document is fed chunk by chunk; the character set is taken from the
    BOM or XML declaration and transcoded by expat on the fly. Raises
    ``SAXException`` for malformed or truncated documents.
    """

    handler = _HeaderIndexHandler()
    parser = make_parser()
    parser.setFeature(feature_external_ges, False)
    parser.setContentHandler(handler)

    for chunk in chunks:
        parser.feed(chunk)
    parser.close()

    return handler.headers


def load_cutlist_headers(
    video_key: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> list[CandidateHeader]:
    """Fetch the header index for ``video_key``; any failure yields an empty list."""

    url = build_url(base_url, HEADER_INDEX_ENDPOINT, name=video_key)
    logger.debug("Loading cutlist headers for %s from %s", video_key, url)

    chunks = iter_remote_chunks(url, timeout_seconds=timeout_seconds, user_agent=user_agent)
    try:
        with closing(chunks):
            return parse_header_index(chunks)
    except FetchError as exc:
        logger.error("Cannot load cutlist headers for %s: %s", video_key, exc)
    except SAXException as exc:
        logger.error("Error while reading cutlist headers for %s: %s", video_key, exc)
    return []


def _parse_score(raw_value: str) -> float:
    try:
        score = float(raw_value.strip())
    except ValueError:
        return 0.0
    if not math.isfinite(score):
        return 0.0
    return score
