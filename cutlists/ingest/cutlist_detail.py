from __future__ import annotations

import configparser
import logging
from typing import Mapping

from cutlists.ingest.http_fetch import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    FetchError,
    build_url,
    fetch_bytes,
)
from cutlists.models import CandidateResult, Cutlist, Segment

DETAIL_ENDPOINT = "getfile.php"

SECTION_GENERAL = "general"
SECTION_CUT_PREFIX = "cut"
KEY_NUM_CUTS = "noofcuts"
KEY_RATIO = "displayaspectratio"
KEY_APP = "intendedcutapplicationname"
KEY_FPS = "framespersecond"
KEY_TIME_START = "start"
KEY_TIME_DURATION = "duration"
KEY_FRAME_START = "startframe"
KEY_FRAME_DURATION = "durationframes"

logger = logging.getLogger(__name__)

Section = Mapping[str, str]


def load_cutlist_detail(
    identifier: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> CandidateResult:
    """Fetch and parse the detail document of one candidate."""

    url = build_url(base_url, DETAIL_ENDPOINT, id=identifier)
    try:
        payload = fetch_bytes(url, timeout_seconds=timeout_seconds, user_agent=user_agent)
    except FetchError as exc:
        logger.error("Cutlist ID=%s could not be fetched: %s", identifier, exc)
        return CandidateResult.skip(identifier, f"fetch failed: {exc}")

    return parse_cutlist_detail(identifier, payload)


def parse_cutlist_detail(identifier: str, payload: bytes | str) -> CandidateResult:
    """Build a validated cutlist from a detail document, or a skip result.

    Section and key names are case-insensitive. ``[General]`` must declare
    ``NoOfCuts``; every ``[Cut<i>]`` up to that count must exist, and all cuts
    must carry the representation (time and/or frames) that cut 0 carries.
    """

    sections = _load_sections(identifier, payload)
    if sections is None:
        return CandidateResult.skip(identifier, "document could not be parsed")

    general = sections.get(SECTION_GENERAL)
    if general is None:
        logger.error("Cutlist ID=%s does not have section '%s'", identifier, SECTION_GENERAL)
        return CandidateResult.skip(identifier, f"missing section '{SECTION_GENERAL}'")

    cutlist = Cutlist(identifier=identifier)
    cutlist.aspect_ratio = _optional_value(identifier, general, KEY_RATIO)
    cutlist.frames_per_second = _to_float(_optional_value(identifier, general, KEY_FPS))
    cutlist.application = _optional_value(identifier, general, KEY_APP)

    if KEY_NUM_CUTS not in general:
        logger.error("Cutlist ID=%s does not have key '%s'", identifier, KEY_NUM_CUTS)
        return CandidateResult.skip(identifier, f"missing key '{KEY_NUM_CUTS}'")
    try:
        num_cuts = int(general[KEY_NUM_CUTS].strip())
    except ValueError:
        logger.error(
            "Cutlist ID=%s has invalid value '%s' for key '%s'",
            identifier,
            general[KEY_NUM_CUTS],
            KEY_NUM_CUTS,
        )
        return CandidateResult.skip(identifier, f"invalid value for '{KEY_NUM_CUTS}'")

    for index in range(num_cuts):
        section_name = f"{SECTION_CUT_PREFIX}{index}"
        section = sections.get(section_name)
        if section is None:
            logger.error("Cutlist ID=%s does not have section '%s'", identifier, section_name)
            return CandidateResult.skip(identifier, f"missing section '{section_name}'")

        segment = _read_segment(section)
        # Cut 0 fixes the mode by its non-zero values, not by which keys it lists.
        if index == 0:
            cutlist.is_time_based = segment.has_time
            cutlist.is_frame_based = segment.has_frame

        problem = _segment_problem(cutlist, segment)
        if problem is not None:
            logger.error("Cutlist ID=%s: cut %s %s", identifier, section_name, problem)
            return CandidateResult.skip(identifier, f"{section_name} {problem}")

        cutlist.segments.append(segment)

    if not cutlist.segments:
        logger.error("Cutlist ID=%s does not contain any cuts", identifier)
        return CandidateResult.skip(identifier, "no cuts")

    return CandidateResult(identifier=identifier, cutlist=cutlist)


def _load_sections(identifier: str, payload: bytes | str) -> dict[str, Section] | None:
    text = _decode(payload) if isinstance(payload, bytes) else payload

    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        parser.read_string(text, source=f"cutlist {identifier}")
    except configparser.Error as exc:
        logger.error("Cutlist file could not be opened for ID '%s': %s", identifier, exc)
        return None

    # ConfigParser lower-cases keys but keeps section names as written.
    sections: dict[str, Section] = {}
    for name in parser.sections():
        merged = dict(sections.get(name.lower(), {}))
        merged.update(parser[name])
        sections[name.lower()] = merged
    return sections


def _decode(payload: bytes) -> str:
    try:
        return payload.decode("utf-8-sig")
    except UnicodeDecodeError:
        return payload.decode("cp1252", errors="replace")


def _optional_value(identifier: str, section: Section, key: str) -> str:
    if key not in section:
        logger.warning("Cutlist ID=%s does not have key '%s'", identifier, key)
        return ""
    return section[key].strip()


def _read_segment(section: Section) -> Segment:
    return Segment(
        time_start=_to_float(section.get(KEY_TIME_START)),
        time_duration=_to_float(section.get(KEY_TIME_DURATION)),
        frame_start=_to_int(section.get(KEY_FRAME_START)),
        frame_duration=_to_int(section.get(KEY_FRAME_DURATION)),
    )


def _segment_problem(cutlist: Cutlist, segment: Segment) -> str | None:
    if not segment.has_time and not segment.has_frame:
        return "does not have sufficient information"
    if cutlist.is_frame_based and not segment.has_frame:
        return "is missing frame information"
    if cutlist.is_time_based and not segment.has_time:
        return "is missing time information"
    return None


def _to_float(raw_value: str | None) -> float:
    if raw_value in (None, ""):
        return 0.0
    try:
        return float(raw_value.strip())
    except ValueError:
        return 0.0


def _to_int(raw_value: str | None) -> int:
    if raw_value in (None, ""):
        return 0
    try:
        return int(raw_value.strip())
    except ValueError:
        return 0
