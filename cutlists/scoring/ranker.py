from __future__ import annotations

from typing import Sequence

from cutlists.models import CandidateHeader


def rank_candidates(headers: Sequence[CandidateHeader]) -> list[str]:
    """Order candidate identifiers by descending score.

    ``sorted`` is stable, so equal scores keep their index order.
    """

    ranked = sorted(headers, key=lambda header: header.score, reverse=True)
    return [header.identifier for header in ranked]
