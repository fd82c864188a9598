from __future__ import annotations

from cutlists.models import CandidateResult, Cutlist, RetrievalOutcome, Segment


def test_segment_representation_flags() -> None:
    assert Segment(time_start=0.0, time_duration=12.0).has_time
    assert not Segment(time_start=0.0, time_duration=12.0).has_frame
    assert Segment(frame_start=5).has_frame
    assert not Segment().has_time and not Segment().has_frame


def test_candidate_result_requires_segments() -> None:
    assert not CandidateResult(identifier="1", cutlist=Cutlist(identifier="1")).ok
    assert not CandidateResult.skip("1", "no cuts").ok
    assert CandidateResult(identifier="1", cutlist=Cutlist(identifier="1", segments=[Segment(time_duration=1.0)])).ok


def test_retrieval_outcome_to_dict() -> None:
    outcome = RetrievalOutcome(
        video_key="show.avi",
        cutlist=Cutlist(identifier="9", frames_per_second=25.0, segments=[Segment(frame_start=1, frame_duration=2)]),
    )

    payload = outcome.to_dict()

    assert payload["status"] == "ok"
    assert payload["error"] is None
    assert payload["cutlist"]["segments"] == [
        {"time_start": 0.0, "time_duration": 0.0, "frame_start": 1, "frame_duration": 2}
    ]
    assert RetrievalOutcome(video_key="x", error="No cutlist header available").to_dict()["cutlist"] is None
