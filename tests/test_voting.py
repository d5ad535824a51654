import threading
from datetime import timedelta

import pytest

from ovs.exceptions import (
    CandidateNotFound,
    DuplicateVote,
    ElectionNotOngoing,
    NotFound,
    VerificationDataRequired,
    VerificationFailed,
    VerificationNotEnrolled,
)
from ovs.models.election_model import ElectionStatus
from ovs.results import ResultsAggregator
from ovs.voting import VotingEngine

from .conftest import FINGERPRINT


@pytest.fixture
def engine(users, elections, votes):
    return VotingEngine(users, elections, votes)


def test_vote_then_duplicate_then_results(engine, voter, make_election, elections, votes):
    election = make_election()
    a, b = election.candidates

    vote = engine.cast_vote(voter.id, election.id, a.id)
    assert vote.user == voter.id
    assert vote.election == election.id
    assert vote.candidate == a.id

    with pytest.raises(DuplicateVote):
        engine.cast_vote(voter.id, election.id, b.id)

    results = ResultsAggregator(elections, votes).compute_results(election.id)
    counts = {c.name: c.votes for c in results.candidates}
    assert counts == {"A": 1, "B": 0}
    assert results.total_votes == 1


def test_repeated_attempts_leave_a_single_vote(engine, voter, make_election, votes):
    election = make_election()
    candidate = election.candidates[0]
    outcomes = []
    for _ in range(5):
        try:
            engine.cast_vote(voter.id, election.id, candidate.id)
            outcomes.append("ok")
        except DuplicateVote:
            outcomes.append("duplicate")

    assert outcomes == ["ok"] + ["duplicate"] * 4
    assert len(votes.list_for_election(election.id)) == 1


def test_concurrent_votes_record_once(engine, voter, make_election, votes):
    election = make_election()
    candidate = election.candidates[0]
    attempts = 16
    barrier = threading.Barrier(attempts)
    outcomes = []

    def _vote():
        barrier.wait()
        try:
            engine.cast_vote(voter.id, election.id, candidate.id)
            outcomes.append("ok")
        except DuplicateVote:
            outcomes.append("duplicate")

    threads = [threading.Thread(target=_vote) for _ in range(attempts)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert sorted(outcomes) == ["duplicate"] * (attempts - 1) + ["ok"]
    assert len(votes.list_for_election(election.id)) == 1


def test_upcoming_election_rejects_vote(engine, voter, make_election):
    election = make_election(start=timedelta(hours=1), end=timedelta(hours=2))

    with pytest.raises(ElectionNotOngoing) as excinfo:
        engine.cast_vote(voter.id, election.id, election.candidates[0].id)

    assert excinfo.value.status == "upcoming"


def test_stale_ongoing_status_is_not_trusted(engine, voter, make_election, elections):
    election = make_election(start=timedelta(hours=-3), end=timedelta(hours=-1))
    elections.set_status(election.id, ElectionStatus.ONGOING)

    with pytest.raises(ElectionNotOngoing) as excinfo:
        engine.cast_vote(voter.id, election.id, election.candidates[0].id)

    assert excinfo.value.status == "ended"
    assert elections.get(election.id).status == ElectionStatus.ENDED


def test_unknown_candidate_rejected(engine, voter, make_election, make_user):
    election = make_election()
    other = make_election(title="Other")
    foreign_candidate = other.candidates[0].id

    with pytest.raises(CandidateNotFound):
        engine.cast_vote(voter.id, election.id, foreign_candidate)

    unverified = make_user()
    with pytest.raises(CandidateNotFound):
        engine.cast_vote(unverified.id, election.id, "0123456789abcdef01234567", FINGERPRINT)


def test_unverified_voter_needs_proof_once(engine, make_user, make_election, users):
    first = make_election(title="First")
    second = make_election(title="Second")
    user = make_user(verified=False)

    with pytest.raises(VerificationDataRequired):
        engine.cast_vote(user.id, first.id, first.candidates[0].id)

    engine.cast_vote(user.id, first.id, first.candidates[0].id, FINGERPRINT)
    assert users.get(user.id).is_fingerprint_verified is True

    vote = engine.cast_vote(user.id, second.id, second.candidates[1].id)
    assert vote.candidate == second.candidates[1].id


def test_wrong_proof_fails_verification(engine, make_user, make_election, users):
    election = make_election()
    user = make_user(verified=False)

    with pytest.raises(VerificationFailed):
        engine.cast_vote(user.id, election.id, election.candidates[0].id, "not-my-finger")

    assert users.get(user.id).is_fingerprint_verified is False


def test_voter_without_enrolled_template(engine, make_user, make_election):
    election = make_election()
    user = make_user(verified=False, template=None)

    with pytest.raises(VerificationNotEnrolled):
        engine.cast_vote(user.id, election.id, election.candidates[0].id, FINGERPRINT)


def test_verification_sticks_when_vote_fails(engine, make_user, make_election, users):
    election = make_election(start=timedelta(hours=1), end=timedelta(hours=2))
    user = make_user(verified=False)

    with pytest.raises(ElectionNotOngoing):
        engine.cast_vote(user.id, election.id, election.candidates[0].id, FINGERPRINT)

    assert users.get(user.id).is_fingerprint_verified is True


def test_verification_checked_before_election(engine, make_user):
    user = make_user(verified=False)

    with pytest.raises(VerificationDataRequired):
        engine.cast_vote(user.id, "0123456789abcdef01234567", "0123456789abcdef01234567")


def test_missing_user_and_election(engine, voter):
    with pytest.raises(NotFound):
        engine.cast_vote("0123456789abcdef01234567", "0123456789abcdef01234567", "x")

    with pytest.raises(NotFound):
        engine.cast_vote(voter.id, "not-an-object-id", "x")


def test_custom_matcher_is_used(users, elections, votes, make_user, make_election):
    calls = []

    def matcher(stored, submitted):
        calls.append(submitted)
        return True

    engine = VotingEngine(users, elections, votes, matcher=matcher)
    election = make_election()
    user = make_user(verified=False)

    engine.cast_vote(user.id, election.id, election.candidates[0].id, "anything")

    assert calls == ["anything"]
