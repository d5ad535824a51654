from typing import Dict, Optional


class VotingError(Exception):
    """Base for every failure that is translated into a structured response."""

    status_code = 500
    code = "error"
    message = "Something went wrong on the server!"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message, "code": self.code}


class NotFound(VotingError):
    status_code = 404
    code = "not_found"
    message = "Not found"


class CandidateNotFound(NotFound):
    code = "candidate_not_found"
    message = "Candidate not found in this election"


class ValidationFailed(VotingError):
    status_code = 400
    code = "validation_failed"
    message = "Validation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.errors:
            data["errors"] = self.errors
        return data


class VerificationDataRequired(VotingError):
    status_code = 400
    code = "verification_required"
    message = "Fingerprint data required for unverified users."


class VerificationNotEnrolled(VotingError):
    status_code = 400
    code = "verification_not_enrolled"
    message = "Fingerprint not enrolled for this user. Please enroll fingerprint first."


class VerificationFailed(VotingError):
    status_code = 401
    code = "verification_failed"
    message = "Fingerprint verification failed."


class ElectionNotOngoing(VotingError):
    status_code = 400
    code = "election_not_ongoing"

    def __init__(self, status):
        self.status = getattr(status, "value", status)
        super().__init__(f"Election is not ongoing. Status: {self.status}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["status"] = self.status
        return data


class DuplicateVote(VotingError):
    status_code = 409
    code = "duplicate_vote"
    message = "You have already voted in this election."


class NotAuthenticated(VotingError):
    status_code = 401
    code = "not_authenticated"
    message = "Not authorized, token failed"


class Forbidden(VotingError):
    status_code = 403
    code = "forbidden"
    message = "Not authorized as an admin"
