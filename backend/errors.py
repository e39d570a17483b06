# errors.py
"""
Failure taxonomy. Every error carries the HTTP status it maps to and a
generic message that is safe to return; the constructor argument is internal
detail and only ever logged.
"""


class QuizError(Exception):
    status_code = 500
    public_message = "Something went wrong"


class InvalidRequest(QuizError):
    status_code = 400
    public_message = "Invalid request"


class NothingToDo(InvalidRequest):
    public_message = "No questions were selected for replacement"


class NotFound(QuizError):
    status_code = 404
    public_message = "Not found"


class UpstreamFailure(QuizError):
    public_message = "Upstream service failed"


class FetchFailure(UpstreamFailure):
    public_message = "Failed to fetch page"


class GenerationFailure(UpstreamFailure):
    public_message = "Failed to generate quiz"


class GenerationParseFailure(GenerationFailure):
    pass


class GenerationTimeout(GenerationFailure):
    public_message = "Quiz generation timed out"


class StorageFailure(QuizError):
    public_message = "Storage error"


class ConflictFailure(QuizError):
    public_message = "Could not allocate a unique quiz identifier"
