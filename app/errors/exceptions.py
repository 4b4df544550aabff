from fastapi import HTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

class BadRequest(HTTPException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=HTTP_400_BAD_REQUEST, detail=detail)

class NotFound(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=HTTP_404_NOT_FOUND, detail=detail)

class InternalServerError(HTTPException):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Unauthorized access"):
        super().__init__(status_code=HTTP_401_UNAUTHORIZED, detail=detail)

class Forbidden(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=HTTP_403_FORBIDDEN, detail=detail)

class Conflict(HTTPException):
    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=HTTP_409_CONFLICT, detail=detail)

class BadGateway(HTTPException):
    def __init__(self, detail: str = "Upstream service returned an invalid response"):
        super().__init__(status_code=HTTP_502_BAD_GATEWAY, detail=detail)

class ServiceUnavailable(HTTPException):
    def __init__(self, detail: str = "Service temporarily unavailable"):
        super().__init__(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail=detail)

class ValidationError(BadRequest):
    def __init__(self, detail: str = "Validation error"):
        super().__init__(detail=detail)

class DocumentNotFound(NotFound):
    def __init__(self, path: str = None):
        self.path = path
        detail = f"Document '{path}' not found." if path else "Document not found."
        super().__init__(detail=detail)
class UserNotFound(NotFound):
    def __init__(self, identifier: str = None):
        super().__init__(detail="User not found.")
class InterviewNotFound(NotFound):
    def __init__(self, identifier: str = None):
        detail = f"Interview '{identifier}' not found." if identifier else "Interview not found."
        super().__init__(detail=detail)
class SessionInvalidated(Unauthorized):
    def __init__(self, detail: str = "Your session is no longer active. You may have logged in on another device."):
        super().__init__(detail=detail)
class EmailNotVerified(Forbidden):
    def __init__(self, detail: str = "Please verify your email address before signing in."):
        super().__init__(detail=detail)
class InterviewLimitReached(Forbidden):
    def __init__(self, limit: int = 3):
        super().__init__(detail=f"You have used all {limit} free interviews. Upgrade to Plus to continue practicing.")
class InterviewEnded(Conflict):
    def __init__(self, identifier: str = None):
        detail = f"Interview '{identifier}' has already ended." if identifier else "Interview has already ended."
        super().__init__(detail=detail)
class SubmissionInProgress(Conflict):
    def __init__(self, detail: str = "An answer is already being submitted. Please wait."):
        super().__init__(detail=detail)
class EmptyAnswerError(ValidationError):
    def __init__(self, detail: str = "An answer is required for written technical questions."):
        super().__init__(detail=detail)
class QuestionGenerationError(BadGateway):
    def __init__(self, detail: str = "The AI service did not return any interview questions. Please try again."):
        super().__init__(detail=detail)
class ServiceOverloadedError(ServiceUnavailable):
    def __init__(self, detail: str = "The AI service is currently overloaded. Please try again in a few minutes."):
        super().__init__(detail=detail)
class FeedbackServiceError(BadGateway):
    def __init__(self, detail: str = "The AI feedback service failed to respond."):
        super().__init__(detail=detail)
