"""Error taxonomy shared by services, stores and the API layer."""
from typing import List, Optional


class PathwaysError(Exception):
    """Base class for every error raised by this application."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PathwaysError):
    """Assessment data rejected at the submission boundary."""

    status_code = 422

    def __init__(self, problems: List[str]):
        super().__init__("; ".join(problems))
        self.problems = problems


class ParseError(PathwaysError):
    """AI output could not be turned into recommendations."""

    status_code = 502


class ConnectivityError(PathwaysError):
    """A store or the AI service could not be reached."""

    status_code = 503

    def __init__(self, message: str, service: str = "store", status_code: Optional[int] = None):
        super().__init__(message)
        self.service = service
        if status_code is not None:
            self.status_code = status_code


class StudentNotFoundError(PathwaysError):
    status_code = 404

    def __init__(self, student_id: str):
        super().__init__(f"Student '{student_id}' not found")
        self.student_id = student_id


class MissingApiKeyError(PathwaysError):
    status_code = 400

    def __init__(self):
        super().__init__("API key is required")
