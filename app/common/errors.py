"""
Error taxonomy and result types shared by the auth and CMS apps
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

T = TypeVar("T")


class CMSError(Exception):
    """Base class for errors the API knows how to report."""

    status_code = 500
    code = "error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = message or (self.__class__.__doc__ or self.code).strip()

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class ConfigurationError(CMSError):
    """The Supabase backend is not configured."""

    status_code = 503
    code = "configuration_error"

    def __init__(self, message: Optional[str] = None, remediation: Optional[List[str]] = None):
        super().__init__(message)
        self.remediation = list(remediation or [])

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["remediation"] = self.remediation
        return data


class InvalidCredentials(CMSError):
    """Invalid login credentials."""

    status_code = 401
    code = "invalid_credentials"


class ValidationError(CMSError):
    """The submitted data is not valid."""

    status_code = 422
    code = "validation_error"


class NotFound(CMSError):
    """The requested record does not exist."""

    status_code = 404
    code = "not_found"


class NetworkError(CMSError):
    """The backend could not be reached."""

    status_code = 502
    code = "network_error"


class DuplicateRecord(CMSError):
    """A record with the same unique value already exists."""

    status_code = 409
    code = "duplicate_record"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T = None
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Failure:
    error: CMSError
    ok: bool = field(default=False, init=False)


Result = Union[Success[T], Failure]
