"""
core/errors.py -- Service error taxonomy.

Every failure the core can report to a caller is a ServiceError subclass.
Each class fixes its HTTP status and machine-readable code, so the API layer
renders all of them with one exception handler and domain code never imports
fastapi.

  ValidationError      400  malformed or missing input (carries violations)
  Unauthenticated      401  missing, invalid, or expired session
  InvalidCredential    401  the identity provider rejected the bearer credential
  UsernameMismatch     401  claimed username is not the credential's owner
  Forbidden            403  valid session, insufficient role or protected target
  NotAuthorized        403  credential owner is not on the admin roster
  RegistryUnavailable  403  admin roster could not be read during login
  NotFound             404  target object absent
  Conflict             409  version token mismatch on a write
  Unavailable          500  remote store or identity endpoint failed
  TooLarge             500  namespace walk exceeded its cap

Messages are safe to show to untrusted callers. Raw provider bodies never go
into a ServiceError.
"""

from __future__ import annotations

from typing import Optional


class ServiceError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, violations: Optional[list[str]] = None, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.violations = list(violations) if violations else []
        self.detail = detail


class ValidationError(ServiceError):
    """Caller-fixable input problem.

    When several fields are checked, violations lists every rule that failed,
    not just the first one.
    """

    status_code = 400
    code = "validation_error"


class Unauthenticated(ServiceError):
    status_code = 401
    code = "unauthenticated"


class InvalidCredential(ServiceError):
    status_code = 401
    code = "invalid_credential"


class UsernameMismatch(ServiceError):
    status_code = 401
    code = "username_mismatch"


class Forbidden(ServiceError):
    status_code = 403
    code = "forbidden"


class NotAuthorized(ServiceError):
    status_code = 403
    code = "not_authorized"


class RegistryUnavailable(ServiceError):
    status_code = 403
    code = "registry_unavailable"


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"


class Conflict(ServiceError):
    status_code = 409
    code = "conflict"


class Unavailable(ServiceError):
    status_code = 500
    code = "unavailable"


class TooLarge(Unavailable):
    code = "too_large"
