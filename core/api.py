"""
Shared plumbing for the JSON API views.
"""

import json
import logging

from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from django.http import JsonResponse
from django.utils.dateparse import parse_date
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from .auth import authenticate
from .errors import ApiError, Conflict, Forbidden, MethodNotAllowed, ValidationFailed
from .models import Session

logger = logging.getLogger(__name__)

ALL_ROLES = (Session.Role.ADMIN, Session.Role.VET, Session.Role.STABLE)
STAFF_ROLES = (Session.Role.ADMIN, Session.Role.VET)
ADMIN_ONLY = (Session.Role.ADMIN,)

SAFE_METHODS = ('GET', 'HEAD', 'OPTIONS')

# Largest value a BigAutoField primary key can hold
MAX_ID = 2 ** 63 - 1


@method_decorator(csrf_exempt, name='dispatch')
class ApiView(View):
    """
    Base class for JSON endpoints.

    Authenticates the bearer token into ``request.identity``, gates the
    method on the caller's role and turns ApiError into a JSON error body.
    Clients authenticate with a header token, not a cookie, so CSRF
    protection does not apply.
    """

    authentication_required = True
    read_roles = ALL_ROLES
    write_roles = STAFF_ROLES

    def dispatch(self, request, *args, **kwargs):
        try:
            request.identity = None
            if self.authentication_required:
                request.identity = authenticate(request)
                self.check_role(request)
            return super().dispatch(request, *args, **kwargs)
        except ApiError as exc:
            return error_response(exc)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.get_full_path())
            return JsonResponse({'error': 'Internal server error'}, status=500)

    def check_role(self, request):
        allowed = self.read_roles if request.method in SAFE_METHODS else self.write_roles
        if request.identity.role not in allowed:
            raise Forbidden(f"The {request.identity.role} role cannot do this")

    def http_method_not_allowed(self, request, *args, **kwargs):
        raise MethodNotAllowed(f"Method {request.method} not allowed")


def error_response(exc):
    return JsonResponse({'error': exc.message}, status=exc.status)


def parse_json(request):
    """Decode a JSON object body; an empty body is an empty object."""
    if not request.body:
        return {}
    try:
        body = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationFailed('Request body must be valid JSON')
    if not isinstance(body, dict):
        raise ValidationFailed('Request body must be a JSON object')
    return body


def parse_id(value, field):
    """Coerce an id from a body or query string; blank means absent."""
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValidationFailed(f"{field} must be an integer")
    try:
        value = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationFailed(f"{field} must be an integer")
    if not -MAX_ID <= value <= MAX_ID:
        raise ValidationFailed(f"{field} is out of range")
    return value


def parse_iso_date(value, field='treatment_date'):
    if value is None or value == '':
        return None
    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationFailed(f"{field} must be a date in YYYY-MM-DD format")
    return parsed


def parse_flag(value, field='active'):
    if isinstance(value, bool):
        return value
    if value in (1, '1', 'true', 'True'):
        return True
    if value in (0, '0', 'false', 'False'):
        return False
    raise ValidationFailed(f"{field} must be true or false")


def query_id(request, name):
    return parse_id(request.GET.get(name), name)


def blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
    return value if value not in ('', None) else None


def collect_patch(body, optional=(), required=()):
    """
    Pick the updatable fields present in ``body``.

    Optional fields present with an empty value become None; required fields
    may not be blanked. No recognised field at all is an error.
    """
    changes = {}
    for field in required:
        if field in body:
            value = blank_to_none(body[field])
            if value is None:
                raise ValidationFailed(f"{field} cannot be blank")
            changes[field] = value
    for field in optional:
        if field in body:
            changes[field] = blank_to_none(body[field])
    if not changes:
        raise ValidationFailed('No fields to update')
    return changes


def save_unique(save, conflict_message):
    """Run a write and report unique-name violations as 409."""
    try:
        with transaction.atomic():
            return save()
    except IntegrityError:
        raise Conflict(conflict_message)


def delete_protected(delete, message):
    try:
        return delete()
    except ProtectedError as exc:
        raise ValidationFailed(message.format(count=len(exc.protected_objects)))
