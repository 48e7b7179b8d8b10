"""
Token sessions: login, session validation and logout.

PINs are stored and compared as plain text and there is no attempt
throttling. Both are known weaknesses carried over from the existing
deployment; see DESIGN.md.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings
from django.db.models import Case, CharField, OuterRef, Subquery, When
from django.utils import timezone
from django.utils.crypto import constant_time_compare, get_random_string

from .errors import AuthenticationFailed, NotFound, ValidationFailed
from .models import Administrator, Session, Stable, Vet

logger = logging.getLogger(__name__)

TOKEN_LENGTH = 64

ACCOUNT_MODELS = {
    Session.Role.VET: Vet,
    Session.Role.STABLE: Stable,
    Session.Role.ADMIN: Administrator,
}


@dataclass(frozen=True)
class Identity:
    """The caller behind a valid session."""

    role: str
    id: int
    name: str

    @property
    def is_admin(self):
        return self.role == Session.Role.ADMIN

    @property
    def is_vet(self):
        return self.role == Session.Role.VET

    @property
    def is_stable(self):
        return self.role == Session.Role.STABLE

    def as_dict(self):
        return {'role': self.role, 'id': self.id, 'name': self.name}


def account_model(role):
    """Return the account table for ``role``; unknown roles are a validation error."""
    try:
        return ACCOUNT_MODELS[role]
    except (KeyError, TypeError):
        raise ValidationFailed('Role must be one of: vet, stable, admin')


def bearer_token(request):
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer':
        return None
    return token.strip() or None


def _account_name(model):
    return Subquery(
        model.objects.filter(pk=OuterRef('ref_id'), active=True).values('name')[:1]
    )


def resolve_token(token):
    """
    Resolve a bearer token to an Identity.

    Expired sessions are rejected here whether or not the purge task has
    removed them yet. Sessions pointing at a deleted or deactivated account
    are rejected too.
    """
    if not token:
        raise AuthenticationFailed('Authentication required')

    session = Session.objects.filter(
        token=token,
        expires_at__gt=timezone.now(),
    ).annotate(
        account_name=Case(
            *[When(role=role, then=_account_name(model)) for role, model in ACCOUNT_MODELS.items()],
            output_field=CharField(),
        )
    ).values('role', 'ref_id', 'account_name').first()

    if session is None:
        raise AuthenticationFailed('Invalid or expired session')
    if session['account_name'] is None:
        raise AuthenticationFailed('Account is no longer active')
    return Identity(session['role'], session['ref_id'], session['account_name'])


def authenticate(request):
    return resolve_token(bearer_token(request))


def login(role, account_id, pin):
    """Check a PIN and open a session. Returns ``(token, identity, expires_at)``."""
    model = account_model(role)
    account = model.objects.filter(pk=account_id, active=True).first()
    if account is None:
        logger.warning("Login failed: no active %s with id %s", role, account_id)
        raise NotFound(f"{role.capitalize()} not found")

    if not constant_time_compare(str(pin), account.pin):
        logger.warning("Login failed: wrong PIN for %s %s", role, account_id)
        raise AuthenticationFailed('Invalid PIN')

    expires_at = timezone.now() + timedelta(days=settings.API_SESSION_TTL_DAYS)
    session = Session.objects.create(
        token=get_random_string(TOKEN_LENGTH),
        role=role,
        ref_id=account.pk,
        expires_at=expires_at,
    )
    logger.info("Login: %s %s (%s)", role, account.pk, account.name)
    return session.token, Identity(role, account.pk, account.name), expires_at


def logout(token):
    deleted, _ = Session.objects.filter(token=token).delete()
    if deleted:
        logger.info("Logout: session closed")
    return deleted


def directory(role):
    """Active accounts for the login picker. PINs are never included."""
    return account_model(role).objects.filter(active=True).order_by('name').values('id', 'name')
