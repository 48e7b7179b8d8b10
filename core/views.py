"""
Views for core app: login sessions, stables, vets, owners and horses.
"""

import logging
import time

from django.db import connection
from django.http import JsonResponse
from django.shortcuts import render
from django.utils import timezone

from health import staleness
from health.models import TreatmentType
from health.services import horse_treatments

from . import auth
from .api import (
    ADMIN_ONLY,
    ALL_ROLES,
    ApiView,
    blank_to_none,
    collect_patch,
    delete_protected,
    parse_flag,
    parse_id,
    parse_json,
    query_id,
    save_unique,
)
from .errors import NotFound, ValidationFailed
from .models import Horse, Owner, Stable, Vet
from .queries import (
    ACCOUNT_SORTS,
    HORSE_SORTS,
    OWNER_SORTS,
    filter_horses,
    horse_filters,
    horse_rows,
    ordering,
    owner_rows,
    scoped_horses,
    scoped_owners,
    scoped_stables,
    stable_rows,
    vet_rows,
)

logger = logging.getLogger(__name__)


def health_check(request):
    """Lightweight DB ping. No auth required."""
    start = time.monotonic()
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
    db_ms = (time.monotonic() - start) * 1000
    return JsonResponse({
        "status": "ok",
        "db_ping_ms": round(db_ms, 1),
    })


def dashboard(request):
    """Page shell for the single-page treatment grid."""
    context = {
        'categories': [{'key': key, 'label': label} for key, label in TreatmentType.Category.choices],
        'staleness_thresholds': {
            'overdue': staleness.OVERDUE_AFTER_DAYS,
            'due_soon': staleness.DUE_SOON_AFTER_DAYS,
            'recent': staleness.RECENT_WITHIN_DAYS,
        },
    }
    return render(request, 'dashboard.html', context)


def _first_or_404(rows, message):
    row = rows.first()
    if row is None:
        raise NotFound(message)
    return row


def _existing_id(model, value, field, message):
    """Validate an optional foreign key id from a request body."""
    pk = parse_id(value, field)
    if pk is not None and not model.objects.filter(pk=pk).exists():
        raise NotFound(message)
    return pk


# Auth Views
class LoginView(ApiView):
    authentication_required = False

    def post(self, request):
        body = parse_json(request)
        role = blank_to_none(body.get('role'))
        account_id = parse_id(body.get('id'), 'id')
        pin = blank_to_none(body.get('pin'))
        if not role or account_id is None or pin is None:
            raise ValidationFailed('role, id and pin are required')

        token, identity, expires_at = auth.login(role, account_id, pin)
        return JsonResponse({
            'token': token,
            'expires_at': expires_at,
            **identity.as_dict(),
        })


class MeView(ApiView):

    def get(self, request):
        return JsonResponse(request.identity.as_dict())


class LogoutView(ApiView):
    write_roles = ALL_ROLES

    def post(self, request):
        auth.logout(auth.bearer_token(request))
        return JsonResponse({'success': True})


class DirectoryView(ApiView):
    """Active accounts of one role, for the login screen."""
    authentication_required = False

    def get(self, request):
        return JsonResponse(list(auth.directory(request.GET.get('role'))), safe=False)


# Stable Views
class StableListView(ApiView):
    write_roles = ADMIN_ONLY

    def get(self, request):
        queryset = scoped_stables(request.identity)

        search = request.GET.get('search', '').strip()
        if search:
            queryset = queryset.filter(name__icontains=search)

        active = request.GET.get('active')
        if active not in (None, '', 'all'):
            queryset = queryset.filter(active=parse_flag(active))

        rows = stable_rows(queryset).order_by(*ordering(ACCOUNT_SORTS, request.GET.get('sort'), 'name'))
        return JsonResponse(list(rows), safe=False)

    def post(self, request):
        body = parse_json(request)
        name = blank_to_none(body.get('name'))
        if not name:
            raise ValidationFailed('Name is required')

        fields = {
            'name': name,
            'contact': blank_to_none(body.get('contact')),
            'address': blank_to_none(body.get('address')),
            'notes': blank_to_none(body.get('notes')),
        }
        pin = blank_to_none(body.get('pin'))
        if pin is not None:
            fields['pin'] = str(pin)
        if 'active' in body:
            fields['active'] = parse_flag(body['active'])

        stable = save_unique(lambda: Stable.objects.create(**fields), 'Stable already exists')
        logger.info("Stable created: %s (%s)", stable.name, stable.pk)
        return JsonResponse(stable_rows(Stable.objects.filter(pk=stable.pk)).first(), status=201)


class StableDetailView(ApiView):
    write_roles = ADMIN_ONLY

    def get(self, request, pk):
        rows = stable_rows(scoped_stables(request.identity).filter(pk=pk))
        return JsonResponse(_first_or_404(rows, 'Stable not found'))

    def put(self, request, pk):
        stable = Stable.objects.filter(pk=pk).first()
        if stable is None:
            raise NotFound('Stable not found')

        changes = collect_patch(
            parse_json(request),
            required=('name', 'pin'),
            optional=('contact', 'address', 'notes', 'active'),
        )
        if 'pin' in changes:
            changes['pin'] = str(changes['pin'])
        if 'active' in changes:
            changes['active'] = parse_flag(changes['active'])

        save_unique(lambda: Stable.objects.filter(pk=pk).update(**changes), 'Stable already exists')
        return JsonResponse(stable_rows(Stable.objects.filter(pk=pk)).first())

    def delete(self, request, pk):
        stable = Stable.objects.filter(pk=pk).first()
        if stable is None:
            raise NotFound('Stable not found')

        owner_count = stable.owners.count()
        if owner_count:
            logger.warning("Blocked delete of stable %s: %s owner(s)", pk, owner_count)
            raise ValidationFailed(f"Cannot delete: stable has {owner_count} owner(s)")

        stable.delete()
        logger.info("Stable deleted: %s", pk)
        return JsonResponse({'success': True})


# Vet Views
class VetListView(ApiView):
    write_roles = ADMIN_ONLY

    def get(self, request):
        queryset = Vet.objects.all()

        search = request.GET.get('search', '').strip()
        if search:
            queryset = queryset.filter(name__icontains=search)

        active = request.GET.get('active')
        if active not in (None, '', 'all'):
            queryset = queryset.filter(active=parse_flag(active))

        rows = vet_rows(queryset).order_by(*ordering(ACCOUNT_SORTS, request.GET.get('sort'), 'name'))
        return JsonResponse(list(rows), safe=False)

    def post(self, request):
        body = parse_json(request)
        name = blank_to_none(body.get('name'))
        if not name:
            raise ValidationFailed('Name is required')

        fields = {
            'name': name,
            'email': blank_to_none(body.get('email')),
            'phone': blank_to_none(body.get('phone')),
        }
        pin = blank_to_none(body.get('pin'))
        if pin is not None:
            fields['pin'] = str(pin)
        if 'active' in body:
            fields['active'] = parse_flag(body['active'])

        vet = Vet.objects.create(**fields)
        logger.info("Vet created: %s (%s)", vet.name, vet.pk)
        return JsonResponse(vet_rows(Vet.objects.filter(pk=vet.pk)).first(), status=201)


class VetDetailView(ApiView):
    write_roles = ADMIN_ONLY

    def get(self, request, pk):
        return JsonResponse(_first_or_404(vet_rows(Vet.objects.filter(pk=pk)), 'Vet not found'))

    def put(self, request, pk):
        if not Vet.objects.filter(pk=pk).exists():
            raise NotFound('Vet not found')

        changes = collect_patch(
            parse_json(request),
            required=('name', 'pin'),
            optional=('email', 'phone', 'active'),
        )
        if 'pin' in changes:
            changes['pin'] = str(changes['pin'])
        if 'active' in changes:
            changes['active'] = parse_flag(changes['active'])

        Vet.objects.filter(pk=pk).update(**changes)
        return JsonResponse(vet_rows(Vet.objects.filter(pk=pk)).first())

    def delete(self, request, pk):
        vet = Vet.objects.filter(pk=pk).first()
        if vet is None:
            raise NotFound('Vet not found')

        # Assigned horses are kept and simply lose their vet
        vet.delete()
        logger.info("Vet deleted: %s", pk)
        return JsonResponse({'success': True})


# Owner Views
class OwnerListView(ApiView):

    def get(self, request):
        queryset = scoped_owners(request.identity)

        search = request.GET.get('search', '').strip()
        if search:
            queryset = queryset.filter(name__icontains=search)

        stable = query_id(request, 'stable')
        if stable is not None:
            queryset = queryset.filter(stable_id=stable)

        rows = owner_rows(queryset).order_by(*ordering(OWNER_SORTS, request.GET.get('sort'), 'name'))
        return JsonResponse(list(rows), safe=False)

    def post(self, request):
        body = parse_json(request)
        name = blank_to_none(body.get('name'))
        if not name:
            raise ValidationFailed('Name is required')

        stable_id = _existing_id(Stable, body.get('stable_id'), 'stable_id', 'Stable not found')
        owner = save_unique(
            lambda: Owner.objects.create(
                name=name,
                contact=blank_to_none(body.get('contact')),
                notes=blank_to_none(body.get('notes')),
                stable_id=stable_id,
            ),
            'Owner already exists',
        )
        logger.info("Owner created: %s (%s)", owner.name, owner.pk)
        return JsonResponse(owner_rows(Owner.objects.filter(pk=owner.pk)).first(), status=201)


class OwnerDetailView(ApiView):

    def get(self, request, pk):
        rows = owner_rows(scoped_owners(request.identity).filter(pk=pk))
        return JsonResponse(_first_or_404(rows, 'Owner not found'))

    def put(self, request, pk):
        if not Owner.objects.filter(pk=pk).exists():
            raise NotFound('Owner not found')

        changes = collect_patch(
            parse_json(request),
            required=('name',),
            optional=('contact', 'notes', 'stable_id'),
        )
        if 'stable_id' in changes:
            changes['stable_id'] = _existing_id(Stable, changes['stable_id'], 'stable_id', 'Stable not found')

        save_unique(lambda: Owner.objects.filter(pk=pk).update(**changes), 'Owner already exists')
        return JsonResponse(owner_rows(Owner.objects.filter(pk=pk)).first())

    def delete(self, request, pk):
        owner = Owner.objects.filter(pk=pk).first()
        if owner is None:
            raise NotFound('Owner not found')

        active_count = owner.active_horse_count
        if active_count:
            logger.warning("Blocked delete of owner %s: %s active horse(s)", pk, active_count)
            raise ValidationFailed(f"Cannot delete: owner has {active_count} active horse(s)")

        delete_protected(owner.delete, "Cannot delete: owner still has {count} archived horse(s)")
        logger.info("Owner deleted: %s", pk)
        return JsonResponse({'success': True})


# Horse Views
class HorseListView(ApiView):

    def get(self, request):
        queryset = filter_horses(scoped_horses(request.identity), **horse_filters(request))

        # Active filter: archived horses only with ?active=0, everything with ?active=all
        active = request.GET.get('active')
        if active != 'all':
            queryset = queryset.filter(active=parse_flag(active) if active else True)

        rows = horse_rows(queryset).order_by(*ordering(HORSE_SORTS, request.GET.get('sort'), 'name'))
        return JsonResponse(list(rows), safe=False)

    def post(self, request):
        body = parse_json(request)
        name = blank_to_none(body.get('name'))
        owner_id = parse_id(body.get('owner_id'), 'owner_id')
        if not name or owner_id is None:
            raise ValidationFailed('Name and owner_id are required')

        owner_id = _existing_id(Owner, owner_id, 'owner_id', 'Owner not found')
        vet_id = _existing_id(Vet, body.get('vet_id'), 'vet_id', 'Vet not found')
        horse = Horse.objects.create(
            name=name,
            barn_name=blank_to_none(body.get('barn_name')),
            owner_id=owner_id,
            vet_id=vet_id,
            notes=blank_to_none(body.get('notes')),
        )
        logger.info("Horse created: %s (%s)", horse.name, horse.pk)
        return JsonResponse(horse_rows(Horse.objects.filter(pk=horse.pk)).first(), status=201)


class HorseDetailView(ApiView):

    def get(self, request, pk):
        # Archived horses are still reachable by id
        horse = _first_or_404(horse_rows(scoped_horses(request.identity).filter(pk=pk)), 'Horse not found')
        horse['treatments'] = horse_treatments(pk)
        return JsonResponse(horse)

    def put(self, request, pk):
        if not Horse.objects.filter(pk=pk).exists():
            raise NotFound('Horse not found')

        changes = collect_patch(
            parse_json(request),
            required=('name', 'owner_id'),
            optional=('barn_name', 'vet_id', 'notes', 'active'),
        )
        if 'owner_id' in changes:
            changes['owner_id'] = _existing_id(Owner, changes['owner_id'], 'owner_id', 'Owner not found')
        if 'vet_id' in changes:
            changes['vet_id'] = _existing_id(Vet, changes['vet_id'], 'vet_id', 'Vet not found')
        if 'active' in changes:
            changes['active'] = parse_flag(changes['active'])
        changes['updated_at'] = timezone.now()

        Horse.objects.filter(pk=pk).update(**changes)
        if changes.get('active') is False:
            logger.info("Horse archived: %s", pk)
        return JsonResponse(horse_rows(Horse.objects.filter(pk=pk)).first())

    def delete(self, request, pk):
        horse = Horse.objects.filter(pk=pk).first()
        if horse is None:
            raise NotFound('Horse not found')

        # Treatments go with the horse (ON DELETE CASCADE)
        horse.delete()
        logger.info("Horse deleted: %s", pk)
        return JsonResponse({'success': True})
