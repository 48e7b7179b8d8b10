"""
Treatment upserts and the horse x treatment-type grid.

A treatment row is keyed by (horse, treatment type). Writes go through a
single ``INSERT ... ON CONFLICT (horse_id, treatment_type_id) DO UPDATE``
so two concurrent upserts of the same pair can never produce two rows.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from core.api import blank_to_none, parse_id, parse_iso_date
from core.errors import NotFound, ValidationFailed
from core.models import Horse
from core.queries import HORSE_SORTS, filter_horses, horse_rows, ordering, scoped_horses

from . import staleness
from .models import Treatment, TreatmentType

logger = logging.getLogger(__name__)

UPSERT_FIELDS = ['treatment_date', 'notes', 'updated_at']
TYPE_FIELDS = ('id', 'name', 'category', 'sort_order', 'color')


@dataclass(frozen=True)
class TreatmentUpdate:
    horse_id: int
    treatment_type_id: int
    treatment_date: Optional[date] = None
    notes: Optional[str] = None

    @classmethod
    def from_payload(cls, payload):
        """Validate one ``{horse_id, treatment_type_id, treatment_date, notes}`` object."""
        if not isinstance(payload, dict):
            raise ValidationFailed('Each update must be an object')
        horse_id = parse_id(payload.get('horse_id'), 'horse_id')
        treatment_type_id = parse_id(payload.get('treatment_type_id'), 'treatment_type_id')
        if horse_id is None or treatment_type_id is None:
            raise ValidationFailed('horse_id and treatment_type_id are required')
        return cls(
            horse_id=horse_id,
            treatment_type_id=treatment_type_id,
            treatment_date=parse_iso_date(payload.get('treatment_date')),
            notes=blank_to_none(payload.get('notes')),
        )

    def as_treatment(self):
        return Treatment(
            horse_id=self.horse_id,
            treatment_type_id=self.treatment_type_id,
            treatment_date=self.treatment_date,
            notes=self.notes,
        )


def _check_targets(updates, identity):
    """Every referenced horse (within the caller's scope) and type must exist."""
    horse_ids = {u.horse_id for u in updates}
    type_ids = {u.treatment_type_id for u in updates}

    found_horses = set(scoped_horses(identity).filter(pk__in=horse_ids).values_list('pk', flat=True))
    if found_horses != horse_ids:
        raise NotFound(f"Horse not found: {min(horse_ids - found_horses)}")

    found_types = set(TreatmentType.objects.filter(pk__in=type_ids).values_list('pk', flat=True))
    if found_types != type_ids:
        raise NotFound(f"Treatment type not found: {min(type_ids - found_types)}")


def _write(updates):
    # Later entries for the same pair win, and PostgreSQL refuses to touch
    # one row twice in a single ON CONFLICT statement.
    latest = {}
    for update in updates:
        latest[(update.horse_id, update.treatment_type_id)] = update

    with transaction.atomic():
        Treatment.objects.bulk_create(
            [update.as_treatment() for update in latest.values()],
            update_conflicts=True,
            unique_fields=['horse', 'treatment_type'],
            update_fields=UPSERT_FIELDS,
        )
        Horse.objects.filter(
            pk__in={update.horse_id for update in latest.values()}
        ).update(updated_at=timezone.now())
    return latest


def upsert_treatment(update, identity=None):
    """Insert or overwrite one (horse, type) date and return the stored row."""
    _check_targets([update], identity)
    _write([update])
    return treatment_row(
        Treatment.objects.filter(horse_id=update.horse_id, treatment_type_id=update.treatment_type_id)
    )


def upsert_batch(updates, identity=None):
    """Apply many upserts as one all-or-nothing unit. Returns the number of updates received."""
    if not updates:
        raise ValidationFailed('Updates array is required')
    _check_targets(updates, identity)
    written = _write(updates)
    logger.info("Batch upsert: %s update(s), %s distinct pair(s)", len(updates), len(written))
    return len(updates)


def clear_treatment(treatment_id, identity=None):
    """Delete a treatment row so the grid cell reads as never done."""
    treatments = Treatment.objects.filter(pk=treatment_id)
    if identity is not None and identity.is_stable:
        treatments = treatments.filter(horse__owner__stable_id=identity.id)
    deleted, _ = treatments.delete()
    if not deleted:
        raise NotFound('Treatment not found')
    logger.info("Treatment cleared: %s", treatment_id)


def treatment_row(queryset):
    return queryset.values(
        'id', 'horse_id', 'treatment_type_id', 'treatment_date', 'notes', 'created_at', 'updated_at'
    ).first()


def horse_treatments(horse_id):
    """Treatments of one horse with their type metadata, in column order."""
    rows = list(
        Treatment.objects.filter(horse_id=horse_id).annotate(
            type_name=F('treatment_type__name'),
            category=F('treatment_type__category'),
            color=F('treatment_type__color'),
            sort_order=F('treatment_type__sort_order'),
        ).order_by('sort_order', 'type_name').values(
            'id', 'horse_id', 'treatment_type_id', 'treatment_date', 'notes', 'updated_at',
            'type_name', 'category', 'color', 'sort_order',
        )
    )
    today = timezone.localdate()
    for row in rows:
        row['staleness'] = staleness.classify(row['treatment_date'], today)
    return rows


def treatment_types(category=None):
    queryset = TreatmentType.objects.all()
    if category:
        queryset = queryset.filter(category=category)
    return queryset.order_by('sort_order', 'name').values(*TYPE_FIELDS)


def build_grid(identity, search='', owner='', category='', stable=None, vet=None, sort='owner'):
    """
    Assemble the grid payload.

    Returns the ordered treatment types, the ordered active horses matching
    the filters, and a sparse ``{horse_id: {type_id: {id, date, notes}}}``
    map covering every treatment of an active horse the caller may see.
    Pairs without a row are simply absent; the client renders them blank.
    """
    horses = filter_horses(
        scoped_horses(identity).filter(active=True),
        search=search, owner=owner, stable=stable, vet=vet,
    )
    horse_list = list(horse_rows(horses).order_by(*ordering(HORSE_SORTS, sort, 'owner')))

    treatments = Treatment.objects.filter(
        horse__in=scoped_horses(identity).filter(active=True)
    ).values_list('horse_id', 'treatment_type_id', 'id', 'treatment_date', 'notes')

    treatment_map = {}
    for horse_id, type_id, treatment_id, treatment_date, notes in treatments:
        treatment_map.setdefault(horse_id, {})[type_id] = {
            'id': treatment_id,
            'date': treatment_date,
            'notes': notes,
        }

    return {
        'types': list(treatment_types(category)),
        'horses': horse_list,
        'treatments': treatment_map,
    }
