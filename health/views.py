"""
Views for health app: treatment types, treatment dates and the grid.
"""

import logging

from django.http import JsonResponse

from core.api import ApiView, blank_to_none, parse_json, query_id, save_unique
from core.errors import NotFound, ValidationFailed
from core.queries import scoped_horses

from .models import TreatmentType
from .services import (
    TreatmentUpdate,
    build_grid,
    clear_treatment,
    horse_treatments,
    treatment_types,
    upsert_batch,
    upsert_treatment,
)

logger = logging.getLogger(__name__)


class TreatmentTypeListView(ApiView):

    def get(self, request):
        return JsonResponse(list(treatment_types(request.GET.get('category'))), safe=False)

    def post(self, request):
        body = parse_json(request)
        name = blank_to_none(body.get('name'))
        if not name:
            raise ValidationFailed('Name is required')

        category = blank_to_none(body.get('category')) or TreatmentType.Category.VACCINE
        if category not in TreatmentType.Category.values:
            raise ValidationFailed('Category must be one of: ' + ', '.join(TreatmentType.Category.values))

        sort_order = body.get('sort_order')
        if sort_order in (None, ''):
            sort_order = 99
        try:
            sort_order = int(sort_order)
        except (TypeError, ValueError):
            raise ValidationFailed('sort_order must be an integer')

        treatment_type = save_unique(
            lambda: TreatmentType.objects.create(
                name=name,
                category=category,
                sort_order=sort_order,
                color=blank_to_none(body.get('color')) or '#3A8A4E',
            ),
            'Treatment type already exists',
        )
        logger.info("Treatment type created: %s (%s)", treatment_type.name, treatment_type.pk)
        return JsonResponse(treatment_types().filter(pk=treatment_type.pk).first(), status=201)


class HorseTreatmentListView(ApiView):

    def get(self, request, pk):
        if not scoped_horses(request.identity).filter(pk=pk).exists():
            raise NotFound('Horse not found')
        return JsonResponse(horse_treatments(pk), safe=False)


class TreatmentUpsertView(ApiView):
    """PUT sets (or overwrites) the date for one horse and treatment type."""

    def put(self, request):
        update = TreatmentUpdate.from_payload(parse_json(request))
        row = upsert_treatment(update, request.identity)
        return JsonResponse({'success': True, **row})


class TreatmentDetailView(ApiView):

    def delete(self, request, pk):
        clear_treatment(pk, request.identity)
        return JsonResponse({'success': True})


class TreatmentBatchView(ApiView):

    def post(self, request):
        updates = parse_json(request).get('updates')
        if not isinstance(updates, list) or not updates:
            raise ValidationFailed('Updates array is required')

        count = upsert_batch(
            [TreatmentUpdate.from_payload(item) for item in updates],
            request.identity,
        )
        return JsonResponse({'success': True, 'count': count})


class GridView(ApiView):

    def get(self, request):
        grid = build_grid(
            request.identity,
            search=request.GET.get('search', '').strip(),
            owner=request.GET.get('owner', '').strip(),
            category=request.GET.get('category', '').strip(),
            stable=query_id(request, 'stable'),
            vet=query_id(request, 'vet'),
            sort=request.GET.get('sort') or 'owner',
        )
        return JsonResponse(grid)
