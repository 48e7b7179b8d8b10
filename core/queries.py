"""
Query builders shared by the list, detail and grid endpoints.

Every filter is applied through the ORM, so caller input only ever reaches
the database as a bound parameter. Sort keys come from fixed allow-lists and
unknown keys fall back to the default ordering.
"""

from django.db.models import Count, F, Q

from .api import query_id
from .models import Horse, Owner, Stable, Vet

HORSE_FIELDS = (
    'id', 'name', 'barn_name', 'owner_id', 'owner_name', 'stable_id',
    'vet_id', 'vet_name', 'notes', 'active', 'created_at', 'updated_at',
)
OWNER_FIELDS = ('id', 'name', 'contact', 'notes', 'stable_id', 'stable_name', 'created_at', 'horse_count')
STABLE_FIELDS = ('id', 'name', 'contact', 'address', 'notes', 'active', 'created_at', 'owner_count', 'horse_count')
VET_FIELDS = ('id', 'name', 'email', 'phone', 'active', 'created_at', 'horse_count')

HORSE_SORTS = {
    'name': ('name', 'id'),
    'barn_name': ('barn_name', 'name', 'id'),
    'owner': ('owner__name', 'name', 'id'),
    'updated': ('-updated_at', 'name'),
}
OWNER_SORTS = {
    'name': ('name',),
    'horse_count': ('-horse_count', 'name'),
    'created': ('-created_at', 'name'),
}
ACCOUNT_SORTS = {
    'name': ('name', 'id'),
    'horse_count': ('-horse_count', 'name', 'id'),
}


def ordering(sorts, key, default):
    return sorts.get(key) or sorts[default]


# Horses

def scoped_horses(identity):
    """Horses the caller may see; stable accounts only see their own owners' horses."""
    queryset = Horse.objects.all()
    if identity is not None and identity.is_stable:
        queryset = queryset.filter(owner__stable_id=identity.id)
    return queryset


def horse_filters(request):
    return {
        'search': request.GET.get('search', '').strip(),
        'owner': request.GET.get('owner', '').strip(),
        'stable': query_id(request, 'stable'),
        'vet': query_id(request, 'vet'),
    }


def filter_horses(queryset, search='', owner='', stable=None, vet=None):
    # Search filter
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) |
            Q(barn_name__icontains=search) |
            Q(owner__name__icontains=search)
        )

    # Owner filter (by exact owner name, as the dashboard's dropdown sends it)
    if owner:
        queryset = queryset.filter(owner__name=owner)

    if stable is not None:
        queryset = queryset.filter(owner__stable_id=stable)

    if vet is not None:
        queryset = queryset.filter(vet_id=vet)

    return queryset


def horse_rows(queryset):
    return queryset.annotate(
        owner_name=F('owner__name'),
        stable_id=F('owner__stable_id'),
        vet_name=F('vet__name'),
    ).values(*HORSE_FIELDS)


# Owners

def scoped_owners(identity):
    queryset = Owner.objects.all()
    if identity is not None and identity.is_stable:
        queryset = queryset.filter(stable_id=identity.id)
    return queryset


def owner_rows(queryset):
    return queryset.annotate(
        stable_name=F('stable__name'),
        horse_count=Count('horses', filter=Q(horses__active=True), distinct=True),
    ).values(*OWNER_FIELDS)


# Stables and vets

def scoped_stables(identity):
    queryset = Stable.objects.all()
    if identity is not None and identity.is_stable:
        queryset = queryset.filter(pk=identity.id)
    return queryset


def stable_rows(queryset):
    return queryset.annotate(
        owner_count=Count('owners', distinct=True),
        horse_count=Count(
            'owners__horses',
            filter=Q(owners__horses__active=True),
            distinct=True,
        ),
    ).values(*STABLE_FIELDS)


def vet_rows(queryset=None):
    if queryset is None:
        queryset = Vet.objects.all()
    return queryset.annotate(
        horse_count=Count('horses', filter=Q(horses__active=True), distinct=True),
    ).values(*VET_FIELDS)
