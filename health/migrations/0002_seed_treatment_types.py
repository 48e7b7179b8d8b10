"""
Data migration: seed the fixed treatment-type columns of the grid.

Existing rows with the same name are left untouched.
"""

from django.db import migrations

VACCINE = '#3A8A4E'
TEST = '#5B7FA5'
MAINTENANCE = '#8B6BAE'
INJECTION = '#D4894A'

TREATMENT_TYPES = [
    ('Flu/Rhino', 'vaccine', VACCINE),
    ('EWT/WNV', 'vaccine', VACCINE),
    ('Potomac', 'vaccine', VACCINE),
    ('Rabies', 'vaccine', VACCINE),
    ('Coggins', 'test', TEST),
    ('McMaster', 'test', TEST),
    ('Dentist', 'maintenance', MAINTENANCE),
    ('Deworm', 'maintenance', MAINTENANCE),
    ('Coffins', 'injection', INJECTION),
    ('Front Fetlocks', 'injection', INJECTION),
    ('Hind Fetlocks', 'injection', INJECTION),
    ('Hocks', 'injection', INJECTION),
    ('Stifles', 'injection', INJECTION),
    ('SI', 'injection', INJECTION),
    ('Back', 'injection', INJECTION),
    ('Neck', 'injection', INJECTION),
    ('Hind Coffin', 'injection', INJECTION),
]


def seed_treatment_types(apps, schema_editor):
    TreatmentType = apps.get_model('health', 'TreatmentType')

    for sort_order, (name, category, color) in enumerate(TREATMENT_TYPES, start=1):
        TreatmentType.objects.get_or_create(
            name=name,
            defaults={
                'category': category,
                'sort_order': sort_order,
                'color': color,
            },
        )


def unseed_treatment_types(apps, schema_editor):
    TreatmentType = apps.get_model('health', 'TreatmentType')
    TreatmentType.objects.filter(
        name__in=[name for name, _, _ in TREATMENT_TYPES],
        treatments__isnull=True,
    ).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('health', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_treatment_types, unseed_treatment_types),
    ]
