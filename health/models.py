"""
Treatment tracking models.
"""

from django.db import models

from . import staleness


class TreatmentType(models.Model):
    """A column of the treatment grid (vaccine, test, maintenance or joint injection)."""

    class Category(models.TextChoices):
        VACCINE = 'vaccine', 'Vaccine'
        TEST = 'test', 'Test'
        MAINTENANCE = 'maintenance', 'Maintenance'
        INJECTION = 'injection', 'Joint Injection'

    name = models.CharField(max_length=100, unique=True)
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        default=Category.VACCINE
    )
    sort_order = models.IntegerField(default=99)
    color = models.CharField(max_length=7, default='#3A8A4E')

    class Meta:
        ordering = ['sort_order', 'name']

    def __str__(self):
        return self.name


class Treatment(models.Model):
    """Last-done date for one horse and one treatment type."""

    horse = models.ForeignKey(
        'core.Horse',
        on_delete=models.CASCADE,
        related_name='treatments'
    )
    treatment_type = models.ForeignKey(
        TreatmentType,
        on_delete=models.PROTECT,
        related_name='treatments'
    )
    treatment_date = models.DateField(null=True, blank=True, db_index=True)
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['treatment_type__sort_order']
        constraints = [
            models.UniqueConstraint(
                fields=['horse', 'treatment_type'],
                name='unique_treatment_per_horse_type',
            ),
        ]

    def __str__(self):
        return f"{self.horse.name} - {self.treatment_type.name} ({self.treatment_date or 'blank'})"

    @property
    def staleness(self):
        return staleness.classify(self.treatment_date)
