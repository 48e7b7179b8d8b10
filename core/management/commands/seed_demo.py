"""
Management command to load the demo owners and horses.

Creates: Owner and Horse records from the practice's starter list, plus an
Administrator account if none exists yet. Treatment types are seeded by
migration health.0002.
Idempotent: owners are matched by name and horses by (name, owner).
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from core.models import Administrator, Horse, Owner

# ---------------------------------------------------------------------------
# Owner name -> [(registered name, barn name), ...]
# ---------------------------------------------------------------------------
DEMO_HORSES = {
    'HH': [
        ('HH Ice Spice', 'Ice Spice'),
        ('HH N Joy', 'Nico'),
        ('HH Marvin Gardens', 'Marvin'),
        ('HH Griffin', 'Griffin'),
        ('HH Jamil Fields', 'Jimmy'),
        ('HH Kingdom PS', 'Buddy'),
        ('Aspy', 'Aspy'),
        ('Ginger', 'Ginger'),
        ('Jumping Jack Flash', 'Jack'),
        ('HH Moonrise Kingdom', 'Poncho'),
        ('HH Leandro', 'Leandro'),
    ],
    'Carr': [
        ('Dolitaire Chavannaise', 'Dolly'),
        ('Calgary BGM Z', 'Jerry'),
        ("Chahitane D'Aragon", 'Barbie'),
        ('Hascombe Verona', 'Vivi'),
        ('Noble Tropicana', 'Tropicana'),
        ('HH Blue Moon', 'Moonie'),
    ],
    'Creel': [
        ('HH Mo Town', 'Mo Town'),
        ('Malle Balle', 'Malle Balle'),
    ],
}


class Command(BaseCommand):
    help = 'Load demo owners, horses and a default admin account'

    def add_arguments(self, parser):
        parser.add_argument(
            '--admin-name',
            default='Practice Admin',
            help='Name of the admin account created when none exists',
        )
        parser.add_argument(
            '--admin-pin',
            default='0000',
            help='PIN of the admin account created when none exists',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Loading demo data...')
        owners_created = 0
        horses_created = 0

        for owner_name, horses in DEMO_HORSES.items():
            owner, created = Owner.objects.get_or_create(name=owner_name)
            owners_created += created
            for name, barn_name in horses:
                _, created = Horse.objects.get_or_create(
                    name=name,
                    owner=owner,
                    defaults={'barn_name': barn_name},
                )
                horses_created += created

        if not Administrator.objects.exists():
            admin = Administrator.objects.create(
                name=options['admin_name'],
                pin=options['admin_pin'],
            )
            self.stdout.write(f'  Created admin account #{admin.pk} ({admin.name})')

        self.stdout.write(self.style.SUCCESS(
            f'Demo data loaded: {owners_created} owner(s), {horses_created} horse(s) created.'
        ))
