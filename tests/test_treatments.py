"""
Treatment upserts, batch writes, clearing and the grid.
"""

from datetime import date, timedelta

from django.test import SimpleTestCase
from django.utils import timezone

from core.models import Horse, Owner
from health import staleness
from health.models import Treatment, TreatmentType

from .base import ApiTestCase


class StalenessTests(SimpleTestCase):

    def setUp(self):
        self.today = date(2025, 6, 1)

    def age(self, days):
        return staleness.classify(self.today - timedelta(days=days), self.today)

    def test_bands(self):
        self.assertEqual(self.age(400), staleness.OVERDUE)
        self.assertEqual(self.age(300), staleness.DUE_SOON)
        self.assertEqual(self.age(30), staleness.RECENT)
        self.assertEqual(self.age(180), staleness.NEUTRAL)

    def test_boundaries(self):
        self.assertEqual(self.age(366), staleness.OVERDUE)
        self.assertEqual(self.age(365), staleness.DUE_SOON)
        self.assertEqual(self.age(271), staleness.DUE_SOON)
        self.assertEqual(self.age(270), staleness.NEUTRAL)
        self.assertEqual(self.age(91), staleness.NEUTRAL)
        self.assertEqual(self.age(90), staleness.RECENT)

    def test_no_date_is_blank(self):
        self.assertEqual(staleness.classify(None), staleness.BLANK)
        self.assertIsNone(staleness.days_since(None))


class UpsertTests(ApiTestCase):

    def test_carr_coggins_scenario(self):
        owner = self.post('/api/owners', {'name': 'Carr'}).json()
        horse = self.post('/api/horses', {'name': 'Test Horse', 'owner_id': owner['id']}).json()

        first = self.put('/api/treatments', {
            'horse_id': horse['id'],
            'treatment_type_id': self.coggins.pk,
            'treatment_date': '2023-01-01',
        })
        self.assertEqual(first.status_code, 200)
        self.assertTrue(first.json()['success'])

        cell = self.get('/api/grid').json()['treatments'][str(horse['id'])][str(self.coggins.pk)]
        self.assertEqual(cell['date'], '2023-01-01')

        second = self.put('/api/treatments', {
            'horse_id': horse['id'],
            'treatment_type_id': self.coggins.pk,
            'treatment_date': '2024-01-01',
        })
        self.assertEqual(second.json()['id'], first.json()['id'])
        self.assertEqual(second.json()['treatment_date'], '2024-01-01')
        self.assertEqual(
            Treatment.objects.filter(horse_id=horse['id'], treatment_type=self.coggins).count(),
            1,
        )

    def test_upsert_overwrites_notes(self):
        horse = self.make_horse()
        self.put('/api/treatments', {
            'horse_id': horse.pk, 'treatment_type_id': self.rabies.pk,
            'treatment_date': '2024-03-01', 'notes': 'Left neck',
        }, token=self.vet_token)
        self.put('/api/treatments', {
            'horse_id': horse.pk, 'treatment_type_id': self.rabies.pk,
            'treatment_date': '2024-09-01',
        }, token=self.vet_token)

        treatment = Treatment.objects.get(horse=horse, treatment_type=self.rabies)
        self.assertEqual(treatment.treatment_date, date(2024, 9, 1))
        self.assertIsNone(treatment.notes)

    def test_upsert_refreshes_horse_updated_at(self):
        older = self.make_horse('Dolly')
        newer = self.make_horse('Jerry')
        now = timezone.now()
        Horse.objects.filter(pk=older.pk).update(updated_at=now - timedelta(days=2))
        Horse.objects.filter(pk=newer.pk).update(updated_at=now - timedelta(days=1))

        before = self.get('/api/grid?sort=updated').json()['horses']
        self.assertEqual([h['id'] for h in before], [newer.pk, older.pk])

        self.put('/api/treatments', {
            'horse_id': older.pk, 'treatment_type_id': self.coggins.pk, 'treatment_date': '2024-01-01',
        })

        older.refresh_from_db()
        self.assertGreater(older.updated_at, now - timedelta(minutes=1))
        after = self.get('/api/grid?sort=updated').json()['horses']
        self.assertEqual([h['id'] for h in after], [older.pk, newer.pk])

    def test_null_date_keeps_row(self):
        horse = self.make_horse()
        first = self.put('/api/treatments', {
            'horse_id': horse.pk, 'treatment_type_id': self.coggins.pk, 'treatment_date': '2024-01-01',
        }).json()

        response = self.put('/api/treatments', {
            'horse_id': horse.pk, 'treatment_type_id': self.coggins.pk, 'treatment_date': None,
        })
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()['treatment_date'])

        cell = self.get('/api/grid').json()['treatments'][str(horse.pk)][str(self.coggins.pk)]
        self.assertEqual(cell, {'id': first['id'], 'date': None, 'notes': None})

    def test_oversized_id_is_400(self):
        response = self.put('/api/treatments', {'horse_id': 10 ** 30, 'treatment_type_id': self.coggins.pk})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'horse_id is out of range')

    def test_missing_ids_is_400(self):
        response = self.put('/api/treatments', {'treatment_date': '2024-01-01'})
        self.assertEqual(response.status_code, 400)

    def test_bad_date_is_400(self):
        horse = self.make_horse()
        response = self.put('/api/treatments', {
            'horse_id': horse.pk, 'treatment_type_id': self.coggins.pk, 'treatment_date': '01/02/2024',
        })
        self.assertEqual(response.status_code, 400)

    def test_unknown_horse_or_type_is_404(self):
        horse = self.make_horse()
        response = self.put('/api/treatments', {'horse_id': 99999, 'treatment_type_id': self.coggins.pk})
        self.assertEqual(response.status_code, 404)
        response = self.put('/api/treatments', {'horse_id': horse.pk, 'treatment_type_id': 99999})
        self.assertEqual(response.status_code, 404)
        self.assertFalse(Treatment.objects.exists())


class ClearTests(ApiTestCase):

    def test_cleared_cell_reads_blank(self):
        horse = self.make_horse()
        row = self.put('/api/treatments', {
            'horse_id': horse.pk, 'treatment_type_id': self.coggins.pk, 'treatment_date': '2024-01-01',
        }).json()

        response = self.delete(f"/api/treatments/{row['id']}")
        self.assertEqual(response.status_code, 200)

        grid = self.get('/api/grid').json()
        self.assertEqual([h['id'] for h in grid['horses']], [horse.pk])
        self.assertNotIn(str(self.coggins.pk), grid['treatments'].get(str(horse.pk), {}))

    def test_unknown_treatment_is_404(self):
        self.assertEqual(self.delete('/api/treatments/99999').status_code, 404)


class BatchTests(ApiTestCase):

    def setUp(self):
        self.horse = self.make_horse('Dolly')
        self.other = self.make_horse('Jerry')

    def test_batch_writes_all(self):
        response = self.post('/api/treatments/batch', {'updates': [
            {'horse_id': self.horse.pk, 'treatment_type_id': self.coggins.pk, 'treatment_date': '2024-01-01'},
            {'horse_id': self.other.pk, 'treatment_type_id': self.coggins.pk, 'treatment_date': '2024-01-02'},
            {'horse_id': self.horse.pk, 'treatment_type_id': self.rabies.pk, 'treatment_date': '2024-01-03'},
        ]})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'success': True, 'count': 3})
        self.assertEqual(Treatment.objects.count(), 3)

    def test_invalid_item_writes_nothing(self):
        response = self.post('/api/treatments/batch', {'updates': [
            {'horse_id': self.horse.pk, 'treatment_type_id': self.coggins.pk, 'treatment_date': '2024-01-01'},
            {'horse_id': self.other.pk, 'treatment_date': '2024-01-02'},
        ]})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(Treatment.objects.exists())

    def test_unknown_horse_writes_nothing(self):
        response = self.post('/api/treatments/batch', {'updates': [
            {'horse_id': self.horse.pk, 'treatment_type_id': self.coggins.pk, 'treatment_date': '2024-01-01'},
            {'horse_id': 99999, 'treatment_type_id': self.coggins.pk, 'treatment_date': '2024-01-02'},
        ]})
        self.assertEqual(response.status_code, 404)
        self.assertFalse(Treatment.objects.exists())

    def test_repeated_pair_keeps_last(self):
        response = self.post('/api/treatments/batch', {'updates': [
            {'horse_id': self.horse.pk, 'treatment_type_id': self.coggins.pk, 'treatment_date': '2024-01-01'},
            {'horse_id': self.horse.pk, 'treatment_type_id': self.coggins.pk, 'treatment_date': '2024-05-05'},
        ]})
        self.assertEqual(response.json()['count'], 2)
        treatment = Treatment.objects.get(horse=self.horse, treatment_type=self.coggins)
        self.assertEqual(treatment.treatment_date, date(2024, 5, 5))

    def test_empty_batch_is_400(self):
        self.assertEqual(self.post('/api/treatments/batch', {'updates': []}).status_code, 400)


class GridTests(ApiTestCase):

    def test_types_are_ordered_and_filterable(self):
        grid = self.get('/api/grid').json()
        self.assertEqual(len(grid['types']), TreatmentType.objects.count())
        orders = [t['sort_order'] for t in grid['types']]
        self.assertEqual(orders, sorted(orders))

        tests_only = self.get('/api/grid?category=test').json()
        self.assertTrue(tests_only['types'])
        self.assertEqual({t['category'] for t in tests_only['types']}, {'test'})

    def test_sorted_by_owner_then_name(self):
        creel = Owner.objects.create(name='Creel')
        carr = Owner.objects.create(name='Carr')
        self.make_horse('Mo Town', creel)
        self.make_horse('Vivi', carr)
        self.make_horse('Dolly', carr)

        horses = self.get('/api/grid').json()['horses']
        self.assertEqual([h['name'] for h in horses], ['Dolly', 'Vivi', 'Mo Town'])

        by_name = self.get('/api/grid?sort=name').json()['horses']
        self.assertEqual([h['name'] for h in by_name], ['Dolly', 'Mo Town', 'Vivi'])

    def test_search_filters_rows(self):
        self.make_horse('Hascombe Verona', barn_name='Vivi')
        self.make_horse('Noble Tropicana')
        horses = self.get('/api/grid?search=vivi').json()['horses']
        self.assertEqual([h['name'] for h in horses], ['Hascombe Verona'])


class TreatmentTypeTests(ApiTestCase):

    def test_create_with_defaults(self):
        response = self.post('/api/treatment-types', {'name': 'Dental Float', 'category': 'maintenance'})
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body['sort_order'], 99)
        self.assertEqual(body['color'], '#3A8A4E')

    def test_duplicate_is_409(self):
        response = self.post('/api/treatment-types', {'name': 'Coggins', 'category': 'test'})
        self.assertEqual(response.status_code, 409)

    def test_explicit_zero_sort_order_is_kept(self):
        response = self.post('/api/treatment-types', {'name': 'Ultrasound', 'category': 'test', 'sort_order': 0})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['sort_order'], 0)
        self.assertEqual(self.get('/api/treatment-types').json()[0]['name'], 'Ultrasound')

    def test_unknown_category_is_400(self):
        response = self.post('/api/treatment-types', {'name': 'Massage', 'category': 'spa'})
        self.assertEqual(response.status_code, 400)

    def test_horse_treatments_carry_staleness(self):
        horse = self.make_horse()
        Treatment.objects.create(horse=horse, treatment_type=self.coggins, treatment_date=None)
        rows = self.get(f'/api/horses/{horse.pk}/treatments').json()
        self.assertEqual(rows[0]['staleness'], 'blank')
