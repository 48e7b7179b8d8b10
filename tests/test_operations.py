"""
Housekeeping task, health check, dashboard page and the demo loader.
"""

from datetime import timedelta
from io import StringIO

from django.core.management import call_command

from core.models import Administrator, Horse, Owner, Session
from core.tasks import purge_expired_sessions

from .base import ApiTestCase


class PurgeExpiredSessionsTests(ApiTestCase):

    def test_deletes_only_expired_rows(self):
        expired = self.open_session(Session.Role.VET, self.vet, expires_in=timedelta(days=-1))

        result = purge_expired_sessions()

        self.assertEqual(result, 'Purged 1 expired sessions')
        self.assertFalse(Session.objects.filter(token=expired).exists())
        self.assertTrue(Session.objects.filter(token=self.vet_token).exists())
        self.assertEqual(Session.objects.count(), 3)


class HealthCheckTests(ApiTestCase):

    def test_ping(self):
        response = self.client.get('/_health/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'ok')
        self.assertIn('Server-Timing', response)


class DashboardTests(ApiTestCase):

    def test_page_shell(self):
        response = self.client.get('/')
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'id="app"')
        self.assertContains(response, 'id="staleness-thresholds"')
        self.assertContains(response, 'paddock/dashboard.js')


class SeedDemoTests(ApiTestCase):

    def test_loads_once(self):
        out = StringIO()
        call_command('seed_demo', stdout=out)
        self.assertIn('3 owner(s), 19 horse(s) created', out.getvalue())
        self.assertEqual(Horse.objects.filter(owner__name='Carr').count(), 6)

        call_command('seed_demo', stdout=StringIO())
        self.assertEqual(Owner.objects.count(), 3)
        self.assertEqual(Horse.objects.count(), 19)
        self.assertEqual(Administrator.objects.count(), 1)
