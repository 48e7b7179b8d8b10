"""
Shared fixtures for the API tests.
"""

import json
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from django.utils.crypto import get_random_string

from core.models import Administrator, Horse, Owner, Session, Stable, Vet
from health.models import TreatmentType


class ApiTestCase(TestCase):
    """TestCase with one account per role and a logged-in token for each."""

    @classmethod
    def setUpTestData(cls):
        cls.admin = Administrator.objects.create(name='Practice Admin', pin='0000')
        cls.vet = Vet.objects.create(name='Dr. Hall', pin='4321')
        cls.stable = Stable.objects.create(name='Hunter Hill', pin='1111')
        cls.other_stable = Stable.objects.create(name='Creekside', pin='2222')

        cls.admin_token = cls.open_session(Session.Role.ADMIN, cls.admin)
        cls.vet_token = cls.open_session(Session.Role.VET, cls.vet)
        cls.stable_token = cls.open_session(Session.Role.STABLE, cls.stable)

        cls.coggins = TreatmentType.objects.get(name='Coggins')
        cls.rabies = TreatmentType.objects.get(name='Rabies')

    @classmethod
    def open_session(cls, role, account, expires_in=timedelta(days=30)):
        session = Session.objects.create(
            token=get_random_string(64),
            role=role,
            ref_id=account.pk,
            expires_at=timezone.now() + expires_in,
        )
        return session.token

    def make_horse(self, name='Test Horse', owner=None, **kwargs):
        if owner is None:
            owner, _ = Owner.objects.get_or_create(name='Carr')
        return Horse.objects.create(name=name, owner=owner, **kwargs)

    # Request helpers

    def call(self, method, url, data=None, token=None):
        kwargs = {}
        if token:
            kwargs['HTTP_AUTHORIZATION'] = f'Bearer {token}'
        if data is not None:
            kwargs['data'] = json.dumps(data)
            kwargs['content_type'] = 'application/json'
        return getattr(self.client, method)(url, **kwargs)

    def get(self, url, token=None):
        return self.call('get', url, token=token or self.admin_token)

    def post(self, url, data=None, token=None):
        return self.call('post', url, data, token=token or self.admin_token)

    def put(self, url, data=None, token=None):
        return self.call('put', url, data, token=token or self.admin_token)

    def delete(self, url, token=None):
        return self.call('delete', url, token=token or self.admin_token)
