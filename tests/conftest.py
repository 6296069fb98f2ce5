import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from core.models import User
from rewards.models import Reward


@pytest.fixture(autouse=True)
def clear_cache():
    # Sign-in throttles keep their counters in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


def make_user(role, email, name, **extra):
    return User.objects.create_user(email=email, name=name, password='Str0ng!Pass', role=role, **extra)


@pytest.fixture
def household(db):
    return make_user('household', '2348031234567@wastewise.local', 'Ada Obi', phone='2348031234567', location='Yaba')


@pytest.fixture
def other_household(db):
    return make_user('household', '2348039876543@wastewise.local', 'Bola Ade', phone='2348039876543', location='Ikeja')


@pytest.fixture
def collector(db):
    return make_user('collector', 'chidi@wastewise.com', 'Chidi Collector')


@pytest.fixture
def receiver(db):
    return make_user('receiver', 'rita@wastewise-receivers.com', 'Rita Receiver')


@pytest.fixture
def admin_user(db):
    return make_user('admin', 'admin@wastewise.com', 'Site Admin', is_staff=True)


@pytest.fixture
def client_for(api_client):
    def _client_for(user):
        api_client.force_authenticate(user=user)
        return api_client
    return _client_for


@pytest.fixture
def airtime_reward(db):
    return Reward.objects.create(title='₦100 Airtime', description='Any network', points_cost=100, category='airtime')


@pytest.fixture
def voucher_reward(db):
    return Reward.objects.create(title='Coffee Voucher', points_cost=150, category='voucher')


@pytest.fixture
def meter_reward(db):
    return Reward.objects.create(title='₦1000 Electricity Token', points_cost=700, category='utility_token')
