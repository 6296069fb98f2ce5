import pytest
from django.core.exceptions import ValidationError
from django.urls import reverse

from core.models import User
from core.services import phone_credentials, resolve_identity, sign_in_with_phone
from core.validators import normalize_phone


pytestmark = pytest.mark.django_db


class TestPhoneNormalisation:
    @pytest.mark.parametrize('raw', ['08031234567', '+2348031234567', '2348031234567', '0803 123 4567', '0803-123-4567'])
    def test_accepted_forms_collapse_to_international(self, raw):
        assert normalize_phone(raw) == '2348031234567'

    @pytest.mark.parametrize('raw', ['0603123456', '12345', '', '080312345678'])
    def test_rejects_bad_numbers(self, raw):
        with pytest.raises(ValidationError):
            normalize_phone(raw)

    def test_credentials_are_stable_per_number(self):
        first = phone_credentials('08031234567')
        second = phone_credentials('+2348031234567')
        assert first == second
        assert first[1] == '2348031234567@wastewise.local'


class TestResolveIdentity:
    def test_household_resolves_with_role(self, household):
        identity = resolve_identity(household)
        assert identity['role'] == 'household'
        assert identity['profile'] == household

    def test_inactive_user_is_unresolved(self, collector):
        collector.is_active = False
        collector.save()
        assert resolve_identity(collector) is None

    def test_user_without_role_is_unresolved(self, household):
        User.objects.filter(pk=household.pk).update(role='')
        household.refresh_from_db()
        assert resolve_identity(household) is None

    def test_profile_endpoint_404_when_unresolved(self, client_for, household):
        User.objects.filter(pk=household.pk).update(role='')
        household.refresh_from_db()
        response = client_for(household).get(reverse('user-profile'))
        assert response.status_code == 404
        assert response.data['detail'] == 'Profile not provisioned.'

    def test_profile_endpoint_returns_role(self, client_for, receiver):
        response = client_for(receiver).get(reverse('user-profile'))
        assert response.status_code == 200
        assert response.data['role'] == 'receiver'
        assert response.data['profile']['email'] == receiver.email


class TestRoleIsFixed:
    def test_changing_role_raises(self, household):
        household.role = 'admin'
        with pytest.raises(ValidationError):
            household.save()

    def test_profile_patch_ignores_role(self, client_for, household):
        response = client_for(household).patch(
            reverse('user-profile'), {'name': 'Ada O.', 'role': 'admin'}, format='json'
        )
        assert response.status_code == 200
        household.refresh_from_db()
        assert household.name == 'Ada O.'
        assert household.role == 'household'


class TestPhoneSignIn:
    def test_first_sign_in_creates_household(self, api_client):
        response = api_client.post(
            reverse('phone-sign-in'),
            {'phone': '08051112222', 'name': 'Ngozi', 'location': 'Surulere'},
            format='json',
        )
        assert response.status_code == 201
        assert response.data['created'] is True
        assert response.data['role'] == 'household'
        assert 'access' in response.data and 'refresh' in response.data
        user = User.objects.get(phone='2348051112222')
        assert user.role == 'household'
        assert user.location == 'Surulere'

    def test_second_sign_in_reuses_account(self, api_client):
        user, created = sign_in_with_phone('08051112222', name='Ngozi')
        assert created
        response = api_client.post(reverse('phone-sign-in'), {'phone': '+2348051112222'}, format='json')
        assert response.status_code == 200
        assert response.data['created'] is False
        assert response.data['profile']['id'] == user.id
        assert User.objects.filter(phone='2348051112222').count() == 1

    def test_new_account_needs_name(self, api_client):
        response = api_client.post(reverse('phone-sign-in'), {'phone': '08051112222'}, format='json')
        assert response.status_code == 400
        assert 'name' in response.data
        assert not User.objects.filter(phone='2348051112222').exists()

    @pytest.mark.parametrize('phone', ['0805 111 2222', '0805-111-2222', '+234 805 111 2222'])
    def test_formatted_phone_accepted(self, api_client, phone):
        response = api_client.post(reverse('phone-sign-in'), {'phone': phone, 'name': 'Ngozi'}, format='json')
        assert response.status_code == 201
        assert User.objects.filter(phone='2348051112222').count() == 1

    def test_invalid_phone_rejected(self, api_client):
        response = api_client.post(reverse('phone-sign-in'), {'phone': '12345', 'name': 'X'}, format='json')
        assert response.status_code == 400
        assert 'phone' in response.data


class TestStaffSignUp:
    def payload(self, **overrides):
        data = {
            'email': 'emeka@wastewise.com',
            'password': 'Str0ng!Pass',
            'confirm_password': 'Str0ng!Pass',
            'name': 'Emeka',
            'location': 'Lekki',
            'role': 'collector',
        }
        data.update(overrides)
        return data

    def test_collector_with_company_domain(self, api_client):
        response = api_client.post(reverse('staff-sign-up'), self.payload(), format='json')
        assert response.status_code == 201
        assert response.data['role'] == 'collector'
        assert 'access' in response.data
        assert User.objects.get(email='emeka@wastewise.com').role == 'collector'

    def test_collector_with_wrong_domain(self, api_client):
        response = api_client.post(reverse('staff-sign-up'), self.payload(email='emeka@gmail.com'), format='json')
        assert response.status_code == 400
        assert 'email' in response.data

    def test_receiver_needs_receiver_domain(self, api_client):
        response = api_client.post(
            reverse('staff-sign-up'), self.payload(role='receiver'), format='json'
        )
        assert response.status_code == 400
        ok = api_client.post(
            reverse('staff-sign-up'),
            self.payload(role='receiver', email='ife@wastewise-receivers.com'),
            format='json',
        )
        assert ok.status_code == 201

    def test_cannot_sign_up_as_admin(self, api_client):
        response = api_client.post(reverse('staff-sign-up'), self.payload(role='admin'), format='json')
        assert response.status_code == 400
        assert 'role' in response.data

    def test_jwt_login_includes_role(self, api_client, collector):
        response = api_client.post(
            reverse('jwt-create'), {'email': collector.email, 'password': 'Str0ng!Pass'}, format='json'
        )
        assert response.status_code == 200
        assert response.data['role'] == 'collector'


class TestNotifications:
    def test_lists_only_own_and_marks_read(self, client_for, household, collector):
        from core.models import Notification
        mine = Notification.objects.create(recipient=household, notification_type='points_earned', title='t', message='m')
        Notification.objects.create(recipient=collector, notification_type='review_verified', title='t', message='m')

        client = client_for(household)
        response = client.get('/api/core/notifications/')
        assert response.status_code == 200
        assert [n['id'] for n in response.data['results']] == [mine.id]

        assert client.get('/api/core/notifications/unread_count/').data['unread_count'] == 1
        client.post('/api/core/notifications/mark_all_read/')
        assert client.get('/api/core/notifications/unread_count/').data['unread_count'] == 0


class TestMiddleware:
    def test_json_responses_declare_utf8(self, client_for, household):
        response = client_for(household).get('/api/points/me/')
        assert response.status_code == 200
        assert response['Content-Type'] == 'application/json; charset=utf-8'

    def _socket_user(self, query_string):
        from asgiref.sync import async_to_sync
        from core.middleware import JWTAuthMiddleware

        seen = {}

        async def inner(scope, receive, send):
            seen['user'] = scope['user']

        async_to_sync(JWTAuthMiddleware(inner))({'type': 'websocket', 'query_string': query_string}, None, None)
        return seen['user']

    def test_socket_without_token_is_anonymous(self):
        assert not self._socket_user(b'').is_authenticated

    def test_socket_with_bad_token_is_anonymous(self):
        assert not self._socket_user(b'token=not-a-jwt').is_authenticated

    @pytest.mark.django_db(transaction=True)
    def test_socket_token_resolves_user(self, household):
        from rest_framework_simplejwt.tokens import AccessToken

        token = str(AccessToken.for_user(household))
        user = self._socket_user(f'token={token}'.encode())
        assert user.pk == household.pk
