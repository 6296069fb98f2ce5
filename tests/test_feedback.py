import pytest

from feedback.models import HouseholdFeedback


pytestmark = pytest.mark.django_db


@pytest.fixture
def feedback_item(household):
    return HouseholdFeedback.objects.create(household=household, subject='Missed pickup', message='Nobody came on Tuesday.')


class TestHouseholdFeedback:
    def test_household_submits(self, client_for, household):
        response = client_for(household).post(
            '/api/feedback/feedback/', {'subject': 'Great app', 'message': 'Thanks!'}, format='json'
        )
        assert response.status_code == 201
        assert response.data['status'] == 'pending'
        assert HouseholdFeedback.objects.get().household == household

    def test_message_length_limit(self, client_for, household):
        response = client_for(household).post(
            '/api/feedback/feedback/', {'subject': 'Long', 'message': 'x' * 1001}, format='json'
        )
        assert response.status_code == 400
        assert 'message' in response.data

    def test_blank_subject_rejected(self, client_for, household):
        response = client_for(household).post(
            '/api/feedback/feedback/', {'subject': '   ', 'message': 'Hello'}, format='json'
        )
        assert response.status_code == 400

    def test_staff_cannot_submit(self, client_for, collector):
        response = client_for(collector).post(
            '/api/feedback/feedback/', {'subject': 'Hi', 'message': 'Hello'}, format='json'
        )
        assert response.status_code == 403

    def test_households_only_see_their_own(self, client_for, feedback_item, other_household):
        HouseholdFeedback.objects.create(household=other_household, subject='Other', message='Other message')
        response = client_for(feedback_item.household).get('/api/feedback/feedback/')
        assert [f['id'] for f in response.data['results']] == [feedback_item.id]


class TestAdminResponse:
    def test_admin_responds(self, client_for, admin_user, feedback_item, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            response = client_for(admin_user).post(
                f'/api/feedback/feedback/{feedback_item.pk}/respond/',
                {'admin_response': 'Sorry, a collector is on the way.'},
                format='json',
            )
        assert response.status_code == 200
        assert response.data['status'] == 'reviewed'
        assert response.data['responded_by_name'] == 'Site Admin'
        assert len(callbacks) == 1

        feedback_item.refresh_from_db()
        assert feedback_item.admin_response == 'Sorry, a collector is on the way.'
        assert feedback_item.responded_at is not None

    def test_empty_response_rejected(self, client_for, admin_user, feedback_item):
        response = client_for(admin_user).post(
            f'/api/feedback/feedback/{feedback_item.pk}/respond/', {'admin_response': '  '}, format='json'
        )
        assert response.status_code == 400
        feedback_item.refresh_from_db()
        assert feedback_item.status == 'pending'

    def test_household_cannot_respond(self, client_for, feedback_item):
        response = client_for(feedback_item.household).post(
            f'/api/feedback/feedback/{feedback_item.pk}/respond/', {'admin_response': 'Me'}, format='json'
        )
        assert response.status_code == 403

    def test_admin_filters_by_status(self, client_for, admin_user, feedback_item, other_household):
        HouseholdFeedback.objects.create(
            household=other_household, subject='Done', message='Done', status='reviewed', admin_response='ok'
        )
        response = client_for(admin_user).get('/api/feedback/feedback/', {'status': 'pending'})
        assert [f['id'] for f in response.data['results']] == [feedback_item.id]
