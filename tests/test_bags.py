import io
import zipfile

import pytest
from django.core.exceptions import ValidationError

from bags.models import Bag, BagCode, CollectorReview, ReceiverReview
from bags.services import (
    BagStateError, activate_bag, activation_url, category_from_prefix, extract_bag_code,
    generate_codes, review_bag, tariff, verify_review
)
from points.models import PointsLedgerEntry


pytestmark = pytest.mark.django_db


class TestCodeParsing:
    @pytest.mark.parametrize('payload, expected', [
        ('WWR-ABC123', 'WWR-ABC123'),
        ('  wwo-abc123  ', 'WWO-ABC123'),
        ('https://app.wastewise.ng/scan?code=WWS-0001', 'WWS-0001'),
        ('https://example.com/activate?bag=wwr-77', 'WWR-77'),
    ])
    def test_extract(self, payload, expected):
        assert extract_bag_code(payload) == expected

    def test_empty_code_rejected(self):
        with pytest.raises(ValidationError):
            extract_bag_code('   ')

    @pytest.mark.parametrize('link', [
        'https://app.wastewise.ng/scan',
        'https://example.com/activate/WWO-55',
        'https://app.wastewise.ng/scan?code=',
    ])
    def test_link_without_code_parameter_rejected(self, link):
        with pytest.raises(ValidationError):
            extract_bag_code(link)

    def test_activation_page_link_creates_no_bag(self, household):
        with pytest.raises(ValidationError):
            activate_bag('https://app.wastewise.ng/scan', household)
        assert not Bag.objects.exists()

    @pytest.mark.parametrize('code, category', [
        ('WWR-1', 'recyclable'),
        ('WWO-1', 'organic'),
        ('WWS-1', 'residual'),
        ('ECO-1', 'residual'),
    ])
    def test_category_from_prefix(self, code, category):
        assert category_from_prefix(code) == category

    def test_tariff(self):
        assert (tariff('recyclable'), tariff('organic'), tariff('residual')) == (15, 5, 1)

    def test_activation_url_round_trips_through_extract(self):
        assert extract_bag_code(activation_url('WWR-XYZ')) == 'WWR-XYZ'


class TestActivation:
    def test_new_bag_takes_prefix_category(self, household):
        bag, created = activate_bag('WWR-0001', household)
        assert created
        assert bag.category == 'recyclable'
        assert bag.status == 'activated'
        assert bag.household == household

    def test_second_scan_is_idempotent(self, household):
        first, _ = activate_bag('WWO-0002', household)
        again, created = activate_bag('wwo-0002', household)
        assert not created
        assert again.pk == first.pk
        assert Bag.objects.filter(qr_code='WWO-0002').count() == 1

    def test_scan_by_another_household_does_not_duplicate(self, household, other_household):
        activate_bag('WWO-0003', household)
        bag, created = activate_bag('WWO-0003', other_household)
        assert not created
        assert bag.household == household

    def test_generated_code_category_wins(self, household, admin_user):
        BagCode.objects.create(code='WWS-9999', category='organic', created_by=admin_user)
        bag, _ = activate_bag('WWS-9999', household, category='recyclable')
        assert bag.category == 'organic'

    def test_explicit_category_for_unregistered_code(self, household):
        bag, _ = activate_bag('ECO-1234', household, category='organic')
        assert bag.category == 'organic'

    def test_unknown_prefix_falls_back_to_residual(self, household):
        bag, _ = activate_bag('ECO-5678', household)
        assert bag.category == 'residual'

    def test_only_households_activate(self, collector):
        with pytest.raises(ValidationError):
            activate_bag('WWR-0004', collector)

    def test_api_reports_already_activated(self, client_for, household):
        client = client_for(household)
        first = client.post('/api/bags/bags/activate/', {'code': 'https://app.wastewise.ng/scan?code=WWR-0005'}, format='json')
        assert first.status_code == 201
        assert first.data['status'] == 'activated'
        second = client.post('/api/bags/bags/activate/', {'code': 'WWR-0005'}, format='json')
        assert second.status_code == 200
        assert second.data['status'] == 'already_activated'
        assert second.data['bag']['id'] == first.data['bag']['id']

    def test_api_forbids_collectors(self, client_for, collector):
        response = client_for(collector).post('/api/bags/bags/activate/', {'code': 'WWR-0006'}, format='json')
        assert response.status_code == 403


class TestCollectorReview:
    def test_approval_credits_tariff_and_logs(self, household, collector):
        bag, _ = activate_bag('WWR-0100', household)
        review = review_bag(bag, collector, approve=True)

        household.refresh_from_db()
        bag.refresh_from_db()
        assert review.points_awarded == 15
        assert bag.status == 'approved'
        assert household.points_balance == 15
        entry = PointsLedgerEntry.objects.get(household=household)
        assert entry.points == 15
        assert entry.reference == f'BAG-{bag.pk}'

    def test_disapproval_awards_nothing(self, household, collector):
        bag, _ = activate_bag('WWO-0101', household)
        review = review_bag(bag, collector, approve=False, reason='Bag damaged or leaking')

        household.refresh_from_db()
        bag.refresh_from_db()
        assert review.points_awarded == 0
        assert review.disapproval_reason == 'Bag damaged or leaking'
        assert bag.status == 'disapproved'
        assert household.points_balance == 0
        assert not PointsLedgerEntry.objects.exists()

    def test_disapproval_without_reason_writes_nothing(self, household, collector):
        bag, _ = activate_bag('WWO-0102', household)
        with pytest.raises(ValidationError):
            review_bag(bag, collector, approve=False)
        bag.refresh_from_db()
        assert bag.status == 'activated'
        assert not CollectorReview.objects.exists()

    def test_unknown_reason_rejected(self, household, collector):
        bag, _ = activate_bag('WWO-0103', household)
        with pytest.raises(ValidationError):
            review_bag(bag, collector, approve=False, reason='Smells bad')

    def test_second_review_rejected(self, household, collector):
        bag, _ = activate_bag('WWR-0104', household)
        review_bag(bag, collector, approve=True)
        with pytest.raises(BagStateError):
            review_bag(bag, collector, approve=True)
        household.refresh_from_db()
        assert household.points_balance == 15

    def test_notification_queued_after_commit(self, household, collector, django_capture_on_commit_callbacks):
        bag, _ = activate_bag('WWS-0105', household)
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            review_bag(bag, collector, approve=True)
        assert len(callbacks) == 1

    def test_lookup_and_review_over_api(self, client_for, household, collector):
        bag, _ = activate_bag('WWR-0106', household)
        client = client_for(collector)

        missing = client.get('/api/bags/bags/lookup/', {'code': 'WWR-NOPE'})
        assert missing.status_code == 404
        assert missing.data['detail'] == 'No bag found for this code. Check the code and try again.'

        found = client.get('/api/bags/bags/lookup/', {'code': 'wwr-0106'})
        assert found.status_code == 200
        assert found.data['household_name'] == 'Ada Obi'
        assert found.data['review'] is None

        response = client.post(f'/api/bags/bags/{bag.pk}/review/', {'approve': True, 'notes': 'Clean'}, format='json')
        assert response.status_code == 201
        assert response.data['points_awarded'] == 15

        again = client.post(f'/api/bags/bags/{bag.pk}/review/', {'approve': True}, format='json')
        assert again.status_code == 400

    def test_api_disapproval_requires_reason(self, client_for, household, collector):
        bag, _ = activate_bag('WWR-0107', household)
        response = client_for(collector).post(f'/api/bags/bags/{bag.pk}/review/', {'approve': False}, format='json')
        assert response.status_code == 400
        assert 'disapproval_reason' in response.data

    def test_households_cannot_review(self, client_for, household):
        bag, _ = activate_bag('WWR-0108', household)
        response = client_for(household).post(f'/api/bags/bags/{bag.pk}/review/', {'approve': True}, format='json')
        assert response.status_code == 403


class TestReceiverVerification:
    def test_verify_is_audit_only(self, household, collector, receiver):
        bag, _ = activate_bag('WWR-0200', household)
        review = review_bag(bag, collector, approve=True)
        verification = verify_review(review, receiver, approve=False, notes='Looked contaminated')

        household.refresh_from_db()
        assert verification.status == 'disapproved'
        assert household.points_balance == 15

    def test_disapproved_reviews_can_be_verified(self, household, collector, receiver):
        bag, _ = activate_bag('WWO-0201', household)
        review = review_bag(bag, collector, approve=False, reason='Other')
        assert verify_review(review, receiver, approve=True).status == 'approved'

    def test_one_verification_per_review(self, household, collector, receiver):
        bag, _ = activate_bag('WWR-0202', household)
        review = review_bag(bag, collector, approve=True)
        verify_review(review, receiver, approve=True)
        with pytest.raises(BagStateError):
            verify_review(review, receiver, approve=False)
        assert ReceiverReview.objects.count() == 1

    def test_pending_verification_listing(self, client_for, household, collector, receiver):
        first, _ = activate_bag('WWR-0203', household)
        second, _ = activate_bag('WWR-0204', household)
        verified = review_bag(first, collector, approve=True)
        pending = review_bag(second, collector, approve=True)
        verify_review(verified, receiver, approve=True)

        client = client_for(receiver)
        response = client.get('/api/bags/reviews/', {'pending_verification': 'true'})
        assert response.status_code == 200
        assert [r['id'] for r in response.data['results']] == [pending.id]
        assert response.data['results'][0]['bag']['household_location'] == 'Yaba'

        verify = client.post(f'/api/bags/reviews/{pending.pk}/verify/', {'approve': True}, format='json')
        assert verify.status_code == 201

    def test_collectors_see_only_their_reviews(self, client_for, household, collector):
        from core.models import User
        other = User.objects.create_user(email='obi@wastewise.com', name='Obi', password='x', role='collector')
        mine, _ = activate_bag('WWR-0205', household)
        theirs, _ = activate_bag('WWR-0206', household)
        review_bag(mine, collector, approve=True)
        review_bag(theirs, other, approve=True)

        response = client_for(collector).get('/api/bags/reviews/')
        assert [r['bag']['qr_code'] for r in response.data['results']] == ['WWR-0205']

    def test_collectors_cannot_verify(self, client_for, household, collector):
        bag, _ = activate_bag('WWR-0207', household)
        review = review_bag(bag, collector, approve=True)
        response = client_for(collector).post(f'/api/bags/reviews/{review.pk}/verify/', {'approve': True}, format='json')
        assert response.status_code == 403


class TestHouseholdListing:
    def test_households_see_only_their_bags(self, client_for, household, other_household):
        activate_bag('WWR-0300', household)
        activate_bag('WWR-0301', other_household)
        response = client_for(household).get('/api/bags/bags/')
        assert [b['qr_code'] for b in response.data['results']] == ['WWR-0300']

    def test_status_filter(self, client_for, household, collector):
        approved, _ = activate_bag('WWR-0302', household)
        activate_bag('WWR-0303', household)
        review_bag(approved, collector, approve=True)
        response = client_for(household).get('/api/bags/bags/', {'status': 'approved'})
        assert [b['qr_code'] for b in response.data['results']] == ['WWR-0302']
        assert response.data['results'][0]['review']['points_awarded'] == 15


class TestLabelGeneration:
    def test_generate_codes_uses_category_prefix(self, admin_user):
        batch, codes = generate_codes('organic', 25, created_by=admin_user)
        assert len(codes) == 25
        assert len({c.code for c in codes}) == 25
        assert all(c.code.startswith('WWO-') for c in codes)
        assert BagCode.objects.filter(batch=batch).count() == 25

    @pytest.mark.parametrize('count', [0, 501])
    def test_count_limits(self, count):
        with pytest.raises(ValidationError):
            generate_codes('recyclable', count)

    def test_generate_and_export_over_api(self, client_for, admin_user):
        client = client_for(admin_user)
        response = client.post('/api/bags/codes/generate/', {'category': 'recyclable', 'count': 3}, format='json')
        assert response.status_code == 201
        assert len(response.data['codes']) == 3
        assert response.data['codes'][0]['activation_url'].startswith('https://app.wastewise.ng/scan?code=WWR-')

        export = client.get('/api/bags/codes/export/', {'batch': response.data['batch']})
        assert export.status_code == 200
        assert export['Content-Type'] == 'application/zip'
        archive = zipfile.ZipFile(io.BytesIO(export.content))
        names = sorted(archive.namelist())
        assert names == sorted(f"{c['code']}.png" for c in response.data['codes'])
        assert archive.read(names[0])[:8] == b'\x89PNG\r\n\x1a\n'

    def test_export_unknown_batch(self, client_for, admin_user):
        client = client_for(admin_user)
        assert client.get('/api/bags/codes/export/', {'batch': 'not-a-uuid'}).status_code == 400
        assert client.get('/api/bags/codes/export/', {'batch': '00000000-0000-0000-0000-000000000000'}).status_code == 404

    def test_generation_is_admin_only(self, client_for, collector):
        response = client_for(collector).post('/api/bags/codes/generate/', {'category': 'recyclable', 'count': 3}, format='json')
        assert response.status_code == 403

    def test_activation_of_generated_label(self, client_for, admin_user, household):
        _, codes = generate_codes('residual', 1, created_by=admin_user)
        response = client_for(household).post('/api/bags/bags/activate/', {'code': activation_url(codes[0].code)}, format='json')
        assert response.status_code == 201
        assert response.data['bag']['category'] == 'residual'
