"""
Emergency and proposal service tests.

Covers artisan matching, closing, bidding rules and the acceptance
transaction that turns a proposal into a project.
"""

from decimal import Decimal

import pytest
from django.core.files.storage import default_storage
from django.db import IntegrityError, transaction

from api.exceptions import BusinessRuleViolation, InvalidStatusTransition, NotParticipant, RoleRequired
from emergencies.models import Emergency, Proposal
from emergencies.services import EmergencyService, ProposalService
from notifications.models import Notification
from projects.models import Project, TimelineEntry


def emergency_fields(**overrides):
    fields = {
        'title': 'Dégât des eaux',
        'description': "L'eau coule depuis le plafond du 3e étage.",
        'address': '12 rue Oberkampf',
        'arrondissement': 11,
        'trade': 'Plomberie',
        'max_budget': 800,
        'urgency_level': 'critical',
    }
    fields.update(overrides)
    return fields


# ============================================================================
# EMERGENCY SERVICE
# ============================================================================

@pytest.mark.django_db
class TestEmergencyCreate:

    def test_creates_open_emergency(self, gestionnaire):
        emergency = EmergencyService.create(gestionnaire, **emergency_fields())

        assert emergency.status == Emergency.Status.OPEN
        assert emergency.created_by == gestionnaire
        assert emergency.photos == []

    def test_status_in_payload_is_ignored(self, gestionnaire):
        emergency = EmergencyService.create(gestionnaire, **emergency_fields(status='closed'))

        assert emergency.status == Emergency.Status.OPEN

    def test_markup_is_stripped(self, gestionnaire):
        emergency = EmergencyService.create(
            gestionnaire,
            **emergency_fields(title='<script>alert(1)</script>Fuite <b>urgente</b>')
        )

        assert '<' not in emergency.title
        assert emergency.title.endswith('Fuite urgente')

    def test_artisan_cannot_post(self, artisan):
        with pytest.raises(RoleRequired):
            EmergencyService.create(artisan, **emergency_fields())

    def test_notifies_matching_artisans_only(self, gestionnaire, artisan, artisan_factory):
        electrician = artisan_factory(trades=['Électricité'])
        elsewhere = artisan_factory(arrondissements=[15])
        generalist = artisan_factory(trades=[], arrondissements=[])
        inactive = artisan_factory(is_active=False)

        emergency = EmergencyService.create(gestionnaire, **emergency_fields())

        notified = set(
            Notification.objects.filter(
                notification_type=Notification.Type.NEW_EMERGENCY,
                related_id=emergency.id,
            ).values_list('recipient_id', flat=True)
        )
        assert notified == {artisan.id, generalist.id}
        assert electrician.id not in notified
        assert elsewhere.id not in notified
        assert inactive.id not in notified


@pytest.mark.django_db
class TestEmergencyClose:

    def test_withdraw_rejects_pending_proposals(self, emergency, proposal_factory):
        first = proposal_factory(emergency=emergency)
        second = proposal_factory(emergency=emergency)

        closed = EmergencyService.close(emergency, emergency.created_by)

        assert closed.status == Emergency.Status.CLOSED
        first.refresh_from_db()
        second.refresh_from_db()
        assert first.status == Proposal.Status.REJECTED
        assert second.status == Proposal.Status.REJECTED
        assert first.responded_at is not None

    def test_close_in_progress_is_conflict(self, emergency_factory):
        emergency = emergency_factory(status='in_progress')

        with pytest.raises(InvalidStatusTransition):
            EmergencyService.close(emergency, emergency.created_by)

    def test_close_completed_archives(self, emergency_factory):
        emergency = emergency_factory(status='completed')

        assert EmergencyService.close(emergency, emergency.created_by).status == 'closed'

    def test_only_owner_can_close(self, emergency, gestionnaire_factory):
        with pytest.raises(NotParticipant):
            EmergencyService.close(emergency, gestionnaire_factory())

    def test_admin_can_close(self, emergency, platform_admin):
        assert EmergencyService.close(emergency, platform_admin).status == 'closed'


@pytest.mark.django_db
class TestEmergencyPhotos:

    def test_photos_are_appended(self, emergency, image_factory):
        EmergencyService.add_photos(emergency, emergency.created_by, [image_factory()])
        updated = EmergencyService.add_photos(
            emergency, emergency.created_by, [image_factory('a.png'), image_factory('b.png')]
        )

        assert len(updated.photos) == 3
        assert all(f'emergencies/{emergency.id}/' in url for url in updated.photos)

    def test_closed_emergency_refuses_photos_without_storing(self, emergency_factory, image_file):
        emergency = emergency_factory(status='closed')

        with pytest.raises(BusinessRuleViolation) as excinfo:
            EmergencyService.add_photos(emergency, emergency.created_by, [image_file])

        assert excinfo.value.extra_data['rule'] == 'emergency_closed'
        assert not default_storage.exists(f'emergencies/{emergency.id}')
        assert Emergency.objects.get(pk=emergency.pk).photos == []


@pytest.mark.django_db
class TestEmergencyVisibility:

    def test_gestionnaire_sees_own(self, emergency, emergency_factory):
        emergency_factory()

        assert list(EmergencyService.visible_to(emergency.created_by)) == [emergency]

    def test_artisan_sees_open_and_bid_on(self, artisan, emergency_factory, proposal_factory):
        open_one = emergency_factory()
        closed_unrelated = emergency_factory(status='closed')
        in_progress_bid = emergency_factory(status='in_progress')
        proposal_factory(emergency=in_progress_bid, artisan=artisan)

        visible = set(EmergencyService.visible_to(artisan))

        assert visible == {open_one, in_progress_bid}
        assert closed_unrelated not in visible

    def test_admin_sees_all(self, platform_admin, emergency_factory):
        emergency_factory.create_batch(3)

        assert EmergencyService.visible_to(platform_admin).count() == 3


@pytest.mark.django_db
class TestOpportunities:

    def test_matches_trade_and_arrondissement(self, artisan, emergency_factory):
        match = emergency_factory()
        emergency_factory(trade='Serrurerie')
        emergency_factory(arrondissement=2)
        emergency_factory(status='in_progress')

        assert list(EmergencyService.opportunities_for(artisan)) == [match]

    def test_excludes_already_bid(self, artisan, emergency_factory, proposal_factory):
        bid_on = emergency_factory()
        proposal_factory(emergency=bid_on, artisan=artisan)

        assert bid_on not in EmergencyService.opportunities_for(artisan)

    def test_empty_profile_matches_everything_open(self, artisan_factory, emergency_factory):
        generalist = artisan_factory(trades=[], arrondissements=[])
        emergency_factory(trade='Serrurerie', arrondissement=2)
        emergency_factory()

        assert EmergencyService.opportunities_for(generalist).count() == 2


# ============================================================================
# PROPOSAL SERVICE
# ============================================================================

@pytest.mark.django_db
class TestProposalCreate:

    def submit(self, artisan, emergency, **overrides):
        data = {
            'price': 420,
            'description': 'Intervention sous 2 heures.',
            'estimated_duration': '3 heures',
        }
        data.update(overrides)
        return ProposalService.create(artisan, emergency, **data)

    def test_snapshots_artisan_profile(self, emergency, artisan_factory):
        artisan = artisan_factory(first_name='Jean', last_name='Durand', company='Durand SARL', rating=Decimal('4.20'))

        proposal = self.submit(artisan, emergency)

        assert proposal.status == Proposal.Status.PENDING
        assert proposal.artisan_name == 'Jean Durand'
        assert proposal.artisan_company == 'Durand SARL'
        assert proposal.artisan_rating == Decimal('4.20')

    def test_unrated_artisan_gets_default_rating(self, emergency, artisan):
        assert artisan.rating is None

        proposal = self.submit(artisan, emergency)

        assert proposal.artisan_rating == Decimal('4.5')

    def test_notifies_emergency_owner(self, emergency, artisan):
        proposal = self.submit(artisan, emergency)

        notification = Notification.objects.get(
            recipient=emergency.created_by,
            notification_type=Notification.Type.PROPOSAL_RECEIVED,
        )
        assert notification.related_id == proposal.id

    def test_one_proposal_per_artisan(self, emergency, artisan):
        self.submit(artisan, emergency)

        with pytest.raises(BusinessRuleViolation) as excinfo:
            self.submit(artisan, emergency, price=300)

        assert excinfo.value.extra_data['rule'] == 'single_proposal_per_artisan'
        assert Proposal.objects.filter(emergency=emergency).count() == 1

    def test_emergency_must_be_open(self, emergency_factory, artisan):
        emergency = emergency_factory(status='closed')

        with pytest.raises(BusinessRuleViolation) as excinfo:
            self.submit(artisan, emergency)

        assert excinfo.value.extra_data['rule'] == 'emergency_open'

    def test_price_must_be_positive(self, emergency, artisan):
        with pytest.raises(BusinessRuleViolation):
            self.submit(artisan, emergency, price=0)

    def test_gestionnaire_cannot_bid(self, emergency, gestionnaire):
        with pytest.raises(RoleRequired):
            self.submit(gestionnaire, emergency)


@pytest.mark.django_db
class TestProposalAccept:

    def test_accept_creates_exactly_one_project(self, proposal):
        emergency = proposal.emergency

        result = ProposalService.accept(proposal, emergency.created_by)

        assert Project.objects.filter(emergency=emergency).count() == 1
        project = result.project
        assert project.proposal == proposal
        assert project.gestionnaire == emergency.created_by
        assert project.artisan == proposal.artisan
        assert project.price == proposal.price
        assert project.status == Project.Status.ACCEPTED

    def test_accept_updates_emergency_and_proposal(self, proposal):
        result = ProposalService.accept(proposal, proposal.emergency.created_by)

        emergency = Emergency.objects.get(pk=proposal.emergency_id)
        assert emergency.status == Emergency.Status.IN_PROGRESS
        assert emergency.accepted_proposal_id == proposal.id
        assert result.proposal.status == Proposal.Status.ACCEPTED
        assert result.proposal.responded_at is not None

    def test_accept_rejects_pending_siblings(self, proposal, proposal_factory):
        siblings = proposal_factory.create_batch(2, emergency=proposal.emergency)

        result = ProposalService.accept(proposal, proposal.emergency.created_by)

        assert {p.id for p in result.rejected_proposals} == {p.id for p in siblings}
        assert Proposal.objects.filter(
            emergency=proposal.emergency, status=Proposal.Status.REJECTED
        ).count() == 2

    def test_accept_records_timeline_and_notifies_artisan(self, proposal):
        result = ProposalService.accept(proposal, proposal.emergency.created_by)

        entries = list(result.project.timeline.all())
        assert len(entries) == 1
        assert entries[0].entry_type == TimelineEntry.EntryType.STATUS_CHANGE
        assert entries[0].message == 'Projet accepté et démarré'

        assert Notification.objects.filter(
            recipient=proposal.artisan,
            notification_type=Notification.Type.PROPOSAL_ACCEPTED,
            related_id=result.project.id,
        ).count() == 1

    def test_artisan_notified_after_commit(self, proposal, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks() as callbacks:
            ProposalService.accept(proposal, proposal.emergency.created_by)

        assert len(callbacks) >= 1

    def test_double_accept_is_conflict(self, proposal, proposal_factory):
        other = proposal_factory(emergency=proposal.emergency)
        owner = proposal.emergency.created_by
        ProposalService.accept(proposal, owner)

        with pytest.raises(InvalidStatusTransition):
            ProposalService.accept(other, owner)

        assert Project.objects.filter(emergency=proposal.emergency).count() == 1

    def test_accepting_same_proposal_twice_is_conflict(self, proposal):
        owner = proposal.emergency.created_by
        ProposalService.accept(proposal, owner)

        with pytest.raises(InvalidStatusTransition):
            ProposalService.accept(proposal, owner)

    def test_accept_on_closed_emergency_is_conflict(self, emergency_factory, proposal_factory):
        emergency = emergency_factory(status='closed')
        proposal = proposal_factory(emergency=emergency)

        with pytest.raises(InvalidStatusTransition):
            ProposalService.accept(proposal, emergency.created_by)

        proposal.refresh_from_db()
        assert proposal.status == Proposal.Status.PENDING
        assert not Project.objects.filter(emergency=emergency).exists()

    def test_only_owner_can_accept(self, proposal, gestionnaire_factory):
        with pytest.raises(NotParticipant):
            ProposalService.accept(proposal, gestionnaire_factory())

    def test_database_allows_one_accepted_proposal(self, emergency, proposal_factory):
        proposal_factory(emergency=emergency, status='accepted')

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                proposal_factory(emergency=emergency, status='accepted')


@pytest.mark.django_db
class TestProposalReject:

    def test_reject_pending(self, proposal):
        rejected = ProposalService.reject(proposal, proposal.emergency.created_by)

        assert rejected.status == Proposal.Status.REJECTED
        assert proposal.emergency.status == Emergency.Status.OPEN

    def test_reject_twice_is_conflict(self, proposal):
        owner = proposal.emergency.created_by
        ProposalService.reject(proposal, owner)

        with pytest.raises(InvalidStatusTransition):
            ProposalService.reject(proposal, owner)

    def test_visible_to(self, proposal, proposal_factory, other_artisan):
        foreign = proposal_factory()

        assert list(ProposalService.visible_to(proposal.artisan)) == [proposal]
        assert list(ProposalService.visible_to(proposal.emergency.created_by)) == [proposal]
        assert not ProposalService.visible_to(other_artisan).exists()
        assert foreign not in ProposalService.visible_to(proposal.emergency.created_by)
