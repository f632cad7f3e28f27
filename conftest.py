"""
Mano-Pro Test Configuration - pytest fixtures and factories

This module provides:
- factory_boy factories for every model
- `*_factory` fixtures exposing them
- Users for each role and DRF clients authenticated as them
- An in-memory PNG upload for photo endpoints

RUNNING TESTS:
# Run all tests
pytest -v

# Run one app
pytest emergencies/tests -v

# Websocket consumers only
pytest -m websocket -v
"""

import io
import uuid
from decimal import Decimal

import factory
import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from factory.django import DjangoModelFactory
from PIL import Image

TEST_PASSWORD = 'Str0ng-pass-123'


# ============================================================================
# USER FACTORIES
# ============================================================================

class UserFactory(DjangoModelFactory):
    """Factory for accounts.User (gestionnaire by default)."""

    class Meta:
        model = 'accounts.User'
        django_get_or_create = ('email',)

    email = factory.LazyAttribute(lambda o: f"user_{uuid.uuid4().hex[:8]}@example.com")
    first_name = factory.Faker('first_name', locale='fr_FR')
    last_name = factory.Faker('last_name', locale='fr_FR')
    password = factory.django.Password(TEST_PASSWORD)
    role = 'gestionnaire'
    company = factory.Faker('company', locale='fr_FR')
    is_active = True


class GestionnaireFactory(UserFactory):
    role = 'gestionnaire'


class ArtisanFactory(UserFactory):
    """Artisan serving plumbing in the 11th arrondissement."""

    role = 'artisan'
    trades = factory.LazyFunction(lambda: ['Plomberie'])
    arrondissements = factory.LazyFunction(lambda: [11])
    is_verified = True


class AdminUserFactory(UserFactory):
    role = 'admin'
    is_staff = True
    is_verified = True


# ============================================================================
# EMERGENCY FACTORIES
# ============================================================================

class EmergencyFactory(DjangoModelFactory):

    class Meta:
        model = 'emergencies.Emergency'

    title = factory.Sequence(lambda n: f"Fuite d'eau #{n}")
    description = "Fuite importante sous l'évier de la cuisine."
    address = factory.Faker('street_address', locale='fr_FR')
    arrondissement = 11
    trade = 'Plomberie'
    max_budget = 500
    urgency_level = 'high'
    status = 'open'
    created_by = factory.SubFactory(GestionnaireFactory)


class ProposalFactory(DjangoModelFactory):

    class Meta:
        model = 'emergencies.Proposal'

    emergency = factory.SubFactory(EmergencyFactory)
    artisan = factory.SubFactory(ArtisanFactory)
    artisan_name = factory.LazyAttribute(lambda o: o.artisan.display_name)
    artisan_company = factory.LazyAttribute(lambda o: o.artisan.company)
    artisan_rating = Decimal('4.50')
    price = 350
    description = "Remplacement du joint et contrôle de l'installation."
    estimated_duration = '2 heures'
    status = 'pending'


# ============================================================================
# PROJECT FACTORIES
# ============================================================================

class ProjectFactory(DjangoModelFactory):
    """Project on an in-progress emergency with its accepted proposal."""

    class Meta:
        model = 'projects.Project'

    emergency = factory.SubFactory(EmergencyFactory, status='in_progress')
    proposal = factory.SubFactory(
        ProposalFactory,
        emergency=factory.SelfAttribute('..emergency'),
        status='accepted',
    )
    gestionnaire = factory.SelfAttribute('emergency.created_by')
    artisan = factory.SelfAttribute('proposal.artisan')
    title = factory.SelfAttribute('emergency.title')
    description = factory.SelfAttribute('emergency.description')
    address = factory.SelfAttribute('emergency.address')
    price = factory.SelfAttribute('proposal.price')
    status = 'accepted'


class TimelineEntryFactory(DjangoModelFactory):

    class Meta:
        model = 'projects.TimelineEntry'

    project = factory.SubFactory(ProjectFactory)
    entry_type = 'message'
    message = factory.Faker('sentence', locale='fr_FR')
    author = 'System'


class ChatMessageFactory(DjangoModelFactory):

    class Meta:
        model = 'projects.ChatMessage'

    project = factory.SubFactory(ProjectFactory)
    sender = factory.SelfAttribute('project.gestionnaire')
    sender_name = factory.LazyAttribute(lambda o: o.sender.display_name)
    message = factory.Faker('sentence', locale='fr_FR')


# ============================================================================
# PAYMENT FACTORIES
# ============================================================================

class PaymentFactory(DjangoModelFactory):

    class Meta:
        model = 'payments.Payment'

    project = factory.SubFactory(ProjectFactory, status='completed', emergency__status='completed')
    artisan = factory.SelfAttribute('project.artisan')
    gestionnaire = factory.SelfAttribute('project.gestionnaire')
    amount = factory.SelfAttribute('project.price')
    description = 'Intervention plomberie'
    status = 'pending'


class InvoiceFactory(DjangoModelFactory):

    class Meta:
        model = 'payments.Invoice'

    payment = factory.SubFactory(PaymentFactory, status='completed')
    project = factory.SelfAttribute('payment.project')
    amount = factory.SelfAttribute('payment.amount')
    status = 'sent'


# ============================================================================
# NOTIFICATION FACTORIES
# ============================================================================

class NotificationFactory(DjangoModelFactory):

    class Meta:
        model = 'notifications.Notification'

    recipient = factory.SubFactory(UserFactory)
    notification_type = 'project_update'
    title = 'Mise à jour'
    message = factory.Faker('sentence', locale='fr_FR')
    is_read = False


# ============================================================================
# FACTORY FIXTURES
# ============================================================================

@pytest.fixture
def user_factory(db):
    return UserFactory


@pytest.fixture
def gestionnaire_factory(db):
    return GestionnaireFactory


@pytest.fixture
def artisan_factory(db):
    return ArtisanFactory


@pytest.fixture
def admin_user_factory(db):
    return AdminUserFactory


@pytest.fixture
def emergency_factory(db):
    return EmergencyFactory


@pytest.fixture
def proposal_factory(db):
    return ProposalFactory


@pytest.fixture
def project_factory(db):
    return ProjectFactory


@pytest.fixture
def timeline_entry_factory(db):
    return TimelineEntryFactory


@pytest.fixture
def chat_message_factory(db):
    return ChatMessageFactory


@pytest.fixture
def payment_factory(db):
    return PaymentFactory


@pytest.fixture
def invoice_factory(db):
    return InvoiceFactory


@pytest.fixture
def notification_factory(db):
    return NotificationFactory


# ============================================================================
# USERS & CLIENTS
# ============================================================================

@pytest.fixture
def gestionnaire(db):
    return GestionnaireFactory()


@pytest.fixture
def artisan(db):
    return ArtisanFactory()


@pytest.fixture
def other_artisan(db):
    return ArtisanFactory()


@pytest.fixture
def platform_admin(db):
    return AdminUserFactory()


@pytest.fixture
def api_client(db):
    """Provide a DRF API test client."""
    from rest_framework.test import APIClient
    return APIClient()


def _client_for(user):
    from rest_framework.test import APIClient
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def gestionnaire_client(gestionnaire):
    return _client_for(gestionnaire)


@pytest.fixture
def artisan_client(artisan):
    return _client_for(artisan)


@pytest.fixture
def other_artisan_client(other_artisan):
    return _client_for(other_artisan)


@pytest.fixture
def platform_admin_client(platform_admin):
    return _client_for(platform_admin)


@pytest.fixture
def client_for():
    """Build an authenticated API client for any user."""
    return _client_for


# ============================================================================
# DOMAIN FIXTURES
# ============================================================================

@pytest.fixture
def emergency(gestionnaire):
    return EmergencyFactory(created_by=gestionnaire)


@pytest.fixture
def proposal(emergency, artisan):
    return ProposalFactory(emergency=emergency, artisan=artisan)


@pytest.fixture
def project(gestionnaire, artisan):
    """Accepted project between the `gestionnaire` and `artisan` fixtures."""
    emergency = EmergencyFactory(created_by=gestionnaire, status='in_progress')
    proposal = ProposalFactory(emergency=emergency, artisan=artisan, status='accepted')
    emergency.accepted_proposal = proposal
    emergency.save(update_fields=['accepted_proposal'])
    return ProjectFactory(emergency=emergency, proposal=proposal)


@pytest.fixture
def completed_project(project):
    """The `project` fixture after its artisan marked the work done."""
    from projects.services import ProjectService
    return ProjectService.complete(project, project.artisan)


# ============================================================================
# UPLOADS
# ============================================================================

def make_image(name='photo.png', size=(32, 32), color=(200, 30, 30)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


@pytest.fixture
def image_file():
    """A small valid PNG upload."""
    return make_image()


@pytest.fixture
def image_factory():
    return make_image
