"""
Project event fan-out: committed timeline entries, chat messages and
status changes reach the `project_<id>` channel group.
"""

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from projects import realtime
from projects.services import ChatService, ProjectService


@pytest.fixture
def project_channel(project):
    """A channel subscribed to the project's group."""
    layer = get_channel_layer()
    channel = async_to_sync(layer.new_channel)()
    async_to_sync(layer.group_add)(realtime.project_group_name(project.id), channel)
    yield channel
    async_to_sync(layer.group_discard)(realtime.project_group_name(project.id), channel)


def receive(channel):
    return async_to_sync(get_channel_layer().receive)(channel)


@pytest.mark.django_db
class TestProjectBroadcast:

    def test_group_name(self, project):
        assert realtime.project_group_name(project.id) == f'project_{project.id}'

    def test_nothing_sent_before_commit(self, project, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            ChatService.send_message(project, project.artisan, 'Bonjour')

        assert len(callbacks) == 1

    def test_chat_message_broadcast(self, project, project_channel, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            message = ChatService.send_message(project, project.artisan, 'Je suis en bas')

        event = receive(project_channel)
        assert event['type'] == realtime.CHAT_MESSAGE
        assert event['payload']['id'] == str(message.id)
        assert event['payload']['sender_id'] == str(project.artisan.id)
        assert event['payload']['message'] == 'Je suis en bas'

    def test_status_change_broadcasts_status_then_entry(
        self, project, project_channel, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            ProjectService.start(project, project.artisan)

        status_event = receive(project_channel)
        entry_event = receive(project_channel)

        assert status_event['type'] == realtime.PROJECT_STATUS
        assert status_event['payload']['status'] == 'in_progress'
        assert status_event['payload']['start_date'] is not None
        assert entry_event['type'] == realtime.TIMELINE_ENTRY
        assert entry_event['payload']['type'] == 'status_change'
