"""
Notifications App for Mano-Pro.

In-app notifications recorded for lifecycle events and pushed in real time
over the user's websocket group.

Usage:
    from notifications.services import notify

    notify(
        recipient=artisan,
        notification_type=Notification.Type.PROPOSAL_ACCEPTED,
        title='Proposition acceptée',
        message='Votre proposition a été acceptée',
        related_id=project.id,
    )
"""
