import json
import logging

from channels.generic.websocket import AsyncWebsocketConsumer

from clinical.services.notifications import BROADCAST_GROUP, user_group

logger = logging.getLogger(__name__)


class NotificationsConsumer(AsyncWebsocketConsumer):
    """Live notification feed.

    Every authenticated connection joins the staff-wide group and its own
    per-user group; anonymous connections are refused.
    """

    async def connect(self):
        user = self.scope.get("user")
        if not (user and user.is_authenticated):
            await self.close(code=4401)
            return
        self.groups_joined = [BROADCAST_GROUP, user_group(user.id)]
        for group in self.groups_joined:
            await self.channel_layer.group_add(group, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "userId": user.id}))
        logger.debug("Notification socket opened for user %s", user.id)

    async def disconnect(self, close_code):
        for group in getattr(self, "groups_joined", []):
            await self.channel_layer.group_discard(group, self.channel_name)

    async def notification_created(self, event):
        # event: {"type": "notification.created", "notification": {...}}
        await self.send(json.dumps({"type": "notification", "notification": event["notification"]}))
