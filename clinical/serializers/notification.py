from rest_framework import serializers

from clinical.models import Notification
from clinical.serializers.fields import CleanCharField


class NotificationCreateSerializer(serializers.Serializer):
    title = CleanCharField(max_length=200)
    message = CleanCharField(max_length=1000)
    type = serializers.ChoiceField(choices=[t for t, _ in Notification.TYPE_CHOICES])
    priority = serializers.ChoiceField(choices=[p for p, _ in Notification.PRIORITY_CHOICES],
                                       default=Notification.PRIORITY_NORMAL)
    patientId = serializers.IntegerField(source='patient_id', required=False, allow_null=True)
    userId = serializers.IntegerField(source='user_id', required=False, allow_null=True)


class NotificationQuerySerializer(serializers.Serializer):
    userId = serializers.IntegerField(required=False)
    isRead = serializers.BooleanField(required=False, allow_null=True, default=None)
    priority = serializers.ChoiceField(choices=[p for p, _ in Notification.PRIORITY_CHOICES], required=False)


class MarkAllReadSerializer(serializers.Serializer):
    userId = serializers.IntegerField(required=False, allow_null=True)
