"""
Notification endpoints.

Listing, reading and manual dispatch.  Every row is created through
``clinical.services.notifications``; the API never edits a notification
beyond its read flag.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinical.exceptions import UnknownPatient, UnknownStaff
from clinical.models import Notification, Patient, User
from clinical.permissions import IsStaff
from clinical.serializers.notification import MarkAllReadSerializer, NotificationCreateSerializer, NotificationQuerySerializer
from clinical.services import notifications as svc
from clinical.views.common import outcome_response


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaff])
def notifications_collection(request):
    if request.method == 'GET':
        q = NotificationQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        vd = q.validated_data
        return Response(svc.list_notifications(user_id=vd.get('userId'), is_read=vd.get('isRead'),
                                               priority=vd.get('priority')))

    s = NotificationCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if vd.get('patient_id') and not Patient.objects.filter(pk=vd['patient_id']).exists():
        raise UnknownPatient()
    if vd.get('user_id') and not User.objects.filter(pk=vd['user_id'], is_active=True).exists():
        raise UnknownStaff()
    payload = svc.dispatch(svc.NotificationDraft(**vd))
    return Response(payload, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaff])
def unread_notifications(request):
    """Unread notifications, optionally for one ``userId``."""
    q = NotificationQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response(svc.list_notifications(user_id=q.validated_data.get('userId'), is_read=False))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaff])
def critical_notifications(request):
    return Response(svc.list_notifications(priority=Notification.PRIORITY_CRITICAL))


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaff])
def notification_detail(request, notification_id: int):
    if request.method == 'DELETE':
        # notifications are kept; dismissing one marks it read
        outcome = svc.mark_read(notification_id)
        return outcome_response(outcome, success_status=status.HTTP_204_NO_CONTENT)
    payload = svc.get_notification(notification_id)
    if payload is None:
        raise NotFound('notification not found')
    return Response(payload)


@api_view(['POST', 'PUT'])
@permission_classes([IsAuthenticated, IsStaff])
def mark_read(request, notification_id: int):
    outcome = svc.mark_read(notification_id)
    return outcome_response(outcome, outcome.value)


@api_view(['POST', 'PUT'])
@permission_classes([IsAuthenticated, IsStaff])
def mark_all_read(request):
    s = MarkAllReadSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    count = svc.mark_all_read(s.validated_data.get('userId'))
    return Response({'ok': True, 'updated': count})
