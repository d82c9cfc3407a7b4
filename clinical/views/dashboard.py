"""
Ward dashboard.

Headline counts for the front page: active and critical patients, unread
notifications for the caller, and today's appointments.
"""
from __future__ import annotations

from django.db.models import Q
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinical.models import Notification, Patient
from clinical.permissions import IsStaff
from clinical.services.care import appointments_on
from clinical.services.critical import critical_patients
from clinical.services.patients import format_patient


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaff])
def dashboard(request):
    today = timezone.localdate()
    critical = list(critical_patients()[:10])
    unread = Notification.objects.filter(is_read=False).filter(
        Q(user=request.user) | Q(user__isnull=True)
    ).count()
    return Response({
        'totalPatients': Patient.objects.count(),
        'activePatients': Patient.objects.filter(status=Patient.STATUS_ACTIVE).count(),
        'criticalPatients': Patient.objects.filter(is_critical=True).count(),
        'unreadNotifications': unread,
        'todayAppointments': appointments_on(today),
        'critical': [format_patient(p) for p in critical],
        'generatedAt': timezone.now().isoformat(),
    })
