"""
URL mappings for the hospital API.

Trailing slashes are omitted (``APPEND_SLASH = False``).  Fixed segments
such as ``critical`` are declared before the ``<int:...>`` detail routes.
"""
from django.urls import include, path

from .auth_views import jwt_refresh_view, login_view, logout_view
from .views import care, dashboard, health, medical_records, notifications, patients, users, vital_signs

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),

    # auth
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh'),
    path('api/auth/logout', logout_view, name='logout'),

    # staff accounts
    path('api/users', users.users_collection, name='users'),
    path('api/users/me', users.me, name='users_me'),
    path('api/users/doctors', users.doctors, name='users_doctors'),
    path('api/users/nurses', users.nurses, name='users_nurses'),
    path('api/users/<int:user_id>', users.user_detail, name='user_detail'),

    # patients
    path('api/patients', patients.patients_collection, name='patients'),
    path('api/patients/critical', patients.critical_patients, name='patients_critical'),
    path('api/patients/<int:patient_id>', patients.patient_detail, name='patient_detail'),
    path('api/patients/<int:patient_id>/mark-critical', patients.mark_critical, name='patient_mark_critical'),
    path('api/patients/<int:patient_id>/mark-stable', patients.mark_stable, name='patient_mark_stable'),
    path('api/patients/<int:patient_id>/history', patients.patient_history, name='patient_history'),

    # medical records
    path('api/medical-records', medical_records.records_collection, name='medical_records'),
    path('api/medical-records/critical', medical_records.critical_records, name='medical_records_critical'),
    path('api/medical-records/patient/<int:patient_id>', medical_records.patient_records, name='medical_records_patient'),
    path('api/medical-records/<int:record_id>', medical_records.record_detail, name='medical_record_detail'),

    # vital signs
    path('api/vital-signs', vital_signs.vitals_collection, name='vital_signs'),
    path('api/vital-signs/classify', vital_signs.classify_reading, name='vital_signs_classify'),
    path('api/vital-signs/critical', vital_signs.critical_vitals, name='vital_signs_critical'),
    path('api/vital-signs/patient/<int:patient_id>', vital_signs.patient_vitals, name='vital_signs_patient'),
    path('api/vital-signs/latest/<int:patient_id>', vital_signs.latest_patient_vitals, name='vital_signs_latest'),
    path('api/vital-signs/<int:vital_id>', vital_signs.vital_detail, name='vital_sign_detail'),

    # notifications
    path('api/notifications', notifications.notifications_collection, name='notifications'),
    path('api/notifications/unread', notifications.unread_notifications, name='notifications_unread'),
    path('api/notifications/critical', notifications.critical_notifications, name='notifications_critical'),
    path('api/notifications/mark-all-read', notifications.mark_all_read, name='notifications_mark_all_read'),
    path('api/notifications/<int:notification_id>', notifications.notification_detail, name='notification_detail'),
    path('api/notifications/<int:notification_id>/mark-read', notifications.mark_read, name='notification_mark_read'),

    # care records
    path('api/appointments', care.appointments_collection, name='appointments'),
    path('api/appointments/<int:appointment_id>', care.appointment_detail, name='appointment_detail'),
    path('api/appointments/<int:appointment_id>/remind', care.remind_appointment, name='appointment_remind'),
    path('api/prescriptions', care.prescriptions_collection, name='prescriptions'),
    path('api/prescriptions/<int:prescription_id>', care.prescription_detail, name='prescription_detail'),
    path('api/lab-results', care.lab_results_collection, name='lab_results'),
    path('api/lab-results/<int:lab_result_id>', care.lab_result_detail, name='lab_result_detail'),
    path('api/progress-notes', care.progress_notes_collection, name='progress_notes'),
    path('api/progress-notes/<int:note_id>', care.progress_note_detail, name='progress_note_detail'),

    path('api/dashboard', dashboard.dashboard, name='dashboard'),
]
