"""Django admin registrations for the clinical models."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import (
    Appointment,
    AuditEvent,
    LabResult,
    MedicalRecord,
    Notification,
    Patient,
    Prescription,
    ProgressNote,
    User,
    VitalSign,
)
from .services import critical
from .services.notifications import notify_medical_record_update


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'first_name', 'last_name', 'role', 'is_active')
    list_filter = ('role', 'is_active')
    fieldsets = BaseUserAdmin.fieldsets + (('Hospital', {'fields': ('role', 'phone_number')}),)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'first_name', 'last_name', 'status', 'is_critical', 'room', 'department')
    list_filter = ('status', 'is_critical', 'department')
    search_fields = ('first_name', 'last_name', 'phone_number', 'email')
    # flips go through the critical-state service so staff are alerted
    readonly_fields = ('is_critical', 'critical_since', 'created_at')


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'diagnosis', 'is_critical', 'created_at')
    list_filter = ('is_critical',)
    search_fields = ('diagnosis',)

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        if db_field.name == 'doctor':
            kwargs['queryset'] = User.objects.filter(role=User.ROLE_DOCTOR, is_active=True)
        return super().formfield_for_foreignkey(db_field, request, **kwargs)

    def save_model(self, request, obj, form, change):
        # the record flag reaches the patient through the coordinator, as over the API
        was_critical = change and MedicalRecord.objects.filter(pk=obj.pk, is_critical=True).exists()
        super().save_model(request, obj, form, change)
        critical.on_medical_record_saved(
            obj.patient_id, obj.doctor_id, obj.diagnosis, obj.is_critical, was_critical, actor=request.user,
        )
        if not change:
            notify_medical_record_update(obj.patient_id, obj.doctor_id, obj.diagnosis)


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(VitalSign)
class VitalSignAdmin(ReadOnlyAdmin):
    """Readings are recorded through the API so the classifier grades them."""
    list_display = ('id', 'patient', 'severity', 'recorded_by', 'recorded_at')
    list_filter = ('severity',)


@admin.register(Notification)
class NotificationAdmin(ReadOnlyAdmin):
    """Notifications are created by the dispatcher only."""
    list_display = ('id', 'title', 'type', 'priority', 'user', 'patient', 'is_read', 'created_at')
    list_filter = ('type', 'priority', 'is_read')


@admin.register(AuditEvent)
class AuditEventAdmin(ReadOnlyAdmin):
    list_display = ('id', 'action', 'object_type', 'object_id', 'user', 'created_at')
    list_filter = ('action', 'object_type')


admin.site.register(Appointment)
admin.site.register(Prescription)
admin.site.register(LabResult)
admin.site.register(ProgressNote)
