"""
Django admin registrations for the clinic models.

Superusers can inspect appointments, prescriptions, reviews and the
audit trail under ``/admin/``.
"""

from django.contrib import admin

from .models import Appointment, AuditEvent, Medication, Prescription, Review, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'role', 'specialty', 'is_active', 'is_staff')
    list_filter = ('role', 'is_active')
    search_fields = ('email', 'name', 'specialty')
    ordering = ('email',)


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'pet_name', 'patient', 'doctor', 'date', 'priority', 'status')
    list_filter = ('status', 'priority', 'doctor_specialty')
    search_fields = ('pet_name', 'patient__email', 'patient__name', 'doctor__name')
    raw_id_fields = ('patient', 'doctor')


class MedicationInline(admin.TabularInline):
    model = Medication
    extra = 0


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'appointment', 'doctor', 'next_appointment', 'created_at')
    search_fields = ('diagnosis', 'doctor__name')
    raw_id_fields = ('appointment', 'doctor')
    inlines = [MedicationInline]


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('id', 'appointment', 'patient', 'rating', 'created_at')
    list_filter = ('rating',)
    raw_id_fields = ('appointment', 'patient')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'action', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('action', 'user__email')
