"""
Database models for the veterinary clinic backend.

An :class:`Appointment` is the aggregate root.  A :class:`Prescription`
and a :class:`Review` hang off a completed appointment, at most one of
each, which the one-to-one columns enforce at the storage layer.  Users
are either patients (pet owners) or doctors, distinguished by ``role``.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class UserManager(BaseUserManager):
    """Manager for the email-based :class:`User` model."""
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('The email must be set')
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.ROLE_DOCTOR)
        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """A clinic account.  Email is the login identifier.

    Roles are 'PATIENT' (pet owner) and 'DOCTOR'.  Doctors may record a
    ``specialty`` which is used for doctor listings and for optional
    specialty matching when an appointment is booked.
    """
    ROLE_PATIENT = 'PATIENT'
    ROLE_DOCTOR = 'DOCTOR'
    ROLE_CHOICES = [
        (ROLE_PATIENT, 'Patient'),
        (ROLE_DOCTOR, 'Doctor'),
    ]

    username = None
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=100)
    phone = models.CharField(max_length=20, blank=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    specialty = models.CharField(max_length=100, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    objects = UserManager()

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"

    @property
    def is_doctor(self) -> bool:
        return self.role == self.ROLE_DOCTOR

    @property
    def is_patient(self) -> bool:
        return self.role == self.ROLE_PATIENT


class Appointment(models.Model):
    """One booking for one pet."""
    STATUS_PENDING = 'PENDING'
    STATUS_CONFIRMED = 'CONFIRMED'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_CANCELLED)
    OPEN_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)

    PRIORITY_LOW = 'LOW'
    PRIORITY_MEDIUM = 'MEDIUM'
    PRIORITY_HIGH = 'HIGH'
    PRIORITY_CHOICES = [
        (PRIORITY_LOW, 'Low'),
        (PRIORITY_MEDIUM, 'Medium'),
        (PRIORITY_HIGH, 'High'),
    ]

    patient = models.ForeignKey(User, on_delete=models.PROTECT, related_name='patient_appointments')
    doctor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.PROTECT, related_name='doctor_appointments'
    )

    pet_name = models.CharField(max_length=50)
    animal_type = models.CharField(max_length=50)
    breed = models.CharField(max_length=50)
    pet_age = models.CharField(max_length=20)
    reason = models.CharField(max_length=500)
    doctor_specialty = models.CharField(max_length=100)
    date = models.DateTimeField(db_index=True)
    time = models.CharField(max_length=20)
    additional_notes = models.CharField(max_length=500, blank=True)

    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default=PRIORITY_MEDIUM)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    doctor_notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['patient', 'date'], name='appt_patient_date_idx'),
            models.Index(fields=['doctor', 'status'], name='appt_doctor_status_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.pet_name} @ {self.date:%F} [{self.status}]"

    @property
    def is_closed(self) -> bool:
        return self.status in self.TERMINAL_STATUSES


class Prescription(models.Model):
    appointment = models.OneToOneField(Appointment, on_delete=models.CASCADE, related_name='prescription')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='prescriptions')
    diagnosis = models.TextField()
    follow_up_instructions = models.TextField()
    next_appointment = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Prescription for appointment {self.appointment_id}"


class Medication(models.Model):
    prescription = models.ForeignKey(Prescription, on_delete=models.CASCADE, related_name='medications')
    name = models.CharField(max_length=100)
    dosage = models.CharField(max_length=50)
    frequency = models.CharField(max_length=50)
    duration = models.CharField(max_length=50)
    instructions = models.CharField(max_length=200, blank=True)

    def __str__(self) -> str:
        return f"{self.name} {self.dosage}"


class Review(models.Model):
    appointment = models.OneToOneField(Appointment, on_delete=models.CASCADE, related_name='review')
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='reviews')
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.CharField(max_length=500)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.rating}* for appointment {self.appointment_id}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.BigIntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
