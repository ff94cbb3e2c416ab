"""
URL mappings for the clinic API.

Trailing slashes are deliberately omitted.  Fixed segments such as
``stats/dashboard`` are registered before the ``<int:pk>`` routes they
sit beside.
"""
from django.urls import include, path

from .auth_views import login_view, logout_view, me_view, refresh_view, signup_view
from .views import appointments, health, prescriptions, reviews, users

urlpatterns = [
    # Auth
    path('api/auth/signup', signup_view, name='auth-signup'),
    path('api/auth/login', login_view, name='auth-login'),
    path('api/auth/me', me_view, name='auth-me'),
    path('api/auth/refresh', refresh_view, name='auth-refresh'),
    path('api/auth/logout', logout_view, name='auth-logout'),

    # Appointments
    path('api/appointments', appointments.appointments, name='appointments'),
    path('api/appointments/stats/dashboard', appointments.dashboard_stats, name='appointments-dashboard'),
    path('api/appointments/<int:pk>', appointments.appointment_detail, name='appointment-detail'),
    path('api/appointments/<int:pk>/assign', appointments.appointment_assign, name='appointment-assign'),

    # Prescriptions
    path('api/prescriptions', prescriptions.prescriptions, name='prescriptions'),
    path('api/prescriptions/<int:pk>', prescriptions.prescription_detail, name='prescription-detail'),

    # Reviews
    path('api/reviews', reviews.reviews, name='reviews'),
    path('api/reviews/stats/doctor/<int:doctor_id>', reviews.doctor_stats, name='review-doctor-stats'),
    path('api/reviews/<int:pk>', reviews.review_detail, name='review-detail'),

    # Users
    path('api/users/doctors', users.list_doctors, name='users-doctors'),
    path('api/users/patients', users.list_patients, name='users-patients'),
    path('api/users/<int:pk>', users.user_detail, name='user-detail'),
    path('api/users/<int:pk>/password', users.change_password, name='user-password'),

    # Ops
    path('healthz', health.healthz, name='healthz'),
    path('', include('django_prometheus.urls')),
]
