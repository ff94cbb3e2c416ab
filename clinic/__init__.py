"""Clinic application for the veterinary booking backend.

This package contains models, serializers, services, views and route
registrations for appointments, prescriptions, reviews and accounts.
"""
