"""Django project package for the veterinary clinic backend."""
