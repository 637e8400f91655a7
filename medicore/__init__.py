"""Django project package for the MediCore hospital API."""
