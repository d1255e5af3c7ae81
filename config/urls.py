"""
URL configuration for the Board Coalescing Service.

HTTP endpoints are served by the presentation layer; only the admin is
mounted here for inspecting boards, listings, and provenance.
"""

from django.contrib import admin
from django.urls import path

urlpatterns = [
    path("admin/", admin.site.urls),
]
