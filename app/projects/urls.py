"""
URL configuration for the projects API.

All routes are prefixed with /api/v1/projects/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from projects.views import ProjectViewSet

router = DefaultRouter()
router.register(r"", ProjectViewSet, basename="project")

app_name = "projects"

urlpatterns = [
    path("", include(router.urls)),
]
