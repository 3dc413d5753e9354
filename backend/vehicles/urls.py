from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .api import VehicleViewSet

app_name = "vehicles"

router = DefaultRouter()
router.register("", VehicleViewSet, basename="vehicle")

urlpatterns = [
    path("", include(router.urls)),
]
