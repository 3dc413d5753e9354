import logging

from rest_framework import permissions, viewsets
from rest_framework.pagination import PageNumberPagination

from .filters import VehicleFilter
from .models import Vehicle
from .serializers import VehicleSerializer

logger = logging.getLogger(__name__)


class VehiclePagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


class IsOwnerOrReadOnly(permissions.BasePermission):
    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        return getattr(obj, "owner_id", None) == getattr(request.user, "id", None)


class VehicleViewSet(viewsets.ModelViewSet):
    queryset = Vehicle.objects.select_related("owner").order_by("-created_at")
    serializer_class = VehicleSerializer
    pagination_class = VehiclePagination
    permission_classes = [permissions.IsAuthenticatedOrReadOnly, IsOwnerOrReadOnly]
    filterset_class = VehicleFilter
    ordering_fields = ["daily_rate", "created_at", "year"]
    http_method_names = ["get", "post", "patch", "head", "options"]

    def perform_create(self, serializer):
        vehicle = serializer.save()
        logger.info(
            "vehicles: user %s listed vehicle %s",
            self.request.user.id,
            vehicle.id,
            extra={"vehicle_id": vehicle.id},
        )
