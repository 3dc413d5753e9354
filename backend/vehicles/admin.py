from django.contrib import admin

from .models import Vehicle


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ("license_plate", "brand", "model", "owner", "daily_rate", "status")
    list_filter = ("status", "vehicle_type", "fuel_type")
    search_fields = ("license_plate", "brand", "model", "owner__username", "location")
