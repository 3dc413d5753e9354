from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("reference", "vehicle", "user", "start_date", "end_date", "status")
    list_filter = ("status", "start_date")
    search_fields = ("reference", "vehicle__license_plate", "user__username", "user__email")
    # Status changes go through the booking services so vehicle state stays in sync.
    readonly_fields = ("reference", "status", "total_amount", "created_at", "updated_at")
