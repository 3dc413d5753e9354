from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User

DRIVER_FIELDS = ("date_of_birth", "driver_license_number", "driver_license_expiry", "address")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "phone", "role", "driver_license_number", "is_active")
    list_filter = BaseUserAdmin.list_filter + ("role",)
    search_fields = BaseUserAdmin.search_fields + ("phone", "driver_license_number")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Marketplace", {"fields": ("role", "phone")}),
        ("Driver", {"fields": DRIVER_FIELDS}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Marketplace", {"fields": ("role", "phone")}),
    )
