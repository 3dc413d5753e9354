from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("transaction_id", "booking", "user", "amount", "payment_type", "status")
    list_filter = ("status", "payment_type", "payment_method")
    search_fields = ("transaction_id", "booking__reference", "user__username", "user__email")
    readonly_fields = ("transaction_id", "gateway_reference", "gateway_response", "created_at")
