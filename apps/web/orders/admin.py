"""Admin registration for orders."""

from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    """Inline for items within an order."""

    model = OrderItem
    extra = 0
    fields = ["item_name", "quantity", "unit_price", "line_total"]
    readonly_fields = ["item_name", "quantity", "unit_price", "line_total"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin for orders."""

    list_display = ["pk", "restaurant", "user", "status", "total_amount", "created_at"]
    list_filter = ["status", "restaurant"]
    search_fields = ["user__username", "user__email"]
    inlines = [OrderItemInline]
    readonly_fields = ["created_at", "updated_at", "total_amount"]
    date_hierarchy = "created_at"
