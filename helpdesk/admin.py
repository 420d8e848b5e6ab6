"""
Django admin registrations for the help desk models.

Scope & intent
--------------
- Back-office only: staff edit configuration profiles and sender accounts here.
- System log entries are append-only; the admin exposes them read-only.
"""

from __future__ import annotations

from django.contrib import admin

from .models import EmailAccount, HelpdeskConfig, SysLog


@admin.register(EmailAccount)
class EmailAccountAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "address", "updated_at")
    search_fields = ("name", "address")


@admin.register(HelpdeskConfig)
class HelpdeskConfigAdmin(admin.ModelAdmin):
    """Configuration profiles; one row per help desk instance."""
    list_display = ("id", "title", "is_online", "log_level", "schema_version", "updated_at")
    list_filter = ("is_online", "log_level")
    fieldsets = (
        (None, {"fields": ("title", "is_online", "schema_version", "schema_signature")}),
        ("Email", {"fields": ("admin_email", "alert_email", "default_email")}),
        ("Attachments", {"fields": ("allowed_filetypes", "max_file_size")}),
        ("Logging", {"fields": ("log_level", "log_grace_period", "alert_on_sql_error")}),
        ("Time zone", {"fields": ("tz_offset", "observe_dst")}),
    )


@admin.register(SysLog)
class SysLogAdmin(admin.ModelAdmin):
    """Read-only browsing of system log entries."""
    list_display = ("id", "created", "log_type", "title", "ip_address")
    list_filter = ("log_type",)
    search_fields = ("title", "log")
    date_hierarchy = "created"
    readonly_fields = ("created", "updated", "title", "log_type", "log", "ip_address")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
