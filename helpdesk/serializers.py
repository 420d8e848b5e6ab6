"""
DRF serializers for the help desk API.

- `SysLogSerializer`: read-only system log entries (staff dashboards).
- `UploadCandidateSerializer`: output shape for upload validation results.
- `SystemStatusSerializer`: help desk availability summary.
"""

from __future__ import annotations

from rest_framework import serializers

from .models import SysLog


class SysLogSerializer(serializers.ModelSerializer):
    """Read-only system log entry; entries are never written through the API."""

    class Meta:
        model = SysLog
        fields = ["id", "created", "updated", "title", "log_type", "log", "ip_address"]
        read_only_fields = fields


class UploadCandidateSerializer(serializers.Serializer):
    name = serializers.CharField()
    size = serializers.IntegerField()
    content_type = serializers.CharField(allow_blank=True)
    error = serializers.SerializerMethodField()

    def get_error(self, obj):
        if obj.error is None:
            return None
        return {"kind": obj.error.kind.value, "message": obj.error.message}


class SystemStatusSerializer(serializers.Serializer):
    online = serializers.BooleanField()
    upgrade_pending = serializers.BooleanField()
    config_id = serializers.IntegerField()
    version = serializers.CharField(allow_blank=True)
