from django.contrib import admin

from sp_ops.audit import models


@admin.register(models.AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ["id", "action", "actor", "model_name", "record_id", "created_at"]
    search_fields = ["action", "message", "model_name"]
    list_filter = ["action", "model_name", "created_at"]
    readonly_fields = ["before", "after"]
