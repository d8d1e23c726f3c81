# review_core/admin.py

from django.contrib import admin

from .models import (
    Idea,
    IdeaStageState,
    PortalRole,
    PortalSetting,
    ReviewStage,
    ReviewStageEvent,
    ReviewWorkflow,
)


class ReadOnlyAdmin(admin.ModelAdmin):
    """
    Rows that change only through the review engine.
    """

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =============================================================
# Ideas and roles
# =============================================================

@admin.register(Idea)
class IdeaAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "owner", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("title", "owner__username")
    ordering = ("-created_at",)
    readonly_fields = ("status",)


@admin.register(PortalRole)
class PortalRoleAdmin(admin.ModelAdmin):
    list_display = ("user", "role")
    list_filter = ("role",)
    search_fields = ("user__username",)


@admin.register(PortalSetting)
class PortalSettingAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "updated_by", "updated_at")
    search_fields = ("key",)


# =============================================================
# Workflow versions (READ-ONLY: new versions come from the API)
# =============================================================

class ReviewStageInline(admin.TabularInline):
    model = ReviewStage
    extra = 0
    can_delete = False
    fields = ("position", "name", "is_enabled")
    readonly_fields = fields
    ordering = ("position",)

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ReviewWorkflow)
class ReviewWorkflowAdmin(ReadOnlyAdmin):
    list_display = ("version", "is_active", "created_by", "created_at", "activated_at")
    list_filter = ("is_active",)
    ordering = ("-version",)
    inlines = [ReviewStageInline]


# =============================================================
# Stage state and audit log (READ-ONLY)
# =============================================================

@admin.register(IdeaStageState)
class IdeaStageStateAdmin(ReadOnlyAdmin):
    list_display = (
        "idea",
        "workflow",
        "current_stage",
        "state_version",
        "terminal_outcome",
        "updated_at",
    )
    list_filter = ("terminal_outcome", "workflow")
    search_fields = ("idea__title",)


@admin.register(ReviewStageEvent)
class ReviewStageEventAdmin(ReadOnlyAdmin):
    list_display = (
        "idea",
        "action",
        "from_stage",
        "to_stage",
        "actor",
        "occurred_at",
    )
    list_filter = ("action", "workflow")
    search_fields = ("idea__title", "actor__username")
    ordering = ("-occurred_at",)
