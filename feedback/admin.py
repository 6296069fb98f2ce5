from django.contrib import admin
from .models import HouseholdFeedback


@admin.register(HouseholdFeedback)
class HouseholdFeedbackAdmin(admin.ModelAdmin):
    list_display = ('subject', 'household', 'status', 'created_at', 'responded_at')
    list_filter = ('status',)
    search_fields = ('subject', 'message', 'household__name')
    raw_id_fields = ('household', 'responded_by')
