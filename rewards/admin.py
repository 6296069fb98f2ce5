from django.contrib import admin
from .models import Redemption, Reward


@admin.register(Reward)
class RewardAdmin(admin.ModelAdmin):
    list_display = ('title', 'category', 'points_cost', 'is_available')
    list_filter = ('category', 'is_available')
    list_editable = ('is_available',)
    search_fields = ('title', 'description')


@admin.register(Redemption)
class RedemptionAdmin(admin.ModelAdmin):
    list_display = ('confirmation_code', 'household', 'reward', 'points_spent', 'status', 'created_at')
    list_filter = ('status', 'reward__category')
    search_fields = ('confirmation_code', 'household__name', 'household__phone')
    raw_id_fields = ('household', 'reward')
    readonly_fields = ('points_spent', 'confirmation_code', 'details', 'created_at')

    def has_change_permission(self, request, obj=None):
        return False
