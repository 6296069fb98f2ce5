from django.contrib import admin
from .models import Bag, BagCode, CollectorReview, ReceiverReview


@admin.register(BagCode)
class BagCodeAdmin(admin.ModelAdmin):
    list_display = ('code', 'category', 'batch', 'created_by', 'created_at')
    list_filter = ('category',)
    search_fields = ('code', 'batch')
    raw_id_fields = ('created_by',)


class CollectorReviewInline(admin.StackedInline):
    model = CollectorReview
    extra = 0
    can_delete = False
    readonly_fields = ('collector', 'status', 'points_awarded', 'disapproval_reason', 'notes', 'reviewed_at')


@admin.register(Bag)
class BagAdmin(admin.ModelAdmin):
    list_display = ('qr_code', 'category', 'status', 'household', 'activated_at')
    list_filter = ('status', 'category')
    search_fields = ('qr_code', 'household__name', 'household__phone')
    raw_id_fields = ('household',)
    inlines = [CollectorReviewInline]
    # Status only changes through a collector review
    readonly_fields = ('status',)


@admin.register(CollectorReview)
class CollectorReviewAdmin(admin.ModelAdmin):
    list_display = ('bag', 'collector', 'status', 'points_awarded', 'reviewed_at')
    list_filter = ('status', 'disapproval_reason')
    search_fields = ('bag__qr_code', 'collector__name')
    raw_id_fields = ('bag', 'collector')
    readonly_fields = ('points_awarded',)


@admin.register(ReceiverReview)
class ReceiverReviewAdmin(admin.ModelAdmin):
    list_display = ('collector_review', 'receiver', 'status', 'reviewed_at')
    list_filter = ('status',)
    raw_id_fields = ('collector_review', 'receiver')
