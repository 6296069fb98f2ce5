from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User, Notification


@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = (
        'name',
        'email',
        'phone',
        'role',
        'points_balance',
        'is_active',
        'last_login'
    )
    list_filter = ('role', 'is_active')
    search_fields = ('email', 'phone', 'name', 'location')
    ordering = ('-date_joined',)
    readonly_fields = ('date_joined', 'points_balance')

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Personal Info', {'fields': ('name', 'phone', 'location')}),
        ('Points', {'fields': ('points_balance',)}),
        ('Permissions', {
            'fields': (
                'role',
                'is_active',
                'is_staff',
                'is_superuser',
                'groups',
                'user_permissions',
            )
        }),
        ('Important dates', {'fields': ('last_login', 'date_joined')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'email',
                'name',
                'phone',
                'location',
                'role',
                'password1',
                'password2',
            ),
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        # Role is fixed once the account exists
        if obj is not None:
            return self.readonly_fields + ('role',)
        return self.readonly_fields


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('recipient', 'notification_type', 'title', 'is_read', 'created_at')
    list_filter = ('notification_type', 'is_read')
    search_fields = ('title', 'message', 'recipient__name')
    raw_id_fields = ('recipient',)
