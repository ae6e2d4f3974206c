from django.contrib import admin

from .models import EditorialProfile


@admin.register(EditorialProfile)
class EditorialProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'role', 'display_name', 'created_at']
    list_filter = ['role']
    search_fields = ['user__username', 'user__email', 'display_name']
    raw_id_fields = ['user']
