from django.contrib import admin
from .models import Note, Tag


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ['name']
    search_fields = ['name']  # Required for autocomplete_fields


@admin.register(Note)
class NoteAdmin(admin.ModelAdmin):
    list_display = [
        'title',
        'subject',
        'class_name',
        'uploaded_by',
        'views',
        'download_count',
        'is_approved',
        'created_at'
    ]
    list_editable = ['is_approved']
    list_filter = ['is_approved', 'subject', 'class_name', 'created_at']
    search_fields = ['title', 'description', 'uploaded_by__username']
    readonly_fields = [
        'id',
        'file_path',
        'file_url',
        'file_name',
        'file_size',
        'reading_time',
        'views',
        'download_count',
        'created_at',
        'updated_at'
    ]
    autocomplete_fields = ['uploaded_by', 'tags']

    fieldsets = (
        ('Note', {
            'fields': ('id', 'title', 'subject', 'class_name', 'unit', 'description', 'content', 'tags')
        }),
        ('File', {
            'fields': ('file_name', 'file_path', 'file_url', 'file_size', 'thumbnail_url')
        }),
        ('Moderation', {
            'fields': ('is_approved',)
        }),
        ('Engagement', {
            'fields': ('reading_time', 'views', 'download_count')
        }),
        ('Audit', {
            'fields': ('uploaded_by', 'created_at', 'updated_at')
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('uploaded_by')
