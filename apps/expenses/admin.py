from django.contrib import admin
from apps.expenses.models import Expense, ExpenseShare, ExpenseStatus, ShareStatus


class ExpenseShareInline(admin.TabularInline):
    """Inline admin for expense shares."""
    model = ExpenseShare
    extra = 0
    fields = ['user', 'amount', 'status', 'updated_at']
    readonly_fields = ['updated_at']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    """Admin interface for expenses."""

    list_display = [
        'title',
        'account',
        'amount',
        'date',
        'status',
        'pending_amount',
        'created_by',
    ]
    list_filter = ['status', 'date']
    search_fields = ['title', 'account__name', 'created_by__email']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['account', 'created_by']
    inlines = [ExpenseShareInline]
    date_hierarchy = 'date'
    ordering = ['-date', '-created_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('account', 'title', 'amount', 'date', 'created_by', 'status')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def pending_amount(self, obj):
        """Sum of shares not yet paid."""
        return sum(s.amount for s in obj.shares.all() if s.status == ShareStatus.PENDING)
    pending_amount.short_description = 'Pending'

    actions = ['archive_expenses', 'restore_expenses']

    @admin.action(description='Archive selected expenses')
    def archive_expenses(self, request, queryset):
        count = queryset.update(status=ExpenseStatus.ARCHIVED)
        self.message_user(request, f'Archived {count} expense(s).')

    @admin.action(description='Restore selected expenses')
    def restore_expenses(self, request, queryset):
        count = queryset.update(status=ExpenseStatus.ACTIVE)
        self.message_user(request, f'Restored {count} expense(s).')

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('account', 'created_by').prefetch_related('shares')
