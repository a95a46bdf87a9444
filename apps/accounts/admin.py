from django.contrib import admin
from apps.accounts.models import Account, AccountMembership


class AccountMembershipInline(admin.TabularInline):
    """Inline admin for account memberships."""
    model = AccountMembership
    fk_name = 'account'
    extra = 0
    fields = ['user', 'status', 'invited_by', 'created_at', 'responded_at']
    readonly_fields = ['created_at', 'responded_at']


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    """Admin interface for shared accounts."""

    list_display = [
        'name',
        'owner',
        'member_count',
        'expense_count',
        'created_at',
    ]
    list_filter = ['created_at']
    search_fields = ['name', 'owner__email']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [AccountMembershipInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'owner')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def member_count(self, obj):
        """Accepted members, owner included."""
        return len(obj.accepted_member_ids())
    member_count.short_description = 'Members'

    def expense_count(self, obj):
        return obj.expenses.count()
    expense_count.short_description = 'Expenses'


@admin.register(AccountMembership)
class AccountMembershipAdmin(admin.ModelAdmin):
    list_display = ['account', 'user', 'status', 'invited_by', 'created_at', 'responded_at']
    list_filter = ['status', 'created_at']
    search_fields = ['account__name', 'user__email']
    raw_id_fields = ['account', 'user', 'invited_by']
