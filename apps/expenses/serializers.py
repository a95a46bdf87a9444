from rest_framework import serializers
from django.conf import settings
from .models import MAX_AMOUNT, Expense, ExpenseShare, ShareStatus
from apps.users.serializers import UserMinimalSerializer


class ExpenseShareSerializer(serializers.ModelSerializer):
    """Share with the participant's public profile."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = ExpenseShare
        fields = ['id', 'user', 'amount', 'status', 'updated_at']
        read_only_fields = fields


class ExpenseSerializer(serializers.ModelSerializer):
    """Main serializer for expenses."""

    shares = ExpenseShareSerializer(many=True, read_only=True)
    created_by = UserMinimalSerializer(read_only=True)
    pending_amount = serializers.SerializerMethodField()
    currency = serializers.SerializerMethodField()

    class Meta:
        model = Expense
        fields = [
            'id',
            'account',
            'title',
            'amount',
            'currency',
            'date',
            'status',
            'created_by',
            'shares',
            'pending_amount',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_pending_amount(self, obj):
        """Sum of shares not yet paid."""
        return sum(s.amount for s in obj.shares.all() if s.status == ShareStatus.PENDING)

    def get_currency(self, obj):
        return settings.CURRENCY_CODE


class ShareInputSerializer(serializers.Serializer):
    """One explicit share of an expense."""

    user_id = serializers.UUIDField()
    amount = serializers.IntegerField(min_value=0, max_value=MAX_AMOUNT)
    status = serializers.ChoiceField(choices=ShareStatus.choices, required=False)


class ExpenseCreateSerializer(serializers.Serializer):
    """
    Validate expense creation input.

    Give either ``shares`` with explicit amounts or ``participant_ids`` to
    split the amount among.
    """

    account = serializers.UUIDField()
    title = serializers.CharField(max_length=200)
    amount = serializers.IntegerField(min_value=1, max_value=MAX_AMOUNT)
    date = serializers.DateField()
    shares = ShareInputSerializer(many=True, required=False)
    participant_ids = serializers.ListField(child=serializers.UUIDField(), required=False)
    exact_split = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if ('shares' in attrs) == ('participant_ids' in attrs):
            raise serializers.ValidationError('Provide either shares or participant_ids')
        return attrs


class ExpenseUpdateSerializer(serializers.Serializer):
    """Validate expense edits; every field is optional."""

    title = serializers.CharField(max_length=200, required=False)
    amount = serializers.IntegerField(min_value=1, max_value=MAX_AMOUNT, required=False)
    date = serializers.DateField(required=False)
    shares = ShareInputSerializer(many=True, required=False)
    participant_ids = serializers.ListField(child=serializers.UUIDField(), required=False)
    exact_split = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if 'shares' in attrs and 'participant_ids' in attrs:
            raise serializers.ValidationError('Provide either shares or participant_ids')
        return attrs


class ExpenseFilterSerializer(serializers.Serializer):
    """Query parameters of the expense list."""

    account = serializers.UUIDField()
    include_archived = serializers.BooleanField(required=False, default=False)


class ToggleShareSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()


class BulkExpenseIdsSerializer(serializers.Serializer):
    expense_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)


class ImportRowSerializer(serializers.Serializer):
    """One parsed spreadsheet row (date, description, amount)."""

    title = serializers.CharField(max_length=200)
    amount = serializers.IntegerField(min_value=1, max_value=MAX_AMOUNT)
    date = serializers.DateField()
    participant_ids = serializers.ListField(child=serializers.UUIDField(), required=False)


class ExpenseImportSerializer(serializers.Serializer):
    account = serializers.UUIDField()
    rows = ImportRowSerializer(many=True, allow_empty=False)


class BulkResultSerializer(serializers.Serializer):
    count = serializers.IntegerField()


class BalancesQuerySerializer(serializers.Serializer):
    """Optional bank figure to reconcile against."""

    bank_total = serializers.IntegerField(required=False, allow_null=True)


class MemberBalanceSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    name = serializers.CharField()
    pending_amount = serializers.IntegerField()


class AccountBalancesSerializer(serializers.Serializer):
    """Balance summary of an account."""

    account_id = serializers.UUIDField()
    currency = serializers.CharField()
    expense_count = serializers.IntegerField()
    total_amount = serializers.IntegerField()
    total_pending = serializers.IntegerField()
    members = MemberBalanceSerializer(many=True)
    bank_reported_total = serializers.IntegerField(allow_null=True)
    status = serializers.CharField()
    difference = serializers.IntegerField(allow_null=True)
