from rest_framework import serializers
from .models import Account, AccountMembership
from apps.users.serializers import UserMinimalSerializer


class AccountMemberSerializer(serializers.ModelSerializer):
    """Membership with the member's public profile."""

    user = UserMinimalSerializer(read_only=True)
    is_owner = serializers.SerializerMethodField()

    class Meta:
        model = AccountMembership
        fields = ['id', 'user', 'status', 'is_owner', 'invited_by', 'created_at', 'responded_at']
        read_only_fields = fields

    def get_is_owner(self, obj):
        return obj.user_id == obj.account.owner_id


class AccountSerializer(serializers.ModelSerializer):
    """Main serializer for accounts."""

    owner = UserMinimalSerializer(read_only=True)
    member_count = serializers.SerializerMethodField()
    my_status = serializers.SerializerMethodField()

    class Meta:
        model = Account
        fields = [
            'id',
            'name',
            'owner',
            'member_count',
            'my_status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        """Number of accepted members, owner included."""
        return len(obj.accepted_member_ids())

    def get_my_status(self, obj):
        """Current user's membership status in the account."""
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return obj.membership_status(request.user)
        return None


class AccountCreateSerializer(serializers.Serializer):
    """Validate account creation input."""

    name = serializers.CharField(max_length=200)
    invitee_ids = serializers.ListField(
        child=serializers.UUIDField(),
        required=False,
        default=list,
    )


class AccountUpdateSerializer(serializers.Serializer):
    """Rename and/or invite more users. Existing members are never removed."""

    name = serializers.CharField(max_length=200, required=False)
    new_invitee_ids = serializers.ListField(
        child=serializers.UUIDField(),
        required=False,
    )


class InviteMemberSerializer(serializers.Serializer):
    """Invite by user id or by exact email, exactly one of them."""

    user_id = serializers.UUIDField(required=False)
    email = serializers.EmailField(required=False)

    def validate(self, attrs):
        if ('user_id' in attrs) == ('email' in attrs):
            raise serializers.ValidationError('Provide exactly one of user_id or email')
        return attrs


class MyAccountsSerializer(serializers.Serializer):
    """Active accounts and pending invitations of the current user."""

    accounts = AccountSerializer(many=True)
    invitations = AccountSerializer(many=True)
