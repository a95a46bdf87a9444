from rest_framework import viewsets, status, serializers
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.core.exceptions import DomainError
from apps.core.responses import error_response
from apps.expenses.serializers import AccountBalancesSerializer, BalancesQuerySerializer
from apps.expenses.services import get_account_balances

from .serializers import (
    AccountSerializer,
    AccountCreateSerializer,
    AccountUpdateSerializer,
    AccountMemberSerializer,
    InviteMemberSerializer,
    MyAccountsSerializer,
)
from .permissions import IsAccountMember, IsAccountOwner

from apps.accounts.services import (
    create_account,
    update_account,
    delete_account,
    get_user_accounts,
    invite_member,
    invite_member_by_email,
    accept_invitation,
    reject_invitation,
    remove_member,
    get_account_members,
)


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class AccountPagination(PageNumberPagination):
    """Custom pagination for accounts."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class AccountViewSet(viewsets.ModelViewSet):
    """
    ViewSet for shared accounts.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Accounts the user is an accepted member of
    create: Create an account, optionally inviting users
    retrieve: Get a specific account
    partial_update: Rename and/or invite more users (owner only)
    destroy: Delete the account with all its expenses (owner only)
    """

    serializer_class = AccountSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = AccountPagination
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        """Return only accounts where the user is an accepted member."""
        return get_user_accounts(user=self.request.user).active.order_by('created_at')

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'create':
            return AccountCreateSerializer
        elif self.action == 'partial_update':
            return AccountUpdateSerializer
        elif self.action == 'invite':
            return InviteMemberSerializer
        return AccountSerializer

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['partial_update', 'destroy', 'invite']:
            return [IsAuthenticated(), IsAccountOwner()]
        if self.action in ['retrieve', 'members']:
            return [IsAuthenticated(), IsAccountMember()]
        return [IsAuthenticated()]

    @extend_schema(request=AccountCreateSerializer, responses={201: AccountSerializer, 400: ErrorResponseSerializer})
    def create(self, request, *args, **kwargs):
        """Create a new account owned by the current user."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            account = create_account(
                name=serializer.validated_data['name'],
                owner=request.user,
                invitee_ids=serializer.validated_data['invitee_ids'],
            )
        except DomainError as e:
            return error_response(e)

        output_serializer = AccountSerializer(account, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(request=AccountUpdateSerializer, responses={200: AccountSerializer, 403: ErrorResponseSerializer})
    def partial_update(self, request, *args, **kwargs):
        """Rename the account and/or add invitees."""
        account = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            account = update_account(
                account_id=account.id,
                user=request.user,
                name=serializer.validated_data.get('name'),
                new_invitee_ids=serializer.validated_data.get('new_invitee_ids'),
            )
        except DomainError as e:
            return error_response(e)

        output_serializer = AccountSerializer(account, context={'request': request})
        return Response(output_serializer.data)

    def destroy(self, request, *args, **kwargs):
        """Delete an account."""
        account = self.get_object()
        try:
            delete_account(account_id=account.id, user=request.user)
        except DomainError as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: AccountMemberSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        """Get all members and pending invitees of the account."""
        account = self.get_object()
        memberships = get_account_members(
            account_id=account.id,
            status=request.query_params.get('status'),
        )
        serializer = AccountMemberSerializer(memberships, many=True)
        return Response(serializer.data)

    @extend_schema(
        request=InviteMemberSerializer,
        responses={
            201: AccountMemberSerializer,
            400: ErrorResponseSerializer,
            404: ErrorResponseSerializer,
            409: ErrorResponseSerializer,
        },
    )
    @action(detail=True, methods=['post'])
    def invite(self, request, pk=None):
        """Invite a user by id or email (owner only)."""
        account = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            if 'email' in serializer.validated_data:
                membership = invite_member_by_email(
                    account_id=account.id,
                    email=serializer.validated_data['email'],
                    invited_by=request.user,
                )
            else:
                membership = invite_member(
                    account_id=account.id,
                    user_id=serializer.validated_data['user_id'],
                    invited_by=request.user,
                )
        except DomainError as e:
            return error_response(e)

        output_serializer = AccountMemberSerializer(membership)
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: AccountMemberSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer})
    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        """Accept an invitation to this account."""
        try:
            membership = accept_invitation(account_id=pk, user=request.user)
        except DomainError as e:
            return error_response(e)

        output_serializer = AccountMemberSerializer(membership)
        return Response(output_serializer.data)

    @extend_schema(request=None, responses={204: None, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer})
    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        """Reject an invitation to this account."""
        try:
            reject_invitation(account_id=pk, user=request.user)
        except DomainError as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={403: ErrorResponseSerializer})
    @action(detail=True, methods=['delete'])
    def remove_member(self, request, pk=None):
        """Members cannot be removed; always answers 403."""
        try:
            remove_member(
                account_id=pk,
                user_id=request.data.get('user_id'),
                removed_by=request.user,
            )
        except DomainError as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        parameters=[OpenApiParameter('bank_total', int, required=False)],
        responses={200: AccountBalancesSerializer, 403: ErrorResponseSerializer},
    )
    @action(detail=True, methods=['get'])
    def balances(self, request, pk=None):
        """Pending totals per member and reconciliation against a bank figure."""
        query = BalancesQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        try:
            summary = get_account_balances(
                account_id=pk,
                user=request.user,
                bank_reported_total=query.validated_data.get('bank_total'),
            )
        except DomainError as e:
            return error_response(e)

        return Response(AccountBalancesSerializer(summary).data)


@extend_schema(
    responses={200: MyAccountsSerializer},
    description="Get the current user's active accounts and pending invitations.",
    tags=['accounts'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_accounts(request):
    """Get accounts and invitations of the current user."""
    partition = get_user_accounts(user=request.user)
    serializer = MyAccountsSerializer(
        {'accounts': partition.active, 'invitations': partition.invitations},
        context={'request': request},
    )
    return Response(serializer.data)
