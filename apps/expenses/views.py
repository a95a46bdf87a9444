from rest_framework import viewsets, status, serializers
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.accounts.services import get_user_accounts
from apps.core.exceptions import DomainError
from apps.core.responses import error_response

from .models import Expense
from .serializers import (
    ExpenseSerializer,
    ExpenseShareSerializer,
    ExpenseCreateSerializer,
    ExpenseUpdateSerializer,
    ExpenseFilterSerializer,
    ToggleShareSerializer,
    BulkExpenseIdsSerializer,
    ExpenseImportSerializer,
    BulkResultSerializer,
)
from .permissions import IsExpenseAccountMember

from apps.expenses.services import (
    add_expense,
    import_expenses,
    update_expense,
    toggle_share_status,
    delete_expense,
    delete_expenses,
    archive_expense,
    archive_expenses,
    restore_expense,
    get_expenses,
    get_all_expenses,
)


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class ExpensePagination(PageNumberPagination):
    """Custom pagination for expenses."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ExpenseViewSet(viewsets.ModelViewSet):
    """
    ViewSet for expenses of shared accounts.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Active expenses of ?account= (include_archived=true for all)
    create: Log an expense split by participants or explicit shares
    retrieve: Get a specific expense with its shares
    partial_update: Edit an expense; a new split replaces all shares
    destroy: Delete an expense
    """

    serializer_class = ExpenseSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ExpensePagination
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        """Return only expenses of accounts the user is an accepted member of."""
        accounts = get_user_accounts(user=self.request.user).active
        return (
            Expense.objects
            .filter(account__in=accounts)
            .select_related('created_by')
            .prefetch_related('shares__user')
        )

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'create':
            return ExpenseCreateSerializer
        elif self.action == 'partial_update':
            return ExpenseUpdateSerializer
        elif self.action == 'toggle_share':
            return ToggleShareSerializer
        elif self.action in ['bulk_delete', 'bulk_archive']:
            return BulkExpenseIdsSerializer
        elif self.action == 'import_rows':
            return ExpenseImportSerializer
        return ExpenseSerializer

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action == 'retrieve':
            return [IsAuthenticated(), IsExpenseAccountMember()]
        return [IsAuthenticated()]

    def _expense_response(self, expense, status_code=status.HTTP_200_OK):
        expense = self.get_queryset().get(pk=expense.pk)
        return Response(ExpenseSerializer(expense).data, status=status_code)

    @extend_schema(parameters=[ExpenseFilterSerializer], responses={200: ExpenseSerializer(many=True)})
    def list(self, request, *args, **kwargs):
        """List expenses of one account, newest first."""
        filters = ExpenseFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        fetch = get_all_expenses if filters.validated_data['include_archived'] else get_expenses
        try:
            expenses = fetch(account_id=filters.validated_data['account'], user=request.user)
        except DomainError as e:
            return error_response(e)

        page = self.paginate_queryset(expenses)
        if page is not None:
            return self.get_paginated_response(ExpenseSerializer(page, many=True).data)
        return Response(ExpenseSerializer(expenses, many=True).data)

    @extend_schema(
        request=ExpenseCreateSerializer,
        responses={201: ExpenseSerializer, 400: ErrorResponseSerializer, 403: ErrorResponseSerializer},
    )
    def create(self, request, *args, **kwargs):
        """Log a new expense."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            expense = add_expense(
                account_id=data['account'],
                created_by=request.user,
                title=data['title'],
                amount=data['amount'],
                date=data['date'],
                shares=data.get('shares'),
                participant_ids=data.get('participant_ids'),
                exact_split=data['exact_split'],
            )
        except DomainError as e:
            return error_response(e)

        return self._expense_response(expense, status.HTTP_201_CREATED)

    @extend_schema(
        request=ExpenseUpdateSerializer,
        responses={200: ExpenseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    )
    def partial_update(self, request, *args, **kwargs):
        """Edit an expense."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            expense = update_expense(
                expense_id=kwargs['pk'],
                user=request.user,
                title=data.get('title'),
                amount=data.get('amount'),
                date=data.get('date'),
                shares=data.get('shares'),
                participant_ids=data.get('participant_ids'),
                exact_split=data['exact_split'],
            )
        except DomainError as e:
            return error_response(e)

        return self._expense_response(expense)

    def destroy(self, request, *args, **kwargs):
        """Delete an expense."""
        try:
            delete_expense(expense_id=kwargs['pk'], user=request.user)
        except DomainError as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        request=ToggleShareSerializer,
        responses={200: ExpenseShareSerializer, 404: ErrorResponseSerializer},
    )
    @action(detail=True, methods=['post'])
    def toggle_share(self, request, pk=None):
        """Flip one participant's share between PENDING and PAID."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            share = toggle_share_status(
                expense_id=pk,
                user_id=serializer.validated_data['user_id'],
                acting_user=request.user,
            )
        except DomainError as e:
            return error_response(e)

        return Response(ExpenseShareSerializer(share).data)

    @extend_schema(request=None, responses={200: ExpenseSerializer, 404: ErrorResponseSerializer})
    @action(detail=True, methods=['post'])
    def archive(self, request, pk=None):
        """Archive an expense."""
        try:
            expense = archive_expense(expense_id=pk, user=request.user)
        except DomainError as e:
            return error_response(e)
        return self._expense_response(expense)

    @extend_schema(request=None, responses={200: ExpenseSerializer, 404: ErrorResponseSerializer})
    @action(detail=True, methods=['post'])
    def restore(self, request, pk=None):
        """Restore an archived expense."""
        try:
            expense = restore_expense(expense_id=pk, user=request.user)
        except DomainError as e:
            return error_response(e)
        return self._expense_response(expense)

    @extend_schema(request=BulkExpenseIdsSerializer, responses={200: BulkResultSerializer})
    @action(detail=False, methods=['post'])
    def bulk_delete(self, request):
        """Delete several expenses at once; all ids must exist."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            count = delete_expenses(
                expense_ids=serializer.validated_data['expense_ids'],
                user=request.user,
            )
        except DomainError as e:
            return error_response(e)
        return Response({'count': count})

    @extend_schema(request=BulkExpenseIdsSerializer, responses={200: BulkResultSerializer})
    @action(detail=False, methods=['post'])
    def bulk_archive(self, request):
        """Archive several expenses at once; all ids must exist."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            count = archive_expenses(
                expense_ids=serializer.validated_data['expense_ids'],
                user=request.user,
            )
        except DomainError as e:
            return error_response(e)
        return Response({'count': count})

    @extend_schema(
        request=ExpenseImportSerializer,
        responses={201: ExpenseSerializer(many=True), 400: ErrorResponseSerializer},
    )
    @action(detail=False, methods=['post'], url_path='import', url_name='import')
    def import_rows(self, request):
        """Import parsed spreadsheet rows in one transaction."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            expenses = import_expenses(
                account_id=serializer.validated_data['account'],
                created_by=request.user,
                rows=serializer.validated_data['rows'],
            )
        except DomainError as e:
            return error_response(e)

        return Response(
            ExpenseSerializer(expenses, many=True).data,
            status=status.HTTP_201_CREATED,
        )
