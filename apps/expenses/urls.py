from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'expenses'

# Router for ViewSets
router = SimpleRouter()
router.register(r'', views.ExpenseViewSet, basename='expense')

urlpatterns = [
    # Expense ViewSet routes
    # GET    /api/expenses/?account={id}     - List active expenses (include_archived=true for all)
    # POST   /api/expenses/                  - Create expense
    # GET    /api/expenses/{id}/             - Get expense with shares
    # PATCH  /api/expenses/{id}/             - Edit expense / replace split
    # DELETE /api/expenses/{id}/             - Delete expense

    # Custom expense actions
    # POST   /api/expenses/{id}/toggle_share/  - Flip a share PENDING <-> PAID
    # POST   /api/expenses/{id}/archive/       - Archive expense
    # POST   /api/expenses/{id}/restore/       - Restore archived expense
    # POST   /api/expenses/bulk_delete/        - Delete several expenses
    # POST   /api/expenses/bulk_archive/       - Archive several expenses
    # POST   /api/expenses/import/             - Import parsed spreadsheet rows

    path('', include(router.urls)),
]
