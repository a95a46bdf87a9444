from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'accounts'

# Router for ViewSets
router = SimpleRouter()
router.register(r'', views.AccountViewSet, basename='account')

urlpatterns = [
    # Account ViewSet routes
    # GET    /api/accounts/              - List user's active accounts
    # POST   /api/accounts/              - Create account
    # GET    /api/accounts/{id}/         - Get account details
    # PATCH  /api/accounts/{id}/         - Rename / add invitees (owner)
    # DELETE /api/accounts/{id}/         - Delete account (owner)

    # Custom account actions
    # GET    /api/accounts/{id}/members/        - List members and invitees
    # POST   /api/accounts/{id}/invite/         - Invite by user_id or email (owner)
    # POST   /api/accounts/{id}/accept/         - Accept invitation
    # POST   /api/accounts/{id}/reject/         - Reject invitation
    # DELETE /api/accounts/{id}/remove_member/  - Always 403
    # GET    /api/accounts/{id}/balances/       - Pending balances and reconciliation

    # Additional endpoints
    path('my/', views.my_accounts, name='my-accounts'),

    # Include router URLs
    path('', include(router.urls)),
]
