from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'borrowing'

router = DefaultRouter()
router.register(r'requests', views.BorrowingRequestViewSet, basename='request')

urlpatterns = [
    # GET  /api/borrowing/requests/               - Own requests (admin: all)
    # POST /api/borrowing/requests/               - Submit request
    # GET  /api/borrowing/requests/{id}/          - Request details
    # POST /api/borrowing/requests/{id}/approve/  - Approve (admin)
    # POST /api/borrowing/requests/{id}/reject/   - Reject (admin)
    # POST /api/borrowing/requests/{id}/inspect/  - Check in return (admin)
    # GET  /api/borrowing/requests/pending/       - Approval queue (admin)
    # GET  /api/borrowing/requests/approved/      - Return queue (admin)
    path('', include(router.urls)),
]
