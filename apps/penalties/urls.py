from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'penalties'

router = DefaultRouter()
router.register(r'', views.PenaltyViewSet, basename='penalty')

urlpatterns = [
    # GET  /api/penalties/              - Own penalties
    # GET  /api/penalties/{id}/         - Penalty details
    # POST /api/penalties/{id}/pay/     - Pay outstanding amount
    # GET  /api/penalties/unresolved/   - Unresolved penalties (admin)
    # GET  /api/penalties/policies/     - Active policies
    # POST /api/penalties/issue_late/   - Late-return fee (admin)
    path('', include(router.urls)),
]
