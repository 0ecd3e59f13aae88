from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'inventory'

router = DefaultRouter()
router.register(r'kits', views.KitViewSet, basename='kit')
router.register(r'components', views.KitComponentViewSet, basename='component')
router.register(r'history', views.KitComponentHistoryViewSet, basename='history')

urlpatterns = [
    # GET /api/inventory/kits/               - List kits
    # GET /api/inventory/kits/{id}/          - Kit with bundled components
    # GET /api/inventory/components/         - List components
    # GET /api/inventory/components/{id}/    - Component details
    # GET /api/inventory/history/            - Movement log (admin)
    path('', include(router.urls)),
]
