from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'notifications'

router = DefaultRouter()
router.register(r'', views.NotificationViewSet, basename='notification')

urlpatterns = [
    # GET  /api/notifications/            - Own notifications
    # POST /api/notifications/{id}/read/  - Mark as read
    path('', include(router.urls)),
]
