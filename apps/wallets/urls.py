from django.urls import path
from . import views

app_name = 'wallets'

urlpatterns = [
    path('me/', views.my_wallet, name='my-wallet'),
    path('transactions/', views.my_transactions, name='transactions'),
    path('top_up/', views.top_up_wallet, name='top-up'),
    path('transfer/', views.transfer_funds, name='transfer'),
]
