from django.urls import path
from .views import (
    invoice_list_create, invoice_next_number, invoice_status_counts, invoice_detail,
    invoice_share_create, invoice_share_list, invoice_share_revoke, invoice_public,
)

urlpatterns = [
    path('', invoice_list_create, name='invoice-list-create'),
    path('number/next/', invoice_next_number, name='invoice-next-number'),
    path('status-counts/', invoice_status_counts, name='invoice-status-counts'),
    path('public/<str:token>/', invoice_public, name='invoice-public'),

    # Share endpoints
    path('shares/', invoice_share_create, name='invoice-share-create'),
    path('shares/<int:share_id>/', invoice_share_revoke, name='invoice-share-revoke'),

    path('<int:pk>/', invoice_detail, name='invoice-detail'),
    path('<int:pk>/shares/', invoice_share_list, name='invoice-share-list'),
]
