from django.urls import path
from .views import (
    estimate_list_create, estimate_next_number, estimate_detail,
    estimate_change_status, estimate_convert_to_invoice,
    estimate_share_create, estimate_share_list, estimate_share_revoke, estimate_public,
)

urlpatterns = [
    path('', estimate_list_create, name='estimate-list-create'),
    path('next-number/', estimate_next_number, name='estimate-next-number'),
    path('public/<str:token>/', estimate_public, name='estimate-public'),

    # Share endpoints
    path('shares/', estimate_share_create, name='estimate-share-create'),
    path('shares/<int:share_id>/', estimate_share_revoke, name='estimate-share-revoke'),

    path('<int:pk>/', estimate_detail, name='estimate-detail'),
    path('<int:pk>/status/', estimate_change_status, name='estimate-change-status'),
    path('<int:pk>/convert-to-invoice/', estimate_convert_to_invoice, name='estimate-convert-to-invoice'),
    path('<int:pk>/shares/', estimate_share_list, name='estimate-share-list'),
]
