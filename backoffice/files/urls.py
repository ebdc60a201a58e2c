from django.urls import path
from .views import file_list_create, file_detail, file_upload, file_raw

urlpatterns = [
    path('', file_list_create, name='file-list-create'),
    path('upload/', file_upload, name='file-upload'),
    path('raw/<str:filename>', file_raw, name='file-raw'),
    path('<int:pk>/', file_detail, name='file-detail'),
]
