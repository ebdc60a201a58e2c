from django.urls import path
from .views import contact_list_create, contact_next_number, contact_detail

urlpatterns = [
    path('', contact_list_create, name='contact-list-create'),
    path('number/next/', contact_next_number, name='contact-next-number'),
    path('<int:pk>/', contact_detail, name='contact-detail'),
]
