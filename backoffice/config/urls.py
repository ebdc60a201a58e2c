"""
URL configuration for the backoffice project.

Every plugin mounts its routes under /api/<plugin>/; core routes
(auth, activities, settings, dashboard) sit directly under /api/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Backoffice Admin Panel"
admin.site.site_title = "Backoffice Admin Portal"
admin.site.index_title = "Welcome to the Backoffice Admin"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('backoffice.core.urls')),
    path('api/contacts/', include('backoffice.contacts.urls')),
    path('api/products/', include('backoffice.products.urls')),
    path('api/estimates/', include('backoffice.estimates.urls')),
    path('api/invoices/', include('backoffice.invoices.urls')),
    path('api/files/', include('backoffice.files.urls')),
    path('api/woocommerce-products/', include('backoffice.woocommerce.urls')),
]
