from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, register, user_me,
    activity_list, setting_list, setting_detail, dashboard_stats,
)

urlpatterns = [
    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),

    path('activities/', activity_list, name='activity-list'),

    path('settings/', setting_list, name='setting-list'),
    path('settings/<str:key>/', setting_detail, name='setting-detail'),

    path('dashboard/stats/', dashboard_stats, name='dashboard-stats'),
]
