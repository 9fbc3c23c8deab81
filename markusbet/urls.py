from django.urls import path
from . import views

urlpatterns = [
    path('', views.index, name='index'),

    # Admin panel
    path('admin/', views.admin_panel, name='admin_panel'),
    path('admin/login', views.admin_login, name='admin_login'),
    path('admin/logout', views.admin_logout, name='admin_logout'),
    path('admin/predictions/new', views.prediction_add, name='prediction_add'),
    path('admin/predictions/<int:pk>/edit', views.prediction_edit, name='prediction_edit'),
    path('admin/predictions/<int:pk>/delete', views.prediction_delete, name='prediction_delete'),

    # REST data
    path('api/predictions', views.PredictionsAPI.as_view(), name='api_predictions'),

    path('health', views.health, name='health'),
]
