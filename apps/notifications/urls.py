from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    path('', views.notification_list, name='notification-list'),
    path('read-all/', views.notification_mark_all_read, name='notification-read-all'),
    path('<uuid:notification_id>/read/', views.notification_mark_read, name='notification-read'),
]
