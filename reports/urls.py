# reports/urls.py
from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    path('<str:report_type>/', views.report_summary, name='summary'),
    path('<str:report_type>/export/', views.export_report_view, name='export'),
]
