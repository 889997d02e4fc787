from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    # Month aggregate (discount eligibility)
    path('month/', views.month_aggregate, name='month-aggregate'),

    # History and trends
    path('history/', views.monthly_history, name='monthly-history'),
    path('trends/', views.monthly_trends, name='monthly-trends'),

    # Settlement totals
    path('stats/', views.purchase_stats, name='purchase-stats'),
]
