"""
URL configuration for health app (mounted under /api/).
"""

from django.urls import path

from . import views

urlpatterns = [
    path('treatment-types', views.TreatmentTypeListView.as_view(), name='treatment_type_list'),
    path('horses/<int:pk>/treatments', views.HorseTreatmentListView.as_view(), name='horse_treatments'),
    path('treatments', views.TreatmentUpsertView.as_view(), name='treatment_upsert'),
    path('treatments/batch', views.TreatmentBatchView.as_view(), name='treatment_batch'),
    path('treatments/<int:pk>', views.TreatmentDetailView.as_view(), name='treatment_detail'),
    path('grid', views.GridView.as_view(), name='grid'),
]
