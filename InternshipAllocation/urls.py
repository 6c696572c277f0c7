from django.urls import path
from .views import (
    AllocateGuideAPIView,
    RangeOverlapCheckAPIView,
    GuideAllocationAPIView,
    GuideAllocationExportAPIView,
)

urlpatterns = [
    path('allocate/', AllocateGuideAPIView.as_view(), name='allocate-guide'),
    path('validate-range/', RangeOverlapCheckAPIView.as_view(), name='validate-range'),

    # GET list, DELETE by range + semester
    path('allocations/', GuideAllocationAPIView.as_view(), name='guide-allocations'),
    path('allocations/export/', GuideAllocationExportAPIView.as_view(), name='guide-allocations-export'),
]
