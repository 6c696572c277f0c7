from django.urls import path
from .views import (
    GuideListAPIView,
    GuideDetailAPIView,
    StudentListAPIView,
    StudentDetailAPIView,
)

urlpatterns = [

    # Student creation
    path(
        "students/",
        StudentListAPIView.as_view(),
        name="student-list",
    ),

    # Individual GET / PUT / DELETE
    path(
        "students/<uuid:pk>/",
        StudentDetailAPIView.as_view(),
        name="student-detail",
    ),

    # Guide creation
    path(
        "guides/",
        GuideListAPIView.as_view(),
        name="guide-list",
    ),
    path(
        "guides/<uuid:guide_id>/",
        GuideDetailAPIView.as_view(),
        name="guide-detail",
    ),
]
