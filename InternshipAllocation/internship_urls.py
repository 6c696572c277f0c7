from django.urls import path
from .views import (
    UpdateInternshipGuideAPIView,
    StudentInternshipLookupAPIView,
    GuideStudentsAPIView,
    MyInternshipAPIView,
)

urlpatterns = [
    path('<uuid:internship_id>/update-guide/', UpdateInternshipGuideAPIView.as_view(), name='update-internship-guide'),
    path('student/<str:student_id>/', StudentInternshipLookupAPIView.as_view(), name='student-internship-lookup'),
    path('my-students/', GuideStudentsAPIView.as_view(), name='guide-students'),
    path('me/', MyInternshipAPIView.as_view(), name='my-internship'),
]
