from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    path('api/auth/', include('custom_auth.urls')),
    path('api/users/', include('UserDataManagement.urls')),
    path('api/guide-allocation/', include('InternshipAllocation.urls')),
    path('api/student-internships/', include('InternshipAllocation.internship_urls')),
]
