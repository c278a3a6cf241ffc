from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import AdminTechnicianViewSet, TechnicianDocumentsAPIView, TechnicianProfileAPIView, VerifyDetailsAPIView

router = DefaultRouter()
router.register("admin/technicians", AdminTechnicianViewSet, basename="admin-technicians")

urlpatterns = [
    path("technician/profile/", TechnicianProfileAPIView.as_view()),
    path("technician/documents/", TechnicianDocumentsAPIView.as_view()),
    path("technician/verify-details/", VerifyDetailsAPIView.as_view()),
] + router.urls
