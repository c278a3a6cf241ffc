from django.urls import path
from .views import TechnicianReviewsAPIView

urlpatterns = [
    path("technicians/<int:technician_id>/reviews/", TechnicianReviewsAPIView.as_view()),
]
