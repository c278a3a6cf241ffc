from django.urls import path

from .views import BookingTrendsAPIView, DashboardStatsAPIView, RecentActivityAPIView

urlpatterns = [
    path("admin/dashboard/stats/", DashboardStatsAPIView.as_view()),
    path("admin/dashboard/recent-activity/", RecentActivityAPIView.as_view()),
    path("admin/dashboard/booking-trends/", BookingTrendsAPIView.as_view()),
]
