from rest_framework.routers import DefaultRouter

from .views import AdminBookingViewSet, BookingViewSet, TechnicianJobViewSet

router = DefaultRouter()
router.register("bookings", BookingViewSet, basename="bookings")
router.register("technician/jobs", TechnicianJobViewSet, basename="technician-jobs")
router.register("admin/bookings", AdminBookingViewSet, basename="admin-bookings")

urlpatterns = router.urls
