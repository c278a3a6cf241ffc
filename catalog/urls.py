from rest_framework.routers import DefaultRouter

from .views import CategoryAdminViewSet, CategoryViewSet, ServiceAdminViewSet, ServiceViewSet

router = DefaultRouter()
router.register("categories", CategoryViewSet, basename="categories")
router.register("services", ServiceViewSet, basename="services")
router.register("admin/categories", CategoryAdminViewSet, basename="admin-categories")
router.register("admin/services", ServiceAdminViewSet, basename="admin-services")

urlpatterns = router.urls
