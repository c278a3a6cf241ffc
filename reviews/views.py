from django.db.models import Avg
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.exceptions import NotFound, ValidationError

from technicians.models import Technician
from .models import Review
from .serializers import ReviewSerializer


def rating_param(request, name):
    value = request.query_params.get(name)
    if value is None:
        return None
    try:
        value = int(value)
    except ValueError:
        raise ValidationError({name: "Must be an integer"})
    if value < 1 or value > 5:
        raise ValidationError({name: "Must be between 1 and 5"})
    return value


class TechnicianReviewsAPIView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, technician_id):
        try:
            technician = Technician.objects.select_related("user").get(id=technician_id)
        except Technician.DoesNotExist:
            raise NotFound("Technician not found")

        qs = Review.objects.filter(technician=technician).select_related("customer").order_by("-created_at")

        rating = rating_param(request, "rating")
        if rating is not None:
            qs = qs.filter(rating=rating)

        min_rating = rating_param(request, "min_rating")
        if min_rating is not None:
            qs = qs.filter(rating__gte=min_rating)

        return Response({
            "technician_id": technician.id,
            "technician_name": technician.user.full_name,
            "review_count": qs.count(),
            "avg_rating": float(qs.aggregate(avg=Avg("rating"))["avg"] or 0),
            "reviews": ReviewSerializer(qs, many=True).data,
        })
