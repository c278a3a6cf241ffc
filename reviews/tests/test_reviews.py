# reviews/tests/test_reviews.py
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Address
from bookings.models import Booking
from catalog.models import Category, Service
from reviews.models import Review
from technicians.models import Technician

User = get_user_model()

PASSWORD = "testpass123"


def create_user(email, role, phone, password=PASSWORD):
    return User.objects.create_user(
        email=email, password=password, full_name="Review User", phone=phone, role=role, email_confirmed=True
    )


class ReviewTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.customer = create_user("rv_customer@test.com", User.Role.CUSTOMER, "0778880001")
        cls.stranger = create_user("rv_stranger@test.com", User.Role.CUSTOMER, "0778880002")
        cls.technician = Technician.objects.create(
            user=create_user("rv_tech@test.com", User.Role.TECHNICIAN, "0778880003"),
            verification_status=Technician.VerificationStatus.APPROVED,
        )
        category = Category.objects.create(name="Painting")
        cls.service = Service.objects.create(name="Wall paint", fixed_rate=Decimal("300.00"), category=category)
        cls.address = Address.objects.create(
            user=cls.customer, street="4 D St", city="Negombo", state="Western", postal_code="11500"
        )

    def setUp(self):
        r = self.client.post(
            "/api/auth/login/", {"identifier": "rv_customer@test.com", "password": PASSWORD}, format="json"
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['access']}")

    def make_booking(self, booking_status=Booking.Status.COMPLETED):
        start = timezone.now() - timedelta(days=3)
        return Booking.objects.create(
            customer=self.customer,
            technician=self.technician,
            service=self.service,
            address=self.address,
            description="Repaint living room",
            preferred_start=start,
            preferred_end=start + timedelta(hours=6),
            total_amount=self.service.fixed_rate,
            status=booking_status,
        )

    def test_review_completed_booking_updates_rating(self):
        first = self.make_booking()
        second = self.make_booking()

        r = self.client.post(f"/api/bookings/{first.id}/review/", {"rating": 5, "comment": "Great"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_201_CREATED, r.data)
        self.assertEqual(r.data["technician_id"], self.technician.id)

        self.client.post(f"/api/bookings/{second.id}/review/", {"rating": 4}, format="json")

        self.technician.refresh_from_db()
        self.assertEqual(self.technician.total_ratings, 2)
        self.assertEqual(self.technician.rating_average, Decimal("4.50"))

    def test_only_one_review_per_booking(self):
        booking = self.make_booking()
        self.client.post(f"/api/bookings/{booking.id}/review/", {"rating": 5}, format="json")

        r = self.client.post(f"/api/bookings/{booking.id}/review/", {"rating": 1}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Review.objects.filter(booking=booking).count(), 1)

    def test_cannot_review_unfinished_booking(self):
        booking = self.make_booking(Booking.Status.IN_PROGRESS)
        r = self.client.post(f"/api/bookings/{booking.id}/review/", {"rating": 5}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rating_out_of_range(self):
        booking = self.make_booking()
        r = self.client.post(f"/api/bookings/{booking.id}/review/", {"rating": 6}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_stranger_cannot_review(self):
        booking = self.make_booking()
        r = self.client.post(
            "/api/auth/login/", {"identifier": "rv_stranger@test.com", "password": PASSWORD}, format="json"
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['access']}")

        r = self.client.post(f"/api/bookings/{booking.id}/review/", {"rating": 5}, format="json")
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_public_listing_with_filters(self):
        for rating in (5, 3, 4):
            booking = self.make_booking()
            Review.objects.create(booking=booking, technician=self.technician, customer=self.customer, rating=rating)

        self.client.credentials()
        url = f"/api/technicians/{self.technician.id}/reviews/"

        r = self.client.get(url)
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["review_count"], 3)
        self.assertEqual(r.data["avg_rating"], 4.0)

        r = self.client.get(url, {"min_rating": 4})
        self.assertEqual(sorted(x["rating"] for x in r.data["reviews"]), [4, 5])

        r = self.client.get(url, {"rating": 3})
        self.assertEqual([x["rating"] for x in r.data["reviews"]], [3])

        r = self.client.get(url, {"rating": 9})
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

        r = self.client.get(url, {"min_rating": "x"})
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_technician(self):
        r = self.client.get("/api/technicians/999999/reviews/")
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
