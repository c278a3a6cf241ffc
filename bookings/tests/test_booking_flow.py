# bookings/tests/test_booking_flow.py
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Address
from bookings.models import Booking, Commission
from catalog.models import Category, Service
from technicians.models import Technician

User = get_user_model()

PASSWORD = "testpass123"


def create_user(email, role, phone, password=PASSWORD):
    return User.objects.create_user(
        email=email,
        password=password,
        full_name=email.split("@")[0].replace("_", " ").title(),
        phone=phone,
        role=role,
        email_confirmed=True,
    )


def create_technician(email, phone, verification_status=Technician.VerificationStatus.APPROVED):
    user = create_user(email, User.Role.TECHNICIAN, phone)
    return Technician.objects.create(
        user=user,
        verification_status=verification_status,
        id_proof="docs/id.png",
        certificate="docs/cert.pdf",
    )


@override_settings(PLATFORM_COMMISSION_PERCENT="10")
class BookingFlowTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.customer = create_user("bk_customer@test.com", User.Role.CUSTOMER, "0770000001")
        cls.other_customer = create_user("bk_other@test.com", User.Role.CUSTOMER, "0770000002")
        cls.admin = create_user("bk_admin@test.com", User.Role.ADMIN, "0770000003")

        cls.tech_a = create_technician("bk_tech_a@test.com", "0770000004")
        cls.tech_b = create_technician("bk_tech_b@test.com", "0770000005")
        cls.tech_pending = create_technician(
            "bk_tech_pending@test.com", "0770000006", Technician.VerificationStatus.PENDING
        )

        cls.category = Category.objects.create(name="Plumbing")
        cls.service = Service.objects.create(name="Leak repair", fixed_rate=Decimal("100.00"), category=cls.category)

        cls.address = Address.objects.create(
            user=cls.customer, street="12 Main St", city="Colombo", state="Western", postal_code="00100", is_default=True
        )
        cls.other_address = Address.objects.create(
            user=cls.other_customer, street="5 Lake Rd", city="Kandy", state="Central", postal_code="20000"
        )

    def login(self, email, password=PASSWORD):
        res = self.client.post("/api/auth/login/", {"identifier": email, "password": password}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        return res.data["access"]

    def as_user(self, user):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {self.login(user.email)}")

    def booking_payload(self, **overrides):
        start = timezone.now() + timedelta(days=1)
        payload = {
            "service_id": self.service.id,
            "address_id": self.address.id,
            "description": "Kitchen sink is leaking",
            "preferred_start": start.isoformat(),
            "preferred_end": (start + timedelta(hours=2)).isoformat(),
        }
        payload.update(overrides)
        return payload

    def create_booking(self):
        self.as_user(self.customer)
        res = self.client.post("/api/bookings/", self.booking_payload(), format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        return res.data["id"]

    # ---------- customer ----------

    def test_create_booking_uses_service_rate(self):
        booking_id = self.create_booking()

        booking = Booking.objects.get(id=booking_id)
        self.assertEqual(booking.total_amount, Decimal("100.00"))
        self.assertEqual(booking.status, Booking.Status.PENDING)
        self.assertIsNone(booking.technician_id)

    def test_total_is_fixed_at_creation_time(self):
        booking_id = self.create_booking()

        self.service.fixed_rate = Decimal("150.00")
        self.service.save()

        self.as_user(self.customer)
        res = self.client.get(f"/api/bookings/{booking_id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(Decimal(res.data["total_amount"]), Decimal("100.00"))

    def test_create_booking_rejects_foreign_address(self):
        self.as_user(self.customer)
        res = self.client.post("/api/bookings/", self.booking_payload(address_id=self.other_address.id), format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("address_id", res.data)

    def test_create_booking_rejects_end_before_start(self):
        start = timezone.now() + timedelta(days=1)
        self.as_user(self.customer)
        res = self.client.post(
            "/api/bookings/",
            self.booking_payload(preferred_start=start.isoformat(), preferred_end=(start - timedelta(hours=1)).isoformat()),
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("preferred_end", res.data)

    def test_create_booking_rejects_inactive_category(self):
        self.category.is_active = False
        self.category.save()

        self.as_user(self.customer)
        res = self.client.post("/api/bookings/", self.booking_payload(), format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_customers_create_bookings(self):
        self.as_user(self.tech_a.user)
        res = self.client.post("/api/bookings/", self.booking_payload(), format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_detail_hidden_from_other_customers(self):
        booking_id = self.create_booking()

        self.as_user(self.other_customer)
        res = self.client.get(f"/api/bookings/{booking_id}/")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

        self.as_user(self.admin)
        res = self.client.get(f"/api/bookings/{booking_id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["technician_name"], "Not Assigned")

    def test_customer_cancels_pending_booking(self):
        booking_id = self.create_booking()

        res = self.client.post(f"/api/bookings/{booking_id}/cancel/")
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["status"], Booking.Status.CANCELLED)

        # terminal now
        res = self.client.post(f"/api/bookings/{booking_id}/cancel/")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_customer_cannot_cancel_accepted_booking(self):
        booking_id = self.create_booking()

        self.as_user(self.tech_a.user)
        self.assertEqual(self.client.post(f"/api/technician/jobs/{booking_id}/accept/").status_code, 200)

        self.as_user(self.customer)
        res = self.client.post(f"/api/bookings/{booking_id}/cancel/")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Booking.objects.get(id=booking_id).status, Booking.Status.ACCEPTED)

    def test_current_booking_and_history(self):
        first = self.create_booking()
        self.client.post(f"/api/bookings/{first}/cancel/")
        second = self.create_booking()

        res = self.client.get("/api/bookings/current/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["current_booking"]["id"], second)
        self.assertEqual(res.data["current_booking"]["progress"], 20)
        self.assertEqual([b["id"] for b in res.data["booking_history"]], [first])
        self.assertEqual(res.data["booking_history"][0]["progress"], 10)

    def test_list_is_scoped_to_customer(self):
        self.create_booking()

        self.as_user(self.other_customer)
        res = self.client.get("/api/bookings/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data), 0)

    # ---------- technician ----------

    def test_unverified_technician_cannot_accept(self):
        booking_id = self.create_booking()

        self.as_user(self.tech_pending.user)
        res = self.client.post(f"/api/technician/jobs/{booking_id}/accept/")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn("verified", str(res.data["detail"]))
        self.assertIsNone(Booking.objects.get(id=booking_id).technician_id)

    def test_unverified_technician_cannot_update_status(self):
        booking_id = self.create_booking()
        self.as_user(self.tech_a.user)
        self.client.post(f"/api/technician/jobs/{booking_id}/accept/")

        # suspended after accepting
        Technician.objects.filter(id=self.tech_a.id).update(
            verification_status=Technician.VerificationStatus.SUSPENDED
        )

        res = self.client.patch(f"/api/technician/jobs/{booking_id}/status/", {"status": "IN_PROGRESS"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(Booking.objects.get(id=booking_id).status, Booking.Status.ACCEPTED)

    def test_second_accept_is_rejected(self):
        booking_id = self.create_booking()

        self.as_user(self.tech_a.user)
        r1 = self.client.post(f"/api/technician/jobs/{booking_id}/accept/")
        self.assertEqual(r1.status_code, 200, r1.data)
        self.assertTrue(r1.data["assigned_to_me"])

        self.as_user(self.tech_b.user)
        r2 = self.client.post(f"/api/technician/jobs/{booking_id}/accept/")
        self.assertEqual(r2.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(r2.data["detail"], "Job not available or already taken.")

        booking = Booking.objects.get(id=booking_id)
        self.assertEqual(booking.technician_id, self.tech_a.id)
        self.assertEqual(booking.status, Booking.Status.ACCEPTED)

    def test_accept_missing_booking(self):
        self.as_user(self.tech_a.user)
        res = self.client.post("/api/technician/jobs/999999/accept/")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_jobs_list_shows_open_and_own_active(self):
        open_id = self.create_booking()
        taken_id = self.create_booking()

        self.as_user(self.tech_b.user)
        self.client.post(f"/api/technician/jobs/{taken_id}/accept/")

        self.as_user(self.tech_a.user)
        res = self.client.get("/api/technician/jobs/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual([j["id"] for j in res.data], [open_id])

        self.as_user(self.tech_b.user)
        ids = {j["id"] for j in self.client.get("/api/technician/jobs/").data}
        self.assertEqual(ids, {open_id, taken_id})

        mine = self.client.get("/api/technician/jobs/mine/")
        self.assertEqual([j["id"] for j in mine.data], [taken_id])

    def test_full_lifecycle_settles_commission(self):
        booking_id = self.create_booking()

        self.as_user(self.tech_a.user)
        self.client.post(f"/api/technician/jobs/{booking_id}/accept/")

        r1 = self.client.patch(f"/api/technician/jobs/{booking_id}/status/", {"status": "in_progress"}, format="json")
        self.assertEqual(r1.status_code, 200, r1.data)
        self.assertEqual(r1.data["status"], Booking.Status.IN_PROGRESS)

        r2 = self.client.patch(f"/api/technician/jobs/{booking_id}/status/", {"status": "COMPLETED"}, format="json")
        self.assertEqual(r2.status_code, 200, r2.data)

        booking = Booking.objects.get(id=booking_id)
        self.assertEqual(booking.status, Booking.Status.COMPLETED)
        self.assertIsNotNone(booking.work_completed_at)

        commission = Commission.objects.get(booking=booking)
        self.assertEqual(commission.amount, Decimal("10.00"))
        self.assertEqual(commission.percentage, Decimal("10"))

        self.tech_a.refresh_from_db()
        self.assertEqual(self.tech_a.wallet_balance, Decimal("90.00"))
        self.assertEqual(self.tech_a.total_jobs_completed, 1)

    def test_finalized_booking_rejects_updates(self):
        booking_id = self.create_booking()

        self.as_user(self.tech_a.user)
        self.client.post(f"/api/technician/jobs/{booking_id}/accept/")
        self.client.patch(f"/api/technician/jobs/{booking_id}/status/", {"status": "IN_PROGRESS"}, format="json")
        self.client.patch(f"/api/technician/jobs/{booking_id}/status/", {"status": "COMPLETED"}, format="json")

        for target in ("IN_PROGRESS", "CANCELLED", "COMPLETED"):
            res = self.client.patch(f"/api/technician/jobs/{booking_id}/status/", {"status": target}, format="json")
            self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST, target)

        # settled exactly once
        self.assertEqual(Commission.objects.filter(booking_id=booking_id).count(), 1)

    def test_skipping_a_step_is_rejected(self):
        booking_id = self.create_booking()

        self.as_user(self.tech_a.user)
        self.client.post(f"/api/technician/jobs/{booking_id}/accept/")
        res = self.client.patch(f"/api/technician/jobs/{booking_id}/status/", {"status": "COMPLETED"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_status_is_rejected(self):
        booking_id = self.create_booking()

        self.as_user(self.tech_a.user)
        self.client.post(f"/api/technician/jobs/{booking_id}/accept/")
        res = self.client.patch(f"/api/technician/jobs/{booking_id}/status/", {"status": "Verified"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_technician_cannot_update_someone_elses_job(self):
        booking_id = self.create_booking()

        self.as_user(self.tech_a.user)
        self.client.post(f"/api/technician/jobs/{booking_id}/accept/")

        self.as_user(self.tech_b.user)
        res = self.client.patch(f"/api/technician/jobs/{booking_id}/status/", {"status": "IN_PROGRESS"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_technician_withdraws_accepted_job(self):
        booking_id = self.create_booking()

        self.as_user(self.tech_a.user)
        self.client.post(f"/api/technician/jobs/{booking_id}/accept/")
        res = self.client.patch(f"/api/technician/jobs/{booking_id}/status/", {"status": "CANCELLED"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(Booking.objects.get(id=booking_id).status, Booking.Status.CANCELLED)

    def test_customers_cannot_use_job_endpoints(self):
        booking_id = self.create_booking()
        res = self.client.post(f"/api/technician/jobs/{booking_id}/accept/")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    # ---------- admin ----------

    def test_admin_lists_bookings_by_status(self):
        first = self.create_booking()
        self.create_booking()
        self.client.post(f"/api/bookings/{first}/cancel/")

        self.as_user(self.admin)
        res = self.client.get("/api/admin/bookings/", {"status": "cancelled"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual([b["id"] for b in res.data], [first])

        res = self.client.get("/api/admin/bookings/", {"status": "nope"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_bookings_forbidden_for_customers(self):
        self.as_user(self.customer)
        res = self.client.get("/api/admin/bookings/")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
