# technicians/tests/test_verification.py
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from adminpanel.models import AuditLog
from catalog.models import Category
from technicians.models import Technician

User = get_user_model()

PASSWORD = "testpass123"


def create_user(email, role, phone, password=PASSWORD):
    return User.objects.create_user(
        email=email, password=password, full_name="Test User", phone=phone, role=role, email_confirmed=True
    )


class AdminApprovalTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("tv_admin@test.com", User.Role.ADMIN, "0776660001")
        cls.customer = create_user("tv_customer@test.com", User.Role.CUSTOMER, "0776660002")

        cls.no_docs = Technician.objects.create(user=create_user("tv_nodocs@test.com", User.Role.TECHNICIAN, "0776660003"))
        cls.half_docs = Technician.objects.create(
            user=create_user("tv_half@test.com", User.Role.TECHNICIAN, "0776660004"),
            id_proof="docs/id.png",
        )
        cls.with_docs = Technician.objects.create(
            user=create_user("tv_docs@test.com", User.Role.TECHNICIAN, "0776660005"),
            id_proof="docs/id.png",
            certificate="docs/cert.pdf",
        )

    def setUp(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {self.login('tv_admin@test.com')}")

    def login(self, identifier):
        r = self.client.post("/api/auth/login/", {"identifier": identifier, "password": PASSWORD}, format="json")
        self.assertEqual(r.status_code, 200)
        return r.data["access"]

    def verify(self, technician, body):
        return self.client.put(f"/api/admin/technicians/{technician.id}/verify/", body, format="json")

    def test_approve_without_documents_is_rejected(self):
        for technician in (self.no_docs, self.half_docs):
            r = self.verify(technician, {"status": "APPROVED"})
            self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn("Cannot approve", str(r.data))

            technician.refresh_from_db()
            self.assertEqual(technician.verification_status, Technician.VerificationStatus.PENDING)
            self.assertIsNone(technician.verified_at)

    def test_approve_with_documents(self):
        r = self.verify(self.with_docs, {"status": "approved"})
        self.assertEqual(r.status_code, 200, r.data)
        self.assertEqual(r.data["verification_status"], "APPROVED")

        self.with_docs.refresh_from_db()
        self.assertIsNotNone(self.with_docs.verified_at)
        self.assertTrue(AuditLog.objects.filter(admin=self.admin, action="Technician approved").exists())

    def test_reject_stores_reason_and_clears_verified_at(self):
        self.verify(self.with_docs, {"status": "APPROVED"})

        r = self.verify(self.with_docs, {"status": "REJECTED", "reason": "Certificate is blurry"})
        self.assertEqual(r.status_code, 200, r.data)

        self.with_docs.refresh_from_db()
        self.assertEqual(self.with_docs.verification_status, Technician.VerificationStatus.REJECTED)
        self.assertEqual(self.with_docs.rejection_reason, "Certificate is blurry")
        self.assertIsNone(self.with_docs.verified_at)

    def test_suspend_does_not_require_documents(self):
        r = self.verify(self.no_docs, {"status": "SUSPENDED"})
        self.assertEqual(r.status_code, 200)

    def test_invalid_status(self):
        r = self.verify(self.with_docs, {"status": "Verified"})
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pending_list_and_status_filter(self):
        self.verify(self.with_docs, {"status": "APPROVED"})

        r = self.client.get("/api/admin/technicians/pending/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual({t["id"] for t in r.data}, {self.no_docs.id, self.half_docs.id})

        r = self.client.get("/api/admin/technicians/", {"status": "approved"})
        self.assertEqual([t["id"] for t in r.data], [self.with_docs.id])

        r = self.client.get(f"/api/admin/technicians/{self.with_docs.id}/")
        self.assertEqual(r.status_code, 200)
        self.assertIn("address", r.data)

    def test_customer_cannot_verify(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {self.login('tv_customer@test.com')}")
        r = self.verify(self.with_docs, {"status": "APPROVED"})
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)


class TechnicianSelfServiceTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = create_user("ts_tech@test.com", User.Role.TECHNICIAN, "0776670001")
        cls.technician = Technician.objects.create(
            user=cls.user,
            verification_status=Technician.VerificationStatus.REJECTED,
            rejection_reason="Missing certificate",
        )
        Category.objects.create(name="Masonry")

    def setUp(self):
        r = self.client.post(
            "/api/auth/login/", {"identifier": "ts_tech@test.com", "password": PASSWORD}, format="json"
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['access']}")

    def test_resubmitting_documents_resets_rejection(self):
        body = {
            "id_proof": "docs/nic.jpg",
            "certificate": "docs/nvq.pdf",
            "experience_years": 4,
            "address": {"street": "9 Hill St", "city": "Kandy", "state": "Central", "postal_code": "20000"},
            "categories": ["masonry", "Underwater welding"],
        }
        r = self.client.post("/api/technician/documents/", body, format="json")
        self.assertEqual(r.status_code, 200, r.data)
        self.assertEqual(r.data["unknown_categories"], ["Underwater welding"])
        self.assertEqual(r.data["categories"], ["Masonry"])

        self.technician.refresh_from_db()
        self.assertEqual(self.technician.verification_status, Technician.VerificationStatus.PENDING)
        self.assertEqual(self.technician.rejection_reason, "")
        self.assertTrue(self.technician.has_documents())
        self.assertEqual(self.technician.experience_years, 4)
        self.assertEqual(self.user.addresses.get().city, "Kandy")

        r = self.client.get("/api/technician/verify-details/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["address"]["city"], "Kandy")

    def test_profile_update(self):
        r = self.client.patch(
            "/api/technician/profile/",
            {"experience_years": 7, "availability_status": "busy"},
            format="json",
        )
        self.assertEqual(r.status_code, 200, r.data)

        self.technician.refresh_from_db()
        self.assertEqual(self.technician.experience_years, 7)
        self.assertEqual(self.technician.availability_status, Technician.Availability.BUSY)

    def test_profile_cannot_change_verification(self):
        self.client.patch("/api/technician/profile/", {"verification_status": "APPROVED"}, format="json")
        self.technician.refresh_from_db()
        self.assertEqual(self.technician.verification_status, Technician.VerificationStatus.REJECTED)
