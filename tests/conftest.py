import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("EXTERNAL_API_AUTH_TOKEN", "external-token")
os.environ.setdefault("LOG_FILE", "logs/test.log")
os.environ.setdefault("DEFAULT_DOCTOR_TIME_ZONE", "America/Toronto")

import itertools
from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.core.security import create_access_token
from app.db.client import get_db
from app.main import app
from app.models.appointment import Appointment, AppointmentDetail, AppointmentPage, MutationResult
from app.services.appointment_service import get_appointment_service
from app.services.geocoding import get_geocoder
from app.utils.date_utils import server_today, utc_now

# 12:00 in Toronto (EST, UTC-5)
TODAY = date(2026, 2, 22)
NOW = datetime(2026, 2, 22, 17, 0, tzinfo=timezone.utc)
DOCTOR_REF = "doc-ref-1"

_ids = itertools.count(1)


def make_appointment(**overrides) -> Appointment:
    data = {
        "id": f"apt-{next(_ids)}",
        "trackingId": 100,
        "patientName": "Sarah Connor",
        "patientEmail": "sarah@example.com",
        "date": "2026-02-22",
        "time": "10:30",
        "status": "pending",
        "appointmentType": "Follow-up",
        "fee": 80,
        "attendance": None,
        "doctorTimeZone": "America/Toronto",
    }
    data.update(overrides)
    return Appointment.model_validate(data)


def make_detail(**overrides) -> AppointmentDetail:
    base = make_appointment(**overrides).model_dump(by_alias=True)
    base.setdefault("patientAddress", None)
    base.setdefault("patientPostalCode", None)
    return AppointmentDetail.model_validate(base)


class FakeAppointmentService:
    """In-memory stand-in for AppointmentService used by the HTTP tests"""

    def __init__(self):
        self.pages = {}
        self.page_errors = {}
        self.details = {}
        self.detail_error = None
        self.mutation_result = MutationResult(success=True, message="Appointment updated")
        self.settings = None
        self.settings_error = None
        self.queries = []
        self.actions = []
        self.saved_settings = []

    @staticmethod
    def _key(query):
        return "pending" if query.status == "pending" and query.page is None else "page"

    async def list_appointments(self, query):
        self.queries.append(query)
        key = self._key(query)
        if key in self.page_errors:
            raise self.page_errors[key]
        return self.pages.get(key, AppointmentPage())

    async def get_appointment_detail(self, appointment_id, doctor_id):
        if self.detail_error:
            raise self.detail_error
        return self.details.get(appointment_id)

    async def execute_action(self, action, appointment_id, doctor_id, notes=None):
        self.actions.append((action, appointment_id, doctor_id, notes))
        return self.mutation_result

    async def get_settings(self, doctor_id):
        if self.settings_error:
            raise self.settings_error
        return self.settings

    async def update_settings(self, doctor_id, settings):
        self.saved_settings.append((doctor_id, settings))
        return MutationResult(success=True, message="Settings updated")


class _Result:
    def __init__(self, inserted_id=None, matched_count=0):
        self.inserted_id = inserted_id
        self.matched_count = matched_count


class FakeCollection:
    def __init__(self):
        self.documents = []

    @staticmethod
    def _matches(document, query):
        return all(document.get(key) == value for key, value in query.items())

    def find_one(self, query):
        return next((d for d in self.documents if self._matches(d, query)), None)

    def insert_one(self, document):
        document.setdefault("_id", f"oid-{len(self.documents) + 1}")
        self.documents.append(document)
        return _Result(inserted_id=document["_id"])

    def update_one(self, query, update):
        return self.update_many(query, update)

    def update_many(self, query, update):
        matched = [d for d in self.documents if self._matches(d, query)]
        for document in matched:
            document.update(update.get("$set", {}))
        return _Result(matched_count=len(matched))


class FakeDB(dict):
    def __missing__(self, name):
        collection = FakeCollection()
        self[name] = collection
        return collection


def bearer(reference_id=DOCTOR_REF):
    claims = {"sub": "doctor-1", "email": "doc@example.com", "name": "Jane Doe", "clinicName": "Maple"}
    if reference_id:
        claims["referenceId"] = reference_id
    token = create_access_token(claims, timedelta(minutes=5))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def fake_service():
    return FakeAppointmentService()


@pytest.fixture
def fake_db():
    return FakeDB()


@pytest.fixture
def client(fake_service, fake_db):
    async def no_geocode(address, postal_code):
        return None

    app.dependency_overrides[get_appointment_service] = lambda: fake_service
    app.dependency_overrides[server_today] = lambda: TODAY
    app.dependency_overrides[utc_now] = lambda: NOW
    app.dependency_overrides[get_geocoder] = lambda: no_geocode
    app.dependency_overrides[get_db] = lambda: fake_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return bearer()
