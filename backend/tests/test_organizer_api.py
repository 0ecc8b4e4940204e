from regixo.core.security import create_access_token
from regixo.models import CustomFormField, Event, Registration
from tests.factories import CustomFormFieldFactory, EventFactory, RegistrationFactory

BASE = "/api/organizer"


class TestAuth:
    def test_token_required(self, client):
        response = client.post(f"{BASE}/events", json={"title": "Meetup"})

        assert response.status_code == 401
        assert response.json()["error"] == "Not authenticated"

    def test_invalid_token(self, client):
        response = client.post(
            f"{BASE}/events", json={"title": "Meetup"}, headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401

    def test_other_organizers_event_is_hidden(self, client):
        event = EventFactory(organizer_id="someone-else")
        token = create_access_token({"sub": "organizer-1"})

        response = client.patch(
            f"{BASE}/events/{event.id}/status",
            json={"status": "closed"},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 404


class TestEvents:
    def test_create_event_starts_as_draft(self, client, auth_headers, organizer_id):
        response = client.post(
            f"{BASE}/events",
            json={"title": "Summer Meetup 2026!", "seat_limit": 50, "price": "250"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "draft"
        assert body["slug"] == "summer-meetup-2026"
        assert body["organizer_id"] == organizer_id
        assert body["seat_limit"] == 50

    def test_duplicate_slug_gets_a_suffix(self, client, auth_headers):
        EventFactory(slug="book-fair")

        response = client.post(f"{BASE}/events", json={"title": "Book Fair"}, headers=auth_headers)

        assert response.json()["slug"].startswith("book-fair-")

    def test_lifecycle(self, client, auth_headers):
        event = EventFactory(status="draft")
        url = f"{BASE}/events/{event.id}/status"

        for status in ("published", "closed", "published"):
            response = client.patch(url, json={"status": status}, headers=auth_headers)
            assert response.status_code == 200
            assert response.json()["status"] == status

    def test_invalid_transition(self, client, auth_headers):
        event = EventFactory(status="draft")

        response = client.patch(f"{BASE}/events/{event.id}/status", json={"status": "closed"}, headers=auth_headers)

        assert response.status_code == 400

    def test_delete_cascades(self, client, db_session, auth_headers):
        event = EventFactory()
        RegistrationFactory.create_batch(2, event=event)
        CustomFormFieldFactory(event=event)

        response = client.delete(f"{BASE}/events/{event.id}", headers=auth_headers)

        assert response.status_code == 204
        db_session.expire_all()
        assert db_session.query(Event).count() == 0
        assert db_session.query(Registration).count() == 0
        assert db_session.query(CustomFormField).count() == 0

    def test_replace_custom_fields(self, client, db_session, auth_headers):
        event = EventFactory()
        CustomFormFieldFactory(event=event, field_name="Old question")

        response = client.put(
            f"{BASE}/events/{event.id}/custom-fields",
            json=[
                {"field_name": "Meal", "field_type": "select", "field_options": []},
                {"field_name": "Company", "field_type": "text", "field_options": ["x"], "is_required": True},
            ],
            headers=auth_headers,
        )

        assert response.status_code == 200
        fields = response.json()
        assert [f["field_name"] for f in fields] == ["Meal", "Company"]
        assert fields[0]["field_options"] == [""]
        assert fields[1]["field_options"] is None
        assert [f["sort_order"] for f in fields] == [0, 1]
        db_session.expire_all()
        assert db_session.query(CustomFormField).filter(CustomFormField.event_id == event.id).count() == 2

    def test_unknown_field_type(self, client, auth_headers):
        event = EventFactory()

        response = client.put(
            f"{BASE}/events/{event.id}/custom-fields",
            json=[{"field_name": "Date", "field_type": "date"}],
            headers=auth_headers,
        )

        assert response.status_code == 400


class TestRegistrations:
    def test_manual_registration_is_approved(self, client, auth_headers):
        event = EventFactory(seat_limit=1)
        RegistrationFactory(event=event, status="approved")

        response = client.post(
            f"{BASE}/events/{event.id}/registrations",
            json={"name": "Walk-in Guest", "phone": "01911111111"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "approved"
        assert body["registration_number"].startswith("REG-")

    def test_manual_registration_cannot_be_rejected(self, client, auth_headers):
        event = EventFactory()

        response = client.post(
            f"{BASE}/events/{event.id}/registrations",
            json={"name": "Walk-in Guest", "status": "rejected"},
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_reject_then_approve_clears_reason(self, client, db_session, auth_headers):
        event = EventFactory()
        first, second = RegistrationFactory.create_batch(2, event=event)
        ids = [first.id, second.id]

        response = client.patch(
            f"{BASE}/registrations/status",
            json={"ids": ids, "status": "rejected", "rejection_reason": "Payment not received"},
            headers=auth_headers,
        )
        assert response.json() == {"updated": 2, "status": "rejected"}
        db_session.expire_all()
        assert db_session.get(Registration, first.id).rejection_reason == "Payment not received"

        client.patch(f"{BASE}/registrations/status", json={"ids": [first.id], "status": "approved"}, headers=auth_headers)

        db_session.expire_all()
        approved = db_session.get(Registration, first.id)
        assert approved.status == "approved"
        assert approved.rejection_reason is None
        assert db_session.get(Registration, second.id).rejection_reason == "Payment not received"

    def test_invalid_status(self, client, auth_headers):
        registration = RegistrationFactory()

        response = client.patch(
            f"{BASE}/registrations/status",
            json={"ids": [registration.id], "status": "cancelled"},
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_tag_set_and_cleared(self, client, auth_headers):
        registration = RegistrationFactory()
        url = f"{BASE}/registrations/{registration.id}/tag"

        assert client.patch(url, json={"tag": "VIP"}, headers=auth_headers).json()["tag"] == "VIP"
        assert client.patch(url, json={"tag": "none"}, headers=auth_headers).json()["tag"] is None

    def test_list_flags_shared_transactions(self, client, auth_headers):
        event = EventFactory()
        RegistrationFactory(event=event, transaction_id="TRX100")
        RegistrationFactory(event=event, transaction_id="TRX100")
        RegistrationFactory(event=event, transaction_id="TRX200", status="approved")

        everyone = client.get(f"{BASE}/events/{event.id}/registrations", headers=auth_headers).json()
        approved = client.get(
            f"{BASE}/events/{event.id}/registrations", params={"status": "approved"}, headers=auth_headers
        ).json()

        flags = {row["transaction_id"]: row["duplicate_transaction"] for row in everyone}
        assert len(everyone) == 3
        assert flags == {"TRX100": True, "TRX200": False}
        assert [row["transaction_id"] for row in approved] == ["TRX200"]
