import unittest

from rupantor.tests.api_helpers import ApiTestCase
from rupantor.types import Role

CLEANUP = {
    "title": "Cleanup",
    "description": "Coastal cleanup drive",
    "date": "2025-11-25",
    "time": "06:00 AM",
    "location": "Cox's Bazar Beach",
    "category": "campaign",
    "speakers": ["Ms. Samudra Begum"],
}


class EventApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.admin, self.admin_headers = self.make_user("Kabir Hossain", role=Role.ADMIN)
        self.member, self.member_headers = self.make_user(
            "Ayesha Khan", team="Communication team"
        )

    def create_event(self, **overrides):
        payload = dict(CLEANUP, **overrides)
        response = self.client.post(
            self.url("/events"), json=payload, headers=self.admin_headers
        )
        self.assertEqual(response.status_code, 200)
        return response.json()["event"]

    def test_created_event_is_listed_with_empty_collections(self):
        created = self.create_event()

        response = self.client.get(self.url("/events"))
        self.assertEqual(response.status_code, 200)
        events = response.json()["events"]
        self.assertEqual(len(events), 1)
        event = events[0]
        self.assertEqual(event["id"], created["id"])
        self.assertEqual(event["title"], "Cleanup")
        self.assertEqual(event["date"], "2025-11-25")
        self.assertEqual(event["likes"], [])
        self.assertEqual(event["comments"], [])
        self.assertEqual(event["registrations"], [])
        self.assertIn("created_at", event)

    def test_events_are_listed_by_date(self):
        later = self.create_event(title="Summit", date="2025-12-10")
        earlier = self.create_event(title="Plantation", date="2025-11-15")
        ids = [e["id"] for e in self.client.get(self.url("/events")).json()["events"]]
        self.assertEqual(ids, [earlier["id"], later["id"]])

    def test_create_requires_admin(self):
        response = self.client.post(
            self.url("/events"), json=CLEANUP, headers=self.member_headers
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.post(self.url("/events"), json=CLEANUP).status_code, 401)

    def test_create_requires_title(self):
        response = self.client.post(
            self.url("/events"), json={"date": "2025-11-25"}, headers=self.admin_headers
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Missing required field: title"})

    def test_update_preserves_engagement_fields(self):
        event = self.create_event()
        self.client.post(self.url(f"/events/{event['id']}/like"), headers=self.member_headers)

        response = self.client.patch(
            self.url(f"/events/{event['id']}"),
            json={"location": "Inani Beach", "likes": [], "id": "hijack"},
            headers=self.admin_headers,
        )
        self.assertEqual(response.status_code, 200)
        updated = response.json()["event"]
        self.assertEqual(updated["id"], event["id"])
        self.assertEqual(updated["location"], "Inani Beach")
        self.assertEqual(updated["title"], "Cleanup")
        self.assertEqual(updated["likes"], [self.member["id"]])
        self.assertEqual(updated["created_at"], event["created_at"])
        self.assertIn("updated_at", updated)

    def test_update_rejects_null_for_required_fields(self):
        event = self.create_event()
        url = self.url(f"/events/{event['id']}")

        for body in ({"title": None}, {"speakers": None}):
            response = self.client.patch(url, json=body, headers=self.admin_headers)
            self.assertEqual(response.status_code, 400, body)
            self.assertIn("must not be null", response.json()["error"])

        stored = self.kv.get(f"event:{event['id']}")
        self.assertEqual(stored["title"], "Cleanup")
        self.assertEqual(stored["speakers"], event["speakers"])

        cleared = self.client.patch(url, json={"location": None}, headers=self.admin_headers)
        self.assertEqual(cleared.status_code, 200)
        self.assertIsNone(cleared.json()["event"]["location"])

    def test_update_unknown_event(self):
        response = self.client.patch(
            self.url("/events/missing"), json={"title": "x"}, headers=self.admin_headers
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Event not found"})

    def test_like_twice_restores_likes(self):
        event = self.create_event()
        url = self.url(f"/events/{event['id']}/like")

        first = self.client.post(url, headers=self.member_headers).json()["event"]
        self.assertEqual(first["likes"], [self.member["id"]])
        second = self.client.post(url, headers=self.member_headers).json()["event"]
        self.assertEqual(second["likes"], [])
        self.assertEqual(self.kv.get(f"event:{event['id']}")["likes"], [])

    def test_like_requires_auth(self):
        event = self.create_event()
        response = self.client.post(self.url(f"/events/{event['id']}/like"))
        self.assertEqual(response.status_code, 401)

    def test_comment_is_appended_with_author(self):
        event = self.create_event()
        response = self.client.post(
            self.url(f"/events/{event['id']}/comment"),
            json={"comment": "  Count me in!  "},
            headers=self.member_headers,
        )
        self.assertEqual(response.status_code, 200)
        comments = response.json()["event"]["comments"]
        self.assertEqual(len(comments), 1)
        self.assertEqual(comments[0]["text"], "Count me in!")
        self.assertEqual(comments[0]["user_id"], self.member["id"])
        self.assertEqual(comments[0]["user_name"], "Ayesha Khan")
        self.assertTrue(comments[0]["id"])

    def test_blank_comment_is_rejected(self):
        event = self.create_event()
        response = self.client.post(
            self.url(f"/events/{event['id']}/comment"),
            json={"comment": "   "},
            headers=self.member_headers,
        )
        self.assertEqual(response.status_code, 400)

    def test_member_registration_is_not_duplicated(self):
        event = self.create_event()
        url = self.url(f"/events/{event['id']}/register")
        self.client.post(url, headers=self.member_headers)
        response = self.client.post(url, headers=self.member_headers)

        registrations = response.json()["event"]["registrations"]
        self.assertEqual(len(registrations), 1)
        self.assertEqual(registrations[0]["user_id"], self.member["id"])
        self.assertEqual(registrations[0]["email"], self.member["email"])
        self.assertFalse(registrations[0]["is_guest"])

    def test_member_unregister_leaves_guests(self):
        event = self.create_event()
        self.client.post(
            self.url(f"/events/{event['id']}/register-guest"),
            json={"name": "Guest", "email": self.member["email"], "whatsapp": "+8801"},
        )
        self.client.post(self.url(f"/events/{event['id']}/register"), headers=self.member_headers)

        response = self.client.post(
            self.url(f"/events/{event['id']}/unregister"), headers=self.member_headers
        )
        registrations = response.json()["event"]["registrations"]
        self.assertEqual(len(registrations), 1)
        self.assertTrue(registrations[0]["is_guest"])


class GuestRegistrationTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        _, admin_headers = self.make_user("Rima Das", role=Role.ADMIN)
        response = self.client.post(
            self.url("/events"), json=CLEANUP, headers=admin_headers
        )
        self.event_id = response.json()["event"]["id"]

    def register(self, **overrides):
        payload = {
            "name": "Mitu",
            "email": "Mitu@Example.com ",
            "whatsapp": "+8801700000000",
            "class": "10",
            "school": "Dhaka High School",
        }
        payload.update(overrides)
        return self.client.post(
            self.url(f"/events/{self.event_id}/register-guest"), json=payload
        )

    def test_guest_registration_without_account(self):
        response = self.register()
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        registration = body["event"]["registrations"][0]
        self.assertTrue(registration["is_guest"])
        self.assertEqual(registration["email"], "mitu@example.com")
        self.assertEqual(registration["class"], "10")
        self.assertEqual(registration["user_name"], "Mitu")

    def test_duplicate_normalized_email_is_rejected(self):
        self.assertEqual(self.register().status_code, 200)
        response = self.register(email="  MITU@example.COM")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(), {"error": "This email is already registered for this event"}
        )
        self.assertEqual(len(self.kv.get(f"event:{self.event_id}")["registrations"]), 1)

    def test_guest_registration_requires_contact_fields(self):
        response = self.register(whatsapp="")
        self.assertEqual(response.status_code, 400)
        self.assertIn("whatsapp", response.json()["error"])

    def test_guest_registration_unknown_event(self):
        response = self.client.post(
            self.url("/events/missing/register-guest"),
            json={"name": "A", "email": "a@example.com", "whatsapp": "1"},
        )
        self.assertEqual(response.status_code, 404)

    def test_guest_unregister_by_normalized_email(self):
        self.register()
        response = self.client.post(
            self.url(f"/events/{self.event_id}/unregister-guest"),
            json={"email": " MITU@EXAMPLE.COM"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["event"]["registrations"], [])

    def test_guest_unregister_ignores_member_entries(self):
        member, headers = self.make_user("Farhan Siddiqui", team="Branding team")
        self.client.post(self.url(f"/events/{self.event_id}/register"), headers=headers)

        response = self.client.post(
            self.url(f"/events/{self.event_id}/unregister-guest"),
            json={"email": member["email"]},
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json(), {"error": "Guest registration not found for this email"}
        )
        self.assertEqual(len(self.kv.get(f"event:{self.event_id}")["registrations"]), 1)


if __name__ == "__main__":
    unittest.main()
