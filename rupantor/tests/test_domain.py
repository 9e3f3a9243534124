import unittest

from rupantor import events as ev
from rupantor import instructions as ins
from rupantor.types import Role, TaskStatus
from rupantor.users import RoleNotAllowedError, resolve_signup_role


class EventRuleTests(unittest.TestCase):
    def test_toggle_like_twice_is_identity(self):
        for likes in ([], ["u1"], ["u2", "u3"]):
            event = {"likes": list(likes)}
            ev.toggle_like(event, "u9")
            ev.toggle_like(event, "u9")
            self.assertEqual(event["likes"], likes)

    def test_guest_duplicate_leaves_registrations_unchanged(self):
        event = ev.new_event({"title": "Cleanup"})
        ev.register_guest(event, "A", "a@example.com", "1")
        with self.assertRaises(ev.AlreadyRegisteredError):
            ev.register_guest(event, "A again", " A@EXAMPLE.com ", "2")
        self.assertEqual(len(event["registrations"]), 1)

    def test_guest_and_member_records_do_not_cross_match(self):
        event = ev.new_event({"title": "Cleanup"})
        ev.register_member(event, "u1", "Member", "a@example.com")
        ev.register_guest(event, "Guest", "a@example.com", "1")
        self.assertEqual(len(event["registrations"]), 2)
        self.assertEqual(ev.unregister_guest(event, "a@example.com"), 1)
        self.assertEqual(event["registrations"][0]["user_id"], "u1")

    def test_apply_update_protects_fields(self):
        event = ev.new_event({"title": "Old"})
        event["likes"] = ["u1"]
        updated = ev.apply_update(event, {"title": "New", "registrations": None})
        self.assertEqual(updated["title"], "New")
        self.assertEqual(updated["likes"], ["u1"])
        self.assertEqual(updated["registrations"], [])


class InstructionRuleTests(unittest.TestCase):
    def test_assignment_is_an_or_of_three_mechanisms(self):
        cases = [
            ({"assigned_volunteers": ["u1"]}, True),
            ({"assigned_teams": ["Branding team"]}, True),
            ({"assigned_teams": ["All teams"]}, True),
            ({"assigned_to": "u1"}, True),
            ({"assigned_to": "all"}, True),
            ({"assigned_teams": ["Treasurer team"], "assigned_to": "u2"}, False),
            ({}, False),
        ]
        for instruction, expected in cases:
            self.assertEqual(
                ins.is_assigned(instruction, "u1", "Branding team"),
                expected,
                instruction,
            )

    def test_all_teams_needs_a_team(self):
        instruction = {"assigned_teams": ["All teams"]}
        self.assertTrue(ins.is_assigned(instruction, "u1", "Treasurer team"))
        self.assertFalse(ins.is_assigned(instruction, "u1", None))

    def test_all_teams_insights_skip_teamless_volunteers(self):
        instruction = {"id": "i1", "assigned_teams": ["All teams"]}
        profiles = [
            {"id": "u1", "role": "volunteer", "team": "Branding team"},
            {"id": "u2", "role": "volunteer", "team": None},
            {"id": "u3", "role": "public", "team": "Branding team"},
        ]
        self.assertEqual(
            [p["id"] for p in ins.expand_assignees(instruction, profiles)], ["u1"]
        )

    def test_individual_status_upsert_keeps_others(self):
        instruction = ins.new_instruction({"title": "T"}, "admin", "Admin")
        ins.set_individual_status(instruction, "u1", "One", None, TaskStatus.COMPLETED)
        ins.set_individual_status(instruction, "u2", "Two", None, TaskStatus.TODO)
        ins.set_individual_status(instruction, "u2", "Two", None, TaskStatus.IN_PROGRESS)

        self.assertEqual(
            [(s["user_id"], s["status"]) for s in instruction["individual_statuses"]],
            [("u1", "completed"), ("u2", "in_progress")],
        )
        self.assertEqual(instruction["status"], "todo")

    def test_derive_status(self):
        self.assertEqual(ins.derive_status([]), TaskStatus.TODO)
        self.assertEqual(ins.derive_status(["todo", "todo"]), TaskStatus.TODO)
        self.assertEqual(ins.derive_status(["todo", "completed"]), TaskStatus.IN_PROGRESS)
        self.assertEqual(ins.derive_status(["completed"] * 3), TaskStatus.COMPLETED)


class SignupRoleTests(unittest.TestCase):
    def test_roles(self):
        admins = {"boss@example.com"}
        self.assertEqual(resolve_signup_role(None, "x@example.com", admins), Role.PUBLIC)
        self.assertEqual(
            resolve_signup_role(Role.VOLUNTEER, "x@example.com", admins), Role.VOLUNTEER
        )
        self.assertEqual(resolve_signup_role(None, " Boss@example.com", admins), Role.ADMIN)
        with self.assertRaises(RoleNotAllowedError):
            resolve_signup_role(Role.ADMIN, "x@example.com", admins)


if __name__ == "__main__":
    unittest.main()
