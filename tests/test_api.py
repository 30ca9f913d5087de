"""
HTTP-level tests: routing, authentication, error rendering and the main
applicant-to-member flow.
"""

from typing import Dict

import pytest

from app import crud
from app.core.config import settings
from app.models.admin import AdminRole
from app.models.application import ApplicationStatus

pytestmark = pytest.mark.integration

API = settings.API_V1_STR

APPLICATION_FORM = {
    "first_name": "Ada",
    "last_name": "Okafor",
    "email": "Applicant@X.com",
    "phone_number": "08030000000",
    "area_of_specialty": "Urology",
    "mdcn_registration_number": "MDCN/12345",
    "year_qualified_mbbs": "2008",
    "additional_qualification_mdcn": "FWACS",
    "year_qualified_urologist": "2016",
    "current_practice": "Lagos University Teaching Hospital",
    "next_of_kin_name": "Chidi Okafor",
    "next_of_kin_phone": "08031111111",
    "next_of_kin_email": "chidi@example.com",
    "fellowship_college": "West African College of Surgeons",
    "fwacs": "on",
    "qualification_year": "2016",
    "additional_qualification": "None",
    "residency_training": "LUTH",
    "declaration": "I confirm the information provided is accurate",
    "declaration_date": "",
}


def certificate_files() -> Dict:
    return {
        "mbbs_certificate": ("mbbs.pdf", b"%PDF-1.4 mbbs", "application/pdf"),
        "fellowship_certificate": ("fellowship.pdf", b"%PDF-1.4 fellowship", "application/pdf"),
    }


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def login_member(client, email: str, password: str) -> Dict:
    response = client.post(f"{API}/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


class TestApplicationFlow:
    """Submit, approve, then log in with the emailed credentials."""

    def test_submit_approve_login(self, client, db, admin_headers, sent_emails, monkeypatch) -> None:
        monkeypatch.setattr("app.services.approval_service.generate_temporary_password", lambda: "Flow1234Pass")

        response = client.post(f"{API}/applications", data=APPLICATION_FORM, files=certificate_files())
        assert response.status_code == 201, response.text
        application_id = response.json()["id"]

        stored = crud.application.get(db, id=application_id)
        assert stored.email == "applicant@x.com"
        assert stored.fwacs is True
        assert stored.year_qualified_mbbs == 2008
        assert stored.mbbs_certificate.startswith("certificates/")

        response = client.put(
            f"{API}/admin/applications/{application_id}/status",
            json={"status": "approved", "notes": "Welcome aboard"},
            headers=admin_headers,
        )
        assert response.status_code == 200, response.text
        body = response.json()
        assert body["application"]["status"] == "approved"
        assert body["email_sent"] is True
        membership_number = body["application"]["membership_number"]
        assert "Flow1234Pass" in sent_emails.to("applicant@x.com")[0]["html"]

        token = login_member(client, "applicant@x.com", "Flow1234Pass")
        assert token["membership_number"] == membership_number
        assert token["must_change_password"] is True
        assert crud.user.get_by_email(db, email="applicant@x.com").login_count == 1

        response = client.get(f"{API}/profile", headers=bearer(token["access_token"]))
        assert response.status_code == 200
        assert response.json()["membership_number"] == membership_number

    def test_second_approval_conflicts(self, client, make_application, admin_headers, sent_emails) -> None:
        application = make_application()
        url = f"{API}/admin/applications/{application.id}/status"

        assert client.put(url, json={"status": "approved"}, headers=admin_headers).status_code == 200
        response = client.put(url, json={"status": "approved"}, headers=admin_headers)

        assert response.status_code == 409
        assert "detail" in response.json()

    def test_reject_via_api(self, client, make_application, admin_headers, sent_emails) -> None:
        application = make_application("r@x.com")

        response = client.put(
            f"{API}/admin/applications/{application.id}/status",
            json={"status": "rejected", "notes": "Missing fellowship"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["application"]["status"] == "rejected"
        assert "Missing fellowship" in sent_emails.to("r@x.com")[0]["html"]

    def test_unknown_application(self, client, admin_headers) -> None:
        response = client.put(
            f"{API}/admin/applications/999/status", json={"status": "approved"}, headers=admin_headers
        )
        assert response.status_code == 404


class TestSubmission:

    def test_missing_fields_listed(self, client) -> None:
        form = dict(APPLICATION_FORM)
        del form["phone_number"]
        form["mdcn_registration_number"] = "  "

        response = client.post(f"{API}/applications", data=form, files=certificate_files())

        assert response.status_code == 400
        errors = response.json()["errors"]
        assert "phone_number" in errors
        assert "mdcn_registration_number" in errors

    def test_missing_certificate(self, client, db) -> None:
        files = certificate_files()
        del files["fellowship_certificate"]

        response = client.post(f"{API}/applications", data=APPLICATION_FORM, files=files)

        assert response.status_code == 400
        assert "fellowship_certificate" in response.json()["errors"]
        assert crud.application.get_by_email(db, email="applicant@x.com") is None

    def test_unsupported_file_type(self, client, storage) -> None:
        files = certificate_files()
        files["mbbs_certificate"] = ("mbbs.exe", b"MZ", "application/octet-stream")

        response = client.post(f"{API}/applications", data=APPLICATION_FORM, files=files)

        assert response.status_code == 400
        assert "mbbs_certificate" in response.json()["errors"]
        assert not (storage.root / "certificates").exists()

    def test_duplicate_email(self, client, storage) -> None:
        first = client.post(f"{API}/applications", data=APPLICATION_FORM, files=certificate_files())
        second = client.post(f"{API}/applications", data=APPLICATION_FORM, files=certificate_files())

        assert first.status_code == 201
        assert second.status_code == 409
        assert len(list((storage.root / "certificates").iterdir())) == 2

    def test_list_by_status(self, client, make_application, admin_headers) -> None:
        make_application("one@x.com")
        make_application("two@x.com")

        response = client.get(f"{API}/admin/applications", params={"status": "pending"}, headers=admin_headers)
        assert response.status_code == 200
        assert [a["email"] for a in response.json()] == ["two@x.com", "one@x.com"]

        response = client.get(f"{API}/admin/applications", params={"status": "approved"}, headers=admin_headers)
        assert response.json() == []


class TestAuthorization:

    def test_content_admin_cannot_manage_members(self, client, make_admin, headers_for) -> None:
        content_admin = make_admin("content@naus.org", AdminRole.CONTENT_ADMIN)

        response = client.get(f"{API}/admin/members", headers=headers_for(content_admin))

        assert response.status_code == 403

    def test_membership_admin_cannot_manage_admins(self, client, admin_headers) -> None:
        assert client.get(f"{API}/admin/admins", headers=admin_headers).status_code == 403

    def test_member_token_rejected_on_admin_routes(self, client, db, make_member) -> None:
        make_member("NAUS-2022001", "m@x.com", has_account=True)
        crud.user.create(db, obj_in={
            "email": "m@x.com", "membership_number": "NAUS-2022001",
            "first_name": "M", "last_name": "X", "password": "member-pass",
        })
        token = login_member(client, "m@x.com", "member-pass")

        response = client.get(f"{API}/admin/members", headers=bearer(token["access_token"]))

        assert response.status_code == 401

    def test_garbage_token(self, client) -> None:
        response = client.get(f"{API}/profile", headers=bearer("not-a-jwt"))
        assert response.status_code == 401

    def test_wrong_password(self, client, admin) -> None:
        response = client.post(f"{API}/admin/auth/login", json={"email": admin.email, "password": "wrong-pass"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_admin_login_and_me(self, client, admin) -> None:
        response = client.post(f"{API}/admin/auth/login", json={"email": admin.email, "password": "admin-secret-1"})
        assert response.status_code == 200
        token = response.json()["access_token"]

        response = client.get(f"{API}/admin/auth/me", headers=bearer(token))
        assert response.json()["role"] == "membership_admin"

    def test_admin_updates_own_profile(self, client, admin, make_admin) -> None:
        make_admin("other@naus.org")
        response = client.post(f"{API}/admin/auth/login", json={"email": admin.email, "password": "admin-secret-1"})
        token = response.json()["access_token"]

        response = client.put(f"{API}/admin/auth/me", json={"email": "other@naus.org"}, headers=bearer(token))
        assert response.status_code == 409

        response = client.put(
            f"{API}/admin/auth/me", json={"name": "Ngozi Eze", "email": "Ngozi@NAUS.org"}, headers=bearer(token)
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Ngozi Eze"
        assert response.json()["email"] == "ngozi@naus.org"
        assert response.json()["role"] == "membership_admin"

        # Same session after the email change
        response = client.get(f"{API}/admin/auth/me", headers=bearer(token))
        assert response.json()["email"] == "ngozi@naus.org"

        response = client.post(
            f"{API}/admin/auth/login", json={"email": "ngozi@naus.org", "password": "admin-secret-1"}
        )
        assert response.status_code == 200


class TestPasswordResetApi:

    def test_forgot_password_response_does_not_reveal_accounts(self, client, db, make_member, sent_emails) -> None:
        make_member("NAUS-2022001", "m@x.com", has_account=True)
        crud.user.create(db, obj_in={
            "email": "m@x.com", "membership_number": "NAUS-2022001",
            "first_name": "M", "last_name": "X", "password": "member-pass",
        })

        known = client.post(f"{API}/auth/forgot-password", json={"email": "m@x.com"})
        unknown = client.post(f"{API}/auth/forgot-password", json={"email": "ghost@x.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()

        token = sent_emails.reset_token_for("m@x.com")
        assert client.get(f"{API}/auth/verify-reset-token/{token}").json() == {"valid": True}

        response = client.post(f"{API}/auth/reset-password", json={"token": token, "new_password": "fresh-pass-1"})
        assert response.status_code == 200
        login_member(client, "m@x.com", "fresh-pass-1")

        response = client.post(f"{API}/auth/reset-password", json={"token": token, "new_password": "again-pass-1"})
        assert response.status_code == 400


class TestMemberManagement:

    @pytest.fixture
    def onboarded(self, client, admin_headers, sent_emails, monkeypatch) -> Dict:
        monkeypatch.setattr("app.services.member_service.generate_temporary_password", lambda: "Legacy123Pass")
        response = client.post(
            f"{API}/admin/members/existing",
            json={
                "first_name": "Emeka",
                "last_name": "Obi",
                "email": "Emeka@X.com",
                "membership_number": "NAUS-2015007",
                "area_of_specialty": "Urology",
            },
            headers=admin_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    def test_onboard_existing_member(self, client, db, onboarded, admin_headers, sent_emails) -> None:
        assert onboarded["email_sent"] is True
        assert onboarded["member"]["membership_type"] == "existing"
        assert onboarded["member"]["has_account"] is True
        assert "Legacy123Pass" in sent_emails.to("emeka@x.com")[0]["html"]

        application = crud.application.get_by_email(db, email="emeka@x.com")
        assert application.status == ApplicationStatus.APPROVED
        assert application.membership_number == "NAUS-2015007"

        response = client.get(f"{API}/admin/members/existing", headers=admin_headers)
        assert [(m["membership_number"], m["account_active"]) for m in response.json()] == [("NAUS-2015007", True)]

    def test_onboard_duplicate_number(self, client, onboarded, admin_headers) -> None:
        response = client.post(
            f"{API}/admin/members/existing",
            json={"first_name": "A", "last_name": "B", "email": "other@x.com", "membership_number": "NAUS-2015007"},
            headers=admin_headers,
        )
        assert response.status_code == 409

    def test_member_profile_self_service(self, client, onboarded, storage) -> None:
        token = login_member(client, "emeka@x.com", "Legacy123Pass")["access_token"]

        response = client.put(f"{API}/profile", json={"phone_number": "08112223333"}, headers=bearer(token))
        assert response.status_code == 200
        assert response.json()["phone_number"] == "08112223333"
        assert response.json()["first_name"] == "Emeka"

        response = client.post(
            f"{API}/profile/upload/photo",
            files={"file": ("me.png", b"\x89PNG fake", "image/png")},
            headers=bearer(token),
        )
        assert response.status_code == 200
        url = response.json()["url"]
        assert url.startswith("photos/")
        assert (storage.root / url).exists()

        response = client.post(
            f"{API}/profile/upload/passport",
            files={"file": ("p.png", b"\x89PNG fake", "image/png")},
            headers=bearer(token),
        )
        assert response.status_code == 400

        response = client.put(f"{API}/profile/directory", json={"show_in_directory": False}, headers=bearer(token))
        assert response.json()["show_in_directory"] is False

    def test_change_password_via_api(self, client, onboarded, sent_emails) -> None:
        token = login_member(client, "emeka@x.com", "Legacy123Pass")["access_token"]

        response = client.post(
            f"{API}/auth/change-password",
            json={"current_password": "Legacy123Pass", "new_password": "my-own-pass"},
            headers=bearer(token),
        )

        assert response.status_code == 200
        login_member(client, "emeka@x.com", "my-own-pass")

    def test_email_change_moves_login(self, client, onboarded, admin_headers) -> None:
        token = login_member(client, "emeka@x.com", "Legacy123Pass")["access_token"]
        member_id = onboarded["member"]["id"]

        response = client.put(f"{API}/admin/members/{member_id}", json={"email": "obi@x.com"}, headers=admin_headers)
        assert response.status_code == 200

        response = client.get(f"{API}/admin/members/existing", headers=admin_headers)
        assert [(m["email"], m["account_active"]) for m in response.json()] == [("obi@x.com", True)]

        login_member(client, "obi@x.com", "Legacy123Pass")
        response = client.post(f"{API}/auth/login", json={"email": "emeka@x.com", "password": "Legacy123Pass"})
        assert response.status_code == 401
        assert client.get(f"{API}/profile", headers=bearer(token)).json()["email"] == "obi@x.com"

    def test_admin_edit_search_toggle_delete(self, client, db, onboarded, admin_headers) -> None:
        member_id = onboarded["member"]["id"]

        response = client.put(
            f"{API}/admin/members/{member_id}",
            json={"current_practice": "UCH Ibadan", "membership_number": "NAUS-1999999"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["current_practice"] == "UCH Ibadan"
        assert response.json()["membership_number"] == "NAUS-2015007"

        response = client.get(f"{API}/admin/members/search", params={"q": "emeka"}, headers=admin_headers)
        assert [m["id"] for m in response.json()] == [member_id]

        response = client.patch(f"{API}/admin/members/{member_id}/toggle-status", headers=admin_headers)
        assert response.json()["is_active"] is False

        response = client.get(f"{API}/admin/members", params={"is_active": "false"}, headers=admin_headers)
        assert response.json()["total"] == 1

        response = client.delete(f"{API}/admin/members/{member_id}", headers=admin_headers)
        assert response.status_code == 200
        assert client.get(f"{API}/admin/members/{member_id}", headers=admin_headers).status_code == 404
        assert crud.user.get_by_email(db, email="emeka@x.com") is None
        assert crud.application.get_by_email(db, email="emeka@x.com") is None


class TestPublic:

    def test_verify_membership(self, client, make_member) -> None:
        make_member("NAUS-2019010", "v@x.com", is_active=False)

        body = client.get(f"{API}/public/verify/NAUS-2019010").json()
        assert body["valid"] is True
        assert body["is_active"] is False
        assert body["name"] == "Bola Adeyemi"

        body = client.get(f"{API}/public/verify/NAUS-0000000").json()
        assert body == {
            "valid": False,
            "membership_number": "NAUS-0000000",
            "is_active": None,
            "name": None,
            "area_of_specialty": None,
            "membership_type": None,
            "joined_date": None,
        }

    def test_directory(self, client, make_member) -> None:
        make_member("NAUS-2019010", "shown@x.com")
        make_member("NAUS-2019011", "hidden@x.com", show_in_directory=False)

        body = client.get(f"{API}/public/directory").json()

        assert body["total"] == 1
        assert body["members"][0]["membership_number"] == "NAUS-2019010"
        assert "email" not in body["members"][0]
        assert client.get(f"{API}/public/members/NAUS-2019011").status_code == 404

    def test_contact_form(self, client, sent_emails) -> None:
        response = client.post(
            f"{API}/public/contact",
            json={"name": "Visitor", "email": "visitor@x.com", "subject": "Conference", "message": "Dates?"},
        )

        assert response.status_code == 200
        assert response.json()["email_sent"] is True
        email = sent_emails.to(settings.CONTACT_EMAIL)[0]
        assert email["reply_to"] == "visitor@x.com"
        assert email["subject"] == "Contact Form: Conference"


class TestAdminManagement:

    @pytest.fixture
    def super_headers(self, make_admin, headers_for) -> Dict[str, str]:
        return headers_for(make_admin("root@naus.org", AdminRole.SUPER_ADMIN))

    def test_create_update_delete(self, client, super_headers, sent_emails) -> None:
        response = client.post(
            f"{API}/admin/admins",
            json={"email": "editor@naus.org", "name": "Editor", "role": "content_admin"},
            headers=super_headers,
        )
        assert response.status_code == 201, response.text
        created = response.json()["admin"]
        assert created["role"] == "content_admin"
        assert sent_emails.to("editor@naus.org")[0]["subject"] == "Your NAUS Admin Account"

        response = client.put(
            f"{API}/admin/admins/{created['id']}", json={"role": "membership_admin"}, headers=super_headers
        )
        assert response.json()["role"] == "membership_admin"

        response = client.post(f"{API}/admin/admins/{created['id']}/reset-password", headers=super_headers)
        assert response.json()["email_sent"] is True

        assert client.delete(f"{API}/admin/admins/{created['id']}", headers=super_headers).status_code == 200
        assert client.get(f"{API}/admin/admins/{created['id']}", headers=super_headers).status_code == 404

    def test_cannot_delete_self(self, client, db, super_headers) -> None:
        me = crud.admin.get_by_email(db, email="root@naus.org")

        response = client.delete(f"{API}/admin/admins/{me.id}", headers=super_headers)

        assert response.status_code == 400

    def test_duplicate_email(self, client, admin, super_headers) -> None:
        response = client.post(
            f"{API}/admin/admins", json={"email": admin.email, "name": "Copy"}, headers=super_headers
        )
        assert response.status_code == 409


class TestService:

    def test_root(self, client) -> None:
        body = client.get("/").json()
        assert body["status"] == "running"

    def test_health(self, client) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    def test_process_time_header(self, client) -> None:
        assert "X-Process-Time" in client.get("/").headers
