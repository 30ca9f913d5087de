"""
Tests for template rendering in the email gateway.
"""

from app.core.email_service import EmailService, EmailTemplate


class TestEscaping:
    """Text supplied by applicants and visitors is rendered inert."""

    def test_contact_message_markup_is_escaped(self, sent_emails) -> None:
        sent = EmailService().send(
            EmailTemplate.CONTACT,
            "info@naus.org",
            {
                "name": "<b>Visitor</b>",
                "email": "v@x.com",
                "subject": "Fees & dues",
                "message": 'Please <a href="https://evil.example/login">log in here</a>',
            },
            reply_to="v@x.com",
        )

        assert sent is True
        email = sent_emails[0]
        assert '<a href="https://evil.example/login">' not in email["html"]
        assert "&lt;a href=&quot;https://evil.example/login&quot;&gt;" in email["html"]
        assert "&lt;b&gt;Visitor&lt;/b&gt;" in email["html"]
        # Subject lines are plain text
        assert email["subject"] == "Contact Form: Fees & dues"

    def test_applicant_name_is_escaped(self, sent_emails) -> None:
        EmailService().send(
            EmailTemplate.APPROVAL,
            "a@x.com",
            {"membership_number": "NAUS-2025001", "temp_password": "Temp1234Pass", "first_name": "<script>x</script>"},
        )

        html = sent_emails.to("a@x.com")[0]["html"]
        assert "<script>" not in html
        assert "&lt;script&gt;x&lt;/script&gt;" in html
        assert "NAUS-2025001" in html

    def test_unknown_variable_fails_without_raising(self, sent_emails) -> None:
        assert EmailService().send(EmailTemplate.CONTACT, "info@naus.org", {"nope": 1}) is False
        assert sent_emails == []
