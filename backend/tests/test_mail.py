from clubhub.services import mail


def test_verification_mail_contains_link(monkeypatch):
    sent = []
    monkeypatch.setattr(mail, "transport", sent.append)

    mail.send_verification_email("ada@uni.edu", "Ada", "abc123")

    assert len(sent) == 1
    assert sent[0].to == "ada@uni.edu"
    assert "verify-email?token=abc123" in sent[0].text


def test_reset_mail_contains_link(monkeypatch):
    sent = []
    monkeypatch.setattr(mail, "transport", sent.append)

    mail.send_password_reset_email("ada@uni.edu", "Ada", "tok")

    assert "reset-password?token=tok" in sent[0].text
    assert sent[0].subject == "Reset your password"
