from src.shared.mail.config import load_mail_config


FULL_ENV = {
    "MAIL_HOST": "smtp.example.com",
    "MAIL_USER": "noreply@geonix.example",
    "MAIL_PASS": "secret",
    "MAIL_TO": "owner@geonix.example",
}


def test_defaults():
    config = load_mail_config(FULL_ENV)

    assert config.port == 465
    assert config.secure is True
    assert config.timeout == 10.0
    assert config.is_complete


def test_secure_only_for_exact_true():
    assert load_mail_config({**FULL_ENV, "MAIL_SECURE": "false"}).secure is False
    assert load_mail_config({**FULL_ENV, "MAIL_SECURE": "TRUE"}).secure is False
    assert load_mail_config({**FULL_ENV, "MAIL_SECURE": "true"}).secure is True


def test_port_override_and_fallback():
    assert load_mail_config({**FULL_ENV, "MAIL_PORT": "587"}).port == 587
    assert load_mail_config({**FULL_ENV, "MAIL_PORT": "smtp"}).port == 465


def test_missing_fields_are_reported():
    env = {k: v for k, v in FULL_ENV.items() if k != "MAIL_TO"}
    env["MAIL_PASS"] = ""

    config = load_mail_config(env)

    assert not config.is_complete
    assert config.missing_fields() == ["MAIL_PASS", "MAIL_TO"]


def test_reads_process_environment(monkeypatch):
    for key, value in FULL_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("MAIL_PORT", "2525")

    config = load_mail_config()

    assert config.host == "smtp.example.com"
    assert config.port == 2525
