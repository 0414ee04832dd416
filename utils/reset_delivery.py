"""
Модуль: `utils/reset_delivery.py`.
Назначение: Отправка ссылки для восстановления пароля по email.
"""

import smtplib
import ssl
from email.message import EmailMessage

from flask import current_app, url_for


def send_reset_password_instructions(email: str, raw_token: str) -> bool:
    """Отправляет письмо со ссылкой сброса пароля; False, если SMTP не настроен или недоступен."""
    cfg = current_app.config
    host = cfg.get("SMTP_HOST", "").strip()
    sender = cfg.get("SMTP_FROM", "").strip()
    if not host or not sender:
        return False

    port = int(cfg.get("SMTP_PORT", 587))
    use_ssl = bool(cfg.get("SMTP_USE_SSL", False))
    use_tls = bool(cfg.get("SMTP_USE_TLS", True))
    username = cfg.get("SMTP_USER", "").strip()
    password = cfg.get("SMTP_PASSWORD", "")
    reset_url = url_for("edit_password", reset_password_token=raw_token, _external=True)

    msg = EmailMessage()
    msg["Subject"] = "Восстановление пароля Baseapp"
    msg["From"] = sender
    msg["To"] = email
    msg.set_content(
        (
            "Вы запросили восстановление пароля в Baseapp.\n"
            f"Перейдите по ссылке, чтобы задать новый пароль: {reset_url}\n\n"
            "Ссылка действует ограниченное время. Если запрос сделали не вы, просто проигнорируйте письмо."
        )
    )

    try:
        if use_ssl:
            with smtplib.SMTP_SSL(host, port, timeout=10, context=ssl.create_default_context()) as client:
                if username:
                    client.login(username, password)
                client.send_message(msg)
        else:
            with smtplib.SMTP(host, port, timeout=10) as client:
                if use_tls:
                    client.starttls(context=ssl.create_default_context())
                if username:
                    client.login(username, password)
                client.send_message(msg)
        return True
    except (smtplib.SMTPException, OSError):
        current_app.logger.exception("Не удалось отправить инструкции по сбросу пароля на email: %s", email)
        return False
