"""
Outgoing email through the SendGrid v3 HTTP API.

Without ``SENDGRID_API_KEY`` messages are only written to the log, which
keeps development and test environments self-contained.  Sending never
raises: a failure is logged and reported to the caller as ``False`` so
that it cannot break the request that triggered it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests
from django.conf import settings
from django.utils.html import escape

logger = logging.getLogger(__name__)

SENDGRID_URL = 'https://api.sendgrid.com/v3/mail/send'


@dataclass
class EmailMessage:
    to: str
    subject: str
    text: str
    html: Optional[str] = None


def is_configured() -> bool:
    return bool(settings.SENDGRID_API_KEY)


def send_email(message: EmailMessage) -> bool:
    if not is_configured():
        logger.info('[email not sent, no API key] to=%s subject=%s\n%s', message.to, message.subject, message.text)
        return True

    payload = {
        'personalizations': [{'to': [{'email': message.to}]}],
        'from': {'email': settings.SENDGRID_FROM_EMAIL, 'name': settings.SENDGRID_FROM_NAME},
        'subject': message.subject,
        'content': [
            {'type': 'text/plain', 'value': message.text},
            {'type': 'text/html', 'value': message.html or escape(message.text)},
        ],
    }
    try:
        r = requests.post(
            SENDGRID_URL,
            json=payload,
            headers={'Authorization': f'Bearer {settings.SENDGRID_API_KEY}'},
            timeout=settings.EMAIL_TIMEOUT,
        )
        r.raise_for_status()
    except requests.RequestException as exc:
        logger.error('Failed to send email to %s: %s', message.to, exc)
        return False
    logger.info('Email sent to %s', message.to)
    return True


def _login_url() -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/login"


def _html(title: str, paragraphs: list[str], link: Optional[tuple[str, str]] = None) -> str:
    body = ''.join(f'<p>{p}</p>' for p in paragraphs)
    if link:
        body += f'<p><a href="{escape(link[1])}">{escape(link[0])}</a></p>'
    return (
        '<!DOCTYPE html><html><body style="font-family: Arial, sans-serif; color: #333;">'
        f'<h2>{escape(title)}</h2>{body}'
        '<p style="color: #666; font-size: 12px;">This email was sent by Ship Reporting.</p>'
        '</body></html>'
    )


def send_welcome_email(*, organization_name: str, admin_name: str, admin_email: str,
                       temporary_password: str) -> bool:
    """Credentials mail for the first administrator of a new organization."""
    subject = f'Welcome to Ship Reporting - {organization_name}'
    text = (
        f'Hello {admin_name},\n\n'
        f'Your organization {organization_name} has been created on Ship Reporting.\n\n'
        f'Email: {admin_email}\n'
        f'Temporary password: {temporary_password}\n\n'
        'Please change your password after your first login.\n\n'
        f'Login: {_login_url()}\n'
    )
    html = _html('Welcome to Ship Reporting', [
        f'Hello <strong>{escape(admin_name)}</strong>,',
        f'Your organization <strong>{escape(organization_name)}</strong> has been created.',
        f'Email: {escape(admin_email)}<br/>Temporary password: {escape(temporary_password)}',
        'Please change your password after your first login.',
    ], ('Login to Ship Reporting', _login_url()))
    return send_email(EmailMessage(to=admin_email, subject=subject, text=text, html=html))


def send_onboarding_email(*, user_name: str, user_email: str, organization_name: str, role: str,
                          temporary_password: str) -> bool:
    subject = f"You've been added to {organization_name} on Ship Reporting"
    text = (
        f'Hello {user_name},\n\n'
        f'You have been added to {organization_name} as {role}.\n\n'
        f'Email: {user_email}\n'
        f'Temporary password: {temporary_password}\n\n'
        f'Login: {_login_url()}\n'
    )
    html = _html('Welcome aboard', [
        f'Hello <strong>{escape(user_name)}</strong>,',
        f'You have been added to <strong>{escape(organization_name)}</strong> as {escape(role)}.',
        f'Email: {escape(user_email)}<br/>Temporary password: {escape(temporary_password)}',
    ], ('Login to Ship Reporting', _login_url()))
    return send_email(EmailMessage(to=user_email, subject=subject, text=text, html=html))


def send_password_reset_email(*, user_name: str, user_email: str, token: str, expires_minutes: int) -> bool:
    reset_url = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"
    subject = 'Reset your Ship Reporting password'
    text = (
        f'Hello {user_name},\n\n'
        'We received a request to reset your password. Open the link below to choose a new one.\n\n'
        f'{reset_url}\n\n'
        f'The link expires in {expires_minutes} minutes. If you did not ask for this, ignore this email.\n'
    )
    html = _html('Password reset', [
        f'Hello <strong>{escape(user_name)}</strong>,',
        'We received a request to reset your password.',
        f'The link expires in {expires_minutes} minutes. If you did not ask for this, ignore this email.',
    ], ('Reset password', reset_url))
    return send_email(EmailMessage(to=user_email, subject=subject, text=text, html=html))
