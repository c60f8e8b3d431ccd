import pytest
import requests

from reporting.services import email


class FakeResponse:
    def __init__(self, status=202):
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error')


def test_without_api_key_messages_are_only_logged(settings, monkeypatch, caplog):
    settings.SENDGRID_API_KEY = ''
    monkeypatch.setattr(requests, 'post', lambda *a, **kw: pytest.fail('network used'))
    with caplog.at_level('INFO', logger='reporting.services.email'):
        assert email.send_onboarding_email(user_name='Ann', user_email='ann@x.com', organization_name='Org',
                                           role='CAPTAIN', temporary_password='secret1')
    assert 'ann@x.com' in caplog.text


def test_sendgrid_payload(settings, monkeypatch):
    settings.SENDGRID_API_KEY = 'SG.key'
    settings.FRONTEND_URL = 'https://app.example.com'
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({'url': url, 'json': json, 'headers': headers, 'timeout': timeout})
        return FakeResponse()

    monkeypatch.setattr(requests, 'post', fake_post)
    assert email.send_password_reset_email(user_name='Ann', user_email='ann@x.com', token='tok123',
                                           expires_minutes=60)
    call = calls[0]
    assert call['url'] == email.SENDGRID_URL
    assert call['headers']['Authorization'] == 'Bearer SG.key'
    assert call['json']['personalizations'][0]['to'][0]['email'] == 'ann@x.com'
    text = call['json']['content'][0]['value']
    assert 'https://app.example.com/reset-password?token=tok123' in text


def test_send_failure_is_reported_not_raised(settings, monkeypatch):
    settings.SENDGRID_API_KEY = 'SG.key'
    monkeypatch.setattr(requests, 'post', lambda *a, **kw: FakeResponse(500))
    assert email.send_welcome_email(organization_name='Org', admin_name='Ann', admin_email='ann@x.com',
                                    temporary_password='secret1') is False

    def boom(*a, **kw):
        raise requests.ConnectionError('down')

    monkeypatch.setattr(requests, 'post', boom)
    assert email.send_email(email.EmailMessage(to='a@b.c', subject='s', text='t')) is False
