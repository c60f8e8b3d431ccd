import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from reporting.models import InspectionEntry, InspectionReport, Organization, User, Vessel

PASSWORD = "P@ssw0rd1"


@pytest.fixture(autouse=True)
def _isolated(settings, tmp_path):
    # throttle counters live in the cache
    cache.clear()
    settings.MEDIA_ROOT = str(tmp_path / "uploads")
    settings.SENDGRID_API_KEY = ""
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def org(db):
    return Organization.objects.create(name="Blue Ocean Lines", email="ops@blueocean.com", default_form_no="F-07")


@pytest.fixture
def other_org(db):
    return Organization.objects.create(name="Red Sea Tankers")


@pytest.fixture
def vessel(org):
    return Vessel.objects.create(name="MV Aurora", imo_number="9312345", ship_file_no="SF-11", organization=org)


@pytest.fixture
def other_vessel(other_org):
    return Vessel.objects.create(name="MT Sahara", imo_number="9400001", organization=other_org)


@pytest.fixture
def super_admin(db):
    return User.objects.create_user(email="root@platform.local", password=PASSWORD, name="Root",
                                    role=User.ROLE_SUPER_ADMIN)


@pytest.fixture
def admin(org):
    return User.objects.create_user(email="admin@blueocean.com", password=PASSWORD, name="Olivia Admin",
                                    role=User.ROLE_ADMIN, organization=org)


@pytest.fixture
def captain(org, vessel):
    return User.objects.create_user(email="captain@blueocean.com", password=PASSWORD, name="Cpt Hook",
                                    role=User.ROLE_CAPTAIN, organization=org, assigned_vessel=vessel)


@pytest.fixture
def other_admin(other_org):
    return User.objects.create_user(email="admin@redsea.com", password=PASSWORD, name="Rex Admin",
                                    role=User.ROLE_ADMIN, organization=other_org)


@pytest.fixture
def as_user(api_client):
    """Return a helper that authenticates the shared client as ``user``."""
    def _as(user, organization=None):
        api_client.force_authenticate(user=user)
        if organization is not None:
            api_client.credentials(HTTP_X_ORGANIZATION_ID=str(organization.id))
        else:
            api_client.credentials()
        return api_client
    return _as


@pytest.fixture
def report(org, vessel, captain):
    r = InspectionReport.objects.create(vessel=vessel, organization=org, created_by=captain,
                                        inspected_by="PSC Rotterdam")
    InspectionEntry.objects.create(report=r, sr_no="1", deficiency="Fire door not self-closing")
    InspectionEntry.objects.create(report=r, sr_no="2", deficiency="Lifebuoy light expired")
    return r
