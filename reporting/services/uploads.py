"""
Image uploads for organization logos, user signatures and profile images.

Files go through Django's default storage: local ``MEDIA_ROOT`` served
under ``/uploads/``, or an S3 bucket through django-storages when
``USE_S3_STORAGE`` is set with credentials.  Keys are laid out per
tenant: ``organizations/<orgId>/logo/<file>`` and
``organizations/<orgId>/users/<userId>/<category>/<file>``.

Records keep the public URL for local files and the bare key for S3,
since presigned URLs expire; ``file_url`` turns either into a usable URL.
"""
from __future__ import annotations

import logging
import mimetypes
import os
import uuid
from typing import Any, Dict

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import transaction
from PIL import Image, UnidentifiedImageError
from rest_framework.exceptions import NotFound, ValidationError

from reporting.models import Organization, User
from reporting.permissions import require_tenant
from reporting.services.audit import log_action

logger = logging.getLogger(__name__)

S3_PREFIX = 's3://'


def storage_type() -> str:
    backend = settings.STORAGES['default']['BACKEND']
    return 's3' if backend == settings.S3_STORAGE_BACKEND else 'local'


def storage_status() -> Dict[str, Any]:
    kind = storage_type()
    return {'s3Enabled': kind == 's3', 'storageType': kind}


def validate_image(upload) -> None:
    if upload is None:
        raise ValidationError({'file': ['No file uploaded']})
    if upload.content_type not in settings.ALLOWED_UPLOAD_TYPES:
        raise ValidationError({'file': ['Invalid file type. Allowed types: JPEG, PNG, GIF, WebP']})
    if upload.size > settings.UPLOAD_MAX_MB * 1024 * 1024:
        raise ValidationError({'file': [f'File too large. Maximum size is {settings.UPLOAD_MAX_MB}MB']})
    # the declared content type is client supplied; the bytes must decode
    try:
        with Image.open(upload) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        logger.warning('Rejected upload %s: %s', upload.name, e)
        raise ValidationError({'file': ['File is not a valid image']})
    finally:
        upload.seek(0)


def _filename(upload) -> str:
    ext = os.path.splitext(upload.name or '')[1].lower()
    if not ext:
        ext = mimetypes.guess_extension(upload.content_type) or ''
    return f'{uuid.uuid4().hex}{ext}'


def _store(prefix: str, upload) -> Dict[str, Any]:
    name = default_storage.save(f'{prefix}/{_filename(upload)}', upload)
    kind = storage_type()
    logger.info('Stored upload %s (%s bytes) in %s storage', name, upload.size, kind)
    return {'path': name, 'url': default_storage.url(name), 'storage': kind}


def _reference(stored: Dict[str, Any]) -> str:
    """Value saved on the owning record."""
    return stored['path'] if stored['storage'] == 's3' else stored['url']


def storage_key(reference: str) -> str:
    """Storage name of a value saved by ``_reference``."""
    if reference.startswith(S3_PREFIX):
        return reference[len(S3_PREFIX):]
    media_url = settings.MEDIA_URL
    if media_url in reference:
        return reference.split(media_url, 1)[1]
    return reference.lstrip('/')


def file_url(request, reference: str) -> str:
    """Accessible URL for a stored file; presigned when the file lives in S3."""
    if not reference:
        raise ValidationError({'path': ['File path is required']})
    if reference.startswith(('http://', 'https://')):
        return reference
    key = storage_key(reference)
    parts = key.split('/')
    if parts[0] == 'organizations' and request.user.role != User.ROLE_SUPER_ADMIN:
        if len(parts) < 2 or parts[1] != str(request.user.organization_id):
            raise NotFound('File not found')
    if storage_type() == 'local' and reference.startswith(settings.MEDIA_URL):
        return reference
    return default_storage.url(key)


def upload_logo(request, upload) -> Dict[str, Any]:
    validate_image(upload)
    org_id = require_tenant(request)
    with transaction.atomic():
        org = Organization.objects.select_for_update().filter(pk=org_id).first()
        if org is None:
            raise NotFound('Organization not found')
        stored = _store(f'organizations/{org_id}/logo', upload)
        before = {'logo': org.logo}
        org.logo = _reference(stored)
        org.save(update_fields=['logo', 'updated_at'])
        log_action(request=request, action='UPLOAD_LOGO', entity_type='Organization', entity_id=org.id,
                   organization_id=org.id, before=before, after={'logo': org.logo})
    return stored


def _upload_user_image(request, upload, category: str, attr: str, key: str, action: str) -> Dict[str, Any]:
    validate_image(upload)
    user = request.user
    prefix = f'users/{user.id}/{category}'
    if user.organization_id:
        prefix = f'organizations/{user.organization_id}/{prefix}'
    with transaction.atomic():
        stored = _store(prefix, upload)
        before = {key: getattr(user, attr)}
        setattr(user, attr, _reference(stored))
        user.save(update_fields=[attr, 'updated_at'])
        log_action(request=request, action=action, entity_type='User', entity_id=user.id,
                   before=before, after={key: getattr(user, attr)})
    return stored


def upload_signature(request, upload) -> Dict[str, Any]:
    return _upload_user_image(request, upload, 'signature', 'signature_image', 'signatureImage',
                              'UPLOAD_SIGNATURE')


def upload_profile_image(request, upload) -> Dict[str, Any]:
    return _upload_user_image(request, upload, 'profile', 'profile_image', 'profileImage',
                              'UPLOAD_PROFILE_IMAGE')
