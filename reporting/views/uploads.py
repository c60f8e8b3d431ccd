"""
Multipart image uploads, file URLs and the storage backend in use.
Uploaded files are expected in the ``file`` field.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from reporting.permissions import IsAdmin
from reporting.services import uploads


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdmin])
@parser_classes([MultiPartParser, FormParser])
def upload_logo(request):
    stored = uploads.upload_logo(request, request.FILES.get('file'))
    return Response(stored, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload_signature(request):
    stored = uploads.upload_signature(request, request.FILES.get('file'))
    return Response(stored, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload_profile_image(request):
    stored = uploads.upload_profile_image(request, request.FILES.get('file'))
    return Response(stored, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def file_url(request):
    """Resolve a stored path or S3 key; S3 objects get a presigned URL."""
    return Response({'url': uploads.file_url(request, request.query_params.get('path', '').strip())})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def storage_status(request):
    return Response(uploads.storage_status())
