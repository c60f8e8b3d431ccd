import re
import uuid

_VALID_ID = re.compile(r'^[A-Za-z0-9._-]{1,64}$')


class RequestIdMiddleware:
    """Tag each request with an ``X-Request-Id``.

    A well formed incoming id is reused, otherwise a new one is
    generated.  The id is echoed on the response and stored on the
    request for the audit log.
    """
    header = 'HTTP_X_REQUEST_ID'

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        incoming = request.META.get(self.header) or ''
        request.request_id = incoming if _VALID_ID.match(incoming) else uuid.uuid4().hex
        response = self.get_response(request)
        response['X-Request-Id'] = request.request_id
        return response
