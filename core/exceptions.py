from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.views import exception_handler
from rest_framework.response import Response
import logging
import uuid

logger = logging.getLogger(__name__)


def _validation_payload(exc):
    if hasattr(exc, 'message_dict'):
        return exc.message_dict
    return {'detail': exc.messages[0] if len(exc.messages) == 1 else exc.messages}


def custom_exception_handler(exc, context):
    error_id = uuid.uuid4()

    # Services raise Django ValidationError; surface those as 400s
    if isinstance(exc, DjangoValidationError):
        logger.warning(f"Error ID: {error_id} - rejected: {exc.messages}")
        data = _validation_payload(exc)
        data['error_id'] = str(error_id)
        return Response(data, status=status.HTTP_400_BAD_REQUEST)

    response = exception_handler(exc, context)

    if response is None:
        logger.error(
            f"Error ID: {error_id}\n"
            f"Error: {str(exc)}\n"
            f"Context: {context}",
            exc_info=True
        )
        return Response(
            {
                'error': 'An unexpected error occurred',
                'error_id': str(error_id),
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    logger.warning(f"Error ID: {error_id} - {response.status_code}: {exc}")

    if isinstance(response.data, dict):
        response.data['error_id'] = str(error_id)

    return response
