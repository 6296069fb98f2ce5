import logging

from rest_framework import permissions, status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiResponse

from .serializers import AnalyzeImageSerializer, SortingAdviceSerializer
from .services import AdvisorError, analyze_image

logger = logging.getLogger(__name__)


class AnalyzeImageView(APIView):
    """Photograph some rubbish, get told which bag each item goes in."""
    permission_classes = [permissions.IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    @extend_schema(
        request=AnalyzeImageSerializer,
        responses={
            200: SortingAdviceSerializer,
            400: OpenApiResponse(description="Missing, oversized or unsupported image"),
            402: OpenApiResponse(description="AI credits exhausted"),
            429: OpenApiResponse(description="AI rate limit reached"),
            502: OpenApiResponse(description="AI gateway failure"),
        },
        summary="Get waste sorting advice for a photo",
    )
    def post(self, request):
        serializer = AnalyzeImageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            advice = analyze_image(serializer.validated_data['image'])
        except AdvisorError as e:
            return Response({'error': e.message}, status=e.status_code)
        return Response(advice, status=status.HTTP_200_OK)
