import base64
import binascii
import re

from rest_framework import serializers

MAX_IMAGE_BYTES = 5 * 1024 * 1024
ALLOWED_IMAGE_TYPES = ('image/jpeg', 'image/png', 'image/webp')

DATA_URI = re.compile(r'^data:(?P<mime>image/[a-z]+);base64,(?P<data>[A-Za-z0-9+/=\s]+)$')


class AnalyzeImageSerializer(serializers.Serializer):
    """Accepts either an uploaded file or a base64 data URI in `image`."""
    image = serializers.JSONField(help_text="Multipart JPG/PNG/WEBP file or a base64 data URI, at most 5 MB")

    def to_internal_value(self, data):
        image = data.get('image') if hasattr(data, 'get') else None
        if image is None or image == '':
            raise serializers.ValidationError({'image': ['No image provided.']})
        if hasattr(image, 'read'):
            return {'image': self._upload_to_data_uri(image)}
        if isinstance(image, str):
            return {'image': self._check_data_uri(image.strip())}
        raise serializers.ValidationError({'image': ['Send an image file or a data URI.']})

    def _upload_to_data_uri(self, upload):
        content_type = getattr(upload, 'content_type', '')
        if content_type == 'image/jpg':
            content_type = 'image/jpeg'
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise serializers.ValidationError({'image': ['Only JPG, PNG or WEBP images are supported.']})
        if upload.size > MAX_IMAGE_BYTES:
            raise serializers.ValidationError({'image': ['Image must be 5 MB or smaller.']})
        encoded = base64.b64encode(upload.read()).decode()
        return f"data:{content_type};base64,{encoded}"

    def _check_data_uri(self, value):
        match = DATA_URI.match(value)
        if not match:
            raise serializers.ValidationError({'image': ['Image must be a base64 data URI.']})
        mime = 'image/jpeg' if match.group('mime') == 'image/jpg' else match.group('mime')
        if mime not in ALLOWED_IMAGE_TYPES:
            raise serializers.ValidationError({'image': ['Only JPG, PNG or WEBP images are supported.']})
        try:
            decoded = base64.b64decode(re.sub(r'\s', '', match.group('data')), validate=True)
        except (binascii.Error, ValueError):
            raise serializers.ValidationError({'image': ['Image data is not valid base64.']})
        if len(decoded) > MAX_IMAGE_BYTES:
            raise serializers.ValidationError({'image': ['Image must be 5 MB or smaller.']})
        return value


class SortingItemSerializer(serializers.Serializer):
    name = serializers.CharField()
    category = serializers.CharField()
    reason = serializers.CharField()
    bagColor = serializers.CharField()


class SortingAdviceSerializer(serializers.Serializer):
    items = SortingItemSerializer(many=True)
    summary = serializers.CharField()
    raw = serializers.BooleanField(required=False)
