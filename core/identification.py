"""
Waste material identification through the Gemini generateContent API.
"""

import base64
import binascii
import io
import json
import logging
import re
from dataclasses import dataclass

import httpx
from django.conf import settings
from PIL import Image, UnidentifiedImageError

from .exceptions import IdentificationFailed, InvalidInput


logger = logging.getLogger(__name__)

IDENTIFY_PROMPT = (
    "Identify the waste material in this image. Return a JSON object with keys: "
    "material (string), category (one of: Glass, Plastic, Metal, Paper, Wood, "
    "E-waste, Other), confidence (number 0-1), description (short string)."
)

RESULT_KEYS = ('material', 'category', 'confidence', 'description')

_FENCE_RE = re.compile(r'```(?:json)?', re.IGNORECASE)


@dataclass
class GeminiSettings:
    api_key: str = ''
    base_url: str = 'https://generativelanguage.googleapis.com'
    model: str = 'gemini-2.5-flash'
    timeout: float = 20.0

    @classmethod
    def from_django_settings(cls):
        return cls(
            api_key=getattr(settings, 'GEMINI_API_KEY', ''),
            base_url=getattr(settings, 'GEMINI_BASE_URL', cls.base_url),
            model=getattr(settings, 'GEMINI_MODEL', cls.model),
            timeout=float(getattr(settings, 'GEMINI_TIMEOUT', cls.timeout)),
        )


def decode_image(data, max_bytes):
    """
    Decode a base64 image, optionally wrapped in a data URL.

    Args:
        data: Base64 string, e.g. ``data:image/jpeg;base64,/9j/...``
        max_bytes: Largest accepted decoded size

    Returns:
        tuple: (raw bytes, MIME type)

    Raises:
        InvalidInput: If the payload is empty, too large or not an image
    """
    if not isinstance(data, str) or not data.strip():
        raise InvalidInput('Image required')

    payload = data.split(',', 1)[1] if data.startswith('data:') and ',' in data else data

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInput('Image must be base64 encoded')

    if not raw:
        raise InvalidInput('Image required')

    if len(raw) > max_bytes:
        raise InvalidInput(f'Image size cannot exceed {max_bytes // (1024 * 1024)}MB')

    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.verify()
            image_format = img.format
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise InvalidInput('Invalid image file')

    mime_type = Image.MIME.get(image_format, 'image/jpeg')
    return raw, mime_type


def strip_code_fences(text):
    """Remove markdown code fences around a JSON answer."""
    return _FENCE_RE.sub('', text).strip()


def parse_identification(text):
    """
    Parse the model's answer into the identification result.

    Raises:
        IdentificationFailed: If the answer is not the expected JSON object
    """
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError:
        raise IdentificationFailed()

    if not isinstance(data, dict) or any(key not in data for key in RESULT_KEYS):
        raise IdentificationFailed()

    try:
        confidence = float(data['confidence'])
    except (TypeError, ValueError):
        raise IdentificationFailed()

    return {
        'material': str(data['material']),
        'category': str(data['category']),
        'confidence': min(max(confidence, 0.0), 1.0),
        'description': str(data['description']),
    }


class WasteIdentifier:
    """Sends an image to Gemini and returns what waste it shows."""

    def __init__(self, config=None):
        self.config = config or GeminiSettings()

    @classmethod
    def from_settings(cls):
        return cls(GeminiSettings.from_django_settings())

    @property
    def endpoint(self):
        base = self.config.base_url.rstrip('/')
        return f"{base}/v1beta/models/{self.config.model}:generateContent"

    def identify(self, image_bytes, mime_type='image/jpeg'):
        """
        Identify the waste material in an image.

        Args:
            image_bytes: Raw image content
            mime_type: MIME type of the image

        Returns:
            dict: material, category, confidence and description

        Raises:
            IdentificationFailed: On any provider error or unusable answer
        """
        if not self.config.api_key:
            logger.error("Waste identification requested but GEMINI_API_KEY is not set")
            raise IdentificationFailed()

        body = {
            'contents': [{
                'parts': [
                    {'text': IDENTIFY_PROMPT},
                    {
                        'inline_data': {
                            'mime_type': mime_type,
                            'data': base64.b64encode(image_bytes).decode('ascii'),
                        }
                    },
                ]
            }]
        }

        try:
            response = httpx.post(
                self.endpoint,
                params={'key': self.config.api_key},
                json=body,
                timeout=self.config.timeout
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Gemini request failed: {e}")
            raise IdentificationFailed() from e

        try:
            parts = payload['candidates'][0]['content']['parts']
            text = ''.join(part.get('text', '') for part in parts)
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected Gemini response shape: {e}")
            raise IdentificationFailed() from e

        result = parse_identification(text)
        logger.info(
            f"Waste identified as {result['material']} ({result['category']}), "
            f"confidence {result['confidence']}"
        )
        return result
