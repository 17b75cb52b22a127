"""
Custom validators for marketplace models.
"""

import re

from django.core.exceptions import ValidationError
from django.core.validators import URLValidator


MAX_LISTING_IMAGES = 10


def validate_phone_number(value):
    """
    Validate phone number format.

    Accepts international formats with optional country codes, spaces, dashes, and parentheses.
    Requires at least 7 digits.

    Valid formats:
    - +1-234-567-8900
    - +91 98765 43210
    - 555-0101

    Args:
        value: Phone number string to validate

    Raises:
        ValidationError: If phone number format is invalid
    """
    if not value:  # Empty string is allowed (optional field)
        return

    if not re.match(r'^[\d\s\-\+\(\)]+$', value):
        raise ValidationError(
            'Phone number can only contain digits, spaces, dashes, parentheses, and plus sign.',
            code='invalid_phone_chars'
        )

    digits = re.sub(r'\D', '', value)

    if len(digits) < 7:
        raise ValidationError(
            'Phone number must contain at least 7 digits.',
            code='phone_too_short'
        )

    if len(digits) > 15:
        raise ValidationError(
            'Phone number cannot contain more than 15 digits.',
            code='phone_too_long'
        )


def validate_image_urls(value):
    """
    Validate the list of image URLs attached to a listing.

    Checks:
    - Value is a list
    - At most 10 images
    - Every entry is an http(s) URL

    Args:
        value: List of image URL strings

    Raises:
        ValidationError: If the list is invalid
    """
    if value is None:
        return

    if not isinstance(value, list):
        raise ValidationError(
            'Images must be a list of URLs.',
            code='invalid_images'
        )

    if len(value) > MAX_LISTING_IMAGES:
        raise ValidationError(
            f'Maximum {MAX_LISTING_IMAGES} images allowed per listing.',
            code='too_many_images'
        )

    url_validator = URLValidator(schemes=['http', 'https'])
    for i, url in enumerate(value):
        if not isinstance(url, str):
            raise ValidationError(
                f'Image {i + 1} must be a URL string.',
                code='invalid_image_url'
            )
        try:
            url_validator(url)
        except ValidationError:
            raise ValidationError(
                f'Image {i + 1} is not a valid http(s) URL.',
                code='invalid_image_url'
            )
