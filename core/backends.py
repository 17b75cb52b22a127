"""
Authentication backend that signs users in by email address.
"""

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

User = get_user_model()


class EmailBackend(ModelBackend):
    """
    Look accounts up by email, ignoring case, instead of by username.

    Accepts the address either as ``email=`` or as ``username=`` so both the
    API login view and the admin login form work.
    """

    def authenticate(self, request, username=None, password=None, email=None, **kwargs):
        address = email or username
        if not address or password is None:
            return None

        user = User.objects.filter(email__iexact=address.strip()).first()
        if user is None:
            # Hash anyway so unknown addresses take as long as wrong passwords
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
