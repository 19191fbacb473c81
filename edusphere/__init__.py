"""EduSphere accounts service.

Signup with OTP email verification, session login, password reset and
change, and authenticated media uploads.
"""

__version__ = "1.0.0"
