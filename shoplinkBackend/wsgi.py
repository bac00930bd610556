"""
WSGI config for shoplinkBackend project.
"""

import os

from django.core.wsgi import get_wsgi_application


os.environ.setdefault("DJANGO_SETTINGS_MODULE", "shoplinkBackend.settings")

application = get_wsgi_application()
