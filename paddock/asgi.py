"""
ASGI config for the paddock project.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'paddock.settings')

application = get_asgi_application()
