import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "droneflow_site.settings")

application = get_wsgi_application()
