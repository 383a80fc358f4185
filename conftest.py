import django
from django.conf import settings


def pytest_configure():
    if settings.configured:
        return

    settings.configure(
        DEBUG=False,
        SECRET_KEY='converter-tests',
        ALLOWED_HOSTS=['testserver'],
        ROOT_URLCONF='converter.urls',
        INSTALLED_APPS=['converter'],
        MIDDLEWARE=[],
        DATABASES={},
        USE_TZ=True,
    )
    django.setup()
