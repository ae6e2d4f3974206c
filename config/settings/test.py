"""
Test settings for PublishDesk project.
"""

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

STORAGES['staticfiles'] = {
    'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
}

EDITORIAL_FEEDBACK_MIN_LENGTH = 10
EDITORIAL_FEEDBACK_MAX_LENGTH = 1000
EDITORIAL_DEFAULT_ROLE = 'author'

LOGGING['root']['level'] = 'WARNING'
LOGGING['loggers']['apps']['level'] = 'WARNING'
LOGGING['loggers']['django']['level'] = 'WARNING'
