"""
Django Test Settings for Mano-Pro

Overrides the main settings for fast, isolated test runs. SQLite is used
unless TEST_DB_ENGINE points at PostgreSQL.

Usage:
    pytest --ds=manopro.settings_test
"""

import tempfile

from .settings import *  # noqa: F401, F403
from .settings import env

# =============================================================================
# TEST ENVIRONMENT CONFIGURATION
# =============================================================================

DEBUG = False
TESTING = True

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# =============================================================================
# DATABASE CONFIGURATION
# =============================================================================

if env('TEST_DB_ENGINE', default='sqlite') == 'postgresql':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': env('TEST_DB_NAME', default='manopro_test'),
            'USER': env('TEST_DB_USER', default=env('DB_USER', default='postgres')),
            'PASSWORD': env('TEST_DB_PASSWORD', default=env('DB_PASSWORD', default='')),
            'HOST': env('TEST_DB_HOST', default=env('DB_HOST', default='localhost')),
            'PORT': env('TEST_DB_PORT', default=env('DB_PORT', default='5432')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:',
        }
    }

# =============================================================================
# CACHING CONFIGURATION
# =============================================================================

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'unique-snowflake',
    },
}

# =============================================================================
# CELERY CONFIGURATION
# =============================================================================

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

# =============================================================================
# CHANNEL LAYERS CONFIGURATION
# =============================================================================

CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels.layers.InMemoryChannelLayer',
    },
}

# =============================================================================
# MEDIA & STORAGE
# =============================================================================

MEDIA_ROOT = tempfile.mkdtemp()
STATIC_ROOT = tempfile.mkdtemp()

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

# =============================================================================
# PAYMENT GATEWAY
# =============================================================================

PAYMENT_GATEWAY = 'payments.gateways.ImmediateGateway'

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'CRITICAL',
    },
    'loggers': {
        'django': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
        'django.request': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
    },
}

# =============================================================================
# REST FRAMEWORK
# =============================================================================

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    'TEST_REQUEST_DEFAULT_FORMAT': 'json',
    'TEST_REQUEST_RENDERER_CLASSES': [
        'core.renderers.CamelCaseJSONRenderer',
        'rest_framework.renderers.MultiPartRenderer',
    ],
    'DEFAULT_THROTTLE_CLASSES': [],
}
