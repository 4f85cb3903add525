"""
Development settings
"""
from .base import *

DEBUG = True

LOG_LEVEL = env('LOG_LEVEL', default='DEBUG')
LOGGING['root']['level'] = LOG_LEVEL

# Email backend (console for development)
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'
