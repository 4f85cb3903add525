"""
Production settings
"""
from .base import *

DEBUG = False

SECURE_SSL_REDIRECT = env.bool('SECURE_SSL_REDIRECT', default=True)
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'

# DATABASE_URL is mandatory here; keep connections open between requests
_default_db = env.db('DATABASE_URL')
_default_db['CONN_MAX_AGE'] = env.int('DB_CONN_MAX_AGE', default=60)
DATABASES['default'] = _default_db

LOGGING['root']['level'] = env('LOG_LEVEL', default='WARNING')
