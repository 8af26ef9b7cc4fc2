import os

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': 'confmanager',
        'USER': 'confmanager',
        'PASSWORD': 'confmanager',
        'HOST': os.getenv('DB_HOST', 'localhost'),
        'PORT': '5432',
    }
}

# CREATE DATABASE confmanager;
# CREATE USER confmanager WITH PASSWORD 'confmanager';
# ALTER USER confmanager CREATEDB;
# ALTER DATABASE confmanager OWNER TO confmanager;
# GRANT ALL PRIVILEGES ON DATABASE confmanager TO confmanager;

ADMINS = [
    ('test', 'test@test.it')
]
