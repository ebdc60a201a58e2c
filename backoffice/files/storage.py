"""
On-disk storage for uploaded files.

Files live flat in FILES_UPLOAD_ROOT under ASCII-safe generated names;
the original filename is kept only in the database.
"""
import logging
import os
import re
import secrets
import string
import time

from django.conf import settings

from .models import RAW_URL_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 25 * 1024 * 1024
DEFAULT_MAX_FILES = 20

ALLOWED_MIME_TYPES = frozenset([
    # images
    'image/png', 'image/jpeg', 'image/gif', 'image/webp', 'image/svg+xml',
    # documents
    'application/pdf',
    'text/plain', 'text/csv',
    'application/zip',
    'application/vnd.ms-excel',
    'application/vnd.ms-powerpoint',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'application/vnd.openxmlformats-officedocument.presentationml.presentation',
])

_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9._ -]+')
_SPACES = re.compile(r' +')
_RANDOM_ALPHABET = string.ascii_lowercase + string.digits


def upload_root():
    return getattr(settings, 'FILES_UPLOAD_ROOT', os.path.join(settings.BASE_DIR, 'uploads'))


def max_file_size():
    return getattr(settings, 'FILES_MAX_SIZE', DEFAULT_MAX_FILE_SIZE)


def max_files():
    return getattr(settings, 'FILES_MAX_COUNT', DEFAULT_MAX_FILES)


def ascii_safe_name(original_name):
    """Keep letters, digits, '.', '_', '-' and single spaces; everything else becomes '_'"""
    base = os.path.basename(original_name or '') or 'file'
    return _SPACES.sub(' ', _UNSAFE_CHARS.sub('_', base))


def generate_stored_name(original_name):
    timestamp = int(time.time() * 1000)
    random_part = ''.join(secrets.choice(_RANDOM_ALPHABET) for _ in range(10))
    return f"{timestamp}-{random_part}-{ascii_safe_name(original_name)}"


def raw_url(stored_name):
    return f"{RAW_URL_PREFIX}{stored_name}"


def resolve_path(stored_name):
    """Absolute path of a stored file; never escapes the upload root"""
    return os.path.join(upload_root(), os.path.basename(stored_name))


def save_upload(uploaded_file):
    """Write an UploadedFile to disk; returns the stored name"""
    root = upload_root()
    os.makedirs(root, exist_ok=True)
    stored_name = generate_stored_name(uploaded_file.name)
    with open(resolve_path(stored_name), 'wb') as destination:
        for chunk in uploaded_file.chunks():
            destination.write(chunk)
    return stored_name


def delete_stored_file(stored_name):
    """Remove a stored file; missing files and filesystem errors are only logged"""
    if not stored_name:
        return False
    path = resolve_path(stored_name)
    try:
        if os.path.exists(path):
            os.remove(path)
            return True
    except OSError as e:
        logger.warning(f"Could not remove stored file {stored_name}: {e}")
    return False


def check_uploads(files):
    """
    Validate a batch of uploads against the count, size and MIME limits.
    Returns an error message, or None when the batch is acceptable.
    """
    if not files:
        return 'No files uploaded'
    if len(files) > max_files():
        return f'Too many files (max {max_files()})'
    limit = max_file_size()
    for f in files:
        if f.size is not None and f.size > limit:
            return f'File too large (max {round(limit / 1024 / 1024)}MB)'
    blocked = [f for f in files if (f.content_type or '') not in ALLOWED_MIME_TYPES]
    if blocked:
        details = ', '.join(f"{f.name or 'unknown'} ({f.content_type or 'unknown'})" for f in blocked)
        return f'Blocked file types: {details}'
    return None
