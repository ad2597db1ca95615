"""
Supporting document uploads.
Stores request attachments under UPLOAD_FOLDER and removes them again
when their reservation goes away.
"""

import logging
import os
import time
import uuid

from flask import current_app
from werkzeug.utils import secure_filename

from utils.exceptions import ValidationError
from utils.helpers import allowed_file
from utils.messages import MESSAGES

logger = logging.getLogger(__name__)


def allowed_document(filename: str) -> bool:
    """Check the file extension against ALLOWED_DOCUMENT_EXTENSIONS."""
    return allowed_file(filename, current_app.config['ALLOWED_DOCUMENT_EXTENSIONS'])


def save_document(file_storage) -> str:
    """
    Save an uploaded document.

    Args:
        file_storage: werkzeug FileStorage from request.files (may be None)

    Returns:
        Stored file path, or None when nothing was uploaded

    Raises:
        ValidationError: Extension not allowed
    """
    if file_storage is None or not file_storage.filename:
        return None

    if not allowed_document(file_storage.filename):
        extensions = ', '.join(sorted(current_app.config['ALLOWED_DOCUMENT_EXTENSIONS']))
        raise ValidationError(MESSAGES['invalid_file_type'].format(extensions=extensions))

    folder = os.path.join(current_app.config['UPLOAD_FOLDER'], 'documents')
    os.makedirs(folder, exist_ok=True)

    base, extension = os.path.splitext(secure_filename(file_storage.filename))
    filename = f'{base or "document"}-{int(time.time())}-{uuid.uuid4().hex[:8]}{extension.lower()}'
    path = os.path.join(folder, filename)
    file_storage.save(path)

    logger.info('Document stored: %s', path)
    return path


def delete_document(path: str) -> bool:
    """
    Remove a stored document.

    Failures are logged and never raised; the reservation change that
    triggered the removal has already been committed.

    Args:
        path: Stored file path (may be None)

    Returns:
        True if a file was removed
    """
    if not path:
        return False

    try:
        os.remove(path)
        logger.info('Document removed: %s', path)
        return True
    except FileNotFoundError:
        logger.warning('Document already missing: %s', path)
        return False
    except OSError as e:
        logger.error(f'Failed to remove document {path}: {e}', exc_info=True)
        return False
