"""
Import file upload validation.

Provides upload checks for JSON import files:
- Extension validation
- Protection against double extension and path traversal names
- Size limits
"""

from __future__ import annotations
from typing import Tuple, Optional
import os

# Allowed import file extensions
ALLOWED_EXTENSIONS = {'json'}

# Maximum import file size (2MB)
MAX_FILE_SIZE = 2 * 1024 * 1024


def allowed_file(filename: str) -> bool:
    """
    Check if filename has an allowed extension and no dangerous double extensions.

    Examples:
        >>> allowed_file('plantpal_export.json')
        True
        >>> allowed_file('plants.exe.json')  # Double extension attack
        False
        >>> allowed_file('../../../etc/passwd')
        False
    """
    if not filename or '.' not in filename:
        return False

    # Prevent path traversal
    if '..' in filename or '/' in filename or '\\' in filename:
        return False

    ext = filename.rsplit('.', 1)[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        return False

    parts = filename.lower().split('.')
    if len(parts) > 2:
        dangerous_exts = {
            'php', 'phtml', 'exe', 'sh', 'bat', 'cmd', 'com',
            'js', 'py', 'rb', 'pl', 'cgi', 'asp', 'aspx', 'jsp'
        }
        if parts[-2] in dangerous_exts:
            return False

    return True


def validate_import_file(
    file,
    max_size: int = MAX_FILE_SIZE
) -> Tuple[bool, Optional[str], Optional[bytes]]:
    """
    Validate an uploaded import file before it is parsed.

    Args:
        file: FileStorage object from Flask request.files
        max_size: Maximum allowed file size in bytes (default: 2MB)

    Returns:
        (is_valid, error_message, file_bytes)
        - is_valid: True if file passes all checks
        - error_message: None if valid or no file was given, error string if invalid
        - file_bytes: File content as bytes if valid, None otherwise

    Usage:
        >>> file = request.files.get('file')
        >>> is_valid, error, file_bytes = validate_import_file(file)
        >>> if not is_valid:
        ...     flash(error or "Choose a file to import.", 'error')
    """
    if not file or not file.filename:
        return False, None, None  # No file provided (not an error, just skip)

    if not allowed_file(file.filename):
        return False, "Invalid file type. Only .json exports can be imported.", None

    file.seek(0, os.SEEK_END)
    file_length = file.tell()
    if file_length > max_size:
        max_mb = max_size / (1024 * 1024)
        return False, f"Import file must be less than {max_mb:.0f}MB.", None

    file.seek(0)
    return True, None, file.read()
