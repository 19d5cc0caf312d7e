"""
Input Validation & Sanitization Utilities
Validation for API request bodies and materials list uploads
"""
import os
from typing import Dict, Any, List, Optional, Tuple, Type
from enum import Enum
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename
import logging

logger = logging.getLogger(__name__)

# Allowed file extensions for materials imports
ALLOWED_IMPORT_EXTENSIONS = {'csv', 'txt'}

# Maximum file sizes (in bytes)
MAX_IMPORT_SIZE = 5 * 1024 * 1024  # 5MB


class ValidationError(Exception):
    """Custom exception for validation errors"""
    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate that all required fields are present in the data

    Args:
        data: Dictionary of input data
        required_fields: List of required field names

    Returns:
        Tuple of (is_valid, error_message)
    """
    missing_fields = [field for field in required_fields if field not in data or data[field] is None or data[field] == '']

    if missing_fields:
        return False, f"Missing required fields: {', '.join(missing_fields)}"

    return True, None


def validate_string_length(value: str, min_length: int = 0, max_length: int = 1000) -> Tuple[bool, Optional[str]]:
    """
    Validate string length is within acceptable range

    Args:
        value: String to validate
        min_length: Minimum allowed length
        max_length: Maximum allowed length

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, "Value must be a string"

    if len(value) < min_length:
        return False, f"Value too short (minimum {min_length} characters)"

    if len(value) > max_length:
        return False, f"Value too long (maximum {max_length} characters)"

    return True, None


def validate_number_range(value: float, min_value: Optional[float] = None, max_value: Optional[float] = None) -> Tuple[bool, Optional[str]]:
    """
    Validate number is within acceptable range

    Args:
        value: Number to validate
        min_value: Minimum allowed value
        max_value: Maximum allowed value

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False, "Value must be a number"

    if min_value is not None and value < min_value:
        return False, f"Value too small (minimum {min_value})"

    if max_value is not None and value > max_value:
        return False, f"Value too large (maximum {max_value})"

    return True, None


def validate_enum(value: Any, enum_cls: Type[Enum]) -> Tuple[bool, Optional[str]]:
    """
    Validate a value names a member of the enumeration

    Args:
        value: Incoming value (member name, case-insensitive)
        enum_cls: Enum class to check against

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(value, str) or value.upper() not in enum_cls.__members__:
        allowed = ', '.join(enum_cls.__members__)
        return False, f"Invalid value {value!r} (allowed: {allowed})"

    return True, None


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename to prevent directory traversal attacks

    Args:
        filename: Original filename

    Returns:
        Sanitized filename
    """
    safe_name = secure_filename(filename or '')

    if not safe_name:
        safe_name = 'file'

    return safe_name


def validate_file_extension(filename: str, allowed_extensions: set) -> Tuple[bool, Optional[str]]:
    """
    Validate file has an allowed extension

    Args:
        filename: Filename to check
        allowed_extensions: Set of allowed extensions (without dots)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not filename or '.' not in filename:
        return False, "File must have an extension"

    extension = filename.rsplit('.', 1)[1].lower()

    if extension not in allowed_extensions:
        return False, f"File type not allowed. Allowed types: {', '.join(sorted(allowed_extensions))}"

    return True, None


def validate_file_upload(
    file: FileStorage,
    allowed_extensions: set,
    max_size: int,
    file_type: str = "file"
) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Comprehensive file upload validation

    Args:
        file: FileStorage object from request.files
        allowed_extensions: Set of allowed extensions
        max_size: Maximum file size in bytes
        file_type: Type of file for error messages

    Returns:
        Tuple of (is_valid, error_message, sanitized_filename)
    """
    if not file or not file.filename:
        return False, "No file uploaded", None

    safe_filename = sanitize_filename(file.filename)

    is_valid, error = validate_file_extension(safe_filename, allowed_extensions)
    if not is_valid:
        return False, error, None

    file.seek(0, os.SEEK_END)
    file_size = file.tell()
    file.seek(0)

    if file_size > max_size:
        max_mb = max_size / (1024 * 1024)
        return False, f"{file_type.capitalize()} too large (maximum {max_mb:.1f}MB)", None

    logger.info(f"File validation successful: {safe_filename} ({file_size} bytes)")
    return True, None, safe_filename


def validate_import_upload(file: FileStorage) -> Tuple[bool, Optional[str], Optional[str]]:
    """Validate a materials list upload"""
    return validate_file_upload(file, ALLOWED_IMPORT_EXTENSIONS, MAX_IMPORT_SIZE, "materials file")


def _validate_optional_number(data: Dict[str, Any], field: str, min_value: Optional[float] = 0) -> Tuple[bool, Optional[str]]:
    if data.get(field) is None:
        return True, None
    is_valid, error = validate_number_range(data[field], min_value=min_value)
    if not is_valid:
        return False, f"Invalid {field}: {error}"
    return True, None


def _validate_optional_enum(data: Dict[str, Any], field: str, enum_cls: Type[Enum]) -> Tuple[bool, Optional[str]]:
    if data.get(field) in (None, ''):
        return True, None
    is_valid, error = validate_enum(data[field], enum_cls)
    if not is_valid:
        return False, f"Invalid {field}: {error}"
    return True, None


def validate_job_request(data: Dict[str, Any], partial: bool = False) -> Tuple[bool, Optional[str]]:
    """
    Validate job create/update body

    Args:
        data: Request data dictionary
        partial: True for PATCH bodies, where name is optional

    Returns:
        Tuple of (is_valid, error_message)
    """
    from database.models import JobStatus

    if not isinstance(data, dict):
        return False, "Request body must be a JSON object"

    if not partial:
        is_valid, error = validate_required_fields(data, ['name'])
        if not is_valid:
            return False, "Job name is required"

    if 'name' in data:
        is_valid, error = validate_string_length(data['name'], min_length=1, max_length=255)
        if not is_valid:
            return False, f"Invalid name: {error}"

    is_valid, error = _validate_optional_number(data, 'budgetTotal')
    if not is_valid:
        return False, error

    return _validate_optional_enum(data, 'status', JobStatus)


def validate_material_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate one material body (create or update)

    Returns:
        Tuple of (is_valid, error_message)
    """
    from database.models import MaterialStatus, Trade

    if not isinstance(data, dict):
        return False, "Each material must be a JSON object"

    for field in ('quantityNeeded', 'quantityOrdered', 'quantityOnSite', 'unitCost'):
        is_valid, error = _validate_optional_number(data, field)
        if not is_valid:
            return False, error

    for field, enum_cls in (('status', MaterialStatus), ('trade', Trade)):
        is_valid, error = _validate_optional_enum(data, field, enum_cls)
        if not is_valid:
            return False, error

    return True, None


def validate_invoice_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate invoice create/update body, including nested line items

    Returns:
        Tuple of (is_valid, error_message)
    """
    from database.models import InvoiceStatus

    if not isinstance(data, dict):
        return False, "Request body must be a JSON object"

    for field in ('totalAmount', 'taxAmount'):
        is_valid, error = _validate_optional_number(data, field)
        if not is_valid:
            return False, error

    is_valid, error = _validate_optional_enum(data, 'status', InvoiceStatus)
    if not is_valid:
        return False, error

    items = data.get('items')
    if items is not None:
        if not isinstance(items, list):
            return False, "items must be an array"
        for idx, item in enumerate(items):
            if not isinstance(item, dict):
                return False, f"Item {idx} must be an object"
            for field in ('quantity', 'unitPrice', 'totalPrice'):
                is_valid, error = _validate_optional_number(item, field, min_value=None)
                if not is_valid:
                    return False, f"Item {idx}: {error}"

    return True, None


def format_validation_error(field: Optional[str], message: str) -> Dict[str, Any]:
    """
    Format validation error for consistent API responses

    Args:
        field: Field name that failed validation
        message: Error message

    Returns:
        Error response dictionary
    """
    return {
        'success': False,
        'error': message,
        'field': field,
    }
