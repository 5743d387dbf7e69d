# student_dashboard/utils/uploads.py
"""
Helpers for CSV uploads
"""

from werkzeug.utils import secure_filename

from student_dashboard.records.errors import CSVParseError

ALLOWED_EXTENSIONS = {"csv"}


def allowed_file(filename):
    """Return True when ``filename`` carries an allowed extension"""
    filename = secure_filename(filename or "")
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS


def decode_upload(raw: bytes) -> str:
    """Decode uploaded bytes as UTF-8, dropping a leading byte-order mark"""
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CSVParseError("The uploaded file is not valid UTF-8 text.") from e


def read_upload(file_storage) -> str:
    """Read a Werkzeug ``FileStorage`` upload into text"""
    if not allowed_file(file_storage.filename):
        raise CSVParseError("Please upload a CSV file.")
    return decode_upload(file_storage.read())
