"""Utility modules."""
from exam_api.utils.data_uri import DataUri, is_data_uri, parse_data_uri, to_data_uri
from exam_api.utils.file_utils import safe_asset_path, write_bytes_atomic
from exam_api.utils.json_utils import (
    extract_json_object,
    json_dump,
    json_load,
    read_json_file,
)
from exam_api.utils.time_utils import as_utc, utc_now
from exam_api.utils.validation import validate_id

__all__ = [
    "DataUri",
    "is_data_uri",
    "parse_data_uri",
    "to_data_uri",
    "safe_asset_path",
    "write_bytes_atomic",
    "extract_json_object",
    "json_dump",
    "json_load",
    "read_json_file",
    "as_utc",
    "utc_now",
    "validate_id",
]
