"""File handling utilities."""
from pathlib import Path


def safe_asset_path(base_dir: Path, asset_path: str) -> Path:
    """Resolve asset path safely (prevent path traversal).

    Raises ValueError if the path escapes `base_dir`.
    """
    resolved = (base_dir / asset_path).resolve()
    if base_dir.resolve() not in resolved.parents:
        raise ValueError(f"Invalid asset path: {asset_path}")
    return resolved


def write_bytes_atomic(path: Path, data: bytes) -> None:
    """Write bytes through a temporary sibling so readers never see partial files."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    tmp_path.write_bytes(data)
    tmp_path.replace(path)
