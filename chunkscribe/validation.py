"""
chunkscribe.validation - Dependency checks and validation utilities.

Validates environment, dependencies, and the input file before a run.
"""

from __future__ import annotations

import importlib.util
import os
import shutil
import subprocess
from pathlib import Path
from typing import Any

from chunkscribe.exceptions import DependencyError, ValidationError

BACKEND_PACKAGES = {
    "openai": ("openai", "pip install openai"),
    "faster": ("faster_whisper", "pip install chunkscribe[faster]"),
    "mlx": ("mlx_whisper", "pip install chunkscribe[mlx]"),
}


def _tool_version(path: str) -> str:
    try:
        proc = subprocess.run(
            [path, "-version"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        version_line = proc.stdout.split("\n")[0]
        return version_line.split()[2] if version_line else "unknown"
    except (subprocess.TimeoutExpired, IndexError, OSError):
        return "unknown"


def check_ffmpeg() -> dict[str, str]:
    """Check if FFmpeg and FFprobe are installed and get versions.

    Returns:
        Dict with 'ffmpeg_version' and 'ffprobe_version'

    Raises:
        DependencyError: If FFmpeg or FFprobe not found
    """
    result = {}

    for tool in ("ffmpeg", "ffprobe"):
        tool_path = shutil.which(tool)
        if not tool_path:
            raise DependencyError(
                tool,
                f"{tool} not found in PATH",
                "Install with: brew install ffmpeg (macOS) or apt install ffmpeg (Linux)",
            )
        result[f"{tool}_version"] = _tool_version(tool_path)

    return result


def check_backend(backend: str) -> dict[str, Any]:
    """Check that a transcription backend can be used.

    Returns:
        Dict with 'backend', 'installed', and 'warnings'

    Raises:
        DependencyError: If the backend's package is not installed
    """
    package, hint = BACKEND_PACKAGES[backend]
    if importlib.util.find_spec(package) is None:
        raise DependencyError(package, f"required by the '{backend}' backend", hint)

    warnings = []
    if backend == "openai" and not os.environ.get("OPENAI_API_KEY"):
        warnings.append("OPENAI_API_KEY is not set")

    return {"backend": backend, "installed": True, "warnings": warnings}


def check_disk_space(path: Path, required_mb: int) -> dict[str, Any]:
    """Check if there's enough disk space at the given path.

    Args:
        path: Path to check (nearest existing parent is used)
        required_mb: Required space in megabytes

    Returns:
        Dict with 'available_mb', 'required_mb', 'sufficient'

    Raises:
        ValidationError: If disk usage cannot be read
    """
    check_path = path
    while not check_path.exists() and check_path != check_path.parent:
        check_path = check_path.parent

    try:
        stat = shutil.disk_usage(check_path)
    except OSError as e:
        raise ValidationError(f"Cannot check disk space: {e}") from e

    available_mb = stat.free // (1024 * 1024)
    return {
        "available_mb": available_mb,
        "required_mb": required_mb,
        "sufficient": available_mb >= required_mb,
    }


def validate_input_file(path: Path) -> dict[str, Any]:
    """Validate the input recording exists and is a non-empty file.

    Raises:
        ValidationError: If file doesn't exist or is invalid
    """
    if not path.exists():
        raise ValidationError(f"File not found: {path}")

    if not path.is_file():
        raise ValidationError(f"Not a file: {path}")

    size = path.stat().st_size
    if size == 0:
        raise ValidationError(f"File is empty: {path}")

    return {
        "path": str(path),
        "exists": True,
        "size_mb": size // (1024 * 1024),
    }


def run_preflight_checks(config: Any, input_path: Path | None = None) -> dict[str, Any]:
    """Run all preflight checks before starting the pipeline.

    Args:
        config: ChunkscribeConfig
        input_path: Optional input recording to validate

    Returns:
        Dict with 'passed' and per-check results
    """
    results: dict[str, Any] = {
        "passed": True,
        "checks": {},
    }

    try:
        results["checks"]["ffmpeg"] = check_ffmpeg()
    except DependencyError as e:
        results["checks"]["ffmpeg"] = {"error": str(e), "install_hint": e.install_hint}
        results["passed"] = False

    try:
        results["checks"]["backend"] = check_backend(config.backend)
    except DependencyError as e:
        results["checks"]["backend"] = {"error": str(e), "install_hint": e.install_hint}
        results["passed"] = False

    if input_path is not None:
        try:
            info = validate_input_file(input_path)
            results["checks"]["input"] = info
            # chunks are stream copies, so they need about as much space as the input
            output_dir = config.resolve_output_dir(input_path)
            disk = check_disk_space(output_dir, info["size_mb"] + 10)
            results["checks"]["disk_space"] = disk
            if not disk["sufficient"]:
                results["passed"] = False
        except ValidationError as e:
            results["checks"]["input"] = {"error": str(e)}
            results["passed"] = False

    return results
