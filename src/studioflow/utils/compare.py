"""Side-by-side file comparison helpers."""

from typing import List

from ..core.models import LineDifference

_SIZE_UNITS = ['Bytes', 'KB', 'MB', 'GB']


def compare_lines(left: str, right: str) -> List[LineDifference]:
    """
    Compare two texts line by line at equal indices.

    This is not a diff: an inserted line shifts every following line and
    shows up as a difference on each of them. Lines missing on one side
    compare as empty strings.
    """
    left_lines = left.split('\n')
    right_lines = right.split('\n')
    differences = []
    for i in range(max(len(left_lines), len(right_lines))):
        left_line = left_lines[i] if i < len(left_lines) else ''
        right_line = right_lines[i] if i < len(right_lines) else ''
        if left_line != right_line:
            differences.append(LineDifference(line=i + 1, left=left_line, right=right_line))
    return differences


def format_file_size(size: int) -> str:
    """Human readable size: ``0 Bytes``, ``500 Bytes``, ``1 KB``, ``1.5 MB``."""
    if size <= 0:
        return '0 Bytes'
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"
