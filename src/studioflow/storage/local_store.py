"""JSON persistence for user settings and per-file annotations."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..ai.models.common import new_id, now_ms
from ..core.errors import InvalidInputError

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"
ANNOTATIONS_FILE = "annotations.json"


class AppSettings(BaseModel):
    """User-visible preferences."""
    model_config = ConfigDict(populate_by_name=True)

    theme: Literal["light", "dark", "system"] = "system"
    auto_save: bool = Field(default=True, alias="autoSave")
    code_viewer_font_size: int = Field(default=14, ge=8, le=32, alias="codeViewerFontSize")
    show_line_numbers: bool = Field(default=True, alias="showLineNumbers")
    enable_smooth_transitions: bool = Field(default=True, alias="enableSmoothTransitions")
    sidebar_width: int = Field(default=16, gt=0, alias="sidebarWidth")


class Annotation(BaseModel):
    """A note attached to one line of a file."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id)
    line_number: int = Field(default=1, ge=1, alias="lineNumber")
    author: str
    content: str
    timestamp: int = Field(default_factory=now_ms)
    file_path: str = Field(alias="filePath")


class LocalStore:
    """Settings and annotations stored as JSON files under one directory.

    The directory is created on first write. Reads of missing or corrupt
    files fall back to defaults.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).expanduser()

    @property
    def settings_path(self) -> Path:
        return self.root / SETTINGS_FILE

    @property
    def annotations_path(self) -> Path:
        return self.root / ANNOTATIONS_FILE

    def _read_json(self, path: Path) -> Optional[Any]:
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable %s: %s", path.name, e)
            return None

    def _write_json(self, path: Path, data: Any) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, path)

    # Settings

    def load_settings(self) -> AppSettings:
        """Stored settings, or defaults when absent or invalid."""
        data = self._read_json(self.settings_path)
        if data is None:
            return AppSettings()
        try:
            return AppSettings.model_validate(data)
        except ValidationError as e:
            logger.warning("Invalid settings, using defaults: %d errors", e.error_count())
            return AppSettings()

    def save_settings(self, settings: AppSettings) -> None:
        self._write_json(self.settings_path, settings.model_dump(by_alias=True))

    def update_settings(self, **changes: Any) -> AppSettings:
        """Apply ``changes`` (field names) to the stored settings and save.

        Raises:
            InvalidInputError: Unknown field or invalid value.
        """
        current = self.load_settings().model_dump()
        unknown = set(changes) - set(current)
        if unknown:
            raise InvalidInputError(f"Unknown setting: {', '.join(sorted(unknown))}")
        current.update(changes)
        try:
            settings = AppSettings.model_validate(current)
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors())
            raise InvalidInputError(f"Invalid value for {fields}") from e
        self.save_settings(settings)
        return settings

    def reset_settings(self) -> AppSettings:
        if self.settings_path.exists():
            self.settings_path.unlink()
        return AppSettings()

    # Annotations

    def _load_all_annotations(self) -> Dict[str, List[Dict[str, Any]]]:
        data = self._read_json(self.annotations_path)
        return data if isinstance(data, dict) else {}

    def list_annotations(self, file_path: str) -> List[Annotation]:
        """Annotations for ``file_path`` in insertion order; invalid entries are skipped."""
        annotations = []
        for entry in self._load_all_annotations().get(file_path, []):
            try:
                annotations.append(Annotation.model_validate(entry))
            except ValidationError:
                logger.debug("Skipping invalid annotation for %s: %r", file_path, entry)
        return annotations

    def add_annotation(self, file_path: str, author: str, content: str,
                       line_number: int = 1) -> Annotation:
        """
        Attach a note to ``file_path``.

        Raises:
            InvalidInputError: If author or content is blank, or the line
                number is below 1.
        """
        if not (author or "").strip() or not (content or "").strip():
            raise InvalidInputError("Please provide both author name and annotation content.")
        if line_number < 1:
            raise InvalidInputError("Line number must be 1 or greater.")

        annotation = Annotation(
            line_number=line_number,
            author=author.strip(),
            content=content.strip(),
            file_path=file_path,
        )
        data = self._load_all_annotations()
        data.setdefault(file_path, []).append(annotation.model_dump(by_alias=True))
        self._write_json(self.annotations_path, data)
        return annotation

    def delete_annotation(self, file_path: str, annotation_id: str) -> bool:
        """Remove one annotation; returns False if it did not exist."""
        data = self._load_all_annotations()
        entries = data.get(file_path, [])
        remaining = [entry for entry in entries
                     if not (isinstance(entry, dict) and entry.get("id") == annotation_id)]
        if len(remaining) == len(entries):
            return False

        if remaining:
            data[file_path] = remaining
        else:
            data.pop(file_path, None)
        self._write_json(self.annotations_path, data)
        return True
