"""
Markup document lifecycle.

Owns the field-level rules for the Active -> Active (update) and
Active -> Deleted (soft delete) transitions and the stamping done on create.
The manager never touches storage and never decides access; callers pass
in a profile that the permission handlers have already allowed and persist
the records it returns.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ..interface.markup_documents import DocumentLocation, MarkupDocumentCreate, MarkupDocumentUpdate
from ..interface.profiles import ProfileGet

logger = logging.getLogger(__name__)

REQUIRED_CREATE_FIELDS = ("title", "original_blueprint_url", "original_blueprint_filename")

STRING_FIELDS = frozenset({
    "title", "description", "original_blueprint_url", "original_blueprint_filename",
    "preview_image_url", "location",
})

# Never taken from a client patch
IMMUTABLE_FIELDS = frozenset({
    "id", "created_by", "site_id", "location", "is_deleted", "created_at", "updated_at",
})


class DocumentValidationError(Exception):
    """Payload problems. `errors` lists every violation, never just the first."""

    def __init__(self, errors: List[Dict[str, str]]):
        super().__init__("Validation failed")
        self.errors = errors


def _error(field: str, message: str) -> Dict[str, str]:
    return {"field": field, "message": message}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def markup_data_errors(markup_data: Any) -> List[Dict[str, str]]:
    if not isinstance(markup_data, list):
        return [_error("markup_data", "must be a list of annotation objects")]

    return [
        _error(f"markup_data[{index}]", "must be an object")
        for index, item in enumerate(markup_data)
        if not isinstance(item, dict)
    ]


def type_errors(values: Dict[str, Any]) -> List[Dict[str, str]]:
    """Type and range problems of the scalar fields present in `values`. None is always accepted."""
    errors = []
    for field, value in values.items():
        if value is None:
            continue
        if field in STRING_FIELDS and not isinstance(value, str):
            errors.append(_error(field, "must be a string"))
        elif field == "file_size":
            if isinstance(value, bool) or not isinstance(value, int):
                errors.append(_error(field, "must be an integer"))
            elif value < 0:
                errors.append(_error(field, "must not be negative"))
    return errors


def _patch_values(patch: MarkupDocumentUpdate | Dict[str, Any]) -> Dict[str, Any]:
    if isinstance(patch, MarkupDocumentUpdate):
        return patch.model_dump(exclude_unset=True)
    return dict(patch)


def _updatable(values: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value for key, value in values.items()
        if key not in IMMUTABLE_FIELDS and key in MarkupDocumentUpdate.model_fields
    }


class MarkupLifecycleManager:

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def validate_create(self, payload: MarkupDocumentCreate) -> List[Dict[str, str]]:
        values = payload.model_dump()
        errors = [
            _error(field, "is required")
            for field in REQUIRED_CREATE_FIELDS
            if _is_blank(values[field])
        ]

        errors.extend(type_errors(values))

        if payload.markup_data is not None:
            errors.extend(markup_data_errors(payload.markup_data))

        if isinstance(payload.location, str) and payload.location not in {l.value for l in DocumentLocation}:
            errors.append(_error("location", "must be one of: personal, shared"))

        return errors

    def create(self, profile: ProfileGet, payload: MarkupDocumentCreate) -> Dict[str, Any]:
        """Validate a create payload and return the record to insert.

        Ownership fields always come from the profile. Raises
        DocumentValidationError listing all problems at once.
        """
        errors = self.validate_create(payload)
        if errors:
            raise DocumentValidationError(errors)

        markup_data = payload.markup_data if payload.markup_data is not None else []
        now = self.clock()

        record = {
            "title": payload.title.strip(),
            "description": payload.description,
            "original_blueprint_url": payload.original_blueprint_url,
            "original_blueprint_filename": payload.original_blueprint_filename,
            "markup_data": markup_data,
            "preview_image_url": payload.preview_image_url,
            "location": payload.location or DocumentLocation.PERSONAL.value,
            "file_size": payload.file_size or 0,
            "markup_count": len(markup_data),
            "created_by": profile.id,
            "site_id": profile.site_id,
            "is_deleted": False,
            "created_at": now,
            "updated_at": now,
        }

        logger.info(f"Creating {record['location']} markup document for profile {profile.id}")
        return record

    def validate_update(self, patch: MarkupDocumentUpdate | Dict[str, Any]) -> List[Dict[str, str]]:
        """Problems with a patch. Needs no target, so callers run it before loading one."""
        changes = _updatable(_patch_values(patch))

        errors = []
        if "title" in changes and _is_blank(changes["title"]):
            errors.append(_error("title", "must not be empty"))

        errors.extend(type_errors(changes))

        if "markup_data" in changes:
            errors.extend(markup_data_errors(changes["markup_data"]))

        return errors

    def update(self, profile: ProfileGet, target: Any, patch: MarkupDocumentUpdate | Dict[str, Any]) -> Dict[str, Any]:
        """Return the sanitized column changes for an allowed update of `target`.

        Fields the client may not change are dropped without error.
        """
        errors = self.validate_update(patch)
        if errors:
            raise DocumentValidationError(errors)

        values = _patch_values(patch)
        dropped = sorted(IMMUTABLE_FIELDS.intersection(values))
        if dropped:
            logger.debug(f"Ignoring immutable fields {dropped} in update of {target.id}")
        changes = _updatable(values)

        if "title" in changes:
            changes["title"] = changes["title"].strip()
        if "markup_data" in changes:
            changes["markup_count"] = len(changes["markup_data"])
        if "file_size" in changes and changes["file_size"] is None:
            changes["file_size"] = 0

        changes["updated_at"] = self.clock()

        logger.info(f"Updating markup document {target.id} by profile {profile.id}")
        return changes

    def soft_delete(self, profile: ProfileGet, target: Any) -> Dict[str, Any]:
        logger.info(f"Soft-deleting markup document {target.id} by profile {profile.id}")
        return {"is_deleted": True, "updated_at": self.clock()}
