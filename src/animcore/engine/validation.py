from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union
import logging

from pydantic import TypeAdapter, ValidationError

from .predicate import predicate_kind
from .primitives import RollOption, json_kind
from .schema_models import AnimationObjects, TokenImages

logger = logging.getLogger(__name__)

TOKEN_IMAGES_KEY = "_tokenImages"

PathItem = Union[str, int]


class IssueKind(str, Enum):
    INVALID_TYPE = "invalid_type"
    INVALID_LITERAL = "invalid_literal"
    INVALID_STRING = "invalid_string"
    UNRECOGNIZED_KEYS = "unrecognized_keys"
    INVALID_UNION = "invalid_union"
    TOO_SMALL = "too_small"
    TOO_BIG = "too_big"
    CUSTOM = "custom"


# pydantic error type -> issue kind; anything unlisted is a refinement failure (custom)
_KIND_BY_ERROR_TYPE: Dict[str, IssueKind] = {
    "missing": IssueKind.INVALID_TYPE,
    "invalid_type": IssueKind.INVALID_TYPE,
    "model_type": IssueKind.INVALID_TYPE,
    "model_attributes_type": IssueKind.INVALID_TYPE,
    "dict_type": IssueKind.INVALID_TYPE,
    "list_type": IssueKind.INVALID_TYPE,
    "tuple_type": IssueKind.INVALID_TYPE,
    "string_type": IssueKind.INVALID_TYPE,
    "float_type": IssueKind.INVALID_TYPE,
    "int_type": IssueKind.INVALID_TYPE,
    "int_from_float": IssueKind.INVALID_TYPE,
    "bool_type": IssueKind.INVALID_TYPE,
    "literal_error": IssueKind.INVALID_LITERAL,
    "enum": IssueKind.INVALID_LITERAL,
    "invalid_string": IssueKind.INVALID_STRING,
    "string_pattern_mismatch": IssueKind.INVALID_STRING,
    "extra_forbidden": IssueKind.UNRECOGNIZED_KEYS,
    "invalid_union": IssueKind.INVALID_UNION,
    "union_tag_invalid": IssueKind.INVALID_UNION,
    "union_tag_not_found": IssueKind.INVALID_UNION,
    "too_short": IssueKind.TOO_SMALL,
    "too_small": IssueKind.TOO_SMALL,
    "string_too_short": IssueKind.TOO_SMALL,
    "greater_than": IssueKind.TOO_SMALL,
    "greater_than_equal": IssueKind.TOO_SMALL,
    "too_long": IssueKind.TOO_BIG,
    "string_too_long": IssueKind.TOO_BIG,
    "less_than": IssueKind.TOO_BIG,
    "less_than_equal": IssueKind.TOO_BIG,
}


@dataclass(frozen=True)
class Issue:
    kind: IssueKind
    path: Tuple[PathItem, ...]
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "path": list(self.path), "message": self.message}


@dataclass
class ValidationResult:
    success: bool
    issues: List[Issue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True}
        return {"success": False, "issues": [i.to_dict() for i in self.issues]}


class IssueSink:
    """Collects issues reported by consistency checks; paths are relative to the checked array."""

    def __init__(self) -> None:
        self.issues: List[Issue] = []

    def add(self, message: str, path: Sequence[PathItem] = (), kind: IssueKind = IssueKind.CUSTOM) -> None:
        self.issues.append(Issue(kind=kind, path=tuple(path), message=message))


# Receives the full (structurally valid) list of animation objects of one top-level key
ConsistencyCheck = Callable[[List[Any], IssueSink], None]


def _union_tags(value: Any) -> set:
    """Labels pydantic may insert into an error location for a union validating `value`."""
    tags = {json_kind(value), predicate_kind(value)}
    if isinstance(value, dict) and isinstance(value.get("type"), str):
        tags.add(value["type"])
    if isinstance(value, (list, tuple)):
        tags.add(str(len(value)))
    tags.discard(None)
    return tags


def reconstruct_path(loc: Sequence[PathItem], data: Any, error_type: str) -> Tuple[PathItem, ...]:
    """
    Map a pydantic error location onto the input document.

    pydantic inserts union branch labels ("number", "Glow", "AndPredicate", ...) into locations. A step equal
    to the label for the value at that point is dropped, even when the value also has a key of that
    name; only the final step may then address such a key. Other steps are kept when they address a
    real key or index.
    """
    path: List[PathItem] = []
    current = data
    last = len(loc) - 1
    for i, step in enumerate(loc):
        is_tag = isinstance(step, str) and step in _union_tags(current)
        if is_tag and i != last:
            continue
        if isinstance(current, dict) and isinstance(step, str) and step in current:
            path.append(step)
            current = current[step]
        elif isinstance(current, (list, tuple)) and isinstance(step, int) and 0 <= step < len(current):
            path.append(step)
            current = current[step]
        elif i == last and error_type == "missing" and not is_tag:
            path.append(step)
    return tuple(path)


def _message(err: Dict[str, Any]) -> str:
    # Refinements raise ValueError; report their text without pydantic's "Value error, " prefix
    error = (err.get("ctx") or {}).get("error")
    if err["type"] == "value_error" and error is not None:
        return str(error)
    if err["type"] == "missing":
        return "Required"
    return err["msg"]


def issues_from_error(exc: ValidationError, data: Any, prefix: Sequence[PathItem] = ()) -> List[Issue]:
    """Translate a pydantic ValidationError raised for `data` into issues rooted at `prefix`."""
    issues: List[Issue] = []
    for err in exc.errors():
        kind = _KIND_BY_ERROR_TYPE.get(err["type"], IssueKind.CUSTOM)
        path = tuple(prefix) + reconstruct_path(err["loc"], data, err["type"])
        issues.append(Issue(kind=kind, path=path, message=_message(err)))
    return issues


RollOptionAdapter: TypeAdapter = TypeAdapter(RollOption)
AnimationObjectsAdapter: TypeAdapter = TypeAdapter(AnimationObjects)
TokenImagesAdapter: TypeAdapter = TypeAdapter(TokenImages)


class AnimationValidator:
    """
    Validates a whole animations document.

    Each top-level key is validated on its own with the narrowest applicable schema instead of
    running one big union over the document, so a mistake in one entry is reported precisely and
    does not hide problems in the others. All issues are collected; nothing is raised for bad data.
    """

    def __init__(self, consistency_checks: Sequence[ConsistencyCheck] = ()):
        self.consistency_checks = list(consistency_checks)

    def validate(self, data: Any) -> ValidationResult:
        if not isinstance(data, dict):
            received = json_kind(data) or type(data).__name__
            issue = Issue(
                kind=IssueKind.INVALID_TYPE,
                path=(),
                message=f"JSON must represent an object, received {received}.",
            )
            return ValidationResult(success=False, issues=[issue])

        issues: List[Issue] = []
        for key, value in data.items():
            if key == TOKEN_IMAGES_KEY:
                issues.extend(self._validate_token_images(data))
            else:
                issues.extend(self._validate_entry(key, value))

        if issues:
            logger.info("Animation data has %d issue(s) across %d key(s)", len(issues), len(data))
        else:
            logger.debug("Animation data valid (%d key(s))", len(data))
        return ValidationResult(success=not issues, issues=issues)

    def _validate_token_images(self, document: Dict[str, Any]) -> List[Issue]:
        # The token-images schema is self-contained; its issues are already rooted at the document
        try:
            TokenImagesAdapter.validate_python(document)
        except ValidationError as e:
            return issues_from_error(e, document)
        return []

    def _validate_entry(self, key: Any, value: Any) -> List[Issue]:
        issues: List[Issue] = []
        try:
            RollOptionAdapter.validate_python(key)
        except ValidationError:
            issues.append(Issue(kind=IssueKind.INVALID_STRING, path=(key,), message="Must be a valid roll option."))

        if isinstance(value, str):
            # Alias of another roll option
            try:
                RollOptionAdapter.validate_python(value)
            except ValidationError as e:
                issues.extend(issues_from_error(e, value, prefix=(key,)))
        else:
            try:
                AnimationObjectsAdapter.validate_python(value)
            except ValidationError as e:
                issues.extend(issues_from_error(e, value, prefix=(key,)))
            else:
                issues.extend(self._run_consistency_checks(key, value))

        logger.debug("Validated key %r: %d issue(s)", key, len(issues))
        return issues

    def _run_consistency_checks(self, key: str, entries: List[Any]) -> List[Issue]:
        sink = IssueSink()
        for check in self.consistency_checks:
            check(entries, sink)
        return [Issue(kind=i.kind, path=(key,) + i.path, message=i.message) for i in sink.issues]


_default_validator = AnimationValidator()


def validate_animation_data(data: Any, consistency_checks: Optional[Sequence[ConsistencyCheck]] = None) -> ValidationResult:
    """
    Validate parsed animation JSON.

    Returns ``ValidationResult(success=True)`` or a failed result carrying every issue found, each
    with the path from the document root to the offending value.
    """
    validator = _default_validator if consistency_checks is None else AnimationValidator(consistency_checks)
    return validator.validate(data)
