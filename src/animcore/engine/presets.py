from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union
import itertools
import logging
import random
import re

from pydantic import BaseModel

from .primitives import SEQUENCER_DB_ENTRY_RE
from .schema_models import ReferenceObject

logger = logging.getLogger(__name__)

_DB_ENTRY = re.compile(SEQUENCER_DB_ENTRY_RE)
_ALTERNATION = re.compile(r"\{([^{}]+)\}")

# Template shapes drawn as a line from the origin; the effect is stretched along them
STRETCHED_TEMPLATES = {"ray", "cone"}


class EffectLike(Protocol):
    """The slice of the effect-sequencing API the presets drive."""

    def file(self, files: List[str]) -> "EffectLike": ...

    def attach_to(self, target: Any, options: Dict[str, Any]) -> "EffectLike": ...

    def stretch_to(self, target: Any, options: Dict[str, Any]) -> "EffectLike": ...


class SequenceLike(Protocol):
    def effect(self) -> EffectLike: ...


def expand_entry(entry: str) -> List[str]:
    """
    Expand brace alternations in a database entry: "jb2a.{fire,ice}.bolt" -> ["jb2a.fire.bolt", "jb2a.ice.bolt"].
    Several groups expand to their cartesian product. File paths are returned unchanged.
    """
    if not _DB_ENTRY.fullmatch(entry):
        return [entry]
    parts = _ALTERNATION.split(entry)
    # split() alternates literal text and captured groups
    choices = [[part] if i % 2 == 0 else part.split(",") for i, part in enumerate(parts)]
    return ["".join(combo) for combo in itertools.product(*choices)]


def parse_files(file: Union[str, List[str]]) -> List[str]:
    files = [file] if isinstance(file, str) else list(file)
    out: List[str] = []
    for f in files:
        out.extend(expand_entry(f))
    return out


def _as_dict(options: Any) -> Dict[str, Any]:
    if isinstance(options, BaseModel):
        return options.model_dump(exclude_none=True, by_alias=True)
    return dict(options)


def parse_offsets(options: Any, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """
    Sequencer keyword options for a preset block (`True`, an options object/mapping, or None).
    Offset ranges `[a, b]` are resolved to a value between a and b.
    """
    if options is None or options is True:
        return {}
    data = _as_dict(options)
    offset = data.pop("offset", None)
    if offset:
        rng = rng or random.Random()
        resolved: Dict[str, Any] = {}
        for axis in ("x", "y"):
            value = offset.get(axis)
            if isinstance(value, (list, tuple)):
                low, high = sorted(value)
                value = rng.uniform(low, high)
            if value is not None:
                resolved[axis] = value
        for flag in ("flipX", "flipY"):
            if offset.get(flag):
                resolved[flag] = True
        data["offset"] = resolved
    return data


def _template_kind(target: Any) -> Optional[str]:
    if isinstance(target, dict):
        return target.get("t")
    return getattr(target, "t", None)


def template(
    sequence: SequenceLike,
    animation: ReferenceObject,
    targets: Iterable[Any],
    rng: Optional[random.Random] = None,
) -> SequenceLike:
    """
    "template" preset: one effect per placed template, attached to it and stretched along it when
    `preset.stretchTo` is configured or the template is a ray or cone.
    """
    if animation.file is None:
        raise ValueError("template preset requires a resolved `file`")
    preset = animation.options.preset if animation.options else None
    files = parse_files(animation.file)

    for target in targets:
        effect = sequence.effect().file(files).attach_to(
            target, parse_offsets(preset.attachTo if preset else None, rng),
        )
        stretch_to = preset.stretchTo if preset else None
        if stretch_to is not None or _template_kind(target) in STRETCHED_TEMPLATES:
            options = parse_offsets(stretch_to, rng)
            options["attachTo"] = True
            effect.stretch_to(target, options)
        logger.debug("template effect %s on %r", files, target)

    return sequence
