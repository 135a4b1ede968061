from __future__ import annotations
from typing import Dict, List, Literal, Tuple, Union
from typing_extensions import Annotated
from pydantic import BaseModel, ConfigDict, Discriminator, Field, JsonValue, Tag, field_validator, model_validator

from .predicate import PredicateList
from .primitives import (
    Angle, Asset, AnimationId, DocumentUUID, FilePath, Flag, HexColour, NonEmptyModel,
    NonEmptyStr, NonZeroNumber, Number, OffsetRange, PositiveInteger, PositiveNumber, RollOption,
    Slug, StrictModel, either, integer, unique_list,
)

# Enums
Ease = Literal[
    "easeInBack", "easeInBounce", "easeInCirc", "easeInCubic", "easeInElastic", "easeInExpo",
    "easeInOutBack", "easeInOutBounce", "easeInOutCirc", "easeInOutCubic", "easeInOutElastic",
    "easeInOutExpo", "easeInOutQuad", "easeInOutQuart", "easeInOutQuint", "easeInOutSine",
    "easeInQuad", "easeInQuart", "easeInQuint", "easeInSine",
    "easeOutBack", "easeOutBounce", "easeOutCirc", "easeOutCubic", "easeOutElastic", "easeOutExpo",
    "easeOutQuad", "easeOutQuart", "easeOutQuint", "easeOutSine",
]

TRIGGERS = (
    "attack-roll", "damage-roll", "place-template", "action", "toggle", "effect", "self-effect",
    "start-turn", "end-turn", "damage-taken", "saving-throw", "check", "skill-check", "flat-check",
    "initiative", "perception-check", "counteract-check", "modifiers-matter",
)
Trigger = Literal[
    "attack-roll", "damage-roll", "place-template", "action", "toggle", "effect", "self-effect",
    "start-turn", "end-turn", "damage-taken", "saving-throw", "check", "skill-check", "flat-check",
    "initiative", "perception-check", "counteract-check", "modifiers-matter",
]

PRESETS = ("onToken", "ranged", "melee", "template", "sound", "macro")
Preset = Literal["onToken", "ranged", "melee", "template", "sound", "macro"]

ShapeType = Literal["polygon", "rectangle", "circle", "ellipse", "roundedRect"]
Location = Literal["target", "source", "both"]

# -----------------------------
# Offsets / vectors
# -----------------------------

class Vector2(NonEmptyModel):
    x: NonZeroNumber = None
    y: NonZeroNumber = None

class Offset(NonEmptyModel):
    """Positional offset. Each dimension is a non-zero number or a `[min, max]` range to pick from."""
    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={"minProperties": 1, "anyOf": [{"required": ["x"]}, {"required": ["y"]}]},
    )

    x: either(number=NonZeroNumber, array=OffsetRange) = None
    y: either(number=NonZeroNumber, array=OffsetRange) = None
    flipX: Flag = None
    flipY: Flag = None

    @model_validator(mode="after")
    def _require_dimension(self):
        if self.x is None and self.y is None:
            raise ValueError("At least one offset dimension (`x` or `y`) must be specified.")
        return self

# Keys shared by every "place relative to something" option block
class _Placement(NonEmptyModel):
    offset: Offset = None
    randomOffset: Number = None
    gridUnits: Flag = None
    local: Flag = None

class AtLocationOptions(_Placement):
    cacheLocation: Flag = None

# -----------------------------
# Sound
# -----------------------------

class SoundEffect(StrictModel):
    type: NonEmptyStr
    intensity: PositiveNumber

class SoundData(StrictModel):
    file: Asset
    waitUntilFinished: Number = None
    atLocation: AtLocationOptions = None
    radius: PositiveNumber = None
    volume: PositiveNumber = None
    duration: PositiveNumber = None
    constrainedByWalls: Flag = None
    predicate: PredicateList = None
    default: Flag = None
    delay: NonZeroNumber = None
    muffledEffect: SoundEffect = None
    baseEffect: SoundEffect = None

SoundConfig = either(object=SoundData, array=unique_list(SoundData))

# -----------------------------
# Preset options
# -----------------------------

class AttachToOptions(_Placement):
    align: str = None
    edge: str = None
    bindVisibility: Flag = None
    bindAlpha: Flag = None
    bindScale: Flag = None
    bindElevation: Flag = None
    followRotation: Flag = None

class RotateTowardsOptions(_Placement):
    rotationOffset: Number = None
    cacheLocation: Flag = None
    attachTo: Flag = None

class StretchToOptions(_Placement):
    cacheLocation: Flag = None
    attachTo: Flag = None
    onlyX: Flag = None
    tiling: Flag = None
    requiresLineOfSight: Flag = None
    hideLineOfSight: Flag = None

class BounceOptions(NonEmptyModel):
    file: Asset
    sound: SoundConfig = None

class PresetOptions(NonEmptyModel):
    """Placement and attachment of the effect relative to its source/targets."""
    attachTo: either(boolean=Flag, object=AttachToOptions) = None
    atLocation: either(boolean=Flag, object=AtLocationOptions) = None
    bounce: BounceOptions = None
    location: Location = None
    rotateTowards: either(boolean=Flag, object=RotateTowardsOptions) = None
    stretchTo: StretchToOptions = None
    templateAsOrigin: Flag = None
    targets: Annotated[List[str], Field(min_length=1)] = None

# -----------------------------
# Timing / transforms
# -----------------------------

class EasingOptions(StrictModel):
    ease: Ease = None
    delay: PositiveNumber = None

class FadeOptions(EasingOptions):
    value: NonZeroNumber

class MoveTowardsOptions(EasingOptions):
    target: either(object=Vector2, string=str)

class RangeOptions(StrictModel):
    min: NonZeroNumber
    max: Number = None

class SizeOptions(StrictModel):
    value: PositiveNumber
    gridUnits: Flag = None

class ScaleXY(StrictModel):
    x: Number
    y: Number

class ScaleOptions(StrictModel):
    min: either(number=Number, object=ScaleXY)
    max: Number = None

class ScaleToObjectOptions(StrictModel):
    value: PositiveNumber
    uniform: Flag = None
    considerTokenScale: Flag = None

class SpriteOffset(StrictModel):
    offset: Offset
    gridUnits: Flag = None
    local: Flag = None

class PersistOptions(NonEmptyModel):
    value: Flag = None
    persistTokenPrototype: Flag = None

class RepeatOptions(StrictModel):
    model_config = ConfigDict(extra="forbid", json_schema_extra={"dependentRequired": {"delayMax": ["delayMin"]}})

    count: Annotated[Number, Field(ge=1)]
    delayMin: Number = None
    delayMax: PositiveNumber = None

    @model_validator(mode="after")
    def _validate(self):
        if self.delayMax is not None:
            if self.delayMin is None:
                raise ValueError("`delayMin` is required if `delayMax` is defined.")
            if self.delayMax <= self.delayMin:
                raise ValueError("`delayMax` must be greater than `delayMin`.")
        return self

class TemplateOptions(StrictModel):
    gridSize: PositiveNumber
    startPoint: Number
    endPoint: Number

# -----------------------------
# Filters (discriminated on `type`)
# -----------------------------

class ColorMatrixOptions(NonEmptyModel):
    hue: Angle = Field(None, description="The hue, in degrees.")
    brightness: Number = Field(None, description="The value of the brightness (0 to 1, where 0 is black).")
    contrast: Number = Field(None, description="The value of the contrast (0 to 1).")
    saturate: Number = Field(
        None,
        description="The value of the saturation amount. Negative numbers cause it to become desaturated (-1 to 1)",
    )

class GlowOptions(NonEmptyModel):
    distance: PositiveNumber = Field(None, description="The distance of the glow, in pixels.")
    outerStrength: PositiveNumber = Field(None, description="The strength of the glow outward from the edge of the sprite.")
    innerStrength: PositiveNumber = Field(None, description="The strength of the glow inward from the edge of the sprite.")
    color: HexColour = Field(None, description="The color of the glow")
    quality: Annotated[Number, Field(ge=0, le=1)] = Field(
        None, description="Describes the quality of the glow (0 to 1). A higher number is less performant.",
    )
    knockout: Flag = Field(
        None, description="Toggle to hide the contents and only show the glow (effectively hides the sprite).",
    )

class BlurOptions(NonEmptyModel):
    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "minProperties": 1,
            "not": {"required": ["blur"], "anyOf": [{"required": ["blurX"]}, {"required": ["blurY"]}]},
        },
    )

    # blurX/blurY are validated before `blur`
    strength: PositiveNumber = Field(None, description="The strength of the filter.")
    blurX: PositiveNumber = Field(None, description="The strength of the blur on the horizontal axis.")
    blurY: PositiveNumber = Field(None, description="The strength of the blur on the vertical axis.")
    blur: PositiveNumber = Field(
        None, description="Sets the strength of the blur in both the horizontal and vertical axes simultaneously.",
    )
    quality: PositiveInteger = Field(None, description="Quality of the filter.")
    resolution: PositiveNumber = Field(None, description="Sets the resolution of the blur filter.")
    kernelSize: PositiveInteger = Field(None, description="Effectively how many passes the blur goes through.")

    @field_validator("blur")
    @classmethod
    def _blur_excludes_axes(cls, v, info):
        if info.data.get("blurX") is not None or info.data.get("blurY") is not None:
            raise ValueError("`blur` cannot be used at the same time as `blurX` or `blurY`.")
        return v

class NoiseOptions(NonEmptyModel):
    noise: Annotated[Number, Field(gt=0, le=1)] = Field(None, description="The noise intensity.")
    seed: Number = Field(None, description="A random seed for the noise generation (default is `Math.random()`).")

class ColorMatrixFilter(StrictModel):
    type: Literal["ColorMatrix"]
    options: ColorMatrixOptions

class GlowFilter(StrictModel):
    type: Literal["Glow"]
    options: GlowOptions

class BlurFilter(StrictModel):
    type: Literal["Blur"]
    options: BlurOptions

class NoiseFilter(StrictModel):
    type: Literal["Noise"]
    options: NoiseOptions = None

class ClipFilter(StrictModel):
    type: Literal["Clip"]

Filter = Annotated[
    Union[ColorMatrixFilter, GlowFilter, BlurFilter, NoiseFilter, ClipFilter],
    Field(discriminator="type"),
]

# -----------------------------
# Property animation
# -----------------------------

class LoopPropertyOptions(StrictModel):
    duration: Number
    from_: Number = Field(None, alias="from")
    to: Number = None
    values: unique_list(Number) = None
    loops: PositiveInteger = None
    pingPong: Flag = None
    delay: PositiveNumber = None
    ease: Ease = None
    fromEnd: Flag = None
    gridUnits: Flag = None

class LoopProperty(StrictModel):
    target: str
    property: str
    options: LoopPropertyOptions

class AnimatePropertyOptions(StrictModel):
    duration: Number
    from_: Number = Field(alias="from")
    to: Number
    delay: Number = None
    ease: Ease = None
    fromEnd: Flag = None
    gridUnits: Flag = None

class AnimateProperty(StrictModel):
    target: str
    property: str
    options: AnimatePropertyOptions

# -----------------------------
# Shapes
# -----------------------------

class ShapeOffset(StrictModel):
    x: Number = None
    y: Number = None
    gridUnits: Flag = None

Point = either(array=Tuple[Number, Number], object=Vector2)
Colour = either(string=HexColour, number=Number)

class Shape(NonEmptyModel):
    type: ShapeType
    radius: PositiveNumber = None
    width: PositiveNumber = None
    height: PositiveNumber = None
    points: unique_list(Point) = None
    gridUnits: Flag = None
    name: str = None
    fillColor: Colour = None
    fillAlpha: PositiveNumber = None
    alpha: PositiveNumber = None
    lineSize: PositiveNumber = None
    lineColor: Colour = None
    offset: ShapeOffset = None
    isMask: Flag = None

# -----------------------------
# Effect options
# -----------------------------

class EffectOptions(NonEmptyModel):
    """Options applied to one effect. Empty objects are rejected since they configure nothing."""
    sound: SoundConfig = None
    preset: PresetOptions = None
    locally: Flag = None
    id: AnimationId = None
    name: NonEmptyStr = None
    syncGroup: str = None
    randomRotation: Flag = None
    randomizeMirrorX: Flag = None
    randomizeMirrorY: Flag = None
    mirrorX: Flag = None
    mirrorY: Flag = None
    remove: either(string=Slug, array=unique_list(Slug)) = None
    tieToDocuments: Flag = None
    belowTokens: Flag = None
    waitUntilFinished: NonZeroNumber = None
    zIndex: Number = None
    duration: PositiveNumber = Field(None, description="The duration of the animationDataObject in milliseconds.")
    tint: HexColour = Field(None, description="A hexadecimal colour code to give the animationDataObject a certain tint.")
    rotate: Angle = Field(None, description="An angle in degrees (°) to rotate the animationDataObject.")
    opacity: Annotated[Number, Field(gt=0, lt=1)] = Field(
        None, description="An opacity scaler from 0 to 1 (exclusive).",
    )
    mask: Flag = None
    fadeIn: either(number=NonZeroNumber, object=FadeOptions) = None
    fadeOut: either(number=NonZeroNumber, object=FadeOptions) = None
    wait: either(number=Number, object=RangeOptions) = None
    delay: either(number=Number, object=RangeOptions) = None
    size: either(number=Number, object=SizeOptions) = None
    spriteRotation: Angle = None
    scale: either(number=Number, object=ScaleOptions) = None
    scaleToObject: either(number=Number, object=ScaleToObjectOptions) = None
    spriteOffset: SpriteOffset = None
    persist: either(boolean=Flag, object=PersistOptions) = None
    repeats: either(number=integer(ge=1), object=RepeatOptions) = None
    moveTowards: MoveTowardsOptions = None
    filter: Filter = None
    missed: Flag = None
    anchor: Vector2 = None
    template: TemplateOptions = None
    loopProperty: unique_list(LoopProperty) = None
    animateProperty: unique_list(AnimateProperty) = None
    shape: either(object=Shape, array=unique_list(Shape)) = None

# -----------------------------
# Animation objects
# -----------------------------

Triggers = either(string=Trigger, array=Annotated[List[Trigger], Field(min_length=1)])
Files = either(string=Asset, array=List[Asset])

class ReferenceObject(StrictModel):
    """A fully specified animation: what triggers it, how it is placed and which file it plays."""
    overrides: unique_list(RollOption) = None
    trigger: Triggers
    preset: Preset
    file: Files
    default: Flag = None
    predicate: PredicateList = None
    options: EffectOptions = None
    reference: RollOption = None

class AnimationObject(NonEmptyModel):
    """
    An animation entry. Every key is optional: entries nested in `contents` inherit what they omit
    from their parent, and top-level entries may be completed through `reference`.
    """
    overrides: unique_list(RollOption) = None
    trigger: Triggers = None
    preset: Preset = None
    file: Files = None
    default: Flag = None
    predicate: PredicateList = None
    options: EffectOptions = None
    reference: RollOption = None
    contents: unique_list("AnimationObject") = None

AnimationObjects = unique_list(AnimationObject)

# Roll option -> alias roll option, or a list of animation objects. `_tokenImages` is handled separately.
Animations = Dict[RollOption, either(string=RollOption, array=AnimationObjects)]

# -----------------------------
# Token images
# -----------------------------

RuleTuple3 = Tuple[Slug, FilePath, PositiveNumber]
RuleTuple4 = Tuple[Slug, FilePath, PositiveNumber, FilePath]
RuleTuple5 = Tuple[Slug, FilePath, PositiveNumber, FilePath, PositiveNumber]

def _rule_tuple_length(value) -> str | None:
    if isinstance(value, (list, tuple)) and 3 <= len(value) <= 5:
        return str(len(value))
    return None

RuleTuple = Annotated[
    Union[
        Annotated[RuleTuple3, Tag("3")],
        Annotated[RuleTuple4, Tag("4")],
        Annotated[RuleTuple5, Tag("5")],
    ],
    Discriminator(
        _rule_tuple_length,
        custom_error_type="too_small",
        custom_error_message="Rule tuples take 3 to 5 items: [slug, file, scale, file?, scale?].",
    ),
]

class TokenImageAnimation(NonEmptyModel):
    duration: PositiveNumber = None
    transition: NonEmptyStr = None
    easing: Ease = None
    name: NonEmptyStr = None

class RingSubject(NonEmptyModel):
    texture: FilePath
    scale: Number = None

class RingColors(NonEmptyModel):
    background: str = None
    ring: str = None

class TokenRing(NonEmptyModel):
    subject: RingSubject
    colors: RingColors = None

class TokenImageRule(StrictModel):
    """A token-image rule element; the generic rule-element keys accept any JSON value."""
    key: JsonValue = None
    label: JsonValue = None
    slug: JsonValue = None
    predicate: JsonValue = None
    priority: JsonValue = None
    ignored: JsonValue = None
    requiresInvestment: JsonValue = None
    requiresEquipped: JsonValue = None
    removeUponCreate: JsonValue = None
    value: FilePath
    scale: Number = None
    tint: str = None
    alpha: Number = None
    animation: TokenImageAnimation
    ring: TokenRing = None

class TokenImageEntry(StrictModel):
    name: NonEmptyStr
    requires: NonEmptyStr
    uuid: DocumentUUID
    rules: unique_list(either(array=RuleTuple, object=TokenImageRule))

class TokenImages(BaseModel):
    """Token-image swap rules. Only `_tokenImages` is read; sibling animation keys are ignored."""
    model_config = ConfigDict(extra="ignore")
    tokenImages: unique_list(TokenImageEntry) = Field(alias="_tokenImages")

AnimationObject.model_rebuild()
EffectOptions.model_rebuild()
TokenImages.model_rebuild()
