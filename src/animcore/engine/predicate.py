from __future__ import annotations
from typing import Any, Dict, Tuple, Union
from typing_extensions import Annotated
from pydantic import BaseModel, Discriminator, Field, Tag

from .primitives import Number, RollOption, StrictModel, either, unique_list

# Second operand of a comparison: another roll option or a number
Operand = either(string=RollOption, number=Number)
Comparison = Tuple[RollOption, Operand]
Operands = unique_list("Predicate")


# Comparisons
class EqPredicate(StrictModel):
    eq: Comparison

class GtPredicate(StrictModel):
    gt: Comparison

class GtePredicate(StrictModel):
    gte: Comparison

class LtPredicate(StrictModel):
    lt: Comparison

class LtePredicate(StrictModel):
    lte: Comparison


# Combinators (non-empty, duplicate-free operand lists)
class AndPredicate(StrictModel):
    and_: Operands = Field(alias="and")

class OrPredicate(StrictModel):
    or_: Operands = Field(alias="or")

class XorPredicate(StrictModel):
    xor: Operands

class NandPredicate(StrictModel):
    nand: Operands

class NorPredicate(StrictModel):
    nor: Operands

class IffPredicate(StrictModel):
    iff: Operands

class NotPredicate(StrictModel):
    not_: "Predicate" = Field(alias="not")

class IfPredicate(StrictModel):
    if_: "Predicate" = Field(alias="if")
    then: "Predicate"


# Operator key -> model. `if` is paired with `then`, either key selects IfPredicate.
OPERATORS: Dict[str, type[StrictModel]] = {
    "eq": EqPredicate, "gt": GtPredicate, "gte": GtePredicate, "lt": LtPredicate, "lte": LtePredicate,
    "and": AndPredicate, "or": OrPredicate, "xor": XorPredicate, "nand": NandPredicate,
    "nor": NorPredicate, "iff": IffPredicate, "not": NotPredicate,
    "if": IfPredicate, "then": IfPredicate,
}


def predicate_kind(value: Any) -> str | None:
    """Pick the predicate variant from the operator key, so only that variant reports issues."""
    if isinstance(value, str):
        return "RollOption"
    if isinstance(value, BaseModel):
        return type(value).__name__
    if isinstance(value, dict):
        for key in value:
            model = OPERATORS.get(key)
            if model is not None:
                return model.__name__
    return None


Predicate = Annotated[
    Union[
        Annotated[RollOption, Tag("RollOption")],
        Annotated[EqPredicate, Tag("EqPredicate")],
        Annotated[GtPredicate, Tag("GtPredicate")],
        Annotated[GtePredicate, Tag("GtePredicate")],
        Annotated[LtPredicate, Tag("LtPredicate")],
        Annotated[LtePredicate, Tag("LtePredicate")],
        Annotated[AndPredicate, Tag("AndPredicate")],
        Annotated[OrPredicate, Tag("OrPredicate")],
        Annotated[XorPredicate, Tag("XorPredicate")],
        Annotated[NotPredicate, Tag("NotPredicate")],
        Annotated[NandPredicate, Tag("NandPredicate")],
        Annotated[NorPredicate, Tag("NorPredicate")],
        Annotated[IfPredicate, Tag("IfPredicate")],
        Annotated[IffPredicate, Tag("IffPredicate")],
    ],
    Discriminator(
        predicate_kind,
        custom_error_type="invalid_union",
        custom_error_message=(
            "Predicate must be a roll option or an object with one of the operators "
            "eq, gt, gte, lt, lte, and, or, xor, not, nand, nor, if/then, iff."
        ),
    ),
]

# Predicate lists as used on animation objects and sounds
PredicateList = unique_list(Predicate)

for _model in (AndPredicate, OrPredicate, XorPredicate, NandPredicate, NorPredicate,
               IffPredicate, NotPredicate, IfPredicate):
    _model.model_rebuild()

