"""Enumerations shared across the table, aggregation and ingestion layers."""

from enum import Enum

from spreadsheet_table.utils.exceptions import InvalidOperationError


class CellKind(str, Enum):
    """Kind of value a cell currently holds."""

    EMPTY = "empty"
    NUMBER = "number"
    TEXT = "text"


class Operation(str, Enum):
    """Aggregate operation applied to the numeric cells of a range."""

    SUM = "sum"
    PRODUCT = "product"
    MEAN = "mean"

    @classmethod
    def parse(cls, name: "str | Operation") -> "Operation":
        """Resolve an operation from its name.

        Accepts the enum itself, the canonical names ("Sum", "Prod", "Mean")
        in any case, and the aliases "product", "average" and "avg".

        Raises:
            InvalidOperationError: If the name is not recognized.
        """
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            raise InvalidOperationError(repr(name))
        key = name.strip().lower()
        try:
            return _OPERATION_ALIASES[key]
        except KeyError:
            raise InvalidOperationError(name) from None


_OPERATION_ALIASES: dict[str, Operation] = {
    "sum": Operation.SUM,
    "prod": Operation.PRODUCT,
    "product": Operation.PRODUCT,
    "mean": Operation.MEAN,
    "average": Operation.MEAN,
    "avg": Operation.MEAN,
}


class EmptyRangePolicy(str, Enum):
    """What an aggregation does when its range holds no numeric cells.

    STRICT raises for every operation. PERMISSIVE returns the identity of
    the fold (0.0 for sum, 1.0 for product); mean still raises since it
    would divide by zero.
    """

    STRICT = "strict"
    PERMISSIVE = "permissive"


class RaggedRowPolicy(str, Enum):
    """How the delimited reader reconciles rows of differing lengths."""

    PAD = "pad"
    TRIM = "trim"
    REJECT = "reject"
