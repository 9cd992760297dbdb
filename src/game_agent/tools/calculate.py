"""
Statistical operations over fetched game data.

Every operation returns the value together with a human-readable formula and
a details string so the UI can show how a number was obtained. Null, NaN and
non-numeric entries are ignored by every operation except `count`, which
counts items as given.
"""
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from pydantic import BaseModel

LIST_OPERATIONS = ("average", "sum", "count", "min", "max")
GROUP_OPERATIONS = ("compare", "group_average")


class CalculationOutput(BaseModel):
    result: Union[float, int, Dict[str, float]]
    formula: str
    details: str


def is_valid_number(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def valid_numbers(values: Sequence[Any]) -> List[float]:
    return [v for v in values if is_valid_number(v)]


def _round2(value: float) -> float:
    return round(value, 2)


def extract_field(records: Sequence[Any], field: str) -> List[float]:
    """Pull a numeric field out of each record, dropping missing or invalid values.

    Records may be pydantic models or plain dicts.

    Example:
        extract_field([{"metacritic": 85}, {"metacritic": None}, {"metacritic": 90}], "metacritic")
        -> [85, 90]
    """
    return valid_numbers(raw_field_values(records, field))


def raw_field_values(records: Sequence[Any], field: str) -> List[Any]:
    values = []
    for record in records:
        if isinstance(record, Mapping):
            values.append(record.get(field))
        else:
            values.append(getattr(record, field, None))
    return values


def pick_winner(averages: Mapping[str, float]) -> Tuple[Optional[str], Optional[float]]:
    """Group with the strictly greatest average; ties keep the earlier group."""
    winner, best = None, None
    for name, avg in averages.items():
        if best is None or avg > best:
            winner, best = name, avg
    return winner, best


def _group_averages(data: Mapping[str, Sequence[Any]]) -> Tuple[Dict[str, float], Dict[str, int]]:
    averages: Dict[str, float] = {}
    sizes: Dict[str, int] = {}
    for name, values in data.items():
        nums = valid_numbers(values)
        if nums:
            averages[name] = _round2(sum(nums) / len(nums))
            sizes[name] = len(nums)
    return averages, sizes


def execute_calculation(operation: str, data: Union[Sequence[Any], Mapping[str, Sequence[Any]]]) -> CalculationOutput:
    """Run one operation.

    List operations (average, sum, count, min, max) take a sequence of numbers.
    Group operations (compare, group_average) take a mapping of group name to
    numbers. A shape mismatch raises TypeError; an unknown operation raises
    ValueError. Empty inputs yield 0 with an explanation instead of an error.
    """
    if operation in LIST_OPERATIONS:
        if isinstance(data, Mapping) or isinstance(data, (str, bytes)):
            raise TypeError(f"{operation.capitalize()} operation requires a list of numbers")
        data = list(data)
    elif operation in GROUP_OPERATIONS:
        if not isinstance(data, Mapping):
            raise TypeError(f"{operation} operation requires a mapping of group name to numbers")
    else:
        raise ValueError(f"Unknown operation: {operation}")

    if operation == "count":
        return CalculationOutput(
            result=len(data),
            formula="count(data)",
            details=f"Counted {len(data)} items",
        )

    if operation == "average":
        nums = valid_numbers(data)
        if not nums:
            return CalculationOutput(
                result=0,
                formula="No valid numbers to average",
                details="Input contained no valid numeric values",
            )
        total = sum(nums)
        avg = total / len(nums)
        return CalculationOutput(
            result=_round2(avg),
            formula=f"sum({len(nums)} values) / {len(nums)}",
            details=f"Sum: {total}, Count: {len(nums)}, Average: {avg:.2f}",
        )

    if operation == "sum":
        nums = valid_numbers(data)
        return CalculationOutput(
            result=sum(nums),
            formula=f"sum({len(nums)} values)",
            details=f"Added {len(nums)} numbers together",
        )

    if operation in ("min", "max"):
        nums = valid_numbers(data)
        if not nums:
            return CalculationOutput(result=0, formula="No valid numbers", details="No valid numbers found")
        value = min(nums) if operation == "min" else max(nums)
        label = "Minimum" if operation == "min" else "Maximum"
        return CalculationOutput(
            result=value,
            formula=f"{operation}({len(nums)} values)",
            details=f"{label} value from {len(nums)} numbers",
        )

    averages, sizes = _group_averages(data)

    if operation == "group_average":
        parts = [f"{name}: {avg} (n={sizes[name]})" for name, avg in averages.items()]
        return CalculationOutput(
            result=averages,
            formula=f"group_average({len(averages)} groups)",
            details="; ".join(parts),
        )

    # compare
    parts = []
    for name, avg in averages.items():
        if sizes[name] == 1:
            parts.append(f"{name}: {avg}")
        else:
            parts.append(f"{name}: avg={avg} (n={sizes[name]})")
    winner, best = pick_winner(averages)
    if winner is None:
        details = "Compared: no group had valid numbers"
    else:
        details = f"Compared: {'; '.join(parts)}. Winner: {winner} with {best}"
    return CalculationOutput(
        result=averages,
        formula=f"compare_averages({', '.join(averages)})",
        details=details,
    )
