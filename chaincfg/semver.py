"""
Compiler version constraints.

Constraints use the npm range grammar the solc-bin release mirrors are queried
with: exact versions, comparators (``>``, ``>=``, ``<``, ``<=``, ``=``),
caret and tilde ranges, ``x``/``*`` wildcards, hyphen ranges, space separated
conjunctions and ``||`` alternatives. Pre-release tags are not supported since
the release index only lists final releases.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional, Tuple

from chaincfg.errors import VersionConstraintError

_WILDCARDS = {"x", "X", "*"}
_COMPARATOR = re.compile(r"^(?P<op>\^|~|>=|<=|>|<|=)?v?(?P<version>[0-9xX*.]+)$")
_OPERATOR_GAP = re.compile(r"(>=|<=|>|<|=|\^|~)\s+")

Bound = Tuple[str, "Version"]


class Version(NamedTuple):
    """A final release version, ordered by its numeric components."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> "Version":
        """
        Parse a ``MAJOR.MINOR.PATCH`` version, ignoring build metadata.

        Args:
            text (str): Version text such as ``0.8.11`` or
                        ``0.8.11+commit.d7f03943``.

        Returns:
            Version: The parsed version.

        Raises:
            ValueError: If the text is not a three part numeric version.
        """
        core = text.strip().lstrip("v").split("+", 1)[0]
        parts = core.split(".")
        if len(parts) != 3 or not all(part.isdigit() for part in parts):
            raise ValueError(f"Not a release version: {text!r}")
        return cls(int(parts[0]), int(parts[1]), int(parts[2]))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def _partial(text: str, constraint: str) -> List[int]:
    """Numeric components given before the first wildcard."""
    numbers: List[int] = []
    parts = text.split(".")
    if len(parts) > 3:
        raise VersionConstraintError(constraint, f"too many components in {text!r}")
    for part in parts:
        if part in _WILDCARDS:
            break
        if not part.isdigit():
            raise VersionConstraintError(constraint, f"bad component {part!r}")
        numbers.append(int(part))
    return numbers


def _pad(numbers: List[int]) -> Version:
    padded = numbers + [0] * (3 - len(numbers))
    return Version(padded[0], padded[1], padded[2])


def _bump(numbers: List[int]) -> Version:
    """Smallest version above every version matching the partial ``numbers``."""
    if len(numbers) == 1:
        return Version(numbers[0] + 1, 0, 0)
    return Version(numbers[0], numbers[1] + 1, 0)


def _caret_upper(numbers: List[int]) -> Version:
    major = numbers[0]
    if major > 0 or len(numbers) == 1:
        return Version(major + 1, 0, 0)
    minor = numbers[1]
    if minor > 0 or len(numbers) == 2:
        return Version(0, minor + 1, 0)
    return Version(0, 0, numbers[2] + 1)


def _expand(op: str, numbers: List[int]) -> List[Bound]:
    if not numbers:
        if op in (">", "<"):
            # Nothing is above or below "any version".
            return [("<", Version(0, 0, 0))]
        return []

    lower = _pad(numbers)
    exact = len(numbers) == 3

    if op in ("", "="):
        if exact:
            return [("==", lower)]
        return [(">=", lower), ("<", _bump(numbers))]
    if op == ">=":
        return [(">=", lower)]
    if op == ">":
        return [(">", lower)] if exact else [(">=", _bump(numbers))]
    if op == "<":
        return [("<", lower)]
    if op == "<=":
        return [("<=", lower)] if exact else [("<", _bump(numbers))]
    if op == "~":
        upper = _bump(numbers[:2]) if len(numbers) > 1 else _bump(numbers)
        return [(">=", lower), ("<", upper)]
    # Caret
    return [(">=", lower), ("<", _caret_upper(numbers))]


def _check(bound: Bound, version: Version) -> bool:
    op, target = bound
    if op == "==":
        return version == target
    if op == ">=":
        return version >= target
    if op == ">":
        return version > target
    if op == "<=":
        return version <= target
    return version < target


@dataclass(frozen=True)
class VersionConstraint:
    """
    A parsed version constraint.

    Attributes:
        text (str): The constraint as written in the configuration.
        alternatives (Tuple[Tuple[Bound, ...], ...]): ``||`` separated
            alternatives, each a conjunction of primitive bounds. A version is
            allowed when it satisfies every bound of at least one alternative.
    """

    text: str
    alternatives: Tuple[Tuple[Bound, ...], ...]

    def allows(self, version: Version) -> bool:
        return any(
            all(_check(bound, version) for bound in alternative)
            for alternative in self.alternatives
        )

    def highest_match(self, versions: Iterable[Version]) -> Optional[Version]:
        """
        Pick the newest version allowed by the constraint.

        Args:
            versions (Iterable[Version]): Candidate versions, in any order.

        Returns:
            Optional[Version]: The newest allowed version, or None if no
                               candidate is allowed.
        """
        allowed = [version for version in versions if self.allows(version)]
        return max(allowed) if allowed else None

    def __str__(self) -> str:
        return self.text


def parse_constraint(text: str) -> VersionConstraint:
    """
    Parse an npm-style version range.

    Args:
        text (str): The constraint, e.g. ``^0.8.11`` or ``>=0.8.0 <0.9.0``.

    Returns:
        VersionConstraint: The parsed constraint.

    Raises:
        VersionConstraintError: If the constraint is empty or malformed.
    """
    if not text or not text.strip():
        raise VersionConstraintError(text, "constraint is empty")

    alternatives: List[Tuple[Bound, ...]] = []
    for alternative in text.split("||"):
        alternative = _OPERATOR_GAP.sub(r"\1", alternative.strip())
        if not alternative:
            raise VersionConstraintError(text, "empty alternative")

        bounds: List[Bound] = []
        hyphen = re.fullmatch(r"(\S+)\s+-\s+(\S+)", alternative)
        if hyphen:
            low = _partial(hyphen.group(1), text)
            high = _partial(hyphen.group(2), text)
            bounds.extend(_expand(">=", low))
            bounds.extend(_expand("<=", high))
        else:
            for comparator in alternative.split():
                match = _COMPARATOR.match(comparator)
                if match is None:
                    raise VersionConstraintError(
                        text, f"cannot parse {comparator!r}",
                    )
                numbers = _partial(match.group("version"), text)
                bounds.extend(_expand(match.group("op") or "", numbers))
        alternatives.append(tuple(bounds))

    return VersionConstraint(text=text.strip(), alternatives=tuple(alternatives))
