"""
Bale Assignment Service - Splits a roster into bales and target letters.

Archers are grouped by division (or all together for mixed rounds), groups
smaller than two are pooled into combined JV / Varsity groups, and each group
is sliced into evenly sized bales.
"""

import logging
import math
from typing import Optional

from archers_edge.exceptions import (
    CapacityExceededError,
    InvalidAssignmentTypeError,
    InvalidBaleLayoutError,
)
from archers_edge.models.archer import Archer
from archers_edge.models.bale import Bale, BaleArcher

logger = logging.getLogger(__name__)

ASSIGNMENT_TYPES = {
    'school': 'All archers from one school, grouped by division',
    'mixed': 'No division separation',
    'school-vs-school': 'Multiple schools, broken by gender/division',
}

TARGETS_4 = ['A', 'B', 'C', 'D']
TARGETS_6 = ['A', 'B', 'C', 'D', 'E', 'F']

MIN_ARCHERS_PER_BALE = 2

_DIVISIONS = {
    ('F', 'V'): 'GV',   # Girls Varsity
    ('F', 'JV'): 'GJV',  # Girls JV
    ('M', 'V'): 'BV',   # Boys Varsity
    ('M', 'JV'): 'BJV',  # Boys JV
}


def get_archer_division(archer: Archer) -> str:
    """
    Derive the bale division from gender and classification.

    Missing gender counts as M and missing classification as V.
    Any other combination (e.g. MS) is "Unknown".
    """
    gender = archer.gender or 'M'
    classification = archer.get_classification() or 'V'
    return _DIVISIONS.get((gender, classification), 'Unknown')


def group_archers_by_division(archers: list[Archer]) -> list[tuple[str, list[Archer]]]:
    """Group archers by division, in order of first appearance."""
    divisions: dict[str, list[Archer]] = {}
    for archer in archers:
        divisions.setdefault(get_archer_division(archer), []).append(archer)
    return list(divisions.items())


def combine_small_divisions(
    groups: list[tuple[str, list[Archer]]]
) -> list[tuple[str, list[Archer]]]:
    """
    Pool divisions with fewer than two archers.

    Groups of two or more pass through first, in order. Small JV groups are
    merged into "Combined JV" and the remaining small Varsity groups into
    "Combined Varsity"; a combined group still under two archers is dropped,
    as are small groups that are neither (e.g. "Unknown", "Mixed").
    """
    large = [g for g in groups if len(g[1]) >= MIN_ARCHERS_PER_BALE]
    small = [g for g in groups if len(g[1]) < MIN_ARCHERS_PER_BALE]

    jv_archers = [a for division, archers in small if 'JV' in division for a in archers]
    v_archers = [
        a for division, archers in small
        if 'JV' not in division and 'V' in division
        for a in archers
    ]

    result = list(large)
    if len(jv_archers) >= MIN_ARCHERS_PER_BALE:
        result.append(('Combined JV', jv_archers))
    if len(v_archers) >= MIN_ARCHERS_PER_BALE:
        result.append(('Combined Varsity', v_archers))

    if small:
        dropped = sum(len(archers) for _, archers in small)
        if len(jv_archers) >= MIN_ARCHERS_PER_BALE:
            dropped -= len(jv_archers)
        if len(v_archers) >= MIN_ARCHERS_PER_BALE:
            dropped -= len(v_archers)
        logger.debug(f"Pooled {len(small)} small divisions, {dropped} archers left without a bale")
    return result


def get_target_letters(max_archers_per_bale: int) -> list[str]:
    """A-F for six-archer bales, otherwise A-D."""
    return TARGETS_6 if max_archers_per_bale == 6 else TARGETS_4


def archers_per_bale(group_size: int, max_archers_per_bale: int) -> int:
    """Even bale size: ceil(n / ceil(n / max))."""
    if group_size <= 0:
        return 0
    return math.ceil(group_size / math.ceil(group_size / max_archers_per_bale))


def generate_bales(
    archers: list[Archer],
    assignment_type: str,
    number_of_bales: int,
    max_archers_per_bale: int,
) -> list[Bale]:
    """
    Build bales for the selected archers.

    Args:
        archers: Selected archer profiles, in selection order
        assignment_type: "school", "school-vs-school" or "mixed"
        number_of_bales: Bales available (capacity is checked by the caller)
        max_archers_per_bale: 4 or 6

    Returns:
        Bales numbered from 1 in group order. Chunks of a single archer
        are not emitted.

    Raises:
        InvalidAssignmentTypeError: Unknown assignment_type
        InvalidBaleLayoutError: number_of_bales or max_archers_per_bale below 1
    """
    check_bale_layout(number_of_bales, max_archers_per_bale)
    if assignment_type in ('school', 'school-vs-school'):
        grouped = group_archers_by_division(archers)
    elif assignment_type == 'mixed':
        grouped = [('Mixed', list(archers))]
    else:
        raise InvalidAssignmentTypeError(
            f"Unknown assignment type: {assignment_type}. "
            f"Valid options: {', '.join(ASSIGNMENT_TYPES)}"
        )

    targets = get_target_letters(max_archers_per_bale)
    bales: list[Bale] = []
    bale_number = 1

    for division, group in combine_small_divisions(grouped):
        size = archers_per_bale(len(group), max_archers_per_bale)
        for start in range(0, len(group), size):
            chunk = group[start:start + size]
            if len(chunk) < MIN_ARCHERS_PER_BALE:
                logger.info(f"Dropping single archer {chunk[0].id} left over in {division}")
                continue
            bales.append(Bale(
                bale_number=bale_number,
                division=division,
                archers=[
                    BaleArcher(
                        **archer.model_dump(exclude={'target_assignment'}),
                        target_assignment=targets[index % len(targets)],
                    )
                    for index, archer in enumerate(chunk)
                ],
            ))
            bale_number += 1

    logger.info(
        f"Generated {len(bales)} bales for {len(archers)} archers "
        f"({assignment_type}, {number_of_bales} bales available)"
    )
    return bales


def check_bale_layout(number_of_bales: int, max_archers_per_bale: int) -> None:
    """Reject bale settings that leave no targets to shoot on."""
    if number_of_bales < 1 or max_archers_per_bale < 1:
        raise InvalidBaleLayoutError(
            f"Number of bales and archers per bale must be at least 1 "
            f"(got {number_of_bales} bales of {max_archers_per_bale})."
        )


def validate_bale_capacity(
    archer_count: int,
    number_of_bales: int,
    max_archers_per_bale: int,
) -> None:
    """
    Check the selection fits on the bales.

    Raises:
        InvalidBaleLayoutError: Bale settings are not positive
        CapacityExceededError: More archers than bales x targets
    """
    check_bale_layout(number_of_bales, max_archers_per_bale)
    capacity = number_of_bales * max_archers_per_bale
    if archer_count > capacity:
        raise CapacityExceededError(
            f"Too many archers selected. Maximum {capacity} archers "
            f"allowed with {number_of_bales} bales."
        )


def suggest_max_archers_per_bale(archer_count: int, number_of_bales: int) -> int:
    """Switch to six targets per bale once four per bale no longer fits."""
    if archer_count > number_of_bales * 4:
        return 6
    return 4


def find_archer_bale(bales: list[Bale], archer_id: str) -> Optional[Bale]:
    """Get the bale an archer was placed on, if any."""
    for bale in bales:
        if any(a.id == archer_id for a in bale.archers):
            return bale
    return None
