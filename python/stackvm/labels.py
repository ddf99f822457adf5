"""Label resolution performed once when a program is loaded."""

from __future__ import annotations

from typing import Dict, Iterable, List

from .errors import DuplicateLabel
from .instructions import Instruction, Op


def resolve_labels(program: Iterable[Instruction]) -> Dict[str, int]:
    """Map every LABEL name to the index of its marker.

    Raises :class:`DuplicateLabel` on the second definition of a name.
    """
    labels: Dict[str, int] = {}
    for index, ins in enumerate(program):
        if ins.op is not Op.LABEL:
            continue
        name = ins.arg
        if name in labels:
            raise DuplicateLabel(name, labels[name], index)
        labels[name] = index
    return labels


def unresolved_targets(program: Iterable[Instruction], labels: Dict[str, int]) -> List[str]:
    """Return branch targets that have no matching label, in program order."""
    missing: List[str] = []
    for ins in program:
        target = ins.target
        if target is not None and target not in labels and target not in missing:
            missing.append(target)
    return missing
