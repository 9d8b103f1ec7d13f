"""Tetromino definitions: the 7 standard pieces and their rotation states.

Each rotation is a 2-D bitmask (rows x cols, 1 = filled). Rotations follow
the Super Rotation System ordering:
0 = spawn, 1 = clockwise, 2 = 180, 3 = counter-clockwise.
"""
from enum import Enum
from typing import Dict, List, Tuple


class PieceType(str, Enum):
    """Piece type tag, declared in spawn-probability order."""
    I = "I"
    O = "O"
    T = "T"
    S = "S"
    Z = "Z"
    J = "J"
    L = "L"

    @classmethod
    def all_types(cls) -> List["PieceType"]:
        """Return all piece types in fixed enumeration order."""
        return [cls.I, cls.O, cls.T, cls.S, cls.Z, cls.J, cls.L]


RotationMatrix = Tuple[Tuple[int, ...], ...]
CellOffsets = Tuple[Tuple[int, int], ...]


TETROMINO_SHAPES: Dict[PieceType, Tuple[RotationMatrix, ...]] = {
    # 4x4 bounding box
    PieceType.I: (
        ((0, 0, 0, 0), (1, 1, 1, 1), (0, 0, 0, 0), (0, 0, 0, 0)),
        ((0, 0, 1, 0), (0, 0, 1, 0), (0, 0, 1, 0), (0, 0, 1, 0)),
        ((0, 0, 0, 0), (0, 0, 0, 0), (1, 1, 1, 1), (0, 0, 0, 0)),
        ((0, 1, 0, 0), (0, 1, 0, 0), (0, 1, 0, 0), (0, 1, 0, 0)),
    ),
    # Single state; every rotation of O is identical
    PieceType.O: (
        ((0, 1, 1, 0), (0, 1, 1, 0), (0, 0, 0, 0), (0, 0, 0, 0)),
    ),
    PieceType.T: (
        ((0, 1, 0), (1, 1, 1), (0, 0, 0)),
        ((0, 1, 0), (0, 1, 1), (0, 1, 0)),
        ((0, 0, 0), (1, 1, 1), (0, 1, 0)),
        ((0, 1, 0), (1, 1, 0), (0, 1, 0)),
    ),
    PieceType.S: (
        ((0, 1, 1), (1, 1, 0), (0, 0, 0)),
        ((0, 1, 0), (0, 1, 1), (0, 0, 1)),
        ((0, 0, 0), (0, 1, 1), (1, 1, 0)),
        ((1, 0, 0), (1, 1, 0), (0, 1, 0)),
    ),
    PieceType.Z: (
        ((1, 1, 0), (0, 1, 1), (0, 0, 0)),
        ((0, 0, 1), (0, 1, 1), (0, 1, 0)),
        ((0, 0, 0), (1, 1, 0), (0, 1, 1)),
        ((0, 1, 0), (1, 1, 0), (1, 0, 0)),
    ),
    PieceType.J: (
        ((1, 0, 0), (1, 1, 1), (0, 0, 0)),
        ((0, 1, 1), (0, 1, 0), (0, 1, 0)),
        ((0, 0, 0), (1, 1, 1), (0, 0, 1)),
        ((0, 1, 0), (0, 1, 0), (1, 1, 0)),
    ),
    PieceType.L: (
        ((0, 0, 1), (1, 1, 1), (0, 0, 0)),
        ((0, 1, 0), (0, 1, 0), (0, 1, 1)),
        ((0, 0, 0), (1, 1, 1), (1, 0, 0)),
        ((1, 1, 0), (0, 1, 0), (0, 1, 0)),
    ),
}


def _matrix_cells(matrix: RotationMatrix) -> CellOffsets:
    return tuple(
        (r, c)
        for r, row in enumerate(matrix)
        for c, value in enumerate(row)
        if value
    )


# Precomputed (row, col) offsets per piece type and rotation
_CELL_TABLE: Dict[PieceType, Tuple[CellOffsets, ...]] = {
    piece_type: tuple(_matrix_cells(m) for m in rotations)
    for piece_type, rotations in TETROMINO_SHAPES.items()
}


def rotation_count(piece_type: PieceType) -> int:
    """Number of distinct rotation states for a piece type."""
    return len(TETROMINO_SHAPES[piece_type])


def get_shape(piece_type: PieceType, rotation: int) -> RotationMatrix:
    """Rotation matrix for a piece; the rotation index wraps."""
    rotations = TETROMINO_SHAPES[piece_type]
    return rotations[rotation % len(rotations)]


def shape_width(piece_type: PieceType, rotation: int) -> int:
    """Width of the rotation's bounding box."""
    return len(get_shape(piece_type, rotation)[0])


def piece_cells(piece_type: PieceType, rotation: int) -> CellOffsets:
    """Return every (row, col) offset filled by a piece in a rotation state."""
    cells = _CELL_TABLE[piece_type]
    return cells[rotation % len(cells)]
