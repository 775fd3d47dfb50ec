from __future__ import annotations

from enum import Enum
from typing import Dict, List, Tuple

from netreversi.errors import MalformedSnapshotError, MoveError, OutOfBoundsError
from netreversi.protocol.constants import BOARD_SIZE


class Cell(Enum):
    """Cell state; the value is the character used on the wire."""

    EMPTY = " "
    RED = "R"
    BLUE = "B"

    def opponent(self) -> "Cell":
        if self is Cell.EMPTY:
            raise ValueError("An empty cell has no opponent colour")
        return Cell.BLUE if self is Cell.RED else Cell.RED

    @classmethod
    def from_char(cls, char: str) -> "Cell":
        return cls(char)


DIRECTIONS = [
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1),
]


class Board:
    """Fixed-size Reversi grid indexed as ``grid[y][x]``.

    The engine is optimistic: it reproduces the effect of moves the server has
    already accepted and does not check legality itself.
    """

    def __init__(self, size: int = BOARD_SIZE):
        self.size = size
        self.grid: List[List[Cell]] = [[Cell.EMPTY for _ in range(size)] for _ in range(size)]

    def is_on_board(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def get_piece(self, x: int, y: int) -> Cell:
        if not self.is_on_board(x, y):
            raise OutOfBoundsError(x, y, self.size)
        return self.grid[y][x]

    def reset(self, local_is_first: bool, local_color: Cell, remote_color: Cell) -> None:
        """Clear the grid and place the four opening discs.

        The first mover owns the main diagonal of the centre square.
        """
        first, second = (local_color, remote_color) if local_is_first else (remote_color, local_color)
        for row in self.grid:
            for x in range(self.size):
                row[x] = Cell.EMPTY

        mid = self.size // 2
        self.grid[mid - 1][mid - 1] = first
        self.grid[mid][mid] = first
        self.grid[mid - 1][mid] = second
        self.grid[mid][mid - 1] = second

    def apply_move(self, x: int, y: int, color: Cell) -> List[Tuple[int, int]]:
        """Place ``color`` at (x, y) and flip every bracketed run.

        Returns the flipped coordinates as (x, y) pairs.
        """
        if not self.is_on_board(x, y):
            raise OutOfBoundsError(x, y, self.size)
        if color is Cell.EMPTY:
            raise MoveError("Cannot play an empty cell")

        self.grid[y][x] = color
        opponent = color.opponent()
        flipped: List[Tuple[int, int]] = []

        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            pieces_to_flip = []

            while self.is_on_board(nx, ny) and self.grid[ny][nx] is opponent:
                pieces_to_flip.append((nx, ny))
                nx += dx
                ny += dy

            if pieces_to_flip and self.is_on_board(nx, ny) and self.grid[ny][nx] is color:
                for fx, fy in pieces_to_flip:
                    self.grid[fy][fx] = color
                flipped.extend(pieces_to_flip)

        return flipped

    @classmethod
    def parse_snapshot(cls, flat: str, size: int = BOARD_SIZE) -> List[List[Cell]]:
        if len(flat) != size * size:
            raise MalformedSnapshotError(flat, f"expected {size * size} cells, got {len(flat)}")
        try:
            cells = [Cell.from_char(char) for char in flat]
        except ValueError as exc:
            raise MalformedSnapshotError(flat, "unknown cell character") from exc
        return [cells[row * size:(row + 1) * size] for row in range(size)]

    def apply_snapshot(self, flat: str) -> None:
        """Overwrite the grid from a row-major snapshot; the board is untouched on error."""
        self.grid = self.parse_snapshot(flat, self.size)

    def snapshot(self) -> str:
        return "".join(cell.value for row in self.grid for cell in row)

    def get_score(self) -> Dict[Cell, int]:
        scores = {Cell.RED: 0, Cell.BLUE: 0}
        for row in self.grid:
            for cell in row:
                if cell is not Cell.EMPTY:
                    scores[cell] += 1
        return scores

    def rows(self) -> List[List[Cell]]:
        return [row[:] for row in self.grid]

    def clone(self) -> "Board":
        copied = Board(self.size)
        copied.grid = self.rows()
        return copied
