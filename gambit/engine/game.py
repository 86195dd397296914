from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from .board import (
    MOVE_GENERATORS,
    Board,
    Piece,
    STARTPOS_PLACEMENT,
    back_row,
    pawn_direction,
)
from .move import (
    BLACK,
    KING,
    PAWN,
    PROMOTION_PIECES,
    QUEEN,
    ROOK,
    WHITE,
    Move,
    Position,
    opposite,
    parse_square,
    square_name,
)


logger = logging.getLogger(__name__)

STARTPOS_FEN = f"{STARTPOS_PLACEMENT} w KQkq - 0 1"

PIECE_LETTERS = {"king": "K", "queen": "Q", "rook": "R", "bishop": "B", "knight": "N", "pawn": ""}


@dataclass(frozen=True)
class CastlingRights:
    kingside: bool = True
    queenside: bool = True


@dataclass(frozen=True)
class MoveRecord:
    """Entry of the move history.

    Attributes:
        move (Move): Applied move; ``promotion`` is set only for promotions.
        notation (str): Informational ``<Piece><from>-<to>`` string.
        move_number (int): Full-move number the move was played on.
        color (str): Side that played the move.
    """

    move: Move
    notation: str
    move_number: int
    color: str


@dataclass(frozen=True)
class UndoRecord:
    """Everything needed to revert one applied move exactly."""

    move: Move
    moved_piece: Piece
    captured_piece: Optional[Piece]
    captured_pos: Position
    rook_from: Optional[Position]
    rook_to: Optional[Position]
    prev_en_passant: Optional[Position]
    prev_castling: Dict[str, CastlingRights]
    prev_half_move_clock: int
    prev_full_move_number: int
    prev_turn: str


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of a game for rendering and status display."""

    board: Board
    current_turn: str
    is_check: bool
    is_checkmate: bool
    is_stalemate: bool
    move_history: Tuple[MoveRecord, ...]
    captured_pieces: Dict[str, Tuple[str, ...]]


def move_notation(piece: Piece, from_pos: Position, to_pos: Position) -> str:
    return f"{PIECE_LETTERS[piece.type]}{square_name(from_pos)}-{square_name(to_pos)}"


def _default_rights() -> Dict[str, CastlingRights]:
    return {WHITE: CastlingRights(), BLACK: CastlingRights()}


def _default_captures() -> Dict[str, List[str]]:
    return {WHITE: [], BLACK: []}


@dataclass
class Game:
    """Game state plus the chess rules operating on it.

    Responsibility: own the board, answer legality queries, apply and revert
    moves. All mutation goes through ``make_move``/``push``/``pop``.
    """

    board: Board
    current_turn: str = WHITE
    move_history: List[MoveRecord] = field(default_factory=list)
    captured_pieces: Dict[str, List[str]] = field(default_factory=_default_captures)
    en_passant_target: Optional[Position] = None
    castling_rights: Dict[str, CastlingRights] = field(default_factory=_default_rights)
    half_move_clock: int = 0
    full_move_number: int = 1
    _undo_stack: List[UndoRecord] = field(default_factory=list, repr=False)

    @classmethod
    def new(cls) -> "Game":
        return cls(board=Board.startpos())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        """Create a game from a Forsyth–Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.

        Returns:
            Game: Game positioned as described, with empty history.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields, or
                contains invalid placement, castling rights, en passant square,
                or move counters.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        board = Board.from_fen(placement)

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")

        if castling != "-" and any(ch not in "KQkq" for ch in castling):
            raise ValueError("invalid castling rights")
        rights = {
            WHITE: CastlingRights(kingside="K" in castling, queenside="Q" in castling),
            BLACK: CastlingRights(kingside="k" in castling, queenside="q" in castling),
        }

        en_passant: Optional[Position] = None
        if ep != "-":
            try:
                en_passant = parse_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            # Target sits behind a pawn of the side that just moved
            if en_passant.row != (2 if stm == "w" else 5):
                raise ValueError("invalid en passant square rank")

        try:
            half_move_clock = int(halfmove)
            full_move_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if half_move_clock < 0 or full_move_number <= 0:
            raise ValueError("invalid move counters in FEN")

        return cls(
            board=board,
            current_turn=WHITE if stm == "w" else BLACK,
            en_passant_target=en_passant,
            castling_rights=rights,
            half_move_clock=half_move_clock,
            full_move_number=full_move_number,
        )

    def to_fen(self) -> str:
        castling = ""
        for color, (k, q) in ((WHITE, ("K", "Q")), (BLACK, ("k", "q"))):
            rights = self.castling_rights[color]
            castling += (k if rights.kingside else "") + (q if rights.queenside else "")
        ep = square_name(self.en_passant_target) if self.en_passant_target else "-"
        stm = "w" if self.current_turn == WHITE else "b"
        return (
            f"{self.board.to_fen()} {stm} {castling or '-'} {ep} "
            f"{self.half_move_clock} {self.full_move_number}"
        )

    def clone(self) -> "Game":
        """Return an independent copy of the whole game state."""
        return Game(
            board=self.board.copy(),
            current_turn=self.current_turn,
            move_history=list(self.move_history),
            captured_pieces={c: list(v) for c, v in self.captured_pieces.items()},
            en_passant_target=self.en_passant_target,
            castling_rights=dict(self.castling_rights),
            half_move_clock=self.half_move_clock,
            full_move_number=self.full_move_number,
            _undo_stack=list(self._undo_stack),
        )

    # --- Board access ---
    def get_piece(self, pos: Position) -> Optional[Piece]:
        return self.board.get_piece(pos)

    def set_piece(self, pos: Position, piece: Optional[Piece]) -> None:
        self.board.set_piece(pos, piece)

    # --- Move generation ---
    def get_valid_moves(self, pos: Position) -> List[Position]:
        """Return legal destinations for the piece on ``pos``.

        Empty when the square is empty or holds a piece of the side not to
        move. Candidates that would leave the mover's king attacked are
        removed after a full simulated application.
        """
        piece = self.board.get_piece(pos)
        if piece is None or piece.color != self.current_turn:
            return []
        candidates = MOVE_GENERATORS[piece.type](self.board, pos, piece.color)
        if piece.type == PAWN:
            candidates.extend(self._en_passant_moves(pos, piece.color))
        elif piece.type == KING:
            candidates.extend(self._castling_moves(pos, piece.color))
        return [to for to in candidates if self._leaves_king_safe(pos, to, piece)]

    def _en_passant_moves(self, pos: Position, color: str) -> List[Position]:
        target = self.en_passant_target
        if target is None:
            return []
        victim = self.board.get_piece(Position(pos.row, target.col))
        if (
            target.row == pos.row + pawn_direction(color)
            and abs(target.col - pos.col) == 1
            and victim == Piece(PAWN, opposite(color))
        ):
            return [target]
        return []

    def _castling_moves(self, pos: Position, color: str) -> List[Position]:
        row = back_row(color)
        if pos != Position(row, 4):
            return []
        rights = self.castling_rights[color]
        if not (rights.kingside or rights.queenside):
            return []
        if self.board.is_in_check(color):
            return []
        moves: List[Position] = []
        board = self.board
        if (
            rights.kingside
            and board.get_piece(Position(row, 7)) == Piece(ROOK, color)
            and all(board.get_piece(Position(row, c)) is None for c in (5, 6))
            and not any(board.is_square_attacked(Position(row, c), color) for c in (5, 6))
        ):
            moves.append(Position(row, 6))
        if (
            rights.queenside
            and board.get_piece(Position(row, 0)) == Piece(ROOK, color)
            and all(board.get_piece(Position(row, c)) is None for c in (1, 2, 3))
            and not any(board.is_square_attacked(Position(row, c), color) for c in (3, 2))
        ):
            moves.append(Position(row, 2))
        return moves

    def _leaves_king_safe(self, from_pos: Position, to_pos: Position, piece: Piece) -> bool:
        """Simulate the move on the grid and test the mover's king."""
        board = self.board
        captured_pos = self._captured_square(piece, from_pos, to_pos)
        captured = board.get_piece(captured_pos)
        rook_squares = _castling_rook_squares(piece, from_pos, to_pos)

        board.set_piece(captured_pos, None)
        board.set_piece(from_pos, None)
        board.set_piece(to_pos, piece)
        if rook_squares is not None:
            rook_from, rook_to = rook_squares
            board.set_piece(rook_to, board.get_piece(rook_from))
            board.set_piece(rook_from, None)
        try:
            return not board.is_in_check(piece.color)
        finally:
            if rook_squares is not None:
                rook_from, rook_to = rook_squares
                board.set_piece(rook_from, board.get_piece(rook_to))
                board.set_piece(rook_to, None)
            board.set_piece(to_pos, None)
            board.set_piece(captured_pos, captured)
            board.set_piece(from_pos, piece)

    def _captured_square(self, piece: Piece, from_pos: Position, to_pos: Position) -> Position:
        # En passant lands on an empty square; the victim sits beside the mover
        if (
            piece.type == PAWN
            and to_pos == self.en_passant_target
            and from_pos.col != to_pos.col
            and self.board.get_piece(to_pos) is None
        ):
            return Position(from_pos.row, to_pos.col)
        return to_pos

    def legal_moves(self) -> List[Move]:
        """Return every legal move for the side to move.

        Pawn moves onto the last rank are expanded into one move per
        promotion piece, queen first.
        """
        moves: List[Move] = []
        last_row = back_row(opposite(self.current_turn))
        for pos, piece in list(self.board.pieces(self.current_turn)):
            for to in self.get_valid_moves(pos):
                if piece.type == PAWN and to.row == last_row:
                    moves.extend(Move(pos, to, promo) for promo in PROMOTION_PIECES)
                else:
                    moves.append(Move(pos, to))
        return moves

    def has_legal_moves(self) -> bool:
        """Return True if the side to move has at least one legal move."""
        squares = [pos for pos, _ in self.board.pieces(self.current_turn)]
        return any(self.get_valid_moves(pos) for pos in squares)

    # --- Status ---
    def is_in_check(self, color: Optional[str] = None) -> bool:
        """Return True if ``color`` (default: side to move) is in check."""
        return self.board.is_in_check(self.current_turn if color is None else color)

    def is_square_attacked(self, pos: Position, defending_color: str) -> bool:
        return self.board.is_square_attacked(pos, defending_color)

    def is_checkmate(self) -> bool:
        return self.is_in_check() and not self.has_legal_moves()

    def is_stalemate(self) -> bool:
        return not self.is_in_check() and not self.has_legal_moves()

    def get_game_state(self) -> GameSnapshot:
        return GameSnapshot(
            board=self.board.copy(),
            current_turn=self.current_turn,
            is_check=self.is_in_check(),
            is_checkmate=self.is_checkmate(),
            is_stalemate=self.is_stalemate(),
            move_history=tuple(self.move_history),
            captured_pieces={c: tuple(v) for c, v in self.captured_pieces.items()},
        )

    # --- Move application ---
    def make_move(self, from_pos: Position, to_pos: Position, promotion: str = QUEEN) -> bool:
        """Validate and apply a move.

        Returns:
            bool: False (and no mutation) when ``from_pos`` is empty, the
                destination is not a valid move, or the promotion piece is not
                a knight, bishop, rook or queen.
        """
        piece = self.board.get_piece(from_pos)
        if piece is None:
            logger.debug("rejected move: no piece on %s", from_pos)
            return False
        if to_pos not in self.get_valid_moves(from_pos):
            logger.debug("rejected move: %s -> %s is not valid", from_pos, to_pos)
            return False
        promo: Optional[str] = None
        if piece.type == PAWN and to_pos.row == back_row(opposite(piece.color)):
            if promotion not in PROMOTION_PIECES:
                logger.debug("rejected move: invalid promotion %r", promotion)
                return False
            promo = promotion
        self.push(Move(from_pos, to_pos, promo))
        return True

    def apply_move(self, move: Move) -> bool:
        return self.make_move(move.from_pos, move.to_pos, move.promotion or QUEEN)

    def push(self, move: Move) -> UndoRecord:
        """Apply ``move`` in place without validation and return its undo record.

        The caller must pass a legal move (e.g. one from ``legal_moves``).

        Raises:
            ValueError: If the origin square is empty.
        """
        from_pos, to_pos = move.from_pos, move.to_pos
        board = self.board
        piece = board.get_piece(from_pos)
        if piece is None:
            raise ValueError("no piece to move from origin square")
        color = piece.color

        captured_pos = self._captured_square(piece, from_pos, to_pos)
        captured = board.get_piece(captured_pos)
        rook_squares = _castling_rook_squares(piece, from_pos, to_pos)

        record = UndoRecord(
            move=move,
            moved_piece=piece,
            captured_piece=captured,
            captured_pos=captured_pos,
            rook_from=rook_squares[0] if rook_squares else None,
            rook_to=rook_squares[1] if rook_squares else None,
            prev_en_passant=self.en_passant_target,
            prev_castling=dict(self.castling_rights),
            prev_half_move_clock=self.half_move_clock,
            prev_full_move_number=self.full_move_number,
            prev_turn=self.current_turn,
        )

        if captured is not None:
            board.set_piece(captured_pos, None)
            self.captured_pieces[captured.color].append(captured.type)

        if rook_squares is not None:
            rook_from, rook_to = rook_squares
            board.set_piece(rook_to, board.get_piece(rook_from))
            board.set_piece(rook_from, None)

        board.set_piece(from_pos, None)
        placed = piece
        promotion: Optional[str] = None
        if piece.type == PAWN and to_pos.row == back_row(opposite(color)):
            promotion = move.promotion or QUEEN
            placed = Piece(promotion, color)
        board.set_piece(to_pos, placed)

        # Double push sets the target on the skipped square
        if piece.type == PAWN and abs(to_pos.row - from_pos.row) == 2:
            self.en_passant_target = Position((from_pos.row + to_pos.row) // 2, to_pos.col)
        else:
            self.en_passant_target = None

        self._update_castling_rights(piece, from_pos, captured, captured_pos)

        if piece.type == PAWN or captured is not None:
            self.half_move_clock = 0
        else:
            self.half_move_clock += 1

        self.move_history.append(
            MoveRecord(
                move=Move(from_pos, to_pos, promotion),
                notation=move_notation(piece, from_pos, to_pos),
                move_number=self.full_move_number,
                color=color,
            )
        )

        self.current_turn = opposite(self.current_turn)
        if self.current_turn == WHITE:
            self.full_move_number += 1

        self._undo_stack.append(record)
        return record

    def pop(self) -> UndoRecord:
        """Revert the last applied move exactly.

        Raises:
            ValueError: If no move has been applied.
        """
        if not self._undo_stack:
            raise ValueError("no moves to undo")
        rec = self._undo_stack.pop()
        board = self.board
        from_pos, to_pos = rec.move.from_pos, rec.move.to_pos

        self.move_history.pop()

        board.set_piece(to_pos, None)
        board.set_piece(from_pos, rec.moved_piece)

        if rec.rook_from is not None and rec.rook_to is not None:
            board.set_piece(rec.rook_from, board.get_piece(rec.rook_to))
            board.set_piece(rec.rook_to, None)

        if rec.captured_piece is not None:
            board.set_piece(rec.captured_pos, rec.captured_piece)
            self.captured_pieces[rec.captured_piece.color].pop()

        self.en_passant_target = rec.prev_en_passant
        self.castling_rights = dict(rec.prev_castling)
        self.half_move_clock = rec.prev_half_move_clock
        self.full_move_number = rec.prev_full_move_number
        self.current_turn = rec.prev_turn
        return rec

    def undo_move(self) -> None:
        self.pop()

    def _update_castling_rights(
        self,
        piece: Piece,
        from_pos: Position,
        captured: Optional[Piece],
        captured_pos: Position,
    ) -> None:
        """Clear rights on king moves, rook moves and rook captures on home corners."""
        rights = self.castling_rights
        color = piece.color
        if piece.type == KING:
            rights[color] = CastlingRights(kingside=False, queenside=False)
        elif piece.type == ROOK and from_pos.row == back_row(color):
            if from_pos.col == 0:
                rights[color] = replace(rights[color], queenside=False)
            elif from_pos.col == 7:
                rights[color] = replace(rights[color], kingside=False)
        if (
            captured is not None
            and captured.type == ROOK
            and captured_pos.row == back_row(captured.color)
        ):
            if captured_pos.col == 0:
                rights[captured.color] = replace(rights[captured.color], queenside=False)
            elif captured_pos.col == 7:
                rights[captured.color] = replace(rights[captured.color], kingside=False)


def _castling_rook_squares(
    piece: Piece, from_pos: Position, to_pos: Position
) -> Optional[Tuple[Position, Position]]:
    if piece.type != KING or abs(to_pos.col - from_pos.col) != 2:
        return None
    row = from_pos.row
    if to_pos.col > from_pos.col:
        return Position(row, 7), Position(row, 5)
    return Position(row, 0), Position(row, 3)
