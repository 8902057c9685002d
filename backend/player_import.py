import csv
import io
import logging
from typing import Dict, Iterable, List, Optional

from openpyxl import load_workbook
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import ImportParseError
from models import Category, Game, Player

logger = logging.getLogger(__name__)

# header (case-insensitive) -> row key
IMPORT_COLUMNS = {
    "name": "name",
    "cnic": "cnic",
    "phone": "phone",
    "email": "email",
    "ticketprice": "ticket_price",
    "category": "category",
    "game": "game",
}
REQUIRED_COLUMNS = ("name", "cnic", "phone", "ticketprice", "category", "game")


def normalize_title(value: Optional[str]) -> str:
    return str(value or "").strip().lower()


def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _parse_ticket_price(raw: str, row_number: int) -> float:
    try:
        return float(str(raw).strip())
    except (TypeError, ValueError):
        raise ImportParseError(f"Row {row_number}: invalid ticketPrice '{raw}'")


def _build_rows(headers: List[str], records: Iterable[Iterable]) -> List[Dict[str, object]]:
    header_index = {}
    for idx, header in enumerate(headers):
        key = normalize_title(header).replace(" ", "")
        if key in IMPORT_COLUMNS and key not in header_index:
            header_index[key] = idx

    missing = [column for column in REQUIRED_COLUMNS if column not in header_index]
    if missing:
        raise ImportParseError(f"Missing columns: {', '.join(missing)}")

    rows = []
    for row_number, record in enumerate(records, start=2):
        values = list(record)
        texts = {
            IMPORT_COLUMNS[key]: _cell_text(values[idx]) if idx < len(values) else ""
            for key, idx in header_index.items()
        }
        if not any(texts.values()):
            continue
        rows.append({
            "row": row_number,
            "name": texts["name"],
            "cnic": texts["cnic"],
            "phone": texts["phone"],
            "email": texts.get("email") or None,
            "ticket_price": _parse_ticket_price(texts["ticket_price"], row_number),
            "category": texts["category"],
            "game": texts["game"],
        })
    return rows


def _read_csv(content: bytes) -> List[Dict[str, object]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ImportParseError("File is not valid UTF-8 text")

    try:
        reader = csv.reader(io.StringIO(text))
        headers = next(reader, None)
        if not headers:
            raise ImportParseError("File is empty")
        return _build_rows(headers, list(reader))
    except csv.Error as exc:
        raise ImportParseError(f"Malformed CSV: {exc}")


def _read_xlsx(content: bytes) -> List[Dict[str, object]]:
    try:
        wb = load_workbook(filename=io.BytesIO(content), read_only=True, data_only=True)
    except Exception as exc:
        raise ImportParseError(f"Unreadable workbook: {exc}")

    # read-only workbooks hold their source open until closed
    try:
        ws = wb.active
        rows_iter = ws.iter_rows(values_only=True)
        first = next(rows_iter, None)
        if not first:
            raise ImportParseError("File is empty")
        headers = [_cell_text(cell) for cell in first]
        return _build_rows(headers, list(rows_iter))
    finally:
        wb.close()


def parse_player_file(filename: Optional[str], content: bytes) -> List[Dict[str, object]]:
    """Parse an uploaded player sheet into row dicts.

    Any structural problem aborts the whole import with ImportParseError,
    before anything is written.
    """
    if not content:
        raise ImportParseError("No file uploaded")
    if str(filename or "").lower().endswith(".xlsx"):
        return _read_xlsx(content)
    return _read_csv(content)


def find_category_by_title(db: Session, title: str) -> Optional[Category]:
    title_key = normalize_title(title)
    if not title_key:
        return None
    return (
        db.query(Category)
        .filter(func.lower(func.trim(Category.title)) == title_key)
        .order_by(Category.id.asc())
        .first()
    )


def find_game_by_title(db: Session, title: str, category_id: int) -> Optional[Game]:
    title_key = normalize_title(title)
    if not title_key:
        return None
    return (
        db.query(Game)
        .filter(Game.category_id == category_id)
        .filter(func.lower(func.trim(Game.title)) == title_key)
        .order_by(Game.id.asc())
        .first()
    )


def player_exists(db: Session, cnic: str, category_id: int, game_id: int) -> bool:
    return db.query(Player.id).filter(
        Player.cnic == cnic,
        Player.category_id == category_id,
        Player.game_id == game_id,
    ).first() is not None


def import_players(db: Session, rows: Iterable[Dict[str, object]]) -> int:
    """Insert parsed rows in order and return how many were inserted.

    Rows with an unknown category or game, missing identity fields, or an
    existing (cnic, category, game) match are skipped without failing the batch.
    """
    inserted = 0
    for row in rows:
        label = row.get("name") or f"row {row.get('row')}"
        if not row.get("name") or not row.get("cnic") or not row.get("phone"):
            logger.warning("Skipping %s: name, cnic and phone are required", label)
            continue

        category = find_category_by_title(db, row.get("category"))
        if not category:
            logger.warning("Skipping %s: category '%s' not found", label, row.get("category"))
            continue

        game = find_game_by_title(db, row.get("game"), category.id)
        if not game:
            logger.warning("Skipping %s: game '%s' not found in category '%s'", label, row.get("game"), category.title)
            continue

        cnic = str(row["cnic"])
        if player_exists(db, cnic, category.id, game.id):
            logger.info("Duplicate found: %s - skipping", label)
            continue

        db.add(Player(
            name=row["name"],
            cnic=cnic,
            phone=row["phone"],
            email=row.get("email"),
            ticket_price=float(row["ticket_price"]),
            category_id=category.id,
            game_id=game.id,
        ))
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info("Duplicate found on insert: %s - skipping", label)
            continue
        inserted += 1

    return inserted
