"""Repository layer responsible for all database access."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping, Optional, Sequence

from hotel_backend.domain.errors import (
    ConflictError,
    InvalidInputError,
    StoreError,
    StoreTimeoutError,
)
from hotel_backend.domain.models import (
    BedType,
    Booking,
    Facility,
    Hotel,
    Page,
    Role,
    RoomType,
    StayInterval,
    User,
)
from hotel_backend.domain.queries import ListQuery
from hotel_backend.utils.config import Settings, get_settings
from hotel_backend.utils.logger import get_logger


logger = get_logger(__name__)

AdmissionGuard = Callable[[int, list[StayInterval]], None]
RescheduleGuard = Callable[[list[StayInterval]], None]

_HOTEL_COLUMNS = ("name", "address", "district", "province", "postalcode", "tel", "picture", "description")
_ROOM_TYPE_COLUMNS = (
    "name",
    "description",
    "capacity",
    "bed_type",
    "size",
    "amenities",
    "facilities",
    "base_price",
    "currency",
    "total_rooms",
    "is_available",
)
_USER_COLUMNS = ("name", "email", "tel", "role")


def _row_to_hotel(row: sqlite3.Row) -> Hotel:
    return Hotel(
        hotel_id=int(row["id"]),
        name=str(row["name"]),
        address=str(row["address"]),
        district=str(row["district"]),
        province=str(row["province"]),
        postalcode=str(row["postalcode"]),
        tel=row["tel"],
        picture=row["picture"],
        description=row["description"],
        created_at=row["created_at"],
    )


def _row_to_room_type(row: sqlite3.Row) -> RoomType:
    return RoomType(
        room_type_id=int(row["id"]),
        hotel_id=int(row["hotel_id"]),
        name=str(row["name"]),
        capacity=int(row["capacity"]),
        bed_type=BedType(row["bed_type"]),
        total_rooms=int(row["total_rooms"]),
        is_available=bool(row["is_available"]),
        description=row["description"],
        size=row["size"],
        amenities=tuple(json.loads(row["amenities"] or "[]")),
        facilities=tuple(Facility(item) for item in json.loads(row["facilities"] or "[]")),
        base_price=None if row["base_price"] is None else float(row["base_price"]),
        currency=str(row["currency"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_booking(row: sqlite3.Row) -> Booking:
    return Booking(
        booking_id=int(row["id"]),
        user_id=int(row["user_id"]),
        hotel_id=int(row["hotel_id"]),
        room_type_id=int(row["room_type_id"]),
        checkin_date=date.fromisoformat(row["checkin_date"]),
        checkout_date=date.fromisoformat(row["checkout_date"]),
        created_at=row["created_at"],
    )


def _encode_room_type_value(column: str, value: Any) -> Any:
    if column in ("amenities", "facilities"):
        return json.dumps([getattr(item, "value", item) for item in (value or [])])
    if column == "bed_type":
        return getattr(value, "value", value)
    if column == "is_available":
        return 1 if value else 0
    return value


class DataRepository:
    """Encapsulates SQLite access so business logic stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self, *, autocommit: bool = False) -> sqlite3.Connection:
        connection = sqlite3.connect(
            self._db_path,
            timeout=self._settings.store_timeout_seconds,
            isolation_level=None if autocommit else "",
            check_same_thread=False,
        )
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    @contextmanager
    def _session(self, *, write: bool = False) -> Iterator[sqlite3.Connection]:
        """Yield a connection and translate driver failures into store errors."""
        connection = self._connect()
        try:
            with connection:
                yield connection
        except sqlite3.IntegrityError as exc:
            message = str(exc)
            if "UNIQUE" in message:
                raise ConflictError(_describe_unique_violation(message)) from exc
            if "FOREIGN KEY" in message:
                raise InvalidInputError("Referenced record does not exist") from exc
            raise StoreError(f"Integrity violation: {message}") from exc
        except sqlite3.OperationalError as exc:
            if _is_lock_timeout(exc):
                raise StoreTimeoutError(
                    "Store call timed out waiting for a database lock",
                    retryable=not write,
                ) from exc
            raise StoreError(f"Store operation failed: {exc}") from exc
        except sqlite3.Error as exc:
            raise StoreError(f"Store operation failed: {exc}") from exc
        finally:
            connection.close()

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Users (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL,
                        email TEXT NOT NULL UNIQUE COLLATE NOCASE,
                        tel TEXT NOT NULL,
                        role TEXT NOT NULL DEFAULT 'user'
                            CHECK (role IN ('user', 'manager', 'admin')),
                        password_hash TEXT NOT NULL,
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )
                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Hotels (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL UNIQUE,
                        address TEXT NOT NULL,
                        district TEXT NOT NULL,
                        province TEXT NOT NULL,
                        postalcode TEXT NOT NULL,
                        tel TEXT,
                        picture TEXT,
                        description TEXT,
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )
                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS ManagedHotels (
                        user_id INTEGER NOT NULL,
                        hotel_id INTEGER NOT NULL,
                        PRIMARY KEY (user_id, hotel_id),
                        FOREIGN KEY (user_id) REFERENCES Users(id) ON DELETE CASCADE,
                        FOREIGN KEY (hotel_id) REFERENCES Hotels(id) ON DELETE CASCADE
                    );
                    """
                )
                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS RoomTypes (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        hotel_id INTEGER NOT NULL,
                        name TEXT NOT NULL,
                        description TEXT,
                        capacity INTEGER NOT NULL CHECK (capacity >= 1),
                        bed_type TEXT NOT NULL,
                        size TEXT,
                        amenities TEXT NOT NULL DEFAULT '[]',
                        facilities TEXT NOT NULL DEFAULT '[]',
                        base_price REAL CHECK (base_price IS NULL OR base_price >= 0),
                        currency TEXT NOT NULL DEFAULT 'THB',
                        total_rooms INTEGER NOT NULL CHECK (total_rooms >= 0),
                        is_available INTEGER NOT NULL DEFAULT 1 CHECK (is_available IN (0, 1)),
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        UNIQUE (hotel_id, name),
                        FOREIGN KEY (hotel_id) REFERENCES Hotels(id) ON DELETE CASCADE
                    );
                    """
                )
                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Bookings (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        user_id INTEGER NOT NULL,
                        hotel_id INTEGER NOT NULL,
                        room_type_id INTEGER NOT NULL,
                        checkin_date TEXT NOT NULL,
                        checkout_date TEXT NOT NULL,
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        CHECK (checkin_date < checkout_date),
                        FOREIGN KEY (user_id) REFERENCES Users(id) ON DELETE CASCADE,
                        FOREIGN KEY (hotel_id) REFERENCES Hotels(id) ON DELETE CASCADE,
                        FOREIGN KEY (room_type_id) REFERENCES RoomTypes(id) ON DELETE CASCADE
                    );
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_room_types_hotel
                    ON RoomTypes(hotel_id);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_bookings_room_type_dates
                    ON Bookings(room_type_id, checkin_date, checkout_date);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_bookings_user
                    ON Bookings(user_id);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise StoreError(f"Database initialization failed: {exc}") from exc

    # --- Users ---

    def create_user(
        self,
        *,
        name: str,
        email: str,
        tel: str,
        role: Role,
        password_hash: str,
    ) -> User:
        with self._session(write=True) as conn:
            cursor = conn.execute(
                """
                INSERT INTO Users (name, email, tel, role, password_hash)
                VALUES (?, ?, ?, ?, ?);
                """,
                (name, email, tel, role.value, password_hash),
            )
            user_id = int(cursor.lastrowid)
            return self._load_user(conn, user_id)

    def _load_user(self, conn: sqlite3.Connection, user_id: int) -> Optional[User]:
        row = conn.execute(
            "SELECT id, name, email, tel, role, created_at FROM Users WHERE id = ?;",
            (user_id,),
        ).fetchone()
        if row is None:
            return None
        managed = conn.execute(
            "SELECT hotel_id FROM ManagedHotels WHERE user_id = ? ORDER BY hotel_id;",
            (user_id,),
        ).fetchall()
        return User(
            user_id=int(row["id"]),
            name=str(row["name"]),
            email=str(row["email"]),
            tel=str(row["tel"]),
            role=Role(row["role"]),
            managed_hotel_ids=frozenset(int(item["hotel_id"]) for item in managed),
            created_at=row["created_at"],
        )

    def get_user(self, user_id: int) -> Optional[User]:
        with self._session() as conn:
            return self._load_user(conn, user_id)

    def get_credentials(self, email: str) -> Optional[tuple[User, str]]:
        """Return the user and stored password hash for a login email."""
        with self._session() as conn:
            row = conn.execute(
                "SELECT id, password_hash FROM Users WHERE email = ?;",
                (email,),
            ).fetchone()
            if row is None:
                return None
            return self._load_user(conn, int(row["id"])), str(row["password_hash"])

    def count_users_with_role(self, role: Role) -> int:
        with self._session() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS count FROM Users WHERE role = ?;",
                (role.value,),
            ).fetchone()
            return int(row["count"])

    def list_users(self, query: ListQuery) -> Page:
        where_sql, params = query.where_clause()
        with self._session() as conn:
            total = int(
                conn.execute(f"SELECT COUNT(*) AS count FROM Users {where_sql};", params).fetchone()["count"]
            )
            rows = conn.execute(
                f"""
                SELECT id FROM Users
                {where_sql}
                {query.order_clause()}
                LIMIT ? OFFSET ?;
                """,
                (*params, query.limit, query.offset),
            ).fetchall()
            users = [self._load_user(conn, int(row["id"])) for row in rows]
        return Page(items=users, total=total, page=query.page, limit=query.limit)

    def update_user(
        self,
        user_id: int,
        changes: Mapping[str, Any],
        managed_hotel_ids: Optional[Sequence[int]] = None,
    ) -> Optional[User]:
        assignments = {column: changes[column] for column in _USER_COLUMNS if column in changes}
        if "role" in assignments:
            assignments["role"] = getattr(assignments["role"], "value", assignments["role"])
        with self._session(write=True) as conn:
            if assignments:
                set_sql = ", ".join(f"{column} = ?" for column in assignments)
                cursor = conn.execute(
                    f"UPDATE Users SET {set_sql} WHERE id = ?;",
                    (*assignments.values(), user_id),
                )
                if cursor.rowcount == 0:
                    return None
            if managed_hotel_ids is not None:
                conn.execute("DELETE FROM ManagedHotels WHERE user_id = ?;", (user_id,))
                conn.executemany(
                    "INSERT INTO ManagedHotels (user_id, hotel_id) VALUES (?, ?);",
                    [(user_id, hotel_id) for hotel_id in sorted(set(managed_hotel_ids))],
                )
            return self._load_user(conn, user_id)

    def delete_user(self, user_id: int) -> bool:
        """Delete a user; bookings and manager grants cascade."""
        with self._session(write=True) as conn:
            cursor = conn.execute("DELETE FROM Users WHERE id = ?;", (user_id,))
            return cursor.rowcount > 0

    # --- Hotels ---

    def create_hotel(self, fields: Mapping[str, Any]) -> Hotel:
        values = {column: fields.get(column) for column in _HOTEL_COLUMNS}
        placeholders = ", ".join("?" for _ in values)
        with self._session(write=True) as conn:
            cursor = conn.execute(
                f"INSERT INTO Hotels ({', '.join(values)}) VALUES ({placeholders});",
                tuple(values.values()),
            )
            row = conn.execute("SELECT * FROM Hotels WHERE id = ?;", (cursor.lastrowid,)).fetchone()
            return _row_to_hotel(row)

    def get_hotel(self, hotel_id: int) -> Optional[Hotel]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM Hotels WHERE id = ?;", (hotel_id,)).fetchone()
            return None if row is None else _row_to_hotel(row)

    def list_hotels(self, query: ListQuery) -> Page:
        where_sql, params = query.where_clause()
        with self._session() as conn:
            total = int(
                conn.execute(f"SELECT COUNT(*) AS count FROM Hotels {where_sql};", params).fetchone()["count"]
            )
            rows = conn.execute(
                f"""
                SELECT * FROM Hotels
                {where_sql}
                {query.order_clause()}
                LIMIT ? OFFSET ?;
                """,
                (*params, query.limit, query.offset),
            ).fetchall()
        return Page(
            items=[_row_to_hotel(row) for row in rows],
            total=total,
            page=query.page,
            limit=query.limit,
        )

    def list_all_hotels(self) -> list[Hotel]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM Hotels ORDER BY id ASC;").fetchall()
        return [_row_to_hotel(row) for row in rows]

    def list_hotels_by_ids(self, hotel_ids: Sequence[int]) -> list[Hotel]:
        if not hotel_ids:
            return []
        placeholders = ",".join("?" for _ in hotel_ids)
        with self._session() as conn:
            rows = conn.execute(
                f"SELECT * FROM Hotels WHERE id IN ({placeholders}) ORDER BY id ASC;",
                tuple(hotel_ids),
            ).fetchall()
        return [_row_to_hotel(row) for row in rows]

    def update_hotel(self, hotel_id: int, changes: Mapping[str, Any]) -> Optional[Hotel]:
        assignments = {column: changes[column] for column in _HOTEL_COLUMNS if column in changes}
        with self._session(write=True) as conn:
            if assignments:
                set_sql = ", ".join(f"{column} = ?" for column in assignments)
                conn.execute(
                    f"UPDATE Hotels SET {set_sql} WHERE id = ?;",
                    (*assignments.values(), hotel_id),
                )
            row = conn.execute("SELECT * FROM Hotels WHERE id = ?;", (hotel_id,)).fetchone()
            return None if row is None else _row_to_hotel(row)

    def delete_hotel(self, hotel_id: int) -> bool:
        """Delete a hotel; room types, bookings, and manager grants cascade."""
        with self._session(write=True) as conn:
            cursor = conn.execute("DELETE FROM Hotels WHERE id = ?;", (hotel_id,))
            return cursor.rowcount > 0

    # --- Room types ---

    def create_room_type(self, hotel_id: int, fields: Mapping[str, Any]) -> RoomType:
        values = {
            column: _encode_room_type_value(column, fields[column])
            for column in _ROOM_TYPE_COLUMNS
            if column in fields
        }
        values["hotel_id"] = hotel_id
        placeholders = ", ".join("?" for _ in values)
        with self._session(write=True) as conn:
            cursor = conn.execute(
                f"INSERT INTO RoomTypes ({', '.join(values)}) VALUES ({placeholders});",
                tuple(values.values()),
            )
            row = conn.execute("SELECT * FROM RoomTypes WHERE id = ?;", (cursor.lastrowid,)).fetchone()
            return _row_to_room_type(row)

    def get_room_type(self, room_type_id: int) -> Optional[RoomType]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM RoomTypes WHERE id = ?;", (room_type_id,)).fetchone()
            return None if row is None else _row_to_room_type(row)

    def list_room_types(self, hotel_id: Optional[int] = None) -> list[RoomType]:
        with self._session() as conn:
            if hotel_id is None:
                rows = conn.execute("SELECT * FROM RoomTypes ORDER BY id ASC;").fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM RoomTypes WHERE hotel_id = ? ORDER BY id ASC;",
                    (hotel_id,),
                ).fetchall()
        return [_row_to_room_type(row) for row in rows]

    def update_room_type(self, room_type_id: int, changes: Mapping[str, Any]) -> Optional[RoomType]:
        assignments = {
            column: _encode_room_type_value(column, changes[column])
            for column in _ROOM_TYPE_COLUMNS
            if column in changes
        }
        with self._session(write=True) as conn:
            if assignments:
                set_sql = ", ".join(f"{column} = ?" for column in assignments)
                conn.execute(
                    f"UPDATE RoomTypes SET {set_sql}, updated_at = CURRENT_TIMESTAMP WHERE id = ?;",
                    (*assignments.values(), room_type_id),
                )
            row = conn.execute("SELECT * FROM RoomTypes WHERE id = ?;", (room_type_id,)).fetchone()
            return None if row is None else _row_to_room_type(row)

    def delete_room_type(self, room_type_id: int) -> bool:
        """Delete a room type; its bookings cascade."""
        with self._session(write=True) as conn:
            cursor = conn.execute("DELETE FROM RoomTypes WHERE id = ?;", (room_type_id,))
            return cursor.rowcount > 0

    # --- Bookings ---

    def get_booking(self, booking_id: int) -> Optional[Booking]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM Bookings WHERE id = ?;", (booking_id,)).fetchone()
            return None if row is None else _row_to_booking(row)

    def list_bookings(
        self,
        *,
        user_id: Optional[int] = None,
        hotel_id: Optional[int] = None,
    ) -> list[Booking]:
        clauses: list[str] = []
        params: list[int] = []
        if user_id is not None:
            clauses.append("user_id = ?")
            params.append(user_id)
        if hotel_id is not None:
            clauses.append("hotel_id = ?")
            params.append(hotel_id)
        where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._session() as conn:
            rows = conn.execute(
                f"SELECT * FROM Bookings {where_sql} ORDER BY checkin_date ASC, id ASC;",
                params,
            ).fetchall()
        return [_row_to_booking(row) for row in rows]

    def count_bookings_for_user(self, user_id: int) -> int:
        with self._session() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS count FROM Bookings WHERE user_id = ?;",
                (user_id,),
            ).fetchone()
            return int(row["count"])

    @staticmethod
    def _select_stays(
        conn: sqlite3.Connection,
        room_type_id: int,
        range_start: date,
        range_end: date,
        exclude_booking_id: Optional[int],
    ) -> list[StayInterval]:
        rows = conn.execute(
            """
            SELECT checkin_date, checkout_date
            FROM Bookings
            WHERE room_type_id = ?
              AND checkin_date < ?
              AND checkout_date > ?
              AND id != ?
            ORDER BY checkin_date ASC, id ASC;
            """,
            (room_type_id, range_end.isoformat(), range_start.isoformat(), exclude_booking_id or 0),
        ).fetchall()
        return [
            StayInterval(
                checkin=date.fromisoformat(row["checkin_date"]),
                checkout=date.fromisoformat(row["checkout_date"]),
            )
            for row in rows
        ]

    def list_stays_for_room_type(
        self,
        room_type_id: int,
        range_start: date,
        range_end: date,
    ) -> list[StayInterval]:
        """Return stays of a room type that overlap ``[range_start, range_end)``."""
        with self._session() as conn:
            return self._select_stays(conn, room_type_id, range_start, range_end, None)

    @contextmanager
    def _immediate_transaction(self, action: str) -> Iterator[sqlite3.Connection]:
        """Hold the database write lock for reads and writes that must agree."""
        connection = self._connect(autocommit=True)
        try:
            connection.execute("BEGIN IMMEDIATE;")
            try:
                yield connection
                connection.execute("COMMIT;")
            except BaseException:
                if connection.in_transaction:
                    connection.execute("ROLLBACK;")
                raise
        except sqlite3.IntegrityError as exc:
            if "FOREIGN KEY" in str(exc):
                raise InvalidInputError("Referenced user, hotel, or room type does not exist") from exc
            raise StoreError(f"Integrity violation: {exc}") from exc
        except sqlite3.OperationalError as exc:
            if _is_lock_timeout(exc):
                raise StoreTimeoutError(
                    f"{action} timed out waiting for a database lock",
                    retryable=False,
                ) from exc
            raise StoreError(f"Store operation failed: {exc}") from exc
        except sqlite3.Error as exc:
            raise StoreError(f"Store operation failed: {exc}") from exc
        finally:
            connection.close()

    def create_booking(
        self,
        *,
        user_id: int,
        hotel_id: int,
        room_type_id: int,
        stay: StayInterval,
        guard: Optional[AdmissionGuard] = None,
    ) -> Booking:
        """Insert a booking inside one immediate transaction.

        ``guard`` receives the user's current booking count and the room type's
        overlapping stays read under the write lock, and raises to veto the
        insert, so concurrent admissions cannot both pass the same check.
        """
        with self._immediate_transaction("Booking write") as connection:
            if guard is not None:
                existing = int(
                    connection.execute(
                        "SELECT COUNT(*) AS count FROM Bookings WHERE user_id = ?;",
                        (user_id,),
                    ).fetchone()["count"]
                )
                stays = self._select_stays(connection, room_type_id, stay.checkin, stay.checkout, None)
                guard(existing, stays)
            cursor = connection.execute(
                """
                INSERT INTO Bookings (user_id, hotel_id, room_type_id, checkin_date, checkout_date)
                VALUES (?, ?, ?, ?, ?);
                """,
                (user_id, hotel_id, room_type_id, stay.checkin.isoformat(), stay.checkout.isoformat()),
            )
            row = connection.execute("SELECT * FROM Bookings WHERE id = ?;", (cursor.lastrowid,)).fetchone()
            return _row_to_booking(row)

    def update_booking_dates(
        self,
        booking_id: int,
        stay: StayInterval,
        guard: Optional[RescheduleGuard] = None,
    ) -> Optional[Booking]:
        """Move a booking to new dates inside one immediate transaction.

        ``guard`` receives the stays overlapping the new dates, excluding this
        booking, read under the write lock.
        """
        with self._immediate_transaction("Booking update") as connection:
            current = connection.execute("SELECT * FROM Bookings WHERE id = ?;", (booking_id,)).fetchone()
            if current is None:
                return None
            if guard is not None:
                stays = self._select_stays(
                    connection,
                    int(current["room_type_id"]),
                    stay.checkin,
                    stay.checkout,
                    booking_id,
                )
                guard(stays)
            connection.execute(
                "UPDATE Bookings SET checkin_date = ?, checkout_date = ? WHERE id = ?;",
                (stay.checkin.isoformat(), stay.checkout.isoformat(), booking_id),
            )
            row = connection.execute("SELECT * FROM Bookings WHERE id = ?;", (booking_id,)).fetchone()
            return _row_to_booking(row)

    def delete_booking(self, booking_id: int) -> bool:
        with self._session(write=True) as conn:
            cursor = conn.execute("DELETE FROM Bookings WHERE id = ?;", (booking_id,))
            return cursor.rowcount > 0

    # --- Seeding ---

    def seed_demo_data(self) -> int:
        """Seed demo hotels and room types only when no hotel exists."""
        with self._session(write=True) as conn:
            hotel_count = int(conn.execute("SELECT COUNT(*) AS count FROM Hotels;").fetchone()["count"])
            if hotel_count > 0:
                logger.info("Demo data already present; skipping seed")
                return 0

            hotels = [
                ("Riverside Grand", "88 Charoen Krung Rd", "Bang Rak", "Bangkok", "10500", "021234567"),
                ("Old Town Inn", "12 Ratchadamnoen Rd", "Mueang", "Chiang Mai", "50200", "053123456"),
                ("Andaman Bay Resort", "5 Patong Beach Rd", "Kathu", "Phuket", "83150", "076123456"),
            ]
            room_types = [
                ("Standard Double", 2, BedType.DOUBLE.value, 1800.0, 10),
                ("Deluxe King", 2, BedType.KING.value, 3200.0, 6),
                ("Family Twin", 4, BedType.TWIN.value, 4100.0, 3),
            ]
            for name, address, district, province, postalcode, tel in hotels:
                cursor = conn.execute(
                    """
                    INSERT INTO Hotels (name, address, district, province, postalcode, tel, description)
                    VALUES (?, ?, ?, ?, ?, ?, ?);
                    """,
                    (name, address, district, province, postalcode, tel, f"{name} in {province}"),
                )
                hotel_id = int(cursor.lastrowid)
                conn.executemany(
                    """
                    INSERT INTO RoomTypes (hotel_id, name, capacity, bed_type, base_price, total_rooms)
                    VALUES (?, ?, ?, ?, ?, ?);
                    """,
                    [(hotel_id, *room_type) for room_type in room_types],
                )
        seeded = len(hotels) * len(room_types)
        logger.info("Demo seed completed | hotels=%s | room_types=%s", len(hotels), seeded)
        return seeded


def _is_lock_timeout(exc: sqlite3.OperationalError) -> bool:
    message = str(exc).lower()
    return "locked" in message or "busy" in message


def _describe_unique_violation(message: str) -> str:
    if "Users.email" in message:
        return "A user with this email already exists"
    if "Hotels.name" in message:
        return "A hotel with this name already exists"
    if "RoomTypes" in message:
        return "Room type name must be unique within the same hotel"
    return "Duplicate value violates a uniqueness constraint"
