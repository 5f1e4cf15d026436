#!/usr/bin/env python3
#      _                 __                 _
#  ___| |_ ___  _ __ ___ / _|_ __ ___  _ __ | |_
# / __| __/ _ \| '__/ _ \ |_| '__/ _ \| '_ \| __|
# \__ \ || (_) | | |  __/  _| | | (_) | | | | |_
# |___/\__\___/|_|  \___|_| |_|  \___/|_| |_|\__| 🛒
#
# text-menu client for the retail catalog database
# --sql is used for syntax highlighting inline sql queries

import json
import logging
import logging.handlers
import math
import os
import signal
import sys
from contextlib import closing, contextmanager, suppress
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

import psycopg2
from termcolor import cprint, colored
from colorama import just_fix_windows_console as enable_windows_ansi_interpretation

# fix windows terminal misinterpreting ansi escape sequences
enable_windows_ansi_interpretation()

logger = logging.getLogger("storefront")
logger.addHandler(logging.NullHandler())

# constants
DB_HOST = "localhost"
NEARBY_RADIUS = 30
TOP_N = 5
UNRECOGNIZED_CHOICE = 69
LOGOUT_CHOICE = 20
ORDER_SEQUENCE = "orders_ordernumber_seq"
SUPPLY_REQUEST_SEQUENCE = "productsupplyrequests_requestnumber_seq"
BANNER = "=*" * 45 + "="


# errors
class ConnectError(Exception):
    """database unreachable at startup"""


class DatabaseError(Exception):
    """statement or query rejected by the server"""


class ConnectionLost(Exception):
    """connection dropped mid-session; not recoverable inside a handler"""


class DomainError(Exception):
    """input parsed fine but breaks a handler precondition"""


# logging
class JsonFormatter(logging.Formatter):
    """format log records as one json object per line"""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.module,
            "message": record.getMessage(),
        }
        if hasattr(record, "user_id"):
            log_record["user_id"] = getattr(record, "user_id")
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


def default_log_dir() -> str:
    """$XDG_STATE_HOME/storefront, falling back to ~/.local/state/storefront"""
    state_home = os.environ.get("XDG_STATE_HOME") or os.path.join(os.path.expanduser("~"), ".local", "state")
    return os.path.join(state_home, "storefront")


def configure_logging(log_dir: str | None = None, level: int = logging.INFO) -> None:
    """send json logs to a rotating file; the terminal belongs to the menu

    Args:
        log_dir: directory for the log file, created if missing.
            defaults to `default_log_dir()`.
        level: level for the storefront logger.
    """
    log_dir = log_dir or default_log_dir()
    os.makedirs(log_dir, exist_ok=True)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    file_handler = logging.handlers.RotatingFileHandler(
        filename=os.path.join(log_dir, "storefront.log"),
        maxBytes=5 * 1024 * 1024,  # 5 MB per log file
        backupCount=3,
    )
    file_handler.setFormatter(JsonFormatter())
    file_handler.setLevel(level)
    logger.addHandler(file_handler)
    logger.propagate = False


# helpers
def safe_int(value: str):
    """return int value or none if invalid"""
    try:
        return int(value)
    except ValueError:
        return None


def print_banner(title: str):
    """print a framed section title"""
    print("\n" + BANNER)
    cprint(f"\t\t\t    {title}", attrs=["bold"])
    print(BANNER)


def print_rule():
    """close a framed section"""
    print(BANNER + "\n")


def print_error(message: str):
    """errors go to stderr"""
    cprint(message, "red", file=sys.stderr)


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """euclidean distance treating (lat, lon) as planar coordinates

    this is not a great-circle distance; the catalog reports it as miles
    because the seed data lives on a small 0-100 grid.
    """
    return math.hypot(lat1 - lat2, lon1 - lon2)


# input
def read_line(prompt: str) -> str:
    """read one trimmed line"""
    return input(colored(prompt, "magenta")).strip()


def read_int(prompt: str) -> int:
    """keep asking until the line parses as an integer"""
    while True:
        value = safe_int(read_line(prompt))
        if value is not None:
            return value
        cprint("your input is invalid!", "red")


def read_float(prompt: str) -> float:
    """keep asking until the line parses as a finite decimal"""
    while True:
        raw = read_line(prompt)
        try:
            value = float(raw)
        except ValueError:
            value = None
        if value is not None and math.isfinite(value):
            return value
        cprint("your input is invalid!", "red")


def read_choice(permitted: frozenset[int] | None = None) -> int:
    """read a menu choice; choices outside `permitted` become the unrecognized sentinel"""
    choice = read_int("\nPlease make your choice: ")
    if permitted is not None and choice not in permitted:
        return UNRECOGNIZED_CHOICE
    return choice


# configuration
@dataclass
class ConnectionSettings:
    """where the catalog database lives"""
    dbname: str
    port: str
    user: str
    host: str = DB_HOST
    password: str = ""


# database layer
class Gateway:
    """Own the single catalog connection and expose the query primitives.

    SQL is written with ``?`` placeholders and adapted to the driver's
    paramstyle, so the same statements run on psycopg2 and on sqlite3.
    Outside :meth:`transaction` every call commits (or rolls back on
    failure) before returning.
    """

    def __init__(self, conn, paramstyle: str = psycopg2.paramstyle):
        self.conn = conn
        self.paramstyle = paramstyle
        self._in_transaction = False

    @classmethod
    def connect(cls, settings: ConnectionSettings) -> "Gateway":
        """open the catalog connection or raise ConnectError"""
        try:
            conn = psycopg2.connect(
                host=settings.host,
                port=settings.port,
                dbname=settings.dbname,
                user=settings.user,
                password=settings.password,
            )
        except psycopg2.Error as e:
            raise ConnectError(str(e).strip()) from e
        logger.info("connected to %s:%s/%s", settings.host, settings.port, settings.dbname)
        return cls(conn, psycopg2.paramstyle)

    def _adapt(self, sql: str) -> str:
        if self.paramstyle in ("format", "pyformat"):
            return sql.replace("?", "%s")
        return sql

    def _is_lost(self, error: Exception) -> bool:
        return isinstance(error, self.conn.InterfaceError) or bool(getattr(self.conn, "closed", 0))

    def _run(self, sql: str, params, consume: Callable):
        try:
            with closing(self.conn.cursor()) as cur:
                cur.execute(self._adapt(sql), tuple(params))
                result = consume(cur)
            if not self._in_transaction:
                self.conn.commit()
            return result
        except self.conn.Error as e:
            if self._is_lost(e):
                raise ConnectionLost(str(e).strip()) from e
            if not self._in_transaction:
                with suppress(self.conn.Error):
                    self.conn.rollback()
            raise DatabaseError(str(e).strip()) from e

    def execute(self, sql: str, params=()) -> int:
        """run a statement; returns the affected row count"""
        return self._run(sql, params, lambda cur: cur.rowcount)

    def query_print(self, sql: str, params=()) -> int:
        """print a tab-separated header and rows; returns the row count"""
        def consume(cur):
            rows = cur.fetchall()
            if rows:
                print("\t".join(col[0] for col in cur.description))
                for row in rows:
                    print("\t".join(str(v) for v in row))
            return len(rows)
        return self._run(sql, params, consume)

    def query(self, sql: str, params=()) -> list[list[str | None]]:
        """return rows as lists of string fields"""
        return self._run(
            sql, params,
            lambda cur: [[None if v is None else str(v) for v in row] for row in cur.fetchall()]
        )

    def query_count(self, sql: str, params=()) -> int:
        """return the number of rows a query yields"""
        return self._run(sql, params, lambda cur: len(cur.fetchall()))

    def current_sequence_value(self, sequence: str) -> int:
        """current value of a sequence in this session, -1 if not readable"""
        try:
            rows = self.query("SELECT currval(?);", (sequence,))
        except DatabaseError:
            return -1
        return int(rows[0][0]) if rows and rows[0][0] is not None else -1

    @contextmanager
    def transaction(self):
        """group statements so they commit or roll back together"""
        if self._in_transaction:
            yield self
            return
        self._in_transaction = True
        try:
            yield self
        except BaseException:
            with suppress(self.conn.Error):
                self.conn.rollback()
            raise
        else:
            try:
                self.conn.commit()
            except self.conn.Error as e:
                with suppress(self.conn.Error):
                    self.conn.rollback()
                raise DatabaseError(str(e).strip()) from e
        finally:
            self._in_transaction = False

    def close(self):
        """close the connection if it is still open"""
        with suppress(self.conn.Error):
            self.conn.close()
        logger.info("disconnected")


# session
class Role(Enum):
    """user types; a higher value can do everything a lower one can"""
    CUSTOMER = 0
    MANAGER = 1
    ADMIN = 2

    @property
    def tag(self) -> str:
        return self.name.lower()

    @classmethod
    def from_tag(cls, raw: str | None) -> "Role":
        """parse a users.type value (char(10), so space padded)"""
        try:
            return cls[(raw or "").strip().upper()]
        except KeyError:
            raise ValueError(f"unknown user type {(raw or '').strip()!r}") from None


@dataclass
class Principal:
    user_id: int
    role: Role
    user_name: str


@dataclass
class Session:
    """the logged in user plus the stores found by the latest lookup"""
    principal: Principal | None = None
    nearby_stores: list[int] = field(default_factory=list)

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None

    @property
    def role(self) -> Role | None:
        return self.principal.role if self.principal else None

    @property
    def user_id(self) -> int | None:
        return self.principal.user_id if self.principal else None

    def clear(self):
        self.principal = None
        self.nearby_stores = []


# accounts/auth
class AccountManager:
    """create users, log in/out, and the admin user screens (plain text passwords)"""

    def __init__(self, db: Gateway, session: Session):
        self.db = db
        self.session = session

    def create_user(self):
        """insert a new customer account"""
        name = read_line("\n\tEnter name: ")
        password = read_line("\tEnter password: ")
        if not name or not password:
            cprint("name and password must not be empty", "red"); return
        latitude = read_float("\tEnter latitude: ")
        longitude = read_float("\tEnter longitude: ")
        self.db.execute(
            """--sql
            INSERT INTO Users (name, password, latitude, longitude, type)
            VALUES (?, ?, ?, ?, ?);
            """,
            (name, password, latitude, longitude, Role.CUSTOMER.tag)
        )
        logger.info("created user %s", name)
        cprint("user successfully created!", "green")

    def login(self) -> str | None:
        """check credentials; returns the name on success, none otherwise"""
        name = read_line("\n\tEnter name: ")
        password = read_line("\tEnter password: ")
        rows = self.db.query(
            "SELECT userID, name, type FROM Users WHERE name = ? AND password = ?;",
            (name, password)
        )
        if len(rows) != 1:
            logger.info("failed login for %s (%d matches)", name, len(rows))
            cprint("invalid name or password", "red")
            return None
        user_id, _, raw_type = rows[0]
        try:
            role = Role.from_tag(raw_type)
        except ValueError as e:
            logger.warning("login refused for %s: %s", name, e)
            cprint(str(e), "red")
            return None
        self.session.principal = Principal(int(user_id), role, name)
        self.session.nearby_stores = []
        logger.info("login", extra={"user_id": int(user_id)})
        prefix = f"{role.tag}: " if role is not Role.CUSTOMER else ""
        cprint(f"logged in as {prefix}{colored(name, 'yellow', attrs=['bold'])}", "green")
        return name

    def logout(self):
        """drop the session"""
        if not self.session.is_authenticated:
            cprint("no user logged in", "red"); return
        logger.info("logout", extra={"user_id": self.session.user_id})
        cprint(f"logged out {self.session.principal.user_name}", "green")
        self.session.clear()

    def view_users(self):
        """admin: print every user row"""
        print_banner("LIST ALL USERS: ")
        count = self.db.query_print(
            "SELECT userID, name, password, latitude, longitude, type FROM Users ORDER BY userID;"
        )
        print(f"\ntotal user(s): {count}")
        print_rule()

    def update_user(self):
        """admin: overwrite one user's row"""
        name = read_line("Enter the new name: ")
        password = read_line("Enter the new password: ")
        latitude = read_int("Enter the new latitude: ")
        longitude = read_int("Enter the new longitude: ")
        while True:
            raw_type = read_line("Enter the new type (customer/manager/admin): ")
            try:
                role = Role.from_tag(raw_type)
                break
            except ValueError as e:
                cprint(str(e), "red")
        user_id = read_int("Enter the userID to change: ")
        updated = self.db.execute(
            """--sql
            UPDATE Users
            SET name = ?, password = ?, latitude = ?, longitude = ?, type = ?
            WHERE userID = ?;
            """,
            (name, password, latitude, longitude, role.tag, user_id)
        )
        if not updated:
            cprint(f"no user with id {user_id}", "red"); return
        logger.info("updated user %d", user_id, extra={"user_id": self.session.user_id})
        cprint("user updated successfully.", "green")


# shared store helpers
def print_store_products(db: Gateway, store_id: int) -> int:
    """list a store's products; returns how many there are"""
    print_banner(f"List of products in store #{store_id}: ")
    rows = db.query(
        """--sql
        SELECT productName, numberOfUnits, pricePerUnit
        FROM Product
        WHERE storeID = ?
        ORDER BY productName;
        """,
        (store_id,)
    )
    for name, units, price in rows:
        print(f"Product name: {name.strip()}\t# of Units: {units}\tPrice per unit: {price}")
    print(f"\ntotal product(s): {len(rows)}")
    print_rule()
    return len(rows)


def product_stock(db: Gateway, store_id: int, product_name: str) -> int | None:
    """units on hand for (store, product), none if the store does not carry it"""
    rows = db.query(
        "SELECT numberOfUnits FROM Product WHERE storeID = ? AND productName = ?;",
        (store_id, product_name)
    )
    return int(rows[0][0]) if rows else None


def read_product_name(db: Gateway, store_id: int) -> tuple[str, int]:
    """prompt until the name matches a product of this store; returns (name, stock)"""
    while True:
        name = read_line("Enter the product name: ")
        stock = product_stock(db, store_id, name)
        if stock is not None:
            return name, stock
        cprint("product does not exist.", "red")


def read_positive_int(prompt: str) -> int:
    """prompt until the value is > 0"""
    while True:
        value = read_int(prompt)
        if value > 0:
            return value
        cprint("number has to be larger than 0", "red")


def read_non_negative_int(prompt: str) -> int:
    """prompt until the value is >= 0"""
    while True:
        value = read_int(prompt)
        if value >= 0:
            return value
        cprint("number must not be negative", "red")


def select_managed_store(db: Gateway, session: Session) -> int:
    """pick one of the stores the principal manages"""
    print_banner("List of stores managing: ")
    rows = db.query(
        "SELECT storeID FROM Store WHERE managerID = ? ORDER BY storeID;",
        (session.user_id,)
    )
    stores = [int(r[0]) for r in rows]
    for store_id in stores:
        print(store_id)
    print_rule()
    if not stores:
        raise DomainError("you do not manage any stores")
    if len(stores) == 1:
        cprint(f"{stores[0]} has been automatically selected.\n", "green")
        return stores[0]
    while True:
        store_id = read_int("Select one of the following storeID you manage: ")
        if store_id in stores:
            return store_id
        cprint("\nInvalid store option.", "red")


# order management
class OrderManager:
    """browse stores and products, place and review orders"""

    def __init__(self, db: Gateway, session: Session):
        self.db = db
        self.session = session

    def _principal_location(self) -> tuple[float, float]:
        rows = self.db.query(
            "SELECT latitude, longitude FROM Users WHERE userID = ?;",
            (self.session.user_id,)
        )
        if not rows:
            raise DomainError("could not find your location")
        return float(rows[0][0]), float(rows[0][1])

    def find_nearby_stores(self) -> list[tuple[int, float]]:
        """(store id, distance) for every store within the radius"""
        latitude, longitude = self._principal_location()
        found = []
        for store_id, store_lat, store_lon in self.db.query(
            "SELECT storeID, latitude, longitude FROM Store ORDER BY storeID;"
        ):
            distance = calculate_distance(latitude, longitude, float(store_lat), float(store_lon))
            if distance <= NEARBY_RADIUS:
                found.append((int(store_id), distance))
        return found

    def view_stores(self):
        """print nearby stores and remember them for ordering"""
        self.session.nearby_stores = []
        stores = self.find_nearby_stores()
        self.session.nearby_stores = [store_id for store_id, _ in stores]
        print_banner(f"STORES WITHIN {NEARBY_RADIUS} MILES OF YOUR LOCATION: ")
        for store_id, distance in stores:
            print(f"Store ID: {store_id}\t\tDistance: {distance:.2f} miles")
        if not stores:
            cprint(f"no stores found within {NEARBY_RADIUS} miles of your location.", "yellow")
        print_rule()

    def view_products(self):
        """list the products of any store id in [0, store count]"""
        store_count = self.db.query_count("SELECT storeID FROM Store;")
        while True:
            store_id = read_int(f"\n\tEnter Store ID (0-{store_count}): ")
            if 0 <= store_id <= store_count:
                break
            cprint(f"store invalid! please enter a store between 0 and {store_count}", "red")
        print_store_products(self.db, store_id)

    def place_order(self):
        """order units of a product from a nearby store"""
        self.view_stores()
        if not self.session.nearby_stores:
            raise DomainError("you have no stores near you.")
        while True:
            store_id = read_int("\nEnter one of the following storeID: ")
            if store_id in self.session.nearby_stores:
                break
            cprint("\nInvalid store option.", "red")

        print_store_products(self.db, store_id)
        product_name, stock = read_product_name(self.db, store_id)
        if stock <= 0:
            raise DomainError(f"{product_name} is out of stock in store #{store_id}")
        while True:
            units = read_positive_int("Enter the number of units: ")
            if units <= stock:
                break
            cprint(f"only {stock} unit(s) in stock", "red")

        with self.db.transaction():
            decremented = self.db.execute(
                """--sql
                UPDATE Product
                SET numberOfUnits = numberOfUnits - ?
                WHERE storeID = ? AND productName = ? AND numberOfUnits >= ?;
                """,
                (units, store_id, product_name, units)
            )
            if not decremented:
                raise DomainError("not enough stock left, order cancelled")
            self.db.execute(
                """--sql
                INSERT INTO Orders (customerID, storeID, productName, unitsOrdered, orderTime)
                VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP);
                """,
                (self.session.user_id, store_id, product_name, units)
            )
        order_number = self.db.current_sequence_value(ORDER_SEQUENCE)
        logger.info(
            "order placed: store %d, %d x %s", store_id, units, product_name,
            extra={"user_id": self.session.user_id}
        )
        suffix = f" (order #{order_number})" if order_number >= 0 else ""
        cprint(f"order placed successfully{suffix}.", "green")

    def view_recent_orders(self):
        """managers see a managed store's latest orders, everyone else their own"""
        if self.session.role is Role.MANAGER:
            store_id = select_managed_store(self.db, self.session)
            rows = self.db.query(
                """--sql
                SELECT orderNumber, customerID, productName, unitsOrdered, orderTime
                FROM Orders
                WHERE storeID = ?
                ORDER BY orderTime DESC, orderNumber DESC
                LIMIT ?;
                """,
                (store_id, TOP_N)
            )
            print_banner(f"{TOP_N} MOST RECENT ORDERS: ")
            for i, (number, customer_id, product, units, ordered_at) in enumerate(rows, 1):
                print(f"{i}. Product name: {product.strip()}\t CustomerID: {customer_id}"
                      f"\t Units ordered: {units}\t Order #: {number}\t Time: {ordered_at}")
        else:
            rows = self.db.query(
                """--sql
                SELECT orderNumber, storeID, productName, unitsOrdered, orderTime
                FROM Orders
                WHERE customerID = ?
                ORDER BY orderTime DESC, orderNumber DESC
                LIMIT ?;
                """,
                (self.session.user_id, TOP_N)
            )
            print_banner(f"{TOP_N} MOST RECENT ORDERS: ")
            for i, (number, store_id, product, units, ordered_at) in enumerate(rows, 1):
                print(f"{i}. Product name: {product.strip()}\t Units ordered: {units}"
                      f"\t Store: {store_id}\t Order #: {number}\t Time: {ordered_at}")
        if not rows:
            cprint("no orders found", "yellow")
        print_rule()


# manager tools
class InventoryManager:
    """stock/price edits, replenishment and store reports for managers"""

    def __init__(self, db: Gateway, session: Session):
        self.db = db
        self.session = session

    def update_product(self):
        """set units and price of a product in a managed store"""
        store_id = select_managed_store(self.db, self.session)
        print_store_products(self.db, store_id)
        product_name, _ = read_product_name(self.db, store_id)
        units = read_non_negative_int("Enter the new number of units: ")
        price = read_non_negative_int("Enter the new price per unit: ")
        # the ProductUpdates row comes from the schema's trigger
        updated = self.db.execute(
            """--sql
            UPDATE Product
            SET numberOfUnits = ?, pricePerUnit = ?
            WHERE storeID = ? AND productName = ?;
            """,
            (units, price, store_id, product_name)
        )
        if not updated:
            raise DomainError("product not found, nothing updated")
        logger.info(
            "product updated: store %d, %s -> %d @ %d", store_id, product_name, units, price,
            extra={"user_id": self.session.user_id}
        )
        cprint("product updated successfully.", "green")

    def view_recent_updates(self):
        """latest product update log entries for a managed store"""
        store_id = select_managed_store(self.db, self.session)
        rows = self.db.query(
            """--sql
            SELECT updateNumber, managerID, productName, updatedOn
            FROM ProductUpdates
            WHERE storeID = ?
            ORDER BY updatedOn DESC, updateNumber DESC
            LIMIT ?;
            """,
            (store_id, TOP_N)
        )
        print_banner(f"{TOP_N} MOST RECENT PRODUCT UPDATES: ")
        for i, (number, manager_id, product, updated_on) in enumerate(rows, 1):
            print(f"{i}. Product name: {product.strip()}\t Update #: {number}"
                  f"\t Manager: {manager_id}\t Time: {updated_on}")
        if not rows:
            cprint("no product updates found", "yellow")
        print_rule()

    def view_popular_products(self):
        """top products of a managed store by units sold"""
        store_id = select_managed_store(self.db, self.session)
        rows = self.db.query(
            """--sql
            SELECT productName, SUM(unitsOrdered) AS totalUnitsOrdered
            FROM Orders
            WHERE storeID = ?
            GROUP BY productName
            ORDER BY totalUnitsOrdered DESC
            LIMIT ?;
            """,
            (store_id, TOP_N)
        )
        print_banner(f"{TOP_N} MOST POPULAR PRODUCTS: ")
        for i, (product, sold) in enumerate(rows, 1):
            print(f"{i}. Product: {product.strip()}\t\t Numbers sold: {sold}")
        if not rows:
            cprint("no orders yet", "yellow")
        print_rule()

    def view_popular_customers(self):
        """top customers of a managed store by order count"""
        store_id = select_managed_store(self.db, self.session)
        rows = self.db.query(
            """--sql
            SELECT U.name AS customer_name, COUNT(O.customerID) AS order_count
            FROM Orders O
            JOIN Users U ON O.customerID = U.userID
            WHERE O.storeID = ?
            GROUP BY O.customerID, U.name
            ORDER BY order_count DESC
            LIMIT ?;
            """,
            (store_id, TOP_N)
        )
        print_banner(f"{TOP_N} MOST POPULAR CUSTOMERS: ")
        for i, (name, order_count) in enumerate(rows, 1):
            name = name.strip().replace(".", " ").replace("_", " ")
            print(f"{i}. Name: {name}\t Number of orders: {order_count}")
        if not rows:
            cprint("no orders yet", "yellow")
        print_rule()

    def place_supply_request(self):
        """request units from a warehouse and add them to store stock"""
        store_id = select_managed_store(self.db, self.session)
        print_store_products(self.db, store_id)
        while True:
            product_name = read_line("Enter the product name: ")
            carried = self.db.query_count(
                """--sql
                SELECT 1
                FROM Store
                WHERE storeID = ?
                  AND EXISTS (
                      SELECT 1 FROM Product
                      WHERE Product.storeID = Store.storeID
                        AND Product.productName = ?
                  );
                """,
                (store_id, product_name)
            )
            if carried:
                break
            cprint("product does not exist.", "red")
        while True:
            warehouse_id = read_int("\nEnter the warehouseID: ")
            if self.db.query_count("SELECT 1 FROM Warehouse WHERE WarehouseID = ?;", (warehouse_id,)):
                break
            cprint("\nwarehouse does not exist.", "red")
        units = read_positive_int("\nEnter the number of units requesting: ")

        with self.db.transaction():
            self.db.execute(
                """--sql
                INSERT INTO ProductSupplyRequests (managerID, warehouseID, storeID, productName, unitsRequested)
                VALUES (?, ?, ?, ?, ?);
                """,
                (self.session.user_id, warehouse_id, store_id, product_name, units)
            )
            incremented = self.db.execute(
                """--sql
                UPDATE Product
                SET numberOfUnits = numberOfUnits + ?
                WHERE storeID = ? AND productName = ?;
                """,
                (units, store_id, product_name)
            )
            if not incremented:
                raise DomainError("product vanished from the store, request cancelled")
        request_number = self.db.current_sequence_value(SUPPLY_REQUEST_SEQUENCE)
        logger.info(
            "supply request: warehouse %d -> store %d, %d x %s", warehouse_id, store_id, units, product_name,
            extra={"user_id": self.session.user_id}
        )
        suffix = f" (request #{request_number})" if request_number >= 0 else ""
        cprint(f"supply request placed successfully{suffix}.", "green")


# command infrastructure
class Command:
    """bind a menu number to a handler; privilege None means logged-out only"""

    def __init__(self, choice: int, label: str, function: Callable,
                 privilege: Role | None = Role.CUSTOMER):
        self.choice = choice
        self.label = label
        self._fn = function
        self.privilege = privilege

    def allowed(self, role: Role | None) -> bool:
        if self.privilege is None:
            return role is None
        return role is not None and role.value >= self.privilege.value

    def execute(self):
        """run the handler; domain and database failures end here"""
        try:
            return self._fn()
        except DomainError as e:
            cprint(str(e), "yellow")
        except DatabaseError as e:
            logger.warning("%r failed: %s", self.label, e)
            print_error(f"database error: {e}")


class Menu:
    """the logged-out and logged-in menus, driven by one command table"""

    def __init__(self, db: Gateway, session: Session):
        self.session = session
        self.accounts = AccountManager(db, session)
        self.orders = OrderManager(db, session)
        self.inventory = InventoryManager(db, session)
        self.running = True

        self.commands: list[Command] = [
            Command(1, "Create user", self.accounts.create_user, None),
            Command(2, "Log in", self.accounts.login, None),
            Command(9, "< EXIT", self.quit, None),
        ]
        # customer commands
        self.commands += [
            Command(1, f"View Stores within {NEARBY_RADIUS} miles", self.orders.view_stores),
            Command(2, "View Product List", self.orders.view_products),
            Command(3, "Place a Order", self.orders.place_order),
            Command(4, f"View {TOP_N} recent orders", self.orders.view_recent_orders),
        ]
        # manager commands
        self.commands += [
            Command(5, "Update Product", self.inventory.update_product, Role.MANAGER),
            Command(6, f"View {TOP_N} recent Product Updates Info", self.inventory.view_recent_updates, Role.MANAGER),
            Command(7, f"View {TOP_N} Popular Items", self.inventory.view_popular_products, Role.MANAGER),
            Command(8, f"View {TOP_N} Popular Customers", self.inventory.view_popular_customers, Role.MANAGER),
            Command(9, "Place Product Supply Request to Warehouse", self.inventory.place_supply_request, Role.MANAGER),
        ]
        # admin commands
        self.commands += [
            Command(10, "View user info", self.accounts.view_users, Role.ADMIN),
            Command(11, "Update user info", self.accounts.update_user, Role.ADMIN),
        ]
        self.commands.append(Command(LOGOUT_CHOICE, "Log out", self.accounts.logout))

    def commands_for(self, role: Role | None) -> dict[int, Command]:
        """choice -> command for everything this role may run"""
        return {cmd.choice: cmd for cmd in self.commands if cmd.allowed(role)}

    def show(self, table: dict[int, Command]):
        """print the menu for the current state"""
        print_banner("    MAIN MENU ")
        for choice in sorted(table):
            if choice == LOGOUT_CHOICE:
                print(".........................")
            print(f"{colored(str(choice), 'blue')}. {table[choice].label}")
        print_rule()

    def quit(self):
        """leave the main loop"""
        self.running = False

    def step(self):
        """show the menu, read one choice and dispatch it"""
        role = self.session.role
        table = self.commands_for(role)
        self.show(table)
        choice = read_choice(None if role is None else frozenset(table))
        command = table.get(choice)
        if command is None:
            cprint("Unrecognized choice!", "red")
            return
        command.execute()

    def run(self):
        """main loop; ends on exit or end of input"""
        while self.running:
            try:
                self.step()
            except EOFError:
                print()
                self.running = False


def greeting():
    cprint("""
*******************************************************
              storefront user interface
*******************************************************
""", "green", attrs=["bold"])


# signal handler
class SignalHandler:
    """ctrl+c exits cleanly so the connection still gets closed"""
    @staticmethod
    def sigint(_, __):
        cprint("\nnext time, use the exit option!", "yellow")
        sys.exit(0)


# entry point
def main(argv: list[str] | None = None) -> int:
    """entrypoint: storefront <dbname> <port> <user>"""
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 3:
        program = os.path.basename(sys.argv[0]) or "storefront"
        print_error(f"usage: {program} <dbname> <port> <user>")
        return 1

    configure_logging()
    signal.signal(signal.SIGINT, SignalHandler.sigint)
    greeting()
    settings = ConnectionSettings(*args)
    print(f"connecting to database postgresql://{settings.host}:{settings.port}/{settings.dbname}...")
    try:
        db = Gateway.connect(settings)
    except ConnectError as e:
        logger.error("connect failed: %s", e)
        print_error(f"error - unable to connect to database: {e}")
        print("make sure you started postgres on this machine")
        return -1
    cprint("done", "green")

    status = 0
    try:
        Menu(db, Session()).run()
    except ConnectionLost as e:
        logger.error("connection lost: %s", e)
        print_error(f"connection lost: {e}")
        status = 1
    finally:
        print("disconnecting from database...", end=" ")
        db.close()
        print("done\n\nbye!")
    return status


if __name__ == "__main__":
    sys.exit(main())
