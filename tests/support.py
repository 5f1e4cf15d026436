"""
Shared fixtures: an in-memory catalog behind the real Gateway, plus helpers to
drive prompts and capture what the user would see.
"""
import io
import os
import sqlite3
import sys
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

# Add the repository root to the path to import storefront
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from storefront import Gateway, Principal, Role, Session  # noqa: E402

SCHEMA = """
CREATE TABLE Users (
    userID INTEGER PRIMARY KEY AUTOINCREMENT,
    name CHAR(50) NOT NULL,
    password CHAR(11) NOT NULL,
    latitude DECIMAL(8,6) NOT NULL,
    longitude DECIMAL(9,6) NOT NULL,
    type CHAR(10) NOT NULL
);
CREATE TABLE Store (
    storeID INTEGER PRIMARY KEY,
    name CHAR(30),
    latitude DECIMAL(8,6) NOT NULL,
    longitude DECIMAL(9,6) NOT NULL,
    managerID INTEGER REFERENCES Users(userID),
    dateEstablished DATE
);
CREATE TABLE Product (
    storeID INTEGER NOT NULL REFERENCES Store(storeID),
    productName CHAR(30) NOT NULL,
    numberOfUnits INTEGER NOT NULL,
    pricePerUnit DECIMAL(6,2) NOT NULL,
    PRIMARY KEY (storeID, productName)
);
CREATE TABLE Warehouse (
    WarehouseID INTEGER PRIMARY KEY,
    area DECIMAL(10,2),
    latitude DECIMAL(8,6),
    longitude DECIMAL(9,6)
);
CREATE TABLE Orders (
    orderNumber INTEGER PRIMARY KEY AUTOINCREMENT,
    customerID INTEGER NOT NULL REFERENCES Users(userID),
    storeID INTEGER NOT NULL REFERENCES Store(storeID),
    productName CHAR(30) NOT NULL,
    unitsOrdered INTEGER NOT NULL,
    orderTime TIMESTAMP NOT NULL
);
CREATE TABLE ProductSupplyRequests (
    requestNumber INTEGER PRIMARY KEY AUTOINCREMENT,
    managerID INTEGER NOT NULL,
    warehouseID INTEGER NOT NULL REFERENCES Warehouse(WarehouseID),
    storeID INTEGER NOT NULL,
    productName CHAR(30) NOT NULL,
    unitsRequested INTEGER NOT NULL
);
CREATE TABLE ProductUpdates (
    updateNumber INTEGER PRIMARY KEY AUTOINCREMENT,
    managerID INTEGER NOT NULL,
    storeID INTEGER NOT NULL,
    productName CHAR(30) NOT NULL,
    updatedOn TIMESTAMP NOT NULL
);
CREATE TRIGGER log_product_update
AFTER UPDATE OF pricePerUnit ON Product
BEGIN
    INSERT INTO ProductUpdates (managerID, storeID, productName, updatedOn)
    SELECT managerID, NEW.storeID, NEW.productName, CURRENT_TIMESTAMP
    FROM Store WHERE storeID = NEW.storeID;
END;
"""


def fresh_catalog():
    """return (raw sqlite connection, gateway) over an empty catalog"""
    conn = sqlite3.connect(":memory:")
    conn.executescript(SCHEMA)
    conn.commit()
    return conn, Gateway(conn, sqlite3.paramstyle)


def add_user(conn, name, password="pw", lat=0, lon=0, role="customer"):
    # users.type is char(10), so stored values carry trailing spaces
    cur = conn.execute(
        "INSERT INTO Users (name, password, latitude, longitude, type) VALUES (?, ?, ?, ?, ?);",
        (name, password, lat, lon, role.ljust(10))
    )
    conn.commit()
    return cur.lastrowid


def add_store(conn, store_id, lat=0, lon=0, manager_id=None):
    conn.execute(
        "INSERT INTO Store (storeID, name, latitude, longitude, managerID) VALUES (?, ?, ?, ?, ?);",
        (store_id, f"store {store_id}", lat, lon, manager_id)
    )
    conn.commit()


def add_product(conn, store_id, name, units, price=1):
    conn.execute(
        "INSERT INTO Product (storeID, productName, numberOfUnits, pricePerUnit) VALUES (?, ?, ?, ?);",
        (store_id, name, units, price)
    )
    conn.commit()


def add_order(conn, customer_id, store_id, product, units, when="2024-01-01 10:00:00"):
    conn.execute(
        """
        INSERT INTO Orders (customerID, storeID, productName, unitsOrdered, orderTime)
        VALUES (?, ?, ?, ?, ?);
        """,
        (customer_id, store_id, product, units, when)
    )
    conn.commit()


def stock_of(conn, store_id, product):
    row = conn.execute(
        "SELECT numberOfUnits FROM Product WHERE storeID = ? AND productName = ?;",
        (store_id, product)
    ).fetchone()
    return row[0] if row else None


def count_rows(conn, table):
    return conn.execute(f"SELECT COUNT(*) FROM {table};").fetchone()[0]


def session_for(user_id, role=Role.CUSTOMER, name="someone"):
    return Session(principal=Principal(user_id, role, name))


def run_with_input(fn, inputs):
    """call fn with scripted input lines; returns (result, stdout, stderr)"""
    out, err = io.StringIO(), io.StringIO()
    with patch("builtins.input", side_effect=list(inputs)), redirect_stdout(out), redirect_stderr(err):
        result = fn()
    return result, out.getvalue(), err.getvalue()
