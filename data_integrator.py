import os
from functools import lru_cache
from typing import Dict, List, Any, Tuple, Optional

from dotenv import load_dotenv
from supabase import create_client, Client

from domain.models import GoldCategory

load_dotenv()
url: str = os.getenv("SUPABASE_URL")
key: str = os.getenv("SUPABASE_KEY")
schema: str = os.getenv("SCHEMA", "public")

TRANSACTION_SELECT = (
    "*, "
    "member:members(name, address, code), "
    "location:locations(name), "
    "items:transaction_items("
    "item_name, quantity, weight, unit_price, sub_total, purity, "
    "product:products(name), "
    "gold_category:gold_categories(name, code, purity)"
    ")"
)


@lru_cache(maxsize=1)
def get_client() -> Client:
    return create_client(url, key)


def fetch_gold_categories(active_only: bool = True) -> Tuple[bool, str, List[GoldCategory]]:
    """
    Fetch the gold price list.
    Returns (ok, message, categories)
    """
    try:
        query = (
            get_client().schema(schema)
            .table("gold_categories")
            .select("id, name, code, purity, buy_price, sell_price, is_active")
            .order("name")
        )
        if active_only:
            query = query.eq("is_active", True)

        resp = query.execute()

        if getattr(resp, "error", None):
            return False, f"Fetch failed: {resp.error}", []

        if not resp.data:
            return True, "No rows found", []

        categories = [
            GoldCategory(
                id=row["id"],
                name=row["name"],
                code=row.get("code") or "",
                purity=float(row.get("purity") or 0),
                buy_price=float(row.get("buy_price") or 0),
                sell_price=float(row.get("sell_price") or 0),
                is_active=bool(row.get("is_active", True)),
            )
            for row in resp.data
        ]
        return True, "Fetched", categories

    except Exception as e:
        return False, f"Unexpected error: {e}", []


def fetch_locations() -> Tuple[bool, str, Dict[str, int]]:
    """
    Returns (ok, message, {location_name: id}) for active locations.
    """
    try:
        resp = (
            get_client().schema(schema)
            .table("locations")
            .select("id, name")
            .eq("is_active", True)
            .order("name")
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Fetch failed: {resp.error}", {}

        if not resp.data:
            return True, "No rows found", {}

        return True, "Fetched", {row["name"]: row["id"] for row in resp.data}

    except Exception as e:
        return False, f"Unexpected error: {e}", {}


def get_transaction_by_code(transaction_code: str) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Fetch one committed transaction with member, location and items embedded.
    Returns (ok, message, record)
    """
    if not transaction_code:
        return False, "Kode transaksi tidak boleh kosong", None

    try:
        resp = (
            get_client().schema(schema)
            .table("transactions")
            .select(TRANSACTION_SELECT)
            .eq("transaction_code", transaction_code.strip())
            .limit(1)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Fetch failed: {resp.error}", None

        if not resp.data:
            return False, f"Transaksi '{transaction_code}' tidak ditemukan", None

        return True, "Fetched", resp.data[0]

    except Exception as e:
        return False, f"Unexpected error: {e}", None


def insert_purchase_transaction(payload: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Save a Setor Emas session as a purchase transaction using the DB function,
    so the header and its items are written in one database transaction.

    payload is built by services.transaction_service.build_purchase_payload.
    Returns (ok, message, inserted_transaction) where the row carries the
    generated transaction_code.
    """
    try:
        if not payload.get("items"):
            return False, "Tambahkan item", None

        resp = (
            get_client()
            .rpc(
                "create_purchase_transaction",
                {
                    "p_location_id": payload["location_id"],
                    "p_member_id": payload.get("member_id"),
                    "p_payment_method": payload.get("payment_method", "cash"),
                    "p_notes": payload.get("notes", ""),
                    "p_save_as_raw_material": payload.get("save_as_raw_material", False),
                    "p_items": payload["items"],
                },
            )
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Insert failed: {resp.error}", None

        data = resp.data
        if isinstance(data, list):
            data = data[0] if data else None

        if not data or not data.get("transaction_code"):
            return False, "Insert failed: no transaction code returned", None

        return True, "Inserted", data

    except Exception as e:
        return False, str(e), None
