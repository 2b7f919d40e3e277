import streamlit as st
import pandas as pd

from data_integrator import fetch_gold_categories, fetch_locations, insert_purchase_transaction
from domain.models import Customer, GoldCondition, PAYMENT_METHOD_LABELS
from element_component import nota_print_section
from services.pricing_service import (
    adjust_weight,
    build_custom_item,
    build_standard_item,
    compute_net,
    compute_subtotal,
    deposit_totals,
    resolve_shrinkage,
    suggest_price_per_gram,
    validate_custom_item,
    validate_standard_item,
)
from services.transaction_service import (
    build_purchase_payload,
    deposit_item_name,
    transaction_from_deposit,
)
from utils.formatting import format_currency, format_weight

st.set_page_config(page_title="Setor Emas", page_icon="🪙")
st.sidebar.header("🪙 Setor Emas")
st.title("🪙 Setor Emas")

# -----------------------------------------------------------------------------
# Session state defaults
# -----------------------------------------------------------------------------
defaults = {
    "deposit_items": [],
    "setor_emas_transaction": None,
}
for k, v in defaults.items():
    st.session_state.setdefault(k, v)

# -----------------------------------------------------------------------------
# 1) Reference data
# -----------------------------------------------------------------------------
ok_cat, msg_cat, categories = fetch_gold_categories()
if not ok_cat:
    st.error(f"Gagal memuat kategori emas: {msg_cat}")

ok_loc, msg_loc, locations = fetch_locations()
if not ok_loc:
    st.error(f"Gagal memuat lokasi: {msg_loc}")

if not locations:
    st.warning("Tidak ada lokasi aktif.")
    st.stop()

location_name = st.selectbox("Lokasi", options=list(locations.keys()))

st.divider()

# -----------------------------------------------------------------------------
# 2) Add item: standard (price list) or custom purity
# -----------------------------------------------------------------------------
deposit_mode = st.radio(
    "Mode setor",
    options=["standard", "custom"],
    format_func=lambda m: "Kategori Emas" if m == "standard" else "Kadar Custom",
    horizontal=True,
)

conditions = list(GoldCondition)


def condition_label(c: GoldCondition) -> str:
    return f"{c.label} ({c.default_shrinkage:g}%)"


if deposit_mode == "standard":
    if not categories:
        st.info("Belum ada kategori emas aktif.")
        st.stop()

    category = st.selectbox(
        "Kategori emas",
        options=categories,
        format_func=lambda c: f"{c.name} ({c.purity:g}%) - {format_currency(c.buy_price)}/g",
    )

    col_w, col_s, col_c = st.columns([1.5, 1, 1.5])
    with col_w:
        weight_gross = st.number_input("Berat kotor (gram)", min_value=0.0, step=0.01, format="%.2f")
    with col_c:
        condition = st.selectbox(
            "Kondisi", options=conditions, index=1, format_func=condition_label, key="standard_condition"
        )
    with col_s:
        shrinkage_input = st.text_input(
            "Susut (%)", placeholder=f"{condition.default_shrinkage:g}", key="standard_shrinkage"
        )

    # Keyed per category so switching category re-suggests its buy price
    buy_price = st.number_input(
        "Harga beli kita per gram",
        min_value=0.0,
        step=1000.0,
        value=suggest_price_per_gram(category),
        key=f"standard_buy_price_{category.id}",
    )
    notes = st.text_input("Catatan", key="standard_notes")

    shrinkage = resolve_shrinkage(shrinkage_input, condition)
    net_preview = compute_net(weight_gross, shrinkage)
    st.caption(
        f"Berat bersih: **{format_weight(net_preview, 3)} gr** | "
        f"Subtotal: **{format_currency(compute_subtotal(net_preview, buy_price))}**"
    )

    if st.button("➕ Tambah Item"):
        is_valid, message = validate_standard_item(category, weight_gross, buy_price)
        if not is_valid:
            st.error(message)
        else:
            st.session_state.deposit_items.append(
                build_standard_item(category, weight_gross, buy_price, condition, shrinkage_input, notes)
            )
            st.success("Item ditambahkan")
else:
    col_w, col_p = st.columns(2)
    with col_w:
        weight_gross = st.number_input("Berat kotor (gram)", min_value=0.0, step=0.01, format="%.2f", key="custom_weight")
    with col_p:
        purity = st.number_input("Kadar (%)", min_value=0.0, max_value=100.0, step=0.1, key="custom_purity")

    col_ref, col_buy = st.columns(2)
    with col_ref:
        reference_price = st.number_input("Harga surat per gram", min_value=0.0, step=1000.0, key="custom_ref_price")
    with col_buy:
        buy_price = st.number_input("Harga beli kita per gram", min_value=0.0, step=1000.0, key="custom_buy_price")

    col_c, col_s = st.columns(2)
    with col_c:
        condition = st.selectbox(
            "Kondisi", options=conditions, index=1, format_func=condition_label, key="custom_condition"
        )
    with col_s:
        shrinkage_input = st.text_input(
            "Susut (%)", placeholder=f"{condition.default_shrinkage:g}", key="custom_shrinkage"
        )
    notes = st.text_input("Catatan", key="custom_notes")

    shrinkage = resolve_shrinkage(shrinkage_input, condition)
    net_preview = compute_net(weight_gross, shrinkage)
    st.caption(
        f"Berat bersih: **{format_weight(net_preview, 3)} gr** | "
        f"Subtotal: **{format_currency(compute_subtotal(net_preview, buy_price))}**"
    )

    if st.button("➕ Tambah Item"):
        is_valid, message = validate_custom_item(weight_gross, purity, reference_price, buy_price)
        if not is_valid:
            st.error(message)
        else:
            st.session_state.deposit_items.append(
                build_custom_item(weight_gross, purity, reference_price, buy_price, condition, shrinkage_input, notes)
            )
            st.success("Item ditambahkan")

st.divider()

# -----------------------------------------------------------------------------
# 3) Cart
# -----------------------------------------------------------------------------
items = st.session_state.deposit_items
st.subheader(f"Item Setor ({len(items)})")

if not items:
    st.info("Belum ada item.")
else:
    for idx, item in enumerate(items):
        col_info, col_minus, col_plus, col_del = st.columns([5, 1, 1, 1])
        with col_info:
            st.markdown(
                f"**{deposit_item_name(item)}** · {item.condition.label} · "
                f"{format_weight(item.weight_gross)} gr -{item.shrinkage_percent:g}% = "
                f"**{format_weight(item.weight_net, 3)} gr** × {format_currency(item.price_per_gram)} = "
                f"**{format_currency(item.subtotal)}**"
            )
        with col_minus:
            if st.button("−0.1", key=f"minus_{item.id}"):
                items[idx] = adjust_weight(item, -0.1)
                st.rerun()
        with col_plus:
            if st.button("+0.1", key=f"plus_{item.id}"):
                items[idx] = adjust_weight(item, 0.1)
                st.rerun()
        with col_del:
            if st.button("🗑️", key=f"del_{item.id}"):
                items.pop(idx)
                st.rerun()

    totals = deposit_totals(items)
    df_items = pd.DataFrame(
        [
            {
                "Item": deposit_item_name(i),
                "Kondisi": i.condition.label,
                "Berat Kotor": i.weight_gross,
                "Susut (%)": i.shrinkage_percent,
                "Berat Bersih": i.weight_net,
                "Harga/g": i.price_per_gram,
                "Subtotal": i.subtotal,
            }
            for i in items
        ]
    )
    df_display = df_items.copy()
    for col in ("Harga/g", "Subtotal"):
        df_display[col] = df_display[col].apply(format_currency)
    st.dataframe(df_display, width='stretch', hide_index=True)

    col_g, col_n, col_t = st.columns(3)
    col_g.metric("Total Berat Kotor", f"{format_weight(totals['total_weight_gross'])} gr")
    col_n.metric("Total Berat Bersih", f"{format_weight(totals['total_weight_net'], 3)} gr")
    col_t.metric("Total Bayar", format_currency(totals["total_amount"]))

st.divider()

# -----------------------------------------------------------------------------
# 4) Customer + payment, save, print
# -----------------------------------------------------------------------------
customer_name = st.text_input("Nama penjual")
customer_address = st.text_input("Alamat")
payment_method = st.selectbox(
    "Metode pembayaran",
    options=list(PAYMENT_METHOD_LABELS.keys()),
    format_func=lambda m: PAYMENT_METHOD_LABELS[m],
)
save_as_raw_material = st.checkbox("Simpan sebagai bahan baku")
transaction_notes = st.text_area("Catatan transaksi")

if st.button("Simpan Setor Emas", type="primary"):
    if not items:
        st.error("Tambahkan item")
    else:
        payload = build_purchase_payload(
            location_id=locations[location_name],
            items=items,
            payment_method=payment_method,
            notes=transaction_notes,
            save_as_raw_material=save_as_raw_material,
        )
        ok, msg, inserted = insert_purchase_transaction(payload)
        if not ok:
            st.error(f"Gagal menyimpan transaksi: {msg}")
        else:
            st.session_state.setor_emas_transaction = transaction_from_deposit(
                inserted["transaction_code"],
                list(items),
                customer=Customer(name=customer_name or None, address=customer_address or None),
                payment_method=payment_method,
                location_name=location_name,
            )
            st.session_state.deposit_items = []
            st.session_state["setor_emas_print_mode"] = None
            st.success(f"Setor emas berhasil! Kode transaksi: {inserted['transaction_code']}")

saved = st.session_state.setor_emas_transaction
if saved is not None:
    st.subheader(f"Cetak Nota {saved.transaction_code}")
    nota_print_section(saved, key="setor_emas")
