import streamlit as st
import pandas as pd

from data_integrator import get_transaction_by_code
from domain.models import PAYMENT_METHOD_LABELS
from element_component import nota_print_section
from services.transaction_service import transaction_from_record
from utils.formatting import format_currency, format_date_long, format_percent, format_weight

st.set_page_config(page_title="Cetak Nota", page_icon="🖨️")
st.sidebar.header("🖨️ Cetak Nota Transaksi")
st.title("🖨️ Cetak Nota Transaksi")

st.session_state.setdefault("cetak_nota_transaction", None)

with st.form("transaction_lookup_form", enter_to_submit=True):
    code_input = st.text_input("Kode transaksi", placeholder="TRX-001")
    submitted = st.form_submit_button("Cari")

    if submitted:
        ok, msg, record = get_transaction_by_code(code_input)
        if not ok:
            st.session_state.cetak_nota_transaction = None
            st.error(msg)
        else:
            st.session_state.cetak_nota_transaction = transaction_from_record(record)
            # a fresh lookup must ask for the print mode again
            st.session_state["cetak_nota_print_mode"] = None

transaction = st.session_state.cetak_nota_transaction

if transaction is None:
    st.stop()

st.subheader(transaction.transaction_code)
st.caption(
    f"{format_date_long(transaction.date)} | "
    f"{transaction.customer.name or '-'} | "
    f"{transaction.location_name or '-'} | "
    f"{PAYMENT_METHOD_LABELS.get(transaction.payment.method, transaction.payment.method or '-')}"
)

df_items = pd.DataFrame(
    [
        {
            "Qty": i.quantity,
            "Nama Barang": i.name,
            "Kadar": format_percent(i.purity),
            "Berat (gr)": format_weight(i.weight),
            "Harga": format_currency(i.price),
        }
        for i in transaction.items
    ]
)
st.dataframe(df_items, width='stretch', hide_index=True)
st.metric("Grand Total", format_currency(transaction.payment.grand_total))

st.divider()
nota_print_section(transaction, key="cetak_nota")
