import logging
import os

import streamlit as st
from dotenv import load_dotenv

from services.validation_service import get_qr_size_px, get_validation_base_url
from utils.nota_layout import PAGE_CAPACITY, PAGE_HEIGHT_CM, PAGE_WIDTH_CM

load_dotenv()
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

st.set_page_config(
    page_title="Nota Emas",
    page_icon="🧾"
)

st.sidebar.header("🧾 Nota Emas")
st.title("🧾 Nota Emas")

st.write(
    "Cetak nota pra-cetak untuk transaksi penjualan dan **Setor Emas**. "
    "Gunakan menu di samping untuk input setor emas atau mencetak ulang nota transaksi."
)

st.subheader("Konfigurasi")

base_url = get_validation_base_url()
col_left, col_right = st.columns(2)

with col_left:
    st.metric("Ukuran Nota", f"{PAGE_WIDTH_CM:g} x {PAGE_HEIGHT_CM:g} cm")
    st.metric("Item per Lembar", PAGE_CAPACITY)

with col_right:
    st.metric("Ukuran QR", f"{get_qr_size_px()} px")
    if base_url:
        st.success(f"URL validasi: {base_url}/validate/<kode>")
    else:
        st.warning("VALIDATION_BASE_URL belum diset. Nota dicetak tanpa QR validasi.")

if not os.getenv("SUPABASE_URL") or not os.getenv("SUPABASE_KEY"):
    st.error("SUPABASE_URL / SUPABASE_KEY belum diset di environment.")
